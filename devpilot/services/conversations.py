"""
Conversation history store. One row per completed exchange.
"""

import logging
from typing import Optional

from sqlalchemy import select, delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.conversation import Conversation

logger = logging.getLogger(__name__)


async def save_conversation(
    db: Optional[AsyncSession],
    user_id: str,
    message: str,
    response: str,
) -> Optional[Conversation]:
    if db is None:
        logger.warning("Cannot save conversation: database not available")
        return None

    convo = Conversation(user_id=user_id, message=message, response=response)
    db.add(convo)
    await db.flush()
    return convo


async def list_conversations(
    db: Optional[AsyncSession],
    user_id: str,
    limit: int = 50,
) -> list[Conversation]:
    """Most recent first."""
    if db is None:
        logger.warning("Cannot get conversations: database not available")
        return []

    result = await db.execute(
        select(Conversation)
        .where(Conversation.user_id == user_id)
        .order_by(Conversation.created_at.desc(), Conversation.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def delete_conversation(
    db: Optional[AsyncSession],
    user_id: str,
    conversation_id: int,
) -> bool:
    """Returns True if a row owned by the user was deleted."""
    if db is None:
        logger.warning("Cannot delete conversation: database not available")
        return False

    result = await db.execute(
        sql_delete(Conversation).where(
            Conversation.id == conversation_id,
            Conversation.user_id == user_id,
        )
    )
    await db.flush()
    return result.rowcount > 0
