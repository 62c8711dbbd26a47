"""
Knowledge base store: user-authored notes.
"""

import logging
from typing import Optional

from sqlalchemy import select, delete as sql_delete, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.knowledge import KnowledgeEntry

logger = logging.getLogger(__name__)


async def add_knowledge(
    db: Optional[AsyncSession],
    user_id: str,
    title: str,
    content: str,
    category: str,
    tags: Optional[str] = None,
) -> Optional[KnowledgeEntry]:
    if db is None:
        logger.warning("Cannot add knowledge: database not available")
        return None

    entry = KnowledgeEntry(
        user_id=user_id,
        title=title,
        content=content,
        category=category,
        tags=tags,
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_knowledge(
    db: Optional[AsyncSession],
    user_id: str,
    limit: Optional[int] = None,
) -> list[KnowledgeEntry]:
    """Most recently updated first."""
    if db is None:
        logger.warning("Cannot get knowledge: database not available")
        return []

    query = (
        select(KnowledgeEntry)
        .where(KnowledgeEntry.user_id == user_id)
        .order_by(KnowledgeEntry.updated_at.desc(), KnowledgeEntry.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def search_knowledge(
    db: Optional[AsyncSession],
    user_id: str,
    term: str,
) -> list[KnowledgeEntry]:
    """Case-insensitive literal substring match on title or content. % and _ are not wildcards."""
    if db is None:
        logger.warning("Cannot search knowledge: database not available")
        return []

    needle = term.lower()
    result = await db.execute(
        select(KnowledgeEntry)
        .where(
            KnowledgeEntry.user_id == user_id,
            or_(
                func.lower(KnowledgeEntry.title).contains(needle, autoescape=True),
                func.lower(KnowledgeEntry.content).contains(needle, autoescape=True),
            ),
        )
        .order_by(KnowledgeEntry.updated_at.desc(), KnowledgeEntry.id.desc())
    )
    return list(result.scalars().all())


async def delete_knowledge(
    db: Optional[AsyncSession],
    user_id: str,
    entry_id: int,
) -> bool:
    if db is None:
        logger.warning("Cannot delete knowledge: database not available")
        return False

    result = await db.execute(
        sql_delete(KnowledgeEntry).where(
            KnowledgeEntry.id == entry_id,
            KnowledgeEntry.user_id == user_id,
        )
    )
    await db.flush()
    return result.rowcount > 0
