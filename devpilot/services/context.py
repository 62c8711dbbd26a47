"""
Context assembly: renders a user's saved knowledge and memories into one
text block for the system prompt.

The two fetches have no ordering dependency, so they run concurrently, each
on its own session.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_session_factory
from ..models.knowledge import KnowledgeEntry
from ..models.memory import MemoryEntry, MemoryType
from .knowledge import list_knowledge
from .memory import list_memories

logger = logging.getLogger(__name__)

MAX_KNOWLEDGE_ENTRIES = 10
MAX_MEMORY_ENTRIES = 20

T = TypeVar("T")


async def _fetch(
    loader: Callable[[AsyncSession, str, Optional[int]], Awaitable[list[T]]],
    user_id: str,
    limit: int,
) -> list[T]:
    factory = get_session_factory()
    if factory is None:
        logger.warning("Cannot build context: database not available")
        return []
    try:
        async with factory() as session:
            return await loader(session, user_id, limit)
    except SQLAlchemyError as e:
        logger.warning("Context fetch failed (%s): %s", loader.__name__, e)
        return []


def render_context(knowledge: list[KnowledgeEntry], memories: list[MemoryEntry]) -> str:
    parts = []

    if knowledge:
        parts.append("## Knowledge Base:\n\n")
        for item in knowledge[:MAX_KNOWLEDGE_ENTRIES]:
            parts.append(f"### {item.title} ({item.category})\n{item.content}\n\n")

    if memories:
        parts.append("## Long-term Memory:\n\n")
        for mem in memories[:MAX_MEMORY_ENTRIES]:
            parts.append(f"- **{mem.key}** ({mem.memory_type}): {mem.value}\n")

    return "".join(parts)


async def build_context(user_id: str) -> str:
    """Empty string when the user has nothing saved: callers omit the section."""
    knowledge, memories = await asyncio.gather(
        _fetch(list_knowledge, user_id, MAX_KNOWLEDGE_ENTRIES),
        _fetch(list_memories, user_id, MAX_MEMORY_ENTRIES),
    )
    return render_context(knowledge, memories)


def summarize_context(knowledge: list[KnowledgeEntry], memories: list[MemoryEntry]) -> str:
    """One-line technical summary: technologies seen, document and solution counts."""
    summary = []

    technologies = []
    for mem in memories:
        if mem.memory_type == MemoryType.TECHNICAL_CONTEXT.value and mem.value not in technologies:
            technologies.append(mem.value)
    if technologies:
        summary.append(f"Technologies: {', '.join(technologies)}")

    if knowledge:
        summary.append(f"Saved documents: {len(knowledge)}")

    solutions = [m for m in memories if m.memory_type == MemoryType.SOLUTION_HISTORY.value]
    if solutions:
        summary.append(f"Saved solutions: {len(solutions)}")

    return " | ".join(summary)
