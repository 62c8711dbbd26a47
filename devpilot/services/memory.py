"""
Long-term memory: store, rule-based extraction, and the best-effort wrapper.

Extraction is a heuristic pass over a finished exchange: a table of regex
rules pulls technical facts out of the user's message, and a short list of
solution markers decides whether the reply is worth keeping. It is lossy on
purpose. The orchestrator runs it through best_effort(), so a failure here
is logged and dropped, never surfaced to the chat turn.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.memory import MemoryEntry, MemoryType

logger = logging.getLogger(__name__)


# ── Store ────────────────────────────────────────────────────────────

async def add_memory(
    db: Optional[AsyncSession],
    user_id: str,
    memory_type: str,
    key: str,
    value: str,
    importance: int = 1,
    conversation_id: Optional[int] = None,
) -> Optional[MemoryEntry]:
    if db is None:
        logger.warning("Cannot add memory: database not available")
        return None

    mem = MemoryEntry(
        user_id=user_id,
        conversation_id=conversation_id,
        memory_type=memory_type,
        key=key,
        value=value,
        importance=importance,
    )
    db.add(mem)
    await db.flush()
    logger.debug("Saved memory: %s/%s = %s", user_id, key, value[:50])
    return mem


async def list_memories(
    db: Optional[AsyncSession],
    user_id: str,
    limit: Optional[int] = None,
) -> list[MemoryEntry]:
    """Highest importance first; ties go to the most recently accessed."""
    if db is None:
        logger.warning("Cannot get memories: database not available")
        return []

    query = (
        select(MemoryEntry)
        .where(MemoryEntry.user_id == user_id)
        .order_by(
            MemoryEntry.importance.desc(),
            MemoryEntry.last_accessed_at.desc(),
            MemoryEntry.id.desc(),
        )
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_memory_by_key(
    db: Optional[AsyncSession],
    user_id: str,
    key: str,
) -> Optional[MemoryEntry]:
    """Point lookup. Refreshes last_accessed_at on hit."""
    if db is None:
        logger.warning("Cannot get memory: database not available")
        return None

    result = await db.execute(
        select(MemoryEntry)
        .where(MemoryEntry.user_id == user_id, MemoryEntry.key == key)
        .limit(1)
    )
    mem = result.scalar_one_or_none()
    if mem is not None:
        mem.last_accessed_at = utcnow()
        await db.flush()
    return mem


# ── Extraction rules ─────────────────────────────────────────────────

@dataclass(frozen=True)
class MemoryRule:
    """A regex whose first group becomes a memory value."""
    pattern: re.Pattern
    memory_type: MemoryType
    importance: int
    key_prefix: str


TECHNICAL_RULES: tuple[MemoryRule, ...] = (
    MemoryRule(
        re.compile(r"(?:we use|i use|we're using|using)\s+([A-Za-z0-9\s\-\.]+)", re.IGNORECASE),
        MemoryType.TECHNICAL_CONTEXT, 5, "extracted_tech",
    ),
    MemoryRule(
        re.compile(r"(?:the project|project)\s+(?:is called|is named|name is)\s+([A-Za-z0-9\s\-]+)", re.IGNORECASE),
        MemoryType.TECHNICAL_CONTEXT, 5, "extracted_tech",
    ),
    MemoryRule(
        re.compile(r"(?:the database|database)\s+(?:is|type is)\s+([A-Za-z0-9\s]+)", re.IGNORECASE),
        MemoryType.TECHNICAL_CONTEXT, 5, "extracted_tech",
    ),
)

SOLUTION_MARKERS = ("solution", "you can", "try ")
SOLUTION_IMPORTANCE = 7
SOLUTION_MAX_CHARS = 500


@dataclass
class ExtractedMemory:
    memory_type: MemoryType
    key: str
    value: str
    importance: int


def find_memories(
    message: str,
    response: str,
    rules: tuple[MemoryRule, ...] = TECHNICAL_RULES,
    now_ms: Optional[int] = None,
) -> list[ExtractedMemory]:
    """Pure part of extraction: apply the rule table and the solution check."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    found: list[ExtractedMemory] = []

    for rule in rules:
        for match in rule.pattern.finditer(message):
            value = (match.group(1) or "").strip()
            if not value:
                continue
            found.append(ExtractedMemory(
                memory_type=rule.memory_type,
                key=f"{rule.key_prefix}_{stamp}_{len(found)}",
                value=value,
                importance=rule.importance,
            ))

    lowered = response.lower()
    if any(marker in lowered for marker in SOLUTION_MARKERS):
        found.append(ExtractedMemory(
            memory_type=MemoryType.SOLUTION_HISTORY,
            key=f"solution_{stamp}",
            value=response[:SOLUTION_MAX_CHARS],
            importance=SOLUTION_IMPORTANCE,
        ))

    return found


async def extract_memories(
    db: Optional[AsyncSession],
    user_id: str,
    conversation_id: Optional[int],
    message: str,
    response: str,
) -> int:
    """Write derived memories for one exchange. Returns how many were written."""
    if db is None:
        return 0

    found = find_memories(message, response)
    for mem in found:
        await add_memory(
            db,
            user_id,
            memory_type=mem.memory_type.value,
            key=mem.key,
            value=mem.value,
            importance=mem.importance,
            conversation_id=conversation_id,
        )
    if found:
        logger.info("Extracted %d memories for user=%s", len(found), user_id)
    return len(found)


async def best_effort(awaitable: Awaitable, label: str, db: Optional[AsyncSession] = None):
    """
    Await a side task whose failure must not fail the caller.

    Catches, logs and discards any exception. If a session is given it is
    committed on success and rolled back on failure.
    """
    try:
        result = await awaitable
        if db is not None:
            await db.commit()
        return result
    except Exception as e:
        logger.warning("%s failed (ignored): %s", label, e)
        if db is not None:
            await db.rollback()
        return None
