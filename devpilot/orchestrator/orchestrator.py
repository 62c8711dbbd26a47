"""
Main orchestration loop for one chat message.

Receive → build context → [search] → reply (primary, then fallback) →
persist → [extract memories] → respond.

Provider failures are load-bearing: they move the turn to the next strategy,
and exhausting the list fails the turn with nothing persisted. Memory
extraction failures are not: they are logged and dropped.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import AgentCommunicationError, ProviderFailure, ValidationError
from ..core.flags import get_flags
from ..core.guardrails import check_input
from ..services import llm
from ..services.context import build_context
from ..services.conversations import save_conversation
from ..services.memory import best_effort, extract_memories
from ..services.search import format_search_results, search_web
from ..services.settings import get_api_settings

logger = logging.getLogger(__name__)

BASE_INSTRUCTIONS = (
    "You are an expert technical assistant specialised in programming, "
    "infrastructure and technical support. Help the user solve technical "
    "problems and give concrete, working solutions."
)


def build_system_prompt(context: str = "", search_block: str = "") -> str:
    """Base instructions + saved context + search results, each omitted when empty."""
    parts = [BASE_INSTRUCTIONS]
    if context:
        parts.append(context.strip())
    if search_block:
        parts.append(f"Web search results:\n\n{search_block}")
    parts.append("Give an accurate and useful answer.")
    return "\n\n".join(parts)


async def _gather_search(message: str) -> str:
    """Search block for the prompt, or "" when there is nothing usable."""
    try:
        results = await search_web(message)
    except Exception as e:
        logger.warning("Search failed, continuing without results: %s", e)
        return ""
    if not results:
        return ""
    return format_search_results(results)


async def _reply(messages: list[dict], strategies: list[llm.ProviderConfig]) -> tuple[str, str]:
    """Try each provider in order. Returns (reply, provider_name)."""
    last_error: Optional[ProviderFailure] = None
    for provider in strategies:
        try:
            return await llm.complete(messages, provider), provider.name
        except ProviderFailure as e:
            logger.warning("Provider %s failed: %s", provider.name, e)
            last_error = e
    raise AgentCommunicationError() from last_error


async def handle_message(
    db: Optional[AsyncSession],
    user_id: str,
    message: str,
    enable_search: bool = False,
) -> dict:
    """
    Main entry point for a chat message.
    Returns {"reply", "timestamp", "has_search_results"}.
    """
    start = time.monotonic()

    # 1. Validate
    check = check_input(message, user_id)
    if not check.allowed:
        raise ValidationError(check.reason or "empty message")

    # 2. Context
    settings = await get_api_settings(db, user_id)
    context = await build_context(user_id)

    # 3. Optional web search
    search_block = ""
    if enable_search and settings and settings.enable_web_search and get_flags().use_web_search:
        search_block = await _gather_search(message)

    # 4. Provider selection: [primary?, fallback]
    strategies = llm.provider_strategies(
        settings.provider_api_key if settings else None,
        settings.preferred_model if settings else None,
    )
    messages = [
        {"role": "system", "content": build_system_prompt(context, search_block)},
        {"role": "user", "content": message},
    ]
    reply, provider_name = await _reply(messages, strategies)

    # 5. Persist
    convo = await save_conversation(db, user_id, message, reply)
    if db is not None:
        await db.commit()

    # 6. Memory extraction (best effort)
    await best_effort(
        extract_memories(db, user_id, convo.id if convo else None, message, reply),
        "Memory extraction",
        db=db,
    )

    logger.info(
        "Chat turn user=%s provider=%s search=%s in %dms",
        user_id, provider_name, bool(search_block), int((time.monotonic() - start) * 1000),
    )

    # 7. Respond
    return {
        "reply": reply,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "has_search_results": bool(search_block),
    }
