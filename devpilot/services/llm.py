"""
Chat-completion client for OpenAI-compatible providers.

Features:
  - One request per call, hard client-side timeout (aborts the HTTP call)
  - Distinct failures: unreachable (timeout/transport), rejected (non-2xx),
    malformed (bad JSON / missing content)
  - Explicit provider strategies: [primary?, fallback], tried in order
  - Reusable client (connection pooling)
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..core.config import get_settings
from ..core.errors import ProviderFailure, ProviderRejected, ProviderUnreachable

logger = logging.getLogger(__name__)

# ── Reusable client (connection pool) ────────────────────────────────

_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _client


async def close_client():
    """Close the shared HTTP client. Call on app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None


# ── Provider config ──────────────────────────────────────────────────

@dataclass(frozen=True)
class ProviderConfig:
    """Where and how to reach one completion provider."""
    name: str
    base_url: str
    api_key: str
    model: str


def primary_provider(api_key: Optional[str], model: Optional[str] = None) -> Optional[ProviderConfig]:
    """The user's own OpenAI credential, or None when they have not configured one."""
    if not api_key:
        return None
    settings = get_settings()
    return ProviderConfig(
        name="openai",
        base_url=settings.openai_base_url,
        api_key=api_key,
        model=model or settings.default_llm_model,
    )


def fallback_provider() -> ProviderConfig:
    """Server-side Gemini (OpenAI-compatible endpoint). Always attempted last."""
    settings = get_settings()
    return ProviderConfig(
        name="gemini",
        base_url=settings.gemini_base_url,
        api_key=settings.gemini_api_key,
        model=settings.fallback_llm_model,
    )


def provider_strategies(api_key: Optional[str], model: Optional[str] = None) -> list[ProviderConfig]:
    """Ordered list of providers to try for one chat turn."""
    strategies = []
    primary = primary_provider(api_key, model)
    if primary:
        strategies.append(primary)
    strategies.append(fallback_provider())
    return strategies


# ── Main completion function ─────────────────────────────────────────

async def complete(
    messages: list[dict],
    provider: ProviderConfig,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """
    Single chat completion. Returns the reply text or raises a ProviderFailure.
    Never returns a partial reply.
    """
    settings = get_settings()

    if not provider.api_key:
        raise ProviderFailure(provider.name, "no API key configured")

    payload: dict[str, Any] = {
        "model": provider.model,
        "messages": messages,
        "temperature": temperature if temperature is not None else settings.llm_temperature,
        "max_tokens": max_tokens or settings.llm_max_tokens,
    }
    url = f"{provider.base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {provider.api_key}",
        "Content-Type": "application/json",
    }

    start = time.monotonic()
    client = _get_client()

    # httpx timeouts are per phase; wait_for bounds the whole request
    try:
        resp = await asyncio.wait_for(
            client.post(
                url,
                json=payload,
                headers=headers,
                timeout=httpx.Timeout(settings.provider_timeout_seconds),
            ),
            timeout=settings.provider_timeout_seconds,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        logger.warning("LLM %s timed out after %.1fs", provider.name, time.monotonic() - start)
        raise ProviderUnreachable(provider.name, e) from e
    except httpx.TransportError as e:
        logger.warning("LLM %s transport error: %s", provider.name, e)
        raise ProviderUnreachable(provider.name, e) from e

    if resp.status_code >= 300:
        logger.error("LLM API error %d (%s): %s", resp.status_code, provider.name, resp.text[:500])
        raise ProviderRejected(provider.name, resp.status_code)

    try:
        data = resp.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ProviderFailure(provider.name, f"malformed response ({e})") from e

    if not isinstance(content, str) or not content:
        raise ProviderFailure(provider.name, "empty completion")

    usage = data.get("usage") or {}
    logger.info(
        "LLM %s: %dms | in=%d out=%d tokens | model=%s",
        provider.name,
        int((time.monotonic() - start) * 1000),
        usage.get("prompt_tokens", 0),
        usage.get("completion_tokens", 0),
        provider.model,
    )
    return content
