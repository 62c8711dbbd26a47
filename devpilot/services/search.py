"""
Web search: Tavily when TAVILY_API_KEY is set, otherwise DuckDuckGo's
key-less Instant Answer API. Direct HTTP call.

A search outage never aborts a chat turn: every failure returns [].
"""

import logging
from dataclasses import dataclass

import httpx

from ..core.config import get_settings

logger = logging.getLogger(__name__)

MAX_RESULTS = 5


@dataclass
class SearchResult:
    title: str
    snippet: str
    url: str


async def search_web(query: str) -> list[SearchResult]:
    """Search the web. Returns an empty list on any provider failure."""
    settings = get_settings()
    try:
        async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as client:
            if settings.tavily_api_key:
                return await _search_tavily(client, query, settings.tavily_api_key)
            return await _search_duckduckgo(client, query, settings.duckduckgo_url)
    except httpx.TimeoutException:
        logger.warning("Web search timed out for query=%r", query[:100])
    except httpx.HTTPStatusError as e:
        logger.warning("Web search failed (HTTP %d)", e.response.status_code)
    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.warning("Web search error: %s", e)
    return []


async def _search_tavily(client: httpx.AsyncClient, query: str, api_key: str) -> list[SearchResult]:
    resp = await client.post(
        "https://api.tavily.com/search",
        json={
            "api_key": api_key,
            "query": query,
            "max_results": MAX_RESULTS,
            "include_answer": True,
        },
    )
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError(f"unexpected Tavily response: {type(data).__name__}")

    results = []
    if data.get("answer"):
        results.append(SearchResult(title="Summary", snippet=data["answer"], url=""))
    items = data.get("results")
    for r in (items if isinstance(items, list) else [])[:MAX_RESULTS]:
        if not isinstance(r, dict):
            continue
        results.append(SearchResult(
            title=r.get("title", "Untitled"),
            snippet=(r.get("content") or "")[:200],
            url=r.get("url", ""),
        ))
    return results


async def _search_duckduckgo(client: httpx.AsyncClient, query: str, url: str) -> list[SearchResult]:
    resp = await client.get(
        url,
        params={"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
    )
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError(f"unexpected DuckDuckGo response: {type(data).__name__}")

    results = []
    if data.get("Abstract"):
        results.append(SearchResult(
            title=data.get("Heading") or "Main result",
            snippet=data["Abstract"],
            url=data.get("AbstractURL", ""),
        ))

    topics = data.get("RelatedTopics")
    if isinstance(topics, list):
        for topic in topics[:MAX_RESULTS]:
            # Grouped topics have no Text/FirstURL of their own
            if isinstance(topic, dict) and topic.get("Text") and topic.get("FirstURL"):
                results.append(SearchResult(
                    title=topic["Text"][:100],
                    snippet=topic["Text"],
                    url=topic["FirstURL"],
                ))
    return results


def format_search_results(results: list[SearchResult]) -> str:
    """Render results as a text block for the system prompt."""
    if not results:
        return "No search results found."

    return "\n---\n".join(
        f"{i}. {r.title}\n{r.snippet}\nSource: {r.url}\n"
        for i, r in enumerate(results, start=1)
    )
