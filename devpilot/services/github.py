"""
GitHub REST v3 search: repositories, code, and a user's own repos.
Failures log and return [] so the caller never has to special-case an outage.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class GitHubRepo:
    name: str
    description: str
    url: str
    stars: int
    language: str


@dataclass
class GitHubCodeResult:
    name: str
    path: str
    repository: str
    url: str


def _headers(token: Optional[str]) -> dict:
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _repository_name(repository) -> str:
    return repository.get("full_name", "") if isinstance(repository, dict) else ""


def _to_repo(item: dict) -> GitHubRepo:
    return GitHubRepo(
        name=item.get("full_name", ""),
        description=item.get("description") or "No description",
        url=item.get("html_url", ""),
        stars=item.get("stargazers_count", 0),
        language=item.get("language") or "Unknown",
    )


async def _get_json(path: str, params: dict, token: Optional[str], expect: type = dict):
    """GET a GitHub endpoint. Raises ValueError when the body is not of the expected JSON type."""
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as client:
        resp = await client.get(
            f"{settings.github_api_url.rstrip('/')}{path}",
            params=params,
            headers=_headers(token),
        )
        resp.raise_for_status()
        data = resp.json()
    if not isinstance(data, expect):
        raise ValueError(f"unexpected GitHub response for {path}: {type(data).__name__}")
    return data


def _items(data: dict) -> list[dict]:
    items = data.get("items")
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


async def search_repos(query: str, token: Optional[str] = None) -> list[GitHubRepo]:
    """Top 5 repositories by stars."""
    try:
        data = await _get_json(
            "/search/repositories",
            {"q": query, "sort": "stars", "order": "desc", "per_page": 5},
            token,
        )
        return [_to_repo(item) for item in _items(data)]
    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.warning("GitHub repo search failed: %s", e)
        return []


async def search_code(query: str, token: Optional[str] = None) -> list[GitHubCodeResult]:
    try:
        data = await _get_json("/search/code", {"q": query, "per_page": 5}, token)
        return [
            GitHubCodeResult(
                name=item.get("name", ""),
                path=item.get("path", ""),
                repository=_repository_name(item.get("repository")),
                url=item.get("html_url", ""),
            )
            for item in _items(data)
        ]
    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.warning("GitHub code search failed: %s", e)
        return []


async def get_user_repos(username: str, token: Optional[str] = None) -> list[GitHubRepo]:
    """A user's 10 most recently updated repositories."""
    try:
        data = await _get_json(
            f"/users/{username}/repos",
            {"sort": "updated", "per_page": 10},
            token,
            expect=list,
        )
        return [_to_repo(item) for item in data if isinstance(item, dict)]
    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.warning("GitHub user repos failed for %s: %s", username, e)
        return []


def format_github_results(repos: list[GitHubRepo]) -> str:
    if not repos:
        return "No repositories found."

    return "\n---\n".join(
        f"{i}. {r.name} ({r.stars} stars)\n"
        f"Language: {r.language}\n"
        f"Description: {r.description}\n"
        f"URL: {r.url}\n"
        for i, r in enumerate(repos, start=1)
    )
