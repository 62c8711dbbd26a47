"""Shared test fixtures for the DevPilot test suite."""

import json

import httpx
import pytest

from devpilot.core import database
from devpilot.core.config import get_settings
from devpilot.core.database import close_db, get_session_factory, init_db
from devpilot.core.flags import get_flags
from devpilot.services import llm


@pytest.fixture(autouse=True)
def env(monkeypatch, tmp_path):
    """Point settings at a temp SQLite file, dev auth, and a fake fallback key."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("FF_USE_AUTH0", "false")
    monkeypatch.setenv("FF_USE_WEB_SEARCH", "true")
    monkeypatch.setenv("GEMINI_API_KEY", "server-gemini-key")
    monkeypatch.setenv("TAVILY_API_KEY", "")
    get_settings.cache_clear()
    get_flags.cache_clear()
    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.setattr(database, "_session_factory", None)
    monkeypatch.setattr(llm, "_client", None)
    yield
    get_settings.cache_clear()
    get_flags.cache_clear()


@pytest.fixture
async def tables():
    """Create all tables in the temp database; dispose the engine afterwards."""
    await init_db()
    yield
    await close_db()


@pytest.fixture
async def db(tables):
    """A session on the temp database. Commit explicitly when another session must see writes."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


class FakeProviders:
    """Records chat-completion calls and answers per provider host."""

    def __init__(self):
        self.calls: list[dict] = []
        self.responses: dict[str, object] = {}

    def respond(self, host_fragment: str, response):
        """response: reply text, an int status code, or an exception instance."""
        self.responses[host_fragment] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append({
            "host": request.url.host,
            "auth": request.headers.get("authorization"),
            "body": body,
        })
        for fragment, response in self.responses.items():
            if fragment in request.url.host:
                if isinstance(response, Exception):
                    raise response
                if isinstance(response, int):
                    return httpx.Response(response, text="upstream error")
                return httpx.Response(200, json={
                    "choices": [{"message": {"role": "assistant", "content": response}}],
                    "usage": {"prompt_tokens": 10, "completion_tokens": 5},
                })
        return httpx.Response(404, text="no fake for host")

    def hosts(self) -> list[str]:
        return [c["host"] for c in self.calls]


@pytest.fixture
def providers(monkeypatch):
    """Route the shared LLM client through an in-memory transport."""
    fake = FakeProviders()
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    monkeypatch.setattr(llm, "_get_client", lambda: client)
    return fake


@pytest.fixture
def mock_http(monkeypatch):
    """Make every new httpx.AsyncClient use the given handler. Call with a handler."""
    real_client = httpx.AsyncClient

    def install(handler):
        def factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(handler)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)

    return install
