"""HTTP surface tests. Dev auth, temp SQLite, fake providers."""

import httpx
import pytest

from devpilot.api import agent as agent_api
from devpilot.core import auth
from devpilot.core.flags import get_flags
from devpilot.factory import create_app
from devpilot.services import ssh
from devpilot.services.github import GitHubRepo

GEMINI = "googleapis"


@pytest.fixture
async def client(tables):
    transport = httpx.ASGITransport(app=create_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestHealthAndAuth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

        resp = await client.get("/v1/agent/health")
        assert resp.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_dev_user(self, client):
        resp = await client.get("/v1/auth/me")
        assert resp.json()["user_id"] == "dev-user"

        resp = await client.get("/auth/config")
        assert resp.json()["auth_enabled"] is False

    @pytest.mark.asyncio
    async def test_protected_routes_need_a_subject(self, client, monkeypatch):
        monkeypatch.setenv("FF_USE_AUTH0", "true")
        get_flags.cache_clear()

        async def no_subject(token):
            return auth._user_from_claims({"email": "a@b.c"})

        monkeypatch.setattr(auth._verifier, "verify", no_subject)

        assert (await client.get("/v1/agent/history")).status_code == 401
        resp = await client.get("/v1/agent/history", headers={"Authorization": "Bearer token"})
        assert resp.status_code == 401
        assert "sub" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_logout(self, client):
        resp = await client.post("/v1/auth/logout")
        assert resp.json() == {"success": True}


class TestAgent:

    @pytest.mark.asyncio
    async def test_message_then_history(self, client, providers):
        providers.respond(GEMINI, "Hi!")

        resp = await client.post("/v1/agent/messages", json={"message": "hello"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["reply"] == "Hi!"
        assert body["has_search_results"] is False

        providers.respond(GEMINI, "Second")
        await client.post("/v1/agent/messages", json={"message": "again"})

        history = (await client.get("/v1/agent/history")).json()
        assert [h["message"] for h in history] == ["hello", "again"]

    @pytest.mark.asyncio
    async def test_blank_message_is_400(self, client, providers):
        resp = await client.post("/v1/agent/messages", json={"message": "   "})
        assert resp.status_code == 400
        assert providers.calls == []

    @pytest.mark.asyncio
    async def test_providers_down_is_502(self, client, providers):
        providers.respond(GEMINI, 500)

        resp = await client.post("/v1/agent/messages", json={"message": "hello"})
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Agent communication error"
        assert (await client.get("/v1/agent/history")).json() == []

    @pytest.mark.asyncio
    async def test_delete_conversation(self, client, providers):
        providers.respond(GEMINI, "Hi!")
        await client.post("/v1/agent/messages", json={"message": "hello"})
        convo_id = (await client.get("/v1/agent/history")).json()[0]["id"]

        assert (await client.delete(f"/v1/agent/conversations/{convo_id}")).status_code == 200
        assert (await client.delete(f"/v1/agent/conversations/{convo_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_settings_round_trip(self, client):
        assert (await client.get("/v1/agent/settings")).json() is None

        resp = await client.put("/v1/agent/settings", json={
            "provider_api_key": "sk-user",
            "enable_web_search": True,
        })
        assert resp.status_code == 200

        settings = (await client.get("/v1/agent/settings")).json()
        assert settings["provider_api_key"] == "sk-user"
        assert settings["preferred_model"] == "gpt-4"
        assert settings["enable_web_search"] is True
        assert settings["enable_github_search"] is False

    @pytest.mark.asyncio
    async def test_github_repo_search(self, client, monkeypatch):
        seen = {}

        async def fake_search_repos(query, token=None):
            seen["query"] = query
            return [GitHubRepo("a/b", "desc", "https://github.com/a/b", 3, "Python")]

        monkeypatch.setattr(agent_api.github, "search_repos", fake_search_repos)

        resp = await client.get("/v1/agent/github", params={"query": "fastapi", "type": "repos"})
        assert resp.status_code == 200
        assert resp.json()["results"][0]["name"] == "a/b"
        assert seen["query"] == "fastapi"


class TestServer:

    @pytest.mark.asyncio
    async def test_unconfigured(self, client):
        resp = await client.post("/v1/server/execute", json={"command": "uptime"})
        assert resp.status_code == 400
        assert (await client.get("/v1/server/status")).json() is None

    @pytest.mark.asyncio
    async def test_settings_hide_private_key(self, client):
        await client.put("/v1/server/settings", json={
            "ssh_host": "example.com",
            "ssh_user": "deploy",
            "ssh_private_key": "-----BEGIN KEY-----",
        })

        body = (await client.get("/v1/server/settings")).json()
        assert body == {
            "ssh_host": "example.com",
            "ssh_port": 22,
            "ssh_user": "deploy",
            "has_private_key": True,
        }

    @pytest.mark.asyncio
    async def test_execute(self, client, monkeypatch):
        calls = []

        async def fake_run(argv, timeout):
            calls.append(argv[-1])
            return 0, "12:00 up 3 days\n", ""

        monkeypatch.setattr(ssh, "_run_ssh", fake_run)
        await client.put("/v1/server/settings", json={"ssh_host": "example.com", "ssh_user": "deploy"})

        resp = await client.post("/v1/server/execute", json={"command": "uptime"})
        assert resp.status_code == 200
        assert resp.json() == {"stdout": "12:00 up 3 days\n", "stderr": ""}

        resp = await client.post("/v1/server/execute", json={"command": "rm -rf /"})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Command not permitted: rm"
        assert calls == ["uptime"]

    @pytest.mark.asyncio
    async def test_unsafe_file_path(self, client):
        await client.put("/v1/server/settings", json={"ssh_host": "example.com", "ssh_user": "deploy"})
        resp = await client.get("/v1/server/file", params={"path": "../../etc/passwd"})
        assert resp.status_code == 400


class TestKnowledgeAndMemory:

    @pytest.mark.asyncio
    async def test_knowledge_flow(self, client):
        resp = await client.post("/v1/knowledge", json={
            "title": "Nginx config", "content": "listen 80", "category": "config",
        })
        assert resp.status_code == 200

        entries = (await client.get("/v1/knowledge")).json()
        assert entries[0]["title"] == "Nginx config"

        hits = (await client.get("/v1/knowledge/search", params={"query": "NGINX"})).json()
        assert len(hits) == 1

        summary = (await client.get("/v1/knowledge/summary")).json()
        assert summary["summary"] == "Saved documents: 1"

        assert (await client.delete(f"/v1/knowledge/{entries[0]['id']}")).status_code == 200
        assert (await client.get("/v1/knowledge")).json() == []

    @pytest.mark.asyncio
    async def test_invalid_category_is_422(self, client):
        resp = await client.post("/v1/knowledge", json={"title": "t", "content": "c", "category": "misc"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_memory_flow(self, client):
        await client.post("/v1/memory", json={
            "memory_type": "user_preference", "key": "editor", "value": "vim", "importance": 6,
        })

        mem = (await client.get("/v1/memory/editor")).json()
        assert mem["value"] == "vim"
        assert mem["importance"] == 6

        assert (await client.get("/v1/memory/missing")).status_code == 404
        assert len((await client.get("/v1/memory")).json()) == 1


class TestErrorLogs:

    @pytest.mark.asyncio
    async def test_submit_returns_analysis(self, client):
        resp = await client.post("/v1/error-logs", json={
            "error_type": "network",
            "error_message": "connect ECONNREFUSED 127.0.0.1:5432",
            "severity": "high",
        })
        analysis = resp.json()["analysis"]
        assert analysis["type"] == "connection_error"
        assert analysis["severity"] == "high"

    @pytest.mark.asyncio
    async def test_status_flow(self, client):
        await client.post("/v1/error-logs", json={
            "error_type": "http", "error_message": "404 Not Found", "severity": "low",
        })
        log = (await client.get("/v1/error-logs")).json()[0]
        assert log["status"] == "new"
        assert log["resolved_at"] is None

        resp = await client.patch(f"/v1/error-logs/{log['id']}/status", json={
            "status": "resolved", "solution": "fixed the route",
        })
        assert resp.status_code == 200

        log = (await client.get("/v1/error-logs")).json()[0]
        assert log["status"] == "resolved"
        assert log["solution"] == "fixed the route"
        assert log["resolved_at"] is not None

    @pytest.mark.asyncio
    async def test_unknown_log_is_404(self, client):
        resp = await client.patch("/v1/error-logs/999/status", json={"status": "ignored"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_analyze_without_storing(self, client):
        resp = await client.post("/v1/error-logs/analyze", json={"error_message": "SyntaxError: bad"})
        assert resp.json()["type"] == "syntax_error"
        assert (await client.get("/v1/error-logs")).json() == []
