"""Tests for devpilot.core.auth: header parsing and dev-mode bypass."""

import pytest

from devpilot.core import auth
from devpilot.core.flags import get_flags


class TestParseBearer:

    def test_extracts_token(self):
        assert auth.parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"
        assert auth.parse_bearer("bearer abc") == "abc"

    @pytest.mark.parametrize("header", ["", "Basic abc", "Bearer ", "abc"])
    def test_rejects_malformed(self, header):
        with pytest.raises(PermissionError):
            auth.parse_bearer(header)


class TestGetCurrentUser:

    @pytest.mark.asyncio
    async def test_dev_user_when_auth_disabled(self):
        user = await auth.get_current_user("")
        assert user is auth.DEV_USER

    @pytest.mark.asyncio
    async def test_missing_header_when_auth_enabled(self, monkeypatch):
        monkeypatch.setenv("FF_USE_AUTH0", "true")
        get_flags.cache_clear()
        with pytest.raises(PermissionError, match="Missing"):
            await auth.get_current_user("")

    @pytest.mark.asyncio
    async def test_verified_claims_become_user(self, monkeypatch):
        monkeypatch.setenv("FF_USE_AUTH0", "true")
        get_flags.cache_clear()

        async def fake_verify(token):
            return auth._user_from_claims({"sub": "auth0|42", "email": "a@b.c", "permissions": ["read"]})

        monkeypatch.setattr(auth._verifier, "verify", fake_verify)
        user = await auth.get_current_user("Bearer token")

        assert user.user_id == "auth0|42"
        assert user.roles == ["read"]

    @pytest.mark.asyncio
    async def test_missing_sub_rejected(self, monkeypatch):
        monkeypatch.setenv("FF_USE_AUTH0", "true")
        get_flags.cache_clear()

        async def fake_verify(token):
            return auth._user_from_claims({"email": "a@b.c"})

        monkeypatch.setattr(auth._verifier, "verify", fake_verify)
        with pytest.raises(PermissionError, match="sub"):
            await auth.get_current_user("Bearer token")
