"""
Main API router. Mounts all sub-routers.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_optional_user, require_user

router = APIRouter()


# ── Health (no auth) ─────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "devpilot"}


@router.get("/v1/agent/health")
async def agent_health():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


# ── Auth (no auth) ───────────────────────────────────────────────────

@router.get("/auth/config")
async def auth_config():
    from ..core.config import get_settings
    from ..core.flags import get_flags

    flags = get_flags()
    if not flags.use_auth0:
        return {"auth_enabled": False, "message": "Dev mode, no auth required"}

    settings = get_settings()
    return {
        "auth_enabled": True,
        "domain": settings.auth0_domain,
        "audience": settings.auth0_audience,
    }


@router.get("/v1/auth/me")
async def auth_me(user: Optional[AuthenticatedUser] = Depends(get_optional_user)):
    if user is None:
        return None
    return {"user_id": user.user_id, "email": user.email, "name": user.name, "roles": user.roles}


@router.post("/v1/auth/logout")
async def auth_logout():
    # Bearer tokens are held client-side; there is no server session to clear.
    return {"success": True}


# ── V1 routes (auth required) ───────────────────────────────────────

from .agent import agent_router
from .server import server_router
from .knowledge import knowledge_router
from .error_logs import error_logs_router
from .memory import memory_router

router.include_router(agent_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(server_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(knowledge_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(error_logs_router, prefix="/v1", dependencies=[Depends(require_user)])
router.include_router(memory_router, prefix="/v1", dependencies=[Depends(require_user)])
