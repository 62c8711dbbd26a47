"""
Remote server API: settings and allow-listed command execution over SSH.

GET  /v1/server/settings     Read SSH settings (private key never returned)
PUT  /v1/server/settings     Replace SSH settings
POST /v1/server/execute      Run an allow-listed command
GET  /v1/server/status       CPU / memory / disk / uptime (null if not configured)
GET  /v1/server/files        ls -la <directory>
GET  /v1/server/file         cat <path>
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_user, get_db
from ..core.errors import ServerNotConfigured
from ..models.settings import ServerSettings
from ..services import ssh
from ..services.settings import get_server_settings, save_server_settings

logger = logging.getLogger(__name__)

server_router = APIRouter(prefix="/server", tags=["server"])


class ServerSettingsIn(BaseModel):
    ssh_host: Optional[str] = None
    ssh_port: Optional[int] = Field(default=None, ge=1, le=65535)
    ssh_user: Optional[str] = None
    ssh_private_key: Optional[str] = None


class ServerSettingsOut(BaseModel):
    ssh_host: Optional[str] = None
    ssh_port: int = 22
    ssh_user: Optional[str] = None
    has_private_key: bool = False


class CommandRequest(BaseModel):
    command: str = Field(min_length=1)


def _connection(row: Optional[ServerSettings]) -> Optional[ssh.ConnectionInfo]:
    if row is None or not row.is_configured:
        return None
    return ssh.ConnectionInfo(
        host=row.ssh_host,
        user=row.ssh_user,
        port=row.ssh_port or 22,
        private_key=row.ssh_private_key or None,
    )


async def _require_connection(db: Optional[AsyncSession], user_id: str) -> ssh.ConnectionInfo:
    conn = _connection(await get_server_settings(db, user_id))
    if conn is None:
        raise ServerNotConfigured()
    return conn


@server_router.get("/settings", response_model=Optional[ServerSettingsOut])
async def read_settings(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    row = await get_server_settings(db, user.user_id)
    if row is None:
        return None
    return ServerSettingsOut(
        ssh_host=row.ssh_host,
        ssh_port=row.ssh_port,
        ssh_user=row.ssh_user,
        has_private_key=bool(row.ssh_private_key),
    )


@server_router.put("/settings")
async def write_settings(
    request: ServerSettingsIn,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    await save_server_settings(db, user.user_id, **request.model_dump())
    return {"success": True}


@server_router.post("/execute")
async def execute_command(
    request: CommandRequest,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    conn = await _require_connection(db, user.user_id)
    result = await ssh.execute(conn, request.command)
    return asdict(result)


@server_router.get("/status")
async def server_status(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    conn = _connection(await get_server_settings(db, user.user_id))
    if conn is None:
        return None
    return asdict(await ssh.get_status(conn))


@server_router.get("/files")
async def list_files(
    directory: str = "/home",
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    conn = await _require_connection(db, user.user_id)
    return await ssh.list_files(conn, directory)


@server_router.get("/file")
async def read_file(
    path: str = Query(min_length=1),
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    conn = await _require_connection(db, user.user_id)
    return {"content": await ssh.read_file(conn, path)}
