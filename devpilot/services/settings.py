"""
Per-user API and server settings. One row per user, upserted wholesale.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.settings import ApiSettings, ServerSettings

logger = logging.getLogger(__name__)

API_SETTINGS_FIELDS = (
    "provider_api_key",
    "github_token",
    "github_username",
    "preferred_model",
    "enable_web_search",
    "enable_github_search",
)

SERVER_SETTINGS_FIELDS = ("ssh_host", "ssh_port", "ssh_user", "ssh_private_key")


async def get_api_settings(db: Optional[AsyncSession], user_id: str) -> Optional[ApiSettings]:
    if db is None:
        logger.warning("Cannot get API settings: database not available")
        return None

    result = await db.execute(select(ApiSettings).where(ApiSettings.user_id == user_id))
    return result.scalar_one_or_none()


async def save_api_settings(
    db: Optional[AsyncSession],
    user_id: str,
    provider_api_key: Optional[str] = None,
    github_token: Optional[str] = None,
    github_username: Optional[str] = None,
    preferred_model: Optional[str] = None,
    enable_web_search: bool = False,
    enable_github_search: bool = False,
) -> Optional[ApiSettings]:
    """Replace the user's API settings. Booleans are stored as 1/0."""
    if db is None:
        logger.warning("Cannot upsert API settings: database not available")
        return None

    values = {
        "provider_api_key": provider_api_key,
        "github_token": github_token,
        "github_username": github_username,
        "preferred_model": preferred_model or "gpt-4",
        "enable_web_search": 1 if enable_web_search else 0,
        "enable_github_search": 1 if enable_github_search else 0,
    }

    existing = await get_api_settings(db, user_id)
    if existing:
        for name in API_SETTINGS_FIELDS:
            setattr(existing, name, values[name])
        row = existing
    else:
        row = ApiSettings(user_id=user_id, **values)
        db.add(row)

    await db.flush()
    return row


def api_settings_to_dict(row: ApiSettings) -> dict:
    """External view: flags as booleans."""
    return {
        "provider_api_key": row.provider_api_key,
        "github_token": row.github_token,
        "github_username": row.github_username,
        "preferred_model": row.preferred_model,
        "enable_web_search": row.enable_web_search == 1,
        "enable_github_search": row.enable_github_search == 1,
    }


async def get_server_settings(db: Optional[AsyncSession], user_id: str) -> Optional[ServerSettings]:
    if db is None:
        logger.warning("Cannot get server settings: database not available")
        return None

    result = await db.execute(select(ServerSettings).where(ServerSettings.user_id == user_id))
    return result.scalar_one_or_none()


async def save_server_settings(
    db: Optional[AsyncSession],
    user_id: str,
    ssh_host: Optional[str] = None,
    ssh_port: Optional[int] = None,
    ssh_user: Optional[str] = None,
    ssh_private_key: Optional[str] = None,
) -> Optional[ServerSettings]:
    if db is None:
        logger.warning("Cannot upsert server settings: database not available")
        return None

    values = {
        "ssh_host": ssh_host,
        "ssh_port": ssh_port or 22,
        "ssh_user": ssh_user,
        "ssh_private_key": ssh_private_key,
    }

    existing = await get_server_settings(db, user_id)
    if existing:
        for name in SERVER_SETTINGS_FIELDS:
            setattr(existing, name, values[name])
        row = existing
    else:
        row = ServerSettings(user_id=user_id, **values)
        db.add(row)

    await db.flush()
    return row
