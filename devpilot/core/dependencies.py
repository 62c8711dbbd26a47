"""
FastAPI dependencies. Injected into route handlers.
"""

from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import AuthenticatedUser, get_current_user
from .database import get_db as _get_db


async def get_db() -> AsyncIterator[Optional[AsyncSession]]:
    """Yields an async DB session per request (None when persistence is unavailable)."""
    async for session in _get_db():
        yield session


async def get_user(
    authorization: str = Header(default=""),
) -> AuthenticatedUser:
    """
    Resolve authenticated user from Authorization header.
    Returns dev user if FF_USE_AUTH0=false.
    """
    try:
        return await get_current_user(authorization)
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_optional_user(
    authorization: str = Header(default=""),
) -> Optional[AuthenticatedUser]:
    """Like get_user, but returns None instead of 401 for anonymous callers."""
    try:
        return await get_current_user(authorization)
    except PermissionError:
        return None


async def require_user(
    user: AuthenticatedUser = Depends(get_user),
) -> AuthenticatedUser:
    """Guard for the /v1 routers. Tokens without a subject are already a 401 in get_current_user."""
    return user
