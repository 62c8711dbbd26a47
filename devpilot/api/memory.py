"""
Memory API: explicit access to the long-term memory store.

GET  /v1/memory          All memories, most important first
POST /v1/memory          Store a memory explicitly
GET  /v1/memory/{key}    Point lookup (refreshes last access time)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_user, get_db
from ..core.errors import NotFoundError
from ..models.memory import MemoryType
from ..services.memory import add_memory, get_memory_by_key, list_memories

memory_router = APIRouter(prefix="/memory", tags=["memory"])


class MemoryIn(BaseModel):
    memory_type: MemoryType
    key: str = Field(min_length=1, max_length=255)
    value: str = Field(min_length=1)
    importance: int = Field(default=1, ge=1, le=10)


class MemoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: Optional[int] = None
    memory_type: str
    key: str
    value: str
    importance: int
    created_at: datetime
    last_accessed_at: datetime


@memory_router.get("", response_model=list[MemoryOut])
async def get_all(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    return await list_memories(db, user.user_id)


@memory_router.post("")
async def remember(
    request: MemoryIn,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    await add_memory(
        db, user.user_id,
        memory_type=request.memory_type.value,
        key=request.key,
        value=request.value,
        importance=request.importance,
    )
    return {"success": True}


@memory_router.get("/{key}", response_model=MemoryOut)
async def get_one(
    key: str,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    mem = await get_memory_by_key(db, user.user_id, key)
    if mem is None:
        raise NotFoundError("Memory not found")
    return mem
