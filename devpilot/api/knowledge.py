"""
Knowledge base API.

POST   /v1/knowledge            Add an entry
GET    /v1/knowledge            All entries, most recently updated first
GET    /v1/knowledge/search     Substring search over title and content
GET    /v1/knowledge/summary    One-line technical summary
DELETE /v1/knowledge/{id}       Delete an entry
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_user, get_db
from ..core.errors import NotFoundError
from ..models.knowledge import KnowledgeCategory
from ..services.context import summarize_context
from ..services.knowledge import add_knowledge, delete_knowledge, list_knowledge, search_knowledge
from ..services.memory import list_memories

knowledge_router = APIRouter(prefix="/knowledge", tags=["knowledge"])


class KnowledgeIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    category: KnowledgeCategory
    tags: Optional[str] = None


class KnowledgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    category: str
    tags: Optional[str] = None
    created_at: datetime
    updated_at: datetime


@knowledge_router.post("")
async def create_entry(
    request: KnowledgeIn,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    await add_knowledge(
        db, user.user_id,
        title=request.title,
        content=request.content,
        category=request.category.value,
        tags=request.tags,
    )
    return {"success": True}


@knowledge_router.get("", response_model=list[KnowledgeOut])
async def get_all(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    return await list_knowledge(db, user.user_id)


@knowledge_router.get("/search", response_model=list[KnowledgeOut])
async def search(
    query: str = Query(min_length=1),
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    return await search_knowledge(db, user.user_id, query)


@knowledge_router.get("/summary")
async def summary(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    knowledge = await list_knowledge(db, user.user_id)
    memories = await list_memories(db, user.user_id)
    return {"summary": summarize_context(knowledge, memories)}


@knowledge_router.delete("/{entry_id}")
async def delete_entry(
    entry_id: int,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    deleted = await delete_knowledge(db, user.user_id, entry_id)
    if not deleted and db is not None:
        raise NotFoundError("Knowledge entry not found")
    return {"success": True}
