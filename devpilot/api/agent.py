"""
Agent API: chat, history, settings, GitHub search.

POST   /v1/agent/messages               Send a message, get a reply
GET    /v1/agent/history                Last 50 exchanges, oldest first
DELETE /v1/agent/conversations/{id}     Delete one exchange
GET    /v1/agent/settings               Read API settings
PUT    /v1/agent/settings               Replace API settings
GET    /v1/agent/github                 Search GitHub (repos | code | user)
"""

import logging
from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_user, get_db
from ..core.errors import NotFoundError
from ..core.flags import get_flags
from ..orchestrator.orchestrator import handle_message
from ..services import github
from ..services.conversations import delete_conversation, list_conversations
from ..services.settings import api_settings_to_dict, get_api_settings, save_api_settings

logger = logging.getLogger(__name__)

agent_router = APIRouter(prefix="/agent", tags=["agent"])


class MessageRequest(BaseModel):
    message: str = Field(min_length=1)
    enable_search: bool = False


class MessageResponse(BaseModel):
    reply: str
    timestamp: str
    has_search_results: bool


class ConversationOut(BaseModel):
    id: int
    message: str
    response: str
    created_at: str


class ApiSettingsIn(BaseModel):
    provider_api_key: Optional[str] = None
    github_token: Optional[str] = None
    github_username: Optional[str] = None
    preferred_model: Optional[str] = None
    enable_web_search: bool = False
    enable_github_search: bool = False


class ApiSettingsOut(BaseModel):
    provider_api_key: Optional[str] = None
    github_token: Optional[str] = None
    github_username: Optional[str] = None
    preferred_model: str
    enable_web_search: bool
    enable_github_search: bool


@agent_router.post("/messages", response_model=MessageResponse)
async def send_message(
    request: MessageRequest,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    """Send a message to the assistant."""
    result = await handle_message(
        db=db,
        user_id=user.user_id,
        message=request.message,
        enable_search=request.enable_search,
    )
    return MessageResponse(**result)


@agent_router.get("/history", response_model=list[ConversationOut])
async def get_history(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    convos = await list_conversations(db, user.user_id, limit=50)
    convos.reverse()  # Oldest first
    return [
        ConversationOut(
            id=c.id,
            message=c.message,
            response=c.response,
            created_at=c.created_at.isoformat() if c.created_at else "",
        )
        for c in convos
    ]


@agent_router.delete("/conversations/{conversation_id}")
async def remove_conversation(
    conversation_id: int,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    deleted = await delete_conversation(db, user.user_id, conversation_id)
    if not deleted and db is not None:
        raise NotFoundError("Conversation not found")
    return {"success": True}


@agent_router.get("/settings", response_model=Optional[ApiSettingsOut])
async def read_settings(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    row = await get_api_settings(db, user.user_id)
    return ApiSettingsOut(**api_settings_to_dict(row)) if row else None


@agent_router.put("/settings")
async def write_settings(
    request: ApiSettingsIn,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    await save_api_settings(db, user.user_id, **request.model_dump())
    return {"success": True}


@agent_router.get("/github")
async def search_github(
    query: str = Query(min_length=1),
    search_type: Literal["repos", "code", "user"] = Query(default="repos", alias="type"),
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    if not get_flags().use_github_search:
        return {"results": []}

    settings = await get_api_settings(db, user.user_id)
    token = settings.github_token if settings else None

    if search_type == "repos":
        repos = await github.search_repos(query, token)
        return {"results": [asdict(r) for r in repos], "formatted": github.format_github_results(repos)}
    if search_type == "code":
        code = await github.search_code(query, token)
        return {"results": [asdict(c) for c in code]}
    if settings and settings.github_username:
        repos = await github.get_user_repos(settings.github_username, token)
        return {"results": [asdict(r) for r in repos], "formatted": github.format_github_results(repos)}
    return {"results": []}
