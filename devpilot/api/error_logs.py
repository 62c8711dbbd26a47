"""
Error logs API: submit, list, triage and analyse errors.

POST  /v1/error-logs                 Add a log; returns the classifier's analysis
GET   /v1/error-logs                 All logs, newest first
PATCH /v1/error-logs/{id}/status     Move a log to a new status
POST  /v1/error-logs/analyze         Classify an error message without storing it
"""

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_user, get_db
from ..core.errors import NotFoundError
from ..models.error_log import ErrorStatus, Severity
from ..services.error_analysis import classify
from ..services.error_logs import add_error_log, list_error_logs, update_error_log_status

error_logs_router = APIRouter(prefix="/error-logs", tags=["error-logs"])


class ErrorLogIn(BaseModel):
    error_type: str
    error_message: str
    stack_trace: Optional[str] = None
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    severity: Severity


class ErrorLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    error_type: str
    error_message: str
    stack_trace: Optional[str] = None
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    severity: str
    status: str
    solution: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None


class StatusUpdate(BaseModel):
    status: ErrorStatus
    solution: Optional[str] = None


class AnalyzeRequest(BaseModel):
    error_message: str


@error_logs_router.post("")
async def create_log(
    request: ErrorLogIn,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    analysis = classify(request.error_message)
    await add_error_log(
        db, user.user_id,
        error_type=request.error_type,
        error_message=request.error_message,
        severity=request.severity.value,
        stack_trace=request.stack_trace,
        file_path=request.file_path,
        line_number=request.line_number,
    )
    return {"success": True, "analysis": asdict(analysis)}


@error_logs_router.get("", response_model=list[ErrorLogOut])
async def get_all(
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    return await list_error_logs(db, user.user_id)


@error_logs_router.patch("/{log_id}/status")
async def update_status(
    log_id: int,
    request: StatusUpdate,
    user: AuthenticatedUser = Depends(require_user),
    db: Optional[AsyncSession] = Depends(get_db),
):
    log = await update_error_log_status(
        db, user.user_id, log_id, request.status.value, request.solution,
    )
    if log is None and db is not None:
        raise NotFoundError("Error log not found")
    return {"success": True}


@error_logs_router.post("/analyze")
async def analyze(request: AnalyzeRequest):
    return asdict(classify(request.error_message))
