"""
Error log store. Status transitions are user-driven; resolved_at is stamped
exactly when a log moves to "resolved".
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.error_log import ErrorLog, ErrorStatus

logger = logging.getLogger(__name__)


async def add_error_log(
    db: Optional[AsyncSession],
    user_id: str,
    error_type: str,
    error_message: str,
    severity: str,
    stack_trace: Optional[str] = None,
    file_path: Optional[str] = None,
    line_number: Optional[int] = None,
) -> Optional[ErrorLog]:
    if db is None:
        logger.warning("Cannot add error log: database not available")
        return None

    log = ErrorLog(
        user_id=user_id,
        error_type=error_type,
        error_message=error_message,
        stack_trace=stack_trace,
        file_path=file_path,
        line_number=line_number,
        severity=severity,
        status=ErrorStatus.NEW.value,
    )
    db.add(log)
    await db.flush()
    return log


async def list_error_logs(db: Optional[AsyncSession], user_id: str) -> list[ErrorLog]:
    """Newest first."""
    if db is None:
        logger.warning("Cannot get error logs: database not available")
        return []

    result = await db.execute(
        select(ErrorLog)
        .where(ErrorLog.user_id == user_id)
        .order_by(ErrorLog.created_at.desc(), ErrorLog.id.desc())
    )
    return list(result.scalars().all())


async def update_error_log_status(
    db: Optional[AsyncSession],
    user_id: str,
    log_id: int,
    status: str,
    solution: Optional[str] = None,
) -> Optional[ErrorLog]:
    """Returns the updated row, or None if the user owns no such log."""
    if db is None:
        logger.warning("Cannot update error log: database not available")
        return None

    result = await db.execute(
        select(ErrorLog).where(ErrorLog.id == log_id, ErrorLog.user_id == user_id)
    )
    log = result.scalar_one_or_none()
    if log is None:
        return None

    log.status = status
    if solution:
        log.solution = solution
    if status == ErrorStatus.RESOLVED.value:
        log.resolved_at = utcnow()

    await db.flush()
    return log
