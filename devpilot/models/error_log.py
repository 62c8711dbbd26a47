"""
Error logs: user-submitted errors tracked through a triage status.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorStatus(str, enum.Enum):
    NEW = "new"
    ANALYZING = "analyzing"
    RESOLVED = "resolved"
    IGNORED = "ignored"


class ErrorLog(UserOwnedBase):
    __tablename__ = "error_logs"

    error_type: Mapped[str] = mapped_column(String(100), nullable=False)
    error_message: Mapped[str] = mapped_column(Text, nullable=False)
    stack_trace: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    line_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ErrorStatus.NEW.value)
    solution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Set exactly when status becomes "resolved".
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
