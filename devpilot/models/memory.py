"""
Long-term memory persistence.

Facts derived from conversations (or stored explicitly), ranked by importance.
Types: project_detail, user_preference, technical_context, solution_history
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase, utcnow


class MemoryType(str, enum.Enum):
    PROJECT_DETAIL = "project_detail"
    USER_PREFERENCE = "user_preference"
    TECHNICAL_CONTEXT = "technical_context"
    SOLUTION_HISTORY = "solution_history"


class MemoryEntry(UserOwnedBase):
    __tablename__ = "memory_entries"

    conversation_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    memory_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    importance: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # 1-10
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
