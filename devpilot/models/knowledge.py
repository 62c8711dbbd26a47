"""
Knowledge base entries: user-authored notes injected into chat context.
"""

import enum
from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase, TimestampedMixin


class KnowledgeCategory(str, enum.Enum):
    DOCUMENTATION = "documentation"
    CODE = "code"
    CONFIG = "config"
    ERROR = "error"
    SOLUTION = "solution"
    NOTE = "note"


class KnowledgeEntry(UserOwnedBase, TimestampedMixin):
    __tablename__ = "knowledge_entries"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
