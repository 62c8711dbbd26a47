"""
Conversations. One row per completed chat exchange; immutable once written.
"""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Conversation(UserOwnedBase):
    __tablename__ = "conversations"

    message: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
