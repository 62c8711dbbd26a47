"""
Per-user settings. One row per user in each table; upserted wholesale on save.
"""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase, TimestampedMixin


class ApiSettings(UserOwnedBase, TimestampedMixin):
    __tablename__ = "api_settings"

    user_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    provider_api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    github_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    github_username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    preferred_model: Mapped[str] = mapped_column(String(50), nullable=False, default="gpt-4")
    # Stored as 1/0; the API exposes booleans.
    enable_web_search: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    enable_github_search: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class ServerSettings(UserOwnedBase, TimestampedMixin):
    __tablename__ = "server_settings"

    user_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    ssh_host: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ssh_port: Mapped[int] = mapped_column(Integer, nullable=False, default=22)
    ssh_user: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ssh_private_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_configured(self) -> bool:
        return bool(self.ssh_host and self.ssh_user)
