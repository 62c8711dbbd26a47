"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import UserOwnedBase
from .conversation import Conversation
from .settings import ApiSettings, ServerSettings
from .knowledge import KnowledgeEntry, KnowledgeCategory
from .memory import MemoryEntry, MemoryType
from .error_log import ErrorLog, Severity, ErrorStatus

__all__ = [
    "UserOwnedBase",
    "Conversation",
    "ApiSettings", "ServerSettings",
    "KnowledgeEntry", "KnowledgeCategory",
    "MemoryEntry", "MemoryType",
    "ErrorLog", "Severity", "ErrorStatus",
]
