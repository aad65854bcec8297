"""SQLAlchemy models for the log relay service."""

from .access import BlockedIp, GlobalSettings  # noqa: F401
from .base import Base
from .log import LogEntry, UploadContentType, UploadStatus  # noqa: F401

__all__ = [
    "Base",
    "BlockedIp",
    "GlobalSettings",
    "LogEntry",
    "UploadContentType",
    "UploadStatus",
]
