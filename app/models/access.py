"""Block list and global switches consulted before accepting uploads."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from .base import Base

GLOBAL_SETTINGS_ID = "global_settings"


class BlockedIp(Base):
    __tablename__ = "blocked_ips"

    id = Column(Integer, primary_key=True, index=True)
    ip = Column(String(64), nullable=False, unique=True, index=True)
    reason = Column(String(255), nullable=True)
    blocked_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    blocked_by = Column(String(128), nullable=True)


class GlobalSettings(Base):
    """Single-row table holding the panic switch and cleanup policy."""

    __tablename__ = "global_settings"

    id = Column(String(32), primary_key=True, default=GLOBAL_SETTINGS_ID)
    panic_mode = Column(Boolean, nullable=False, default=False)
    auto_cleanup_days = Column(Integer, nullable=False, default=15)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
    updated_by = Column(String(128), nullable=True)


__all__ = ["BlockedIp", "GlobalSettings", "GLOBAL_SETTINGS_ID"]
