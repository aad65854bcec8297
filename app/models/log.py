"""Audit record for a single log upload attempt."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, String, Text
from sqlalchemy import Enum as SqlEnum

from .base import Base


class UploadContentType(str, Enum):
    """How the uploaded content reached the service."""

    FILE = "file"
    TEXT = "text"


class UploadStatus(str, Enum):
    """Outcome of relaying the upload to Telegram."""

    SUCCESS = "success"
    FAILED = "failed"


class LogEntry(Base):
    """Persisted upload attempt, written once and never updated."""

    __tablename__ = "upload_logs"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(String(128), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    content_type = Column(
        SqlEnum(
            UploadContentType,
            name="upload_content_type",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=True,
    )
    content_size = Column(BigInteger, nullable=False, default=0)
    caption = Column(Text, nullable=True)
    ip = Column(String(64), nullable=False, index=True)
    country = Column(String(128), nullable=True, index=True)
    country_code = Column(String(8), nullable=True)
    city = Column(String(128), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    user_agent = Column(String(512), nullable=True)
    status = Column(
        SqlEnum(
            UploadStatus,
            name="upload_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


__all__ = ["LogEntry", "UploadContentType", "UploadStatus"]
