"""Best-effort persistence of upload audit records."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from app.database import session_scope
from app.models.log import LogEntry, UploadContentType, UploadStatus
from app.services.geolocation import GeoLocation

logger = logging.getLogger(__name__)


@dataclass
class AuditRecord:
    """Everything known about one upload attempt at the time it is recorded."""

    chat_id: str
    ip: str
    status: UploadStatus
    filename: str = "logs.txt"
    content_type: UploadContentType | None = None
    content_size: int = 0
    caption: str | None = None
    country: str | None = None
    country_code: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    user_agent: str | None = None
    error_message: str | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc).replace(tzinfo=None)
    )

    def apply_location(self, location: GeoLocation) -> None:
        self.country = location.country
        self.country_code = location.country_code
        self.city = location.city
        self.latitude = location.latitude
        self.longitude = location.longitude


class AuditRecorder:
    """Write ``AuditRecord`` rows; failures are logged and never raised."""

    async def record(self, entry: AuditRecord) -> bool:
        """Persist ``entry`` and report whether the write committed."""

        try:
            async with session_scope() as session:
                session.add(LogEntry(**asdict(entry)))
                await session.commit()
        except Exception:
            # Closing the session rolls back anything left uncommitted.
            logger.exception(
                "Failed to persist upload log entry chat_id=%s status=%s",
                entry.chat_id,
                entry.status.value,
            )
            return False
        return True


__all__ = ["AuditRecord", "AuditRecorder"]
