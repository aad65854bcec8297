"""Service layer helpers for the upload pipeline and its integrations."""

from .access_policy import AccessPolicy, DatabaseAccessPolicy
from .audit import AuditRecord, AuditRecorder
from .geolocation import GeoLocation, GeolocationService
from .rate_limiter import RateLimiter, RateLimitStatus
from .sanitizer import sanitize_content
from .telegram import TelegramRelayClient, TelegramRelayError, TelegramResponse

__all__ = [
    "AccessPolicy",
    "DatabaseAccessPolicy",
    "AuditRecord",
    "AuditRecorder",
    "GeoLocation",
    "GeolocationService",
    "RateLimiter",
    "RateLimitStatus",
    "sanitize_content",
    "TelegramRelayClient",
    "TelegramRelayError",
    "TelegramResponse",
]
