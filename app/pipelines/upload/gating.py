"""Access gates evaluated before any body parsing (stage 1).

Order is fixed: rate limit, IP block list, then the global panic switch.
Rejections at this stage are answered directly and never audited.
"""

from __future__ import annotations

from fastapi import status

from app.services.access_policy import AccessPolicy
from app.services.rate_limiter import RateLimiter

from .types import GateRejection

RATE_LIMITED = GateRejection(
    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    message="Rate limit exceeded",
    error="Too many requests. Please try again later.",
    reason="rate_limited",
)

IP_BLOCKED = GateRejection(
    status_code=status.HTTP_403_FORBIDDEN,
    message="Access Denied",
    error="Your IP address has been blocked.",
    reason="ip_blocked",
)

PANIC_MODE = GateRejection(
    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    message="Service unavailable",
    error="Uploads are temporarily disabled.",
    reason="panic_mode",
)


async def check_access(
    ip: str,
    rate_limiter: RateLimiter,
    access_policy: AccessPolicy,
) -> GateRejection | None:
    """Return the first rejection that applies to ``ip``, or None to proceed."""

    if not rate_limiter.check(ip).allowed:
        return RATE_LIMITED

    if await access_policy.is_blocked(ip):
        return IP_BLOCKED

    if await access_policy.is_panicked():
        return PANIC_MODE

    return None


__all__ = ["IP_BLOCKED", "PANIC_MODE", "RATE_LIMITED", "check_access"]
