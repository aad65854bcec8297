"""Read-only access gates: the IP block list and the global panic switch.

The dashboard owns the write side of both; the upload pipeline only asks.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select

from app.database import session_scope
from app.models.access import GLOBAL_SETTINGS_ID, BlockedIp, GlobalSettings

logger = logging.getLogger(__name__)


class AccessPolicy(Protocol):
    """Port consulted before any upload content is parsed."""

    async def is_blocked(self, ip: str) -> bool: ...

    async def is_panicked(self) -> bool: ...


class DatabaseAccessPolicy:
    """Answer access questions from the ``blocked_ips`` and ``global_settings`` tables.

    Values are read fresh on every call; nothing is cached locally.
    """

    async def is_blocked(self, ip: str) -> bool:
        async with session_scope() as session:
            result = await session.execute(
                select(BlockedIp.id).where(BlockedIp.ip == ip).limit(1)
            )
            return result.scalar_one_or_none() is not None

    async def is_panicked(self) -> bool:
        async with session_scope() as session:
            result = await session.execute(
                select(GlobalSettings.panic_mode).where(
                    GlobalSettings.id == GLOBAL_SETTINGS_ID
                )
            )
            panic_mode = result.scalar_one_or_none()

        if panic_mode:
            logger.debug("Panic mode is enabled; uploads are rejected")
        return bool(panic_mode)


__all__ = ["AccessPolicy", "DatabaseAccessPolicy"]
