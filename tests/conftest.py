"""Shared fixtures and fake collaborators for the upload pipeline tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import Any

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.controllers.dependencies import (  # noqa: E402
    get_access_policy,
    get_audit_recorder,
    get_geolocation_service,
    get_rate_limiter,
    get_relay_client,
)
from app.main import app  # noqa: E402
from app.services.audit import AuditRecord  # noqa: E402
from app.services.geolocation import GeoLocation  # noqa: E402
from app.services.rate_limiter import RateLimiter  # noqa: E402
from app.services.telegram import TelegramResponse  # noqa: E402


class FakeAccessPolicy:
    """Access policy backed by plain attributes instead of the database."""

    def __init__(self, blocked: set[str] | None = None, panic: bool = False) -> None:
        self.blocked = blocked or set()
        self.panic = panic
        self.blocked_checks: list[str] = []

    async def is_blocked(self, ip: str) -> bool:
        self.blocked_checks.append(ip)
        return ip in self.blocked

    async def is_panicked(self) -> bool:
        return self.panic


class FakeRelayClient:
    """Relay client that records calls and returns a canned response."""

    def __init__(self) -> None:
        self.configured = True
        self.response = TelegramResponse(ok=True, result={"message_id": 1})
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def send_logs(self, chat_id, content, filename="logs.txt", caption=None):
        self.calls.append(
            {
                "chat_id": chat_id,
                "content": content,
                "filename": filename,
                "caption": caption,
            }
        )
        if self.error is not None:
            raise self.error
        return self.response


class FakeGeolocation:
    async def resolve(self, ip: str) -> GeoLocation:
        return GeoLocation(
            ip=ip,
            country="Testland",
            country_code="TL",
            city="Test City",
            latitude=1.5,
            longitude=-2.5,
        )


class FakeAuditRecorder:
    def __init__(self) -> None:
        self.entries: list[AuditRecord] = []

    async def record(self, entry: AuditRecord) -> bool:
        self.entries.append(entry)
        return True


@dataclass
class UploadHarness:
    client: TestClient
    rate_limiter: RateLimiter
    access_policy: FakeAccessPolicy
    relay: FakeRelayClient
    recorder: FakeAuditRecorder
    geolocation: FakeGeolocation = field(default_factory=FakeGeolocation)


@pytest.fixture
def harness():
    """Test client with every external collaborator replaced by a fake."""

    setup = UploadHarness(
        client=TestClient(app),
        rate_limiter=RateLimiter(window_seconds=60, max_requests=10),
        access_policy=FakeAccessPolicy(),
        relay=FakeRelayClient(),
        recorder=FakeAuditRecorder(),
    )

    app.dependency_overrides[get_rate_limiter] = lambda: setup.rate_limiter
    app.dependency_overrides[get_access_policy] = lambda: setup.access_policy
    app.dependency_overrides[get_relay_client] = lambda: setup.relay
    app.dependency_overrides[get_geolocation_service] = lambda: setup.geolocation
    app.dependency_overrides[get_audit_recorder] = lambda: setup.recorder

    yield setup

    app.dependency_overrides.clear()
