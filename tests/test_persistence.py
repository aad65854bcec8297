"""Audit recorder and access policy against a stubbed session scope."""

import asyncio
from contextlib import asynccontextmanager

from app.models.log import LogEntry, UploadContentType, UploadStatus
from app.services import access_policy as access_policy_module
from app.services import audit as audit_module
from app.services.access_policy import DatabaseAccessPolicy
from app.services.audit import AuditRecord, AuditRecorder
from app.services.geolocation import GeoLocation


class FakeResult:
    def __init__(self, value) -> None:
        self._value = value

    def scalar_one_or_none(self):
        return self._value


class FakeSession:
    def __init__(self, value=None) -> None:
        self.added = []
        self.committed = False
        self.statements = []
        self._value = value

    def add(self, instance) -> None:
        self.added.append(instance)

    async def commit(self) -> None:
        self.committed = True

    async def execute(self, statement):
        self.statements.append(statement)
        return FakeResult(self._value)


def _scope_for(session):
    @asynccontextmanager
    async def scope():
        yield session

    return scope


def test_recorder_persists_every_field(monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(audit_module, "session_scope", _scope_for(session))

    entry = AuditRecord(
        chat_id="-100123",
        ip="203.0.113.9",
        status=UploadStatus.SUCCESS,
        filename="app.log",
        content_type=UploadContentType.FILE,
        content_size=2048,
        caption="nightly",
        user_agent="curl/8.0",
    )
    entry.apply_location(
        GeoLocation(ip="203.0.113.9", country="Norway", country_code="NO", city="Oslo")
    )

    assert asyncio.run(AuditRecorder().record(entry)) is True
    assert session.committed is True
    (row,) = session.added
    assert isinstance(row, LogEntry)
    assert row.chat_id == "-100123"
    assert row.content_type is UploadContentType.FILE
    assert row.content_size == 2048
    assert row.country == "Norway"
    assert row.status is UploadStatus.SUCCESS


def test_recorder_swallows_storage_failures(monkeypatch):
    @asynccontextmanager
    async def broken_scope():
        raise ConnectionRefusedError("database unavailable")
        yield  # pragma: no cover

    monkeypatch.setattr(audit_module, "session_scope", broken_scope)

    entry = AuditRecord(chat_id="1", ip="203.0.113.9", status=UploadStatus.FAILED)
    assert asyncio.run(AuditRecorder().record(entry)) is False


def test_policy_reports_blocked_ip(monkeypatch):
    monkeypatch.setattr(access_policy_module, "session_scope", _scope_for(FakeSession(3)))
    assert asyncio.run(DatabaseAccessPolicy().is_blocked("203.0.113.9")) is True

    monkeypatch.setattr(
        access_policy_module, "session_scope", _scope_for(FakeSession(None))
    )
    assert asyncio.run(DatabaseAccessPolicy().is_blocked("203.0.113.9")) is False


def test_policy_treats_missing_settings_row_as_open(monkeypatch):
    monkeypatch.setattr(
        access_policy_module, "session_scope", _scope_for(FakeSession(None))
    )
    assert asyncio.run(DatabaseAccessPolicy().is_panicked()) is False

    monkeypatch.setattr(
        access_policy_module, "session_scope", _scope_for(FakeSession(True))
    )
    assert asyncio.run(DatabaseAccessPolicy().is_panicked()) is True
