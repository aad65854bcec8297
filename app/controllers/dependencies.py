"""Common FastAPI dependencies reused across controllers.

Collaborators are created once by the app factory and stored on
``app.state``; tests swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.services.access_policy import AccessPolicy
from app.services.audit import AuditRecorder
from app.services.geolocation import GeolocationService
from app.services.rate_limiter import RateLimiter
from app.services.telegram import TelegramRelayClient


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_access_policy(request: Request) -> AccessPolicy:
    return request.app.state.access_policy


def get_relay_client(request: Request) -> TelegramRelayClient:
    return request.app.state.relay_client


def get_geolocation_service(request: Request) -> GeolocationService:
    return request.app.state.geolocation


def get_audit_recorder(request: Request) -> AuditRecorder:
    return request.app.state.audit_recorder


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
AccessPolicyDep = Annotated[AccessPolicy, Depends(get_access_policy)]
RelayClientDep = Annotated[TelegramRelayClient, Depends(get_relay_client)]
GeolocationDep = Annotated[GeolocationService, Depends(get_geolocation_service)]
AuditRecorderDep = Annotated[AuditRecorder, Depends(get_audit_recorder)]


__all__ = [
    "get_rate_limiter",
    "get_access_policy",
    "get_relay_client",
    "get_geolocation_service",
    "get_audit_recorder",
    "RateLimiterDep",
    "AccessPolicyDep",
    "RelayClientDep",
    "GeolocationDep",
    "AuditRecorderDep",
]
