"""Coarse IP geolocation backed by the ip-api.com JSON endpoint."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from app.config.settings import settings
from app.utils.network import is_private_ip

logger = logging.getLogger(__name__)

_LOOKUP_FIELDS = "status,country,countryCode,city,lat,lon,isp,timezone"


@dataclass(frozen=True)
class GeoLocation:
    """Location attributes for one IP; every field but ``ip`` may be absent."""

    ip: str
    country: str | None = None
    country_code: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    isp: str | None = None
    timezone: str | None = None

    @classmethod
    def local(cls, ip: str) -> "GeoLocation":
        return cls(ip=ip, country="Local", country_code="XX", city="Local Network")

    @classmethod
    def from_payload(cls, ip: str, payload: dict[str, Any]) -> "GeoLocation":
        return cls(
            ip=ip,
            country=payload.get("country"),
            country_code=payload.get("countryCode"),
            city=payload.get("city"),
            latitude=_as_float(payload.get("lat")),
            longitude=_as_float(payload.get("lon")),
            isp=payload.get("isp"),
            timezone=payload.get("timezone"),
        )


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class GeolocationService:
    """Resolve client IPs without ever failing the caller.

    Private addresses short-circuit to a fixed local result. Successful
    remote lookups are cached for ``cache_ttl_seconds``; failures are not.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        cache_ttl_seconds: int | None = None,
        cache_max_entries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = settings.geolocation
        self._base_url = (base_url or config.base_url).rstrip("/")
        self._timeout = timeout_seconds or config.timeout_seconds
        self._cache_ttl = (
            cache_ttl_seconds if cache_ttl_seconds is not None else config.cache_ttl_seconds
        )
        self._cache_max_entries = cache_max_entries or config.cache_max_entries
        self._transport = transport
        self._clock = clock
        self._cache: dict[str, tuple[float, GeoLocation]] = {}

    async def resolve(self, ip: str) -> GeoLocation:
        if is_private_ip(ip):
            return GeoLocation.local(ip)

        cached = self._cache_get(ip)
        if cached is not None:
            return cached

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    f"{self._base_url}/{ip}",
                    params={"fields": _LOOKUP_FIELDS},
                )
            payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("Geolocation lookup failed for %s: %s", ip, exc)
            return GeoLocation(ip=ip)

        if not isinstance(payload, dict) or payload.get("status") != "success":
            logger.info("Geolocation service returned no data for %s", ip)
            return GeoLocation(ip=ip)

        location = GeoLocation.from_payload(ip, payload)
        self._cache_put(ip, location)
        return location

    def _cache_get(self, ip: str) -> GeoLocation | None:
        if self._cache_ttl <= 0:
            return None

        hit = self._cache.get(ip)
        if hit is None:
            return None

        stored_at, location = hit
        if self._clock() - stored_at > self._cache_ttl:
            del self._cache[ip]
            return None
        return location

    def _cache_put(self, ip: str, location: GeoLocation) -> None:
        if self._cache_ttl <= 0:
            return

        if len(self._cache) >= self._cache_max_entries:
            # Insertion order makes the first key the oldest entry.
            oldest = next(iter(self._cache))
            del self._cache[oldest]
        self._cache[ip] = (self._clock(), location)


__all__ = ["GeoLocation", "GeolocationService"]
