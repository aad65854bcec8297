import asyncio

import httpx

from app.services.geolocation import GeoLocation, GeolocationService

SUCCESS_PAYLOAD = {
    "status": "success",
    "country": "Norway",
    "countryCode": "NO",
    "city": "Oslo",
    "lat": 59.91,
    "lon": 10.75,
    "isp": "Example ISP",
    "timezone": "Europe/Oslo",
}


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _service(handler, **kwargs) -> GeolocationService:
    return GeolocationService(
        base_url="http://geo.test/json",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_private_addresses_never_hit_the_network():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("private IPs must not be looked up")

    location = asyncio.run(_service(handler).resolve("192.168.1.10"))

    assert location == GeoLocation(
        ip="192.168.1.10", country="Local", country_code="XX", city="Local Network"
    )


def test_successful_lookup_maps_fields():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=SUCCESS_PAYLOAD)

    location = asyncio.run(_service(handler).resolve("8.8.8.8"))

    assert requests[0].url.path == "/json/8.8.8.8"
    assert "countryCode" in requests[0].url.params["fields"]
    assert location.country == "Norway"
    assert location.country_code == "NO"
    assert location.city == "Oslo"
    assert location.latitude == 59.91
    assert location.longitude == 10.75
    assert location.timezone == "Europe/Oslo"


def test_failed_status_yields_empty_location():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "fail", "message": "reserved range"})

    location = asyncio.run(_service(handler).resolve("8.8.4.4"))
    assert location == GeoLocation(ip="8.8.4.4")


def test_network_errors_yield_empty_location():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    location = asyncio.run(_service(handler).resolve("1.1.1.1"))
    assert location == GeoLocation(ip="1.1.1.1")


def test_successful_lookups_are_cached_until_ttl():
    clock = FakeClock()
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json=SUCCESS_PAYLOAD)

    service = _service(handler, cache_ttl_seconds=100, clock=clock)

    async def lookups() -> None:
        await service.resolve("8.8.8.8")
        clock.now = 50
        await service.resolve("8.8.8.8")
        clock.now = 151
        await service.resolve("8.8.8.8")

    asyncio.run(lookups())
    assert len(calls) == 2


def test_failures_are_not_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(500, text="oops")

    service = _service(handler)

    async def lookups() -> None:
        await service.resolve("9.9.9.9")
        await service.resolve("9.9.9.9")

    asyncio.run(lookups())
    assert len(calls) == 2


def test_cache_evicts_oldest_entry_when_full():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json=SUCCESS_PAYLOAD)

    service = _service(handler, cache_max_entries=1)

    async def lookups() -> None:
        await service.resolve("8.8.8.8")
        await service.resolve("1.1.1.1")
        await service.resolve("8.8.8.8")

    asyncio.run(lookups())
    assert calls == ["/json/8.8.8.8", "/json/1.1.1.1", "/json/8.8.8.8"]
