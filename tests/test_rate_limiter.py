import asyncio

import pytest

from app.services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_allows_max_requests_then_rejects(clock):
    limiter = RateLimiter(window_seconds=60, max_requests=10, clock=clock)

    remaining = [limiter.check("1.2.3.4").remaining for _ in range(10)]
    assert remaining == list(range(9, -1, -1))

    status = limiter.check("1.2.3.4")
    assert status.allowed is False
    assert status.remaining == 0


def test_rejections_do_not_extend_the_count(clock):
    limiter = RateLimiter(window_seconds=60, max_requests=2, clock=clock)
    limiter.check("a")
    limiter.check("a")
    for _ in range(5):
        assert limiter.check("a").allowed is False

    clock.now += 61
    status = limiter.check("a")
    assert status.allowed is True
    assert status.remaining == 1


def test_window_resets_only_after_it_has_fully_elapsed(clock):
    limiter = RateLimiter(window_seconds=60, max_requests=10, clock=clock)
    for _ in range(10):
        limiter.check("ip")

    clock.now += 60
    assert limiter.check("ip").allowed is False

    clock.now += 0.001
    status = limiter.check("ip")
    assert status.allowed is True
    assert status.remaining == 9


def test_keys_are_counted_independently(clock):
    limiter = RateLimiter(window_seconds=60, max_requests=1, clock=clock)
    assert limiter.check("a").allowed is True
    assert limiter.check("b").allowed is True
    assert limiter.check("a").allowed is False


def test_sweep_removes_only_expired_entries(clock):
    limiter = RateLimiter(window_seconds=60, max_requests=10, clock=clock)
    limiter.check("old")
    clock.now += 30
    limiter.check("fresh")
    clock.now += 31

    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.check("fresh").remaining == 8


def test_reset_clears_all_entries(clock):
    limiter = RateLimiter(max_requests=1, clock=clock)
    limiter.check("a")
    limiter.reset()
    assert len(limiter) == 0
    assert limiter.check("a").allowed is True


def test_invalid_configuration_is_rejected():
    with pytest.raises(ValueError):
        RateLimiter(window_seconds=0)
    with pytest.raises(ValueError):
        RateLimiter(max_requests=0)


def test_sweeper_task_stops_when_cancelled(clock):
    limiter = RateLimiter(window_seconds=1, clock=clock)
    limiter.check("a")
    clock.now += 5

    async def run() -> None:
        task = asyncio.create_task(limiter.run_sweeper(0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert len(limiter) == 0
