import asyncio

from app.pipelines.upload import check_access
from app.pipelines.upload.gating import IP_BLOCKED, PANIC_MODE, RATE_LIMITED
from app.services.rate_limiter import RateLimiter


def test_open_access_passes(harness):
    rejection = asyncio.run(
        check_access("203.0.113.1", harness.rate_limiter, harness.access_policy)
    )
    assert rejection is None


def test_rate_limit_is_checked_before_the_block_list(harness):
    limiter = RateLimiter(max_requests=1)
    harness.access_policy.blocked.add("203.0.113.1")

    first = asyncio.run(check_access("203.0.113.1", limiter, harness.access_policy))
    second = asyncio.run(check_access("203.0.113.1", limiter, harness.access_policy))

    assert first is IP_BLOCKED
    assert second is RATE_LIMITED
    assert harness.access_policy.blocked_checks == ["203.0.113.1"]


def test_block_list_wins_over_panic_mode(harness):
    harness.access_policy.blocked.add("203.0.113.1")
    harness.access_policy.panic = True

    blocked = asyncio.run(
        check_access("203.0.113.1", harness.rate_limiter, harness.access_policy)
    )
    panicked = asyncio.run(
        check_access("203.0.113.2", harness.rate_limiter, harness.access_policy)
    )

    assert blocked is IP_BLOCKED
    assert panicked is PANIC_MODE
    assert panicked.status_code == 503
