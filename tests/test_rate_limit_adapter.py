"""Unit tests for the in-memory fixed-window rate limiter."""

from unittest.mock import Mock

import pytest

from lead_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


def _limiter(clock: Mock, limit: int = 5, window_seconds: float = 60) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=limit, window_seconds=window_seconds, clock=clock)


def test_admits_up_to_limit_in_same_window(clock: Mock) -> None:
    limiter = _limiter(clock)

    for _ in range(5):
        assert limiter.admit("1.2.3.4") is True


def test_sixth_request_in_window_is_rejected(clock: Mock) -> None:
    limiter = _limiter(clock)

    for _ in range(5):
        limiter.admit("1.2.3.4")

    clock.return_value = 1059.0
    blocked = limiter.consume("1.2.3.4")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 1


def test_rejection_does_not_extend_or_count(clock: Mock) -> None:
    limiter = _limiter(clock, limit=1)

    assert limiter.admit("k") is True
    for _ in range(10):
        assert limiter.admit("k") is False

    clock.return_value = 1060.0
    assert limiter.admit("k") is True


def test_admits_again_after_window_elapses(clock: Mock) -> None:
    limiter = _limiter(clock)

    for _ in range(5):
        limiter.admit("k")
    assert limiter.admit("k") is False

    clock.return_value = 1060.0
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 4


def test_window_expires_exactly_when_elapsed_equals_window(clock: Mock) -> None:
    limiter = _limiter(clock, limit=1)
    limiter.admit("k")
    limiter.admit("other")

    clock.return_value = 1059.999
    assert limiter.admit("k") is False

    # elapsed == window counts as expired for both admit and sweep
    clock.return_value = 1060.0
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.reset_at == 1120
    assert limiter.sweep() == 1
    assert "other" not in limiter
    assert "k" in limiter


def test_window_is_anchored_at_first_request(clock: Mock) -> None:
    limiter = _limiter(clock, limit=2)

    clock.return_value = 1050.0
    assert limiter.admit("k") is True

    # Ten seconds later a wall-clock minute boundary has passed, but not the window.
    clock.return_value = 1065.0
    assert limiter.admit("k") is True
    assert limiter.admit("k") is False

    clock.return_value = 1110.0
    assert limiter.admit("k") is True


def test_new_window_replaces_record(clock: Mock) -> None:
    limiter = _limiter(clock, limit=3)

    limiter.admit("k")
    limiter.admit("k")

    clock.return_value = 1100.0
    assert limiter.consume("k").remaining == 2


def test_allowed_result_metadata(clock: Mock) -> None:
    limiter = _limiter(clock)

    first = limiter.consume("k")
    assert first.limit == 5
    assert first.remaining == 4
    assert first.reset_at == 1060
    assert first.retry_after_seconds is None


def test_isolated_by_key(clock: Mock) -> None:
    limiter = _limiter(clock, limit=1)

    assert limiter.admit("k1") is True
    assert limiter.admit("k1") is False

    assert limiter.admit("k2") is True


def test_sweep_removes_only_expired_records(clock: Mock) -> None:
    limiter = _limiter(clock)

    limiter.admit("old")
    clock.return_value = 1030.0
    limiter.admit("recent")

    clock.return_value = 1060.0
    assert limiter.sweep() == 1
    assert "old" not in limiter
    assert "recent" in limiter
    assert len(limiter) == 1


def test_sweep_keeps_record_inside_window(clock: Mock) -> None:
    limiter = _limiter(clock)

    limiter.admit("k")
    clock.return_value = 1059.999
    assert limiter.sweep() == 0
    assert "k" in limiter


def test_memory_bounded_for_fixed_client_set(clock: Mock) -> None:
    limiter = _limiter(clock)
    clients = [f"10.0.0.{i}" for i in range(20)]

    for minute in range(30):
        clock.return_value = 1000.0 + minute * 60
        for client in clients:
            limiter.admit(client)
        limiter.sweep()
        assert len(limiter) <= len(clients)

    clock.return_value += 60
    limiter.sweep()
    assert len(limiter) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(**kwargs)


def test_invalid_consume_args() -> None:
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")
