from __future__ import annotations

from ideaforge.core.runtime.rate_limit import FixedWindowLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_budget_is_per_key_and_resets_with_window():
    clock = FakeClock()
    limiter = FixedWindowLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.allow("a")
    assert limiter.allow("a")
    assert not limiter.allow("a")
    assert limiter.allow("b")
    assert limiter.remaining("a") == 0
    assert limiter.remaining("b") == 1

    clock.now += 60
    assert limiter.remaining("a") == 2
    assert limiter.allow("a")


def test_expired_windows_are_swept_when_a_new_window_opens():
    clock = FakeClock()
    limiter = FixedWindowLimiter(max_requests=5, window_seconds=60, clock=clock)
    for n in range(50):
        assert limiter.allow(f"client-{n}")

    clock.now += 61
    assert limiter.allow("fresh")
    assert list(limiter._windows) == ["fresh"]


def test_live_windows_survive_a_sweep():
    clock = FakeClock()
    limiter = FixedWindowLimiter(max_requests=1, window_seconds=60, clock=clock)
    assert limiter.allow("old")
    clock.now += 30
    assert limiter.allow("recent")
    clock.now += 31
    assert limiter.allow("old")
    assert set(limiter._windows) == {"old", "recent"}
    assert not limiter.allow("recent")
