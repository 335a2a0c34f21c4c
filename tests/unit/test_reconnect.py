from __future__ import annotations

import pytest

from itas_realtime.services.reconnect import ReconnectPolicy, ReconnectScheduler


def test_unbounded_policy_always_retries():
    policy = ReconnectPolicy()

    assert all(policy.should_retry(n) for n in range(100))


@pytest.mark.parametrize(("attempt", "expected"), [(0, True), (1, True), (2, False), (5, False)])
def test_ceiling(attempt, expected):
    assert ReconnectPolicy(max_attempts=3).should_retry(attempt) is expected


def test_disabled_policy_never_retries():
    assert ReconnectPolicy(enabled=False).should_retry(0) is False


def test_fixed_delay():
    policy = ReconnectPolicy(interval=2.0)

    assert [policy.delay_for(n) for n in range(4)] == [2.0, 2.0, 2.0, 2.0]


def test_exponential_delay_is_capped():
    policy = ReconnectPolicy(interval=1.0, backoff="exponential", max_interval=5.0)

    assert [policy.delay_for(n) for n in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_jitter_only_widens_delay():
    policy = ReconnectPolicy(interval=2.0, jitter=0.5)

    for n in range(20):
        assert 2.0 <= policy.delay_for(n) <= 3.0


def test_schedule_keeps_single_pending_call(timer):
    scheduler = ReconnectScheduler(ReconnectPolicy(), timer)
    fired = []

    assert scheduler.schedule(0, lambda: fired.append(1)) is True
    assert scheduler.schedule(0, lambda: fired.append(2)) is True

    assert len(timer.pending) == 1
    assert timer.handles[0].cancelled is True
    timer.fire_next()
    assert fired == [2]
    assert scheduler.pending is False


def test_cancel_is_idempotent(timer):
    scheduler = ReconnectScheduler(ReconnectPolicy(), timer)
    scheduler.schedule(0, lambda: None)

    scheduler.cancel()
    scheduler.cancel()

    assert timer.pending == []
    assert scheduler.pending is False


def test_exhaustion_is_flagged_and_reset(timer, caplog):
    scheduler = ReconnectScheduler(ReconnectPolicy(max_attempts=2), timer)

    assert scheduler.schedule(1, lambda: None) is False
    assert scheduler.exhausted is True
    assert "ceiling reached" in caplog.text

    scheduler.reset()
    assert scheduler.exhausted is False
