"""Retry policy and deferred-reconnect bookkeeping for the realtime channel."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Literal

from itas_realtime.application.ports.timer import Timer, TimerHandle

logger = logging.getLogger(__name__)

Backoff = Literal["fixed", "exponential"]

DEFAULT_INTERVAL_SECONDS = 3.0
DEFAULT_MAX_INTERVAL_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ReconnectPolicy:
    interval: float = DEFAULT_INTERVAL_SECONDS
    max_attempts: int | None = None
    enabled: bool = True
    backoff: Backoff = "fixed"
    max_interval: float = DEFAULT_MAX_INTERVAL_SECONDS
    jitter: float = 0.0

    def should_retry(self, attempt: int) -> bool:
        if not self.enabled:
            return False
        if self.max_attempts is not None and attempt >= self.max_attempts - 1:
            return False
        return True

    def delay_for(self, attempt: int) -> float:
        if self.backoff == "exponential":
            delay = min(self.interval * (2 ** attempt), self.max_interval)
        else:
            delay = self.interval
        if self.jitter > 0:
            delay += delay * random.uniform(0, self.jitter)
        return delay


class ReconnectScheduler:
    """Holds at most one pending reconnect call at a time."""

    def __init__(self, policy: ReconnectPolicy, timer: Timer) -> None:
        self._policy = policy
        self._timer = timer
        self._handle: TimerHandle | None = None
        self._exhausted = False

    @property
    def policy(self) -> ReconnectPolicy:
        return self._policy

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def schedule(self, attempt: int, callback: Callable[[], Any]) -> bool:
        if not self._policy.should_retry(attempt):
            if self._policy.enabled:
                self._exhausted = True
                logger.warning(
                    "Reconnect ceiling reached after attempt %d (max=%s), giving up",
                    attempt,
                    self._policy.max_attempts,
                )
            return False

        self.cancel()
        delay = self._policy.delay_for(attempt)
        self._handle = self._timer.call_later(delay, self._fire, callback)
        logger.debug("Reconnect attempt %d scheduled in %.2fs", attempt + 1, delay)
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self) -> None:
        self._exhausted = False

    def _fire(self, callback: Callable[[], Any]) -> None:
        self._handle = None
        callback()
