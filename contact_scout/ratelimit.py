# File: contact_scout/ratelimit.py
"""Admission control for outbound discovery requests.

Two independent quotas guard the engine and the sites it crawls:

* a per-client sliding minute window (15 requests), kept in process memory
  and keyed by the caller identity (IP address or equivalent);
* a per-session daily cap (100 requests), kept on the caller's
  :class:`~contact_scout.models.QuotaSession` so it survives restarts.

The two use different identity scopes (client key vs. session). They can
diverge behind a shared IP or a rotating proxy; both are enforced as given.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Tuple

from contact_scout.logger import get_logger
from contact_scout.models import Admission, QuotaSession
from contact_scout.store import Clock, InMemoryStore, KeyValueStore

__all__ = ["RateCounter", "RateGovernor", "MAX_REQUESTS_PER_MINUTE", "MAX_REQUESTS_PER_DAY"]

WINDOW_SIZE = 60.0
DAILY_WINDOW = 24 * 60 * 60.0
MAX_REQUESTS_PER_MINUTE = 15
MAX_REQUESTS_PER_DAY = 100

log = get_logger("ratelimit")


@dataclass(frozen=True, slots=True)
class RateCounter:
    window_start: float
    window_count: int


class RateGovernor:
    """Per-client minute window plus per-session daily cap."""

    def __init__(
        self,
        *,
        per_minute: int = MAX_REQUESTS_PER_MINUTE,
        window: float = WINDOW_SIZE,
        per_day: int = MAX_REQUESTS_PER_DAY,
        daily_window: float = DAILY_WINDOW,
        store: Optional[KeyValueStore[RateCounter]] = None,
        clock: Clock = time.time,
    ) -> None:
        self.per_minute = per_minute
        self.window = window
        self.per_day = per_day
        self.daily_window = daily_window
        self._clock = clock
        # idle clients drop out of the map once their window is long gone
        self._counters: KeyValueStore[RateCounter] = (
            store if store is not None else InMemoryStore(ttl=window * 2, clock=clock)
        )

    def admit(self, client_key: str, session: QuotaSession) -> Admission:
        """Check both quotas and consume one unit of each on success.

        The minute counter is incremented on every call, rejected or not;
        the window still restarts once it has elapsed. The session counter
        only moves when the call is admitted.
        """
        now = self._clock()
        count, window_start = self._counters.update(client_key, lambda c: self._tick(c, now))
        if count > self.per_minute:
            retry_after = max(0.0, self.window - (now - window_start))
            log.info(
                "rate limit: %s made %d requests in the current window (limit %d)",
                client_key,
                count,
                self.per_minute,
            )
            return Admission.rejected("minute", self.per_minute, retry_after)

        if session.expired(now, self.daily_window):
            session.restart(now)
        if session.daily_count >= self.per_day:
            retry_after = session.remaining(now, self.daily_window)
            log.info("daily limit reached for %s (%d/%d)", client_key, session.daily_count, self.per_day)
            return Admission.rejected("day", self.per_day, retry_after)
        session.daily_count += 1
        return Admission.ok()

    def _tick(self, current: Optional[RateCounter], now: float) -> Tuple[RateCounter, Tuple[int, float]]:
        if current is None or now - current.window_start > self.window:
            fresh = RateCounter(window_start=now, window_count=1)
            return fresh, (fresh.window_count, fresh.window_start)
        bumped = RateCounter(window_start=current.window_start, window_count=current.window_count + 1)
        return bumped, (bumped.window_count, bumped.window_start)
