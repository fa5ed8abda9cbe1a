# src/matchtv/schedule_cache.py

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from .schedule_config import CACHE_DURATION, RETRY_BACKOFF
from .schedule_models import Schedule
from .tvmatchen_scraper import ScheduleError, scrape_schedule

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ScheduleCache:
    """
    Holds the latest successfully scraped Schedule.

    Requests call refresh_if_stale() and then get_schedule(). A refresh runs
    under the exclusive lock and swaps in a complete new Schedule, so readers
    see either the old or the new one. Failed refreshes keep the old Schedule
    and are retried after a growing backoff.
    """

    def __init__(self, loader=scrape_schedule, max_age=CACHE_DURATION,
                 retry_backoff=RETRY_BACKOFF, clock=_utcnow):
        self._loader = loader
        self._max_age = max_age
        self._retry_backoff = retry_backoff
        self._clock = clock
        self._lock = ReadWriteLock()

        self._schedule: Schedule | None = None
        self._last_refresh: datetime | None = None
        self._last_error: str | None = None
        self._next_retry_at: datetime | None = None
        self._backoff: timedelta | None = None
        self._failures = 0

    def _is_stale(self, now: datetime) -> bool:
        if self._next_retry_at is not None and now < self._next_retry_at:
            return False
        if self._last_refresh is None:
            return True
        return now - self._last_refresh > self._max_age

    def _now(self, now: datetime | None) -> datetime:
        if now is None:
            return self._clock()
        # Naive values are taken as local time
        return now.astimezone(timezone.utc)

    def is_stale(self, now: datetime | None = None) -> bool:
        now = self._now(now)
        with self._lock.read():
            return self._is_stale(now)

    def _refresh_locked(self) -> bool:
        logger.info("Refreshing schedule...")
        try:
            schedule = self._loader()
        except ScheduleError as e:
            self._failures += 1
            # Doubles per failure until it reaches max_age, then stays there
            if self._backoff is None:
                self._backoff = min(self._retry_backoff, self._max_age)
            else:
                self._backoff = min(self._backoff * 2, self._max_age)
            self._last_error = str(e)
            self._next_retry_at = self._clock() + self._backoff
            logger.error(f"Schedule refresh failed ({self._failures} in a row), "
                         f"serving previous data, retrying after {self._backoff}: {e}")
            return False

        self._schedule = schedule
        self._last_refresh = self._clock()
        self._last_error = None
        self._next_retry_at = None
        self._backoff = None
        self._failures = 0
        logger.info(f"Schedule refreshed: {len(schedule)} days.")
        return True

    def refresh(self) -> bool:
        """Runs a refresh now. Returns False if it failed."""
        with self._lock.write():
            return self._refresh_locked()

    def refresh_if_stale(self, now: datetime | None = None) -> bool:
        """Refreshes once if the cached schedule is stale.

        Callers that queue up behind a running refresh re-check staleness
        and skip their own fetch. Returns True if this call refreshed
        successfully.
        """
        now = self._now(now)
        with self._lock.read():
            if not self._is_stale(now):
                return False

        with self._lock.write():
            if not self._is_stale(now):
                return False
            return self._refresh_locked()

    def get_schedule(self) -> Schedule | None:
        """The last good Schedule, or None before the first successful refresh."""
        with self._lock.read():
            return self._schedule

    def snapshot(self) -> tuple[Schedule | None, datetime | None]:
        """The current Schedule together with the time it was installed."""
        with self._lock.read():
            return self._schedule, self._last_refresh

    @property
    def last_refresh(self) -> datetime | None:
        with self._lock.read():
            return self._last_refresh

    def status(self) -> dict:
        with self._lock.read():
            schedule = self._schedule or {}
            return {
                'has_schedule': self._schedule is not None,
                'last_refresh': self._last_refresh.isoformat() if self._last_refresh else None,
                'last_error': self._last_error,
                'next_retry_at': self._next_retry_at.isoformat() if self._next_retry_at else None,
                'days': list(schedule),
                'matches_count': sum(len(matches) for matches in schedule.values()),
            }
