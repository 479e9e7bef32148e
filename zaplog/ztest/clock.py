"""A controllable clock for tests that depend on the passage of time."""

from __future__ import annotations

import queue
import threading
from datetime import datetime, timedelta, timezone

__all__ = ["Ticker", "MockClock"]


class Ticker:
    """Delivers the mock time to ``ticks`` each time its interval elapses."""

    def __init__(self, clock: MockClock, interval: timedelta, start: datetime) -> None:
        self.ticks: queue.Queue[datetime] = queue.Queue()
        self.interval = interval
        self._clock = clock
        self._next = start + interval

    def stop(self) -> None:
        """Stop delivering ticks."""
        self._clock._remove(self)


class MockClock:
    """A clock that starts at the Unix epoch and moves only when told to."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._now = datetime.fromtimestamp(0, timezone.utc)
        self._tickers: list[Ticker] = []

    def now(self) -> datetime:
        """Report the current mock time."""
        with self._lock:
            return self._now

    def new_ticker(self, interval: timedelta) -> Ticker:
        """Return a ticker that fires every ``interval`` of mock time."""
        if interval <= timedelta(0):
            raise ValueError("non-positive interval for new_ticker")
        with self._lock:
            ticker = Ticker(self, interval, self._now)
            self._tickers.append(ticker)
        return ticker

    def add(self, delta: timedelta) -> None:
        """Move time forward by ``delta``, firing due tickers in order."""
        with self._lock:
            target = self._now + delta
            while True:
                due = [t for t in self._tickers if t._next <= target]
                if not due:
                    break
                ticker = min(due, key=lambda t: t._next)
                self._now = ticker._next
                ticker._next += ticker.interval
                ticker.ticks.put(self._now)
            self._now = max(self._now, target)

    def _remove(self, ticker: Ticker) -> None:
        with self._lock:
            if ticker in self._tickers:
                self._tickers.remove(ticker)