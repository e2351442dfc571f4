"""Sliding-window limiter for outbound provider calls."""

from __future__ import annotations

from collections import deque

from fx_ledger.config import DEFAULT_MAX_CALLS_PER_WINDOW, DEFAULT_WINDOW_SECONDS


class SlidingWindowRateLimiter:
    """Admit at most ``max_calls`` within any trailing ``window_seconds``.

    Timestamps are seconds (any monotonic-enough clock works as long as the
    caller is consistent). The limiter is process local: several processes
    sharing one API key can together exceed the ceiling.
    """

    __slots__ = ("max_calls", "window_seconds", "_calls")

    def __init__(
        self,
        max_calls: int = DEFAULT_MAX_CALLS_PER_WINDOW,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
    ) -> None:
        if max_calls <= 0:
            raise ValueError("max_calls must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._calls: deque[float] = deque()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._calls and self._calls[0] < cutoff:
            self._calls.popleft()

    def try_admit(self, now: float) -> bool:
        """Record ``now`` and return True if a call is allowed, else False."""

        self._prune(now)
        if len(self._calls) >= self.max_calls:
            return False
        self._calls.append(now)
        return True

    def remaining(self, now: float) -> int:
        """Number of calls that would still be admitted at ``now``."""

        self._prune(now)
        return self.max_calls - len(self._calls)

    def __len__(self) -> int:
        return len(self._calls)


__all__ = ["SlidingWindowRateLimiter"]
