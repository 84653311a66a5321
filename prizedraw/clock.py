"""Deterministic stand-in for an event loop's timer API."""

from __future__ import annotations

import heapq
from typing import Any, Callable, List, Tuple


class VirtualTimerHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        self._when = when
        self._callback = callback
        self._args = args
        self._cancelled = False

    def when(self) -> float:
        return self._when

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        self._callback(*self._args)


class VirtualClock:
    """Runs ``call_later`` callbacks on virtual time.

    Time only moves when :meth:`advance` or :meth:`run_until_idle` is called,
    so a whole draw can be replayed instantly and deterministically.
    Callbacks due at the same instant fire in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._sequence = 0
        self._queue: List[Tuple[float, int, VirtualTimerHandle]] = []

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> VirtualTimerHandle:
        handle = VirtualTimerHandle(self._now + max(delay, 0.0), callback, args)
        self._sequence += 1
        heapq.heappush(self._queue, (handle.when(), self._sequence, handle))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every timer that falls due. Returns the count fired."""
        deadline = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self._now = when
            handle._run()
            fired += 1
        self._now = deadline
        return fired

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        fired = 0
        while self._queue:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self._now = max(self._now, when)
            handle._run()
            fired += 1
            if fired >= max_callbacks:
                raise RuntimeError(f"VirtualClock did not go idle after {max_callbacks} callbacks")
        return fired
