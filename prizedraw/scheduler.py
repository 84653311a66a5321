from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from .config import RevealTimings
from .labels import DEFAULT_LABELS, DrawLabels
from .sampler import RandomSource, select_winners
from .types import Candidate, DrawState, Phase

CompletionCallback = Callable[[List[Candidate]], Any]
StateListener = Callable[[DrawState], Any]


class TimerHandleProtocol(Protocol):
    def cancel(self) -> None:
        ...


class TimerLoop(Protocol):
    """Anything exposing ``call_later``: an asyncio loop or a ``VirtualClock``."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandleProtocol:
        ...


class RevealScheduler:
    """Sequences a draw through delay, scrolling, selecting and complete.

    Every wait is a single ``call_later`` on the configured loop, so at most
    one timer is pending per draw. Each scheduled callback carries the draw
    generation it belongs to; ``stop()`` and ``start()`` bump the generation
    so callbacks from an earlier draw are ignored even if they still fire.
    """

    def __init__(
        self,
        timings: Optional[RevealTimings] = None,
        *,
        loop: Optional[TimerLoop] = None,
        rng: Optional[RandomSource] = None,
        labels: Optional[DrawLabels] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._timings = (timings or RevealTimings()).validate()
        self._loop = loop
        self._rng = rng or random.random
        self._labels = labels or DEFAULT_LABELS
        self._logger = logger or logging.getLogger("prizedraw.reveal")
        self._listeners: List[StateListener] = []

        self._generation = 0
        self._timer_loop: Optional[TimerLoop] = None
        self._pending: Optional[TimerHandleProtocol] = None
        self._on_complete: Optional[CompletionCallback] = None
        self._pool: Tuple[Candidate, ...] = ()
        self._winner_count = 0
        self._reset()

    def _reset(self) -> None:
        self._active = False
        self._phase: Optional[Phase] = None
        self._display = ""
        self._seconds_remaining: Optional[int] = None
        self._scroll_index = 0
        self._scroll_interval = self._timings.scroll_base_interval
        self._scroll_elapsed = 0.0
        self._winners: Tuple[Candidate, ...] = ()
        self._winner_index: Optional[int] = None

    # ------------------------------------------------------------------ API

    @property
    def timings(self) -> RevealTimings:
        return self._timings

    @property
    def active(self) -> bool:
        return self._active

    @property
    def phase(self) -> Optional[Phase]:
        return self._phase

    @property
    def pending_timers(self) -> int:
        return 0 if self._pending is None else 1

    @property
    def state(self) -> DrawState:
        return DrawState(
            draw_id=self._generation,
            phase=self._phase,
            seconds_remaining=self._seconds_remaining,
            display_value=self._display,
            winner_index=self._winner_index,
            winners=self._winners,
            winner_count=self._winner_count,
            active=self._active,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for state snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(
        self,
        pool: Sequence[Candidate],
        winner_count: int,
        on_complete: CompletionCallback,
    ) -> int:
        if winner_count < 0:
            raise ValueError("winner_count must not be negative")
        if self._active:
            self._logger.warning(
                "Draw %s still active (phase=%s); stopping it before starting a new one.",
                self._generation,
                self._phase.name if self._phase is not None else None,
            )
            self.stop()

        self._timer_loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        self._generation += 1
        self._reset()
        self._pool = tuple(pool)
        self._winner_count = winner_count
        self._on_complete = on_complete
        self._active = True

        self._logger.info(
            "Draw %s started: %d candidates, %d winner(s) requested",
            self._generation,
            len(self._pool),
            winner_count,
        )
        self._enter_delay()
        return self._generation

    def stop(self) -> None:
        if not self._active:
            return
        self._logger.info(
            "Draw %s stopped during %s",
            self._generation,
            self._phase.name if self._phase is not None else None,
        )
        self._cancel_pending()
        self._generation += 1
        self._on_complete = None
        self._pool = ()
        self._winner_count = 0
        self._reset()

    # -------------------------------------------------------------- phases

    def _enter_delay(self) -> None:
        self._phase = Phase.DELAY
        self._seconds_remaining = self._timings.countdown_ticks
        self._display = self._labels.ready()
        if self._seconds_remaining <= 0:
            if self._emit():
                self._enter_scrolling()
            return
        self._schedule(self._timings.tick_interval, self._countdown_tick)
        self._emit()

    def _countdown_tick(self) -> None:
        assert self._seconds_remaining is not None
        self._seconds_remaining -= 1
        if self._seconds_remaining <= 0:
            self._seconds_remaining = 0
            self._enter_scrolling()
            return
        self._display = self._labels.countdown(self._seconds_remaining)
        self._schedule(self._timings.tick_interval, self._countdown_tick)
        self._emit()

    def _enter_scrolling(self) -> None:
        self._logger.info("Draw %s: countdown finished, scrolling names", self._generation)
        self._phase = Phase.SCROLLING
        self._seconds_remaining = None
        self._scroll_index = 0
        self._scroll_elapsed = 0.0
        self._scroll_interval = self._timings.scroll_base_interval
        if not self._pool:
            self._display = ""
            if self._emit():
                self._enter_selecting()
            return
        self._scroll_step(first=True)

    def _scroll_step(self, first: bool = False) -> None:
        if not first and self._scroll_elapsed >= self._timings.scroll_duration:
            self._enter_selecting()
            return

        candidate = self._pool[self._scroll_index]
        self._display = candidate.name
        self._scroll_index = (self._scroll_index + 1) % len(self._pool)

        interval = self._scroll_interval
        self._scroll_elapsed += interval
        self._scroll_interval = min(
            interval + self._timings.scroll_interval_step, self._timings.scroll_max_interval
        )
        self._logger.debug(
            "Draw %s: scrolling %s (next in %.3fs)", self._generation, candidate.name, interval
        )
        self._schedule(interval, self._scroll_step)
        self._emit()

    def _enter_selecting(self) -> None:
        self._phase = Phase.SELECTING
        self._winners = tuple(select_winners(self._pool, self._winner_count, self._rng))
        self._logger.info(
            "Draw %s: selected %d winner(s): %s",
            self._generation,
            len(self._winners),
            ", ".join(winner.id for winner in self._winners),
        )
        if not self._winners:
            self._display = ""
            if self._emit():
                self._enter_complete()
            return
        self._reveal(0)

    def _reveal(self, index: int) -> None:
        if index >= len(self._winners):
            self._enter_complete()
            return
        winner = self._winners[index]
        self._winner_index = index
        self._display = self._labels.winner(index + 1, winner)
        self._schedule(self._timings.winner_interval, self._reveal, index + 1)
        self._emit()

    def _enter_complete(self) -> None:
        self._phase = Phase.COMPLETE
        self._display = self._labels.complete()
        self._schedule(self._timings.completion_grace, self._finish)
        self._emit()

    def _finish(self) -> None:
        callback = self._on_complete
        winners = list(self._winners)
        self._on_complete = None
        self._active = False
        self._logger.info("Draw %s complete with %d winner(s)", self._generation, len(winners))
        if callback is not None:
            callback(winners)

    # ------------------------------------------------------------- plumbing

    def _schedule(self, delay: float, step: Callable[..., None], *args: Any) -> None:
        assert self._timer_loop is not None
        self._pending = self._timer_loop.call_later(delay, self._fire, self._generation, step, args)

    def _fire(self, generation: int, step: Callable[..., None], args: Tuple[Any, ...]) -> None:
        if generation != self._generation or not self._active:
            self._logger.debug("Ignoring stale timer from draw %s", generation)
            return
        self._pending = None
        step(*args)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _emit(self) -> bool:
        """Notify listeners; returns False if a listener tore the draw down."""
        generation = self._generation
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self._logger.exception("Draw state listener %r failed", listener)
        return generation == self._generation and self._active


async def run_draw(
    scheduler: RevealScheduler,
    pool: Sequence[Candidate],
    winner_count: int,
) -> List[Candidate]:
    """Run one draw on the running event loop and return its winners."""
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[List[Candidate]]" = loop.create_future()

    def _resolve(winners: List[Candidate]) -> None:
        if not future.done():
            future.set_result(winners)

    scheduler.start(pool, winner_count, _resolve)
    try:
        return await future
    finally:
        scheduler.stop()


__all__ = [
    "CompletionCallback",
    "RevealScheduler",
    "StateListener",
    "TimerLoop",
    "run_draw",
]
