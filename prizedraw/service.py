from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from dataclasses import replace
from typing import List, Optional, Sequence, TextIO

from .clock import VirtualClock
from .config import DrawSettings, load_config
from .datasource import (
    CandidateFields,
    CandidateSource,
    HttpJsonCandidateSource,
    HttpJsonCandidateSourceConfig,
    JsonFileCandidateSource,
)
from .labels import DEFAULT_LABELS, DrawLabels
from .scheduler import RevealScheduler, run_draw
from .types import Candidate, DrawState, Phase


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


class ConsolePresenter:
    """Prints the parts of a draw worth showing on a terminal.

    Scrolling names change many times a second, so they are only logged at
    DEBUG level.
    """

    def __init__(self, stream: TextIO = sys.stdout, labels: DrawLabels = DEFAULT_LABELS) -> None:
        self._stream = stream
        self._labels = labels
        self._last_phase: Optional[Phase] = None
        self._logger = logging.getLogger("prizedraw.service")

    def __call__(self, state: DrawState) -> None:
        if state.phase is None:
            return
        if state.phase != self._last_phase:
            self._last_phase = state.phase
            self._write(f"== {self._labels.headline(state)} ==")
            self._write(self._labels.caption(state))
        if state.phase is Phase.DELAY:
            self._write(state.display_value)
        elif state.phase is Phase.SCROLLING:
            self._logger.debug("scrolling: %s", state.display_value)
        elif state.phase is Phase.SELECTING and state.current_winner is not None:
            self._write(state.display_value)
            self._write(f"   {self._labels.winner_detail(state.current_winner)}")
            self._write(self._labels.caption(state))
        elif state.phase is Phase.COMPLETE:
            self._write(state.display_value)

    def _write(self, line: str) -> None:
        print(line, file=self._stream)


def build_datasource(settings: DrawSettings) -> CandidateSource:
    ds_settings = settings.datasource
    fields = CandidateFields(
        list_key=ds_settings.list_key,
        id_key=ds_settings.id_key,
        name_key=ds_settings.name_key,
        department_key=ds_settings.department_key,
        weight_key=ds_settings.weight_key,
    )
    if ds_settings.path:
        return JsonFileCandidateSource(ds_settings.path, fields)
    if ds_settings.url:
        return HttpJsonCandidateSource(
            HttpJsonCandidateSourceConfig(
                url=ds_settings.url,
                fields=fields,
                timeout_seconds=ds_settings.timeout_seconds,
            )
        )
    raise RuntimeError("Neither DATASOURCE__PATH nor DATASOURCE__URL is configured.")


def apply_overrides(settings: DrawSettings, args: argparse.Namespace) -> DrawSettings:
    updates = {}
    if args.winners is not None:
        if args.winners < 0:
            raise ValueError("--winners must not be negative")
        updates["winner_count"] = args.winners
    if args.seed is not None:
        updates["rng_seed"] = args.seed
    if args.time_scale is not None:
        updates["time_scale"] = args.time_scale
    if args.instant:
        updates["instant"] = True
    if args.candidates or args.url:
        updates["datasource"] = replace(
            settings.datasource, path=args.candidates or "", url=args.url or ""
        )
    return settings.copy(**updates) if updates else settings


def draw_on_virtual_clock(
    scheduler: RevealScheduler,
    clock: VirtualClock,
    pool: Sequence[Candidate],
    winner_count: int,
) -> List[Candidate]:
    winners: List[Candidate] = []
    scheduler.start(pool, winner_count, winners.extend)
    clock.run_until_idle()
    return winners


async def run(args: argparse.Namespace, stream: TextIO = sys.stdout) -> List[Candidate]:
    settings = apply_overrides(load_config(args.env_file), args)
    configure_logging(args.verbose)
    logger = logging.getLogger("prizedraw.service")

    datasource = build_datasource(settings)
    try:
        pool = await datasource.fetch_candidates()
    finally:
        await datasource.close()
    logger.info("Loaded %d candidates (%d tickets)", len(pool), sum(c.weight for c in pool))

    rng = random.Random(settings.rng_seed).random
    timings = settings.effective_timings()
    clock = VirtualClock() if settings.instant else None
    scheduler = RevealScheduler(timings, loop=clock, rng=rng)
    scheduler.subscribe(ConsolePresenter(stream))

    if clock is not None:
        winners = draw_on_virtual_clock(scheduler, clock, pool, settings.winner_count)
    else:
        winners = await run_draw(scheduler, pool, settings.winner_count)

    print("Winners:", file=stream)
    for position, winner in enumerate(winners, start=1):
        print(f"{position}. {winner.name} ({winner.department}, {winner.weight} tickets)", file=stream)
    return winners


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Weighted prize draw with a timed reveal")
    parser.add_argument("--env-file", type=str, default=None, help="Path to .env file with settings")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--candidates", type=str, default=None, help="JSON file holding the candidate pool")
    source.add_argument("--url", type=str, default=None, help="HTTP endpoint returning the candidate pool")
    parser.add_argument("--winners", type=int, default=None, help="Number of winners to draw")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible draw")
    parser.add_argument(
        "--time-scale", type=float, default=None, help="Multiply every reveal duration (e.g. 0.1)"
    )
    parser.add_argument(
        "--instant", action="store_true", help="Run the reveal on virtual time and finish immediately."
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging (default INFO)."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("Draw stopped by user.")


if __name__ == "__main__":
    main()
