from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


def _bool_from_env(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_from_env(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _float_from_env(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return default
    return float(value)


@dataclass(frozen=True)
class RevealTimings:
    """Durations (in seconds) for each phase of the reveal."""

    countdown_ticks: int = 10
    tick_interval: float = 1.0
    scroll_duration: float = 5.0
    scroll_base_interval: float = 0.05
    scroll_interval_step: float = 0.005
    scroll_max_interval: float = 0.1
    winner_interval: float = 15.0
    completion_grace: float = 2.0

    def validate(self) -> "RevealTimings":
        if self.countdown_ticks < 0:
            raise ValueError("countdown_ticks must not be negative")
        for name in ("tick_interval", "scroll_duration", "winner_interval", "completion_grace"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.scroll_base_interval <= 0:
            raise ValueError("scroll_base_interval must be positive")
        if self.scroll_interval_step < 0:
            raise ValueError("scroll_interval_step must not be negative")
        if self.scroll_max_interval < self.scroll_base_interval:
            raise ValueError("scroll_max_interval must be >= scroll_base_interval")
        return self

    def scaled(self, factor: float) -> "RevealTimings":
        """Return a copy with every duration multiplied by ``factor``."""
        if factor <= 0:
            raise ValueError("time scale must be positive")
        return replace(
            self,
            tick_interval=self.tick_interval * factor,
            scroll_duration=self.scroll_duration * factor,
            scroll_base_interval=self.scroll_base_interval * factor,
            scroll_interval_step=self.scroll_interval_step * factor,
            scroll_max_interval=self.scroll_max_interval * factor,
            winner_interval=self.winner_interval * factor,
            completion_grace=self.completion_grace * factor,
        )

    def total_duration(self, winners: int) -> float:
        """Nominal length of a draw revealing ``winners`` winners."""
        return (
            self.countdown_ticks * self.tick_interval
            + self.scroll_duration
            + winners * self.winner_interval
            + self.completion_grace
        )


@dataclass(frozen=True)
class DataSourceSettings:
    path: str = ""
    url: str = ""
    list_key: str = "candidates"
    id_key: str = "id"
    name_key: str = "name"
    department_key: str = "department"
    weight_key: str = "totalTickets"
    timeout_seconds: int = 10


@dataclass(frozen=True)
class DrawSettings:
    winner_count: int = 1
    rng_seed: Optional[int] = None
    time_scale: float = 1.0
    instant: bool = False
    timings: RevealTimings = RevealTimings()
    datasource: DataSourceSettings = DataSourceSettings()

    def copy(self, **updates) -> "DrawSettings":
        return replace(self, **updates)

    def effective_timings(self) -> RevealTimings:
        if self.time_scale == 1.0:
            return self.timings
        return self.timings.scaled(self.time_scale)


def load_from_environment() -> DrawSettings:
    winner_count = _int_from_env(os.getenv("WINNER_COUNT"), 1)
    if winner_count < 0:
        raise ValueError("WINNER_COUNT must not be negative")
    seed = os.getenv("RNG_SEED")
    rng_seed = int(seed) if seed else None

    defaults = RevealTimings()
    timings = RevealTimings(
        countdown_ticks=_int_from_env(
            os.getenv("REVEAL__COUNTDOWN_TICKS"), defaults.countdown_ticks
        ),
        tick_interval=_float_from_env(
            os.getenv("REVEAL__TICK_INTERVAL"), defaults.tick_interval
        ),
        scroll_duration=_float_from_env(
            os.getenv("REVEAL__SCROLL_DURATION"), defaults.scroll_duration
        ),
        scroll_base_interval=_float_from_env(
            os.getenv("REVEAL__SCROLL_BASE_INTERVAL"), defaults.scroll_base_interval
        ),
        scroll_interval_step=_float_from_env(
            os.getenv("REVEAL__SCROLL_INTERVAL_STEP"), defaults.scroll_interval_step
        ),
        scroll_max_interval=_float_from_env(
            os.getenv("REVEAL__SCROLL_MAX_INTERVAL"), defaults.scroll_max_interval
        ),
        winner_interval=_float_from_env(
            os.getenv("REVEAL__WINNER_INTERVAL"), defaults.winner_interval
        ),
        completion_grace=_float_from_env(
            os.getenv("REVEAL__COMPLETION_GRACE"), defaults.completion_grace
        ),
    ).validate()

    datasource = DataSourceSettings(
        path=os.getenv("DATASOURCE__PATH", ""),
        url=os.getenv("DATASOURCE__URL", ""),
        list_key=os.getenv("DATASOURCE__LIST_KEY", "candidates"),
        id_key=os.getenv("DATASOURCE__ID_KEY", "id"),
        name_key=os.getenv("DATASOURCE__NAME_KEY", "name"),
        department_key=os.getenv("DATASOURCE__DEPARTMENT_KEY", "department"),
        weight_key=os.getenv("DATASOURCE__WEIGHT_KEY", "totalTickets"),
        timeout_seconds=_int_from_env(os.getenv("DATASOURCE__TIMEOUT_SECONDS"), 10),
    )

    return DrawSettings(
        winner_count=winner_count,
        rng_seed=rng_seed,
        time_scale=_float_from_env(os.getenv("TIME_SCALE"), 1.0),
        instant=_bool_from_env(os.getenv("INSTANT"), False),
        timings=timings,
        datasource=datasource,
    )


@lru_cache(maxsize=1)
def load_config(dotenv_path: Optional[str] = None) -> DrawSettings:
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        default_path = pathlib.Path(".env")
        if default_path.exists():
            load_dotenv(default_path)
    return load_from_environment()
