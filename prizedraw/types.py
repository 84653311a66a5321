from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple


class Phase(IntEnum):
    DELAY = 0
    SCROLLING = 1
    SELECTING = 2
    COMPLETE = 3


@dataclass(frozen=True)
class Candidate:
    """An entrant in the draw; ``weight`` is the number of tickets held."""

    id: str
    name: str
    department: str = ""
    weight: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise TypeError("weight must be an integer ticket count")
        if self.weight < 0:
            raise ValueError("weight must not be negative")


@dataclass(frozen=True)
class DrawState:
    """Snapshot of a draw as seen by presentation collaborators."""

    draw_id: int = 0
    phase: Optional[Phase] = None
    seconds_remaining: Optional[int] = None
    display_value: str = ""
    winner_index: Optional[int] = None
    winners: Tuple[Candidate, ...] = ()
    winner_count: int = 0
    active: bool = False

    @property
    def current_winner(self) -> Optional[Candidate]:
        if self.winner_index is None or self.winner_index >= len(self.winners):
            return None
        return self.winners[self.winner_index]
