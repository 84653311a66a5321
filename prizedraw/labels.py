from __future__ import annotations

from dataclasses import dataclass

from .types import Candidate, DrawState, Phase


@dataclass(frozen=True)
class DrawLabels:
    """Text templates for the values a draw puts on screen."""

    ready_text: str = "Get ready for the magic..."
    countdown_text: str = "Starting in {seconds}..."
    winner_text: str = "WINNER #{position}: {name}"
    winner_detail_text: str = "{department} • {tickets} tickets"
    complete_text: str = "All winners selected!"

    def ready(self) -> str:
        return self.ready_text

    def countdown(self, seconds: int) -> str:
        return self.countdown_text.format(seconds=seconds)

    def winner(self, position: int, candidate: Candidate) -> str:
        return self.winner_text.format(position=position, name=candidate.name)

    def winner_detail(self, candidate: Candidate) -> str:
        return self.winner_detail_text.format(
            department=candidate.department, tickets=candidate.weight
        )

    def complete(self) -> str:
        return self.complete_text

    def headline(self, state: DrawState) -> str:
        if state.phase is Phase.DELAY:
            return f"STARTING IN {state.seconds_remaining}"
        if state.phase is Phase.SCROLLING:
            return "DRAWING WINNERS"
        if state.phase is Phase.SELECTING:
            return "SELECTING WINNERS"
        if state.phase is Phase.COMPLETE:
            return "DRAW COMPLETE"
        return ""

    def caption(self, state: DrawState) -> str:
        if state.phase is Phase.DELAY:
            return "Building suspense..."
        if state.phase is Phase.SCROLLING:
            return "The magic is happening..."
        if state.phase is Phase.SELECTING:
            position = (state.winner_index or 0) + 1
            return f"Revealing winner {position} of {state.winner_count}..."
        if state.phase is Phase.COMPLETE:
            return self.complete_text
        return ""


DEFAULT_LABELS = DrawLabels()
