"""Weighted sampling without replacement over a candidate pool."""

from __future__ import annotations

import random
from typing import Callable, List, Sequence

from .types import Candidate

RandomSource = Callable[[], float]


def select_winners(
    pool: Sequence[Candidate],
    count: int,
    rng: RandomSource = random.random,
) -> List[Candidate]:
    """Pick up to ``count`` distinct winners, each step weighted by tickets.

    Every step re-normalizes over the candidates still in the pool, so the
    chance of a candidate being picked next is its weight divided by the
    remaining total. The result is in selection order and is shorter than
    ``count`` only when the pool runs out.
    """

    if count <= 0 or not pool:
        return []

    remaining = list(pool)
    winners: List[Candidate] = []
    while remaining and len(winners) < count:
        index = _pick_index(remaining, rng)
        winners.append(remaining.pop(index))
    return winners


def _pick_index(remaining: Sequence[Candidate], rng: RandomSource) -> int:
    total_weight = sum(candidate.weight for candidate in remaining)
    if total_weight <= 0:
        # Nothing carries tickets any more; fall back to a uniform pick.
        return min(int(rng() * len(remaining)), len(remaining) - 1)

    target = rng() * total_weight
    for index, candidate in enumerate(remaining):
        target -= candidate.weight
        # Inclusive: a zero remainder lands on the candidate just consumed.
        if target <= 0:
            return index
    return 0


__all__ = ["RandomSource", "select_winners"]
