from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Tuple

from ..types import Candidate


@dataclass(frozen=True)
class CandidateFields:
    """Names of the JSON fields a candidate record is read from."""

    list_key: str = "candidates"
    id_key: str = "id"
    name_key: str = "name"
    department_key: str = "department"
    weight_key: str = "totalTickets"


def parse_candidates(payload: Any, fields: CandidateFields = CandidateFields()) -> Tuple[Candidate, ...]:
    """Normalize a JSON payload into candidates.

    The payload is either a list of records or an object holding that list
    under ``fields.list_key``. Raises `ValueError` on malformed records or
    duplicate ids.
    """

    if isinstance(payload, Mapping):
        try:
            records = payload[fields.list_key]
        except KeyError as exc:
            raise ValueError(f"Missing candidate list field: {fields.list_key}") from exc
    else:
        records = payload
    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        raise ValueError("candidate list must be a JSON array")

    candidates: List[Candidate] = []
    seen = set()
    for position, record in enumerate(records):
        candidate = _parse_record(record, fields, position)
        if candidate.id in seen:
            raise ValueError(f"Duplicate candidate id: {candidate.id}")
        seen.add(candidate.id)
        candidates.append(candidate)
    return tuple(candidates)


def _parse_record(record: Any, fields: CandidateFields, position: int) -> Candidate:
    if not isinstance(record, Mapping):
        raise ValueError(f"candidate #{position} is not an object")
    try:
        raw_id = record[fields.id_key]
        name = record[fields.name_key]
    except KeyError as exc:
        raise ValueError(f"candidate #{position} is missing field {exc.args[0]!r}") from exc

    weight = record.get(fields.weight_key, 1)
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise ValueError(f"candidate #{position} has a non-integer {fields.weight_key}")
    if weight < 0:
        raise ValueError(f"candidate #{position} has a negative {fields.weight_key}")

    department = record.get(fields.department_key) or ""
    return Candidate(id=str(raw_id), name=str(name), department=str(department), weight=weight)


class CandidateSource(abc.ABC):
    """Abstract provider of the candidate pool."""

    @abc.abstractmethod
    async def fetch_candidates(self) -> Tuple[Candidate, ...]:
        """Return the current candidate pool.

        Implementations should raise `RuntimeError` or `ValueError` if the
        pool is unavailable or fails validation.
        """

    async def close(self) -> None:
        """Optional hook for sources that hold resources."""
        return None
