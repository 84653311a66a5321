from __future__ import annotations

import asyncio
import json
import pathlib
from typing import Any, Tuple, Union

from ..types import Candidate
from .base import CandidateFields, CandidateSource, parse_candidates


class JsonFileCandidateSource(CandidateSource):
    """Read the candidate pool from a local JSON file."""

    def __init__(self, path: Union[str, pathlib.Path], fields: CandidateFields = CandidateFields()) -> None:
        self._path = pathlib.Path(path)
        self._fields = fields

    async def fetch_candidates(self) -> Tuple[Candidate, ...]:
        payload = await asyncio.to_thread(self._read_json)
        return parse_candidates(payload, self._fields)

    def _read_json(self) -> Any:
        if not self._path.exists():
            raise FileNotFoundError(f"Candidate file not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as fh:
            try:
                return json.load(fh)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Candidate file is not valid JSON: {self._path}") from exc
