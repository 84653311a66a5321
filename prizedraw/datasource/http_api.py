from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Tuple

import requests

from ..types import Candidate
from .base import CandidateFields, CandidateSource, parse_candidates


@dataclass(frozen=True)
class HttpJsonCandidateSourceConfig:
    """Where to fetch the pool and how to read it."""

    url: str
    fields: CandidateFields = CandidateFields()
    timeout_seconds: int = 10


class HttpJsonCandidateSource(CandidateSource):
    """Fetch the candidate pool from a JSON HTTP endpoint."""

    def __init__(self, config: HttpJsonCandidateSourceConfig) -> None:
        self._config = config

    async def fetch_candidates(self) -> Tuple[Candidate, ...]:
        payload = await asyncio.to_thread(
            self._get_json, self._config.url, self._config.timeout_seconds
        )
        return parse_candidates(payload, self._config.fields)

    @staticmethod
    def _get_json(url: str, timeout_seconds: int) -> Any:
        resp = requests.get(url, timeout=timeout_seconds)
        resp.raise_for_status()
        return resp.json()
