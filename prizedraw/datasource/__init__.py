from .base import CandidateFields, CandidateSource, parse_candidates
from .http_api import HttpJsonCandidateSource, HttpJsonCandidateSourceConfig
from .json_file import JsonFileCandidateSource

__all__ = [
    "CandidateFields",
    "CandidateSource",
    "HttpJsonCandidateSource",
    "HttpJsonCandidateSourceConfig",
    "JsonFileCandidateSource",
    "parse_candidates",
]
