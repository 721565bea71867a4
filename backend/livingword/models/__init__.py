"""Pydantic models for API requests and responses."""

from .requests import ScoreRequest, ScriptureRequest, TakeawayRequest, ValidateTakeawayRequest, VerseSearchRequest
from .responses import ScoreResponse, ScriptureResponse, TakeawayResponse, ValidateTakeawayResponse, VerseSearchResponse

__all__ = [
    "ScoreRequest",
    "ScriptureRequest",
    "TakeawayRequest",
    "ValidateTakeawayRequest",
    "VerseSearchRequest",
    "ScoreResponse",
    "ScriptureResponse",
    "TakeawayResponse",
    "ValidateTakeawayResponse",
    "VerseSearchResponse",
]
