"""
Response models for API endpoints.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from livingword.models.requests import CachedFeedbackPayload
from livingword.services.ai.schema import RegistryStatistics, ScoreResult, ScriptureVerse, VerseRef


class ScriptureResponse(BaseModel):
    reference: str
    translation: str
    verses: List[ScriptureVerse]


class TakeawayResponse(BaseModel):
    reference: str
    takeaway: str


class ValidateTakeawayResponse(BaseModel):
    reference: str
    is_accurate: bool


class ScoreResponse(BaseModel):
    reference: str
    score: ScoreResult
    from_cache: bool
    cached: Optional[CachedFeedbackPayload] = None


class VerseSearchResponse(BaseModel):
    description: str
    verses: List[VerseRef]


class ProviderTestResponse(BaseModel):
    provider_id: Optional[str] = None
    ok: bool


class ProvidersHealthResponse(BaseModel):
    status: str
    initialized: bool
    initialization_error: Optional[str] = None
    selected_provider_id: Optional[str] = None
    configured_provider_ids: List[str] = []
    statistics: RegistryStatistics
    providers: List[Dict[str, Any]]
