"""
Request models for the AI endpoints.

Verse references may be given as text ("Romans 12:12-14") or as a structured
object; `resolve_verse_ref` normalizes either form.
"""
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from livingword.services.ai.references import parse_reference
from livingword.services.ai.schema import VerseRef


class VerseRefInput(BaseModel):
    """Either `reference` text or a structured `verse_ref` is required."""

    reference: Optional[str] = Field(None, description='Reference text such as "John 3:16"')
    verse_ref: Optional[VerseRef] = None

    @model_validator(mode="after")
    def require_reference(self):
        if self.verse_ref is None and not (self.reference or "").strip():
            raise ValueError("either reference or verse_ref is required")
        return self

    def resolve_verse_ref(self) -> VerseRef:
        if self.verse_ref is not None:
            return self.verse_ref
        return parse_reference(self.reference or "")


class ScriptureRequest(VerseRefInput):
    translation: str = Field("ESV", min_length=1)


class TakeawayRequest(VerseRefInput):
    pass


class ValidateTakeawayRequest(VerseRefInput):
    takeaway: str = Field(..., min_length=1)


class CachedFeedbackPayload(BaseModel):
    """Feedback previously stored on the verse record."""

    direct_quote: str = ""
    user_application: str = ""
    explanation: str = ""
    feedback: str = ""
    score: int = 0


class ScoreRequest(VerseRefInput):
    direct_quote: str = ""
    user_application: str = Field(..., min_length=1)
    cached: Optional[CachedFeedbackPayload] = None


class VerseSearchRequest(BaseModel):
    description: str = Field(..., min_length=1)
