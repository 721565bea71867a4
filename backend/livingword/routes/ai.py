"""
AI operation endpoints.

POST /ai/scripture            fetch scripture for a reference and translation
POST /ai/takeaway             key take-away of a passage
POST /ai/takeaway/validate    judge a user's take-away (false is a normal answer)
POST /ai/score                score a user's quote and application, through the feedback cache
POST /ai/verses/search        verses matching a description
POST /ai/test                 coarse health of the preferred provider

An `Error` result is returned as 503: the feature is unavailable, try again later.
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from livingword.core.logging import get_logger
from livingword.models.requests import (
    CachedFeedbackPayload,
    ScoreRequest,
    ScriptureRequest,
    TakeawayRequest,
    ValidateTakeawayRequest,
    VerseRefInput,
    VerseSearchRequest,
)
from livingword.models.responses import (
    ProviderTestResponse,
    ScoreResponse,
    ScriptureResponse,
    TakeawayResponse,
    ValidateTakeawayResponse,
    VerseSearchResponse,
)
from livingword.services.ai.facade import AIService, get_ai_service
from livingword.services.ai.feedback_cache import CachedFeedback, score_with_cache
from livingword.services.ai.references import ReferenceParseError
from livingword.services.ai.result import OperationResult, Success
from livingword.services.ai.schema import VerseRef

logger = get_logger(__name__)
router = APIRouter()


def _verse_ref(body: VerseRefInput) -> VerseRef:
    try:
        return body.resolve_verse_ref()
    except ReferenceParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def _unwrap(result: OperationResult, operation: str):
    if isinstance(result, Success):
        return result.payload
    logger.warning("ai_operation_unavailable", operation=operation, error=result.message)
    raise HTTPException(status_code=503, detail=result.message)


@router.post("/scripture", response_model=ScriptureResponse)
async def fetch_scripture(body: ScriptureRequest, service: AIService = Depends(get_ai_service)):
    verse_ref = _verse_ref(body)
    result = await service.fetch_scripture(verse_ref, body.translation)
    verses = _unwrap(result, "fetch_scripture")
    return ScriptureResponse(reference=verse_ref.to_text(), translation=body.translation, verses=verses)


@router.post("/takeaway", response_model=TakeawayResponse)
async def get_key_takeaway(body: TakeawayRequest, service: AIService = Depends(get_ai_service)):
    reference = _verse_ref(body).to_text()
    takeaway = _unwrap(await service.get_key_takeaway(reference), "get_key_takeaway")
    return TakeawayResponse(reference=reference, takeaway=takeaway)


@router.post("/takeaway/validate", response_model=ValidateTakeawayResponse)
async def validate_key_takeaway(body: ValidateTakeawayRequest, service: AIService = Depends(get_ai_service)):
    reference = _verse_ref(body).to_text()
    result = await service.validate_key_takeaway_response(reference, body.takeaway)
    return ValidateTakeawayResponse(reference=reference, is_accurate=_unwrap(result, "validate_key_takeaway_response"))


@router.post("/score", response_model=ScoreResponse)
async def get_ai_score(body: ScoreRequest, service: AIService = Depends(get_ai_service)):
    """
    Score through the feedback cache.

    When `cached` holds feedback produced by the same trimmed quote and
    application, it is returned without calling a provider. The response's
    `cached` field is the record the caller should store.
    """
    reference = _verse_ref(body).to_text()
    record = CachedFeedback(**body.cached.model_dump()) if body.cached else None

    scored = await score_with_cache(service, record, reference, body.direct_quote, body.user_application)
    score = _unwrap(scored.result, "get_ai_score")
    cached = CachedFeedbackPayload(**asdict(scored.record)) if scored.record else None
    return ScoreResponse(reference=reference, score=score, from_cache=scored.from_cache, cached=cached)


@router.post("/verses/search", response_model=VerseSearchResponse)
async def search_verses(body: VerseSearchRequest, service: AIService = Depends(get_ai_service)):
    result = await service.get_new_verses_based_on_description(body.description)
    return VerseSearchResponse(
        description=body.description,
        verses=_unwrap(result, "get_new_verses_based_on_description"),
    )


@router.post("/test", response_model=ProviderTestResponse)
async def test_provider(service: AIService = Depends(get_ai_service)):
    ok = await service.test()
    return ProviderTestResponse(provider_id=service.get_selected_provider_id(), ok=ok)
