"""
Feedback cache policy for AI scoring.

A verse record keeps the last AI score together with the exact quote and
application text that produced it. The stored feedback may be reused only
when the newly submitted trimmed quote and application equal the stored
trimmed strings; any difference is a miss. The policy functions are pure so
they can be tested without a network.
"""
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from livingword.core.logging import get_logger
from livingword.core.metrics import record_feedback_cache_lookup
from livingword.services.ai.result import OperationResult, Success
from livingword.services.ai.schema import ScoreResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedFeedback:
    """AI feedback fields stored on a verse record; replaced as one unit."""

    direct_quote: str = ""
    user_application: str = ""
    explanation: str = ""
    feedback: str = ""
    score: int = 0


@dataclass(frozen=True)
class ScoredFeedback:
    """Outcome of `score_with_cache`: the result, the record to keep, and whether it was a hit."""

    result: OperationResult[ScoreResult]
    record: Optional[CachedFeedback]
    from_cache: bool


class FeedbackRepository(Protocol):
    """Persistence collaborator that stores all five feedback fields together."""

    async def save_feedback(self, verse_id: Any, record: CachedFeedback) -> None:
        ...


def is_cache_valid(record: Optional[CachedFeedback], direct_quote: str, user_application: str) -> bool:
    if record is None:
        return False
    if not record.explanation.strip() or not record.feedback.strip() or record.score <= 0:
        return False
    return (
        record.direct_quote.strip() == (direct_quote or "").strip()
        and record.user_application.strip() == (user_application or "").strip()
    )


def lookup(record: Optional[CachedFeedback], direct_quote: str, user_application: str) -> Optional[ScoreResult]:
    """Return the stored score when the cache is valid for this input, else None."""
    hit = is_cache_valid(record, direct_quote, user_application)
    record_feedback_cache_lookup(hit)
    if not hit:
        return None
    return ScoreResult(
        context_score=record.score,
        context_explanation=record.explanation,
        application_feedback=record.feedback,
    )


def record_from_score(direct_quote: str, user_application: str, score: ScoreResult) -> CachedFeedback:
    return CachedFeedback(
        direct_quote=(direct_quote or "").strip(),
        user_application=(user_application or "").strip(),
        explanation=score.context_explanation,
        feedback=score.application_feedback,
        score=score.context_score,
    )


async def score_with_cache(
    service,
    record: Optional[CachedFeedback],
    verse_ref: str,
    direct_quote: str,
    user_application: str,
    repository: Optional[FeedbackRepository] = None,
    verse_id: Any = None,
) -> ScoredFeedback:
    """
    Score through the cache.

    On a hit no remote call is made. On a miss the service's scoring operation
    runs; a successful score yields a fresh record (saved through
    `repository` when given), while an error leaves the old record untouched.
    """
    cached = lookup(record, direct_quote, user_application)
    if cached is not None:
        logger.debug("feedback_cache_hit", verse_ref=verse_ref)
        return ScoredFeedback(result=Success(cached), record=record, from_cache=True)

    result = await service.get_ai_score(verse_ref, direct_quote, user_application)
    if not isinstance(result, Success):
        return ScoredFeedback(result=result, record=record, from_cache=False)

    new_record = record_from_score(direct_quote, user_application, result.payload)
    if repository is not None and verse_id is not None:
        try:
            await repository.save_feedback(verse_id, new_record)
        except Exception as exc:
            # the score is still returned; the next lookup misses and rescores
            logger.error("feedback_cache_store_failed", verse_id=verse_id, error=str(exc), exc_info=True)
    return ScoredFeedback(result=result, record=new_record, from_cache=False)
