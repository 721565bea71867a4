"""
Unit tests for the feedback cache policy.
"""
from unittest.mock import AsyncMock

import pytest

from livingword.services.ai.feedback_cache import (
    CachedFeedback,
    is_cache_valid,
    lookup,
    record_from_score,
    score_with_cache,
)
from livingword.services.ai.result import Error, Success
from livingword.services.ai.schema import ScoreResult

QUOTE = "For God so loved the world, that he gave his only Son"
APPLICATION = "I want to show that same sacrificial love to my neighbors."

STORED = CachedFeedback(
    direct_quote=QUOTE,
    user_application=APPLICATION,
    explanation="The application reflects the passage's focus on God's love.",
    feedback="Consider a concrete act of service this week.",
    score=85,
)


def test_identical_input_is_a_hit():
    cached = lookup(STORED, QUOTE, APPLICATION)

    assert cached is not None
    assert cached.context_score == 85
    assert cached.context_explanation == STORED.explanation
    assert cached.application_feedback == STORED.feedback


def test_surrounding_whitespace_is_ignored():
    assert is_cache_valid(STORED, f"  {QUOTE}\n", f"{APPLICATION} ")


def test_any_content_change_is_a_miss():
    assert lookup(STORED, QUOTE, APPLICATION + "!") is None
    assert lookup(STORED, QUOTE.lower(), APPLICATION) is None
    assert lookup(STORED, QUOTE, APPLICATION.replace("  ", " ").replace("my", "our")) is None


def test_missing_or_incomplete_record_is_a_miss():
    assert not is_cache_valid(None, QUOTE, APPLICATION)
    assert not is_cache_valid(CachedFeedback(QUOTE, APPLICATION, "", "feedback", 85), QUOTE, APPLICATION)
    assert not is_cache_valid(CachedFeedback(QUOTE, APPLICATION, "explanation", "feedback", 0), QUOTE, APPLICATION)


def test_blank_feedback_is_a_miss():
    assert not is_cache_valid(CachedFeedback(QUOTE, APPLICATION, "explanation", "", 85), QUOTE, APPLICATION)
    assert lookup(CachedFeedback(QUOTE, APPLICATION, "explanation", "  \n", 85), QUOTE, APPLICATION) is None


def test_record_from_score_stores_trimmed_input():
    score = ScoreResult(context_score=70, context_explanation="ok", application_feedback="more detail")

    record = record_from_score(f" {QUOTE} ", f"{APPLICATION}\n", score)

    assert record == CachedFeedback(QUOTE, APPLICATION, "ok", "more detail", 70)


@pytest.mark.asyncio
async def test_hit_makes_no_remote_call():
    service = AsyncMock()

    scored = await score_with_cache(service, STORED, "John 3:16", QUOTE, APPLICATION)

    assert scored.from_cache is True
    assert scored.record is STORED
    assert isinstance(scored.result, Success)
    service.get_ai_score.assert_not_called()


@pytest.mark.asyncio
async def test_miss_scores_and_replaces_record_wholesale():
    new_score = ScoreResult(context_score=92, context_explanation="Precise", application_feedback="Well applied")
    service = AsyncMock()
    service.get_ai_score.return_value = Success(new_score)
    repository = AsyncMock()

    scored = await score_with_cache(
        service, STORED, "John 3:16", QUOTE, "I will pray for my enemies.", repository=repository, verse_id=7
    )

    service.get_ai_score.assert_awaited_once_with("John 3:16", QUOTE, "I will pray for my enemies.")
    assert scored.from_cache is False
    assert scored.result == Success(new_score)
    assert scored.record == CachedFeedback(QUOTE, "I will pray for my enemies.", "Precise", "Well applied", 92)
    repository.save_feedback.assert_awaited_once_with(7, scored.record)


@pytest.mark.asyncio
async def test_error_keeps_previous_record():
    service = AsyncMock()
    service.get_ai_score.return_value = Error("All providers failed for get_ai_score: timeout")
    repository = AsyncMock()

    scored = await score_with_cache(
        service, STORED, "John 3:16", "changed quote", APPLICATION, repository=repository, verse_id=7
    )

    assert isinstance(scored.result, Error)
    assert scored.record is STORED
    repository.save_feedback.assert_not_called()


@pytest.mark.asyncio
async def test_repository_failure_still_returns_score():
    new_score = ScoreResult(context_score=60, context_explanation="Partly", application_feedback="")
    service = AsyncMock()
    service.get_ai_score.return_value = Success(new_score)
    repository = AsyncMock()
    repository.save_feedback.side_effect = RuntimeError("database locked")

    scored = await score_with_cache(service, None, "John 3:16", QUOTE, APPLICATION, repository=repository, verse_id=1)

    assert scored.result == Success(new_score)
    assert scored.record.score == 60
