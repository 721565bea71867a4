"""
Unit tests for scripture reference parsing.
"""
import pytest

from livingword.services.ai.references import ReferenceParseError, format_reference, parse_reference
from livingword.services.ai.schema import VerseRef


@pytest.mark.parametrize(
    "text,expected",
    [
        ("John 3:16", ("John", 3, 16, 16)),
        ("Romans 12:12-14", ("Romans", 12, 12, 14)),
        ("1 John 4:7-8", ("1 John", 4, 7, 8)),
        ("Song of Solomon 2:1", ("Song of Solomon", 2, 1, 1)),
        ("  Psalm 23 : 1 – 3 ", ("Psalm", 23, 1, 3)),
    ],
)
def test_parse_reference(text, expected):
    ref = parse_reference(text)
    assert (ref.book, ref.chapter, ref.start_verse, ref.end_verse) == expected


@pytest.mark.parametrize("text", ["", "John", "John 3", "3:16", "John 0:1", "John three:sixteen"])
def test_parse_reference_rejects_invalid(text):
    with pytest.raises(ReferenceParseError):
        parse_reference(text)


def test_reversed_range_is_tolerated():
    ref = parse_reference("Mark 1:5-3")
    assert (ref.start_verse, ref.end_verse) == (5, 3)


def test_format_reference():
    assert format_reference(VerseRef(book="John", chapter=3, start_verse=16, end_verse=16)) == "John 3:16"
    assert format_reference(VerseRef(book="Romans", chapter=12, startVerse=12, endVerse=14)) == "Romans 12:12-14"
