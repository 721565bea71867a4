"""
Scripture reference parsing.

Accepts "Book Chapter:Verse" and "Book Chapter:Start-End", including numbered
books ("1 John 4:7-8") and multi-word books ("Song of Solomon 2:1").
"""
import re

from livingword.services.ai.schema import VerseRef

_REFERENCE_PATTERN = re.compile(
    r"^\s*(?P<book>(?:[1-3]\s*)?[A-Za-z][A-Za-z .']*?)\s+"
    r"(?P<chapter>\d+)\s*:\s*(?P<start>\d+)"
    r"(?:\s*[-–—]\s*(?P<end>\d+))?\s*$"
)


class ReferenceParseError(ValueError):
    """Raised when text is not a recognizable scripture reference."""


def parse_reference(text: str) -> VerseRef:
    """
    Parse a reference string into a `VerseRef`.

    Raises:
        ReferenceParseError: if the text does not match "Book C:V[-V]"
    """
    if text is None:
        raise ReferenceParseError("Reference is empty")
    match = _REFERENCE_PATTERN.match(text)
    if not match:
        raise ReferenceParseError(f"Unrecognized scripture reference: {text!r}")

    book = " ".join(match.group("book").split())
    chapter = int(match.group("chapter"))
    start = int(match.group("start"))
    end = int(match.group("end")) if match.group("end") else start
    if chapter < 1 or start < 1 or end < 1:
        raise ReferenceParseError(f"Chapter and verse numbers must be positive: {text!r}")

    return VerseRef(book=book, chapter=chapter, start_verse=start, end_verse=end)


def format_reference(verse_ref: VerseRef) -> str:
    return verse_ref.to_text()
