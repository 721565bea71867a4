"""
Defensive parsers for raw provider responses.

Models wrap JSON in markdown fences or surround it with prose, so the first
JSON array/object in the text is decoded. Malformed elements of an array are
dropped; a non-empty array with no valid element is a `ParseError`.
"""
import json
import re
from typing import Any, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from livingword.core.logging import get_logger
from livingword.services.ai.errors import ParseError
from livingword.services.ai.schema import ScoreResult, ScriptureVerse, VerseRef

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

_FENCE_PATTERN = re.compile(r"```[a-zA-Z0-9_-]*")
_PASSAGE_VERSE_PATTERN = re.compile(r"\[(\d+)\]\s*([^\[]+?)(?=\s*\[\d+\]|$)", re.DOTALL)
_LEADING_NUMBER_PATTERN = re.compile(r"^(\d+)\.?\s+(.+)$", re.DOTALL)
_BOOLEAN_STRIP = " \t\r\n.!?,;:\"'`*"


def strip_code_fences(text: str) -> str:
    return _FENCE_PATTERN.sub("", text).strip()


def extract_json(text: Optional[str]) -> Any:
    """Decode the first JSON array or object found in `text`."""
    if text is None or not text.strip():
        raise ParseError("Received empty response from AI")

    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    decoder = json.JSONDecoder()
    for index, char in enumerate(cleaned):
        if char not in "[{":
            continue
        try:
            payload, _ = decoder.raw_decode(cleaned, index)
            return payload
        except json.JSONDecodeError:
            continue
    raise ParseError("Response did not contain JSON", details=cleaned[:120])


def _parse_list(payload: Any, model: Type[M], label: str, container_keys: Sequence[str] = ()) -> List[M]:
    if isinstance(payload, dict):
        for key in container_keys:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            payload = [payload]
    if not isinstance(payload, list):
        raise ParseError(f"Expected a JSON array of {label}")
    if not payload:
        return []

    items: List[M] = []
    dropped = 0
    for element in payload:
        try:
            items.append(model.model_validate(element))
        except (ValidationError, TypeError):
            dropped += 1
    if dropped:
        logger.debug("response_elements_dropped", kind=label, dropped=dropped, kept=len(items))
    if not items:
        raise ParseError(f"No valid {label} in response", details=f"{dropped} malformed element(s)")
    return items


def parse_scripture_verses(text: Optional[str]) -> List[ScriptureVerse]:
    """Parse `[{"verse_num": .., "verse_string": ..}]`, ordered by verse number."""
    verses = _parse_list(extract_json(text), ScriptureVerse, "verses", container_keys=("verses",))
    return sorted(verses, key=lambda v: v.verse_num)


def parse_passage_text(text: Optional[str], first_verse: int = 1) -> List[ScriptureVerse]:
    """
    Parse plain passage text such as "[12] Rejoice in hope, [13] Contribute ...".

    Text without verse markers becomes a single verse numbered `first_verse`
    (or by its leading number, when it has one).
    """
    if text is None or not text.strip():
        raise ParseError("Passage not found in response")

    cleaned = text.strip()
    if cleaned.endswith("(ESV)"):
        cleaned = cleaned[: -len("(ESV)")].strip()

    verses: List[ScriptureVerse] = []
    for number, body in _PASSAGE_VERSE_PATTERN.findall(cleaned):
        body = " ".join(body.split())
        if body:
            verses.append(ScriptureVerse(verse_num=int(number), verse_text=body))

    if not verses:
        match = _LEADING_NUMBER_PATTERN.match(cleaned)
        if match:
            verses.append(ScriptureVerse(verse_num=int(match.group(1)), verse_text=" ".join(match.group(2).split())))
        elif cleaned:
            verses.append(ScriptureVerse(verse_num=first_verse, verse_text=" ".join(cleaned.split())))

    if not verses:
        raise ParseError("Passage contained no verse text")
    return sorted(verses, key=lambda v: v.verse_num)


def parse_verse_refs(text: Optional[str]) -> List[VerseRef]:
    """Parse a verse-search answer; `[]` is a valid empty result."""
    return _parse_list(extract_json(text), VerseRef, "verse references", container_keys=("verses", "references"))


def parse_score(text: Optional[str]) -> ScoreResult:
    payload = extract_json(text)
    if not isinstance(payload, dict):
        raise ParseError("Expected a JSON object for the score")
    try:
        return ScoreResult.model_validate(payload)
    except ValidationError as exc:
        raise ParseError("Score response has the wrong shape", details=str(exc.errors()[0].get("msg", ""))) from exc


def parse_boolean(text: Optional[str]) -> bool:
    """Accept "true"/"false" in any case, ignoring quotes and trailing punctuation."""
    if text is None:
        raise ParseError("Received empty response from AI")
    word = strip_code_fences(text).strip(_BOOLEAN_STRIP).lower()
    if word == "true":
        return True
    if word == "false":
        return False
    raise ParseError("Expected true or false", details=text.strip()[:80])


def parse_text(text: Optional[str]) -> str:
    if text is None or not text.strip():
        raise ParseError("Received empty response from AI")
    return text.strip()
