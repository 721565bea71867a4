"""
ESV Bible API scripture provider (`GET /v3/passage/text/`).

Serves the ESV translation only. Passages come back as plain text with
"[n]" verse markers, which `parse_passage_text` splits into verses.
"""
import asyncio
from typing import List

from livingword.core.logging import get_logger
from livingword.services.ai import parsing
from livingword.services.ai.errors import ParseError, describe_exception
from livingword.services.ai.providers.base import HTTPProviderMixin, ScriptureProvider
from livingword.services.ai.result import OperationResult
from livingword.services.ai.schema import ProviderConfig, ScriptureVerse, VerseRef

logger = get_logger(__name__)

PASSAGE_PARAMS = {
    "include-passage-references": "false",
    "include-verse-numbers": "true",
    "include-first-verse-numbers": "true",
    "include-footnotes": "false",
    "include-headings": "false",
}


class ESVScriptureProvider(HTTPProviderMixin, ScriptureProvider):
    provider_id = "esv"
    display_name = "ESV Bible API"
    supported_translations = ("ESV",)
    priority = 1
    default_base_url = "https://api.esv.org"

    def _client_headers(self, config: ProviderConfig) -> dict:
        return {"Authorization": f"Token {config.api_key.strip()}"}

    async def _passage(self, reference: str) -> str:
        data = await self.client.get_json("/v3/passage/text/", params={"q": reference, **PASSAGE_PARAMS})
        passages = data.get("passages") if isinstance(data, dict) else None
        if not passages:
            raise ParseError("Passage not found in ESV response", provider=self.provider_id)
        return "\n".join(passages).strip()

    async def test(self) -> bool:
        if not self.is_initialized():
            return False
        try:
            text = await self._passage("John 3:16")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("provider_test_failed", provider=self.provider_id, error=describe_exception(exc))
            return False
        return bool(text)

    async def fetch_scripture(self, verse_ref: VerseRef) -> OperationResult[List[ScriptureVerse]]:
        async def call() -> List[ScriptureVerse]:
            text = await self._passage(verse_ref.to_text())
            return parsing.parse_passage_text(text, first_verse=verse_ref.start_verse)

        return await self._run("fetch_scripture", call)
