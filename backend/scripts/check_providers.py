"""
Check which AI providers are configured and reachable.

Reads provider settings from the environment (and backend/.env if present),
configures every built-in provider, then runs each available provider's
round-trip test. Optionally fetches one passage through the full fallback
chain.

Usage:
    python scripts/check_providers.py
    python scripts/check_providers.py --reference "Romans 12:12-14" --translation ESV
"""
import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add parent directory to path to import livingword modules
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
    print(f"Loaded environment from {env_path}")
else:
    print(f"Note: .env file not found at {env_path}")
    print("   Environment variables will be read from system environment")

from livingword.core.config import get_ai_settings, get_attempt_timeout_seconds, get_http_timeout_seconds
from livingword.services.ai.facade import AIService
from livingword.services.ai.providers import register_default_providers
from livingword.services.ai.references import ReferenceParseError, parse_reference
from livingword.services.ai.registry import ProviderRegistry
from livingword.services.ai.result import Success


async def check_providers(reference: str = None, translation: str = "ESV") -> bool:
    print("=" * 60)
    print("Checking AI Providers")
    print("=" * 60)
    print()

    registry = ProviderRegistry()
    register_default_providers(registry, http_timeout_seconds=get_http_timeout_seconds())
    service = AIService(registry, attempt_timeout_seconds=get_attempt_timeout_seconds())

    print("Step 1: Configuring providers from environment...")
    report = service.configure(get_ai_settings())
    for provider_id, ok in report.results.items():
        print(f"{'[OK]' if ok else '[X]'} {provider_id}")
    for error in report.errors:
        print(f"   {error}")
    if not report.has_successful_configurations:
        print("[X] No provider could be configured. Set at least one <PROVIDER>_API_KEY.")
        return False
    print()

    print("Step 2: Testing available providers...")
    reachable = 0
    for provider in [*registry.available_scripture_list(), *registry.available_list()]:
        ok = await provider.test()
        reachable += int(ok)
        print(f"{'[OK]' if ok else '[X]'} {provider.display_name} (priority {provider.priority})")
    print()

    if reference:
        print(f"Step 3: Fetching {reference} ({translation}) through the fallback chain...")
        try:
            verse_ref = parse_reference(reference)
        except ReferenceParseError as e:
            print(f"[X] {e}")
            return False
        result = await service.fetch_scripture(verse_ref, translation)
        if isinstance(result, Success):
            for verse in result.payload:
                print(f"   [{verse.verse_num}] {verse.verse_text}")
            print(f"[OK] Retrieved {len(result.payload)} verse(s)")
        else:
            print(f"[X] {result.message}")
            return False
        print()

    print("=" * 60)
    stats = registry.statistics()
    print(f"{reachable} of {stats.available_providers} configured provider(s) reachable")
    print("=" * 60)
    return reachable > 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Check configured AI providers")
    parser.add_argument("--reference", help='Optional passage to fetch, e.g. "John 3:16"')
    parser.add_argument("--translation", default="ESV", help="Translation for --reference (default: ESV)")
    args = parser.parse_args()

    success = asyncio.run(check_providers(args.reference, args.translation))
    sys.exit(0 if success else 1)
