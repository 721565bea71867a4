"""
Prompt text shared by the prompt-driven providers.

The wording is not a contract; the JSON shapes requested here are what
`parsing.py` decodes.
"""
from livingword.services.ai.schema import VerseRef

SYSTEM_INSTRUCTION = (
    "You are a careful assistant for Bible study and scripture memorization. "
    "Answer accurately and concisely. When asked for JSON, respond with JSON only, "
    "without markdown or commentary."
)

SCRIPTURE_INSTRUCTION = (
    "You retrieve Bible text. Quote the requested translation exactly. "
    "Respond with a JSON array only."
)

TAKEAWAY_INSTRUCTION = (
    "You explain Bible passages. Give the key take-away of the passage in a short "
    "paragraph, faithful to its context."
)

VALIDATION_INSTRUCTION = (
    "You review short summaries of Bible passages. Answer with the single word "
    "true or false."
)


def scripture_prompt(verse_ref: VerseRef, translation: str) -> str:
    return (
        f"Provide the scripture text for {verse_ref.to_text()} from the {translation} translation.\n"
        "Respond in the following JSON format, one object per verse in order:\n"
        '[{"verse_num": 1, "verse_string": "verse text"}]'
    )


def takeaway_prompt(verse_ref: str) -> str:
    return f"Tell me the key take-away for {verse_ref}"


def score_prompt(verse_ref: str, user_application: str, direct_quote: str = "") -> str:
    quote_section = ""
    if direct_quote.strip():
        quote_section = f"The user quoted the passage as:\n\n{direct_quote.strip()}\n\n"
    return (
        f"Score the user's understanding of Bible verse {verse_ref}.\n\n"
        f"{quote_section}"
        f"The user described the context and their application as:\n\n{user_application.strip()}\n\n"
        '"ContextScore" is an integer from 0 to 100 rating contextual accuracy. '
        '"ContextExplanation" explains the score. '
        '"ApplicationFeedback" is constructive feedback on the application.\n'
        "Respond in the following JSON format:\n"
        '{"ContextScore": 0, "ContextExplanation": "text", "ApplicationFeedback": "text"}'
    )


def validate_takeaway_prompt(verse_ref: str, takeaway: str) -> str:
    return (
        f"Is the following an accurate key take-away for {verse_ref}?\n\n"
        f"{takeaway.strip()}\n\n"
        "Respond with only true or false."
    )


def verse_search_prompt(description: str) -> str:
    return (
        f'Please get me a list of verses that meet this description: "{description.strip()}"\n\n'
        "Respond in the following JSON format, which is an array of verse reference objects. "
        "If no verses are found, return an empty array [].\n"
        '[{"book": "BookName", "chapter": 1, "startVerse": 1, "endVerse": 2}]'
    )


TEST_PROMPT = "Reply with the single word: ok"
