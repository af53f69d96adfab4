"""Short practice stories built from saved notebook terms."""

from collections.abc import Sequence

from lingopop.config import settings
from lingopop.languages import language_name
from lingopop.services.gemini import GeminiGateway

# Callers must supply at least this many terms
MIN_STORY_TERMS = 3


def build_story_prompt(terms: Sequence[str], target_lang: str, native_lang: str) -> str:
    """Build the prompt for a short story that uses the given terms."""
    return f"""Write a short, funny, and coherent story in {language_name(target_lang)} \
using the following words: {", ".join(terms)}.
After the story, provide a brief summary in {language_name(native_lang)}.
Highlight the used words in the story if possible (e.g., by capitalization).
Keep it under 150 words."""


async def generate_story(
    gateway: GeminiGateway,
    terms: Sequence[str],
    target_lang: str | None = None,
    native_lang: str | None = None,
    model: str | None = None,
) -> str:
    """
    Generate a story using ``terms``.

    Raises:
        GatewayError: The request failed
    """
    prompt = build_story_prompt(
        terms,
        target_lang or settings.target_lang,
        native_lang or settings.native_lang,
    )
    return await gateway.story(prompt, model or settings.text_model)
