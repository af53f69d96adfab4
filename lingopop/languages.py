"""Supported languages and selectable Gemini text models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    flag: str


@dataclass(frozen=True)
class TextModel:
    id: str
    name: str
    description: str


SUPPORTED_LANGUAGES: tuple[Language, ...] = (
    Language("en", "English", "🇺🇸"),
    Language("zh", "Chinese", "🇨🇳"),
    Language("es", "Spanish", "🇪🇸"),
    Language("fr", "French", "🇫🇷"),
    Language("de", "German", "🇩🇪"),
    Language("ja", "Japanese", "🇯🇵"),
    Language("ko", "Korean", "🇰🇷"),
    Language("pt", "Portuguese", "🇧🇷"),
    Language("ru", "Russian", "🇷🇺"),
    Language("ar", "Arabic", "🇸🇦"),
)

TEXT_MODELS: tuple[TextModel, ...] = (
    TextModel("gemini-2.5-flash", "Gemini 2.5 Flash", "Fast & Smart (Recommended)"),
    TextModel("gemini-flash-lite-latest", "Gemini 2.5 Flash Lite", "Speed Optimized"),
    TextModel("gemini-2.5-pro-preview", "Gemini 2.5 Pro", "Advanced Reasoning"),
    TextModel("gemini-3-pro-preview", "Gemini 3 Pro", "Complex Reasoning"),
)

_BY_CODE = {lang.code: lang for lang in SUPPORTED_LANGUAGES}


def get_language(code: str) -> Language | None:
    """Look up a supported language by its code (case-insensitive)."""
    return _BY_CODE.get(code.lower())


def language_name(code: str) -> str:
    """Return the display name for a language code, or the input unchanged if unknown."""
    language = get_language(code)
    return language.name if language else code


def is_supported_language(code: str) -> bool:
    return get_language(code) is not None
