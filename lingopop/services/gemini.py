"""Gemini client wrapper for lookups, images, speech, chat and stories."""

import base64
import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx
from google import genai
from google.genai import errors, types
from pydantic import ValidationError

from lingopop.config import settings
from lingopop.errors import ConfigError, GatewayError, ImagePhaseFailed, LookupFailed
from lingopop.languages import language_name
from lingopop.schemas import ChatMessage, LookupResponse
from lingopop.storage import API_KEY_KEY, LocalStorage

logger = logging.getLogger(__name__)

CHAT_FALLBACK_REPLY = "I couldn't understand that."
STORY_FALLBACK_TEXT = "Could not generate story."

# Only block high-confidence violations so plain illustrations are not rejected
RELAXED_SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    )
]

LOOKUP_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "definition": types.Schema(type=types.Type.STRING),
        "examples": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "original": types.Schema(type=types.Type.STRING),
                    "translation": types.Schema(type=types.Type.STRING),
                },
                required=["original", "translation"],
            ),
        ),
        "funExplanation": types.Schema(type=types.Type.STRING),
    },
    required=["definition", "examples", "funExplanation"],
)

# Provider transport failures surface either as SDK errors or raw httpx errors
_PROVIDER_ERRORS = (errors.APIError, httpx.HTTPError)


def is_advanced_model(model_id: str) -> bool:
    """Return True if a text model id denotes a pro/advanced tier."""
    return "pro" in model_id or "3" in model_id


@dataclass(frozen=True)
class ImageRequest:
    """Model, prompt and generation config for one illustration request."""

    model: str
    prompt: str
    config: types.GenerateContentConfig
    advanced: bool


def build_image_request(term: str, text_model: str) -> ImageRequest:
    """Choose the image model variant and prompt from the configured text model.

    Advanced text models get the high-quality image model with an explicit
    square 1K size and a descriptive prompt. Everything else gets the fast
    image model with a terse prompt and default sizing.
    """
    if is_advanced_model(text_model):
        return ImageRequest(
            model=settings.pro_image_model,
            prompt=(
                "A clean, vibrant, minimal, flat vector illustration representing the "
                f'concept of "{term}". White background. No text.'
            ),
            config=types.GenerateContentConfig(
                image_config=types.ImageConfig(aspect_ratio="1:1", image_size="1K"),
                safety_settings=RELAXED_SAFETY_SETTINGS,
            ),
            advanced=True,
        )

    return ImageRequest(
        model=settings.fast_image_model,
        prompt=f'A simple, colorful, vector icon representing "{term}". White background.',
        config=types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio="1:1"),
            safety_settings=RELAXED_SAFETY_SETTINGS,
        ),
        advanced=False,
    )


def build_lookup_prompt(term: str, native_lang: str, target_lang: str) -> str:
    """Build the prompt for the structured lookup."""
    native = language_name(native_lang)
    target = language_name(target_lang)
    return f"""Explain the term/phrase "{term}" (which is in {target}) \
for a native {native} speaker.

I need:
1. A clear definition in {native}.
2. Two distinct example sentences in {target} with {native} translation.
3. A "Fun Explanation": Imagine you are a cool, witty local friend explaining this. \
Talk about cultural context, slang usage, specific tone, or how to avoid embarrassing \
mistakes. Be concise and fun. NOT a textbook definition."""


def _strip_code_fence(text: str) -> str:
    """Remove a markdown code fence around a JSON payload, if present."""
    text = text.strip()
    if "```json" in text:
        return text.split("```json")[1].split("```")[0].strip()
    if text.startswith("```"):
        return text.split("```")[1].split("```")[0].strip()
    return text


def _first_inline_data(response: types.GenerateContentResponse) -> str | None:
    """Return the first inline binary part of a response as base64, if any."""
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if content is None or not content.parts:
        return None

    for part in content.parts:
        if part.inline_data and part.inline_data.data:
            data = part.inline_data.data
            if isinstance(data, bytes):
                return base64.b64encode(data).decode("ascii")
            return str(data)
    return None


class GeminiGateway:
    """Stateless request/response boundary to the Gemini API."""

    def __init__(self, api_key: str, client: genai.Client | None = None) -> None:
        if not api_key and client is None:
            raise ConfigError("Gemini API key is not configured")
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> genai.Client:
        """Get or create the underlying Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def lookup(
        self,
        term: str,
        native_lang: str,
        target_lang: str,
        model: str,
    ) -> LookupResponse:
        """
        Request the structured definition, examples and fun explanation for a term.

        Raises:
            LookupFailed: Network or API error, empty response, or schema mismatch
        """
        prompt = build_lookup_prompt(term, native_lang, target_lang)

        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=LOOKUP_SCHEMA,
                ),
            )
        except _PROVIDER_ERRORS as e:
            raise LookupFailed(f"Lookup request for '{term}' failed: {e}") from e

        text = response.text
        if not text:
            raise LookupFailed(f"Empty lookup response for '{term}'")

        try:
            return LookupResponse.model_validate_json(_strip_code_fence(text))
        except ValidationError as e:
            logger.warning("Lookup response for '%s' did not match schema: %s", term, text[:150])
            raise LookupFailed(f"Malformed lookup response for '{term}'") from e

    async def generate_image(self, term: str, text_model: str) -> str | None:
        """
        Generate an illustration for a term.

        Returns:
            Base64-encoded image, or None if the model returned no image part

        Raises:
            ImagePhaseFailed: The request itself failed
        """
        request = build_image_request(term, text_model)

        try:
            response = await self.client.aio.models.generate_content(
                model=request.model,
                contents=request.prompt,
                config=request.config,
            )
        except _PROVIDER_ERRORS as e:
            raise ImagePhaseFailed(
                f"Image generation with {request.model} failed for '{term}': {e}"
            ) from e

        return _first_inline_data(response)

    async def generate_speech(self, text: str, voice: str | None = None) -> str | None:
        """
        Synthesize speech as base64 raw PCM (s16le, mono, 24 kHz).

        Raises:
            GatewayError: The request failed
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=settings.speech_model,
                contents=text,
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=voice or settings.speech_voice
                            )
                        )
                    ),
                ),
            )
        except _PROVIDER_ERRORS as e:
            raise GatewayError(f"Speech synthesis failed: {e}") from e

        return _first_inline_data(response)

    async def chat(
        self,
        system_instruction: str,
        history: Sequence[ChatMessage],
        message: str,
        model: str,
    ) -> str:
        """
        Send a message to the tutor, replaying the prior transcript.

        Raises:
            GatewayError: The request failed
        """
        chat = self.client.aio.chats.create(
            model=model,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
            ),
            history=[
                types.Content(
                    role="model" if msg.role == "assistant" else "user",
                    parts=[types.Part(text=msg.text)],
                )
                for msg in history
            ],
        )

        try:
            response = await chat.send_message(message)
        except _PROVIDER_ERRORS as e:
            raise GatewayError(f"Chat request failed: {e}") from e

        return response.text or CHAT_FALLBACK_REPLY

    async def story(self, prompt: str, model: str) -> str:
        """
        Generate free-form text (a short story) for a prompt.

        Raises:
            GatewayError: The request failed
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
            )
        except _PROVIDER_ERRORS as e:
            raise GatewayError(f"Story generation failed: {e}") from e

        return response.text or STORY_FALLBACK_TEXT


async def resolve_api_key(storage: LocalStorage) -> str:
    """Return the API key from settings, falling back to local storage."""
    if settings.gemini_api_key:
        return settings.gemini_api_key
    return (await storage.get_item(API_KEY_KEY) or "").strip()


async def create_gateway(storage: LocalStorage) -> GeminiGateway:
    """
    Build a gateway using the resolved API key.

    Raises:
        ConfigError: No API key in the environment or local storage
    """
    api_key = await resolve_api_key(storage)
    if not api_key:
        raise ConfigError(
            "No Gemini API key found. Set GEMINI_API_KEY or run 'lingopop config set-key'."
        )
    return GeminiGateway(api_key)
