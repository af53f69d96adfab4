"""Tests for the Gemini gateway."""

import base64
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from google.genai import types

from lingopop.errors import ConfigError, GatewayError, ImagePhaseFailed, LookupFailed
from lingopop.schemas import ChatMessage
from lingopop.services.gemini import (
    CHAT_FALLBACK_REPLY,
    RELAXED_SAFETY_SETTINGS,
    STORY_FALLBACK_TEXT,
    GeminiGateway,
    _strip_code_fence,
    build_image_request,
    build_lookup_prompt,
    create_gateway,
    is_advanced_model,
    resolve_api_key,
)
from lingopop.storage import API_KEY_KEY

LOOKUP_JSON = json.dumps(
    {
        "definition": "Present everywhere.",
        "examples": [
            {"original": "Es ubicuo.", "translation": "It is ubiquitous."},
            {"original": "Lo ubicuo.", "translation": "The ubiquitous."},
        ],
        "funExplanation": "Like pigeons in a plaza.",
    }
)


def _text_response(text):
    response = MagicMock()
    response.text = text
    return response


def _inline_response(data: bytes) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(inline_data=types.Blob(data=data, mime_type="image/png"))],
                )
            )
        ]
    )


@pytest.fixture
def mock_client():
    """A genai client double with async model calls."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=_text_response(LOOKUP_JSON))
    return client


@pytest.fixture
def gateway(mock_client):
    return GeminiGateway("test-key", client=mock_client)


class TestModelTier:
    """Tests for text model tier detection and image variant selection."""

    @pytest.mark.parametrize(
        "model_id",
        ["gemini-2.5-pro-preview", "gemini-3-pro-preview", "gemini-3-flash"],
    )
    def test_advanced_models(self, model_id):
        """Ids containing 'pro' or '3' are advanced."""
        assert is_advanced_model(model_id) is True

    @pytest.mark.parametrize("model_id", ["gemini-2.5-flash", "gemini-flash-lite-latest"])
    def test_basic_models(self, model_id):
        """Flash tiers are not advanced."""
        assert is_advanced_model(model_id) is False

    def test_advanced_image_request(self):
        """Should use the high-quality image model with explicit 1K size."""
        request = build_image_request("ubiquitous", "gemini-3-pro-preview")

        assert request.advanced is True
        assert request.model == "gemini-3-pro-image-preview"
        assert request.config.image_config.aspect_ratio == "1:1"
        assert request.config.image_config.image_size == "1K"
        assert '"ubiquitous"' in request.prompt
        assert "No text." in request.prompt

    def test_fast_image_request(self):
        """Should use the fast image model with default sizing."""
        request = build_image_request("ubiquitous", "gemini-2.5-flash")

        assert request.advanced is False
        assert request.model == "gemini-2.5-flash-image"
        assert request.config.image_config.aspect_ratio == "1:1"
        assert request.config.image_config.image_size is None

    def test_safety_settings_relaxed(self):
        """Both variants only block high-severity content."""
        for text_model in ("gemini-2.5-flash", "gemini-3-pro-preview"):
            request = build_image_request("x", text_model)
            assert request.config.safety_settings == RELAXED_SAFETY_SETTINGS

        assert len(RELAXED_SAFETY_SETTINGS) == 4
        assert all(
            s.threshold == types.HarmBlockThreshold.BLOCK_ONLY_HIGH
            for s in RELAXED_SAFETY_SETTINGS
        )


class TestPrompts:
    """Tests for prompt helpers."""

    def test_lookup_prompt_uses_language_names(self):
        """Should name languages rather than codes."""
        prompt = build_lookup_prompt("ubiquitous", "en", "es")

        assert '"ubiquitous"' in prompt
        assert "Spanish" in prompt
        assert "native English speaker" in prompt

    def test_lookup_prompt_passes_unknown_codes(self):
        """Should use an unknown code as-is."""
        assert "(which is in xx)" in build_lookup_prompt("a", "en", "xx")

    def test_strip_json_fence(self):
        """Should unwrap a ```json fence."""
        assert _strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_plain_fence(self):
        """Should unwrap a bare fence."""
        assert _strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self):
        """Should leave plain JSON unchanged."""
        assert _strip_code_fence('  {"a": 1} ') == '{"a": 1}'


class TestGatewayInit:
    """Tests for gateway construction."""

    def test_missing_key_raises(self):
        """Should refuse to build without a key."""
        with pytest.raises(ConfigError):
            GeminiGateway("")

    def test_injected_client_used(self, mock_client):
        """Should use an injected client."""
        assert GeminiGateway("", client=mock_client).client is mock_client


class TestLookup:
    """Tests for the structured lookup call."""

    @pytest.mark.asyncio
    async def test_parses_response(self, gateway, mock_client):
        """Should validate JSON into a LookupResponse."""
        result = await gateway.lookup("ubiquitous", "en", "es", "gemini-2.5-flash")

        assert result.definition == "Present everywhere."
        assert len(result.examples) == 2
        assert result.fun_explanation == "Like pigeons in a plaza."

        kwargs = mock_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_fenced_response(self, gateway, mock_client):
        """Should accept JSON wrapped in a code fence."""
        mock_client.aio.models.generate_content.return_value = _text_response(
            f"```json\n{LOOKUP_JSON}\n```"
        )

        result = await gateway.lookup("ubiquitous", "en", "es", "gemini-2.5-flash")
        assert result.definition == "Present everywhere."

    @pytest.mark.asyncio
    async def test_empty_response(self, gateway, mock_client):
        """Should raise LookupFailed on empty text."""
        mock_client.aio.models.generate_content.return_value = _text_response(None)

        with pytest.raises(LookupFailed):
            await gateway.lookup("x", "en", "es", "gemini-2.5-flash")

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, gateway, mock_client):
        """Should raise LookupFailed when required fields are missing."""
        mock_client.aio.models.generate_content.return_value = _text_response(
            json.dumps({"definition": "only this"})
        )

        with pytest.raises(LookupFailed):
            await gateway.lookup("x", "en", "es", "gemini-2.5-flash")

    @pytest.mark.asyncio
    async def test_not_json(self, gateway, mock_client):
        """Should raise LookupFailed on free text."""
        mock_client.aio.models.generate_content.return_value = _text_response("Sorry!")

        with pytest.raises(LookupFailed):
            await gateway.lookup("x", "en", "es", "gemini-2.5-flash")

    @pytest.mark.asyncio
    async def test_transport_error(self, gateway, mock_client):
        """Should wrap transport errors in LookupFailed."""
        mock_client.aio.models.generate_content.side_effect = httpx.ConnectError("offline")

        with pytest.raises(LookupFailed) as exc_info:
            await gateway.lookup("x", "en", "es", "gemini-2.5-flash")

        assert isinstance(exc_info.value, GatewayError)


class TestGenerateImage:
    """Tests for the illustration call."""

    @pytest.mark.asyncio
    async def test_returns_base64(self, gateway, mock_client):
        """Should base64-encode the first inline image part."""
        mock_client.aio.models.generate_content.return_value = _inline_response(b"png-bytes")

        result = await gateway.generate_image("ubiquitous", "gemini-2.5-flash")

        assert base64.b64decode(result) == b"png-bytes"
        assert (
            mock_client.aio.models.generate_content.call_args.kwargs["model"]
            == "gemini-2.5-flash-image"
        )

    @pytest.mark.asyncio
    async def test_advanced_tier_model(self, gateway, mock_client):
        """Should call the high-quality image model for advanced text models."""
        mock_client.aio.models.generate_content.return_value = _inline_response(b"x")

        await gateway.generate_image("ubiquitous", "gemini-2.5-pro-preview")

        assert (
            mock_client.aio.models.generate_content.call_args.kwargs["model"]
            == "gemini-3-pro-image-preview"
        )

    @pytest.mark.asyncio
    async def test_no_image_part(self, gateway, mock_client):
        """Should return None when the response carries no inline data."""
        mock_client.aio.models.generate_content.return_value = types.GenerateContentResponse(
            candidates=[]
        )

        assert await gateway.generate_image("x", "gemini-2.5-flash") is None

    @pytest.mark.asyncio
    async def test_failure(self, gateway, mock_client):
        """Should raise ImagePhaseFailed on transport errors."""
        mock_client.aio.models.generate_content.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(ImagePhaseFailed):
            await gateway.generate_image("x", "gemini-2.5-flash")


class TestGenerateSpeech:
    """Tests for the speech call."""

    @pytest.mark.asyncio
    async def test_returns_base64_pcm(self, gateway, mock_client):
        """Should return the audio payload and request the configured voice."""
        mock_client.aio.models.generate_content.return_value = _inline_response(b"\x00\x01")

        result = await gateway.generate_speech("hola")

        assert base64.b64decode(result) == b"\x00\x01"
        config = mock_client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_modalities == ["AUDIO"]
        assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Kore"

    @pytest.mark.asyncio
    async def test_voice_override(self, gateway, mock_client):
        """Should use an explicit voice."""
        mock_client.aio.models.generate_content.return_value = _inline_response(b"\x00\x01")

        await gateway.generate_speech("hola", voice="Puck")

        config = mock_client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Puck"

    @pytest.mark.asyncio
    async def test_failure(self, gateway, mock_client):
        """Should raise GatewayError on transport errors."""
        mock_client.aio.models.generate_content.side_effect = httpx.ConnectError("offline")

        with pytest.raises(GatewayError):
            await gateway.generate_speech("hola")


class TestChat:
    """Tests for the tutor chat call."""

    @pytest.fixture
    def chat_handle(self, mock_client):
        handle = MagicMock()
        handle.send_message = AsyncMock(return_value=_text_response("¡Claro!"))
        mock_client.aio.chats.create = MagicMock(return_value=handle)
        return handle

    @pytest.mark.asyncio
    async def test_replays_history_with_provider_roles(self, gateway, mock_client, chat_handle):
        """Should map assistant turns to the 'model' role."""
        history = [
            ChatMessage(role="user", text="What does it mean?"),
            ChatMessage(role="assistant", text="It means everywhere."),
        ]

        reply = await gateway.chat("Be a tutor.", history, "Is it formal?", "gemini-2.5-flash")

        assert reply == "¡Claro!"
        kwargs = mock_client.aio.chats.create.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["config"].system_instruction == "Be a tutor."
        assert [c.role for c in kwargs["history"]] == ["user", "model"]
        assert kwargs["history"][1].parts[0].text == "It means everywhere."
        chat_handle.send_message.assert_awaited_once_with("Is it formal?")

    @pytest.mark.asyncio
    async def test_empty_reply_fallback(self, gateway, chat_handle):
        """Should substitute a fallback reply for empty text."""
        chat_handle.send_message.return_value = _text_response("")

        assert await gateway.chat("s", [], "hi", "m") == CHAT_FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_failure(self, gateway, chat_handle):
        """Should raise GatewayError on transport errors."""
        chat_handle.send_message.side_effect = httpx.ConnectError("offline")

        with pytest.raises(GatewayError):
            await gateway.chat("s", [], "hi", "m")


class TestStory:
    """Tests for free-form story generation."""

    @pytest.mark.asyncio
    async def test_returns_text(self, gateway, mock_client):
        """Should return the generated text."""
        mock_client.aio.models.generate_content.return_value = _text_response("Había una vez")

        assert await gateway.story("Write", "gemini-2.5-flash") == "Había una vez"

    @pytest.mark.asyncio
    async def test_empty_fallback(self, gateway, mock_client):
        """Should substitute a fallback text for an empty response."""
        mock_client.aio.models.generate_content.return_value = _text_response(None)

        assert await gateway.story("Write", "gemini-2.5-flash") == STORY_FALLBACK_TEXT


class TestApiKeyResolution:
    """Tests for resolving the API key."""

    @pytest.mark.asyncio
    async def test_settings_key_preferred(self, storage):
        """Should prefer the environment key over the stored one."""
        await storage.set_item(API_KEY_KEY, "stored")
        with patch("lingopop.services.gemini.settings.gemini_api_key", "env-key"):
            assert await resolve_api_key(storage) == "env-key"

    @pytest.mark.asyncio
    async def test_stored_key_fallback(self, storage):
        """Should fall back to the stored key, trimmed."""
        await storage.set_item(API_KEY_KEY, "  stored \n")
        with patch("lingopop.services.gemini.settings.gemini_api_key", ""):
            assert await resolve_api_key(storage) == "stored"

    @pytest.mark.asyncio
    async def test_create_gateway_without_key(self, storage):
        """Should raise ConfigError when no key exists anywhere."""
        with patch("lingopop.services.gemini.settings.gemini_api_key", ""):
            with pytest.raises(ConfigError):
                await create_gateway(storage)

    @pytest.mark.asyncio
    async def test_create_gateway_with_stored_key(self, storage):
        """Should build a gateway from the stored key."""
        await storage.set_item(API_KEY_KEY, "stored")
        with patch("lingopop.services.gemini.settings.gemini_api_key", ""):
            gateway = await create_gateway(storage)

        assert gateway.api_key == "stored"
