"""Single-flight speech playback."""

import asyncio
import logging
from enum import Enum
from typing import Protocol

from lingopop.audio.codec import SampleBuffer, decode
from lingopop.config import settings
from lingopop.errors import GatewayError, PlaybackFailed
from lingopop.services.gemini import GeminiGateway

logger = logging.getLogger(__name__)


class PlayerState(str, Enum):
    IDLE = "idle"
    DECODING = "decoding"
    PLAYING = "playing"


class AudioSink(Protocol):
    """Output device that plays a buffer to completion."""

    async def play(self, buffer: SampleBuffer) -> None: ...


class SoundDeviceSink:
    """Play buffers on the default output device via sounddevice."""

    async def play(self, buffer: SampleBuffer) -> None:
        await asyncio.to_thread(self._play_blocking, buffer)

    @staticmethod
    def _play_blocking(buffer: SampleBuffer) -> None:
        # PortAudio is loaded on import; keep it off the import path of the package
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise PlaybackFailed(f"Audio output unavailable: {e}") from e

        try:
            sd.play(buffer.samples, samplerate=buffer.sample_rate, blocking=True)
        except (sd.PortAudioError, OSError, ValueError) as e:
            raise PlaybackFailed(f"Audio output failed: {e}") from e


class AudioPlayer:
    """Plays at most one clip at a time.

    A request made while another clip is decoding or playing is rejected and
    returns False. Every failure is logged and leaves the player idle.
    """

    def __init__(
        self,
        sink: AudioSink | None = None,
        sample_rate: int | None = None,
        channels: int = 1,
    ) -> None:
        self.sink = sink or SoundDeviceSink()
        self.sample_rate = sample_rate or settings.speech_sample_rate
        self.channels = channels
        self.state = PlayerState.IDLE
        self.active_key: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.state is not PlayerState.IDLE

    def _claim(self, key: str | None) -> bool:
        if self.is_busy:
            logger.info("Playback already in progress (%s), ignoring request", self.active_key)
            return False
        self.state = PlayerState.DECODING
        self.active_key = key
        return True

    def _release(self) -> None:
        self.state = PlayerState.IDLE
        self.active_key = None

    async def play(self, payload: str, key: str | None = None) -> bool:
        """
        Decode and play a base64 PCM payload.

        Returns:
            True if the clip played to completion, False if rejected or failed
        """
        if not self._claim(key):
            return False
        try:
            return await self._decode_and_play(payload)
        finally:
            self._release()

    async def speak(
        self,
        text: str,
        gateway: GeminiGateway,
        voice: str | None = None,
        key: str | None = None,
    ) -> bool:
        """
        Synthesize ``text`` and play it.

        The player is claimed before synthesis starts, so a second request
        made while speech is being generated is rejected too.
        """
        if not self._claim(key or text):
            return False
        try:
            try:
                payload = await gateway.generate_speech(text, voice)
            except GatewayError as e:
                logger.error("Speech synthesis failed: %s", e)
                return False

            if not payload:
                logger.warning("No audio returned for speech request")
                return False

            return await self._decode_and_play(payload)
        finally:
            self._release()

    async def _decode_and_play(self, payload: str) -> bool:
        try:
            buffer = decode(payload, self.sample_rate, self.channels)
            self.state = PlayerState.PLAYING
            logger.debug("Playing %.2fs of audio", buffer.duration)
            await self.sink.play(buffer)
        except PlaybackFailed as e:
            logger.error("Failed to play audio: %s", e)
            return False
        return True
