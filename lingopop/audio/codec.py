"""Decode base64 raw PCM speech into normalized float samples."""

import base64
import binascii
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from lingopop.errors import AudioDecodeError

PCM_SAMPLE_WIDTH = 2  # bytes, signed 16-bit
PCM_SCALE = 32768.0


@dataclass
class SampleBuffer:
    """Float32 samples shaped ``(frames, channels)`` in ``[-1.0, 1.0]``."""

    samples: npt.NDArray[np.float32]
    sample_rate: int

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frames / self.sample_rate

    def channel(self, index: int) -> npt.NDArray[np.float32]:
        """Return the samples of one channel."""
        return self.samples[:, index]


def decode(payload: str, sample_rate: int = 24000, channels: int = 1) -> SampleBuffer:
    """
    Decode base64 little-endian signed 16-bit interleaved PCM.

    Args:
        payload: Base64-encoded PCM bytes
        sample_rate: Sample rate of the stream in Hz
        channels: Number of interleaved channels

    Returns:
        SampleBuffer with ``len(bytes) / (2 * channels)`` frames

    Raises:
        AudioDecodeError: Invalid base64, or a byte length that is not a whole
            number of frames
        ValueError: Non-positive sample rate or channel count
    """
    if channels < 1:
        raise ValueError(f"channels must be >= 1, got {channels}")
    if sample_rate < 1:
        raise ValueError(f"sample_rate must be >= 1, got {sample_rate}")

    try:
        raw = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise AudioDecodeError(f"Audio payload is not valid base64: {e}") from e

    frame_width = PCM_SAMPLE_WIDTH * channels
    if len(raw) % frame_width:
        raise AudioDecodeError(
            f"PCM byte length {len(raw)} is not a multiple of {frame_width} "
            f"({channels} channel(s) of 16-bit samples)"
        )

    pcm = np.frombuffer(raw, dtype="<i2")
    samples = (pcm.astype(np.float32) / PCM_SCALE).reshape(-1, channels)
    return SampleBuffer(samples=samples, sample_rate=sample_rate)
