"""Speech audio decoding and playback."""

from lingopop.audio.codec import SampleBuffer, decode
from lingopop.audio.player import AudioPlayer, PlayerState, SoundDeviceSink

__all__ = ["AudioPlayer", "PlayerState", "SampleBuffer", "SoundDeviceSink", "decode"]
