"""I/O boundary adapters (e.g. audio device, external APIs)."""

from .audio import (
    AudioOutput,
    AudioPlayer,
    AudioUnavailableError,
    PlaybackHandle,
    SoundDeviceOutput,
    decode_pcm,
    to_wav,
)

# Base classes, provider implementations
from .tts import (
    GeminiProvider,
    OpenAIProvider,
    TTSProvider,
    Voice,
)

__all__ = [
    "AudioOutput",
    "AudioPlayer",
    "AudioUnavailableError",
    "GeminiProvider",
    "OpenAIProvider",
    "PlaybackHandle",
    "SoundDeviceOutput",
    "TTSProvider",
    "Voice",
    "decode_pcm",
    "to_wav",
]
