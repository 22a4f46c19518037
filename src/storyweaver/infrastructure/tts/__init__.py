"""TTS provider implementations (Gemini, OpenAI)."""

# Re-export for easier access, e.g. `from storyweaver.infrastructure.tts import GeminiProvider`
from .base import PCM_CHANNELS, PCM_SAMPLE_RATE, PCM_SAMPLE_WIDTH, TTSProvider, Voice
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "GeminiProvider",
    "OpenAIProvider",
    "PCM_CHANNELS",
    "PCM_SAMPLE_RATE",
    "PCM_SAMPLE_WIDTH",
    "TTSProvider",
    "Voice",
]
