from __future__ import annotations

import logging

from pydub import AudioSegment

from storyweaver.infrastructure.audio import decode_pcm
from storyweaver.infrastructure.tts import GeminiProvider, OpenAIProvider, TTSProvider, Voice
from storyweaver.infrastructure.voice_utils import get_voices

logger = logging.getLogger(__name__)

NARRATION_STYLE = "gentle and friendly storyteller"


class Narrator:
    """Reads page text aloud with the selected voice and decodes it for playback."""

    def __init__(self, provider: TTSProvider) -> None:
        self.provider: TTSProvider = provider
        self.provider_name: str = getattr(provider, "name", "gemini")

        # Cache voices for voice selection
        self._voices: list[Voice] = get_voices(self.provider)

    @property
    def voices(self) -> list[Voice]:
        return list(self._voices)

    async def narrate(self, text: str, voice_id: str) -> AudioSegment:
        """Synthesize *text* and return the decoded segment.

        Decode errors are re-raised so callers see them as a narration failure.
        """
        raw = await self.provider.synth(text=text, voice=voice_id, style=NARRATION_STYLE)
        try:
            segment = decode_pcm(raw)
        except ValueError as e:
            raise RuntimeError(f"Could not decode narration audio: {e}") from e

        logger.debug(f"Narration ready: {len(segment) / 1000:.1f}s with {self.provider_name}/{voice_id}")
        return segment


def build_provider(name: str, *, client=None, model: str | None = None, openai_api_key: str | None = None) -> TTSProvider:
    """Select the TTS provider by short name."""
    name = name.lower()
    if name == "openai":
        return OpenAIProvider(api_key=openai_api_key)
    if name == "gemini":
        if client is None:
            raise ValueError("Gemini TTS requires a google-genai client")
        return GeminiProvider(client, model=model) if model else GeminiProvider(client)
    raise ValueError(f"Unsupported TTS provider: {name}")
