from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from openai import AsyncOpenAI  # Main client

# Internal - base class and voice model
from storyweaver.infrastructure.tts.base import TTSProvider, Voice

load_dotenv()
logger = logging.getLogger(__name__)


class OpenAIProvider(TTSProvider):
    """TTS provider for OpenAI API (v1.0+).

    Requests the ``pcm`` response format, which OpenAI delivers as 24kHz mono 16-bit
    little-endian samples, the same layout Gemini TTS produces.
    """

    name: str = "openai"
    default_voice: str = "fable"

    def __init__(self, api_key: str | None = None, model: str = "tts-1-hd") -> None:
        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise ValueError("OpenAI API key not found. Set OPENAI_API_KEY or pass api_key.")
        self.client = AsyncOpenAI(api_key=key)
        self.model = model

    def list_voices(self) -> list[Voice]:
        """OpenAI has fixed voices, map them to our internal `Voice` model."""

        return [
            Voice(
                id="fable",
                name="Fable",
                gender="male",
                description="Storyteller, classic male narrator voice.",
            ),
            Voice(
                id="alloy",
                name="Alloy",
                gender="neutral",
                description="Versatile, balanced neutral voice.",
            ),
            Voice(id="echo", name="Echo", gender="male", description="Warm, engaging male voice."),
            Voice(
                id="nova",
                name="Nova",
                gender="female",
                description="Bright, expressive female voice.",
            ),
            Voice(
                id="shimmer",
                name="Shimmer",
                gender="female",
                description="Clear, gentle female voice.",
            ),
        ]

    async def synth(
        self,
        *,
        text: str,
        voice: str,
        style: str | None = None,  # Style parameter is ignored for OpenAI (not supported)
    ) -> bytes:
        """Synthesize audio using OpenAI TTS API."""

        if style:
            logger.debug("Style parameter is not supported by OpenAI TTS API and will be ignored.")

        response = await self.client.audio.speech.create(
            model=self.model,
            voice=voice,  # type: ignore[arg-type]
            input=text,
            response_format="pcm",
        )
        audio = response.content
        if not audio:
            raise RuntimeError("No audio data received from API.")
        return audio
