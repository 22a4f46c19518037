from __future__ import annotations

import logging

from google import genai
from google.genai import types

from storyweaver.infrastructure.tts.base import TTSProvider, Voice

logger = logging.getLogger(__name__)


class GeminiProvider(TTSProvider):
    """TTS provider for the Gemini speech-generation models.

    Gemini TTS returns 24kHz mono 16-bit PCM as inline data on the first candidate part.
    """

    name: str = "gemini"
    default_voice: str = "Kore"

    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash-preview-tts") -> None:
        self.client = client
        self.model = model

    def list_voices(self) -> list[Voice]:
        """Prebuilt Gemini voices offered to the listener, with storybook-friendly names."""

        return [
            Voice(id="Kore", name="Gentle Storyteller", description="Firm, warm narrator voice."),
            Voice(id="Puck", name="Playful Pixie", description="Upbeat, bouncy voice."),
            Voice(id="Charon", name="Wise Old Sage", description="Informative, calm voice."),
            Voice(id="Fenrir", name="Brave Knight", description="Excitable, bold voice."),
            Voice(id="Zephyr", name="Cheerful Friend", description="Bright, friendly voice."),
        ]

    async def synth(
        self,
        *,
        text: str,
        voice: str,  # Matched to one of the IDs above
        style: str | None = None,  # Folded into the prompt, Gemini TTS is steerable in natural language
    ) -> bytes:
        """Synthesize audio using the Gemini TTS model."""

        prompt = f"Say with a {style} voice: {text}" if style else text

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[types.Content(parts=[types.Part(text=prompt)])],
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                    )
                ),
            ),
        )

        audio = _extract_inline_audio(response)
        if not audio:
            raise RuntimeError("No audio data received from API.")

        logger.debug(f"Gemini TTS returned {len(audio)} bytes for voice={voice}")
        return audio


def _extract_inline_audio(response: types.GenerateContentResponse) -> bytes | None:
    """Return the inline audio bytes of the first candidate part, if any."""
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if not content or not content.parts:
        return None
    inline_data = content.parts[0].inline_data
    if inline_data is None:
        return None
    return inline_data.data
