from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# Every provider returns headerless 16-bit little-endian PCM in this layout.
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2


@dataclass
class Voice:
    """Represents a voice option for a TTS provider."""

    id: str
    name: str
    gender: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)


class TTSProvider(ABC):
    """Abstract base class for TTS providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the (unique) short-name for this provider (e.g. 'gemini')."""

    @property
    @abstractmethod
    def default_voice(self) -> str:
        """Return the voice ID used when none is selected."""

    @abstractmethod
    def list_voices(self) -> list[Voice]:
        """Return all available voices for this provider."""

    @abstractmethod
    async def synth(
        self,
        *,  # force keyword-only args
        text: str,
        voice: str,  # voice ID
        style: str | None = None,  # style prompt
    ) -> bytes:
        """Synthesise *text* with *voice* and return raw PCM (see ``PCM_*``).

        Raises if the provider returned no audio.
        """
