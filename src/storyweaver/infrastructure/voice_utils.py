from __future__ import annotations

from storyweaver.infrastructure.tts.base import TTSProvider, Voice


def get_voices(provider: TTSProvider) -> list[Voice]:
    """Return the list of voices from *provider*."""

    return provider.list_voices()


def resolve_voice(provider: TTSProvider, voice_id: str | None) -> str:
    """Return *voice_id* if *provider* offers it, the provider default if it is empty.

    Raises ValueError for an unknown voice.
    """

    if not voice_id:
        return provider.default_voice
    if voice_id not in {v.id for v in get_voices(provider)}:
        raise ValueError(f"Unknown voice '{voice_id}' for provider {provider.name}")
    return voice_id
