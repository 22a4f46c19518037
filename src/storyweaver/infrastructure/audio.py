"""Audio decoding and the local output device.

Narration arrives as raw PCM and is decoded into a pydub ``AudioSegment``. Playback
goes through an ``AudioOutput`` acquired once at startup; every playback gets its own
single-use ``PlaybackHandle``.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod

import numpy as np
from pydub import AudioSegment

from storyweaver.infrastructure.tts.base import PCM_CHANNELS, PCM_SAMPLE_RATE, PCM_SAMPLE_WIDTH

logger = logging.getLogger(__name__)


class AudioUnavailableError(RuntimeError):
    """The platform has no usable audio output."""


def decode_pcm(
    data: bytes,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    sample_width: int = PCM_SAMPLE_WIDTH,
) -> AudioSegment:
    """Decode headerless PCM bytes into a playable segment."""

    if not data:
        raise ValueError("Cannot decode empty audio data")
    frame_width = sample_width * channels
    if len(data) % frame_width != 0:
        raise ValueError(
            f"Audio data length {len(data)} is not a multiple of the frame width {frame_width}"
        )
    return AudioSegment(data=data, sample_width=sample_width, frame_rate=sample_rate, channels=channels)


def to_wav(segment: AudioSegment) -> bytes:
    """Encode *segment* as a WAV file."""
    buf = io.BytesIO()
    segment.export(buf, format="wav")
    return buf.getvalue()


class PlaybackHandle(ABC):
    """A single-use playback of one segment."""

    @abstractmethod
    def start(self) -> None: ...

    @property
    def active(self) -> bool:
        """True until the handle is stopped or its segment has played out."""
        return True

    @abstractmethod
    def stop(self) -> None:
        """Stop playback and release the underlying stream. Safe to call twice."""


class AudioOutput(ABC):
    """An acquired audio output context."""

    @abstractmethod
    def create_handle(self, segment: AudioSegment) -> PlaybackHandle:
        """Create (but do not start) a playback handle connected to this output."""

    def close(self) -> None:
        """Release the output context."""


class _SoundDeviceHandle(PlaybackHandle):
    def __init__(self, sd, segment: AudioSegment, device: int | str | None) -> None:
        self._sd = sd
        if segment.sample_width != 2:
            segment = segment.set_sample_width(2)
        self._samples = np.frombuffer(segment.raw_data, dtype=np.int16).reshape(-1, segment.channels)
        self._pos = 0
        self._stream = sd.OutputStream(
            device=device,
            samplerate=segment.frame_rate,
            channels=segment.channels,
            dtype="int16",
            callback=self._callback,
        )
        self._closed = False

    def _callback(self, outdata, frames, time, status):
        if status:
            logger.debug(f"Output stream status: {status}")
        chunk = self._samples[self._pos : self._pos + frames]
        outdata[: len(chunk)] = chunk
        self._pos += len(chunk)
        if len(chunk) < frames:
            outdata[len(chunk) :] = 0
            raise self._sd.CallbackStop

    def start(self) -> None:
        self._stream.start()

    @property
    def active(self) -> bool:
        return not self._closed and bool(self._stream.active)

    def stop(self) -> None:
        if self._closed:
            return
        self._closed = True
        # abort drops queued buffers so a replacement starts without delay
        self._stream.abort()
        self._stream.close()


class SoundDeviceOutput(AudioOutput):
    """Plays audio on a local output device through PortAudio (``sounddevice``)."""

    def __init__(self, device: int | str | None = None) -> None:
        self.device = device
        self._sd = None

    def open(self) -> SoundDeviceOutput:
        """Acquire the output device. Raises AudioUnavailableError when there is none."""
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:  # sounddevice or the PortAudio library missing
            raise AudioUnavailableError(f"Audio output is not supported on this platform: {e}") from e

        try:
            info = sd.query_devices(self.device, kind="output")
        except (ValueError, sd.PortAudioError) as e:
            raise AudioUnavailableError(f"No audio output device available: {e}") from e

        logger.info(f"Audio output acquired: {info['name']} ({int(info['default_samplerate'])} Hz)")
        self._sd = sd
        return self

    def create_handle(self, segment: AudioSegment) -> PlaybackHandle:
        if self._sd is None:
            raise AudioUnavailableError("Audio output has not been opened")
        return _SoundDeviceHandle(self._sd, segment, self.device)

    def close(self) -> None:
        self._sd = None


class AudioPlayer:
    """Holds at most one active playback handle on an ``AudioOutput``."""

    def __init__(self, output: AudioOutput) -> None:
        self.output = output
        self._handle: PlaybackHandle | None = None

    @property
    def is_playing(self) -> bool:
        return self._handle is not None and self._handle.active

    def play(self, segment: AudioSegment | None) -> None:
        """Stop whatever is playing, then play *segment* (silence if None)."""
        self.stop()
        if segment is None:
            return
        handle = self.output.create_handle(segment)
        try:
            handle.start()
        except Exception:
            handle.stop()
            raise
        self._handle = handle

    def stop(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.stop()
