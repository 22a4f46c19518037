"""Shared fixtures and in-memory stand-ins for the model clients and audio device."""

import asyncio
import os
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
os.environ.setdefault("AUDIO_OUTPUT", "none")

from storyweaver.infrastructure.audio import AudioOutput, AudioPlayer, PlaybackHandle, decode_pcm
from storyweaver.services.navigation import NavigationController
from storyweaver.services.orchestrator import StoryOrchestrator
from storyweaver.services.session import StorySession


def make_segment(seconds: float = 0.5):
    frames = int(24000 * seconds)
    return decode_pcm(b"\x00\x00" * frames)


class FakeStoryteller:
    def __init__(self, replies=None, fail=False):
        self.replies = list(replies or ["Once upon a time, a dragon baked a cake."])
        self.fail = fail
        self.contexts = []
        self.messages = []

    def create_context(self, premise):
        context = {"premise": premise}
        self.contexts.append(context)
        return context

    async def send_message(self, context, message):
        self.messages.append((context, message))
        if self.fail:
            raise RuntimeError("model unavailable")
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


class FakeIllustrator:
    def __init__(self, fail=False, gate=None):
        self.fail = fail
        self.gate = gate
        self.called = asyncio.Event()
        self.prompts = []

    async def generate_image(self, text):
        self.prompts.append(text)
        self.called.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("imagen quota exceeded")
        return f"data:image/jpeg;base64,{len(self.prompts)}"


class FakeNarrator:
    def __init__(self, fail=False, gate=None):
        self.fail = fail
        self.gate = gate
        self.called = asyncio.Event()
        self.requests = []

    async def narrate(self, text, voice_id):
        self.requests.append((text, voice_id))
        self.called.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("No audio data received from API.")
        return make_segment()


class FakeHandle(PlaybackHandle):
    def __init__(self, output, segment):
        self.output = output
        self.segment = segment
        self.started = False
        self.stopped = False

    def start(self):
        assert self.output.active() == [], "a stream is already playing"
        self.started = True

    def stop(self):
        self.stopped = True


class FakeAudioOutput(AudioOutput):
    def __init__(self):
        self.handles = []

    def create_handle(self, segment):
        handle = FakeHandle(self, segment)
        self.handles.append(handle)
        return handle

    def active(self):
        return [h for h in self.handles if h.started and not h.stopped]


@pytest.fixture
def storyteller():
    return FakeStoryteller(replies=["Page one text.", "Page two text.", "Page three text."])


@pytest.fixture
def illustrator():
    return FakeIllustrator()


@pytest.fixture
def narrator():
    return FakeNarrator()


@pytest.fixture
def orchestrator(storyteller, illustrator, narrator):
    return StoryOrchestrator(storyteller, illustrator, narrator)


@pytest.fixture
def session():
    return StorySession("test-session")


@pytest.fixture
def audio_output():
    return FakeAudioOutput()


@pytest.fixture
def controller(session, orchestrator, audio_output):
    return NavigationController(session, orchestrator, AudioPlayer(audio_output))
