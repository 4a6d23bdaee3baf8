"""Shared fakes for the search client and the playback backend."""

from __future__ import annotations

import asyncio

import pytest

from errors import PlaybackError
from models import SearchResponse


BEATLES_RESULTS = [
    {
        "kind": "song",
        "artistName": "The Beatles",
        "trackName": "Let It Be",
        "artworkUrl60": "https://is1-ssl.mzstatic.com/let-it-be/60x60bb.jpg",
        "primaryGenreName": "Rock",
        "previewUrl": "https://audio-ssl.itunes.apple.com/let-it-be.m4a",
    },
    {
        "kind": "song",
        "artistName": "The Beatles",
        "trackName": "Hey Jude",
        "artworkUrl60": "https://is1-ssl.mzstatic.com/hey-jude/60x60bb.jpg",
        "primaryGenreName": "Rock",
        "previewUrl": "https://audio-ssl.itunes.apple.com/hey-jude.m4a",
    },
]


class FakeSearchClient:
    """Returns canned outcomes per term; a term can be held back behind a gate."""

    def __init__(self, outcomes=None) -> None:
        self.outcomes = outcomes or {}
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def gate(self, term: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[term] = event
        return event

    async def search(self, term: str):
        self.calls.append(term)
        gate = self.gates.get(term)
        if gate is not None:
            await gate.wait()
        return self.outcomes.get(term, (SearchResponse(results=[]), None))

    async def aclose(self) -> None:
        self.closed = True


class FakeHandle:
    def __init__(self, url: str) -> None:
        self.url = url
        self.finished = False
        self.returncode = 0


class FakeBackend:
    is_available = True

    def __init__(self, failing=()) -> None:
        self.failing = set(failing)
        self.opened: list[FakeHandle] = []
        self.stopped: list[FakeHandle] = []
        self.released: list[FakeHandle] = []

    def open_and_play(self, url: str) -> FakeHandle:
        if url in self.failing:
            raise PlaybackError(f"cannot decode {url}")
        handle = FakeHandle(url)
        self.opened.append(handle)
        return handle

    def stop(self, handle: FakeHandle) -> None:
        self.stopped.append(handle)

    def release(self, handle: FakeHandle) -> None:
        self.released.append(handle)

    def is_active(self, handle: FakeHandle) -> bool:
        return not handle.finished

    def exit_status(self, handle: FakeHandle):
        return handle.returncode if handle.finished else None

    @property
    def held(self) -> list[FakeHandle]:
        return [h for h in self.opened if h not in self.released]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
