"""
Shared fixtures: an in-memory voice transport and a throwaway songs folder.

FakePlayer reports the end of a track the way the disnake player does: the
listener bound at play() time is called on the next loop iteration, both for
a natural end (finish()) and for stop().
"""

import asyncio
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import Mock

import pytest
import pytest_asyncio

from core.session import SessionManager
from core.track import AudioFile
from systems.voice_manager import VoiceManager
from utils.response_helper import ReplySink


class FakePlayer:
    def __init__(self):
        self.listener = None
        self.played: List[Path] = []
        self.playing: Optional[Path] = None
        self.stop_calls = 0

    def set_listener(self, listener):
        self.listener = listener

    def play(self, resource):
        self.playing = resource
        self.played.append(resource)

    def stop(self):
        self.stop_calls += 1
        if self.playing is not None:
            self.playing = None
            self._emit(None)

    def finish(self, error=None):
        """Simulate the audio thread ending the current track."""
        self.playing = None
        self._emit(error)

    def _emit(self, error):
        listener = self.listener
        if listener is not None:
            asyncio.get_running_loop().call_soon(listener, error)


class FakeConnection:
    def __init__(self, channel):
        self.channel = channel
        self.connected = True
        self.destroyed = 0
        self.subscribed: List[FakePlayer] = []

    def is_connected(self):
        return self.connected

    def subscribe(self, player):
        self.subscribed.append(player)

    async def destroy(self):
        self.destroyed += 1
        self.connected = False


class FakeTransport:
    def __init__(self):
        self.connections: List[FakeConnection] = []
        self.players: List[FakePlayer] = []
        self.connect_error: Optional[Exception] = None
        self.failing_paths = set()

    async def connect(self, channel):
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(channel)
        self.connections.append(connection)
        return connection

    def create_player(self):
        player = FakePlayer()
        self.players.append(player)
        return player

    def create_resource(self, path):
        if path in self.failing_paths:
            raise FileNotFoundError(f"cannot open {path}")
        return path

    @property
    def player(self) -> FakePlayer:
        """Most recently created player."""
        return self.players[-1]


class FakeReply(ReplySink):
    """ReplySink that records everything it is asked to send."""

    def __init__(self, interactive=False, user_id=42):
        self.interactive = interactive
        self.user_id = user_id
        self.primary: List[dict] = []
        self.follow_ups: List[dict] = []
        self.notices: List[str] = []
        self.deferred = 0

    async def defer(self):
        self.deferred += 1

    async def primary_reply(self, content=None, **kwargs):
        self.primary.append(dict(content=content, **kwargs))
        return Mock()

    async def follow_up(self, content=None, **kwargs):
        self.follow_ups.append(dict(content=content, **kwargs))
        return Mock()

    async def notify(self, text):
        self.notices.append(text)

    @property
    def texts(self) -> List[str]:
        return [reply['content'] for reply in self.primary]


def _files(*names, root=Path("/music")) -> List[AudioFile]:
    return [AudioFile.from_path(root / name, root) for name in names]


@pytest.fixture
def make_files():
    """Build AudioFiles under /music without touching the disk."""
    return _files


@pytest.fixture
def transport():
    return FakeTransport()


@pytest_asyncio.fixture
async def sessions(transport):
    manager = SessionManager(transport)
    yield manager
    await manager.shutdown()


@pytest.fixture
def channel():
    return SimpleNamespace(id=500, name='Pizza Lounge')


@pytest.fixture
def other_channel():
    return SimpleNamespace(id=501, name='Back Room')


@pytest.fixture
def guild():
    return SimpleNamespace(id=1, name='PizzaDAO', voice_client=None, get_channel=lambda channel_id: None)


@pytest.fixture
def member(channel):
    return SimpleNamespace(id=42, name='lobo', bot=False, voice=SimpleNamespace(channel=channel))


@pytest.fixture
def voice():
    return VoiceManager(default_channel_id=None)


def _touch(path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b'')


@pytest.fixture
def library(tmp_path):
    """
    songs/
      one.mp3  two.mp3  three.mp3  notes.txt
      band/       Intro.mp3  Outro.flac
      lobo/       Album One/{A1.mp3, A2.mp3}  Album Two/{B1.mp3}
      mixtape/    M1.mp3  M2.ogg
    """
    songs = tmp_path / 'songs'
    for name in ('one.mp3', 'two.mp3', 'three.mp3', 'notes.txt'):
        _touch(songs / name)
    for name in ('Intro.mp3', 'Outro.flac'):
        _touch(songs / 'band' / name)
    _touch(songs / 'lobo' / 'Album One' / 'A1.mp3')
    _touch(songs / 'lobo' / 'Album One' / 'A2.mp3')
    _touch(songs / 'lobo' / 'Album Two' / 'B1.mp3')
    for name in ('M1.mp3', 'M2.ogg'):
        _touch(songs / 'mixtape' / name)
    return songs


@pytest.fixture
def reply():
    return FakeReply()


@pytest.fixture
def slash_reply():
    return FakeReply(interactive=True)
