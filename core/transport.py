# Copyright (C) 2025 grodz
#
# This file is part of Pizzabox.
#
# Pizzabox is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Voice Transport

The only voice surface a PlaybackSession touches:

    transport.connect(channel)        -> VoiceConnection
    transport.create_player()         -> AudioPlayer
    transport.create_resource(path)   -> playable resource
    connection.subscribe(player)
    connection.destroy()
    player.set_listener(fn)           fn(error | None) once per finished track
    player.play(resource)
    player.stop()                     ends the track; the listener fires with None

DisnakeTransport implements it over disnake.VoiceClient and FFmpeg sources.
Tests swap in a fake (tests/conftest.py).

THREADING:
    disnake calls the `after` callback on its audio thread. DisnakeAudioPlayer
    hands every callback to the event loop with loop.call_soon_threadsafe(),
    so listeners always run on the loop thread.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol

import disnake

logger = logging.getLogger(__name__)

# Import from config
from config.audio_settings import VOICE_CONNECT_TIMEOUT
from utils.discord_helpers import (
    can_connect_to_channel,
    make_audio_source,
    safe_disconnect,
    safe_voice_state_change,
)

# Receives None when a track ends normally, or the exception that ended it
PlaybackListener = Callable[[Optional[Exception]], None]


# =============================================================================
# TRANSPORT SURFACE
# =============================================================================

class AudioPlayer(Protocol):
    def set_listener(self, listener: Optional[PlaybackListener]) -> None: ...

    def play(self, resource: Any) -> None: ...

    def stop(self) -> None: ...


class VoiceConnection(Protocol):
    channel: Any

    def is_connected(self) -> bool: ...

    def subscribe(self, player: AudioPlayer) -> None: ...

    async def destroy(self) -> None: ...


class VoiceTransport(Protocol):
    async def connect(self, channel) -> VoiceConnection: ...

    def create_player(self) -> AudioPlayer: ...

    def create_resource(self, path) -> Any: ...


# =============================================================================
# DISNAKE IMPLEMENTATION
# =============================================================================

class DisnakeAudioPlayer:
    """
    Plays one FFmpeg source at a time on a subscribed VoiceClient.

    Holds a single listener slot: set_listener() replaces whatever was there,
    and set_listener(None) detaches it (used when a session retires a player).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._listener: Optional[PlaybackListener] = None
        self.voice_client: Optional[disnake.VoiceClient] = None

    def set_listener(self, listener: Optional[PlaybackListener]) -> None:
        self._listener = listener

    def play(self, resource) -> None:
        if not self.voice_client or not self.voice_client.is_connected():
            raise disnake.ClientException("Not connected to voice.")

        # Bind the listener active at play time; a later set_listener() must
        # not receive this track's callback
        listener = self._listener

        def after_track(error):
            """
            Fired when the track ends.

            CRITICAL: This runs in disnake's audio thread (NOT the event loop thread).
            """
            if error:
                logger.debug("Audio thread reported: %s", error)
            if listener is None or self._loop.is_closed():
                return
            self._loop.call_soon_threadsafe(self._emit, listener, error)

        self.voice_client.play(resource, after=after_track)

    def _emit(self, listener: PlaybackListener, error: Optional[Exception]) -> None:
        if listener is not self._listener:
            logger.debug("Dropping callback for a detached listener")
            return
        listener(error)

    def stop(self) -> None:
        vc = self.voice_client
        if not vc:
            return
        try:
            if vc.is_playing() or vc.is_paused():
                vc.stop()
        except (AttributeError, RuntimeError) as e:
            logger.debug("Voice client stop failed (ignored): %s", e)


class DisnakeConnection:
    """A live guild voice connection (wraps disnake.VoiceClient)."""

    def __init__(self, voice_client: disnake.VoiceClient):
        self.voice_client = voice_client

    @property
    def channel(self):
        return self.voice_client.channel

    def is_connected(self) -> bool:
        return self.voice_client.is_connected()

    def subscribe(self, player: DisnakeAudioPlayer) -> None:
        player.voice_client = self.voice_client

    async def destroy(self) -> None:
        await safe_disconnect(self.voice_client, force=True)


class DisnakeTransport:
    """VoiceTransport over disnake's built-in voice client (needs PyNaCl and FFmpeg)."""

    def __init__(self, connect_timeout: float = VOICE_CONNECT_TIMEOUT):
        self.connect_timeout = connect_timeout
        # guild_id -> handle, reused while the guild keeps the same voice client
        self._connections: Dict[int, DisnakeConnection] = {}

    async def connect(self, channel) -> DisnakeConnection:
        """
        Join channel, reusing (and moving) the guild's existing voice client.

        A moved client comes back as the same handle, so destroying a
        superseded handle never disconnects the live client.

        Raises:
            disnake.ClientException / disnake.HTTPException / asyncio.TimeoutError
        """
        guild = channel.guild
        vc = guild.voice_client

        if vc and vc.is_connected():
            if vc.channel != channel:
                logger.debug("Moving voice client to %s", channel)
                await vc.move_to(channel)
        else:
            if not can_connect_to_channel(channel):
                raise disnake.ClientException(f"Missing Connect or Speak permission in {channel.name}")
            if vc:
                # Half-open client left over from a dropped connection
                await safe_disconnect(vc, force=True)
            vc = await channel.connect(timeout=self.connect_timeout, reconnect=True)

        # Self-deafen (bot doesn't need to hear users)
        await safe_voice_state_change(guild, channel, self_deaf=True)
        connection = self._connections.get(guild.id)
        if connection is None or connection.voice_client is not vc:
            connection = DisnakeConnection(vc)
            self._connections[guild.id] = connection
        return connection

    def create_player(self) -> DisnakeAudioPlayer:
        return DisnakeAudioPlayer(asyncio.get_running_loop())

    def create_resource(self, path):
        return make_audio_source(str(path))


__all__ = [
    'PlaybackListener',
    'AudioPlayer',
    'VoiceConnection',
    'VoiceTransport',
    'DisnakeAudioPlayer',
    'DisnakeConnection',
    'DisnakeTransport',
]
