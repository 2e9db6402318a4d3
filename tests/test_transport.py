"""
Disnake player adapter: end-of-track callbacks hop from the audio thread to
the event loop, and never reach a detached listener.
"""

import asyncio
import threading
from unittest.mock import AsyncMock, Mock

import disnake
import pytest

from core.transport import DisnakeAudioPlayer, DisnakeConnection, DisnakeTransport


def voice_client(playing=True):
    vc = Mock()
    vc.is_connected.return_value = True
    vc.is_playing.return_value = playing
    vc.is_paused.return_value = False
    return vc


def run_after_in_thread(vc, error=None):
    after = vc.play.call_args.kwargs['after']
    thread = threading.Thread(target=after, args=(error,))
    thread.start()
    thread.join()


class TestDisnakeAudioPlayer:
    @pytest.mark.asyncio
    async def test_track_end_reaches_listener_on_loop(self):
        player = DisnakeAudioPlayer(asyncio.get_running_loop())
        player.voice_client = voice_client()
        calls = []
        player.set_listener(lambda error: calls.append((threading.current_thread(), error)))

        player.play('source')
        run_after_in_thread(player.voice_client)
        await asyncio.sleep(0.01)

        assert calls == [(threading.main_thread(), None)]

    @pytest.mark.asyncio
    async def test_detached_listener_gets_nothing(self):
        player = DisnakeAudioPlayer(asyncio.get_running_loop())
        player.voice_client = voice_client()
        calls = []
        player.set_listener(calls.append)

        player.play('source')
        player.set_listener(None)
        run_after_in_thread(player.voice_client, RuntimeError('late'))
        await asyncio.sleep(0.01)

        assert calls == []

    @pytest.mark.asyncio
    async def test_play_requires_connection(self):
        player = DisnakeAudioPlayer(asyncio.get_running_loop())
        with pytest.raises(disnake.ClientException):
            player.play('source')

    @pytest.mark.asyncio
    async def test_stop_only_when_playing(self):
        player = DisnakeAudioPlayer(asyncio.get_running_loop())
        player.voice_client = voice_client(playing=False)
        player.stop()
        player.voice_client.stop.assert_not_called()

        player.voice_client.is_playing.return_value = True
        player.stop()
        player.voice_client.stop.assert_called_once()


class TestDisnakeConnection:
    @pytest.mark.asyncio
    async def test_subscribe_and_destroy(self):
        vc = voice_client()
        vc.disconnect = AsyncMock()
        connection = DisnakeConnection(vc)
        player = DisnakeAudioPlayer(asyncio.get_running_loop())

        connection.subscribe(player)
        await connection.destroy()

        assert player.voice_client is vc
        vc.disconnect.assert_awaited_once_with(force=True)


class TestDisnakeTransport:
    @pytest.mark.asyncio
    async def test_moving_keeps_the_same_handle(self):
        guild = Mock(id=1)
        guild.change_voice_state = AsyncMock()
        here, there = Mock(guild=guild), Mock(guild=guild)
        vc = voice_client()
        vc.channel = here
        vc.move_to = AsyncMock()
        guild.voice_client = vc
        transport = DisnakeTransport()

        first = await transport.connect(here)
        second = await transport.connect(there)

        vc.move_to.assert_awaited_once_with(there)
        assert second is first

        replacement = voice_client()
        replacement.channel = there
        guild.voice_client = replacement
        third = await transport.connect(there)
        assert third is not first
        assert third.voice_client is replacement
