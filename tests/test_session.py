"""
Playback session lifecycle, driven through SessionManager with a fake transport.

Every player callback goes through the guild's serial queue, so tests call
sessions.drain(guild_id) after anything that ends a track.
"""

import pytest

from core.errors import NoVoiceChannel, NothingPlaying
from core.session import ExhaustionPolicy, SessionState, shuffled

GUILD = 1


@pytest.fixture
def abc(make_files):
    return make_files('A.mp3', 'B.mp3', 'C.mp3')


def names(files):
    return [f.display_name for f in files]


class TestStart:
    @pytest.mark.asyncio
    async def test_plays_first_file(self, sessions, transport, channel, abc):
        started = await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)

        session = sessions.peek(GUILD)
        assert started == abc[0]
        assert session.state is SessionState.PLAYING
        assert session.current == abc[0]
        assert names(session.queue) == ['B', 'C']
        assert transport.player.played == [abc[0].path]
        assert transport.connections[0].subscribed == [transport.player]

    @pytest.mark.asyncio
    async def test_empty_file_list_is_rejected(self, sessions, channel):
        with pytest.raises(ValueError):
            await sessions.start_or_replace(GUILD, channel, [], ExhaustionPolicy.FINITE)

    @pytest.mark.asyncio
    async def test_connection_is_reused_for_same_channel(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)
        await sessions.start_or_replace(GUILD, channel, abc[1:], ExhaustionPolicy.FINITE)
        assert len(transport.connections) == 1
        assert len(transport.players) == 2

    @pytest.mark.asyncio
    async def test_other_channel_reconnects(self, sessions, transport, channel, other_channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)
        await sessions.start_or_replace(GUILD, other_channel, abc, ExhaustionPolicy.FINITE)
        assert [c.channel for c in transport.connections] == [channel, other_channel]
        assert sessions.peek(GUILD).connection.channel == other_channel

    @pytest.mark.asyncio
    async def test_superseded_connection_is_released(self, sessions, transport, channel, other_channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)
        await sessions.start_or_replace(GUILD, other_channel, abc, ExhaustionPolicy.FINITE)
        await sessions.stop(GUILD)

        assert [c.destroyed for c in transport.connections] == [1, 1]

    @pytest.mark.asyncio
    async def test_connect_failure_leaves_session_idle(self, sessions, transport, channel, abc):
        transport.connect_error = TimeoutError("voice handshake timed out")

        with pytest.raises(NoVoiceChannel, match="voice handshake timed out"):
            await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)

        session = sessions.peek(GUILD)
        assert session.state is SessionState.IDLE
        assert session.player is None
        assert transport.players == []


class TestReplace:
    @pytest.mark.asyncio
    async def test_late_callback_from_replaced_player_is_ignored(self, sessions, transport, channel, make_files):
        first = make_files('A.mp3', 'B.mp3')
        second = make_files('C.mp3', 'D.mp3')

        await sessions.start_or_replace(GUILD, channel, first, ExhaustionPolicy.FINITE)
        old_player = transport.player
        late_callback = old_player.listener

        await sessions.start_or_replace(GUILD, channel, second, ExhaustionPolicy.FINITE)
        new_player = transport.player
        assert old_player is not new_player
        assert old_player.stop_calls == 1

        # The old track's end arrives after the replacement
        late_callback(None)
        await sessions.drain(GUILD)
        assert sessions.peek(GUILD).current.display_name == 'C'

        # The new track's own end advances exactly once
        new_player.finish()
        await sessions.drain(GUILD)
        session = sessions.peek(GUILD)
        assert session.current.display_name == 'D'
        assert names(session.queue) == []
        assert new_player.played == [second[0].path, second[1].path]


class TestSkip:
    @pytest.mark.asyncio
    async def test_skip_advances_once(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)

        await sessions.skip(GUILD)
        await sessions.drain(GUILD)

        session = sessions.peek(GUILD)
        assert session.current == abc[1]
        assert names(session.queue) == ['C']
        assert transport.player.played == [abc[0].path, abc[1].path]

    @pytest.mark.asyncio
    async def test_skip_without_session(self, sessions, transport):
        with pytest.raises(NothingPlaying):
            await sessions.skip(GUILD)
        assert sessions.peek(GUILD) is None
        assert transport.connections == []

    @pytest.mark.asyncio
    async def test_skip_after_stop(self, sessions, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)
        await sessions.stop(GUILD)
        with pytest.raises(NothingPlaying):
            await sessions.skip(GUILD)

    @pytest.mark.asyncio
    async def test_skip_last_finite_track_finishes(self, sessions, reply, channel, make_files):
        files = make_files('A.mp3')
        await sessions.start_or_replace(
            GUILD, channel, files, ExhaustionPolicy.FINITE,
            notifier=reply.notify, completion_notice='done',
        )
        await sessions.skip(GUILD)
        await sessions.drain(GUILD)
        assert sessions.peek(GUILD).state is SessionState.IDLE
        assert reply.notices == ['done']


class TestStop:
    @pytest.mark.asyncio
    async def test_stop_tears_down(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.LOOPING)

        assert await sessions.stop(GUILD) is True
        await sessions.drain(GUILD)

        session = sessions.peek(GUILD)
        assert session.state is SessionState.IDLE
        assert session.player is None
        assert session.connection is None
        assert list(session.queue) == []
        assert transport.connections[0].destroyed == 1
        # Stopping doesn't count as a finished track
        assert transport.player.played == [abc[0].path]

    @pytest.mark.asyncio
    async def test_stop_twice(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)
        assert await sessions.stop(GUILD) is True
        assert await sessions.stop(GUILD) is False
        assert sessions.peek(GUILD).state is SessionState.IDLE
        assert transport.connections[0].destroyed == 1

    @pytest.mark.asyncio
    async def test_stop_fresh_session(self, sessions):
        assert await sessions.stop(GUILD) is False
        sessions.get(GUILD)
        assert await sessions.stop(GUILD) is False
        assert sessions.peek(GUILD).state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_guilds_are_independent(self, sessions, channel, other_channel, abc):
        await sessions.start_or_replace(1, channel, abc, ExhaustionPolicy.FINITE)
        await sessions.start_or_replace(2, other_channel, abc, ExhaustionPolicy.FINITE)

        await sessions.stop(1)

        assert sessions.peek(1).state is SessionState.IDLE
        assert sessions.peek(2).state is SessionState.PLAYING


class TestExhaustion:
    @pytest.mark.asyncio
    async def test_finite_single_track(self, sessions, transport, reply, channel, make_files):
        files = make_files('A.mp3')
        await sessions.start_or_replace(
            GUILD, channel, files, ExhaustionPolicy.FINITE,
            notifier=reply.notify, completion_notice='Finished playing **A**.',
        )
        player = transport.player

        player.finish()
        await sessions.drain(GUILD)

        session = sessions.peek(GUILD)
        assert session.state is SessionState.IDLE
        assert session.connection is None
        assert transport.connections[0].destroyed == 1
        assert reply.notices == ['Finished playing **A**.']

        # A duplicate end-of-track can't send the notice twice
        player.finish()
        await sessions.drain(GUILD)
        assert reply.notices == ['Finished playing **A**.']

    @pytest.mark.asyncio
    async def test_finite_plays_in_given_order(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.FINITE)
        for _ in range(3):
            transport.player.finish()
            await sessions.drain(GUILD)
        assert transport.player.played == [f.path for f in abc]
        assert sessions.peek(GUILD).state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_looping_single_track_repeats(self, sessions, transport, reply, channel, make_files):
        files = make_files('A.mp3')
        await sessions.start_or_replace(
            GUILD, channel, files, ExhaustionPolicy.LOOPING, notifier=reply.notify,
        )

        transport.player.finish()
        await sessions.drain(GUILD)

        session = sessions.peek(GUILD)
        assert session.state is SessionState.PLAYING
        assert transport.player.played == [files[0].path, files[0].path]
        assert reply.notices == []

    @pytest.mark.asyncio
    async def test_looping_reshuffles_full_set(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.LOOPING)
        for _ in range(3):
            transport.player.finish()
            await sessions.drain(GUILD)

        session = sessions.peek(GUILD)
        assert session.state is SessionState.PLAYING
        assert sorted(names([session.current] + list(session.queue))) == ['A', 'B', 'C']
        assert len(transport.player.played) == 4


class TestPlaybackErrors:
    @pytest.mark.asyncio
    async def test_unplayable_file_is_skipped(self, sessions, transport, reply, channel, abc):
        transport.failing_paths = {abc[0].path}
        await sessions.start_or_replace(
            GUILD, channel, abc, ExhaustionPolicy.LOOPING, notifier=reply.notify,
        )
        await sessions.drain(GUILD)

        session = sessions.peek(GUILD)
        assert session.current == abc[1]
        assert reply.notices == [
            'An error occurred while playing a song: Could not start A: cannot open /music/A.mp3'
        ]

    @pytest.mark.asyncio
    async def test_player_error_advances(self, sessions, transport, reply, channel, abc):
        await sessions.start_or_replace(
            GUILD, channel, abc, ExhaustionPolicy.FINITE, notifier=reply.notify,
        )
        transport.player.finish(error=RuntimeError('ffmpeg exited'))
        await sessions.drain(GUILD)

        assert sessions.peek(GUILD).current == abc[1]
        assert reply.notices == ['An error occurred while playing a song: ffmpeg exited']

    @pytest.mark.asyncio
    async def test_looping_gives_up_when_nothing_plays(self, sessions, transport, reply, channel, make_files):
        files = make_files('A.mp3')
        transport.failing_paths = {files[0].path}
        await sessions.start_or_replace(
            GUILD, channel, files, ExhaustionPolicy.LOOPING, notifier=reply.notify,
        )
        await sessions.drain(GUILD)

        assert sessions.peek(GUILD).state is SessionState.IDLE
        assert len(reply.notices) == 2
        assert reply.notices[1].startswith('None of the songs could be played')

    @pytest.mark.asyncio
    async def test_finite_error_on_last_track_still_completes(self, sessions, transport, reply, channel, make_files):
        files = make_files('A.mp3')
        transport.failing_paths = {files[0].path}
        await sessions.start_or_replace(
            GUILD, channel, files, ExhaustionPolicy.FINITE,
            notifier=reply.notify, completion_notice='done',
        )
        await sessions.drain(GUILD)

        assert sessions.peek(GUILD).state is SessionState.IDLE
        assert reply.notices[-1] == 'done'

    @pytest.mark.asyncio
    async def test_failing_notifier_does_not_break_session(self, sessions, transport, channel, make_files):
        async def broken_notifier(text):
            raise ConnectionError("channel gone")

        files = make_files('A.mp3')
        await sessions.start_or_replace(
            GUILD, channel, files, ExhaustionPolicy.FINITE,
            notifier=broken_notifier, completion_notice='done',
        )
        transport.player.finish()
        await sessions.drain(GUILD)
        assert sessions.peek(GUILD).state is SessionState.IDLE


class TestManager:
    @pytest.mark.asyncio
    async def test_shutdown_stops_everything(self, sessions, transport, channel, abc):
        await sessions.start_or_replace(GUILD, channel, abc, ExhaustionPolicy.LOOPING)
        await sessions.shutdown()
        assert transport.connections[0].destroyed == 1
        assert sessions.peek(GUILD) is None


def test_shuffled_is_permutation(make_files):
    files = make_files(*(f"{n}.mp3" for n in range(20)))
    original = list(files)
    result = shuffled(files)
    assert sorted(result, key=lambda f: f.display_name) == sorted(files, key=lambda f: f.display_name)
    assert files == original
