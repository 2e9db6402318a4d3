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
Playback Session - Per-Guild Playback State

One PlaybackSession per guild owns the voice connection, the audio player and
the queue of files still to play. Command handlers never touch those handles;
they go through SessionManager, which runs every operation on the guild's
SerialQueue.

State machine:

    IDLE ──start_or_replace──> CONNECTING ──connected──> PLAYING
      ^                                                     │
      └──────────── stop / finite queue exhausted ──────────┘

Events (SessionEvent) come from two places:
    - commands: SKIP_REQUESTED, STOP_REQUESTED
    - the player: TRACK_FINISHED, TRACK_ERRORED (tagged with a playback token)

Every track gets a new playback token. Player events carrying an older token
are ignored, which is how a replaced or stopped player's late callbacks get
dropped.
"""

import logging
import random
from collections import deque
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)  # For debug/error logs
user_logger = logging.getLogger('pizzabox')  # For user-facing messages

# Import our systems
from config.messages import MESSAGES
from core.errors import NoVoiceChannel, NothingPlaying, PlaybackError
from core.track import AudioFile
from core.transport import AudioPlayer, VoiceConnection, VoiceTransport
from systems.serial_queue import SerialQueue
from utils.discord_helpers import format_guild_log

# Sends one message to wherever the session was started from
Notifier = Callable[[str], Awaitable[Any]]


class SessionState(Enum):
    """
    IDLE: Nothing playing, no connection held by the session
    CONNECTING: Joining voice for a new command
    PLAYING: Player installed, a track is playing (or about to)
    """
    IDLE = 0
    CONNECTING = 1
    PLAYING = 2


class ExhaustionPolicy(Enum):
    """What happens when the queue runs dry."""
    LOOPING = "looping"  # Reshuffle every source file and keep going
    FINITE = "finite"    # Stop, disconnect, send the completion notice


class SessionEvent(Enum):
    TRACK_FINISHED = "track_finished"
    TRACK_ERRORED = "track_errored"
    SKIP_REQUESTED = "skip_requested"
    STOP_REQUESTED = "stop_requested"


def shuffled(files: Sequence[AudioFile]) -> List[AudioFile]:
    """Shuffled copy of files (Fisher-Yates via random.shuffle)."""
    result = list(files)
    random.shuffle(result)
    return result


class PlaybackSession:
    """
    Per-guild playback state.

    Invariants:
        - player present => connection present
        - queue is only meaningful while a player is present
        - a new start_or_replace() replaces player and queue wholesale

    All methods here assume they run on the guild's SerialQueue; use
    SessionManager rather than calling them directly.
    """

    def __init__(self, guild_id: int, transport: VoiceTransport, mailbox: SerialQueue, bot=None):
        self.guild_id = guild_id
        self.bot = bot
        self.transport = transport
        self.mailbox = mailbox

        self.connection: Optional[VoiceConnection] = None
        self.player: Optional[AudioPlayer] = None
        self.queue: Deque[AudioFile] = deque()
        self.current: Optional[AudioFile] = None
        self.policy: ExhaustionPolicy = ExhaustionPolicy.FINITE
        self.source_files: List[AudioFile] = []
        self.state: SessionState = SessionState.IDLE

        self.notifier: Optional[Notifier] = None
        self.completion_notice: Optional[str] = None

        self._token = 0
        self._consecutive_failures = 0

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_active(self) -> bool:
        return self.player is not None and self.state == SessionState.PLAYING

    def _log_name(self) -> str:
        return format_guild_log(self.guild_id, self.bot)

    # =========================================================================
    # Commands
    # =========================================================================

    async def start_or_replace(
        self,
        channel,
        files: Sequence[AudioFile],
        policy: ExhaustionPolicy,
        notifier: Optional[Notifier] = None,
        completion_notice: Optional[str] = None,
    ) -> AudioFile:
        """
        Replace whatever is playing with files and start the first one.

        Reuses the voice connection when it is already in channel.

        Returns:
            The file that started playing

        Raises:
            NoVoiceChannel: Couldn't connect to channel
        """
        if not files:
            raise ValueError("start_or_replace needs at least one file")

        # Drop the old player first so its callbacks can't reach the new queue
        self._invalidate_tokens()
        self._retire_player()
        self.queue.clear()
        self.current = None

        self.state = SessionState.CONNECTING
        try:
            await self._ensure_connection(channel)
        except Exception as e:
            logger.warning(f"{self._log_name()}: Voice connect failed: {e}")
            await self._teardown()
            raise NoVoiceChannel(MESSAGES['cant_connect'].format(error=e)) from e

        self.player = self.transport.create_player()
        self.connection.subscribe(self.player)

        self.queue = deque(files)
        self.source_files = list(files)
        self.policy = policy
        self.notifier = notifier
        self.completion_notice = completion_notice
        self._consecutive_failures = 0
        self.state = SessionState.PLAYING

        user_logger.info(
            f"{self._log_name()}: Started {policy.value} session with {len(files)} file(s)"
        )
        return await self._play_front()

    def skip(self) -> None:
        """
        Stop the current track; the TRACK_FINISHED it causes advances the queue.

        Raises:
            NothingPlaying: No active player
        """
        if not self.is_active:
            raise NothingPlaying(MESSAGES['skip_nothing'])
        logger.debug(f"{self._log_name()}: Skip requested")
        self.player.stop()

    async def stop(self) -> bool:
        """
        Stop playback and leave voice. Safe to call any number of times.

        Returns:
            True if something was playing or connected
        """
        was_active = self.player is not None or self.connection is not None
        self._invalidate_tokens()
        await self._teardown()
        if was_active:
            user_logger.info(f"{self._log_name()}: Stopped playback")
        return was_active

    # =========================================================================
    # Event handling
    # =========================================================================

    async def handle(self, event: SessionEvent, token: Optional[int] = None, error=None):
        """Apply one event. Player events with a stale token are ignored."""
        if event is SessionEvent.SKIP_REQUESTED:
            return self.skip()
        if event is SessionEvent.STOP_REQUESTED:
            return await self.stop()

        if token != self._token or self.player is None:
            logger.debug(f"{self._log_name()}: Ignoring {event.value} from stale playback token {token}")
            return None

        if event is SessionEvent.TRACK_ERRORED:
            return await self._on_track_error(error)

        self._consecutive_failures = 0
        return await self.advance()

    async def advance(self) -> Optional[AudioFile]:
        """
        Play the next queued file.

        Empty queue: LOOPING reshuffles every source file, FINITE tears down
        and sends the completion notice (once).
        """
        if self.player is None:
            return None

        if not self.queue:
            if self.policy is ExhaustionPolicy.LOOPING and self.source_files:
                logger.debug(f"{self._log_name()}: Queue exhausted, reshuffling {len(self.source_files)} files")
                self.queue = deque(shuffled(self.source_files))
            else:
                notifier, notice = self.notifier, self.completion_notice
                self._invalidate_tokens()
                await self._teardown()
                user_logger.info(f"{self._log_name()}: Queue finished")
                if notice:
                    await self._notify(notice, notifier)
                return None

        return await self._play_front()

    def on_player_event(self, token: int, error: Optional[Exception]) -> None:
        """Player listener (runs on the event loop). Posts the event to the mailbox."""
        event = SessionEvent.TRACK_ERRORED if error else SessionEvent.TRACK_FINISHED
        self.mailbox.post(self.handle, event, token, error)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _play_front(self) -> Optional[AudioFile]:
        audio_file = self.queue.popleft()
        self.current = audio_file
        self._token += 1
        token = self._token

        self.player.set_listener(lambda error, token=token: self.on_player_event(token, error))
        try:
            resource = self.transport.create_resource(audio_file.path)
            self.player.play(resource)
        except Exception as e:
            # Reported like a player error, through the mailbox
            failure = PlaybackError(f"Could not start {audio_file.display_name}: {e}")
            logger.error(f"{self._log_name()}: {failure}")
            self.mailbox.post(self.handle, SessionEvent.TRACK_ERRORED, token, failure)
            return audio_file

        logger.debug(f"{self._log_name()}: Now playing: {audio_file.display_name}")
        return audio_file

    async def _on_track_error(self, error) -> Optional[AudioFile]:
        failed = self.current
        self._consecutive_failures += 1
        logger.warning(
            f"{self._log_name()}: Playback error on "
            f"{failed.relative_path if failed else 'unknown file'}: {error}"
        )
        await self._notify(MESSAGES['playback_error'].format(error=error))

        # Every file failed in a row: a looping session would spin forever
        if (self.policy is ExhaustionPolicy.LOOPING
                and self._consecutive_failures >= len(self.source_files)):
            notifier = self.notifier
            self._invalidate_tokens()
            await self._teardown()
            user_logger.warning(f"{self._log_name()}: Every file failed, stopping")
            await self._notify(MESSAGES['playback_gave_up'], notifier)
            return None

        return await self.advance()

    async def _ensure_connection(self, channel) -> None:
        conn = self.connection
        if conn is not None and conn.is_connected() and conn.channel == channel:
            return
        self.connection = await self.transport.connect(channel)
        # Transports that hand out a new handle per channel: release the old one
        if conn is not None and conn is not self.connection:
            await conn.destroy()

    def _invalidate_tokens(self) -> None:
        self._token += 1

    def _retire_player(self) -> None:
        player = self.player
        self.player = None
        if player is not None:
            player.set_listener(None)
            player.stop()

    async def _teardown(self) -> None:
        """Stop the player, clear the queue, leave voice, back to IDLE."""
        self._retire_player()
        self.queue.clear()
        self.current = None
        self.source_files = []
        self.notifier = None
        self.completion_notice = None
        self._consecutive_failures = 0

        connection = self.connection
        self.connection = None
        self.state = SessionState.IDLE
        if connection is not None:
            await connection.destroy()

    async def _notify(self, text: str, notifier: Optional[Notifier] = None) -> None:
        notifier = notifier or self.notifier
        if notifier is None:
            return
        try:
            await notifier(text)
        except Exception as e:
            logger.warning(f"{self._log_name()}: Could not send notice: {e}")


# =============================================================================
# Session Management (per-guild keyed store)
# =============================================================================

class SessionManager:
    """
    Owns every guild's PlaybackSession and SerialQueue.

    Sessions are created lazily on first play-style command. skip/stop on a
    guild without a session never create one.
    """

    def __init__(self, transport: VoiceTransport, bot=None):
        self.transport = transport
        self.bot = bot
        self._sessions: Dict[int, PlaybackSession] = {}
        self._queues: Dict[int, SerialQueue] = {}

    def _queue(self, guild_id: int) -> SerialQueue:
        if guild_id not in self._queues:
            self._queues[guild_id] = SerialQueue(guild_id, self.bot)
        return self._queues[guild_id]

    def get(self, guild_id: int) -> PlaybackSession:
        """Get or create the guild's session."""
        if guild_id not in self._sessions:
            self._sessions[guild_id] = PlaybackSession(
                guild_id, self.transport, self._queue(guild_id), self.bot
            )
        return self._sessions[guild_id]

    def peek(self, guild_id: int) -> Optional[PlaybackSession]:
        """The guild's session, or None if it never played anything."""
        return self._sessions.get(guild_id)

    async def start_or_replace(
        self,
        guild_id: int,
        channel,
        files: Sequence[AudioFile],
        policy: ExhaustionPolicy,
        notifier: Optional[Notifier] = None,
        completion_notice: Optional[str] = None,
    ) -> AudioFile:
        session = self.get(guild_id)
        return await self._queue(guild_id).call(
            session.start_or_replace, channel, files, policy, notifier, completion_notice
        )

    async def skip(self, guild_id: int) -> None:
        """Raises NothingPlaying if the guild has no active player."""
        session = self.peek(guild_id)
        if session is None:
            raise NothingPlaying(MESSAGES['skip_nothing'])
        await self._queue(guild_id).call(session.handle, SessionEvent.SKIP_REQUESTED)

    async def stop(self, guild_id: int) -> bool:
        """Returns True if something was playing or connected."""
        session = self.peek(guild_id)
        if session is None:
            return False
        return await self._queue(guild_id).call(session.handle, SessionEvent.STOP_REQUESTED)

    async def drain(self, guild_id: int) -> None:
        """Wait for the guild's queued commands and events to finish."""
        if guild_id in self._queues:
            await self._queues[guild_id].drain()

    async def shutdown(self) -> None:
        """Stop every session and cancel every queue processor."""
        for guild_id in list(self._sessions):
            try:
                await self.stop(guild_id)
            except Exception as e:
                logger.debug(f"{format_guild_log(guild_id, self.bot)}: Stop during shutdown failed: {e}")
        for queue in list(self._queues.values()):
            await queue.shutdown()
        self._sessions.clear()
        self._queues.clear()


__all__ = [
    'Notifier',
    'SessionState',
    'ExhaustionPolicy',
    'SessionEvent',
    'shuffled',
    'PlaybackSession',
    'SessionManager',
]
