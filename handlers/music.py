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
Music Command Handlers

The behavior behind every command, shared by prefix (!play) and slash (/play)
registration. Registration code only builds an Invocation and calls
run_handler(); everything else happens here.

Each play-style handler:
    1. Scans the folder it plays from (fresh scan every time)
    2. Resolves the song or album, if the command takes one
    3. Picks a voice channel (VoiceManager)
    4. Makes exactly ONE SessionManager call
    5. Sends one primary reply

Failures are raised as MusicError subclasses carrying the reply text;
run_handler() turns them into replies.

| Command  | Plays                         | Order    | When the queue runs out   |
|----------|-------------------------------|----------|---------------------------|
| play     | one song from the whole tree  | -        | stop, "Finished playing"  |
| band     | songs/band (flat)             | shuffled | reshuffle, keep going     |
| lobo     | songs/lobo (all albums)       | shuffled | reshuffle, keep going     |
| lobo <n> | album n of songs/lobo         | in order | stop, "Finished Album n"  |
| mixtape  | songs/mixtape (flat)          | shuffled | stop, "All songs ..."     |
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)
user_logger = logging.getLogger('pizzabox')

# Import from our modules
from config import (
    BAND_FOLDER,
    COMMAND_PREFIX,
    LOBO_FOLDER,
    MESSAGES,
    MIXTAPE_FOLDER,
    PLAYLIST_FILE,
    SONGS_FOLDER,
)
from core.errors import (
    EmptyLibrary,
    InvalidSelection,
    LibraryNotFound,
    MusicError,
    NoVoiceChannel,
)
from core.playlist import (
    album_folder_path,
    build_entries,
    chunk_lines,
    filter_album,
    format_entry,
    paginate,
    read_playlist,
    write_playlist,
)
from core.session import ExhaustionPolicy, SessionManager, shuffled
from core.track import AudioFile, list_albums, scan_library
from systems.voice_manager import VoiceManager
from ui.views import PaginationView, album_embeds, playlist_embed
from utils.discord_helpers import format_guild_log, format_user_log, safe_disconnect
from utils.response_helper import ReplySink
from utils.search import parse_index, resolve_song

# Discord allows at most 10 embeds per message
MAX_EMBEDS_PER_MESSAGE = 10


@dataclass
class Invocation:
    """
    One command call, normalized across prefix and slash.

    input: Everything after the command name (None if nothing was given)
    """

    input: Optional[str]
    member: object
    guild: object
    reply: ReplySink


Handler = Callable[[Invocation], Awaitable[None]]


async def run_handler(handler: Handler, invocation: Invocation) -> None:
    """
    Run a handler and turn its failures into replies.

    MusicError -> its message; anything else -> logged with traceback and a
    generic error reply.
    """
    try:
        await handler(invocation)
    except MusicError as e:
        logger.debug(f"{format_guild_log(invocation.guild)}: {type(e).__name__}: {e}")
        await invocation.reply.primary_reply(str(e))
    except Exception:
        logger.exception(
            f"{format_guild_log(invocation.guild)}: Unexpected error in "
            f"{getattr(handler, '__name__', handler)}"
        )
        await invocation.reply.primary_reply(MESSAGES['error_generic'])


class MusicHandlers:
    """
    All command handlers, bound to one SessionManager and VoiceManager.

    Folder locations default to config and can be overridden (tests point
    them at a temporary library).
    """

    def __init__(
        self,
        sessions: SessionManager,
        voice: VoiceManager,
        songs_folder=SONGS_FOLDER,
        band_folder=BAND_FOLDER,
        lobo_folder=LOBO_FOLDER,
        mixtape_folder=MIXTAPE_FOLDER,
        playlist_file=PLAYLIST_FILE,
        prefix: str = COMMAND_PREFIX,
    ):
        self.sessions = sessions
        self.voice = voice
        self.songs_folder = Path(songs_folder)
        self.band_folder = Path(band_folder)
        self.lobo_folder = Path(lobo_folder)
        self.mixtape_folder = Path(mixtape_folder)
        self.playlist_file = Path(playlist_file)
        self.prefix = prefix

    @property
    def commands(self) -> Dict[str, Handler]:
        """Handlers by command name."""
        return {
            'play': self.play,
            'band': self.band,
            'lobo': self.lobo,
            'mixtape': self.mixtape,
            'skip': self.skip,
            'stop': self.stop,
            'album': self.album,
            'playlist': self.playlist,
        }

    # =========================================================================
    # PLAYBACK COMMANDS
    # =========================================================================

    async def play(self, inv: Invocation) -> None:
        """Play one song by number or name."""
        query = (inv.input or '').strip()
        if not query:
            raise InvalidSelection(MESSAGES['play_usage'].format(prefix=self.prefix))

        files = self._scan(
            self.songs_folder, recursive=True,
            missing='songs_folder_missing', empty='library_empty',
        )
        resolution = resolve_song(query, files)
        if not resolution.ok:
            raise InvalidSelection(resolution.error)

        track = resolution.selected
        logger.debug(
            f"{format_guild_log(inv.guild)}: '{query}' resolved to {track.relative_path} "
            f"({resolution.match_kind.value}, distance={resolution.distance})"
        )
        await self._start(
            inv, [track], ExhaustionPolicy.FINITE,
            started=MESSAGES['now_playing'].format(track=track.display_name),
            completion_notice=MESSAGES['track_finished'].format(track=track.display_name),
        )

    async def band(self, inv: Invocation) -> None:
        """Loop the house band folder in random order."""
        files = self._scan(self.band_folder, recursive=False)
        await self._start(
            inv, shuffled(files), ExhaustionPolicy.LOOPING,
            started=MESSAGES['band_started'],
        )

    async def lobo(self, inv: Invocation) -> None:
        """Loop every lobo song in random order, or play one album in order."""
        raw = (inv.input or '').strip()
        if not raw:
            files = self._scan(self.lobo_folder, recursive=True)
            await self._start(
                inv, shuffled(files), ExhaustionPolicy.LOOPING,
                started=MESSAGES['lobo_random'],
            )
            return

        number = parse_index(raw)
        if number is None:
            raise InvalidSelection(MESSAGES['lobo_usage'].format(prefix=self.prefix))

        try:
            albums = list_albums(self.lobo_folder)
        except LibraryNotFound as e:
            raise LibraryNotFound(MESSAGES['folder_missing'], folder=e.folder) from e
        if not albums:
            raise EmptyLibrary(MESSAGES['lobo_no_albums'])
        if not 1 <= number <= len(albums):
            raise InvalidSelection(
                MESSAGES['lobo_invalid_album'].format(number=number, total=len(albums))
            )

        album = albums[number - 1]
        files = self._scan(album.path, recursive=True)
        await self._start(
            inv, files, ExhaustionPolicy.FINITE,
            started=MESSAGES['lobo_album'].format(number=number, album=album.name),
            completion_notice=MESSAGES['album_finished'].format(number=number, album=album.name),
        )

    async def mixtape(self, inv: Invocation) -> None:
        """Play the mixtape folder once in random order."""
        files = self._scan(self.mixtape_folder, recursive=False)
        await self._start(
            inv, shuffled(files), ExhaustionPolicy.FINITE,
            started=MESSAGES['mixtape_started'],
            completion_notice=MESSAGES['mixtape_finished'],
        )

    async def skip(self, inv: Invocation) -> None:
        """Skip to the next queued song."""
        guild = self._require_guild(inv)
        await self.sessions.skip(guild.id)
        user_logger.info(f"{format_guild_log(guild)}: {format_user_log(inv.member)} skipped")
        await inv.reply.primary_reply(MESSAGES['skipped'])

    async def stop(self, inv: Invocation) -> None:
        """Stop playback and leave voice."""
        guild = self._require_guild(inv)
        stopped = await self.sessions.stop(guild.id)

        # Connected without a session (e.g. left over from before a restart)
        if not stopped:
            vc = getattr(guild, 'voice_client', None)
            if vc is not None:
                await safe_disconnect(vc, force=True)
                stopped = True

        if stopped:
            user_logger.info(f"{format_guild_log(guild)}: {format_user_log(inv.member)} stopped playback")
            await inv.reply.primary_reply(MESSAGES['stopped'])
        else:
            await inv.reply.primary_reply(MESSAGES['stop_not_connected'])

    # =========================================================================
    # LISTINGS
    # =========================================================================

    async def playlist(self, inv: Invocation) -> None:
        """Number every song, save playlist.json, and list it."""
        files = self._scan(
            self.songs_folder, recursive=True,
            missing='songs_folder_missing', empty='playlist_empty',
        )
        entries = build_entries(files)
        write_playlist(entries, self.playlist_file)
        lines = [format_entry(entry) for entry in entries]

        if inv.reply.interactive:
            pages = paginate(lines)
            if len(pages) > 1:
                view = PaginationView(pages, inv.reply.user_id)
                view.message = await inv.reply.primary_reply(embed=view.current_embed(), view=view)
            else:
                await inv.reply.primary_reply(embed=playlist_embed(pages[0], 0, 1))
            return

        chunks = chunk_lines(lines, header=MESSAGES['playlist_header'])
        await inv.reply.primary_reply(chunks[0])
        for chunk in chunks[1:]:
            await inv.reply.follow_up(chunk)

    async def album(self, inv: Invocation) -> None:
        """List the playlist ids of one folder."""
        folder_name = (inv.input or '').strip()
        if not folder_name:
            raise InvalidSelection(MESSAGES['album_usage'].format(prefix=self.prefix))

        folder = album_folder_path(folder_name, self.songs_folder)
        songs = filter_album(read_playlist(self.playlist_file), folder)
        if not songs:
            raise EmptyLibrary(MESSAGES['album_no_songs'].format(folder=folder_name))

        embeds = album_embeds(folder_name, [format_entry(song) for song in songs])
        batches = [
            embeds[i:i + MAX_EMBEDS_PER_MESSAGE]
            for i in range(0, len(embeds), MAX_EMBEDS_PER_MESSAGE)
        ]
        await inv.reply.primary_reply(embeds=batches[0])
        for batch in batches[1:]:
            await inv.reply.follow_up(embeds=batch)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _scan(
        self,
        folder: Path,
        recursive: bool,
        missing: str = 'folder_missing',
        empty: str = 'folder_empty',
    ) -> List[AudioFile]:
        """Scan folder, raising the reply for a missing or empty folder."""
        try:
            files = scan_library(folder, recursive=recursive)
        except LibraryNotFound as e:
            raise LibraryNotFound(MESSAGES[missing], folder=e.folder) from e
        if not files:
            raise EmptyLibrary(MESSAGES[empty])
        return files

    @staticmethod
    def _require_guild(inv: Invocation):
        if inv.guild is None:
            raise NoVoiceChannel(MESSAGES['not_in_voice'])
        return inv.guild

    async def _start(
        self,
        inv: Invocation,
        files: Sequence[AudioFile],
        policy: ExhaustionPolicy,
        started: str,
        completion_notice: Optional[str] = None,
    ) -> None:
        guild = self._require_guild(inv)
        channel = self.voice.resolve_channel(inv.member, guild)

        # Connecting can take longer than an interaction's 3 second window
        await inv.reply.defer()
        await self.sessions.start_or_replace(
            guild.id, channel, files, policy,
            notifier=inv.reply.notify,
            completion_notice=completion_notice,
        )

        user_logger.info(
            f"{format_guild_log(guild)}: {format_user_log(inv.member)} started "
            f"{len(files)} song(s) in {getattr(channel, 'name', channel)}"
        )
        await inv.reply.primary_reply(started)


__all__ = ['Invocation', 'Handler', 'run_handler', 'MusicHandlers']
