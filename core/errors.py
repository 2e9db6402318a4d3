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
Music Errors

Every failure a command can report to the user. Each error carries the text
that ends up in the reply, so the command boundary (handlers.music.run_handler)
only has to send str(error).

    MusicError
    ├── NotFound
    │   ├── LibraryNotFound   (songs/collection folder missing)
    │   └── PlaylistNotFound  (playlist.json missing or unreadable)
    ├── EmptyLibrary          (folder exists, no supported files)
    ├── InvalidSelection      (bad index, no match, bad album number)
    ├── NoVoiceChannel        (invoker not in voice, no fallback)
    ├── NothingPlaying        (skip with no active session)
    └── PlaybackError         (transport failed to play a track)
"""

from typing import Optional


class MusicError(Exception):
    """Base class for errors that become a user-facing reply."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFound(MusicError):
    """A folder, file, or playlist does not exist."""


class LibraryNotFound(NotFound):
    """Songs folder (or a collection inside it) is missing."""

    def __init__(self, message: str, folder: Optional[str] = None):
        super().__init__(message)
        self.folder = folder


class PlaylistNotFound(NotFound):
    """playlist.json is missing or malformed."""


class EmptyLibrary(MusicError):
    """Folder exists but holds no supported audio files."""


class InvalidSelection(MusicError):
    """User input doesn't select anything (index out of range, no close match)."""


class NoVoiceChannel(MusicError):
    """Invoker isn't in voice and no fallback channel is available."""


class NothingPlaying(MusicError):
    """Skip requested while nothing is playing."""


class PlaybackError(MusicError):
    """Transport reported a failure for a single track (non-fatal to the session)."""


__all__ = [
    'MusicError',
    'NotFound',
    'LibraryNotFound',
    'PlaylistNotFound',
    'EmptyLibrary',
    'InvalidSelection',
    'NoVoiceChannel',
    'NothingPlaying',
    'PlaybackError',
]
