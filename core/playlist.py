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
Playlist Index (playlist.json)

The /playlist command numbers every song in the library and saves the result
so /album can list the ids of one folder without rescanning.

File format:
    {
      "songs": [
        {"id": 1, "path": "band/Intro.mp3"},
        {"id": 2, "path": "lobo/Album One/Track.mp3"}
      ]
    }

Ids are 1-based positions in the recursive scan of the songs folder, which is
the same order /play uses for numbers.

Also holds the text helpers both listings use: pagination and chunking to
Discord's length limits.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

# Import from config
from config.display import EMBED_DESCRIPTION_LIMIT, MESSAGE_CHUNK_LIMIT, PLAYLIST_PAGE_SIZE
from config.messages import MESSAGES
from config.paths import PLAYLIST_FILE
from core.errors import LibraryNotFound, PlaylistNotFound
from core.track import AudioFile

T = TypeVar('T')

# {"id": int, "path": str}
PlaylistEntry = Dict[str, object]


# =============================================================================
# PLAYLIST FILE
# =============================================================================

def build_entries(files: Sequence[AudioFile]) -> List[PlaylistEntry]:
    """Number files 1..n in scan order."""
    return [
        {'id': index, 'path': audio_file.relative_path}
        for index, audio_file in enumerate(files, start=1)
    ]


def format_entry(entry: PlaylistEntry) -> str:
    """One listing line: "12: band/Intro.mp3"."""
    return f"{entry['id']}: {entry['path']}"


def write_playlist(entries: Sequence[PlaylistEntry], path=PLAYLIST_FILE) -> None:
    """
    Save entries to playlist.json atomically.

    Writes to a temp file in the same folder, then os.replace() swaps it in,
    so a reader never sees a half-written file.
    """
    target = str(path)
    _dir = os.path.dirname(target) or "."
    os.makedirs(_dir, exist_ok=True)
    with tempfile.NamedTemporaryFile('w', delete=False, dir=_dir, encoding='utf-8') as _tmp:
        json.dump({'songs': list(entries)}, _tmp, indent=2)
        _tmp_path = _tmp.name
    try:
        os.replace(_tmp_path, target)
    except Exception:
        os.unlink(_tmp_path)
        raise
    logger.debug("Wrote %d playlist entries to %s", len(entries), target)


def read_playlist(path=PLAYLIST_FILE) -> List[PlaylistEntry]:
    """
    Load entries from playlist.json.

    Raises:
        PlaylistNotFound: File missing, not JSON, or not the expected shape
    """
    target = str(path)
    if not os.path.exists(target):
        raise PlaylistNotFound(MESSAGES['playlist_file_missing'])

    try:
        with open(target, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, ValueError, OSError) as e:
        logger.warning(f"Could not read playlist file: {e}")
        raise PlaylistNotFound(MESSAGES['playlist_file_invalid']) from e

    songs = data.get('songs') if isinstance(data, dict) else None
    if not isinstance(songs, list):
        raise PlaylistNotFound(MESSAGES['playlist_file_invalid'])

    # Skip malformed rows rather than failing the whole listing
    return [
        song for song in songs
        if isinstance(song, dict) and isinstance(song.get('path'), str) and 'id' in song
    ]


# =============================================================================
# ALBUM FILTER
# =============================================================================

def album_folder_path(folder_name: str, songs_root) -> str:
    """
    Turn a user-supplied folder name into a path relative to the songs root.

    Raises:
        LibraryNotFound: Folder doesn't exist, or points outside the songs root
                         (e.g. "../secrets" or the root itself)
    """
    root = Path(songs_root).resolve()
    target = (root / folder_name.strip()).resolve()

    missing = LibraryNotFound(
        MESSAGES['album_folder_missing'].format(folder=folder_name.strip()),
        folder=str(target),
    )

    try:
        relative = target.relative_to(root)
    except ValueError:
        logger.debug("Rejected album folder outside songs root: %r", folder_name)
        raise missing
    if not relative.parts or not target.is_dir():
        raise missing

    return relative.as_posix()


def filter_album(entries: Sequence[PlaylistEntry], folder: str) -> List[PlaylistEntry]:
    """Entries inside folder (any depth). "band" matches "band/x.mp3", not "bandits/x.mp3"."""
    prefix = folder + '/'
    return [
        entry for entry in entries
        if entry['path'] == folder or entry['path'].startswith(prefix)
    ]


# =============================================================================
# PAGINATION / CHUNKING
# =============================================================================

def paginate(items: Sequence[T], page_size: int = PLAYLIST_PAGE_SIZE) -> List[List[T]]:
    """Split items into pages of page_size (last page may be shorter)."""
    return [list(items[i:i + page_size]) for i in range(0, len(items), page_size)]


def chunk_lines(lines: Sequence[str], limit: int = MESSAGE_CHUNK_LIMIT, header: str = '') -> List[str]:
    """
    Pack lines into messages no longer than limit.

    Each line keeps its trailing newline. header starts the first message.
    """
    chunks: List[str] = []
    buffer = header + '\n' if header else ''
    for line in lines:
        if buffer and len(buffer) + len(line) + 1 > limit:
            chunks.append(buffer)
            buffer = ''
        buffer += f"{line}\n"
    if buffer.strip():
        chunks.append(buffer)
    return chunks


def chunk_description(lines: Sequence[str], limit: int = EMBED_DESCRIPTION_LIMIT) -> List[str]:
    """Pack lines into newline-joined embed descriptions no longer than limit."""
    chunks: List[str] = []
    current = ''
    for line in lines:
        if current and len(current) + len(line) + 1 > limit:
            chunks.append(current)
            current = ''
        current += ('\n' if current else '') + line
    if current:
        chunks.append(current)
    return chunks
