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
Audio Files and Library Scanning

Represents individual audio files and scans folders for them.
Also lists album subfolders inside a collection.

Scans are never cached: every command rescans, so files added or removed on
disk show up on the next command.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List

logger = logging.getLogger(__name__)

# Import from config
from config.audio_settings import SUPPORTED_AUDIO_FORMATS
from core.errors import LibraryNotFound


@dataclass(frozen=True)
class AudioFile:
    """
    A single playable file discovered by a scan.

    Attributes:
        path: Absolute path to the file
        display_name: Filename without extension ("Hopes and Dreams")
        relative_path: Path relative to the library root, forward slashes
                       on every OS ("lobo/Album One/Hopes and Dreams.mp3")

    Design notes:
        - Immutable; identity is the path (equality and hash use path only)
        - relative_path is what playlist.json stores
    """

    path: Path
    display_name: str
    relative_path: str

    @classmethod
    def from_path(cls, path: Path, library_root: Path) -> "AudioFile":
        """Build an AudioFile for path, relative to library_root."""
        return cls(
            path=path,
            display_name=path.stem,
            relative_path=path.relative_to(library_root).as_posix(),
        )

    def __eq__(self, other) -> bool:
        """Files are equal if they point at the same path."""
        return isinstance(other, AudioFile) and self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"AudioFile({self.relative_path})"


@dataclass(frozen=True)
class Album:
    """An album subfolder inside a collection (e.g. songs/lobo/Album One)."""

    name: str
    path: Path


def is_audio_file(path: Path, extensions: Iterable[str] = SUPPORTED_AUDIO_FORMATS) -> bool:
    """Check extension against the whitelist (case-insensitive)."""
    allowed = {ext.lower() for ext in extensions}
    return path.suffix.lower() in allowed


def _sorted_entries(folder: Path) -> List[Path]:
    """Directory entries in case-folded name order (stable across calls)."""
    return sorted(folder.iterdir(), key=lambda entry: (entry.name.casefold(), entry.name))


def _walk(folder: Path, recursive: bool) -> Iterator[Path]:
    """
    Yield files under folder in walk order.

    Subdirectories are expanded in place (depth-first), so a folder's
    contents appear where the folder itself sorts.
    """
    for entry in _sorted_entries(folder):
        if entry.is_dir():
            if recursive:
                yield from _walk(entry, recursive)
        elif entry.is_file():
            yield entry


def scan_library(
    folder,
    recursive: bool = True,
    library_root=None,
    extensions: Iterable[str] = SUPPORTED_AUDIO_FORMATS,
) -> List[AudioFile]:
    """
    Scan a folder for supported audio files.

    Args:
        folder: Folder to scan
        recursive: True = include every subfolder (any depth),
                   False = only files directly inside folder
        library_root: Base for relative_path (defaults to folder)
        extensions: Allowed extensions (case-insensitive)

    Returns:
        List of AudioFile in walk order (may be empty)

    Raises:
        LibraryNotFound: folder does not exist

    Example:
        files = scan_library(SONGS_FOLDER)                   # whole tree
        files = scan_library(BAND_FOLDER, recursive=False)   # one flat folder
    """
    target = Path(folder).resolve()
    root = Path(library_root).resolve() if library_root else target

    if not target.is_dir():
        logger.warning("Music folder not found: %s", target)
        raise LibraryNotFound(f"Folder not found: {target}", folder=str(target))

    allowed = [ext.lower() for ext in extensions]
    files = [
        AudioFile.from_path(path, root)
        for path in _walk(target, recursive)
        if is_audio_file(path, allowed)
    ]

    logger.debug("Scanned %d audio files in %s (recursive=%s)", len(files), target, recursive)
    return files


def list_albums(folder) -> List[Album]:
    """
    List album subfolders of a collection, sorted by name (case-insensitive).

    Raises:
        LibraryNotFound: folder does not exist
    """
    target = Path(folder).resolve()
    if not target.is_dir():
        raise LibraryNotFound(f"Folder not found: {target}", folder=str(target))

    return [
        Album(name=entry.name, path=entry)
        for entry in _sorted_entries(target)
        if entry.is_dir()
    ]

