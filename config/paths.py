"""
File Paths and Directory Settings

This file contains file path configurations for advanced users.
Most users should NOT modify these settings unless they have specific needs.

Expected layout of the songs folder:

    songs/
      band/            <- !band     (flat, shuffled forever)
      lobo/            <- !lobo     (recursive, one subfolder per album)
        Album One/
        Album Two/
      mixtape/         <- !mixtape  (flat, shuffled once)
      ...anything else <- !play     (whole tree, by id or name)
      playlist.json    <- written by !playlist, read by !album
"""

import os
from pathlib import Path

# ==================================================================================
# USER-CONFIGURABLE PATHS
# ==================================================================================

# Anchor paths to bot root directory for CWD-independence
_BOT_ROOT = Path(__file__).resolve().parent.parent

# SONGS_FOLDER can be set via:
#   1. .env file in bot directory: SONGS_FOLDER=/path/to/songs
#   2. System environment variable: export SONGS_FOLDER=/path/to/songs
#   3. Fallback default (if neither is set): bot_root/songs/
SONGS_FOLDER = os.getenv('SONGS_FOLDER') or str(_BOT_ROOT / 'songs')

# Curated collections (subfolders of SONGS_FOLDER)
BAND_FOLDER = str(Path(SONGS_FOLDER) / 'band')
LOBO_FOLDER = str(Path(SONGS_FOLDER) / 'lobo')
MIXTAPE_FOLDER = str(Path(SONGS_FOLDER) / 'mixtape')

# ==================================================================================
# INTERNAL PATHS (DO NOT MODIFY)
# ==================================================================================

# PLAYLIST_FILE holds the numbered song list generated by the playlist command.
# Format: {"songs": [{"id": 1, "path": "band/Song.mp3"}, ...]}
# Paths always use forward slashes, regardless of operating system.
PLAYLIST_FILE = str(Path(SONGS_FOLDER) / 'playlist.json')

__all__ = ['SONGS_FOLDER', 'BAND_FOLDER', 'LOBO_FOLDER', 'MIXTAPE_FOLDER', 'PLAYLIST_FILE']
