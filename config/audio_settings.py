# Part of Pizzabox - Licensed under GPL 3.0
# See LICENSE.md for details

r"""
========================================================================================================
PIZZABOX MUSIC BOT - AUDIO & VOICE SETTINGS
========================================================================================================

This file contains audio playback, voice connection and song lookup settings.

Most users won't need to change these unless experiencing audio quality or connection issues.

PRIORITY:
  Python setting (if not None) > .env file > built-in default

========================================================================================================
"""

import os
from typing import Final

# =========================================================================================================
# Internal helper functions (used by settings below)
# =========================================================================================================

def _get_config(python_value, env_name, default, converter=None):
    """Get configuration value using priority system (Python > .env > default)."""
    if python_value is not None:
        return python_value
    env_value = os.getenv(env_name)
    if env_value is not None:
        return converter(env_value) if converter else env_value
    return default

# =========================================================================================================
# AUDIO FORMAT SETTINGS
# =========================================================================================================

# ----------------------------------------
# Supported Audio Formats
# ----------------------------------------
# File extensions picked up when scanning the songs folder (case-insensitive).
# .opus is streamed as-is, everything else goes through FFmpeg.
#
SUPPORTED_AUDIO_FORMATS = ['.mp3', '.wav', '.ogg', '.flac', '.aac', '.m4a', '.wma', '.opus']

# =========================================================================================================
# FFMPEG
# =========================================================================================================

# ----------------------------------------
# FFmpeg Input Options
# ----------------------------------------
# Passed as before_options to every FFmpeg audio source.
#
FFMPEG_BEFORE_OPTIONS = None
FFMPEG_BEFORE_OPTIONS = _get_config(FFMPEG_BEFORE_OPTIONS, 'FFMPEG_BEFORE_OPTIONS', '-nostdin')

# =========================================================================================================
# VOICE CONNECTION
# =========================================================================================================

# ----------------------------------------
# Connect Timeout
# ----------------------------------------
# Seconds to wait for a voice connection before giving up.
#
VOICE_CONNECT_TIMEOUT = None
VOICE_CONNECT_TIMEOUT = _get_config(VOICE_CONNECT_TIMEOUT, 'VOICE_CONNECT_TIMEOUT', 10.0, float)

# =========================================================================================================
# SONG LOOKUP
# =========================================================================================================

# Largest edit distance accepted for a fuzzy song name match.
# Not configurable: existing song ids and names resolve the same way across versions.
FUZZY_MATCH_MAX_DISTANCE: Final = 6

__all__ = [
    'SUPPORTED_AUDIO_FORMATS',
    'FFMPEG_BEFORE_OPTIONS',
    'VOICE_CONNECT_TIMEOUT',
    'FUZZY_MATCH_MAX_DISTANCE',
]
