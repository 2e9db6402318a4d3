"""
Configuration Package

Structure:
  basic_settings.py - Prefix, command mode, guild/voice fallbacks, logging
  audio_settings.py - Audio formats, FFmpeg, voice timeouts, song lookup
  paths.py          - Songs folder layout and playlist.json location
  display.py        - Listing page sizes and message limits
  messages.py       - All user-facing text

Import settings from the package root:

    from config import COMMAND_PREFIX, MESSAGES

Environment variables must be loaded (load_dotenv) BEFORE this package is
imported, since every module reads os.environ at import time.
"""

from .basic_settings import *
from .audio_settings import *
from .paths import *
from .display import *
from .messages import MESSAGES, COMMAND_DESCRIPTIONS
