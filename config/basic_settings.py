# Part of Pizzabox - Licensed under GPL 3.0
# See LICENSE.md for details

r"""
========================================================================================================
PIZZABOX MUSIC BOT - BASIC SETTINGS
========================================================================================================

This file contains the most commonly customized settings for your bot.
These settings work for BOTH prefix commands (!play) and slash commands (/play).

HOW TO CUSTOMIZE:
  1. Find the setting you want to change below
  2. Change 'None' to your desired value (see examples in comments)
  3. Save the file and restart the bot

  Example:
    COMMAND_PREFIX = None        ← Default (uses .env or '!')
    COMMAND_PREFIX = '?'         ← Override to use '?' instead

PRIORITY:
  Python setting (if not None) > .env file > built-in default

RESTART REQUIRED:
  All changes require restarting the bot to take effect.

========================================================================================================
"""

import os

# =========================================================================================================
# Internal helper functions (used by settings below - scroll down to skip to settings)
# =========================================================================================================

def _str_to_bool(value):
    """Convert string to boolean (for environment variables)."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('true', '1', 'yes', 'on')

def _str_to_id(value):
    """Convert a Discord snowflake from .env, treating blanks as unset."""
    value = str(value).strip()
    return int(value) if value.isdigit() else None

def _get_config(python_value, env_name, default, converter=None):
    """Get configuration value using priority system (Python > .env > default)."""
    if python_value is not None:
        return python_value
    env_value = os.getenv(env_name)
    if env_value is not None:
        return converter(env_value) if converter else env_value
    return default

# =========================================================================================================
# BOT IDENTITY
# =========================================================================================================

# ----------------------------------------
# Bot Display Name
# ----------------------------------------
# What the bot calls itself in logs and messages
#
BOT_NAME = "Pizzabox"

# =========================================================================================================
# COMMANDS
# =========================================================================================================

# ----------------------------------------
# Command Prefix
# ----------------------------------------
# What symbol users type before prefix commands. Mentioning the bot always works too:
#   !play 12
#   @Pizzabox play 12
#
COMMAND_PREFIX = None  # Leave as None to use .env or default ('!')
COMMAND_PREFIX = _get_config(COMMAND_PREFIX, 'COMMAND_PREFIX', '!')

# ----------------------------------------
# Command Mode
# ----------------------------------------
# Which command styles to register:
#   'both'   = prefix and slash commands (default)
#   'prefix' = only !commands
#   'slash'  = only /commands
#
COMMAND_MODE = None  # Leave as None to use .env or default ('both')
COMMAND_MODE = _get_config(COMMAND_MODE, 'PIZZABOX_COMMAND_MODE', 'both').lower()

if COMMAND_MODE not in ['both', 'prefix', 'slash']:
    print(f"Warning: Invalid PIZZABOX_COMMAND_MODE '{COMMAND_MODE}'. Using 'both'.")
    COMMAND_MODE = 'both'

PREFIX_COMMANDS_ENABLED = COMMAND_MODE in ('both', 'prefix')
SLASH_COMMANDS_ENABLED = COMMAND_MODE in ('both', 'slash')

# =========================================================================================================
# GUILD & VOICE
# =========================================================================================================

# ----------------------------------------
# Guild ID
# ----------------------------------------
# When set, slash commands are registered to this guild only (instant sync).
# Leave unset to register them globally.
#
DISCORD_GUILD_ID = None
DISCORD_GUILD_ID = _get_config(DISCORD_GUILD_ID, 'DISCORD_GUILD_ID', None, _str_to_id)

# ----------------------------------------
# Fallback Voice Channel
# ----------------------------------------
# Voice channel used when the person running a command is not in voice and
# has no last known voice channel in that server.
#
VOICE_CHANNEL_ID = None
VOICE_CHANNEL_ID = _get_config(VOICE_CHANNEL_ID, 'VOICE_CHANNEL_ID', None, _str_to_id)

# =========================================================================================================
# LOGGING
# =========================================================================================================

# ----------------------------------------
# Log Level
# ----------------------------------------
# 'DEBUG', 'INFO' (default), 'WARNING', 'ERROR', 'CRITICAL'
#
LOG_LEVEL = None
LOG_LEVEL = _get_config(LOG_LEVEL, 'LOG_LEVEL', 'INFO').upper()

if LOG_LEVEL not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
    print(f"Warning: Invalid LOG_LEVEL '{LOG_LEVEL}'. Using 'INFO'.")
    LOG_LEVEL = 'INFO'

# ----------------------------------------
# Library Log Suppression
# ----------------------------------------
# True = hide disnake's own INFO chatter (gateway, voice handshakes)
#
SUPPRESS_LIBRARY_LOGS = None
SUPPRESS_LIBRARY_LOGS = _get_config(SUPPRESS_LIBRARY_LOGS, 'SUPPRESS_LIBRARY_LOGS', True, _str_to_bool)

__all__ = [
    'BOT_NAME',
    'COMMAND_PREFIX',
    'COMMAND_MODE',
    'PREFIX_COMMANDS_ENABLED',
    'SLASH_COMMANDS_ENABLED',
    'DISCORD_GUILD_ID',
    'VOICE_CHANNEL_ID',
    'LOG_LEVEL',
    'SUPPRESS_LIBRARY_LOGS',
]
