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
Discord API Helper Functions

Safe wrappers around the Discord calls Pizzabox makes, plus log formatting.
All functions handle None values and Discord API errors.

- format_guild_log() / format_user_log(): Human-readable names for logs
- can_connect_to_channel(): Check connect+speak permission before joining
- safe_disconnect(): Leave voice without raising
- safe_send(): Send to a channel without raising, mentions suppressed
- safe_voice_state_change(): Self-deafen without raising
- make_audio_source(): FFmpeg source for a file (opus passthrough or PCM)
"""

import disnake
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Import config
from config import FFMPEG_BEFORE_OPTIONS


# =============================================================================
# LOGGING FORMATTERS
# =============================================================================

def format_guild_log(guild_or_id, bot=None) -> str:
    """
    Format guild for logging with human-readable name.

    Shows guild name in normal mode, adds ID in DEBUG mode.

    Args:
        guild_or_id: Guild object, guild ID (int), or None (for DMs)
        bot: Bot instance (optional if guild object provided)

    Returns:
        - Normal mode: "ServerName" or "DM" or "Guild #123"
        - DEBUG mode: "ServerName (#123)" or "DM" or "Guild #123"
    """
    if guild_or_id is None:
        return "DM"

    if isinstance(guild_or_id, int):
        guild = bot.get_guild(guild_or_id) if bot else None
        guild_id = guild_or_id
    else:
        guild = guild_or_id
        guild_id = getattr(guild, 'id', None)

    name = getattr(guild, 'name', None) if guild else None
    if isinstance(name, str):
        if logger.isEnabledFor(logging.DEBUG):
            return f"{name} (#{guild_id})"
        return name

    # Fallback for unknown guilds (bot kicked, etc.)
    return f"Guild #{guild_id}" if guild_id else "Unknown"


def format_user_log(user_or_id, bot=None) -> str:
    """
    Format user for logging with human-readable name.

    Returns:
        - Normal mode: "username" or "User #123"
        - DEBUG mode: "username (#123)" or "User #123"
    """
    if user_or_id is None:
        return "Unknown"

    if isinstance(user_or_id, int):
        user = bot.get_user(user_or_id) if bot else None
        user_id = user_or_id
    else:
        user = user_or_id
        user_id = getattr(user, 'id', None)

    name = getattr(user, 'name', None) if user else None
    if isinstance(name, str):
        if logger.isEnabledFor(logging.DEBUG):
            return f"{name} (#{user_id})"
        return name

    return f"User #{user_id}" if user_id else "Unknown"


# =============================================================================
# VOICE
# =============================================================================

def can_connect_to_channel(channel) -> bool:
    """
    Check if bot has permission to connect to a voice channel.

    Requires connect+speak permissions. Falls back to False if guild.me is None.
    """
    if not channel:
        return False
    if not channel.guild.me:
        return False  # Rare startup race - guild not fully ready
    perms = channel.permissions_for(channel.guild.me)
    return bool(perms and perms.connect and perms.speak)


async def safe_disconnect(voice_client: Optional[disnake.VoiceClient], force: bool = True) -> bool:
    """
    Safely disconnect from voice channel with error handling.

    Returns:
        bool: True if disconnected or None (idempotent no-op), False on error
    """
    if not voice_client:
        return True  # No-op success for idempotency
    try:
        await voice_client.disconnect(force=force)
        return True
    except (disnake.ClientException, disnake.HTTPException) as e:
        logger.debug("Disconnect failed (non-critical): %s", e)
        return False
    except Exception as e:
        # aiohttp transport errors during shutdown (e.g., ClientConnectionResetError)
        logger.debug("Disconnect failed with transport error (non-critical): %s", e)
        return False


async def safe_voice_state_change(guild: disnake.Guild, channel, self_deaf: bool = True) -> bool:
    """Change the bot's voice state (self-deafen) without raising."""
    try:
        await guild.change_voice_state(channel=channel, self_deaf=self_deaf)
    except (disnake.ClientException, disnake.HTTPException) as e:
        logger.debug("Voice state change failed (non-critical): %s", e)
        return False
    else:
        return True


def make_audio_source(path: str):
    """
    Create audio source for playback (format-aware).

    .opus files: FFmpegOpusAudio (passthrough, no transcoding)
    Other formats: FFmpegPCMAudio (48kHz stereo PCM, re-encoded by disnake)

    Audio sources are single-use, so every track gets a fresh one.
    """
    file_path = Path(path)
    extension = file_path.suffix.lower()

    if extension == '.opus':
        logger.debug(f"Creating opus passthrough source for: {file_path.name}")
        return disnake.FFmpegOpusAudio(
            path,
            before_options=FFMPEG_BEFORE_OPTIONS
        )

    logger.debug(f"Creating transcoded source for: {file_path.name} ({extension})")
    return disnake.FFmpegPCMAudio(
        path,
        before_options=FFMPEG_BEFORE_OPTIONS,
        options='-vn -f s16le -ar 48000 -ac 2'
    )


# =============================================================================
# MESSAGES
# =============================================================================

async def safe_send(channel, content: Optional[str] = None, **kwargs) -> Optional[disnake.Message]:
    """
    Send a message to channel with error handling and mention suppression.

    Returns:
        Message object if sent successfully, None otherwise
    """
    if not channel:
        return None
    kwargs.setdefault('allowed_mentions', disnake.AllowedMentions.none())
    try:
        msg = await channel.send(content, **kwargs)
    except (disnake.NotFound, disnake.Forbidden, disnake.HTTPException) as e:
        logger.debug("Could not send message: %s", e)
        return None
    else:
        return msg
