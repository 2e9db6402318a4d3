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
Voice Channel Resolution

Decides which voice channel a play-style command should join:

    1. The invoker's current voice channel
    2. The invoker's last known voice channel in this guild
       (remembered from voice state updates)
    3. VOICE_CHANNEL_ID from config, if it belongs to this guild
    4. Otherwise NoVoiceChannel
"""

import logging
from typing import Dict, Optional, Tuple

import disnake

logger = logging.getLogger(__name__)

# Import from config
from config import MESSAGES, VOICE_CHANNEL_ID
from core.errors import NoVoiceChannel
from utils.discord_helpers import format_guild_log, format_user_log


class VoiceManager:
    """
    Remembers where members were last seen in voice and resolves the
    channel for a command.

    One instance per bot (last-known channels are keyed by guild and member).
    """

    def __init__(self, default_channel_id: Optional[int] = VOICE_CHANNEL_ID):
        self.default_channel_id = default_channel_id
        # (guild_id, member_id) -> voice channel id
        self._last_known: Dict[Tuple[int, int], int] = {}

    # =========================================================================
    # Tracking
    # =========================================================================

    def track_voice_state(self, member, before, after) -> None:
        """Record a member's voice channel from on_voice_state_update."""
        if member is None or getattr(member, 'bot', False):
            return
        channel = after.channel if after else None
        if channel is not None:
            self._last_known[(member.guild.id, member.id)] = channel.id
            logger.debug(
                f"{format_guild_log(member.guild)}: {format_user_log(member)} last seen in {channel.name}"
            )

    def last_known_channel_id(self, guild_id: int, member_id: int) -> Optional[int]:
        return self._last_known.get((guild_id, member_id))

    def forget_guild(self, guild_id: int) -> None:
        """Drop everything remembered for a guild (e.g. bot removed from it)."""
        for key in [k for k in self._last_known if k[0] == guild_id]:
            del self._last_known[key]

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_channel(self, member, guild):
        """
        Pick the voice channel for a command.

        Raises:
            NoVoiceChannel: No candidate found
        """
        voice = getattr(member, 'voice', None)
        if voice is not None and voice.channel is not None:
            return voice.channel

        if member is not None and guild is not None:
            channel = self._voice_channel(guild, self.last_known_channel_id(guild.id, member.id))
            if channel is not None:
                logger.debug(f"{format_guild_log(guild)}: Using last known channel of {format_user_log(member)}")
                return channel

        if guild is not None:
            channel = self._voice_channel(guild, self.default_channel_id)
            if channel is not None:
                logger.debug(f"{format_guild_log(guild)}: Using configured voice channel")
                return channel

        raise NoVoiceChannel(MESSAGES['not_in_voice'])

    @staticmethod
    def _voice_channel(guild, channel_id: Optional[int]):
        """Voice channel with channel_id in guild, or None."""
        if not channel_id:
            return None
        channel = guild.get_channel(channel_id)
        if isinstance(channel, (disnake.VoiceChannel, disnake.StageChannel)):
            return channel
        return None


__all__ = ['VoiceManager']
