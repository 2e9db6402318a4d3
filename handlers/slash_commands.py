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
Slash Commands

    /play input:<id or name>   /band   /lobo [album:<n>]   /mixtape
    /skip   /stop   /album folder:<name>   /playlist

Same handlers as the prefix commands. Replies answer the interaction; later
notices (queue finished, playback errors) use the interaction followup and
fall back to the channel once the interaction token expires.

Play-style commands defer before connecting to voice (handlers.music._start),
since joining can take longer than Discord's 3 second response window.
"""

import logging
import disnake
from disnake.ext import commands

logger = logging.getLogger(__name__)

# Import from our modules
from config import COMMAND_DESCRIPTIONS, SLASH_COMMANDS_ENABLED
from handlers.music import Invocation, MusicHandlers, run_handler
from utils.response_helper import InteractionReplySink


def make_invocation(inter: disnake.ApplicationCommandInteraction, text=None) -> Invocation:
    """Invocation for a slash command."""
    return Invocation(
        input=str(text).strip() if text is not None else None,
        member=inter.author,
        guild=inter.guild,
        reply=InteractionReplySink(inter),
    )


def setup(bot, music: MusicHandlers):
    """Register slash commands with the bot."""

    if not SLASH_COMMANDS_ENABLED:
        logger.debug("Slash commands disabled (prefix mode)")
        return

    # =========================================================================
    # PLAYBACK COMMANDS
    # =========================================================================

    @bot.slash_command(name='play', description=COMMAND_DESCRIPTIONS['play'], dm_permission=False)
    async def play_slash(
        inter: disnake.ApplicationCommandInteraction,
        input: str = commands.Param(description=COMMAND_DESCRIPTIONS['play_input']),
    ):
        await run_handler(music.play, make_invocation(inter, input))

    @bot.slash_command(name='band', description=COMMAND_DESCRIPTIONS['band'], dm_permission=False)
    async def band_slash(inter: disnake.ApplicationCommandInteraction):
        await run_handler(music.band, make_invocation(inter))

    @bot.slash_command(name='lobo', description=COMMAND_DESCRIPTIONS['lobo'], dm_permission=False)
    async def lobo_slash(
        inter: disnake.ApplicationCommandInteraction,
        album: int = commands.Param(
            default=None, ge=1, description=COMMAND_DESCRIPTIONS['lobo_album']
        ),
    ):
        await run_handler(music.lobo, make_invocation(inter, album))

    @bot.slash_command(name='mixtape', description=COMMAND_DESCRIPTIONS['mixtape'], dm_permission=False)
    async def mixtape_slash(inter: disnake.ApplicationCommandInteraction):
        await run_handler(music.mixtape, make_invocation(inter))

    @bot.slash_command(name='skip', description=COMMAND_DESCRIPTIONS['skip'], dm_permission=False)
    async def skip_slash(inter: disnake.ApplicationCommandInteraction):
        await run_handler(music.skip, make_invocation(inter))

    @bot.slash_command(name='stop', description=COMMAND_DESCRIPTIONS['stop'], dm_permission=False)
    async def stop_slash(inter: disnake.ApplicationCommandInteraction):
        await run_handler(music.stop, make_invocation(inter))

    # =========================================================================
    # LISTINGS
    # =========================================================================

    @bot.slash_command(name='album', description=COMMAND_DESCRIPTIONS['album'], dm_permission=False)
    async def album_slash(
        inter: disnake.ApplicationCommandInteraction,
        folder: str = commands.Param(description=COMMAND_DESCRIPTIONS['album_folder']),
    ):
        await run_handler(music.album, make_invocation(inter, folder))

    @bot.slash_command(name='playlist', description=COMMAND_DESCRIPTIONS['playlist'], dm_permission=False)
    async def playlist_slash(inter: disnake.ApplicationCommandInteraction):
        await run_handler(music.playlist, make_invocation(inter))

    logger.info("Registered slash commands")
