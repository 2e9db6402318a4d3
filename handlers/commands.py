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
Prefix Commands

    !play <song id | filename>   !band   !lobo [album]   !mixtape
    !skip   !stop   !album <folder>   !playlist

Mentioning the bot works as a prefix too (@Pizzabox play 12).

Each command just wraps its arguments in an Invocation that replies to the
invoking channel and hands it to handlers.music. Multi-word arguments are
taken whole (!album Pizza Collection PizzaDAO's House Band).
"""

import logging
from typing import Optional
from disnake.ext import commands

logger = logging.getLogger(__name__)

# Import from our modules
from config import PREFIX_COMMANDS_ENABLED
from handlers.music import Invocation, MusicHandlers, run_handler
from utils.response_helper import ChannelReplySink


def make_invocation(ctx: commands.Context, text: Optional[str] = None) -> Invocation:
    """Invocation for a prefix command; replies go to ctx.channel."""
    return Invocation(
        input=text.strip() if text else None,
        member=ctx.author,
        guild=ctx.guild,
        reply=ChannelReplySink(ctx.channel, ctx.author.id),
    )


def setup(bot, music: MusicHandlers):
    """Register all prefix commands with the bot."""

    if not PREFIX_COMMANDS_ENABLED:
        logger.debug("Prefix commands disabled (slash mode)")
        return

    # =========================================================================
    # PLAYBACK COMMANDS
    # =========================================================================

    @bot.command(name='play')
    @commands.guild_only()
    async def play_command(ctx, *, query: Optional[str] = None):
        """Play a song by id or filename."""
        await run_handler(music.play, make_invocation(ctx, query))

    @bot.command(name='band')
    @commands.guild_only()
    async def band_command(ctx):
        """Loop the house band folder in random order."""
        await run_handler(music.band, make_invocation(ctx))

    @bot.command(name='lobo')
    @commands.guild_only()
    async def lobo_command(ctx, album: Optional[str] = None):
        """Shuffle all lobo songs, or play one album in order."""
        await run_handler(music.lobo, make_invocation(ctx, album))

    @bot.command(name='mixtape')
    @commands.guild_only()
    async def mixtape_command(ctx):
        """Play the mixtape once in random order."""
        await run_handler(music.mixtape, make_invocation(ctx))

    @bot.command(name='skip')
    @commands.guild_only()
    async def skip_command(ctx):
        """Skip to the next song."""
        await run_handler(music.skip, make_invocation(ctx))

    @bot.command(name='stop')
    @commands.guild_only()
    async def stop_command(ctx):
        """Stop playback and leave voice."""
        await run_handler(music.stop, make_invocation(ctx))

    # =========================================================================
    # LISTINGS
    # =========================================================================

    @bot.command(name='album')
    @commands.guild_only()
    async def album_command(ctx, *, folder: Optional[str] = None):
        """List the song ids of one folder."""
        await run_handler(music.album, make_invocation(ctx, folder))

    @bot.command(name='playlist')
    @commands.guild_only()
    async def playlist_command(ctx):
        """List every song with its id."""
        await run_handler(music.playlist, make_invocation(ctx))

    logger.info("Registered prefix commands")
