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
Pizzabox Music Bot
========================================================
VERSION: 1.0.0
========================================================

A Discord bot that plays the local songs/ folder into voice, built on disnake.

    python bot.py
"""

import disnake
from disnake.ext import commands
import logging
import signal
from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()

# Import configuration early (needed for bot initialization)
from config import (
    BOT_NAME,
    COMMAND_MODE,
    COMMAND_PREFIX,
    DISCORD_GUILD_ID,
    LOG_LEVEL,
    MESSAGES,
    PREFIX_COMMANDS_ENABLED,
    SLASH_COMMANDS_ENABLED,
    SONGS_FOLDER,
    SUPPRESS_LIBRARY_LOGS,
)

# =============================================================================
# LOGGING SETUP
# =============================================================================

# Map string log level to logging constant
LOG_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


class PizzaboxFormatter(logging.Formatter):
    """
    Custom formatter with 4-character level names for aligned logs.

    - DEBUG    → [DBUG]
    - INFO     → [INFO]
    - WARNING  → [WARN]
    - ERROR    → [FAIL]
    - CRITICAL → [CRIT]
    """

    LEVEL_NAMES = {
        'DEBUG': 'DBUG',
        'INFO': 'INFO',
        'WARNING': 'WARN',
        'ERROR': 'FAIL',
        'CRITICAL': 'CRIT',
    }

    def format(self, record):
        # Restore the original levelname so other handlers see it unchanged
        original_levelname = record.levelname
        record.levelname = self.LEVEL_NAMES.get(record.levelname, record.levelname)
        result = super().format(record)
        record.levelname = original_levelname
        return result


def configure_logging(level: str = LOG_LEVEL, suppress_library_logs: bool = SUPPRESS_LIBRARY_LOGS):
    """Install the Pizzabox formatter on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(PizzaboxFormatter(
        fmt='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logging.basicConfig(level=LOG_LEVEL_MAP[level], handlers=[handler])

    # Reduce disnake noise (if enabled)
    library_level = logging.WARNING if suppress_library_logs else LOG_LEVEL_MAP[level]
    for name in ('disnake', 'disnake.player', 'disnake.voice_client', 'disnake.gateway'):
        logging.getLogger(name).setLevel(library_level)


configure_logging()
logger = logging.getLogger('pizzabox')

# =============================================================================
# BOT SETUP
# =============================================================================

intents = disnake.Intents.default()
intents.message_content = True
intents.voice_states = True

bot = commands.Bot(
    command_prefix=(
        commands.when_mentioned_or(COMMAND_PREFIX) if PREFIX_COMMANDS_ENABLED
        else commands.when_mentioned
    ),
    intents=intents,
    help_command=None,
    case_insensitive=True,
    test_guilds=[DISCORD_GUILD_ID] if DISCORD_GUILD_ID else None,
    command_sync_flags=commands.CommandSyncFlags.default(),
)

# Import our modules
from core.errors import LibraryNotFound
from core.session import SessionManager
from core.track import scan_library
from core.transport import DisnakeTransport
from handlers.music import MusicHandlers
from systems.voice_manager import VoiceManager
from utils.discord_helpers import format_guild_log, format_user_log, safe_disconnect

sessions = SessionManager(DisnakeTransport(), bot)
voice_manager = VoiceManager()
music = MusicHandlers(sessions, voice_manager)

# Shutdown flag to prevent on_disconnect from running during intentional shutdown
_is_shutting_down = False

# Initialization flag to prevent on_ready from running setup code on reconnects
_is_initialized = False

# =============================================================================
# BOT EVENTS
# =============================================================================

@bot.event
async def on_ready():
    """Bot connected to Discord (also fires after full gateway reconnects)."""
    global _is_initialized

    if _is_initialized:
        logger.info("Gateway reconnected via on_ready")
        return
    _is_initialized = True

    # Copyright and license info (as required by GPL 3.0)
    logger.info(f'{BOT_NAME} v1.0.0 - Copyright (C) 2025 grodz')
    logger.info('Licensed under GPL 3.0 - See LICENSE.md for details')

    logger.info(f'Bot connected as {bot.user}')
    logger.info(f'Command mode: {COMMAND_MODE}')

    # Display music library summary
    try:
        library = scan_library(SONGS_FOLDER)
    except LibraryNotFound:
        logger.error(f"Songs folder not found: {SONGS_FOLDER}")
    else:
        if library:
            logger.info(f"Found {len(library)} songs in {SONGS_FOLDER}")
        else:
            logger.warning(f"No audio files found in {SONGS_FOLDER}")

    logger.info("Press Ctrl+C or send SIGTERM to shutdown")


@bot.event
async def on_disconnect():
    """Gateway dropped; disnake reconnects on its own."""
    if not _is_shutting_down:
        logger.info("Gateway disconnected, waiting for Disnake auto-reconnect...")


@bot.event
async def on_voice_state_update(member, before, after):
    """Remember where members are, and stop the session if the bot gets kicked from voice."""
    if bot.user and member.id == bot.user.id:
        if before.channel and not after.channel and not _is_shutting_down:
            if await sessions.stop(member.guild.id):
                logger.info(f"{format_guild_log(member.guild)}: Disconnected from voice, session stopped")
        return

    voice_manager.track_voice_state(member, before, after)


@bot.event
async def on_guild_remove(guild):
    """Bot removed from guild - cleanup."""
    logger.info(f"Bot removed from {format_guild_log(guild)}")
    await sessions.stop(guild.id)
    voice_manager.forget_guild(guild.id)


@bot.event
async def on_command_error(ctx, error):
    """Handle prefix command errors gracefully."""
    # Silently ignore typos (CommandNotFound) - these are harmless user mistakes
    if isinstance(error, commands.CommandNotFound):
        logger.debug(f"{format_guild_log(ctx.guild)}: Unknown command from {format_user_log(ctx.author)}: {ctx.message.content}")
        return

    # Missing required arguments - user error, not code error
    if isinstance(error, commands.MissingRequiredArgument):
        logger.debug(f"{format_guild_log(ctx.guild)}: Missing argument for {ctx.command} from {format_user_log(ctx.author)}")
        return

    # Commands used in DMs
    if isinstance(error, commands.NoPrivateMessage):
        logger.debug(f"DM command from {format_user_log(ctx.author)} ignored")
        return

    # For actual errors (code problems, API failures, etc.), log with full traceback
    logger.error(f"Command error in {ctx.command}: {error}", exc_info=error)


@bot.event
async def on_slash_command_error(inter, error):
    """Handle slash command errors that escaped the handlers."""
    logger.error(f"Slash command error in /{inter.data.name}: {error}", exc_info=error)
    try:
        if inter.response.is_done():
            await inter.followup.send(MESSAGES['error_generic'], ephemeral=True)
        else:
            await inter.response.send_message(MESSAGES['error_generic'], ephemeral=True)
    except disnake.HTTPException as e:
        logger.debug("Could not report slash command error: %s", e)

# =============================================================================
# GRACEFUL SHUTDOWN
# =============================================================================

async def shutdown_bot():
    """
    Stop every session, leave voice, and close the bot.

    Called by signal handlers (SIGTERM, SIGINT) for clean shutdown.
    """
    global _is_shutting_down
    if _is_shutting_down:
        return
    _is_shutting_down = True

    logger.info("Initiating graceful shutdown...")

    try:
        await sessions.shutdown()
    except Exception as e:
        logger.error(f"Error stopping sessions: {e}")

    # Voice clients the sessions didn't own
    for vc in list(bot.voice_clients):
        await safe_disconnect(vc, force=True)

    logger.info("Closing bot connection...")
    await bot.close()
    logger.info("Shutdown complete")


def handle_shutdown_signal(signum, frame):
    """
    Signal handler for SIGTERM and SIGINT.

    Schedules the async shutdown sequence on the bot's event loop.
    """
    signal_name = signal.Signals(signum).name
    logger.info(f"Received {signal_name} signal, shutting down...")

    if bot.loop and bot.loop.is_running():
        bot.loop.call_soon_threadsafe(bot.loop.create_task, shutdown_bot())
    else:
        logger.warning("No event loop running, forcing exit")
        os._exit(0)

# =============================================================================
# COMMANDS
# =============================================================================

if PREFIX_COMMANDS_ENABLED:
    from handlers.commands import setup as setup_commands
    setup_commands(bot, music)

if SLASH_COMMANDS_ENABLED:
    from handlers.slash_commands import setup as setup_slash_commands
    setup_slash_commands(bot, music)

# =============================================================================
# MAIN
# =============================================================================

def main():
    token = os.getenv('DISCORD_BOT_TOKEN')
    if not token:
        logger.critical("DISCORD_BOT_TOKEN not found in environment - bot cannot start!")
        raise SystemExit(1)

    # SIGINT = Ctrl+C, SIGTERM = systemd stop / kill
    signal.signal(signal.SIGINT, handle_shutdown_signal)
    signal.signal(signal.SIGTERM, handle_shutdown_signal)

    logger.info("Starting bot...")

    try:
        bot.run(token)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
    except Exception as e:
        logger.error(f"Bot crashed: {e}", exc_info=True)


if __name__ == '__main__':
    main()
