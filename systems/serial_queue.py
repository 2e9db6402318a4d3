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
Serial Queue (per-guild mailbox)

Every mutation of a guild's playback session runs through that guild's queue,
ONE job at a time. Commands and track-finished events can't interleave, so
"skip" can never race the natural end of a track.

Two ways in:
    result = await queue.call(job, *args)   # commands: wait for the result
    queue.post(job, *args)                  # events: fire and forget

Different guilds have different queues and run concurrently.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

# Import helper functions
from utils.discord_helpers import format_guild_log

Job = Callable[..., Awaitable[Any]]


class SerialQueue:
    """
    asyncio.Queue drained by a single processor task.

    The processor starts lazily on first use, so a queue can be created
    outside a running event loop.
    """

    def __init__(self, guild_id: int, bot=None):
        """
        Args:
            guild_id: Discord guild ID (for logging)
            bot: Bot instance for logging (optional)
        """
        self.guild_id = guild_id
        self.bot = bot

        self._queue: Optional[asyncio.Queue] = None
        self._processor_task: Optional[asyncio.Task] = None
        self._pending = 0
        self._closed = False

    # =========================================================================
    # Processor
    # =========================================================================

    def start_processor(self):
        """Start the job processor (no-op if already running)."""
        if self._closed:
            raise RuntimeError("Serial queue is shut down")
        if self._queue is None:
            self._queue = asyncio.Queue()
        if not self._processor_task or self._processor_task.done():
            self._processor_task = asyncio.create_task(self._process_jobs())
            logger.debug(f"{format_guild_log(self.guild_id, self.bot)}: Job processor started")

    async def _process_jobs(self):
        """
        Run jobs from the queue serially.

        A failing job never stops the processor: call() jobs hand the exception
        back to the caller, post() jobs have it logged.
        """
        while True:
            try:
                job, args, future = await self._queue.get()
                try:
                    result = await job(*args)
                except asyncio.CancelledError:
                    if future is not None and not future.done():
                        future.cancel()
                    raise
                except Exception as e:
                    if future is not None:
                        if not future.done():
                            future.set_exception(e)
                    else:
                        logger.error(
                            f"{format_guild_log(self.guild_id, self.bot)}: Event handler error: {e}",
                            exc_info=True
                        )
                else:
                    if future is not None and not future.done():
                        future.set_result(result)
                finally:
                    self._pending -= 1
                    self._queue.task_done()
            except asyncio.CancelledError:
                logger.debug(f"{format_guild_log(self.guild_id, self.bot)}: Job processor cancelled")
                break

    # =========================================================================
    # Submitting work
    # =========================================================================

    async def call(self, job: Job, *args) -> Any:
        """
        Queue job and wait for its result.

        Exceptions raised by the job are re-raised here.
        """
        self.start_processor()
        future = asyncio.get_running_loop().create_future()
        self._pending += 1
        self._queue.put_nowait((job, args, future))
        return await future

    def post(self, job: Job, *args) -> None:
        """Queue job without waiting (used for lifecycle events)."""
        if self._closed:
            logger.debug(f"{format_guild_log(self.guild_id, self.bot)}: Dropping event after shutdown")
            return
        self.start_processor()
        self._pending += 1
        self._queue.put_nowait((job, args, None))

    async def drain(self):
        """
        Wait until no work is queued or running (test helper).

        Work posted by a callback a job scheduled (call_soon, or
        call_soon_threadsafe from the audio thread) counts too: drain only
        returns after two loop turns in a row found the queue idle.
        """
        idle_turns = 0
        while idle_turns < 2:
            await asyncio.sleep(0)
            if self._pending and self._queue is not None:
                idle_turns = 0
                await self._queue.join()
            else:
                idle_turns += 1

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self):
        """Cancel the processor. Queued jobs are dropped."""
        self._closed = True
        if self._processor_task and not self._processor_task.done():
            self._processor_task.cancel()
            try:
                await self._processor_task
            except asyncio.CancelledError:
                pass

        # Fail anyone still waiting on a dropped call()
        if self._queue is not None:
            while not self._queue.empty():
                _job, _args, future = self._queue.get_nowait()
                self._pending -= 1
                self._queue.task_done()
                if future is not None and not future.done():
                    future.cancel()

        logger.debug(f"{format_guild_log(self.guild_id, self.bot)}: Serial queue shutdown complete")


__all__ = ['SerialQueue']
