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
Response Helper

Reply sinks: one way for handlers to answer, whichever way they were invoked.

    await reply.primary_reply("🎵 Now playing: ...")   # the answer to the command
    await reply.follow_up("Finished playing ...")      # anything after that

- ChannelReplySink: prefix commands (!play), sends to the message's channel
- InteractionReplySink: slash commands (/play), uses the interaction response,
  then its followup webhook, then the channel once the webhook has expired

Sinks never raise on Discord API errors; failures are logged at debug level.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import disnake

logger = logging.getLogger(__name__)

from utils.discord_helpers import safe_send


def _payload(content=None, embed=None, embeds=None, view=None) -> dict:
    """Keyword arguments for a send call, leaving out anything unset."""
    kwargs = {}
    if content is not None:
        kwargs['content'] = content
    if embed is not None:
        kwargs['embed'] = embed
    if embeds:
        kwargs['embeds'] = embeds
    if view is not None:
        kwargs['view'] = view
    return kwargs


class ReplySink(ABC):
    """
    Where a handler sends its replies.

    interactive: True if the reply can carry buttons owned by user_id
    """

    interactive: bool = False
    user_id: Optional[int] = None

    async def defer(self) -> None:
        """Acknowledge a slow command (no-op where nothing needs acknowledging)."""

    @abstractmethod
    async def primary_reply(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[disnake.Embed] = None,
        embeds: Optional[List[disnake.Embed]] = None,
        view: Optional[disnake.ui.View] = None,
    ) -> Optional[disnake.Message]:
        """The answer to the command."""

    @abstractmethod
    async def follow_up(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[disnake.Embed] = None,
        embeds: Optional[List[disnake.Embed]] = None,
        view: Optional[disnake.ui.View] = None,
    ) -> Optional[disnake.Message]:
        """Anything sent after the primary reply."""

    async def notify(self, text: str) -> None:
        """Session notifier: plain follow-up text."""
        await self.follow_up(text)


class ChannelReplySink(ReplySink):
    """Replies for prefix commands: everything goes to the invoking channel."""

    def __init__(self, channel, user_id: Optional[int] = None):
        self.channel = channel
        self.user_id = user_id

    async def primary_reply(self, content=None, *, embed=None, embeds=None, view=None):
        return await safe_send(self.channel, **_payload(content, embed, embeds, view))

    async def follow_up(self, content=None, *, embed=None, embeds=None, view=None):
        return await safe_send(self.channel, **_payload(content, embed, embeds, view))


class InteractionReplySink(ReplySink):
    """
    Replies for slash commands.

    primary_reply answers the interaction (or its deferral). follow_up uses
    the followup webhook and falls back to the channel when that fails
    (interaction tokens expire after 15 minutes, long before an album ends).
    """

    interactive = True

    def __init__(self, interaction: disnake.ApplicationCommandInteraction):
        self.interaction = interaction
        self.user_id = interaction.author.id

    async def defer(self) -> None:
        if self.interaction.response.is_done():
            return
        try:
            await self.interaction.response.defer()
        except disnake.HTTPException as e:
            logger.debug("Could not defer interaction: %s", e)

    async def primary_reply(self, content=None, *, embed=None, embeds=None, view=None):
        kwargs = _payload(content, embed, embeds, view)
        try:
            if not self.interaction.response.is_done():
                await self.interaction.response.send_message(**kwargs)
                return await self.interaction.original_response()
            return await self.interaction.followup.send(wait=True, **kwargs)
        except disnake.HTTPException as e:
            logger.debug("Could not reply to interaction: %s", e)
            return None

    async def follow_up(self, content=None, *, embed=None, embeds=None, view=None):
        kwargs = _payload(content, embed, embeds, view)
        if not self.interaction.response.is_done():
            return await self.primary_reply(content, embed=embed, embeds=embeds, view=view)
        try:
            return await self.interaction.followup.send(wait=True, **kwargs)
        except disnake.HTTPException as e:
            logger.debug("Followup failed, sending to channel instead: %s", e)
        return await safe_send(self.interaction.channel, **kwargs)


__all__ = ['ReplySink', 'ChannelReplySink', 'InteractionReplySink']
