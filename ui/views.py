# Copyright (C) 2026 grodz
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

"""Embeds and views for song listings.

playlist_embed:
    One page of the /playlist listing.

album_embeds:
    /album listing split into as many embeds as the description limit needs.

PaginationView:
    Previous/Next buttons over playlist pages. Only the user who ran the
    command can turn pages; buttons are removed when the view times out.
"""

import logging
from typing import List, Optional, Sequence

import disnake

logger = logging.getLogger(__name__)

from config.display import EMBED_COLOR, PAGINATION_TIMEOUT
from config.messages import MESSAGES
from core.playlist import chunk_description


def playlist_embed(lines: Sequence[str], page: int, pages: int) -> disnake.Embed:
    """Embed for page (0-based) of the playlist."""
    embed = disnake.Embed(
        title=MESSAGES['playlist_title'],
        description='\n'.join(lines),
        color=EMBED_COLOR,
    )
    embed.set_footer(text=MESSAGES['playlist_page_footer'].format(page=page + 1, pages=pages))
    return embed


def album_embeds(folder: str, lines: Sequence[str]) -> List[disnake.Embed]:
    """
    Embeds listing one album.

    The first embed is titled with the folder, the rest "(cont.)". The last
    footer shows the song count, the others their page number.
    """
    chunks = chunk_description(lines)
    embeds = []
    for index, description in enumerate(chunks):
        title_key = 'album_title' if index == 0 else 'album_title_cont'
        embed = disnake.Embed(
            title=MESSAGES[title_key].format(folder=folder),
            description=description,
            color=EMBED_COLOR,
        )
        if index == len(chunks) - 1:
            footer = MESSAGES['album_footer_total'].format(total=len(lines))
        else:
            footer = MESSAGES['album_footer_page'].format(page=index + 1, pages=len(chunks))
        embed.set_footer(text=footer)
        embeds.append(embed)
    return embeds


class PaginationView(disnake.ui.View):
    """Previous/Next navigation over pre-split pages.

    Args:
        pages: Lines for each page
        owner_id: User allowed to press the buttons
        timeout: Seconds before the buttons are removed
    """

    def __init__(
        self,
        pages: Sequence[Sequence[str]],
        owner_id: Optional[int],
        timeout: float = PAGINATION_TIMEOUT,
    ) -> None:
        super().__init__(timeout=timeout)
        self.pages = [list(page) for page in pages]
        self.owner_id = owner_id
        self.current_page = 0
        self.message: Optional[disnake.Message] = None

        self._update_buttons()

    @property
    def total_pages(self) -> int:
        return max(1, len(self.pages))

    def current_embed(self) -> disnake.Embed:
        lines = self.pages[self.current_page] if self.pages else []
        return playlist_embed(lines, self.current_page, self.total_pages)

    def _update_buttons(self) -> None:
        """Update button states based on current page."""
        self.prev_button.disabled = self.current_page <= 0
        self.next_button.disabled = self.current_page >= self.total_pages - 1

    async def interaction_check(self, interaction: disnake.MessageInteraction) -> bool:
        if interaction.author.id != self.owner_id:
            await interaction.response.send_message(MESSAGES['pagination_not_yours'], ephemeral=True)
            return False
        return True

    @disnake.ui.button(label="Previous", style=disnake.ButtonStyle.primary)
    async def prev_button(self, button: disnake.ui.Button, interaction: disnake.MessageInteraction) -> None:
        if self.current_page > 0:
            self.current_page -= 1
        self._update_buttons()
        await interaction.response.edit_message(embed=self.current_embed(), view=self)

    @disnake.ui.button(label="Next", style=disnake.ButtonStyle.primary)
    async def next_button(self, button: disnake.ui.Button, interaction: disnake.MessageInteraction) -> None:
        if self.current_page < self.total_pages - 1:
            self.current_page += 1
        self._update_buttons()
        await interaction.response.edit_message(embed=self.current_embed(), view=self)

    async def on_timeout(self) -> None:
        """Remove the buttons once they stop working."""
        if self.message:
            try:
                await self.message.edit(view=None)
            except disnake.HTTPException as e:
                logger.debug("Could not clear pagination buttons: %s", e)
