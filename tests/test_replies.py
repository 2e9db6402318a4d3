"""
Reply sinks (prefix channel vs slash interaction) and the listing views.
"""

from unittest.mock import AsyncMock, Mock

import disnake
import pytest

from config.messages import MESSAGES
from ui.views import PaginationView, album_embeds, playlist_embed
from utils.response_helper import ChannelReplySink, InteractionReplySink, ReplySink


def http_error():
    return disnake.HTTPException(Mock(status=404, reason='Not Found'), 'Unknown Webhook')


@pytest.fixture
def interaction():
    inter = Mock()
    inter.author.id = 9
    inter.response.is_done = Mock(return_value=False)
    inter.response.send_message = AsyncMock()
    inter.response.defer = AsyncMock()
    inter.original_response = AsyncMock(return_value='original')
    inter.followup.send = AsyncMock(return_value='followup')
    inter.channel.send = AsyncMock(return_value='channel')
    return inter


def test_sink_must_implement_both_replies():
    class PrimaryOnly(ReplySink):
        async def primary_reply(self, content=None, **kwargs):
            return None

    with pytest.raises(TypeError):
        PrimaryOnly()


class TestChannelReplySink:
    @pytest.mark.asyncio
    async def test_replies_go_to_channel_without_mentions(self):
        channel = Mock()
        channel.send = AsyncMock(return_value='sent')
        sink = ChannelReplySink(channel, user_id=5)

        assert await sink.primary_reply('hello') == 'sent'
        await sink.notify('done')

        assert [c.args[0] for c in channel.send.await_args_list] == ['hello', 'done']
        assert all(
            c.kwargs['allowed_mentions'].everyone is False
            for c in channel.send.await_args_list
        )
        assert not sink.interactive

    @pytest.mark.asyncio
    async def test_send_failure_returns_none(self):
        channel = Mock()
        channel.send = AsyncMock(side_effect=http_error())
        assert await ChannelReplySink(channel).primary_reply('hello') is None


class TestInteractionReplySink:
    @pytest.mark.asyncio
    async def test_first_reply_answers_interaction(self, interaction):
        sink = InteractionReplySink(interaction)

        assert await sink.primary_reply('hi') == 'original'
        interaction.response.send_message.assert_awaited_once_with(content='hi')
        assert sink.interactive and sink.user_id == 9

    @pytest.mark.asyncio
    async def test_reply_after_defer_uses_followup(self, interaction):
        sink = InteractionReplySink(interaction)
        await sink.defer()
        interaction.response.is_done.return_value = True
        await sink.defer()

        assert await sink.primary_reply('hi') == 'followup'
        interaction.response.defer.assert_awaited_once()
        interaction.followup.send.assert_awaited_once_with(wait=True, content='hi')

    @pytest.mark.asyncio
    async def test_follow_up_falls_back_to_channel(self, interaction):
        interaction.response.is_done.return_value = True
        interaction.followup.send.side_effect = http_error()
        sink = InteractionReplySink(interaction)

        assert await sink.follow_up('Finished Album 1') == 'channel'
        assert interaction.channel.send.await_args.args == ('Finished Album 1',)


class TestEmbeds:
    def test_playlist_embed_footer(self):
        embed = playlist_embed(["1: a.mp3", "2: b.mp3"], page=1, pages=3)
        assert embed.description == "1: a.mp3\n2: b.mp3"
        assert embed.footer.text == MESSAGES['playlist_page_footer'].format(page=2, pages=3)

    def test_long_album_is_split(self):
        lines = [f"{n}: lobo/Album One/{'x' * 60}-{n}.mp3" for n in range(1, 201)]
        embeds = album_embeds('lobo', lines)

        assert len(embeds) > 1
        assert all(len(e.description) <= 4096 for e in embeds)
        assert embeds[0].title == MESSAGES['album_title'].format(folder='lobo')
        assert all(e.title == MESSAGES['album_title_cont'].format(folder='lobo') for e in embeds[1:])
        assert embeds[-1].footer.text == MESSAGES['album_footer_total'].format(total=200)
        assert embeds[0].footer.text == MESSAGES['album_footer_page'].format(page=1, pages=len(embeds))


class TestPaginationView:
    @pytest.mark.asyncio
    async def test_buttons_follow_page(self):
        view = PaginationView([["1: a"], ["2: b"], ["3: c"]], owner_id=9)
        assert view.prev_button.disabled
        assert not view.next_button.disabled

        press = Mock()
        press.response.edit_message = AsyncMock()
        await view.next_button.callback(press)
        await view.next_button.callback(press)

        assert view.current_page == 2
        assert view.next_button.disabled
        assert not view.prev_button.disabled
        embed = press.response.edit_message.await_args.kwargs['embed']
        assert embed.description == "3: c"

    @pytest.mark.asyncio
    async def test_only_owner_can_page(self):
        view = PaginationView([["1: a"], ["2: b"]], owner_id=9)
        stranger = Mock()
        stranger.author.id = 10
        stranger.response.send_message = AsyncMock()

        assert await view.interaction_check(stranger) is False
        stranger.response.send_message.assert_awaited_once_with(
            MESSAGES['pagination_not_yours'], ephemeral=True
        )
