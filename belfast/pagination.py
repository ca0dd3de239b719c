"""Reaction-driven pagination for embed messages.

The service keeps a bounded table of (message id, callback) pairs. Every
reaction added to or removed from one of the bot's messages is mapped to a
page move and routed to the most recently registered callback for that
message. When the table is full the oldest registration is dropped, so old
paginated messages simply stop responding.
"""
from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar, Union

import discord

from belfast.constants import (
    CALLBACK_BUFFER_SIZE,
    PAGINATION_FIRST,
    PAGINATION_LAST,
    PAGINATION_NEXT,
    PAGINATION_PREVIOUS,
)

logger = logging.getLogger('belfast_bot.pagination')

T = TypeVar('T')


class PaginationMove(enum.Enum):
    FIRST = enum.auto()
    PREVIOUS = enum.auto()
    NEXT = enum.auto()
    LAST = enum.auto()


ReactionCallback = Callable[[discord.Message, PaginationMove], Awaitable[None]]
PageCallback = Callable[[discord.Message, int], Awaitable[None]]
EmbedBuilder = Callable[[T, int, str], Union[discord.Embed, Awaitable[discord.Embed]]]

MOVE_EMOTES = {
    PAGINATION_FIRST: PaginationMove.FIRST,
    PAGINATION_PREVIOUS: PaginationMove.PREVIOUS,
    PAGINATION_NEXT: PaginationMove.NEXT,
    PAGINATION_LAST: PaginationMove.LAST,
}

REACTION_EMOTES = list(MOVE_EMOTES)


class CallbackBuffer(Generic[T]):
    """Fixed-capacity ring buffer.

    Items are inserted at the head; `free()` drops the oldest item. The
    buffer never grows beyond `capacity`.
    """

    def __init__(self, capacity: int = CALLBACK_BUFFER_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: list[Optional[T]] = [None] * capacity
        self._start = 0
        self._count = 0

    @property
    def used_spots(self) -> int:
        return self._count

    @property
    def is_full(self) -> bool:
        return self._count == self.capacity

    def __len__(self) -> int:
        return self._count

    def insert(self, item: T) -> None:
        if self.is_full:
            raise OverflowError("buffer is full, free a spot first")
        self._items[(self._start + self._count) % self.capacity] = item
        self._count += 1

    def free(self) -> Optional[T]:
        """Remove and return the oldest item, or None when empty."""
        if self._count == 0:
            return None
        item = self._items[self._start]
        self._items[self._start] = None
        self._start = (self._start + 1) % self.capacity
        self._count -= 1
        return item

    def find_backwards(self, predicate: Callable[[T], bool]) -> Optional[T]:
        """Return the newest item matching `predicate`."""
        for offset in range(self._count - 1, -1, -1):
            item = self._items[(self._start + offset) % self.capacity]
            if predicate(item):
                return item
        return None

    def __iter__(self):
        for offset in range(self._count):
            yield self._items[(self._start + offset) % self.capacity]


def move_from_emoji(emoji) -> Optional[PaginationMove]:
    """Map a reaction emoji (str, PartialEmoji or Emoji) to a page move."""
    name = emoji if isinstance(emoji, str) else getattr(emoji, "name", None)
    return MOVE_EMOTES.get(name)


def apply_move(index: int, move: PaginationMove, page_count: int) -> int:
    """Return the page index after `move`, clamped to [0, page_count)."""
    if move is PaginationMove.FIRST:
        return 0
    if move is PaginationMove.PREVIOUS:
        return index - 1 if index - 1 >= 0 else index
    if move is PaginationMove.NEXT:
        return index + 1 if index + 1 < page_count else index
    if move is PaginationMove.LAST:
        return page_count - 1
    return index


def page_footer(index: int, page_count: int) -> str:
    return f"page {index + 1} out of {page_count}"


class PaginatedMessageService:
    """Routes pagination reactions to per-message page callbacks.

    Expects the client to forward `on_raw_reaction_add` and
    `on_raw_reaction_remove` payloads to `handle_reaction`.
    """

    def __init__(self, client: discord.Client, capacity: int = CALLBACK_BUFFER_SIZE):
        self.client = client
        self._callbacks: CallbackBuffer[tuple[int, ReactionCallback]] = CallbackBuffer(capacity)

    @property
    def registered(self) -> int:
        return self._callbacks.used_spots

    def add_callback(self, message_id: int, callback: ReactionCallback) -> None:
        """Register a raw move callback, evicting the oldest entry when full."""
        if self._callbacks.is_full:
            evicted = self._callbacks.free()
            logger.debug(f"Pagination buffer full, evicted callback for message {evicted[0]}")
        self._callbacks.insert((message_id, callback))

    def add_paged_callback(self, message_id: int, page_count: int, callback: PageCallback) -> None:
        """Register a callback that receives the page index after each move.

        Moves on the same message run one at a time, so the rendered page
        always matches the current index.
        """
        index = 0
        lock = asyncio.Lock()

        async def on_move(message: discord.Message, move: PaginationMove) -> None:
            nonlocal index
            async with lock:
                index = apply_move(index, move, page_count)
                await callback(message, index)

        self.add_callback(message_id, on_move)

    def find_callback(self, message_id: int) -> Optional[ReactionCallback]:
        entry = self._callbacks.find_backwards(lambda e: e[0] == message_id)
        return entry[1] if entry else None

    async def handle_reaction(self, payload: discord.RawReactionActionEvent) -> bool:
        """Handle a reaction add/remove event.

        Returns True if a page callback was invoked.
        """
        bot_user = self.client.user
        if bot_user is None or payload.user_id == bot_user.id:
            return False

        if self._callbacks.used_spots == 0:
            return False

        move = move_from_emoji(payload.emoji)
        if move is None:
            return False

        callback = self.find_callback(payload.message_id)
        if callback is None:
            return False

        message = await self._fetch_message(payload.channel_id, payload.message_id)
        if message is None:
            return False

        if message.author.id != bot_user.id:
            return False

        if not any(str(reaction.emoji) in MOVE_EMOTES for reaction in message.reactions):
            return False

        await callback(message, move)
        return True

    async def _fetch_message(self, channel_id: int, message_id: int) -> Optional[discord.Message]:
        channel = self.client.get_channel(channel_id)
        try:
            if channel is None:
                channel = await self.client.fetch_channel(channel_id)
            return await channel.fetch_message(message_id)
        except discord.NotFound:
            logger.debug(f"Paginated message {message_id} no longer exists")
            return None
        except discord.HTTPException as e:
            logger.warning(f"Could not fetch paginated message {message_id}: {e}")
            return None

    async def _send_pages(
        self,
        channel: discord.abc.Messageable,
        page_count: int,
        get_embed: Callable[[int], Awaitable[discord.Embed]],
    ) -> discord.Message:
        message = await channel.send(embed=await get_embed(0))
        for emote in REACTION_EMOTES:
            await message.add_reaction(emote)

        async def show_page(msg: discord.Message, index: int) -> None:
            await msg.edit(embed=await get_embed(index))

        self.add_paged_callback(message.id, page_count, show_page)
        return message

    async def send_paginated_data_message(
        self,
        channel: discord.abc.Messageable,
        page_data: Sequence[Optional[T]],
        get_embed: EmbedBuilder,
    ) -> discord.Message:
        """Send one page per item; `get_embed(item, index, footer)` may be sync or async.

        Raises:
            ValueError: If page_data is empty or contains only None
        """
        if len(page_data) <= 0:
            raise ValueError("Passed zero length sequence")

        pages = [item for item in page_data if item is not None]
        if not pages:
            raise ValueError("Passed sequence without any pages")

        async def build(index: int) -> discord.Embed:
            embed = get_embed(pages[index], index, page_footer(index, len(pages)))
            if inspect.isawaitable(embed):
                embed = await embed
            return embed

        return await self._send_pages(channel, len(pages), build)

    async def send_paginated_embed_message(
        self,
        channel: discord.abc.Messageable,
        embeds: Sequence[discord.Embed],
    ) -> discord.Message:
        if len(embeds) <= 0:
            raise ValueError("Passed zero length sequence")

        async def build(index: int) -> discord.Embed:
            return embeds[index].set_footer(text=page_footer(index, len(embeds)))

        return await self._send_pages(channel, len(embeds), build)
