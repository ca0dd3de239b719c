"""Giveaway scheduling.

Giveaways are persisted on the server entry so they survive restarts. A
background task wakes up periodically, draws winners for every giveaway
whose end time has passed, announces them, and removes the entry.
"""
from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime
from typing import Optional, Sequence, TypeVar

import discord

from belfast.constants import COLOR_GIVEAWAY, GIVEAWAY_CHECK_INTERVAL_SECONDS
from belfast.database import GiveawayEntry, JsonDatabase, ServerEntry
from belfast.exceptions import DatabaseError

logger = logging.getLogger('belfast_bot.giveaways')

T = TypeVar('T')


def pick_winners(entrants: Sequence[T], count: int, rng: random.Random = None) -> list[T]:
    """Draw up to `count` distinct winners."""
    rng = rng or random
    unique = list(dict.fromkeys(entrants))
    return rng.sample(unique, min(count, len(unique)))


def is_due(giveaway: GiveawayEntry, now: Optional[datetime] = None) -> bool:
    return giveaway.end <= (now or datetime.now())


class GiveawayService:
    def __init__(self, bot: discord.Client, db: JsonDatabase, interval: float = GIVEAWAY_CHECK_INTERVAL_SECONDS):
        self.bot = bot
        self.db = db
        self.interval = interval
        self.task: Optional[asyncio.Task] = None

    def add_giveaway(self, entry: GiveawayEntry, guild_id: int) -> None:
        server = self.db.get_server_entry(guild_id)
        server.giveaways.append(entry)
        self.db.write_data()
        logger.info(f"Scheduled giveaway '{entry.content}' in guild {guild_id} ending {entry.end}")

    def due_giveaways(self, now: Optional[datetime] = None) -> list[tuple[ServerEntry, GiveawayEntry]]:
        return [(server, g) for server, g in self.db.all_giveaways() if is_due(g, now)]

    async def _collect_entrants(self, message: discord.Message, emote: str) -> list[discord.abc.User]:
        for reaction in message.reactions:
            if str(reaction.emoji) == emote:
                return [user async for user in reaction.users() if not user.bot]
        return []

    async def _resolve_message(self, giveaway: GiveawayEntry) -> Optional[discord.Message]:
        channel = self.bot.get_channel(giveaway.channel_id)
        if channel is None:
            logger.warning(f"Giveaway channel {giveaway.channel_id} not found")
            return None
        try:
            return await channel.fetch_message(giveaway.reaction_message_id)
        except discord.NotFound:
            logger.info(f"Giveaway message {giveaway.reaction_message_id} was deleted")
            return None

    async def finish_giveaway(self, server: ServerEntry, giveaway: GiveawayEntry) -> list[discord.abc.User]:
        """Draw and announce winners, then drop the giveaway from the database."""
        winners: list[discord.abc.User] = []
        message = await self._resolve_message(giveaway)
        if message is not None:
            emote = giveaway.emote or server.giveaway_reaction_emote
            entrants = await self._collect_entrants(message, emote)
            winners = pick_winners(entrants, giveaway.count)
            await message.channel.send(embed=self.results_embed(giveaway, winners), reference=message)
            logger.info(f"Giveaway '{giveaway.content}' ended with {len(winners)} winner(s) from {len(entrants)} entrant(s)")

        server.giveaways.remove(giveaway)
        self.db.write_data()
        return winners

    @staticmethod
    def results_embed(giveaway: GiveawayEntry, winners: Sequence[discord.abc.User]) -> discord.Embed:
        embed = discord.Embed(title="Giveaway Ended", color=COLOR_GIVEAWAY)
        if winners:
            mentions = "\n".join(f"► {w.mention}" for w in winners)
            embed.description = f"Prize: __**{giveaway.content}**__\n\n**Winner{'s' if len(winners) != 1 else ''}:**\n{mentions}"
        else:
            embed.description = f"Prize: __**{giveaway.content}**__\n\nNobody entered, so nobody wins."
        return embed

    async def check_giveaways(self) -> int:
        """Finish every due giveaway. Returns how many were finished."""
        finished = 0
        for server, giveaway in self.due_giveaways():
            try:
                await self.finish_giveaway(server, giveaway)
                finished += 1
            except (discord.HTTPException, DatabaseError) as e:
                logger.error(f"Failed to finish giveaway '{giveaway.content}': {e}", exc_info=True)
        return finished

    async def run_periodic_check(self):
        logger.info(f"Starting giveaway task (runs every {self.interval}s)")
        await self.bot.wait_until_ready()
        while True:
            try:
                await self.check_giveaways()
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                logger.info("Giveaway task cancelled")
                break
            except Exception as e:
                logger.error(f"Unexpected error in giveaway task: {e}", exc_info=True)
                await asyncio.sleep(self.interval)

    def start(self):
        if self.task is None or self.task.done():
            self.task = asyncio.create_task(self.run_periodic_check())
            logger.info("Giveaway task started")

    def stop(self):
        if self.task and not self.task.done():
            self.task.cancel()
            logger.info("Giveaway task stopped")
