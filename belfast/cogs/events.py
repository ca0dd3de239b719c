"""Event handlers cog - handles Discord.py events.

This cog handles:
- on_ready: presence and background task startup
- on_guild_join / on_guild_remove: presence refresh
- on_member_join: welcome messages
- on_raw_reaction_add / on_raw_reaction_remove: paginated message navigation
- on_message: automatic moderation and chat xp
"""
from __future__ import annotations

import logging
import random

import discord
from discord.ext import commands

from belfast.discord_utils import safe_send_message

logger = logging.getLogger('belfast_bot')


def format_welcome(template: str, member: discord.Member) -> str:
    """Fill a welcome template: {0} is the member mention, {1} the guild name."""
    return template.format(member.mention, member.guild.name)


class EventHandlers(commands.Cog):
    """Cog that handles Discord.py events.

    Expects main `bot` to expose:
      - bot.settings, bot.paginator, bot.giveaways, bot.rewards
      - bot.invite_detector, bot.word_blacklist
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        logger.info("EventHandlers cog initialized")

    async def update_presence(self) -> None:
        status = self.bot.settings.format_status(len(self.bot.guilds))
        await self.bot.change_presence(activity=discord.Game(name=status))

    @commands.Cog.listener()
    async def on_ready(self):
        logger.info(f"Bot connected as {self.bot.user} to {len(self.bot.guilds)} guild(s)")
        await self.update_presence()
        self.bot.giveaways.start()

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild):
        logger.info(f"Joined guild {guild.name} ({guild.id})")
        await self.update_presence()

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild):
        logger.info(f"Left guild {guild.name} ({guild.id})")
        await self.update_presence()

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member):
        channel = member.guild.system_channel
        templates = self.bot.settings.welcome_messages
        if channel is None or not templates:
            return
        await safe_send_message(channel, format_welcome(random.choice(templates), member))

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        await self.bot.paginator.handle_reaction(payload)

    @commands.Cog.listener()
    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent):
        await self.bot.paginator.handle_reaction(payload)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author.bot or message.guild is None:
            return

        # Commands are handled by the bot's own on_message
        ctx = await self.bot.get_context(message)
        if ctx.valid:
            return

        if await self.bot.invite_detector.check(message):
            return
        if await self.bot.word_blacklist.check(message):
            return

        level = self.bot.rewards.reward(message.guild.id, message.author.id)
        if level is not None:
            await safe_send_message(message.channel, f"{message.author.mention} has reached level **{level}**!")


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(EventHandlers(bot))
