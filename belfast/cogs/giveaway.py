"""Giveaway cog - creating giveaways and choosing the entry emote."""
from __future__ import annotations

import logging
from datetime import datetime

import discord
from discord.ext import commands

from belfast.constants import COLOR_GIVEAWAY
from belfast.database import GiveawayEntry
from belfast.exceptions import ValidationError
from belfast.utils import parse_relative_time

logger = logging.getLogger('belfast_bot')


def giveaway_embed(author: discord.abc.User, content: str, end: datetime, count: int, emote: str) -> discord.Embed:
    embed = discord.Embed(color=COLOR_GIVEAWAY)
    embed.set_author(name=f"{author.display_name} has started a giveaway!", icon_url=author.display_avatar.url)
    embed.add_field(name="Details ▼", value=(
        f"► Prize: __**{content}**__\n"
        f"► Time Limit: **{discord.utils.format_dt(end.astimezone(), 'f')}**\n"
        f"► Winner Limit: **{count}**\n"
        f"**React with {emote} to enter the giveaway!**\n"
        f"I Belfast wish every one of the commanders good luck!"
    ), inline=False)
    embed.set_footer(text=f"Requested by {author}", icon_url=author.display_avatar.url)
    return embed


class Giveaway(commands.Cog, description="Commands for giveaways"):
    """Giveaway commands.

    Expects main `bot` to expose:
      - bot.db (JsonDatabase instance)
      - bot.giveaways (GiveawayService instance)
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="gcreate", help="Create a giveaway, e.g. gcreate \"2 days\" \"Nitro\" 1")
    @commands.guild_only()
    async def create(self, ctx: commands.Context, time: str, content: str, count: int = 1):
        end = parse_relative_time(time)
        if end is None:
            raise ValidationError("Couldn't parse time, use e.g. \"30 minutes\", \"2 hours\" or \"1 day\"")
        if count < 1:
            raise ValidationError("Winner limit must be at least 1")

        server = self.bot.db.get_server_entry(ctx.guild.id)
        emote = server.giveaway_reaction_emote

        message = await ctx.send(embed=giveaway_embed(ctx.author, content, end, count, emote))
        await message.add_reaction(emote)

        self.bot.giveaways.add_giveaway(GiveawayEntry(
            end=end,
            channel_id=ctx.channel.id,
            content=content,
            reaction_message_id=message.id,
            count=count,
            emote=emote,
        ), ctx.guild.id)

    @commands.command(name="gemote", help="Sets the emoji used to enter giveaways")
    @commands.guild_only()
    @commands.has_permissions(manage_guild=True)
    async def set_emote(self, ctx: commands.Context, emote: str):
        self.bot.db.get_server_entry(ctx.guild.id).giveaway_reaction_emote = emote
        self.bot.db.write_data()
        logger.info(f"Giveaway emote for {ctx.guild.name} set to {emote}")
        await ctx.send(f"Set giveaway emoji to {emote}")


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Giveaway(bot))
