"""Profile cog - linking external accounts, profiles and daily coins."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

import discord
from discord.ext import commands

from belfast.apis import quaver
from belfast.constants import COLOR_PROFILE, DAILY_COINS, DAILY_COOLDOWN_SECONDS, EMOTE_COIN
from belfast.database import UserEntry
from belfast.utils import humanize_timedelta

logger = logging.getLogger('belfast_bot')

DAILY_COOLDOWN = timedelta(seconds=DAILY_COOLDOWN_SECONDS)


def claim_daily(entry: UserEntry, now: Optional[datetime] = None) -> Optional[timedelta]:
    """Grant the daily coins.

    Returns:
        None if the coins were granted, otherwise the time left until the
        next claim
    """
    now = now or datetime.now()
    if entry.last_daily is not None:
        remaining = entry.last_daily + DAILY_COOLDOWN - now
        if remaining > timedelta(0):
            return remaining
    entry.coins += DAILY_COINS
    entry.last_daily = now
    return None


def profile_embed(member: discord.abc.User, local: UserEntry, linked: UserEntry) -> discord.Embed:
    embed = discord.Embed(color=COLOR_PROFILE)
    embed.set_author(name=f"{member.display_name}'s Profile", icon_url=member.display_avatar.url)
    embed.add_field(name="Details ▼", value=(
        f"► Level: **{local.level}**\n"
        f"► Xp: **{local.xp}**\n"
        f"► Coins: **{linked.coins}** {EMOTE_COIN}\n"
        f"► Warnings: **{len(local.warns)}**"
    ), inline=False)
    embed.add_field(name="Accounts ▼", value=(
        f"► osu!: **{linked.osu_name or 'Not set'}**\n"
        f"► Anilist: **{linked.anilist_name or 'Not set'}**\n"
        f"► Quaver: **{linked.quaver_id or 'Not set'}**"
    ), inline=False)
    embed.set_thumbnail(url=member.display_avatar.url)
    return embed


class Profile(commands.Cog, description="Commands for your profile and linked accounts"):
    """Linked accounts, levels and coins.

    Accounts and coins are stored in the global scope, levels and warnings
    per server.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="osuset", help="Link your osu! username")
    async def osu_set(self, ctx: commands.Context, *, name: str):
        entry = self.bot.db.get_global_user_entry(ctx.author.id)
        entry.osu_name = name
        self.bot.db.write_data()
        logger.info(f"{ctx.author} linked osu! account {name}")
        await ctx.send(f"Set osu! name to **{name}**")

    @commands.command(name="alset", help="Link your Anilist username")
    async def anilist_set(self, ctx: commands.Context, *, name: str):
        entry = self.bot.db.get_global_user_entry(ctx.author.id)
        entry.anilist_name = name
        self.bot.db.write_data()
        logger.info(f"{ctx.author} linked Anilist account {name}")
        await ctx.send(f"Set Anilist name to **{name}**")

    @commands.command(name="quaverset", help="Link your Quaver username")
    async def quaver_set(self, ctx: commands.Context, *, name: str):
        user_id = await quaver.get_user_id_by_name(name)
        if user_id is None:
            await ctx.send(f"> No Quaver user **{name}** found")
            return

        entry = self.bot.db.get_global_user_entry(ctx.author.id)
        entry.quaver_id = user_id
        self.bot.db.write_data()
        logger.info(f"{ctx.author} linked Quaver account {name} ({user_id})")
        await ctx.send(f"Set Quaver user to **{name}**")

    @commands.command(name="profile", help="Show your or another member's profile")
    @commands.guild_only()
    async def profile(self, ctx: commands.Context, member: Optional[discord.Member] = None):
        member = member or ctx.author
        local = self.bot.db.get_user_entry(ctx.guild.id, member.id)
        linked = self.bot.db.get_global_user_entry(member.id)
        await ctx.send(embed=profile_embed(member, local, linked))

    @commands.command(name="daily", help=f"Claim {DAILY_COINS} coins once a day")
    async def daily(self, ctx: commands.Context):
        entry = self.bot.db.get_global_user_entry(ctx.author.id)
        remaining = claim_daily(entry)
        if remaining is not None:
            await ctx.send(f"{ctx.author.mention} You can claim your daily coins again in **{humanize_timedelta(remaining)}**")
            return

        self.bot.db.write_data()
        await ctx.send(f"{ctx.author.mention} You received **{DAILY_COINS}** {EMOTE_COIN}, you now have **{entry.coins}**")


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Profile(bot))
