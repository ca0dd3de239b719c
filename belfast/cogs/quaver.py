"""Quaver cog - user profiles, recent plays and map lookups."""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord.ext import commands

from belfast.accounts import quaver_id, resolve_linked_account
from belfast.apis import quaver
from belfast.checks import rate_limit
from belfast.constants import COLOR_QUAVER, EMOTE_NOTE, EMOTE_SHOCK, RANK_EMOTES

logger = logging.getLogger('belfast_bot')

NO_USER_REPLY = "> Couldn't find any user, please set one or specify in arguments"


def user_embed(user: quaver.User, key: quaver.KeyInfo, footer: str) -> discord.Embed:
    embed = discord.Embed(color=COLOR_QUAVER)
    embed.set_author(
        name=f"{user.username}'s Quaver {key.key_count}K Info",
        url=user.profile_url,
        icon_url=f"https://static.quavergame.com/img/flags/{user.country}.png",
    )
    embed.add_field(name="Details ▼", value=(
        f"__**Main Details**__\n"
        f"► Accuracy: **{key.stats.accuracy:.2f}**\n"
        f"► Performance: **{key.stats.performance_rating:.2f}**\n"
        f"► Play Count: **{key.stats.play_count}**\n"
        f"__**Ranking**__\n"
        f"► Global Rank: **{key.global_ranking or '-'}**\n"
        f"► Country Rank: **{key.country_ranking or '-'} [{user.country}]**"
    ), inline=False)
    if user.avatar_url:
        embed.set_thumbnail(url=user.avatar_url)
    embed.set_footer(text=footer)
    return embed


def recent_embed(user: quaver.User, recent: quaver.Recent, key_count: int) -> discord.Embed:
    play_map = recent.map
    embed = discord.Embed(color=COLOR_QUAVER)
    embed.set_author(name=f"{user.username}'s Recent {key_count}K Play", url=user.profile_url, icon_url=user.avatar_url)
    embed.add_field(name="Details ▼", value=(
        f"__**Main Details**__\n"
        f"► Performance: **{recent.performance_rating:.2f}**\n"
        f"► Grade: **{RANK_EMOTES.get(recent.grade, EMOTE_SHOCK)}**\n"
        f"► Accuracy: **{recent.accuracy:.2f}**\n"
        f"► Mods: **{recent.mods_string}**\n"
        f"► Combo: **{recent.combo}**\n"
        f"__**Map**__ {EMOTE_NOTE}\n"
        f"**[{play_map.artist} - {play_map.title}]({play_map.url})**\n"
        f"► **{play_map.difficulty_name} [{play_map.difficulty_rating:.2f}☆]**\n"
        f"► Made By: **{play_map.creator}**"
    ), inline=False)
    embed.set_image(url=play_map.banner_url)
    return embed


def map_embed(play_map: quaver.Map) -> discord.Embed:
    embed = discord.Embed(title=f"{play_map.artist} - {play_map.title}", url=play_map.url, color=COLOR_QUAVER)
    embed.add_field(name="Created by", value=play_map.creator, inline=False)
    embed.add_field(name="Difficulty", value=f"{play_map.difficulty_name} [{play_map.difficulty_rating:.2f}☆]", inline=False)
    embed.set_image(url=play_map.banner_url)
    return embed


class Quaver(commands.Cog, description="Commands for quaver"):
    """Quaver lookups.

    Expects main `bot` to expose:
      - bot.db (JsonDatabase instance)
      - bot.paginator (PaginatedMessageService instance)
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        # channel id -> last map shown there
        self.last_map: dict[int, quaver.Map] = {}

    async def _user_id(self, ctx: commands.Context, target: str) -> Optional[int]:
        return await resolve_linked_account(ctx, self.bot.db, target, quaver_id, quaver.get_user_id_by_name)

    async def _recent(self, ctx: commands.Context, target: str, mode: int, key_count: int) -> None:
        user_id = await self._user_id(ctx, target)
        if user_id is None:
            await ctx.send(NO_USER_REPLY)
            return

        logger.info(f"Searching for Quaver user {user_id}'s recent {key_count}K play")
        recent = await quaver.get_user_recent(user_id, mode)
        user = await quaver.get_user(user_id)
        if recent is None or user is None:
            await ctx.send(f"> No recent {key_count}K plays found")
            return

        self.last_map[ctx.channel.id] = recent.map
        await ctx.send(embed=recent_embed(user, recent, key_count))

    @commands.command(name="quaver", help="Get info about a Quaver user")
    @rate_limit("quaver")
    async def quaver_user(self, ctx: commands.Context, *, target: str = ""):
        user_id = await self._user_id(ctx, target)
        if user_id is None:
            await ctx.send(NO_USER_REPLY)
            return

        logger.info(f"Searching for Quaver user {user_id}")
        user = await quaver.get_user(user_id)
        if user is None:
            await ctx.send(NO_USER_REPLY)
            return

        await self.bot.paginator.send_paginated_data_message(
            ctx.channel,
            [user.four_keys, user.seven_keys],
            lambda key, index, footer: user_embed(user, key, footer),
        )

    @commands.command(name="qrecent4k", aliases=["qr4k"], help="Get recent 4K play info by user")
    @rate_limit("quaver")
    async def recent_4k(self, ctx: commands.Context, *, target: str = ""):
        await self._recent(ctx, target, quaver.MODE_4K, 4)

    @commands.command(name="qrecent7k", aliases=["qr7k"], help="Get recent 7K play info by user")
    @rate_limit("quaver")
    async def recent_7k(self, ctx: commands.Context, *, target: str = ""):
        await self._recent(ctx, target, quaver.MODE_7K, 7)

    @commands.command(name="qmap", help="Gives information about a map, or the last map shown in this channel")
    @rate_limit("quaver")
    async def quaver_map(self, ctx: commands.Context, map_id: Optional[str] = None):
        if map_id is None:
            play_map = self.last_map.get(ctx.channel.id)
            if play_map is None:
                await ctx.send("No map found in this channel")
                return
            await ctx.send(embed=map_embed(play_map))
            return

        if not map_id.isdigit():
            await ctx.send("Invalid map id provided")
            return

        play_map = await quaver.get_map(int(map_id))
        if play_map is None:
            await ctx.send("No such map")
            return
        self.last_map[ctx.channel.id] = play_map
        await ctx.send(embed=map_embed(play_map))


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Quaver(bot))
