"""osu! cog - profiles, recent and best plays, and beatmap lookups."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import discord
from discord.ext import commands

from belfast.accounts import osu_name, resolve_linked_account
from belfast.apis import osu
from belfast.checks import rate_limit
from belfast.constants import COLOR_OSU, EMOTE_NOTE, EMOTE_SHOCK, RANK_EMOTES
from belfast.exceptions import ConfigurationError
from belfast.utils import format_length

logger = logging.getLogger('belfast_bot')


def rank_text(rank: str) -> str:
    return RANK_EMOTES.get(rank, EMOTE_SHOCK)


def user_profile_embed(user: osu.UserProfile, footer: str) -> discord.Embed:
    suffix = osu.MODE_LINK_SUFFIX.get(user.mode, "osu")
    embed = discord.Embed(color=COLOR_OSU)
    embed.set_author(
        name=f"{user.username}'s osu!{osu.MODE_NAMES.get(user.mode, 'Unknown')} Data",
        url=f"https://osu.ppy.sh/users/{user.user_id}/{suffix}",
        icon_url=f"https://osu.ppy.sh/images/flags/{user.country}.png",
    )
    embed.add_field(name="Details ▼", value=(
        f"__**Main Details**__\n"
        f"► Accuracy: **{user.accuracy:.2f}%**\n"
        f"► PP: **{user.pp:.2f}**\n"
        f"► Play Count: **{user.play_count}**\n"
        f"► Level: **{user.level:.0f}**\n"
        f"__**Ranking**__\n"
        f"► Global Rank: **{user.global_ranking}**\n"
        f"► Country Rank: **{user.country_ranking} [{user.country}]**"
    ), inline=False)
    embed.set_thumbnail(url=f"https://a.ppy.sh/{user.user_id}")
    embed.set_footer(text=footer)
    return embed


def play_embed(play: osu.PlayResult, footer: str, kind: str = "Recent") -> discord.Embed:
    player = play.player
    beatmap = play.beatmap
    mode_name = osu.MODE_NAMES.get(play.mode, "Unknown")
    pp = f"{play.pp:.2f}" if play.pp is not None else "-"

    embed = discord.Embed(color=COLOR_OSU)
    if player is not None:
        embed.set_author(
            name=f"{player.username}'s {kind} osu!{mode_name} Play",
            url=f"https://osu.ppy.sh/users/{player.user_id}/{osu.MODE_LINK_SUFFIX.get(play.mode, 'osu')}",
            icon_url=f"https://a.ppy.sh/{player.user_id}",
        )

    details = (
        f"__**Main Details**__\n"
        f"► Rank: **{rank_text(play.rank)}**\n"
        f"► Accuracy: **{play.accuracy * 100:.2f}%**\n"
        f"► PP: **{pp}**\n"
        f"► Mods: **{play.mods.to_short_string() or 'None'}**\n"
        f"► Score: **{play.score}**\n"
        f"► Combo: **{play.combo}**\n"
    )
    if beatmap is not None:
        details += (
            f"__**Beatmap**__ {EMOTE_NOTE}\n"
            f"**[{beatmap.name}](https://osu.ppy.sh/b/{beatmap.id})**\n"
            f"► **[{beatmap.star_rating:.2f}☆] {beatmap.bpm:g}** Bpm\n"
            f"► Length **{format_length(beatmap.length)}**\n"
            f"► Made By: **[{beatmap.creator_name}](https://osu.ppy.sh/users/{beatmap.creator_id})**"
        )
        embed.set_image(url=f"https://assets.ppy.sh/beatmaps/{beatmap.set_id}/covers/cover.jpg")
    embed.add_field(name="Details ▼", value=details, inline=False)
    embed.set_footer(text=footer)
    return embed


def beatmap_embed(beatmap: osu.Beatmap) -> discord.Embed:
    embed = discord.Embed(title=beatmap.name, url=f"https://osu.ppy.sh/b/{beatmap.id}", color=COLOR_OSU)
    embed.add_field(name="Created by", value=beatmap.creator_name, inline=False)
    embed.add_field(name="Difficulty", value=f"{beatmap.star_rating:.2f}☆", inline=True)
    embed.add_field(name="BPM", value=f"{beatmap.bpm:g}", inline=True)
    embed.add_field(name="Length", value=format_length(beatmap.length), inline=True)
    embed.set_image(url=f"https://assets.ppy.sh/beatmaps/{beatmap.set_id}/covers/cover.jpg")
    return embed


class Osu(commands.Cog, description="Commands for osu"):
    """osu! lookups.

    Expects main `bot` to expose:
      - bot.db (JsonDatabase instance)
      - bot.settings (Settings instance, osu_api_token)
      - bot.paginator (PaginatedMessageService instance)
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        # channel id -> last beatmap shown there
        self.last_beatmap: dict[int, osu.Beatmap] = {}

    def _token(self) -> str:
        token = self.bot.settings.osu_api_token
        if not token:
            raise ConfigurationError("osu! API token is not configured")
        return token

    async def _username(self, ctx: commands.Context, target: str) -> Optional[str]:
        return await resolve_linked_account(ctx, self.bot.db, target, osu_name)

    def _remember(self, channel_id: int, beatmap: Optional[osu.Beatmap]) -> None:
        if beatmap is not None:
            self.last_beatmap[channel_id] = beatmap

    async def _send_plays(self, ctx: commands.Context, plays: list[Optional[osu.PlayResult]], kind: str) -> None:
        channel_id = ctx.channel.id

        def build(play: osu.PlayResult, index: int, footer: str) -> discord.Embed:
            self._remember(channel_id, play.beatmap)
            return play_embed(play, footer, kind)

        await self.bot.paginator.send_paginated_data_message(ctx.channel, plays, build)

    async def _plays_command(self, ctx: commands.Context, fetch, kind: str, mode_name: str, target: str) -> None:
        token = self._token()
        username = await self._username(ctx, target)
        if username is None:
            await ctx.send("> No linked osu! account, use `osuset` or pass a name")
            return

        logger.info(f"Searching for user {username}'s {kind.lower()} plays on osu!")
        mode = osu.mode_from_name(mode_name)

        if mode == -1:
            # One page per mode, each holding that mode's latest play
            results = await asyncio.gather(*(fetch(token, username, m, 1) for m in range(osu.MODE_COUNT)))
            plays = [next((p for p in r if p.beatmap is not None), None) for r in results]
        else:
            plays = [p for p in await fetch(token, username, mode) if p.beatmap is not None]

        if not any(plays):
            await ctx.send(f"> No {kind.lower()} plays found for **{username}**")
            return
        await self._send_plays(ctx, plays, kind)

    @commands.command(name="osu", help="Get profile details from an osu! user")
    @rate_limit("osu")
    async def osu_user(self, ctx: commands.Context, *, target: str = ""):
        token = self._token()
        username = await self._username(ctx, target)
        if username is None:
            await ctx.send("> No linked osu! account, use `osuset` or pass a name")
            return

        logger.info(f"Searching for user {username} on osu!")
        results = await asyncio.gather(*(osu.get_user(token, username, m) for m in range(osu.MODE_COUNT)))
        profiles = [r for r in results if r is not None]
        if not profiles:
            await ctx.send(f"> No user **{username}** found")
            return

        await self.bot.paginator.send_paginated_data_message(
            ctx.channel, profiles, lambda user, index, footer: user_profile_embed(user, footer)
        )

    @commands.command(name="orecent", aliases=["ors"], help="Get recent plays of an osu! user (mode: std, taiko, ctb, mania)")
    @rate_limit("osu")
    async def recent(self, ctx: commands.Context, mode: str = "_", *, target: str = ""):
        await self._plays_command(ctx, osu.get_user_recent, "Recent", mode, target)

    @commands.command(name="obest", aliases=["obs"], help="Get best plays of an osu! user (mode: std, taiko, ctb, mania)")
    @rate_limit("osu")
    async def best(self, ctx: commands.Context, mode: str = "_", *, target: str = ""):
        await self._plays_command(ctx, osu.get_user_best, "Best", mode, target)

    @commands.command(name="omap", help="Gives information about a map, or the last map shown in this channel")
    @rate_limit("osu")
    async def beatmap(self, ctx: commands.Context, map_id: Optional[str] = None, mode: str = "std"):
        if map_id is None:
            beatmap = self.last_beatmap.get(ctx.channel.id)
            if beatmap is None:
                await ctx.send("No map found in this channel")
                return
            await ctx.send(embed=beatmap_embed(beatmap))
            return

        if not map_id.isdigit():
            await ctx.send("Invalid map id provided")
            return

        beatmap = await osu.get_beatmap(self._token(), int(map_id), osu.mode_from_name(mode, 0))
        if beatmap is None:
            await ctx.send("No such map")
            return
        self._remember(ctx.channel.id, beatmap)
        await ctx.send(embed=beatmap_embed(beatmap))


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Osu(bot))
