"""Otaku cog - anime/manga lookups, reverse image search and Japanese dictionary."""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord.ext import commands

from belfast.accounts import anilist_name, resolve_linked_account
from belfast.apis import anilist, jisho, mal, tracemoe
from belfast.apis.base import download_bytes
from belfast.apis.models import AnimeResult, MangaResult, UserResult
from belfast.checks import rate_limit
from belfast.constants import COLOR_JISHO, COLOR_OTAKU, DISCORD_FIELD_MAX_CHARS, FAVORITE_SHORTEN_LIMIT
from belfast.utils import comma_separated, format_length, or_default, shorten_text

logger = logging.getLogger('belfast_bot')

DEFAULT_SEARCH = "Azur Lane"
DISCORD_CDN_HOSTS = ("cdn.discordapp.com", "media.discordapp.net")


def _with_footer(embed: discord.Embed, footer: Optional[str]) -> discord.Embed:
    if footer:
        embed.set_footer(text=footer)
    return embed


def _base_embed(title: str, site_url: Optional[str], api_type) -> discord.Embed:
    embed = discord.Embed(color=COLOR_OTAKU)
    embed.set_author(name=title, url=site_url, icon_url=api_type.icon_url)
    return embed


def anime_embed(result: AnimeResult, footer: Optional[str] = None) -> discord.Embed:
    embed = _base_embed(result.title, result.site_url, result.api_type)
    embed.description = f"__**Description:**__\n{shorten_text(result.synopsis) or 'No description'}"
    studio = or_default(result.studio, "Unknown")
    studio_text = f"[{studio}]({result.studio_url})" if result.studio_url else studio
    trailer = f"[Trailer]({result.trailer_url})" if result.trailer_url else "No trailer"
    embed.add_field(name="Details ▼", value=(
        f"► Type: **{or_default(result.type, 'Unknown')}** [Source: **{or_default(result.source, 'Unknown')}**]\n"
        f"► Status: **{or_default(result.status, 'Unknown')}**\n"
        f"► Episodes: **{or_default(result.episodes, 'Unknown')} [{or_default(result.duration, 'Unknown')}]**\n"
        f"► Score: **{or_default(result.score, 'NaN')}**☆\n"
        f"► Studio: **{studio_text}**\n"
        f"► Broadcast Time: **[{or_default(result.broadcast, 'Unknown')}]**\n"
        f"**{trailer}**"
    ), inline=False)
    if result.image_url:
        embed.set_image(url=result.image_url)
    return _with_footer(embed, footer)


def manga_embed(result: MangaResult, footer: Optional[str] = None) -> discord.Embed:
    embed = _base_embed(result.title, result.site_url, result.api_type)
    embed.description = f"__**Description:**__\n{shorten_text(result.synopsis) or 'No description'}"
    authors = comma_separated(
        f"[{staff.name}]({staff.site_url})" if staff.site_url else staff.name for staff in result.staff
    )
    embed.add_field(name="Details ▼", value=(
        f"► Type: **{or_default(result.type, 'Unknown')}**\n"
        f"► Status: **{or_default(result.status, 'Unknown')}**\n"
        f"► Chapters: **{or_default(result.chapters, 'Unknown')}**\n"
        f"► Volumes: **{or_default(result.volumes, 'Unknown')}**\n"
        f"► Average Score: **{or_default(result.score, 'NaN')}**☆\n"
        f"► Author(s): **{authors or 'Unknown'}**"
    ), inline=False)
    if result.image_url:
        embed.set_image(url=result.image_url)
    return _with_footer(embed, footer)


def _favorite(favorite) -> str:
    if favorite is None:
        return "None"
    name = shorten_text(favorite.name, FAVORITE_SHORTEN_LIMIT)
    return f"[{name}]({favorite.site_url})" if favorite.site_url else name


def user_embed(result: UserResult) -> discord.Embed:
    embed = _base_embed(f"Anilist Data of {result.name}", result.site_url, result.api_type)
    embed.add_field(name="Statistics ▼", value=(
        f"__**Anime Stats:**__\n"
        f"► Total Count: **{result.anime_stats.count}**\n"
        f"► Episodes Watched: **{result.anime_stats.amount}**\n"
        f"► Mean Score: **{result.anime_stats.mean_score}**\n"
        f"__**Manga Stats:**__\n"
        f"► Total Count: **{result.manga_stats.count}**\n"
        f"► Chapters Read: **{result.manga_stats.amount}**\n"
        f"► Mean Score: **{result.manga_stats.mean_score}**"
    ), inline=False)
    embed.add_field(name="Favorites ▼", value=(
        f"► Anime: **{_favorite(result.anime_favorite)}**\n"
        f"► Manga: **{_favorite(result.manga_favorite)}**\n"
        f"► Character: **{_favorite(result.character_favorite)}**"
    ), inline=False)
    if result.avatar_image:
        embed.set_thumbnail(url=result.avatar_image)
    if result.banner_image:
        embed.set_image(url=result.banner_image)
    return embed


def trace_embed(trace: tracemoe.TraceResult, anime: Optional[AnimeResult]) -> discord.Embed:
    if anime is not None:
        embed = anime_embed(anime)
    else:
        embed = discord.Embed(title=trace.filename, color=COLOR_OTAKU)
    episode = or_default(trace.episode, "Unknown")
    embed.add_field(name="Scene ▼", value=(
        f"► Episode: **{episode}**\n"
        f"► At: **{format_length(trace.start)}**\n"
        f"► Similarity: **{trace.similarity * 100:.2f}%**"
    ), inline=False)
    return embed


def jisho_embed(result: jisho.SearchResult) -> discord.Embed:
    embed = discord.Embed(title=result.word, url=result.url, color=COLOR_JISHO)
    readings = "\n".join(
        f"► {word or reading} ({reading})" if word and reading and word != reading else f"► {word or reading}"
        for word, reading in result.japanese
    )
    if readings:
        embed.add_field(name="Japanese ▼", value=readings[:DISCORD_FIELD_MAX_CHARS], inline=False)

    lines = []
    for i, sense in enumerate(result.english, start=1):
        line = f"{i}. {comma_separated(sense.definitions)}"
        if sense.info:
            line += f" *({comma_separated(sense.info)})*"
        lines.append(line)
    if lines:
        embed.add_field(name="English ▼", value="\n".join(lines)[:DISCORD_FIELD_MAX_CHARS], inline=False)

    if result.is_common:
        embed.set_footer(text="Common word")
    return embed


def is_discord_cdn_link(url: str) -> bool:
    return any(host in url for host in DISCORD_CDN_HOSTS)


class Otaku(commands.Cog, description="Commands for Japan related stuff"):
    """Anime, manga and dictionary lookups.

    Expects main `bot` to expose:
      - bot.db (JsonDatabase instance)
      - bot.paginator (PaginatedMessageService instance)
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _previous_attachment(self, ctx: commands.Context) -> Optional[discord.Attachment]:
        previous = [m async for m in ctx.channel.history(limit=1, before=ctx.message)]
        if not previous:
            await ctx.send("Too Few Messages")
            return None
        if not previous[0].attachments:
            await ctx.send("No Images Were Found On Previous Message")
            return None
        return previous[0].attachments[0]

    @commands.command(name="trace", help="Trace an image to find the anime it's from\nPlease refrain from using Discord image links")
    @rate_limit("otaku")
    async def trace(self, ctx: commands.Context, *, url: Optional[str] = None):
        logger.info(f"Tracing image {url or '(attachment)'}")

        if url is not None:
            if is_discord_cdn_link(url):
                await ctx.send("Discord image links are not supported, please send the image directly as an attachment")
                return
            results = await tracemoe.search_url(url, limit=1)
        else:
            attachment = ctx.message.attachments[0] if ctx.message.attachments else await self._previous_attachment(ctx)
            if attachment is None:
                return
            image = await download_bytes(attachment.url)
            results = await tracemoe.search_image(image, limit=1)

        if not results:
            await ctx.send("> No matching anime found")
            return

        best = results[0]
        anime = await anilist.get_anime(best.anilist_id)
        await ctx.send(embed=trace_embed(best, anime))

    @commands.command(name="malanime", aliases=["mala"], help="Search for anime on MyAnimeList")
    @rate_limit("otaku")
    async def mal_anime(self, ctx: commands.Context, *, name: str = DEFAULT_SEARCH):
        logger.info(f"Searching for {name} on myanimelist")
        ids = await mal.search_anime_ids(name)
        if not ids:
            await ctx.send(f"> No anime found for **{name}**")
            return

        # Details are fetched when a page is first shown
        cache: dict[int, AnimeResult] = {}

        async def build(mal_id: int, index: int, footer: str) -> discord.Embed:
            if index not in cache:
                cache[index] = await mal.get_anime(mal_id)
            return anime_embed(cache[index], footer)

        await self.bot.paginator.send_paginated_data_message(ctx.channel, ids, build)

    @commands.command(name="malmanga", aliases=["malm"], help="Search for manga on MyAnimeList")
    @rate_limit("otaku")
    async def mal_manga(self, ctx: commands.Context, *, name: str = DEFAULT_SEARCH):
        logger.info(f"Searching for {name} on myanimelist")
        ids = await mal.search_manga_ids(name)
        if not ids:
            await ctx.send(f"> No manga found for **{name}**")
            return

        cache: dict[int, MangaResult] = {}

        async def build(mal_id: int, index: int, footer: str) -> discord.Embed:
            if index not in cache:
                cache[index] = await mal.get_manga(mal_id)
            return manga_embed(cache[index], footer)

        await self.bot.paginator.send_paginated_data_message(ctx.channel, ids, build)

    @commands.command(name="alanime", aliases=["ala"], help="Search for anime on Anilist")
    @rate_limit("otaku")
    async def al_anime(self, ctx: commands.Context, *, name: str = DEFAULT_SEARCH):
        logger.info(f"Searching for {name} on anilist")
        result = await anilist.get_anime(name)
        if result is None:
            await ctx.send(f"> No anime found for **{name}**")
            return
        await ctx.send(embed=anime_embed(result))

    @commands.command(name="almanga", aliases=["alm"], help="Search for manga on Anilist")
    @rate_limit("otaku")
    async def al_manga(self, ctx: commands.Context, *, name: str = DEFAULT_SEARCH):
        logger.info(f"Searching for {name} on anilist")
        result = await anilist.get_manga(name)
        if result is None:
            await ctx.send(f"> No manga found for **{name}**")
            return
        await ctx.send(embed=manga_embed(result))

    @commands.command(name="aluser", aliases=["alu"], help="Search for a user on Anilist")
    @rate_limit("otaku")
    async def al_user(self, ctx: commands.Context, *, target: str = ""):
        username = await resolve_linked_account(ctx, self.bot.db, target, anilist_name)
        if username is None:
            await ctx.send("> No linked Anilist account, use `alset` or pass a name")
            return

        logger.info(f"Searching for {username} on anilist")
        result = await anilist.get_user(username)
        if result is None:
            await ctx.send(f"> No user **{username}** found")
            return
        await ctx.send(embed=user_embed(result))

    @commands.command(name="jisho", aliases=["j"], help="Look up a word on Jisho")
    @rate_limit("otaku")
    async def jisho_search(self, ctx: commands.Context, *, word: str):
        logger.info(f"Searching for {word} on jisho")
        result = await jisho.get_word(word)
        if result is None:
            await ctx.send(f"> No results for **{word}**")
            return
        await ctx.send(embed=jisho_embed(result))


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Otaku(bot))
