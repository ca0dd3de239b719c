"""Info cog - help listings and the about page."""
from __future__ import annotations

import inspect
import logging

import discord
from discord.ext import commands

from belfast.constants import COLOR_HELP, COLOR_PRIMARY, VERSION
from belfast.utils import comma_separated

logger = logging.getLogger('belfast_bot')


def cogs_help_embed(bot: commands.Bot, prefix: str) -> discord.Embed:
    embed = discord.Embed(
        description=f"Do {prefix}help [command] to get more information about a command",
        color=COLOR_HELP,
    )
    for i, (name, cog) in enumerate(sorted(bot.cogs.items()), start=1):
        names = [cmd.name for cmd in cog.get_commands() if not cmd.hidden]
        if not names:
            continue
        embed.add_field(
            name=str(i),
            value=f"__**{name} - {cog.description or ''}**__\n{comma_separated(names)}",
            inline=False,
        )
    return embed


def command_help_embed(command: commands.Command) -> discord.Embed:
    aliases = f" ({comma_separated(command.aliases)})" if command.aliases else ""
    embed = discord.Embed(
        title=f"{command.name}{aliases} - {command.help or 'No information about the command specified'}",
        color=COLOR_HELP,
    )
    for name, param in command.clean_params.items():
        if param.default is inspect.Parameter.empty:
            embed.add_field(name=f"[{name}]", value="Required", inline=False)
        else:
            embed.add_field(name=f"({name})", value=f"defaults to \"{param.default}\"", inline=False)
    return embed


class Info(commands.Cog, description="Commands for information"):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="help", help="Lists commands, or details about one command")
    async def help(self, ctx: commands.Context, *, command: str = None):
        logger.info(f"{ctx.author} asked for help about {command or 'all commands'}")
        prefix = self.bot.settings.bot_prefix

        if command is None:
            await ctx.send(embed=cogs_help_embed(self.bot, prefix))
            return

        found = self.bot.get_command(command.strip().lower().removeprefix(prefix.lower()))
        if found is None:
            await ctx.send(f"Couldn't find command '{command}'")
            return
        await ctx.send(embed=command_help_embed(found))

    @commands.command(name="about", help="Shows information about the bot")
    async def about(self, ctx: commands.Context):
        logger.info(f"{ctx.author} requested about page")
        embed = discord.Embed(color=COLOR_PRIMARY)
        embed.add_field(name="About ▼", value=(
            f"► Version: **{VERSION}**\n"
            f"► Servers: **{len(self.bot.guilds)}**\n"
            f"► Library: **discord.py {discord.__version__}**"
        ), inline=False)
        if self.bot.user is not None:
            embed.set_thumbnail(url=self.bot.user.display_avatar.url)
        await ctx.send(embed=embed)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Info(bot))
