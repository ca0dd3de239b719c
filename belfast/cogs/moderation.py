"""Moderation cog - channel locking, purging, kicks, bans and warnings."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from belfast.constants import (
    COLOR_WARNINGS,
    DELETE_DELAY_NORMAL,
    KICK_WARN_COUNT,
    MAX_PURGE_AMOUNT,
)
from belfast.database import Warn
from belfast.discord_utils import bot_outranks, send_temporary, try_send_dm

if TYPE_CHECKING:
    from belfast.database import JsonDatabase

logger = logging.getLogger('belfast_bot')


def warn_escalation(warn_count: int, max_warns: int) -> Optional[str]:
    """Decide what a new warning leads to: 'ban', 'kick' or None."""
    if warn_count == KICK_WARN_COUNT:
        return "kick"
    if warn_count >= max_warns:
        return "ban"
    return None


def warnings_embed(target: discord.abc.User, warns: list[Warn]) -> discord.Embed:
    if warns:
        value = "\n".join(f"{i}. {warn.reason}" for i, warn in enumerate(warns, start=1))
    else:
        value = "No warnings"
    embed = discord.Embed(color=COLOR_WARNINGS)
    embed.add_field(name=f"{target}'s Warnings", value=value, inline=False)
    return embed


class Moderation(commands.Cog, description="Contains commands for chat moderation"):
    """Chat moderation commands.

    Expects main `bot` to expose:
      - bot.db (JsonDatabase instance)
      - bot.settings (Settings instance)
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @property
    def db(self) -> JsonDatabase:
        return self.bot.db

    async def _refuse_target(self, ctx: commands.Context, target: discord.Member, action: str) -> bool:
        """Reply and return True if `target` can't be acted on."""
        if target.bot:
            await ctx.send(f"{ctx.author.mention} You cannot {action} a bot")
            return True
        if target.id == ctx.author.id:
            await ctx.send(f"{ctx.author.mention} You cannot {action} yourself")
            return True
        if not bot_outranks(ctx.guild, target):
            await ctx.send(f"Can't {action} {target.mention} with higher role than me")
            return True
        return False

    async def _kick(self, ctx: commands.Context, target: discord.Member, reason: str) -> None:
        await try_send_dm(target, f"You have been kicked from {ctx.guild.name}")
        await target.kick(reason=reason)
        logger.info(f"Kicked {target} from {ctx.guild.name}: {reason}")
        await ctx.send(f"Kicked {target.mention} for \"{reason}\"")

    async def _ban(self, ctx: commands.Context, target: discord.Member, reason: str) -> None:
        await try_send_dm(target, f"You have been banned from {ctx.guild.name}")
        await target.ban(reason=reason, delete_message_seconds=0)
        logger.info(f"Banned {target} from {ctx.guild.name}: {reason}")
        await ctx.send(f"Banned {target.mention}")

    @commands.command(name="lock", help="Locks down a text channel from everyone")
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    @commands.bot_has_permissions(manage_roles=True)
    async def lock(self, ctx: commands.Context):
        everyone = ctx.guild.default_role
        overwrite = ctx.channel.overwrites_for(everyone)
        locked = overwrite.send_messages is False
        overwrite.send_messages = None if locked else False
        await ctx.channel.set_permissions(everyone, overwrite=overwrite)
        logger.info(f"{ctx.author} {'unlocked' if locked else 'locked'} #{ctx.channel}")
        await ctx.send("> Channel Has Been Unlocked" if locked else "> Channel Has Been Locked")

    @commands.command(name="purge", help="Deletes messages with a given amount")
    @commands.guild_only()
    @commands.has_permissions(manage_messages=True)
    @commands.bot_has_permissions(manage_messages=True)
    async def purge(self, ctx: commands.Context, amount: int = 1):
        logger.info(f"Purge request of {amount} messages from {ctx.channel} sent by {ctx.author}")

        if amount > MAX_PURGE_AMOUNT:
            await send_temporary(ctx.channel, f":x: You cannot go higher than {MAX_PURGE_AMOUNT}!", delay=DELETE_DELAY_NORMAL)
            return
        if amount < 1:
            await send_temporary(ctx.channel, ":x: Purge at least one message", delay=DELETE_DELAY_NORMAL)
            return

        # +1 to include the command message itself
        await ctx.channel.purge(limit=amount + 1)
        await send_temporary(ctx.channel, f"Purged {amount} messages", delay=DELETE_DELAY_NORMAL)

    @commands.command(name="kick", help="Kicks people who don't behave properly")
    @commands.guild_only()
    @commands.has_permissions(kick_members=True)
    @commands.bot_has_permissions(kick_members=True)
    async def kick(self, ctx: commands.Context, target: discord.Member, *, reason: str = "No reason specified"):
        if await self._refuse_target(ctx, target, "kick"):
            return
        await self._kick(ctx, target, reason)

    @commands.command(name="ban", help="Bans people who don't behave properly")
    @commands.guild_only()
    @commands.has_permissions(ban_members=True)
    @commands.bot_has_permissions(ban_members=True)
    async def ban(self, ctx: commands.Context, target: discord.Member, *, reason: str = "No reason specified"):
        if await self._refuse_target(ctx, target, "ban"):
            return
        await self._ban(ctx, target, reason)

    @commands.command(name="warn", help="Warns people who don't behave properly")
    @commands.guild_only()
    @commands.has_permissions(kick_members=True, ban_members=True)
    async def warn(self, ctx: commands.Context, target: discord.Member, *, reason: str = "No reason specified"):
        logger.info(f"Warning {target}")
        if await self._refuse_target(ctx, target, "warn"):
            return

        user = self.db.get_user_entry(ctx.guild.id, target.id)
        user.warns.append(Warn(reason=reason, warner_id=ctx.author.id))
        self.db.write_data()

        await try_send_dm(target, f"You have been warned on {ctx.guild.name} for {reason}")
        await ctx.send(f"Warned {target.mention} for \"{reason}\"")

        action = warn_escalation(len(user.warns), self.bot.settings.max_warn_amount)
        if action == "ban":
            await self._ban(ctx, target, reason)
        elif action == "kick":
            await self._kick(ctx, target, reason)

    @commands.command(name="warndel", help="Deletes a specific warning from a user")
    @commands.guild_only()
    @commands.has_permissions(kick_members=True)
    async def warndel(self, ctx: commands.Context, target: discord.Member, index: int):
        logger.info(f"Deleting warning number {index} from {target}")

        user = self.db.get_user_entry(ctx.guild.id, target.id)
        if not 1 <= index <= len(user.warns):
            await ctx.send(f"Out of bounds, user has {len(user.warns)} warnings")
            return

        user.warns.pop(index - 1)
        self.db.write_data()
        await ctx.send(f"Deleted warning number {index} from {target.mention}")

    @commands.command(name="warnings", aliases=["warns"], help="Show warnings that a user has")
    @commands.guild_only()
    async def warnings(self, ctx: commands.Context, target: Optional[discord.Member] = None):
        target = target or ctx.author
        logger.info(f"Showing {target}'s warnings")

        user = self.db.get_user_entry(ctx.guild.id, target.id)
        await ctx.send(embed=warnings_embed(target, user.warns))


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Moderation(bot))
