"""Command dispatch: filtering, timeouts, and error replies.

Commands are routed by discord.ext.commands; this module decides which
messages reach the framework and how failures are reported back to users.
"""
from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands

from belfast.constants import DEFAULT_COMMAND_TIMEOUT, EMOTE_POUT, EMOTE_SHOCK
from belfast.exceptions import ApiError, BelfastError
from belfast.utils import is_intentional_command

logger = logging.getLogger('belfast_bot')

# Commands still running after the timeout reply
_pending: set[asyncio.Task] = set()


def make_prefix_getter(prefix: str):
    """Build a command_prefix callable matching `prefix` case-insensitively or a mention."""
    def get_prefix(bot: commands.Bot, message: discord.Message):
        content = message.content or ""
        matched = content[:len(prefix)] if content[:len(prefix)].lower() == prefix.lower() else prefix
        return commands.when_mentioned_or(matched)(bot, message)
    return get_prefix


def timeout_reply() -> str:
    return f"{EMOTE_POUT} Sorry For My Misbehaviour Commander！\nCommand timed out"


def error_reply(reason: str, prefix: str) -> str:
    return (
        f"{EMOTE_SHOCK} Sorry For My Misbehaviour Commander！\n"
        f"{reason}\n"
        f"try **{prefix}help** for lists of commands"
    )


def describe_error(error: commands.CommandError) -> str:
    """Turn a command error into a user-facing reason."""
    if isinstance(error, commands.CommandNotFound):
        return "Unknown command."
    if isinstance(error, commands.MissingRequiredArgument):
        return f"Missing argument `{error.param.name}`"
    if isinstance(error, commands.CommandInvokeError):
        original = error.original
        if isinstance(original, ApiError):
            return f"Couldn't get a response from {original.service}, please try again later"
        if isinstance(original, BelfastError):
            return str(original)
        return "Something went wrong while running the command"
    return str(error) or type(error).__name__


async def handle_command(
    bot: commands.Bot,
    message: discord.Message,
    prefix: str,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> None:
    """Route a message to the command framework.

    Messages that share the prefix but contain no letters after it are
    ignored. If a command is still running after `timeout` seconds the user
    is told it timed out; the command itself is left to finish.
    """
    if message.author.bot:
        return

    content = message.content or ""
    if content.lower().startswith(prefix.lower()) and not is_intentional_command(content, prefix):
        logger.info("Probably unintentional command, ignoring")
        return

    task = asyncio.create_task(bot.process_commands(message))
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        task.result()
        return

    _pending.add(task)
    task.add_done_callback(_pending.discard)
    logger.warning(f"Command timed out: {content!r}")
    await message.channel.send(timeout_reply())
