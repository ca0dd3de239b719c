"""Discord message utilities.

Helper functions to reduce duplication when replying from cogs and services.
"""
from __future__ import annotations

import logging
from typing import Optional

import discord

from belfast.constants import DELETE_DELAY_NORMAL

logger = logging.getLogger('belfast_bot')


async def send_temporary(
    channel: discord.abc.Messageable,
    content: str = None,
    embed: discord.Embed = None,
    delay: float = DELETE_DELAY_NORMAL
) -> discord.Message:
    """Send a message that deletes itself after `delay` seconds."""
    msg = await channel.send(content=content, embed=embed)
    await msg.delete(delay=delay)
    return msg


async def safe_send_message(
    channel: discord.abc.Messageable,
    content: str = None,
    embed: discord.Embed = None,
) -> Optional[discord.Message]:
    """Safely send a message to a channel, handling errors gracefully."""
    name = getattr(channel, "name", channel)
    try:
        return await channel.send(content=content, embed=embed)
    except discord.Forbidden:
        logger.warning(f"Missing permission to send message in {name}")
        return None
    except discord.HTTPException as e:
        logger.error(f"HTTP error sending message to {name}: {e}")
        return None


async def try_send_dm(member: discord.abc.User, content: str) -> bool:
    """DM a user; returns False if their DMs are closed."""
    try:
        await member.send(content)
        return True
    except discord.Forbidden:
        logger.info(f"Could not DM {member}: DMs are closed")
        return False
    except discord.HTTPException as e:
        logger.warning(f"Failed to DM {member}: {e}")
        return False


def bot_outranks(guild: discord.Guild, target: discord.Member) -> bool:
    """True if the bot's top role is strictly above the target's."""
    bot_member = guild.me
    if bot_member is None:
        return False
    return bot_member.top_role > target.top_role
