"""Automatic moderation: invite link and blacklisted word removal."""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

import discord

from belfast.discord_utils import send_temporary

logger = logging.getLogger('belfast_bot.automod')

INVITE_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?(?:discord\.gg|discord(?:app)?\.com/invite)/[A-Za-z0-9-]+",
    re.IGNORECASE,
)


def contains_invite(text: str) -> bool:
    return bool(INVITE_PATTERN.search(text or ""))


def find_blacklisted_word(text: str, words: Iterable[str]) -> Optional[str]:
    """Return the first blacklisted word appearing as a whole word in `text`."""
    lowered = (text or "").lower()
    for word in words:
        if re.search(rf"\b{re.escape(word)}\b", lowered):
            return word
    return None


def _is_exempt(message: discord.Message) -> bool:
    author = message.author
    permissions = getattr(author, "guild_permissions", None)
    return permissions is not None and permissions.manage_messages


async def _remove(message: discord.Message, notice: str) -> bool:
    try:
        await message.delete()
    except discord.Forbidden:
        logger.warning(f"Missing permission to delete messages in {message.channel}")
        return False
    except discord.NotFound:
        return False
    await send_temporary(message.channel, notice)
    return True


class InviteLinkDetectorService:
    """Deletes Discord invite links posted by members without Manage Messages."""

    async def check(self, message: discord.Message) -> bool:
        if message.guild is None or _is_exempt(message) or not contains_invite(message.content):
            return False
        logger.info(f"Removing invite link from {message.author} in {message.guild.name}")
        return await _remove(message, f"{message.author.mention} Invite links are not allowed here")


class WordBlacklistService:
    """Deletes messages containing blacklisted words."""

    def __init__(self, words: Iterable[str]):
        self.words = {w.lower() for w in words}

    async def check(self, message: discord.Message) -> bool:
        if message.guild is None or not self.words or _is_exempt(message):
            return False
        word = find_blacklisted_word(message.content, self.words)
        if word is None:
            return False
        logger.info(f"Removing message from {message.author} containing blacklisted word")
        return await _remove(message, f"{message.author.mention} Watch your language, Commander")
