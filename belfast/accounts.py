"""Resolution of linked external accounts (osu!, Anilist, Quaver).

Commands accept an optional target. An explicit name is used as-is, a
member mention resolves to that member's linked account, and no target at
all resolves to the invoker's linked account.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

import discord
from discord.ext import commands

from belfast.database import JsonDatabase, UserEntry

logger = logging.getLogger('belfast_bot')

T = TypeVar('T')

Accessor = Callable[[UserEntry], Optional[T]]


def osu_name(entry: UserEntry) -> Optional[str]:
    return entry.osu_name or None


def anilist_name(entry: UserEntry) -> Optional[str]:
    return entry.anilist_name or None


def quaver_id(entry: UserEntry) -> Optional[int]:
    return entry.quaver_id


async def _find_member(ctx: commands.Context, target: str) -> Optional[discord.Member]:
    if ctx.guild is None:
        return None
    try:
        return await commands.MemberConverter().convert(ctx, target)
    except commands.BadArgument:
        return None


async def resolve_linked_account(
    ctx: commands.Context,
    db: JsonDatabase,
    target: Optional[str],
    accessor: Accessor,
    from_name: Optional[Callable[[str], Awaitable[Optional[T]]]] = None,
) -> Optional[T]:
    """Resolve `target` to an account value.

    Args:
        ctx: Command context (the invoker is the fallback)
        db: Database holding linked accounts
        target: Name, mention, or None
        accessor: Picks the linked value out of a user entry
        from_name: Converts an explicit name to the value (e.g. Quaver name -> id)

    Returns:
        The account value, or None if nothing is linked / found
    """
    target = (target or "").strip()
    if not target:
        return accessor(db.get_global_user_entry(ctx.author.id))

    # Only explicit mentions resolve to members
    if target.startswith("<@"):
        member = await _find_member(ctx, target)
        if member is not None:
            return accessor(db.get_global_user_entry(member.id))

    if from_name is not None:
        return await from_name(target)
    return target
