"""Command checks shared by the cogs."""
from __future__ import annotations

import logging

from discord.ext import commands

from belfast.constants import RATE_LIMIT_PER_MINUTE
from belfast.exceptions import RateLimitError
from belfast.utils import RateLimiter

logger = logging.getLogger('belfast_bot')

# One limiter per module key, shared by every command of that module
_limiters: dict[str, RateLimiter] = {}


def get_limiter(key: str, per_minute: int = RATE_LIMIT_PER_MINUTE) -> RateLimiter:
    return _limiters.setdefault(key, RateLimiter(per_minute))


def rate_limit(key: str, per_minute: int = RATE_LIMIT_PER_MINUTE):
    """Allow at most `per_minute` invocations per minute across all commands sharing `key`."""
    limiter = get_limiter(key, per_minute)

    async def predicate(ctx: commands.Context) -> bool:
        if not limiter.hit(key):
            logger.info(f"Rate limit reached for {key} by {ctx.author}")
            raise RateLimitError(f"Rate limit reached for {key} commands, please try again in a minute")
        return True

    return commands.check(predicate)
