"""Experience rewards for chatting."""
from __future__ import annotations

import logging
import random
import time
from typing import Optional

from belfast.constants import XP_REWARD_COOLDOWN_SECONDS, XP_REWARD_MAX, XP_REWARD_MIN
from belfast.database import JsonDatabase

logger = logging.getLogger('belfast_bot.rewards')


class MessageRewardService:
    """Grants a small random amount of xp per message, at most once per cooldown.

    Rewards are tracked per (guild, user) so each server has its own levels.
    """

    def __init__(
        self,
        db: JsonDatabase,
        cooldown: float = XP_REWARD_COOLDOWN_SECONDS,
        rng: random.Random = None,
        clock=time.monotonic,
    ):
        self.db = db
        self.cooldown = cooldown
        self._rng = rng or random.Random()
        self._clock = clock
        self._last_reward: dict[tuple[int, int], float] = {}

    def reward(self, guild_id: int, user_id: int) -> Optional[int]:
        """Reward a message.

        Returns:
            The new level if the user leveled up, otherwise None
        """
        key = (guild_id, user_id)
        now = self._clock()
        last = self._last_reward.get(key)
        if last is not None and now - last < self.cooldown:
            return None
        self._prune(now)
        self._last_reward[key] = now

        user = self.db.get_user_entry(guild_id, user_id)
        old_level = user.level
        user.xp += self._rng.randint(XP_REWARD_MIN, XP_REWARD_MAX)
        self.db.write_data()

        if user.level > old_level:
            logger.info(f"User {user_id} reached level {user.level} in guild {guild_id}")
            return user.level
        return None

    def _prune(self, now: float) -> None:
        expired = [k for k, last in self._last_reward.items() if now - last >= self.cooldown]
        for k in expired:
            del self._last_reward[k]
