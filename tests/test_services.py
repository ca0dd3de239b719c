from __future__ import annotations

import asyncio
import random
from types import SimpleNamespace

from belfast.automod import (
    InviteLinkDetectorService,
    WordBlacklistService,
    contains_invite,
    find_blacklisted_word,
)
from belfast.database import JsonDatabase
from belfast.rewards import MessageRewardService


class DummyNotice:
    async def delete(self, delay=None) -> None:
        self.delay = delay


class DummyChannel:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send(self, content=None, embed=None):
        self.sent.append(content)
        return DummyNotice()


class DummyMessage:
    def __init__(self, content: str, manage_messages: bool = False, guild=True) -> None:
        self.content = content
        self.author = SimpleNamespace(
            mention="<@1>",
            guild_permissions=SimpleNamespace(manage_messages=manage_messages),
        )
        self.guild = SimpleNamespace(name="Azur Lane") if guild else None
        self.channel = DummyChannel()
        self.deleted = False

    async def delete(self) -> None:
        self.deleted = True


# --- automod ---

def test_contains_invite() -> None:
    assert contains_invite("join discord.gg/abc123 now")
    assert contains_invite("https://discord.com/invite/AbC-1")
    assert contains_invite("https://discordapp.com/invite/xyz")
    assert not contains_invite("https://discord.com/channels/1/2")
    assert not contains_invite(None)


def test_find_blacklisted_word_matches_whole_words() -> None:
    assert find_blacklisted_word("That is BAD.", {"bad"}) == "bad"
    assert find_blacklisted_word("badge", {"bad"}) is None


def test_invite_detector_deletes_and_warns() -> None:
    message = DummyMessage("discord.gg/abc")

    assert asyncio.run(InviteLinkDetectorService().check(message)) is True
    assert message.deleted
    assert "Invite links are not allowed" in message.channel.sent[0]


def test_invite_detector_exempts_moderators_and_dms() -> None:
    detector = InviteLinkDetectorService()
    moderator = DummyMessage("discord.gg/abc", manage_messages=True)
    direct = DummyMessage("discord.gg/abc", guild=False)

    assert asyncio.run(detector.check(moderator)) is False
    assert asyncio.run(detector.check(direct)) is False
    assert not moderator.deleted and not direct.deleted


def test_word_blacklist() -> None:
    service = WordBlacklistService(["Heck"])
    clean = DummyMessage("hello there")
    dirty = DummyMessage("what the heck")

    assert asyncio.run(service.check(clean)) is False
    assert asyncio.run(service.check(dirty)) is True
    assert dirty.deleted


def test_empty_word_blacklist_does_nothing() -> None:
    message = DummyMessage("anything")
    assert asyncio.run(WordBlacklistService([]).check(message)) is False


# --- rewards ---

def _rewards(tmp_path, now):
    db = JsonDatabase(tmp_path / "database.json")
    asyncio.run(db.initialize())
    return MessageRewardService(db, cooldown=60, rng=random.Random(0), clock=lambda: now[0]), db


def test_reward_respects_cooldown(tmp_path) -> None:
    now = [0.0]
    service, db = _rewards(tmp_path, now)

    service.reward(5, 1)
    first = db.get_user_entry(5, 1).xp
    assert 1 <= first <= 5

    now[0] = 30.0
    service.reward(5, 1)
    assert db.get_user_entry(5, 1).xp == first

    now[0] = 60.0
    service.reward(5, 1)
    assert db.get_user_entry(5, 1).xp > first


def test_reward_cooldown_is_per_guild(tmp_path) -> None:
    now = [0.0]
    service, db = _rewards(tmp_path, now)

    service.reward(5, 1)
    service.reward(6, 1)

    assert db.get_user_entry(5, 1).xp > 0
    assert db.get_user_entry(6, 1).xp > 0


def test_reward_forgets_expired_cooldowns(tmp_path) -> None:
    now = [0.0]
    service, _ = _rewards(tmp_path, now)

    service.reward(5, 1)
    service.reward(5, 2)
    now[0] = 60.0
    service.reward(5, 3)

    assert list(service._last_reward) == [(5, 3)]


def test_reward_reports_level_up(tmp_path) -> None:
    now = [0.0]
    service, db = _rewards(tmp_path, now)
    # One xp short of level 2
    db.get_user_entry(5, 1).xp = 8

    assert service.reward(5, 1) == 2
    now[0] = 60.0
    # Level 2 lasts until 18 xp
    db.get_user_entry(5, 1).xp = 9
    assert service.reward(5, 1) is None
