from __future__ import annotations

import asyncio
import random
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from belfast.cogs.giveaway import Giveaway
from belfast.database import GiveawayEntry, JsonDatabase
from belfast.exceptions import ValidationError
from belfast.giveaways import GiveawayService, is_due, pick_winners

NOW = datetime(2024, 5, 1, 12, 0)


class DummyReaction:
    def __init__(self, emoji: str, users) -> None:
        self.emoji = emoji
        self._users = users

    def users(self):
        async def gen():
            for user in self._users:
                yield user
        return gen()


class DummyUser:
    def __init__(self, uid: int, bot: bool = False) -> None:
        self.id = uid
        self.bot = bot
        self.mention = f"<@{uid}>"


class DummyChannel:
    def __init__(self, message=None) -> None:
        self.message = message
        self.sent = []

    async def fetch_message(self, message_id: int):
        return self.message

    async def send(self, *, embed=None, reference=None):
        self.sent.append(embed)


def _user(uid: int, bot: bool = False) -> DummyUser:
    return DummyUser(uid, bot)


def _make(tmp_path, message_reactions):
    db = JsonDatabase(tmp_path / "database.json")
    asyncio.run(db.initialize())
    channel = DummyChannel()
    channel.message = SimpleNamespace(id=99, reactions=message_reactions, channel=channel)
    bot = SimpleNamespace(get_channel=lambda cid: channel if cid == 10 else None)
    return GiveawayService(bot, db), db, channel


def _entry(end: datetime, count: int = 1, emote=None) -> GiveawayEntry:
    return GiveawayEntry(end=end, channel_id=10, content="Nitro", reaction_message_id=99, count=count, emote=emote)


def test_pick_winners_never_exceeds_count_or_entrants() -> None:
    rng = random.Random(1)
    entrants = [1, 2, 3, 3]

    winners = pick_winners(entrants, 2, rng)
    assert len(winners) == 2
    assert len(set(winners)) == 2
    assert sorted(pick_winners(entrants, 10, rng)) == [1, 2, 3]
    assert pick_winners([], 3, rng) == []


def test_is_due() -> None:
    assert is_due(_entry(NOW - timedelta(seconds=1)), NOW)
    assert is_due(_entry(NOW), NOW)
    assert not is_due(_entry(NOW + timedelta(minutes=1)), NOW)


def test_add_giveaway_persists(tmp_path) -> None:
    service, db, _ = _make(tmp_path, [])
    service.add_giveaway(_entry(NOW), 5)

    reloaded = JsonDatabase(db.path)
    asyncio.run(reloaded.initialize())
    assert [g.content for _, g in reloaded.all_giveaways()] == ["Nitro"]


def test_check_giveaways_finishes_only_due_entries(tmp_path) -> None:
    entrants = [_user(1), _user(2), _user(3, bot=True)]
    service, db, channel = _make(tmp_path, [DummyReaction("🎉", entrants), DummyReaction("👍", [_user(4)])])
    past = datetime.now() - timedelta(minutes=1)
    future = datetime.now() + timedelta(days=1)
    service.add_giveaway(_entry(past, count=5), 5)
    service.add_giveaway(_entry(future), 5)

    finished = asyncio.run(service.check_giveaways())

    assert finished == 1
    assert [g.end for _, g in db.all_giveaways()] == [future]
    [embed] = channel.sent
    assert "<@1>" in embed.description and "<@2>" in embed.description
    assert "<@3>" not in embed.description
    assert "<@4>" not in embed.description


def test_finish_uses_giveaway_emote(tmp_path) -> None:
    service, db, channel = _make(tmp_path, [DummyReaction("🎉", [_user(1)]), DummyReaction("🎁", [_user(2)])])
    server = db.get_server_entry(5)
    giveaway = _entry(NOW, emote="🎁")
    server.giveaways.append(giveaway)

    winners = asyncio.run(service.finish_giveaway(server, giveaway))

    assert [w.id for w in winners] == [2]
    assert server.giveaways == []


def test_finish_without_entrants_announces_nobody(tmp_path) -> None:
    service, db, channel = _make(tmp_path, [])
    server = db.get_server_entry(5)
    giveaway = _entry(NOW)
    server.giveaways.append(giveaway)

    assert asyncio.run(service.finish_giveaway(server, giveaway)) == []
    assert "Nobody entered" in channel.sent[0].description


def test_finish_drops_giveaway_when_channel_is_gone(tmp_path) -> None:
    service, db, channel = _make(tmp_path, [])
    server = db.get_server_entry(5)
    giveaway = GiveawayEntry(end=NOW, channel_id=404, content="Nitro", reaction_message_id=99)
    server.giveaways.append(giveaway)

    asyncio.run(service.finish_giveaway(server, giveaway))

    assert server.giveaways == []
    assert channel.sent == []


def test_gcreate_rejects_bad_input(tmp_path) -> None:
    db = JsonDatabase(tmp_path / "database.json")
    asyncio.run(db.initialize())
    added = []
    bot = SimpleNamespace(db=db, giveaways=SimpleNamespace(add_giveaway=lambda *a: added.append(a)))
    cog = Giveaway(bot)
    sent = []

    async def send(*args, **kwargs):
        sent.append((args, kwargs))

    ctx = SimpleNamespace(guild=SimpleNamespace(id=5), channel=SimpleNamespace(id=10), send=send)

    with pytest.raises(ValidationError, match="Couldn't parse time"):
        asyncio.run(Giveaway.create.callback(cog, ctx, "soon", "Nitro", 1))
    with pytest.raises(ValidationError, match="at least 1"):
        asyncio.run(Giveaway.create.callback(cog, ctx, "2 days", "Nitro", 0))

    assert sent == []
    assert added == []
