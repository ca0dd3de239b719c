from __future__ import annotations

import asyncio
import json
from datetime import datetime

import pytest

from belfast.database import (
    GLOBAL_SCOPE,
    GiveawayEntry,
    JsonDatabase,
    Warn,
    level_for_xp,
)
from belfast.exceptions import DatabaseError


def _make_db(tmp_path) -> JsonDatabase:
    db = JsonDatabase(tmp_path / "data" / "database.json")
    asyncio.run(db.initialize())
    return db


def test_initialize_creates_missing_file(tmp_path) -> None:
    db = _make_db(tmp_path)

    assert db.path.exists()
    assert json.loads(db.path.read_text(encoding="utf-8")) == {"servers": []}


def test_entries_are_created_on_first_access(tmp_path) -> None:
    db = _make_db(tmp_path)

    user = db.get_user_entry(5, 42)
    assert user.id == 42
    assert user.coins == 100
    assert user.xp == 0
    assert db.get_user_entry(5, 42) is user
    assert db.get_server_entry(5).giveaway_reaction_emote == "🎉"


def test_global_scope_is_separate_from_guilds(tmp_path) -> None:
    db = _make_db(tmp_path)

    db.get_global_user_entry(42).osu_name = "cookiezi"

    assert db.get_user_entry(GLOBAL_SCOPE, 42).osu_name == "cookiezi"
    assert db.get_user_entry(5, 42).osu_name is None


def test_write_and_reload_round_trip(tmp_path) -> None:
    db = _make_db(tmp_path)
    user = db.get_user_entry(5, 42)
    user.xp = 120
    user.warns.append(Warn(reason="spam", warner_id=7))
    db.get_server_entry(5).giveaways.append(GiveawayEntry(
        end=datetime(2024, 5, 2, 12, 0),
        channel_id=10,
        content="Nitro",
        reaction_message_id=99,
        count=2,
    ))
    db.write_data()

    reloaded = JsonDatabase(db.path)
    asyncio.run(reloaded.initialize())

    reloaded_user = reloaded.get_user_entry(5, 42)
    assert reloaded_user.xp == 120
    assert [w.reason for w in reloaded_user.warns] == ["spam"]
    [(server, giveaway)] = reloaded.all_giveaways()
    assert server.id == 5
    assert giveaway.count == 2
    assert giveaway.end == datetime(2024, 5, 2, 12, 0)


def test_initialize_rejects_corrupt_file(tmp_path) -> None:
    path = tmp_path / "database.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DatabaseError):
        asyncio.run(JsonDatabase(path).initialize())


def test_level_curve() -> None:
    assert level_for_xp(0) == 0
    assert level_for_xp(9) == 2
    assert level_for_xp(1000) > level_for_xp(100)
