from __future__ import annotations

import asyncio
from types import SimpleNamespace

from discord.ext import commands

from belfast import accounts
from belfast.accounts import osu_name, quaver_id, resolve_linked_account
from belfast.command_handling import (
    describe_error,
    error_reply,
    handle_command,
    make_prefix_getter,
    timeout_reply,
)
from belfast.database import JsonDatabase
from belfast.exceptions import ApiError, ConfigurationError, RateLimitError, ValidationError


class DummyChannel:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send(self, content=None):
        self.sent.append(content)


class DummyBot:
    def __init__(self, delay: float = 0) -> None:
        self.user = SimpleNamespace(id=99)
        self.processed = []
        self.delay = delay

    async def process_commands(self, message) -> None:
        await asyncio.sleep(self.delay)
        self.processed.append(message.content)


def _message(content: str, bot: bool = False):
    return SimpleNamespace(content=content, author=SimpleNamespace(bot=bot), channel=DummyChannel())


# --- prefix ---

def test_prefix_getter_is_case_insensitive_and_allows_mentions() -> None:
    get_prefix = make_prefix_getter("b!")
    bot = DummyBot()

    prefixes = get_prefix(bot, _message("B!help"))
    assert "B!" in prefixes
    assert "<@99> " in prefixes

    assert "b!" in get_prefix(bot, _message("hello"))


# --- dispatch ---

def test_handle_command_processes_intentional_commands() -> None:
    bot = DummyBot()
    asyncio.run(handle_command(bot, _message("b!help"), "b!", timeout=1))
    assert bot.processed == ["b!help"]


def test_handle_command_ignores_unintentional_prefix_and_bots() -> None:
    bot = DummyBot()
    asyncio.run(handle_command(bot, _message("b!!!"), "b!", timeout=1))
    asyncio.run(handle_command(bot, _message("b!1"), "b!", timeout=1))
    asyncio.run(handle_command(bot, _message("b!help", bot=True), "b!", timeout=1))
    assert bot.processed == []


def test_handle_command_passes_plain_messages_through() -> None:
    # Mentions and non-command chat still reach the framework
    bot = DummyBot()
    asyncio.run(handle_command(bot, _message("<@99> help"), "b!", timeout=1))
    assert bot.processed == ["<@99> help"]


def test_handle_command_replies_on_timeout() -> None:
    bot = DummyBot(delay=0.2)
    message = _message("b!osu")

    async def run():
        await handle_command(bot, message, "b!", timeout=0.01)
        assert message.channel.sent == [timeout_reply()]
        # The command keeps running after the reply
        await asyncio.sleep(0.3)

    asyncio.run(run())
    assert bot.processed == ["b!osu"]


# --- errors ---

def test_describe_error() -> None:
    assert describe_error(commands.CommandNotFound('Command "x" is not found')) == "Unknown command."
    assert "osu!" in describe_error(commands.CommandInvokeError(ApiError("osu!", "boom", 500)))
    assert describe_error(commands.CommandInvokeError(ConfigurationError("no token"))) == "no token"
    assert describe_error(commands.CommandInvokeError(ValidationError("Winner limit must be at least 1"))) == "Winner limit must be at least 1"
    assert describe_error(commands.CommandInvokeError(KeyError("x"))) == "Something went wrong while running the command"
    assert describe_error(RateLimitError("slow down")) == "slow down"


def test_describe_missing_argument() -> None:
    param = SimpleNamespace(name="target", displayed_name=None)
    assert describe_error(commands.MissingRequiredArgument(param)) == "Missing argument `target`"


def test_error_reply_mentions_help() -> None:
    reply = error_reply("Unknown command.", "b!")
    assert "Sorry For My Misbehaviour Commander" in reply
    assert "Unknown command." in reply
    assert "**b!help**" in reply


# --- linked accounts ---

def _db(tmp_path) -> JsonDatabase:
    db = JsonDatabase(tmp_path / "database.json")
    asyncio.run(db.initialize())
    db.get_global_user_entry(1).osu_name = "invoker"
    db.get_global_user_entry(2).osu_name = "mentioned"
    return db


def _ctx():
    return SimpleNamespace(author=SimpleNamespace(id=1), guild=SimpleNamespace(id=5))


def test_resolve_without_target_uses_invoker(tmp_path) -> None:
    db = _db(tmp_path)
    assert asyncio.run(resolve_linked_account(_ctx(), db, "", osu_name)) == "invoker"
    assert asyncio.run(resolve_linked_account(_ctx(), db, None, quaver_id)) is None


def test_resolve_explicit_name_wins(tmp_path) -> None:
    db = _db(tmp_path)
    assert asyncio.run(resolve_linked_account(_ctx(), db, " cookiezi ", osu_name)) == "cookiezi"


def test_resolve_mention_uses_member_account(tmp_path, monkeypatch) -> None:
    db = _db(tmp_path)

    async def fake_find_member(ctx, target):
        return SimpleNamespace(id=2) if target == "<@2>" else None

    monkeypatch.setattr(accounts, "_find_member", fake_find_member)

    assert asyncio.run(resolve_linked_account(_ctx(), db, "<@2>", osu_name)) == "mentioned"


def test_resolve_converts_names(tmp_path) -> None:
    db = _db(tmp_path)

    async def lookup(name):
        return 42 if name == "Swan" else None

    assert asyncio.run(resolve_linked_account(_ctx(), db, "Swan", quaver_id, lookup)) == 42
    assert asyncio.run(resolve_linked_account(_ctx(), db, "nobody", quaver_id, lookup)) is None
