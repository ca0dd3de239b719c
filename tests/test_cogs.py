from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from types import SimpleNamespace

from belfast.apis import jisho, osu, quaver
from belfast.apis.models import AnimeResult, ApiType
from belfast.cogs.events import format_welcome
from belfast.cogs.info import command_help_embed
from belfast.cogs.moderation import Moderation, warn_escalation, warnings_embed
from belfast.cogs.otaku import anime_embed, is_discord_cdn_link, jisho_embed
from belfast.cogs.osu import play_embed
from belfast.cogs.profile import claim_daily
from belfast.cogs.quaver import recent_embed
from belfast.database import JsonDatabase, UserEntry, Warn

NOW = datetime(2024, 5, 1, 12, 0)


class DummyMember:
    def __init__(self, uid: int, top_role: int = 1, bot: bool = False) -> None:
        self.id = uid
        self.bot = bot
        self.top_role = top_role
        self.mention = f"<@{uid}>"
        self.dms: list[str] = []
        self.kicked = False
        self.banned = False

    def __str__(self) -> str:
        return f"member{self.id}"

    async def send(self, content: str) -> None:
        self.dms.append(content)

    async def kick(self, reason=None) -> None:
        self.kicked = True

    async def ban(self, reason=None, delete_message_seconds=0) -> None:
        self.banned = True


class DummyContext:
    def __init__(self, author: DummyMember, bot_top_role: int = 10) -> None:
        self.author = author
        self.guild = SimpleNamespace(id=5, name="Azur Lane", me=SimpleNamespace(top_role=bot_top_role))
        self.sent: list[str] = []

    async def send(self, content=None, embed=None) -> None:
        self.sent.append(content if content is not None else embed)


def _moderation(tmp_path, max_warns: int = 3):
    db = JsonDatabase(tmp_path / "database.json")
    asyncio.run(db.initialize())
    bot = SimpleNamespace(db=db, settings=SimpleNamespace(max_warn_amount=max_warns))
    return Moderation(bot), db


# --- moderation ---

def test_warn_escalation() -> None:
    assert warn_escalation(1, 3) is None
    assert warn_escalation(2, 3) == "kick"
    assert warn_escalation(3, 3) == "ban"
    assert warn_escalation(2, 2) == "kick"
    assert warn_escalation(3, 2) == "ban"
    assert warn_escalation(1, 1) == "ban"


def test_warn_stores_and_escalates(tmp_path) -> None:
    cog, db = _moderation(tmp_path)
    ctx = DummyContext(DummyMember(1))
    target = DummyMember(2)

    for reason in ("spam", "more spam", "even more spam"):
        asyncio.run(Moderation.warn.callback(cog, ctx, target, reason=reason))

    assert [w.reason for w in db.get_user_entry(5, 2).warns] == ["spam", "more spam", "even more spam"]
    assert target.kicked
    assert target.banned
    assert len(target.dms) >= 3


def test_warn_refuses_bots_self_and_higher_roles(tmp_path) -> None:
    cog, db = _moderation(tmp_path)
    author = DummyMember(1)

    asyncio.run(Moderation.warn.callback(cog, DummyContext(author), DummyMember(3, bot=True), reason="x"))
    asyncio.run(Moderation.warn.callback(cog, DummyContext(author), author, reason="x"))
    asyncio.run(Moderation.warn.callback(cog, DummyContext(author, bot_top_role=1), DummyMember(4, top_role=5), reason="x"))

    assert db.get_user_entry(5, 3).warns == []
    assert db.get_user_entry(5, 1).warns == []
    assert db.get_user_entry(5, 4).warns == []


def test_warndel_bounds(tmp_path) -> None:
    cog, db = _moderation(tmp_path)
    ctx = DummyContext(DummyMember(1))
    target = DummyMember(2)
    db.get_user_entry(5, 2).warns.extend([Warn(reason="a", warner_id=1), Warn(reason="b", warner_id=1)])

    asyncio.run(Moderation.warndel.callback(cog, ctx, target, 3))
    assert ctx.sent[-1] == "Out of bounds, user has 2 warnings"

    asyncio.run(Moderation.warndel.callback(cog, ctx, target, 1))
    assert [w.reason for w in db.get_user_entry(5, 2).warns] == ["b"]


def test_warnings_embed() -> None:
    embed = warnings_embed("member2", [Warn(reason="spam", warner_id=1), Warn(reason="rude", warner_id=1)])
    assert embed.fields[0].value == "1. spam\n2. rude"
    assert warnings_embed("member2", []).fields[0].value == "No warnings"


# --- profile ---

def test_claim_daily_grants_once_per_day() -> None:
    entry = UserEntry(id=1)

    assert claim_daily(entry, NOW) is None
    assert entry.coins == 200

    remaining = claim_daily(entry, NOW + timedelta(hours=20))
    assert remaining == timedelta(hours=4)
    assert entry.coins == 200

    assert claim_daily(entry, NOW + timedelta(days=1)) is None
    assert entry.coins == 300


# --- events ---

def test_format_welcome() -> None:
    member = SimpleNamespace(mention="<@1>", guild=SimpleNamespace(name="Azur Lane"))
    assert format_welcome("Welcome {0} to {1}!", member) == "Welcome <@1> to Azur Lane!"


# --- embeds ---

def test_is_discord_cdn_link() -> None:
    assert is_discord_cdn_link("https://cdn.discordapp.com/attachments/1/2/a.png")
    assert is_discord_cdn_link("https://media.discordapp.net/attachments/1/2/a.png")
    assert not is_discord_cdn_link("https://i.imgur.com/a.png")


def test_anime_embed_fills_missing_values() -> None:
    embed = anime_embed(AnimeResult(id=1, title="Azur Lane", api_type=ApiType.ANILIST), "page 1 out of 1")

    details = embed.fields[0].value
    assert "Episodes: **Unknown" in details
    assert "Score: **NaN**" in details
    assert "No trailer" in details
    assert embed.footer.text == "page 1 out of 1"
    assert embed.author.name == "Azur Lane"


def test_jisho_embed_lists_readings_and_senses() -> None:
    result = jisho.SearchResult(
        word="猫",
        japanese=[("猫", "ねこ"), (None, "ネコ")],
        english=[jisho.EnglishDefinition(definitions=["cat"], info=["usu. kana"])],
    )
    embed = jisho_embed(result)

    assert embed.fields[0].value == "► 猫 (ねこ)\n► ネコ"
    assert embed.fields[1].value == "1. cat *(usu. kana)*"


def test_play_embed_shows_mods_and_accuracy() -> None:
    play = osu.PlayResult(
        beatmap_id=1, mode=0, rank="S", score=1000, combo=50,
        mods=osu.Mods.HIDDEN | osu.Mods.HARD_ROCK,
        hits=osu.HitCounts(count300=90, count100=10),
        pp=123.456,
        beatmap=osu.Beatmap(name="map", id=1, set_id=2, star_rating=5.5, bpm=180, length=95,
                            creator_name="mapper", creator_id=3),
        player=osu.UserProfile(user_id=7, username="player", mode=0, country="JP", accuracy=99.0,
                               pp=5000, play_count=10, level=100, global_ranking=1, country_ranking=1),
    )
    embed = play_embed(play, "page 1 out of 1")
    details = embed.fields[0].value

    assert "Mods: **HDHR**" in details
    assert "Accuracy: **93.33%**" in details
    assert "PP: **123.46**" in details
    assert "Length **1:35**" in details
    assert embed.author.name == "player's Recent osu!standard Play"


def test_quaver_recent_embed() -> None:
    user = quaver.User(id=3, username="Swan", country="US", avatar_url=None,
                       four_keys=quaver.parse_key_info(None, 4), seven_keys=quaver.parse_key_info(None, 7))
    recent = quaver.Recent(performance_rating=30.2, grade="A", accuracy=95.0, mods_string="None", combo=10,
                           map=quaver.Map(id=9, map_set_id=4, title="Song", artist="Band",
                                          difficulty_name="Hard", difficulty_rating=20.1, creator="mapper"))
    embed = recent_embed(user, recent, 7)

    assert embed.author.name == "Swan's Recent 7K Play"
    assert "[Band - Song](https://quavergame.com/mapset/map/9)" in embed.fields[0].value


# --- help ---

def test_command_help_embed_lists_params() -> None:
    embed = command_help_embed(Moderation.warndel)

    assert embed.title == "warndel - Deletes a specific warning from a user"
    assert [(f.name, f.value) for f in embed.fields] == [("[target]", "Required"), ("[index]", "Required")]


def test_command_help_embed_shows_aliases_and_defaults() -> None:
    embed = command_help_embed(Moderation.warnings)

    assert embed.title.startswith("warnings (warns) - ")
    assert embed.fields[0].name == "(target)"
