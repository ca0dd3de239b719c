"""osu! API v1 integration.

Provides user profiles, recent and best plays, and beatmap lookups. Every
endpoint takes the API key issued at https://osu.ppy.sh/p/api.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from belfast.apis.base import get_json, to_float, to_int

logger = logging.getLogger('belfast_bot.apis')

API_URL = "https://osu.ppy.sh/api"
SERVICE = "osu!"

MODE_COUNT = 4

MODE_INDEX = {"std": 0, "taiko": 1, "ctb": 2, "mania": 3}
MODE_NAMES = {0: "standard", 1: "taiko", 2: "ctb", 3: "mania"}
MODE_LINK_SUFFIX = {0: "osu", 1: "taiko", 2: "fruits", 3: "mania"}


def mode_from_name(name: Optional[str], default: int = -1) -> int:
    return MODE_INDEX.get((name or "").lower(), default)


class Mods(enum.IntFlag):
    NONE = 0
    NO_FAIL = 1
    EASY = 2
    TOUCH_DEVICE = 4
    HIDDEN = 8
    HARD_ROCK = 16
    SUDDEN_DEATH = 32
    DOUBLE_TIME = 64
    RELAX = 128
    HALF_TIME = 256
    NIGHTCORE = 512
    FLASHLIGHT = 1024
    AUTOPLAY = 2048
    SPUN_OUT = 4096
    AUTOPILOT = 8192
    PERFECT = 16384
    KEY4 = 32768
    KEY5 = 65536
    KEY6 = 131072
    KEY7 = 262144
    KEY8 = 524288
    FADE_IN = 1048576
    RANDOM = 2097152
    KEY9 = 16777216
    KEY1 = 67108864
    KEY3 = 134217728
    KEY2 = 268435456
    SCORE_V2 = 536870912
    MIRROR = 1073741824

    def to_short_string(self) -> str:
        """HIDDEN|DOUBLE_TIME -> 'HDDT'. NC hides DT and PF hides SD."""
        parts = []
        for flag, abbreviation in _MOD_ABBREVIATIONS:
            if not self & flag:
                continue
            if flag is Mods.DOUBLE_TIME and self & Mods.NIGHTCORE:
                continue
            if flag is Mods.SUDDEN_DEATH and self & Mods.PERFECT:
                continue
            parts.append(abbreviation)
        return "".join(parts)


_MOD_ABBREVIATIONS = [
    (Mods.NO_FAIL, "NF"),
    (Mods.EASY, "EZ"),
    (Mods.TOUCH_DEVICE, "TD"),
    (Mods.HIDDEN, "HD"),
    (Mods.FADE_IN, "FI"),
    (Mods.HARD_ROCK, "HR"),
    (Mods.SUDDEN_DEATH, "SD"),
    (Mods.PERFECT, "PF"),
    (Mods.DOUBLE_TIME, "DT"),
    (Mods.NIGHTCORE, "NC"),
    (Mods.HALF_TIME, "HT"),
    (Mods.FLASHLIGHT, "FL"),
    (Mods.RELAX, "RX"),
    (Mods.AUTOPILOT, "AP"),
    (Mods.SPUN_OUT, "SO"),
    (Mods.AUTOPLAY, "AT"),
    (Mods.RANDOM, "RD"),
    (Mods.MIRROR, "MR"),
    (Mods.KEY1, "1K"),
    (Mods.KEY2, "2K"),
    (Mods.KEY3, "3K"),
    (Mods.KEY4, "4K"),
    (Mods.KEY5, "5K"),
    (Mods.KEY6, "6K"),
    (Mods.KEY7, "7K"),
    (Mods.KEY8, "8K"),
    (Mods.KEY9, "9K"),
    (Mods.SCORE_V2, "V2"),
]


@dataclass
class UserProfile:
    user_id: int
    username: str
    mode: int
    country: str
    accuracy: float
    pp: float
    play_count: int
    level: float
    global_ranking: int
    country_ranking: int


@dataclass
class Beatmap:
    name: str
    id: int
    set_id: int
    star_rating: float
    bpm: float
    length: int  # seconds
    creator_name: str
    creator_id: int


@dataclass
class HitCounts:
    count300: int = 0
    count100: int = 0
    count50: int = 0
    miss: int = 0
    katu: int = 0
    geki: int = 0

    def accuracy(self, mode: int) -> float:
        """Accuracy between 0 and 1 using the per-mode osu! formula."""
        if mode == 1:
            total = self.count300 + self.count100 + self.miss
            hit = self.count300 + 0.5 * self.count100
            return hit / total if total else 0.0
        if mode == 2:
            total = self.count300 + self.count100 + self.count50 + self.miss + self.katu
            hit = self.count300 + self.count100 + self.count50
            return hit / total if total else 0.0
        if mode == 3:
            total = self.count300 + self.geki + self.katu + self.count100 + self.count50 + self.miss
            hit = 300 * (self.count300 + self.geki) + 200 * self.katu + 100 * self.count100 + 50 * self.count50
            return hit / (300 * total) if total else 0.0
        total = self.count300 + self.count100 + self.count50 + self.miss
        hit = 300 * self.count300 + 100 * self.count100 + 50 * self.count50
        return hit / (300 * total) if total else 0.0


@dataclass
class PlayResult:
    beatmap_id: int
    mode: int
    rank: str
    score: int
    combo: int
    mods: Mods
    hits: HitCounts
    pp: Optional[float] = None
    beatmap: Optional[Beatmap] = None
    player: Optional[UserProfile] = None

    @property
    def accuracy(self) -> float:
        return self.hits.accuracy(self.mode)


def parse_user(entry: dict, mode: int) -> UserProfile:
    return UserProfile(
        user_id=to_int(entry.get("user_id"), 0),
        username=entry.get("username", ""),
        mode=mode,
        country=entry.get("country") or "",
        accuracy=to_float(entry.get("accuracy"), 0.0),
        pp=to_float(entry.get("pp_raw"), 0.0),
        play_count=to_int(entry.get("playcount"), 0),
        level=to_float(entry.get("level"), 0.0),
        global_ranking=to_int(entry.get("pp_rank"), 0),
        country_ranking=to_int(entry.get("pp_country_rank"), 0),
    )


def parse_beatmap(entry: dict) -> Beatmap:
    title = entry.get("title", "")
    artist = entry.get("artist")
    version = entry.get("version")
    name = f"{artist} - {title}" if artist else title
    if version:
        name += f" [{version}]"
    return Beatmap(
        name=name,
        id=to_int(entry.get("beatmap_id"), 0),
        set_id=to_int(entry.get("beatmapset_id"), 0),
        star_rating=to_float(entry.get("difficultyrating"), 0.0),
        bpm=to_float(entry.get("bpm"), 0.0),
        length=to_int(entry.get("total_length"), 0),
        creator_name=entry.get("creator", ""),
        creator_id=to_int(entry.get("creator_id"), 0),
    )


def parse_play(entry: dict, mode: int) -> PlayResult:
    return PlayResult(
        beatmap_id=to_int(entry.get("beatmap_id"), 0),
        mode=mode,
        rank=entry.get("rank", "F"),
        score=to_int(entry.get("score"), 0),
        combo=to_int(entry.get("maxcombo"), 0),
        mods=Mods(to_int(entry.get("enabled_mods"), 0)),
        hits=HitCounts(
            count300=to_int(entry.get("count300"), 0),
            count100=to_int(entry.get("count100"), 0),
            count50=to_int(entry.get("count50"), 0),
            miss=to_int(entry.get("countmiss"), 0),
            katu=to_int(entry.get("countkatu"), 0),
            geki=to_int(entry.get("countgeki"), 0),
        ),
        pp=to_float(entry.get("pp")),
    )


async def get_user(token: str, username: str, mode: int) -> Optional[UserProfile]:
    payload = await get_json(SERVICE, f"{API_URL}/get_user", params={"k": token, "u": username, "m": mode})
    if not payload:
        return None
    return parse_user(payload[0], mode)


async def get_beatmap(token: str, beatmap_id: int, mode: int = 0) -> Optional[Beatmap]:
    params = {"k": token, "b": beatmap_id, "m": mode, "a": 1}
    payload = await get_json(SERVICE, f"{API_URL}/get_beatmaps", params=params)
    if not payload:
        return None
    return parse_beatmap(payload[0])


async def _get_plays(endpoint: str, token: str, username: str, mode: int, limit: int) -> list[PlayResult]:
    params = {"k": token, "u": username, "m": mode, "limit": limit}
    payload = await get_json(SERVICE, f"{API_URL}/{endpoint}", params=params)
    plays = [parse_play(entry, mode) for entry in payload or []]
    if not plays:
        return []

    player, beatmaps = await asyncio.gather(
        get_user(token, username, mode),
        asyncio.gather(*(get_beatmap(token, play.beatmap_id, mode) for play in plays)),
    )
    for play, beatmap in zip(plays, beatmaps):
        play.player = player
        play.beatmap = beatmap
    return plays


async def get_user_recent(token: str, username: str, mode: int, limit: int = 10) -> list[PlayResult]:
    return await _get_plays("get_user_recent", token, username, mode, limit)


async def get_user_best(token: str, username: str, mode: int, limit: int = 10) -> list[PlayResult]:
    return await _get_plays("get_user_best", token, username, mode, limit)
