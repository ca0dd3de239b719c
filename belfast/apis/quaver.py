"""Quaver API integration (users, recent scores and maps)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from belfast.apis.base import get_json, to_float, to_int

logger = logging.getLogger('belfast_bot.apis')

API_URL = "https://api.quavergame.com/v1"
SERVICE = "Quaver"

# Game modes as the API numbers them
MODE_4K = 1
MODE_7K = 2


@dataclass
class KeyStats:
    accuracy: float = 0.0
    performance_rating: float = 0.0
    play_count: int = 0


@dataclass
class KeyInfo:
    key_count: int
    global_ranking: Optional[int]
    country_ranking: Optional[int]
    stats: KeyStats


@dataclass
class User:
    id: int
    username: str
    country: str
    avatar_url: Optional[str]
    four_keys: KeyInfo
    seven_keys: KeyInfo

    @property
    def profile_url(self) -> str:
        return f"https://quavergame.com/user/{self.id}"


@dataclass
class Map:
    id: int
    map_set_id: int
    title: str
    artist: str
    difficulty_name: str
    difficulty_rating: float
    creator: str

    @property
    def url(self) -> str:
        return f"https://quavergame.com/mapset/map/{self.id}"

    @property
    def banner_url(self) -> str:
        return f"https://cdn.quavergame.com/mapsets/{self.map_set_id}.jpg"


@dataclass
class Recent:
    performance_rating: float
    grade: str
    accuracy: float
    mods_string: str
    combo: int
    map: Map


def parse_key_info(data: Optional[dict], key_count: int) -> KeyInfo:
    data = data or {}
    stats = data.get("stats") or {}
    return KeyInfo(
        key_count=key_count,
        global_ranking=to_int(data.get("globalRank")),
        country_ranking=to_int(data.get("countryRank")),
        stats=KeyStats(
            accuracy=to_float(stats.get("overall_accuracy"), 0.0),
            performance_rating=to_float(stats.get("overall_performance_rating"), 0.0),
            play_count=to_int(stats.get("play_count"), 0),
        ),
    )


def parse_user(data: dict) -> User:
    info = data.get("info") or {}
    return User(
        id=to_int(info.get("id"), 0),
        username=info.get("username", ""),
        country=info.get("country") or "",
        avatar_url=info.get("avatar_url"),
        four_keys=parse_key_info(data.get("keys4"), 4),
        seven_keys=parse_key_info(data.get("keys7"), 7),
    )


def parse_map(data: dict) -> Map:
    return Map(
        id=to_int(data.get("id"), 0),
        map_set_id=to_int(data.get("mapset_id"), 0),
        title=data.get("title", ""),
        artist=data.get("artist", ""),
        difficulty_name=data.get("difficulty_name", ""),
        difficulty_rating=to_float(data.get("difficulty_rating"), 0.0),
        creator=data.get("creator_username", ""),
    )


def parse_recent(data: dict) -> Recent:
    return Recent(
        performance_rating=to_float(data.get("performance_rating"), 0.0),
        grade=data.get("grade", "F"),
        accuracy=to_float(data.get("accuracy"), 0.0),
        mods_string=data.get("mods_string") or "None",
        combo=to_int(data.get("max_combo"), 0),
        map=parse_map(data.get("map") or {}),
    )


async def get_user_id_by_name(name: str) -> Optional[int]:
    payload = await get_json(SERVICE, f"{API_URL}/users/search/{quote(name, safe='')}")
    users = payload.get("users") or []
    if not users:
        return None
    exact = next((u for u in users if u.get("username", "").lower() == name.lower()), users[0])
    return to_int(exact.get("id"))


async def get_user(user_id: int) -> Optional[User]:
    payload = await get_json(SERVICE, f"{API_URL}/users/full/{user_id}")
    user = payload.get("user")
    return parse_user(user) if user else None


async def get_user_recent(user_id: int, mode: int = MODE_4K) -> Optional[Recent]:
    params = {"id": user_id, "mode": mode, "limit": 1}
    payload = await get_json(SERVICE, f"{API_URL}/users/scores/recent", params=params)
    scores = payload.get("scores") or []
    return parse_recent(scores[0]) if scores else None


async def get_map(map_id: int) -> Optional[Map]:
    payload = await get_json(SERVICE, f"{API_URL}/maps/{map_id}")
    data = payload.get("map")
    return parse_map(data) if data else None
