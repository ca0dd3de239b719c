"""MyAnimeList lookups through the Jikan REST API."""
from __future__ import annotations

import logging

from belfast.apis.base import get_json, to_float, to_int
from belfast.apis.models import AnimeResult, ApiType, MangaResult, Staff

logger = logging.getLogger('belfast_bot.apis')

BASE_URL = "https://api.jikan.moe/v4"
SEARCH_LIMIT = 10
SERVICE = "MyAnimeList"


def _image_url(data: dict) -> str | None:
    jpg = (data.get("images") or {}).get("jpg") or {}
    return jpg.get("large_image_url") or jpg.get("image_url")


def parse_anime(data: dict) -> AnimeResult:
    studios = data.get("studios") or []
    studio = studios[0] if studios else {}
    return AnimeResult(
        id=data["mal_id"],
        title=data.get("title") or "Unknown",
        api_type=ApiType.MY_ANIME_LIST,
        status=data.get("status"),
        synopsis=data.get("synopsis"),
        type=data.get("type"),
        episodes=to_int(data.get("episodes")),
        score=to_float(data.get("score")),
        image_url=_image_url(data),
        site_url=data.get("url"),
        source=data.get("source"),
        duration=data.get("duration"),
        broadcast=(data.get("broadcast") or {}).get("string"),
        trailer_url=(data.get("trailer") or {}).get("url"),
        studio=studio.get("name"),
        studio_url=studio.get("url"),
    )


def parse_manga(data: dict) -> MangaResult:
    return MangaResult(
        id=data["mal_id"],
        title=data.get("title") or "Unknown",
        api_type=ApiType.MY_ANIME_LIST,
        status=data.get("status"),
        synopsis=data.get("synopsis"),
        type=data.get("type"),
        chapters=to_int(data.get("chapters")),
        volumes=to_int(data.get("volumes")),
        score=to_float(data.get("score")),
        image_url=_image_url(data),
        site_url=data.get("url"),
        staff=[Staff(name=a.get("name", "Unknown"), site_url=a.get("url")) for a in data.get("authors") or []],
    )


def parse_search_ids(payload: dict) -> list[int]:
    return [entry["mal_id"] for entry in payload.get("data") or [] if entry.get("mal_id")]


async def search_anime_ids(name: str) -> list[int]:
    payload = await get_json(SERVICE, f"{BASE_URL}/anime", params={"q": name, "limit": SEARCH_LIMIT})
    return parse_search_ids(payload)


async def search_manga_ids(name: str) -> list[int]:
    payload = await get_json(SERVICE, f"{BASE_URL}/manga", params={"q": name, "limit": SEARCH_LIMIT})
    return parse_search_ids(payload)


async def get_anime(mal_id: int) -> AnimeResult:
    logger.debug(f"Fetching MAL anime {mal_id}")
    payload = await get_json(SERVICE, f"{BASE_URL}/anime/{mal_id}")
    return parse_anime(payload["data"])


async def get_manga(mal_id: int) -> MangaResult:
    logger.debug(f"Fetching MAL manga {mal_id}")
    payload = await get_json(SERVICE, f"{BASE_URL}/manga/{mal_id}")
    return parse_manga(payload["data"])
