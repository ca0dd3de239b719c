"""trace.moe reverse image search for anime screenshots."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from belfast.apis.base import get_json, post_json, to_float, to_int
from belfast.exceptions import ApiError

logger = logging.getLogger('belfast_bot.apis')

API_URL = "https://api.trace.moe/search"
SERVICE = "trace.moe"


@dataclass
class TraceResult:
    anilist_id: int
    filename: str
    episode: Optional[int]
    start: float  # seconds into the episode
    end: float
    similarity: float
    video_url: Optional[str] = None
    image_url: Optional[str] = None


def parse_results(payload: dict, limit: Optional[int] = None) -> list[TraceResult]:
    """Parse a search response, most similar first.

    Raises:
        ApiError: If trace.moe reported an error
    """
    if payload.get("error"):
        raise ApiError(SERVICE, payload["error"])

    results = []
    for entry in payload.get("result") or []:
        anilist = entry.get("anilist")
        # anilist is a bare id unless anilistInfo was requested
        anilist_id = anilist.get("id") if isinstance(anilist, dict) else anilist
        if anilist_id is None:
            continue
        results.append(TraceResult(
            anilist_id=int(anilist_id),
            filename=entry.get("filename", ""),
            episode=to_int(entry.get("episode")),
            start=to_float(entry.get("from"), 0.0),
            end=to_float(entry.get("to"), 0.0),
            similarity=to_float(entry.get("similarity"), 0.0),
            video_url=entry.get("video"),
            image_url=entry.get("image"),
        ))
    results.sort(key=lambda r: r.similarity, reverse=True)
    return results[:limit] if limit else results


async def search_url(url: str, limit: Optional[int] = None) -> list[TraceResult]:
    logger.debug(f"Tracing image url {url}")
    payload = await get_json(SERVICE, API_URL, params={"url": url, "cutBorders": ""})
    return parse_results(payload, limit)


async def search_image(image: bytes, limit: Optional[int] = None) -> list[TraceResult]:
    logger.debug(f"Tracing uploaded image ({len(image)} bytes)")
    payload = await post_json(SERVICE, API_URL, data=image, params={"cutBorders": ""},
                              headers={"Content-Type": "application/octet-stream"})
    return parse_results(payload, limit)
