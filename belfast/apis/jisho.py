"""Jisho.org dictionary lookups."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from belfast.apis.base import get_json

logger = logging.getLogger('belfast_bot.apis')

API_URL = "https://jisho.org/api/v1/search/words"
SERVICE = "Jisho"


@dataclass
class EnglishDefinition:
    definitions: list[str]
    info: list[str] = field(default_factory=list)
    parts_of_speech: list[str] = field(default_factory=list)


@dataclass
class SearchResult:
    word: str
    japanese: list[tuple[Optional[str], Optional[str]]]  # (word, reading)
    english: list[EnglishDefinition]
    is_common: bool = False

    @property
    def url(self) -> str:
        return f"https://jisho.org/word/{self.word}"


def parse_result(entry: dict) -> SearchResult:
    return SearchResult(
        word=entry.get("slug", ""),
        japanese=[(j.get("word"), j.get("reading")) for j in entry.get("japanese") or []],
        english=[
            EnglishDefinition(
                definitions=sense.get("english_definitions") or [],
                info=sense.get("info") or [],
                parts_of_speech=sense.get("parts_of_speech") or [],
            )
            for sense in entry.get("senses") or []
        ],
        is_common=bool(entry.get("is_common")),
    )


async def get_word(keyword: str) -> Optional[SearchResult]:
    """Return the best match for `keyword`, or None if Jisho has nothing."""
    payload = await get_json(SERVICE, API_URL, params={"keyword": keyword})
    results = payload.get("data") or []
    if not results:
        logger.debug(f"No Jisho results for {keyword}")
        return None
    return parse_result(results[0])
