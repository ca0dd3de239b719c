"""Anilist GraphQL API integration.

Anime, manga and user lookups against https://graphql.anilist.co. Media
descriptions come back as HTML and are flattened to plain text.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from bs4 import BeautifulSoup

from belfast.apis.base import post_json, to_int
from belfast.apis.models import (
    AnimeResult,
    ApiType,
    Favorite,
    MangaResult,
    MediaStats,
    Staff,
    UserResult,
)
from belfast.exceptions import ApiError

logger = logging.getLogger('belfast_bot.apis')

API_URL = "https://graphql.anilist.co"
SERVICE = "Anilist"

MEDIA_FIELDS = """
    id
    siteUrl
    title { romaji english }
    description
    status
    format
    source
    episodes
    duration
    chapters
    volumes
    averageScore
    coverImage { large }
    trailer { id site }
    nextAiringEpisode { airingAt episode }
    studios(isMain: true) { nodes { name siteUrl } }
    staff(perPage: 3, sort: RELEVANCE) { edges { role node { name { full } siteUrl } } }
"""

MEDIA_BY_SEARCH_QUERY = f"""
query ($search: String, $type: MediaType) {{
  Media(search: $search, type: $type) {{ {MEDIA_FIELDS} }}
}}
"""

MEDIA_BY_ID_QUERY = f"""
query ($id: Int, $type: MediaType) {{
  Media(id: $id, type: $type) {{ {MEDIA_FIELDS} }}
}}
"""

USER_QUERY = """
query ($name: String) {
  User(name: $name) {
    name
    siteUrl
    avatar { large }
    bannerImage
    statistics {
      anime { count episodesWatched meanScore }
      manga { count chaptersRead meanScore }
    }
    favourites {
      anime(perPage: 1) { nodes { title { romaji } siteUrl } }
      manga(perPage: 1) { nodes { title { romaji } siteUrl } }
      characters(perPage: 1) { nodes { name { full } siteUrl } }
    }
  }
}
"""

TRAILER_SITES = {
    "youtube": "https://www.youtube.com/watch?v={}",
    "dailymotion": "https://www.dailymotion.com/video/{}",
}


def strip_html(text: Optional[str]) -> Optional[str]:
    """Convert an HTML description to plain text, keeping line breaks."""
    if not text:
        return text
    soup = BeautifulSoup(text, 'html.parser')
    for br in soup.find_all('br'):
        br.replace_with("\n")
    return soup.get_text().strip()


def _enum_text(value: Optional[str]) -> Optional[str]:
    """RELEASING -> Releasing, NOT_YET_RELEASED -> Not Yet Released"""
    if not value:
        return value
    return value.replace("_", " ").title()


def _title(media: dict) -> str:
    title = media.get("title") or {}
    return title.get("english") or title.get("romaji") or "Unknown"


def _score(media: dict) -> Optional[float]:
    score = media.get("averageScore")
    return score / 10 if score is not None else None


def _trailer_url(trailer: Optional[dict]) -> Optional[str]:
    if not trailer or not trailer.get("id"):
        return None
    template = TRAILER_SITES.get(trailer.get("site", ""))
    return template.format(trailer["id"]) if template else None


def _broadcast(next_airing: Optional[dict]) -> Optional[str]:
    if not next_airing or not next_airing.get("airingAt"):
        return None
    airing = datetime.fromtimestamp(next_airing["airingAt"], tz=timezone.utc)
    return f"Episode {next_airing.get('episode')} at {airing:%Y-%m-%d %H:%M} UTC"


def parse_anime(media: dict) -> AnimeResult:
    studios = (media.get("studios") or {}).get("nodes") or []
    studio = studios[0] if studios else {}
    duration = media.get("duration")
    return AnimeResult(
        id=media["id"],
        title=_title(media),
        api_type=ApiType.ANILIST,
        status=_enum_text(media.get("status")),
        synopsis=strip_html(media.get("description")),
        type=media.get("format"),
        episodes=to_int(media.get("episodes")),
        score=_score(media),
        image_url=(media.get("coverImage") or {}).get("large"),
        site_url=media.get("siteUrl"),
        source=_enum_text(media.get("source")),
        duration=f"{duration} min per ep" if duration else None,
        broadcast=_broadcast(media.get("nextAiringEpisode")),
        trailer_url=_trailer_url(media.get("trailer")),
        studio=studio.get("name"),
        studio_url=studio.get("siteUrl"),
    )


def parse_manga(media: dict) -> MangaResult:
    edges = (media.get("staff") or {}).get("edges") or []
    staff = [
        Staff(name=(edge["node"].get("name") or {}).get("full", "Unknown"), site_url=edge["node"].get("siteUrl"))
        for edge in edges
        if edge.get("node")
    ]
    return MangaResult(
        id=media["id"],
        title=_title(media),
        api_type=ApiType.ANILIST,
        status=_enum_text(media.get("status")),
        synopsis=strip_html(media.get("description")),
        type=_enum_text(media.get("format")),
        chapters=to_int(media.get("chapters")),
        volumes=to_int(media.get("volumes")),
        score=_score(media),
        image_url=(media.get("coverImage") or {}).get("large"),
        site_url=media.get("siteUrl"),
        staff=staff,
    )


def _first_favorite(connection: Optional[dict], name_key: str, name_field: str) -> Optional[Favorite]:
    nodes = (connection or {}).get("nodes") or []
    if not nodes:
        return None
    node = nodes[0]
    return Favorite(name=(node.get(name_key) or {}).get(name_field, "Unknown"), site_url=node.get("siteUrl"))


def parse_user(user: dict) -> UserResult:
    stats = user.get("statistics") or {}
    anime = stats.get("anime") or {}
    manga = stats.get("manga") or {}
    favourites = user.get("favourites") or {}
    return UserResult(
        name=user["name"],
        site_url=user.get("siteUrl") or f"https://anilist.co/user/{user['name']}",
        avatar_image=(user.get("avatar") or {}).get("large"),
        banner_image=user.get("bannerImage"),
        anime_stats=MediaStats(
            count=anime.get("count", 0),
            amount=anime.get("episodesWatched", 0),
            mean_score=anime.get("meanScore", 0.0),
        ),
        manga_stats=MediaStats(
            count=manga.get("count", 0),
            amount=manga.get("chaptersRead", 0),
            mean_score=manga.get("meanScore", 0.0),
        ),
        anime_favorite=_first_favorite(favourites.get("anime"), "title", "romaji"),
        manga_favorite=_first_favorite(favourites.get("manga"), "title", "romaji"),
        character_favorite=_first_favorite(favourites.get("characters"), "name", "full"),
    )


async def _query(query: str, variables: dict) -> Optional[dict]:
    """Run a GraphQL query. Returns None when Anilist reports not found."""
    try:
        payload = await post_json(SERVICE, API_URL, json={"query": query, "variables": variables})
    except ApiError as e:
        if e.status == 404:
            logger.debug(f"Anilist found nothing for {variables}")
            return None
        raise
    return payload.get("data")


async def _get_media(search: Union[str, int], media_type: str) -> Optional[dict]:
    if isinstance(search, int):
        data = await _query(MEDIA_BY_ID_QUERY, {"id": search, "type": media_type})
    else:
        data = await _query(MEDIA_BY_SEARCH_QUERY, {"search": search, "type": media_type})
    return (data or {}).get("Media")


async def get_anime(search: Union[str, int]) -> Optional[AnimeResult]:
    """Look up an anime by title or Anilist id."""
    media = await _get_media(search, "ANIME")
    return parse_anime(media) if media else None


async def get_manga(search: Union[str, int]) -> Optional[MangaResult]:
    media = await _get_media(search, "MANGA")
    return parse_manga(media) if media else None


async def get_user(name: str) -> Optional[UserResult]:
    data = await _query(USER_QUERY, {"name": name})
    user = (data or {}).get("User")
    return parse_user(user) if user else None
