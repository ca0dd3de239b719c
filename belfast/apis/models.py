"""Result records shared by the MyAnimeList and Anilist clients."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class ApiType(enum.Enum):
    MY_ANIME_LIST = "MyAnimeList"
    ANILIST = "Anilist"

    @property
    def icon_url(self) -> str:
        if self is ApiType.MY_ANIME_LIST:
            return "https://upload.wikimedia.org/wikipedia/commons/7/7a/MyAnimeList_Logo.png"
        return "https://anilist.co/img/icons/android-chrome-512x512.png"


@dataclass
class Staff:
    name: str
    site_url: Optional[str] = None


@dataclass
class AnimeResult:
    id: int
    title: str
    api_type: ApiType
    status: Optional[str] = None
    synopsis: Optional[str] = None
    type: Optional[str] = None
    episodes: Optional[int] = None
    score: Optional[float] = None
    image_url: Optional[str] = None
    site_url: Optional[str] = None
    source: Optional[str] = None
    duration: Optional[str] = None
    broadcast: Optional[str] = None
    trailer_url: Optional[str] = None
    studio: Optional[str] = None
    studio_url: Optional[str] = None


@dataclass
class MangaResult:
    id: int
    title: str
    api_type: ApiType
    status: Optional[str] = None
    synopsis: Optional[str] = None
    type: Optional[str] = None
    chapters: Optional[int] = None
    volumes: Optional[int] = None
    score: Optional[float] = None
    image_url: Optional[str] = None
    site_url: Optional[str] = None
    staff: list[Staff] = field(default_factory=list)


@dataclass
class MediaStats:
    count: int = 0
    amount: int = 0  # episodes watched / chapters read
    mean_score: float = 0.0


@dataclass
class Favorite:
    name: str
    site_url: Optional[str] = None


@dataclass
class UserResult:
    name: str
    site_url: str
    api_type: ApiType = ApiType.ANILIST
    avatar_image: Optional[str] = None
    banner_image: Optional[str] = None
    anime_stats: MediaStats = field(default_factory=MediaStats)
    manga_stats: MediaStats = field(default_factory=MediaStats)
    anime_favorite: Optional[Favorite] = None
    manga_favorite: Optional[Favorite] = None
    character_favorite: Optional[Favorite] = None
