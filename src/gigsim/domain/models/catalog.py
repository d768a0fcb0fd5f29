from __future__ import annotations

from dataclasses import dataclass


QUALITY_MIN = 1
QUALITY_MAX = 100
POPULARITY_MIN = 0
POPULARITY_MAX = 100
PROMO_BOOST_MAX = 20
DEFAULT_POPULARITY_FROM_QUALITY = 0.6


def song_chart_score(popularity: int, weekly_streams: int) -> int:
    return int(max(0, int(popularity)) * 10 + max(0, int(weekly_streams)) * 0.1)


def song_freshness(age: int) -> int:
    return max(0, 100 - int(age) * 3)


@dataclass
class Song:
    id: str
    title: str
    genre: str = "Pop"
    quality: int = 50
    popularity: int | None = None
    age: int = 0
    freshness: int = 100
    weekly_streams: int = 0
    total_streams: int = 0
    total_radio_plays: int = 0
    total_earnings: int = 0
    viral: bool = False
    video_boost: bool = False
    album_id: str | None = None

    def __post_init__(self) -> None:
        self.quality = max(QUALITY_MIN, min(QUALITY_MAX, int(self.quality)))
        if self.popularity is None:
            self.popularity = int(self.quality * DEFAULT_POPULARITY_FROM_QUALITY)
        self.popularity = max(POPULARITY_MIN, min(POPULARITY_MAX, int(self.popularity)))
        self.age = max(0, int(self.age))
        self.freshness = max(0, min(100, int(self.freshness)))
        self.weekly_streams = max(0, int(self.weekly_streams))

    @property
    def in_album(self) -> bool:
        return self.album_id is not None

    @property
    def chart_score(self) -> int:
        """Ranking input; always derived from popularity and this week's streams."""

        return song_chart_score(int(self.popularity or 0), self.weekly_streams)


@dataclass
class Album:
    id: str
    name: str
    song_ids: tuple[str, ...] = ()
    quality: int = 50
    popularity: int = 0
    age: int = 0
    promo_boost: int = 0
    released_week: int = 0
    chart_score: int = 0

    def __post_init__(self) -> None:
        self.song_ids = tuple(str(song_id) for song_id in self.song_ids)
        self.quality = max(QUALITY_MIN, min(QUALITY_MAX, int(self.quality)))
        self.popularity = max(POPULARITY_MIN, min(POPULARITY_MAX, int(self.popularity)))
        self.age = max(0, int(self.age))
        self.promo_boost = max(0, min(PROMO_BOOST_MAX, int(self.promo_boost)))


@dataclass
class MerchandiseItem:
    id: str
    name: str = "T-Shirt"
    base_price: float = 25.0
    cost_to_make: float = 5.0
    quality: int = 50
    popularity: float = 1.0
    inventory: int = 0
    weeks_selling: int = 0
    total_sold: int = 0
    total_revenue: int = 0

    def __post_init__(self) -> None:
        self.inventory = max(0, int(self.inventory))
        self.weeks_selling = max(0, int(self.weeks_selling))
