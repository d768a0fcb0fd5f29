from __future__ import annotations

import math
import random
from dataclasses import replace
from typing import Mapping, Sequence

from gigsim.application.dtos import TrendResult
from gigsim.application.services.balance_tables import (
    ALBUM_EARLY_WEEKS,
    ALBUM_MARKETING_CHART_DIVISOR,
    ALBUM_MARKETING_PROMO_DIVISOR,
    ALBUM_PROMO_POPULARITY_RATE,
    ALBUM_QUALITY_CHART_WEIGHT,
    ALBUM_STREAM_BONUS_RATE,
    FRESHNESS_STREAM_FACTOR,
    FRESHNESS_WEIGHT_DECAY,
    PLAYLIST_PITCH_CHANCE,
    PLAYLIST_PITCH_MAX,
    PLAYLIST_PITCH_MIN,
    RADIO_PAY_PER_PLAY,
    RADIO_PROMO_CHANCE,
    RADIO_PROMO_MAX,
    RADIO_PROMO_MIN,
    SONG_STREAMS_PER_POPULARITY,
    SONG_WEEKLY_DECAY,
    STREAM_PAYOUT,
    VIDEO_STREAM_BONUS,
    VIRAL_CHANCE,
    VIRAL_POPULARITY_SPIKE,
)
from gigsim.application.services.economy import song_radio_plays
from gigsim.domain.models.catalog import PROMO_BOOST_MAX, Album, Song, song_freshness
from gigsim.domain.models.label import LabelDeal
from gigsim.domain.models.snapshot import Snapshot


def _clamp_popularity(value: float) -> int:
    return max(0, min(100, int(math.floor(value))))


def album_popularity_boost(song: Song, albums_by_id: Mapping[str, Album]) -> int:
    if song.album_id is None:
        return 0
    album = albums_by_id.get(song.album_id)
    if album is None:
        return 0
    return int(math.floor(int(album.promo_boost) * ALBUM_PROMO_POPULARITY_RATE))


def _label_bonus(popularity: int, label_deal: LabelDeal | None, rng: random.Random) -> int:
    if label_deal is None:
        return popularity
    if label_deal.playlist_pitch and rng.random() < PLAYLIST_PITCH_CHANCE:
        popularity = min(100, popularity + rng.randint(PLAYLIST_PITCH_MIN, PLAYLIST_PITCH_MAX))
    if label_deal.radio_promo and rng.random() < RADIO_PROMO_CHANCE:
        popularity = min(100, popularity + rng.randint(RADIO_PROMO_MIN, RADIO_PROMO_MAX))
    return popularity


def weekly_song_streams(song: Song) -> int:
    popularity = int(song.popularity or 0)
    age = int(song.age)
    freshness_weight = max(0.0, 1 - age * FRESHNESS_WEIGHT_DECAY)
    stream_base = popularity * SONG_STREAMS_PER_POPULARITY
    stream_fresh = int(math.floor(song_freshness(age) * FRESHNESS_STREAM_FACTOR * freshness_weight))
    bonus = VIDEO_STREAM_BONUS if song.video_boost else 0
    if song.in_album:
        bonus += int(math.floor(stream_base * ALBUM_STREAM_BONUS_RATE))
    return max(0, stream_base + stream_fresh + bonus)


def age_song(
    song: Song,
    *,
    trend_result: TrendResult,
    albums_by_id: Mapping[str, Album],
    label_deal: LabelDeal | None,
    rng: random.Random,
) -> Song:
    age = int(song.age) + 1
    decayed = max(0, int(song.popularity or 0) - SONG_WEEKLY_DECAY)
    trend = trend_result.trend
    trend_bonus = float(trend.modifier) if trend is not None and song.genre == trend.genre else 0.0
    popularity = _clamp_popularity(
        decayed + trend_bonus + int(trend_result.seasonal_boost) + album_popularity_boost(song, albums_by_id)
    )
    popularity = _label_bonus(popularity, label_deal, rng)
    viral = rng.random() < VIRAL_CHANCE
    if viral:
        popularity = min(100, popularity + VIRAL_POPULARITY_SPIKE)

    aged = replace(song, age=age, popularity=popularity, freshness=song_freshness(age), viral=viral)
    weekly_streams = weekly_song_streams(aged)
    plays = song_radio_plays(popularity)
    earnings = int(math.floor(weekly_streams * STREAM_PAYOUT)) + plays * RADIO_PAY_PER_PLAY
    return replace(
        aged,
        weekly_streams=weekly_streams,
        total_streams=int(song.total_streams) + weekly_streams,
        total_radio_plays=int(song.total_radio_plays) + plays,
        total_earnings=int(song.total_earnings) + earnings,
    )


def age_songs(
    songs: Sequence[Song],
    snapshot: Snapshot,
    trend_result: TrendResult,
    *,
    rng: random.Random,
) -> list[Song]:
    """One week of aging for every song, using the album index from before this week."""

    albums_by_id = snapshot.album_index()
    return [
        age_song(
            song,
            trend_result=trend_result,
            albums_by_id=albums_by_id,
            label_deal=snapshot.label_deal,
            rng=rng,
        )
        for song in songs
    ]


def age_album(album: Album, label_deal: LabelDeal | None) -> Album:
    age = int(album.age) + 1
    promo = max(0, int(album.promo_boost) - 1)
    marketing = int(label_deal.marketing_budget) if label_deal is not None else 0
    label_boost = 0
    if marketing > 0:
        promo = min(PROMO_BOOST_MAX, promo + marketing // ALBUM_MARKETING_PROMO_DIVISOR)
        label_boost = marketing // ALBUM_MARKETING_CHART_DIVISOR
    early_weeks = max(0, ALBUM_EARLY_WEEKS - age)
    score = max(0, int(math.floor(int(album.quality) * ALBUM_QUALITY_CHART_WEIGHT + early_weeks + promo + label_boost)))
    return replace(album, age=age, promo_boost=promo, chart_score=score)


def age_albums(albums: Sequence[Album], snapshot: Snapshot) -> list[Album]:
    return [age_album(album, snapshot.label_deal) for album in albums]
