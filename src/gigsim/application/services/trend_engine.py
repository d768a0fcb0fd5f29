from __future__ import annotations

import logging
import random
from typing import Sequence

from gigsim.application.dtos import TrendResult
from gigsim.application.services.balance_tables import (
    DEFAULT_GENRES,
    GENRE_BASELINE_POPULARITY,
    HOLIDAY_BOOST,
    HOLIDAY_GENRES,
    HOLIDAY_WINDOWS,
    SUMMER_BOOST,
    SUMMER_GENRES,
    SUMMER_WEEKS,
    TREND_GENRE_POPULARITY_BONUS,
    TREND_MAJOR_ROLL,
    TREND_MODERATE_ROLL,
    TREND_MODIFIER_FLOOR,
    TREND_PROFILES,
    TREND_RETIRE_FLOOR,
    TREND_RETIRE_PENALTY,
    TREND_START_CHANCE,
)
from gigsim.domain.models.snapshot import Snapshot
from gigsim.domain.models.trend import GenrePopularity, GenreTrend, TrendStrength


logger = logging.getLogger(__name__)

_STRENGTH_LABELS = {
    TrendStrength.MAJOR: "Major",
    TrendStrength.MODERATE: "Rising",
    TrendStrength.MINOR: "Minor",
}


def seasonal_boost(week: int, genre: str) -> tuple[int, str | None]:
    week_of_year = int(week) % 52
    boost = 0
    note = None
    if SUMMER_WEEKS[0] <= week_of_year <= SUMMER_WEEKS[1] and genre in SUMMER_GENRES:
        boost, note = SUMMER_BOOST, "Summer boost"
    in_holiday = any(start <= week_of_year <= end for start, end in HOLIDAY_WINDOWS)
    if in_holiday and genre in HOLIDAY_GENRES:
        boost, note = HOLIDAY_BOOST, "Holiday season boost"
    return boost, note


def _roll_strength(rng: random.Random) -> TrendStrength:
    if rng.random() < TREND_MAJOR_ROLL:
        return TrendStrength.MAJOR
    if rng.random() < TREND_MODERATE_ROLL:
        return TrendStrength.MODERATE
    return TrendStrength.MINOR


def _start_trend(genres: Sequence[str], rng: random.Random) -> GenreTrend:
    genre = rng.choice(list(genres))
    strength = _roll_strength(rng)
    profile = TREND_PROFILES[strength.value]
    base_modifier, modifier_spread = profile["modifier"]
    base_weeks, weeks_spread = profile["weeks"]
    return GenreTrend(
        genre=genre,
        modifier=float(base_modifier + rng.randint(0, modifier_spread)),
        weeks_remaining=base_weeks + rng.randint(0, weeks_spread),
        strength=strength,
    )


def advance_trend(
    snapshot: Snapshot,
    genres: Sequence[str] | None = None,
    *,
    rng: random.Random,
) -> TrendResult:
    """Advance the single trend slot and compute this week's seasonal boost."""

    available = [str(genre) for genre in (genres if genres is not None else DEFAULT_GENRES) if str(genre).strip()]
    genre_trends = dict(snapshot.genre_trends or {})
    current_genre = snapshot.genre or "Pop"
    genre_trends.setdefault(current_genre, GenrePopularity())

    notes: list[str] = []
    boost, seasonal_note = seasonal_boost(snapshot.week, current_genre)

    trend = snapshot.trend
    if trend is None or not trend.active:
        trend = None
        if available and rng.random() < TREND_START_CHANCE:
            trend = _start_trend(available, rng)
            memory = genre_trends.get(trend.genre, GenrePopularity(popularity=GENRE_BASELINE_POPULARITY))
            genre_trends[trend.genre] = GenrePopularity(
                popularity=min(100, memory.popularity + TREND_GENRE_POPULARITY_BONUS),
                weeks=trend.weeks_remaining,
            )
            notes.append(
                f"{_STRENGTH_LABELS[trend.strength]} {trend.genre} trend! "
                f"Lasts {trend.weeks_remaining} weeks (+{int(trend.modifier)}% popularity)."
            )
            logger.debug("Trend started", extra={"genre": trend.genre, "strength": trend.strength.value})
    else:
        weeks_left = int(trend.weeks_remaining) - 1
        if weeks_left <= 0:
            notes.append(f"{trend.genre} trend cooled off.")
            memory = genre_trends.get(trend.genre)
            if memory is not None:
                genre_trends[trend.genre] = GenrePopularity(
                    popularity=max(TREND_RETIRE_FLOOR, memory.popularity - TREND_RETIRE_PENALTY),
                    weeks=0,
                )
            logger.debug("Trend retired", extra={"genre": trend.genre})
            trend = None
        else:
            decay_rate = TREND_PROFILES[trend.strength.value]["decay"]
            trend = GenreTrend(
                genre=trend.genre,
                modifier=max(float(TREND_MODIFIER_FLOOR), float(trend.modifier) - decay_rate),
                weeks_remaining=weeks_left,
                strength=trend.strength,
            )

    if seasonal_note:
        notes.append(seasonal_note)
    return TrendResult(trend=trend, seasonal_boost=boost, genre_trends=genre_trends, notes=tuple(notes))
