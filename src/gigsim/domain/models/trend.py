from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TrendStrength(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


@dataclass(frozen=True)
class GenreTrend:
    genre: str
    modifier: float
    weeks_remaining: int
    strength: TrendStrength = TrendStrength.MINOR

    @property
    def active(self) -> bool:
        return int(self.weeks_remaining) > 0


@dataclass(frozen=True)
class GenrePopularity:
    """Per-genre memory that outlives any single trend."""

    popularity: int = 50
    weeks: int = 0
