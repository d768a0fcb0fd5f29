from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from gigsim.domain.models.catalog import Album, MerchandiseItem, Song
from gigsim.domain.models.consequence import ConsequenceLedger
from gigsim.domain.models.faction import FactionStanding
from gigsim.domain.models.label import LabelDeal
from gigsim.domain.models.psychology import PsychologicalEvolution
from gigsim.domain.models.trend import GenrePopularity, GenreTrend


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"

    @classmethod
    def normalize(cls, value: object) -> "Difficulty":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for level in cls:
            if level.value == raw:
                return level
        return cls.NORMAL


@dataclass(frozen=True)
class Equipment:
    instruments: str = "basic"
    transport: str | int = "none"


@dataclass(frozen=True)
class Staff:
    manager: str | None = None
    lawyer: bool = False


@dataclass(frozen=True)
class RivalEntry:
    rival_id: str
    band_name: str
    title: str
    genre: str
    popularity: int = 0
    chart_score: int = 0


@dataclass(frozen=True)
class RivalCatalog:
    generated_week: int
    entries: tuple[RivalEntry, ...] = ()

    def is_stale(self, week: int, max_age_weeks: int = 4) -> bool:
        return int(week) - int(self.generated_week) > int(max_age_weeks)


@dataclass
class Snapshot:
    """Complete simulation state for one session at one week."""

    band_name: str = ""
    genre: str = "Pop"
    week: int = 0
    money: int = 0
    fame: int = 0
    fans: int = 0
    difficulty: Difficulty = Difficulty.NORMAL
    members: list[str] = field(default_factory=list)
    equipment: Equipment = field(default_factory=Equipment)
    staff: Staff = field(default_factory=Staff)
    label_deal: LabelDeal | None = None
    studio_tier: str = "demo"
    songs: list[Song] = field(default_factory=list)
    albums: list[Album] = field(default_factory=list)
    merchandise: list[MerchandiseItem] = field(default_factory=list)
    trend: GenreTrend | None = None
    genre_trends: dict[str, GenrePopularity] = field(default_factory=dict)
    consequences: ConsequenceLedger = field(default_factory=ConsequenceLedger)
    factions: dict[str, FactionStanding] = field(default_factory=dict)
    psychology: PsychologicalEvolution = field(default_factory=PsychologicalEvolution)
    rivals: RivalCatalog | None = None
    rng_seed: int = 1
    choice_rolls: int = 0
    total_revenue: int = 0
    weekly_expenses: int = 0

    def __post_init__(self) -> None:
        self.difficulty = Difficulty.normalize(self.difficulty)
        self.week = max(0, int(self.week))
        self.money = max(0, int(self.money))

    def song_index(self) -> dict[str, Song]:
        return {song.id: song for song in self.songs}

    def album_index(self) -> dict[str, Album]:
        return {album.id: album for album in self.albums}
