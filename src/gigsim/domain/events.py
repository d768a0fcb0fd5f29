from dataclasses import dataclass


@dataclass
class WeekAdvanced:
    session_id: str
    week_after: int
    money_after: int
    fans_after: int


@dataclass
class ConsequenceEscalated:
    consequence_id: str
    previous_stage: str
    new_stage: str
    week: int
    description: str
    severity: str


@dataclass
class ConsequenceResurfaced:
    consequence_id: str
    week: int
    times_resurfaced: int
    description: str


@dataclass
class FactionStandingChanged:
    faction_id: str
    delta: float
    standing_after: float
    week: int
    reason: str


@dataclass
class AlbumReleased:
    album_id: str
    name: str
    week: int
    cost: int
