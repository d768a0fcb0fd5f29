from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FactionStatus(str, Enum):
    ALLY = "ally"
    NEUTRAL = "neutral"
    WARY = "wary"
    HOSTILE = "hostile"
    ENEMY = "enemy"


@dataclass(frozen=True)
class FactionStanding:
    faction_id: str
    name: str
    current_standing: float = 0.0
    min_standing: float = -100.0
    max_standing: float = 100.0
    decay_per_week: float = 1.0
    last_activity_week: int | None = 0
    decayed_through_week: int | None = None
    values: tuple[str, ...] = ()

    def clamp(self, value: float) -> float:
        return max(float(self.min_standing), min(float(self.max_standing), float(value)))

    @property
    def never_forgets(self) -> bool:
        return self.last_activity_week is None

    @property
    def status(self) -> FactionStatus:
        return standing_status(self.current_standing)


def standing_status(standing: float) -> FactionStatus:
    score = float(standing)
    if score > 70:
        return FactionStatus.ALLY
    if score > 30:
        return FactionStatus.NEUTRAL
    if score > -30:
        return FactionStatus.WARY
    if score > -70:
        return FactionStatus.HOSTILE
    return FactionStatus.ENEMY
