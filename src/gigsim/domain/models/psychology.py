from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CorruptionMilestone:
    threshold: int
    stage: str
    unlocks: tuple[str, ...] = ()


DEFAULT_CORRUPTION_MILESTONES: tuple[CorruptionMilestone, ...] = (
    CorruptionMilestone(25, "minor_temptation", ("minor_criminal_offers",)),
    CorruptionMilestone(50, "moral_compromise", ("major_criminal_offers",)),
    CorruptionMilestone(75, "no_turning_back", ("criminal_empire_options",)),
    CorruptionMilestone(100, "fully_corrupted", ("no_redemption_paths",)),
)

ADDICTION_STAGES: tuple[str, ...] = (
    "clean",
    "experimentation",
    "regular_use",
    "dependency",
    "addiction",
    "rock_bottom",
)

MENTAL_HEALTH_FIELDS: tuple[str, ...] = ("stress", "paranoia", "isolation", "depression", "hopelessness")


@dataclass(frozen=True)
class CorruptionPath:
    current_level: float = 0.0
    stage: str | None = None
    milestones: tuple[CorruptionMilestone, ...] = DEFAULT_CORRUPTION_MILESTONES

    @property
    def unlocked(self) -> tuple[str, ...]:
        rows: list[str] = []
        for milestone in self.milestones:
            if milestone.threshold <= self.current_level:
                rows.extend(milestone.unlocks)
        return tuple(rows)


@dataclass(frozen=True)
class AddictionPath:
    current_stage: str = ADDICTION_STAGES[0]
    stages: tuple[str, ...] = ADDICTION_STAGES
    recovery_attempts: int = 0

    @property
    def stage_index(self) -> int:
        try:
            return self.stages.index(self.current_stage)
        except ValueError:
            return 0


@dataclass(frozen=True)
class MentalHealth:
    stress: float = 30.0
    paranoia: float = 0.0
    isolation: float = 0.0
    depression: float = 0.0
    hopelessness: float = 0.0


@dataclass(frozen=True)
class PsychologicalEvolution:
    corruption: CorruptionPath = field(default_factory=CorruptionPath)
    addiction: AddictionPath = field(default_factory=AddictionPath)
    mental_health: MentalHealth = field(default_factory=MentalHealth)
