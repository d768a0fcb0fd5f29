from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


DEFAULT_ESCALATION_DELAY_WEEKS = 8
RESURFACE_ESCALATION_DELAY_WEEKS = 5
FAME_PROXIMITY_WINDOW = 5


class ConsequenceStage(str, Enum):
    INITIAL = "initial"
    DEVELOPING = "developing"
    ESCALATING = "escalating"
    CRITICAL = "critical"
    POINT_OF_NO_RETURN = "point_of_no_return"
    IRREVERSIBLE = "irreversible"
    RESURFACED = "resurfaced"

    @classmethod
    def normalize(cls, value: object) -> "ConsequenceStage":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for stage in cls:
            if stage.value == raw:
                return stage
        return cls.INITIAL


ESCALATION_LADDER: tuple[ConsequenceStage, ...] = (
    ConsequenceStage.INITIAL,
    ConsequenceStage.DEVELOPING,
    ConsequenceStage.ESCALATING,
    ConsequenceStage.CRITICAL,
    ConsequenceStage.POINT_OF_NO_RETURN,
    ConsequenceStage.IRREVERSIBLE,
)


def ladder_rank(stage: ConsequenceStage) -> int:
    if stage == ConsequenceStage.RESURFACED:
        return -1
    return ESCALATION_LADDER.index(stage)


def next_stage(stage: ConsequenceStage, resume_from: ConsequenceStage | None = None) -> ConsequenceStage:
    """One step up the ladder; a resurfaced thread resumes after the stage it kept."""

    if stage == ConsequenceStage.RESURFACED:
        stage = resume_from if resume_from not in (None, ConsequenceStage.RESURFACED) else ConsequenceStage.INITIAL
    index = ESCALATION_LADDER.index(stage)
    return ESCALATION_LADDER[min(index + 1, len(ESCALATION_LADDER) - 1)]


@dataclass(frozen=True)
class EscalationEvent:
    event_id: str
    description: str = ""
    escalation_delay: int | None = None


@dataclass(frozen=True)
class ResurfaceConditions:
    fame_levels: tuple[int, ...] = ()
    event_types: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.fame_levels and not self.event_types

    def matches(self, *, fame: int, event_type: str | None = None) -> bool:
        if self.is_empty:
            return True
        near_fame = any(abs(int(fame) - int(level)) < FAME_PROXIMITY_WINDOW for level in self.fame_levels)
        if near_fame:
            return True
        return bool(event_type) and str(event_type) in self.event_types


@dataclass(frozen=True)
class ActiveConsequence:
    consequence_id: str
    trigger_week: int
    current_stage: ConsequenceStage = ConsequenceStage.INITIAL
    next_escalation_week: int = 0
    escalation_events: tuple[EscalationEvent, ...] = ()
    severity: str = "medium"
    recovery_possible: bool = True
    recovery_difficulty: float = 0.3
    times_escalated: int = 0
    times_resurfaced: int = 0
    resume_stage: ConsequenceStage | None = None
    description: str = ""
    tags: tuple[str, ...] = ()
    resurface_conditions: ResurfaceConditions = field(default_factory=ResurfaceConditions)
    resurface_probability: float = 0.05


@dataclass(frozen=True)
class DormantConsequence:
    consequence_id: str
    trigger_week: int
    resurface_conditions: ResurfaceConditions = field(default_factory=ResurfaceConditions)
    resurface_probability: float = 0.5
    times_resurfaced: int = 0
    resurface_events: tuple[EscalationEvent, ...] = ()
    escalation_events: tuple[EscalationEvent, ...] = ()
    retained_stage: ConsequenceStage | None = None
    times_escalated: int = 0
    recovery_possible: bool = True
    recovery_difficulty: float = 0.3
    severity: str = "medium"
    description: str = ""
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConsequenceLedger:
    active: tuple[ActiveConsequence, ...] = ()
    dormant: tuple[DormantConsequence, ...] = ()

    def find_active(self, consequence_id: str) -> ActiveConsequence | None:
        for row in self.active:
            if row.consequence_id == consequence_id:
                return row
        return None

    def find_dormant(self, consequence_id: str) -> DormantConsequence | None:
        for row in self.dormant:
            if row.consequence_id == consequence_id:
                return row
        return None


@dataclass(frozen=True)
class ConsequenceTrigger:
    """What a player choice asks the consequence machine to start tracking."""

    consequence_id: str | None = None
    dormant: bool = False
    escalation_delay: int = DEFAULT_ESCALATION_DELAY_WEEKS
    escalation_events: tuple[EscalationEvent, ...] = ()
    severity: str = "medium"
    recovery_possible: bool = True
    recovery_difficulty: float = 0.3
    resurface_conditions: ResurfaceConditions = field(default_factory=ResurfaceConditions)
    resurface_probability: float = 0.5
    resurface_events: tuple[EscalationEvent, ...] = ()
    description: str = ""
    tags: tuple[str, ...] = ()
