from __future__ import annotations

import logging
from dataclasses import replace

from gigsim.domain.models.psychology import (
    MENTAL_HEALTH_FIELDS,
    AddictionPath,
    CorruptionMilestone,
    CorruptionPath,
    PsychologicalEvolution,
)


logger = logging.getLogger(__name__)

_FIELD_ALIASES = {"stress_level": "stress", "stresslevel": "stress"}


def corruption_stage(level: float, milestones: tuple[CorruptionMilestone, ...]) -> str | None:
    stage = None
    for milestone in sorted(milestones, key=lambda row: row.threshold):
        if milestone.threshold <= level:
            stage = milestone.stage
    return stage


def apply_corruption(state: PsychologicalEvolution, amount: float) -> PsychologicalEvolution:
    path = state.corruption
    level = max(0.0, min(100.0, float(path.current_level) + float(amount)))
    corruption = CorruptionPath(
        current_level=level,
        stage=corruption_stage(level, path.milestones),
        milestones=path.milestones,
    )
    return replace(state, corruption=corruption)


def apply_addiction(state: PsychologicalEvolution, amount: int) -> PsychologicalEvolution:
    """Escalation moves one stage; recovery may drop several, counting the attempt."""

    path = state.addiction
    steps = int(amount)
    if steps == 0:
        return state
    index = path.stage_index
    recovery_attempts = path.recovery_attempts
    if steps > 0:
        index = min(len(path.stages) - 1, index + 1)
    else:
        index = max(0, index + steps)
        recovery_attempts += 1
    addiction = AddictionPath(
        current_stage=path.stages[index],
        stages=path.stages,
        recovery_attempts=recovery_attempts,
    )
    return replace(state, addiction=addiction)


def apply_mental_health(state: PsychologicalEvolution, field_name: str, amount: float) -> PsychologicalEvolution:
    key = _FIELD_ALIASES.get(str(field_name).strip().lower(), str(field_name).strip().lower())
    if key not in MENTAL_HEALTH_FIELDS:
        logger.warning("Unknown mental health field; delta ignored", extra={"field_name": field_name})
        return state
    current = float(getattr(state.mental_health, key))
    value = max(0.0, min(100.0, current + float(amount)))
    return replace(state, mental_health=replace(state.mental_health, **{key: value}))


def apply_effect(state: PsychologicalEvolution, key: str, amount: float) -> PsychologicalEvolution:
    normalized = str(key).strip().lower()
    if normalized == "corruption":
        return apply_corruption(state, amount)
    if normalized == "addiction":
        return apply_addiction(state, int(amount))
    return apply_mental_health(state, normalized, amount)
