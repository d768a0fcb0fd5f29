from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import List

from gigsim.application.dtos import EscalationNotice
from gigsim.application.services.balance_tables import (
    CONSEQUENCE_ACTIVE_MAX_AGE_WEEKS,
    CONSEQUENCE_DORMANT_MAX_AGE_WEEKS,
    DEMOTED_RESURFACE_PROBABILITY,
)
from gigsim.domain.models.consequence import (
    DEFAULT_ESCALATION_DELAY_WEEKS,
    RESURFACE_ESCALATION_DELAY_WEEKS,
    ActiveConsequence,
    ConsequenceLedger,
    ConsequenceStage,
    ConsequenceTrigger,
    DormantConsequence,
    EscalationEvent,
    next_stage,
)


logger = logging.getLogger(__name__)

_DEFAULT_ESCALATION_TEXT = "Consequence escalated"
_DEFAULT_RESURFACE_TEXT = "A past consequence returns to haunt you"
_NO_RECOVERY_STAGES = {ConsequenceStage.POINT_OF_NO_RETURN, ConsequenceStage.IRREVERSIBLE}


@dataclass
class LedgerUpdate:
    ledger: ConsequenceLedger
    notices: List[EscalationNotice] = field(default_factory=list)
    changed: bool = False


def _next_id(ledger: ConsequenceLedger, prefix: str, week: int) -> str:
    taken = {row.consequence_id for row in ledger.active} | {row.consequence_id for row in ledger.dormant}
    index = len(taken) + 1
    candidate = f"{prefix}_w{int(week)}_{index}"
    while candidate in taken:
        index += 1
        candidate = f"{prefix}_w{int(week)}_{index}"
    return candidate


def _known(ledger: ConsequenceLedger, consequence_id: str) -> bool:
    return ledger.find_active(consequence_id) is not None or ledger.find_dormant(consequence_id) is not None


def add_active(ledger: ConsequenceLedger, trigger: ConsequenceTrigger, week: int) -> LedgerUpdate:
    consequence_id = str(trigger.consequence_id or _next_id(ledger, "consequence", week))
    if _known(ledger, consequence_id):
        logger.warning("Consequence already tracked; ignoring duplicate", extra={"consequence_id": consequence_id})
        return LedgerUpdate(ledger=ledger)
    delay = max(1, int(trigger.escalation_delay or DEFAULT_ESCALATION_DELAY_WEEKS))
    row = ActiveConsequence(
        consequence_id=consequence_id,
        trigger_week=int(week),
        current_stage=ConsequenceStage.INITIAL,
        next_escalation_week=int(week) + delay,
        escalation_events=tuple(trigger.escalation_events),
        severity=trigger.severity,
        recovery_possible=bool(trigger.recovery_possible),
        recovery_difficulty=float(trigger.recovery_difficulty),
        description=trigger.description,
        tags=tuple(trigger.tags),
        resurface_conditions=trigger.resurface_conditions,
        resurface_probability=DEMOTED_RESURFACE_PROBABILITY,
    )
    return LedgerUpdate(ledger=replace(ledger, active=ledger.active + (row,)), changed=True)


def add_dormant(ledger: ConsequenceLedger, trigger: ConsequenceTrigger, week: int) -> LedgerUpdate:
    consequence_id = str(trigger.consequence_id or _next_id(ledger, "dormant", week))
    if _known(ledger, consequence_id):
        logger.warning("Consequence already tracked; ignoring duplicate", extra={"consequence_id": consequence_id})
        return LedgerUpdate(ledger=ledger)
    row = DormantConsequence(
        consequence_id=consequence_id,
        trigger_week=int(week),
        resurface_conditions=trigger.resurface_conditions,
        resurface_probability=max(0.0, min(1.0, float(trigger.resurface_probability))),
        resurface_events=tuple(trigger.resurface_events),
        escalation_events=tuple(trigger.escalation_events),
        recovery_possible=bool(trigger.recovery_possible),
        recovery_difficulty=float(trigger.recovery_difficulty),
        severity=trigger.severity,
        description=trigger.description,
        tags=tuple(trigger.tags),
    )
    return LedgerUpdate(ledger=replace(ledger, dormant=ledger.dormant + (row,)), changed=True)


def trigger_consequence(ledger: ConsequenceLedger, trigger: ConsequenceTrigger, week: int) -> LedgerUpdate:
    if trigger.dormant:
        return add_dormant(ledger, trigger, week)
    return add_active(ledger, trigger, week)


def _escalation_event(row: ActiveConsequence) -> EscalationEvent | None:
    if not row.escalation_events:
        return None
    index = min(int(row.times_escalated), len(row.escalation_events) - 1)
    return row.escalation_events[index]


def _to_dormant(row: ActiveConsequence) -> DormantConsequence:
    return DormantConsequence(
        consequence_id=row.consequence_id,
        trigger_week=row.trigger_week,
        resurface_conditions=row.resurface_conditions,
        resurface_probability=row.resurface_probability,
        times_resurfaced=row.times_resurfaced,
        escalation_events=row.escalation_events,
        retained_stage=row.current_stage if row.current_stage != ConsequenceStage.RESURFACED else row.resume_stage,
        times_escalated=row.times_escalated,
        recovery_possible=row.recovery_possible,
        recovery_difficulty=row.recovery_difficulty,
        severity=row.severity,
        description=row.description,
        tags=row.tags,
    )


def process_escalations(
    ledger: ConsequenceLedger,
    week: int,
    *,
    demote_at: ConsequenceStage | None = ConsequenceStage.CRITICAL,
) -> LedgerUpdate:
    """Advance every due active consequence by exactly one stage."""

    week = int(week)
    active: list[ActiveConsequence] = []
    demoted: list[DormantConsequence] = []
    notices: list[EscalationNotice] = []
    for row in ledger.active:
        if week < int(row.next_escalation_week) or row.current_stage == ConsequenceStage.IRREVERSIBLE:
            active.append(row)
            continue
        new_stage = next_stage(row.current_stage, row.resume_stage)
        event = _escalation_event(row)
        delay = DEFAULT_ESCALATION_DELAY_WEEKS
        if event is not None and event.escalation_delay:
            delay = int(event.escalation_delay)
        escalated = replace(
            row,
            current_stage=new_stage,
            next_escalation_week=week + max(1, delay),
            times_escalated=int(row.times_escalated) + 1,
            resume_stage=None,
            recovery_possible=row.recovery_possible and new_stage not in _NO_RECOVERY_STAGES,
        )
        notices.append(
            EscalationNotice(
                consequence_id=row.consequence_id,
                previous_stage=row.current_stage.value,
                new_stage=new_stage.value,
                description=(event.description if event is not None and event.description else row.description)
                or _DEFAULT_ESCALATION_TEXT,
                severity=row.severity,
            )
        )
        logger.debug(
            "Consequence escalated",
            extra={"consequence_id": row.consequence_id, "stage": new_stage.value, "week": week},
        )
        if demote_at is not None and new_stage == demote_at:
            demoted.append(_to_dormant(escalated))
        else:
            active.append(escalated)
    if not notices:
        return LedgerUpdate(ledger=ledger)
    return LedgerUpdate(
        ledger=ConsequenceLedger(active=tuple(active), dormant=ledger.dormant + tuple(demoted)),
        notices=notices,
        changed=True,
    )


def _resurface(row: DormantConsequence, week: int, rng: random.Random) -> tuple[ActiveConsequence, EscalationNotice]:
    times = int(row.times_resurfaced) + 1
    description = row.description or _DEFAULT_RESURFACE_TEXT
    if row.resurface_events:
        event = row.resurface_events[rng.randrange(len(row.resurface_events))]
        description = event.description or description
    promoted = ActiveConsequence(
        consequence_id=row.consequence_id,
        trigger_week=row.trigger_week,
        current_stage=ConsequenceStage.RESURFACED,
        next_escalation_week=int(week) + RESURFACE_ESCALATION_DELAY_WEEKS,
        escalation_events=row.escalation_events,
        severity=row.severity,
        recovery_possible=row.recovery_possible,
        recovery_difficulty=row.recovery_difficulty,
        times_escalated=row.times_escalated,
        times_resurfaced=times,
        resume_stage=row.retained_stage or ConsequenceStage.INITIAL,
        description=row.description,
        tags=row.tags,
        resurface_conditions=row.resurface_conditions,
        resurface_probability=row.resurface_probability,
    )
    notice = EscalationNotice(
        consequence_id=row.consequence_id,
        previous_stage="dormant",
        new_stage=ConsequenceStage.RESURFACED.value,
        description=description,
        severity=row.severity,
        resurfaced=True,
        times_resurfaced=times,
    )
    return promoted, notice


def check_resurfacing(
    ledger: ConsequenceLedger,
    *,
    week: int,
    fame: int,
    rng: random.Random,
    event_type: str | None = None,
) -> LedgerUpdate:
    """Roll each dormant consequence whose conditions hold; winners return to the active pool."""

    dormant: list[DormantConsequence] = []
    promoted: list[ActiveConsequence] = []
    notices: list[EscalationNotice] = []
    for row in ledger.dormant:
        if not row.resurface_conditions.matches(fame=fame, event_type=event_type):
            dormant.append(row)
            continue
        if rng.random() >= float(row.resurface_probability):
            dormant.append(row)
            continue
        active_row, notice = _resurface(row, week, rng)
        promoted.append(active_row)
        notices.append(notice)
        logger.debug("Consequence resurfaced", extra={"consequence_id": row.consequence_id, "week": int(week)})
    if not notices:
        return LedgerUpdate(ledger=ledger)
    return LedgerUpdate(
        ledger=ConsequenceLedger(active=ledger.active + tuple(promoted), dormant=tuple(dormant)),
        notices=notices,
        changed=True,
    )


def demote(ledger: ConsequenceLedger, consequence_id: str) -> LedgerUpdate:
    row = ledger.find_active(str(consequence_id))
    if row is None:
        logger.warning("Unknown consequence id; demote ignored", extra={"consequence_id": consequence_id})
        return LedgerUpdate(ledger=ledger)
    active = tuple(item for item in ledger.active if item.consequence_id != row.consequence_id)
    return LedgerUpdate(
        ledger=ConsequenceLedger(active=active, dormant=ledger.dormant + (_to_dormant(row),)),
        changed=True,
    )


def resolve(ledger: ConsequenceLedger, consequence_id: str) -> LedgerUpdate:
    row = ledger.find_active(str(consequence_id))
    if row is None:
        logger.warning("Unknown consequence id; resolve ignored", extra={"consequence_id": consequence_id})
        return LedgerUpdate(ledger=ledger)
    if not row.recovery_possible:
        return LedgerUpdate(ledger=ledger)
    active = tuple(item for item in ledger.active if item.consequence_id != row.consequence_id)
    return LedgerUpdate(ledger=replace(ledger, active=active), changed=True)


def prune_stale(ledger: ConsequenceLedger, week: int) -> LedgerUpdate:
    week = int(week)
    active = tuple(row for row in ledger.active if week - int(row.trigger_week) < CONSEQUENCE_ACTIVE_MAX_AGE_WEEKS)
    dormant = tuple(row for row in ledger.dormant if week - int(row.trigger_week) < CONSEQUENCE_DORMANT_MAX_AGE_WEEKS)
    changed = len(active) != len(ledger.active) or len(dormant) != len(ledger.dormant)
    if not changed:
        return LedgerUpdate(ledger=ledger)
    return LedgerUpdate(ledger=ConsequenceLedger(active=active, dormant=dormant), changed=True)
