from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field
from typing import List, Sequence

from gigsim.application.dtos import EscalationNotice
from gigsim.application.services import consequence_service, faction_service, psychology_service
from gigsim.domain.events import FactionStandingChanged
from gigsim.domain.models.choice import PlayerChoice
from gigsim.domain.models.snapshot import Snapshot


@dataclass
class ChoiceOutcome:
    snapshot: Snapshot
    notices: List[EscalationNotice] = field(default_factory=list)
    faction_changes: List[FactionStandingChanged] = field(default_factory=list)


def fold_choice(snapshot: Snapshot, choice: PlayerChoice, *, rng: random.Random, outcome: ChoiceOutcome) -> None:
    week = int(snapshot.week)
    for faction_id, amount in choice.faction_effects.items():
        snapshot.factions, changed = faction_service.apply_delta(snapshot.factions, faction_id, amount, week)
        if changed is not None:
            outcome.faction_changes.append(
                FactionStandingChanged(
                    faction_id=changed.faction_id,
                    delta=float(amount),
                    standing_after=changed.current_standing,
                    week=week,
                    reason=choice.choice_id,
                )
            )

    for key, amount in choice.psychological_effects.items():
        snapshot.psychology = psychology_service.apply_effect(snapshot.psychology, key, amount)

    if choice.consequence is not None:
        update = consequence_service.trigger_consequence(snapshot.consequences, choice.consequence, week)
        snapshot.consequences = update.ledger

    if choice.resolve_consequence:
        snapshot.consequences = consequence_service.resolve(snapshot.consequences, choice.resolve_consequence).ledger
    if choice.demote_consequence:
        snapshot.consequences = consequence_service.demote(snapshot.consequences, choice.demote_consequence).ledger

    if choice.event_type:
        update = consequence_service.check_resurfacing(
            snapshot.consequences,
            week=week,
            fame=snapshot.fame,
            rng=rng,
            event_type=choice.event_type,
        )
        snapshot.consequences = update.ledger
        outcome.notices.extend(update.notices)


def apply_choices(snapshot: Snapshot, choices: Sequence[PlayerChoice], *, rng: random.Random) -> ChoiceOutcome:
    """Fold choices strictly in issue order; later deltas see earlier clamps."""

    working = copy.deepcopy(snapshot)
    outcome = ChoiceOutcome(snapshot=working)
    for choice in choices:
        fold_choice(working, choice, rng=rng, outcome=outcome)
    working.choice_rolls = int(working.choice_rolls) + 1
    return outcome
