from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Mapping

from gigsim.domain.models.faction import FactionStanding, FactionStatus, standing_status


logger = logging.getLogger(__name__)

BENEFIT_THRESHOLD = 70
THREAT_THRESHOLD = -70


@dataclass(frozen=True)
class FactionInfluence:
    kind: str
    faction_id: str
    faction_name: str
    intensity: str
    probability: float


def default_factions() -> dict[str, FactionStanding]:
    rows = (
        FactionStanding(
            faction_id="underground_scene",
            name="Underground Scene",
            current_standing=50,
            decay_per_week=1,
            last_activity_week=0,
            values=("authenticity", "anti_establishment", "artistic_integrity"),
        ),
        FactionStanding(
            faction_id="corporate_industry",
            name="Corporate Music Industry",
            current_standing=50,
            decay_per_week=1,
            last_activity_week=0,
            values=("profitability", "marketability", "brand_safety"),
        ),
        FactionStanding(
            faction_id="criminal_underworld",
            name="Criminal Networks",
            current_standing=0,
            min_standing=0,
            max_standing=100,
            decay_per_week=0,
            last_activity_week=None,
            values=("loyalty", "silence", "mutual_benefit"),
        ),
        FactionStanding(
            faction_id="law_enforcement",
            name="Law Enforcement",
            current_standing=50,
            decay_per_week=0.5,
            last_activity_week=0,
            values=("law_and_order", "cooperation", "public_safety"),
        ),
    )
    return {row.faction_id: row for row in rows}


def apply_delta(
    factions: Mapping[str, FactionStanding],
    faction_id: str,
    amount: float,
    week: int,
) -> tuple[dict[str, FactionStanding], FactionStanding | None]:
    """Clamp the new standing and restart the faction's decay clock."""

    updated = dict(factions)
    row = updated.get(str(faction_id))
    if row is None:
        logger.warning("Unknown faction id; delta ignored", extra={"faction_id": faction_id})
        return updated, None
    standing = row.clamp(float(row.current_standing) + float(amount))
    stamped = None if row.never_forgets else int(week)
    changed = replace(row, current_standing=standing, last_activity_week=stamped, decayed_through_week=None)
    updated[row.faction_id] = changed
    return updated, changed


def _decay_toward_zero(row: FactionStanding, amount: float) -> float:
    standing = float(row.current_standing)
    if standing > 0:
        standing = max(0.0, standing - amount)
    elif standing < 0:
        standing = min(0.0, standing + amount)
    return row.clamp(standing)


def apply_weekly_decay(factions: Mapping[str, FactionStanding], week: int) -> dict[str, FactionStanding]:
    week = int(week)
    updated: dict[str, FactionStanding] = {}
    for faction_id, row in factions.items():
        # Never-forget factions keep a None activity clock and never drift.
        if row.never_forgets:
            updated[faction_id] = row
            continue
        # Weeks already charged are skipped, so each idle week is charged once however often this runs.
        since = int(row.last_activity_week)
        if row.decayed_through_week is not None:
            since = max(since, int(row.decayed_through_week))
        elapsed = week - since
        if elapsed <= 0:
            updated[faction_id] = row
            continue
        standing = _decay_toward_zero(row, float(row.decay_per_week) * elapsed)
        updated[faction_id] = replace(row, current_standing=standing, decayed_through_week=week)
    return updated


def faction_status(factions: Mapping[str, FactionStanding], faction_id: str) -> FactionStatus:
    row = factions.get(str(faction_id))
    return standing_status(row.current_standing if row is not None else 0)


def faction_influenced_events(factions: Mapping[str, FactionStanding]) -> list[FactionInfluence]:
    rows: list[FactionInfluence] = []
    for faction_id, row in factions.items():
        if row.current_standing > BENEFIT_THRESHOLD:
            rows.append(FactionInfluence("faction_benefit", faction_id, row.name, "positive", 0.7))
        elif row.current_standing < THREAT_THRESHOLD:
            rows.append(FactionInfluence("faction_threat", faction_id, row.name, "negative", 0.8))
    return rows
