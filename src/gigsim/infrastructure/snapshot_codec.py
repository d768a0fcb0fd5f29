from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Any, Mapping

from gigsim.domain.models.catalog import Album, MerchandiseItem, Song
from gigsim.domain.models.consequence import (
    ActiveConsequence,
    ConsequenceLedger,
    ConsequenceStage,
    DormantConsequence,
    EscalationEvent,
    ResurfaceConditions,
)
from gigsim.domain.models.faction import FactionStanding
from gigsim.domain.models.label import LabelDeal
from gigsim.domain.models.psychology import (
    AddictionPath,
    CorruptionMilestone,
    CorruptionPath,
    MentalHealth,
    PsychologicalEvolution,
)
from gigsim.domain.models.snapshot import Equipment, RivalCatalog, RivalEntry, Snapshot, Staff
from gigsim.domain.models.trend import GenrePopularity, GenreTrend, TrendStrength


logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _jsonable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(item) for item in value)
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    payload = _jsonable(asdict(snapshot))
    payload["schema_version"] = SCHEMA_VERSION
    return payload


def _events(rows: Any) -> tuple[EscalationEvent, ...]:
    events = []
    for row in rows or ():
        if not isinstance(row, Mapping):
            continue
        delay = row.get("escalation_delay")
        events.append(
            EscalationEvent(
                event_id=str(row.get("event_id", "")),
                description=str(row.get("description", "")),
                escalation_delay=int(delay) if delay is not None else None,
            )
        )
    return tuple(events)


def _conditions(raw: Any) -> ResurfaceConditions:
    raw = raw if isinstance(raw, Mapping) else {}
    return ResurfaceConditions(
        fame_levels=tuple(int(level) for level in raw.get("fame_levels", ()) or ()),
        event_types=frozenset(str(kind) for kind in raw.get("event_types", ()) or ()),
    )


def _optional_stage(raw: Any) -> ConsequenceStage | None:
    return ConsequenceStage.normalize(raw) if raw else None


def _rows_with_id(rows: Any, id_key: str, kind: str) -> list[Mapping[str, Any]]:
    """Rows missing their id are dropped so one bad entry cannot block the session."""

    kept = []
    for row in rows or ():
        if isinstance(row, Mapping) and str(row.get(id_key) or "").strip():
            kept.append(row)
            continue
        logger.warning("Skipping malformed saved row", extra={"kind": kind, "row": repr(row)[:200]})
    return kept


def _active(row: Mapping[str, Any]) -> ActiveConsequence:
    return ActiveConsequence(
        consequence_id=str(row["consequence_id"]),
        trigger_week=int(row.get("trigger_week", 0)),
        current_stage=ConsequenceStage.normalize(row.get("current_stage")),
        next_escalation_week=int(row.get("next_escalation_week", 0)),
        escalation_events=_events(row.get("escalation_events")),
        severity=str(row.get("severity", "medium")),
        recovery_possible=bool(row.get("recovery_possible", True)),
        recovery_difficulty=float(row.get("recovery_difficulty", 0.3)),
        times_escalated=int(row.get("times_escalated", 0)),
        times_resurfaced=int(row.get("times_resurfaced", 0)),
        resume_stage=_optional_stage(row.get("resume_stage")),
        description=str(row.get("description", "")),
        tags=tuple(row.get("tags", ()) or ()),
        resurface_conditions=_conditions(row.get("resurface_conditions")),
        resurface_probability=float(row.get("resurface_probability", 0.05)),
    )


def _dormant(row: Mapping[str, Any]) -> DormantConsequence:
    return DormantConsequence(
        consequence_id=str(row["consequence_id"]),
        trigger_week=int(row.get("trigger_week", 0)),
        resurface_conditions=_conditions(row.get("resurface_conditions")),
        resurface_probability=float(row.get("resurface_probability", 0.5)),
        times_resurfaced=int(row.get("times_resurfaced", 0)),
        resurface_events=_events(row.get("resurface_events")),
        escalation_events=_events(row.get("escalation_events")),
        retained_stage=_optional_stage(row.get("retained_stage")),
        times_escalated=int(row.get("times_escalated", 0)),
        recovery_possible=bool(row.get("recovery_possible", True)),
        recovery_difficulty=float(row.get("recovery_difficulty", 0.3)),
        severity=str(row.get("severity", "medium")),
        description=str(row.get("description", "")),
        tags=tuple(row.get("tags", ()) or ()),
    )


def _faction(key: str, row: Mapping[str, Any]) -> FactionStanding:
    faction_id = str(row.get("faction_id") or key)
    last_activity = row.get("last_activity_week", 0)
    decayed_through = row.get("decayed_through_week")
    return FactionStanding(
        faction_id=faction_id,
        name=str(row.get("name", faction_id)),
        current_standing=float(row.get("current_standing", 0)),
        min_standing=float(row.get("min_standing", -100)),
        max_standing=float(row.get("max_standing", 100)),
        decay_per_week=float(row.get("decay_per_week", 1)),
        last_activity_week=int(last_activity) if last_activity is not None else None,
        decayed_through_week=int(decayed_through) if decayed_through is not None else None,
        values=tuple(row.get("values", ()) or ()),
    )


def _psychology(raw: Any) -> PsychologicalEvolution:
    raw = raw if isinstance(raw, Mapping) else {}
    corruption = raw.get("corruption") or {}
    addiction = raw.get("addiction") or {}
    mental = raw.get("mental_health") or {}
    defaults = CorruptionPath()
    milestones = tuple(
        CorruptionMilestone(int(row["threshold"]), str(row["stage"]), tuple(row.get("unlocks", ()) or ()))
        for row in corruption.get("milestones", ()) or ()
    ) or defaults.milestones
    addiction_defaults = AddictionPath()
    return PsychologicalEvolution(
        corruption=CorruptionPath(
            current_level=float(corruption.get("current_level", 0)),
            stage=corruption.get("stage"),
            milestones=milestones,
        ),
        addiction=AddictionPath(
            current_stage=str(addiction.get("current_stage", addiction_defaults.current_stage)),
            stages=tuple(addiction.get("stages", ()) or addiction_defaults.stages),
            recovery_attempts=int(addiction.get("recovery_attempts", 0)),
        ),
        mental_health=MentalHealth(**{key: float(val) for key, val in mental.items() if key in MentalHealth.__dataclass_fields__}),
    )


def _trend(raw: Any) -> GenreTrend | None:
    if not isinstance(raw, Mapping):
        return None
    genre = str(raw.get("genre") or "").strip()
    strengths = {level.value: level for level in TrendStrength}
    strength = strengths.get(str(raw.get("strength", TrendStrength.MINOR.value)))
    if not genre or strength is None:
        logger.warning("Dropping malformed saved trend", extra={"trend": repr(raw)[:200]})
        return None
    return GenreTrend(
        genre=genre,
        modifier=float(raw.get("modifier", 0)),
        weeks_remaining=int(raw.get("weeks_remaining", 0)),
        strength=strength,
    )


def _label_deal(raw: Any) -> LabelDeal | None:
    if not isinstance(raw, Mapping):
        return None
    row = dict(raw)
    row.setdefault("weeks_remaining", int(row.get("contract_weeks", 0) or 0))
    return LabelDeal(**row)


def _rivals(raw: Any) -> RivalCatalog | None:
    if not isinstance(raw, Mapping):
        return None
    return RivalCatalog(
        generated_week=int(raw.get("generated_week", 0)),
        entries=tuple(RivalEntry(**row) for row in raw.get("entries", ()) or ()),
    )


def snapshot_from_dict(payload: Mapping[str, Any]) -> Snapshot:
    """Missing keys fall back to dataclass defaults so older saves still load."""

    equipment = payload.get("equipment") or {}
    staff = payload.get("staff") or {}
    label = payload.get("label_deal")
    ledger = payload.get("consequences") or {}
    return Snapshot(
        band_name=str(payload.get("band_name", "")),
        genre=str(payload.get("genre", "Pop")),
        week=int(payload.get("week", 0)),
        money=int(payload.get("money", 0)),
        fame=int(payload.get("fame", 0)),
        fans=int(payload.get("fans", 0)),
        difficulty=payload.get("difficulty", "normal"),
        members=[str(member) for member in payload.get("members", ()) or ()],
        equipment=Equipment(**equipment),
        staff=Staff(**staff),
        label_deal=_label_deal(label),
        studio_tier=str(payload.get("studio_tier", "demo")),
        songs=[Song(**row) for row in payload.get("songs", ()) or ()],
        albums=[Album(**row) for row in payload.get("albums", ()) or ()],
        merchandise=[MerchandiseItem(**row) for row in payload.get("merchandise", ()) or ()],
        trend=_trend(payload.get("trend")),
        genre_trends={
            str(genre): GenrePopularity(**row) for genre, row in (payload.get("genre_trends") or {}).items()
        },
        consequences=ConsequenceLedger(
            active=tuple(_active(row) for row in _rows_with_id(ledger.get("active"), "consequence_id", "active consequence")),
            dormant=tuple(_dormant(row) for row in _rows_with_id(ledger.get("dormant"), "consequence_id", "dormant consequence")),
        ),
        factions={
            str(key): _faction(str(key), row)
            for key, row in (payload.get("factions") or {}).items()
            if isinstance(row, Mapping)
        },
        psychology=_psychology(payload.get("psychology")),
        rivals=_rivals(payload.get("rivals")),
        rng_seed=int(payload.get("rng_seed", 1)),
        choice_rolls=int(payload.get("choice_rolls", 0)),
        total_revenue=int(payload.get("total_revenue", 0)),
        weekly_expenses=int(payload.get("weekly_expenses", 0)),
    )


def dumps(snapshot: Snapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot), sort_keys=True, separators=(",", ":"))


def loads(raw: str) -> Snapshot:
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("Snapshot payload must be a JSON object")
    return snapshot_from_dict(payload)
