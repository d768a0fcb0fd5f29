from __future__ import annotations

import copy
import logging
from typing import Sequence

from gigsim.application.dtos import ChartEntry
from gigsim.application.services.balance_tables import CHART_SIZE, DEFAULT_GENRES, RIVAL_STALE_AFTER_WEEKS
from gigsim.domain.models.snapshot import Snapshot
from gigsim.domain.repositories import RivalContentGenerator


logger = logging.getLogger(__name__)


def needs_rival_refresh(snapshot: Snapshot, max_age_weeks: int = RIVAL_STALE_AFTER_WEEKS) -> bool:
    return snapshot.rivals is None or snapshot.rivals.is_stale(snapshot.week, max_age_weeks)


def refresh_rivals(
    snapshot: Snapshot,
    generator: RivalContentGenerator,
    genres: Sequence[str] | None = None,
) -> Snapshot:
    """Regenerate the cached rival catalog only when it has gone stale."""

    if not needs_rival_refresh(snapshot):
        return snapshot
    catalog = generator.generate(
        week=snapshot.week,
        seed=snapshot.rng_seed,
        genres=list(genres) if genres else list(DEFAULT_GENRES),
    )
    updated = copy.deepcopy(snapshot)
    updated.rivals = catalog
    logger.debug("Rival catalog regenerated", extra={"week": snapshot.week, "entries": len(catalog.entries)})
    return updated


def build_chart(snapshot: Snapshot, size: int = CHART_SIZE) -> list[ChartEntry]:
    rows: list[tuple[int, str, str, bool]] = []
    artist = snapshot.band_name or "Your Band"
    for song in snapshot.songs:
        rows.append((song.chart_score, song.title, artist, True))
    if snapshot.rivals is not None:
        for entry in snapshot.rivals.entries:
            rows.append((int(entry.chart_score), entry.title, entry.band_name, False))
    rows.sort(key=lambda row: (-row[0], not row[3], row[1]))
    return [
        ChartEntry(rank=index + 1, title=title, artist=band, score=score, is_player=is_player)
        for index, (score, title, band, is_player) in enumerate(rows[: max(0, int(size))])
    ]
