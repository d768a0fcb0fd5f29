from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable, Sequence
from contextlib import contextmanager
from typing import Iterator

from gigsim.application.dtos import ActionResult, ChartEntry, EscalationNotice, WeekReport
from gigsim.application.services import catalog_actions, chart_service, consequence_service, faction_service
from gigsim.application.services.balance_tables import CHART_SIZE, DEFAULT_GENRES
from gigsim.application.services.choice_service import apply_choices
from gigsim.application.services.event_bus import EventBus
from gigsim.application.services.new_game import new_snapshot, with_demo_catalog
from gigsim.application.services.seed_policy import week_rng
from gigsim.application.services.weekly_tick import advance_week
from gigsim.domain.errors import InsufficientFundsError, SimulationError, TickInProgressError, UnknownSessionError
from gigsim.domain.events import (
    AlbumReleased,
    ConsequenceEscalated,
    ConsequenceResurfaced,
    WeekAdvanced,
)
from gigsim.domain.models.catalog import MerchandiseItem
from gigsim.domain.models.choice import PlayerChoice
from gigsim.domain.models.consequence import ConsequenceStage
from gigsim.domain.models.snapshot import Snapshot
from gigsim.domain.repositories import GenreCatalogSource, RivalContentGenerator, SnapshotRepository


logger = logging.getLogger(__name__)


def _rejected(exc: SimulationError) -> ActionResult:
    required = exc.required if isinstance(exc, InsufficientFundsError) else None
    return ActionResult(messages=[str(exc)], accepted=False, reason=exc.reason, required_amount=required)


class SimulationService:
    """Per-session façade: load, apply one operation, save, publish."""

    def __init__(
        self,
        snapshot_repo: SnapshotRepository,
        event_bus: EventBus | None = None,
        genre_source: GenreCatalogSource | None = None,
        rival_generator: RivalContentGenerator | None = None,
        rng_factory: Callable[[str, Snapshot], random.Random] | None = None,
        demote_at: ConsequenceStage | None = ConsequenceStage.CRITICAL,
    ) -> None:
        self.snapshot_repo = snapshot_repo
        self.event_bus = event_bus or EventBus()
        self.genre_source = genre_source
        self.rival_generator = rival_generator
        self.rng_factory = rng_factory
        self.demote_at = demote_at
        self._genres: list[str] | None = None
        self._lock = threading.Lock()
        self._busy: set[str] = set()

    @contextmanager
    def _session_guard(self, session_id: str) -> Iterator[None]:
        with self._lock:
            if session_id in self._busy:
                raise TickInProgressError(session_id)
            self._busy.add(session_id)
        try:
            yield
        finally:
            with self._lock:
                self._busy.discard(session_id)

    def _rng(self, namespace: str, snapshot: Snapshot, batch: int | None = None) -> random.Random:
        if self.rng_factory is not None:
            return self.rng_factory(namespace, snapshot)
        return week_rng(namespace, seed=snapshot.rng_seed, week=snapshot.week, batch=batch)

    def genres(self) -> list[str]:
        if self._genres is None:
            genres = self.genre_source.genres() if self.genre_source is not None else []
            self._genres = list(genres) or list(DEFAULT_GENRES)
        return list(self._genres)

    def _load(self, session_id: str) -> Snapshot:
        snapshot = self.snapshot_repo.load(session_id)
        if snapshot is None:
            raise UnknownSessionError(session_id)
        return snapshot

    def new_session(
        self,
        session_id: str,
        band_name: str,
        *,
        genre: str = "Pop",
        difficulty: str = "normal",
        seed: int = 1,
        members: Sequence[str] = (),
        demo_catalog: bool = False,
    ) -> Snapshot:
        snapshot = new_snapshot(band_name, genre=genre, difficulty=difficulty, seed=seed, members=members)
        if demo_catalog:
            snapshot = with_demo_catalog(snapshot)
        if self.rival_generator is not None:
            snapshot = chart_service.refresh_rivals(snapshot, self.rival_generator, self.genres())
        self.snapshot_repo.save(session_id, snapshot)
        return snapshot

    def snapshot(self, session_id: str) -> Snapshot | None:
        return self.snapshot_repo.load(session_id)

    def apply_choices(self, session_id: str, choices: Sequence[PlayerChoice]) -> ActionResult:
        try:
            with self._session_guard(session_id):
                snapshot = self._load(session_id)
                rng = self._rng("choices", snapshot, batch=snapshot.choice_rolls)
                outcome = apply_choices(snapshot, choices, rng=rng)
                self.snapshot_repo.save(session_id, outcome.snapshot)
        except SimulationError as exc:
            return _rejected(exc)

        for change in outcome.faction_changes:
            self.event_bus.publish(change)
        self._publish_notices(outcome.notices, outcome.snapshot.week)
        messages = [f"Applied {len(choices)} choice(s)."]
        messages.extend(notice.description for notice in outcome.notices)
        return ActionResult(messages=messages)

    def advance_week(self, session_id: str, rng: random.Random | None = None) -> WeekReport:
        """Tick, then escalate, resurface, prune and decay factions; the save happens once at the end.

        Choices are folded beforehand through :meth:`apply_choices`.
        """

        with self._session_guard(session_id):
            snapshot = self._load(session_id)
            tick_rng = rng or self._rng("week.tick", snapshot)
            tick = advance_week(snapshot, self.genres(), rng=tick_rng)
            nxt = tick.snapshot
            week = nxt.week

            escalation = consequence_service.process_escalations(nxt.consequences, week, demote_at=self.demote_at)
            resurfacing = consequence_service.check_resurfacing(
                escalation.ledger,
                week=week,
                fame=nxt.fame,
                rng=rng or self._rng("week.consequences", nxt),
            )
            nxt.consequences = consequence_service.prune_stale(resurfacing.ledger, week).ledger
            nxt.factions = faction_service.apply_weekly_decay(nxt.factions, week)
            if self.rival_generator is not None:
                nxt = chart_service.refresh_rivals(nxt, self.rival_generator, self.genres())
            self.snapshot_repo.save(session_id, nxt)

        notices = escalation.notices + resurfacing.notices
        logger.debug(
            "Week advanced",
            extra={"session_id": session_id, "week": week, "money": nxt.money, "notices": len(notices)},
        )
        self.event_bus.publish(
            WeekAdvanced(session_id=session_id, week_after=week, money_after=nxt.money, fans_after=nxt.fans)
        )
        self._publish_notices(notices, week)
        influences = faction_service.faction_influenced_events(nxt.factions)
        return WeekReport(
            session_id=session_id,
            summary=tick.summary,
            snapshot=nxt,
            notices=notices,
            faction_statuses={
                faction_id: faction_service.faction_status(nxt.factions, faction_id).value
                for faction_id in nxt.factions
            },
            opportunities=[row.faction_name for row in influences if row.kind == "faction_benefit"],
            threats=[row.faction_name for row in influences if row.kind == "faction_threat"],
        )

    def _publish_notices(self, notices: Sequence[EscalationNotice], week: int) -> None:
        events: list[object] = []
        for notice in notices:
            if notice.resurfaced:
                events.append(
                    ConsequenceResurfaced(
                        consequence_id=notice.consequence_id,
                        week=week,
                        times_resurfaced=notice.times_resurfaced,
                        description=notice.description,
                    )
                )
                continue
            events.append(
                ConsequenceEscalated(
                    consequence_id=notice.consequence_id,
                    previous_stage=notice.previous_stage,
                    new_stage=notice.new_stage,
                    week=week,
                    description=notice.description,
                    severity=notice.severity,
                )
            )
        failures = self.event_bus.publish_all(events)
        if failures:
            logger.warning("Consequence event handlers failed", extra={"week": week, "failures": failures})

    def release_album(self, session_id: str, name: str, song_ids: Sequence[str]) -> ActionResult:
        try:
            with self._session_guard(session_id):
                snapshot = self._load(session_id)
                cost_before = snapshot.money
                updated, album = catalog_actions.release_album(snapshot, name, song_ids)
                self.snapshot_repo.save(session_id, updated)
        except SimulationError as exc:
            return _rejected(exc)
        cost = int(cost_before) - int(updated.money)
        self.event_bus.publish(AlbumReleased(album_id=album.id, name=album.name, week=updated.week, cost=cost))
        return ActionResult(
            messages=[f'Released album "{album.name}" with {len(album.song_ids)} songs for ${cost:,}.']
        )

    def record_song(self, session_id: str, title: str, genre: str | None = None, quality: int = 50) -> ActionResult:
        try:
            with self._session_guard(session_id):
                snapshot = self._load(session_id)
                updated, song = catalog_actions.record_song(snapshot, title, genre, quality)
                self.snapshot_repo.save(session_id, updated)
        except SimulationError as exc:
            return _rejected(exc)
        return ActionResult(messages=[f'Recorded "{song.title}" (quality {song.quality}).'])

    def restock_merchandise(self, session_id: str, merch_id: str, quantity: int) -> ActionResult:
        try:
            with self._session_guard(session_id):
                snapshot = self._load(session_id)
                updated, cost = catalog_actions.restock_merchandise(snapshot, merch_id, quantity)
                if cost:
                    self.snapshot_repo.save(session_id, updated)
        except SimulationError as exc:
            return _rejected(exc)
        if not cost:
            return ActionResult(messages=[f"No merchandise with id {merch_id}."])
        return ActionResult(messages=[f"Restocked {int(quantity)} units for ${cost:,}."])

    def sign_label_deal(self, session_id: str, tier: str) -> ActionResult:
        try:
            with self._session_guard(session_id):
                snapshot = self._load(session_id)
                updated = catalog_actions.sign_label_deal(snapshot, tier)
                self.snapshot_repo.save(session_id, updated)
        except SimulationError as exc:
            return _rejected(exc)
        deal = updated.label_deal
        messages = [f"Signed a {deal.name}."]
        if deal.advance:
            messages.append(f"Received a ${deal.advance:,} advance.")
        return ActionResult(messages=messages)

    def stock_merchandise(self, session_id: str, item: MerchandiseItem) -> ActionResult:
        try:
            with self._session_guard(session_id):
                snapshot = self._load(session_id)
                updated = catalog_actions.stock_merchandise(snapshot, item)
                self.snapshot_repo.save(session_id, updated)
        except SimulationError as exc:
            return _rejected(exc)
        cost = int(snapshot.money) - int(updated.money)
        return ActionResult(messages=[f'Stocked {item.inventory} x "{item.name}" for ${cost:,}.'])

    def chart(self, session_id: str, size: int = CHART_SIZE) -> list[ChartEntry]:
        return chart_service.build_chart(self._load(session_id), size=size)
