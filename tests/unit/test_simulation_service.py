import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from gigsim.application.services.event_bus import EventBus
from gigsim.application.services.simulation_service import SimulationService
from gigsim.domain.errors import TickInProgressError, UnknownSessionError
from gigsim.domain.events import (
    AlbumReleased,
    ConsequenceEscalated,
    FactionStandingChanged,
    WeekAdvanced,
)
from gigsim.domain.models.choice import PlayerChoice
from gigsim.domain.models.consequence import ConsequenceTrigger, ResurfaceConditions
from gigsim.domain.models.catalog import MerchandiseItem, Song
from gigsim.infrastructure.game_data_client import BundledGenreCatalog
from gigsim.infrastructure.inmemory.inmemory_snapshot_repo import InMemorySnapshotRepository
from gigsim.infrastructure.rival_generator import SeededRivalGenerator


class _QuietRandom(random.Random):
    def random(self) -> float:
        return 0.99


def _service(**kwargs) -> tuple[SimulationService, InMemorySnapshotRepository, EventBus]:
    repo = InMemorySnapshotRepository()
    bus = EventBus()
    service = SimulationService(
        repo,
        event_bus=bus,
        genre_source=BundledGenreCatalog(["Pop", "Metal"]),
        rival_generator=SeededRivalGenerator(),
        **kwargs,
    )
    return service, repo, bus


class SimulationServiceTests(unittest.TestCase):
    def test_new_session_is_saved_with_rivals(self) -> None:
        service, repo, _ = _service()
        snapshot = service.new_session("s1", "Harbour Lights", seed=4, demo_catalog=True)

        self.assertEqual(snapshot, repo.load("s1"))
        self.assertEqual(3, len(snapshot.songs))
        self.assertIsNotNone(snapshot.rivals)
        self.assertEqual(["s1"], repo.list_sessions())

    def test_advance_week_saves_and_publishes(self) -> None:
        service, repo, bus = _service()
        service.new_session("s1", "Harbour Lights", demo_catalog=True)

        report = service.advance_week("s1", rng=_QuietRandom(0))

        self.assertEqual(1, report.snapshot.week)
        self.assertEqual(1, repo.load("s1").week)
        self.assertIn("Week 1 Summary:", report.summary_text)
        published = bus.history(WeekAdvanced)
        self.assertEqual(1, len(published))
        self.assertEqual(report.snapshot.money, published[0].money_after)
        self.assertEqual("wary", report.faction_statuses["criminal_underworld"])

    def test_weeks_are_deterministic_per_seed(self) -> None:
        first, _, _ = _service()
        second, _, _ = _service()
        for service in (first, second):
            service.new_session("s1", "Harbour Lights", seed=21, demo_catalog=True)
            for _ in range(3):
                service.advance_week("s1")

        self.assertEqual(first.snapshot("s1"), second.snapshot("s1"))

    def test_due_consequence_escalates_during_the_week(self) -> None:
        service, _, bus = _service()
        service.new_session("s1", "Harbour Lights")
        service.apply_choices(
            "s1",
            [PlayerChoice("skip-gig", consequence=ConsequenceTrigger(consequence_id="angry-venue", escalation_delay=1))],
        )

        report = service.advance_week("s1", rng=_QuietRandom(0))

        self.assertEqual(["angry-venue"], [notice.consequence_id for notice in report.notices])
        self.assertEqual("developing", bus.history(ConsequenceEscalated)[0].new_stage)

    def test_apply_choices_publishes_faction_changes(self) -> None:
        service, _, bus = _service()
        service.new_session("s1", "Harbour Lights")

        result = service.apply_choices("s1", [PlayerChoice("benefit-gig", faction_effects={"underground_scene": 25})])

        self.assertTrue(result.accepted)
        self.assertEqual(75, bus.history(FactionStandingChanged)[0].standing_after)
        self.assertEqual(75, service.snapshot("s1").factions["underground_scene"].current_standing)

    def test_rejected_album_leaves_stored_snapshot_alone(self) -> None:
        service, repo, bus = _service()
        service.new_session("s1", "Harbour Lights", demo_catalog=True)
        before = repo.load("s1")

        result = service.release_album("s1", "Too Short", ["song-1", "song-2", "song-3"])

        self.assertFalse(result.accepted)
        self.assertEqual("insufficient songs", result.reason)
        self.assertEqual(before, repo.load("s1"))
        self.assertEqual([], bus.history(AlbumReleased))

    def test_album_release_reports_cost(self) -> None:
        service, repo, bus = _service()
        snapshot = service.new_session("s1", "Harbour Lights")
        snapshot.money = 2000
        snapshot.songs = [Song(id=f"song-{index}", title=f"Track {index}") for index in range(1, 9)]
        repo.save("s1", snapshot)

        result = service.release_album("s1", "Debut", [f"song-{index}" for index in range(1, 9)])

        self.assertTrue(result.accepted)
        self.assertEqual(768, bus.history(AlbumReleased)[0].cost)
        self.assertEqual(1232, repo.load("s1").money)

    def test_insufficient_funds_reports_required_amount(self) -> None:
        service, _, _ = _service()
        snapshot = service.new_session("s1", "Harbour Lights")
        snapshot.money = 0

        service.snapshot_repo.save("s1", snapshot)
        result = service.record_song("s1", "Broke")

        self.assertFalse(result.accepted)
        self.assertEqual("insufficient funds", result.reason)
        self.assertEqual(80, result.required_amount)

    def test_second_operation_during_tick_is_refused(self) -> None:
        service, _, _ = _service()
        service.new_session("s1", "Harbour Lights")

        with service._session_guard("s1"):
            with self.assertRaises(TickInProgressError):
                service.advance_week("s1")
            refused = service.restock_merchandise("s1", "merch-1", 5)

        self.assertEqual("tick in progress", refused.reason)
        self.assertEqual(1, service.advance_week("s1").snapshot.week)

    def test_unknown_session(self) -> None:
        service, _, _ = _service()
        with self.assertRaises(UnknownSessionError):
            service.advance_week("missing")
        self.assertEqual("unknown session", service.sign_label_deal("missing", "major").reason)

    def test_sign_deal_and_chart(self) -> None:
        service, _, _ = _service()
        service.new_session("s1", "Harbour Lights", demo_catalog=True)

        result = service.sign_label_deal("s1", "360")
        chart = service.chart("s1", size=5)

        self.assertEqual(["Signed a 360 Deal.", "Received a $2,000 advance."], result.messages)
        self.assertEqual(5, len(chart))
        self.assertEqual(list(range(1, 6)), [row.rank for row in chart])

    def test_each_choice_batch_in_a_week_rolls_fresh(self) -> None:
        dormant_debt = ConsequenceTrigger(
            consequence_id="debt",
            dormant=True,
            resurface_probability=0.5,
            resurface_conditions=ResurfaceConditions(event_types=frozenset({"interview"})),
        )
        resurfaced = 0
        for seed in range(1, 31):
            service, _, _ = _service()
            service.new_session("s1", "Harbour Lights", seed=seed)
            service.apply_choices("s1", [PlayerChoice("loan", consequence=dormant_debt)])
            for attempt in range(10):
                service.apply_choices("s1", [PlayerChoice(f"interview-{attempt}", event_type="interview")])
            snapshot = service.snapshot("s1")
            self.assertEqual(0, snapshot.week)
            self.assertEqual(11, snapshot.choice_rolls)
            if snapshot.consequences.find_active("debt") is not None:
                resurfaced += 1

        self.assertGreaterEqual(resurfaced, 25)

    def test_choices_can_resolve_and_demote_consequences(self) -> None:
        service, _, _ = _service()
        service.new_session("s1", "Harbour Lights")
        service.apply_choices(
            "s1",
            [
                PlayerChoice("skip-gig", consequence=ConsequenceTrigger(consequence_id="angry-venue")),
                PlayerChoice("bad-review", consequence=ConsequenceTrigger(consequence_id="bad-press")),
            ],
        )

        service.apply_choices(
            "s1",
            [
                PlayerChoice("apologise", resolve_consequence="angry-venue"),
                PlayerChoice("lie-low", demote_consequence="bad-press"),
            ],
        )

        ledger = service.snapshot("s1").consequences
        self.assertEqual((), ledger.active)
        self.assertIsNone(ledger.find_dormant("angry-venue"))
        self.assertIsNotNone(ledger.find_dormant("bad-press"))

    def test_sign_deal_below_fame_requirement_is_refused(self) -> None:
        service, repo, _ = _service()
        service.new_session("s1", "Harbour Lights")
        before = repo.load("s1")

        result = service.sign_label_deal("s1", "major")

        self.assertFalse(result.accepted)
        self.assertEqual("insufficient fame", result.reason)
        self.assertEqual(before, repo.load("s1"))

    def test_stock_merchandise_charges_production_cost(self) -> None:
        service, repo, _ = _service()
        service.new_session("s1", "Harbour Lights")
        money_before = repo.load("s1").money
        item = MerchandiseItem(id="merch-9", name="Tour Poster", cost_to_make=2.5, inventory=40)

        result = service.stock_merchandise("s1", item)
        duplicate = service.stock_merchandise("s1", item)

        self.assertEqual(['Stocked 40 x "Tour Poster" for $100.'], result.messages)
        self.assertEqual(money_before - 100, repo.load("s1").money)
        self.assertEqual(["merch-9"], [row.id for row in repo.load("s1").merchandise])
        self.assertFalse(duplicate.accepted)
        self.assertEqual("duplicate merchandise", duplicate.reason)

    def test_genres_fall_back_when_source_is_empty(self) -> None:
        service = SimulationService(InMemorySnapshotRepository(), genre_source=BundledGenreCatalog([]))
        self.assertIn("Synth Pop", service.genres())


if __name__ == "__main__":
    unittest.main()
