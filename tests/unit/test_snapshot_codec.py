import json
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from gigsim.application.services import catalog_actions, consequence_service
from gigsim.application.services.new_game import new_snapshot, with_demo_catalog
from gigsim.application.services.weekly_tick import advance_week
from gigsim.domain.models.consequence import (
    ConsequenceStage,
    ConsequenceTrigger,
    EscalationEvent,
    ResurfaceConditions,
)
from gigsim.domain.models.trend import GenreTrend, TrendStrength
from gigsim.infrastructure import snapshot_codec
from gigsim.infrastructure.rival_generator import SeededRivalGenerator


def _lived_in_snapshot():
    snapshot = with_demo_catalog(new_snapshot("Cold Harbour", genre="Indie Rock", difficulty="hard", seed=5))
    snapshot = catalog_actions.sign_label_deal(snapshot, "distribution")
    snapshot.trend = GenreTrend("Indie Rock", 12.0, 3, TrendStrength.MODERATE)
    snapshot.rivals = SeededRivalGenerator().generate(week=0, seed=5, genres=["Indie Rock"])
    ledger = consequence_service.trigger_consequence(
        snapshot.consequences,
        ConsequenceTrigger(
            consequence_id="leak",
            escalation_events=(EscalationEvent("e1", "Demo leaks online", 3),),
        ),
        week=0,
    ).ledger
    ledger = consequence_service.trigger_consequence(
        ledger,
        ConsequenceTrigger(
            consequence_id="debt",
            dormant=True,
            resurface_conditions=ResurfaceConditions(fame_levels=(500,), event_types=frozenset({"tour", "interview"})),
        ),
        week=0,
    ).ledger
    snapshot.consequences = consequence_service.process_escalations(ledger, 8, demote_at=None).ledger
    return snapshot


class SnapshotCodecTests(unittest.TestCase):
    def test_populated_snapshot_survives_json(self) -> None:
        snapshot = _lived_in_snapshot()
        restored = snapshot_codec.loads(snapshot_codec.dumps(snapshot))

        self.assertEqual(snapshot, restored)
        self.assertEqual(ConsequenceStage.DEVELOPING, restored.consequences.find_active("leak").current_stage)
        self.assertEqual(frozenset({"tour", "interview"}), restored.consequences.find_dormant("debt").resurface_conditions.event_types)

    def test_payload_is_plain_json_with_schema_version(self) -> None:
        payload = json.loads(snapshot_codec.dumps(_lived_in_snapshot()))

        self.assertEqual(snapshot_codec.SCHEMA_VERSION, payload["schema_version"])
        self.assertEqual("hard", payload["difficulty"])
        self.assertEqual(["interview", "tour"], payload["consequences"]["dormant"][0]["resurface_conditions"]["event_types"])

    def test_sparse_payload_uses_defaults(self) -> None:
        restored = snapshot_codec.snapshot_from_dict({"band_name": "Old Save", "week": 3, "money": -20})

        self.assertEqual("Old Save", restored.band_name)
        self.assertEqual(3, restored.week)
        self.assertEqual(0, restored.money)
        self.assertEqual("normal", restored.difficulty.value)
        self.assertEqual((), restored.consequences.active)
        self.assertEqual(30, restored.psychology.mental_health.stress)

    def test_consequence_rows_without_id_are_skipped(self) -> None:
        payload = {
            "week": 3,
            "consequences": {
                "active": [{"trigger_week": 1}, {"consequence_id": "leak", "trigger_week": 2}],
                "dormant": ["not-a-row", {"consequence_id": ""}],
            },
        }

        with self.assertLogs("gigsim.infrastructure.snapshot_codec", level="WARNING") as logs:
            restored = snapshot_codec.snapshot_from_dict(payload)

        self.assertEqual(["leak"], [row.consequence_id for row in restored.consequences.active])
        self.assertEqual((), restored.consequences.dormant)
        self.assertEqual(3, len(logs.output))
        self.assertEqual(4, advance_week(restored, ["Pop"]).snapshot.week)

    def test_faction_row_without_id_uses_its_key(self) -> None:
        restored = snapshot_codec.snapshot_from_dict(
            {"factions": {"fans": {"current_standing": 12}, "press": "garbage"}}
        )

        self.assertEqual(["fans"], list(restored.factions))
        self.assertEqual("fans", restored.factions["fans"].faction_id)
        self.assertEqual(12.0, restored.factions["fans"].current_standing)

    def test_malformed_trend_is_dropped(self) -> None:
        for trend in ({"modifier": 5}, {"genre": "Metal", "strength": "colossal"}):
            with self.subTest(trend=trend), self.assertLogs("gigsim.infrastructure.snapshot_codec", level="WARNING"):
                self.assertIsNone(snapshot_codec.snapshot_from_dict({"trend": trend}).trend)

    def test_label_deal_without_countdown_starts_a_full_term(self) -> None:
        restored = snapshot_codec.snapshot_from_dict(
            {"label_deal": {"deal_type": "360", "name": "360 Deal", "contract_weeks": 52}}
        )

        self.assertEqual(52, restored.label_deal.weeks_remaining)

    def test_non_object_payload_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            snapshot_codec.loads("[1, 2, 3]")


if __name__ == "__main__":
    unittest.main()
