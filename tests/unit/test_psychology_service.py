import sys
from dataclasses import replace
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from gigsim.application.services import psychology_service
from gigsim.domain.models.psychology import AddictionPath, PsychologicalEvolution


class CorruptionTests(unittest.TestCase):
    def test_crossing_a_milestone_sets_stage_and_unlocks(self) -> None:
        state = psychology_service.apply_corruption(PsychologicalEvolution(), 30)

        self.assertEqual(30, state.corruption.current_level)
        self.assertEqual("minor_temptation", state.corruption.stage)
        self.assertEqual(("minor_criminal_offers",), state.corruption.unlocked)

    def test_level_is_clamped(self) -> None:
        top = psychology_service.apply_corruption(PsychologicalEvolution(), 250)
        bottom = psychology_service.apply_corruption(top, -400)

        self.assertEqual(100, top.corruption.current_level)
        self.assertEqual("fully_corrupted", top.corruption.stage)
        self.assertEqual(0, bottom.corruption.current_level)
        self.assertIsNone(bottom.corruption.stage)


class AddictionTests(unittest.TestCase):
    def test_escalation_moves_one_stage(self) -> None:
        state = psychology_service.apply_addiction(PsychologicalEvolution(), 3)
        self.assertEqual("experimentation", state.addiction.current_stage)

    def test_recovery_can_drop_several_stages(self) -> None:
        state = replace(PsychologicalEvolution(), addiction=AddictionPath(current_stage="dependency"))

        recovered = psychology_service.apply_addiction(state, -2)
        clean = psychology_service.apply_addiction(recovered, -10)

        self.assertEqual("experimentation", recovered.addiction.current_stage)
        self.assertEqual(1, recovered.addiction.recovery_attempts)
        self.assertEqual("clean", clean.addiction.current_stage)
        self.assertEqual(2, clean.addiction.recovery_attempts)

    def test_rock_bottom_is_the_ceiling(self) -> None:
        state = replace(PsychologicalEvolution(), addiction=AddictionPath(current_stage="rock_bottom"))
        self.assertEqual("rock_bottom", psychology_service.apply_addiction(state, 1).addiction.current_stage)


class MentalHealthTests(unittest.TestCase):
    def test_stress_alias(self) -> None:
        state = psychology_service.apply_effect(PsychologicalEvolution(), "stress_level", 10)
        self.assertEqual(40, state.mental_health.stress)

    def test_fields_are_clamped(self) -> None:
        state = psychology_service.apply_effect(PsychologicalEvolution(), "paranoia", -15)
        self.assertEqual(0, state.mental_health.paranoia)

    def test_unknown_field_is_a_logged_noop(self) -> None:
        state = PsychologicalEvolution()
        with self.assertLogs("gigsim.application.services.psychology_service", level="WARNING"):
            updated = psychology_service.apply_effect(state, "euphoria", 10)
        self.assertEqual(state, updated)


if __name__ == "__main__":
    unittest.main()
