import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from gigsim.application.services.seed_policy import derive_rng, derive_seed, week_rng


class SeedPolicyTests(unittest.TestCase):
    def test_same_context_same_seed(self) -> None:
        context = {"seed": 7, "week": 12, "band": {"genre": "Pop", "members": 3}}
        self.assertEqual(derive_seed("week.tick", context), derive_seed("week.tick", context))

    def test_context_key_order_does_not_change_seed(self) -> None:
        context_a = {"a": 1, "b": {"x": 2, "y": 3}}
        context_b = {"b": {"y": 3, "x": 2}, "a": 1}
        self.assertEqual(derive_seed("rivals.generate", context_a), derive_seed("rivals.generate", context_b))

    def test_namespace_changes_seed(self) -> None:
        context = {"value": 10}
        self.assertNotEqual(derive_seed("week.tick", context), derive_seed("week.consequences", context))

    def test_unordered_set_values_produce_stable_seed(self) -> None:
        context_a = {"tags": {"scandal", "tour", "press"}}
        context_b = {"tags": {"press", "scandal", "tour"}}
        self.assertEqual(derive_seed("choices", context_a), derive_seed("choices", context_b))

    def test_non_finite_float_in_context_raises(self) -> None:
        with self.assertRaises(ValueError):
            derive_seed("week.tick", {"money": float("inf")})

    def test_derive_rng_is_deterministic_for_same_context(self) -> None:
        context = {"seed": 3, "week": 8}
        self.assertEqual(derive_rng("week.tick", context).randint(1, 1000), derive_rng("week.tick", context).randint(1, 1000))

    def test_week_rng_differs_between_weeks(self) -> None:
        first = [week_rng("week.tick", seed=1, week=1).random() for _ in range(2)]
        second = week_rng("week.tick", seed=1, week=2).random()

        self.assertEqual(first[0], first[1])
        self.assertNotEqual(first[0], second)

    def test_batches_in_one_week_get_their_own_sequence(self) -> None:
        plain = week_rng("choices", seed=1, week=4).random()
        batches = [week_rng("choices", seed=1, week=4, batch=index).random() for index in range(3)]

        self.assertEqual(batches[1], week_rng("choices", seed=1, week=4, batch=1).random())
        self.assertEqual(3, len(set(batches)))
        self.assertNotIn(plain, batches)


if __name__ == "__main__":
    unittest.main()
