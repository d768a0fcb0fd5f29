import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from gigsim.application.services import chart_service
from gigsim.domain.models.catalog import Song
from gigsim.domain.models.snapshot import RivalCatalog, RivalEntry, Snapshot
from gigsim.domain.repositories import RivalContentGenerator
from gigsim.infrastructure.rival_generator import RIVAL_BANDS, SeededRivalGenerator


class _CountingGenerator(RivalContentGenerator):
    def __init__(self) -> None:
        self.calls = []

    def generate(self, *, week, seed, genres):
        self.calls.append((week, seed, tuple(genres)))
        return RivalCatalog(
            generated_week=week,
            entries=(RivalEntry("neon-nights", "Neon Nights", "Glow", "Pop", 60, 650),),
        )


class RivalRefreshTests(unittest.TestCase):
    def test_missing_catalog_is_generated(self) -> None:
        generator = _CountingGenerator()
        snapshot = Snapshot(band_name="Loud", week=3, rng_seed=9)

        updated = chart_service.refresh_rivals(snapshot, generator, ["Pop"])

        self.assertEqual([(3, 9, ("Pop",))], generator.calls)
        self.assertEqual(3, updated.rivals.generated_week)
        self.assertIsNone(snapshot.rivals)

    def test_fresh_catalog_is_reused(self) -> None:
        generator = _CountingGenerator()
        snapshot = Snapshot(band_name="Loud", week=4, rivals=RivalCatalog(generated_week=0))

        self.assertIs(snapshot, chart_service.refresh_rivals(snapshot, generator, ["Pop"]))
        self.assertEqual([], generator.calls)

    def test_stale_after_four_weeks(self) -> None:
        snapshot = Snapshot(band_name="Loud", week=5, rivals=RivalCatalog(generated_week=0))
        self.assertTrue(chart_service.needs_rival_refresh(snapshot))


class BuildChartTests(unittest.TestCase):
    def test_player_songs_and_rivals_are_ranked_together(self) -> None:
        snapshot = Snapshot(
            band_name="Loud",
            songs=[
                Song(id="s1", title="Small", popularity=10, weekly_streams=0),
                Song(id="s2", title="Big", popularity=90, weekly_streams=1000),
            ],
            rivals=RivalCatalog(
                generated_week=0,
                entries=(RivalEntry("chrome-echo", "Chrome Echo", "Mirrors", "Pop", 50, 500),),
            ),
        )

        chart = chart_service.build_chart(snapshot)

        self.assertEqual(["Big", "Mirrors", "Small"], [row.title for row in chart])
        self.assertEqual([1, 2, 3], [row.rank for row in chart])
        self.assertEqual(1000, chart[0].score)
        self.assertTrue(chart[0].is_player)
        self.assertEqual("Chrome Echo", chart[1].artist)

    def test_chart_is_truncated(self) -> None:
        snapshot = Snapshot(
            band_name="Loud",
            songs=[Song(id=f"s{index}", title=f"T{index}", popularity=index) for index in range(1, 15)],
        )
        self.assertEqual(10, len(chart_service.build_chart(snapshot)))
        self.assertEqual(3, len(chart_service.build_chart(snapshot, size=3)))


class SeededRivalGeneratorTests(unittest.TestCase):
    def test_same_seed_and_week_repeat(self) -> None:
        generator = SeededRivalGenerator()
        first = generator.generate(week=4, seed=11, genres=["Pop", "Metal"])
        second = generator.generate(week=4, seed=11, genres=["Pop", "Metal"])

        self.assertEqual(first, second)
        self.assertEqual(6, len(first.entries))
        self.assertEqual(4, first.generated_week)

    def test_entries_use_known_bands_and_given_genres(self) -> None:
        catalog = SeededRivalGenerator(band_count=10).generate(week=1, seed=2, genres=["Jazz"])
        known = {name for _, name in RIVAL_BANDS}

        self.assertEqual(10, len({row.rival_id for row in catalog.entries}))
        self.assertTrue(all(row.band_name in known for row in catalog.entries))
        self.assertTrue(all(row.genre == "Jazz" for row in catalog.entries))
        self.assertTrue(all(20 <= row.popularity <= 90 for row in catalog.entries))

    def test_week_changes_the_catalog(self) -> None:
        generator = SeededRivalGenerator()
        self.assertNotEqual(
            generator.generate(week=1, seed=2, genres=["Pop"]),
            generator.generate(week=9, seed=2, genres=["Pop"]),
        )


if __name__ == "__main__":
    unittest.main()
