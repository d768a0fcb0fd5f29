from __future__ import annotations

from typing import Sequence

from gigsim.application.services.balance_tables import RIVAL_BAND_COUNT
from gigsim.application.services.seed_policy import derive_rng
from gigsim.domain.models.catalog import song_chart_score
from gigsim.domain.models.snapshot import RivalCatalog, RivalEntry
from gigsim.domain.repositories import RivalContentGenerator


RIVAL_BANDS = (
    ("neon-nights", "Neon Nights"),
    ("chrome-echo", "Chrome Echo"),
    ("velvet-storm", "Velvet Storm"),
    ("golden-hour", "Golden Hour"),
    ("midnight-crew", "Midnight Crew"),
    ("sonic-wave", "Sonic Wave"),
    ("phantom-axis", "Phantom Axis"),
    ("lunar-drift", "Lunar Drift"),
    ("cosmic-static", "Cosmic Static"),
    ("titan-force", "Titan Force"),
)

_TITLE_OPENERS = ("Midnight", "Electric", "Broken", "Golden", "Neon", "Silent", "Wild", "Paper")
_TITLE_NOUNS = ("Hearts", "Highway", "Signals", "Summer", "Static", "Mirrors", "Fever", "Skyline")


class SeededRivalGenerator(RivalContentGenerator):
    """Deterministic rival catalog for a (seed, week) pair."""

    def __init__(self, band_count: int = RIVAL_BAND_COUNT) -> None:
        self.band_count = max(0, min(len(RIVAL_BANDS), int(band_count)))

    def generate(self, *, week: int, seed: int, genres: Sequence[str]) -> RivalCatalog:
        rng = derive_rng("rivals.generate", {"seed": int(seed), "week": int(week)})
        pool = list(genres) or ["Pop"]
        entries = []
        for rival_id, band_name in rng.sample(list(RIVAL_BANDS), self.band_count):
            popularity = rng.randint(20, 90)
            weekly_streams = popularity * 60 + rng.randint(0, 600)
            entries.append(
                RivalEntry(
                    rival_id=rival_id,
                    band_name=band_name,
                    title=f"{rng.choice(_TITLE_OPENERS)} {rng.choice(_TITLE_NOUNS)}",
                    genre=rng.choice(pool),
                    popularity=popularity,
                    chart_score=song_chart_score(popularity, weekly_streams),
                )
            )
        return RivalCatalog(generated_week=int(week), entries=tuple(entries))
