from __future__ import annotations

from typing import Sequence

from gigsim.application.services.balance_tables import STARTING_MONEY
from gigsim.application.services.faction_service import default_factions
from gigsim.domain.models.catalog import MerchandiseItem, Song
from gigsim.domain.models.snapshot import Difficulty, Snapshot
from gigsim.domain.models.trend import GenrePopularity


_DEMO_SONGS = (
    ("Basement Anthem", 62),
    ("Last Bus Home", 55),
    ("Static on the Radio", 48),
)


def new_snapshot(
    band_name: str,
    *,
    genre: str = "Pop",
    difficulty: str | Difficulty = Difficulty.NORMAL,
    seed: int = 1,
    members: Sequence[str] = (),
    money: int = STARTING_MONEY,
) -> Snapshot:
    return Snapshot(
        band_name=str(band_name or "").strip() or "The Unsigned",
        genre=genre,
        money=money,
        difficulty=Difficulty.normalize(difficulty),
        members=list(members),
        factions=default_factions(),
        genre_trends={genre: GenrePopularity()},
        rng_seed=int(seed),
    )


def with_demo_catalog(snapshot: Snapshot) -> Snapshot:
    """Seed a small starter catalog so the first weeks have something to age."""

    snapshot.songs = [
        Song(id=f"song-{index}", title=title, genre=snapshot.genre, quality=quality)
        for index, (title, quality) in enumerate(_DEMO_SONGS, start=1)
    ]
    snapshot.merchandise = [
        MerchandiseItem(id="merch-1", name="Band T-Shirt", base_price=25.0, cost_to_make=8.0, quality=60, inventory=40),
    ]
    snapshot.fame = max(int(snapshot.fame), 250)
    return snapshot
