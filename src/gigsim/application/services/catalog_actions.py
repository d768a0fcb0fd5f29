from __future__ import annotations

import copy
import logging
import math
from dataclasses import replace
from typing import Sequence

from gigsim.application.services.balance_tables import (
    ALBUM_COST_PER_SONG_RATE,
    ALBUM_FAME_RATE,
    ALBUM_INITIAL_PROMO,
    ALBUM_MAX_SONGS,
    ALBUM_MIN_SONGS,
    ALBUM_POPULARITY_BONUS_WEIGHT,
    ALBUM_POPULARITY_WEIGHT,
    ALBUM_QUALITY_BONUS_WEIGHT,
    ALBUM_RELEASE_OVERHEAD,
    LABEL_DEAL_TIERS,
    cost_multiplier,
    studio_profile,
)
from gigsim.domain.errors import InsufficientFundsError, InvalidActionError
from gigsim.domain.models.catalog import Album, MerchandiseItem, Song
from gigsim.domain.models.label import LabelDeal
from gigsim.domain.models.snapshot import Snapshot


logger = logging.getLogger(__name__)

SONG_POPULARITY_FROM_QUALITY = 0.65
SONG_FAME_POPULARITY_RATE = 0.001


def _require_funds(snapshot: Snapshot, cost: int) -> None:
    if int(snapshot.money) < int(cost):
        raise InsufficientFundsError(required=int(cost), available=int(snapshot.money))


def _next_id(prefix: str, taken: set[str]) -> str:
    index = len(taken) + 1
    while f"{prefix}-{index}" in taken:
        index += 1
    return f"{prefix}-{index}"


def _unique_album_name(name: str, existing: set[str]) -> str:
    if name not in existing:
        return name
    suffix = 2
    while f"{name} ({suffix})" in existing:
        suffix += 1
    return f"{name} ({suffix})"


def album_release_cost(record_cost: int, song_count: int) -> int:
    base = record_cost * song_count * ALBUM_COST_PER_SONG_RATE
    return int(math.floor(base * ALBUM_RELEASE_OVERHEAD))


def release_album(snapshot: Snapshot, name: str, song_ids: Sequence[str]) -> tuple[Snapshot, Album]:
    """Validate, charge and link a new album; raises before touching the snapshot."""

    requested = [str(song_id) for song_id in song_ids]
    if len(requested) < ALBUM_MIN_SONGS:
        raise InvalidActionError("insufficient songs", f"need at least {ALBUM_MIN_SONGS}, got {len(requested)}")
    if len(requested) > ALBUM_MAX_SONGS:
        raise InvalidActionError("too many songs", f"at most {ALBUM_MAX_SONGS}, got {len(requested)}")
    if len(set(requested)) != len(requested):
        raise InvalidActionError("songs not found", "duplicate song ids in request")

    songs_by_id = snapshot.song_index()
    missing = [song_id for song_id in requested if song_id not in songs_by_id]
    if missing:
        raise InvalidActionError("songs not found", ", ".join(missing))
    selected = [songs_by_id[song_id] for song_id in requested]
    claimed = [song.id for song in selected if song.in_album]
    if claimed:
        raise InvalidActionError("songs already in album", ", ".join(claimed))

    studio = studio_profile(snapshot.studio_tier)
    cost = album_release_cost(int(studio["record_cost"]), len(selected))
    _require_funds(snapshot, cost)

    avg_quality = sum(int(song.quality) for song in selected) / len(selected)
    avg_popularity = sum(int(song.popularity or 0) for song in selected) / len(selected)
    quality = min(100, int(math.floor(avg_quality + int(studio["quality_bonus"]) * ALBUM_QUALITY_BONUS_WEIGHT)))
    popularity = min(
        100,
        int(math.floor(avg_popularity * ALBUM_POPULARITY_WEIGHT + int(studio["popularity_bonus"]) * ALBUM_POPULARITY_BONUS_WEIGHT)),
    )

    existing_names = {album.name for album in snapshot.albums}
    fallback = f"{snapshot.band_name or 'Band'} Vol. {len(snapshot.albums) + 1}"
    album = Album(
        id=_next_id("album", {row.id for row in snapshot.albums}),
        name=_unique_album_name(str(name or "").strip() or fallback, existing_names),
        song_ids=tuple(requested),
        quality=quality,
        popularity=popularity,
        promo_boost=ALBUM_INITIAL_PROMO,
        released_week=int(snapshot.week),
    )

    updated = copy.deepcopy(snapshot)
    members = set(requested)
    updated.songs = [replace(song, album_id=album.id) if song.id in members else song for song in updated.songs]
    updated.albums = list(updated.albums) + [album]
    updated.money = int(updated.money) - cost
    updated.fame = int(updated.fame) + int(math.floor(popularity * ALBUM_FAME_RATE))
    logger.debug("Album released", extra={"album_id": album.id, "cost": cost, "week": updated.week})
    return updated, album


def recording_cost(snapshot: Snapshot) -> int:
    studio = studio_profile(snapshot.studio_tier)
    return int(math.floor(int(studio["record_cost"]) * cost_multiplier(snapshot.difficulty.value)))


def record_song(snapshot: Snapshot, title: str, genre: str | None = None, quality: int = 50) -> tuple[Snapshot, Song]:
    clean_title = str(title or "").strip() or "Untitled Track"
    if any(song.title == clean_title for song in snapshot.songs):
        raise InvalidActionError("duplicate title", clean_title)
    cost = recording_cost(snapshot)
    _require_funds(snapshot, cost)

    studio = studio_profile(snapshot.studio_tier)
    final_quality = max(1, min(100, int(quality) + int(studio["quality_bonus"])))
    popularity = min(
        100,
        int(math.floor(final_quality * SONG_POPULARITY_FROM_QUALITY))
        + int(math.floor(int(snapshot.fame) * SONG_FAME_POPULARITY_RATE)),
    )
    song = Song(
        id=_next_id("song", {row.id for row in snapshot.songs}),
        title=clean_title,
        genre=str(genre or snapshot.genre or "Pop"),
        quality=final_quality,
        popularity=popularity,
    )
    updated = copy.deepcopy(snapshot)
    updated.songs = list(updated.songs) + [song]
    updated.money = int(updated.money) - cost
    return updated, song


def restock_merchandise(snapshot: Snapshot, merch_id: str, quantity: int) -> tuple[Snapshot, int]:
    """Returns the new snapshot and the amount charged; an unknown id charges nothing."""

    if int(quantity) <= 0:
        raise InvalidActionError("invalid quantity", str(quantity))
    item = next((row for row in snapshot.merchandise if row.id == str(merch_id)), None)
    if item is None:
        logger.warning("Unknown merchandise id; restock ignored", extra={"merch_id": merch_id})
        return snapshot, 0
    cost = int(math.floor(float(item.cost_to_make) * int(quantity)))
    _require_funds(snapshot, cost)

    updated = copy.deepcopy(snapshot)
    updated.merchandise = [
        replace(row, inventory=int(row.inventory) + int(quantity)) if row.id == item.id else row
        for row in updated.merchandise
    ]
    updated.money = int(updated.money) - cost
    return updated, cost


def label_deal_for(tier: str) -> LabelDeal:
    profile = LABEL_DEAL_TIERS.get(str(tier or "").strip())
    if profile is None:
        raise InvalidActionError("unknown label deal", str(tier))
    return LabelDeal(deal_type=str(tier).strip(), weeks_remaining=int(profile["contract_weeks"]), **profile)


def sign_label_deal(snapshot: Snapshot, tier: str) -> Snapshot:
    """Sign a tier the band has the fame for; the advance is paid on signing."""

    deal = label_deal_for(tier)
    if int(snapshot.fame) < deal.fame_req:
        raise InvalidActionError("insufficient fame", f"{deal.name} needs {deal.fame_req}, have {int(snapshot.fame)}")
    updated = copy.deepcopy(snapshot)
    updated.label_deal = deal
    updated.money = int(updated.money) + deal.advance
    logger.debug("Label deal signed", extra={"deal_type": deal.deal_type, "advance": deal.advance})
    return updated


def tick_label_contract(deal: LabelDeal | None) -> tuple[LabelDeal | None, str | None]:
    """Count a fixed-term contract down one week; an ended contract leaves the band unsigned."""

    if deal is None or deal.contract_weeks <= 0:
        return deal, None
    remaining = int(deal.weeks_remaining) - 1
    if remaining <= 0:
        return None, f"Your {deal.name} contract has ended."
    return replace(deal, weeks_remaining=remaining), None


def stock_merchandise(snapshot: Snapshot, item: MerchandiseItem) -> Snapshot:
    if any(row.id == item.id for row in snapshot.merchandise):
        raise InvalidActionError("duplicate merchandise", item.id)
    cost = int(math.floor(float(item.cost_to_make) * int(item.inventory)))
    _require_funds(snapshot, cost)
    updated = copy.deepcopy(snapshot)
    updated.merchandise = list(updated.merchandise) + [item]
    updated.money = int(updated.money) - cost
    return updated
