from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, Sequence

from gigsim.application.dtos import ExpenseBreakdown, MerchSales, RadioPlays, RoyaltySplit
from gigsim.application.services.balance_tables import (
    ALBUM_STREAMS_PER_POPULARITY,
    ALBUM_STREAMS_PER_QUALITY,
    BASE_WEEKLY_COST,
    EQUIPMENT_DEFAULT_COST,
    EQUIPMENT_TIER_COSTS,
    FAN_GROWTH_CATALOG_BONUS,
    FAN_GROWTH_FAME_DIVISOR,
    INDEPENDENT_LABEL_DEFAULT_FEE,
    LAWYER_COST,
    MANAGER_COSTS,
    MEMBER_WEEKLY_SALARY,
    MERCH_BASE_RATE,
    MERCH_DECAY_RATE,
    MERCH_FAME_SATURATION,
    MERCH_PRICE_FLOOR,
    MERCH_PRICE_QUALITY_WEIGHT,
    RADIO_PAY_PER_PLAY,
    RADIO_POPULARITY_PER_PLAY,
    REVENUE_FRESHNESS_DECAY,
    REVENUE_FRESHNESS_FLOOR,
    SONG_STREAMS_PER_POPULARITY,
    SONG_STREAMS_PER_QUALITY,
    STREAM_PAYOUT,
    TRANSPORT_TIER_BY_INDEX,
    TRANSPORT_TIER_COSTS,
    cost_multiplier,
    revenue_multiplier,
)
from gigsim.domain.models.catalog import Album, MerchandiseItem, Song
from gigsim.domain.models.label import LabelDeal
from gigsim.domain.models.snapshot import Equipment, Snapshot, Staff


def _scaled(amount: float, multiplier: float) -> int:
    return max(0, int(math.floor(float(amount) * float(multiplier))))


def _difficulty_key(difficulty: object) -> str:
    return str(getattr(difficulty, "value", difficulty) or "normal")


def transport_cost(transport: str | int | None) -> int:
    if isinstance(transport, bool):
        return 0
    if isinstance(transport, int):
        if 0 <= transport < len(TRANSPORT_TIER_BY_INDEX):
            return TRANSPORT_TIER_BY_INDEX[transport]
        return 0
    return TRANSPORT_TIER_COSTS.get(str(transport or "none"), 0)


def equipment_cost(equipment: Equipment | None) -> int:
    tier = equipment.instruments if equipment is not None else "basic"
    return EQUIPMENT_TIER_COSTS.get(str(tier or "basic"), EQUIPMENT_DEFAULT_COST)


def staff_cost(staff: Staff | None) -> int:
    if staff is None:
        return 0
    manager = MANAGER_COSTS.get(str(staff.manager or ""), 0)
    lawyer = LAWYER_COST if staff.lawyer else 0
    return manager + lawyer


def label_fee(label_deal: LabelDeal | None) -> int:
    if label_deal is None or not label_deal.is_independent:
        return 0
    return int(label_deal.monthly_fee or INDEPENDENT_LABEL_DEFAULT_FEE)


def weekly_expenses(snapshot: Snapshot) -> ExpenseBreakdown:
    multiplier = cost_multiplier(_difficulty_key(snapshot.difficulty))
    return ExpenseBreakdown(
        base=_scaled(BASE_WEEKLY_COST, multiplier),
        salaries=_scaled(len(snapshot.members or ()) * MEMBER_WEEKLY_SALARY, multiplier),
        equipment=_scaled(equipment_cost(snapshot.equipment), multiplier),
        transport=_scaled(transport_cost(snapshot.equipment.transport if snapshot.equipment else None), multiplier),
        staff=_scaled(staff_cost(snapshot.staff), multiplier),
        label=_scaled(label_fee(snapshot.label_deal), multiplier),
    )


def revenue_freshness(age: int) -> float:
    """Age-only stream multiplier; never drops below the catalog floor."""

    return max(REVENUE_FRESHNESS_FLOOR, 1 - int(age) * REVENUE_FRESHNESS_DECAY)


def song_stream_revenue(song: Song) -> int:
    popularity = int(song.popularity or 0)
    quality = int(song.quality or 0)
    base_streams = popularity * SONG_STREAMS_PER_POPULARITY + quality * SONG_STREAMS_PER_QUALITY
    streams = int(math.floor(base_streams * revenue_freshness(song.age)))
    return int(math.floor(streams * STREAM_PAYOUT))


def song_revenue(songs: Iterable[Song], difficulty: object) -> int:
    total = sum(song_stream_revenue(song) for song in songs)
    return _scaled(total, revenue_multiplier(_difficulty_key(difficulty)))


def album_stream_revenue(album: Album) -> int:
    base_streams = int(album.quality or 0) * ALBUM_STREAMS_PER_QUALITY + int(album.popularity or 0) * ALBUM_STREAMS_PER_POPULARITY
    streams = int(math.floor(base_streams * revenue_freshness(album.age)))
    return int(math.floor(streams * STREAM_PAYOUT))


def album_revenue(albums: Iterable[Album], difficulty: object) -> int:
    total = sum(album_stream_revenue(album) for album in albums)
    return _scaled(total, revenue_multiplier(_difficulty_key(difficulty)))


def song_radio_plays(popularity: int) -> int:
    return max(0, int(popularity or 0)) // RADIO_POPULARITY_PER_PLAY


def radio_plays(songs: Iterable[Song]) -> RadioPlays:
    plays = sum(song_radio_plays(song.popularity or 0) for song in songs)
    return RadioPlays(plays=plays, revenue=plays * RADIO_PAY_PER_PLAY)


def _sell_item(item: MerchandiseItem, fame: int) -> tuple[MerchandiseItem, int, int]:
    fame_draw = min(1.0, max(0, int(fame)) / MERCH_FAME_SATURATION)
    quality_factor = int(item.quality or 50) / 100
    weeks_selling = int(item.weeks_selling) + 1
    decay = 1 / (1 + weeks_selling * MERCH_DECAY_RATE)
    demand = int(math.floor(MERCH_BASE_RATE * float(item.popularity) * fame_draw * quality_factor * decay))
    units = max(0, min(demand, int(item.inventory)))
    if units <= 0:
        return replace(item, weeks_selling=weeks_selling), 0, 0
    unit_price = float(item.base_price) * (MERCH_PRICE_FLOOR + quality_factor * MERCH_PRICE_QUALITY_WEIGHT)
    revenue = int(math.floor(units * unit_price))
    updated = replace(
        item,
        inventory=int(item.inventory) - units,
        weeks_selling=weeks_selling,
        total_sold=int(item.total_sold) + units,
        total_revenue=int(item.total_revenue) + revenue,
    )
    return updated, units, revenue


def merch_revenue(items: Sequence[MerchandiseItem], snapshot: Snapshot) -> MerchSales:
    updated: list[MerchandiseItem] = []
    total_units = 0
    total_revenue = 0
    for item in items:
        row, units, revenue = _sell_item(item, snapshot.fame)
        updated.append(row)
        total_units += units
        total_revenue += revenue
    return MerchSales(revenue=total_revenue, units_sold=total_units, items=tuple(updated))


def royalty_split(gross_revenue: int, label_deal: LabelDeal | None) -> RoyaltySplit:
    gross = max(0, int(gross_revenue))
    if label_deal is None or label_deal.is_independent:
        return RoyaltySplit(net_revenue=gross, label_share=0)
    share = int(math.floor(gross * max(0, int(label_deal.royalty_split or 0)) / 100))
    return RoyaltySplit(net_revenue=gross - share, label_share=share)


def fan_growth(fame: int, songs: Sequence[Song]) -> int:
    growth = max(0, int(fame or 0)) // FAN_GROWTH_FAME_DIVISOR
    if songs:
        growth += FAN_GROWTH_CATALOG_BONUS
    return growth
