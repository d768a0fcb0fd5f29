from __future__ import annotations

import copy
import logging
import random
from typing import Sequence

from gigsim.application.dtos import RevenueBreakdown, TickResult, WeekSummary
from gigsim.application.services import economy
from gigsim.application.services.catalog_actions import tick_label_contract
from gigsim.application.services.catalog_aging import age_albums, age_songs
from gigsim.application.services.seed_policy import week_rng
from gigsim.application.services.trend_engine import advance_trend
from gigsim.domain.models.snapshot import Snapshot


logger = logging.getLogger(__name__)


def advance_week(
    snapshot: Snapshot,
    genres: Sequence[str] | None = None,
    *,
    rng: random.Random | None = None,
) -> TickResult:
    """Trend, aging, revenue, fan growth and balance for one week.

    The input snapshot is left untouched; the returned snapshot is a new object.
    """

    rng = rng or week_rng("week.tick", seed=snapshot.rng_seed, week=snapshot.week)
    expenses = economy.weekly_expenses(snapshot)

    trend_result = advance_trend(snapshot, genres, rng=rng)
    aged_songs = age_songs(snapshot.songs, snapshot, trend_result, rng=rng)
    aged_albums = age_albums(snapshot.albums, snapshot)

    song_income = economy.song_revenue(aged_songs, snapshot.difficulty)
    radio = economy.radio_plays(aged_songs)
    album_income = economy.album_revenue(aged_albums, snapshot.difficulty)
    merch = economy.merch_revenue(snapshot.merchandise, snapshot)
    royalty = economy.royalty_split(song_income + radio.revenue + album_income, snapshot.label_deal)
    revenue = RevenueBreakdown(
        songs=song_income,
        radio=radio,
        albums=album_income,
        merchandise=merch.revenue,
        merch_units=merch.units_sold,
        royalty=royalty,
    )

    growth = economy.fan_growth(snapshot.fame, aged_songs)
    net_change = revenue.net - expenses.total
    balance_after = max(0, int(snapshot.money) + net_change)

    next_snapshot = copy.deepcopy(snapshot)
    next_snapshot.week = int(snapshot.week) + 1
    next_snapshot.money = balance_after
    next_snapshot.fans = max(0, int(snapshot.fans)) + growth
    next_snapshot.songs = aged_songs
    next_snapshot.albums = aged_albums
    next_snapshot.merchandise = list(merch.items)
    next_snapshot.trend = trend_result.trend
    next_snapshot.genre_trends = dict(trend_result.genre_trends)
    next_snapshot.weekly_expenses = expenses.total
    next_snapshot.total_revenue = int(snapshot.total_revenue) + revenue.net
    next_snapshot.label_deal, contract_note = tick_label_contract(snapshot.label_deal)
    notes = trend_result.notes + ((contract_note,) if contract_note else ())

    summary = WeekSummary(
        week=next_snapshot.week,
        expenses=expenses,
        revenue=revenue,
        fan_growth=growth,
        net_change=net_change,
        balance_after=balance_after,
        notes=notes,
    )
    logger.debug(
        "Week advanced",
        extra={"week_after": next_snapshot.week, "net_change": net_change, "balance_after": balance_after},
    )
    return TickResult(snapshot=next_snapshot, summary=summary)
