from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from gigsim.domain.models.catalog import MerchandiseItem
from gigsim.domain.models.snapshot import Snapshot
from gigsim.domain.models.trend import GenrePopularity, GenreTrend


@dataclass(frozen=True)
class ExpenseBreakdown:
    base: int = 0
    salaries: int = 0
    equipment: int = 0
    transport: int = 0
    staff: int = 0
    label: int = 0

    @property
    def total(self) -> int:
        return self.base + self.salaries + self.equipment + self.transport + self.staff + self.label


@dataclass(frozen=True)
class RadioPlays:
    plays: int = 0
    revenue: int = 0


@dataclass(frozen=True)
class MerchSales:
    revenue: int = 0
    units_sold: int = 0
    items: tuple[MerchandiseItem, ...] = ()


@dataclass(frozen=True)
class RoyaltySplit:
    net_revenue: int = 0
    label_share: int = 0


@dataclass(frozen=True)
class RevenueBreakdown:
    songs: int = 0
    radio: RadioPlays = field(default_factory=RadioPlays)
    albums: int = 0
    merchandise: int = 0
    merch_units: int = 0
    royalty: RoyaltySplit = field(default_factory=RoyaltySplit)

    @property
    def music_gross(self) -> int:
        return self.songs + self.radio.revenue + self.albums

    @property
    def net(self) -> int:
        return self.royalty.net_revenue + self.merchandise


@dataclass(frozen=True)
class TrendResult:
    trend: GenreTrend | None = None
    seasonal_boost: int = 0
    genre_trends: dict[str, GenrePopularity] = field(default_factory=dict)
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class WeekSummary:
    week: int
    expenses: ExpenseBreakdown
    revenue: RevenueBreakdown
    fan_growth: int
    net_change: int
    balance_after: int
    notes: tuple[str, ...] = ()

    def render_text(self) -> str:
        lines = [
            f"Week {self.week} Summary:",
            f"- Expenses: ${self.expenses.total:,}",
            f"- Song Streaming: ${self.revenue.songs:,}",
            f"- Radio Plays: {self.revenue.radio.plays} (${self.revenue.radio.revenue:,})",
            f"- Album Revenue: ${self.revenue.albums:,}",
        ]
        if self.revenue.royalty.label_share > 0:
            lines.append(f"- Label Royalty Split: -${self.revenue.royalty.label_share:,}")
        if self.revenue.merch_units > 0:
            lines.append(f"- Merchandise: ${self.revenue.merchandise:,} ({self.revenue.merch_units} units)")
        sign = "+" if self.net_change >= 0 else "-"
        lines.extend(
            [
                f"- Net Revenue: ${self.revenue.net:,}",
                f"- Net: {sign}${abs(self.net_change):,}",
                f"- Fan Growth: +{self.fan_growth}",
                f"- New Balance: ${self.balance_after:,}",
            ]
        )
        lines.extend(f"- {note}" for note in self.notes)
        return "\n".join(lines)


@dataclass
class TickResult:
    snapshot: Snapshot
    summary: WeekSummary

    @property
    def summary_text(self) -> str:
        return self.summary.render_text()


@dataclass
class ActionResult:
    messages: List[str] = field(default_factory=list)
    accepted: bool = True
    reason: str | None = None
    required_amount: int | None = None


@dataclass
class EscalationNotice:
    consequence_id: str
    previous_stage: str
    new_stage: str
    description: str
    severity: str
    resurfaced: bool = False
    times_resurfaced: int = 0


@dataclass
class WeekReport:
    session_id: str
    summary: WeekSummary
    snapshot: Snapshot
    notices: List[EscalationNotice] = field(default_factory=list)
    faction_statuses: dict[str, str] = field(default_factory=dict)
    opportunities: List[str] = field(default_factory=list)
    threats: List[str] = field(default_factory=list)

    @property
    def summary_text(self) -> str:
        return self.summary.render_text()


@dataclass
class ChartEntry:
    rank: int
    title: str
    artist: str
    score: int
    is_player: bool = False
