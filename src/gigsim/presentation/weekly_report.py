from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gigsim.application.dtos import ChartEntry, EscalationNotice, WeekReport


_BORDER_WEEK = "yellow"
_BORDER_CONSEQUENCE = "red"
_BORDER_CHART = "cyan"
_BORDER_FACTION = "magenta"

_SEVERITY_STYLES = {"low": "green", "medium": "yellow", "high": "red", "critical": "bold red"}


def _title(text: str) -> str:
    return f"[bold yellow]{str(text or '').strip() or 'Report'}[/bold yellow]"


def summary_table(report: WeekReport) -> Table:
    summary = report.summary
    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold yellow", justify="right")
    table.add_column(style="white")
    table.add_row("Expenses", f"${summary.expenses.total:,}")
    table.add_row("Song Streaming", f"${summary.revenue.songs:,}")
    table.add_row("Radio Plays", f"{summary.revenue.radio.plays} (${summary.revenue.radio.revenue:,})")
    table.add_row("Album Revenue", f"${summary.revenue.albums:,}")
    if summary.revenue.royalty.label_share > 0:
        table.add_row("Label Royalty Split", f"-${summary.revenue.royalty.label_share:,}")
    if summary.revenue.merch_units > 0:
        table.add_row("Merchandise", f"${summary.revenue.merchandise:,} ({summary.revenue.merch_units} units)")
    table.add_row("Net Revenue", f"${summary.revenue.net:,}")
    net_style = "green" if summary.net_change >= 0 else "red"
    sign = "+" if summary.net_change >= 0 else "-"
    table.add_row("Net", f"[{net_style}]{sign}${abs(summary.net_change):,}[/{net_style}]")
    table.add_row("Fan Growth", f"+{summary.fan_growth}")
    table.add_row("New Balance", f"${summary.balance_after:,}")
    for note in summary.notes:
        table.add_row("Note", str(note))
    return table


def notices_table(notices: Sequence[EscalationNotice]) -> Table:
    table = Table(show_header=True, header_style="bold yellow")
    table.add_column("Consequence")
    table.add_column("Stage")
    table.add_column("Severity")
    table.add_column("Description")
    for notice in notices:
        stage = f"{notice.previous_stage} -> {notice.new_stage}"
        if notice.resurfaced:
            stage = f"resurfaced (x{notice.times_resurfaced})"
        style = _SEVERITY_STYLES.get(str(notice.severity).lower(), "white")
        table.add_row(
            notice.consequence_id,
            stage,
            f"[{style}]{notice.severity}[/{style}]",
            notice.description,
        )
    return table


def chart_table(entries: Sequence[ChartEntry]) -> Table:
    table = Table(show_header=True, header_style="bold yellow")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Score", justify="right")
    for entry in entries:
        title = f"[bold green]{entry.title}[/bold green]" if entry.is_player else entry.title
        table.add_row(str(entry.rank), title, entry.artist, str(entry.score))
    return table


def render_week_report(report: WeekReport, console: Console) -> None:
    console.print(
        Panel.fit(
            summary_table(report),
            title=_title(f"Week {report.summary.week} Summary"),
            subtitle=f"[dim]{report.snapshot.band_name}[/dim]",
            subtitle_align="left",
            border_style=_BORDER_WEEK,
        )
    )
    if report.notices:
        console.print(
            Panel.fit(
                notices_table(report.notices),
                title=_title("Consequences"),
                border_style=_BORDER_CONSEQUENCE,
            )
        )
    lines = []
    if report.opportunities:
        lines.append("Opportunities: " + ", ".join(report.opportunities))
    if report.threats:
        lines.append("Threats: " + ", ".join(report.threats))
    if lines:
        console.print(Panel.fit("\n".join(lines), title=_title("Factions"), border_style=_BORDER_FACTION))


def render_chart(entries: Sequence[ChartEntry], console: Console) -> None:
    if not entries:
        console.print(Panel.fit("No chart entries yet.", title=_title("Charts"), border_style=_BORDER_CHART))
        return
    console.print(Panel.fit(chart_table(entries), title=_title("Charts"), border_style=_BORDER_CHART))
