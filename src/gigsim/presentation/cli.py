from __future__ import annotations

import argparse
from typing import Sequence

from rich.console import Console

from gigsim.application.services.balance_tables import CHART_SIZE
from gigsim.application.services.simulation_service import SimulationService
from gigsim.domain.models.snapshot import Difficulty
from gigsim.presentation.weekly_report import render_chart, render_week_report


DEFAULT_SESSION_ID = "cli"


def build_parser(default_seed: int = 1) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gigsim", description="Run the weekly band simulation.")
    parser.add_argument("--weeks", type=int, default=4, help="number of weeks to simulate")
    parser.add_argument("--seed", type=int, default=default_seed, help="rng seed for the session")
    parser.add_argument("--band", default="The Unsigned", help="band name")
    parser.add_argument("--genre", default="Pop", help="primary genre")
    parser.add_argument(
        "--difficulty",
        default=Difficulty.NORMAL.value,
        choices=[level.value for level in Difficulty],
    )
    parser.add_argument("--demo-catalog", action="store_true", help="start with a few songs and merchandise")
    parser.add_argument("--chart", action="store_true", help="print the chart after the last week")
    return parser


def run(service: SimulationService, argv: Sequence[str] | None = None, *, console: Console | None = None, default_seed: int = 1) -> int:
    args = build_parser(default_seed).parse_args(argv)
    console = console or Console()
    service.new_session(
        DEFAULT_SESSION_ID,
        args.band,
        genre=args.genre,
        difficulty=args.difficulty,
        seed=args.seed,
        demo_catalog=args.demo_catalog,
    )
    for _ in range(max(0, args.weeks)):
        render_week_report(service.advance_week(DEFAULT_SESSION_ID), console)
    if args.chart:
        render_chart(service.chart(DEFAULT_SESSION_ID, size=CHART_SIZE), console)
    return 0
