"""Command line helpers for OffWorkLock."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from random import Random

from rich.console import Console
from rich.table import Table

from .config import EngineConfig
from .diagnostics.checklist import run_checklist as checklist_run
from .diagnostics.economy_simulator import RollSimulator
from .domain.exceptions import ConfigError
from .domain.rewards import reward_displays
from .loaders import load_config_from_json, validate_config_file
from .validators import validate_config

console = Console()


def run_validate() -> None:
    parser = argparse.ArgumentParser(description="OffWorkLock config validator")
    parser.add_argument("--config", required=True, help="Path to config JSON file")
    args = parser.parse_args()

    try:
        errors = validate_config_file(Path(args.config))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"Cannot read config: {exc}", style="red")
        sys.exit(1)
    if errors:
        console.print("[bold red]Config errors:[/bold red]")
        for err in errors:
            console.print(f"- {err}")
        sys.exit(1)

    issues = validate_config(load_config_from_json(args.config))
    if issues:
        console.print("[bold red]Config problems:[/bold red]")
        for issue in issues:
            console.print(f"- {issue}")
        sys.exit(1)
    console.print("Config is valid ✅")


def run_odds() -> None:
    parser = argparse.ArgumentParser(description="Show reward probabilities")
    parser.add_argument("--config", help="Path to config JSON file (defaults when omitted)")
    args = parser.parse_args()

    config = _load(args.config)
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Weight", justify="right")
    table.add_column("Chance", justify="right")
    table.add_column("Effects")
    for display in reward_displays(config.rewards):
        reward = display.reward
        table.add_row(
            reward.reward_id,
            reward.display_name,
            f"{reward.weight:g}",
            display.probability_text,
            ", ".join(reward.effects),
        )
    console.print(table)
    console.print(f"Roll cost: {config.effective_cost} pts")


def run_simulator() -> None:
    parser = argparse.ArgumentParser(description="OffWorkLock roll simulator")
    parser.add_argument("--config", help="Path to config JSON file (defaults when omitted)")
    parser.add_argument("--rolls", type=int, default=1000, help="Number of rolls to simulate")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible run")
    args = parser.parse_args()

    config = _load(args.config)
    seed = args.seed if args.seed is not None else config.rng_seed
    simulator = RollSimulator(config, rng=Random(seed))
    result = simulator.simulate(rolls=args.rolls)

    console.print(f"Simulated {result.rolls} rolls.")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Reward")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for reward_id, count in sorted(result.counts.items(), key=lambda item: -item[1]):
        share = count / result.rolls * 100 if result.rolls else 0.0
        table.add_row(reward_id, str(count), f"{share:.1f}%")
    console.print(table)
    console.print(f"Bonus points: {result.bonus_points}")
    console.print(f"Net points per roll: {result.net_points_per_roll:.2f}")
    if result.rolls_per_unlock is None:
        console.print("No unlock rolled.", style="yellow")
    else:
        console.print(
            f"Unlocks: {result.unlocks} (first at roll {result.first_unlock_roll}, "
            f"{result.rolls_per_unlock:.1f} rolls per unlock)"
        )


def run_checklist() -> None:
    parser = argparse.ArgumentParser(description="OffWorkLock balance checks")
    parser.add_argument("--config", help="Path to config JSON file (defaults when omitted)")
    args = parser.parse_args()

    issues = checklist_run(_load(args.config))
    if not issues:
        console.print("No issues found ✅")
        return
    for issue in issues:
        style = "red" if issue.severity == "error" else "yellow"
        console.print(f"[{issue.severity.upper()}] {issue.message}", style=style, markup=False)
    sys.exit(1)


def _load(path: str | None) -> EngineConfig:
    if not path:
        return EngineConfig()
    try:
        return load_config_from_json(path)
    except ConfigError as exc:
        console.print(str(exc), style="red", markup=False)
        sys.exit(1)
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"Cannot read config: {exc}", style="red", markup=False)
        sys.exit(1)
