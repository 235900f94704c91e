"""Drive a short session against flat-file storage and print what happens."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from offworklock import ConfigManager, LockApp
from offworklock.domain.abuse import ForcedExitEvent

logging.basicConfig(level=logging.INFO)

BASE_DIR = Path(__file__).parent / "data"


async def warn_admins(event: ForcedExitEvent) -> None:
    if event.threshold_reached:
        print(f"[admin] {event.player_id} keeps force-quitting ({event.record.forced_exit_count})")


async def main() -> None:
    manager = ConfigManager(BASE_DIR)
    app = LockApp(manager)
    app.abuse_tracker.add_hook(warn_admins)
    await app.init_backend()

    context, player = "survival", "steve"
    start = await app.sessions.handle_session_start(context, player)
    if start.abuse_report.warning_message:
        print(start.abuse_report.warning_message)

    for ore in ["minecraft:diamond_ore"] * 20 + ["minecraft:iron_ore"] * 5:
        await app.economy.handle_action(context, player, ore)

    screen = await app.views.screen(context, player)
    print(f"{screen.points} pts, roll costs {screen.roll_cost}")
    for entry in screen.rewards:
        print(f"  {entry.name}: {entry.probability_text}")

    while await app.roll_engine.can_roll(context, player):
        outcome = await app.roll_engine.roll(context, player)
        print(" | ".join(outcome.notifications))
        if outcome.unlocked:
            break

    decision = await app.exit_gate.decide(context, player, "minecraft:overworld")
    print(decision.message or "Exit allowed.")
    if not decision.locked:
        await app.sessions.handle_graceful_exit(context, player)
    await app.close()


if __name__ == "__main__":
    asyncio.run(main())
