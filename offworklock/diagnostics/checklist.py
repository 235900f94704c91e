"""Automated checks to highlight balancing issues."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import EngineConfig, positive_rewards
from ..domain.effects import EffectKind
from ..domain.rewards import reward_displays

MIN_UNLOCK_PROBABILITY = 0.01


@dataclass(slots=True)
class ChecklistIssue:
    severity: str
    message: str


def run_checklist(config: EngineConfig) -> list[ChecklistIssue]:
    issues: list[ChecklistIssue] = []

    if not positive_rewards(config.rewards):
        issues.append(ChecklistIssue("error", "No reward can be rolled; the table has no positive weight."))

    unlock_chance = sum(
        display.probability
        for display in reward_displays(config.rewards)
        if any(effect.kind is EffectKind.UNLOCK_EXIT for effect in display.reward.parsed_effects())
    )
    if unlock_chance <= 0:
        issues.append(ChecklistIssue("error", "No reward unlocks the exit; players can never leave."))
    elif unlock_chance < MIN_UNLOCK_PROBABILITY:
        issues.append(
            ChecklistIssue(
                "warning",
                f"Unlock chance is only {unlock_chance * 100:.2f}% per roll.",
            )
        )

    if config.effective_cost == 0:
        issues.append(ChecklistIssue("warning", "Roll cost is zero; rolls are free."))

    if not any(value > 0 for value in config.action_values.values()):
        issues.append(ChecklistIssue("warning", "No action awards points; players cannot earn rolls."))

    if not config.lock.locked_zones:
        issues.append(ChecklistIssue("warning", "No zones are locked; the exit restriction never applies."))

    return issues
