"""Reward table models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .effects import EffectDescriptor, parse_effect


@dataclass(frozen=True, slots=True)
class RewardDefinition:
    """A single entry of the roll reward table."""

    reward_id: str
    name: str
    description: str = ""
    weight: float = 1.0
    effects: tuple[str, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        return self.name if self.name.strip() else self.reward_id

    def parsed_effects(self) -> list[EffectDescriptor]:
        return [parse_effect(command) for command in self.effects if command and command.strip()]


@dataclass(frozen=True, slots=True)
class RewardDisplay:
    """Reward paired with its normalised probability, for UI consumers."""

    reward: RewardDefinition
    probability: float

    @property
    def probability_text(self) -> str:
        return format_probability(self.probability)


def format_probability(probability: float) -> str:
    percent = probability * 100.0
    if percent <= 0:
        return "0%"
    if percent >= 1:
        return f"{percent:.1f}%"
    return f"{percent:.2f}%"


def reward_displays(rewards: Sequence[RewardDefinition]) -> list[RewardDisplay]:
    total = sum(reward.weight for reward in rewards if reward.weight > 0)
    displays: list[RewardDisplay] = []
    for reward in rewards:
        weight = max(0.0, reward.weight)
        chance = 0.0 if total <= 0 or weight <= 0 else weight / total
        displays.append(RewardDisplay(reward=reward, probability=chance))
    return displays


DEFAULT_REWARDS: tuple[RewardDefinition, ...] = (
    RewardDefinition(
        reward_id="OFF_WORK",
        name="Off Work Unlock",
        description="Lifts the session exit restriction.",
        weight=1.0,
        effects=("unlock_exit",),
    ),
    RewardDefinition(
        reward_id="POINTS_BONUS",
        name="Bonus Points",
        description="Grants extra points.",
        weight=3.0,
        effects=("add_points:50",),
    ),
    RewardDefinition(
        reward_id="NOTHING",
        name="Blank",
        description="Nothing happens.",
        weight=5.0,
        effects=("message:better-luck-next-time",),
    ),
)
