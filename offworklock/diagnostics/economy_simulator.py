"""Roll economy simulation helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Dict

from ..config import EngineConfig
from ..domain.effects import EffectKind, parse_int_argument
from ..domain.rewards import RewardDefinition
from ..domain.selection import WeightedSelector


@dataclass(slots=True)
class SimulationResult:
    rolls: int
    cost: int
    counts: Dict[str, int] = field(default_factory=dict)
    bonus_points: int = 0
    unlocks: int = 0
    first_unlock_roll: int | None = None

    def merge(self, roll_number: int, reward: RewardDefinition) -> None:
        self.counts[reward.reward_id] = self.counts.get(reward.reward_id, 0) + 1
        for effect in reward.parsed_effects():
            if effect.kind is EffectKind.ADD_POINTS:
                self.bonus_points += parse_int_argument(effect.argument(0), 0)
            elif effect.kind is EffectKind.UNLOCK_EXIT:
                self.unlocks += 1
                if self.first_unlock_roll is None:
                    self.first_unlock_roll = roll_number

    @property
    def net_points_per_roll(self) -> float:
        if self.rolls <= 0:
            return 0.0
        return (self.bonus_points - self.cost * self.rolls) / self.rolls

    @property
    def rolls_per_unlock(self) -> float | None:
        if self.unlocks == 0:
            return None
        return self.rolls / self.unlocks


class RollSimulator:
    """Monte-Carlo simulation of rolls against a reward table.

    The simulation ignores player balances: every roll is paid in full and
    bonus points are counted unclamped.
    """

    def __init__(self, config: EngineConfig, *, rng: Random | None = None) -> None:
        self._config = config
        self._selector = WeightedSelector(rng or Random())

    def simulate(self, *, rolls: int = 1000) -> SimulationResult:
        result = SimulationResult(rolls=0, cost=self._config.effective_cost)
        rewards = self._config.rewards
        for number in range(1, max(0, rolls) + 1):
            reward = self._selector.pick(rewards, lambda entry: entry.weight)
            if reward is None:
                break
            result.rolls = number
            result.merge(number, reward)
        return result
