"""Roll engine: cost handling, weighted reward selection and effect resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..config import ConfigSource
from ..storage.base import PlayerRecord
from ..storage.store import PlayerStateStore
from .effects import EffectDescriptor, EffectKind, parse_int_argument
from .points import apply_delta, deduct
from .rewards import RewardDefinition, RewardDisplay, reward_displays
from .selection import WeightedSelector

logger = logging.getLogger(__name__)

UNLOCK_NOTIFICATION = "Off work! Exit is available again."


class RollFailure(str, Enum):
    EMPTY_TABLE = "empty_table"
    INSUFFICIENT_POINTS = "insufficient_points"
    NO_REWARD_SELECTED = "no_reward_selected"

    @property
    def message(self) -> str:
        return _FAILURE_MESSAGES[self]


_FAILURE_MESSAGES = {
    RollFailure.EMPTY_TABLE: "The reward table is empty.",
    RollFailure.INSUFFICIENT_POINTS: "Not enough points.",
    RollFailure.NO_REWARD_SELECTED: "No valid reward could be selected.",
}


@dataclass(frozen=True, slots=True)
class RollOutcome:
    success: bool
    failure: RollFailure | None = None
    reward: RewardDefinition | None = None
    cost: int = 0
    points_before: int = 0
    points_after: int = 0
    bonus_points: int = 0
    unlocked: bool = False
    deferred_effects: tuple[EffectDescriptor, ...] = field(default_factory=tuple)
    notifications: tuple[str, ...] = field(default_factory=tuple)
    executed_effects: tuple[EffectDescriptor, ...] = field(default_factory=tuple)

    @property
    def failure_reason(self) -> str | None:
        return self.failure.message if self.failure else None

    @classmethod
    def failed(cls, failure: RollFailure) -> "RollOutcome":
        return cls(success=False, failure=failure, notifications=(failure.message,))


@dataclass(slots=True)
class _Resolution:
    record: PlayerRecord
    bonus_points: int = 0
    deferred: list[EffectDescriptor] = field(default_factory=list)
    notifications: list[str] = field(default_factory=list)
    executed: list[EffectDescriptor] = field(default_factory=list)


class RollEngine:
    """Spend points on weighted rolls against the configured reward table."""

    def __init__(
        self,
        store: PlayerStateStore,
        config: ConfigSource,
        *,
        selector: WeightedSelector | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._selector = selector or WeightedSelector()

    async def can_roll(self, context: str, player_id: str) -> bool:
        config = self._config.current()
        record = await self._store.get_or_create(context, player_id)
        return record.points >= config.roll_cost

    async def roll(self, context: str, player_id: str) -> RollOutcome:
        config = self._config.current()
        rewards = config.rewards
        if not rewards:
            return RollOutcome.failed(RollFailure.EMPTY_TABLE)

        async with self._store.transaction(context) as tx:
            before = await tx.get_or_create(player_id)
            if before.points < config.roll_cost:
                return RollOutcome.failed(RollFailure.INSUFFICIENT_POINTS)

            reward = self._selector.pick(rewards, lambda entry: entry.weight)
            if reward is None:
                return RollOutcome.failed(RollFailure.NO_REWARD_SELECTED)

            cost = config.effective_cost
            working = before.with_points(deduct(before.points, cost))
            resolution = self._resolve(reward, working)
            await tx.update(player_id, resolution.record)

        logger.debug(
            "Player %s in %s rolled %s (%d -> %d points)",
            player_id,
            tx.context,
            reward.reward_id,
            before.points,
            resolution.record.points,
        )
        if resolution.record.unlocked and not before.unlocked:
            logger.info("Player %s unlocked exit in %s", player_id, tx.context)

        notifications = list(resolution.notifications)
        if reward.name.strip():
            notifications.insert(0, reward.name)

        return RollOutcome(
            success=True,
            reward=reward,
            cost=cost,
            points_before=before.points,
            points_after=resolution.record.points,
            bonus_points=resolution.bonus_points,
            unlocked=resolution.record.unlocked,
            deferred_effects=tuple(resolution.deferred),
            notifications=tuple(notifications),
            executed_effects=tuple(resolution.executed),
        )

    def reward_displays(self) -> list[RewardDisplay]:
        return reward_displays(self._config.current().rewards)

    def _resolve(self, reward: RewardDefinition, record: PlayerRecord) -> _Resolution:
        resolution = _Resolution(record=record)
        for effect in reward.parsed_effects():
            resolution.executed.append(effect)
            if effect.kind is EffectKind.UNLOCK_EXIT:
                if not resolution.record.unlocked:
                    resolution.record = resolution.record.with_unlocked(True)
                resolution.notifications.append(UNLOCK_NOTIFICATION)
            elif effect.kind is EffectKind.ADD_POINTS:
                self._apply_bonus(resolution, effect)
            elif effect.kind is EffectKind.MESSAGE:
                message = ":".join(effect.arguments) if effect.arguments else effect.raw_command
                if message.strip():
                    resolution.notifications.append(message)
            else:
                resolution.deferred.append(effect)
        return resolution

    @staticmethod
    def _apply_bonus(resolution: _Resolution, effect: EffectDescriptor) -> None:
        delta = parse_int_argument(effect.argument(0), 0)
        if delta == 0:
            return
        updated, applied = apply_delta(resolution.record.points, delta)
        resolution.record = resolution.record.with_points(updated)
        if applied != 0:
            resolution.bonus_points += applied
            resolution.notifications.append(f"Bonus points {_format_signed(applied)}")


def _format_signed(value: int) -> str:
    return f"{'+' if value >= 0 else ''}{value} pts"

