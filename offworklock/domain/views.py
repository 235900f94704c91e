"""Read-only projections for HUD and roll screen renderers."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import ConfigSource
from ..storage.store import PlayerStateStore
from .rewards import reward_displays


@dataclass(frozen=True, slots=True)
class HudSnapshot:
    visible: bool
    points: int = 0
    roll_cost: int = 0
    unlocked: bool = False
    offset_x: int = 0
    offset_y: int = 0
    show_cost: bool = False
    show_unlock_state: bool = False


HIDDEN_HUD = HudSnapshot(visible=False)


@dataclass(frozen=True, slots=True)
class RewardEntry:
    reward_id: str
    name: str
    description: str
    probability: float
    probability_text: str


@dataclass(frozen=True, slots=True)
class ScreenSnapshot:
    points: int
    roll_cost: int
    can_roll: bool
    rewards: tuple[RewardEntry, ...] = field(default_factory=tuple)


class ViewService:
    def __init__(self, store: PlayerStateStore, config: ConfigSource) -> None:
        self._store = store
        self._config = config

    async def hud(self, context: str, player_id: str) -> HudSnapshot:
        config = self._config.current()
        if not config.hud.enabled:
            return HIDDEN_HUD
        record = await self._store.get_or_create(context, player_id)
        return HudSnapshot(
            visible=True,
            points=record.points,
            roll_cost=config.effective_cost,
            unlocked=record.unlocked,
            offset_x=config.hud.offset_x,
            offset_y=config.hud.offset_y,
            show_cost=config.hud.show_cost,
            show_unlock_state=config.hud.show_unlock_state,
        )

    async def screen(self, context: str, player_id: str) -> ScreenSnapshot:
        config = self._config.current()
        record = await self._store.get_or_create(context, player_id)
        cost = config.effective_cost
        entries = tuple(
            RewardEntry(
                reward_id=display.reward.reward_id,
                name=display.reward.display_name,
                description=display.reward.description,
                probability=display.probability,
                probability_text=display.probability_text,
            )
            for display in reward_displays(config.rewards)
        )
        return ScreenSnapshot(
            points=record.points,
            roll_cost=cost,
            can_roll=cost > 0 and record.points >= cost,
            rewards=entries,
        )
