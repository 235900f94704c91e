"""Point accumulation from in-world actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ..config import AccumulationMode, ConfigSource, action_value
from ..storage.store import PlayerStateStore
from .points import apply_delta

logger = logging.getLogger(__name__)


class AwardStatus(str, Enum):
    NO_MATCH = "no_match"
    AWARDED = "awarded"
    PENDING_EXCHANGE = "pending_exchange"


class ExchangeStatus(str, Enum):
    IGNORED = "ignored"
    EMPTY = "empty"
    EXCHANGED = "exchanged"


@dataclass(frozen=True, slots=True)
class AwardResult:
    status: AwardStatus
    points_awarded: int = 0
    potential_points: int = 0
    total_points: int = 0
    suppress_default: bool = False
    message: str | None = None

    @property
    def matched(self) -> bool:
        return self.status is not AwardStatus.NO_MATCH

    @property
    def points_changed(self) -> bool:
        return self.status is AwardStatus.AWARDED


@dataclass(frozen=True, slots=True)
class ExchangeResult:
    status: ExchangeStatus
    points_gained: int = 0
    total_points: int = 0
    consumed: Mapping[str, int] = field(default_factory=dict)
    message: str | None = None

    @property
    def processed(self) -> bool:
        return self.status is not ExchangeStatus.IGNORED


NO_MATCH = AwardResult(status=AwardStatus.NO_MATCH)
EXCHANGE_IGNORED = ExchangeResult(status=ExchangeStatus.IGNORED)
EXCHANGE_EMPTY = ExchangeResult(status=ExchangeStatus.EMPTY, message="Nothing to exchange.")


class EconomyService:
    """Convert qualifying actions into points, immediately or by batch exchange."""

    def __init__(self, store: PlayerStateStore, config: ConfigSource) -> None:
        self._store = store
        self._config = config

    async def handle_action(self, context: str, player_id: str, action_key: str) -> AwardResult:
        config = self._config.current()
        value = action_value(config, action_key)
        if value <= 0:
            return NO_MATCH

        if config.accumulation_mode is AccumulationMode.MANUAL:
            record = await self._store.get_or_create(context, player_id)
            return AwardResult(
                status=AwardStatus.PENDING_EXCHANGE,
                potential_points=value,
                total_points=record.points,
                message=f"+{value} pts (exchange required)",
            )

        async with self._store.transaction(context) as tx:
            record = await tx.get_or_create(player_id)
            total, applied = apply_delta(record.points, value)
            await tx.update(player_id, record.with_points(total))

        logger.debug("Player %s earned %d points for %s", player_id, applied, action_key)
        return AwardResult(
            status=AwardStatus.AWARDED,
            points_awarded=applied,
            total_points=total,
            suppress_default=True,
            message=f"+{applied} pts",
        )

    async def exchange(
        self, context: str, player_id: str, counts: Mapping[str, int]
    ) -> ExchangeResult:
        """Convert a snapshot of item counts into points.

        Items are not removed here; the caller removes what ``consumed`` lists.
        """
        config = self._config.current()
        if config.accumulation_mode is not AccumulationMode.MANUAL:
            return EXCHANGE_IGNORED

        consumed: dict[str, int] = {}
        total_points = 0
        for item_kind, count in counts.items():
            if item_kind is None:
                continue
            value = action_value(config, item_kind)
            if value <= 0 or not count or count <= 0:
                continue
            consumed[item_kind] = int(count)
            total_points += value * int(count)

        if total_points <= 0:
            return EXCHANGE_EMPTY

        async with self._store.transaction(context) as tx:
            record = await tx.get_or_create(player_id)
            total, applied = apply_delta(record.points, total_points)
            await tx.update(player_id, record.with_points(total))

        logger.debug(
            "Player %s exchanged %s for %d points", player_id, dict(consumed), applied
        )
        return ExchangeResult(
            status=ExchangeStatus.EXCHANGED,
            points_gained=applied,
            total_points=total,
            consumed=MappingProxyType(consumed),
            message=f"+{applied} pts (total {total})",
        )
