"""Forced-exit abuse tracking.

The tracker never changes player state. It evaluates the warning threshold,
builds the warning text and notifies registered hooks. A failing hook is
logged and skipped so subscribers cannot break session handling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

from ..config import EngineConfig
from ..storage.base import PlayerRecord

logger = logging.getLogger(__name__)

DEFAULT_WARNING_TEMPLATE = "Forced exit pattern detected. ({count})"


@dataclass(frozen=True, slots=True)
class ForcedExitEvent:
    context: str
    player_id: str
    record: PlayerRecord
    threshold_reached: bool


ForcedExitHook = Callable[[ForcedExitEvent], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class AbuseReport:
    threshold_reached: bool = False
    warning_message: str | None = None

    @classmethod
    def none(cls) -> "AbuseReport":
        return _NO_ISSUES


_NO_ISSUES = AbuseReport()


def threshold_reached(*, tracking_enabled: bool, threshold: int, count: int) -> bool:
    threshold = max(0, threshold)
    return tracking_enabled and threshold > 0 and count >= threshold


def format_warning(template: str | None, count: int) -> str:
    if template is None or not template.strip():
        template = DEFAULT_WARNING_TEMPLATE
    return template.replace("{count}", str(count))


class AbuseTracker:
    def __init__(self) -> None:
        self._hooks: list[ForcedExitHook] = []

    def add_hook(self, hook: ForcedExitHook | None) -> None:
        if hook is not None:
            self._hooks.append(hook)

    def remove_hook(self, hook: ForcedExitHook | None) -> None:
        if hook is not None and hook in self._hooks:
            self._hooks.remove(hook)

    def hooks(self) -> Iterable[ForcedExitHook]:
        return tuple(self._hooks)

    async def on_forced_exit(
        self,
        context: str,
        player_id: str,
        record: PlayerRecord,
        config: EngineConfig,
    ) -> AbuseReport:
        """Evaluate a detected forced exit; *record* already carries the new count."""
        settings = config.forced_exit
        reached = threshold_reached(
            tracking_enabled=settings.tracking_enabled,
            threshold=settings.warning_threshold if settings.tracking_enabled else 0,
            count=record.forced_exit_count,
        )

        warning = None
        if reached:
            warning = format_warning(settings.warning_message, record.forced_exit_count)
            logger.warning(
                "Player %s in %s reached forced exit threshold (%d)",
                player_id,
                context,
                record.forced_exit_count,
            )

        event = ForcedExitEvent(
            context=context,
            player_id=player_id,
            record=record,
            threshold_reached=reached,
        )
        for hook in list(self._hooks):
            try:
                await hook(event)
            except Exception:
                logger.warning(
                    "Forced exit hook %r failed for player %s", hook, player_id, exc_info=True
                )

        return AbuseReport(threshold_reached=reached, warning_message=warning)
