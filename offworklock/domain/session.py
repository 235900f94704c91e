"""Session lifecycle policy.

Integration layers call :meth:`SessionPolicy.handle_session_start` when a
player joins a context and :meth:`SessionPolicy.handle_graceful_exit` on a
clean, intended exit. A session that is still marked open at the next start
never closed gracefully and counts as a forced exit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import ConfigSource, SessionResetMode
from ..storage.base import PlayerRecord
from ..storage.store import PlayerStateStore
from .abuse import AbuseReport, AbuseTracker
from .points import saturating_increment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionStartResult:
    record: PlayerRecord
    forced_exit_detected: bool
    abuse_report: AbuseReport = AbuseReport()


class SessionPolicy:
    def __init__(
        self,
        store: PlayerStateStore,
        config: ConfigSource,
        abuse_tracker: AbuseTracker | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._abuse_tracker = abuse_tracker

    async def handle_session_start(self, context: str, player_id: str) -> SessionStartResult:
        config = self._config.current()
        tracking = config.forced_exit.tracking_enabled
        report = AbuseReport.none()

        async with self._store.transaction(context) as tx:
            state = await tx.get_or_create(player_id)
            forced_exit_detected = state.session_open
            updated = state.with_session_open(True)

            if not tracking and updated.forced_exit_count != 0:
                updated = updated.with_forced_exit_count(0)

            if forced_exit_detected and tracking:
                updated = updated.with_forced_exit_count(
                    saturating_increment(state.forced_exit_count)
                )
                logger.info(
                    "Forced exit detected for player %s in %s (count=%d)",
                    player_id,
                    tx.context,
                    updated.forced_exit_count,
                )

            # The open flag must be durable before the session does anything else.
            await tx.update(player_id, updated)

        # Hooks run outside the context lock so they may read the store themselves.
        if forced_exit_detected and tracking and self._abuse_tracker is not None:
            report = await self._abuse_tracker.on_forced_exit(
                tx.context, player_id, updated, config
            )

        return SessionStartResult(
            record=updated,
            forced_exit_detected=forced_exit_detected,
            abuse_report=report,
        )

    async def handle_graceful_exit(self, context: str, player_id: str) -> None:
        config = self._config.current()
        async with self._store.transaction(context) as tx:
            state = await tx.get_or_create(player_id)
            updated = state.with_session_open(False)

            if config.session_reset_mode is SessionResetMode.ONE_TIME and state.unlocked:
                updated = updated.with_unlocked(False)

            if not config.forced_exit.tracking_enabled and updated.forced_exit_count != 0:
                updated = updated.with_forced_exit_count(0)

            await tx.update(player_id, updated)
