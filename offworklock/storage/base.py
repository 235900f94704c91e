"""Storage abstractions used by the OffWorkLock services."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Mapping, Protocol

from ..domain.points import MAX_POINTS, clamp_points

_UNSAFE_CONTEXT_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


@dataclass(frozen=True, slots=True)
class PlayerRecord:
    """Persistent economy and session state of one player in one context."""

    player_id: str
    points: int = 0
    unlocked: bool = False
    session_open: bool = False
    forced_exit_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", clamp_points(self.points))
        object.__setattr__(
            self, "forced_exit_count", max(0, min(MAX_POINTS, int(self.forced_exit_count)))
        )

    def with_points(self, points: int) -> "PlayerRecord":
        return replace(self, points=points)

    def with_unlocked(self, unlocked: bool) -> "PlayerRecord":
        return replace(self, unlocked=unlocked)

    def with_session_open(self, session_open: bool) -> "PlayerRecord":
        return replace(self, session_open=session_open)

    def with_forced_exit_count(self, count: int) -> "PlayerRecord":
        return replace(self, forced_exit_count=count)


class RecordBackend(Protocol):
    """Durable storage for a whole context's record set."""

    async def load(self, context: str) -> dict[str, PlayerRecord]:
        ...

    async def save(self, context: str, records: Mapping[str, PlayerRecord]) -> None:
        ...


def sanitize_context(context: str | None) -> str:
    value = (context or "").strip() or "default"
    return _UNSAFE_CONTEXT_CHARS.sub("_", value)
