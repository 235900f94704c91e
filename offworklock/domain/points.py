"""Saturating point arithmetic shared by every service that touches points."""

from __future__ import annotations

MAX_POINTS = 2**31 - 1


def clamp_points(value: int) -> int:
    """Clamp *value* into ``[0, MAX_POINTS]``."""
    return max(0, min(MAX_POINTS, int(value)))


def apply_delta(current: int, delta: int) -> tuple[int, int]:
    """Return the clamped new total and the delta that was actually applied."""
    before = clamp_points(current)
    updated = clamp_points(before + delta)
    return updated, updated - before


def deduct(current: int, cost: int) -> int:
    cost = max(0, cost)
    return max(0, clamp_points(current) - cost)


def saturating_increment(value: int) -> int:
    return value if value >= MAX_POINTS else value + 1
