"""Reward effect commands.

An effect command is a ``:``-separated string configured on a reward, e.g.::

    unlock_exit
    add_points:50
    add_currency:1000
    give_item:minecraft:diamond:1
    give_effect:haste:120:1
    message:Enjoy your evening!

The first segment selects the :class:`EffectKind`; every following segment is
kept, trimmed and in order, as a positional argument. Anything unrecognised is
treated as :attr:`EffectKind.CUSTOM` so reward tables never fail to load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EffectKind(str, Enum):
    UNLOCK_EXIT = "unlock_exit"
    ADD_POINTS = "add_points"
    ADD_CURRENCY = "add_currency"
    GIVE_ITEM = "give_item"
    GIVE_EFFECT = "give_effect"
    MESSAGE = "message"
    CUSTOM = "custom"

    @classmethod
    def from_keyword(cls, keyword: str) -> "EffectKind":
        lowered = keyword.strip().lower()
        for kind in cls:
            if kind.value == lowered:
                return kind
        return cls.CUSTOM


DEFERRED_KINDS = frozenset(
    {EffectKind.ADD_CURRENCY, EffectKind.GIVE_ITEM, EffectKind.GIVE_EFFECT, EffectKind.CUSTOM}
)


@dataclass(frozen=True, slots=True)
class EffectDescriptor:
    raw_command: str
    kind: EffectKind
    arguments: tuple[str, ...] = field(default_factory=tuple)

    @property
    def deferred(self) -> bool:
        """True when an external system has to execute this effect."""
        return self.kind in DEFERRED_KINDS

    def argument(self, index: int, default: str | None = None) -> str | None:
        if 0 <= index < len(self.arguments):
            return self.arguments[index]
        return default


def parse_effect(command: str | None) -> EffectDescriptor:
    """Parse a raw effect command. Never raises."""
    trimmed = (command or "").strip()
    if not trimmed:
        return EffectDescriptor(raw_command="", kind=EffectKind.CUSTOM)

    keyword, *rest = trimmed.split(":")
    return EffectDescriptor(
        raw_command=trimmed,
        kind=EffectKind.from_keyword(keyword),
        arguments=tuple(part.strip() for part in rest),
    )


def parse_int_argument(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default
