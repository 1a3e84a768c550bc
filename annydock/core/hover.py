"""Hover detection with hysteresis -- pure logic, time is passed in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Hashable, Sequence

from annydock.core.geometry import frontmost_hit

if TYPE_CHECKING:
    from annydock.core.config import Config
    from annydock.core.geometry import HitTarget, Vec2

DEFAULT_TOLERANCE = 1.1
DEFAULT_EXIT_DELAY = 0.1  # seconds


@dataclass
class _HoverSlot:
    is_hovered: bool = False
    exit_deadline: float | None = None


class HoverTracker:
    """Tracks which entry the pointer is over.

    Entering is immediate. Leaving is delayed by exit_delay seconds and
    the delay restarts whenever the pointer comes back. If inflated hit
    rectangles overlap, the frontmost entry (greatest z) wins and every
    other entry is forced off for that tick, so at most one is hovered.
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_TOLERANCE,
        exit_delay: float = DEFAULT_EXIT_DELAY,
    ) -> None:
        self.tolerance = tolerance
        self.exit_delay = exit_delay
        self._slots: dict[Hashable, _HoverSlot] = {}

    @classmethod
    def from_config(cls, config: Config) -> HoverTracker:
        return cls(config.hover_tolerance, config.hover_exit_ms / 1000.0)

    @property
    def hovered(self) -> Hashable | None:
        for key, slot in self._slots.items():
            if slot.is_hovered:
                return key
        return None

    def is_hovered(self, key: Hashable) -> bool:
        slot = self._slots.get(key)
        return bool(slot and slot.is_hovered)

    def clear(self) -> None:
        self._slots.clear()

    def update(
        self, pointer: Vec2 | None, targets: Sequence[HitTarget], now: float
    ) -> Hashable | None:
        """Advance hover state for one tick and return the hovered key."""
        winner = frontmost_hit(pointer, targets, self.tolerance)

        live = {t.key for t in targets}
        for key in list(self._slots):
            if key not in live:
                del self._slots[key]

        for target in targets:
            slot = self._slots.setdefault(target.key, _HoverSlot())
            if winner is not None:
                slot.is_hovered = target.key == winner.key
                slot.exit_deadline = None
            elif slot.is_hovered:
                if slot.exit_deadline is None:
                    slot.exit_deadline = now + self.exit_delay
                elif now >= slot.exit_deadline:
                    slot.is_hovered = False
                    slot.exit_deadline = None

        return self.hovered
