"""Scroll controller -- turns wheel ticks and arrow keys into a clamped offset."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from annydock.core.geometry import Vec2

if TYPE_CHECKING:
    from annydock.core.config import Config


class ScrollController:
    """Accumulates scroll deltas into a distance along the dock direction.

    The distance is kept in [0, max(0, total_items - visible_items) * spacing].
    When everything fits (total_items <= visible_items) it is forced to 0.
    Call set_total_items() every tick since windows come and go.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self.total_scroll_distance: float = 0.0
        self.total_items: int = 0

    @property
    def visible_items(self) -> int:
        return self._config.visible_items

    @property
    def max_distance(self) -> float:
        overflow = max(0, self.total_items - self._config.visible_items)
        return overflow * self._config.spacing

    @property
    def can_scroll(self) -> bool:
        return self.total_items > self._config.visible_items

    def set_total_items(self, total_items: int) -> bool:
        """Update the item count and re-clamp. Returns True if the offset moved."""
        self.total_items = total_items
        return self._clamp()

    def scroll_wheel(self, delta_y: float) -> bool:
        """Apply a wheel delta (positive = wheel up, scrolls back toward the start)."""
        return self._apply(-delta_y * self._config.scroll_speed)

    def scroll_steps(self, steps: int) -> bool:
        """Apply key presses (Right = +1, Left = -1)."""
        return self._apply(steps * self._config.scroll_speed)

    def reset(self) -> None:
        self.total_scroll_distance = 0.0

    def offset_vector(self, direction: Vec2) -> Vec2:
        """Offset for the layout calculator: direction * distance."""
        return direction * self.total_scroll_distance

    @property
    def first_visible_index(self) -> int:
        """Index of the first entry scrolled into view."""
        return int(math.floor(self.total_scroll_distance / self._config.spacing))

    def _apply(self, amount: float) -> bool:
        if not self.can_scroll:
            return self._clamp()
        before = self.total_scroll_distance
        self.total_scroll_distance += amount
        self._clamp()
        return self.total_scroll_distance != before

    def _clamp(self) -> bool:
        before = self.total_scroll_distance
        if not self.can_scroll:
            self.total_scroll_distance = 0.0
        else:
            self.total_scroll_distance = min(
                max(self.total_scroll_distance, 0.0), self.max_distance
            )
        return self.total_scroll_distance != before
