"""Drag-to-reorder state machine -- pure logic, no GTK dependency.

    IDLE --press--> CANDIDATE --moved past threshold over an entry--> DRAGGING
      ^                 |                                                |
      +----release------+------------------release (commit)/cancel-------+
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Hashable, NamedTuple, Sequence

from annydock.core.geometry import frontmost_hit
from annydock.log import get_logger

if TYPE_CHECKING:
    from annydock.core.config import Config
    from annydock.core.geometry import HitTarget, Vec2

log = get_logger(name="drag")

DEFAULT_THRESHOLD = 10.0
DEFAULT_TOLERANCE = 1.1
# The dragged entry is drawn this much in front of its slot and enlarged.
DRAG_Z_LIFT = 10.0
DRAG_SCALE = 1.2


class DragPhase(enum.Enum):
    IDLE = "idle"
    CANDIDATE = "candidate"
    DRAGGING = "dragging"


class ReleaseResult(NamedTuple):
    """Outcome of a pointer release.

    order is the rewritten key order when a drag was committed, else None.
    click is True when the press/release pair never left the threshold.
    """

    order: list[Hashable] | None
    click: bool


def insertion_order(
    dragged_key: Hashable, dragged_x: float, targets: Sequence[HitTarget]
) -> list[Hashable]:
    """Place dragged_key before the first other entry whose x exceeds dragged_x.

    targets must be in current dock order; sorting is stable, so entries
    sharing a coordinate keep their relative order.
    """
    others = sorted(
        (t for t in targets if t.key != dragged_key), key=lambda t: t.center.x
    )
    new_index = next(
        (i for i, t in enumerate(others) if t.center.x > dragged_x), len(others)
    )
    keys = [t.key for t in others]
    keys.insert(new_index, dragged_key)
    return keys


class DragController:
    """Tracks a single press/drag/release gesture.

    Only one entry can be dragged at a time: a new gesture can only start
    from IDLE. The offset between pointer and entry center is captured once
    so the entry does not jump under the pointer.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        self.threshold = threshold
        self.tolerance = tolerance
        self.phase = DragPhase.IDLE
        self.dragged_key: Hashable | None = None
        self.grab_offset: Vec2 | None = None
        self._origin: Vec2 | None = None
        self._pointer: Vec2 | None = None
        self._moved = False

    @classmethod
    def from_config(cls, config: Config) -> DragController:
        return cls(config.drag_threshold, config.hover_tolerance)

    @property
    def is_dragging(self) -> bool:
        return self.phase is DragPhase.DRAGGING

    def press(self, pointer: Vec2) -> bool:
        """Pointer button down. Returns False if a gesture is already active."""
        if self.phase is not DragPhase.IDLE:
            return False
        self.phase = DragPhase.CANDIDATE
        self._origin = pointer
        self._pointer = pointer
        self._moved = False
        return True

    def motion(self, pointer: Vec2, targets: Sequence[HitTarget]) -> bool:
        """Pointer moved. Returns True when this motion captured an entry."""
        self._pointer = pointer
        if self.phase is not DragPhase.CANDIDATE or self._origin is None:
            return False
        if self._origin.distance(pointer) <= self.threshold:
            return False
        self._moved = True

        captured = frontmost_hit(pointer, targets, self.tolerance)
        if captured is None:
            return False

        self.phase = DragPhase.DRAGGING
        self.dragged_key = captured.key
        self.grab_offset = pointer - captured.center
        log.debug("drag capture: %s offset=%s", captured.key, self.grab_offset)
        return True

    def dragged_position(self, pointer: Vec2 | None = None) -> Vec2 | None:
        """Where the dragged entry's center should be drawn."""
        if pointer is None:
            pointer = self._pointer
        if not self.is_dragging or pointer is None or self.grab_offset is None:
            return None
        return pointer - self.grab_offset

    def release(
        self, pointer: Vec2 | None, targets: Sequence[HitTarget]
    ) -> ReleaseResult:
        """Pointer button up: commit the drag or report a click."""
        if pointer is not None:
            self._pointer = pointer
        phase = self.phase
        moved = self._moved
        if phase is DragPhase.DRAGGING:
            position = self.dragged_position()
            dragged_key = self.dragged_key
            self._reset()
            if position is None or dragged_key is None:
                return ReleaseResult(None, False)
            order = insertion_order(dragged_key, position.x, targets)
            log.debug("drag commit: %s -> index %d", dragged_key, order.index(dragged_key))
            return ReleaseResult(order, False)

        self._reset()
        if phase is DragPhase.CANDIDATE and not moved:
            return ReleaseResult(None, True)
        return ReleaseResult(None, False)

    def rekey(self, old_key: Hashable, new_key: Hashable) -> bool:
        """Keep dragging a slot whose key was replaced under the pointer."""
        if not self.is_dragging or self.dragged_key != old_key:
            return False
        log.debug("drag rekey: %s -> %s", old_key, new_key)
        self.dragged_key = new_key
        return True

    def cancel(self) -> Hashable | None:
        """Abort the gesture. Returns the key that was being dragged, if any."""
        key = self.dragged_key if self.is_dragging else None
        if key is not None:
            log.debug("drag cancel: %s", key)
        self._reset()
        return key

    def _reset(self) -> None:
        self.phase = DragPhase.IDLE
        self.dragged_key = None
        self.grab_offset = None
        self._origin = None
        self._moved = False
