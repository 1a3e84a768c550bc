"""Small vector types shared by layout, scroll, hover and drag code."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence


@dataclass(frozen=True)
class Vec2:
    """2D point or direction in dock world coordinates (y grows upward)."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> Vec2:
        return Vec2(self.x * k, self.y * k)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance(self, other: Vec2) -> float:
        return (self - other).length()

    def normalized(self) -> Vec2:
        """Unit vector, or the zero vector when length is zero."""
        n = self.length()
        if n == 0.0:
            return Vec2()
        return Vec2(self.x / n, self.y / n)


ZERO = Vec2()


@dataclass(frozen=True)
class Vec3:
    x: float
    y: float
    z: float

    def truncate(self) -> Vec2:
        return Vec2(self.x, self.y)


class Placement(NamedTuple):
    """Computed position and scale for a single dock entry."""

    position: Vec3
    scale: float


class Rect(NamedTuple):
    """Axis-aligned rectangle given by its min and max corners."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_center_size(cls, center: Vec2, size: float) -> Rect:
        half = size / 2
        return cls(center.x - half, center.y - half, center.x + half, center.y + half)

    def contains(self, p: Vec2) -> bool:
        return self.min_x <= p.x <= self.max_x and self.min_y <= p.y <= self.max_y


class HitTarget(NamedTuple):
    """One entry as seen by pointer tests: where it is and how big.

    key is the entry's DockModel key; z is the depth (greater = in front).
    """

    key: object
    center: Vec2
    size: float
    z: float

    def hit_rect(self, tolerance: float) -> Rect:
        return Rect.from_center_size(self.center, self.size * tolerance)


def frontmost_hit(
    pointer: Vec2 | None, targets: Sequence[HitTarget], tolerance: float
) -> HitTarget | None:
    """Target with the greatest z whose inflated rectangle contains pointer.

    Ties go to the earliest target in the sequence.
    """
    if pointer is None:
        return None
    best: HitTarget | None = None
    for target in targets:
        if not target.hit_rect(tolerance).contains(pointer):
            continue
        if best is None or target.z > best.z:
            best = target
    return best
