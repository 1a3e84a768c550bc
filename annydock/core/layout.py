"""Dock curve layout math -- pure functions, no GTK dependency.

Entries are laid out along a ray from the dock's start point toward a
target point above the window center. Gaps follow a damped geometric
series so that they shrink with the icons, but never collapse to zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from annydock.core.geometry import ZERO, Placement, Vec2, Vec3

if TYPE_CHECKING:
    from annydock.core.config import Config


# Pulls the gap ratio toward 1.0 relative to the raw scale decay.
#
#   r = scale_factor + (1 - scale_factor) * SPACING_DAMPING
#
# With scale_factor=0.9 this gives r=0.94: gaps shrink more slowly than
# icons, so the far end of the dock does not bunch up.
SPACING_DAMPING = 0.4
# Extra headroom on top of config.spacing so scaled icons don't touch.
SPACING_BOOST = 1.2


def spacing_ratio(scale_factor: float) -> float:
    """Effective ratio r of the spacing series."""
    return scale_factor + (1.0 - scale_factor) * SPACING_DAMPING


def spacing_multiplier(index: int, ratio: float) -> float:
    """Sum of ratio**k for k < index, i.e. (1 - r^i) / (1 - r), or i when r == 1."""
    if ratio == 1.0:
        return float(index)
    return (1.0 - ratio**index) / (1.0 - ratio)


def dock_axis(width: float, height: float, config: Config) -> tuple[Vec2, Vec2]:
    """Return (start_pos, direction) for a window of the given size.

    World coordinates are centered on the window with y pointing up. The
    first icon sits margin_x/margin_y in from the bottom-left corner and
    the dock heads toward (0, height * tilt_y).
    """
    start = Vec2(-width / 2 + config.margin_x, -height / 2 + config.margin_y)
    target = Vec2(0.0, height * config.tilt_y)
    return start, (target - start).normalized()


def place(
    index: int,
    start_pos: Vec2,
    direction: Vec2,
    config: Config,
    scroll_offset: Vec2 = ZERO,
) -> Placement:
    """Compute the placement of the entry at ``index``.

    Args:
        index: Position of the entry in the dock order.
        start_pos: World position of index 0 when not scrolled.
        direction: Unit vector along the dock.
        config: Dock geometry.
        scroll_offset: Scroll offset vector (direction * scroll distance).

    Returns:
        Placement whose z is -(index * z_spacing), so later entries sit
        behind earlier ones. While the dock is scrolled every entry gets
        the flat base_scale; otherwise scale decays by scale_factor per index.
    """
    ratio = spacing_ratio(config.scale_factor)
    multiplier = spacing_multiplier(index, ratio)
    offset = direction * (
        multiplier * config.spacing * SPACING_BOOST * config.base_scale
    )
    pos = start_pos + offset - scroll_offset
    z = -(index * config.z_spacing)

    if scroll_offset.length() > 0.0:
        scale = config.base_scale
    else:
        scale = config.base_scale * config.scale_factor**index

    return Placement(Vec3(pos.x, pos.y, z), scale)


def compute_layout(
    count: int,
    start_pos: Vec2,
    direction: Vec2,
    config: Config,
    scroll_offset: Vec2 = ZERO,
) -> list[Placement]:
    """Placements for ``count`` consecutive entries starting at index 0."""
    return [place(i, start_pos, direction, config, scroll_offset) for i in range(count)]
