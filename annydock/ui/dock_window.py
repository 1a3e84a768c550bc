"""Dock window -- transparent GTK window that runs the tick loop and draws icons."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Mapping, Sequence

import cairo
import gi

gi.require_version("Gtk", "3.0")
gi.require_version("Gdk", "3.0")
gi.require_version("PangoCairo", "1.0")
from gi.repository import Gdk, GLib, Gtk, Pango, PangoCairo  # noqa: E402

from annydock.core.drag import DRAG_SCALE, DRAG_Z_LIFT
from annydock.core.geometry import HitTarget, Vec2, frontmost_hit
from annydock.core.hover import HoverTracker
from annydock.core.layout import compute_layout, dock_axis
from annydock.core.scroll import ScrollController
from annydock.log import get_logger
from annydock.platform.model import Pinned

if TYPE_CHECKING:
    from annydock.core.config import Config
    from annydock.core.geometry import Placement
    from annydock.platform.launcher import Launcher
    from annydock.platform.model import DockEntry, EntryKey
    from annydock.platform.reconciler import Reconciler

log = get_logger(name="dock_window")

TICK_MS = 16  # ~60fps
HOVER_LIFT = 20.0
HOVER_SCALE = 1.2
PLACEHOLDER_ALPHA = 0.2
TITLE_GAP = 8.0
PIN_BADGE_RATIO = 0.12

# X11 mouse button codes
MOUSE_LEFT = 1
MOUSE_RIGHT = 3

NUMBER_KEYS = ("1", "2", "3", "4", "5", "6", "7", "8", "9", "0")


def to_world(x: float, y: float, width: float, height: float) -> Vec2:
    """Window pixel coordinates -> centered world coordinates (y up)."""
    return Vec2(x - width / 2, height / 2 - y)


def to_screen(p: Vec2, width: float, height: float) -> tuple[float, float]:
    """Centered world coordinates -> window pixel coordinates."""
    return width / 2 + p.x, height / 2 - p.y


def number_key_slot(keyname: str | None, visible_items: int) -> int | None:
    """Visible slot activated by a number key ("1" -> 0 ... "0" -> 9)."""
    if keyname not in NUMBER_KEYS:
        return None
    slot = NUMBER_KEYS.index(keyname)
    return slot if slot < visible_items else None


def draw_order(
    entries: Sequence[DockEntry],
    placements: Mapping[EntryKey, Placement],
    hovered: EntryKey | None = None,
    dragged: EntryKey | None = None,
    dragged_center: Vec2 | None = None,
) -> list[tuple[DockEntry, Vec2, float]]:
    """(entry, center, scale) for every placed entry, back to front.

    Hovered entries are lifted and enlarged; the dragged entry follows the
    pointer, enlarged and DRAG_Z_LIFT in front of its slot.
    """
    items: list[tuple[float, DockEntry, Vec2, float]] = []
    for entry in entries:
        placement = placements.get(entry.key)
        if placement is None:
            continue
        z = placement.position.z
        center = placement.position.truncate()
        scale = placement.scale
        if entry.key == dragged and dragged_center is not None:
            z += DRAG_Z_LIFT
            center = dragged_center
            scale *= DRAG_SCALE
        elif entry.key == hovered:
            center = center + Vec2(0.0, HOVER_LIFT)
            scale *= HOVER_SCALE
        items.append((z, entry, center, scale))
    items.sort(key=lambda item: item[0])
    return [(entry, center, scale) for _z, entry, center, scale in items]


class DockWindow(Gtk.Window):
    """Undecorated RGBA window presenting the dock and feeding it input."""

    def __init__(
        self, config: Config, reconciler: Reconciler, launcher: Launcher
    ) -> None:
        super().__init__(type=Gtk.WindowType.TOPLEVEL)
        self.config = config
        self.reconciler = reconciler
        self.launcher = launcher
        self.scroll = ScrollController(config)
        self.hover = HoverTracker.from_config(config)
        self.show_titles = config.show_titles

        self.pointer: Vec2 | None = None
        self._width = 1
        self._height = 1
        self._entries: list[DockEntry] = []
        self._placements: dict[EntryKey, Placement] = {}
        self._targets: list[HitTarget] = []
        self._tick_id = 0

        self._setup_window()
        self._setup_drawing_area()

    def _setup_window(self) -> None:
        """Transparent, undecorated, sized to the primary monitor."""
        self.set_title("anny-dock")
        self.set_decorated(False)
        self.set_skip_taskbar_hint(True)
        self.set_skip_pager_hint(True)
        self.set_keep_above(True)
        self.set_app_paintable(True)

        screen = self.get_screen()
        visual = screen.get_rgba_visual() or screen.get_system_visual()
        self.set_visual(visual)

        display = self.get_display()
        monitor = display.get_primary_monitor() or display.get_monitor(0)
        if monitor is not None:
            geom = monitor.get_geometry()
            self.set_default_size(geom.width, geom.height)

        self.connect("key-press-event", self._on_key_press)
        self.connect("destroy", self._on_destroy)

    def _setup_drawing_area(self) -> None:
        self.drawing_area = Gtk.DrawingArea()
        self.drawing_area.set_can_focus(True)
        self.drawing_area.set_events(
            Gdk.EventMask.POINTER_MOTION_MASK
            | Gdk.EventMask.BUTTON_PRESS_MASK
            | Gdk.EventMask.BUTTON_RELEASE_MASK
            | Gdk.EventMask.LEAVE_NOTIFY_MASK
            | Gdk.EventMask.SCROLL_MASK
            | Gdk.EventMask.KEY_PRESS_MASK
        )
        self.drawing_area.connect("draw", self._on_draw)
        self.drawing_area.connect("size-allocate", self._on_size_allocate)
        self.drawing_area.connect("motion-notify-event", self._on_motion)
        self.drawing_area.connect("button-press-event", self._on_button_press)
        self.drawing_area.connect("button-release-event", self._on_button_release)
        self.drawing_area.connect("leave-notify-event", self._on_leave)
        self.drawing_area.connect("scroll-event", self._on_scroll)
        self.add(self.drawing_area)

    def start(self) -> None:
        """Begin ticking (drain events, relayout, hover) at ~60fps."""
        if not self._tick_id:
            self._tick_id = GLib.timeout_add(TICK_MS, self._tick)

    # -- tick ---------------------------------------------------------------

    def _tick(self) -> bool:
        self.reconciler.drain()
        scrolled = self.scroll.set_total_items(len(self.reconciler.model))
        if self.reconciler.consume_dirty() or scrolled:
            self._relayout()

        hovered_before = self.hover.hovered
        if not self.reconciler.drag.is_dragging:
            now = GLib.get_monotonic_time() / 1_000_000
            self.hover.update(self.pointer, self._targets, now)
        if self.hover.hovered != hovered_before or self.reconciler.drag.is_dragging:
            self.drawing_area.queue_draw()
        return True

    def _relayout(self) -> None:
        start, direction = dock_axis(self._width, self._height, self.config)
        offset = self.scroll.offset_vector(direction)
        self._entries = self.reconciler.model.entries()
        placements = compute_layout(
            len(self._entries), start, direction, self.config, offset
        )
        self._placements = {e.key: p for e, p in zip(self._entries, placements)}
        self._targets = [
            HitTarget(
                key=e.key,
                center=p.position.truncate(),
                size=self.config.icon_size * p.scale,
                z=p.position.z,
            )
            for e, p in zip(self._entries, placements)
        ]
        self.drawing_area.queue_draw()

    def _hit(self, pointer: Vec2 | None) -> EntryKey | None:
        target = frontmost_hit(pointer, self._targets, self.config.hover_tolerance)
        return target.key if target else None

    # -- input --------------------------------------------------------------

    def _on_size_allocate(self, _widget: Gtk.Widget, alloc: Gdk.Rectangle) -> None:
        if (alloc.width, alloc.height) != (self._width, self._height):
            log.debug("resized to %dx%d", alloc.width, alloc.height)
            self._width, self._height = alloc.width, alloc.height
            self.reconciler.dirty = True

    def _on_motion(self, _widget: Gtk.DrawingArea, event: Gdk.EventMotion) -> bool:
        self.pointer = to_world(event.x, event.y, self._width, self._height)
        self.reconciler.motion(self.pointer, self._targets)
        return False

    def _on_leave(self, _widget: Gtk.DrawingArea, _event: Gdk.EventCrossing) -> bool:
        if not self.reconciler.drag.is_dragging:
            self.pointer = None
        return False

    def _on_button_press(
        self, widget: Gtk.DrawingArea, event: Gdk.EventButton
    ) -> bool:
        widget.grab_focus()
        if event.button == MOUSE_LEFT:
            self.pointer = to_world(event.x, event.y, self._width, self._height)
            self.reconciler.press(self.pointer)
        return True

    def _on_button_release(
        self, _widget: Gtk.DrawingArea, event: Gdk.EventButton
    ) -> bool:
        pointer = to_world(event.x, event.y, self._width, self._height)
        if event.button == MOUSE_LEFT:
            if self.reconciler.release(pointer, self._targets):
                key = self._hit(pointer)
                if key is not None:
                    self.reconciler.activate(key)
        elif event.button == MOUSE_RIGHT:
            key = self._hit(pointer)
            if key is not None:
                self.reconciler.toggle_favorite(key)
        return True

    def _on_scroll(self, _widget: Gtk.DrawingArea, event: Gdk.EventScroll) -> bool:
        if event.direction == Gdk.ScrollDirection.UP:
            delta = 1.0
        elif event.direction == Gdk.ScrollDirection.DOWN:
            delta = -1.0
        elif event.direction == Gdk.ScrollDirection.SMOOTH:
            _ok, _dx, dy = event.get_scroll_deltas()
            delta = -dy
        else:
            return False
        if self.scroll.scroll_wheel(delta):
            self.reconciler.dirty = True
        return True

    def _on_key_press(self, _widget: Gtk.Window, event: Gdk.EventKey) -> bool:
        name = Gdk.keyval_name(event.keyval)
        if name == "Escape":
            if not self.reconciler.cancel_drag():
                self.close()
        elif name in ("q", "Q"):
            self.close()
        elif name in ("t", "T"):
            self.show_titles = not self.show_titles
            self.drawing_area.queue_draw()
        elif name in ("Left", "Right"):
            if self.scroll.scroll_steps(1 if name == "Right" else -1):
                self.reconciler.dirty = True
        else:
            slot = number_key_slot(name, self.config.visible_items)
            if slot is None:
                return False
            index = self.scroll.first_visible_index + slot
            keys = self.reconciler.model.keys()
            if index < len(keys):
                self.reconciler.activate(keys[index])
        return True

    def _on_destroy(self, _widget: Gtk.Widget) -> None:
        if self._tick_id:
            GLib.source_remove(self._tick_id)
            self._tick_id = 0
        Gtk.main_quit()

    # -- drawing ------------------------------------------------------------

    def _on_draw(self, _widget: Gtk.DrawingArea, cr: cairo.Context) -> bool:
        cr.set_operator(cairo.OPERATOR_SOURCE)
        cr.set_source_rgba(0, 0, 0, 0)
        cr.paint()
        cr.set_operator(cairo.OPERATOR_OVER)

        drag = self.reconciler.drag
        items = draw_order(
            self._entries,
            self._placements,
            hovered=self.hover.hovered,
            dragged=drag.dragged_key if drag.is_dragging else None,
            dragged_center=drag.dragged_position(),
        )
        for entry, center, scale in items:
            self._draw_entry(cr, entry, center, scale)
        return True

    def _draw_entry(
        self, cr: cairo.Context, entry: DockEntry, center: Vec2, scale: float
    ) -> None:
        size = self.config.icon_size * scale
        sx, sy = to_screen(center, self._width, self._height)
        alpha = PLACEHOLDER_ALPHA if isinstance(entry.key, Pinned) else 1.0
        pixbuf = self.launcher.load_icon(
            entry.wm_class, int(self.config.icon_size * self.config.base_scale * HOVER_SCALE)
        )

        cr.save()
        cr.translate(sx - size / 2, sy - size / 2)
        if pixbuf is not None:
            cr.scale(size / pixbuf.get_width(), size / pixbuf.get_height())
            Gdk.cairo_set_source_pixbuf(cr, pixbuf, 0, 0)
            cr.paint_with_alpha(alpha)
        else:
            cr.rectangle(0, 0, size, size)
            cr.set_source_rgba(0.5, 0.5, 0.5, alpha)
            cr.fill()
        cr.restore()

        if entry.is_pinned:
            radius = max(2.0, size * PIN_BADGE_RATIO)
            cr.arc(sx + size / 3, sy - size / 3, radius, 0, 2 * math.pi)
            cr.set_source_rgba(1, 1, 1, 0.9)
            cr.fill()

        if self.show_titles:
            self._draw_title(cr, entry.title or entry.wm_class, sx, sy + size / 2)

    def _draw_title(self, cr: cairo.Context, text: str, x: float, top: float) -> None:
        layout = PangoCairo.create_layout(cr)
        layout.set_font_description(
            Pango.FontDescription(f"Sans {int(self.config.font_size)}px")
        )
        layout.set_text(text, -1)
        _ink, logical = layout.get_pixel_extents()
        cr.move_to(x - logical.width / 2, top + TITLE_GAP)
        cr.set_source_rgba(1, 1, 1, 1)
        PangoCairo.show_layout(cr, layout)
