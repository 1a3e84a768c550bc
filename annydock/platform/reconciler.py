"""Reconciliation controller -- the one place dock state is mutated per tick.

Window events from the listener thread, poll-based resyncs, drag gestures
and favorite toggles all flow through here, and each structural change
raises the dirty flag that tells the next layout pass to recompute.
"""

from __future__ import annotations

import queue
from typing import TYPE_CHECKING, Callable, Sequence

from annydock.core.drag import DragController
from annydock.log import get_logger
from annydock.platform.ipc import CloseWindow, Event, OpenWindow, Other
from annydock.platform.model import Pinned, Running
from annydock.platform.registry import WindowHandle, diff

if TYPE_CHECKING:
    from annydock.core.geometry import HitTarget, Vec2
    from annydock.platform.model import DockModel, EntryKey
    from annydock.platform.registry import WindowRegistry

log = get_logger(name="reconciler")


class Reconciler:
    """Owns the window registry, dock order, drag gesture and dirty flag.

    Args:
        registry: Open windows as last observed.
        model: Dock order.
        events: Queue filled by the IPC listener; drained with get_nowait().
        drag: Drag state machine (one gesture at a time).
        focus: Callable focusing a window by address.
        launch: Callable launching an application by window class.
    """

    def __init__(
        self,
        registry: WindowRegistry,
        model: DockModel,
        events: queue.SimpleQueue[Event] | None = None,
        drag: DragController | None = None,
        focus: Callable[[str], object] | None = None,
        launch: Callable[[str], object] | None = None,
    ) -> None:
        self.registry = registry
        self.model = model
        self.events: queue.SimpleQueue[Event] = (
            events if events is not None else queue.SimpleQueue()
        )
        self.drag = drag or DragController()
        self._focus = focus
        self._launch = launch
        self.dirty = True

    def start(self, windows: Sequence[WindowHandle] | None = None) -> None:
        """Seed registry and order from an initial window snapshot."""
        if windows is None:
            windows = self.registry.query() or []
        for handle in windows:
            self.registry.add(handle)
        self.model.populate(self.registry.snapshot())
        self.dirty = True

    def consume_dirty(self) -> bool:
        """Return the dirty flag and clear it."""
        dirty, self.dirty = self.dirty, False
        return dirty

    def drain(self) -> int:
        """Apply every queued event in arrival order. Returns how many applied."""
        applied = 0
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return applied
            if self.apply(event):
                applied += 1

    def apply(self, event: Event) -> bool:
        """Apply a single event. Returns True if the dock order changed."""
        if isinstance(event, OpenWindow):
            return self.open_window(
                WindowHandle(event.address, event.wm_class, event.title or None)
            )
        if isinstance(event, CloseWindow):
            return self.close_window(event.address)
        if isinstance(event, Other):
            log.debug("ignored event: %s", event.raw)
        return False

    def open_window(self, handle: WindowHandle) -> bool:
        if handle.address in self.registry:
            return False
        self.registry.add(handle)
        placeholder = Pinned(handle.wm_class)
        had_placeholder = self.model.index_of(placeholder) is not None
        changed = self.model.open_window(handle)
        if had_placeholder and self.model.index_of(placeholder) is None:
            self.drag.rekey(placeholder, Running(handle.address))
        self.dirty |= changed
        return changed

    def close_window(self, address: str) -> bool:
        handle = self.registry.get(address)
        if handle is None:
            log.debug("close for unknown window %s", address)
            return False
        key = Running(address)
        successor = self.model.successor(handle)
        changed = self.model.close_window(handle)
        self.registry.remove(address)
        if self.drag.dragged_key == key:
            if successor is None:
                self.drag.cancel()
            else:
                self.drag.rekey(key, successor)
        self.dirty |= changed
        return changed

    def resync(self, windows: Sequence[WindowHandle] | None = None) -> bool:
        """Bring the registry in line with a fresh snapshot via its diff.

        With no snapshot given the window manager is queried; a failed query
        leaves everything as is.
        """
        if windows is None:
            windows = self.registry.query()
            if windows is None:
                return False
        opened, closed = diff(self.registry.snapshot(), windows)
        changed = False
        for address in closed:
            changed |= self.close_window(address)
        for handle in opened:
            changed |= self.open_window(handle)
        return changed

    def toggle_favorite(self, key: EntryKey) -> bool:
        changed = self.model.toggle_favorite(key)
        if changed:
            self.model.favorites.save()
            self.dirty = True
        return changed

    def activate(self, key: EntryKey) -> None:
        """Focus a running window or launch a placeholder's application."""
        if isinstance(key, Pinned):
            log.info("launch %s", key.wm_class)
            if self._launch:
                self._launch(key.wm_class)
        elif self._focus:
            self._focus(key.address)

    def press(self, pointer: Vec2) -> bool:
        return self.drag.press(pointer)

    def motion(self, pointer: Vec2, targets: Sequence[HitTarget]) -> bool:
        captured = self.drag.motion(pointer, targets)
        if captured:
            self.dirty = True
        return captured

    def release(self, pointer: Vec2 | None, targets: Sequence[HitTarget]) -> bool:
        """Finish a gesture. Returns True when it was a click rather than a drag.

        Targets whose key left the order since the last layout are ignored.
        """
        live = set(self.model.keys())
        result = self.drag.release(pointer, [t for t in targets if t.key in live])
        if result.order is not None:
            self.model.commit_order(result.order)
            self.dirty = True
        return result.click

    def cancel_drag(self) -> bool:
        """Escape: snap the dragged entry back without touching the order."""
        if self.drag.cancel() is None:
            return False
        self.dirty = True
        return True
