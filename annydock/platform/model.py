"""Dock order model -- merges favorites and running windows into one order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Sequence, Union

from annydock.log import get_logger

if TYPE_CHECKING:
    from annydock.core.favorites import Favorites
    from annydock.platform.registry import WindowHandle, WindowRegistry

log = get_logger(name="model")

PINNED_PREFIX = "pinned:"


@dataclass(frozen=True)
class Running:
    """Key of a slot holding an open window."""

    address: str

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class Pinned:
    """Key of a favorite's slot while none of its windows is open."""

    wm_class: str

    def __str__(self) -> str:
        return f"{PINNED_PREFIX}{self.wm_class}"


EntryKey = Union[Running, Pinned]


@dataclass
class DockEntry:
    """Materialized view of one slot, for drawing and activation."""

    key: EntryKey
    wm_class: str
    title: str | None = None
    is_pinned: bool = False

    @property
    def is_running(self) -> bool:
        return isinstance(self.key, Running)


class DockModel:
    """Ordered list of entry keys; the single source of truth for visual order.

    Every open window has exactly one Running key and every favorite with
    no open window has exactly one Pinned key. The order only changes through
    open_window/close_window, pin/unpin, and commit_order.
    """

    def __init__(self, favorites: Favorites, registry: WindowRegistry) -> None:
        self._favorites = favorites
        self._registry = registry
        self._order: list[EntryKey] = []
        self.on_change: Callable[[], None] | None = None

    @property
    def favorites(self) -> Favorites:
        return self._favorites

    def keys(self) -> list[EntryKey]:
        return list(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def index_of(self, key: EntryKey) -> int | None:
        try:
            return self._order.index(key)
        except ValueError:
            return None

    def class_of(self, key: EntryKey) -> str | None:
        if isinstance(key, Pinned):
            return key.wm_class
        handle = self._registry.get(key.address)
        return handle.wm_class if handle else None

    def entries(self) -> list[DockEntry]:
        result: list[DockEntry] = []
        for key in self._order:
            if isinstance(key, Pinned):
                result.append(DockEntry(key, key.wm_class, is_pinned=True))
                continue
            handle = self._registry.get(key.address)
            wm_class = handle.wm_class if handle else ""
            result.append(
                DockEntry(
                    key,
                    wm_class,
                    title=handle.title if handle else None,
                    is_pinned=wm_class in self._favorites,
                )
            )
        return result

    def populate(self, windows: Iterable[WindowHandle]) -> None:
        """Build the initial order: favorites first, then other windows.

        Each favorite takes the first open window of its class, or a Pinned
        placeholder when none is open.
        """
        windows = list(windows)
        order: list[EntryKey] = []
        used: set[str] = set()
        for wm_class in self._favorites:
            handle = next(
                (w for w in windows if w.wm_class == wm_class and w.address not in used),
                None,
            )
            if handle is None:
                order.append(Pinned(wm_class))
            else:
                used.add(handle.address)
                order.append(Running(handle.address))
        for handle in windows:
            if handle.address not in used:
                used.add(handle.address)
                order.append(Running(handle.address))
        self._order = order
        self.notify()

    def open_window(self, handle: WindowHandle) -> bool:
        """Give an opened window a slot. Returns True if the order changed."""
        key = Running(handle.address)
        if key in self._order:
            return False
        placeholder = Pinned(handle.wm_class)
        if placeholder in self._order:
            self._order[self._order.index(placeholder)] = key
            log.debug("open %s: took over %s", handle.address, placeholder)
        else:
            self._order.append(key)
            log.debug("open %s: appended (%s)", handle.address, handle.wm_class)
        self.notify()
        return True

    def successor(self, handle: WindowHandle) -> EntryKey | None:
        """Key that will hold a closing window's slot, or None if the slot goes.

        A favorite's slot is the first slot of its class in the order. When
        the window in it closes, the next open window of the class moves
        into it, or a Pinned placeholder once none is left. Any other
        window's slot disappears.
        """
        key = Running(handle.address)
        wm_class = handle.wm_class
        if key not in self._order or wm_class not in self._favorites:
            return None
        same_class = [
            k for k in self._order
            if isinstance(k, Running) and self.class_of(k) == wm_class
        ]
        if same_class[0] != key:
            return None
        if len(same_class) > 1:
            return same_class[1]
        return Pinned(wm_class)

    def close_window(self, handle: WindowHandle) -> bool:
        """Drop or hand over a closed window's slot. Returns True if the order changed.

        A favorite keeps its slot: the next open window of its class takes
        it over, or a Pinned placeholder once its last window is closed.
        Any other window simply disappears from the order.
        """
        key = Running(handle.address)
        if key not in self._order:
            return False
        index = self._order.index(key)
        successor = self.successor(handle)
        if successor is None:
            del self._order[index]
            log.debug("close %s: removed", handle.address)
        else:
            if successor in self._order:
                self._order.remove(successor)
                index = self._order.index(key)
            self._order[index] = successor
            log.debug("close %s: slot handed to %s", handle.address, successor)
        self.notify()
        return True

    def pin(self, wm_class: str) -> bool:
        """Add a class to the favorites. Returns True if the order changed.

        A running window of that class keeps its slot; otherwise a Pinned
        placeholder is appended.
        """
        if not self._favorites.add(wm_class):
            return False
        running = any(
            isinstance(k, Running) and self.class_of(k) == wm_class for k in self._order
        )
        if not running:
            self._order.append(Pinned(wm_class))
        self.notify()
        return True

    def unpin(self, wm_class: str) -> bool:
        """Remove a class from the favorites. Returns True if the order changed.

        A placeholder slot is removed; a running window keeps its slot.
        """
        if not self._favorites.remove(wm_class):
            return False
        placeholder = Pinned(wm_class)
        if placeholder in self._order:
            self._order.remove(placeholder)
        self.notify()
        return True

    def toggle_favorite(self, key: EntryKey) -> bool:
        wm_class = self.class_of(key)
        if not wm_class:
            return False
        if wm_class in self._favorites:
            return self.unpin(wm_class)
        return self.pin(wm_class)

    def commit_order(self, keys: Sequence[EntryKey]) -> bool:
        """Replace the whole order with a permutation of the current keys."""
        keys = list(keys)
        if len(keys) != len(self._order) or set(keys) != set(self._order):
            log.warning("Rejected reorder: keys do not match the current dock")
            return False
        if keys == self._order:
            return False
        self._order = keys
        self.notify()
        return True

    def notify(self) -> None:
        """Fire on_change callback to trigger a redraw."""
        if self.on_change:
            self.on_change()
