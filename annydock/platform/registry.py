"""Window registry -- the externally observed set of open windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from annydock.log import get_logger
from annydock.platform.hyprland import HyprlandError, list_windows

log = get_logger(name="registry")


@dataclass(frozen=True)
class WindowHandle:
    """One open window. Identity is the address alone."""

    address: str
    wm_class: str = field(compare=False)
    title: str | None = field(default=None, compare=False)


def diff(
    old: Iterable[WindowHandle], new: Iterable[WindowHandle]
) -> tuple[list[WindowHandle], list[str]]:
    """Return (opened handles, closed addresses) between two snapshots.

    Both lists keep the order of the snapshot they come from.
    """
    old_list = list(old)
    new_list = list(new)
    old_addresses = {w.address for w in old_list}
    new_addresses = {w.address for w in new_list}
    opened = [w for w in new_list if w.address not in old_addresses]
    closed = [w.address for w in old_list if w.address not in new_addresses]
    return opened, closed


class WindowRegistry:
    """Open windows keyed by address, in the order they were first seen."""

    diff = staticmethod(diff)

    def __init__(
        self, query: Callable[[], list[WindowHandle]] = list_windows
    ) -> None:
        self._query = query
        self._windows: dict[str, WindowHandle] = {}

    def snapshot(self) -> list[WindowHandle]:
        return list(self._windows.values())

    def query(self) -> list[WindowHandle] | None:
        """Ask the window manager for the current windows.

        Returns None on failure; the registry is left untouched so the
        next poll can try again.
        """
        try:
            return self._query()
        except HyprlandError as e:
            log.warning("Window query failed: %s", e)
            return None

    def add(self, handle: WindowHandle) -> None:
        self._windows[handle.address] = handle

    def remove(self, address: str) -> WindowHandle | None:
        return self._windows.pop(address, None)

    def get(self, address: str) -> WindowHandle | None:
        return self._windows.get(address)

    def windows_of_class(self, wm_class: str) -> list[WindowHandle]:
        return [w for w in self._windows.values() if w.wm_class == wm_class]

    def __contains__(self, address: object) -> bool:
        return address in self._windows

    def __len__(self) -> int:
        return len(self._windows)
