"""Pinned application classes, persisted as an ordered JSON list."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator

from annydock.core.config import DEFAULT_CONFIG_DIR
from annydock.log import get_logger

_log = get_logger(name="favorites")

DEFAULT_FAVORITES_FILE = DEFAULT_CONFIG_DIR / "favorites.json"


class Favorites:
    """Ordered set of window classes the user has pinned to the dock."""

    def __init__(self, classes: Iterable[str] = (), path: Path | str | None = None) -> None:
        self._classes: list[str] = []
        self._path = Path(path) if path else DEFAULT_FAVORITES_FILE
        for wm_class in classes:
            self.add(wm_class)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Favorites:
        """Load favorites; a missing or unreadable file yields an empty set."""
        path = Path(path) if path else DEFAULT_FAVORITES_FILE
        if not path.exists():
            return cls(path=path)
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _log.warning("Could not read favorites %s: %s", path, e)
            return cls(path=path)
        if not isinstance(data, list):
            _log.warning("Favorites %s is not a JSON list, ignoring", path)
            return cls(path=path)
        return cls((c for c in data if isinstance(c, str) and c), path=path)

    def save(self, path: Path | str | None = None) -> None:
        """Write favorites to disk; failures are logged, never raised."""
        path = Path(path) if path else self._path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(self._classes, f, indent=2)
                f.write("\n")
        except OSError as e:
            _log.warning("Could not save favorites to %s: %s", path, e)

    def add(self, wm_class: str) -> bool:
        """Append a class; returns False when it was already pinned."""
        if wm_class in self._classes:
            return False
        self._classes.append(wm_class)
        return True

    def remove(self, wm_class: str) -> bool:
        if wm_class not in self._classes:
            return False
        self._classes.remove(wm_class)
        return True

    def __contains__(self, wm_class: object) -> bool:
        return wm_class in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._classes))

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"Favorites({self._classes!r})"
