"""Configuration loading, saving, and defaults for the dock."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from annydock.log import get_logger

_log = get_logger(name="config")

DEFAULT_CONFIG_DIR = (
    Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "anny-dock"
)
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"


@dataclass(frozen=True)
class Config:
    """Dock geometry and behaviour, read-only once the session starts."""

    # Base icon size in pixels (before per-index scaling)
    icon_size: float = 56.0
    # Distance of the first icon from the left/bottom window edges
    margin_x: float = 85.0
    margin_y: float = 50.0
    # Base distance between consecutive icons along the dock curve
    spacing: float = 40.0
    # Depth step between consecutive icons (later icons sit behind)
    z_spacing: float = 2.0
    # Scale of the first icon
    base_scale: float = 1.2
    # Per-step scale decay (0 < scale_factor <= 1)
    scale_factor: float = 0.9
    # Distance scrolled per wheel tick or arrow key press
    scroll_speed: float = 15.0
    # Number of icons shown before scrolling kicks in
    visible_items: int = 8
    # Height of the dock's target point as a fraction of window height
    tilt_y: float = 0.25
    # Title label font size
    font_size: float = 16.0
    # Hit rectangle inflation for hover and drag capture
    hover_tolerance: float = 1.1
    # Delay before an icon stops being hovered after the pointer leaves
    hover_exit_ms: int = 100
    # Pointer travel in px before a press turns into a drag
    drag_threshold: float = 10.0
    # Poll interval for window resync when live IPC is unavailable (0 = off)
    resync_interval_ms: int = 2000
    # Whether titles are drawn under icons at startup
    show_titles: bool = False

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load config from JSON file, falling back to defaults for missing keys."""
        path = Path(path) if path else DEFAULT_CONFIG_FILE
        if not path.exists():
            config = cls()
            try:
                config.save(path)
            except OSError as e:
                _log.warning("Could not write default config to %s: %s", path, e)
            return config

        try:
            with open(path) as f:
                data: dict[str, Any] = json.load(f)
        except (OSError, ValueError) as e:
            _log.warning("Invalid config %s (%s), using defaults", path, e)
            return cls()
        if not isinstance(data, dict):
            _log.warning("Config %s is not a JSON object, using defaults", path)
            return cls()

        defaults = cls()
        filtered: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = _coerce(data[f.name], getattr(defaults, f.name))
            if value is None:
                _log.warning(
                    "Config %s: %s=%r has the wrong type, using default",
                    path, f.name, data[f.name],
                )
                continue
            filtered[f.name] = value
        return cls(**filtered).validated()

    def validated(self) -> Config:
        """Return a copy with out-of-range values reset to their defaults."""
        defaults = Config()
        fixes: dict[str, Any] = {}
        if not 0.0 < self.scale_factor <= 1.0:
            fixes["scale_factor"] = defaults.scale_factor
        if self.visible_items < 1:
            fixes["visible_items"] = defaults.visible_items
        if self.spacing <= 0:
            fixes["spacing"] = defaults.spacing
        if self.hover_tolerance < 1.0:
            fixes["hover_tolerance"] = defaults.hover_tolerance
        if not fixes:
            return self
        _log.warning("Config values out of range, reset to defaults: %s", sorted(fixes))
        return replace(self, **fixes)

    def save(self, path: Path | str | None = None) -> None:
        """Save config to JSON file."""
        path = Path(path) if path else DEFAULT_CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
            f.write("\n")


def _coerce(value: Any, default: Any) -> Any:
    """Return value converted to the type of default, or None if it doesn't fit.

    JSON has one number type, so ints are accepted for float fields. Booleans
    are never accepted as numbers.
    """
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(value, bool):
        return None
    if isinstance(default, float) and isinstance(value, (int, float)):
        return float(value)
    if isinstance(default, int) and isinstance(value, int):
        return value
    return None
