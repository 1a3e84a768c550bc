"""Desktop entry lookup by window class, icon loading and app launching."""

from __future__ import annotations

import os
import re
import subprocess
from typing import Callable, NamedTuple

import gi

gi.require_version("Gtk", "3.0")
from gi.repository import GdkPixbuf, Gio, GLib, Gtk  # noqa: E402

from annydock.log import get_logger
from annydock.platform import hyprland

log = get_logger(name="launcher")

DESKTOP_SUFFIX = ".desktop"
FALLBACK_ICON = "application-x-executable"
GNOME_APP_PREFIX = "org.gnome."
# Exec line field codes (%u, %F, ...) that must not reach the shell
FIELD_CODES = re.compile(r"%[uUfFdDnNickvm]")


class DesktopInfo(NamedTuple):
    """Resolved information from a .desktop file."""

    desktop_id: str
    name: str
    icon_name: str
    exec_line: str


def wm_class_desktop_candidates(wm_class: str) -> list[str]:
    """Generate desktop ID candidates for a window class.

    Handles classes with spaces ("mongodb compass") by trying hyphenated
    and joined variants, and reverse-DNS classes as-is. Deduplicated,
    first-seen order kept.
    """
    class_lower = wm_class.lower()
    candidates = [wm_class, class_lower]
    if " " in class_lower:
        candidates.append(class_lower.replace(" ", "-"))
        candidates.append(class_lower.replace(" ", ""))
    candidates.append(f"{GNOME_APP_PREFIX}{wm_class}")
    seen: set[str] = set()
    return [c for c in candidates if not (c in seen or seen.add(c))]


def _info_from(app_info: Gio.DesktopAppInfo, desktop_id: str) -> DesktopInfo:
    icon = app_info.get_icon()
    return DesktopInfo(
        desktop_id=desktop_id,
        name=app_info.get_display_name() or desktop_id,
        icon_name=icon.to_string() if icon else FALLBACK_ICON,
        exec_line=app_info.get_commandline() or "",
    )


class Launcher:
    """Resolves window classes to desktop entries, loads icons, spawns apps."""

    def __init__(
        self, exec_fallback: Callable[[str], object] = hyprland.dispatch_exec
    ) -> None:
        self._exec_fallback = exec_fallback
        self._resolved: dict[str, DesktopInfo | None] = {}
        self._icon_cache: dict[tuple[str, int], GdkPixbuf.Pixbuf | None] = {}

    def resolve(self, wm_class: str) -> DesktopInfo | None:
        """Find the desktop entry for a window class (cached)."""
        if wm_class in self._resolved:
            return self._resolved[wm_class]
        info = self._resolve_uncached(wm_class)
        self._resolved[wm_class] = info
        return info

    def _resolve_uncached(self, wm_class: str) -> DesktopInfo | None:
        for candidate in wm_class_desktop_candidates(wm_class):
            desktop_id = f"{candidate}{DESKTOP_SUFFIX}"
            try:
                app_info = Gio.DesktopAppInfo.new(desktop_id)
            except (TypeError, GLib.Error):
                app_info = None
            if app_info is not None:
                return _info_from(app_info, desktop_id)

        # Fall back to StartupWMClass across all installed entries
        class_lower = wm_class.lower()
        for app_info in Gio.AppInfo.get_all():
            if not isinstance(app_info, Gio.DesktopAppInfo):
                continue
            startup_class = app_info.get_startup_wm_class() or ""
            if startup_class.lower() == class_lower:
                return _info_from(app_info, app_info.get_id() or wm_class)
        return None

    def launch(self, wm_class: str) -> None:
        """Launch the application for a window class.

        Uses the desktop entry's Exec line in a new session so the child
        survives the dock. Without an entry, asks the compositor to exec
        the class name directly.
        """
        info = self.resolve(wm_class)
        cmd = FIELD_CODES.sub("", info.exec_line).strip() if info else ""
        if not cmd:
            log.info("No desktop entry for %s, using compositor exec", wm_class)
            self._exec_fallback(wm_class.lower())
            return
        try:
            subprocess.Popen(
                cmd,
                shell=True,
                start_new_session=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            log.warning("Failed to launch %s (%s): %s", wm_class, cmd, e)

    def load_icon(self, wm_class: str, size: int) -> GdkPixbuf.Pixbuf | None:
        """Load the icon for a window class at the given size, with caching."""
        info = self.resolve(wm_class)
        icon_name = info.icon_name if info else wm_class.lower()
        key = (icon_name, size)
        if key in self._icon_cache:
            return self._icon_cache[key]

        pixbuf = self._try_load_icon(icon_name, size)
        self._icon_cache[key] = pixbuf
        return pixbuf

    @staticmethod
    def _try_load_icon(icon_name: str, size: int) -> GdkPixbuf.Pixbuf | None:
        """Attempt to load icon from an absolute path or the icon theme."""
        theme = Gtk.IconTheme.get_default()

        if os.path.isabs(icon_name) and os.path.exists(icon_name):
            try:
                return GdkPixbuf.Pixbuf.new_from_file_at_scale(
                    icon_name, size, size, True
                )
            except GLib.Error:
                pass

        try:
            return theme.load_icon(icon_name, size, Gtk.IconLookupFlags.FORCE_SIZE)
        except GLib.Error:
            pass

        try:
            return theme.load_icon(FALLBACK_ICON, size, Gtk.IconLookupFlags.FORCE_SIZE)
        except GLib.Error:
            log.warning("No icon for %s and no fallback icon in theme", icon_name)
            return None
