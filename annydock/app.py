"""Application entry point -- wires the Hyprland listener to the dock window."""

from __future__ import annotations

import faulthandler
import signal

# Print Python traceback on SIGSEGV/SIGABRT/SIGFPE to stderr.
# Also dumps on SIGUSR1 for on-demand debugging (kill -USR1 <pid>).
faulthandler.enable()
faulthandler.register(signal.SIGUSR1)

import gi

gi.require_version("Gtk", "3.0")
from gi.repository import GLib, Gtk  # noqa: E402

from annydock.core.config import Config
from annydock.core.drag import DragController
from annydock.core.favorites import Favorites
from annydock.log import get_logger
from annydock.platform import hyprland
from annydock.platform.ipc import EventListener
from annydock.platform.launcher import Launcher
from annydock.platform.model import DockModel
from annydock.platform.reconciler import Reconciler
from annydock.platform.registry import WindowRegistry
from annydock.ui.dock_window import DockWindow

log = get_logger(name="app")


def resync_when_degraded(listener: EventListener, reconciler: Reconciler) -> bool:
    """Poll the window list while the event stream is down.

    Registered as a GLib timeout; always returns True to stay scheduled.
    """
    if not listener.is_alive:
        reconciler.resync()
    return True


def connect(listener: EventListener, reconciler: Reconciler) -> bool:
    """Start listening for window events, then seed the dock from a snapshot.

    The snapshot is taken only once the socket is connected, so a window
    opened meanwhile is seen by at least one of them. One seen by both is
    applied once; the reconciler ignores the duplicate open.
    """
    live = listener.start() and listener.wait_connected()
    if not live:
        log.warning("Hyprland event socket unavailable, falling back to polling")
    reconciler.start()
    return live


def main() -> None:
    """Entry point for the anny-dock application."""
    config = Config.load()
    favorites = Favorites.load()
    registry = WindowRegistry()
    model = DockModel(favorites, registry)
    listener = EventListener()
    launcher = Launcher()

    reconciler = Reconciler(
        registry,
        model,
        listener.events,
        DragController.from_config(config),
        focus=hyprland.focus,
        launch=launcher.launch,
    )
    connect(listener, reconciler)

    window = DockWindow(config, reconciler, launcher)
    window.start()
    if config.resync_interval_ms > 0:
        GLib.timeout_add(
            config.resync_interval_ms, resync_when_degraded, listener, reconciler
        )

    # Graceful shutdown on SIGINT/SIGTERM
    GLib.unix_signal_add(GLib.PRIORITY_HIGH, signal.SIGINT, _quit)
    GLib.unix_signal_add(GLib.PRIORITY_HIGH, signal.SIGTERM, _quit)

    window.show_all()
    Gtk.main()

    listener.stop()


def _quit() -> bool:
    Gtk.main_quit()
    return False


if __name__ == "__main__":
    main()
