"""Hyprland event socket listener -- background thread feeding a queue.

Lines look like ``openwindow>>55d0c6a4e8b0,2,firefox,Some - Title``. Only
openwindow and closewindow matter to the dock; everything else (and any
line that doesn't have the right number of fields) becomes ``Other``.
"""

from __future__ import annotations

import queue
import socket
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from annydock.log import get_logger
from annydock.platform.hyprland import event_socket_path, normalize_address

log = get_logger(name="ipc")

EVENT_DELIMITER = ">>"
OPEN_WINDOW = "openwindow"
CLOSE_WINDOW = "closewindow"
# address, workspace, class, title -- the title may itself contain commas
OPEN_WINDOW_FIELDS = 4


@dataclass(frozen=True)
class OpenWindow:
    address: str
    workspace: str
    wm_class: str
    title: str


@dataclass(frozen=True)
class CloseWindow:
    address: str


@dataclass(frozen=True)
class Other:
    raw: str


Event = Union[OpenWindow, CloseWindow, Other]


def parse_event(line: str) -> Event:
    """Turn one socket line into a typed event. Never raises."""
    line = line.rstrip("\r\n")
    tag, sep, data = line.partition(EVENT_DELIMITER)
    if not sep:
        return Other(line)

    if tag == OPEN_WINDOW:
        fields = data.split(",", OPEN_WINDOW_FIELDS - 1)
        if len(fields) != OPEN_WINDOW_FIELDS or not fields[0] or not fields[2]:
            return Other(line)
        address, workspace, wm_class, title = fields
        return OpenWindow(normalize_address(address), workspace, wm_class, title)

    if tag == CLOSE_WINDOW:
        if not data or "," in data:
            return Other(line)
        return CloseWindow(normalize_address(data))

    return Other(line)


class EventListener:
    """Reads the event socket on a daemon thread and queues parsed events.

    The main loop drains ``events`` with get_nowait() once per tick. If the
    socket path can't be resolved or the connection fails or drops, the
    thread logs and exits; it does not reconnect. stop() shuts the socket
    down so a blocked read returns.
    """

    def __init__(
        self,
        events: queue.SimpleQueue[Event] | None = None,
        path: Path | None = None,
    ) -> None:
        self.events: queue.SimpleQueue[Event] = (
            events if events is not None else queue.SimpleQueue()
        )
        self._path = path
        self._sock: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._stopping = threading.Event()
        self._ready = threading.Event()

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the listener thread. Returns False when no socket is available."""
        if self.is_alive:
            return True
        path = self._path or event_socket_path()
        if path is None:
            log.info("No Hyprland session found, live window updates disabled")
            return False
        self._path = path
        self._stopping.clear()
        self._ready.clear()
        self._thread = threading.Thread(
            target=self._run, args=(path,), name="annydock-ipc", daemon=True
        )
        self._thread.start()
        return True

    def wait_connected(self, timeout: float = 1.0) -> bool:
        """Block until the connection attempt settles. True if connected."""
        if self._thread is None:
            return False
        self._ready.wait(timeout)
        return self._ready.is_set() and self._sock is not None

    def stop(self, timeout: float = 1.0) -> None:
        self._stopping.set()
        sock = self._sock
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _run(self, path: Path) -> None:
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.connect(str(path))
                self._sock = sock
                self._ready.set()
                log.info("Connected to %s", path)
                with sock.makefile("r", encoding="utf-8", errors="replace") as stream:
                    for line in stream:
                        if self._stopping.is_set():
                            break
                        self.events.put(parse_event(line))
        except OSError as e:
            if not self._stopping.is_set():
                log.warning("Event socket %s unavailable: %s", path, e)
            return
        finally:
            self._sock = None
            self._ready.set()
        if not self._stopping.is_set():
            log.warning("Event socket %s closed by compositor", path)
