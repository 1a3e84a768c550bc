"""Hyprland command channel -- window queries and dispatches via hyprctl."""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

from annydock.log import get_logger

if TYPE_CHECKING:
    from annydock.platform.registry import WindowHandle

log = get_logger(name="hyprland")

HYPRCTL = "hyprctl"
HYPRCTL_TIMEOUT = 2  # seconds
EVENT_SOCKET_NAME = ".socket2.sock"
LEGACY_SOCKET_ROOT = Path("/tmp/hypr")


class HyprlandError(Exception):
    """hyprctl could not be run or returned something unusable."""


def normalize_address(address: str) -> str:
    """Return the 0x-prefixed form of a window address.

    hyprctl reports "0x55d0c6a4e8b0" while socket events carry "55d0c6a4e8b0".
    """
    address = address.strip()
    if not address:
        return address
    if address.lower().startswith("0x"):
        return "0x" + address[2:]
    return "0x" + address


def event_socket_path(env: Mapping[str, str] | None = None) -> Path | None:
    """Path of the event socket, or None if the session can't be identified.

    Needs XDG_RUNTIME_DIR and HYPRLAND_INSTANCE_SIGNATURE. Older Hyprland
    releases kept their sockets under /tmp/hypr; that location is used
    when it exists and the runtime one doesn't.
    """
    env = os.environ if env is None else env
    signature = env.get("HYPRLAND_INSTANCE_SIGNATURE", "")
    runtime_dir = env.get("XDG_RUNTIME_DIR", "")
    if not signature or not runtime_dir:
        return None
    path = Path(runtime_dir) / "hypr" / signature / EVENT_SOCKET_NAME
    legacy = LEGACY_SOCKET_ROOT / signature / EVENT_SOCKET_NAME
    if not path.exists() and legacy.exists():
        return legacy
    return path


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [HYPRCTL, *args],
        capture_output=True,
        text=True,
        timeout=HYPRCTL_TIMEOUT,
    )


def list_windows() -> list[WindowHandle]:
    """Query all client windows (hyprctl clients -j).

    Raises HyprlandError when hyprctl is unavailable or its output is bad.
    """
    from annydock.platform.registry import WindowHandle

    try:
        result = _run("clients", "-j")
    except (OSError, subprocess.SubprocessError) as e:
        raise HyprlandError(f"hyprctl clients failed: {e}") from e
    if result.returncode != 0:
        raise HyprlandError(
            f"hyprctl clients exited {result.returncode}: {result.stderr.strip()}"
        )
    try:
        clients = json.loads(result.stdout)
    except ValueError as e:
        raise HyprlandError(f"hyprctl clients returned invalid JSON: {e}") from e
    if not isinstance(clients, list):
        raise HyprlandError("hyprctl clients did not return a list")

    windows: list[WindowHandle] = []
    for client in clients:
        if not isinstance(client, dict):
            continue
        address = normalize_address(str(client.get("address") or ""))
        wm_class = client.get("class") or ""
        if not address or not wm_class:
            continue
        windows.append(
            WindowHandle(address=address, wm_class=wm_class, title=client.get("title"))
        )
    return windows


def _dispatch(*args: str) -> bool:
    """Fire a hyprctl dispatch; failures are logged and reported as False."""
    try:
        result = _run("dispatch", *args)
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("hyprctl dispatch %s failed: %s", " ".join(args), e)
        return False
    if result.returncode != 0 or result.stdout.strip() not in ("", "ok"):
        log.warning(
            "hyprctl dispatch %s failed: %s",
            " ".join(args),
            (result.stderr or result.stdout).strip(),
        )
        return False
    return True


def focus(address: str) -> bool:
    """Focus the window with the given address."""
    target = f"address:{normalize_address(address.removeprefix('address:'))}"
    log.info("focuswindow %s", target)
    return _dispatch("focuswindow", target)


def dispatch_exec(command: str) -> bool:
    """Ask the compositor to run a command (launch fallback)."""
    log.info("exec %s", command)
    return _dispatch("exec", command)
