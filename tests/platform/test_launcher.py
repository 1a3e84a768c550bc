"""Tests for desktop entry lookup and app launching."""

import sys
from unittest.mock import MagicMock, patch

# Mock gi before importing launcher only when PyGObject is unavailable.
try:
    import gi  # type: ignore # noqa: F401
except Exception:
    gi_mock = MagicMock()
    gi_mock.require_version = MagicMock()
    sys.modules.setdefault("gi", gi_mock)
    sys.modules.setdefault("gi.repository", gi_mock.repository)

from annydock.platform import launcher as launcher_mod  # noqa: E402
from annydock.platform.launcher import (  # noqa: E402
    DesktopInfo,
    Launcher,
    wm_class_desktop_candidates,
)


def _info(exec_line: str, icon: str = "kitty") -> DesktopInfo:
    return DesktopInfo("kitty.desktop", "Kitty", icon, exec_line)


class TestDesktopCandidates:
    def test_simple_class(self):
        assert wm_class_desktop_candidates("Firefox") == [
            "Firefox",
            "firefox",
            "org.gnome.Firefox",
        ]

    def test_lowercase_class_is_deduplicated(self):
        assert wm_class_desktop_candidates("kitty") == ["kitty", "org.gnome.kitty"]

    def test_class_with_spaces(self):
        # Given / When
        candidates = wm_class_desktop_candidates("MongoDB Compass")
        # Then
        assert "mongodb-compass" in candidates
        assert "mongodbcompass" in candidates
        assert candidates[0] == "MongoDB Compass"


class TestResolve:
    def test_result_is_cached(self):
        # Given
        launcher = Launcher(exec_fallback=MagicMock())
        info = _info("kitty")
        with patch.object(launcher, "_resolve_uncached", return_value=info) as uncached:
            # When
            first = launcher.resolve("kitty")
            second = launcher.resolve("kitty")
        # Then
        assert first is second is info
        uncached.assert_called_once_with("kitty")

    def test_missing_entry_is_cached_too(self):
        # Given
        launcher = Launcher(exec_fallback=MagicMock())
        with patch.object(launcher, "_resolve_uncached", return_value=None) as uncached:
            # When
            launcher.resolve("ghost")
            launcher.resolve("ghost")
        # Then
        uncached.assert_called_once()


class TestLaunch:
    def test_strips_field_codes(self):
        # Given
        launcher = Launcher(exec_fallback=MagicMock())
        with patch.object(launcher, "resolve", return_value=_info("firefox %u")), \
                patch.object(launcher_mod.subprocess, "Popen") as popen:
            # When
            launcher.launch("firefox")
        # Then
        args, kwargs = popen.call_args
        assert args[0] == "firefox"
        assert kwargs["start_new_session"] is True

    def test_without_entry_uses_compositor_exec(self):
        # Given
        fallback = MagicMock()
        launcher = Launcher(exec_fallback=fallback)
        with patch.object(launcher, "resolve", return_value=None), \
                patch.object(launcher_mod.subprocess, "Popen") as popen:
            # When
            launcher.launch("Slack")
        # Then
        fallback.assert_called_once_with("slack")
        popen.assert_not_called()

    def test_empty_exec_uses_compositor_exec(self):
        # Given
        fallback = MagicMock()
        launcher = Launcher(exec_fallback=fallback)
        with patch.object(launcher, "resolve", return_value=_info("%U")):
            # When
            launcher.launch("kitty")
        # Then
        fallback.assert_called_once_with("kitty")

    def test_spawn_failure_is_logged(self):
        # Given
        launcher = Launcher(exec_fallback=MagicMock())
        with patch.object(launcher, "resolve", return_value=_info("kitty")), \
                patch.object(launcher_mod.subprocess, "Popen", side_effect=OSError("boom")):
            # When / Then
            launcher.launch("kitty")


class TestLoadIcon:
    def test_icon_is_cached_by_name_and_size(self):
        # Given
        launcher = Launcher(exec_fallback=MagicMock())
        pixbuf = MagicMock()
        with patch.object(launcher, "resolve", return_value=_info("kitty", icon="kitty-icon")), \
                patch.object(Launcher, "_try_load_icon", return_value=pixbuf) as load:
            # When
            a = launcher.load_icon("kitty", 64)
            b = launcher.load_icon("kitty", 64)
            launcher.load_icon("kitty", 32)
        # Then
        assert a is b is pixbuf
        assert load.call_count == 2
        load.assert_any_call("kitty-icon", 64)

    def test_unresolved_class_uses_lowercase_name(self):
        # Given
        launcher = Launcher(exec_fallback=MagicMock())
        with patch.object(launcher, "resolve", return_value=None), \
                patch.object(Launcher, "_try_load_icon", return_value=None) as load:
            # When
            launcher.load_icon("Slack", 48)
        # Then
        load.assert_called_once_with("slack", 48)
