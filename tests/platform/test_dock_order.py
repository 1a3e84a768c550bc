"""Tests for the dock order model: favorites, placeholders and reordering."""

from unittest.mock import MagicMock

from annydock.core.favorites import Favorites
from annydock.platform.model import DockModel, Pinned, Running
from annydock.platform.registry import WindowHandle, WindowRegistry


def _setup(favorites=(), windows=()):
    registry = WindowRegistry(query=MagicMock(return_value=[]))
    for handle in windows:
        registry.add(handle)
    model = DockModel(Favorites(favorites, path="/nonexistent/favorites.json"), registry)
    model.populate(registry.snapshot())
    return model, registry


def _open(model, registry, address, wm_class, title=None):
    handle = WindowHandle(address, wm_class, title)
    registry.add(handle)
    return model.open_window(handle)


def _close(model, registry, address):
    handle = registry.get(address)
    changed = model.close_window(handle)
    registry.remove(address)
    return changed


def _assert_consistent(model, registry):
    keys = model.keys()
    assert len(keys) == len(set(keys))
    running_classes = {w.wm_class for w in registry.snapshot()}
    for handle in registry.snapshot():
        assert Running(handle.address) in keys
    for wm_class in model.favorites:
        assert (Pinned(wm_class) in keys) == (wm_class not in running_classes)


class TestPopulate:
    def test_favorites_first_then_other_windows(self):
        # Given
        windows = [
            WindowHandle("0x1", "firefox"),
            WindowHandle("0x2", "kitty"),
            WindowHandle("0x3", "code"),
        ]
        # When
        model, _ = _setup(["kitty", "slack"], windows)
        # Then
        assert model.keys() == [
            Running("0x2"),
            Pinned("slack"),
            Running("0x1"),
            Running("0x3"),
        ]

    def test_length_is_running_non_favorites_plus_favorites(self):
        # Given
        windows = [WindowHandle("0x1", "firefox"), WindowHandle("0x2", "kitty")]
        # When
        model, _ = _setup(["kitty", "slack", "spotify"], windows)
        # Then
        assert len(model) == 1 + 3

    def test_entries_describe_slots(self):
        # Given
        model, _ = _setup(["slack"], [WindowHandle("0x1", "kitty", "shell")])
        # When
        entries = model.entries()
        # Then
        assert entries[0].key == Pinned("slack")
        assert entries[0].is_pinned and not entries[0].is_running
        assert entries[1].wm_class == "kitty"
        assert entries[1].title == "shell"
        assert entries[1].is_running and not entries[1].is_pinned

    def test_on_change_fires(self):
        # Given
        model, registry = _setup(["slack"])
        model.on_change = MagicMock()
        # When
        _open(model, registry, "0x1", "kitty")
        # Then
        model.on_change.assert_called_once()


class TestOpenClose:
    def test_open_appends(self):
        # Given
        model, registry = _setup()
        # When
        changed = _open(model, registry, "0x1", "kitty")
        # Then
        assert changed is True
        assert model.keys() == [Running("0x1")]

    def test_open_twice_is_noop(self):
        # Given
        model, registry = _setup()
        _open(model, registry, "0x1", "kitty")
        # When / Then
        assert model.open_window(WindowHandle("0x1", "kitty")) is False
        assert len(model) == 1

    def test_placeholder_replaced_in_place(self):
        # Given
        model, registry = _setup(["a", "slack", "b"])
        index = model.index_of(Pinned("slack"))
        # When
        _open(model, registry, "0x9", "slack")
        # Then
        assert model.index_of(Running("0x9")) == index
        assert Pinned("slack") not in model.keys()
        _assert_consistent(model, registry)

    def test_close_non_favorite_removes(self):
        # Given
        model, registry = _setup(windows=[WindowHandle("0x1", "kitty")])
        # When
        changed = _close(model, registry, "0x1")
        # Then
        assert changed is True
        assert model.keys() == []

    def test_close_favorite_demotes_in_place(self):
        # Given
        windows = [WindowHandle("0x1", "firefox"), WindowHandle("0x2", "kitty")]
        model, registry = _setup(["kitty"], windows)
        index = model.index_of(Running("0x2"))
        # When
        _close(model, registry, "0x2")
        # Then
        assert model.index_of(Pinned("kitty")) == index
        _assert_consistent(model, registry)

    def test_favorite_with_two_windows_demotes_only_on_last_close(self):
        # Given
        windows = [WindowHandle("0x1", "kitty"), WindowHandle("0x2", "kitty")]
        model, registry = _setup(["kitty"], windows)
        # When
        _close(model, registry, "0x1")
        # Then
        assert model.keys() == [Running("0x2")]
        # When
        _close(model, registry, "0x2")
        # Then
        assert model.keys() == [Pinned("kitty")]

    def test_close_unknown_is_noop(self):
        # Given
        model, _ = _setup()
        # When / Then
        assert model.close_window(WindowHandle("0xdead", "kitty")) is False


class TestPinUnpin:
    def test_pin_running_keeps_slot(self):
        # Given
        model, registry = _setup(windows=[WindowHandle("0x1", "kitty")])
        # When
        changed = model.pin("kitty")
        # Then
        assert changed is True
        assert model.keys() == [Running("0x1")]
        assert "kitty" in model.favorites

    def test_pin_not_running_appends_placeholder(self):
        # Given
        model, _ = _setup(windows=[WindowHandle("0x1", "kitty")])
        # When
        model.pin("slack")
        # Then
        assert model.keys() == [Running("0x1"), Pinned("slack")]

    def test_unpin_removes_placeholder(self):
        # Given
        model, _ = _setup(["slack"])
        # When
        model.unpin("slack")
        # Then
        assert model.keys() == []
        assert "slack" not in model.favorites

    def test_unpin_running_keeps_window(self):
        # Given
        model, _ = _setup(["kitty"], [WindowHandle("0x1", "kitty")])
        # When
        model.unpin("kitty")
        # Then
        assert model.keys() == [Running("0x1")]

    def test_pin_unpin_pin_restores_index(self):
        # Given
        windows = [
            WindowHandle("0x1", "a"),
            WindowHandle("0x2", "kitty"),
            WindowHandle("0x3", "b"),
        ]
        model, _ = _setup(windows=windows)
        index = model.index_of(Running("0x2"))
        # When
        model.pin("kitty")
        model.unpin("kitty")
        model.pin("kitty")
        # Then
        assert model.index_of(Running("0x2")) == index

    def test_toggle_favorite(self):
        # Given
        model, _ = _setup(windows=[WindowHandle("0x1", "kitty")])
        # When
        model.toggle_favorite(Running("0x1"))
        # Then
        assert "kitty" in model.favorites
        # When
        model.toggle_favorite(Running("0x1"))
        # Then
        assert "kitty" not in model.favorites

    def test_toggle_placeholder_unpins(self):
        # Given
        model, _ = _setup(["slack"])
        # When
        model.toggle_favorite(Pinned("slack"))
        # Then
        assert model.keys() == []

    def test_duplicate_pin_is_noop(self):
        # Given
        model, _ = _setup(["slack"])
        # When / Then
        assert model.pin("slack") is False
        assert model.keys() == [Pinned("slack")]


class TestCommitOrder:
    def test_accepts_permutation(self):
        # Given
        windows = [WindowHandle(f"0x{i}", "kitty") for i in range(3)]
        model, _ = _setup(windows=windows)
        new_order = [Running("0x2"), Running("0x0"), Running("0x1")]
        # When
        changed = model.commit_order(new_order)
        # Then
        assert changed is True
        assert model.keys() == new_order

    def test_rejects_non_permutation(self):
        # Given
        model, _ = _setup(windows=[WindowHandle("0x1", "kitty")])
        # When
        changed = model.commit_order([Running("0x1"), Running("0x2")])
        # Then
        assert changed is False
        assert model.keys() == [Running("0x1")]

    def test_same_order_is_noop(self):
        # Given
        model, _ = _setup(windows=[WindowHandle("0x1", "kitty")])
        # When / Then
        assert model.commit_order([Running("0x1")]) is False


class TestKeys:
    def test_pinned_key_string(self):
        assert str(Pinned("kitty")) == "pinned:kitty"

    def test_running_key_string(self):
        assert str(Running("0x1")) == "0x1"

    def test_class_of(self):
        # Given
        model, _ = _setup(["slack"], [WindowHandle("0x1", "kitty")])
        # Then
        assert model.class_of(Pinned("slack")) == "slack"
        assert model.class_of(Running("0x1")) == "kitty"
        assert model.class_of(Running("0xdead")) is None


class TestFavoriteSlotHandover:
    def test_closing_slot_window_hands_slot_to_next_window(self):
        # Given: firefox is a favorite with two windows, the first holds the slot
        windows = [
            WindowHandle("0x1", "firefox"),
            WindowHandle("0x2", "kitty"),
            WindowHandle("0x3", "firefox"),
        ]
        model, registry = _setup(["firefox"], windows)
        assert model.keys() == [Running("0x1"), Running("0x2"), Running("0x3")]
        # When
        _close(model, registry, "0x1")
        # Then
        assert model.keys() == [Running("0x3"), Running("0x2")]
        _assert_consistent(model, registry)

    def test_slot_stays_put_until_last_window_closes(self):
        # Given
        windows = [
            WindowHandle("0x1", "firefox"),
            WindowHandle("0x2", "kitty"),
            WindowHandle("0x3", "firefox"),
        ]
        model, registry = _setup(["firefox"], windows)
        # When
        _close(model, registry, "0x1")
        _close(model, registry, "0x3")
        # Then
        assert model.keys() == [Pinned("firefox"), Running("0x2")]

    def test_closing_extra_window_keeps_slot(self):
        # Given
        windows = [
            WindowHandle("0x1", "firefox"),
            WindowHandle("0x2", "kitty"),
            WindowHandle("0x3", "firefox"),
        ]
        model, registry = _setup(["firefox"], windows)
        # When
        _close(model, registry, "0x3")
        # Then
        assert model.keys() == [Running("0x1"), Running("0x2")]

    def test_successor(self):
        # Given
        windows = [
            WindowHandle("0x1", "firefox"),
            WindowHandle("0x2", "kitty"),
            WindowHandle("0x3", "firefox"),
        ]
        model, registry = _setup(["firefox"], windows)
        # Then
        assert model.successor(registry.get("0x1")) == Running("0x3")
        assert model.successor(registry.get("0x3")) is None
        assert model.successor(registry.get("0x2")) is None
