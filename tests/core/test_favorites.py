"""Tests for persisted favorites."""

import json

from annydock.core.favorites import Favorites


class TestFavoritesSet:
    def test_keeps_insertion_order_without_duplicates(self):
        # Given / When
        favs = Favorites(["kitty", "firefox", "kitty"])
        # Then
        assert list(favs) == ["kitty", "firefox"]
        assert len(favs) == 2

    def test_add_and_remove(self):
        # Given
        favs = Favorites(["kitty"])
        # Then
        assert favs.add("firefox") is True
        assert favs.add("firefox") is False
        assert "firefox" in favs
        assert favs.remove("kitty") is True
        assert favs.remove("kitty") is False
        assert list(favs) == ["firefox"]

    def test_iteration_is_a_snapshot(self):
        # Given
        favs = Favorites(["a", "b"])
        # When
        for wm_class in favs:
            favs.remove(wm_class)
        # Then
        assert len(favs) == 0


class TestFavoritesPersistence:
    def test_missing_file_is_empty(self, tmp_path):
        assert len(Favorites.load(tmp_path / "favorites.json")) == 0

    def test_invalid_file_is_empty(self, tmp_path):
        # Given
        path = tmp_path / "favorites.json"
        path.write_text("{oops")
        # When / Then
        assert len(Favorites.load(path)) == 0

    def test_non_list_is_empty(self, tmp_path):
        # Given
        path = tmp_path / "favorites.json"
        path.write_text('{"kitty": true}')
        # When / Then
        assert len(Favorites.load(path)) == 0

    def test_skips_non_string_entries(self, tmp_path):
        # Given
        path = tmp_path / "favorites.json"
        path.write_text(json.dumps(["kitty", 3, "", "firefox"]))
        # When
        favs = Favorites.load(path)
        # Then
        assert list(favs) == ["kitty", "firefox"]

    def test_save_writes_to_load_path(self, tmp_path):
        # Given
        path = tmp_path / "nested" / "favorites.json"
        favs = Favorites.load(path)
        favs.add("kitty")
        # When
        favs.save()
        # Then
        assert json.loads(path.read_text()) == ["kitty"]

    def test_save_failure_is_logged_not_raised(self, tmp_path):
        # Given: the parent is a file, so mkdir fails
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        favs = Favorites(["kitty"], path=blocker / "favorites.json")
        # When / Then
        favs.save()
