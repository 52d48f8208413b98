"""
Tests for the theme catalog and the persisted theme selection.
"""
import json

import pytest

from notetype.errors import UnknownThemeError
from notetype.themes import (COLOR_SLOTS, DEFAULT_THEME, THEMES, Style, ThemeStore,
                             build_styles, get_theme)


def test_catalog():
    assert len(THEMES) == 8
    assert DEFAULT_THEME in THEMES
    for key, theme in THEMES.items():
        assert theme.key == key
        for slot in COLOR_SLOTS:
            assert getattr(theme, slot).startswith("#")


def test_get_theme():
    assert get_theme("nord").name == "Nord"
    with pytest.raises(UnknownThemeError):
        get_theme("neon")


def test_build_styles():
    styles = build_styles(THEMES["dracula"])
    assert all(isinstance(style, Style) for style in styles.values())
    assert styles["base"].bg == THEMES["dracula"].background
    assert styles["selected"].bold


def test_missing_file_loads_default(tmp_path):
    assert ThemeStore(tmp_path / "theme.json").load() == THEMES[DEFAULT_THEME]


@pytest.mark.parametrize("payload", ['{not json', '"neon"', '["nord"]', ''])
def test_bad_file_loads_default(tmp_path, payload):
    path = tmp_path / "theme.json"
    path.write_text(payload)
    assert ThemeStore(path).load() == THEMES[DEFAULT_THEME]


def test_save_then_load(tmp_path):
    path = tmp_path / "config" / "theme.json"
    store = ThemeStore(path)
    assert store.save("gruvbox") == THEMES["gruvbox"]
    assert json.loads(path.read_text()) == "gruvbox"
    assert store.load() == store.load() == THEMES["gruvbox"]


def test_save_unknown_leaves_file_alone(tmp_path):
    path = tmp_path / "theme.json"
    store = ThemeStore(path)
    store.save("nord")
    with pytest.raises(UnknownThemeError):
        store.save("neon")
    assert store.current_key() == "nord"
