"""
Tests for the view-state machine: every transition is driven through
``SessionMachine.handle`` with the clock pinned to FIXED_NOW.
"""
import re

import pytest

from conftest import FIXED_NOW, TODAY, choose, press, type_text
from notetype.errors import StorageError
from notetype.events import Action, Command, ResizeEvent, TextEvent
from notetype.items import NoteItem, TagItem, ThemeItem
from notetype.session import MENU_ITEMS, Mode
from notetype.store import Collection, new_note_id


def ids(session):
    return [item.id for item in session.items]


# ---- MENU ----

def test_new_session_starts_on_menu(session):
    assert session.mode is Mode.MENU
    assert [item.title() for item in session.items] == [m.label for m in MENU_ITEMS]
    assert session.cursor == 0
    assert session.status.startswith("Welcome to NoteType")


def test_menu_cursor_is_clamped(machine, session):
    press(machine, session, Action.UP)
    assert session.cursor == 0
    press(machine, session, Action.END)
    assert session.cursor == len(MENU_ITEMS) - 1
    press(machine, session, Action.DOWN)
    assert session.cursor == len(MENU_ITEMS) - 1
    press(machine, session, Action.HOME, Action.DOWN)
    assert session.cursor == 1


def test_quit_emits_quit_command(machine, session):
    assert press(machine, session, Action.QUIT) == [Command.QUIT]
    assert session.mode is Mode.MENU


def test_help_toggles(machine, session):
    press(machine, session, Action.HELP)
    assert session.help_visible
    press(machine, session, Action.HELP)
    assert not session.help_visible


def test_back_on_menu_does_nothing(machine, session):
    assert press(machine, session, Action.BACK) == []
    assert session.mode is Mode.MENU


@pytest.mark.parametrize("label,status", [
    ("Export", "Export is not available yet"),
    ("Settings", "Settings not yet implemented"),
])
def test_placeholder_menu_entries_only_set_status(machine, session, label, status):
    choose(machine, session, label)
    assert session.mode is Mode.MENU
    assert session.status == status


def test_search_placeholder_and_back(machine, session):
    choose(machine, session, "Search")
    assert session.mode is Mode.SEARCH
    press(machine, session, Action.BACK)
    assert session.mode is Mode.MENU


def test_resize_updates_layout_without_changing_mode(machine, session):
    choose(machine, session, "Notes")
    machine.handle(session, ResizeEvent(60, 20))
    assert session.mode is Mode.LIST
    assert (session.width, session.height) == (60, 20)
    assert session.layout.list_width == 56
    assert session.layout.editor_height == 8


# ---- JOURNAL ----

def test_todays_journal_type_and_save(machine, session, store):
    commands = choose(machine, session, "Today's Journal")
    assert commands == [Command.SHOW_CURSOR]
    assert session.mode is Mode.EDITOR
    assert session.is_journal
    assert session.current_id == TODAY
    assert session.editor.value == ""

    type_text(machine, session, "Hello")
    press(machine, session, Action.SAVE)

    assert session.mode is Mode.EDITOR
    assert "saved" in session.status
    assert not session.editor.dirty
    assert "Hello" in store.read(Collection.JOURNAL, TODAY)


def test_todays_journal_loads_existing_entry(machine, session, store):
    store.write(Collection.JOURNAL, TODAY, "first line\nsecond")
    choose(machine, session, "Today's Journal")
    assert session.editor.value == "first line\nsecond"
    assert (session.editor.cursor_y, session.editor.cursor_x) == (1, 6)


def test_saved_buffer_round_trips_exactly(machine, session, store):
    choose(machine, session, "Today's Journal")
    type_text(machine, session, "line one")
    press(machine, session, Action.NEWLINE)
    type_text(machine, session, "  #tagged ")
    press(machine, session, Action.SAVE)
    assert store.read(Collection.JOURNAL, TODAY) == "line one\n  #tagged "


def test_back_from_editor_hides_cursor_and_restores_menu_cursor(machine, session):
    choose(machine, session, "New Note")
    assert session.mode is Mode.EDITOR
    commands = press(machine, session, Action.BACK)
    assert commands == [Command.HIDE_CURSOR]
    assert session.mode is Mode.MENU
    assert session.status == "Returned to main menu"
    assert session.items[session.cursor].title() == "New Note"


def test_text_outside_editor_is_ignored(machine, session):
    machine.handle(session, TextEvent("x"))
    assert session.mode is Mode.MENU
    assert session.editor.value == ""


# ---- NOTES ----

def test_new_note_save_allocates_and_binds_id(machine, session, store):
    choose(machine, session, "New Note")
    assert session.current_id is None
    type_text(machine, session, "draft")
    press(machine, session, Action.SAVE)

    expected = new_note_id(FIXED_NOW)
    assert session.current_id == expected
    assert expected in session.status

    type_text(machine, session, " more")
    press(machine, session, Action.SAVE)
    assert [e.id for e in store.list(Collection.NOTES)] == [expected]
    assert store.read(Collection.NOTES, expected) == "draft more"


def test_new_note_id_skips_existing_files(machine, session, store):
    taken = new_note_id(FIXED_NOW)
    store.write(Collection.NOTES, taken, "already here")
    choose(machine, session, "New Note")
    type_text(machine, session, "x")
    press(machine, session, Action.SAVE)
    assert session.current_id == f"{taken}-1"
    assert store.read(Collection.NOTES, taken) == "already here"


def test_saving_empty_new_note_reports_error(machine, session, store):
    choose(machine, session, "New Note")
    press(machine, session, Action.SAVE)
    assert session.mode is Mode.EDITOR
    assert session.status.startswith("Error saving note")
    assert store.list(Collection.NOTES) == []


def test_notes_list_and_open_in_viewer(machine, session, store):
    for name in ("b", "a", "c"):
        store.write(Collection.NOTES, name, f"note {name}")
    choose(machine, session, "Notes")
    assert session.mode is Mode.LIST
    assert not session.is_journal
    assert ids(session) == ["a", "b", "c"]
    assert session.status == "Found 3 notes"

    press(machine, session, Action.DOWN, Action.SELECT)
    assert session.mode is Mode.VIEWER
    assert session.current_id == "b"
    assert session.viewer_text == "note b"


def test_journal_list_is_newest_first(machine, session, store):
    for day in ("2024-03-01", "2024-03-14", "2024-02-28"):
        store.write(Collection.JOURNAL, day, day)
    choose(machine, session, "All Journals")
    assert session.is_journal
    assert ids(session) == ["2024-03-14", "2024-03-01", "2024-02-28"]
    assert session.status == "Found 3 journal entries"


def test_delete_reloads_list_and_clamps_cursor(machine, session, store):
    for name in ("a", "b", "c"):
        store.write(Collection.NOTES, name, name)
    choose(machine, session, "Notes")
    press(machine, session, Action.DOWN)
    assert session.selected_item().id == "b"

    press(machine, session, Action.DELETE)
    assert not store.exists(Collection.NOTES, "b")
    assert ids(session) == ["a", "c"]
    assert 0 <= session.cursor < len(session.items)
    assert session.status == "Deleted 'b'"

    press(machine, session, Action.END, Action.DELETE)
    assert ids(session) == ["a"]
    assert session.cursor == 0


def test_delete_failure_keeps_list(machine, session, store, monkeypatch):
    store.write(Collection.NOTES, "a", "a")
    choose(machine, session, "Notes")

    def fail(collection, item_id):
        raise StorageError("disk is read-only")
    monkeypatch.setattr(store, "delete", fail)

    press(machine, session, Action.DELETE)
    assert session.mode is Mode.LIST
    assert ids(session) == ["a"]
    assert session.status == "Error deleting: disk is read-only"


def test_failed_tag_reload_after_delete_returns_to_menu(machine, session, store, monkeypatch):
    store.write(Collection.NOTES, "a", "#work")
    store.write(Collection.NOTES, "b", "#work")
    choose(machine, session, "Tags")
    choose(machine, session, "#work")

    def fail(tag):
        raise StorageError("index unavailable")
    monkeypatch.setattr(machine.indexer, "find_by_tag", fail)

    press(machine, session, Action.DELETE)
    assert not store.exists(Collection.NOTES, "a")
    assert session.mode is Mode.MENU
    assert session.status == "Error finding files: index unavailable"
    assert all(not isinstance(item, NoteItem) for item in session.items)


def test_delete_on_empty_list(machine, session):
    choose(machine, session, "Notes")
    press(machine, session, Action.DELETE)
    assert session.status == "Nothing to delete"


def test_list_load_failure_falls_back_to_menu(machine, session, store, monkeypatch):
    def fail(collection):
        raise StorageError("permission denied")
    monkeypatch.setattr(store, "list", fail)
    choose(machine, session, "Notes")
    assert session.mode is Mode.MENU
    assert session.status == "Error loading notes: permission denied"


def test_new_entry_from_lists(machine, session, store):
    choose(machine, session, "Notes")
    commands = press(machine, session, Action.NEW_ENTRY)
    assert commands == [Command.SHOW_CURSOR]
    assert session.mode is Mode.EDITOR
    assert session.current_id is None

    press(machine, session, Action.BACK)
    choose(machine, session, "All Journals")
    press(machine, session, Action.NEW_ENTRY)
    assert session.is_journal
    assert session.current_id == TODAY


def test_opening_a_file_removed_underneath(machine, session, store):
    store.write(Collection.NOTES, "gone", "x")
    choose(machine, session, "Notes")
    store.delete(Collection.NOTES, "gone")
    press(machine, session, Action.SELECT)
    assert session.mode is Mode.LIST
    assert session.status.startswith("Error opening note")


# ---- VIEWER ----

def test_viewer_edit_reloads_from_disk(machine, session, store):
    store.write(Collection.NOTES, "plan", "v1")
    choose(machine, session, "Notes")
    press(machine, session, Action.SELECT)
    store.write(Collection.NOTES, "plan", "v2\nmore")

    commands = press(machine, session, Action.EDIT)
    assert commands == [Command.SHOW_CURSOR]
    assert session.mode is Mode.EDITOR
    assert session.current_id == "plan"
    assert session.editor.value == "v2\nmore"
    assert (session.editor.cursor_y, session.editor.cursor_x) == (0, 0)

    type_text(machine, session, "> ")
    press(machine, session, Action.SAVE)
    assert store.read(Collection.NOTES, "plan") == "> v2\nmore"


def test_viewer_scrolling_is_clamped(machine, session, store):
    store.write(Collection.NOTES, "long", "\n".join(str(i) for i in range(100)))
    choose(machine, session, "Notes")
    press(machine, session, Action.SELECT)

    press(machine, session, Action.UP)
    assert session.viewer_scroll == 0
    press(machine, session, Action.DOWN, Action.DOWN)
    assert session.viewer_scroll == 2
    press(machine, session, Action.END)
    assert session.viewer_scroll == 100 - session.layout.viewer_height
    press(machine, session, Action.PAGE_DOWN)
    assert session.viewer_scroll == session.max_viewer_scroll()
    press(machine, session, Action.HOME)
    assert session.viewer_scroll == 0


# ---- TAGS ----

def test_tags_list_and_filter(machine, session, store):
    store.write(Collection.NOTES, "one", "standup #work")
    store.write(Collection.NOTES, "two", "#work and #home")
    store.write(Collection.NOTES, "three", "#home only")
    store.write(Collection.NOTES, "four", "no tags here")

    choose(machine, session, "Tags")
    assert session.mode is Mode.TAGS
    assert [(i.tag, i.count) for i in session.items] == [("home", 2), ("work", 2)]

    choose(machine, session, "#work")
    assert session.mode is Mode.LIST
    assert session.tag_filter == "work"
    assert sorted(ids(session)) == ["one", "two"]
    assert session.list_title == "Entries tagged with #work"


def test_tag_filter_keeps_journal_entries_in_their_collection(machine, session, store):
    store.write(Collection.JOURNAL, "2024-03-14", "retro #work")
    store.write(Collection.NOTES, "one", "#work")
    choose(machine, session, "Tags")
    choose(machine, session, "#work")

    assert [(i.collection, i.id) for i in session.items] == [
        (Collection.JOURNAL, "2024-03-14"), (Collection.NOTES, "one")]

    press(machine, session, Action.SELECT)
    assert session.mode is Mode.VIEWER
    assert session.is_journal
    assert session.viewer_text == "retro #work"

    press(machine, session, Action.BACK)
    choose(machine, session, "Tags")
    choose(machine, session, "#work")
    press(machine, session, Action.DELETE)
    assert not store.exists(Collection.JOURNAL, "2024-03-14")
    assert session.tag_filter == "work"
    assert ids(session) == ["one"]


def test_no_tags_stays_on_menu(machine, session, store):
    store.write(Collection.NOTES, "plain", "nothing tagged")
    choose(machine, session, "Tags")
    assert session.mode is Mode.MENU
    assert session.status == "No tags found. Add #tags to your notes!"


def test_tag_with_no_entries(machine, session):
    machine.show_entries_with_tag(session, "missing")
    assert session.mode is Mode.MENU
    assert session.status == "No entries found with #missing"


# ---- TEMPLATES ----

def test_meeting_template_fills_variables(machine, session):
    choose(machine, session, "Templates")
    assert session.mode is Mode.TEMPLATES
    commands = choose(machine, session, "meeting")

    assert commands == [Command.SHOW_CURSOR]
    assert session.mode is Mode.EDITOR
    assert session.current_id is None
    value = session.editor.value
    assert value.startswith(f"# Meeting Notes - {TODAY}")
    assert f"**Date:** {TODAY} 09:30" in value
    assert re.search(r"\{\{\w+\}\}", value) is None


def test_template_note_saves_under_new_id(machine, session, store):
    choose(machine, session, "Templates")
    choose(machine, session, "idea")
    press(machine, session, Action.SAVE)
    note_id = new_note_id(FIXED_NOW)
    assert session.current_id == note_id
    assert store.read(Collection.NOTES, note_id).startswith("# Idea: New Entry")


def test_custom_templates_are_listed(machine, session, templates):
    templates.save_custom("standup", "# Standup {{date}}\n")
    choose(machine, session, "Templates")
    assert session.items[-1].title() == "standup"
    choose(machine, session, "standup")
    assert session.editor.value == f"# Standup {TODAY}\n"


# ---- THEMES ----

def _theme_index(session, key):
    return next(i for i, item in enumerate(session.items) if item.key == key)


def test_themes_list_starts_on_current_theme(machine, session, theme_store):
    theme_store.save("nord")
    session.theme = theme_store.load()
    choose(machine, session, "Themes")
    assert session.mode is Mode.THEMES
    assert all(isinstance(item, ThemeItem) for item in session.items)
    assert session.selected_item().key == "nord"
    assert session.selected_item().current


def test_apply_theme(machine, session, theme_store):
    choose(machine, session, "Themes")
    session.cursor = _theme_index(session, "dracula")
    commands = press(machine, session, Action.SELECT)

    assert commands == [Command.APPLY_THEME]
    assert session.mode is Mode.MENU
    assert session.theme.key == "dracula"
    assert session.status == "Applied theme: Dracula"
    assert theme_store.current_key() == "dracula"


def test_apply_theme_failure_keeps_theme(machine, session, theme_store, monkeypatch):
    def fail(key):
        raise StorageError("read-only")
    monkeypatch.setattr(theme_store, "save", fail)
    choose(machine, session, "Themes")
    session.cursor = _theme_index(session, "tokyo")
    assert press(machine, session, Action.SELECT) == []
    assert session.mode is Mode.THEMES
    assert session.theme.key == "violet"
    assert session.status == "Error saving theme: read-only"


# ---- LIST ITEMS ----

def test_list_items_describe_themselves(store):
    store.write(Collection.NOTES, "sized", "x" * 2048)
    item = NoteItem(store.entry(Collection.NOTES, "sized"))
    assert item.title() == "sized"
    assert item.description().endswith("• 2.0 KB")
    assert TagItem("work", 1).description() == "1 entry"
    assert TagItem("work", 3).title() == "#work"
