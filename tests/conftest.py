"""
Shared fixtures: every store lives under pytest's tmp_path and the
session clock is pinned so journal ids and template dates are stable.
"""
from datetime import datetime

import pytest

from notetype.events import Action, KeyEvent, ResizeEvent, TextEvent
from notetype.session import SessionMachine
from notetype.store import ContentStore
from notetype.tags import TagIndexer
from notetype.templates import TemplateEngine
from notetype.themes import ThemeStore

FIXED_NOW = datetime(2024, 3, 15, 9, 30)
TODAY = "2024-03-15"


@pytest.fixture
def store(tmp_path):
    notes_dir = tmp_path / "notes"
    notes_dir.mkdir()
    return ContentStore(notes_dir, tmp_path / "journal")


@pytest.fixture
def templates(tmp_path):
    return TemplateEngine(tmp_path / "templates")


@pytest.fixture
def theme_store(tmp_path):
    return ThemeStore(tmp_path / "theme.json")


@pytest.fixture
def machine(store, templates, theme_store):
    return SessionMachine(store, TagIndexer(store), templates, theme_store,
                          clock=lambda: FIXED_NOW)


@pytest.fixture
def session(machine):
    session = machine.new_session()
    machine.handle(session, ResizeEvent(100, 40))
    return session


def press(machine, session, *actions):
    """Send key actions in order; returns the commands of the last one."""
    commands = []
    for action in actions:
        commands = machine.handle(session, KeyEvent(action))
    return commands


def type_text(machine, session, text):
    for ch in text:
        machine.handle(session, TextEvent(ch))


def choose(machine, session, title):
    """Move the list cursor onto the item titled ``title`` and select it."""
    titles = [item.title() for item in session.items]
    session.cursor = titles.index(title)
    return press(machine, session, Action.SELECT)
