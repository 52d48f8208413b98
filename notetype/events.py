import curses
from dataclasses import dataclass
from enum import Enum, auto


class Action(Enum):
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    PAGE_UP = auto()
    PAGE_DOWN = auto()
    HOME = auto()
    END = auto()
    SELECT = auto()
    BACK = auto()
    QUIT = auto()
    SAVE = auto()
    DELETE = auto()
    NEW_ENTRY = auto()
    HELP = auto()
    EDIT = auto()
    NEWLINE = auto()
    BACKSPACE = auto()
    DELETE_CHAR = auto()


class Command(Enum):
    """Follow-up work a transition asks the terminal driver to do."""
    QUIT = auto()
    SHOW_CURSOR = auto()
    HIDE_CURSOR = auto()
    APPLY_THEME = auto()


@dataclass(frozen=True)
class KeyEvent:
    action: Action


@dataclass(frozen=True)
class TextEvent:
    text: str


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


# ---------------------------------------------------------------------
# KEY BINDINGS
# ---------------------------------------------------------------------
CTRL_C = "\x03"
CTRL_S = "\x13"
ESC = "\x1b"
TAB_TEXT = "    "

ENTER_KEYS = ("\n", "\r", curses.KEY_ENTER)
BACKSPACE_KEYS = ("\x7f", "\x08", curses.KEY_BACKSPACE)

NAVIGATION_KEYS = {
    curses.KEY_UP: Action.UP,
    curses.KEY_DOWN: Action.DOWN,
    curses.KEY_LEFT: Action.LEFT,
    curses.KEY_RIGHT: Action.RIGHT,
    curses.KEY_PPAGE: Action.PAGE_UP,
    curses.KEY_NPAGE: Action.PAGE_DOWN,
    curses.KEY_HOME: Action.HOME,
    curses.KEY_END: Action.END,
}

GLOBAL_KEYS = {
    CTRL_C: Action.QUIT,
    ESC: Action.BACK,
    curses.KEY_F1: Action.HELP,
}

BROWSE_KEYS = {
    "q": Action.QUIT,
    "?": Action.HELP,
    "k": Action.UP,
    "j": Action.DOWN,
    "h": Action.LEFT,
    "l": Action.RIGHT,
    "g": Action.HOME,
    "G": Action.END,
    "n": Action.NEW_ENTRY,
    "d": Action.DELETE,
    "e": Action.EDIT,
}


def translate_key(key, editing: bool):
    """Turn a ``get_wch`` result into an event, or None if the key is unbound.

    While editing, printable keys are text; elsewhere they are commands.
    """
    if key in GLOBAL_KEYS:
        return KeyEvent(GLOBAL_KEYS[key])
    if key in NAVIGATION_KEYS:
        return KeyEvent(NAVIGATION_KEYS[key])
    if editing:
        if key == CTRL_S:
            return KeyEvent(Action.SAVE)
        if key in ENTER_KEYS:
            return KeyEvent(Action.NEWLINE)
        if key in BACKSPACE_KEYS:
            return KeyEvent(Action.BACKSPACE)
        if key == curses.KEY_DC:
            return KeyEvent(Action.DELETE_CHAR)
        if key == "\t":
            return TextEvent(TAB_TEXT)
        if isinstance(key, str) and key.isprintable():
            return TextEvent(key)
        return None
    if key in ENTER_KEYS:
        return KeyEvent(Action.SELECT)
    if key in BROWSE_KEYS:
        return KeyEvent(BROWSE_KEYS[key])
    return None


HELP_TEXT = [
    "Keyboard Shortcuts:",
    "",
    "Navigation:   Up/k Down/j     Move up/down",
    "              Enter           Select/Open",
    "              Esc             Back to menu",
    "              q / Ctrl+C      Quit (Ctrl+C in the editor)",
    "",
    "Actions:      n               New entry (in lists)",
    "              d               Delete (in lists)",
    "              e               Edit (in viewer)",
    "              Ctrl+S          Save (in editor)",
    "              ? / F1          Toggle help (F1 in the editor)",
    "",
    "Tags: browse every #tag   Templates: start from a template",
    "Themes: change colours instantly",
]
