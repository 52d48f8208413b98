import curses
import locale
import logging
import os
import sys
from dataclasses import dataclass

from .config import load_config, resolve_path, setup_logging
from .events import CTRL_C, Command, ResizeEvent, translate_key
from .render import cell_width, render
from .session import Mode, SessionMachine
from .store import ContentStore
from .tags import TagIndexer
from .templates import TemplateEngine
from .themes import Style, ThemeStore

# redraw at least this often so the status bar clock stays current
IDLE_REDRAW_MS = 30000

BASIC_COLORS = {
    curses.COLOR_BLACK: (0, 0, 0),
    curses.COLOR_RED: (205, 0, 0),
    curses.COLOR_GREEN: (0, 205, 0),
    curses.COLOR_YELLOW: (205, 205, 0),
    curses.COLOR_BLUE: (0, 0, 238),
    curses.COLOR_MAGENTA: (205, 0, 205),
    curses.COLOR_CYAN: (0, 205, 205),
    curses.COLOR_WHITE: (229, 229, 229),
}


def hex_to_rgb(value: str):
    value = value.lstrip("#")
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


def nearest_basic_color(rgb) -> int:
    return min(BASIC_COLORS, key=lambda c: sum((a - b) ** 2 for a, b in zip(BASIC_COLORS[c], rgb)))


# ---------------------------------------------------------------------
# COLOUR ALLOCATION
# ---------------------------------------------------------------------
class CursesPalette:
    """Turns renderer Styles into curses attributes, allocating pairs lazily.

    Terminals that can redefine colours get the theme's exact RGB values;
    the rest get the nearest of the eight standard colours.
    """
    FIRST_COLOR = 50  # low colour numbers are the terminal's own palette

    def __init__(self):
        self.enabled = curses.has_colors()
        self.extended = self.enabled and curses.can_change_color() and curses.COLORS >= 256
        self.reset()

    def reset(self):
        self.colors = {}
        self.pairs = {}
        self.next_color = self.FIRST_COLOR
        self.next_pair = 1

    def color(self, hex_value: str) -> int:
        if hex_value is None:
            return -1
        if hex_value in self.colors:
            return self.colors[hex_value]
        rgb = hex_to_rgb(hex_value)
        number = nearest_basic_color(rgb)
        if self.extended and self.next_color < curses.COLORS:
            try:
                curses.init_color(self.next_color, *(int(c / 255 * 1000) for c in rgb))
                number = self.next_color
                self.next_color += 1
            except curses.error as e:
                logging.warning(f"init_color failed for {hex_value}, using a basic colour: {e}")
                self.extended = False
        self.colors[hex_value] = number
        return number

    def attr(self, style: Style) -> int:
        attr = curses.A_BOLD if style.bold else curses.A_NORMAL
        if style.italic and hasattr(curses, "A_ITALIC"):
            attr |= curses.A_ITALIC
        if not self.enabled:
            return attr
        key = (style.fg, style.bg)
        if key not in self.pairs:
            if self.next_pair >= curses.COLOR_PAIRS:
                return attr
            try:
                curses.init_pair(self.next_pair, self.color(style.fg), self.color(style.bg))
            except curses.error as e:
                logging.error(f"init_pair failed for {key}: {e}")
                return attr
            self.pairs[key] = self.next_pair
            self.next_pair += 1
        return attr | curses.color_pair(self.pairs[key])


# ---------------------------------------------------------------------
# TERMINAL DRIVER
# ---------------------------------------------------------------------
class NoteTypeApp:
    def __init__(self, stdscr, machine: SessionMachine):
        self.stdscr = stdscr
        self.machine = machine
        self.set_cursor(False)
        # raw mode: Ctrl+S and Ctrl+C arrive as keys, not flow control/signals
        curses.raw()
        self.stdscr.keypad(True)
        self.stdscr.timeout(IDLE_REDRAW_MS)
        if curses.has_colors():
            curses.start_color()
            try:
                curses.use_default_colors()
            except curses.error:
                pass
        self.palette = CursesPalette()
        self.session = machine.new_session()
        height, width = self.stdscr.getmaxyx()
        self.machine.handle(self.session, ResizeEvent(width, height))

    def set_cursor(self, visible: bool):
        try:
            curses.curs_set(1 if visible else 0)
        except curses.error:
            pass

    def read_event(self):
        try:
            key = self.stdscr.get_wch()
        except curses.error:
            # timeout: nothing pressed, just redraw
            return None
        except KeyboardInterrupt:
            key = CTRL_C
        if key == curses.KEY_RESIZE:
            height, width = self.stdscr.getmaxyx()
            return ResizeEvent(width, height)
        return translate_key(key, self.session.mode is Mode.EDITOR)

    def run_commands(self, commands) -> bool:
        for command in commands:
            if command is Command.QUIT:
                return False
            if command is Command.SHOW_CURSOR:
                self.set_cursor(True)
            elif command is Command.HIDE_CURSOR:
                self.set_cursor(False)
            elif command is Command.APPLY_THEME:
                self.palette.reset()
                self.stdscr.clear()
        return True

    def draw(self):
        frame = render(self.session, self.session.theme)
        height, width = self.stdscr.getmaxyx()
        self.stdscr.erase()
        for y, row in enumerate(frame.rows[:height]):
            x = 0
            for span in row:
                if x >= width:
                    break
                try:
                    self.stdscr.addnstr(y, x, span.text, width - x, self.palette.attr(span.style))
                except curses.error:
                    # curses refuses the bottom-right cell; the rest is already drawn
                    pass
                x += cell_width(span.text)
        if frame.cursor is not None:
            try:
                self.stdscr.move(*frame.cursor)
            except curses.error:
                pass
        self.stdscr.refresh()

    def run(self):
        logging.info("Session started")
        while True:
            self.draw()
            event = self.read_event()
            if event is None:
                continue
            if not self.run_commands(self.machine.handle(self.session, event)):
                break
        logging.info("Session ended")


@dataclass
class Services:
    store: ContentStore
    indexer: TagIndexer
    templates: TemplateEngine
    theme_store: ThemeStore


def build_services(config: dict) -> Services:
    store = ContentStore(resolve_path(config, "notes_dir"), resolve_path(config, "journal_dir"))
    return Services(
        store=store,
        indexer=TagIndexer(store),
        templates=TemplateEngine(resolve_path(config, "templates_dir")),
        theme_store=ThemeStore(resolve_path(config, "theme_file")),
    )


def build_machine(config: dict) -> SessionMachine:
    services = build_services(config)
    return SessionMachine(services.store, services.indexer, services.templates,
                          services.theme_store)


def main(stdscr, machine: SessionMachine):
    NoteTypeApp(stdscr, machine).run()


def launch(config: dict = None):
    """Run the interactive session until the user quits."""
    config = config or load_config()
    setup_logging(config)
    machine = build_machine(config)
    locale.setlocale(locale.LC_ALL, "")
    os.environ.setdefault("ESCDELAY", "25")
    try:
        curses.wrapper(main, machine)
    except curses.error as e:
        logging.critical(f"Could not run the terminal interface: {e}")
        print(f"Error: could not run the terminal interface: {e}", file=sys.stderr)
        sys.exit(1)
