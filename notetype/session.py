import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .editor import EditorBuffer
from .errors import EmptyInputError, NoteTypeError, NotFoundError
from .events import Action, Command, KeyEvent, ResizeEvent, TextEvent
from .items import ListItem, MenuItem, NoteItem, TagItem, TemplateItem, ThemeItem
from .store import Collection, ContentStore, new_note_id, today_id
from .tags import TagIndexer, sorted_counts
from .templates import TemplateEngine, default_variables
from .themes import DEFAULT_THEME, THEMES, Theme, ThemeStore


class Mode(Enum):
    MENU = "menu"
    LIST = "list"
    EDITOR = "editor"
    VIEWER = "viewer"
    TAGS = "tags"
    TEMPLATES = "templates"
    THEMES = "themes"
    SEARCH = "search"


LIST_MODES = (Mode.MENU, Mode.LIST, Mode.TAGS, Mode.TEMPLATES, Mode.THEMES)

WELCOME = "Welcome to NoteType! Press ? for help"
MENU_TITLE = "NoteType - Main Menu"

MENU_ITEMS = (
    MenuItem("Today's Journal", "Write or view today's journal entry"),
    MenuItem("All Journals", "Browse all your journal entries"),
    MenuItem("Notes", "Manage your notes"),
    MenuItem("New Note", "Create a new note"),
    MenuItem("Templates", "Create from template"),
    MenuItem("Tags", "Browse notes by tags"),
    MenuItem("Search", "Search across all entries"),
    MenuItem("Themes", "Change TUI appearance"),
    MenuItem("Export", "Export to PDF/HTML"),
    MenuItem("Settings", "Configure NoteType"),
)


@dataclass
class Layout:
    list_width: int = 0
    list_height: int = 0
    editor_width: int = 0
    editor_height: int = 0
    viewer_width: int = 0
    viewer_height: int = 0

    @classmethod
    def for_viewport(cls, width: int, height: int) -> "Layout":
        return cls(
            list_width=max(1, width - 4),
            list_height=max(1, height - 8),
            editor_width=max(1, width - 6),
            editor_height=max(1, height - 12),
            viewer_width=max(1, width - 6),
            viewer_height=max(1, height - 12),
        )


@dataclass
class Session:
    mode: Mode = Mode.MENU
    width: int = 0
    height: int = 0
    is_journal: bool = False
    current_id: str = None
    editor: EditorBuffer = field(default_factory=EditorBuffer)
    viewer_text: str = ""
    viewer_scroll: int = 0
    status: str = WELCOME
    help_visible: bool = False
    items: list = field(default_factory=lambda: list(MENU_ITEMS))
    cursor: int = 0
    list_title: str = MENU_TITLE
    tag_filter: str = None
    menu_cursor: int = 0
    theme: Theme = THEMES[DEFAULT_THEME]
    layout: Layout = field(default_factory=Layout)

    @property
    def collection(self) -> Collection:
        return Collection.JOURNAL if self.is_journal else Collection.NOTES

    def selected_item(self) -> ListItem:
        if not self.items:
            return None
        return self.items[self.cursor]

    def clamp_cursor(self):
        if not self.items:
            self.cursor = 0
        else:
            self.cursor = max(0, min(self.cursor, len(self.items) - 1))

    def show_list(self, mode: Mode, items: list, title: str, keep_cursor: bool = False):
        self.mode = mode
        self.items = list(items)
        self.list_title = title
        if not keep_cursor:
            self.cursor = 0
        self.clamp_cursor()
        self.current_id = None

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height
        self.layout = Layout.for_viewport(width, height)
        self.editor.ensure_cursor_visible(self.layout.editor_height, self.layout.editor_width)
        self.viewer_scroll = min(self.viewer_scroll, self.max_viewer_scroll())

    def max_viewer_scroll(self) -> int:
        return max(0, len(self.viewer_text.split("\n")) - self.layout.viewer_height)

    def page_size(self) -> int:
        # menu and list entries take two rows each
        return max(1, (self.layout.list_height - 2) // 2)


# ---------------------------------------------------------------------
# VIEW-STATE MACHINE
# ---------------------------------------------------------------------
class SessionMachine:
    """Applies input events to a Session.

    ``handle`` is the only entry point: it mutates the session, performs
    any store/template/theme calls the transition needs, and returns the
    follow-up commands for the terminal driver. Collaborator errors are
    turned into status messages and never escape.
    """

    def __init__(self, store: ContentStore, indexer: TagIndexer, templates: TemplateEngine,
                 theme_store: ThemeStore, clock=datetime.now):
        self.store = store
        self.indexer = indexer
        self.templates = templates
        self.theme_store = theme_store
        self.clock = clock
        self.menu_actions = {
            "Today's Journal": self.open_today_journal,
            "All Journals": lambda s: self.load_collection(s, Collection.JOURNAL),
            "Notes": lambda s: self.load_collection(s, Collection.NOTES),
            "New Note": self.create_new_note,
            "Templates": self.load_templates,
            "Tags": self.load_tags,
            "Search": self.open_search,
            "Themes": self.load_themes,
            "Export": lambda s: self._notice(s, "Export is not available yet"),
            "Settings": lambda s: self._notice(s, "Settings not yet implemented"),
        }
        self.mode_handlers = {
            Mode.MENU: self._handle_menu,
            Mode.LIST: self._handle_list,
            Mode.EDITOR: self._handle_editor,
            Mode.VIEWER: self._handle_viewer,
            Mode.TAGS: self._handle_tags,
            Mode.TEMPLATES: self._handle_templates,
            Mode.THEMES: self._handle_themes,
            Mode.SEARCH: lambda s, a: [],
        }

    def new_session(self) -> Session:
        return Session(theme=self.theme_store.load())

    def handle(self, session: Session, event) -> list:
        if isinstance(event, ResizeEvent):
            session.resize(event.width, event.height)
            return []
        try:
            if isinstance(event, TextEvent):
                return self._handle_text(session, event.text)
            if isinstance(event, KeyEvent):
                return self._handle_key(session, event.action)
        except NoteTypeError as e:
            logging.error(f"Unhandled error in {session.mode.value} mode: {e}")
            session.status = f"Error: {e}"
        return []

    def _handle_key(self, session: Session, action: Action) -> list:
        if action is Action.QUIT:
            return [Command.QUIT]
        if action is Action.HELP:
            session.help_visible = not session.help_visible
            return []
        if action is Action.BACK:
            if session.mode is Mode.MENU:
                return []
            leaving_editor = session.mode is Mode.EDITOR
            self.show_menu(session)
            session.status = "Returned to main menu"
            return [Command.HIDE_CURSOR] if leaving_editor else []
        return self.mode_handlers[session.mode](session, action)

    def _handle_text(self, session: Session, text: str) -> list:
        if session.mode is Mode.EDITOR:
            session.editor.insert(text)
            self._follow_cursor(session)
        return []

    def _fail(self, session: Session, prefix: str, error: Exception):
        logging.error(f"{prefix}: {error}")
        session.status = f"{prefix}: {error}"
        return []

    def _notice(self, session: Session, message: str):
        session.status = message
        return []

    def _follow_cursor(self, session: Session):
        session.editor.ensure_cursor_visible(session.layout.editor_height,
                                             session.layout.editor_width)

    def _move_cursor(self, session: Session, action: Action) -> bool:
        if not session.items:
            return action in (Action.UP, Action.DOWN, Action.PAGE_UP, Action.PAGE_DOWN,
                              Action.HOME, Action.END)
        last = len(session.items) - 1
        if action is Action.UP:
            session.cursor = max(0, session.cursor - 1)
        elif action is Action.DOWN:
            session.cursor = min(last, session.cursor + 1)
        elif action is Action.PAGE_UP:
            session.cursor = max(0, session.cursor - session.page_size())
        elif action is Action.PAGE_DOWN:
            session.cursor = min(last, session.cursor + session.page_size())
        elif action is Action.HOME:
            session.cursor = 0
        elif action is Action.END:
            session.cursor = last
        else:
            return False
        return True

    # -----------------------------------------------------------------
    # MENU
    # -----------------------------------------------------------------
    def show_menu(self, session: Session):
        session.show_list(Mode.MENU, MENU_ITEMS, MENU_TITLE)
        session.cursor = session.menu_cursor
        session.clamp_cursor()
        session.tag_filter = None

    def _handle_menu(self, session: Session, action: Action) -> list:
        if self._move_cursor(session, action):
            return []
        if action is Action.SELECT:
            item = session.selected_item()
            if isinstance(item, MenuItem):
                session.menu_cursor = session.cursor
                return self.select_menu(session, item.label)
        return []

    def _fall_back_to_menu(self, session: Session):
        """Leave a list that could not be (re)loaded, keeping the error status."""
        if session.mode is not Mode.MENU:
            status = session.status
            self.show_menu(session)
            session.status = status

    def select_menu(self, session: Session, label: str) -> list:
        action = self.menu_actions.get(label)
        if action is None:
            return []
        return action(session) or []

    def open_search(self, session: Session):
        session.mode = Mode.SEARCH
        session.current_id = None
        session.status = "Search feature"
        return []

    # -----------------------------------------------------------------
    # EDITOR ENTRY POINTS
    # -----------------------------------------------------------------
    def _open_editor(self, session: Session, is_journal: bool, item_id, content: str,
                     status: str, cursor_at_end: bool = True) -> list:
        session.mode = Mode.EDITOR
        session.is_journal = is_journal
        session.current_id = item_id
        session.editor.set_value(content, cursor_at_end=cursor_at_end)
        self._follow_cursor(session)
        session.status = status
        return [Command.SHOW_CURSOR]

    def open_today_journal(self, session: Session) -> list:
        entry_id = today_id(self.clock())
        try:
            content = self.store.read(Collection.JOURNAL, entry_id)
        except NotFoundError:
            content = ""
        except NoteTypeError as e:
            return self._fail(session, "Error opening today's journal", e)
        return self._open_editor(session, True, entry_id, content, "Writing today's journal")

    def create_new_note(self, session: Session) -> list:
        return self._open_editor(session, False, None, "", "Creating new note")

    def create_new_entry(self, session: Session) -> list:
        if session.is_journal:
            return self.open_today_journal(session)
        return self.create_new_note(session)

    # -----------------------------------------------------------------
    # LISTS
    # -----------------------------------------------------------------
    def load_collection(self, session: Session, collection: Collection,
                        keep_cursor: bool = False) -> list:
        is_journal = collection is Collection.JOURNAL
        noun = "journal entries" if is_journal else "notes"
        try:
            entries = self.store.list(collection)
        except NoteTypeError as e:
            self._fail(session, f"Error loading {noun}", e)
            self._fall_back_to_menu(session)
            return []
        title = "Journal Entries" if is_journal else "Notes"
        session.show_list(Mode.LIST, [NoteItem(e) for e in entries], title, keep_cursor)
        session.is_journal = is_journal
        session.tag_filter = None
        session.status = f"Found {len(entries)} {noun}"
        return []

    def _tag_entries(self, tag: str) -> list:
        entries = []
        for tagged in self.indexer.find_by_tag(tag):
            try:
                entries.append(self.store.entry(tagged.collection, tagged.id))
            except NoteTypeError as e:
                logging.error(f"Skipping {tagged.id} in #{tag} list: {e}")
        return entries

    def show_entries_with_tag(self, session: Session, tag: str, keep_cursor: bool = False,
                              allow_empty: bool = False) -> list:
        try:
            entries = self._tag_entries(tag)
        except NoteTypeError as e:
            self._fail(session, "Error finding files", e)
            self._fall_back_to_menu(session)
            return []
        if not entries and not allow_empty:
            session.status = f"No entries found with #{tag}"
            return []
        session.show_list(Mode.LIST, [NoteItem(e) for e in entries],
                          f"Entries tagged with #{tag}", keep_cursor)
        session.is_journal = False
        session.tag_filter = tag
        session.status = f"Found {len(entries)} entries with #{tag}"
        return []

    def open_item(self, session: Session, collection: Collection, item_id: str) -> list:
        is_journal = collection is Collection.JOURNAL
        try:
            content = self.store.read(collection, item_id)
        except NoteTypeError as e:
            kind = "journal" if is_journal else "note"
            return self._fail(session, f"Error opening {kind}", e)
        session.mode = Mode.VIEWER
        session.is_journal = is_journal
        session.current_id = item_id
        session.viewer_text = content
        session.viewer_scroll = 0
        if is_journal:
            session.status = "Viewing journal entry - Press 'e' to edit"
        else:
            session.status = "Viewing note - Press 'e' to edit"
        return []

    def delete_selected(self, session: Session) -> list:
        item = session.selected_item()
        if not isinstance(item, NoteItem):
            session.status = "Nothing to delete"
            return []
        try:
            self.store.delete(item.collection, item.id)
        except NoteTypeError as e:
            return self._fail(session, "Error deleting", e)
        if session.tag_filter:
            self.show_entries_with_tag(session, session.tag_filter, keep_cursor=True,
                                       allow_empty=True)
        else:
            self.load_collection(session, item.collection, keep_cursor=True)
        if session.mode is Mode.LIST:
            session.status = f"Deleted '{item.id}'"
        return []

    def _handle_list(self, session: Session, action: Action) -> list:
        if self._move_cursor(session, action):
            return []
        if action is Action.SELECT:
            item = session.selected_item()
            if isinstance(item, NoteItem):
                return self.open_item(session, item.collection, item.id)
        elif action is Action.NEW_ENTRY:
            return self.create_new_entry(session)
        elif action is Action.DELETE:
            return self.delete_selected(session)
        return []

    # -----------------------------------------------------------------
    # EDITOR
    # -----------------------------------------------------------------
    def _allocate_id(self, session: Session) -> str:
        now = self.clock()
        if session.is_journal:
            return today_id(now)
        base = new_note_id(now)
        item_id, n = base, 1
        while self.store.exists(Collection.NOTES, item_id):
            item_id = f"{base}-{n}"
            n += 1
        return item_id

    def save_current(self, session: Session) -> list:
        content = session.editor.value
        kind = "journal" if session.is_journal else "note"
        item_id = session.current_id
        try:
            if item_id is None:
                if not content.strip():
                    raise EmptyInputError("nothing to save yet")
                item_id = self._allocate_id(session)
            self.store.write(session.collection, item_id, content)
        except NoteTypeError as e:
            return self._fail(session, f"Error saving {kind}", e)
        session.current_id = item_id
        session.editor.dirty = False
        if session.is_journal:
            session.status = "Journal saved successfully! Press Esc to go back"
        else:
            session.status = f"Note '{item_id}' saved successfully! Press Esc to go back"
        return []

    def _handle_editor(self, session: Session, action: Action) -> list:
        editor = session.editor
        if action is Action.SAVE:
            return self.save_current(session)
        if action is Action.UP:
            editor.move_vertical(-1)
        elif action is Action.DOWN:
            editor.move_vertical(1)
        elif action is Action.PAGE_UP:
            editor.move_vertical(-session.layout.editor_height)
        elif action is Action.PAGE_DOWN:
            editor.move_vertical(session.layout.editor_height)
        elif action is Action.LEFT:
            editor.move_left()
        elif action is Action.RIGHT:
            editor.move_right()
        elif action is Action.HOME:
            editor.home()
        elif action is Action.END:
            editor.end()
        elif action is Action.NEWLINE:
            editor.newline()
        elif action is Action.BACKSPACE:
            editor.backspace()
        elif action is Action.DELETE_CHAR:
            editor.delete_forward()
        else:
            return []
        self._follow_cursor(session)
        return []

    # -----------------------------------------------------------------
    # VIEWER
    # -----------------------------------------------------------------
    def edit_current(self, session: Session) -> list:
        try:
            content = self.store.read(session.collection, session.current_id)
        except NoteTypeError as e:
            return self._fail(session, "Error loading file for editing", e)
        return self._open_editor(session, session.is_journal, session.current_id, content,
                                 "Editing - Press Ctrl+S to save, Esc to cancel",
                                 cursor_at_end=False)

    def _handle_viewer(self, session: Session, action: Action) -> list:
        if action is Action.EDIT:
            return self.edit_current(session)
        page = session.layout.viewer_height
        scroll = session.viewer_scroll
        if action is Action.UP:
            scroll -= 1
        elif action is Action.DOWN:
            scroll += 1
        elif action is Action.PAGE_UP:
            scroll -= page
        elif action is Action.PAGE_DOWN:
            scroll += page
        elif action is Action.HOME:
            scroll = 0
        elif action is Action.END:
            scroll = session.max_viewer_scroll()
        session.viewer_scroll = max(0, min(scroll, session.max_viewer_scroll()))
        return []

    # -----------------------------------------------------------------
    # TAGS / TEMPLATES / THEMES
    # -----------------------------------------------------------------
    def load_tags(self, session: Session) -> list:
        try:
            counts = self.indexer.index_all()
        except NoteTypeError as e:
            return self._fail(session, "Error loading tags", e)
        if not counts:
            session.status = "No tags found. Add #tags to your notes!"
            return []
        items = [TagItem(tag, count) for tag, count in sorted_counts(counts)]
        session.show_list(Mode.TAGS, items, "All Tags - Press Enter to filter")
        session.status = f"Found {len(items)} tags"
        return []

    def _handle_tags(self, session: Session, action: Action) -> list:
        if self._move_cursor(session, action):
            return []
        item = session.selected_item()
        if action is Action.SELECT and isinstance(item, TagItem):
            return self.show_entries_with_tag(session, item.tag)
        return []

    def load_templates(self, session: Session) -> list:
        items = [TemplateItem(t.name, t.description) for t in self.templates.list_templates()]
        session.show_list(Mode.TEMPLATES, items, "Templates - Press Enter to use")
        session.status = f"{len(items)} templates available"
        return []

    def create_from_template(self, session: Session, name: str) -> list:
        try:
            content = self.templates.render(name, default_variables(now=self.clock()))
        except NoteTypeError as e:
            return self._fail(session, "Error using template", e)
        return self._open_editor(session, False, None, content,
                                 f"Using {name} template - Edit and save with Ctrl+S",
                                 cursor_at_end=False)

    def _handle_templates(self, session: Session, action: Action) -> list:
        if self._move_cursor(session, action):
            return []
        item = session.selected_item()
        if action is Action.SELECT and isinstance(item, TemplateItem):
            return self.create_from_template(session, item.name)
        return []

    def load_themes(self, session: Session) -> list:
        current = session.theme.key
        items = [ThemeItem(key, theme.name, key == current) for key, theme in THEMES.items()]
        session.show_list(Mode.THEMES, items, "Themes - Press Enter to apply")
        session.cursor = next((i for i, item in enumerate(items) if item.current), 0)
        session.status = "Select a theme and press Enter"
        return []

    def apply_theme(self, session: Session, key: str) -> list:
        try:
            theme = self.theme_store.save(key)
        except NoteTypeError as e:
            return self._fail(session, "Error saving theme", e)
        session.theme = theme
        self.show_menu(session)
        session.status = f"Applied theme: {theme.name}"
        return [Command.APPLY_THEME]

    def _handle_themes(self, session: Session, action: Action) -> list:
        if self._move_cursor(session, action):
            return []
        item = session.selected_item()
        if action is Action.SELECT and isinstance(item, ThemeItem):
            return self.apply_theme(session, item.key)
        return []
