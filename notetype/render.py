"""
Frame rendering for the interactive session.

``render`` is a pure function of the session, the active theme and the
clock: it returns a Frame (rows of styled spans plus an optional cursor
position) and never touches the terminal. The curses driver paints it.
"""
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime

from .events import HELP_TEXT
from .session import LIST_MODES, Mode, Session
from .themes import Style, Theme, build_styles

APP_TITLE = "NoteType - Your Personal Journal & Notes"
MIN_WIDTH = 40
MIN_HEIGHT = 10
TAB_WIDTH = 4
REPLACEMENT = "?"

MODE_LABELS = {
    Mode.MENU: "Menu",
    Mode.LIST: "List",
    Mode.EDITOR: "Editor",
    Mode.VIEWER: "Viewer",
    Mode.SEARCH: "Search",
    Mode.TAGS: "Tags",
    Mode.TEMPLATES: "Templates",
    Mode.THEMES: "Themes",
}

# rounded box drawing
TOP_LEFT, TOP_RIGHT, BOTTOM_LEFT, BOTTOM_RIGHT = "╭", "╮", "╰", "╯"
HORIZONTAL, VERTICAL = "─", "│"


@dataclass(frozen=True)
class Span:
    text: str
    style: Style


@dataclass
class Frame:
    width: int
    height: int
    rows: list = field(default_factory=list)
    cursor: tuple = None

    def lines(self) -> list:
        return ["".join(span.text for span in row) for row in self.rows]

    def text(self) -> str:
        return "\n".join(self.lines())


def display_text(text: str) -> str:
    """Text as it should appear on screen: CRs dropped, tabs expanded, controls replaced."""
    text = text.replace("\r", "").expandtabs(TAB_WIDTH)
    if text.isprintable():
        return text
    return "".join(ch if ch.isprintable() else REPLACEMENT for ch in text)


def char_width(ch: str) -> int:
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def cell_width(text: str) -> int:
    return sum(char_width(ch) for ch in text)


def clip(text: str, width: int) -> str:
    """Longest prefix of ``text`` that fits in ``width`` terminal cells."""
    used = 0
    for i, ch in enumerate(text):
        used += char_width(ch)
        if used > width:
            return text[:i]
    return text


def skip_cells(text: str, cells: int) -> str:
    """Drop the first ``cells`` terminal cells of ``text``."""
    used = 0
    for i, ch in enumerate(text):
        if used >= cells:
            return text[i:]
        used += char_width(ch)
    return ""


def _row(spans: list, width: int, fill: Style) -> list:
    """Clip a row of spans to ``width`` and pad the remainder with ``fill``."""
    out = []
    used = 0
    for span in spans:
        if used >= width:
            break
        text = clip(display_text(span.text), width - used)
        if text:
            out.append(Span(text, span.style))
            used += cell_width(text)
    if used < width:
        out.append(Span(" " * (width - used), fill))
    return out


def _blank(width: int, styles: dict) -> list:
    return [Span(" " * width, styles["base"])]


def _box(lines: list, inner_width: int, indent: int, width: int, styles: dict,
         border: str, line_styles: list = None, title: str = "") -> list:
    """Wrap ``lines`` in a rounded border, one span row per line."""
    base = styles["base"]
    edge = styles[border]
    pad = Span(" " * indent, base)
    top = HORIZONTAL * (inner_width + 2)
    if title:
        top = clip(f"{HORIZONTAL} {title} " + top, inner_width + 2)
    rows = [_row([pad, Span(TOP_LEFT + top + TOP_RIGHT, edge)], width, base)]
    for i, line in enumerate(lines):
        style = line_styles[i] if line_styles else styles["text"]
        body = clip(display_text(line), inner_width)
        body += " " * (inner_width - cell_width(body))
        rows.append(_row([pad, Span(VERTICAL + " ", edge), Span(body, style),
                          Span(" " + VERTICAL, edge)], width, base))
    rows.append(_row([pad, Span(BOTTOM_LEFT + HORIZONTAL * (inner_width + 2) + BOTTOM_RIGHT, edge)],
                     width, base))
    return rows


# ---------------------------------------------------------------------
# CONTENT PANELS
# ---------------------------------------------------------------------
def render_list(session: Session, styles: dict, width: int, height: int) -> list:
    base = styles["base"]
    rows = [_row([Span("  ", base), Span(f" {session.list_title} ", styles["list_title"])],
                 width, base),
            _blank(width, styles)]
    if not session.items:
        rows.append(_row([Span("  No items.", styles["muted"])], width, base))
        return rows
    per_page = max(1, (height - 3) // 2)
    start = (session.cursor // per_page) * per_page
    for index in range(start, min(len(session.items), start + per_page)):
        item = session.items[index]
        if index == session.cursor:
            rows.append(_row([Span("> " + item.title(), styles["selected"])], width, base))
            rows.append(_row([Span("    " + item.description(), styles["selected_desc"])],
                             width, base))
        else:
            rows.append(_row([Span("  " + item.title(), styles["normal"])], width, base))
            rows.append(_row([Span("    " + item.description(), styles["description"])],
                             width, base))
    pages = (len(session.items) + per_page - 1) // per_page
    if pages > 1:
        page = start // per_page + 1
        rows.append(_row([Span(f"  page {page}/{pages} • {len(session.items)} items",
                               styles["muted"])], width, base))
    return rows


def editor_header(session: Session, now: datetime) -> str:
    if session.is_journal:
        return f"Today's Journal - {now:%A}, {now:%B} {now.day}, {now:%Y}"
    if session.current_id:
        return f"Editing: {session.current_id}"
    return "Writing"


def render_editor(session: Session, styles: dict, width: int, height: int, now: datetime):
    base = styles["base"]
    editor = session.editor
    layout = session.layout
    header = editor_header(session, now)
    if editor.dirty:
        header += " [modified]"
    rows = [_row([Span(header, styles["header"])], width, base), _blank(width, styles)]
    inner_width = layout.editor_width
    text_rows = layout.editor_height
    cursor_line = editor.lines[editor.cursor_y]
    # horizontal scroll is kept in characters; the screen needs cells
    shift = cell_width(display_text(cursor_line[:editor.scroll_x]))
    visible = []
    line_styles = []
    for offset in range(text_rows):
        y = editor.scroll_y + offset
        line = editor.lines[y] if y < len(editor.lines) else ""
        visible.append(skip_cells(display_text(line), shift))
        line_styles.append(styles["cursor_line"] if y == editor.cursor_y else styles["text"])
    box_top = len(rows)
    rows.extend(_box(visible, inner_width, 1, width, styles, "editor_border", line_styles))
    rows.append(_blank(width, styles))
    rows.append(_row([Span(" Save (Ctrl+S) ", styles["button_active"]), Span("  ", base),
                      Span(" Cancel (Esc) ", styles["button_inactive"])], width, base))
    column = cell_width(display_text(cursor_line[:editor.cursor_x])) - shift
    cursor = (box_top + 1 + editor.cursor_y - editor.scroll_y,
              1 + 2 + max(0, min(column, inner_width)))
    return rows, cursor


def render_viewer(session: Session, styles: dict, width: int, height: int) -> list:
    base = styles["base"]
    layout = session.layout
    header = f"Viewing: {session.current_id} (Press 'e' to edit)"
    rows = [_row([Span(header, styles["header"])], width, base), _blank(width, styles)]
    lines = session.viewer_text.split("\n")
    visible = lines[session.viewer_scroll:session.viewer_scroll + layout.viewer_height]
    visible += [""] * (layout.viewer_height - len(visible))
    rows.extend(_box(visible, layout.viewer_width, 1, width, styles, "border"))
    last = min(len(lines), session.viewer_scroll + layout.viewer_height)
    rows.append(_row([Span(f"  lines {session.viewer_scroll + 1}-{last} of {len(lines)}",
                           styles["muted"])], width, base))
    return rows


def render_content(session: Session, styles: dict, width: int, height: int, now: datetime):
    if session.mode is Mode.EDITOR:
        return render_editor(session, styles, width, height, now)
    if session.mode is Mode.VIEWER:
        return render_viewer(session, styles, width, height), None
    if session.mode is Mode.SEARCH:
        return [_row([Span("  Search view (coming soon)", styles["muted"])], width,
                      styles["base"])], None
    if session.mode in LIST_MODES:
        return render_list(session, styles, width, height), None
    return [], None


# ---------------------------------------------------------------------
# CHROME: title bar, status bar, help
# ---------------------------------------------------------------------
def render_status_bar(session: Session, styles: dict, width: int, now: datetime) -> list:
    bar = styles["status_bar"]
    right = f"{now:%H:%M} "
    mode = f" {MODE_LABELS[session.mode]} • "
    left_room = max(0, width - len(right) - 1)
    left = [Span(clip(mode, left_room), styles["status_mode"])]
    left.append(Span(clip(session.status, left_room - len(mode)), styles["status_text"]))
    used = sum(len(span.text) for span in left)
    gap = Span(" " * max(0, width - used - len(right)), bar)
    return _row(left + [gap, Span(right, bar)], width, bar)


def render_help(session: Session, styles: dict, width: int, max_rows: int) -> list:
    if not session.help_visible or max_rows < 3:
        return [_row([Span("  Press ? for help", styles["muted"])], width, styles["base"])]
    body = HELP_TEXT[:max_rows - 2]
    inner = max(1, width - 6)
    return _box(body, inner, 1, width, styles, "help_border")


def render(session: Session, theme: Theme, now: datetime = None) -> Frame:
    now = now or datetime.now()
    styles = build_styles(theme)
    width, height = session.width, session.height
    frame = Frame(width, height)
    if width <= 0 or height <= 0:
        frame.rows = [[Span("Initializing...", styles["base"])]]
        return frame
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        warning = "Terminal too small. Resize or press 'q' to quit."
        frame.rows = [_blank(width, styles) for _ in range(height)]
        frame.rows[height // 2] = _row([Span(warning.center(width), styles["warning"])],
                                       width, styles["base"])
        return frame

    top = [_row([Span(f"  {APP_TITLE}  ", styles["title"])], width, styles["title"]),
           _blank(width, styles)]
    # the help panel may take everything but the status bar and three content rows
    help_rows = render_help(session, styles, width, height - len(top) - 1 - 3)
    footer = [render_status_bar(session, styles, width, now)] + help_rows
    content_height = max(0, height - len(top) - len(footer))

    content, cursor = render_content(session, styles, width, content_height, now)
    content = content[:content_height]
    content += [_blank(width, styles) for _ in range(content_height - len(content))]

    frame.rows = top + content + footer
    if cursor is not None:
        y, x = cursor
        if 0 <= y < content_height and 0 <= x < width:
            frame.cursor = (y + len(top), x)
    return frame
