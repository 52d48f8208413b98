import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from .errors import StorageError, UnknownThemeError

DEFAULT_THEME = "violet"
WHITE = "#FFFFFF"


@dataclass(frozen=True)
class Theme:
    key: str
    name: str
    primary: str
    secondary: str
    accent: str
    success: str
    warning: str
    error: str
    text: str
    muted: str
    background: str
    background_alt: str


@dataclass(frozen=True)
class Style:
    fg: str = None
    bg: str = None
    bold: bool = False
    italic: bool = False


# ---------------------------------------------------------------------
# THEME CATALOG
# ---------------------------------------------------------------------
THEMES = MappingProxyType({
    "violet": Theme("violet", "Violet (Default)", "#7C3AED", "#8B5CF6", "#A78BFA", "#10B981",
                    "#F59E0B", "#EF4444", "#E5E7EB", "#9CA3AF", "#1F2937", "#374151"),
    "dracula": Theme("dracula", "Dracula", "#BD93F9", "#FF79C6", "#8BE9FD", "#50FA7B",
                     "#F1FA8C", "#FF5555", "#F8F8F2", "#6272A4", "#282A36", "#44475A"),
    "nord": Theme("nord", "Nord", "#5E81AC", "#81A1C1", "#88C0D0", "#A3BE8C",
                  "#EBCB8B", "#BF616A", "#ECEFF4", "#4C566A", "#2E3440", "#3B4252"),
    "gruvbox": Theme("gruvbox", "Gruvbox Dark", "#B16286", "#D3869B", "#8EC07C", "#B8BB26",
                     "#FABD2F", "#FB4934", "#EBDBB2", "#928374", "#282828", "#3C3836"),
    "solarized": Theme("solarized", "Solarized Dark", "#268BD2", "#2AA198", "#6C71C4", "#859900",
                       "#B58900", "#DC322F", "#93A1A1", "#586E75", "#002B36", "#073642"),
    "monokai": Theme("monokai", "Monokai", "#F92672", "#AE81FF", "#66D9EF", "#A6E22E",
                     "#E6DB74", "#F92672", "#F8F8F2", "#75715E", "#272822", "#3E3D32"),
    "tokyo": Theme("tokyo", "Tokyo Night", "#7AA2F7", "#BB9AF7", "#7DCFFF", "#9ECE6A",
                   "#E0AF68", "#F7768E", "#C0CAF5", "#565F89", "#1A1B26", "#24283B"),
    "catppuccin": Theme("catppuccin", "Catppuccin", "#CBA6F7", "#F5C2E7", "#89DCEB", "#A6E3A1",
                        "#F9E2AF", "#F38BA8", "#CDD6F4", "#6C7086", "#1E1E2E", "#313244"),
})

COLOR_SLOTS = ("primary", "secondary", "accent", "success", "warning",
               "error", "text", "muted", "background", "background_alt")


def get_theme(key: str) -> Theme:
    if key not in THEMES:
        raise UnknownThemeError(f"theme '{key}' not found")
    return THEMES[key]


def build_styles(theme: Theme) -> dict:
    """Map a theme's colour slots onto the roles the renderer draws with."""
    bg = theme.background
    return {
        "base": Style(theme.text, bg),
        "text": Style(theme.text, bg),
        "muted": Style(theme.muted, bg),
        "title": Style(WHITE, theme.primary, bold=True),
        "list_title": Style(WHITE, theme.primary, bold=True),
        "header": Style(theme.accent, bg, bold=True),
        "selected": Style(theme.primary, bg, bold=True),
        "selected_desc": Style(theme.secondary, bg),
        "normal": Style(theme.text, bg),
        "description": Style(theme.muted, bg),
        "border": Style(theme.primary, bg),
        "editor_border": Style(theme.secondary, bg),
        "help_border": Style(theme.accent, bg),
        "cursor_line": Style(theme.text, theme.background_alt),
        "status_bar": Style(theme.text, theme.background_alt),
        "status_mode": Style(theme.accent, theme.background_alt, bold=True),
        "status_text": Style(theme.muted, theme.background_alt, italic=True),
        "button_active": Style(WHITE, theme.primary, bold=True),
        "button_inactive": Style(theme.muted, theme.background_alt),
        "success": Style(theme.success, bg, bold=True),
        "warning": Style(theme.warning, bg, bold=True),
        "error": Style(theme.error, bg, bold=True),
    }


# ---------------------------------------------------------------------
# THEME PERSISTENCE (one JSON string naming the theme)
# ---------------------------------------------------------------------
class ThemeStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def current_key(self) -> str:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                name = json.load(f)
        except FileNotFoundError:
            return DEFAULT_THEME
        except (OSError, ValueError) as e:
            logging.error(f"Error reading theme file {self.path}: {e}")
            return DEFAULT_THEME
        if not isinstance(name, str) or name not in THEMES:
            logging.warning(f"Unknown theme {name!r} in {self.path}, using {DEFAULT_THEME}")
            return DEFAULT_THEME
        return name

    def load(self) -> Theme:
        return THEMES[self.current_key()]

    def save(self, key: str) -> Theme:
        theme = get_theme(key)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(key, f)
        except OSError as e:
            raise StorageError(f"could not save theme to {self.path}: {e}") from e
        logging.info(f"Theme set to {key}")
        return theme
