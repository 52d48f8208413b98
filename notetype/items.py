"""
Entries shown in the session's single list panel.

Every item answers ``title()``, ``description()`` and ``filter_value()``;
the session mode decides what selecting one means.
"""
from dataclasses import dataclass
from typing import Union

from .store import Collection, ListEntry, format_size


@dataclass(frozen=True)
class MenuItem:
    label: str
    desc: str

    def title(self) -> str:
        return self.label

    def description(self) -> str:
        return self.desc

    def filter_value(self) -> str:
        return self.label


@dataclass(frozen=True)
class NoteItem:
    entry: ListEntry

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def collection(self) -> Collection:
        return self.entry.collection

    def title(self) -> str:
        return self.entry.display_title

    def description(self) -> str:
        mtime = self.entry.last_modified
        return f"{mtime:%b} {mtime.day}, {mtime:%Y %H:%M} • {format_size(self.entry.size_bytes)}"

    def filter_value(self) -> str:
        return self.entry.display_title


@dataclass(frozen=True)
class TagItem:
    tag: str
    count: int

    def title(self) -> str:
        return f"#{self.tag}"

    def description(self) -> str:
        noun = "entry" if self.count == 1 else "entries"
        return f"{self.count} {noun}"

    def filter_value(self) -> str:
        return self.tag


@dataclass(frozen=True)
class TemplateItem:
    name: str
    desc: str

    def title(self) -> str:
        return self.name

    def description(self) -> str:
        return self.desc

    def filter_value(self) -> str:
        return self.name


@dataclass(frozen=True)
class ThemeItem:
    key: str
    display: str
    current: bool = False

    def title(self) -> str:
        mark = "✓ " if self.current else "  "
        return f"{mark}{self.display}"

    def description(self) -> str:
        return "Current theme" if self.current else "Press Enter to apply"

    def filter_value(self) -> str:
        return self.key


ListItem = Union[MenuItem, NoteItem, TagItem, TemplateItem, ThemeItem]
