#!/usr/bin/env python3
"""
NoteType command line.

Usage:
    notetype                              # launch the interactive interface
    notetype journal "Today was amazing!" # add to today's journal
    notetype journal                      # multi-line entry from stdin
    notetype journal view | list [--limit N]
    notetype new <filename> <title>
    notetype update <filename> [content] [-t] [-I]
    notetype delete <filename>
    notetype tags [list] | tags show <tag>
    notetype template list | show <name> | <name> <filename> <title>
    notetype theme [list | set <name> | preview <name>]
"""
import argparse
import logging
import sys
from datetime import datetime

from . import __version__
from .app import build_services, launch
from .config import load_config, setup_logging
from .errors import NoteTypeError
from .store import NOTE_SUFFIX, Collection, today_id
from .tags import normalize_tag, sorted_counts
from .templates import BUILTIN_TEMPLATES
from .themes import COLOR_SLOTS, THEMES, get_theme

RULE = "=" * 70


def strip_suffix(name: str) -> str:
    return name[:-len(NOTE_SUFFIX)] if name.endswith(NOTE_SUFFIX) else name


def read_multiline(stream=None) -> str:
    """Read lines until end of input or a line containing only EOF."""
    stream = stream or sys.stdin
    lines = []
    for line in stream:
        if line.strip() in ("EOF", "eof"):
            break
        lines.append(line)
    return "".join(lines)


def prompt_multiline(message: str, stream=None) -> str:
    if sys.stdin.isatty():
        print(message)
        print("Write your text (press Ctrl+D or type 'EOF' on a new line to finish):")
        print("-" * 70)
    return read_multiline(stream)


# ---------------------------------------------------------------------
# JOURNAL
# ---------------------------------------------------------------------
def journal_add(services, text: str):
    if not text:
        text = prompt_multiline("Daily Journal Entry")
    entry_id, created = services.store.add_journal_entry(text)
    if created:
        print(f"Created today's journal entry ({entry_id})")
    else:
        print(f"Added entry to today's journal ({entry_id})")
    print(f"Location: {services.store.path_for(Collection.JOURNAL, entry_id)}")


def journal_view(services):
    entry_id = today_id()
    content = services.store.read(Collection.JOURNAL, entry_id)
    print(RULE)
    print(f"  Today's Journal Entry ({entry_id})")
    print(RULE)
    print()
    print(content)
    print()
    print(RULE)


def journal_list(services, limit: int = 0):
    entries = services.store.list(Collection.JOURNAL)
    if not entries:
        print("No journal entries yet. Create your first entry with 'notetype journal'")
        return
    shown = entries[:limit] if limit > 0 else entries
    print(f"Journal Entries (showing {len(shown)} of {len(entries)}):")
    print()
    for entry in shown:
        try:
            day = datetime.strptime(entry.id, "%Y-%m-%d").strftime("%a, %b %d, %Y")
        except ValueError:
            day = entry.id
        print(f"  {day} (last updated: {entry.last_modified:%H:%M})")
    print()
    print(f"Journal location: {services.store.journal_dir}")


def cmd_journal(args, services):
    words = args.words
    if words and words[0] == "view" and len(words) == 1:
        journal_view(services)
    elif words and words[0] == "list" and len(words) == 1:
        journal_list(services, args.limit)
    else:
        if words and words[0] == "add":
            words = words[1:]
        journal_add(services, " ".join(words))


# ---------------------------------------------------------------------
# NOTES
# ---------------------------------------------------------------------
def cmd_new(args, services):
    store = services.store
    note_id = strip_suffix(args.filename)
    if store.exists(Collection.NOTES, note_id):
        raise NoteTypeError(f"'{note_id}{NOTE_SUFFIX}' already exists")
    date = datetime.now().strftime("%Y-%m-%d")
    content = f"# {args.title}\n<span style=\"opacity:0.5\">{date}</span>\n---"
    path = store.write(Collection.NOTES, note_id, content)
    print(f"Created {path}")


def cmd_update(args, services):
    content = args.content or ""
    if args.interactive or not content:
        content = prompt_multiline("Enter your update")
    stamp = datetime.now() if args.timestamp else None
    path = services.store.append(Collection.NOTES, strip_suffix(args.filename), content, stamp)
    print(f"Successfully updated '{path}'")


def cmd_delete(args, services):
    note_id = strip_suffix(args.filename)
    services.store.delete(Collection.NOTES, note_id)
    print(f"{note_id} has been removed")


# ---------------------------------------------------------------------
# TAGS
# ---------------------------------------------------------------------
def cmd_tags(args, services):
    if args.action == "show":
        if not args.tag:
            raise NoteTypeError("usage: notetype tags show <tag>")
        tag = normalize_tag(args.tag)
        files = services.indexer.find_by_tag(tag)
        if not files:
            print(f"No entries found with tag #{tag}")
            return
        print(f"Found {len(files)} entry/entries with #{tag}:")
        print()
        for tagged in files:
            print(f"  • {tagged.id}")
        return
    counts = services.indexer.index_all()
    if not counts:
        print("No tags found. Add tags to your notes using #hashtag syntax")
        return
    print(f"All Tags ({len(counts)} total):")
    print()
    for tag, count in sorted_counts(counts):
        print(f"  #{tag:<20} ({count})")
    print()
    print("Use 'notetype tags show <tag>' to see entries with a specific tag")


# ---------------------------------------------------------------------
# TEMPLATES
# ---------------------------------------------------------------------
def template_list(services):
    print("Built-in Templates:")
    print()
    custom = []
    for template in services.templates.list_templates():
        if template.builtin:
            print(f"  {template.name:<15} - {template.description}")
        else:
            custom.append(template.name)
    if custom:
        print()
        print("Custom Templates:")
        print()
        for name in custom:
            print(f"  {name}")
    print()
    print("Usage: notetype template <template-name> <filename> <title>")


def template_show(services, name: str):
    template = services.templates.get(name)
    print(f"Template: {template.name}")
    print(RULE)
    print(template.body)
    print(RULE)


def cmd_template(args, services):
    words = args.words
    if words[0] == "list" and len(words) == 1:
        template_list(services)
    elif words[0] == "show" and len(words) == 2:
        template_show(services, words[1])
    elif len(words) == 1:
        template_show(services, words[0])
    elif len(words) == 3:
        name, filename, title = words
        note_id = strip_suffix(filename)
        services.templates.apply(name, services.store, note_id, title)
        print(f"Created '{note_id}{NOTE_SUFFIX}' from template '{name}'")
    else:
        raise NoteTypeError("usage: notetype template <template-name> <filename> <title>")


# ---------------------------------------------------------------------
# THEMES
# ---------------------------------------------------------------------
def theme_list(services):
    current = services.theme_store.current_key()
    print("Available Themes:")
    print()
    for key, theme in THEMES.items():
        mark = "✓ " if key == current else "  "
        print(f"{mark}{key:<15} - {theme.name}")
        print(f"   Primary: {theme.primary}, Accent: {theme.accent}")
        print()
    print("Use 'notetype theme set <name>' to change theme")


def theme_preview(name: str):
    theme = get_theme(name)
    print(f"Theme Preview: {theme.name}")
    print()
    for slot in COLOR_SLOTS:
        label = slot.replace("_", " ").title() + ":"
        print(f"  {label:<16}{getattr(theme, slot)}")


def cmd_theme(args, services):
    action, name = args.action, args.name
    if action == "list":
        theme_list(services)
    elif action in ("set", "preview"):
        if not name:
            raise NoteTypeError(f"usage: notetype theme {action} <theme-name>")
        if action == "set":
            theme = services.theme_store.save(name)
            print(f"Theme set to '{theme.name}'")
        else:
            theme_preview(name)
    else:
        print(f"Current theme: {services.theme_store.load().name}")
        print("Use 'notetype theme list' to see all available themes")


# ---------------------------------------------------------------------
# ARGUMENT PARSING
# ---------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notetype",
        description="Journal and notes manager for the terminal. Run without a command "
                    "to open the interactive interface.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="path to the YAML config file")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("tui", help="launch the interactive interface")

    journal = sub.add_parser("journal", help="add to, view or list daily journal entries")
    journal.add_argument("words", nargs="*",
                         help="entry text, or 'view' / 'list'; reads stdin when empty")
    journal.add_argument("-l", "--limit", type=int, default=0,
                         help="limit entries shown by 'journal list' (0 = all)")
    journal.set_defaults(func=cmd_journal)

    new = sub.add_parser("new", help="create a new note")
    new.add_argument("filename")
    new.add_argument("title")
    new.set_defaults(func=cmd_new)

    update = sub.add_parser("update", help="append content to an existing note")
    update.add_argument("filename")
    update.add_argument("content", nargs="?")
    update.add_argument("-I", "--interactive", action="store_true",
                        help="read multi-line input from stdin")
    update.add_argument("-t", "--timestamp", action="store_true",
                        help="add an 'Updated' timestamp before the content")
    update.set_defaults(func=cmd_update)

    for name in ("delete", "remove"):
        delete = sub.add_parser(name, help="delete a note")
        delete.add_argument("filename")
        delete.set_defaults(func=cmd_delete)

    tags = sub.add_parser("tags", help="list tags or show entries with a tag")
    tags.add_argument("action", nargs="?", choices=("list", "show"), default="list")
    tags.add_argument("tag", nargs="?")
    tags.set_defaults(func=cmd_tags)

    template = sub.add_parser("template", help="create notes from templates",
                              epilog="built-in templates: " + ", ".join(BUILTIN_TEMPLATES))
    template.add_argument("words", nargs="+",
                          help="'list', 'show <name>', or <name> <filename> <title>")
    template.set_defaults(func=cmd_template)

    theme = sub.add_parser("theme", help="show, list, set or preview colour themes")
    theme.add_argument("action", nargs="?", choices=("list", "set", "preview"))
    theme.add_argument("name", nargs="?")
    theme.set_defaults(func=cmd_theme)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)
    if args.command in (None, "tui"):
        launch(config)
        return 0
    setup_logging(config)
    services = build_services(config)
    try:
        args.func(args, services)
    except NoteTypeError as e:
        logging.error(f"notetype {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
