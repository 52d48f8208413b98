import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .config import ensure_dir
from .errors import EmptyInputError, NotFoundError, StorageError

NOTE_SUFFIX = ".md"


class Collection(Enum):
    NOTES = "notes"
    JOURNAL = "journal"


@dataclass(frozen=True)
class ListEntry:
    id: str
    display_title: str
    last_modified: datetime
    size_bytes: int
    collection: Collection = Collection.NOTES


def today_id(now: datetime = None) -> str:
    return (now or datetime.now()).strftime("%Y-%m-%d")


def new_note_id(now: datetime = None) -> str:
    return f"note-{int((now or datetime.now()).timestamp())}"


def format_size(size: int) -> str:
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


def _atomic_write(path: Path, content: str):
    """Replace ``path`` with ``content`` via a temp file in the same directory."""
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            shutil.copymode(str(path), tmp)
        os.replace(tmp, str(path))
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


# ---------------------------------------------------------------------
# CONTENT STORE (notes in one directory, dated journal entries in another)
# ---------------------------------------------------------------------
class ContentStore:
    def __init__(self, notes_dir: Path, journal_dir: Path):
        self.notes_dir = Path(notes_dir)
        self.journal_dir = Path(journal_dir)

    def directory(self, collection: Collection) -> Path:
        if collection is Collection.JOURNAL:
            return self.journal_dir
        return self.notes_dir

    def path_for(self, collection: Collection, item_id: str) -> Path:
        return self.directory(collection) / f"{item_id}{NOTE_SUFFIX}"

    def exists(self, collection: Collection, item_id: str) -> bool:
        return self.path_for(collection, item_id).is_file()

    def _entry_for(self, collection: Collection, file: Path) -> ListEntry:
        info = file.stat()
        return ListEntry(
            id=file.stem,
            display_title=file.stem,
            last_modified=datetime.fromtimestamp(info.st_mtime),
            size_bytes=info.st_size,
            collection=collection,
        )

    def entry(self, collection: Collection, item_id: str) -> ListEntry:
        file_path = self.path_for(collection, item_id)
        try:
            return self._entry_for(collection, file_path)
        except FileNotFoundError as e:
            raise NotFoundError(f"'{item_id}' does not exist") from e
        except OSError as e:
            raise StorageError(f"could not read file info for {file_path}: {e}") from e

    def list(self, collection: Collection) -> list:
        directory = self.directory(collection)
        if not directory.exists():
            return []
        try:
            files = [p for p in directory.iterdir() if p.suffix == NOTE_SUFFIX and p.is_file()]
        except OSError as e:
            raise StorageError(f"could not list {directory}: {e}") from e
        entries = []
        for file in files:
            try:
                entries.append(self._entry_for(collection, file))
            except OSError as e:
                logging.error(f"Error reading file info for {file}: {e}")
        entries.sort(key=lambda e: e.id, reverse=collection is Collection.JOURNAL)
        return entries

    def read(self, collection: Collection, item_id: str) -> str:
        file_path = self.path_for(collection, item_id)
        try:
            with file_path.open("r", encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"'{item_id}' does not exist") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"could not read {file_path}: {e}") from e

    def write(self, collection: Collection, item_id: str, content: str) -> Path:
        file_path = self.path_for(collection, item_id)
        if collection is Collection.JOURNAL:
            ensure_dir(self.journal_dir)
        try:
            _atomic_write(file_path, content)
        except OSError as e:
            raise StorageError(f"could not write {file_path}: {e}") from e
        logging.info(f"Saved {file_path}")
        return file_path

    def append(self, collection: Collection, item_id: str, text: str,
               timestamp: datetime = None) -> Path:
        if not text.strip():
            raise EmptyInputError("no content provided")
        file_path = self.path_for(collection, item_id)
        if not file_path.is_file():
            raise NotFoundError(f"'{item_id}' does not exist")
        if timestamp is not None:
            update = f"\n\n---\n**Updated:** {timestamp.strftime('%Y-%m-%d %H:%M:%S')}\n\n{text}"
        else:
            update = f"\n\n{text}"
        try:
            # "r+" rather than "a": the file must already exist
            with file_path.open("r+", encoding="utf-8", newline="") as f:
                f.seek(0, 2)
                f.write(update)
        except FileNotFoundError as e:
            raise NotFoundError(f"'{item_id}' does not exist") from e
        except OSError as e:
            raise StorageError(f"could not update {file_path}: {e}") from e
        logging.info(f"Appended to {file_path}")
        return file_path

    def delete(self, collection: Collection, item_id: str):
        file_path = self.path_for(collection, item_id)
        try:
            file_path.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(f"'{item_id}' does not exist") from e
        except OSError as e:
            raise StorageError(f"could not delete {file_path}: {e}") from e
        logging.info(f"Deleted {file_path}")

    def add_journal_entry(self, text: str, now: datetime = None):
        """Add ``text`` to today's journal entry under a time heading.

        Returns ``(entry_id, created)`` where ``created`` is False when the
        text was appended to an entry that already existed.
        """
        if not text.strip():
            raise EmptyInputError("no content provided")
        now = now or datetime.now()
        entry_id = today_id(now)
        stamp = now.strftime("%H:%M")
        if self.exists(Collection.JOURNAL, entry_id):
            existing = self.read(Collection.JOURNAL, entry_id)
            self.write(Collection.JOURNAL, entry_id, f"{existing}\n\n### {stamp}\n\n{text}")
            return entry_id, False
        heading = f"{now:%A}, {now:%B} {now.day}, {now:%Y}"
        self.write(Collection.JOURNAL, entry_id,
                   f"# Daily Journal\n\n## {heading}\n\n### {stamp}\n\n{text}")
        return entry_id, True
