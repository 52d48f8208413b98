import logging
import re
from collections import Counter
from dataclasses import dataclass

from .errors import NoteTypeError
from .store import Collection, ContentStore

# '#tag' but not '##heading' and not 'word#tag'
TAG_PATTERN = re.compile(r"(?<![#\w])#([\w-]+)", re.ASCII)

SCAN_ORDER = (Collection.JOURNAL, Collection.NOTES)


@dataclass(frozen=True)
class TaggedFile:
    collection: Collection
    id: str


def extract_tags(content: str) -> set:
    return {m.group(1).lower() for m in TAG_PATTERN.finditer(content)}


def sorted_counts(counts: dict) -> list:
    """Most used first, alphabetical among equals."""
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def normalize_tag(tag: str) -> str:
    return tag.strip().lstrip("#").lower()


class TagIndexer:
    def __init__(self, store: ContentStore):
        self.store = store

    def _scan(self):
        for collection in SCAN_ORDER:
            for entry in self.store.list(collection):
                try:
                    content = self.store.read(collection, entry.id)
                except NoteTypeError as e:
                    logging.error(f"Skipping {entry.id} while scanning tags: {e}")
                    continue
                yield TaggedFile(collection, entry.id), extract_tags(content)

    def index_all(self) -> dict:
        counts = Counter()
        for _, tags in self._scan():
            counts.update(tags)
        return dict(counts)

    def find_by_tag(self, tag: str) -> list:
        tag = normalize_tag(tag)
        return [tagged for tagged, tags in self._scan() if tag in tags]
