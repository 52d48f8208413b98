"""
Tests for hashtag extraction and indexing.
"""
import pytest

from notetype.store import Collection
from notetype.tags import TagIndexer, TaggedFile, extract_tags, normalize_tag, sorted_counts


@pytest.mark.parametrize("content,expected", [
    ("## heading #tag", {"tag"}),
    ("#start of line", {"start"}),
    ("mid #Work and #work", {"work"}),
    ("#weekly-review #snake_case", {"weekly-review", "snake_case"}),
    ("email me at a#b or ##twice", set()),
    ("(#paren) #trailing.", {"paren", "trailing"}),
    ("no tags at all", set()),
])
def test_extract_tags(content, expected):
    assert extract_tags(content) == expected


def test_normalize_tag():
    assert normalize_tag(" #Work ") == "work"


def test_sorted_counts():
    assert sorted_counts({"b": 1, "a": 1, "c": 3}) == [("c", 3), ("a", 1), ("b", 1)]


def test_repeats_in_one_file_count_once(store):
    store.write(Collection.NOTES, "one", "#x #x #x")
    store.write(Collection.NOTES, "two", "#x #y")
    assert TagIndexer(store).index_all() == {"x": 2, "y": 1}


def test_index_spans_notes_and_journal(store):
    store.write(Collection.JOURNAL, "2024-01-01", "#life")
    store.write(Collection.NOTES, "n", "#life #work")
    assert TagIndexer(store).index_all() == {"life": 2, "work": 1}


def test_find_by_tag_journal_first(store):
    store.write(Collection.NOTES, "n", "#Life")
    store.write(Collection.JOURNAL, "2024-01-01", "#life")
    store.write(Collection.NOTES, "other", "#work")
    assert TagIndexer(store).find_by_tag("#LIFE") == [
        TaggedFile(Collection.JOURNAL, "2024-01-01"),
        TaggedFile(Collection.NOTES, "n"),
    ]


def test_unreadable_files_are_skipped(store):
    store.write(Collection.NOTES, "good", "#ok")
    (store.notes_dir / "bad.md").write_bytes(b"\xff\xfe#broken")
    assert TagIndexer(store).index_all() == {"ok": 1}
