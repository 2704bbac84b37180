"""Tests for the extraction service data contracts."""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from extractly.errors import PersistenceError, ValidationError
from extractly.model import Row
from extractly.records import (
    ExtractionResult,
    HistoryEntry,
    HistoryPage,
    HistoryStore,
    key_point_rows,
    key_points_from_rows,
    load_json_file,
)


def test_extraction_result_from_service_json():
    result = ExtractionResult.from_dict({
        "summary": "This is a test summary.\n\nSecond paragraph.",
        "keyPoints": ["Point 1", "Point 2"],
    })
    assert result.key_points == ["Point 1", "Point 2"]
    assert result.paragraphs() == ["This is a test summary.", "Second paragraph."]


def test_single_newlines_also_split_paragraphs():
    assert ExtractionResult(summary="a\nb").paragraphs() == ["a", "b"]
    assert ExtractionResult(summary="").paragraphs() == []


@pytest.mark.parametrize("data", [
    [],
    {"summary": 3},
    {"summary": "s", "keyPoints": "not a list"},
    {"summary": "s", "keyPoints": [1, 2]},
])
def test_extraction_result_rejects_bad_shapes(data):
    with pytest.raises(ValidationError):
        ExtractionResult.from_dict(data)


def test_key_point_rows_are_numbered_from_one():
    rows = key_point_rows(["Point 1", "Point 2"])
    assert rows == [Row(1, {"text": "Point 1"}), Row(2, {"text": "Point 2"})]
    assert key_points_from_rows(rows) == ["Point 1", "Point 2"]


def test_history_page_from_service_json():
    page = HistoryPage.from_dict({
        "content": [{"id": 3, "url": "https://x.example", "content": "c", "summary": None}],
        "page": 1,
        "totalPages": 4,
    })
    assert page.page == 1
    assert page.total_pages == 4
    assert page.rows() == [Row(3, {"url": "https://x.example", "content": "c", "summary": ""})]


def test_history_page_from_plain_list():
    page = HistoryPage.from_dict([{"id": 1, "url": "u"}])
    assert page.total_pages == 1
    assert page.content[0].url == "u"


def test_history_entry_requires_id():
    with pytest.raises(ValidationError):
        HistoryEntry.from_dict({"url": "u"})
    with pytest.raises(ValidationError):
        HistoryEntry.from_dict({"id": "abc"})


def test_history_entry_row_round_trip():
    entry = HistoryEntry(id=2, url="u", content="c", summary="s")
    assert HistoryEntry.from_row(entry.to_row()) == entry


def test_load_json_file_reports_bad_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "bad.json")
        with open(path, "w") as f:
            f.write("{not json")
        with pytest.raises(ValidationError):
            load_json_file(path)

        good = os.path.join(tmpdir, "good.json")
        with open(good, "w") as f:
            json.dump({"summary": "s"}, f)
        assert load_json_file(good) == {"summary": "s"}


def make_store(count=7, path=None):
    entries = [HistoryEntry(id=i, url=f"https://site{i}.example", content=f"content {i}",
                            summary=f"summary {i}")
               for i in range(1, count + 1)]
    return HistoryStore(entries, path=path)


def test_store_pages_newest_first():
    store = make_store()
    first = store.fetch_page(0, 5)
    assert [e.id for e in first.content] == [7, 6, 5, 4, 3]
    assert first.page == 0
    assert first.total_pages == 2
    second = store.fetch_page(1, 5)
    assert [e.id for e in second.content] == [2, 1]
    assert store.fetch_page(2, 5).content == []


def test_store_search_matches_url_and_content_only():
    store = make_store()
    assert [e.id for e in store.fetch_page(0, 5, "SITE3").content] == [3]
    assert [e.id for e in store.fetch_page(0, 5, "content 4").content] == [4]
    empty = store.fetch_page(0, 5, "summary 2")
    assert empty.content == []
    assert empty.total_pages == 0


def test_store_update_and_delete():
    store = make_store(2)
    assert store.update(1, {"url": "https://new.example", "content": "new",
                            "summary": "ignored"})
    updated = [e for e in store.entries if e.id == 1][0]
    assert updated.url == "https://new.example"
    assert updated.content == "new"
    assert updated.summary == "summary 1"
    assert store.delete(2)
    assert [e.id for e in store.entries] == [1]
    assert not store.delete(2)
    assert not store.update(9, {"url": "x"})


def test_store_writes_changes_back_to_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "history.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"content": [{"id": 1, "url": "a", "content": "x"},
                                   {"id": 2, "url": "b", "content": "y"}],
                       "page": 0, "totalPages": 1}, f)
        store = HistoryStore.from_file(path)
        store.delete(1)
        store.update(2, {"content": "z"})
        reloaded = HistoryStore.from_file(path)
        assert [(e.id, e.content) for e in reloaded.entries] == [(2, "z")]
        assert not os.path.exists(os.path.join(tmpdir, "history.tmp"))


def test_store_write_failure_leaves_entries_unchanged():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = make_store(2, path=Path(tmpdir) / "history.json")
        with patch("extractly.records.open", create=True, side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError):
                store.delete(1)
        assert [e.id for e in store.entries] == [2, 1]
