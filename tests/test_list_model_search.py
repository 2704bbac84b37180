"""Tests for filtering and paging in the list view-model."""

import pytest

from extractly.model import ListViewModel, Row
from extractly.records import key_point_rows
from extractly.scheduler import ManualScheduler


def make_model(points, **kwargs):
    kwargs.setdefault("scheduler", ManualScheduler())
    return ListViewModel.for_key_points(key_point_rows(points), **kwargs)


def test_two_points_fit_on_one_page():
    model = make_model(["Point 1", "Point 2"])
    assert model.page == 1
    assert model.page_count == 1
    assert model.paged_rows == [Row(1, {"text": "Point 1"}), Row(2, {"text": "Point 2"})]
    assert not model.show_pagination


def test_search_filters_rows():
    model = make_model(["Point 1", "Point 2"])
    model.set_search("Point 2")
    assert model.filtered == [Row(2, {"text": "Point 2"})]
    assert model.page_count == 1


def test_search_is_case_insensitive_and_subset():
    points = ["Alpha beta", "BETA gamma", "delta", "Gamma"]
    model = make_model(points)
    model.set_search("beta")
    assert [r.id for r in model.filtered] == [1, 2]
    assert all(r in model.rows for r in model.filtered)


def test_empty_search_returns_all_rows():
    model = make_model(["a", "b", "c"])
    model.set_search("b")
    model.set_search("")
    assert model.filtered == model.rows


def test_search_resets_to_first_page():
    model = make_model([f"Point {i}" for i in range(1, 13)])
    assert model.set_page(3)
    model.set_search("Point")
    assert model.page == 1


def test_set_page_ignores_out_of_range():
    model = make_model([f"Point {i}" for i in range(1, 8)])
    assert model.page_count == 2
    assert not model.set_page(0)
    assert not model.set_page(3)
    assert model.page == 1
    assert model.set_page(2)
    assert [r.text for r in model.paged_rows] == ["Point 6", "Point 7"]


def test_set_page_on_empty_list_is_noop():
    model = make_model([])
    assert model.page_count == 0
    assert not model.set_page(1)
    assert model.paged_rows == []


def test_next_and_previous_page():
    model = make_model([f"P{i}" for i in range(11)])
    assert model.next_page()
    assert model.next_page()
    assert not model.next_page()
    assert model.page == 3
    assert model.previous_page()
    assert model.page == 2


def test_show_pagination_only_with_several_pages():
    model = make_model([f"P{i}" for i in range(6)])
    assert model.show_pagination
    model.set_search("P5")
    assert not model.show_pagination


def test_zero_based_model_pages_locally():
    rows = [Row(i, {"url": f"https://site{i}.example", "content": "c", "summary": "s"})
            for i in range(10, 17)]
    model = ListViewModel(rows, page_base=0, search_fields=("url", "content", "summary"),
                          scheduler=ManualScheduler())
    assert model.page == 0
    assert [r.id for r in model.paged_rows] == [10, 11, 12, 13, 14]
    assert model.set_page(1)
    assert [r.id for r in model.paged_rows] == [15, 16]
    assert not model.set_page(2)
    model.set_search("site16")
    assert model.page == 0
    assert [r.id for r in model.paged_rows] == [16]


def test_set_page_size_resets_page():
    model = make_model([f"P{i}" for i in range(10)])
    model.set_page(2)
    assert model.set_page_size(3)
    assert model.page == 1
    assert model.page_count == 4
    assert not model.set_page_size(0)
    assert model.page_size == 3


def test_load_rows_replaces_collection():
    model = make_model(["old"])
    model.load_rows([Row(7, {"text": "new"})])
    assert [r.id for r in model.rows] == [7]


def test_load_rows_drops_edit_session_of_missing_row():
    model = make_model(["a", "b"])
    model.start_edit(1)
    model.load_rows([Row(2, {"text": "b"})])
    assert model.editing_id is None
    assert model.edit_buffer is None


def test_load_rows_keeps_edit_session_of_present_row():
    model = make_model(["a", "b"])
    model.start_edit(2)
    model.load_rows([Row(2, {"text": "b"}), Row(3, {"text": "c"})], page=1)
    assert model.editing_id == 2


def test_invalid_page_base_rejected():
    with pytest.raises(ValueError):
        ListViewModel([], page_base=2, scheduler=ManualScheduler())


def test_highlighted_uses_current_search():
    model = make_model(["Point 1"])
    model.set_search("point")
    segments = model.highlighted(model.rows[0])
    assert [(s.text, s.matched) for s in segments] == [("Point", True), (" 1", False)]


def test_state_is_a_copy():
    model = make_model(["a"])
    state = model.state
    state.page = 99
    assert model.page == 1


def history_rows(ids):
    return [Row(i, {"url": f"https://site{i}.example", "content": "c", "summary": "s"})
            for i in ids]


def test_history_shows_server_page_as_loaded():
    model = ListViewModel.for_history([], scheduler=ManualScheduler())
    assert model.server_paged
    model.load_rows(history_rows(range(6, 11)), page=1, total_pages=3)
    assert model.page == 1
    assert [r.id for r in model.paged_rows] == [6, 7, 8, 9, 10]
    assert model.page_count == 3
    assert model.show_pagination


def test_history_pages_within_reported_total():
    model = ListViewModel.for_history([], scheduler=ManualScheduler())
    model.load_rows(history_rows(range(6, 11)), page=1, total_pages=3)
    assert model.set_page(2)
    assert model.page == 2
    assert not model.set_page(3)
    assert not model.set_page(-1)
    assert model.previous_page()
    assert model.page == 1


def test_history_search_resets_to_first_server_page():
    model = ListViewModel.for_history([], scheduler=ManualScheduler())
    model.load_rows(history_rows([1, 2]), page=2, total_pages=3)
    model.set_search("site1")
    assert model.page == 0
    # The service filters; loaded rows are shown as they are
    assert [r.id for r in model.paged_rows] == [1, 2]


def test_history_single_page_has_no_pagination():
    model = ListViewModel.for_history(history_rows([1]), scheduler=ManualScheduler())
    assert model.page_count == 1
    assert not model.show_pagination
    model.load_rows([], page=0, total_pages=0)
    assert model.page_count == 0
    assert not model.set_page(0)
