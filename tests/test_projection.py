from __future__ import annotations

import pytest

from models import EnrichedItem, ProjectDetail, PublicationDetail
from projection import filter_by_title, parse_date_timestamp, project


def _item(slug: str, title: str | None = None, date: str = "", error: str | None = None) -> EnrichedItem:
    detail = PublicationDetail(title=title, date=date) if title is not None else None
    return EnrichedItem(
        url=f"https://api.example.com/detail/{slug}.json",
        pathname=f"/publications/{slug}.json",
        detail=detail,
        error=error,
    )


def _titles(items) -> list[str]:
    return [i.detail.title if i.detail else i.pathname for i in items]


def test_sorts_newest_first() -> None:
    items = [
        _item("a", "Old", "2022-09-10"),
        _item("b", "New", "2024-03-21"),
        _item("c", "Mid", "2023-11-01"),
    ]

    result = project(items, "", 1, 5)

    assert _titles(result.visible) == ["New", "Mid", "Old"]


def test_sort_is_stable_for_equal_dates() -> None:
    items = [
        _item("a", "First", "2024-01-01"),
        _item("b", "Second", "2024-01-01"),
        _item("c", "Third", "2024-01-01"),
    ]

    assert _titles(project(items, "", 1, 5).visible) == ["First", "Second", "Third"]


def test_missing_or_bad_dates_sort_last_in_index_order() -> None:
    items = [
        _item("a", "No Date"),
        _item("b", "Dated", "2020-01-01"),
        _item("c", "Garbage", "not a date"),
        _item("d"),
    ]

    result = project(items, "", 1, 10)

    assert _titles(result.visible) == ["Dated", "No Date", "Garbage", "/publications/d.json"]


def test_search_filters_by_case_folded_title() -> None:
    items = [_item("a", "Procedural Mesh Generation"), _item("b", "Neural Shapes")]

    result = project(items, "mesh", 1, 5)

    assert _titles(result.visible) == ["Procedural Mesh Generation"]


def test_search_text_is_trimmed_and_case_insensitive() -> None:
    items = [_item("a", "Procedural Mesh Generation"), _item("b", "Neural Shapes")]

    assert _titles(project(items, "  NEURAL ", 1, 5).visible) == ["Neural Shapes"]


def test_items_without_detail_are_excluded_by_any_filter() -> None:
    items = [_item("a", "Mesh"), _item("b", error="HTTP 500"), _item("c")]

    assert _titles(filter_by_title(items, "m")) == ["Mesh"]
    assert len(filter_by_title(items, "   ")) == 3


def test_pagination_clamps_out_of_range_page() -> None:
    items = [_item(str(i), f"Title {i}", f"2024-01-{i + 1:02d}") for i in range(12)]

    result = project(items, "", 5, 5)

    assert result.total_pages == 3
    assert result.current_page == 3
    assert len(result.visible) == 2
    assert result.total_items == 12


@pytest.mark.parametrize("page", [0, -3])
def test_pagination_clamps_low_pages_to_first(page: int) -> None:
    items = [_item(str(i), f"T{i}") for i in range(7)]

    result = project(items, "", page, 5)

    assert result.current_page == 1
    assert len(result.visible) == 5


def test_empty_collection_has_one_page() -> None:
    result = project([], "anything", 4, 5)

    assert result.total_pages == 1
    assert result.current_page == 1
    assert result.visible == ()


def test_filter_shrinking_set_reclamps_page() -> None:
    items = [_item(str(i), "Mesh" if i < 2 else f"Other {i}") for i in range(12)]

    assert project(items, "", 3, 5).current_page == 3
    assert project(items, "mesh", 3, 5).current_page == 1


def test_projection_is_pure() -> None:
    items = [_item("a", "B title", "2024-01-01"), _item("b", "A title", "2023-01-01")]
    snapshot = list(items)

    first = project(items, "title", 1, 1)
    second = project(items, "title", 1, 1)

    assert first == second
    assert items == snapshot


def test_works_with_project_details() -> None:
    items = [
        EnrichedItem(url="u1", pathname="/projects/a.json", detail=ProjectDetail(title="Neural", date="2023-01-01")),
        EnrichedItem(url="u2", pathname="/projects/b.json", detail=ProjectDetail(title="Mesh", date="2024-01-01")),
    ]

    assert _titles(project(items, "", 1, 5).visible) == ["Mesh", "Neural"]


def test_rejects_non_positive_page_size() -> None:
    with pytest.raises(ValueError):
        project([], "", 1, 0)


def test_parse_date_timestamp_formats() -> None:
    assert parse_date_timestamp("") == 0.0
    assert parse_date_timestamp("nope") == 0.0
    assert parse_date_timestamp("1970-01-02") == 86400.0
    assert parse_date_timestamp("1970-01-01T00:01:00Z") == 60.0


@pytest.mark.parametrize("raw", ["2024/03/05", "03/05/2024", "March 5, 2024", "Mar 5, 2024", "5 March 2024"])
def test_parse_date_timestamp_accepts_common_non_iso_forms(raw: str) -> None:
    assert parse_date_timestamp(raw) == parse_date_timestamp("2024-03-05")


def test_non_iso_dates_sort_among_iso_dates() -> None:
    items = [
        _item("a", "Old", "2022-09-10"),
        _item("b", "Slash", "2024/03/05"),
        _item("c", "Named", "November 1, 2023"),
    ]

    assert _titles(project(items, "", 1, 5).visible) == ["Slash", "Named", "Old"]
