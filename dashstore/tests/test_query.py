"""Unit tests for the filter/sort/paginate engine."""

from datetime import date, datetime, timezone
from typing import Optional

import pytest
from pydantic import BaseModel

from dashstore.core.exceptions import ValidationError
from dashstore.engine.clock import normalize_bound, to_timestamp
from dashstore.engine.query import (
    QueryParams,
    QuerySpec,
    as_text,
    is_unfiltered,
    paginate,
    run_query,
    sort_records,
)


class Item(BaseModel):
    id: str
    name: str
    score: Optional[float] = None
    status: str = "on"
    tags: list[str] = []
    time: str = "2026-01-01T00:00:00.000Z"


SPEC = QuerySpec(
    search=lambda i: (i.name, i.score, i.tags),
    sort_fields={"time": lambda i: i.time, "name": lambda i: i.name, "score": lambda i: i.score},
    default_sort="time",
    status_field="status",
    date_field="time",
    filters={"tag": lambda i, value: value in i.tags},
)


def _items(count: int) -> list[Item]:
    return [Item(id=str(n), name=f"item {n}", time=f"2026-01-{n + 1:02d}T00:00:00.000Z") for n in range(count)]


class TestAsText:
    def test_integral_floats_render_without_fraction(self):
        assert as_text(100.0) == "100"
        assert as_text(12.5) == "12.5"

    def test_bools_and_none(self):
        assert as_text(True) == "true"
        assert as_text(None) == ""


class TestIsUnfiltered:
    @pytest.mark.parametrize("value", [None, "all", "ALL", " All "])
    def test_sentinels(self, value):
        assert is_unfiltered(value) is True

    def test_real_value(self):
        assert is_unfiltered("active") is False


class TestPaginate:
    def test_pages_cover_every_match_exactly_once(self):
        records = list(range(23))
        for page in range(1, 5):
            result = paginate(records, page, 10)
            assert result.total == 23
            assert result.total_pages == 3
            assert len(result.items) <= 10
            assert result.items == records[(page - 1) * 10:page * 10]

    def test_page_beyond_last_is_empty(self):
        result = paginate(list(range(5)), 9, 10)
        assert result.items == []
        assert result.total == 5
        assert result.total_pages == 1

    def test_empty_collection_has_one_page(self):
        result = paginate([], 1, 10)
        assert result.total_pages == 1
        assert result.items == []


class TestSortRecords:
    def test_ties_keep_input_order_in_both_directions(self):
        records = [Item(id=str(n), name="same") for n in range(5)]
        asc = sort_records(records, lambda i: i.name, "asc")
        desc = sort_records(records, lambda i: i.name, "desc")
        assert [r.id for r in asc] == ["0", "1", "2", "3", "4"]
        assert [r.id for r in desc] == ["0", "1", "2", "3", "4"]

    def test_strings_compare_case_insensitively(self):
        records = [Item(id="1", name="beta"), Item(id="2", name="Alpha"), Item(id="3", name="gamma")]
        ordered = sort_records(records, lambda i: i.name, "asc")
        assert [r.name for r in ordered] == ["Alpha", "beta", "gamma"]

    def test_missing_values_sort_lowest(self):
        records = [Item(id="1", name="a", score=3), Item(id="2", name="b"), Item(id="3", name="c", score=1)]
        ordered = sort_records(records, lambda i: i.score, "asc")
        assert [r.id for r in ordered] == ["2", "3", "1"]


class TestRunQuery:
    def test_default_sort_is_applied(self):
        result = run_query(_items(5), SPEC, QueryParams())
        assert [r.id for r in result.items] == ["4", "3", "2", "1", "0"]

    def test_free_text_matches_numbers_as_text(self):
        records = [Item(id="1", name="x", score=100.0), Item(id="2", name="y", score=12.5)]
        assert [r.id for r in run_query(records, SPEC, QueryParams(q="100")).items] == ["1"]
        assert [r.id for r in run_query(records, SPEC, QueryParams(q="12.5")).items] == ["2"]

    def test_free_text_matches_list_elements(self):
        records = [Item(id="1", name="x", tags=["billing"]), Item(id="2", name="y", tags=["auth"])]
        result = run_query(records, SPEC, QueryParams(q="BILL"))
        assert [r.id for r in result.items] == ["1"]

    def test_blank_query_matches_everything(self):
        assert run_query(_items(3), SPEC, QueryParams(q="   ")).total == 3

    def test_missing_query_matches_everything(self):
        assert run_query(_items(3), SPEC, QueryParams(q=None)).total == 3

    def test_status_filter_and_all_sentinel(self):
        records = [Item(id="1", name="a", status="on"), Item(id="2", name="b", status="off")]
        assert run_query(records, SPEC, QueryParams(status="off")).total == 1
        assert run_query(records, SPEC, QueryParams(status="all")).total == 2

    def test_date_range_is_inclusive(self):
        result = run_query(
            _items(10),
            SPEC,
            QueryParams(date_from="2026-01-03T00:00:00.000Z", date_to="2026-01-05T00:00:00.000Z"),
        )
        assert sorted(r.id for r in result.items) == ["2", "3", "4"]

    def test_date_only_upper_bound_covers_the_whole_day(self):
        records = [Item(id="1", name="a", time="2026-01-05T18:30:00.000Z")]
        assert run_query(records, SPEC, QueryParams(date_to=date(2026, 1, 5))).total == 1
        assert run_query(records, SPEC, QueryParams(date_from="2026-01-06")).total == 0

    def test_extra_filter(self):
        records = [Item(id="1", name="a", tags=["x"]), Item(id="2", name="b", tags=["y"])]
        result = run_query(records, SPEC, QueryParams(filters={"tag": "y"}))
        assert [r.id for r in result.items] == ["2"]

    def test_total_counts_filtered_records_not_the_page(self):
        result = run_query(_items(30), SPEC, QueryParams(q="item 1", page_size=5))
        # "item 1" and "item 10".."item 19"
        assert result.total == 11
        assert len(result.items) == 5
        assert result.total_pages == 3


class TestNormalizeBound:
    def test_datetime_becomes_timestamp(self):
        moment = datetime(2026, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc)
        assert normalize_bound(moment) == "2026-03-04T05:06:07.890Z"
        assert normalize_bound(moment) == to_timestamp(moment)

    def test_calendar_day_bounds(self):
        assert normalize_bound("2026-03-04") == "2026-03-04T00:00:00.000Z"
        assert normalize_bound(date(2026, 3, 4), end=True) == "2026-03-04T23:59:59.999Z"

    def test_blank_is_unbounded(self):
        assert normalize_bound("  ") is None
        assert normalize_bound(None) is None

    def test_second_precision_is_widened_to_milliseconds(self):
        assert normalize_bound("2026-03-04T05:06:07Z") == "2026-03-04T05:06:07.000Z"

    def test_offset_is_converted_to_utc(self):
        assert normalize_bound("2026-03-04T05:06:07.250+02:00") == "2026-03-04T03:06:07.250Z"

    @pytest.mark.parametrize("value", ["yesterday", "2026-13-01", "2026-03-04T25:00:00Z"])
    def test_unparseable_bound_is_rejected(self, value):
        with pytest.raises(ValidationError):
            normalize_bound(value)

    def test_second_precision_lower_bound_keeps_that_second(self):
        records = [Item(id="1", name="a", time="2026-01-05T10:00:00.500Z")]
        assert run_query(records, SPEC, QueryParams(date_from="2026-01-05T10:00:00Z")).total == 1

    def test_offset_bounds_select_by_instant(self):
        records = [
            Item(id="1", name="a", time="2026-01-05T09:30:00.000Z"),
            Item(id="2", name="b", time="2026-01-05T10:30:00.000Z"),
        ]
        # 12:00 at +02:00 is 10:00 UTC
        result = run_query(records, SPEC, QueryParams(date_from="2026-01-05T12:00:00+02:00"))
        assert [r.id for r in result.items] == ["2"]
