# backend/tests/test_pipeline.py
"""Tests for the search -> filter -> sort -> paginate pipeline."""

import copy

import pytest

from tabledash.inference import to_number
from tabledash.models import MembershipFilter, Pagination, RangeFilter, SortDirection, SortSpec
from tabledash.pipeline import (
    filter_rows,
    paginate,
    run_query,
    search_rows,
    sort_rows,
    total_pages,
)

SCENARIO_ROWS = [
    {"category": "A", "revenue": 100},
    {"category": "B", "revenue": 50},
    {"category": "A", "revenue": 200},
]


def _numbered(n):
    return [{"id": i, "value": i * 10} for i in range(1, n + 1)]


class TestSearch:
    def test_empty_query_keeps_everything(self):
        assert search_rows(SCENARIO_ROWS, "") == SCENARIO_ROWS
        assert search_rows(SCENARIO_ROWS, None) == SCENARIO_ROWS

    def test_case_insensitive_substring_over_any_column(self):
        rows = [{"name": "ALICE", "city": "Paris"}, {"name": "Bob", "city": "Malice"}]
        assert search_rows(rows, "alice") == rows
        assert search_rows(rows, "PAR") == [rows[0]]

    def test_numbers_and_booleans_are_stringified(self):
        rows = [{"n": 100}, {"n": 100.0}, {"n": 5}, {"flag": True}]
        assert search_rows(rows, "100") == rows[:2]
        assert search_rows(rows, "true") == [rows[3]]

    def test_null_cells_never_match(self):
        assert search_rows([{"a": None}], "none") == []


class TestColumnFilters:
    def test_membership(self):
        out = filter_rows(SCENARIO_ROWS, {"category": MembershipFilter(values=["A"])})
        assert [r["revenue"] for r in out] == [100, 200]

    def test_empty_membership_is_no_filter(self):
        assert filter_rows(SCENARIO_ROWS, {"category": MembershipFilter(values=[])}) == SCENARIO_ROWS

    def test_membership_does_not_mix_booleans_and_numbers(self):
        rows = [{"x": 1}, {"x": True}]
        assert filter_rows(rows, {"x": MembershipFilter(values=[True])}) == [rows[1]]

    def test_range_bounds_and_coercion(self):
        rows = [{"v": 5}, {"v": "7"}, {"v": "abc"}, {"v": None}, {"v": 12}, {"v": 3.5}, {}]
        flt = RangeFilter(min=4, max=10)
        out = filter_rows(rows, {"v": flt})
        assert out == [{"v": 5}, {"v": "7"}]
        for r in out:
            n = to_number(r["v"])
            assert n is not None and flt.min <= n <= flt.max

    def test_one_sided_range(self):
        rows = [{"v": 1}, {"v": 50}, {"v": "x"}]
        assert filter_rows(rows, {"v": RangeFilter(min=10)}) == [{"v": 50}]
        assert filter_rows(rows, {"v": RangeFilter(max=10)}) == [{"v": 1}]

    def test_range_needs_whole_cell_numeric(self):
        rows = [{"v": "100 USD"}, {"v": " 100 "}, {"v": "1e2"}]
        assert filter_rows(rows, {"v": RangeFilter(min=50)}) == rows[1:]

    def test_range_without_bounds_is_no_filter(self):
        rows = [{"v": "x"}, {"v": 3}]
        assert filter_rows(rows, {"v": RangeFilter()}) == rows

    def test_filters_are_anded(self):
        filters = {
            "category": MembershipFilter(values=["A"]),
            "revenue": RangeFilter(min=150),
        }
        assert filter_rows(SCENARIO_ROWS, filters) == [{"category": "A", "revenue": 200}]


class TestSort:
    def test_no_field_keeps_order(self):
        out = sort_rows(SCENARIO_ROWS, SortSpec())
        assert out == SCENARIO_ROWS
        assert out is not SCENARIO_ROWS
        assert sort_rows(SCENARIO_ROWS, None) == SCENARIO_ROWS

    def test_numbers(self):
        rows = [{"v": 3}, {"v": 1.5}, {"v": 2}]
        asc = sort_rows(rows, SortSpec(field="v"))
        desc = sort_rows(rows, SortSpec(field="v", direction=SortDirection.DESC))
        assert [r["v"] for r in asc] == [1.5, 2, 3]
        assert [r["v"] for r in desc] == [3, 2, 1.5]

    def test_strings_ignore_case(self):
        rows = [{"s": "banana"}, {"s": "Apple"}, {"s": "cherry"}]
        assert [r["s"] for r in sort_rows(rows, SortSpec(field="s"))] == ["Apple", "banana", "cherry"]

    def test_accented_strings_sort_with_their_base_letter(self):
        rows = [{"n": "zebra"}, {"n": "éclair"}, {"n": "apple"}, {"n": "Eclair"}]
        out = [r["n"] for r in sort_rows(rows, SortSpec(field="n"))]
        assert out == ["apple", "Eclair", "éclair", "zebra"]

        desc = [r["n"] for r in sort_rows(rows, SortSpec(field="n", direction=SortDirection.DESC))]
        assert desc == ["zebra", "éclair", "Eclair", "apple"]

    @pytest.mark.parametrize("direction", [SortDirection.ASC, SortDirection.DESC])
    def test_nulls_last_in_both_directions(self, direction):
        rows = [{"v": None, "i": 0}, {"v": 3, "i": 1}, {"i": 2}, {"v": 1, "i": 3}]
        out = sort_rows(rows, SortSpec(field="v", direction=direction))
        assert [r["i"] for r in out[2:]] == [0, 2]
        expected = [3, 1] if direction == SortDirection.ASC else [1, 3]
        assert [r["i"] for r in out[:2]] == expected

    def test_mixed_types_compare_equal(self):
        rows = [{"v": "b"}, {"v": 1}]
        assert sort_rows(rows, SortSpec(field="v")) == rows

    def test_stable_on_ties(self):
        rows = [{"k": 1, "i": 0}, {"k": 0, "i": 1}, {"k": 1, "i": 2}, {"k": 0, "i": 3}]
        out = sort_rows(rows, SortSpec(field="k"))
        assert [r["i"] for r in out] == [1, 3, 0, 2]

    def test_input_not_mutated(self):
        rows = [{"v": 3}, {"v": 1}, {"v": 2}]
        before = copy.deepcopy(rows)
        sort_rows(rows, SortSpec(field="v"))
        assert rows == before


class TestPaginate:
    def test_last_partial_page(self):
        rows = _numbered(25)
        page = paginate(rows, Pagination(current_page=3, rows_per_page=10))
        assert [r["id"] for r in page] == [21, 22, 23, 24, 25]
        assert total_pages(len(rows), 10) == 3

    def test_out_of_range_page_is_empty(self):
        assert paginate(_numbered(5), Pagination(current_page=4, rows_per_page=2)) == []

    def test_total_pages_minimum_one(self):
        assert total_pages(0, 10) == 1
        assert total_pages(10, 10) == 1
        assert total_pages(11, 10) == 2
        with pytest.raises(ValueError):
            total_pages(5, 0)

    @pytest.mark.parametrize("per_page", [1, 2, 3, 7, 25, 40])
    def test_pages_concatenate_to_whole(self, per_page):
        rows = _numbered(25)
        pages = total_pages(len(rows), per_page)
        joined = []
        for p in range(1, pages + 1):
            joined.extend(paginate(rows, Pagination(current_page=p, rows_per_page=per_page)))
        assert joined == rows


class TestRunQuery:
    def test_scenario(self):
        page, pages = run_query(
            SCENARIO_ROWS,
            filters={"category": MembershipFilter(values=["A"])},
            sort=SortSpec(field="revenue", direction=SortDirection.DESC),
        )
        assert page == [{"category": "A", "revenue": 200}, {"category": "A", "revenue": 100}]
        assert pages == 1

    def test_search_applies_before_filters(self):
        rows = [{"name": "alpha", "n": 1}, {"name": "beta", "n": 2}, {"name": "alps", "n": 30}]
        page, _ = run_query(rows, search="al", filters={"n": RangeFilter(max=10)})
        assert page == [rows[0]]

    def test_idempotent(self):
        kwargs = dict(
            search="a",
            filters={"revenue": RangeFilter(min=60)},
            sort=SortSpec(field="revenue"),
            pagination=Pagination(current_page=1, rows_per_page=1),
        )
        assert run_query(SCENARIO_ROWS, **kwargs) == run_query(SCENARIO_ROWS, **kwargs)
