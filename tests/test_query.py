"""Tests for the craving query engine."""

from datetime import timedelta

import pytest

from cravelog.models import FilterCategory, SortOrder
from cravelog.query import (
    CravingQueryEngine, NO_CRAVINGS_MESSAGE, NO_MATCHES_MESSAGE,
    empty_state_message, parse_filter, parse_sort, select_cravings,
)
from conftest import NOW, make_craving


def _descriptions(records):
    return [r.description for r in records]


class TestSearch:

    def test_empty_search_with_all_is_identity(self):
        records = [make_craving(f"Craving {i}", intensity=i) for i in range(1, 6)]
        result = select_cravings(records, "", FilterCategory.ALL, now=NOW)
        assert result == records

    def test_all_preserves_input_order(self):
        records = [
            make_craving("b", timestamp=NOW - timedelta(days=3)),
            make_craving("a", timestamp=NOW),
            make_craving("c", timestamp=NOW - timedelta(days=1)),
        ]
        assert _descriptions(select_cravings(records, now=NOW)) == ["b", "a", "c"]

    def test_case_insensitive_substring(self):
        records = [make_craving("Late Night Snack")]
        assert select_cravings(records, "night", now=NOW) == records
        assert select_cravings(records, "NIGHT", now=NOW) == records
        assert select_cravings(records, "nights", now=NOW) == []

    def test_plain_lowercasing_not_case_folding(self):
        records = [make_craving("Straße snack")]
        assert select_cravings(records, "ss", now=NOW) == []
        assert select_cravings(records, "STRAßE", now=NOW) == records

    def test_whitespace_is_significant(self):
        records = [make_craving("snack")]
        assert select_cravings(records, " snack", now=NOW) == []
        assert select_cravings(records, "snack ", now=NOW) == []

    def test_returns_new_list(self):
        records = [make_craving("one")]
        result = select_cravings(records, now=NOW)
        assert result is not records


class TestCategories:

    def test_high_intensity_threshold_inclusive(self):
        at = make_craving("at", intensity=7.0)
        below = make_craving("below", intensity=6.999)
        result = select_cravings([at, below], "", FilterCategory.HIGH_INTENSITY, now=NOW)
        assert result == [at]

    def test_high_intensity_keeps_input_order(self):
        records = [make_craving("x", intensity=7), make_craving("y", intensity=10),
                   make_craving("z", intensity=8)]
        result = select_cravings(records, "", FilterCategory.HIGH_INTENSITY, now=NOW)
        assert _descriptions(result) == ["x", "y", "z"]

    def test_high_intensity_does_not_assume_bounds(self):
        records = [make_craving("huge", intensity=42), make_craving("negative", intensity=-3)]
        result = select_cravings(records, "", FilterCategory.HIGH_INTENSITY, now=NOW)
        assert _descriptions(result) == ["huge"]

    def test_recent_window_boundary(self):
        exactly = make_craving("exactly", timestamp=NOW - timedelta(days=7))
        past = make_craving("past", timestamp=NOW - timedelta(days=7, seconds=1))
        result = select_cravings([exactly, past], "", FilterCategory.RECENT, now=NOW)
        assert result == [exactly]

    def test_recent_treats_naive_timestamps_as_utc(self):
        naive = make_craving("naive", timestamp=(NOW - timedelta(days=1)).replace(tzinfo=None))
        result = select_cravings([naive], "", FilterCategory.RECENT, now=NOW)
        assert result == [naive]

    def test_recent_keeps_input_order(self):
        records = [make_craving("older", timestamp=NOW - timedelta(days=5)),
                   make_craving("newer", timestamp=NOW - timedelta(days=1))]
        result = select_cravings(records, "", FilterCategory.RECENT, now=NOW)
        assert _descriptions(result) == ["older", "newer"]

    def test_high_resistance_threshold_inclusive(self):
        at = make_craving("at", resistance=7.0)
        below = make_craving("below", resistance=6.999)
        result = select_cravings([below, at], "", FilterCategory.HIGH_RESISTANCE, now=NOW)
        assert result == [at]

    def test_high_resistance_sorted_descending_and_stable(self):
        first_seven = make_craving("first seven", resistance=7)
        nine = make_craving("nine", resistance=9)
        second_seven = make_craving("second seven", resistance=7)
        eight = make_craving("eight", resistance=8)
        result = select_cravings([first_seven, nine, second_seven, eight], "",
                                 FilterCategory.HIGH_RESISTANCE, now=NOW)
        assert result == [nine, eight, first_seven, second_seven]

    def test_search_narrows_before_category(self):
        snack = make_craving("Midnight snack", intensity=8)
        other = make_craving("Cigarette", intensity=9)
        result = select_cravings([snack, other], "snack", FilterCategory.HIGH_INTENSITY, now=NOW)
        assert result == [snack]

    def test_end_to_end_high_resistance(self):
        coffee = make_craving("Coffee craving", intensity=8, resistance=3,
                              timestamp=NOW - timedelta(days=1))
        sugar = make_craving("Sugar craving", intensity=5, resistance=9,
                             timestamp=NOW - timedelta(days=10))
        result = select_cravings([coffee, sugar], "", FilterCategory.HIGH_RESISTANCE, now=NOW)
        assert result == [sugar]

    def test_every_category_handled(self):
        records = [make_craving("x", intensity=8, resistance=8)]
        for category in FilterCategory:
            assert select_cravings(records, "", category, now=NOW) == records


class TestEmptyResults:

    def test_empty_input(self):
        assert select_cravings([], "", FilterCategory.ALL, now=NOW) == []

    def test_no_match(self):
        records = [make_craving("Coffee")]
        assert select_cravings(records, "nomatch", FilterCategory.ALL, now=NOW) == []

    def test_empty_state_messages_differ(self):
        assert empty_state_message("") == NO_CRAVINGS_MESSAGE
        assert empty_state_message("nomatch") == NO_MATCHES_MESSAGE
        assert NO_CRAVINGS_MESSAGE != NO_MATCHES_MESSAGE


class TestSortOrder:

    def test_sort_by_intensity(self):
        records = [make_craving("low", intensity=2), make_craving("high", intensity=9),
                   make_craving("mid", intensity=5)]
        result = select_cravings(records, now=NOW, sort=SortOrder.INTENSITY)
        assert _descriptions(result) == ["high", "mid", "low"]

    def test_sort_by_date_newest_first(self):
        records = [make_craving("old", timestamp=NOW - timedelta(days=3)),
                   make_craving("new", timestamp=NOW)]
        result = select_cravings(records, now=NOW, sort=SortOrder.DATE)
        assert _descriptions(result) == ["new", "old"]

    def test_sort_applies_after_category(self):
        records = [make_craving("a", intensity=9, resistance=7),
                   make_craving("b", intensity=10, resistance=9),
                   make_craving("c", intensity=3, resistance=8)]
        result = select_cravings(records, "", FilterCategory.HIGH_RESISTANCE,
                                 now=NOW, sort=SortOrder.INTENSITY)
        assert _descriptions(result) == ["b", "a", "c"]


class TestParsing:

    @pytest.mark.parametrize("text,expected", [
        ("all", FilterCategory.ALL),
        ("Recent", FilterCategory.RECENT),
        ("high-intensity", FilterCategory.HIGH_INTENSITY),
        ("High Resistance", FilterCategory.HIGH_RESISTANCE),
        (" high_resistance ", FilterCategory.HIGH_RESISTANCE),
    ])
    def test_parse_filter(self, text, expected):
        assert parse_filter(text) == expected

    def test_parse_filter_unknown(self):
        with pytest.raises(ValueError, match="Unknown filter"):
            parse_filter("spicy")

    def test_parse_sort(self):
        assert parse_sort("Resistance") == SortOrder.RESISTANCE
        with pytest.raises(ValueError, match="Unknown sort order"):
            parse_sort("alphabetical")

    def test_labels(self):
        assert [c.label for c in FilterCategory] == [
            "All", "Recent", "High Intensity", "High Resistance",
        ]


class TestCravingQueryEngine:

    def test_execute_reads_active_snapshot(self, seeded_store):
        engine = CravingQueryEngine(seeded_store)
        results = engine.execute("craving")
        assert {r.description for r in results} == {
            "Coffee craving after lunch", "Sugar craving at the office",
        }

    def test_execute_skips_archived(self, seeded_store):
        target = seeded_store.fetch_all()[0]
        seeded_store.archive(target.id)
        engine = CravingQueryEngine(seeded_store)
        assert target.id not in [r.id for r in engine.execute()]
