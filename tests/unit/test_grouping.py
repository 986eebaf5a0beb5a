"""
Unit tests for grouping and ranking helpers.
"""

from datetime import datetime

import pytest

from agrirent.analytics.grouping import (
    UNKNOWN,
    count_by,
    hour_of,
    hour_sort_key,
    month_of,
    most_frequent,
    normalize_key,
    top_n,
)

NOW = datetime(2025, 3, 5)


@pytest.mark.unit
class TestNormalizeKey:

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_absent_values_become_unknown(self, value):
        assert normalize_key(value) == UNKNOWN

    def test_values_are_kept_opaque(self):
        assert normalize_key("Zone:North") == "Zone:North"
        assert normalize_key(" Pune ") == "Pune"
        assert normalize_key(7) == "7"


@pytest.mark.unit
class TestHours:

    def test_hour_of(self):
        assert hour_of("09:30") == "09"
        assert hour_of("9:30") == "9"
        assert hour_of(None) == "00"
        assert hour_of("") == "00"
        assert hour_of(":30") == UNKNOWN

    def test_hour_sort_key_numeric_first(self):
        hours = ["10", "Unknown", "9", "00"]
        assert sorted(hours, key=hour_sort_key) == ["00", "9", "10", "Unknown"]


@pytest.mark.unit
class TestMonthOf:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2025-09-01", 9),
            ("2025-11-30T22:00:00Z", 11),
            ("2025-06-15T08:00:00+05:30", 6),
            ("2025-12-01 10:00:00", 12),
        ],
    )
    def test_parses_iso_values(self, value, expected):
        assert month_of(value, NOW) == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_absent_date_falls_back_to_now(self, value):
        assert month_of(value, NOW) == 3

    @pytest.mark.parametrize("value", ["not a date", "2025-13-01", "13/09/2025"])
    def test_unparseable_date_has_no_month(self, value):
        assert month_of(value, NOW) is None


@pytest.mark.unit
class TestRanking:

    def test_count_by_keeps_first_encountered_order(self):
        counts = count_by(["b", "a", "b", "c", "a"], lambda x: x)
        assert list(counts.items()) == [("b", 2), ("a", 2), ("c", 1)]

    def test_most_frequent_tie_break(self):
        assert most_frequent({"b": 2, "a": 2, "c": 1}) == ("b", 2)
        assert most_frequent({"b": 1, "a": 2}) == ("a", 2)
        assert most_frequent({}) is None

    def test_top_n_is_stable(self):
        rows = [("a", 1), ("b", 3), ("c", 1), ("d", 3), ("e", 2)]
        assert top_n(rows, key=lambda r: r[1], n=4) == [("b", 3), ("d", 3), ("e", 2), ("a", 1)]
        assert top_n(rows, key=lambda r: r[1], n=3, descending=False) == [("a", 1), ("c", 1), ("e", 2)]
