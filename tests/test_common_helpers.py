"""Tests for the helpers calculator compute functions share."""

import math

import pytest

from calcdeck_pkg.calculators.common import base_value, in_range, number
from calcdeck_pkg.types import UnsupportedUnit
from calcdeck_pkg.units import FeetInches


class TestNumber:
    def test_reads_numbers_and_numeric_text(self):
        assert number({"a": 3}, "a") == 3.0
        assert number({"a": "2.5"}, "a") == 2.5

    def test_absent_or_unreadable_gives_default(self):
        assert number({}, "a") is None
        assert number({"a": None}, "a", 1.0) == 1.0
        assert number({"a": True}, "a", 0.0) == 0.0
        assert number({"a": "lots"}, "a", 0.0) == 0.0

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "nan"])
    def test_non_finite_gives_default(self, bad):
        assert number({"a": bad}, "a") is None
        assert number({"a": bad}, "a", 0.0) == 0.0


class TestInRange:
    def test_bounds_are_inclusive(self):
        assert in_range(0, 0, 10)
        assert in_range(10, 0, 10)
        assert not in_range(10.5, 0, 10)
        assert in_range(-5)

    @pytest.mark.parametrize("bad", [None, math.nan, math.inf, -math.inf])
    def test_missing_or_non_finite_is_out_of_range(self, bad):
        assert not in_range(bad)
        assert not in_range(bad, 0)
        assert not in_range(bad, None, 100)


class TestBaseValue:
    def test_converts_numbers(self):
        assert base_value({"w": 1}, {"w": "kg"}, "w", "weight", "lbs") == pytest.approx(1)
        assert base_value({"h": 180}, {}, "h", "height", "cm") == pytest.approx(180)

    def test_feet_and_inches(self):
        expected = 70 * 2.54
        assert base_value({"h": "5'10\""}, {}, "h", "height", "ft_in") == pytest.approx(expected)
        assert base_value({"h": FeetInches(5, 10)}, {"h": "ft_in"}, "h", "height", "cm") == pytest.approx(expected)

    @pytest.mark.parametrize(
        "raw, unit",
        [("tall", "cm"), ("5'10\"", "cm"), ("tall", "ft_in"), ((5, 10), "cm"), (math.inf, "cm"), (True, "cm")],
    )
    def test_unreadable_value_gives_none(self, raw, unit):
        assert base_value({"h": raw}, {"h": unit}, "h", "height", "cm") is None

    def test_unknown_unit_still_raises(self):
        with pytest.raises(UnsupportedUnit):
            base_value({"h": 180}, {"h": "furlong"}, "h", "height", "cm")
