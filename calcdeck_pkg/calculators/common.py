"""Small helpers shared by calculator compute functions."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..config import DEFAULT_CURRENCY
from ..types import UnsupportedUnit
from ..units import DEFAULT_CURRENCIES, convert_to_base, parse_feet_inches

# Every currency code the symbol table knows, for currency inputs
CURRENCY_UNITS = DEFAULT_CURRENCIES.codes()


def provided(values: Mapping[str, Any], key: str) -> bool:
    """True when ``key`` is visible and holds a value; zero counts as provided."""
    return values.get(key) is not None


def number(values: Mapping[str, Any], key: str, default: float | None = None) -> float | None:
    """Numeric value of ``key``, or ``default`` when absent, hidden or unreadable."""
    value = values.get(key)
    if value is None or isinstance(value, bool):
        return default
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def in_range(value: float | None, low: float | None = None, high: float | None = None) -> bool:
    if value is None or not math.isfinite(value):
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def currency_of(field_units: Mapping[str, str], key: str) -> str:
    return field_units.get(key) or DEFAULT_CURRENCY


def base_value(
    values: Mapping[str, Any],
    field_units: Mapping[str, str],
    key: str,
    unit_type: str,
    default_unit: str,
) -> float | None:
    """Value of a unit-bearing field converted to its base unit.

    Returns None when the field is absent or its value cannot be read in
    the field's unit (text in a cm field, "tall" as feet and inches).
    An unknown unit still raises ``UnsupportedUnit``.
    """
    raw = values.get(key)
    if raw is None or isinstance(raw, bool):
        return None
    unit = field_units.get(key) or default_unit
    if unit.lower() == "ft_in":
        try:
            inches = parse_feet_inches(raw)
        except (UnsupportedUnit, TypeError, ValueError):
            return None
        converted = convert_to_base(inches, "in", unit_type)
    else:
        try:
            magnitude = float(raw)
        except (TypeError, ValueError):
            return None
        converted = convert_to_base(magnitude, unit, unit_type)
    return converted if math.isfinite(converted) else None
