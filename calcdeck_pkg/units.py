"""Unit conversion between display units and each unit type's base unit.

This module provides:
- convert_to_base / convert_from_base for weight, height, length, data,
  data rate and volume
- Parsing of the composite feet+inches unit into a single scalar
- A pass-through for currency, which is never scaled numerically
- The read-only currency symbol table used by the formatting layer

Conversion factors are exact rationals derived from ``sympy.physics.units``
and computed once per unit type.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Iterator, Mapping, NamedTuple

import sympy as sp
from sympy.physics.units import (
    bit,
    byte,
    centimeter,
    convert_to,
    foot,
    gibibyte,
    gram,
    inch,
    kibibyte,
    kilogram,
    kilometer,
    liter,
    mebibyte,
    meter,
    mile,
    milliliter,
    millimeter,
    pebibyte,
    tebibyte,
    yard,
)

from .logging_config import get_logger
from .types import UnsupportedUnit

logger = get_logger("units")

# International avoirdupois pound, exact by definition
_POUND = sp.Rational(45359237, 100000000) * kilogram
_US_GALLON = 231 * inch**3

# unit type -> (base unit name, base quantity, {unit name: quantity})
_UNIT_TABLE: dict[str, tuple[str, Any, dict[str, Any]]] = {
    "weight": (
        "kg",
        kilogram,
        {
            "kg": kilogram,
            "g": gram,
            "lbs": _POUND,
            "oz": _POUND / 16,
            "st": 14 * _POUND,
        },
    ),
    "height": (
        "cm",
        centimeter,
        {
            "cm": centimeter,
            "m": meter,
            "in": inch,
            "ft": foot,
            "yd": yard,
        },
    ),
    "length": (
        "cm",
        centimeter,
        {
            "mm": millimeter,
            "cm": centimeter,
            "m": meter,
            "km": kilometer,
            "in": inch,
            "ft": foot,
            "yd": yard,
            "mi": mile,
        },
    ),
    "data": (
        "byte",
        byte,
        {
            "bit": bit,
            "byte": byte,
            "kb": 10**3 * byte,
            "mb": 10**6 * byte,
            "gb": 10**9 * byte,
            "tb": 10**12 * byte,
            "pb": 10**15 * byte,
            "kib": kibibyte,
            "mib": mebibyte,
            "gib": gibibyte,
            "tib": tebibyte,
            "pib": pebibyte,
        },
    ),
    # Rates are expressed per second; only the numerator needs scaling.
    "data_rate": (
        "bps",
        bit,
        {
            "bps": bit,
            "kbps": 10**3 * bit,
            "mbps": 10**6 * bit,
            "gbps": 10**9 * bit,
            "byte_s": byte,
            "kb_s": 10**3 * byte,
            "mb_s": 10**6 * byte,
            "gb_s": 10**9 * byte,
        },
    ),
    "volume": (
        "ml",
        milliliter,
        {
            "ml": milliliter,
            "l": liter,
            "fl_oz": _US_GALLON / 128,
            "cup": _US_GALLON / 16,
            "gal": _US_GALLON,
        },
    ),
}

COMPOSITE_UNITS = {"height": ("ft_in",)}
PASS_THROUGH_TYPES = ("currency",)


class FeetInches(NamedTuple):
    """Height expressed as whole feet plus remaining inches."""

    feet: int
    inches: float

    def total_inches(self) -> float:
        return self.feet * 12 + self.inches


@lru_cache(maxsize=None)
def _exact_factors(unit_type: str) -> Mapping[str, sp.Rational]:
    """Exact factor from each unit of ``unit_type`` to its base unit."""
    _, base, units = _UNIT_TABLE[unit_type]
    factors = {}
    for name, quantity in units.items():
        factors[name] = sp.nsimplify(convert_to(quantity, base) / base)
    return MappingProxyType(factors)


@lru_cache(maxsize=None)
def _float_factors(unit_type: str) -> Mapping[str, float]:
    return MappingProxyType(
        {name: float(f) for name, f in _exact_factors(unit_type).items()}
    )


def unit_types() -> tuple[str, ...]:
    """All unit types the engine understands, convertible or not."""
    return tuple(_UNIT_TABLE) + PASS_THROUGH_TYPES


def is_convertible(unit_type: str) -> bool:
    """True when values of ``unit_type`` are scaled to a base unit."""
    return unit_type in _UNIT_TABLE


def base_unit(unit_type: str) -> str:
    if unit_type in PASS_THROUGH_TYPES:
        raise UnsupportedUnit(f"Unit type '{unit_type}' has no numeric base unit")
    try:
        return _UNIT_TABLE[unit_type][0]
    except KeyError:
        raise UnsupportedUnit(f"Unknown unit type '{unit_type}'") from None


def units_for(unit_type: str) -> tuple[str, ...]:
    """Return every unit code accepted for ``unit_type``.

    Raises:
        UnsupportedUnit: If the unit type is unknown
    """
    if unit_type == "currency":
        return DEFAULT_CURRENCIES.codes()
    if unit_type not in _UNIT_TABLE:
        raise UnsupportedUnit(f"Unknown unit type '{unit_type}'")
    return tuple(_UNIT_TABLE[unit_type][2]) + COMPOSITE_UNITS.get(unit_type, ())


def is_known_unit(unit: str, unit_type: str) -> bool:
    try:
        _normalize_unit(unit, unit_type)
    except UnsupportedUnit:
        return False
    return True


def _normalize_unit(unit: str, unit_type: str) -> str:
    if not isinstance(unit, str) or not unit.strip():
        raise UnsupportedUnit(f"Unit must be a non-empty string, got {unit!r}")
    if unit_type == "currency":
        code = unit.strip().upper()
        if code not in DEFAULT_CURRENCIES:
            raise UnsupportedUnit(f"Unknown currency code '{unit}'")
        return code
    key = unit.strip().lower()
    if key not in units_for(unit_type):
        raise UnsupportedUnit(f"Unit '{unit}' is not a {unit_type} unit")
    return key


_FEET_INCHES_RE = re.compile(
    r"""^\s*
    (?P<feet>\d+(?:\.\d+)?)\s*(?:'|ft|feet|foot|-)\s*
    (?:(?P<inches>\d+(?:\.\d+)?)\s*(?:"|''|in|inch|inches)?)?
    \s*$""",
    re.VERBOSE | re.IGNORECASE,
)


def parse_feet_inches(value: Any) -> float:
    """Collapse a feet+inches entry into total inches.

    Accepted forms: ``FeetInches`` or a ``(feet, inches)`` pair, a mapping
    with ``feet``/``inches`` keys, text such as ``5'10"``, ``5 ft 10 in`` or
    ``5-10``, and a plain number read as decimal feet.

    Raises:
        UnsupportedUnit: If the value cannot be read as feet and inches
    """
    if isinstance(value, FeetInches):
        return float(value.total_inches())
    if isinstance(value, bool):
        raise UnsupportedUnit(f"Cannot read {value!r} as feet and inches")
    if isinstance(value, (int, float)):
        return float(value) * 12
    if isinstance(value, Mapping):
        feet = value.get("feet", 0) or 0
        inches = value.get("inches", 0) or 0
        return float(feet) * 12 + float(inches)
    if isinstance(value, (tuple, list)) and len(value) == 2:
        feet, inches = value
        return float(feet or 0) * 12 + float(inches or 0)
    if isinstance(value, str):
        text = value.strip()
        match = _FEET_INCHES_RE.match(text)
        if match:
            inches = match.group("inches")
            return float(match.group("feet")) * 12 + float(inches or 0)
        try:
            return float(text) * 12
        except ValueError:
            pass
    raise UnsupportedUnit(f"Cannot read {value!r} as feet and inches")


def convert_to_base(value: Any, unit: str, unit_type: str) -> float:
    """Convert a display value to the base unit of ``unit_type``.

    Args:
        value: Numeric value (or composite feet+inches entry for ``ft_in``)
        unit: Display unit code, e.g. "lbs", "ft_in", "GB", "USD"
        unit_type: Unit category, e.g. "weight", "height", "data"

    Returns:
        Value expressed in the base unit (kg, cm, bytes, bits/s, mL).
        Currency values are returned unchanged.

    Raises:
        UnsupportedUnit: If the unit or unit type is unknown
    """
    if unit_type in PASS_THROUGH_TYPES:
        _normalize_unit(unit, unit_type)
        return float(value)
    if unit_type not in _UNIT_TABLE:
        raise UnsupportedUnit(f"Unknown unit type '{unit_type}'")
    key = _normalize_unit(unit, unit_type)
    if key == "ft_in":
        return parse_feet_inches(value) * _float_factors(unit_type)["in"]
    return float(value) * _float_factors(unit_type)[key]


def convert_from_base(value: float, unit: str, unit_type: str) -> Any:
    """Convert a base-unit value to a display unit.

    Returns a float, or ``FeetInches`` for the ``ft_in`` composite unit.

    Raises:
        UnsupportedUnit: If the unit or unit type is unknown
    """
    if unit_type in PASS_THROUGH_TYPES:
        _normalize_unit(unit, unit_type)
        return float(value)
    if unit_type not in _UNIT_TABLE:
        raise UnsupportedUnit(f"Unknown unit type '{unit_type}'")
    key = _normalize_unit(unit, unit_type)
    if key == "ft_in":
        total_inches = round(float(value) / _float_factors(unit_type)["in"], 9)
        feet = int(math.floor(total_inches / 12))
        return FeetInches(feet, total_inches - feet * 12)
    return float(value) / _float_factors(unit_type)[key]


def convert(value: Any, from_unit: str, to_unit: str, unit_type: str) -> Any:
    """Convert directly between two display units of the same type."""
    return convert_from_base(convert_to_base(value, from_unit, unit_type), to_unit, unit_type)


def exact_factor(unit: str, unit_type: str) -> sp.Rational:
    """Exact rational factor from ``unit`` to the base unit of ``unit_type``."""
    key = _normalize_unit(unit, unit_type)
    if unit_type in PASS_THROUGH_TYPES:
        return sp.Integer(1)
    if key == "ft_in":
        key = "in"
    return _exact_factors(unit_type)[key]


_IMPERIAL_COUNTRIES = {"US", "LR", "MM"}
_STONE_COUNTRIES = {"GB", "IE"}
_COUNTRY_CURRENCIES = {
    "US": "USD", "CA": "CAD", "MX": "MXN", "BR": "BRL", "AR": "ARS",
    "CL": "CLP", "CO": "COP", "PE": "PEN", "GB": "GBP", "IE": "EUR",
    "ES": "EUR", "FR": "EUR", "DE": "EUR", "PT": "EUR", "IT": "EUR",
    "CH": "CHF", "SE": "SEK", "NO": "NOK", "DK": "DKK", "PL": "PLN",
    "TR": "TRY", "ZA": "ZAR", "AU": "AUD", "NZ": "NZD", "JP": "JPY",
    "CN": "CNY", "KR": "KRW", "IN": "INR", "SG": "SGD", "HK": "HKD",
}


def guess_default_unit(unit_type: str, country: str | None = None) -> str:
    """Pick a sensible display unit for a visitor's country.

    Args:
        unit_type: Unit category
        country: ISO 3166 alpha-2 country code, if known

    Returns:
        A unit code valid for ``unit_type``
    """
    country = (country or "").upper()
    imperial = country in _IMPERIAL_COUNTRIES
    if unit_type == "weight":
        if country in _STONE_COUNTRIES:
            return "st"
        return "lbs" if imperial else "kg"
    if unit_type == "height":
        return "ft_in" if imperial or country in _STONE_COUNTRIES else "cm"
    if unit_type == "length":
        return "ft" if imperial else "m"
    if unit_type == "volume":
        return "fl_oz" if imperial else "ml"
    if unit_type == "data":
        return "gb"
    if unit_type == "data_rate":
        return "mbps"
    if unit_type == "currency":
        return _COUNTRY_CURRENCIES.get(country, "USD")
    raise UnsupportedUnit(f"Unknown unit type '{unit_type}'")


@dataclass(frozen=True)
class CurrencyFormat:
    """How amounts in one currency are displayed."""

    symbol: str
    decimals: int = 2
    position: str = "before"  # "before" or "after" the amount
    thousands_separator: str = ","
    decimal_separator: str = "."


class CurrencySymbols:
    """Read-only table of currency code -> display format.

    Built once and passed to the formatting layer; there is no way to
    register codes after construction.
    """

    def __init__(self, table: Mapping[str, CurrencyFormat], fallback: str = "USD"):
        if fallback not in table:
            raise ValueError(f"Fallback currency '{fallback}' missing from table")
        self._table = MappingProxyType({k.upper(): v for k, v in table.items()})
        self._fallback = fallback

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def codes(self) -> tuple[str, ...]:
        return tuple(self._table)

    def format_for(self, code: str | None) -> CurrencyFormat:
        """Display format for ``code``; unknown codes use the fallback format with a "$" glyph."""
        key = (code or "").upper()
        if key in self._table:
            return self._table[key]
        logger.debug("Unknown currency code %r, using '$'", code)
        fallback = self._table[self._fallback]
        return CurrencyFormat("$", fallback.decimals, fallback.position,
                              fallback.thousands_separator, fallback.decimal_separator)

    def symbol(self, code: str | None) -> str:
        return self.format_for(code).symbol


_DOT_COMMA = {"thousands_separator": ".", "decimal_separator": ","}

DEFAULT_CURRENCIES = CurrencySymbols(
    {
        "USD": CurrencyFormat("$"),
        "EUR": CurrencyFormat("€", position="after", **_DOT_COMMA),
        "GBP": CurrencyFormat("£"),
        "CAD": CurrencyFormat("C$"),
        "AUD": CurrencyFormat("A$"),
        "NZD": CurrencyFormat("NZ$"),
        "MXN": CurrencyFormat("MX$"),
        "BRL": CurrencyFormat("R$", **_DOT_COMMA),
        "ARS": CurrencyFormat("AR$", **_DOT_COMMA),
        "CLP": CurrencyFormat("CLP ", decimals=0, **_DOT_COMMA),
        "COP": CurrencyFormat("COL$", decimals=0, **_DOT_COMMA),
        "PEN": CurrencyFormat("S/"),
        "JPY": CurrencyFormat("¥", decimals=0),
        "CNY": CurrencyFormat("¥"),
        "KRW": CurrencyFormat("₩", decimals=0),
        "INR": CurrencyFormat("₹"),
        "CHF": CurrencyFormat("CHF ", thousands_separator="'"),
        "SEK": CurrencyFormat("kr ", thousands_separator=" ", decimal_separator=","),
        "NOK": CurrencyFormat("kr ", thousands_separator=" ", decimal_separator=","),
        "DKK": CurrencyFormat("kr ", **_DOT_COMMA),
        "PLN": CurrencyFormat("zł ", thousands_separator=" ", decimal_separator=","),
        "TRY": CurrencyFormat("₺", **_DOT_COMMA),
        "ZAR": CurrencyFormat("R", thousands_separator=" "),
        "SGD": CurrencyFormat("S$"),
        "HKD": CurrencyFormat("HK$"),
    }
)
