"""Display formatting and chart/table derivation shared by calculators.

This module provides:
- Number, currency, percentage, compact and duration formatting
- The amortization recurrence used for both loan totals and loan charts
- Yearly roll-up of a monthly schedule for charting
- comparison_rows, which re-runs a calculator's core helper across fixed
  parameter variants to build comparison tables
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Iterable, Mapping

from .config import MAX_SCHEDULE_PERIODS
from .units import DEFAULT_CURRENCIES, CurrencySymbols

# Balances below this are treated as paid off (floating-point residue)
_BALANCE_EPSILON = 1e-6


def auto_decimals(value: float) -> int:
    """Decimal places for a value by magnitude: small values get more precision."""
    magnitude = abs(value)
    if magnitude < 1:
        return 3
    if magnitude < 100:
        return 2
    if magnitude < 1000:
        return 1
    return 0


def format_number(
    value: float,
    decimals: int | None = None,
    thousands_separator: str = ",",
    decimal_separator: str = ".",
    show_sign: bool = False,
) -> str:
    """Format a number with thousands separators and fixed precision.

    Args:
        value: Number to format
        decimals: Fixed decimal places, or None to pick by magnitude
        thousands_separator: Separator between groups of three digits
        decimal_separator: Separator before the fractional part
        show_sign: Prefix positive values with "+"

    Returns:
        Formatted string, e.g. "24,490" or "0.125"
    """
    if value is None or (isinstance(value, float) and not math.isfinite(value)):
        return "—"
    if decimals is None:
        decimals = auto_decimals(value)
    fixed = f"{abs(value):.{decimals}f}"
    int_part, _, dec_part = fixed.partition(".")
    groups = []
    while len(int_part) > 3:
        groups.insert(0, int_part[-3:])
        int_part = int_part[:-3]
    groups.insert(0, int_part)
    text = thousands_separator.join(groups)
    if dec_part:
        text = f"{text}{decimal_separator}{dec_part}"
    if value < 0 and float(fixed) != 0:
        text = "-" + text
    elif show_sign and value > 0:
        text = "+" + text
    return text


def format_compact(value: float, decimals: int = 1) -> str:
    """Abbreviate large numbers with K/M/B/T suffixes."""
    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"{sign}{magnitude / threshold:.{decimals}f}{suffix}"
    return f"{sign}{magnitude:.{decimals}f}"


def format_currency(
    value: float,
    code: str | None = "USD",
    symbols: CurrencySymbols = DEFAULT_CURRENCIES,
    decimals: int | None = None,
    compact: bool = False,
) -> str:
    """Format an amount with the currency's glyph, precision and separators.

    The amount is never converted between currencies.

    Example:
        >>> format_currency(24490, "USD")
        '$24,490.00'
        >>> format_currency(1234.5, "EUR")
        '1.234,50 €'
    """
    fmt = symbols.format_for(code)
    places = fmt.decimals if decimals is None else decimals
    if compact and abs(value) >= 1000:
        body = format_compact(value, 1)
    else:
        body = format_number(
            value,
            decimals=places,
            thousands_separator=fmt.thousands_separator,
            decimal_separator=fmt.decimal_separator,
        )
    if fmt.position == "after":
        return f"{body} {fmt.symbol.strip()}"
    return f"{fmt.symbol}{body}"


def format_percent(value: float, decimals: int = 1, multiply: bool = False) -> str:
    """Format a percentage; ``multiply`` treats ``value`` as a fraction (0.15 -> 15%)."""
    percent = value * 100 if multiply else value
    return f"{percent:.{decimals}f}%"


_DURATION_UNITS = (
    (86400, "day", "days"),
    (3600, "hour", "hours"),
    (60, "minute", "minutes"),
    (1, "second", "seconds"),
)


def format_duration(total_seconds: float, labels: Mapping[str, str] | None = None) -> str:
    """Spell out a duration, e.g. "2 hours, 13 minutes, 20 seconds".

    Seconds are dropped once the duration reaches a day. ``labels`` maps
    the English unit words (and "less_than_a_second") to localized text.
    """
    labels = labels or {}
    if total_seconds < 1:
        return labels.get("less_than_a_second", "Less than a second")
    remaining = int(total_seconds)
    parts = []
    for size, singular, plural in _DURATION_UNITS:
        count, remaining = divmod(remaining, size)
        if count <= 0:
            continue
        if size == 1 and total_seconds >= 86400:
            continue
        word = labels.get(singular, singular) if count == 1 else labels.get(plural, plural)
        parts.append(f"{count} {word}")
    return ", ".join(parts)


def format_duration_compact(total_seconds: float) -> str:
    """Short duration for table cells, e.g. "3 min 20 sec"."""
    if total_seconds < 0.01:
        return "instant"
    if total_seconds < 1:
        return f"{round(total_seconds * 1000)} ms"
    if total_seconds < 60:
        return f"{math.ceil(total_seconds)} sec"
    if total_seconds < 3600:
        minutes, seconds = divmod(int(total_seconds), 60)
        return f"{minutes} min {seconds} sec" if seconds else f"{minutes} min"
    if total_seconds < 86400:
        hours, rest = divmod(int(total_seconds), 3600)
        minutes = rest // 60
        return f"{hours} hr {minutes} min" if minutes else f"{hours} hr"
    days, rest = divmod(int(total_seconds), 86400)
    hours = rest // 3600
    return f"{days} d {hours} hr" if hours else f"{days} d"


def format_months(months: int, labels: Mapping[str, str] | None = None) -> str:
    """Express a month count as years and months, e.g. "4 years 2 months"."""
    labels = labels or {}
    years, rest = divmod(int(months), 12)

    def _word(count: int, singular: str, plural: str) -> str:
        return labels.get(singular, singular) if count == 1 else labels.get(plural, plural)

    parts = []
    if years:
        parts.append(f"{years} {_word(years, 'year', 'years')}")
    if rest or not years:
        parts.append(f"{rest} {_word(rest, 'month', 'months')}")
    return " ".join(parts)


@dataclass(frozen=True)
class ScheduleRow:
    """One month of an amortization schedule."""

    period: int
    payment: float
    principal: float
    interest: float
    balance: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def annuity_payment(principal: float, annual_rate_percent: float, months: int) -> float:
    """Level monthly payment that repays ``principal`` over ``months``."""
    if months <= 0:
        raise ValueError("months must be positive")
    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate == 0:
        return principal / months
    factor = (1 + monthly_rate) ** months
    return principal * monthly_rate * factor / (factor - 1)


def amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    months: int,
    extra_payment: float = 0.0,
    payment: float | None = None,
) -> list[ScheduleRow]:
    """Walk the month-by-month balance recurrence.

    Each month accrues interest on the remaining balance, then applies the
    level payment (plus ``extra_payment``) with the principal portion capped
    at the balance. The walk stops when the balance is repaid or after
    ``months`` periods, whichever comes first.

    Args:
        principal: Amount financed
        annual_rate_percent: Nominal annual rate, e.g. 5.9
        months: Contractual term
        extra_payment: Additional principal paid every month
        payment: Level payment; computed from the annuity formula if omitted

    Returns:
        One ScheduleRow per month actually paid
    """
    months = min(int(months), MAX_SCHEDULE_PERIODS)
    if principal <= 0 or months <= 0:
        return []
    if payment is None:
        payment = annuity_payment(principal, annual_rate_percent, months)
    monthly_rate = annual_rate_percent / 100 / 12

    rows: list[ScheduleRow] = []
    balance = principal
    for period in range(1, months + 1):
        if balance <= 0:
            break
        interest = balance * monthly_rate
        principal_part = min(payment - interest + extra_payment, balance)
        balance -= principal_part
        if balance < _BALANCE_EPSILON:
            balance = 0.0
        rows.append(
            ScheduleRow(
                period=period,
                payment=principal_part + interest,
                principal=principal_part,
                interest=interest,
                balance=balance,
            )
        )
    return rows


def schedule_totals(rows: Iterable[ScheduleRow]) -> dict[str, float]:
    """Sum a schedule in period order: principal, interest and payments."""
    totals = {"principal": 0.0, "interest": 0.0, "paid": 0.0, "periods": 0}
    for row in rows:
        totals["principal"] += row.principal
        totals["interest"] += row.interest
        totals["paid"] += row.payment
        totals["periods"] += 1
    return totals


def yearly_rollup(rows: Iterable[ScheduleRow]) -> list[dict[str, Any]]:
    """Group a monthly schedule into one chart row per year.

    Each row carries the year's principal and interest plus running
    cumulative totals, so the last row reconciles with ``schedule_totals``.
    """
    chart: list[dict[str, Any]] = []
    year_principal = year_interest = 0.0
    cumulative_principal = cumulative_interest = 0.0
    rows = list(rows)
    for index, row in enumerate(rows):
        year_principal += row.principal
        year_interest += row.interest
        cumulative_principal += row.principal
        cumulative_interest += row.interest
        if row.period % 12 == 0 or index == len(rows) - 1:
            chart.append(
                {
                    "year": (row.period + 11) // 12,
                    "principal": year_principal,
                    "interest": year_interest,
                    "cumulative_principal": cumulative_principal,
                    "cumulative_interest": cumulative_interest,
                    "balance": row.balance,
                }
            )
            year_principal = year_interest = 0.0
    return chart


def comparison_rows(
    variants: Iterable[Any],
    core: Callable[[Any], Mapping[str, Any]],
    key: str = "variant",
) -> list[dict[str, Any]]:
    """Evaluate ``core`` once per variant and collect the rows.

    ``core`` must be the same helper the main computation uses, so table
    rows and the headline result cannot drift apart.
    """
    table = []
    for variant in variants:
        row = {key: variant}
        row.update(core(variant))
        table.append(row)
    return table
