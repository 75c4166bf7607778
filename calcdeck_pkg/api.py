"""Public API for Calcdeck - returns structured objects without side effects."""

from __future__ import annotations

from typing import Any, Mapping

from .calculators import AVAILABLE_CALCS, get_calculator
from .config import DEFAULT_LOCALE
from .contract import Calculator, CalculatorConfig, collect_problems
from .logging_config import get_logger
from .resolution import resolve_inputs
from .translate import render_bundle
from .types import (
    ConfigurationError,
    ResolvedInputs,
    ResultsEnvelope,
    UnsupportedUnit,
    ValidationError,
)

logger = get_logger("api")


def _calculator(calc_id: str) -> Calculator:
    calc = get_calculator(calc_id)
    if calc is None:
        raise ValidationError(f"Unknown calculator '{calc_id}'", code="UNKNOWN_CALCULATOR")
    return calc


def list_calculators() -> list[str]:
    """Ids of every registered calculator, in registration order.

    Example:
        >>> from calcdeck_pkg.api import list_calculators
        >>> "auto_loan" in list_calculators()
        True
    """
    return list(AVAILABLE_CALCS)


def get_config(calc_id: str) -> CalculatorConfig:
    """Return the declarative configuration of one calculator.

    Raises:
        ValidationError: If ``calc_id`` is not registered
    """
    return _calculator(calc_id).config


def get_translation(calc_id: str, locale: str = DEFAULT_LOCALE) -> tuple[dict[str, Any], bool]:
    """Translation bundle for ``locale`` with English filling the gaps.

    Returns:
        Tuple of (bundle, is_fallback); ``is_fallback`` is True when the
        calculator has no bundle for ``locale``
    """
    return render_bundle(get_config(calc_id).t, locale)


def resolve(
    calc_id: str,
    values: Mapping[str, Any] | None = None,
    units: Mapping[str, str] | None = None,
    preset: str | None = None,
) -> ResolvedInputs:
    """Resolve raw form state without computing, for hosts that render the form."""
    return resolve_inputs(get_config(calc_id), values, units, preset)


def calculate(
    calc_id: str,
    values: Mapping[str, Any] | None = None,
    units: Mapping[str, str] | None = None,
    locale: str = DEFAULT_LOCALE,
    preset: str | None = None,
) -> ResultsEnvelope:
    """Resolve inputs and run a calculator's compute function.

    Args:
        calc_id: Registered calculator id (e.g., "auto_loan")
        values: Raw input values keyed by input id, applied in order
        units: Display unit per unit-bearing field (e.g., {"weight": "kg"})
        locale: Locale of the text handed to compute
        preset: Optional preset id applied before ``values``

    Returns:
        ResultsEnvelope; ``is_valid`` is False when inputs are incomplete
        or out of range

    Raises:
        ValidationError: Unknown calculator or preset
        UnsupportedUnit: A unit not allowed for its field

    Example:
        >>> from calcdeck_pkg.api import calculate
        >>> result = calculate("bmi", {"weight": 70, "height": 175})
        >>> result.formatted["bmi"]
        '22.9'
    """
    calc = _calculator(calc_id)
    resolved = resolve_inputs(calc.config, values, units, preset)
    bundle, is_fallback = render_bundle(calc.config.t, locale)
    logger.debug(
        "Computing '%s' with %s",
        calc_id,
        resolved.values,
        extra={"calc_id": calc_id, "locale": locale, "locale_fallback": is_fallback},
    )
    return calc.compute(values=resolved.values, field_units=resolved.field_units, t=bundle)


def validate_all() -> dict[str, list[str]]:
    """Authoring problems per registered calculator (empty lists when clean)."""
    report: dict[str, list[str]] = {}
    for calc_id, calc in AVAILABLE_CALCS.items():
        try:
            report[calc_id] = collect_problems(calc.config)
        except ConfigurationError as exc:
            report[calc_id] = [exc.message, *exc.problems]
        except UnsupportedUnit as exc:
            report[calc_id] = [exc.message]
    return report
