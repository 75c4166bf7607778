"""Resolve raw form state into the inputs a compute function receives.

Resolution runs in four passes over one configuration:
1. defaults (values and units) for every declared input
2. linked values triggered by those defaults
3. preset overlay, then user overlay, in the order values were given; each
   assignment immediately applies the linked values it triggers
4. show_when filtering, in dependency order, removing hidden fields
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from . import units
from .contract import CalculatorConfig, InputDefinition, dependency_order
from .logging_config import get_logger
from .types import ResolvedInputs, UnsupportedUnit, ValidationError

logger = get_logger("resolution")

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def _reads_as_feet_inches(text: str) -> bool:
    try:
        units.parse_feet_inches(text)
    except UnsupportedUnit:
        return False
    return True


def _coerce(inp: InputDefinition, value: Any) -> Any:
    """Coerce a raw value to the type the input declares.

    Values that cannot be read are returned as ``None`` ("not provided").
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    if inp.type == "toggle":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS:
            return True
        if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
            return False
        if isinstance(value, (int, float)):
            return bool(value)
        logger.warning("Cannot read %r as a toggle for '%s'", value, inp.id)
        return None
    if inp.is_numeric:
        if inp.unit_type and inp.default_unit and isinstance(value, (tuple, list, dict, units.FeetInches)):
            # Composite entries (feet + inches) are parsed at conversion time
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                logger.warning("Ignoring non-finite value %r for '%s'", value, inp.id)
                return None
            return value
        if isinstance(value, str):
            text = value.strip().replace(",", "")
            try:
                number = float(text)
            except ValueError:
                if inp.unit_type == "height" and _reads_as_feet_inches(value):
                    return value
                logger.warning("Cannot read %r as a number for '%s'", value, inp.id)
                return None
            if not math.isfinite(number):
                logger.warning("Ignoring non-finite value %r for '%s'", value, inp.id)
                return None
            return int(number) if number.is_integer() and "." not in text else number
        logger.warning("Unexpected %s value for '%s'", type(value).__name__, inp.id)
        return None
    if inp.is_enumerated:
        if value in inp.options:
            return value
        if str(value) in inp.options:
            return str(value)
        logger.warning("Ignoring %r: not an option of '%s'", value, inp.id)
        return None
    return value


def is_visible(inp: InputDefinition, values: Mapping[str, Any]) -> bool:
    """True when every ``show_when`` condition of ``inp`` holds.

    A condition on a field absent from ``values`` (hidden or never set)
    does not hold.
    """
    for cond in inp.conditions:
        if cond.field not in values:
            return False
        if not cond.matches(values[cond.field]):
            return False
    return True


class _Resolver:
    """Mutable working state for one resolution pass."""

    def __init__(self, config: CalculatorConfig):
        self.config = config
        self.by_id = {inp.id: inp for inp in config.inputs}
        self.values: dict[str, Any] = {}
        self.field_units: dict[str, str] = {}
        self.requested_units: dict[str, str] = {}

    def assign(self, input_id: str, raw: Any, source: str) -> None:
        inp = self.by_id.get(input_id)
        if inp is None:
            logger.warning("Ignoring %s value for undeclared input '%s'", source, input_id)
            return
        self.values[input_id] = _coerce(inp, raw)
        if input_id in self.requested_units:
            self.field_units[input_id] = self.requested_units[input_id]
        self.apply_links(inp)

    def apply_links(self, inp: InputDefinition) -> None:
        current = self.values.get(inp.id)
        if current is None or not inp.linked_values:
            return
        try:
            targets = inp.linked_values.get(current)
        except TypeError:
            return
        if not targets:
            return
        for target_id, linked in targets.items():
            target = self.by_id[target_id]
            logger.debug("'%s'=%r sets '%s' to %r", inp.id, current, target_id, linked)
            self.values[target_id] = _coerce(target, linked)
            if target.default_unit:
                self.field_units[target_id] = target.default_unit
            self.apply_links(target)

    def set_unit(self, input_id: str, unit: str, source: str) -> None:
        inp = self.by_id.get(input_id)
        if inp is None:
            logger.warning("Ignoring %s unit for undeclared input '%s'", source, input_id)
            return
        if not inp.unit_type:
            logger.warning("Ignoring unit %r for '%s': field has no unit type", unit, input_id)
            return
        matched = _match_unit(inp, unit)
        if matched is None:
            raise UnsupportedUnit(
                f"Unit '{unit}' is not allowed for '{input_id}' "
                f"(allowed: {', '.join(inp.allowed_units)})"
            )
        self.requested_units[input_id] = matched
        self.field_units[input_id] = matched


def _match_unit(inp: InputDefinition, unit: str) -> str | None:
    if not isinstance(unit, str):
        return None
    for allowed in inp.allowed_units:
        if allowed == unit:
            return allowed
        if inp.unit_type == "currency" and allowed.upper() == unit.upper():
            return allowed
        if inp.unit_type != "currency" and allowed.lower() == unit.lower():
            return allowed
    return None


def resolve_inputs(
    config: CalculatorConfig,
    raw_values: Mapping[str, Any] | None = None,
    units_by_field: Mapping[str, str] | None = None,
    preset: str | None = None,
) -> ResolvedInputs:
    """Build the Resolved Input Set for one invocation.

    Args:
        config: Calculator configuration
        raw_values: User-entered values keyed by input id. Applied in
            mapping order, so a later assignment to a field overrides an
            earlier linked value.
        units_by_field: Display unit chosen per unit-bearing field
        preset: Optional preset id, applied before ``raw_values``

    Returns:
        ResolvedInputs with hidden fields removed from both mappings

    Raises:
        UnsupportedUnit: If a unit is not allowed for its field
        ValidationError: If ``preset`` is not declared
    """
    order = dependency_order(config)
    state = _Resolver(config)

    for inp in config.inputs:
        state.values[inp.id] = _coerce(inp, inp.default_value)
        if inp.unit_type and inp.default_unit:
            state.field_units[inp.id] = inp.default_unit
    for input_id in order:
        state.apply_links(state.by_id[input_id])

    if preset is not None:
        chosen = config.preset(preset)
        if chosen is None:
            raise ValidationError(
                f"Calculator '{config.id}' has no preset '{preset}'", code="UNKNOWN_PRESET"
            )
        for input_id, value in chosen.values.items():
            state.assign(input_id, value, "preset")
        for input_id, unit in chosen.units.items():
            state.set_unit(input_id, unit, "preset")

    for input_id, unit in (units_by_field or {}).items():
        state.set_unit(input_id, unit, "request")
    for input_id, value in (raw_values or {}).items():
        state.assign(input_id, value, "request")

    values: dict[str, Any] = {}
    for input_id in order:
        inp = state.by_id[input_id]
        if is_visible(inp, values):
            values[input_id] = state.values.get(input_id)
        else:
            logger.debug("'%s' hidden by show_when", input_id)

    field_units = {k: v for k, v in state.field_units.items() if k in values}
    ordered = {inp.id: values[inp.id] for inp in config.inputs if inp.id in values}
    return ResolvedInputs(values=ordered, field_units=field_units)
