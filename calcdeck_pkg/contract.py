"""Declarative calculator configuration and its authoring-time validation.

This module defines:
- InputDefinition, ShowWhen, ResultDefinition, Preset and CalculatorConfig,
  the immutable vocabulary every calculator is written in
- Calculator, which pairs a configuration with its compute function
- validate_config / collect_problems, the fail-fast checks run when the
  registry loads and in the test suite
- dependency_order, the show-when / linked-values graph in evaluation order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Protocol

from . import units
from .config import DEFAULT_LOCALE
from .logging_config import get_logger
from .types import ConfigurationError, ResultsEnvelope, UnsupportedUnit

logger = get_logger("contract")

INPUT_TYPES = ("number", "select", "radio", "toggle", "stepper", "slider", "imageradio")
ENUMERATED_TYPES = ("select", "radio", "imageradio")
NUMERIC_TYPES = ("number", "stepper", "slider")
RESULT_TYPES = ("primary", "secondary", "badge")
RESULT_FORMATS = ("currency", "number", "percent", "text")


def _freeze(mapping: Mapping | None) -> Mapping:
    if mapping is None:
        return MappingProxyType({})
    return MappingProxyType(
        {
            k: _freeze(v) if isinstance(v, Mapping) else v
            for k, v in mapping.items()
        }
    )


@dataclass(frozen=True)
class ShowWhen:
    """Visibility condition: ``field`` must currently equal ``value``.

    A tuple ``value`` means the field may equal any of its members.
    """

    field: str
    value: Any

    def matches(self, current: Any) -> bool:
        if isinstance(self.value, tuple):
            return current in self.value
        return current == self.value

    def expected_values(self) -> tuple:
        return self.value if isinstance(self.value, tuple) else (self.value,)


@dataclass(frozen=True)
class InputDefinition:
    """One field of a calculator form."""

    id: str
    type: str = "number"
    default_value: Any = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: tuple = ()
    unit_type: str | None = None
    default_unit: str | None = None
    allowed_units: tuple[str, ...] = ()
    show_when: ShowWhen | tuple[ShowWhen, ...] | None = None
    linked_values: Mapping[Any, Mapping[str, Any]] = field(default_factory=dict)
    required: bool = False
    suffix: str | None = None
    placeholder: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "allowed_units", tuple(self.allowed_units))
        object.__setattr__(self, "linked_values", _freeze(self.linked_values))
        if self.unit_type and not self.allowed_units and self.default_unit:
            object.__setattr__(self, "allowed_units", (self.default_unit,))

    @property
    def conditions(self) -> tuple[ShowWhen, ...]:
        if self.show_when is None:
            return ()
        if isinstance(self.show_when, ShowWhen):
            return (self.show_when,)
        return tuple(self.show_when)

    @property
    def is_enumerated(self) -> bool:
        return self.type in ENUMERATED_TYPES

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    def valid_choices(self) -> tuple:
        """Values an enumerated or toggle field can hold."""
        if self.type == "toggle":
            return (True, False)
        return self.options


@dataclass(frozen=True)
class ResultDefinition:
    """One displayed result, in display order."""

    id: str
    type: str = "secondary"
    format: str = "text"
    decimals: int | None = None


@dataclass(frozen=True)
class Preset:
    """Named bundle of input values for a one-click scenario."""

    id: str
    values: Mapping[str, Any]
    units: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", _freeze(self.values))
        object.__setattr__(self, "units", _freeze(self.units))


@dataclass(frozen=True)
class CalculatorConfig:
    """Everything the host needs to render a calculator, and nothing it computes."""

    id: str
    version: str
    category: str
    inputs: tuple[InputDefinition, ...]
    results: tuple[ResultDefinition, ...]
    t: Mapping[str, Mapping[str, Any]]
    icon: str = ""
    presets: tuple[Preset, ...] = ()
    # Opaque to the engine, passed through to the renderer
    chart: Mapping[str, Any] | None = None
    detailed_table: Mapping[str, Any] | None = None
    education_sections: tuple = ()
    faqs: tuple = ()
    references: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "results", tuple(self.results))
        object.__setattr__(self, "presets", tuple(self.presets))
        object.__setattr__(self, "t", _freeze(self.t))
        if self.chart is not None:
            object.__setattr__(self, "chart", _freeze(self.chart))
        if self.detailed_table is not None:
            object.__setattr__(self, "detailed_table", _freeze(self.detailed_table))

    def input(self, input_id: str) -> InputDefinition | None:
        for inp in self.inputs:
            if inp.id == input_id:
                return inp
        return None

    def input_ids(self) -> tuple[str, ...]:
        return tuple(inp.id for inp in self.inputs)

    def preset(self, preset_id: str) -> Preset | None:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        return None

    def locales(self) -> tuple[str, ...]:
        return tuple(self.t)


class ComputeFn(Protocol):
    """Call signature every calculator's compute function implements."""

    def __call__(
        self,
        *,
        values: Mapping[str, Any],
        field_units: Mapping[str, str],
        t: Mapping[str, Any],
    ) -> ResultsEnvelope: ...


@dataclass(frozen=True)
class Calculator:
    """A configuration paired with the code that computes its results."""

    config: CalculatorConfig
    compute: ComputeFn

    @property
    def id(self) -> str:
        return self.config.id


def dependency_order(config: CalculatorConfig) -> tuple[str, ...]:
    """Order input ids so every field comes after the fields it depends on.

    A ``show_when`` on A referencing B puts B before A. A ``linked_values``
    entry on A writing into C puts A before C. Ties keep declaration order.

    Raises:
        ConfigurationError: If the dependency graph has a cycle
    """
    ids = config.input_ids()
    known = set(ids)
    edges: dict[str, set[str]] = {i: set() for i in ids}
    for inp in config.inputs:
        for cond in inp.conditions:
            if cond.field in known and cond.field != inp.id:
                edges[cond.field].add(inp.id)
        for targets in inp.linked_values.values():
            for target in targets:
                if target in known and target != inp.id:
                    edges[inp.id].add(target)

    indegree = {i: 0 for i in ids}
    for dependents in edges.values():
        for dep in dependents:
            indegree[dep] += 1

    order: list[str] = []
    ready = [i for i in ids if indegree[i] == 0]
    while ready:
        current = ready.pop(0)
        order.append(current)
        for dep in sorted(edges[current], key=ids.index):
            indegree[dep] -= 1
            if indegree[dep] == 0:
                ready.append(dep)
        ready.sort(key=ids.index)

    if len(order) != len(ids):
        stuck = [i for i in ids if i not in order]
        raise ConfigurationError(
            f"Calculator '{config.id}' has a show_when/linked_values cycle",
            problems=[f"cycle involves: {', '.join(stuck)}"],
        )
    return tuple(order)


def _check_inputs(config: CalculatorConfig, problems: list[str]) -> None:
    seen: set[str] = set()
    by_id = {inp.id: inp for inp in config.inputs}
    for inp in config.inputs:
        where = f"input '{inp.id}'"
        if inp.id in seen:
            problems.append(f"{where}: duplicate id")
        seen.add(inp.id)
        if inp.type not in INPUT_TYPES:
            problems.append(f"{where}: unknown type '{inp.type}'")

        if inp.is_enumerated:
            if not inp.options:
                problems.append(f"{where}: {inp.type} input declares no options")
            elif inp.default_value is not None and inp.default_value not in inp.options:
                problems.append(f"{where}: default {inp.default_value!r} is not an option")
        if inp.type == "toggle" and not isinstance(inp.default_value, bool):
            problems.append(f"{where}: toggle default must be True or False")

        if inp.min is not None and inp.max is not None and inp.min > inp.max:
            problems.append(f"{where}: min {inp.min} is greater than max {inp.max}")
        if inp.is_numeric and isinstance(inp.default_value, (int, float)):
            if inp.min is not None and inp.default_value < inp.min:
                problems.append(f"{where}: default {inp.default_value} below min {inp.min}")
            if inp.max is not None and inp.default_value > inp.max:
                problems.append(f"{where}: default {inp.default_value} above max {inp.max}")

        if inp.unit_type is not None:
            _check_units(inp, where, problems)
        elif inp.default_unit or inp.allowed_units:
            problems.append(f"{where}: units declared without a unit_type")

        for cond in inp.conditions:
            target = by_id.get(cond.field)
            if target is None:
                problems.append(f"{where}: show_when references unknown field '{cond.field}'")
            elif target.id == inp.id:
                problems.append(f"{where}: show_when references itself")
            elif target.is_enumerated or target.type == "toggle":
                for expected in cond.expected_values():
                    if expected not in target.valid_choices():
                        problems.append(
                            f"{where}: show_when value {expected!r} is not a choice of '{target.id}'"
                        )

        for option, targets in inp.linked_values.items():
            if option not in inp.valid_choices():
                problems.append(f"{where}: linked_values key {option!r} is not a choice")
            for target_id, linked in targets.items():
                target = by_id.get(target_id)
                if target is None:
                    problems.append(
                        f"{where}: linked_values targets unknown field '{target_id}'"
                    )
                    continue
                if target.id == inp.id:
                    problems.append(f"{where}: linked_values targets itself")
                    continue
                if target.is_numeric and isinstance(linked, (int, float)):
                    if (target.min is not None and linked < target.min) or (
                        target.max is not None and linked > target.max
                    ):
                        problems.append(
                            f"{where}: linked value {linked} outside range of '{target_id}'"
                        )
                elif target.is_enumerated and linked not in target.options:
                    problems.append(
                        f"{where}: linked value {linked!r} is not an option of '{target_id}'"
                    )


def _check_units(inp: InputDefinition, where: str, problems: list[str]) -> None:
    if inp.unit_type not in units.unit_types():
        problems.append(f"{where}: unknown unit_type '{inp.unit_type}'")
        return
    if not inp.default_unit:
        problems.append(f"{where}: unit_type set without default_unit")
    elif inp.default_unit not in inp.allowed_units:
        problems.append(f"{where}: default_unit '{inp.default_unit}' not in allowed_units")
    for unit in inp.allowed_units:
        if not units.is_known_unit(unit, inp.unit_type):
            problems.append(f"{where}: '{unit}' is not a {inp.unit_type} unit")


def _check_results(config: CalculatorConfig, problems: list[str]) -> None:
    seen: set[str] = set()
    for res in config.results:
        where = f"result '{res.id}'"
        if res.id in seen:
            problems.append(f"{where}: duplicate id")
        seen.add(res.id)
        if res.type not in RESULT_TYPES:
            problems.append(f"{where}: unknown type '{res.type}'")
        if res.format not in RESULT_FORMATS:
            problems.append(f"{where}: unknown format '{res.format}'")
    if not any(res.type == "primary" for res in config.results):
        problems.append("no primary result declared")


def _check_presets(config: CalculatorConfig, problems: list[str]) -> None:
    known = set(config.input_ids())
    for preset in config.presets:
        for input_id in list(preset.values) + list(preset.units):
            if input_id not in known:
                problems.append(f"preset '{preset.id}': unknown input '{input_id}'")


def _text_at(bundle: Mapping[str, Any], path: tuple) -> Any:
    current: Any = bundle
    for part in path:
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def validate_translations(config: CalculatorConfig) -> tuple[list[str], list[str]]:
    """Check every locale bundle covers the labels the renderer needs.

    Returns:
        Tuple of (errors, warnings). Missing keys are errors, empty strings
        are warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []
    if DEFAULT_LOCALE not in config.t:
        errors.append(f"no '{DEFAULT_LOCALE}' translation bundle")

    required: list[tuple] = []
    for inp in config.inputs:
        required.append(("inputs", inp.id, "label"))
        if inp.is_enumerated:
            for option in inp.options:
                required.append(("inputs", inp.id, "options", str(option)))
    for res in config.results:
        required.append(("results", res.id, "label"))
    for preset in config.presets:
        required.append(("presets", preset.id, "label"))

    for locale, bundle in config.t.items():
        for path in required:
            text = _text_at(bundle, path)
            key = ".".join(path)
            if text is None:
                errors.append(f"locale '{locale}': missing '{key}'")
            elif not isinstance(text, str):
                errors.append(f"locale '{locale}': '{key}' is not text")
            elif not text.strip():
                warnings.append(f"locale '{locale}': '{key}' is empty")
    return errors, warnings


def collect_problems(config: CalculatorConfig) -> list[str]:
    """Return every authoring problem found in ``config`` (empty when valid)."""
    problems: list[str] = []
    _check_inputs(config, problems)
    _check_results(config, problems)
    _check_presets(config, problems)
    try:
        dependency_order(config)
    except ConfigurationError as exc:
        problems.extend(exc.problems)
    errors, warnings = validate_translations(config)
    problems.extend(errors)
    for warning in warnings:
        logger.warning("%s: %s", config.id, warning)
    return problems


def validate_config(config: CalculatorConfig) -> CalculatorConfig:
    """Fail fast on a badly authored configuration.

    Returns:
        The configuration, unchanged, so the call can wrap a definition

    Raises:
        ConfigurationError: Listing every problem found
    """
    try:
        problems = collect_problems(config)
    except UnsupportedUnit as exc:
        problems = [str(exc)]
    if problems:
        raise ConfigurationError(
            f"Calculator '{config.id}' is misconfigured", problems=problems
        )
    return config
