"""Tests for configuration authoring checks."""

import unittest

import pytest

from calcdeck_pkg.calculators import AVAILABLE_CALCS
from calcdeck_pkg.contract import (
    CalculatorConfig,
    InputDefinition,
    Preset,
    ResultDefinition,
    ShowWhen,
    collect_problems,
    dependency_order,
    validate_config,
    validate_translations,
)
from calcdeck_pkg.types import ConfigurationError

_T = {
    "en": {
        "name": "Demo",
        "inputs": {
            "mode": {"label": "Mode", "options": {"basic": "Basic", "advanced": "Advanced"}},
            "amount": {"label": "Amount"},
            "extra": {"label": "Extra"},
        },
        "results": {"total": {"label": "Total"}},
    }
}


def _config(inputs=None, results=None, t=None, presets=()):
    """Small, valid configuration with pieces swapped in per test."""
    if inputs is None:
        inputs = (
            InputDefinition(
                id="mode", type="radio", default_value="basic", options=("basic", "advanced"),
                linked_values={"advanced": {"amount": 50}},
            ),
            InputDefinition(id="amount", type="number", default_value=10, min=0, max=100),
            InputDefinition(
                id="extra", type="number", default_value=None,
                show_when=ShowWhen("mode", "advanced"),
            ),
        )
    return CalculatorConfig(
        id="demo",
        version="1.0",
        category="test",
        inputs=inputs,
        results=results if results is not None else (ResultDefinition("total", "primary", "number"),),
        t=t if t is not None else _T,
        presets=presets,
    )


class TestRegisteredCalculators:
    @pytest.mark.parametrize("calc_id", sorted(AVAILABLE_CALCS))
    def test_every_registered_config_is_clean(self, calc_id):
        assert collect_problems(AVAILABLE_CALCS[calc_id].config) == []

    @pytest.mark.parametrize("calc_id", sorted(AVAILABLE_CALCS))
    def test_every_show_when_and_link_target_is_declared(self, calc_id):
        config = AVAILABLE_CALCS[calc_id].config
        ids = set(config.input_ids())
        for inp in config.inputs:
            for cond in inp.conditions:
                assert cond.field in ids
            for targets in inp.linked_values.values():
                assert set(targets) <= ids

    def test_eight_calculators_registered(self):
        assert set(AVAILABLE_CALCS) == {
            "auto_loan", "tip", "caloric_deficit", "bmi",
            "ideal_weight", "transfer_time", "water_intake", "roofing",
        }


class TestValidateConfig(unittest.TestCase):
    """Badly authored configurations fail fast."""

    def assertProblem(self, config, fragment):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_config(config)
        joined = "\n".join(ctx.exception.problems)
        self.assertIn(fragment, joined)
        self.assertEqual(ctx.exception.code, "CONFIG_ERROR")

    def test_valid_config_is_returned_unchanged(self):
        config = _config()
        self.assertIs(validate_config(config), config)

    def test_dangling_show_when(self):
        inputs = (
            InputDefinition(id="amount", type="number", default_value=1),
            InputDefinition(id="extra", type="number", show_when=ShowWhen("ghost", True)),
        )
        self.assertProblem(_config(inputs=inputs), "unknown field 'ghost'")

    def test_dangling_linked_value(self):
        inputs = (
            InputDefinition(
                id="mode", type="radio", default_value="basic", options=("basic", "advanced"),
                linked_values={"advanced": {"ghost": 1}},
            ),
            InputDefinition(id="amount", type="number"),
            InputDefinition(id="extra", type="number"),
        )
        self.assertProblem(_config(inputs=inputs), "targets unknown field 'ghost'")

    def test_default_outside_range(self):
        inputs = (
            InputDefinition(id="mode", type="radio", default_value="basic", options=("basic", "advanced")),
            InputDefinition(id="amount", type="number", default_value=500, min=0, max=100),
            InputDefinition(id="extra", type="number"),
        )
        self.assertProblem(_config(inputs=inputs), "above max")

    def test_default_not_an_option(self):
        inputs = (
            InputDefinition(id="mode", type="radio", default_value="expert", options=("basic", "advanced")),
            InputDefinition(id="amount", type="number"),
            InputDefinition(id="extra", type="number"),
        )
        self.assertProblem(_config(inputs=inputs), "is not an option")

    def test_missing_result_label(self):
        results = (
            ResultDefinition("total", "primary", "number"),
            ResultDefinition("unlabelled", "secondary", "number"),
        )
        self.assertProblem(_config(results=results), "missing 'results.unlabelled.label'")

    def test_missing_english_bundle(self):
        t = {"es": _T["en"]}
        self.assertProblem(_config(t=t), "no 'en' translation bundle")

    def test_no_primary_result(self):
        results = (ResultDefinition("total", "secondary", "number"),)
        self.assertProblem(_config(results=results), "no primary result")

    def test_unknown_unit(self):
        inputs = (
            InputDefinition(id="mode", type="radio", default_value="basic", options=("basic", "advanced")),
            InputDefinition(
                id="amount", type="number", unit_type="weight", default_unit="kg",
                allowed_units=("kg", "furlong"),
            ),
            InputDefinition(id="extra", type="number"),
        )
        self.assertProblem(_config(inputs=inputs), "'furlong' is not a weight unit")

    def test_preset_with_unknown_input(self):
        t = {"en": {**_T["en"], "presets": {"p": {"label": "P"}}}}
        config = _config(t=t, presets=(Preset("p", {"ghost": 1}),))
        self.assertProblem(config, "preset 'p': unknown input 'ghost'")

    def test_cycle_is_rejected(self):
        inputs = (
            InputDefinition(
                id="mode", type="radio", default_value="basic", options=("basic", "advanced"),
                show_when=ShowWhen("amount", 1),
            ),
            InputDefinition(
                id="amount", type="select", default_value=1, options=(1, 2),
                show_when=ShowWhen("mode", "basic"),
            ),
            InputDefinition(id="extra", type="number"),
        )
        t = {"en": {**_T["en"], "inputs": {**_T["en"]["inputs"],
                                            "amount": {"label": "Amount", "options": {"1": "1", "2": "2"}}}}}
        self.assertProblem(_config(inputs=inputs, t=t), "cycle involves")


class TestDependencyOrder:
    def test_controller_comes_before_dependents(self):
        order = dependency_order(_config())
        assert order.index("mode") < order.index("amount")
        assert order.index("mode") < order.index("extra")

    def test_declaration_order_breaks_ties(self):
        inputs = (
            InputDefinition(id="extra", type="number", show_when=ShowWhen("mode", "advanced")),
            InputDefinition(id="amount", type="number"),
            InputDefinition(id="mode", type="radio", default_value="basic", options=("basic", "advanced")),
        )
        assert dependency_order(_config(inputs=inputs)) == ("amount", "mode", "extra")

    def test_cycle_raises(self):
        inputs = (
            InputDefinition(id="a", type="toggle", default_value=True, show_when=ShowWhen("b", True)),
            InputDefinition(id="b", type="toggle", default_value=True, show_when=ShowWhen("a", True)),
        )
        with pytest.raises(ConfigurationError):
            dependency_order(_config(inputs=inputs))


class TestTranslations:
    def test_empty_label_is_a_warning_not_an_error(self):
        t = {"en": {**_T["en"], "results": {"total": {"label": "  "}}}}
        errors, warnings = validate_translations(_config(t=t))
        assert errors == []
        assert any("results.total.label" in w for w in warnings)

    def test_missing_option_label(self):
        t = {"en": {**_T["en"], "inputs": {**_T["en"]["inputs"], "mode": {"label": "Mode"}}}}
        errors, _ = validate_translations(_config(t=t))
        assert any("inputs.mode.options.basic" in e for e in errors)


class TestImmutability:
    def test_config_cannot_be_reassigned(self):
        config = _config()
        with pytest.raises(AttributeError):
            config.id = "other"

    def test_nested_mappings_are_read_only(self):
        config = _config()
        with pytest.raises(TypeError):
            config.t["en"]["name"] = "Changed"
        with pytest.raises(TypeError):
            config.inputs[0].linked_values["advanced"]["amount"] = 1
