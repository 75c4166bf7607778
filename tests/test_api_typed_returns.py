"""Test that API functions return typed objects and raise typed errors."""

import pytest

from calcdeck_pkg.api import (
    calculate,
    get_config,
    get_translation,
    list_calculators,
    resolve,
    validate_all,
)
from calcdeck_pkg.contract import CalculatorConfig
from calcdeck_pkg.types import (
    ResolvedInputs,
    ResultsEnvelope,
    UnsupportedUnit,
    ValidationError,
)


class TestAPITypedReturns:
    """Test that all API functions return typed objects."""

    def test_list_calculators_returns_ids(self):
        ids = list_calculators()
        assert isinstance(ids, list)
        assert ids[0] == "auto_loan"
        assert "roofing" in ids

    def test_get_config_returns_calculator_config(self):
        config = get_config("tip")
        assert isinstance(config, CalculatorConfig)
        assert config.id == "tip"
        assert config.input("service_quality").default_value == "good"

    def test_calculate_returns_envelope(self):
        result = calculate("bmi", {"weight": 70, "height": 175})
        assert isinstance(result, ResultsEnvelope)
        assert result.is_valid is True
        assert result.formatted["bmi"] == "22.9"

    def test_invalid_inputs_return_envelope(self):
        result = calculate("bmi", {"weight": 70})
        assert isinstance(result, ResultsEnvelope)
        assert result.is_valid is False
        assert result.chart_data is None
        assert repr(result) == "ResultsEnvelope(is_valid=False)"

    def test_resolve_returns_resolved_inputs(self):
        resolved = resolve("tip", {"bill_amount": 20})
        assert isinstance(resolved, ResolvedInputs)
        assert resolved.to_dict()["values"]["bill_amount"] == 20

    def test_envelope_to_dict(self):
        data = calculate("tip", {"bill_amount": 40}).to_dict()
        assert set(data) == {"is_valid", "values", "formatted", "summary", "metadata"}
        assert "chart_data" in data["metadata"]

    def test_get_translation(self):
        bundle, is_fallback = get_translation("tip", "es")
        assert is_fallback is False
        assert bundle["results"]["tip_amount"]["label"] == "Propina"

    def test_get_translation_fallback(self):
        bundle, is_fallback = get_translation("tip", "de")
        assert is_fallback is True
        assert bundle["results"]["tip_amount"]["label"] == "Tip"

    def test_unknown_locale_still_computes(self):
        result = calculate("tip", {"bill_amount": 75}, locale="de")
        assert result.is_valid
        assert result.summary.startswith("Tip: $13.50")

    def test_validate_all_is_clean(self):
        report = validate_all()
        assert set(report) == set(list_calculators())
        assert all(problems == [] for problems in report.values())


class TestAPIErrors:
    def test_unknown_calculator(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate("mortgage")
        assert exc_info.value.code == "UNKNOWN_CALCULATOR"
        assert "mortgage" in str(exc_info.value)

    def test_unknown_calculator_config(self):
        with pytest.raises(ValidationError):
            get_config("mortgage")

    def test_unknown_preset(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate("auto_loan", preset="spaceship")
        assert exc_info.value.code == "UNKNOWN_PRESET"

    def test_unsupported_unit(self):
        with pytest.raises(UnsupportedUnit):
            calculate("bmi", {"weight": 70, "height": 175}, units={"weight": "furlong"})
