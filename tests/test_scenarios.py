"""End-to-end calculator scenarios through the public API."""

import unittest

import pytest

from calcdeck_pkg.api import calculate
from calcdeck_pkg.calculators import AVAILABLE_CALCS
from calcdeck_pkg.resolution import resolve_inputs
from calcdeck_pkg.translate import render_bundle

AUTO_LOAN_BASE = {
    "vehicle_price": 35000,
    "down_payment": 5000,
    "include_tradein": True,
    "tradein_value": 8000,
    "tradein_owed": 0,
    "sales_tax": 7,
    "fees": 600,
    "include_tax_in_loan": True,
    "interest_rate": 5.9,
    "loan_term": 5,
}


class TestAutoLoanScenarios(unittest.TestCase):
    def test_tradein_purchase(self):
        result = calculate("auto_loan", AUTO_LOAN_BASE)
        self.assertTrue(result.is_valid)
        self.assertAlmostEqual(result.values["total_loan_amount"], 24490, places=6)
        self.assertEqual(result.formatted["total_loan_amount"], "$24,490.00")
        self.assertAlmostEqual(result.values["monthly_payment"], 472.32, delta=0.01)
        self.assertAlmostEqual(result.values["total_interest"], 3849.34, delta=0.5)
        self.assertEqual(result.values["payoff_time"], 60)
        self.assertIn("5 years", result.summary)

    def test_without_tradein_taxes_full_price(self):
        values = dict(AUTO_LOAN_BASE, include_tradein=False)
        result = calculate("auto_loan", values)
        self.assertTrue(result.is_valid)
        self.assertAlmostEqual(result.values["sales_tax_amount"], 2450)
        self.assertAlmostEqual(result.values["total_loan_amount"], 33050, places=6)

    def test_hidden_tradein_is_not_zero(self):
        # Hidden trade-in must behave as never declared, not as a value
        hidden = calculate("auto_loan", dict(AUTO_LOAN_BASE, include_tradein=False))
        undeclared = dict(AUTO_LOAN_BASE)
        for key in ("include_tradein", "tradein_value", "tradein_owed"):
            undeclared.pop(key)
        plain = calculate("auto_loan", undeclared)
        self.assertEqual(hidden.values, plain.values)

    def test_chart_reconciles_with_totals(self):
        result = calculate("auto_loan", dict(AUTO_LOAN_BASE, include_extra_payment=True,
                                             extra_monthly_payment=100))
        last = result.chart_data[-1]
        self.assertEqual(last["cumulative_interest"], result.values["total_interest"])
        self.assertAlmostEqual(last["cumulative_principal"], result.values["total_loan_amount"], places=6)
        self.assertEqual(len(result.table_data), result.values["payoff_time"])
        self.assertGreater(result.values["interest_saved"], 0)
        self.assertLess(result.values["payoff_time"], 60)

    def test_no_loan_needed(self):
        result = calculate("auto_loan", {"vehicle_price": 10000, "down_payment": 12000})
        self.assertTrue(result.is_valid)
        self.assertEqual(result.values["monthly_payment"], 0.0)
        self.assertEqual(result.formatted["payoff_time"], "No loan needed")

    def test_missing_price_is_invalid(self):
        result = calculate("auto_loan", {"down_payment": 1000})
        self.assertFalse(result.is_valid)
        self.assertEqual(result.values, {})
        self.assertEqual(result.formatted, {})
        self.assertEqual(result.summary, "")

    def test_currency_is_symbol_only(self):
        result = calculate("auto_loan", AUTO_LOAN_BASE, units={"vehicle_price": "EUR"})
        self.assertEqual(result.formatted["total_loan_amount"], "24.490,00 €")
        self.assertAlmostEqual(result.values["total_loan_amount"], 24490, places=6)

    def test_spanish_summary(self):
        result = calculate("auto_loan", AUTO_LOAN_BASE, locale="es")
        self.assertIn("Pago mensual", result.summary)
        self.assertIn("5 años", result.summary)


class TestTipScenarios:
    def test_good_service_sets_eighteen_percent(self):
        result = calculate("tip", {"bill_amount": 75.00, "service_quality": "good"})
        assert result.is_valid
        assert result.values["tip_amount"] == pytest.approx(13.50)
        assert result.values["total_with_tip"] == pytest.approx(88.50)
        assert result.formatted["tip_amount"] == "$13.50"
        assert result.formatted["total_with_tip"] == "$88.50"

    def test_pre_tax_split_four_ways(self):
        result = calculate(
            "tip",
            {
                "bill_amount": 200,
                "tip_calculation": "pre_tax",
                "tax_amount": 16,
                "tip_percent": 20,
                "split_between": 4,
            },
        )
        assert result.is_valid
        assert result.values["tip_calculated_on"] == pytest.approx(184)
        assert result.values["tip_amount"] == pytest.approx(36.80)
        assert result.values["total_per_person"] == pytest.approx(59.20)
        assert result.formatted["total_per_person"] == "$59.20"

    def test_rounding_goes_up(self):
        result = calculate(
            "tip", {"bill_amount": 47.30, "tip_percent": 18, "split_between": 3, "round_total": "nearest_5"}
        )
        # 55.814 / 3 = 18.60 per person, rounded up to 20
        assert result.values["total_per_person"] == pytest.approx(20)
        assert result.values["total_with_tip"] == pytest.approx(60)
        assert result.values["tip_amount"] == pytest.approx(12.70)
        assert result.values["effective_tip_rate"] > 18

    def test_tax_hidden_when_tipping_on_total(self):
        with_tax = calculate("tip", {"bill_amount": 100, "tax_amount": 10})
        without = calculate("tip", {"bill_amount": 100})
        assert with_tax.values == without.values

    def test_table_matches_selected_percent(self):
        result = calculate("tip", {"bill_amount": 80, "tip_percent": 20, "split_between": 2})
        row = next(r for r in result.table_data if r["percent"] == 20)
        assert row["tip"] == result.values["tip_amount"]
        assert row["per_person"] == result.values["total_per_person"]

    def test_zero_tip_is_valid(self):
        result = calculate("tip", {"bill_amount": 50, "tip_percent": 0})
        assert result.is_valid
        assert result.values["tip_amount"] == 0


class TestCaloricDeficitScenario:
    def test_mifflin_twenty_percent(self):
        result = calculate(
            "caloric_deficit",
            {
                "gender": "male",
                "age": 30,
                "weight": 200,
                "height": "5'10\"",
                "activity_level": "moderate",
                "formula": "mifflin",
                "deficit_level": "moderate",
            },
        )
        assert result.is_valid
        assert result.values["bmr"] == pytest.approx(1875, abs=5)
        assert result.values["tdee"] == pytest.approx(2906, abs=5)
        assert result.values["target_calories"] == pytest.approx(2325, abs=5)

    def test_same_person_in_metric(self):
        imperial = calculate("caloric_deficit", {"weight": 200, "height": "5'10\""})
        metric = calculate(
            "caloric_deficit",
            {"weight": 90.718474, "height": 177.8},
            units={"weight": "kg", "height": "cm"},
        )
        assert metric.values["bmr"] == pytest.approx(imperial.values["bmr"])

    def test_katch_without_body_fat_falls_back_to_mifflin(self):
        mifflin = calculate("caloric_deficit", {"weight": 200, "height": "5'10\""})
        katch = calculate("caloric_deficit", {"weight": 200, "height": "5'10\"", "formula": "katch"})
        assert katch.values["bmr"] == pytest.approx(mifflin.values["bmr"])

    def test_body_fat_ignored_unless_katch(self):
        plain = calculate("caloric_deficit", {"weight": 200, "height": "5'10\""})
        stale = calculate("caloric_deficit", {"weight": 200, "height": "5'10\"", "body_fat_percent": 20})
        assert stale.values == plain.values

    def test_goal_drives_weeks_and_chart(self):
        result = calculate("caloric_deficit", preset="example_male")
        weeks = result.values["weeks_to_goal"]
        assert weeks is not None and weeks > 0
        assert len(result.chart_data) == weeks + 5
        assert result.chart_data[-1]["weight"] == pytest.approx(180)
        assert len(result.table_data) == 6

    def test_missing_height_is_invalid(self):
        assert not calculate("caloric_deficit", {"weight": 200}).is_valid


class TestOtherCalculators:
    def test_bmi(self):
        result = calculate("bmi", {"weight": 70, "height": 175})
        assert result.values["bmi"] == pytest.approx(22.857, abs=1e-3)
        assert result.values["category"] == "normal"
        assert result.formatted["category"] == "Normal weight"

    def test_bmi_spanish_category(self):
        result = calculate("bmi", {"weight": 95, "height": 175}, locale="es")
        assert result.formatted["category"] == "Obesidad clase I"

    def test_ideal_weight(self):
        result = calculate("ideal_weight", {"gender": "male", "height": "5'10\""}, units={"current_weight": "kg"})
        # Devine: 50 + 2.3 * 10 inches
        assert result.values["ideal_weight"] == pytest.approx(73.0)
        assert result.values["frame_size"] == "medium"
        assert len(result.table_data) == 5

    def test_ideal_weight_frame_and_current(self):
        result = calculate(
            "ideal_weight",
            {"gender": "male", "height": "5'10\"", "wrist": 8, "current_weight": 200},
        )
        assert result.values["frame_size"] == "large"
        assert result.values["ideal_weight"] == pytest.approx(73.0 * 1.1)
        assert result.values["weight_difference"] > 0

    def test_transfer_time(self):
        result = calculate(
            "transfer_time",
            {"file_size": 10, "connection_type": "custom", "speed": 100, "overhead_percent": 0},
        )
        assert result.values["transfer_time"] == pytest.approx(800)
        assert result.formatted["transfer_time"] == "13 minutes, 20 seconds"

    def test_transfer_time_linked_speed(self):
        result = calculate("transfer_time", {"file_size": 1, "connection_type": "ethernet"})
        assert result.values["effective_speed"] == pytest.approx(900)

    def test_water_intake(self):
        result = calculate("water_intake", preset="active_male")
        assert result.is_valid
        total = result.values["daily_total"]
        assert total >= 1500
        assert result.values["from_food"] + result.values["from_beverages"] == pytest.approx(total)
        assert sum(row["ml"] for row in result.chart_data) == pytest.approx(result.values["from_beverages"])

    def test_water_intake_condition_hidden_for_men(self):
        man = calculate("water_intake", {"gender": "male", "weight": 170, "special_condition": "pregnant"})
        plain = calculate("water_intake", {"gender": "male", "weight": 170})
        assert man.values == plain.values

    def test_roofing_gable(self):
        result = calculate(
            "roofing",
            {"house_length": 40, "house_width": 30, "overhang": 1, "roof_pitch": "6",
             "waste_factor": 10, "include_cost": True, "cost_per_square_foot": 5},
        )
        area = 42 * 32 * (1 + 0.25) ** 0.5
        assert result.values["roof_area"] == pytest.approx(area)
        assert result.values["roof_squares"] == 17
        assert result.values["bundles_needed"] == 51
        assert result.values["ridge_cap"] == pytest.approx(42)
        assert result.values["drip_edge"] == pytest.approx(148)
        assert result.values["estimated_cost"] == pytest.approx(area * 1.1 * 5)

    def test_roofing_flat_metal_in_metres(self):
        result = calculate(
            "roofing",
            {"roof_type": "flat", "house_length": 10, "house_width": 8, "overhang": 0,
             "material_type": "metal", "waste_factor": 0},
            units={"house_length": "m", "house_width": "m", "overhang": "m"},
        )
        assert result.values["roof_area_metric"] == pytest.approx(80)
        assert result.values["bundles_needed"] == 0
        assert result.formatted["bundles_needed"] == "panels (varies by style)"
        assert result.table_data is None


class TestIdempotence:
    @pytest.mark.parametrize(
        "calc_id, values, preset",
        [
            ("auto_loan", AUTO_LOAN_BASE, None),
            ("tip", {"bill_amount": 64.2, "split_between": 3, "round_total": "nearest_1"}, None),
            ("caloric_deficit", {}, "example_male"),
            ("bmi", {"weight": 80, "height": 180}, None),
            ("ideal_weight", {"height": "5'7\"", "current_weight": 150}, None),
            ("transfer_time", {"file_size": 3}, None),
            ("water_intake", {}, "expecting_mom"),
            ("roofing", {"roof_type": "hip", "house_length": 50, "house_width": 35}, None),
        ],
    )
    def test_same_inputs_same_envelope(self, calc_id, values, preset):
        calc = AVAILABLE_CALCS[calc_id]
        resolved = resolve_inputs(calc.config, values, preset=preset)
        bundle, _ = render_bundle(calc.config.t, "en")
        first = calc.compute(values=resolved.values, field_units=resolved.field_units, t=bundle)
        second = calc.compute(values=resolved.values, field_units=resolved.field_units, t=bundle)
        assert first.is_valid
        assert first.to_dict() == second.to_dict()
        assert repr(first) == repr(second)


VALID_INPUTS = {
    "auto_loan": (AUTO_LOAN_BASE, "vehicle_price"),
    "tip": ({"bill_amount": 64.2}, "bill_amount"),
    "caloric_deficit": ({"weight": 200, "height": "5'10\""}, "age"),
    "bmi": ({"weight": 80, "height": 180}, "weight"),
    "ideal_weight": ({"height": "5'7\""}, "height"),
    "transfer_time": ({"file_size": 3}, "file_size"),
    "water_intake": ({"weight": 170}, "weight"),
    "roofing": ({"house_length": 50, "house_width": 35}, "house_length"),
}


class TestMalformedInput:
    def test_every_calculator_is_covered(self):
        assert set(VALID_INPUTS) == set(AVAILABLE_CALCS)

    @pytest.mark.parametrize("calc_id", sorted(VALID_INPUTS))
    def test_baseline_is_valid(self, calc_id):
        values, _ = VALID_INPUTS[calc_id]
        assert calculate(calc_id, values).is_valid

    @pytest.mark.parametrize("bad", ["nan", "inf", "-inf", float("nan"), float("inf")])
    @pytest.mark.parametrize("calc_id", sorted(VALID_INPUTS))
    def test_non_finite_number_is_invalid(self, calc_id, bad):
        values, field = VALID_INPUTS[calc_id]
        result = calculate(calc_id, {**values, field: bad})
        assert result.is_valid is False
        assert result.values == {}
        assert result.summary == ""

    @pytest.mark.parametrize(
        "calc_id, values, units",
        [
            ("bmi", {"weight": 70, "height": "tall"}, {"height": "cm"}),
            ("bmi", {"weight": 70, "height": "5'10\""}, {"height": "cm"}),
            ("bmi", {"weight": 154, "height": "tall"}, {"weight": "lbs", "height": "ft_in"}),
            ("caloric_deficit", {"weight": 200, "height": "tall"}, None),
            ("ideal_weight", {"height": "six feet"}, None),
        ],
    )
    def test_unreadable_height_is_invalid(self, calc_id, values, units):
        assert calculate(calc_id, values, units=units).is_valid is False

    def test_non_finite_optional_input_is_invalid(self):
        result = calculate("auto_loan", {**AUTO_LOAN_BASE, "interest_rate": "nan"})
        assert result.is_valid is False


class TestComputeGuards(unittest.TestCase):
    """Compute functions called without resolution still refuse bad numbers."""

    def _compute(self, calc_id, values, field_units=None):
        calc = AVAILABLE_CALCS[calc_id]
        bundle, _ = render_bundle(calc.config.t, "en")
        return calc.compute(values=values, field_units=field_units or {}, t=bundle)

    def test_infinite_price(self):
        values = dict(resolve_inputs(AVAILABLE_CALCS["auto_loan"].config, AUTO_LOAN_BASE).values)
        values["vehicle_price"] = float("inf")
        self.assertFalse(self._compute("auto_loan", values).is_valid)

    def test_infinite_optional_money_input(self):
        values = dict(resolve_inputs(AVAILABLE_CALCS["auto_loan"].config, AUTO_LOAN_BASE).values)
        values["fees"] = float("inf")
        self.assertFalse(self._compute("auto_loan", values).is_valid)

    def test_nan_age(self):
        values = {"age": float("nan"), "weight": 200, "height": "5'10\""}
        self.assertFalse(self._compute("caloric_deficit", values, {"height": "ft_in"}).is_valid)

    def test_text_height_in_cm(self):
        values = {"weight": 70, "height": "tall"}
        self.assertFalse(self._compute("bmi", values, {"height": "cm"}).is_valid)

    def test_nan_tax_amount(self):
        values = {
            "bill_amount": 50, "tip_percent": 18, "split_between": 1,
            "tip_calculation": "pre_tax", "tax_amount": float("nan"),
        }
        self.assertFalse(self._compute("tip", values).is_valid)
