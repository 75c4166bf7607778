"""Ideal body weight calculator comparing the classic clinical formulas."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..contract import CalculatorConfig, InputDefinition, ResultDefinition
from ..formatting import comparison_rows, format_number, format_percent
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from ..units import convert_from_base
from .bmi import HEALTHY_BMI
from .common import base_value, in_range, number

FORMULAS = ("devine", "robinson", "miller", "hamwi", "broca")
# kg at 5 ft plus kg per inch above 5 ft, per sex
_INCH_FORMULAS = {
    "devine": {"male": (50.0, 2.3), "female": (45.5, 2.3)},
    "robinson": {"male": (52.0, 1.9), "female": (49.0, 1.7)},
    "miller": {"male": (56.2, 1.41), "female": (53.1, 1.36)},
    "hamwi": {"male": (48.0, 2.7), "female": (45.5, 2.2)},
}
# Wrist circumference thresholds in inches: (small below, large above)
FRAME_THRESHOLDS = {"male": (6.5, 7.5), "female": (6.0, 6.25)}
FRAME_FACTORS = {"small": 0.9, "medium": 1.0, "large": 1.1}
HEALTHY_LOSS_KG_PER_WEEK = 0.5

CONFIG = CalculatorConfig(
    id="ideal_weight",
    version="4.0",
    category="health",
    icon="🎯",
    inputs=(
        InputDefinition(id="gender", type="radio", default_value="male", options=("male", "female")),
        InputDefinition(id="age", type="number", default_value=30, min=18, max=100, step=1),
        InputDefinition(
            id="height", type="number", default_value=None,
            unit_type="height", default_unit="ft_in", allowed_units=("cm", "m", "in", "ft_in"),
            required=True,
        ),
        InputDefinition(
            id="current_weight", type="number", default_value=None, min=1,
            unit_type="weight", default_unit="lbs", allowed_units=("kg", "lbs", "st"),
        ),
        InputDefinition(
            id="wrist", type="number", default_value=None, min=3, max=12,
            unit_type="length", default_unit="in", allowed_units=("in", "cm"),
        ),
    ),
    results=(
        ResultDefinition("ideal_weight", "primary", "text"),
        ResultDefinition("formula_range", "secondary", "text"),
        ResultDefinition("healthy_bmi_range", "secondary", "text"),
        ResultDefinition("frame_size", "badge", "text"),
        ResultDefinition("weight_difference", "secondary", "text"),
        ResultDefinition("time_to_goal", "secondary", "text"),
        ResultDefinition("body_fat_estimate", "secondary", "percent", 1),
    ),
    detailed_table={"columns": ["formula", "weight"]},
    t={
        "en": {
            "name": "Ideal Weight Calculator",
            "inputs": {
                "gender": {"label": "Sex", "options": {"male": "Male", "female": "Female"}},
                "age": {"label": "Age"},
                "height": {"label": "Height"},
                "current_weight": {"label": "Current weight"},
                "wrist": {"label": "Wrist circumference", "help_text": "Used to estimate frame size"},
            },
            "results": {
                "ideal_weight": {"label": "Ideal weight (Devine)"},
                "formula_range": {"label": "Range across formulas"},
                "healthy_bmi_range": {"label": "Healthy BMI range"},
                "frame_size": {"label": "Frame size"},
                "weight_difference": {"label": "Difference from ideal"},
                "time_to_goal": {"label": "Time to reach ideal"},
                "body_fat_estimate": {"label": "Estimated body fat"},
            },
            "formats": {"summary": "Your ideal weight is {ideal_weight}, within a range of {formula_range}."},
            "values": {
                "small": "Small", "medium": "Medium", "large": "Large",
                "lose": "Lose", "gain": "Gain", "at_ideal": "Already at your ideal weight",
                "week": "week", "weeks": "weeks",
            },
        },
        "es": {
            "name": "Calculadora de peso ideal",
            "inputs": {
                "gender": {"label": "Sexo", "options": {"male": "Hombre", "female": "Mujer"}},
                "age": {"label": "Edad"},
                "height": {"label": "Altura"},
                "current_weight": {"label": "Peso actual"},
                "wrist": {"label": "Circunferencia de la muñeca"},
            },
            "results": {
                "ideal_weight": {"label": "Peso ideal (Devine)"},
                "formula_range": {"label": "Rango entre fórmulas"},
                "healthy_bmi_range": {"label": "Rango de IMC saludable"},
                "frame_size": {"label": "Complexión"},
                "weight_difference": {"label": "Diferencia con el ideal"},
                "time_to_goal": {"label": "Tiempo para llegar al ideal"},
                "body_fat_estimate": {"label": "Grasa corporal estimada"},
            },
            "formats": {"summary": "Tu peso ideal es {ideal_weight}, en un rango de {formula_range}."},
            "values": {
                "small": "Pequeña", "medium": "Mediana", "large": "Grande",
                "lose": "Perder", "gain": "Ganar", "at_ideal": "Ya estás en tu peso ideal",
                "week": "semana", "weeks": "semanas",
            },
        },
    },
)


def ideal_weight(formula: str, gender: str, height_cm: float) -> float:
    """Ideal weight in kg for one formula (before frame adjustment)."""
    if formula == "broca":
        return height_cm - (100 if gender == "male" else 105)
    intercept, per_inch = _INCH_FORMULAS[formula][gender]
    inches_over_five_feet = max(height_cm / 2.54 - 60, 0)
    return intercept + per_inch * inches_over_five_feet


def frame_size(gender: str, wrist_in: float | None) -> str:
    if wrist_in is None:
        return "medium"
    small_below, large_above = FRAME_THRESHOLDS[gender]
    if wrist_in < small_below:
        return "small"
    if wrist_in > large_above:
        return "large"
    return "medium"


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    height_cm = base_value(values, field_units, "height", "height", "ft_in")
    age = number(values, "age")
    if not in_range(height_cm, 120, 250) or not in_range(age, 18, 100):
        return ResultsEnvelope.invalid()
    gender = values.get("gender") or "male"
    labels = t.get("values", {})

    wrist_cm = base_value(values, field_units, "wrist", "length", "in")
    wrist_in = convert_from_base(wrist_cm, "in", "length") if wrist_cm is not None else None
    frame = frame_size(gender, wrist_in)
    factor = FRAME_FACTORS[frame]

    weight_unit = field_units.get("current_weight", "lbs")

    def show(kg: float) -> str:
        return f"{format_number(convert_from_base(kg, weight_unit, 'weight'), 1)} {weight_unit}"

    def core(formula: str) -> dict[str, float]:
        return {"weight_kg": ideal_weight(formula, gender, height_cm) * factor}

    by_formula = {name: core(name)["weight_kg"] for name in FORMULAS}
    inch_based = [by_formula[name] for name in FORMULAS if name != "broca"]
    low, high = min(inch_based), max(inch_based)
    height_m = height_cm / 100
    bmi_low, bmi_high = (b * height_m**2 for b in HEALTHY_BMI)
    target = by_formula["devine"]

    result_values: dict[str, Any] = {
        "ideal_weight": target,
        "formula_range_min": low,
        "formula_range_max": high,
        "healthy_bmi_min": bmi_low,
        "healthy_bmi_max": bmi_high,
        "frame_size": frame,
        **{f"{name}_kg": kg for name, kg in by_formula.items()},
    }
    formatted = {
        "ideal_weight": show(target),
        "formula_range": f"{show(low)} – {show(high)}",
        "healthy_bmi_range": f"{show(bmi_low)} – {show(bmi_high)}",
        "frame_size": labels.get(frame, frame),
        "weight_difference": "—",
        "time_to_goal": "—",
        "body_fat_estimate": "—",
    }

    current_kg = base_value(values, field_units, "current_weight", "weight", "lbs")
    if current_kg is not None:
        diff = current_kg - target
        weeks = math.ceil(abs(diff) / HEALTHY_LOSS_KG_PER_WEEK)
        bmi = current_kg / height_m**2
        body_fat = 1.2 * bmi + 0.23 * age - 10.8 * (1 if gender == "male" else 0) - 5.4
        body_fat = max(3.0, min(60.0, body_fat))
        result_values.update(
            {"weight_difference": diff, "time_to_goal": weeks, "body_fat_estimate": body_fat}
        )
        if abs(diff) < 1:
            formatted["weight_difference"] = get_text(t, "values.at_ideal", "Already at your ideal weight")
            formatted["time_to_goal"] = formatted["weight_difference"]
        else:
            verb = labels.get("lose", "Lose") if diff > 0 else labels.get("gain", "Gain")
            formatted["weight_difference"] = f"{verb} {show(abs(diff))}"
            week_word = labels.get("week", "week") if weeks == 1 else labels.get("weeks", "weeks")
            formatted["time_to_goal"] = f"~{weeks} {week_word}"
        formatted["body_fat_estimate"] = format_percent(body_fat)

    table = comparison_rows(
        FORMULAS,
        lambda name: {"weight_kg": core(name)["weight_kg"], "weight": show(core(name)["weight_kg"])},
        key="formula",
    )
    summary = interpolate(
        get_text(t, "formats.summary", "Your ideal weight is {ideal_weight}."), formatted
    )
    return ResultsEnvelope(
        is_valid=True,
        values=result_values,
        formatted=formatted,
        summary=summary,
        metadata={"table_data": table},
    )
