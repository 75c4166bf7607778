"""Body mass index calculator."""

from __future__ import annotations

from typing import Any, Mapping

from ..contract import CalculatorConfig, InputDefinition, ResultDefinition
from ..formatting import format_number
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from ..units import convert_from_base
from .common import base_value, in_range

# Upper bound (exclusive) of each WHO category
CATEGORIES = (
    (18.5, "underweight"),
    (25.0, "normal"),
    (30.0, "overweight"),
    (35.0, "obesity_1"),
    (40.0, "obesity_2"),
    (float("inf"), "obesity_3"),
)
HEALTHY_BMI = (18.5, 24.9)

CONFIG = CalculatorConfig(
    id="bmi",
    version="4.0",
    category="health",
    icon="⚖️",
    inputs=(
        InputDefinition(
            id="weight", type="number", default_value=None, min=1,
            unit_type="weight", default_unit="kg", allowed_units=("kg", "lbs", "st"), required=True,
        ),
        InputDefinition(
            id="height", type="number", default_value=None,
            unit_type="height", default_unit="cm", allowed_units=("cm", "m", "in", "ft_in"),
            required=True,
        ),
    ),
    results=(
        ResultDefinition("bmi", "primary", "number", 1),
        ResultDefinition("category", "badge", "text"),
        ResultDefinition("healthy_range", "secondary", "text"),
    ),
    chart={"type": "gauge", "bands": [c[0] for c in CATEGORIES[:-1]]},
    t={
        "en": {
            "name": "BMI Calculator",
            "inputs": {"weight": {"label": "Weight"}, "height": {"label": "Height"}},
            "results": {
                "bmi": {"label": "Your BMI"},
                "category": {"label": "Category"},
                "healthy_range": {"label": "Healthy weight for your height"},
            },
            "formats": {"summary": "Your BMI is {bmi} ({category})."},
            "values": {
                "underweight": "Underweight", "normal": "Normal weight",
                "overweight": "Overweight", "obesity_1": "Obesity class I",
                "obesity_2": "Obesity class II", "obesity_3": "Obesity class III",
            },
        },
        "es": {
            "name": "Calculadora de IMC",
            "inputs": {"weight": {"label": "Peso"}, "height": {"label": "Altura"}},
            "results": {
                "bmi": {"label": "Tu IMC"},
                "category": {"label": "Categoría"},
                "healthy_range": {"label": "Peso saludable para tu altura"},
            },
            "formats": {"summary": "Tu IMC es {bmi} ({category})."},
            "values": {
                "underweight": "Bajo peso", "normal": "Peso normal",
                "overweight": "Sobrepeso", "obesity_1": "Obesidad clase I",
                "obesity_2": "Obesidad clase II", "obesity_3": "Obesidad clase III",
            },
        },
    },
)


def bmi_category(bmi: float) -> str:
    for upper, name in CATEGORIES:
        if bmi < upper:
            return name
    return CATEGORIES[-1][1]


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    weight_kg = base_value(values, field_units, "weight", "weight", "kg")
    height_cm = base_value(values, field_units, "height", "height", "cm")
    if not in_range(weight_kg, 2, 650) or not in_range(height_cm, 40, 275):
        return ResultsEnvelope.invalid()

    height_m = height_cm / 100
    bmi = weight_kg / height_m**2
    category = bmi_category(bmi)
    low_kg, high_kg = (b * height_m**2 for b in HEALTHY_BMI)

    weight_unit = field_units.get("weight", "kg")
    low = convert_from_base(low_kg, weight_unit, "weight")
    high = convert_from_base(high_kg, weight_unit, "weight")
    category_text = get_text(t, f"values.{category}", category)

    formatted = {
        "bmi": format_number(bmi, 1),
        "category": category_text,
        "healthy_range": f"{format_number(low, 1)}–{format_number(high, 1)} {weight_unit}",
    }
    return ResultsEnvelope(
        is_valid=True,
        values={
            "bmi": bmi,
            "category": category,
            "healthy_min_kg": low_kg,
            "healthy_max_kg": high_kg,
        },
        formatted=formatted,
        summary=interpolate(get_text(t, "formats.summary", "Your BMI is {bmi}."), formatted),
    )
