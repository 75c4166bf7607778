"""Daily water intake calculator blending a weight-based and the IOM reference estimate."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..contract import CalculatorConfig, InputDefinition, Preset, ResultDefinition, ShowWhen
from ..formatting import format_number
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from ..units import convert_from_base
from .common import base_value, in_range, number

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.0,
    "light": 1.1,
    "moderate": 1.2,
    "active": 1.3,
    "very_active": 1.4,
}
CLIMATE_MULTIPLIERS = {
    "temperate": 1.0,
    "hot": 1.15,
    "hot_humid": 1.3,
    "cold": 0.95,
    "high_altitude": 1.2,
}
FOOD_WATER_SHARE = {"high_fruit_veg": 0.25, "mixed": 0.20, "processed": 0.15}
CONDITION_EXTRA_ML = {"none": 0, "pregnant": 300, "breastfeeding": 700}
ML_PER_KG = {"male": 33, "female": 31}
# Adequate intake from all sources, mL/day: (adult, under 18)
IOM_REFERENCE_ML = {"male": (3700, 3300), "female": (2700, 2300)}
EXERCISE_ML_PER_30_MIN = 355
CAFFEINE_OFFSET_ML = 50
ALCOHOL_OFFSET_ML = 250
MINIMUM_ML = 1500
GLASS_FL_OZ = 8
BOTTLE_ML = 500

SCHEDULE = (
    ("07:00", 0.15),
    ("09:00", 0.14),
    ("11:00", 0.13),
    ("13:00", 0.14),
    ("15:00", 0.13),
    ("17:00", 0.13),
    ("19:00", 0.11),
    ("21:00", 0.07),
)

CONFIG = CalculatorConfig(
    id="water_intake",
    version="4.0",
    category="health",
    icon="💧",
    inputs=(
        InputDefinition(id="gender", type="radio", default_value="male", options=("male", "female")),
        InputDefinition(id="age", type="number", default_value=30, min=4, max=100, step=1),
        InputDefinition(
            id="weight", type="number", default_value=None, min=1,
            unit_type="weight", default_unit="lbs", allowed_units=("kg", "lbs", "st"), required=True,
        ),
        InputDefinition(
            id="activity_level", type="select", default_value="moderate",
            options=tuple(ACTIVITY_MULTIPLIERS),
        ),
        InputDefinition(id="exercise_minutes", type="slider", default_value=0, min=0, max=300, step=5),
        InputDefinition(
            id="climate", type="select", default_value="temperate", options=tuple(CLIMATE_MULTIPLIERS)
        ),
        InputDefinition(
            id="special_condition", type="radio", default_value="none",
            options=tuple(CONDITION_EXTRA_ML), show_when=ShowWhen("gender", "female"),
        ),
        InputDefinition(id="caffeine_cups", type="stepper", default_value=0, min=0, max=10, step=1),
        InputDefinition(id="alcohol_drinks", type="stepper", default_value=0, min=0, max=10, step=1),
        InputDefinition(
            id="diet_type", type="select", default_value="mixed", options=tuple(FOOD_WATER_SHARE)
        ),
    ),
    presets=(
        Preset("active_male", {"gender": "male", "age": 28, "weight": 180,
                               "activity_level": "active", "exercise_minutes": 60}),
        Preset("expecting_mom", {"gender": "female", "age": 31, "weight": 150,
                                 "special_condition": "pregnant", "activity_level": "light"}),
    ),
    results=(
        ResultDefinition("daily_total", "primary", "text"),
        ResultDefinition("from_beverages", "secondary", "text"),
        ResultDefinition("from_food", "secondary", "text"),
        ResultDefinition("glasses", "secondary", "text"),
        ResultDefinition("bottles", "secondary", "text"),
        ResultDefinition("weight_based", "secondary", "text"),
        ResultDefinition("iom_based", "secondary", "text"),
    ),
    chart={"type": "bar", "x": "time", "series": ["ml"]},
    t={
        "en": {
            "name": "Water Intake Calculator",
            "inputs": {
                "gender": {"label": "Sex", "options": {"male": "Male", "female": "Female"}},
                "age": {"label": "Age"},
                "weight": {"label": "Weight"},
                "activity_level": {
                    "label": "Activity level",
                    "options": {
                        "sedentary": "Sedentary", "light": "Light", "moderate": "Moderate",
                        "active": "Active", "very_active": "Very active",
                    },
                },
                "exercise_minutes": {"label": "Exercise per day (minutes)"},
                "climate": {
                    "label": "Climate",
                    "options": {
                        "temperate": "Temperate", "hot": "Hot", "hot_humid": "Hot and humid",
                        "cold": "Cold", "high_altitude": "High altitude",
                    },
                },
                "special_condition": {
                    "label": "Special condition",
                    "options": {"none": "None", "pregnant": "Pregnant", "breastfeeding": "Breastfeeding"},
                },
                "caffeine_cups": {"label": "Caffeinated drinks per day"},
                "alcohol_drinks": {"label": "Alcoholic drinks per day"},
                "diet_type": {
                    "label": "Diet",
                    "options": {
                        "high_fruit_veg": "Rich in fruit and vegetables", "mixed": "Mixed",
                        "processed": "Mostly processed food",
                    },
                },
            },
            "presets": {
                "active_male": {"label": "Active man"},
                "expecting_mom": {"label": "Expecting mother"},
            },
            "results": {
                "daily_total": {"label": "Daily water need"},
                "from_beverages": {"label": "From drinks"},
                "from_food": {"label": "From food"},
                "glasses": {"label": "Glasses (8 oz)"},
                "bottles": {"label": "Bottles (500 mL)"},
                "weight_based": {"label": "Weight-based estimate"},
                "iom_based": {"label": "IOM reference estimate"},
            },
            "formats": {
                "summary": "You need about {daily_total} of water a day, {from_beverages} of it from drinks.",
            },
            "values": {"glasses": "glasses", "bottles": "bottles"},
        },
        "es": {
            "name": "Calculadora de consumo de agua",
            "inputs": {
                "gender": {"label": "Sexo", "options": {"male": "Hombre", "female": "Mujer"}},
                "age": {"label": "Edad"},
                "weight": {"label": "Peso"},
                "activity_level": {
                    "label": "Nivel de actividad",
                    "options": {
                        "sedentary": "Sedentario", "light": "Ligero", "moderate": "Moderado",
                        "active": "Activo", "very_active": "Muy activo",
                    },
                },
                "exercise_minutes": {"label": "Ejercicio diario (minutos)"},
                "climate": {
                    "label": "Clima",
                    "options": {
                        "temperate": "Templado", "hot": "Caluroso", "hot_humid": "Caluroso y húmedo",
                        "cold": "Frío", "high_altitude": "Gran altitud",
                    },
                },
                "special_condition": {
                    "label": "Condición especial",
                    "options": {"none": "Ninguna", "pregnant": "Embarazada", "breastfeeding": "Lactancia"},
                },
                "caffeine_cups": {"label": "Bebidas con cafeína al día"},
                "alcohol_drinks": {"label": "Bebidas alcohólicas al día"},
                "diet_type": {
                    "label": "Dieta",
                    "options": {
                        "high_fruit_veg": "Rica en frutas y verduras", "mixed": "Mixta",
                        "processed": "Principalmente procesada",
                    },
                },
            },
            "presets": {
                "active_male": {"label": "Hombre activo"},
                "expecting_mom": {"label": "Futura mamá"},
            },
            "results": {
                "daily_total": {"label": "Necesidad diaria de agua"},
                "from_beverages": {"label": "De bebidas"},
                "from_food": {"label": "De alimentos"},
                "glasses": {"label": "Vasos (8 oz)"},
                "bottles": {"label": "Botellas (500 mL)"},
                "weight_based": {"label": "Estimación por peso"},
                "iom_based": {"label": "Estimación de referencia IOM"},
            },
            "formats": {
                "summary": "Necesitas unos {daily_total} de agua al día, {from_beverages} de bebidas.",
            },
            "values": {"glasses": "vasos", "bottles": "botellas"},
        },
    },
)


def _adjusted(base_ml: float, age_factor: float, activity: float, climate: float,
              exercise_ml: float, condition_ml: float) -> float:
    return base_ml * age_factor * activity * climate + exercise_ml + condition_ml


def _liters(ml: float) -> str:
    oz = convert_from_base(ml, "fl_oz", "volume")
    return f"{format_number(convert_from_base(ml, 'l', 'volume'), 1)} L ({format_number(oz, 0)} oz)"


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    weight_kg = base_value(values, field_units, "weight", "weight", "lbs")
    age = number(values, "age")
    if not in_range(weight_kg, 10, 300) or not in_range(age, 4, 100):
        return ResultsEnvelope.invalid()
    exercise = number(values, "exercise_minutes", 0.0)
    caffeine = number(values, "caffeine_cups", 0.0)
    alcohol = number(values, "alcohol_drinks", 0.0)
    if not (in_range(exercise, 0, 300) and in_range(caffeine, 0, 10) and in_range(alcohol, 0, 10)):
        return ResultsEnvelope.invalid()

    gender = values.get("gender") or "male"
    age_factor = 0.9 if age >= 65 else 0.95 if age >= 56 else 1.0
    activity = ACTIVITY_MULTIPLIERS.get(values.get("activity_level"), 1.0)
    climate = CLIMATE_MULTIPLIERS.get(values.get("climate"), 1.0)
    exercise_ml = exercise / 30 * EXERCISE_ML_PER_30_MIN
    # Hidden for men, so absent rather than "none"
    condition_ml = CONDITION_EXTRA_ML.get(values.get("special_condition") or "none", 0)
    offsets_ml = caffeine * CAFFEINE_OFFSET_ML + alcohol * ALCOHOL_OFFSET_ML

    weight_based = _adjusted(
        weight_kg * ML_PER_KG[gender], age_factor, activity, climate, exercise_ml, condition_ml
    )
    adult, minor = IOM_REFERENCE_ML[gender]
    iom_based = _adjusted(
        minor if age < 18 else adult, age_factor, activity, climate, exercise_ml, condition_ml
    )
    total_ml = max((weight_based + iom_based) / 2 + offsets_ml, MINIMUM_ML)

    food_ml = total_ml * FOOD_WATER_SHARE.get(values.get("diet_type"), 0.20)
    beverages_ml = total_ml - food_ml
    glasses = math.ceil(convert_from_base(beverages_ml, "fl_oz", "volume") / GLASS_FL_OZ)
    bottles = math.ceil(beverages_ml / BOTTLE_ML)

    labels = t.get("values", {})
    formatted = {
        "daily_total": _liters(total_ml),
        "from_beverages": _liters(beverages_ml),
        "from_food": _liters(food_ml),
        "glasses": f"{glasses} {labels.get('glasses', 'glasses')}",
        "bottles": f"{bottles} {labels.get('bottles', 'bottles')}",
        "weight_based": _liters(weight_based + offsets_ml),
        "iom_based": _liters(iom_based + offsets_ml),
    }
    chart = [
        {"time": time, "ml": beverages_ml * share, "share": share}
        for time, share in SCHEDULE
    ]
    summary = interpolate(
        get_text(t, "formats.summary", "You need about {daily_total} of water a day."), formatted
    )
    return ResultsEnvelope(
        is_valid=True,
        values={
            "daily_total": total_ml,
            "from_beverages": beverages_ml,
            "from_food": food_ml,
            "glasses": glasses,
            "bottles": bottles,
            "weight_based": weight_based + offsets_ml,
            "iom_based": iom_based + offsets_ml,
        },
        formatted=formatted,
        summary=summary,
        metadata={"chart_data": chart},
    )
