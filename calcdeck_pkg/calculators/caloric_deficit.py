"""Caloric deficit calculator: BMR, TDEE, target intake, weight-loss timeline and macros."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..config import MAX_PROJECTION_WEEKS
from ..contract import CalculatorConfig, InputDefinition, Preset, ResultDefinition, ShowWhen
from ..formatting import comparison_rows, format_number, format_percent
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from ..units import convert_from_base
from .common import base_value, in_range, number

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
DEFICIT_LEVELS = {"mild": 0.10, "moderate": 0.20, "aggressive": 0.25, "extreme": 0.30}
COMPARISON_DEFICITS = (0.10, 0.15, 0.20, 0.25, 0.30, 0.35)
MIN_CALORIES = {"male": 1500, "female": 1200}
KCAL_PER_KG_FAT = 7700

WEIGHT_UNITS = ("kg", "lbs", "st")

CONFIG = CalculatorConfig(
    id="caloric_deficit",
    version="4.0",
    category="health",
    icon="🔥",
    inputs=(
        InputDefinition(id="gender", type="radio", default_value="male", options=("male", "female")),
        InputDefinition(id="age", type="number", default_value=30, min=15, max=80, step=1),
        InputDefinition(
            id="weight", type="number", default_value=None, min=1,
            unit_type="weight", default_unit="lbs", allowed_units=WEIGHT_UNITS, required=True,
        ),
        InputDefinition(
            id="height", type="number", default_value=None,
            unit_type="height", default_unit="ft_in", allowed_units=("cm", "m", "in", "ft_in"),
            required=True,
        ),
        InputDefinition(
            id="activity_level", type="select", default_value="moderate",
            options=tuple(ACTIVITY_MULTIPLIERS),
        ),
        InputDefinition(
            id="formula", type="radio", default_value="mifflin", options=("mifflin", "harris", "katch")
        ),
        InputDefinition(
            id="body_fat_percent", type="number", default_value=None, min=3, max=60,
            suffix="%", show_when=ShowWhen("formula", "katch"),
        ),
        InputDefinition(
            id="goal_weight", type="number", default_value=None, min=1,
            unit_type="weight", default_unit="lbs", allowed_units=WEIGHT_UNITS,
        ),
        InputDefinition(
            id="deficit_level", type="radio", default_value="moderate", options=tuple(DEFICIT_LEVELS)
        ),
    ),
    presets=(
        Preset(
            "example_male",
            {"gender": "male", "age": 30, "weight": 200, "height": "5'10\"",
             "activity_level": "moderate", "goal_weight": 180},
        ),
        Preset(
            "example_female_metric",
            {"gender": "female", "age": 35, "weight": 75, "height": 165, "goal_weight": 65},
            units={"weight": "kg", "height": "cm", "goal_weight": "kg"},
        ),
    ),
    results=(
        ResultDefinition("target_calories", "primary", "number", 0),
        ResultDefinition("bmr", "secondary", "number", 0),
        ResultDefinition("tdee", "secondary", "number", 0),
        ResultDefinition("daily_deficit", "secondary", "number", 0),
        ResultDefinition("weekly_loss", "secondary", "text"),
        ResultDefinition("weeks_to_goal", "secondary", "text"),
        ResultDefinition("macros", "secondary", "text"),
    ),
    chart={"type": "line", "x": "week", "series": ["weight"]},
    detailed_table={"columns": ["deficit", "target", "daily_deficit", "weekly_loss", "weeks_to_goal"]},
    t={
        "en": {
            "name": "Caloric Deficit Calculator",
            "inputs": {
                "gender": {"label": "Sex", "options": {"male": "Male", "female": "Female"}},
                "age": {"label": "Age"},
                "weight": {"label": "Current weight"},
                "height": {"label": "Height"},
                "activity_level": {
                    "label": "Activity level",
                    "options": {
                        "sedentary": "Sedentary", "light": "Lightly active",
                        "moderate": "Moderately active", "active": "Very active",
                        "very_active": "Extremely active",
                    },
                },
                "formula": {
                    "label": "BMR formula",
                    "options": {
                        "mifflin": "Mifflin-St Jeor", "harris": "Harris-Benedict",
                        "katch": "Katch-McArdle",
                    },
                },
                "body_fat_percent": {"label": "Body fat"},
                "goal_weight": {"label": "Goal weight"},
                "deficit_level": {
                    "label": "Deficit level",
                    "options": {
                        "mild": "Mild (10%)", "moderate": "Moderate (20%)",
                        "aggressive": "Aggressive (25%)", "extreme": "Extreme (30%)",
                    },
                },
            },
            "presets": {
                "example_male": {"label": "Example (imperial)"},
                "example_female_metric": {"label": "Example (metric)"},
            },
            "results": {
                "target_calories": {"label": "Daily calorie target"},
                "bmr": {"label": "Basal metabolic rate"},
                "tdee": {"label": "Total daily energy expenditure"},
                "daily_deficit": {"label": "Daily deficit"},
                "weekly_loss": {"label": "Expected weekly loss"},
                "weeks_to_goal": {"label": "Time to goal"},
                "macros": {"label": "Macronutrients"},
            },
            "formats": {
                "summary": "Eat {target_calories} calories a day for a {daily_deficit} calorie "
                "deficit. You can reach your goal in about {weeks_to_goal}.",
            },
            "values": {
                "kcal": "kcal", "week": "week", "weeks": "weeks", "per_week": "per week",
                "protein": "Protein", "fat": "Fat", "carbs": "Carbs",
                "floor_applied": "Raised to the minimum safe intake",
            },
        },
        "es": {
            "name": "Calculadora de déficit calórico",
            "inputs": {
                "gender": {"label": "Sexo", "options": {"male": "Hombre", "female": "Mujer"}},
                "age": {"label": "Edad"},
                "weight": {"label": "Peso actual"},
                "height": {"label": "Altura"},
                "activity_level": {
                    "label": "Nivel de actividad",
                    "options": {
                        "sedentary": "Sedentario", "light": "Ligeramente activo",
                        "moderate": "Moderadamente activo", "active": "Muy activo",
                        "very_active": "Extremadamente activo",
                    },
                },
                "formula": {
                    "label": "Fórmula de TMB",
                    "options": {
                        "mifflin": "Mifflin-St Jeor", "harris": "Harris-Benedict",
                        "katch": "Katch-McArdle",
                    },
                },
                "body_fat_percent": {"label": "Grasa corporal"},
                "goal_weight": {"label": "Peso objetivo"},
                "deficit_level": {
                    "label": "Nivel de déficit",
                    "options": {
                        "mild": "Leve (10%)", "moderate": "Moderado (20%)",
                        "aggressive": "Agresivo (25%)", "extreme": "Extremo (30%)",
                    },
                },
            },
            "presets": {
                "example_male": {"label": "Ejemplo (imperial)"},
                "example_female_metric": {"label": "Ejemplo (métrico)"},
            },
            "results": {
                "target_calories": {"label": "Meta diaria de calorías"},
                "bmr": {"label": "Tasa metabólica basal"},
                "tdee": {"label": "Gasto energético diario total"},
                "daily_deficit": {"label": "Déficit diario"},
                "weekly_loss": {"label": "Pérdida semanal esperada"},
                "weeks_to_goal": {"label": "Tiempo hasta la meta"},
                "macros": {"label": "Macronutrientes"},
            },
            "formats": {
                "summary": "Come {target_calories} calorías al día para un déficit de "
                "{daily_deficit} calorías. Alcanzarás tu meta en unas {weeks_to_goal}.",
            },
            "values": {
                "kcal": "kcal", "week": "semana", "weeks": "semanas", "per_week": "por semana",
                "protein": "Proteína", "fat": "Grasa", "carbs": "Carbohidratos",
                "floor_applied": "Elevado a la ingesta mínima segura",
            },
        },
    },
)


def bmr(formula: str, gender: str, weight_kg: float, height_cm: float, age: float,
        body_fat_percent: float | None = None) -> float:
    """Basal metabolic rate in kcal/day.

    Katch-McArdle needs body fat; without it the Mifflin-St Jeor equation is used.
    """
    male = gender == "male"
    if formula == "katch" and body_fat_percent is not None:
        lean_mass = weight_kg * (1 - body_fat_percent / 100)
        return 370 + 21.6 * lean_mass
    if formula == "harris":
        if male:
            return 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age + 88.362
        return 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age + 447.593
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + 5 if male else base - 161


def deficit_plan(tdee: float, deficit_fraction: float, gender: str,
                 kg_to_lose: float | None = None) -> dict[str, Any]:
    """Target intake for one deficit level, floored at the minimum safe intake."""
    target = round(tdee * (1 - deficit_fraction))
    floor = MIN_CALORIES.get(gender, MIN_CALORIES["female"])
    floored = target < floor
    if floored:
        target = floor
    daily_deficit = max(tdee - target, 0.0)
    weekly_loss_kg = daily_deficit * 7 / KCAL_PER_KG_FAT
    weeks = None
    if kg_to_lose is not None and kg_to_lose > 0 and weekly_loss_kg > 0:
        weeks = math.ceil(kg_to_lose / weekly_loss_kg)
    return {
        "target": target,
        "daily_deficit": daily_deficit,
        "weekly_loss_kg": weekly_loss_kg,
        "weeks_to_goal": weeks,
        "floored": floored,
    }


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    age = number(values, "age")
    weight_kg = base_value(values, field_units, "weight", "weight", "lbs")
    height_cm = base_value(values, field_units, "height", "height", "ft_in")
    if not in_range(age, 15, 80) or weight_kg is None or height_cm is None:
        return ResultsEnvelope.invalid()
    if not in_range(weight_kg, 20, 400) or not in_range(height_cm, 100, 250):
        return ResultsEnvelope.invalid()

    gender = values.get("gender") or "male"
    formula = values.get("formula") or "mifflin"
    body_fat = number(values, "body_fat_percent")
    if body_fat is not None and not in_range(body_fat, 3, 60):
        return ResultsEnvelope.invalid()

    labels = t.get("values", {})
    weight_unit = field_units.get("weight", "lbs")
    kcal = get_text(t, "values.kcal", "kcal")

    basal = bmr(formula, gender, weight_kg, height_cm, age, body_fat)
    tdee = basal * ACTIVITY_MULTIPLIERS.get(values.get("activity_level"), 1.55)

    goal_kg = base_value(values, field_units, "goal_weight", "weight", "lbs")
    kg_to_lose = weight_kg - goal_kg if goal_kg is not None else None
    fraction = DEFICIT_LEVELS.get(values.get("deficit_level"), 0.20)
    plan = deficit_plan(tdee, fraction, gender, kg_to_lose)

    def in_display(kg: float) -> float:
        return convert_from_base(kg, weight_unit, "weight")

    # Protein at 1 g per lb of goal weight (current weight when no goal)
    protein_g = convert_from_base(goal_kg if goal_kg is not None else weight_kg, "lbs", "weight")
    fat_g = plan["target"] * 0.25 / 9
    carb_g = max(plan["target"] - protein_g * 4 - fat_g * 9, 0.0) / 4

    weeks = plan["weeks_to_goal"]
    weeks_word = labels.get("week", "week") if weeks == 1 else labels.get("weeks", "weeks")
    weekly_loss = in_display(plan["weekly_loss_kg"])

    result_values = {
        "target_calories": plan["target"],
        "bmr": basal,
        "tdee": tdee,
        "daily_deficit": plan["daily_deficit"],
        "weekly_loss": weekly_loss,
        "weeks_to_goal": weeks,
        "protein_grams": protein_g,
        "fat_grams": fat_g,
        "carb_grams": carb_g,
        "floor_applied": plan["floored"],
    }
    formatted = {
        "target_calories": f"{format_number(plan['target'], 0)} {kcal}",
        "bmr": f"{format_number(basal, 0)} {kcal}",
        "tdee": f"{format_number(tdee, 0)} {kcal}",
        "daily_deficit": f"{format_number(plan['daily_deficit'], 0)} {kcal}",
        "weekly_loss": f"{format_number(weekly_loss, 2)} {weight_unit} "
        f"{get_text(t, 'values.per_week', 'per week')}",
        "weeks_to_goal": f"{weeks} {weeks_word}" if weeks is not None else "—",
        "macros": (
            f"{get_text(t, 'values.protein', 'Protein')} {format_number(protein_g, 0)} g · "
            f"{get_text(t, 'values.fat', 'Fat')} {format_number(fat_g, 0)} g · "
            f"{get_text(t, 'values.carbs', 'Carbs')} {format_number(carb_g, 0)} g"
        ),
    }
    if plan["floored"]:
        formatted["floor_applied"] = get_text(t, "values.floor_applied", "Raised to the minimum safe intake")

    summary = interpolate(
        get_text(t, "formats.summary", "Eat {target_calories} calories a day."),
        {
            "target_calories": format_number(plan["target"], 0),
            "daily_deficit": format_number(plan["daily_deficit"], 0),
            "weeks_to_goal": formatted["weeks_to_goal"] if weeks is not None else None,
        },
    )

    horizon = min(weeks + 4 if weeks is not None else 12, MAX_PROJECTION_WEEKS)
    chart = []
    for week in range(horizon + 1):
        projected = weight_kg - plan["weekly_loss_kg"] * week
        if goal_kg is not None and goal_kg < weight_kg:
            projected = max(projected, goal_kg)
        chart.append({"week": week, "weight": in_display(projected), "weight_kg": projected})

    table = comparison_rows(
        COMPARISON_DEFICITS,
        lambda pct: {
            "percent": format_percent(pct, 0, multiply=True),
            **{
                k: v
                for k, v in deficit_plan(tdee, pct, gender, kg_to_lose).items()
                if k != "floored"
            },
        },
        key="deficit",
    )
    return ResultsEnvelope(
        is_valid=True,
        values=result_values,
        formatted=formatted,
        summary=summary,
        metadata={"chart_data": chart, "table_data": table},
    )
