"""Roofing calculator: roof area from footprint and pitch, materials and cost."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..contract import CalculatorConfig, InputDefinition, ResultDefinition, ShowWhen
from ..formatting import comparison_rows, format_currency, format_number
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from ..units import convert_from_base, convert_to_base
from .common import CURRENCY_UNITS, base_value, currency_of, in_range, number

PITCHES = ("0.5", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12", "14", "16", "18")
MATERIALS = ("asphalt", "metal", "tile", "wood", "slate", "membrane")
BUNDLES_PER_SQUARE = {"asphalt": 3, "wood": 3}
SQ_FT_PER_SQUARE = 100
HIP_AREA_FACTOR = 1.10
_SQ_FT_PER_SQ_M = convert_from_base(convert_to_base(1, "m", "length"), "ft", "length") ** 2

_LENGTH_UNITS = ("ft", "m")

CONFIG = CalculatorConfig(
    id="roofing",
    version="4.0",
    category="construction",
    icon="🏠",
    inputs=(
        InputDefinition(
            id="roof_type", type="imageradio", default_value="gable",
            options=("gable", "hip", "flat", "shed"),
        ),
        InputDefinition(
            id="house_length", type="number", default_value=None, min=5, max=500,
            unit_type="length", default_unit="ft", allowed_units=_LENGTH_UNITS, required=True,
        ),
        InputDefinition(
            id="house_width", type="number", default_value=None, min=5, max=500,
            unit_type="length", default_unit="ft", allowed_units=_LENGTH_UNITS, required=True,
        ),
        InputDefinition(
            id="roof_pitch", type="select", default_value="6", options=PITCHES,
            show_when=ShowWhen("roof_type", ("gable", "hip", "shed")),
        ),
        InputDefinition(
            id="overhang", type="number", default_value=1, min=0, max=5, step=0.5,
            unit_type="length", default_unit="ft", allowed_units=_LENGTH_UNITS,
        ),
        InputDefinition(id="material_type", type="select", default_value="asphalt", options=MATERIALS),
        InputDefinition(
            id="waste_factor", type="number", default_value=10, min=0, max=30, step=1, suffix="%"
        ),
        InputDefinition(id="include_cost", type="toggle", default_value=False),
        InputDefinition(
            id="cost_per_square_foot", type="number", default_value=None, min=0,
            unit_type="currency", default_unit="USD", allowed_units=CURRENCY_UNITS,
            show_when=ShowWhen("include_cost", True),
        ),
    ),
    results=(
        ResultDefinition("roof_area", "primary", "text"),
        ResultDefinition("roof_area_metric", "secondary", "text"),
        ResultDefinition("roof_squares", "secondary", "text"),
        ResultDefinition("bundles_needed", "secondary", "text"),
        ResultDefinition("ridge_cap", "secondary", "text"),
        ResultDefinition("drip_edge", "secondary", "text"),
        ResultDefinition("estimated_cost", "secondary", "currency", 2),
    ),
    detailed_table={"columns": ["pitch", "multiplier", "area", "squares"]},
    t={
        "en": {
            "name": "Roofing Calculator",
            "inputs": {
                "roof_type": {
                    "label": "Roof type",
                    "options": {"gable": "Gable", "hip": "Hip", "flat": "Flat", "shed": "Shed"},
                },
                "house_length": {"label": "House length"},
                "house_width": {"label": "House width"},
                "roof_pitch": {
                    "label": "Roof pitch (rise per 12)",
                    "options": {p: f"{p}/12" for p in PITCHES},
                },
                "overhang": {"label": "Overhang"},
                "material_type": {
                    "label": "Material",
                    "options": {
                        "asphalt": "Asphalt shingles", "metal": "Metal", "tile": "Tile",
                        "wood": "Wood shakes", "slate": "Slate", "membrane": "Membrane",
                    },
                },
                "waste_factor": {"label": "Waste factor"},
                "include_cost": {"label": "Estimate cost"},
                "cost_per_square_foot": {"label": "Installed cost per sq ft"},
            },
            "results": {
                "roof_area": {"label": "Roof area"},
                "roof_area_metric": {"label": "Roof area (metric)"},
                "roof_squares": {"label": "Roofing squares"},
                "bundles_needed": {"label": "Bundles needed"},
                "ridge_cap": {"label": "Ridge cap"},
                "drip_edge": {"label": "Drip edge"},
                "estimated_cost": {"label": "Estimated cost"},
            },
            "formats": {"summary": "Roof area: {roof_area}. {squares} squares needed."},
            "values": {
                "sq_ft": "sq ft", "sq_m": "m²", "squares": "squares", "bundles": "bundles",
                "linear_ft": "linear ft", "metal": "panels (varies by style)",
                "tile": "pieces (varies by size)", "slate": "pieces (varies by size)",
                "membrane": "rolls (varies by width)",
            },
        },
        "es": {
            "name": "Calculadora de techos",
            "inputs": {
                "roof_type": {
                    "label": "Tipo de techo",
                    "options": {"gable": "A dos aguas", "hip": "A cuatro aguas", "flat": "Plano",
                                "shed": "A un agua"},
                },
                "house_length": {"label": "Largo de la casa"},
                "house_width": {"label": "Ancho de la casa"},
                "roof_pitch": {
                    "label": "Pendiente (elevación por 12)",
                    "options": {p: f"{p}/12" for p in PITCHES},
                },
                "overhang": {"label": "Alero"},
                "material_type": {
                    "label": "Material",
                    "options": {
                        "asphalt": "Tejas asfálticas", "metal": "Metal", "tile": "Teja",
                        "wood": "Tejas de madera", "slate": "Pizarra", "membrane": "Membrana",
                    },
                },
                "waste_factor": {"label": "Factor de desperdicio"},
                "include_cost": {"label": "Estimar costo"},
                "cost_per_square_foot": {"label": "Costo instalado por pie²"},
            },
            "results": {
                "roof_area": {"label": "Área del techo"},
                "roof_area_metric": {"label": "Área del techo (métrico)"},
                "roof_squares": {"label": "Cuadrados de techo"},
                "bundles_needed": {"label": "Paquetes necesarios"},
                "ridge_cap": {"label": "Cumbrera"},
                "drip_edge": {"label": "Gotero"},
                "estimated_cost": {"label": "Costo estimado"},
            },
            "formats": {"summary": "Área del techo: {roof_area}. Se necesitan {squares} cuadrados."},
            "values": {
                "sq_ft": "pies²", "sq_m": "m²", "squares": "cuadrados", "bundles": "paquetes",
                "linear_ft": "pies lineales", "metal": "paneles (según estilo)",
                "tile": "piezas (según tamaño)", "slate": "piezas (según tamaño)",
                "membrane": "rollos (según ancho)",
            },
        },
    },
)


def pitch_multiplier(pitch: str | None) -> float:
    """Slope factor for a rise-per-12 pitch; a flat roof (no pitch) is 1."""
    if pitch is None:
        return 1.0
    rise = float(pitch)
    return math.sqrt(1 + (rise / 12) ** 2)


def roof_area(length_ft: float, width_ft: float, roof_type: str, pitch: str | None) -> float:
    """Sloped roof area in square feet for an outline already including overhangs."""
    area = length_ft * width_ft * pitch_multiplier(pitch)
    if roof_type == "hip":
        area *= HIP_AREA_FACTOR
    return area


def _feet(values: Mapping[str, Any], field_units: Mapping[str, str], key: str) -> float | None:
    cm = base_value(values, field_units, key, "length", "ft")
    return None if cm is None else convert_from_base(cm, "ft", "length")


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    length_ft = _feet(values, field_units, "house_length")
    width_ft = _feet(values, field_units, "house_width")
    overhang_ft = _feet(values, field_units, "overhang") or 0.0
    waste = number(values, "waste_factor", 0.0)
    if length_ft is None or width_ft is None or length_ft <= 0 or width_ft <= 0:
        return ResultsEnvelope.invalid()
    if overhang_ft < 0 or not in_range(waste, 0, 30):
        return ResultsEnvelope.invalid()

    roof_type = values.get("roof_type") or "gable"
    # Hidden for flat roofs
    pitch = values.get("roof_pitch")
    material = values.get("material_type") or "asphalt"
    labels = t.get("values", {})

    outline_length = length_ft + 2 * overhang_ft
    outline_width = width_ft + 2 * overhang_ft
    area = roof_area(outline_length, outline_width, roof_type, pitch)
    area_with_waste = area * (1 + waste / 100)
    squares = math.ceil(round(area_with_waste / SQ_FT_PER_SQUARE, 9))
    per_square = BUNDLES_PER_SQUARE.get(material, 0)
    bundles = squares * per_square

    if roof_type == "gable":
        ridge_ft = outline_length
    elif roof_type == "hip":
        ridge_ft = outline_length - outline_width + 4 * (outline_width / 2) * 1.05
    else:
        ridge_ft = 0.0
    perimeter_ft = 2 * (outline_length + outline_width)

    sq_ft = labels.get("sq_ft", "sq ft")
    linear_ft = labels.get("linear_ft", "linear ft")
    formatted = {
        "roof_area": f"{format_number(area, 0)} {sq_ft}",
        "roof_area_metric": f"{format_number(area / _SQ_FT_PER_SQ_M, 1)} {labels.get('sq_m', 'm²')}",
        "roof_squares": f"{squares} {labels.get('squares', 'squares')}",
        "bundles_needed": (
            f"{bundles} {labels.get('bundles', 'bundles')}" if per_square else labels.get(material, "—")
        ),
        "ridge_cap": f"{format_number(ridge_ft, 1)} {linear_ft}" if ridge_ft > 0 else "—",
        "drip_edge": f"{format_number(perimeter_ft, 1)} {linear_ft}",
        "estimated_cost": "—",
    }
    result_values = {
        "roof_area": area,
        "roof_area_metric": area / _SQ_FT_PER_SQ_M,
        "roof_squares": squares,
        "bundles_needed": bundles,
        "ridge_cap": ridge_ft,
        "drip_edge": perimeter_ft,
        "waste_included": area_with_waste - area,
        "estimated_cost": 0.0,
    }
    cost = number(values, "cost_per_square_foot")
    if cost is not None and cost > 0:
        estimated = area_with_waste * cost
        result_values["estimated_cost"] = estimated
        formatted["estimated_cost"] = format_currency(
            estimated, currency_of(field_units, "cost_per_square_foot")
        )

    table = []
    if pitch is not None:
        table = comparison_rows(
            PITCHES,
            lambda p: {
                "multiplier": pitch_multiplier(p),
                "area": roof_area(outline_length, outline_width, roof_type, p),
                "squares": math.ceil(
                    round(roof_area(outline_length, outline_width, roof_type, p)
                          * (1 + waste / 100) / SQ_FT_PER_SQUARE, 9)
                ),
            },
            key="pitch",
        )
    summary = interpolate(
        get_text(t, "formats.summary", "Roof area: {roof_area}."),
        {**formatted, "squares": squares, "bundles": bundles},
    )
    return ResultsEnvelope(
        is_valid=True,
        values=result_values,
        formatted=formatted,
        summary=summary,
        metadata={"table_data": table} if table else None,
    )
