"""Tip calculator with service-quality presets, pre-tax tipping, splitting and rounding."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..contract import CalculatorConfig, InputDefinition, ResultDefinition, ShowWhen
from ..formatting import comparison_rows, format_currency, format_percent
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from .common import CURRENCY_UNITS, currency_of, in_range, number, provided

SERVICE_TIPS = {"poor": 10, "fair": 15, "good": 18, "great": 20, "exceptional": 25}
ROUNDING_STEPS = {"none": None, "nearest_1": 1, "nearest_5": 5, "nearest_10": 10}
CHART_PERCENTAGES = (10, 15, 18, 20, 25)
TABLE_PERCENTAGES = (10, 12, 15, 18, 20, 22, 25, 30)

CONFIG = CalculatorConfig(
    id="tip",
    version="4.0",
    category="everyday",
    icon="💵",
    inputs=(
        InputDefinition(
            id="bill_amount", type="number", default_value=None, min=0,
            unit_type="currency", default_unit="USD", allowed_units=CURRENCY_UNITS,
            required=True,
        ),
        InputDefinition(
            id="service_quality", type="radio", default_value="good",
            options=tuple(SERVICE_TIPS),
            linked_values={k: {"tip_percent": v} for k, v in SERVICE_TIPS.items()},
        ),
        InputDefinition(
            id="tip_percent", type="slider", default_value=18, min=0, max=100, step=1, suffix="%"
        ),
        InputDefinition(id="split_between", type="stepper", default_value=1, min=1, max=50, step=1),
        InputDefinition(
            id="tip_calculation", type="radio", default_value="total", options=("total", "pre_tax")
        ),
        InputDefinition(
            id="tax_amount", type="number", default_value=None, min=0,
            unit_type="currency", default_unit="USD", allowed_units=CURRENCY_UNITS,
            show_when=ShowWhen("tip_calculation", "pre_tax"),
        ),
        InputDefinition(
            id="round_total", type="select", default_value="none", options=tuple(ROUNDING_STEPS)
        ),
    ),
    results=(
        ResultDefinition("tip_amount", "primary", "currency", 2),
        ResultDefinition("total_with_tip", "secondary", "currency", 2),
        ResultDefinition("tip_per_person", "secondary", "currency", 2),
        ResultDefinition("total_per_person", "secondary", "currency", 2),
        ResultDefinition("effective_tip_rate", "secondary", "percent", 1),
        ResultDefinition("tip_calculated_on", "secondary", "currency", 2),
        ResultDefinition("you_save", "badge", "currency", 2),
    ),
    chart={"type": "bar", "x": "percent", "series": ["tip"]},
    detailed_table={"columns": ["percent", "tip", "total", "per_person"]},
    t={
        "en": {
            "name": "Tip Calculator",
            "inputs": {
                "bill_amount": {"label": "Bill amount"},
                "service_quality": {
                    "label": "Service quality",
                    "options": {
                        "poor": "Poor", "fair": "Fair", "good": "Good",
                        "great": "Great", "exceptional": "Exceptional",
                    },
                },
                "tip_percent": {"label": "Tip percentage"},
                "split_between": {"label": "Split between"},
                "tip_calculation": {
                    "label": "Calculate tip on",
                    "options": {"total": "Total bill", "pre_tax": "Pre-tax amount"},
                },
                "tax_amount": {"label": "Tax included in bill"},
                "round_total": {
                    "label": "Round each person's total",
                    "options": {
                        "none": "Don't round", "nearest_1": "Up to nearest 1",
                        "nearest_5": "Up to nearest 5", "nearest_10": "Up to nearest 10",
                    },
                },
            },
            "results": {
                "tip_amount": {"label": "Tip"},
                "total_with_tip": {"label": "Total with tip"},
                "tip_per_person": {"label": "Tip per person"},
                "total_per_person": {"label": "Total per person"},
                "effective_tip_rate": {"label": "Effective tip rate"},
                "tip_calculated_on": {"label": "Tip calculated on"},
                "you_save": {"label": "Saved by tipping pre-tax"},
            },
            "formats": {
                "summary": "Tip: {tip_amount} ({effective_tip_rate}). "
                "Total with tip: {total_with_tip}. Each person pays {total_per_person}.",
            },
        },
        "es": {
            "name": "Calculadora de propinas",
            "inputs": {
                "bill_amount": {"label": "Monto de la cuenta"},
                "service_quality": {
                    "label": "Calidad del servicio",
                    "options": {
                        "poor": "Malo", "fair": "Regular", "good": "Bueno",
                        "great": "Muy bueno", "exceptional": "Excepcional",
                    },
                },
                "tip_percent": {"label": "Porcentaje de propina"},
                "split_between": {"label": "Dividir entre"},
                "tip_calculation": {
                    "label": "Calcular propina sobre",
                    "options": {"total": "Cuenta total", "pre_tax": "Monto antes de impuestos"},
                },
                "tax_amount": {"label": "Impuesto incluido en la cuenta"},
                "round_total": {
                    "label": "Redondear el total por persona",
                    "options": {
                        "none": "No redondear", "nearest_1": "Hasta el 1 más cercano",
                        "nearest_5": "Hasta el 5 más cercano", "nearest_10": "Hasta el 10 más cercano",
                    },
                },
            },
            "results": {
                "tip_amount": {"label": "Propina"},
                "total_with_tip": {"label": "Total con propina"},
                "tip_per_person": {"label": "Propina por persona"},
                "total_per_person": {"label": "Total por persona"},
                "effective_tip_rate": {"label": "Tasa de propina efectiva"},
                "tip_calculated_on": {"label": "Propina calculada sobre"},
                "you_save": {"label": "Ahorro al dar propina antes de impuestos"},
            },
            "formats": {
                "summary": "Propina: {tip_amount} ({effective_tip_rate}). "
                "Total con propina: {total_with_tip}. Cada persona paga {total_per_person}.",
            },
        },
    },
)


def tip_breakdown(
    bill: float, tip_base: float, percent: float, split: int, rounding: str = "none"
) -> dict[str, float]:
    """Tip and per-person totals for one tip percentage.

    When rounding is on, each person's total is rounded **up** to the step
    and the tip is back-derived from the rounded total, so the effective
    rate can exceed the chosen percentage.
    """
    tip = tip_base * percent / 100
    per_person = (bill + tip) / split
    step = ROUNDING_STEPS.get(rounding)
    if step:
        per_person = math.ceil(round(per_person / step, 9)) * step
    total = per_person * split
    actual_tip = total - bill
    return {
        "tip": actual_tip,
        "total": total,
        "per_person": per_person,
        "tip_per_person": actual_tip / split,
        "effective_rate": actual_tip / tip_base * 100 if tip_base > 0 else 0.0,
    }


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    bill = number(values, "bill_amount")
    percent = number(values, "tip_percent")
    split = number(values, "split_between", 1.0)
    if bill is None or bill <= 0 or not in_range(percent, 0, 100):
        return ResultsEnvelope.invalid()
    if not in_range(split, 1, 50) or split != int(split):
        return ResultsEnvelope.invalid()
    split = int(split)

    tip_base = bill
    pre_tax = values.get("tip_calculation") == "pre_tax"
    if pre_tax and provided(values, "tax_amount"):
        tax = number(values, "tax_amount")
        if tax is None or tax < 0 or tax >= bill:
            return ResultsEnvelope.invalid()
        tip_base = bill - tax

    rounding = values.get("round_total") or "none"
    result = tip_breakdown(bill, tip_base, percent, split, rounding)
    you_save = bill * percent / 100 - tip_base * percent / 100

    currency = currency_of(field_units, "bill_amount")

    def money(amount: float) -> str:
        return format_currency(amount, currency)

    result_values = {
        "tip_amount": result["tip"],
        "total_with_tip": result["total"],
        "tip_per_person": result["tip_per_person"],
        "total_per_person": result["per_person"],
        "effective_tip_rate": result["effective_rate"],
        "tip_calculated_on": tip_base,
        "you_save": you_save,
    }
    formatted = {
        "tip_amount": money(result["tip"]),
        "total_with_tip": money(result["total"]),
        "tip_per_person": money(result["tip_per_person"]),
        "total_per_person": money(result["per_person"]),
        "effective_tip_rate": format_percent(result["effective_rate"]),
        "tip_calculated_on": money(tip_base),
        "you_save": money(you_save) if you_save > 0.005 else "—",
    }
    summary = interpolate(get_text(t, "formats.summary", "Tip: {tip_amount}."), formatted)

    chart = [
        {"percent": pct, "tip": tip_base * pct / 100, "selected": pct == percent}
        for pct in CHART_PERCENTAGES
    ]
    table = comparison_rows(
        TABLE_PERCENTAGES,
        lambda pct: {
            k: v
            for k, v in tip_breakdown(bill, tip_base, pct, split, rounding).items()
            if k in ("tip", "total", "per_person")
        },
        key="percent",
    )
    return ResultsEnvelope(
        is_valid=True,
        values=result_values,
        formatted=formatted,
        summary=summary,
        metadata={"chart_data": chart, "table_data": table},
    )
