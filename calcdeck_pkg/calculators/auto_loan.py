"""Auto loan calculator: payment, interest and amortization for a vehicle purchase."""

from __future__ import annotations

from typing import Any, Mapping

from ..contract import CalculatorConfig, InputDefinition, Preset, ResultDefinition, ShowWhen
from ..formatting import (
    amortization_schedule,
    annuity_payment,
    format_currency,
    format_months,
    format_percent,
    schedule_totals,
    yearly_rollup,
)
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from .common import CURRENCY_UNITS, currency_of, in_range, number, provided


def _money(input_id: str, show_when: ShowWhen | None = None, required: bool = False) -> InputDefinition:
    return InputDefinition(
        id=input_id,
        type="number",
        default_value=None,
        min=0,
        unit_type="currency",
        default_unit="USD",
        allowed_units=CURRENCY_UNITS,
        show_when=show_when,
        required=required,
    )


CONFIG = CalculatorConfig(
    id="auto_loan",
    version="4.0",
    category="finance",
    icon="🚗",
    inputs=(
        _money("vehicle_price", required=True),
        _money("down_payment"),
        InputDefinition(id="include_tradein", type="toggle", default_value=False),
        _money("tradein_value", ShowWhen("include_tradein", True)),
        _money("tradein_owed", ShowWhen("include_tradein", True)),
        InputDefinition(id="loan_term", type="stepper", default_value=5, min=1, max=8, step=1),
        InputDefinition(
            id="interest_rate", type="number", default_value=6.5, min=0, max=30, step=0.1, suffix="%"
        ),
        InputDefinition(
            id="sales_tax", type="number", default_value=None, min=0, max=15, step=0.25, suffix="%"
        ),
        InputDefinition(id="include_tax_in_loan", type="toggle", default_value=True),
        _money("fees"),
        InputDefinition(id="include_extra_payment", type="toggle", default_value=False),
        _money("extra_monthly_payment", ShowWhen("include_extra_payment", True)),
    ),
    presets=(
        Preset(
            "new_car",
            {"vehicle_price": 35000, "down_payment": 5000, "loan_term": 5,
             "interest_rate": 5.9, "sales_tax": 7, "fees": 600},
        ),
        Preset(
            "used_car",
            {"vehicle_price": 18000, "down_payment": 2000, "loan_term": 4,
             "interest_rate": 8.5, "sales_tax": 6, "fees": 400},
        ),
    ),
    results=(
        ResultDefinition("monthly_payment", "primary", "currency", 2),
        ResultDefinition("total_loan_amount", "secondary", "currency", 2),
        ResultDefinition("total_interest", "secondary", "currency", 2),
        ResultDefinition("total_cost", "secondary", "currency", 2),
        ResultDefinition("payoff_time", "secondary", "text"),
        ResultDefinition("interest_saved", "badge", "currency", 2),
    ),
    chart={"type": "stacked_bar", "x": "year", "series": ["principal", "interest"]},
    detailed_table={"columns": ["period", "payment", "principal", "interest", "balance"]},
    faqs=("how_is_payment_calculated", "should_i_finance_tax"),
    t={
        "en": {
            "name": "Auto Loan Calculator",
            "inputs": {
                "vehicle_price": {"label": "Vehicle price"},
                "down_payment": {"label": "Down payment"},
                "include_tradein": {"label": "Include trade-in"},
                "tradein_value": {"label": "Trade-in value"},
                "tradein_owed": {"label": "Amount owed on trade-in"},
                "loan_term": {"label": "Loan term", "help_text": "Length of the loan in years"},
                "interest_rate": {"label": "Interest rate (APR)"},
                "sales_tax": {"label": "Sales tax"},
                "include_tax_in_loan": {"label": "Finance tax and fees"},
                "fees": {"label": "Dealer and registration fees"},
                "include_extra_payment": {"label": "Add extra monthly payment"},
                "extra_monthly_payment": {"label": "Extra monthly payment"},
            },
            "presets": {
                "new_car": {"label": "New car"},
                "used_car": {"label": "Used car"},
            },
            "results": {
                "monthly_payment": {"label": "Monthly payment"},
                "total_loan_amount": {"label": "Total loan amount"},
                "total_interest": {"label": "Total interest"},
                "total_cost": {"label": "Total cost"},
                "payoff_time": {"label": "Time to pay off"},
                "interest_saved": {"label": "Interest saved"},
            },
            "formats": {
                "summary": "Monthly payment: {monthly_payment} for {loan_term}. "
                "Total interest: {total_interest}. Total cost: {total_cost}.",
                "no_loan": "Your down payment and trade-in cover the full purchase, no loan needed.",
            },
            "values": {
                "year": "year", "years": "years", "month": "month", "months": "months",
                "no_loan": "No loan needed",
            },
        },
        "es": {
            "name": "Calculadora de préstamo de auto",
            "inputs": {
                "vehicle_price": {"label": "Precio del vehículo"},
                "down_payment": {"label": "Pago inicial"},
                "include_tradein": {"label": "Incluir vehículo a cuenta"},
                "tradein_value": {"label": "Valor del vehículo a cuenta"},
                "tradein_owed": {"label": "Saldo pendiente del vehículo a cuenta"},
                "loan_term": {"label": "Plazo del préstamo"},
                "interest_rate": {"label": "Tasa de interés (TAE)"},
                "sales_tax": {"label": "Impuesto sobre la venta"},
                "include_tax_in_loan": {"label": "Financiar impuestos y cargos"},
                "fees": {"label": "Cargos del concesionario y registro"},
                "include_extra_payment": {"label": "Agregar pago mensual extra"},
                "extra_monthly_payment": {"label": "Pago mensual extra"},
            },
            "presets": {
                "new_car": {"label": "Auto nuevo"},
                "used_car": {"label": "Auto usado"},
            },
            "results": {
                "monthly_payment": {"label": "Pago mensual"},
                "total_loan_amount": {"label": "Monto total del préstamo"},
                "total_interest": {"label": "Interés total"},
                "total_cost": {"label": "Costo total"},
                "payoff_time": {"label": "Tiempo para liquidar"},
                "interest_saved": {"label": "Interés ahorrado"},
            },
            "formats": {
                "summary": "Pago mensual: {monthly_payment} durante {loan_term}. "
                "Interés total: {total_interest}. Costo total: {total_cost}.",
                "no_loan": "Tu pago inicial y vehículo a cuenta cubren la compra, no necesitas préstamo.",
            },
            "values": {
                "year": "año", "years": "años", "month": "mes", "months": "meses",
                "no_loan": "No se necesita préstamo",
            },
        },
    },
)


def loan_amount(
    price: float,
    down: float,
    tradein_value: float,
    tradein_owed: float,
    tax_rate_percent: float,
    fees: float,
    finance_tax_and_fees: bool,
) -> dict[str, float]:
    """Amount financed and the tax it includes.

    Sales tax applies to the price net of the trade-in value; a trade-in
    reduces the loan by its equity (value minus amount still owed).
    """
    taxable = max(price - tradein_value, 0.0)
    tax = taxable * tax_rate_percent / 100
    net_tradein = tradein_value - tradein_owed
    amount = price - down - net_tradein
    if finance_tax_and_fees:
        amount += tax + fees
    return {
        "taxable": taxable,
        "sales_tax": tax,
        "net_tradein": net_tradein,
        "loan": max(amount, 0.0),
    }


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    price = number(values, "vehicle_price")
    if price is None or price <= 0:
        return ResultsEnvelope.invalid()
    term_years = number(values, "loan_term")
    rate = number(values, "interest_rate")
    if not in_range(term_years, 1, 8) or not in_range(rate, 0, 30):
        return ResultsEnvelope.invalid()
    money_inputs = ("down_payment", "tradein_value", "tradein_owed", "fees", "extra_monthly_payment")
    if any(provided(values, k) and not in_range(number(values, k), 0) for k in money_inputs):
        return ResultsEnvelope.invalid()
    tax_rate = number(values, "sales_tax", 0.0)
    if not in_range(tax_rate, 0, 15):
        return ResultsEnvelope.invalid()

    currency = currency_of(field_units, "vehicle_price")
    labels = t.get("values", {})

    def money(amount: float) -> str:
        return format_currency(amount, currency)

    down = number(values, "down_payment", 0.0)
    # Hidden trade-in and extra-payment fields are absent, not zero
    tradein_value = number(values, "tradein_value", 0.0)
    tradein_owed = number(values, "tradein_owed", 0.0)
    fees = number(values, "fees", 0.0)
    extra = number(values, "extra_monthly_payment", 0.0)
    financed = bool(values.get("include_tax_in_loan"))

    parts = loan_amount(price, down, tradein_value, tradein_owed, tax_rate, fees, financed)
    loan = parts["loan"]
    upfront = down + parts["net_tradein"] + (0.0 if financed else parts["sales_tax"] + fees)

    if loan <= 0:
        total_cost = price + parts["sales_tax"] + fees
        no_loan = get_text(t, "values.no_loan", "No loan needed")
        return ResultsEnvelope(
            is_valid=True,
            values={
                "monthly_payment": 0.0,
                "total_loan_amount": 0.0,
                "total_interest": 0.0,
                "total_cost": total_cost,
                "payoff_time": 0,
                "sales_tax_amount": parts["sales_tax"],
                "down_payment_percent": down / price * 100,
                "ltv_ratio": 0.0,
            },
            formatted={
                "monthly_payment": money(0),
                "total_loan_amount": money(0),
                "total_interest": money(0),
                "total_cost": money(total_cost),
                "payoff_time": no_loan,
                "interest_saved": "—",
            },
            summary=get_text(t, "formats.no_loan", no_loan),
        )

    months = int(term_years * 12)
    payment = annuity_payment(loan, rate, months)
    baseline = amortization_schedule(loan, rate, months, payment=payment)
    schedule = amortization_schedule(loan, rate, months, extra_payment=extra, payment=payment)
    base_totals = schedule_totals(baseline)
    totals = schedule_totals(schedule)

    interest_saved = base_totals["interest"] - totals["interest"]
    months_paid = totals["periods"]
    months_saved = months - months_paid
    total_cost = totals["paid"] + upfront

    term_text = format_months(months, labels)
    result_values = {
        "monthly_payment": payment,
        "total_loan_amount": loan,
        "total_interest": totals["interest"],
        "total_cost": total_cost,
        "payoff_time": months_paid,
        "sales_tax_amount": parts["sales_tax"],
        "down_payment_percent": down / price * 100,
        "ltv_ratio": loan / price * 100,
        "interest_saved": interest_saved,
        "months_saved": months_saved,
    }
    formatted = {
        "monthly_payment": money(payment),
        "total_loan_amount": money(loan),
        "total_interest": money(totals["interest"]),
        "total_cost": money(total_cost),
        "payoff_time": format_months(months_paid, labels),
        "interest_saved": money(interest_saved) if interest_saved > 0.005 else "—",
        "sales_tax_amount": money(parts["sales_tax"]),
        "down_payment_percent": format_percent(result_values["down_payment_percent"]),
        "ltv_ratio": format_percent(result_values["ltv_ratio"]),
    }
    summary = interpolate(
        get_text(t, "formats.summary", "Monthly payment: {monthly_payment} for {loan_term}."),
        {**formatted, "loan_term": term_text},
    )

    return ResultsEnvelope(
        is_valid=True,
        values=result_values,
        formatted=formatted,
        summary=summary,
        metadata={
            "chart_data": yearly_rollup(schedule),
            "table_data": [row.to_dict() for row in schedule],
        },
    )
