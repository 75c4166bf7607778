"""File transfer time calculator across network links and storage interfaces."""

from __future__ import annotations

import math
from typing import Any, Mapping, NamedTuple

from ..contract import CalculatorConfig, InputDefinition, ResultDefinition
from ..formatting import (
    comparison_rows,
    format_duration,
    format_duration_compact,
    format_number,
    format_percent,
)
from ..translate import get_text, interpolate
from ..types import ResultsEnvelope
from ..units import convert_from_base
from .common import base_value, in_range, number


class Interface(NamedTuple):
    mbps: float
    label: str
    efficiency: float


INTERFACES = {
    "adsl": Interface(8, "ADSL", 0.85),
    "4g": Interface(50, "4G / LTE", 0.60),
    "cable": Interface(200, "Cable / DOCSIS 3.1", 0.75),
    "5g": Interface(1000, "5G Sub-6", 0.50),
    "5g_mmwave": Interface(4000, "5G mmWave", 0.35),
    "fiber": Interface(1000, "Fiber FTTH", 0.93),
    "fiber10g": Interface(10000, "Fiber 10G GPON", 0.90),
    "wifi5": Interface(867, "Wi-Fi 5 (ac)", 0.45),
    "wifi6": Interface(1200, "Wi-Fi 6 (ax)", 0.50),
    "wifi6e": Interface(2400, "Wi-Fi 6E (6 GHz)", 0.50),
    "wifi7": Interface(5800, "Wi-Fi 7 (be)", 0.45),
    "ethernet": Interface(1000, "Gigabit Ethernet", 0.94),
    "ethernet10g": Interface(10000, "10G Ethernet", 0.93),
    "usb2": Interface(480, "USB 2.0", 0.60),
    "usb3": Interface(5000, "USB 3.2 Gen 1", 0.60),
    "usb32": Interface(20000, "USB 3.2 Gen 2x2", 0.55),
    "usb4": Interface(40000, "USB4 v1", 0.50),
    "usb4v2": Interface(80000, "USB4 v2", 0.45),
    "thunderbolt4": Interface(40000, "Thunderbolt 4", 0.55),
    "thunderbolt5": Interface(80000, "Thunderbolt 5", 0.50),
    "sata3": Interface(6000, "SATA III", 0.88),
    "nvme3": Interface(32000, "NVMe Gen 3", 0.85),
    "nvme4": Interface(64000, "NVMe Gen 4", 0.80),
    "nvme5": Interface(128000, "NVMe Gen 5", 0.70),
}
CHART_INTERFACES = (
    "adsl", "4g", "cable", "5g", "fiber", "wifi6", "wifi7",
    "ethernet", "ethernet10g", "usb3", "usb4", "thunderbolt5", "nvme4",
)

_INTERFACE_LABELS = {key: iface.label for key, iface in INTERFACES.items()}
_DURATION_WORDS_ES = {
    "day": "día", "days": "días", "hour": "hora", "hours": "horas",
    "minute": "minuto", "minutes": "minutos", "second": "segundo", "seconds": "segundos",
    "less_than_a_second": "Menos de un segundo",
}

CONFIG = CalculatorConfig(
    id="transfer_time",
    version="4.0",
    category="technology",
    icon="📡",
    inputs=(
        InputDefinition(
            id="file_size", type="number", default_value=None, min=0,
            unit_type="data", default_unit="gb", allowed_units=("kb", "mb", "gb", "tb"),
            required=True,
        ),
        InputDefinition(
            id="connection_type", type="select", default_value="fiber",
            options=("custom",) + tuple(INTERFACES),
            linked_values={key: {"speed": iface.mbps} for key, iface in INTERFACES.items()},
        ),
        InputDefinition(
            id="speed", type="number", default_value=None, min=0,
            unit_type="data_rate", default_unit="mbps", allowed_units=("kbps", "mbps", "gbps"),
            required=True,
        ),
        InputDefinition(
            id="overhead_percent", type="slider", default_value=10, min=0, max=50, step=1, suffix="%"
        ),
    ),
    results=(
        ResultDefinition("transfer_time", "primary", "text"),
        ResultDefinition("effective_speed", "secondary", "text"),
        ResultDefinition("data_size", "secondary", "text"),
    ),
    chart={"type": "bar", "x": "interface", "series": ["log_seconds"], "scale": "log10"},
    detailed_table={"columns": ["interface", "mbps", "seconds", "time"]},
    t={
        "en": {
            "name": "File Transfer Time Calculator",
            "inputs": {
                "file_size": {"label": "File size"},
                "connection_type": {
                    "label": "Connection type",
                    "options": {"custom": "Custom speed", **_INTERFACE_LABELS},
                },
                "speed": {"label": "Connection speed"},
                "overhead_percent": {"label": "Protocol overhead"},
            },
            "results": {
                "transfer_time": {"label": "Estimated transfer time"},
                "effective_speed": {"label": "Effective speed"},
                "data_size": {"label": "Data to transfer"},
            },
            "formats": {
                "summary": "Transferring {data_size} at {effective_speed} takes {transfer_time}.",
            },
        },
        "es": {
            "name": "Calculadora de tiempo de transferencia",
            "inputs": {
                "file_size": {"label": "Tamaño del archivo"},
                "connection_type": {
                    "label": "Tipo de conexión",
                    "options": {"custom": "Velocidad personalizada", **_INTERFACE_LABELS},
                },
                "speed": {"label": "Velocidad de conexión"},
                "overhead_percent": {"label": "Sobrecarga del protocolo"},
            },
            "results": {
                "transfer_time": {"label": "Tiempo estimado de transferencia"},
                "effective_speed": {"label": "Velocidad efectiva"},
                "data_size": {"label": "Datos a transferir"},
            },
            "formats": {
                "summary": "Transferir {data_size} a {effective_speed} tarda {transfer_time}.",
            },
            "values": _DURATION_WORDS_ES,
        },
    },
)


def transfer_seconds(size_bytes: float, bits_per_second: float, overhead_fraction: float) -> float:
    """Seconds to move ``size_bytes`` over a link losing ``overhead_fraction`` to protocol."""
    effective = bits_per_second * (1 - overhead_fraction)
    if effective <= 0:
        return math.inf
    return size_bytes * 8 / effective


def compute(
    *, values: Mapping[str, Any], field_units: Mapping[str, str], t: Mapping[str, Any]
) -> ResultsEnvelope:
    size_bytes = base_value(values, field_units, "file_size", "data", "gb")
    bps = base_value(values, field_units, "speed", "data_rate", "mbps")
    overhead = number(values, "overhead_percent", 0.0)
    if size_bytes is None or size_bytes <= 0 or bps is None or bps <= 0:
        return ResultsEnvelope.invalid()
    if not in_range(overhead, 0, 50):
        return ResultsEnvelope.invalid()

    seconds = transfer_seconds(size_bytes, bps, overhead / 100)
    effective_mbps = convert_from_base(bps * (1 - overhead / 100), "mbps", "data_rate")
    size_unit = field_units.get("file_size", "gb")
    size_display = convert_from_base(size_bytes, size_unit, "data")

    formatted = {
        "transfer_time": format_duration(seconds, t.get("values")),
        "effective_speed": f"{format_number(effective_mbps)} Mbps",
        "data_size": f"{format_number(size_display)} {size_unit.upper()}",
        "overhead": format_percent(overhead, 0),
    }

    def core(key: str) -> dict[str, Any]:
        iface = INTERFACES[key]
        secs = transfer_seconds(size_bytes, iface.mbps * 1e6, 1 - iface.efficiency)
        return {"label": iface.label, "mbps": iface.mbps, "seconds": secs}

    table = comparison_rows(
        INTERFACES,
        lambda key: {**core(key), "time": format_duration_compact(core(key)["seconds"])},
        key="interface",
    )
    chart = [
        {
            "interface": key,
            "label": INTERFACES[key].label,
            "log_seconds": math.log10(max(core(key)["seconds"], 0.001)),
        }
        for key in CHART_INTERFACES
    ]

    summary = interpolate(
        get_text(t, "formats.summary", "Transfer time: {transfer_time}."), formatted
    )
    return ResultsEnvelope(
        is_valid=True,
        values={
            "transfer_time": seconds,
            "effective_speed": effective_mbps,
            "data_size": size_bytes,
        },
        formatted=formatted,
        summary=summary,
        metadata={"chart_data": chart, "table_data": table},
    )
