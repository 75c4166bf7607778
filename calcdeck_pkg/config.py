"""Centralized configuration for Calcdeck.

This module defines:
- Locale settings (default locale, supported locales)
- Currency defaults used when a field carries no unit
- Limits for period-by-period derivations (amortization, projections)
- Numeric tolerances shared by the engine and its tests
- Logging defaults

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with CALCDECK_)
"""

import os

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("calcdeck")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Locales
DEFAULT_LOCALE = os.getenv("CALCDECK_DEFAULT_LOCALE", "en")
SUPPORTED_LOCALES = tuple(
    loc.strip()
    for loc in os.getenv("CALCDECK_SUPPORTED_LOCALES", "en,es,pt,fr,de").split(",")
    if loc.strip()
)

# Currency used for currency fields when no unit is supplied
DEFAULT_CURRENCY = os.getenv("CALCDECK_DEFAULT_CURRENCY", "USD").upper()

# Derivation limits (amortization schedules, weekly projections)
MAX_SCHEDULE_PERIODS = int(
    os.getenv("CALCDECK_MAX_SCHEDULE_PERIODS", "600")
)  # months
MAX_PROJECTION_WEEKS = int(os.getenv("CALCDECK_MAX_PROJECTION_WEEKS", "104"))

# Numeric tolerance for round-trips and chart/total reconciliation
FLOAT_TOLERANCE = float(os.getenv("CALCDECK_FLOAT_TOLERANCE", "1e-9"))

# Logging
LOG_LEVEL = os.getenv("CALCDECK_LOG_LEVEL", "WARNING")
