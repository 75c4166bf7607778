"""Calcdeck package: declarative calculator engine with units, resolution and formatting."""

__all__ = [
    "config",
    "contract",
    "resolution",
    "units",
    "formatting",
    "translate",
    "calculators",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "list_calculators",
    "get_config",
    "get_translation",
    "resolve",
    "calculate",
    "validate_all",
]
