"""Type definitions and result dataclasses for consistent engine responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ResolvedInputs:
    """Defaulted, link-applied and visibility-filtered inputs for one invocation."""

    values: dict[str, Any] = field(default_factory=dict)
    field_units: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"values": dict(self.values), "field_units": dict(self.field_units)}


@dataclass
class ResultsEnvelope:
    """Result of running one calculator's compute function."""

    is_valid: bool
    values: dict[str, Any] = field(default_factory=dict)
    formatted: dict[str, str] = field(default_factory=dict)
    summary: str = ""
    metadata: dict[str, Any] | None = None

    @classmethod
    def invalid(cls) -> ResultsEnvelope:
        """Envelope returned when required inputs are missing or out of range."""
        return cls(is_valid=False, values={}, formatted={}, summary="")

    @property
    def chart_data(self) -> list[dict[str, Any]] | None:
        if self.metadata is None:
            return None
        return self.metadata.get("chart_data")

    @property
    def table_data(self) -> list[dict[str, Any]] | None:
        if self.metadata is None:
            return None
        return self.metadata.get("table_data")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {
            "is_valid": self.is_valid,
            "values": self.values,
            "formatted": self.formatted,
            "summary": self.summary,
        }
        if self.metadata is not None:
            result_dict["metadata"] = self.metadata
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.is_valid:
            return "ResultsEnvelope(is_valid=False)"
        parts = [f"is_valid={self.is_valid}", f"formatted={self.formatted!r}"]
        if self.summary:
            parts.append(f"summary={self.summary!r}")
        if self.metadata is not None:
            parts.append(f"metadata_keys={sorted(self.metadata)!r}")
        return f"ResultsEnvelope({', '.join(parts)})"


class ValidationError(Exception):
    """Raised when a request to the engine is malformed (unknown calculator, preset)."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(Exception):
    """Raised when a calculator configuration is badly authored."""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG_ERROR",
        problems: list[str] | None = None,
    ):
        self.message = message
        self.code = code
        self.problems = list(problems or [])
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.problems:
            return self.message
        details = "\n".join(f"  - {p}" for p in self.problems)
        return f"{self.message}\n{details}"


class UnsupportedUnit(Exception):
    """Raised when a unit string or unit type cannot be converted."""

    def __init__(self, message: str, code: str = "UNSUPPORTED_UNIT"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message
