"""Tests for the command-line interface."""

import json
import logging
import subprocess
import sys

import pytest

from calcdeck_pkg.cli import EXIT_INVALID_INPUTS, main_entry


@pytest.fixture(autouse=True)
def _reset_logging():
    """main_entry binds a handler to the captured stderr; drop it afterwards."""
    yield
    logging.getLogger("calcdeck").handlers.clear()
    logging.getLogger("calcdeck").setLevel(logging.NOTSET)


def test_cli_version():
    """Test --version flag."""
    result = subprocess.run(
        [sys.executable, "-m", "calcdeck_pkg", "--version"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.strip() != ""


def test_cli_list(capsys):
    assert main_entry(["list"]) == 0
    out = capsys.readouterr().out
    assert "auto_loan" in out
    assert "Roofing Calculator" in out


def test_cli_list_json(capsys):
    assert main_entry(["--format", "json", "list"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert {row["id"] for row in rows} >= {"tip", "bmi"}


def test_cli_validate(capsys):
    assert main_entry(["validate"]) == 0
    out = capsys.readouterr().out
    assert "[OK] auto_loan" in out
    assert "[FAIL]" not in out


def test_cli_run_human(capsys):
    code = main_entry(["run", "tip", "--set", "bill_amount=75", "--set", "service_quality=good"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Tip Calculator" in out
    assert "* Tip: $13.50" in out
    assert "Total with tip: $88.50" in out


def test_cli_run_json(capsys):
    code = main_entry(
        ["--format", "json", "run", "bmi", "--set", "weight=70", "--set", "height=175"]
    )
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["is_valid"] is True
    assert data["formatted"]["bmi"] == "22.9"


def test_cli_run_units_and_locale(capsys):
    code = main_entry(
        ["run", "bmi", "--set", "weight=154", "--set", "height=5'9\"",
         "--unit", "weight=lbs", "--unit", "height=ft_in", "--locale", "es"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Calculadora de IMC" in out
    assert "Tu IMC" in out


def test_cli_run_preset(capsys):
    assert main_entry(["run", "auto_loan", "--preset", "new_car"]) == 0
    assert "Monthly payment" in capsys.readouterr().out


def test_cli_run_invalid_inputs(capsys):
    assert main_entry(["run", "bmi", "--set", "weight=70"]) == EXIT_INVALID_INPUTS
    assert "incomplete" in capsys.readouterr().out


def test_cli_unknown_calculator(capsys):
    assert main_entry(["run", "mortgage"]) == 1
    assert "UNKNOWN_CALCULATOR" in capsys.readouterr().err


def test_cli_unsupported_unit(capsys):
    assert main_entry(["run", "bmi", "--set", "weight=70", "--unit", "weight=furlong"]) == 1
    assert "UNSUPPORTED_UNIT" in capsys.readouterr().err


def test_cli_bad_pair(capsys):
    assert main_entry(["run", "bmi", "--set", "weight"]) == 1
    assert "key=value" in capsys.readouterr().err


@pytest.mark.parametrize(
    "extra",
    [
        ["--set", "weight=70", "--set", "height=tall", "--unit", "height=cm"],
        ["--set", "weight=nan", "--set", "height=175"],
        ["--set", "weight=70", "--set", "height=inf"],
        ["--set", "weight=154", "--set", "height=tall", "--unit", "weight=lbs", "--unit", "height=ft_in"],
    ],
)
def test_cli_malformed_number_is_invalid(capsys, extra):
    assert main_entry(["run", "bmi", *extra]) == EXIT_INVALID_INPUTS
    captured = capsys.readouterr()
    assert "incomplete" in captured.out
    assert "Traceback" not in captured.err
