"""Command-line interface for Calcdeck.

Developer-facing: lists calculators, validates every registered
configuration and runs one calculator from the shell.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from .config import DEFAULT_LOCALE, LOG_LEVEL, VERSION
from .logging_config import get_logger
from .translate import Translator
from .types import ConfigurationError, ResultsEnvelope, UnsupportedUnit, ValidationError

logger = get_logger("cli")

# Exit code when a calculator runs but reports its inputs as invalid
EXIT_INVALID_INPUTS = 2


def _parse_pairs(pairs: list[str] | None, flag: str) -> dict[str, str]:
    """Turn repeated ``key=value`` arguments into an ordered mapping."""
    parsed: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValidationError(f"{flag} expects key=value, got '{pair}'", code="BAD_ARGUMENT")
        parsed[key.strip()] = value.strip()
    return parsed


def _cmd_list(output_format: str) -> int:
    from .api import get_config, list_calculators

    rows = []
    for calc_id in list_calculators():
        config = get_config(calc_id)
        rows.append(
            {
                "id": calc_id,
                "category": config.category,
                "name": Translator(config.t, DEFAULT_LOCALE)("name", calc_id),
                "locales": list(config.locales()),
            }
        )
    if output_format == "json":
        print(json.dumps(rows, indent=2, ensure_ascii=False))
        return 0
    for row in rows:
        print(f"{row['id']:<16} {row['category']:<14} {row['name']} [{', '.join(row['locales'])}]")
    return 0


def _cmd_validate(output_format: str) -> int:
    from .api import validate_all

    report = validate_all()
    if output_format == "json":
        print(json.dumps(report, indent=2, ensure_ascii=False))
    else:
        for calc_id, problems in report.items():
            if not problems:
                print(f"[OK] {calc_id}")
                continue
            print(f"[FAIL] {calc_id}")
            for problem in problems:
                print(f"  - {problem}")
    return 1 if any(report.values()) else 0


def print_result_pretty(
    calc_id: str, result: ResultsEnvelope, locale: str, output_format: str = "human"
) -> None:
    """Print an envelope as JSON or as labelled lines."""
    if output_format == "json":
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
        return
    from .api import get_config

    config = get_config(calc_id)
    tr = Translator(config.t, locale)
    print(tr("name", calc_id))
    print("-" * 50)
    if not result.is_valid:
        print("Inputs are incomplete or out of range.")
        return
    for res in config.results:
        text = result.formatted.get(res.id)
        if text is None:
            continue
        marker = "*" if res.type == "primary" else " "
        print(f"{marker} {tr.result_label(res.id)}: {text}")
    if result.summary:
        print()
        print(result.summary)


def _cmd_run(args: Any, output_format: str) -> int:
    from .api import calculate

    values = _parse_pairs(args.set, "--set")
    units = _parse_pairs(args.unit, "--unit")
    result = calculate(
        args.calculator, values=values, units=units, locale=args.locale, preset=args.preset
    )
    print_result_pretty(args.calculator, result, args.locale, output_format)
    return 0 if result.is_valid else EXIT_INVALID_INPUTS


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Calcdeck CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="calcdeck")
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=LOG_LEVEL.upper(),
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("list", help="List registered calculators")
    sub.add_parser("validate", help="Validate every calculator configuration")
    run = sub.add_parser("run", help="Run one calculator")
    run.add_argument("calculator", help="Calculator id (see 'calcdeck list')")
    run.add_argument(
        "--set", action="append", metavar="KEY=VALUE", help="Input value (repeatable, applied in order)"
    )
    run.add_argument(
        "--unit", action="append", metavar="KEY=UNIT", help="Display unit for a field (repeatable)"
    )
    run.add_argument("--locale", type=str, default=DEFAULT_LOCALE, help="Locale for result text")
    run.add_argument("--preset", type=str, help="Preset id applied before --set values")
    args = parser.parse_args(argv)

    from .logging_config import setup_logging

    setup_logging(
        level=args.log_level, log_file=args.log_file, json_lines=args.format == "json"
    )

    if args.version:
        print(VERSION)
        return 0
    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "list":
            return _cmd_list(args.format)
        if args.command == "validate":
            return _cmd_validate(args.format)
        return _cmd_run(args, args.format)
    except (ConfigurationError, UnsupportedUnit, ValidationError) as e:
        logger.debug("Command '%s' failed", args.command, exc_info=True)
        print(f"Error [{e.code}]: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main_entry())
