"""
Spending / Wellbeing Impact Analysis: command-line runner
=========================================================
Loads transactions and wellbeing entries from JSON files, runs the full
analysis once and prints the result as JSON on stdout.

Usage:
    python impact_cli.py --transactions tx.json --wellbeing wb.json
    python impact_cli.py ... --scenarios scenarios.json --compare-baseline
    python impact_cli.py ... --quick
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

from pydantic import BaseModel, TypeAdapter, ValidationError

from config import Settings
from models import ScenarioDefinition, Transaction, WellbeingEntry
from pipeline.impact_pipeline import ImpactPipeline

log = logging.getLogger("impact_cli")

EXIT_OK, EXIT_FAILED, EXIT_BAD_INPUT = 0, 1, 2


def _load_list(path: str, item_type) -> List[Any]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return TypeAdapter(List[item_type]).validate_python(raw)


def to_jsonable(value: Any) -> Any:
    """Recursively convert pipeline output into JSON-safe structures."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Spending / wellbeing impact analysis")
    parser.add_argument("--transactions", required=True,
                        help="JSON array of {date, category, amount}")
    parser.add_argument("--wellbeing", required=True,
                        help="JSON array of wellbeing entries")
    parser.add_argument("--scenarios",
                        help="JSON array of {name, changes} (default: built-in scenarios)")
    parser.add_argument("--compare-baseline", action="store_true",
                        help="Classify scenario impacts against the baseline prediction")
    parser.add_argument("--quick", action="store_true",
                        help="Print a quick insight from the most recent records only")
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: IMPACT_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    if args.compare_baseline:
        settings = dataclasses.replace(settings, compare_to_baseline=True)

    level = (args.log_level or settings.log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        print(f"Invalid log level: {level}", file=sys.stderr)
        return EXIT_BAD_INPUT

    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    try:
        transactions = _load_list(args.transactions, Transaction)
        wellbeing = _load_list(args.wellbeing, WellbeingEntry)
        scenarios = _load_list(args.scenarios, ScenarioDefinition) if args.scenarios else None
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        log.error("Invalid input: %s", e)
        return EXIT_BAD_INPUT

    if args.quick:
        insight = ImpactPipeline(settings).quick_insight(transactions, wellbeing)
        json.dump(to_jsonable(insight), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
        return EXIT_OK

    result = ImpactPipeline(settings).run(transactions, wellbeing, scenarios)
    result["overall_status"] = ImpactPipeline.overall_status(result)
    json.dump(to_jsonable(result), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return EXIT_FAILED if result["overall_status"] == "failed" else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
