#!/usr/bin/env python3
"""CLI script to run the deadline calculator on a case description file."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

import yaml

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from pydantic import ValidationError  # noqa: E402

from pawlegal.calculator.engine import DeadlineEngine  # noqa: E402
from pawlegal.calculator.models import case_situation_adapter  # noqa: E402
from pawlegal.core.clock import FixedClock, SystemClock  # noqa: E402
from pawlegal.core.config import Settings  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute statutory deadlines for a case described in YAML or JSON.",
        epilog=(
            "Exit codes: 0 when the result has no validation errors, 1 when the case "
            "description is malformed, 2 when the result carries validation errors "
            "(contradictory dates or a required companion date left empty)."
        ),
    )
    parser.add_argument(
        "case_file",
        type=str,
        help="Path to the case description (YAML or JSON).",
    )
    parser.add_argument(
        "--now",
        type=date.fromisoformat,
        default=None,
        help="Evaluation date as YYYY-MM-DD. Defaults to today.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    settings = Settings()
    clock = FixedClock(args.now) if args.now else SystemClock()

    with open(args.case_file) as fh:
        raw = yaml.safe_load(fh) or {}

    try:
        situation = case_situation_adapter.validate_python(raw)
    except ValidationError as exc:
        print(f"Invalid case description in {args.case_file}:")
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            print(f"  - {location}: {error['msg']}")
        sys.exit(1)

    engine = DeadlineEngine(config=settings.calculator)
    result = engine.compute(situation, clock.today())
    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))

    if result.validation_errors:
        sys.exit(2)


if __name__ == "__main__":
    main()
