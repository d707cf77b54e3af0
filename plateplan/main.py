#!/usr/bin/env python3
"""
Command line entry point for plateplan.

Commands:
    generate   Ask the LLM for a plan (fallback plan without an API key)
    normalize  Normalize a saved AI response file
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from plateplan.agents.planning_agent import MealPlanGenerationAgent
from plateplan.data.models import MealPlanRequest, NormalizationFailure
from plateplan.llm_provider import get_llm_provider
from plateplan.normalizer import normalize
from plateplan.response_parser import ResponseParseError, parse_model_json

logger = logging.getLogger(__name__)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plateplan", description="AI meal plan generation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate a meal plan")
    gen.add_argument("--start-date", type=_iso_date, help="First day of the plan (YYYY-MM-DD)")
    gen.add_argument("--people", type=int, default=1, help="Number of people")
    gen.add_argument("--diet", help="Diet type, e.g. vegetarian")
    gen.add_argument("--allergy", action="append", default=[], help="Allergy (repeatable)")
    gen.add_argument("--cuisine", action="append", default=[], help="Preferred cuisine (repeatable)")
    gen.add_argument("--goal", action="append", default=[], help="Health goal (repeatable)")
    gen.add_argument("--budget", type=float, help="Weekly budget")
    gen.add_argument("--max-time", type=int, default=30, help="Max cooking time in minutes")
    gen.add_argument("--null-llm", action="store_true", help="Skip the LLM and use the fallback plan")

    norm = subparsers.add_parser("normalize", help="Normalize a saved AI response")
    norm.add_argument("file", type=Path, help="File with the raw AI JSON (or reply text)")
    norm.add_argument("--start-date", type=_iso_date, help="Start date used if the file is empty")

    return parser


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def run_generate(args) -> int:
    try:
        request = MealPlanRequest(
            diet_type=args.diet,
            allergies=args.allergy,
            budget_weekly=args.budget,
            people_count=args.people,
            max_cooking_time=args.max_time,
            cuisine_types=args.cuisine,
            health_goals=args.goal,
            start_date=args.start_date,
        )
    except ValidationError as e:
        print(f"Error: invalid request options: {e}", file=sys.stderr)
        return 1

    agent = MealPlanGenerationAgent(provider=get_llm_provider(use_null=args.null_llm))
    result = agent.generate(request)
    _print_json(result.to_dict())
    return 0 if result.success else 1


def run_normalize(args) -> int:
    try:
        text = args.file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    try:
        raw = parse_model_json(text) if text.strip() else None
    except ResponseParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        plan = normalize(raw, args.start_date)
    except NormalizationFailure as e:
        _print_json({"success": False, "reason": e.reason.value, "error": str(e)})
        return 1

    _print_json({"success": True, "plan": plan.to_dict()})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "generate":
        return run_generate(args)
    return run_normalize(args)


if __name__ == "__main__":
    sys.exit(main())
