#!/usr/bin/env python3
"""
wffctl.py - proof tutor core CLI

Command-line access to the propositional core:
- parse: check a formula and print its canonical form
- generate: build a problem at a given difficulty
- validate: check a JSON proof, optionally against its problem
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from derivation.proof import Problem, Proof
from derivation.verification import check_solution, validate
from generator.bounds import load_bounds
from generator.planned import PlannedProblemGenerator
from generator.replay import replay_derivation
from normalization.ast_canon import normalize, parse
from normalization.tiles import formula_from_string
from normalization.wff import first_error_index

logger = logging.getLogger("wffctl")


def cmd_parse(args: argparse.Namespace) -> int:
    try:
        formula = formula_from_string(args.formula)
    except ValueError as exc:
        print(f"[FAIL] {exc}")
        return 1
    if parse(formula) is None:
        index = first_error_index(formula)
        print(f"[FAIL] Not a WFF: {formula} (problem at symbol {index + 1})")
        return 1
    print(normalize(formula).text)
    return 0


def _print_proof(proof: Proof) -> None:
    for line in proof.lines:
        indent = "  " * line.depth
        print(f"{line.line_number:>3}. {indent}{line.formula.text:<30} {line.justification.display_text}")


def cmd_generate(args: argparse.Namespace) -> int:
    bounds = load_bounds(args.config)
    generator = PlannedProblemGenerator(bounds=bounds, seed=args.seed)
    problem = generator.generate(args.difficulty)
    if problem is None:
        print(f"[FAIL] No problem found at difficulty {args.difficulty}; try a lower one.")
        return 1

    if args.json:
        print(json.dumps(problem.to_dict(), indent=2, ensure_ascii=False))
        return 0

    print(f"{problem.name} [{problem.id}] difficulty={problem.difficulty}")
    for premise in problem.premises:
        print(f"  premise: {premise.text}")
    print(f"  goal:    {problem.conclusion.text}")
    if args.proof:
        print()
        _print_proof(replay_derivation(problem))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        with open(args.path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except OSError as exc:
        print(f"[FAIL] Cannot read proof document: {exc}")
        return 1
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        print(f"[FAIL] Malformed proof document: {exc}")
        return 1

    try:
        proof = Proof.from_dict(document)
        problem = Problem.from_dict(document["problem"]) if "problem" in document else None
    except (KeyError, TypeError, ValueError) as exc:
        logger.debug("Rejected proof document %s", args.path, exc_info=True)
        print(f"[FAIL] Malformed proof document: {exc}")
        return 1

    result = check_solution(problem, proof) if problem is not None else validate(proof)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.is_valid:
        print(f"[PASS] {result.error_message}")
    else:
        print(f"[FAIL] {result.error_message}")
    return 0 if result.is_valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Propositional proof tutor core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wffctl.py parse "(p -> q) & ~r"
  wffctl.py generate --difficulty 3 --seed 7 --proof
  wffctl.py validate proof.json
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    p_parse = sub.add_parser("parse", help="Check a formula and print its canonical form")
    p_parse.add_argument("formula", help="Formula; ASCII aliases & | -> <-> ~ are accepted")
    p_parse.set_defaults(func=cmd_parse)

    p_gen = sub.add_parser("generate", help="Generate a problem")
    p_gen.add_argument("--difficulty", type=int, default=3)
    p_gen.add_argument("--seed", type=int, default=None)
    p_gen.add_argument("--config", default=None, help="Generator YAML (default: $WFF_GENERATOR_CONFIG)")
    p_gen.add_argument("--json", action="store_true", help="Print the problem as JSON")
    p_gen.add_argument("--proof", action="store_true", help="Also print the replayed proof")
    p_gen.set_defaults(func=cmd_generate)

    p_val = sub.add_parser("validate", help="Validate a JSON proof document")
    p_val.add_argument("path")
    p_val.add_argument("--json", action="store_true", help="Print the result as JSON")
    p_val.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for wffctl CLI."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
