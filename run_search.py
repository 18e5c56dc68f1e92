#!/usr/bin/env python3
"""
Closed-form search for a target value.

Finds arithmetic expressions over named constants and small integers whose
value is closest to the target, shortest expression first on ties.

Usage:
    python3 run_search.py                                   # asks for every parameter
    python3 run_search.py --digits 20 --target "9.81 m/s^2" --max-expr-size 2 --max-int 5
    python3 run_search.py --constants my_constants.conf     # custom constant file
    python3 run_search.py --validate                        # re-verify the winners
    python3 run_search.py --estimate --max-expr-size 3 --max-int 5
    python3 run_search.py --benchmark                       # calibrate time estimates
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

import mpmath

from config import GUARD_DIGITS, OutputConfig, RunConfig
from constants import CONSTANTS_FILENAME, ConstantRegistry, default_constants, load_constants
from dimensioned import DimensionedValue
from errors import ConfigurationError
from generator import SearchResult
from prompts import collect_parameters
from run_identity import RunRecord
from search import format_result, search_with_stats
from search_budget import (
    COST_MODEL_FILENAME,
    CostModel,
    candidates_per_depth,
    estimate_candidates,
    format_duration,
)
from validator import ResultValidator

VERSION = "0.3.0"
YEAR = "2024"


class SearchRunner:
    """One search run: bookkeeping, search, report."""

    def __init__(self, config: RunConfig, constants: ConstantRegistry, output: OutputConfig):
        self.config = config
        self.constants = constants
        self.output = output
        output.prepare()

        self.record = RunRecord(output.save_dir, config, constants)
        self.log_file = output.log_dir / f"search_{time.strftime('%Y%m%d_%H%M%S')}.log"

    def log(self, msg: str):
        """Log to file and console."""
        timestamp = time.strftime("%H:%M:%S")
        line = f"[{timestamp}] {msg}"
        print(line, flush=True)
        with open(self.log_file, "a") as f:
            f.write(line + "\n")

    def run(self, validate: bool = False) -> List[SearchResult]:
        digits = self.config.precision_digits
        self.log(f"target: {self.config.target.format(digits)}")
        self.log(f"constants: {', '.join(self.constants.names()) or '(none)'}")
        self.log(f"run id: {self.record.run_id}  ({self.record.seed})")

        previous = self.record.load_results()
        if previous:
            self.log(f"  previous results for this run id from {previous.get('completed_at')}")

        self.record.write_seed()

        outcome = search_with_stats(self.config, list(self.constants))
        stats = outcome.stats
        self.log(
            f"{stats.emitted} candidates, {stats.rejected} rejected, "
            f"{stats.admissible} admissible, {outcome.n_distinct_errors} distinct errors "
            f"in {outcome.elapsed_seconds:.1f}s"
        )
        if stats.truncated:
            self.log(f"  ⚠ time limit of {self.config.time_limit_seconds}s reached, search truncated")

        with mpmath.workdps(self.config.working_digits):
            for result in outcome.results:
                print(format_result(result, digits))

        self.record.save_results(outcome.results, outcome.elapsed_seconds)

        if validate:
            self._validate(outcome.results)

        return outcome.results

    def _validate(self, results: List[SearchResult]):
        validator = ResultValidator(self.config)
        self.log(f"=== VALIDATION at {validator.validation_digits} digits ===")
        with mpmath.workdps(self.config.working_digits):
            checks = validator.validate_all(results)
        failed = 0
        for check in checks:
            mark = "✓" if check.is_consistent else "✗"
            self.log(f"  {mark} {check.expression}")
            if not check.is_consistent:
                failed += 1
                for note in check.notes.splitlines():
                    self.log(f"      {note}")
        self.log(f"  {len(checks) - failed}/{len(checks)} results consistent")


def run_benchmark(max_expr_size: int = 2, max_int: int = 3) -> CostModel:
    """
    Time short searches on a dimensionless target at increasing precision
    and calibrate the cost model.
    """
    print("\n=== BENCHMARK ===\n")
    print(f"{'Size':>6} {'Digits':>8} {'Candidates':>12} {'Time':>10}")
    print("-" * 40)

    benchmark_data = []
    for size in range(1, max_expr_size + 1):
        for digits in (15, 50, 200):
            with mpmath.workdps(digits + GUARD_DIGITS):
                config = RunConfig(
                    precision_digits=digits,
                    target=DimensionedValue(mpmath.mpf(10) / 3),
                    max_expr_size=size,
                    max_int_literal=max_int,
                    simplify=False,
                )
                outcome = search_with_stats(config, default_constants()[:3])
            n = outcome.stats.emitted
            print(f"{size:>6} {config.working_digits:>8} {n:>12} {format_duration(outcome.elapsed_seconds):>10}")
            benchmark_data.append((n, config.working_digits, outcome.elapsed_seconds))

    model = CostModel.calibrated(benchmark_data)
    print(f"\n  k={model.k:.2e}, alpha={model.alpha:.2f}, beta={model.beta:.2f}")
    return model


def estimate_only(n_constants: int, max_int: int, max_expr_size: int, digits: int,
                  model: Optional[CostModel] = None):
    """Print the candidate count bound and time estimate per depth."""
    model = model or CostModel()
    working = digits + GUARD_DIGITS
    print(f"\n=== ESTIMATE: {n_constants} constants, integers up to {max_int}, {working} digits ===\n")
    print(f"model: k={model.k:.2e}, alpha={model.alpha:.2f}, beta={model.beta:.2f}\n")
    print(f"{'Depth':>6} {'Candidates':>16} {'Time':>12}")
    print("-" * 38)
    for depth, n in enumerate(candidates_per_depth(n_constants, max_int, max_expr_size), start=1):
        print(f"{depth:>6} {n:>16} {format_duration(model.estimate_seconds(n, working)):>12}")
    total = estimate_candidates(n_constants, max_int, max_expr_size)
    print(f"\n  total ≤ {total} candidates, ≈ {format_duration(model.estimate_seconds(total, working))}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search closed-form expressions approximating a target value",
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="help", help="Show this help and exit")
    parser.add_argument("-v", "--version", action="store_true", help="Show the version and exit")
    parser.add_argument("--digits", type=int, default=None, help="Significant digits of the search")
    parser.add_argument("--target", type=str, default=None, help="Target value with optional unit (e.g. '9.81 m/s^2')")
    parser.add_argument("--max-expr-size", type=int, default=None, help="Maximum expression depth")
    parser.add_argument("--max-int", type=int, default=None, help="Largest integer literal (0 disables them)")
    parser.add_argument("--constants", type=Path, default=Path(CONSTANTS_FILENAME),
                        help=f"Constant definition file (default: {CONSTANTS_FILENAME})")
    parser.add_argument("--top-k", type=int, default=30, help="Number of results reported (default: 30)")
    parser.add_argument("--no-simplify", action="store_true", help="Report expressions as generated")
    parser.add_argument("--time-limit", type=float, default=None, help="Stop expanding after this many seconds")
    parser.add_argument("--validate", action="store_true", help="Re-verify the results independently")
    parser.add_argument("--save-dir", type=Path, default=Path("save"), help="Run bookkeeping directory")
    parser.add_argument("--estimate", action="store_true", help="Only print the search size estimate")
    parser.add_argument("--benchmark", action="store_true", help="Calibrate the time estimate")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"closed-form search version {VERSION}, {YEAR}")
        return 0

    try:
        model_file = args.save_dir / COST_MODEL_FILENAME
        if args.benchmark:
            model = run_benchmark()
            model.save(model_file)
            print(f"  saved to {model_file}")
            return 0

        if args.estimate:
            with mpmath.workdps(15):
                n_constants = len(load_constants(args.constants))
            estimate_only(
                n_constants,
                args.max_int if args.max_int is not None else 0,
                args.max_expr_size if args.max_expr_size is not None else 1,
                args.digits if args.digits is not None else 15,
                CostModel.load(model_file),
            )
            return 0

        params = collect_parameters(args.digits, args.target, args.max_expr_size, args.max_int)
        with mpmath.workdps(params.working_digits):
            config = params.to_run_config(
                top_k=args.top_k,
                simplify=not args.no_simplify,
                time_limit_seconds=args.time_limit,
            )
            constants = load_constants(args.constants)
            output = OutputConfig(save_dir=args.save_dir)
            SearchRunner(config, constants, output).run(validate=args.validate)
    except ConfigurationError as ex:
        print(f"error: {ex}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
