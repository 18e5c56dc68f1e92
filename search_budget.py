"""
Search cost estimates.

STRATEGY: the generator's work is (number of candidates) x (cost of one
evaluation at the working precision). The candidate count has a closed-form
upper bound; the per-candidate cost is modelled as
    T(seconds) ~ k * N^alpha * P^beta
with N = candidates and P = working digits, calibrated from short runs.
"""

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

# Default calibration (single core, mpmath with gmpy2 absent).
# alpha = 1: every candidate costs the same.
DEFAULT_K = 2.0e-5
DEFAULT_ALPHA = 1.0
DEFAULT_BETA = 0.3

# Written by --benchmark in the save directory, read by --estimate
COST_MODEL_FILENAME = "cost_model.json"

# Upper bound of operator applications per (candidate, constant) pair:
# c^b, b^c, b*c, b/c, c/b, b+c, b-c, c-b
EMITS_PER_CONSTANT = 8
# b*i, b/i, i^b, b^i for i in 2..max_int
EMITS_PER_SCALING_INT = 4
# i/b, b+i, b-i, i-b for i in 1..max_int
EMITS_PER_OFFSET_INT = 4


def branching_factor(n_constants: int, max_int: int) -> int:
    """Upper bound of candidates emitted by one expansion."""
    return (
        EMITS_PER_CONSTANT * n_constants
        + EMITS_PER_SCALING_INT * max(0, max_int - 1)
        + EMITS_PER_OFFSET_INT * max_int
        + 1  # 0 - b
    )


def candidates_per_depth(n_constants: int, max_int: int, max_expr_size: int) -> List[int]:
    """Upper bound of candidates scored at each depth 1..max_expr_size."""
    seeds = n_constants + max_int
    factor = branching_factor(n_constants, max_int)
    return [seeds * factor ** d for d in range(max_expr_size)]


def estimate_candidates(n_constants: int, max_int: int, max_expr_size: int) -> int:
    """
    Upper bound of the total number of candidates scored by a search.

    Actual counts are lower: illegal powers, zero divisors and unit
    mismatches prune part of every expansion.
    """
    return sum(candidates_per_depth(n_constants, max_int, max_expr_size))


@dataclass
class CostModel:
    """Timing model T = k * N^alpha * P^beta (seconds)."""
    k: float = DEFAULT_K
    alpha: float = DEFAULT_ALPHA
    beta: float = DEFAULT_BETA

    def estimate_seconds(self, n_candidates: int, digits: int) -> float:
        return self.k * (n_candidates ** self.alpha) * (digits ** self.beta)

    @classmethod
    def calibrated(cls, benchmark_data: Sequence[Tuple[int, int, float]]) -> "CostModel":
        """
        Fit k, alpha, beta from benchmark data.

        benchmark_data: list of (n_candidates, working_digits, elapsed_seconds)
        """
        model = cls()
        usable = [d for d in benchmark_data if d[0] > 0 and d[1] > 0 and d[2] > 0]
        if not usable:
            return model

        if len(usable) < 3:
            # Too few points for a full fit: adjust only k, keep alpha and beta
            n, p, t = max(usable, key=lambda x: x[0])
            model.k = t / (n ** model.alpha * p ** model.beta)
            return model

        # Log-linear fit: log(T) = log(k) + alpha*log(N) + beta*log(P)
        log_n = np.array([math.log(d[0]) for d in usable])
        log_p = np.array([math.log(d[1]) for d in usable])
        log_t = np.array([math.log(d[2]) for d in usable])
        A = np.column_stack([np.ones(len(log_n)), log_n, log_p])
        coeffs, _, rank, _ = np.linalg.lstsq(A, log_t, rcond=None)
        if rank < 3:
            # All runs at one precision: beta is not identifiable
            n, p, t = max(usable, key=lambda x: x[0])
            model.k = t / (n ** model.alpha * p ** model.beta)
            return model

        c0, c1, c2 = coeffs
        model.k = math.exp(c0)
        model.alpha = float(c1)
        model.beta = float(c2)
        return model

    def save(self, path: Path):
        """Write the model as JSON (atomic replace)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(asdict(self), indent=2))
        tmp.replace(path)

    @classmethod
    def load(cls, path: Path) -> "CostModel":
        """Model saved by a previous benchmark, defaults when there is none."""
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            state = json.loads(path.read_text())
            return cls(k=float(state["k"]), alpha=float(state["alpha"]), beta=float(state["beta"]))
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError):
            return cls()


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f} min"
    if seconds < 86400:
        return f"{seconds / 3600:.1f} h"
    return f"{seconds / 86400:.1f} days"
