"""
Run-identity bookkeeping.

Every run is identified by a seed string built from its search bounds and
its constant list. The save file, named by a hash of the seed, starts with
the seed itself so a result can always be traced back to its parameters.
"""

import hashlib
import json
import time
from pathlib import Path
from typing import Iterable, List

import mpmath

from config import RunConfig
from constants import Constant
from generator import SearchResult

HASH_HEX_DIGITS = 16


def seed_string(config: RunConfig, constants: Iterable[Constant]) -> str:
    """
    Canonical description of a run's parameters.

    Example: "max_expr=2,max_int=3;pi,e,%0=9.80665 m / s²"
    Default constants appear by name, user constants by running index and value.
    """
    parts: List[str] = []
    user_index = 0
    for constant in constants:
        if constant.is_default:
            parts.append(constant.name)
        else:
            parts.append(f"%{user_index}={constant.value.format(config.precision_digits)}")
            user_index += 1
    return f"max_expr={config.max_expr_size},max_int={config.max_int_literal};" + ",".join(parts)


def seed_hash(seed: str) -> str:
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:HASH_HEX_DIGITS]


class RunRecord:
    """Save file and result sidecar of one run."""

    def __init__(self, save_dir: Path, config: RunConfig, constants: Iterable[Constant]):
        self.save_dir = Path(save_dir)
        self.save_dir.mkdir(parents=True, exist_ok=True)
        self.config = config
        self.seed = seed_string(config, constants)
        self.run_id = seed_hash(self.seed)
        self.seed_file = self.save_dir / self.run_id
        self.results_file = self.save_dir / f"{self.run_id}.json"

    def write_seed(self):
        self.seed_file.write_text(self.seed + "\n")

    def save_results(self, results: List[SearchResult], elapsed_seconds: float = 0.0):
        """Write the reported results next to the seed file (atomic replace)."""
        digits = self.config.precision_digits
        state = {
            "seed": self.seed,
            "target": self.config.target.format(digits),
            "precision_digits": digits,
            "completed_at": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "elapsed_seconds": elapsed_seconds,
            "results": [
                {
                    "expression": r.expression.render(digits),
                    "error": mpmath.nstr(r.error, digits),
                    "size": r.expression.size,
                }
                for r in results
            ],
        }
        tmp = self.results_file.with_suffix(".tmp")
        tmp.write_text(json.dumps(state, indent=2, ensure_ascii=False))
        tmp.replace(self.results_file)

    def load_results(self) -> dict:
        if not self.results_file.exists():
            return {}
        try:
            return json.loads(self.results_file.read_text())
        except (json.JSONDecodeError, OSError):
            return {}
