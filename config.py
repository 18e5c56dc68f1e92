"""
Run configuration for the closed-form search.
All search parameters are carried by one explicit value, never globals.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dimensioned import DimensionedValue
from errors import ConfigurationError

# Extra digits carried by mpmath on top of the requested precision,
# so that errors are still exact at the displayed digit count.
GUARD_DIGITS = 10

# Number of candidates reported by the selector
DEFAULT_TOP_K = 30


@dataclass
class RunConfig:
    """Search parameters."""

    # === PRECISION ===
    # Significant digits used to display values and errors.
    # The search itself runs at precision_digits + GUARD_DIGITS.
    precision_digits: int

    # === TARGET ===
    # Value to approximate, in SI base units.
    target: DimensionedValue

    # === SEARCH BOUNDS ===
    # Recursion depth of the generator. 1 only scores the seeds
    # (each constant, each integer literal); every extra level wraps
    # the previous candidates in one more binary operation.
    max_expr_size: int

    # Integer literals 1..max_int_literal are combined with every candidate.
    # 0 disables integer literals.
    max_int_literal: int

    # === REPORT ===
    top_k: int = DEFAULT_TOP_K
    simplify: bool = True

    # Stop expanding once this many seconds have passed (None: unbounded)
    time_limit_seconds: Optional[float] = None

    def __post_init__(self):
        if self.precision_digits <= 0:
            raise ConfigurationError(f"precision must be a positive digit count, got {self.precision_digits}")
        if self.max_expr_size <= 0:
            raise ConfigurationError(f"max expr size must be positive, got {self.max_expr_size}")
        if self.max_int_literal < 0:
            raise ConfigurationError(f"integer constant bound must be >= 0, got {self.max_int_literal}")
        if self.top_k <= 0:
            raise ConfigurationError(f"top-k must be positive, got {self.top_k}")
        if self.time_limit_seconds is not None and self.time_limit_seconds <= 0:
            raise ConfigurationError(f"time limit must be positive, got {self.time_limit_seconds}")

    @property
    def working_digits(self) -> int:
        return self.precision_digits + GUARD_DIGITS


@dataclass
class OutputConfig:
    """Where run bookkeeping is written."""

    save_dir: Path = field(default_factory=lambda: Path("save"))

    @property
    def log_dir(self) -> Path:
        return self.save_dir / "logs"

    def prepare(self):
        self.save_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(exist_ok=True)
