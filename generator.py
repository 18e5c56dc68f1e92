"""
Bounded combinatorial generator of candidate expressions.

ALGORITHM:
1. Seeds: every registered constant, then every integer literal
   1..max_int_literal carrying the target's unit. Seeds are scored at depth 1.
2. Scoring a candidate e at depth d:
   a. Evaluate e. An arithmetic rejection (dimension error, zero division,
      non-finite value) drops e for good.
   b. If e's unit matches the target's dimension, record |e - target|.
   c. Expand e at depth d + 1, whether or not it matched: a dimensionally
      wrong intermediate may still combine into a correct expression.
3. Expanding b returns at once past max_expr_size. Otherwise b is combined
   with every constant, with integer literals and with 0 through the
   legal operators (see _expand).

The expansion deliberately emits forms that the next level could also
reach (c - b, c / b, 0 - b): the next level may not exist at the size limit.

COMPLEXITY: each expansion emits O(n_constants + max_int_literal)
candidates, so the search grows as that branching factor to the power
max_expr_size. This is the only CPU-bound path of the program.
"""

import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import mpmath

from config import RunConfig
from constants import Constant
from dimensioned import DimensionedValue
from expressions import Add, Div, Expr, Literal, Mul, NamedConstant, Pow, Sub


@dataclass
class SearchResult:
    """A dimensionally admissible candidate and its error."""
    error: mpmath.mpf
    expression: Expr


@dataclass
class GeneratorStats:
    emitted: int = 0
    rejected: int = 0
    admissible: int = 0
    truncated: bool = False


@dataclass
class Generator:
    """
    Depth-first enumeration of expressions for one run.

    Holds the run's explicit context (configuration, constants, deadline)
    and the working set. Must run inside the mpmath precision the
    constants and the target were built with.
    """
    config: RunConfig
    constants: List[Constant]
    results: List[SearchResult] = field(default_factory=list)
    stats: GeneratorStats = field(default_factory=GeneratorStats)
    deadline: Optional[float] = None

    def __post_init__(self):
        self.constants = list(self.constants)
        self.target = self.config.target
        self._constant_nodes = [NamedConstant(c.name, c.value) for c in self.constants]
        if self.config.time_limit_seconds is not None and self.deadline is None:
            self.deadline = time.monotonic() + self.config.time_limit_seconds

    # === ENTRY POINT ===

    def run(self) -> List[SearchResult]:
        """Score and expand every seed; return the (undeduplicated) working set."""
        for seed in self.seeds():
            self.score(seed, 1)
        return self.results

    def seeds(self) -> Iterable[Expr]:
        yield from self._constant_nodes
        for i in range(1, self.config.max_int_literal + 1):
            yield self._literal(i, self.target.unit)

    # === SCORING ===

    def score(self, expr: Expr, depth: int) -> None:
        self.stats.emitted += 1
        try:
            value = expr.value
        except ArithmeticError:
            self.stats.rejected += 1
            return
        if mpmath.isinf(value.magnitude) or mpmath.isnan(value.magnitude):
            self.stats.rejected += 1
            return

        if value.same_dimension(self.target):
            self.stats.admissible += 1
            self.results.append(
                SearchResult(abs(value.magnitude - self.target.magnitude), expr)
            )
        self.expand(expr, depth + 1)

    # === EXPANSION ===

    def expand(self, b: Expr, depth: int) -> None:
        if depth > self.config.max_expr_size:
            return
        if self.deadline is not None and time.monotonic() > self.deadline:
            self.stats.truncated = True
            return
        self._expand(b, depth)

    def _expand(self, b: Expr, depth: int) -> None:
        bv = b.value
        unit = bv.unit
        target_unit = self.target.unit
        b_dimensionless = bv.is_dimensionless()
        b_is_int = bv.is_integer()
        b_nonzero = bv.magnitude != 0

        for c, node in zip(self.constants, self._constant_nodes):
            cv = c.value
            if b_dimensionless:
                c_pow_b_emitted = False
                if cv.is_dimensionless():
                    if cv.magnitude > 0 or (cv.magnitude < 0 and b_is_int):
                        self.score(Pow(node, b), depth)
                        c_pow_b_emitted = True
                    if bv.magnitude > 0 or (bv.magnitude < 0 and cv.is_integer()):
                        self.score(Pow(b, node), depth)
                    elif cv.is_integer():
                        self.score(Pow(b, node), depth)
                if b_is_int and not c_pow_b_emitted:
                    # Dimensioned constants to integer powers
                    self.score(Pow(node, b), depth)

            self.score(Mul(b, node), depth)
            if cv.magnitude != 0:
                self.score(Div(b, node), depth)
            if b_nonzero:
                self.score(Div(node, b), depth)

            if cv.same_dimension(bv):
                self.score(Add(b, node), depth)
                self.score(Sub(b, node), depth)
                self.score(Sub(node, b), depth)

        # Scaling literals carry whatever unit takes b to the target's unit
        up_unit = target_unit / unit
        down_unit = unit / target_unit
        for i in range(2, self.config.max_int_literal + 1):
            self.score(Mul(b, self._literal(i, up_unit)), depth)
            self.score(Div(b, self._literal(i, down_unit)), depth)
            if b_dimensionless:
                if b_is_int:
                    self.score(Pow(self._literal(i), b), depth)
                self.score(Pow(b, self._literal(i)), depth)

        inverse_unit = unit * target_unit
        for i in range(1, self.config.max_int_literal + 1):
            if b_nonzero:
                self.score(Div(self._literal(i, inverse_unit), b), depth)
            self.score(Add(b, self._literal(i, unit)), depth)
            self.score(Sub(b, self._literal(i, unit)), depth)
            self.score(Sub(self._literal(i, unit), b), depth)

        # Sign flip, available even when no further level will run
        self.score(Sub(self._literal(0, unit), b), depth)

    @staticmethod
    def _literal(i: int, unit=None) -> Literal:
        if unit is None:
            return Literal(DimensionedValue(mpmath.mpf(i)))
        return Literal(DimensionedValue(mpmath.mpf(i), unit))


def generate(config: RunConfig, constants: Iterable[Constant]) -> Generator:
    """Run the generator for one configuration and return it (results + stats)."""
    generator = Generator(config, list(constants))
    generator.run()
    return generator
