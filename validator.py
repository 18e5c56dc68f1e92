"""
INDEPENDENT re-verification of the reported expressions.

PRINCIPLE: a reported error must survive a different computation path.

Validation strategies:
1. Recomputation at higher precision (2 * digits + 50) with mpmath, default
   constants recomputed from scratch at that precision.
2. Recomputation through sympy (exact symbolic constants, evalf).
3. Both recomputed errors must agree with the reported error to the
   displayed precision.
"""

from dataclasses import dataclass
from typing import List, Optional

import mpmath
import sympy

from config import RunConfig
from constants import DEFAULT_CONSTANTS, default_constant
from expressions import Add, BinaryOp, Div, Expr, Literal, Mul, NamedConstant, Pow, Sub
from generator import SearchResult


@dataclass
class ValidationResult:
    """Outcome of the validation of one reported expression."""
    expression: str
    error_reported: mpmath.mpf
    error_high_precision: Optional[mpmath.mpf]
    error_sympy: Optional[mpmath.mpf]
    is_consistent: bool
    notes: str


_SYMPY_OPERATORS = {
    Add: lambda a, b: a + b,
    Sub: lambda a, b: a - b,
    Mul: lambda a, b: a * b,
    Div: lambda a, b: a / b,
    Pow: lambda a, b: a ** b,
}


class ResultValidator:
    """Independent validator of search results."""

    def __init__(self, config: RunConfig):
        self.config = config
        self.validation_digits = 2 * config.precision_digits + 50

    def validate_all(self, results: List[SearchResult]) -> List[ValidationResult]:
        return [self.validate(r) for r in results]

    def validate(self, result: SearchResult) -> ValidationResult:
        digits = self.config.precision_digits
        notes = []

        # === LEVEL 1: mpmath at higher precision ===
        error_high = None
        try:
            with mpmath.workdps(self.validation_digits):
                value = self._rebuild(result.expression).value
                error_high = abs(value.magnitude - self.config.target.magnitude)
            notes.append(f"mpmath@{self.validation_digits}: {mpmath.nstr(error_high, digits)}")
        except ArithmeticError as ex:
            notes.append(f"mpmath@{self.validation_digits} failed: {ex}")

        # === LEVEL 2: sympy ===
        error_sympy = self._error_with_sympy(result.expression)
        if error_sympy is not None:
            notes.append(f"sympy: {mpmath.nstr(error_sympy, digits)}")
        else:
            notes.append("sympy: not available for this expression")

        # === VERDICT ===
        is_consistent = error_high is not None and self._agrees(error_high, result.error)
        if error_sympy is not None:
            is_consistent = is_consistent and self._agrees(error_sympy, result.error)

        return ValidationResult(
            expression=result.expression.render(digits),
            error_reported=result.error,
            error_high_precision=error_high,
            error_sympy=error_sympy,
            is_consistent=is_consistent,
            notes="\n".join(notes),
        )

    def _agrees(self, recomputed: mpmath.mpf, reported: mpmath.mpf) -> bool:
        # Both errors are differences against the same target: compare them
        # on the target's scale, to the displayed digit count.
        scale = max(mpmath.mpf(1), abs(self.config.target.magnitude))
        tolerance = scale * mpmath.mpf(10) ** (-self.config.precision_digits)
        return abs(recomputed - reported) <= tolerance

    def _rebuild(self, node: Expr) -> Expr:
        """Same tree, with default constants recomputed at the current precision."""
        if isinstance(node, NamedConstant):
            if node.name in DEFAULT_CONSTANTS:
                return NamedConstant(node.name, default_constant(node.name).value)
            return NamedConstant(node.name, node.constant)
        if isinstance(node, Literal):
            return Literal(node.constant)
        if isinstance(node, BinaryOp):
            return type(node)(self._rebuild(node.lhs), self._rebuild(node.rhs))
        raise TypeError(f"Unknown expression node '{type(node).__name__}'")

    def _to_sympy(self, node: Expr):
        if isinstance(node, NamedConstant):
            if node.name in DEFAULT_CONSTANTS:
                return DEFAULT_CONSTANTS[node.name].symbolic()
            return self._sympy_number(node.constant.magnitude)
        if isinstance(node, Literal):
            return self._sympy_number(node.constant.magnitude)
        if isinstance(node, BinaryOp):
            return _SYMPY_OPERATORS[type(node)](self._to_sympy(node.lhs), self._to_sympy(node.rhs))
        raise TypeError(f"Unknown expression node '{type(node).__name__}'")

    def _sympy_number(self, magnitude: mpmath.mpf):
        if mpmath.isint(magnitude):
            return sympy.Integer(int(magnitude))
        return sympy.Float(mpmath.nstr(magnitude, self.config.working_digits), self.config.working_digits)

    def _error_with_sympy(self, node: Expr) -> Optional[mpmath.mpf]:
        """
        Error of `node` recomputed by sympy, None if sympy cannot evaluate it
        to a real number.
        """
        try:
            expr = self._to_sympy(node)
            value = expr.evalf(self.validation_digits)
            if not value.is_real or not value.is_finite:
                return None
            with mpmath.workdps(self.validation_digits):
                magnitude = mpmath.mpf(str(value))
                return abs(magnitude - self.config.target.magnitude)
        except (TypeError, ValueError, ArithmeticError):
            return None
