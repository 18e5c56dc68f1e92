"""
Interactive collection of run parameters.

Values given on the command line are used as-is; the others are asked for
on the terminal, in the order: digits, target, max expr size, integer bound.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from config import GUARD_DIGITS, RunConfig
from dimensioned import parse_value
from errors import ConfigurationError


@dataclass
class RunParameters:
    """Raw run parameters, before the target is parsed."""
    digits: int
    target_text: str
    max_expr_size: int
    max_int_literal: int

    @property
    def working_digits(self) -> int:
        return self.digits + GUARD_DIGITS

    def to_run_config(self, **options) -> RunConfig:
        """
        Build the RunConfig. Call inside mpmath.workdps(self.working_digits):
        the target is read at the current precision.
        """
        return RunConfig(
            precision_digits=self.digits,
            target=parse_value(self.target_text),
            max_expr_size=self.max_expr_size,
            max_int_literal=self.max_int_literal,
            **options,
        )


def _parse_int(text: str, label: str) -> int:
    try:
        return int(text.strip())
    except (AttributeError, ValueError) as exc:
        raise ConfigurationError(f"{label}: expected an integer, got '{text}'") from exc


def collect_parameters(
    digits: Optional[int] = None,
    target: Optional[str] = None,
    max_expr_size: Optional[int] = None,
    max_int_literal: Optional[int] = None,
    ask: Optional[Callable[[str], str]] = None,
) -> RunParameters:
    """Fill the missing parameters by asking on the terminal."""
    ask = ask or input
    if digits is None:
        digits = _parse_int(ask("digits: "), "digits")
    if digits <= 0:
        raise ConfigurationError(f"digits: must be positive, got {digits}")
    if target is None:
        target = ask("target: ").strip()
    if not target:
        raise ConfigurationError("target: a value is required")
    if max_expr_size is None:
        max_expr_size = _parse_int(ask("max expr size: "), "max expr size")
    if max_int_literal is None:
        max_int_literal = _parse_int(ask("integer constants up to: "), "integer constants up to")
    return RunParameters(digits, target, max_expr_size, max_int_literal)
