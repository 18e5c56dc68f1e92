"""
Error kinds raised by the search.

Two families with different reach:
- DimensionError and its subclasses are local to a single candidate
  expression. The generator rejects the candidate and keeps searching.
- ConfigurationError and its subclasses are fatal and are raised before
  any search starts (ambiguous constant registry, malformed run parameters).
"""


class SearchError(Exception):
    """Root of every error raised by the search."""


class DimensionError(SearchError, ArithmeticError):
    """Illegal arithmetic between dimensioned values."""

    def __init__(self, message: str, left=None, right=None):
        self.left = left
        self.right = right
        super().__init__(message)


class DimensionMismatch(DimensionError):
    """Addition or subtraction between different physical dimensions."""


class NonDimensionlessExponent(DimensionError):
    """Exponent carries a physical unit."""


class NonIntegerExponentOnDimensionedBase(DimensionError):
    """Units only support integer powers."""


class NegativeBaseNonIntegerExponent(DimensionError):
    """Negative dimensionless base raised to a non-integer power."""


class ConfigurationError(SearchError, ValueError):
    """Malformed run parameters or constant definitions."""


class DuplicateConstantName(ConfigurationError):
    """Two constants registered under the same name."""

    def __init__(self, name: str, message: str = ""):
        self.name = name
        super().__init__(message or f"constant '{name}' is already defined")


class ValueParseError(ConfigurationError):
    """Text that cannot be read as a number with an optional unit."""
