"""
Arbitrary-precision scalars carrying a physical unit.

Magnitudes are mpmath mpf values, units are pint units. Every value read
from text is normalised to SI base units, so two values of the same
dimension always share one unit and their magnitudes combine directly.

NOTE: mpf values are rounded to the precision active when they are created.
Parse and compute under the same mpmath.workdps context as the search.
"""

import re
from dataclasses import dataclass

import mpmath
import pint

from errors import (
    DimensionMismatch,
    NegativeBaseNonIntegerExponent,
    NonDimensionlessExponent,
    NonIntegerExponentOnDimensionedBase,
    ValueParseError,
)

ureg = pint.UnitRegistry()
DIMENSIONLESS = ureg.dimensionless

# Leading decimal number, the rest of the text is a unit expression
_NUMBER_RE = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(.*?)\s*$"
)


def same_dimension(a: pint.Unit, b: pint.Unit) -> bool:
    """True if both units describe the same physical dimension."""
    return a == b or a.dimensionality == b.dimensionality


def is_dimensionless(unit: pint.Unit) -> bool:
    return unit.dimensionless


def unit_suffix(unit: pint.Unit) -> str:
    """Human-readable unit with a leading space, empty when dimensionless."""
    if unit.dimensionless:
        return ""
    return " " + f"{unit:~P}"


@dataclass(frozen=True)
class DimensionedValue:
    """A magnitude paired with a physical unit."""

    magnitude: mpmath.mpf
    unit: pint.Unit = DIMENSIONLESS

    @classmethod
    def of(cls, magnitude, unit: pint.Unit = DIMENSIONLESS) -> "DimensionedValue":
        return cls(mpmath.mpf(magnitude), unit)

    # === ARITHMETIC ===

    def add(self, other: "DimensionedValue") -> "DimensionedValue":
        if not same_dimension(self.unit, other.unit):
            raise DimensionMismatch(
                f"attempted to add with different dimension: "
                f"{self.format(5)} + {other.format(5)}",
                self, other,
            )
        return DimensionedValue(self.magnitude + other.magnitude, self.unit)

    def sub(self, other: "DimensionedValue") -> "DimensionedValue":
        if not same_dimension(self.unit, other.unit):
            raise DimensionMismatch(
                f"attempted to subtract with different dimension: "
                f"{self.format(5)} - {other.format(5)}",
                self, other,
            )
        return DimensionedValue(self.magnitude - other.magnitude, self.unit)

    def mul(self, other: "DimensionedValue") -> "DimensionedValue":
        return DimensionedValue(self.magnitude * other.magnitude, self.unit * other.unit)

    def div(self, other: "DimensionedValue") -> "DimensionedValue":
        return DimensionedValue(self.magnitude / other.magnitude, self.unit / other.unit)

    def pow(self, other: "DimensionedValue") -> "DimensionedValue":
        """
        Raise to a dimensionless power.

        Units only support integer powers: a dimensioned base requires an
        exact integer exponent. A negative dimensionless base also requires
        one, otherwise the result would leave the reals.
        """
        if not other.unit.dimensionless:
            raise NonDimensionlessExponent(
                f"attempted to exponentiate with non-dimensionless exponent: "
                f"{self.format(5)} ^ {other.format(5)}",
                self, other,
            )
        exponent_is_int = mpmath.isint(other.magnitude)
        if not self.unit.dimensionless:
            if not exponent_is_int:
                raise NonIntegerExponentOnDimensionedBase(
                    f"attempted to exponentiate with non-integer exponent and "
                    f"non-dimensionless base: {self.format(5)} ^ {other.format(5)}",
                    self, other,
                )
            return DimensionedValue(
                self.magnitude ** other.magnitude,
                self.unit ** int(other.magnitude),
            )
        if self.magnitude < 0 and not exponent_is_int:
            raise NegativeBaseNonIntegerExponent(
                f"attempted to exponentiate with a non-integer exponent and a "
                f"negative base: {self.format(5)} ^ {other.format(5)}",
                self, other,
            )
        return DimensionedValue(self.magnitude ** other.magnitude, self.unit)

    def neg(self) -> "DimensionedValue":
        return DimensionedValue(-self.magnitude, self.unit)

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div
    __pow__ = pow
    __neg__ = neg

    # === PREDICATES ===

    def is_dimensionless(self) -> bool:
        return self.unit.dimensionless

    def is_integer(self) -> bool:
        return bool(mpmath.isint(self.magnitude))

    def same_dimension(self, other: "DimensionedValue") -> bool:
        return same_dimension(self.unit, other.unit)

    # === FORMATTING ===

    def format_magnitude(self, digits: int) -> str:
        if mpmath.isint(self.magnitude) and abs(self.magnitude) < mpmath.mpf(10) ** digits:
            return str(int(self.magnitude))
        return mpmath.nstr(self.magnitude, digits)

    def format(self, digits: int) -> str:
        """Magnitude at `digits` significant digits plus the unit suffix."""
        return self.format_magnitude(digits) + unit_suffix(self.unit)

    def __str__(self) -> str:
        return self.format(15)


ZERO = DimensionedValue(mpmath.mpf(0))
ONE = DimensionedValue(mpmath.mpf(1))


def parse_unit(text: str) -> pint.Unit:
    """Parse a unit expression such as 'm/s^2'; empty text is dimensionless."""
    text = (text or "").strip()
    if not text:
        return DIMENSIONLESS
    try:
        return ureg.parse_units(text)
    except (pint.errors.PintError, AttributeError, SyntaxError, ValueError) as exc:
        raise ValueParseError(f"unknown unit '{text}': {exc}") from exc


def parse_value(text: str) -> DimensionedValue:
    """
    Read '<number> [unit]' into a DimensionedValue in SI base units.

    The number is read by mpmath at the current precision (never through a
    float). The unit may follow with or without whitespace: '5 m', '1.0s'.
    """
    if text is None:
        raise ValueParseError("value is missing")
    match = _NUMBER_RE.match(text)
    if not match:
        raise ValueParseError(f"expected a number with an optional unit, got '{text}'")
    number, unit_text = match.groups()
    magnitude = mpmath.mpf(number)
    unit = parse_unit(unit_text)
    if unit == DIMENSIONLESS:
        return DimensionedValue(magnitude, DIMENSIONLESS)
    if unit.dimensionless:
        # percent, km/m, rad: keep the scale, drop the unit
        factor = ureg.Quantity(1, unit).to(DIMENSIONLESS)
        return DimensionedValue(magnitude * mpmath.mpf(str(factor.magnitude)), DIMENSIONLESS)

    base = ureg.Quantity(1, unit).to_base_units()
    return DimensionedValue(
        magnitude * mpmath.mpf(str(base.magnitude)),
        base.units,
    )
