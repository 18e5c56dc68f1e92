import mpmath
import pytest

from constants import Constant
from dimensioned import DimensionedValue, parse_value

DIGITS = 20


@pytest.fixture(autouse=True)
def working_precision():
    """Every test runs at the working precision of a 20-digit search."""
    with mpmath.workdps(DIGITS + 10):
        yield DIGITS


@pytest.fixture
def pi_constant() -> Constant:
    return Constant(DimensionedValue(+mpmath.pi), "pi", is_default=True)


@pytest.fixture
def e_constant() -> Constant:
    return Constant(DimensionedValue(+mpmath.e), "e", is_default=True)


@pytest.fixture
def length_constant() -> Constant:
    return Constant(parse_value("2 m"), "L")
