import mpmath
import pytest

from dimensioned import DIMENSIONLESS, ONE, ZERO, DimensionedValue, parse_value, ureg
from errors import (
    ConfigurationError,
    DimensionError,
    DimensionMismatch,
    NegativeBaseNonIntegerExponent,
    NonDimensionlessExponent,
    NonIntegerExponentOnDimensionedBase,
    ValueParseError,
)


def test_add_then_sub_round_trip() -> None:
    a = DimensionedValue(mpmath.mpf("12345.678901"), ureg.meter)
    b = DimensionedValue(mpmath.mpf("0.1"), ureg.meter)

    result = a.add(b).sub(b)

    assert result.unit == a.unit
    assert mpmath.almosteq(result.magnitude, a.magnitude, rel_eps=mpmath.mpf(10) ** -25)


def test_add_mismatched_dimensions_raises() -> None:
    length = parse_value("5 m")
    time = parse_value("2 s")

    with pytest.raises(DimensionMismatch):
        length + time
    with pytest.raises(DimensionMismatch):
        length - time


def test_dimension_errors_are_arithmetic_errors() -> None:
    assert issubclass(DimensionMismatch, DimensionError)
    assert issubclass(DimensionError, ArithmeticError)
    assert issubclass(ValueParseError, ConfigurationError)


def test_multiply_and_divide_combine_units() -> None:
    length = parse_value("3 m")
    time = parse_value("2 s")

    speed = length / time
    area = length * length

    assert speed.unit == ureg.meter / ureg.second
    assert speed.magnitude == mpmath.mpf("1.5")
    assert area.unit == ureg.meter ** 2
    assert (length / length).is_dimensionless()


def test_pow_requires_dimensionless_exponent() -> None:
    two_meters = parse_value("2 m")
    for base in (parse_value("3"), parse_value("3 s"), parse_value("-3")):
        with pytest.raises(NonDimensionlessExponent):
            base.pow(two_meters)


def test_pow_negative_base_non_integer_exponent_raises() -> None:
    base = DimensionedValue(mpmath.mpf(-2))
    with pytest.raises(NegativeBaseNonIntegerExponent):
        base.pow(DimensionedValue(mpmath.mpf("0.5")))
    with pytest.raises(NegativeBaseNonIntegerExponent):
        base ** DimensionedValue(+mpmath.pi)


def test_pow_negative_base_integer_exponent() -> None:
    result = DimensionedValue(mpmath.mpf(-2)).pow(DimensionedValue(mpmath.mpf(3)))

    assert result.magnitude == -8
    assert result.is_dimensionless()


def test_pow_dimensioned_base_needs_integer_exponent() -> None:
    length = parse_value("3 m")

    with pytest.raises(NonIntegerExponentOnDimensionedBase):
        length.pow(DimensionedValue(mpmath.mpf("1.5")))

    squared = length.pow(DimensionedValue(mpmath.mpf(2)))
    assert squared.magnitude == 9
    assert squared.unit == ureg.meter ** 2


def test_equality_is_exact() -> None:
    assert DimensionedValue(mpmath.mpf(0)) == ZERO
    assert DimensionedValue(mpmath.mpf(1)) == ONE
    assert DimensionedValue(mpmath.mpf(1), ureg.meter) != ONE
    assert DimensionedValue(mpmath.mpf(1) + mpmath.mpf(10) ** -25) != ONE


def test_parse_value_with_and_without_space() -> None:
    spaced = parse_value("5 m")
    packed = parse_value("1.0s")

    assert spaced.magnitude == 5
    assert spaced.unit == ureg.meter
    assert packed.magnitude == 1
    assert packed.unit == ureg.second


def test_parse_value_normalises_to_base_units() -> None:
    value = parse_value("5 km")

    assert value.magnitude == 5000
    assert value.unit == ureg.meter
    assert value.same_dimension(parse_value("1 m"))


def test_parse_value_scales_dimensionless_units() -> None:
    percent = parse_value("5 percent")
    ratio = parse_value("5 km/m")

    assert percent.unit == DIMENSIONLESS
    assert mpmath.almosteq(percent.magnitude, mpmath.mpf("0.05"), rel_eps=mpmath.mpf(10) ** -25)
    assert ratio.unit == DIMENSIONLESS
    assert ratio.magnitude == 5000
    assert parse_value("5").magnitude == 5


def test_parse_value_compound_unit() -> None:
    g = parse_value("9.80665 m/s^2")

    assert g.magnitude == mpmath.mpf("9.80665")
    assert g.unit == ureg.meter / ureg.second ** 2


def test_parse_value_reads_full_precision() -> None:
    value = parse_value("3.14159265358979323846264338327")

    assert value.unit == DIMENSIONLESS
    assert mpmath.almosteq(value.magnitude, mpmath.pi, rel_eps=mpmath.mpf(10) ** -28)


@pytest.mark.parametrize("text", ["", "m", "abc", "5 notaunit"])
def test_parse_value_rejects_malformed_text(text) -> None:
    with pytest.raises(ValueParseError):
        parse_value(text)


def test_format_appends_unit_suffix() -> None:
    assert parse_value("5 m").format(10) == "5 m"
    assert DimensionedValue(mpmath.mpf(2)).format(10) == "2"
    assert DimensionedValue(+mpmath.pi).format(5) == "3.1416"
