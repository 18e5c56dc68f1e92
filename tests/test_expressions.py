import mpmath
import pytest

from dimensioned import DimensionedValue, parse_value, ureg
from errors import DimensionMismatch, NegativeBaseNonIntegerExponent
from expressions import (
    Add,
    Div,
    Literal,
    Mul,
    NamedConstant,
    Pow,
    Sub,
    evaluate,
    invalidate,
    render,
    size,
)


def _lit(value, unit=None) -> Literal:
    if unit is None:
        return Literal(DimensionedValue(mpmath.mpf(value)))
    return Literal(DimensionedValue(mpmath.mpf(value), unit))


def _pi() -> NamedConstant:
    return NamedConstant("pi", DimensionedValue(+mpmath.pi))


def test_evaluate_binary_operators() -> None:
    two, three = _lit(2), _lit(3)

    assert evaluate(Add(two, three)).magnitude == 5
    assert evaluate(Sub(two, three)).magnitude == -1
    assert evaluate(Mul(two, three)).magnitude == 6
    assert evaluate(Div(three, two)).magnitude == mpmath.mpf("1.5")
    assert evaluate(Pow(two, three)).magnitude == 8


def test_evaluate_is_memoized() -> None:
    expr = Mul(_pi(), _lit(2))

    first = evaluate(expr)
    assert "value" in expr.__dict__
    assert evaluate(expr) is first


def test_invalidate_drops_cached_values_of_subtree() -> None:
    inner = Add(_pi(), _pi())
    expr = Mul(inner, _lit(2))
    evaluate(expr)

    invalidate(expr)

    assert "value" not in expr.__dict__
    assert "value" not in inner.__dict__
    assert mpmath.almosteq(evaluate(expr).magnitude, 4 * mpmath.pi)


def test_invalidate_recomputes_at_new_precision() -> None:
    expr = Div(_lit(1), _lit(3))
    low = evaluate(expr).magnitude

    invalidate(expr)
    with mpmath.workdps(60):
        high = evaluate(expr).magnitude

    assert high != low
    assert mpmath.almosteq(high, low, rel_eps=mpmath.mpf(10) ** -25)


def test_evaluate_propagates_dimension_errors() -> None:
    expr = Add(_lit(1, ureg.meter), _pi())
    with pytest.raises(DimensionMismatch):
        evaluate(expr)

    expr = Pow(_lit(-2), _lit("0.5"))
    with pytest.raises(NegativeBaseNonIntegerExponent):
        evaluate(expr)


def test_units_flow_through_the_tree() -> None:
    length = NamedConstant("L", parse_value("2 m"))
    expr = Div(Mul(length, length), _lit(4))

    value = evaluate(expr)

    assert value.unit == ureg.meter ** 2
    assert value.magnitude == 1


def test_size_counts_nodes() -> None:
    assert size(_pi()) == 1
    assert size(Add(_pi(), _lit(1))) == 3
    assert size(Sub(_lit(0), Mul(_pi(), _pi()))) == 5


def test_render_fully_parenthesized() -> None:
    expr = Sub(_lit(0), Pow(_pi(), Div(_lit(1), _lit(2))))

    assert render(expr) == "(0 - (pi ^ (1 / 2)))"


def test_render_literal_with_unit() -> None:
    expr = Mul(_pi(), _lit(2, ureg.meter))

    assert render(expr, 10) == "(pi * 2 m)"


def test_structural_equality() -> None:
    assert Add(_pi(), _lit(1)) == Add(_pi(), _lit(1))
    assert Add(_pi(), _lit(1)) != Mul(_pi(), _lit(1))
    assert Add(_pi(), _lit(1)) != Add(_lit(1), _pi())
