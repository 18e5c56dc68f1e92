"""
Expression trees over dimensioned values.

The node set is closed: Literal, NamedConstant and the binary operators
Add, Sub, Mul, Div, Pow. Nodes are immutable and tree shaped (each node
owns its children), built bottom-up by the generator. A node's value is
computed on first access and memoized; its size is memoized separately.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import ClassVar, Tuple

from dimensioned import DimensionedValue


class Expr:
    """Base class for expression nodes."""

    @cached_property
    def value(self) -> DimensionedValue:
        return self._evaluate()

    @cached_property
    def size(self) -> int:
        return 1 + sum(child.size for child in self.children)

    @property
    def children(self) -> Tuple["Expr", ...]:
        return ()

    def _evaluate(self) -> DimensionedValue:
        raise NotImplementedError

    def render(self, digits: int = 15) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Literal(Expr):
    """An integer (or any fixed) value, possibly scaled to a unit."""
    constant: DimensionedValue

    def _evaluate(self) -> DimensionedValue:
        return self.constant

    def render(self, digits: int = 15) -> str:
        return self.constant.format(digits)


@dataclass(frozen=True)
class NamedConstant(Expr):
    """A registered constant, rendered by name."""
    name: str
    constant: DimensionedValue

    def _evaluate(self) -> DimensionedValue:
        return self.constant

    def render(self, digits: int = 15) -> str:
        return self.name


@dataclass(frozen=True)
class BinaryOp(Expr):
    lhs: Expr
    rhs: Expr

    symbol: ClassVar[str] = "?"

    @property
    def children(self) -> Tuple[Expr, ...]:
        return (self.lhs, self.rhs)

    def _evaluate(self) -> DimensionedValue:
        # Both children are always evaluated
        left = self.lhs.value
        right = self.rhs.value
        return self.apply(left, right)

    def apply(self, left: DimensionedValue, right: DimensionedValue) -> DimensionedValue:
        raise NotImplementedError

    def render(self, digits: int = 15) -> str:
        return f"({self.lhs.render(digits)} {self.symbol} {self.rhs.render(digits)})"


@dataclass(frozen=True)
class Add(BinaryOp):
    symbol: ClassVar[str] = "+"

    def apply(self, left, right):
        return left.add(right)


@dataclass(frozen=True)
class Sub(BinaryOp):
    symbol: ClassVar[str] = "-"

    def apply(self, left, right):
        return left.sub(right)


@dataclass(frozen=True)
class Mul(BinaryOp):
    symbol: ClassVar[str] = "*"

    def apply(self, left, right):
        return left.mul(right)


@dataclass(frozen=True)
class Div(BinaryOp):
    symbol: ClassVar[str] = "/"

    def apply(self, left, right):
        return left.div(right)


@dataclass(frozen=True)
class Pow(BinaryOp):
    symbol: ClassVar[str] = "^"

    def apply(self, left, right):
        return left.pow(right)


def evaluate(node: Expr) -> DimensionedValue:
    """Memoized value of `node`. Dimension errors propagate to the caller."""
    return node.value


def invalidate(node: Expr) -> None:
    """
    Drop the memoized values of `node` and its whole subtree.

    Trees are never mutated, so this is only needed when the working
    precision changes and the values must be recomputed.
    """
    node.__dict__.pop("value", None)
    for child in node.children:
        invalidate(child)


def size(node: Expr) -> int:
    return node.size


def render(node: Expr, digits: int = 15) -> str:
    """Fully parenthesized infix form of `node`."""
    return node.render(digits)


__all__ = [
    "Add",
    "BinaryOp",
    "Div",
    "Expr",
    "Literal",
    "Mul",
    "NamedConstant",
    "Pow",
    "Sub",
    "evaluate",
    "invalidate",
    "render",
    "size",
]
