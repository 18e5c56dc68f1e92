"""
Post-hoc algebraic clean-up of generated expressions.

Only removes the redundancy the generator produces on purpose:
additive and multiplicative neutral elements and the double reciprocal.
Identity checks compare a child's evaluated value with a dimensionless
0 or 1 exactly, so any subexpression worth exactly zero or one counts.

Applied to winning expressions before display, never during generation
(it would collapse the diversity the search relies on).
"""

from typing import Optional

from dimensioned import ONE, ZERO
from expressions import Add, Div, Expr, Mul, Sub


def _rewrite_once(node: Expr) -> Optional[Expr]:
    """Apply the first matching rule at `node`, or return None."""
    if isinstance(node, Add):
        if node.lhs.value == ZERO:          # 0 + x
            return node.rhs
        if node.rhs.value == ZERO:          # x + 0
            return node.lhs
    elif isinstance(node, Sub):
        if node.rhs.value == ZERO:          # x - 0
            return node.lhs
    elif isinstance(node, Mul):
        if node.lhs.value == ONE:           # 1 * x
            return node.rhs
        if node.rhs.value == ONE:           # x * 1
            return node.lhs
    elif isinstance(node, Div):
        if node.rhs.value == ONE:           # x / 1
            return node.lhs
        if node.lhs.value == ONE and isinstance(node.rhs, Div):
            return Div(node.rhs.rhs, node.rhs.lhs)   # 1 / (a / b)
    return None


def simplify(node: Expr) -> Expr:
    """
    Return a simplified copy of `node`; the input tree is left untouched.

    At each node the rules are applied until none fires, then the children
    are simplified. A change below re-exposes the node to the rules, so the
    result is a fixed point and simplify(simplify(x)) == simplify(x).

    Nodes built by a rewrite are evaluated before returning, at the caller's
    precision, like every node of the input.
    """
    result = _simplify(node)
    result.value
    return result


def _simplify(node: Expr) -> Expr:
    while True:
        if node.size <= 1:
            return node

        rewritten = _rewrite_once(node)
        if rewritten is not None:
            node = rewritten
            continue

        lhs = _simplify(node.lhs)
        rhs = _simplify(node.rhs)
        if lhs is node.lhs and rhs is node.rhs:
            return node
        node = type(node)(lhs, rhs)
