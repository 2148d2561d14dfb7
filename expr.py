"""Expression trees for the calculator: operator table, AST nodes, evaluation
and display rendering.

Arithmetic is total: every operator maps finite or special float inputs to a
float, with IEEE-754 infinities and NaNs standing in for the errors Python
would raise (ZeroDivisionError, OverflowError, math domain errors).
"""
from dataclasses import dataclass
from decimal import Decimal
import enum
import math
import operator
from typing import Callable, Literal, NamedTuple, Union

INF = float("inf")
NAN = float("nan")


def format_num(num):
    """Shortest decimal text for `num`, without a trailing `.0` on integers
    and never in exponent notation.

    >>> format_num(7.0), format_num(3.5), format_num(1 / 3), format_num(-0.00001)
    ('7', '3.5', '0.3333333333333333', '-0.00001')
    >>> format_num(float("inf")), format_num(float("-inf")), format_num(float("nan"))
    ('inf', '-inf', 'nan')
    """
    if not math.isfinite(num):
        return repr(num)
    if (integer := int(num)) == num:
        return repr(integer)
    # repr has the shortest round-tripping digits; "f" spells them out positionally.
    return format(Decimal(repr(num)), "f")


def _div(a, b):
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return NAN
        return math.copysign(INF, a) * math.copysign(1, b)


def _mod(a, b):
    # fmod keeps the sign of the dividend, unlike python's floored %.
    try:
        return math.fmod(a, b)
    except ValueError:  # x % 0 and inf % x
        return NAN


def _is_odd_integer(x):
    return x.is_integer() and x % 2 == 1


def _pow(a, b):
    try:
        return math.pow(a, b)
    except (OverflowError, ValueError):
        if a < 0 and not b.is_integer():
            return NAN
        if a == 0:  # zero to a negative power
            return math.copysign(INF, a) if _is_odd_integer(b) else INF
        return -INF if a < 0 and _is_odd_integer(b) else INF


class OperatorKind(enum.Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    MODULO = "modulo"
    POWER = "power"
    UNARY_MINUS = "unary_minus"


class Op(NamedTuple):
    kind: OperatorKind
    symbol: str  # as typed
    glyph: str  # as displayed
    prec: int
    assoc: Literal["l", "u"]  # left-associative, unary
    fun: Callable

    def __call__(self, *args):
        return self.fun(*args)

    def left_first(self, other):
        """Whether `self`, written left of binary `other`, takes its operands first."""
        return self.prec >= other.prec

    def arity(self):
        return 1 if self.assoc == "u" else 2


# NB: ^ shares the tier of * and / and is left-associative, so 2^3*2 is
# (2^3)*2 and 2^3^2 is (2^3)^2.
OPS = {
    op.kind: op
    for op in [
        Op(OperatorKind.ADD, "+", "+", 1, "l", operator.add),
        Op(OperatorKind.SUBTRACT, "-", "-", 1, "l", operator.sub),
        Op(OperatorKind.MULTIPLY, "*", "×", 2, "l", operator.mul),
        Op(OperatorKind.DIVIDE, "/", "÷", 2, "l", _div),
        Op(OperatorKind.MODULO, "%", "%", 2, "l", _mod),
        Op(OperatorKind.POWER, "^", "^", 2, "l", _pow),
        Op(OperatorKind.UNARY_MINUS, "-", "-", 3, "u", operator.neg),
    ]
}


@dataclass(frozen=True)
class NumberLiteral:
    value: float


@dataclass(frozen=True)
class UnaryNegation:
    operand: "Expr"


@dataclass(frozen=True)
class Grouped:
    """A parenthesized expression; kept so rendering can reproduce the parens."""

    inner: "Expr"


@dataclass(frozen=True)
class BinaryOp:
    left: "Expr"
    op: OperatorKind
    right: "Expr"


Expr = Union[NumberLiteral, UnaryNegation, Grouped, BinaryOp]


def children(expr: Expr):
    if isinstance(expr, NumberLiteral):
        return ()
    if isinstance(expr, UnaryNegation):
        return (expr.operand,)
    if isinstance(expr, Grouped):
        return (expr.inner,)
    if isinstance(expr, BinaryOp):
        return (expr.left, expr.right)
    raise TypeError(f"Not an expression: {expr!r}")


def fold(expr: Expr, combine: Callable):
    """Bottom-up `combine(node, *child_results)` over `expr`.

    Walks with an explicit stack, so long operator chains and deep nesting
    don't hit the recursion limit.
    """
    results = []
    todo = [(expr, False)]
    while todo:
        node, expanded = todo.pop()
        if expanded:
            n = len(children(node))
            args = results[len(results) - n :]
            del results[len(results) - n :]
            results.append(combine(node, *args))
        else:
            todo.append((node, True))
            todo.extend((child, False) for child in reversed(children(node)))
    (ans,) = results
    return ans


def _evaluate_node(node, *args):
    if isinstance(node, NumberLiteral):
        return node.value
    if isinstance(node, UnaryNegation):
        return OPS[OperatorKind.UNARY_MINUS](*args)
    if isinstance(node, Grouped):
        (inner,) = args
        return inner
    return OPS[node.op](*args)


def _render_node(node, *args):
    if isinstance(node, NumberLiteral):
        return format_num(node.value)
    if isinstance(node, UnaryNegation):
        return OPS[OperatorKind.UNARY_MINUS].glyph + args[0]
    if isinstance(node, Grouped):
        return f"({args[0]})"
    left, right = args
    return f"{left} {OPS[node.op].glyph} {right}"


def evaluate(expr: Expr) -> float:
    """Evaluate `expr` to a float. Never raises for a well-formed tree.

    >>> evaluate(BinaryOp(NumberLiteral(1.0), OperatorKind.DIVIDE, NumberLiteral(0.0)))
    inf
    >>> evaluate(UnaryNegation(Grouped(NumberLiteral(2.5))))
    -2.5
    """
    return fold(expr, _evaluate_node)


def render(expr: Expr) -> str:
    """Render `expr` as infix text for display.

    >>> render(BinaryOp(NumberLiteral(1.0), OperatorKind.ADD,
    ...     Grouped(BinaryOp(NumberLiteral(2.0), OperatorKind.MULTIPLY, NumberLiteral(3.0)))))
    '1 + (2 × 3)'
    """
    return fold(expr, _render_node)
