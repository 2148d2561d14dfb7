from expr import OPS, BinaryOp, Grouped, NumberLiteral, OperatorKind, UnaryNegation
from grammar import Group, Number, Operator, tokenize

eof = {"eof"}


def reduce(exprs, op):
    """Replace the top operand(s) of `exprs` by `op` applied to them."""
    if op.arity() == 1:
        exprs[-1] = UnaryNegation(exprs[-1])
    else:
        right = exprs.pop()
        exprs[-1] = BinaryOp(exprs[-1], op.kind, right)


def parse_tokens(tokens):
    """Build the AST for a token stream as returned by `grammar.tokenize`.

    Operators wait on a stack until an operator that binds no tighter turns
    up, so same-tier runs group to the left and unary minus binds tightest.
    Groups are entered and left with an explicit stack, not by recursion.

    >>> from expr import render
    >>> render(parse_tokens(tokenize("1 - 2 - 3 * -4")))
    '1 - 2 - 3 × -4'
    """
    enclosing = []  # (flat, exprs, ops) of the groups we are inside of
    flat, exprs, ops = iter(tokens), [], []
    last_was_op = True
    while True:
        x = next(flat, eof)
        if x is eof:
            if last_was_op:
                raise ValueError("Expected an operand, got end of tokens")
            while ops:
                reduce(exprs, ops.pop())
            (ans,) = exprs
            if not enclosing:
                return ans
            flat, exprs, ops = enclosing.pop()
            exprs.append(Grouped(ans))
            last_was_op = False
        elif last_was_op:
            if x == Operator(OperatorKind.UNARY_MINUS):
                ops.append(OPS[x.kind])
            elif isinstance(x, Number):
                exprs.append(NumberLiteral(float(x.text)))
                last_was_op = False
            elif isinstance(x, Group):
                enclosing.append((flat, exprs, ops))
                flat, exprs, ops = iter(x.tokens), [], []
            else:
                raise ValueError(f"Expected an operand, got {x!r}")
        else:
            if not isinstance(x, Operator) or (o := OPS[x.kind]).arity() != 2:
                raise ValueError(f"Expected an infix operator, got {x!r}")
            while ops and ops[-1].left_first(o):
                reduce(exprs, ops.pop())
            ops.append(o)
            last_was_op = True


def to_ast(x):
    """Parse the text `x` into an expression tree.

    >>> to_ast("2 ^ 3 * 2") == to_ast("(2 ^ 3) * 2")
    False
    >>> from expr import evaluate
    >>> evaluate(to_ast("2 ^ 3 * 2")), evaluate(to_ast("1 - 2 - 3"))
    (16.0, -4.0)
    """
    return parse_tokens(tokenize(x))
