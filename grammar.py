"""The calculator's input grammar.

`tokenize` checks a line against the grammar and returns it as a token stream:
a flat tuple of operands and operators, with parenthesized sub-expressions
nested as `Group`s. Which operator binds tighter is not decided here; see
`parser.parse_tokens`.

>>> tokenize("-1 + (2 * 3)")
(Operator(kind=<OperatorKind.UNARY_MINUS: 'unary_minus'>), Number(text='1'), \
Operator(kind=<OperatorKind.ADD: 'add'>), Group(tokens=(Number(text='2'), \
Operator(kind=<OperatorKind.MULTIPLY: 'multiply'>), Number(text='3'))))
"""
from dataclasses import dataclass
from typing import Tuple, Union

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from expr import OperatorKind

GRAMMAR = r"""
equation: expression

expression: term (infix term)*

// A leading "-" on a term is negation; between two terms it is subtraction.
term: negation? primary
negation: MINUS

infix: PLUS | MINUS | STAR | SLASH | PERCENT | CARET

?primary: number
        | group
number: NUMBER
group: _LPAR expression _RPAR

PLUS: "+"
MINUS: "-"
STAR: "*"
SLASH: "/"
PERCENT: "%"
CARET: "^"
_LPAR: "("
_RPAR: ")"
NUMBER: /[0-9]+(\.[0-9]+)?|\.[0-9]+/

%import common.WS
%ignore WS
"""

INFIX_KINDS = {
    "PLUS": OperatorKind.ADD,
    "MINUS": OperatorKind.SUBTRACT,
    "STAR": OperatorKind.MULTIPLY,
    "SLASH": OperatorKind.DIVIDE,
    "PERCENT": OperatorKind.MODULO,
    "CARET": OperatorKind.POWER,
}

# How grammar terminals are named in error messages.
TERMINAL_DESCRIPTIONS = {
    "NUMBER": "number",
    "PLUS": "'+'",
    "MINUS": "'-'",
    "STAR": "'*'",
    "SLASH": "'/'",
    "PERCENT": "'%'",
    "CARET": "'^'",
    "_LPAR": "'('",
    "_RPAR": "')'",
    "$END": "end of input",
}


@dataclass(frozen=True)
class Number:
    text: str


@dataclass(frozen=True)
class Operator:
    kind: OperatorKind


@dataclass(frozen=True)
class Group:
    tokens: Tuple["Token", ...]


Token = Union[Number, Operator, Group]


class ExpressionSyntaxError(SyntaxError):
    """Input that does not match the grammar.

    `pos` is the 0-based offset in `text` where matching failed, `expected`
    describes what would have been accepted there.
    """

    def __init__(self, text, pos, found, expected=()):
        self.pos = pos
        self.found = found
        self.expected = tuple(sorted(expected))
        msg = f"Unexpected {found} at position {pos}"
        if self.expected:
            msg += f", expected {', '.join(self.expected)}"
        super().__init__(msg)
        self.text = text

    @classmethod
    def from_lark(cls, text, err: UnexpectedInput):
        if isinstance(err, UnexpectedCharacters):
            pos, found = err.pos_in_stream, repr(text[err.pos_in_stream])
            names = err.allowed or ()
        elif isinstance(err, UnexpectedToken) and err.token.type != "$END":
            pos, found = err.token.start_pos, repr(str(err.token))
            names = err.expected
        else:
            pos, found = len(text), "end of input"
            names = getattr(err, "expected", ())
        expected = {TERMINAL_DESCRIPTIONS.get(name, name) for name in names if name != "WS"}
        return cls(text, pos, found, expected)


@v_args(inline=True)
class TokenStreamBuilder(Transformer):
    def number(self, tok):
        return Number(str(tok))

    def negation(self, _minus):
        return Operator(OperatorKind.UNARY_MINUS)

    def infix(self, tok):
        return Operator(INFIX_KINDS[tok.type])

    def group(self, tokens):
        return Group(tokens)

    def term(self, *parts):
        return list(parts)

    def expression(self, *children):
        tokens = []
        for child in children:
            if isinstance(child, list):
                tokens.extend(child)
            else:
                tokens.append(child)
        return tuple(tokens)

    def equation(self, tokens):
        return tokens


_parser = Lark(GRAMMAR, start="equation", parser="lalr", transformer=TokenStreamBuilder())


def tokenize(text: str) -> Tuple[Token, ...]:
    """Match `text` against the grammar and return its token stream.

    Raises ExpressionSyntaxError if `text` is not a complete expression.

    >>> tokenize("1 ++ 2")
    Traceback (most recent call last):
    ...
    grammar.ExpressionSyntaxError: Unexpected '+' at position 3, expected '(', '-', number
    """
    try:
        return _parser.parse(text)
    except UnexpectedInput as err:
        raise ExpressionSyntaxError.from_lark(text, err) from err
