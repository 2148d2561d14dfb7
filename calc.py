"""Terminal calculator.

Evaluates the expressions given on the command line, or reads them one per
line from stdin, printing each as `<expression> = <value>`.

Set DEBUG (or pass --debug) to also print the token stream and tree of each
expression to stderr.
"""
import argparse
import os
import sys

from expr import evaluate, format_num, render
from grammar import ExpressionSyntaxError, tokenize
from parser import parse_tokens

DEBUG = bool(os.getenv("DEBUG", False))
PROMPT = "Enter an expression: "


def calculate(line, debug=DEBUG):
    """Return `line` rendered and evaluated.

    >>> calculate("1 + (2 * 3)")
    '1 + (2 × 3) = 7'
    >>> calculate("1 / 0")
    '1 ÷ 0 = inf'
    """
    tokens = tokenize(line)
    if debug:
        print("tokens:", tokens, file=sys.stderr)
    ast = parse_tokens(tokens)
    if debug:
        print("ast:", ast, file=sys.stderr)
    return f"{render(ast)} = {format_num(evaluate(ast))}"


def report(err: ExpressionSyntaxError):
    print(f"error: {err}", file=sys.stderr)
    print(f"  {err.text}", file=sys.stderr)
    print(f"  {' ' * err.pos}^", file=sys.stderr)


def run(line, debug=DEBUG):
    """Print the result for one line; return False if it didn't parse."""
    try:
        print(calculate(line, debug))
    except ExpressionSyntaxError as err:
        report(err)
        return False
    return True


def repl(debug=DEBUG):
    interactive = sys.stdin.isatty()
    if interactive:
        try:
            import readline  # noqa: F401  line editing and history for input()
        except ImportError:
            print("note: readline unavailable, no line editing or recall", file=sys.stderr)
    while True:
        try:
            line = input(PROMPT) if interactive else sys.stdin.readline()
        except EOFError:
            break
        if not interactive and not line:
            break
        line = line.rstrip("\n")
        if line.strip():
            run(line, debug)
    if interactive:
        print()


def main(argv=None):
    ap = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    ap.add_argument("expressions", metavar="EXPRESSION", nargs="*")
    ap.add_argument("--debug", action="store_true", default=DEBUG)
    args = ap.parse_args(argv)
    if not args.expressions:
        repl(args.debug)
        return 0
    ok = [run(line, args.debug) for line in args.expressions]
    return 0 if all(ok) else 1


if __name__ == "__main__":
    sys.exit(main())
