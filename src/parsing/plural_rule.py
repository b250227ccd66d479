"""Compiler for gettext plural rules.

A ``Plural-Forms`` header looks like ``nplurals=3; plural=(n==1 ? 0 : n%10>=2 ? 1 : 2);``.
The expression is a small subset of C over the single variable ``n``. It is parsed
by recursive descent into a tree of nodes and evaluated by walking that tree; no
host code is generated or executed.

Precedence, tightest first::

    !              (unary)
    * / %
    + -
    < > <= >=
    == !=
    &&
    ||
    ?:             (right associative)

Evaluation follows C integer semantics: comparisons and boolean operators yield
``0``/``1``, ``/`` truncates toward zero and ``%`` takes the sign of the dividend.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Iterator, List, Optional, Union

from config import settings
from parsing.errors import PluralExpressionError

__all__ = [
    "Literal",
    "Variable",
    "UnaryOp",
    "BinaryOp",
    "Ternary",
    "PluralRule",
    "compile_expression",
    "parse_plural_forms",
    "DEFAULT_RULE",
]

_TOKEN_PATTERN = re.compile(
    r"""
        (?P<WHITESPACES>\s+)                        |
        (?P<NUMBER>[0-9]+)                          |
        (?P<NAME>n\b)                               |
        (?P<PARENTHESIS>[()])                       |
        (?P<OPERATOR>&&|\|\||[<>!=]=|[-+*/%<>!?:])  |
        (?P<INVALID>\w+|.)
    """,
    re.VERBOSE | re.DOTALL,
)

_RE_PLURAL_FORMS = re.compile(
    r"^\s*nplurals\s*=\s*(?P<nplurals>\d+)\s*;\s*plural\s*=\s*(?P<expr>.+?)\s*;?\s*$",
    re.DOTALL,
)


def _c_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _c_mod(a: int, b: int) -> int:
    return a - b * _c_div(a, b)


_BINARY_OPS: Dict[str, Callable[[int, int], int]] = {
    "*": lambda a, b: a * b,
    "/": _c_div,
    "%": _c_mod,
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "<": lambda a, b: int(a < b),
    ">": lambda a, b: int(a > b),
    "<=": lambda a, b: int(a <= b),
    ">=": lambda a, b: int(a >= b),
    "==": lambda a, b: int(a == b),
    "!=": lambda a, b: int(a != b),
}

# Binding power per binary operator; higher binds tighter.
_PRECEDENCE: Dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 4,
    ">": 4,
    "<=": 4,
    ">=": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "%": 6,
}


# ---------------------------------------------------------------- syntax tree


@dataclass(frozen=True, slots=True)
class Literal:
    value: int

    def evaluate(self, n: int) -> int:
        return self.value


@dataclass(frozen=True, slots=True)
class Variable:
    def evaluate(self, n: int) -> int:
        return n


@dataclass(frozen=True, slots=True)
class UnaryOp:
    op: str
    operand: "Node"

    def evaluate(self, n: int) -> int:
        # "!" is the only unary operator in the grammar
        return int(not self.operand.evaluate(n))


@dataclass(frozen=True, slots=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"

    def evaluate(self, n: int) -> int:
        if self.op == "&&":
            return int(bool(self.left.evaluate(n)) and bool(self.right.evaluate(n)))
        if self.op == "||":
            return int(bool(self.left.evaluate(n)) or bool(self.right.evaluate(n)))
        return _BINARY_OPS[self.op](self.left.evaluate(n), self.right.evaluate(n))


@dataclass(frozen=True, slots=True)
class Ternary:
    condition: "Node"
    if_true: "Node"
    if_false: "Node"

    def evaluate(self, n: int) -> int:
        if self.condition.evaluate(n):
            return self.if_true.evaluate(n)
        return self.if_false.evaluate(n)


Node = Union[Literal, Variable, UnaryOp, BinaryOp, Ternary]


# ---------------------------------------------------------------- parser


def _tokenize(expression: str) -> Iterator[str]:
    for match in _TOKEN_PATTERN.finditer(expression):
        kind = match.lastgroup
        if kind == "WHITESPACES":
            continue
        value = match.group(kind)
        if kind == "INVALID":
            raise PluralExpressionError("Invalid token in plural expression", expression=value)
        yield value


class _Parser:
    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens: List[str] = list(_tokenize(expression))
        self.pos = 0

    def peek(self) -> str:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else ""

    def take(self) -> str:
        token = self.peek()
        self.pos += 1
        return token

    def error(self, token: str) -> PluralExpressionError:
        if not token:
            return PluralExpressionError("Unexpected end of plural expression", expression=self.expression)
        rest = " ".join(self.tokens[self.pos - 1 :])
        return PluralExpressionError(f"Unexpected token {token!r} in plural expression", expression=rest)

    def parse(self) -> Node:
        node = self.ternary()
        if self.peek():
            self.take()
            raise self.error(self.tokens[self.pos - 1])
        return node

    def ternary(self) -> Node:
        condition = self.binary(1)
        if self.peek() != "?":
            return condition
        self.take()
        if_true = self.ternary()
        token = self.take()
        if token != ":":
            raise self.error(token)
        if_false = self.ternary()
        return Ternary(condition, if_true, if_false)

    def binary(self, min_precedence: int) -> Node:
        left = self.unary()
        while True:
            op = self.peek()
            precedence = _PRECEDENCE.get(op)
            if precedence is None or precedence < min_precedence:
                return left
            self.take()
            right = self.binary(precedence + 1)
            left = BinaryOp(op, left, right)

    def unary(self) -> Node:
        if self.peek() == "!":
            self.take()
            return UnaryOp("!", self.unary())
        return self.primary()

    def primary(self) -> Node:
        token = self.take()
        if token == "(":
            node = self.ternary()
            closing = self.take()
            if closing != ")":
                if not closing:
                    raise PluralExpressionError(
                        "Unbalanced parenthesis in plural expression", expression=self.expression
                    )
                raise self.error(closing)
            return node
        if token == "n":
            return Variable()
        if token.isdigit():
            return Literal(int(token, 10))
        raise self.error(token)


# ---------------------------------------------------------------- rules


class PluralRule:
    """A compiled plural expression mapping a count to a zero-based form index."""

    __slots__ = ("expression", "nplurals", "tree")

    def __init__(self, expression: str, tree: Node, nplurals: Optional[int] = None) -> None:
        self.expression = expression
        self.tree = tree
        self.nplurals = nplurals

    def evaluate(self, n: int) -> int:
        try:
            return self.tree.evaluate(int(n))
        except ZeroDivisionError:
            raise PluralExpressionError(
                f"Division by zero evaluating plural expression for n={n}", expression=self.expression
            ) from None

    __call__ = evaluate

    def __repr__(self) -> str:
        return f"PluralRule({self.expression!r}, nplurals={self.nplurals})"


@lru_cache(maxsize=128)
def _compile_tree(expression: str) -> Node:
    if len(expression) > settings.MAX_PLURAL_EXPRESSION_LENGTH:
        raise PluralExpressionError("Plural expression is too long", expression=expression[:80])
    try:
        return _Parser(expression).parse()
    except RecursionError:
        raise PluralExpressionError("Plural expression is too deeply nested", expression=expression) from None


def compile_expression(expression: str, nplurals: Optional[int] = None) -> PluralRule:
    """Compile a bare plural expression such as ``n != 1``."""
    return PluralRule(expression, _compile_tree(expression.strip()), nplurals)


def parse_plural_forms(header: Optional[str]) -> PluralRule:
    """Compile the value of a ``Plural-Forms`` header.

    A missing or empty header yields the default English rule.

    Raises:
        PluralExpressionError: if the header does not match ``nplurals=N; plural=EXPR;``
            or the expression does not parse.
    """
    if header is None or not header.strip():
        return DEFAULT_RULE
    match = _RE_PLURAL_FORMS.match(header)
    if not match:
        raise PluralExpressionError("Malformed Plural-Forms header", expression=header)
    return compile_expression(match.group("expr"), int(match.group("nplurals")))


DEFAULT_RULE = compile_expression(settings.DEFAULT_PLURAL_EXPRESSION, settings.DEFAULT_NPLURALS)
