"""
Arithmetic formula parser.

Grammar (whitespace ignored):

    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary)*
    unary      := ("+" | "-") unary | primary
    primary    := NUMBER | NAME | "(" expression ")"

NUMBER accepts 12, 0.5, .5, 3. and an optional exponent (1e-3).
NAME is an identifier: letters, digits and underscore, not starting with a digit.

There are no calls, attributes, indexing, assignment or loops in the
language, so a parsed formula can only ever do arithmetic on its inputs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from pipe_pricing.errors import EvaluationError

MAX_NESTING_DEPTH = 64

IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>[-+*/])
  | (?P<lparen>\()
  | (?P<rparen>\))
    """,
    re.VERBOSE,
)


def is_identifier(text: str) -> bool:
    """True if ``text`` can be used as a variable name inside a formula."""
    return isinstance(text, str) and IDENTIFIER_RE.fullmatch(text) is not None


# ── Tokens ───────────────────────────────────────────────


@dataclass(frozen=True)
class Token:
    kind: str  # number | name | op | lparen | rparen | end
    text: str
    position: int


def tokenize(expression: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    length = len(expression)
    while pos < length:
        match = _TOKEN_RE.match(expression, pos)
        if match is None:
            raise EvaluationError(
                f"Unexpected character '{expression[pos]}' at column {pos + 1}", pos
            )
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(Token("end", "", length))
    return tokens


# ── Syntax tree ──────────────────────────────────────────


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Name:
    name: str
    position: int


@dataclass(frozen=True)
class Unary:
    op: str
    operand: "Expr"


@dataclass(frozen=True)
class Chain:
    """Left-associative run of same-precedence operators: first op1 x1 op2 x2 ..."""
    first: "Expr"
    rest: tuple[tuple[str, "Expr"], ...]


Expr = Union[Number, Name, Unary, Chain]


# ── Parser ───────────────────────────────────────────────


class _Parser:
    def __init__(self, expression: str):
        self.tokens = tokenize(expression)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def parse(self) -> Expr:
        if self.current.kind == "end":
            raise EvaluationError("Formula is empty", 0)
        expr = self.expression()
        token = self.current
        if token.kind == "rparen":
            raise EvaluationError(f"Unmatched ')' at column {token.position + 1}", token.position)
        if token.kind != "end":
            raise EvaluationError(
                f"Unexpected '{token.text}' at column {token.position + 1}", token.position
            )
        return expr

    def expression(self) -> Expr:
        return self._chain(self.term, "+-")

    def term(self) -> Expr:
        return self._chain(self.unary, "*/")

    def _chain(self, operand, operators: str) -> Expr:
        first = operand()
        rest = []
        while self.current.kind == "op" and self.current.text in operators:
            op = self.advance().text
            rest.append((op, operand()))
        if not rest:
            return first
        return Chain(first, tuple(rest))

    def unary(self) -> Expr:
        token = self.current
        if token.kind == "op" and token.text in "+-":
            self.advance()
            self._enter(token)
            try:
                return Unary(token.text, self.unary())
            finally:
                self.depth -= 1
        return self.primary()

    def primary(self) -> Expr:
        token = self.advance()
        if token.kind == "number":
            return Number(float(token.text))
        if token.kind == "name":
            return Name(token.text, token.position)
        if token.kind == "lparen":
            self._enter(token)
            try:
                inner = self.expression()
            finally:
                self.depth -= 1
            if self.current.kind != "rparen":
                raise EvaluationError(
                    f"Missing ')' for '(' at column {token.position + 1}", token.position
                )
            self.advance()
            return inner
        if token.kind == "end":
            raise EvaluationError("Unexpected end of formula", token.position)
        raise EvaluationError(
            f"Unexpected '{token.text}' at column {token.position + 1}", token.position
        )

    def _enter(self, token: Token) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise EvaluationError("Formula is nested too deeply", token.position)


def parse(expression: str) -> Expr:
    """Parse a formula into a syntax tree; raises EvaluationError on bad syntax."""
    if not isinstance(expression, str):
        raise EvaluationError("Formula must be a string")
    return _Parser(expression).parse()


def names_in(expr: Expr) -> set[str]:
    """All variable names referenced by a parsed formula."""
    found: set[str] = set()
    stack: list[Expr] = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, Name):
            found.add(node.name)
        elif isinstance(node, Unary):
            stack.append(node.operand)
        elif isinstance(node, Chain):
            stack.append(node.first)
            stack.extend(operand for _, operand in node.rest)
    return found
