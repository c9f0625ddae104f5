"""
Restricted arithmetic for dependency rule formulas.

Formulas such as ``"camera + nvr + 1"`` or ``"Math.ceil(camera / 4)"`` are
tokenized and parsed into a small expression tree. Identifiers are resolved
against the evaluation context when the tree is evaluated, so a variable
name is never rewritten inside the formula text. Only numbers, context
variables, ``+ - * /``, parentheses and a fixed set of ``Math`` helpers are
accepted; nothing is handed to ``eval``.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Mapping, Optional, Tuple, Union

Number = Union[int, float]

_logger = logging.getLogger("bom_formula")

# Parentheses, unary signs and Math calls nest at most this deep.
MAX_NESTING_DEPTH = 64

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<name>\d*[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<number>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<op>[-+*/(),.])"
    r")"
)


class FormulaError(ValueError):
    """Raised when a formula cannot be parsed or evaluated."""


def _round_half_up(value: Number) -> int:
    return math.floor(value + 0.5)


# name -> (callable, min args, max args or None for variadic)
MATH_FUNCTIONS: dict[str, Tuple[Callable[..., Number], int, Optional[int]]] = {
    "ceil": (math.ceil, 1, 1),
    "floor": (math.floor, 1, 1),
    "round": (_round_half_up, 1, 1),
    "abs": (abs, 1, 1),
    "min": (min, 1, None),
    "max": (max, 1, None),
}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int


def tokenize(formula: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    end = len(formula)
    while pos < end:
        if formula[pos:].strip() == "":
            break
        match = _TOKEN_RE.match(formula, pos)
        if not match:
            offset = pos + (len(formula[pos:]) - len(formula[pos:].lstrip()))
            raise FormulaError(f"Unexpected character {formula[offset]!r} at position {offset}")
        kind = match.lastgroup or "op"
        tokens.append(Token(kind=kind, text=match.group(kind), pos=match.start(kind)))
        pos = match.end()
    return tokens


# Expression tree ------------------------------------------------------------


class Node:
    def evaluate(self, context: Mapping[str, object]) -> Number:
        raise NotImplementedError


@dataclass(frozen=True)
class Num(Node):
    value: Number

    def evaluate(self, context: Mapping[str, object]) -> Number:
        return self.value


@dataclass(frozen=True)
class Var(Node):
    name: str

    def evaluate(self, context: Mapping[str, object]) -> Number:
        if self.name not in context:
            raise FormulaError(f"Unknown variable {self.name!r}")
        value = context[self.name]
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float)):
            return value
        raise FormulaError(f"Variable {self.name!r} is not numeric")


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: Node

    def evaluate(self, context: Mapping[str, object]) -> Number:
        value = self.operand.evaluate(context)
        return -value if self.op == "-" else value


@dataclass(frozen=True)
class BinOp(Node):
    op: str
    left: Node
    right: Node

    def evaluate(self, context: Mapping[str, object]) -> Number:
        lhs = self.left.evaluate(context)
        rhs = self.right.evaluate(context)
        if self.op == "+":
            return lhs + rhs
        if self.op == "-":
            return lhs - rhs
        if self.op == "*":
            return lhs * rhs
        if rhs == 0:
            raise FormulaError("Division by zero")
        return lhs / rhs


@dataclass(frozen=True)
class Call(Node):
    func: str
    args: Tuple[Node, ...]

    def evaluate(self, context: Mapping[str, object]) -> Number:
        fn = MATH_FUNCTIONS[self.func][0]
        return fn(*(arg.evaluate(context) for arg in self.args))


# Parser ---------------------------------------------------------------------


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._index = 0
        self._depth = 0

    def _peek(self) -> Optional[Token]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise FormulaError("Unexpected end of formula")
        self._index += 1
        return token

    def _expect(self, text: str) -> Token:
        token = self._next()
        if token.text != text:
            raise FormulaError(f"Expected {text!r} at position {token.pos}, got {token.text!r}")
        return token

    def _descend(self, token: Token) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise FormulaError(f"Formula nested deeper than {MAX_NESTING_DEPTH} levels at position {token.pos}")

    def parse(self) -> Node:
        if not self._tokens:
            raise FormulaError("Empty formula")
        node = self._expression()
        leftover = self._peek()
        if leftover is not None:
            raise FormulaError(f"Unexpected {leftover.text!r} at position {leftover.pos}")
        return node

    def _expression(self) -> Node:
        node = self._term()
        while True:
            token = self._peek()
            if token is None or token.text not in ("+", "-"):
                return node
            self._index += 1
            node = BinOp(token.text, node, self._term())

    def _term(self) -> Node:
        node = self._unary()
        while True:
            token = self._peek()
            if token is None or token.text not in ("*", "/"):
                return node
            self._index += 1
            node = BinOp(token.text, node, self._unary())

    def _unary(self) -> Node:
        token = self._peek()
        if token is not None and token.text in ("+", "-"):
            self._index += 1
            self._descend(token)
            node = Unary(token.text, self._unary())
            self._depth -= 1
            return node
        return self._primary()

    def _primary(self) -> Node:
        token = self._next()
        if token.kind == "number":
            text = token.text
            return Num(float(text) if "." in text else int(text))
        if token.kind == "name":
            if token.text == "Math":
                return self._math_call()
            return Var(token.text)
        if token.text == "(":
            self._descend(token)
            node = self._expression()
            self._expect(")")
            self._depth -= 1
            return node
        raise FormulaError(f"Unexpected {token.text!r} at position {token.pos}")

    def _math_call(self) -> Node:
        self._expect(".")
        name = self._next()
        if name.kind != "name" or name.text not in MATH_FUNCTIONS:
            raise FormulaError(f"Unsupported Math member {name.text!r}")
        self._descend(self._expect("("))
        args: list[Node] = []
        if self._peek() is not None and self._peek().text != ")":
            args.append(self._expression())
            while self._peek() is not None and self._peek().text == ",":
                self._index += 1
                args.append(self._expression())
        self._expect(")")
        self._depth -= 1
        _, min_args, max_args = MATH_FUNCTIONS[name.text]
        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            raise FormulaError(f"Math.{name.text} got {len(args)} argument(s)")
        return Call(name.text, tuple(args))


@lru_cache(maxsize=512)
def parse_formula(formula: str) -> Node:
    """Parse ``formula`` into an expression tree; raises ``FormulaError``."""
    return _Parser(tokenize(formula)).parse()


def try_evaluate_formula(formula: str, context: Mapping[str, object]) -> Optional[Number]:
    """Evaluate ``formula`` against ``context``; ``None`` means unresolved."""
    try:
        value = parse_formula(formula or "").evaluate(context)
    except FormulaError as exc:
        _logger.warning("Invalid formula %r: %s", formula, exc)
        return None
    except (ArithmeticError, TypeError, ValueError, RecursionError) as exc:
        _logger.error("Error evaluating formula %r: %s", formula, exc)
        return None
    if isinstance(value, float) and not math.isfinite(value):
        _logger.warning("Formula %r produced a non-finite value", formula)
        return None
    return value


def evaluate_formula(formula: str, context: Mapping[str, object]) -> Number:
    """Evaluate ``formula``; unresolved formulas evaluate to ``0``."""
    value = try_evaluate_formula(formula, context)
    return 0 if value is None else value


def format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
