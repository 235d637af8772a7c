"""Arithmetic evaluator for calculate mappings.

Grammar::

    expression := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := ("+" | "-") factor | NUMBER | VARIABLE | "(" expression ")"

Variables are written ``${path}`` and resolved through a callback. Nothing
else is accepted, so expressions never reach ``eval``.
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from integration_hub.modules.integration.domain.errors import ExpressionError

_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<number>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<variable>\$\{\s*(?P<path>[^}]+?)\s*\})"
    r"|(?P<operator>[-+*/()]))"
)

VARIABLE_PATTERN = re.compile(r"\$\{\s*([^}]+?)\s*\}")


@dataclass(frozen=True)
class _Token:
    kind: str
    value: Any


def variables_in(expression: str) -> list[str]:
    """Placeholder paths referenced by ``expression`` in order of appearance."""
    return [match.group(1) for match in VARIABLE_PATTERN.finditer(expression or "")]


def _tokenize(expression: str) -> list[_Token]:
    tokens = []
    position = 0
    stripped = expression.rstrip()
    while position < len(stripped):
        match = _TOKEN_PATTERN.match(stripped, position)
        if not match or match.end() == position:
            raise ExpressionError(
                expression, f"unexpected character at position {position}"
            )
        if match.group("number") is not None:
            tokens.append(_Token("number", float(match.group("number"))))
        elif match.group("variable") is not None:
            tokens.append(_Token("variable", match.group("path")))
        else:
            tokens.append(_Token("operator", match.group("operator")))
        position = match.end()
    return tokens


class ExpressionEvaluator:
    """Recursive-descent evaluator over ``+ - * / ( )``."""

    def __init__(self, resolve: Callable[[str], Any], null_value: float = 0):
        self._resolve = resolve
        self._null_value = null_value

    def evaluate(self, expression: str) -> float:
        """Evaluate ``expression``.

        Raises:
            ExpressionError: On a syntax error, a non-numeric variable or
                division by zero
        """
        if not expression or not expression.strip():
            raise ExpressionError(expression or "", "expression is empty")

        self._expression = expression
        self._tokens = _tokenize(expression)
        self._position = 0
        if not self._tokens:
            raise ExpressionError(expression, "expression is empty")

        result = self._parse_expression()
        if self._position != len(self._tokens):
            raise ExpressionError(expression, "unexpected trailing input")
        if math.isnan(result) or math.isinf(result):
            raise ExpressionError(expression, "result is not a finite number")
        return result

    def _peek(self) -> _Token | None:
        if self._position < len(self._tokens):
            return self._tokens[self._position]
        return None

    def _advance(self) -> _Token:
        token = self._peek()
        if token is None:
            raise ExpressionError(self._expression, "unexpected end of expression")
        self._position += 1
        return token

    def _parse_expression(self) -> float:
        value = self._parse_term()
        while (token := self._peek()) and token.kind == "operator" and token.value in "+-":
            self._advance()
            right = self._parse_term()
            value = value + right if token.value == "+" else value - right
        return value

    def _parse_term(self) -> float:
        value = self._parse_factor()
        while (token := self._peek()) and token.kind == "operator" and token.value in "*/":
            self._advance()
            right = self._parse_factor()
            if token.value == "*":
                value = value * right
            else:
                if right == 0:
                    raise ExpressionError(self._expression, "division by zero")
                value = value / right
        return value

    def _parse_factor(self) -> float:
        token = self._advance()
        if token.kind == "operator" and token.value in "+-":
            operand = self._parse_factor()
            return operand if token.value == "+" else -operand
        if token.kind == "number":
            return token.value
        if token.kind == "variable":
            return self._variable(token.value)
        if token.kind == "operator" and token.value == "(":
            value = self._parse_expression()
            closing = self._peek()
            if closing is None or closing.kind != "operator" or closing.value != ")":
                raise ExpressionError(self._expression, "missing closing parenthesis")
            self._advance()
            return value
        raise ExpressionError(self._expression, f"unexpected token '{token.value}'")

    def _variable(self, path: str) -> float:
        value = self._resolve(path)
        if value is None:
            return float(self._null_value)
        if isinstance(value, bool):
            return float(value)
        if isinstance(value, int | float):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise ExpressionError(
            self._expression, f"variable '{path}' is not numeric: {value!r}"
        )


def evaluate_expression(
    expression: str, resolve: Callable[[str], Any], null_value: float = 0
) -> float:
    return ExpressionEvaluator(resolve, null_value).evaluate(expression)
