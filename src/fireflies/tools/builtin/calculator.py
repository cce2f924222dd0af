# Calculator tool — restricted arithmetic for the /kalkulator command.
# Created: 2026-10-03
#
# Expressions are parsed by a small recursive-descent parser that only knows
# numbers, + - * /, unary sign and parentheses. Nothing is ever passed to eval.

from __future__ import annotations

import logging
import math
import re
from typing import Any

from fireflies.chat import prompts
from fireflies.errors import ErrorKind, ProxyError, Result
from fireflies.tools.protocol import BaseTool

logger = logging.getLogger(__name__)

INVALID_EXPRESSION = "Error: Invalid expression"
INVALID_RESULT = "Error: Invalid calculation result"

_DISALLOWED_RE = re.compile(r"[^0-9+\-*/().\s]")
_TOKEN_RE = re.compile(r"\s*(?:(\d+\.?\d*|\.\d+)|(.))")
_MAX_DEPTH = 64


class CalculationError(ValueError):
    pass


def _tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    expression = expression.rstrip()
    while pos < len(expression):
        match = _TOKEN_RE.match(expression, pos)
        if match is None:
            raise CalculationError(f"Unexpected input at {pos}")
        number, op = match.groups()
        tokens.append(number if number is not None else op)
        pos = match.end()
    return tokens


class _Parser:
    """expr := term (('+'|'-') term)*
    term := factor (('*'|'/') factor)*
    factor := ('+'|'-') factor | number | '(' expr ')'
    """

    def __init__(self, tokens: list[str]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise CalculationError("Unexpected end of expression")
        self.pos += 1
        return token

    def parse(self) -> float:
        value = self._expr()
        if self._peek() is not None:
            raise CalculationError(f"Unexpected token {self._peek()!r}")
        return value

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            if self._take() == "+":
                value += self._term()
            else:
                value -= self._term()
        return value

    def _term(self) -> float:
        value = self._factor()
        while self._peek() in ("*", "/"):
            op = self._take()
            rhs = self._factor()
            if op == "*":
                value *= rhs
            elif rhs == 0:
                raise ZeroDivisionError("division by zero")
            else:
                value /= rhs
        return value

    def _factor(self) -> float:
        self.depth += 1
        if self.depth > _MAX_DEPTH:
            raise CalculationError("Expression nested too deeply")
        try:
            token = self._take()
            if token == "+":
                return self._factor()
            if token == "-":
                return -self._factor()
            if token == "(":
                value = self._expr()
                if self._take() != ")":
                    raise CalculationError("Unbalanced parentheses")
                return value
            if token[0].isdigit() or token[0] == ".":
                return float(token)
            raise CalculationError(f"Unexpected token {token!r}")
        finally:
            self.depth -= 1


def sanitize(expression: str) -> str:
    """Drop every character outside digits, operators, parens, dot and whitespace."""
    return _DISALLOWED_RE.sub("", expression)


def calculate(expression: str) -> Result[float]:
    """Evaluate *expression*, reporting failures as EVALUATION_FAILURE."""
    sanitized = sanitize(expression)
    if not sanitized.strip():
        return Result.failure(ErrorKind.EVALUATION_FAILURE, INVALID_EXPRESSION)

    try:
        value = _Parser(_tokenize(sanitized)).parse()
    except ZeroDivisionError:
        return Result.failure(ErrorKind.EVALUATION_FAILURE, INVALID_RESULT)
    except (CalculationError, ValueError, OverflowError) as e:
        logger.debug("Calculation failed for %r: %s", sanitized, e)
        return Result.failure(ErrorKind.EVALUATION_FAILURE, INVALID_EXPRESSION)

    if not math.isfinite(value):
        return Result.failure(ErrorKind.EVALUATION_FAILURE, INVALID_RESULT)
    return Result.success(value)


def evaluate(expression: str) -> float | str:
    """Return the numeric result, or an ``Error: ...`` marker string."""
    result = calculate(expression)
    if result.ok:
        return result.value
    return result.detail


def format_number(value: float) -> str:
    """Render 12.0 as ``12`` and keep real fractions."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


class CalculatorTool(BaseTool):
    """Evaluate an expression and ask the model to explain it."""

    def __init__(self, proxy):
        self._proxy = proxy

    @property
    def name(self) -> str:
        return "kalkulator"

    @property
    def description(self) -> str:
        return "Evaluate an arithmetic expression and explain the calculation."

    @property
    def usage(self) -> str:
        return prompts.CALCULATOR_USAGE

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "expression": {"type": "string", "description": "Arithmetic expression"},
                "model": {"type": "string", "description": "Model used for the explanation"},
            },
            "required": ["expression", "model"],
        }

    async def execute(self, expression: str, model: str, base_url: str | None = None) -> str:
        result = calculate(expression)
        if not result.ok:
            return prompts.format_calculation(expression, result.detail)

        shown = format_number(result.value)
        try:
            explanation = await self._proxy.generate(
                prompts.build_calculator_prompt(expression, shown),
                model,
                base_url=base_url,
            )
        except ProxyError as e:
            logger.warning("Calculator explanation failed: %s", e)
            explanation = prompts.EXPLANATION_UNAVAILABLE
        return prompts.format_calculation(expression, shown, explanation)
