"""
Arithmetic for R-parameter assignments.

A small recursive-descent evaluator over ``+ - * /``, parentheses, unary
signs, decimal literals and ``R<n>`` registers. Nothing else is accepted.

    expr   := term (("+" | "-") term)*
    term   := factor (("*" | "/") factor)*
    factor := ("+" | "-") factor | NUMBER | REGISTER | "(" expr ")"
"""

import re
from collections.abc import Mapping


class ExpressionError(ValueError):
    """Raised for expressions outside the supported grammar"""


TOKEN_PATTERN = re.compile(r"\s*(?:(\d+\.?\d*|\.\d+)|(R\d+)|(\S))", re.IGNORECASE)


def tokenize(text: str) -> list[tuple[str, str]]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if match is None:
            break
        number, register, symbol = match.groups()
        if number is not None:
            tokens.append(("num", number))
        elif register is not None:
            tokens.append(("reg", register.upper()))
        elif symbol in "+-*/()":
            tokens.append(("op", symbol))
        else:
            raise ExpressionError(f"Unexpected {symbol!r} in {text!r}")
        pos = match.end()
    return tokens


class _Evaluator:
    def __init__(self, text: str, registers: Mapping[str, float]):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0
        self.registers = registers

    def peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> tuple[str, str]:
        token = self.peek()
        if token is None:
            raise ExpressionError(f"Unexpected end of {self.text!r}")
        self.pos += 1
        return token

    def run(self) -> float:
        value = self.expr()
        if self.peek() is not None:
            raise ExpressionError(f"Trailing {self.peek()[1]!r} in {self.text!r}")
        return value

    def expr(self) -> float:
        value = self.term()
        while self.peek() in (("op", "+"), ("op", "-")):
            _, op = self.take()
            rhs = self.term()
            value = value + rhs if op == "+" else value - rhs
        return value

    def term(self) -> float:
        value = self.factor()
        while self.peek() in (("op", "*"), ("op", "/")):
            _, op = self.take()
            rhs = self.factor()
            if op == "*":
                value *= rhs
            elif rhs == 0:
                raise ExpressionError(f"Division by zero in {self.text!r}")
            else:
                value /= rhs
        return value

    def factor(self) -> float:
        kind, text = self.take()
        if kind == "num":
            return float(text)
        if kind == "reg":
            return float(self.registers.get(text, 0.0))
        if text == "-":
            return -self.factor()
        if text == "+":
            return self.factor()
        if text == "(":
            value = self.expr()
            if self.take() != ("op", ")"):
                raise ExpressionError(f"Missing ')' in {self.text!r}")
            return value
        raise ExpressionError(f"Unexpected {text!r} in {self.text!r}")


def evaluate(text: str, registers: Mapping[str, float] | None = None) -> float:
    """
    Evaluate an assignment expression

    Args:
        text: Expression such as "R1+2*(R2-1)"
        registers: Current register values; missing registers read 0

    Returns:
        The value

    Raises:
        ExpressionError: on syntax errors or division by zero
    """
    return _Evaluator(text, registers or {}).run()
