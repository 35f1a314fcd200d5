"""
SmartCalc Parser
Operator-precedence (Pratt) evaluation of token lists with percent semantics.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from calc_errors import ParseError
from calc_lexer import Token, TokenType, tokenize
from constants import (
    MATH_FUNCS, PREC_COMPARISON, PREC_ADDITIVE,
    PREC_MULTIPLICATIVE, PREC_POWER,
)


Resolver = Callable[[int], float]

BINARY_PRECEDENCE = {
    TokenType.GT: PREC_COMPARISON,
    TokenType.LT: PREC_COMPARISON,
    TokenType.GE: PREC_COMPARISON,
    TokenType.LE: PREC_COMPARISON,
    TokenType.EQ: PREC_COMPARISON,
    TokenType.NE: PREC_COMPARISON,
    TokenType.PLUS: PREC_ADDITIVE,
    TokenType.MINUS: PREC_ADDITIVE,
    TokenType.STAR: PREC_MULTIPLICATIVE,
    TokenType.SLASH: PREC_MULTIPLICATIVE,
    TokenType.CARET: PREC_POWER,
}


@dataclass(frozen=True)
class Value:
    """A number plus whether it is still a bare percentage."""
    number: float
    is_percent: bool = False


# =============================================================================
# IEEE-754 HELPERS
# =============================================================================

def divide(left, right):
    """Float division with IEEE results for a zero divisor."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def power(base, exponent):
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            return math.inf
        return math.nan


def apply_function(name, argument):
    """Call a table function; math-domain failures give NaN."""
    func = MATH_FUNCS.get(name)
    if func is None:
        raise ParseError(f"unknown function {name!r}")
    try:
        return float(func(argument))
    except (ValueError, OverflowError):
        return math.nan


# =============================================================================
# PARSER
# =============================================================================

class Parser:
    """
    Pratt parser over a token list.

    Precedence from low to high is comparison, additive, multiplicative,
    power; power is right-associative. A percent value on the right of
    '+' or '-' scales the left operand instead of being added to it.
    """

    def __init__(self, tokens: List[Token], resolve: Optional[Resolver] = None):
        self.tokens = tokens
        self.resolve = resolve
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def expect(self, token_type):
        token = self.advance()
        if token.type is not token_type:
            raise ParseError(f"expected {token_type.value!r}")
        return token

    def at_end(self) -> bool:
        return self.peek().type is TokenType.EOF

    def parse(self) -> Value:
        return self.parse_expression(0)

    def parse_expression(self, min_precedence) -> Value:
        left = self.parse_prefix()
        while True:
            token = self.peek()
            precedence = BINARY_PRECEDENCE.get(token.type)
            if precedence is None or precedence <= min_precedence:
                return left
            self.advance()
            if token.type is TokenType.CARET:
                right = self.parse_expression(precedence - 1)
            else:
                right = self.parse_expression(precedence)
            left = Value(self.apply_binary(token.type, left, right))

    def parse_prefix(self) -> Value:
        token = self.advance()

        if token.type in (TokenType.NUMBER, TokenType.CURRENCY):
            return Value(token.value, token.is_percent)

        if token.type is TokenType.REFERENCE:
            if self.resolve is None:
                raise ParseError(f"no resolver for reference \\{token.ref}")
            return Value(self.resolve(token.ref))

        if token.type is TokenType.LPAREN:
            inner = self.parse_expression(0)
            self.expect(TokenType.RPAREN)
            return inner

        # Unary signs bind to the next operand only, so -2 ^ 2 is (-2) ^ 2
        if token.type is TokenType.MINUS:
            operand = self.parse_prefix()
            return Value(-operand.number, operand.is_percent)

        if token.type is TokenType.PLUS:
            return self.parse_prefix()

        if token.type is TokenType.IDENT:
            self.expect(TokenType.LPAREN)
            argument = self.parse_expression(0)
            self.expect(TokenType.RPAREN)
            return Value(apply_function(token.text, argument.number))

        if token.type is TokenType.EOF:
            raise ParseError("unexpected end of expression")
        raise ParseError(f"unexpected token {token.text!r}")

    def apply_binary(self, op, left: Value, right: Value) -> float:
        a, b = left.number, right.number
        if op is TokenType.PLUS:
            return a * (1 + b) if right.is_percent else a + b
        if op is TokenType.MINUS:
            return a * (1 - b) if right.is_percent else a - b
        if op is TokenType.STAR:
            return a * b
        if op is TokenType.SLASH:
            return divide(a, b)
        if op is TokenType.CARET:
            return power(a, b)
        if op is TokenType.GT:
            return float(a > b)
        if op is TokenType.LT:
            return float(a < b)
        if op is TokenType.GE:
            return float(a >= b)
        if op is TokenType.LE:
            return float(a <= b)
        if op is TokenType.EQ:
            return float(a == b)
        if op is TokenType.NE:
            return float(a != b)
        raise ParseError(f"unsupported operator {op.value!r}")


def parse_tokens(tokens: List[Token], resolve: Optional[Resolver] = None) -> float:
    """Evaluate a full token list; leftover tokens are an error."""
    parser = Parser(tokens, resolve)
    try:
        result = parser.parse()
    except RecursionError:
        raise ParseError("expression nested too deeply") from None
    if not parser.at_end():
        raise ParseError(f"unexpected token {parser.peek().text!r}")
    return result.number


def evaluate(expr: str, resolve: Optional[Resolver] = None) -> float:
    """
    Evaluate an arithmetic expression.

    Args:
        expr (str): Expression such as "$100 - 20%" or "\\1 * 2"
        resolve (callable): Maps a referenced line number to its value

    Returns:
        float: the result, possibly NaN or infinite

    Raises:
        LexError, ParseError: when the expression cannot be evaluated
    """
    return parse_tokens(tokenize(expr), resolve)
