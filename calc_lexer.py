"""
SmartCalc Tokenizer
Turns one expression string into a flat token list for the parser.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from calc_errors import LexError


class TokenType(Enum):
    NUMBER = "number"
    CURRENCY = "currency"
    REFERENCE = "reference"
    IDENT = "ident"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    CARET = "^"
    LPAREN = "("
    RPAREN = ")"
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="
    EOF = "eof"


COMPARISON_TYPES = frozenset({
    TokenType.GT, TokenType.LT, TokenType.GE,
    TokenType.LE, TokenType.EQ, TokenType.NE,
})

SINGLE_CHAR_TOKENS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '^': TokenType.CARET,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
}

# Typographic operators accepted from pasted text
CHAR_REPLACEMENTS = {
    '×': '*',
    '÷': '/',
    '−': '-',
    '–': '-',
    '—': '-',
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: float = 0.0
    text: str = ""
    is_percent: bool = False
    ref: int = 0


def _is_digit(ch):
    return '0' <= ch <= '9'


def _nearest(text, index, step):
    """Return the closest non-space character from index in direction step, or ''."""
    i = index + step
    while 0 <= i < len(text):
        if not text[i].isspace():
            return text[i]
        i += step
    return ''


def _is_multiplication_x(text, index):
    left = _nearest(text, index, -1)
    right = _nearest(text, index, 1)
    if not left or not right:
        return False
    left_ok = _is_digit(left) or left in ')%$.'
    right_ok = _is_digit(right) or right in '($.\\' or right.isalpha()
    return left_ok and right_ok


def normalize_expression(expr: str) -> str:
    """Map typographic operators to ASCII and 'x' to '*' where it means multiply."""
    chars = [CHAR_REPLACEMENTS.get(ch, ch) for ch in expr]
    text = ''.join(chars)
    for i, ch in enumerate(chars):
        if ch in 'xX' and _is_multiplication_x(text, i):
            chars[i] = '*'
    return ''.join(chars)


def _read_number(text, start):
    """Read digits, ',' separators and at most one '.'; return (value, end)."""
    i = start
    seen_dot = False
    while i < len(text):
        ch = text[i]
        if _is_digit(ch) or ch == ',':
            i += 1
        elif ch == '.' and not seen_dot:
            seen_dot = True
            i += 1
        else:
            break
    literal = text[start:i].replace(',', '')
    try:
        return float(literal), i
    except ValueError:
        raise LexError(f"invalid number {text[start:i]!r}") from None


def tokenize(expr: str) -> List[Token]:
    """
    Split an expression into tokens.

    Args:
        expr (str): Expression text without the result '=' part

    Returns:
        list[Token]: tokens, always terminated by an EOF token

    Raises:
        LexError: on unknown characters, a bare '\\' or '$', or a lone '!'
    """
    text = normalize_expression(expr.strip())
    tokens = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
            continue

        if _is_digit(ch) or ch == '.':
            value, end = _read_number(text, i)
            if end < n and text[end] == '%':
                tokens.append(Token(TokenType.NUMBER, value / 100, text[i:end + 1], is_percent=True))
                end += 1
            else:
                tokens.append(Token(TokenType.NUMBER, value, text[i:end]))
            i = end
            continue

        if ch == '$':
            if i + 1 >= n or not (_is_digit(text[i + 1]) or text[i + 1] == '.'):
                raise LexError("'$' must be followed by an amount")
            value, end = _read_number(text, i + 1)
            tokens.append(Token(TokenType.CURRENCY, value, text[i:end]))
            i = end
            continue

        if ch == '\\':
            end = i + 1
            while end < n and _is_digit(text[end]):
                end += 1
            if end == i + 1:
                raise LexError("'\\' must be followed by a line number")
            tokens.append(Token(TokenType.REFERENCE, text=text[i:end], ref=int(text[i + 1:end])))
            i = end
            continue

        if ch in SINGLE_CHAR_TOKENS:
            tokens.append(Token(SINGLE_CHAR_TOKENS[ch], text=ch))
            i += 1
            continue

        if ch in '<>':
            if i + 1 < n and text[i + 1] == '=':
                token_type = TokenType.GE if ch == '>' else TokenType.LE
                tokens.append(Token(token_type, text=ch + '='))
                i += 2
            else:
                tokens.append(Token(TokenType.GT if ch == '>' else TokenType.LT, text=ch))
                i += 1
            continue

        if ch == '=':
            if i + 1 < n and text[i + 1] == '=':
                tokens.append(Token(TokenType.EQ, text='=='))
                i += 2
            else:
                # stray result separator
                i += 1
            continue

        if ch == '!':
            if i + 1 < n and text[i + 1] == '=':
                tokens.append(Token(TokenType.NE, text='!='))
                i += 2
                continue
            raise LexError("unexpected '!'")

        if ch.isalpha():
            end = i + 1
            while end < n and (text[end].isalpha() or _is_digit(text[end]) or text[end] == '_'):
                end += 1
            tokens.append(Token(TokenType.IDENT, text=text[i:end].lower()))
            i = end
            continue

        raise LexError(f"unexpected character {ch!r}")

    tokens.append(Token(TokenType.EOF))
    return tokens


def has_comparison(tokens: List[Token]) -> bool:
    return any(token.type in COMPARISON_TYPES for token in tokens)
