"""
Tests for the SmartCalc tokenizer.
"""

import pytest

from calc_errors import LexError
from calc_lexer import TokenType, has_comparison, normalize_expression, tokenize


def types(expr):
    return [token.type for token in tokenize(expr)]


def test_basic_tokens():
    """Test numbers and operators"""
    assert types("2 + 3") == [TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER, TokenType.EOF]
    assert types("(1 - 2) * 3 / 4 ^ 5") == [
        TokenType.LPAREN, TokenType.NUMBER, TokenType.MINUS, TokenType.NUMBER, TokenType.RPAREN,
        TokenType.STAR, TokenType.NUMBER, TokenType.SLASH, TokenType.NUMBER,
        TokenType.CARET, TokenType.NUMBER, TokenType.EOF,
    ]


def test_number_literals():
    """Test grouping separators, decimals and percent suffix"""
    test_cases = [
        ("1,234.5", 1234.5, False),
        (".5", 0.5, False),
        ("42", 42.0, False),
        ("20%", 0.2, True),
        ("1,000%", 10.0, True),
    ]

    for expr, expected, is_percent in test_cases:
        token = tokenize(expr)[0]
        assert token.type is TokenType.NUMBER, f"Failed: {expr}"
        assert token.value == pytest.approx(expected), f"Failed: {expr}"
        assert token.is_percent is is_percent, f"Failed: {expr}"


def test_currency_and_reference_tokens():
    """Test $ amounts and \\N references"""
    currency = tokenize("$1,000.25")[0]
    assert currency.type is TokenType.CURRENCY
    assert currency.value == pytest.approx(1000.25)

    reference = tokenize("\\12")[0]
    assert reference.type is TokenType.REFERENCE
    assert reference.ref == 12


def test_typographic_operators():
    """Test ×, ÷ and dash variants"""
    assert types("2 × 3")[1] is TokenType.STAR
    assert types("6 ÷ 3")[1] is TokenType.SLASH
    for dash in ("−", "–", "—"):
        assert types(f"5 {dash} 1")[1] is TokenType.MINUS, f"Failed: {dash!r}"


def test_x_as_multiplication():
    """Test that x only becomes * between operands"""
    assert normalize_expression("2x3") == "2*3"
    assert normalize_expression("2 X 3") == "2 * 3"
    assert normalize_expression("(1) x \\2") == "(1) * \\2"
    assert normalize_expression("5% x $3") == "5% * $3"
    assert normalize_expression("max") == "max"
    assert normalize_expression("x + 1") == "x + 1"


def test_identifiers_are_lowercased():
    token = tokenize("SQRT(4)")[0]
    assert token.type is TokenType.IDENT
    assert token.text == "sqrt"


def test_comparison_tokens():
    """Test comparison operators and the swallowed result '='"""
    assert types("1 >= 2 <= 3 == 4 != 5 > 6 < 7") == [
        TokenType.NUMBER, TokenType.GE, TokenType.NUMBER, TokenType.LE, TokenType.NUMBER,
        TokenType.EQ, TokenType.NUMBER, TokenType.NE, TokenType.NUMBER, TokenType.GT,
        TokenType.NUMBER, TokenType.LT, TokenType.NUMBER, TokenType.EOF,
    ]
    assert types("2 = 3") == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]
    assert has_comparison(tokenize("1 > 0"))
    assert not has_comparison(tokenize("1 + 0"))


@pytest.mark.parametrize("expr", ["\\", "\\ 1", "$", "$abc", "!", "2 & 3", ".", "5 $%"])
def test_lex_errors(expr):
    with pytest.raises(LexError):
        tokenize(expr)
