"""Render numeric results for display next to an expression."""

import math


def add_thousands_separators(digits: str) -> str:
    """Group an unsigned run of digits in threes: '1234567' -> '1,234,567'."""
    return format(int(digits), ",")


def format_result(value: float, is_currency: bool) -> str:
    """
    Format a line result.

    Args:
        value (float): The computed value
        is_currency (bool): Render as dollars and cents

    Returns:
        str: "NaN" for NaN and infinities, otherwise the display text
    """
    if math.isnan(value) or math.isinf(value):
        return "NaN"
    if is_currency:
        return _format_currency(value)

    text = f"{abs(value):.10f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    whole, dot, frac = text.partition('.')
    text = add_thousands_separators(whole) + dot + frac
    if value < 0 and text != "0":
        text = "-" + text
    return text


def _format_currency(value):
    amount = abs(value)
    whole = math.floor(amount)
    cents = int(math.floor((amount - whole) * 100 + 0.5))
    if cents == 100:
        whole += 1
        cents = 0
    text = f"{add_thousands_separators(str(int(whole)))}.{cents:02d}"
    if value < 0:
        return "$-" + text
    return "$" + text


def format_bool_result(value: float) -> str:
    return "true" if value == 1 else "false"
