"""
SmartCalc Percentage Evaluator
Natural-language percentage phrasing: "what is 15% of 200", tips, bill splits.
"""

import re

from calc_errors import DomainError
from domain_evaluators import NOT_MINE, Claimed, DomainEvaluator
from result_formatter import format_result

NUM = r"([\d.]+)"

WHAT_IS_PERCENT_OF = re.compile(r"(?:what\s+is\s+)?" + NUM + r"\s*%?\s+of\s+\$?" + NUM)
WHAT_PERCENT_IS = re.compile(NUM + r"\s+is\s+what\s+(?:%|percent|percentage)\s+of\s+" + NUM)
DECREASE = (
    re.compile(r"decrease\s+" + NUM + r"\s+by\s+" + NUM + r"\s*%"),
    re.compile(NUM + r"\s+decreased\s+by\s+" + NUM + r"\s*%"),
)
INCREASE = (
    re.compile(r"increase\s+" + NUM + r"\s+by\s+" + NUM + r"\s*%"),
    re.compile(NUM + r"\s+increased\s+by\s+" + NUM + r"\s*%"),
)
PERCENT_CHANGE = re.compile(r"percent(?:age)?\s+change\s+(?:from\s+)?" + NUM + r"\s+to\s+" + NUM)
TIP = re.compile(r"(?:tip\s+)?" + NUM + r"\s*%\s*(?:tip\s+)?on\s+\$?" + NUM)
SPLIT_BILL = (
    re.compile(r"\$?" + NUM + r"\s+split\s+(\d+)\s+ways?(?:\s+with\s+" + NUM + r"\s*%\s*tip)?"),
    re.compile(r"split\s+\$?" + NUM + r"\s+(\d+)\s+ways?(?:\s+with\s+" + NUM + r"\s*%\s*tip)?"),
)

PERCENTAGE_PATTERNS = (
    re.compile(r"what\s+is\s+[\d.]+\s*%?\s+of"),
    re.compile(r"[\d.]+\s*%\s+of\s+\$?[\d.]"),
    re.compile(r"[\d.]+\s+is\s+what\s+(?:%|percent|percentage)"),
    re.compile(r"increase\s+[\d.]+\s+by|[\d.]+\s+increased\s+by"),
    re.compile(r"decrease\s+[\d.]+\s+by|[\d.]+\s+decreased\s+by"),
    re.compile(r"percent(?:age)?\s+change"),
    re.compile(r"tip\s+[\d.]+\s*%?\s+on|[\d.]+\s*%\s*tip\s+on"),
    re.compile(r"split\s+\$?[\d.]+|\$?[\d.]+\s+split\s+\d"),
)


def _number(text):
    try:
        return float(text)
    except ValueError:
        raise DomainError(f"invalid number: {text}") from None


def _first_match(patterns, text):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def handle_what_is_percent_of(expr, expr_lower):
    match = WHAT_IS_PERCENT_OF.search(expr_lower)
    if not match:
        return NOT_MINE
    percent, value = _number(match.group(1)), _number(match.group(2))
    return Claimed(format_result(value * percent / 100, False))


def handle_what_percent_is(expr, expr_lower):
    match = WHAT_PERCENT_IS.search(expr_lower)
    if not match:
        return NOT_MINE
    part, whole = _number(match.group(1)), _number(match.group(2))
    if whole == 0:
        raise DomainError("division by zero")
    return Claimed(f"{part / whole * 100:.2f}%")


def handle_decrease_by_percent(expr, expr_lower):
    match = _first_match(DECREASE, expr_lower)
    if not match:
        return NOT_MINE
    value, percent = _number(match.group(1)), _number(match.group(2))
    return Claimed(format_result(value * (1 - percent / 100), False))


def handle_increase_by_percent(expr, expr_lower):
    match = _first_match(INCREASE, expr_lower)
    if not match:
        return NOT_MINE
    value, percent = _number(match.group(1)), _number(match.group(2))
    return Claimed(format_result(value * (1 + percent / 100), False))


def handle_percent_change(expr, expr_lower):
    match = PERCENT_CHANGE.search(expr_lower)
    if not match:
        return NOT_MINE
    old, new = _number(match.group(1)), _number(match.group(2))
    if old == 0:
        raise DomainError("division by zero")
    change = (new - old) / old * 100
    sign = "+" if change > 0 else ""
    return Claimed(f"{sign}{change:.2f}%")


def handle_tip(expr, expr_lower):
    match = TIP.search(expr_lower)
    if not match:
        return NOT_MINE
    percent, amount = _number(match.group(1)), _number(match.group(2))
    tip = amount * percent / 100
    return Claimed(f"Tip: ${tip:.2f}, Total: ${amount + tip:.2f}")


def handle_split_bill(expr, expr_lower):
    match = _first_match(SPLIT_BILL, expr_lower)
    if not match:
        return NOT_MINE
    amount = _number(match.group(1))
    ways = int(match.group(2))
    if ways == 0:
        raise DomainError("cannot split zero ways")
    percent = _number(match.group(3)) if match.group(3) else 0.0
    tip = amount * percent / 100
    total = amount + tip
    per_person = total / ways
    if percent > 0:
        return Claimed(f"Total: ${total:.2f} (incl. ${tip:.2f} tip), Per person: ${per_person:.2f}")
    return Claimed(f"Per person: ${per_person:.2f}")


# Decrease is tried before increase
PERCENTAGE_HANDLERS = (
    handle_what_is_percent_of,
    handle_what_percent_is,
    handle_decrease_by_percent,
    handle_increase_by_percent,
    handle_percent_change,
    handle_tip,
    handle_split_bill,
)


def is_percentage_expression(expr: str) -> bool:
    lower = expr.lower()
    return any(pattern.search(lower) for pattern in PERCENTAGE_PATTERNS)


class PercentageEvaluator(DomainEvaluator):
    name = "percentage"

    def __init__(self):
        super().__init__(PERCENTAGE_HANDLERS)

    def looks_like_mine(self, expr: str) -> bool:
        return is_percentage_expression(expr)
