"""
SmartCalc Domain Evaluators
The handler-chain contract shared by every domain grammar, the arithmetic
fallback evaluator, and the fixed-priority dispatcher that picks between them.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from calc_errors import CalcError, DomainError, ParseError
from calc_lexer import TokenType, has_comparison, tokenize
from calc_parser import parse_tokens
from reference_adjuster import find_references
from result_formatter import format_bool_result, format_result

logger = logging.getLogger(__name__)


# =============================================================================
# HANDLER CHAIN CONTRACT
# =============================================================================

@dataclass(frozen=True)
class Claimed:
    """A handler recognised the phrase and produced display text."""
    text: str


# Returned by a handler whose pattern does not match
NOT_MINE = None

Handler = Callable[[str, str], Optional[Claimed]]


def run_handler_chain(handlers: Sequence[Handler], expr: str) -> Optional[Claimed]:
    """
    Try handlers in order and return the first claim.

    Args:
        handlers: Callables taking (expr, expr_lower)
        expr (str): The expression being evaluated

    Returns:
        Claimed or NOT_MINE when no handler matched

    Raises:
        DomainError: when a matching handler cannot compute its result
    """
    expr = expr.strip()
    expr_lower = expr.lower()
    for handler in handlers:
        claimed = handler(expr, expr_lower)
        if claimed is not NOT_MINE:
            return claimed
    return NOT_MINE


@dataclass(frozen=True)
class DomainResult:
    text: str
    value: Optional[float] = None
    is_currency: bool = False
    date_time_ref: Optional[str] = None


# =============================================================================
# REFERENCES TO EARLIER LINES
# =============================================================================

class ReferenceTable:
    """Read-only view over the lines already evaluated in the current pass."""

    def __init__(self, lines: Sequence = (), limit: Optional[int] = None):
        self._lines = lines
        self._limit = len(lines) if limit is None else limit

    def _line(self, n):
        if n < 1 or n > self._limit:
            return None
        return self._lines[n - 1]

    def resolve_value(self, n: int) -> float:
        if n < 1 or n > self._limit:
            raise ParseError(f"bad reference \\{n}")
        line = self._lines[n - 1]
        if not line.has_result or line.value is None:
            raise ParseError(f"unresolved reference \\{n}")
        return line.value

    def resolve_date_time(self, n: int) -> str:
        line = self._line(n)
        if line is None or not line.is_date_time or not line.date_time_ref:
            raise DomainError(f"\\{n} is not a date/time line")
        return line.date_time_ref

    @property
    def currency_flags(self) -> List[bool]:
        return [bool(self._lines[i].is_currency) for i in range(self._limit)]


# =============================================================================
# EVALUATORS
# =============================================================================

class DomainEvaluator:
    """
    Base class for a domain grammar.

    Subclasses supply an ordered tuple of handlers and a cheap pre-filter.
    The chain is fixed when the evaluator is constructed.
    """

    name = "domain"

    def __init__(self, handlers: Iterable[Handler] = ()):
        self.handlers = tuple(handlers)

    def looks_like_mine(self, expr: str) -> bool:
        return True

    def evaluate(self, expr: str, refs: ReferenceTable) -> Optional[DomainResult]:
        claimed = run_handler_chain(self.handlers, expr)
        if claimed is NOT_MINE:
            return None
        return DomainResult(claimed.text)


def expr_references_currency(expr: str, currency_by_line: Sequence[bool]) -> bool:
    """True if any \\N in expr points at a line flagged as currency."""
    for n in find_references(expr):
        if 1 <= n <= len(currency_by_line) and currency_by_line[n - 1]:
            return True
    return False


class ArithmeticEvaluator(DomainEvaluator):
    """Fallback evaluator for plain arithmetic, percentages, currency and comparisons."""

    name = "arithmetic"

    def evaluate(self, expr: str, refs: ReferenceTable) -> DomainResult:
        tokens = tokenize(expr)
        is_currency = any(t.type is TokenType.CURRENCY for t in tokens) or \
            expr_references_currency(expr, refs.currency_flags)
        value = parse_tokens(tokens, refs.resolve_value)
        if has_comparison(tokens):
            text = format_bool_result(value)
        else:
            text = format_result(value, is_currency)
        return DomainResult(text, value=value, is_currency=is_currency)


# =============================================================================
# DISPATCH
# =============================================================================

class DomainDispatch:
    """Ordered evaluators; the first one that succeeds wins."""

    def __init__(self, evaluators: Iterable[DomainEvaluator]):
        self.evaluators = tuple(evaluators)

    def evaluate(self, expr: str, refs: ReferenceTable) -> DomainResult:
        last_error = None
        for evaluator in self.evaluators:
            if not evaluator.looks_like_mine(expr):
                continue
            try:
                result = evaluator.evaluate(expr, refs)
            except CalcError as e:
                logger.debug("%s evaluator failed on %r: %s", evaluator.name, expr, e)
                last_error = e
                continue
            if result is not None:
                return result
        if last_error is not None:
            raise last_error
        raise DomainError(f"no evaluator understood {expr!r}")
