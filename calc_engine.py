"""
SmartCalc Core Engine
Evaluates a whole document line by line, resolving \\N references against
earlier results and routing each expression to the right domain evaluator.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from calc_errors import CalcError
from config import Settings, load_settings
from datetime_evaluator import DateTimeEvaluator
from domain_evaluators import ArithmeticEvaluator, DomainDispatch, ReferenceTable
from network_evaluator import NetworkEvaluator
from percentage_evaluator import PercentageEvaluator
from reference_adjuster import (
    OUTPUT_LINE_PREFIX, find_references, is_output_line,
    replace_references_with_values,
)
from result_formatter import format_result
from units_evaluator import ExchangeRates, UnitsEvaluator

logger = logging.getLogger(__name__)


@dataclass
class EvaluatedLine:
    output: str
    value: Optional[float] = None
    has_result: bool = False
    is_currency: bool = False
    is_date_time: bool = False
    date_time_ref: Optional[str] = None


# =============================================================================
# LINE HELPERS
# =============================================================================

def find_result_equals(line: str) -> int:
    """
    Locate the '=' that separates an expression from its result.

    Args:
        line (str): A document line

    Returns:
        int: index of the first '=' that is not part of >=, <=, == or !=,
        or -1 when the line has none
    """
    i = 0
    while i < len(line):
        ch = line[i]
        if ch in "<>=!" and line[i + 1:i + 2] == "=":
            i += 2
            continue
        if ch == "=":
            return i
        i += 1
    return -1


def split_inline_comment(line: str):
    """Split 'expr = result # note' into ('expr = result ', '# note')."""
    index = line.find("#")
    if index < 0:
        return line, ""
    return line[:index], line[index:].rstrip()


def strip_result(line: str) -> str:
    """Remove a computed result, keeping the '=' and any inline comment."""
    eq = find_result_equals(line)
    if eq < 0:
        return line
    before, after = line[:eq + 1], line[eq + 1:]
    hash_index = after.find("#")
    if hash_index >= 0:
        return before + " " + after[hash_index:].lstrip()
    return before


def has_result(line: str) -> bool:
    eq = find_result_equals(line)
    if eq < 0:
        return False
    after = line[eq + 1:].strip()
    return bool(after) and not after.startswith("#")


def clean_output_lines(lines: Sequence[str]) -> List[str]:
    """Drop stale continuation lines; they are regenerated by their owners."""
    return [line for line in lines if not is_output_line(line)]


def find_dependent_lines(lines: Sequence[str], changed_line: int, transitive: bool = False) -> List[int]:
    """
    Lines that reference changed_line.

    Args:
        lines: Document lines; continuation lines are ignored for numbering
        changed_line (int): 1-based line that changed
        transitive (bool): Follow references through dependents as well

    Returns:
        list[int]: sorted 1-based line numbers, excluding changed_line itself
    """
    lines = clean_output_lines(lines)
    refs_by_line = {n: set(find_references(line)) for n, line in enumerate(lines, 1)}
    found = set()
    pending = [changed_line]
    while pending:
        target = pending.pop()
        for n, refs in refs_by_line.items():
            if target in refs and n not in found and n != changed_line:
                found.add(n)
                if transitive:
                    pending.append(n)
    return sorted(found)


# ===== EXPRESSION SPACING =====

# Literals whose own '-', '/' and ':' must not be spaced out
PROTECTED_LITERAL = re.compile(
    r"\d{1,3}(?:\.\d{1,3}){3}(?:/\d{1,2})?"
    r"|\d{4}-\d{1,2}-\d{1,2}"
    r"|\d{1,2}/\d{1,2}/\d{2,4}"
    r"|\d{1,2}:\d{2}(?::\d{2})?"
)

SPACING_RULES = [
    (re.compile(r"(?<=\S)\s*×\s*(?=\S)"), " × "),
    (re.compile(r"(?<=\S)\s*÷\s*(?=\S)"), " ÷ "),
    (re.compile(r"(?<=[\d\)%])\s*x\s*(?=\d)"), " x "),
    (re.compile(r"(?<=\d)\s*\*\s*(?=\d)"), " * "),
    (re.compile(r"(?<=\d)\s*\^\s*(?=\d)"), " ^ "),
    (re.compile(r"(?<=[\d\)%])\s*\+\s*(?=\S)"), " + "),
    (re.compile(r"(?<=[\d\)%])\s*-\s*(?=\S)"), " - "),
    (re.compile(r"(?<=\d)\s*/\s*(?=\d{3,})"), " / "),
]

PLACEHOLDER_BASE = 0xE000


def format_spacing(expr: str) -> str:
    """Normalize whitespace around binary operators; purely cosmetic."""
    text = re.sub(r"\s+", " ", expr.strip())

    protected = []

    def protect(match):
        protected.append(match.group(0))
        return chr(PLACEHOLDER_BASE + len(protected) - 1)

    text = PROTECTED_LITERAL.sub(protect, text)
    for pattern, replacement in SPACING_RULES:
        text = pattern.sub(replacement, text)
    for i, literal in enumerate(protected):
        text = text.replace(chr(PLACEHOLDER_BASE + i), literal)
    return text


def render_line(expr: str, result_text: str, comment: str = "") -> str:
    suffix = " " + comment if comment else ""
    if "\n" in result_text:
        body = "".join("\n" + OUTPUT_LINE_PREFIX + line for line in result_text.split("\n"))
        return f"{expr} ={suffix}{body}"
    return f"{expr} = {result_text}{suffix}"


# =============================================================================
# ENGINE
# =============================================================================

def build_default_dispatch(settings: Optional[Settings] = None, clock=None) -> DomainDispatch:
    """Network first, then dates, phrasing, units, and plain arithmetic last."""
    return DomainDispatch([
        NetworkEvaluator(),
        DateTimeEvaluator(clock),
        PercentageEvaluator(),
        UnitsEvaluator(ExchangeRates(settings)),
        ArithmeticEvaluator(),
    ])


class CalcEngine:
    """
    Document evaluation engine.
    Holds only the evaluator dispatch; every pass builds fresh per-line state.
    """

    def __init__(self, dispatch: Optional[DomainDispatch] = None,
                 settings: Optional[Settings] = None, clock=None):
        self.settings = settings or load_settings()
        self.dispatch = dispatch or build_default_dispatch(self.settings, clock)

    def evaluate_document(self, lines: Sequence[str], active_line: int = 0) -> List[EvaluatedLine]:
        """
        Evaluate every line of a document.

        Args:
            lines: Raw document lines, possibly holding stale "> " output
            active_line (int): 1-based line being edited (after cleanup), or 0;
                its spacing is left as typed

        Returns:
            list[EvaluatedLine]: one entry per line after stale output is removed
        """
        results: List[EvaluatedLine] = []
        for index, line in enumerate(clean_output_lines(lines)):
            refs = ReferenceTable(results, limit=index)
            results.append(self.evaluate_line(line, index + 1 == active_line, refs))
        return results

    def evaluate_line(self, line: str, is_active: bool, refs: ReferenceTable) -> EvaluatedLine:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return EvaluatedLine(output=line)

        working, comment = split_inline_comment(line)
        eq = find_result_equals(working)
        if eq < 0:
            return EvaluatedLine(output=line)
        expr = working[:eq].strip()
        if not expr:
            return EvaluatedLine(output=line)

        shown = expr if is_active else format_spacing(expr)
        try:
            result = self.dispatch.evaluate(expr, refs)
        except CalcError as e:
            logger.debug("Line %r failed: %s", expr, e)
            return EvaluatedLine(output=render_line(shown, "ERR", comment))

        return EvaluatedLine(
            output=render_line(shown, result.text, comment),
            value=result.value,
            has_result=True,
            is_currency=result.is_currency,
            is_date_time=result.date_time_ref is not None,
            date_time_ref=result.date_time_ref,
        )

    def render(self, results: Sequence[EvaluatedLine]) -> str:
        return "\n".join(result.output for result in results)

    def evaluate_text(self, text: str, active_line: int = 0) -> List[Dict]:
        """Evaluate newline-separated text into {line_num, input, output} records."""
        lines = clean_output_lines(text.split("\n"))
        results = self.evaluate_document(lines, active_line)
        return [
            {"line_num": n, "input": line, "output": result.output}
            for n, (line, result) in enumerate(zip(lines, results), 1)
        ]

    def line_values(self, lines: Sequence[str]) -> Dict[int, str]:
        """Display value of every line that can stand in for a reference."""
        values = {}
        for n, result in enumerate(self.evaluate_document(lines), 1):
            if result.value is not None:
                values[n] = format_result(result.value, result.is_currency)
            elif result.date_time_ref:
                values[n] = result.date_time_ref
        return values

    def replace_refs_with_values(self, text: str) -> str:
        """Copy helper: substitute each \\N with the referenced line's value."""
        lines = text.split("\n")
        values = self.line_values(lines)
        return "\n".join(
            line if is_output_line(line) else replace_references_with_values(line, values)
            for line in lines
        )
