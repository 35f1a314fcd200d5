"""
SmartCalc Reference Adjustment
Keeps positional \\N references pointing at the same logical line when a
single contiguous block of lines is inserted or deleted.
"""

import re
from typing import Dict, List


REFERENCE_PATTERN = re.compile(r"\\(\d+)")
OUTPUT_LINE_PREFIX = "> "


def find_references(text: str) -> List[int]:
    """Line numbers referenced by \\N tokens in text, in order of appearance."""
    return [int(m.group(1)) for m in REFERENCE_PATTERN.finditer(text)]


def is_output_line(line: str) -> bool:
    """Continuation lines are regenerated output and never count as document lines."""
    return line.lstrip().startswith(OUTPUT_LINE_PREFIX)


def logical_lines(text: str) -> List[str]:
    return [line for line in text.split('\n') if not is_output_line(line)]


def _first_difference(old_lines, new_lines):
    shortest = min(len(old_lines), len(new_lines))
    for i in range(shortest):
        if old_lines[i] != new_lines[i]:
            return i + 1
    return shortest + 1


def find_insertion_point(old_lines: List[str], new_lines: List[str]) -> int:
    """1-based index of the first line that differs, or len(old) + 1."""
    return _first_difference(old_lines, new_lines)


def find_deletion_point(old_lines: List[str], new_lines: List[str]) -> int:
    """1-based index of the first line that differs, or len(new) + 1."""
    return _first_difference(old_lines, new_lines)


def _rewrite(text, renumber):
    def replace(match):
        return "\\" + str(renumber(int(match.group(1))))
    return REFERENCE_PATTERN.sub(replace, text)


def adjust_references_for_insert(text: str, insert_at: int, delta: int) -> str:
    """Shift every \\N with N >= insert_at up by delta."""
    if delta == 0:
        return text
    return _rewrite(text, lambda n: n + delta if n >= insert_at else n)


def adjust_references_for_delete(text: str, delete_at: int, delta: int) -> str:
    """
    Shift references past a deleted block down by delta.

    References into the deleted block [delete_at, delete_at + delta) are left
    as they are so the affected line fails visibly instead of silently
    pointing at a neighbour.
    """
    if delta == 0:
        return text
    end = delete_at + delta

    def renumber(n):
        if n >= end:
            return n - delta
        return n

    return _rewrite(text, renumber)


def adjust_references(old_text: str, new_text: str) -> str:
    """
    Rewrite references in new_text after a line insert or delete.

    Args:
        old_text (str): Document before the edit
        new_text (str): Document after the edit

    Returns:
        str: new_text with every \\N renumbered; unchanged when the number of
        logical lines did not change
    """
    old_lines = logical_lines(old_text)
    new_lines = logical_lines(new_text)
    delta = len(new_lines) - len(old_lines)

    if delta == 0:
        return new_text
    if delta > 0:
        insert_at = find_insertion_point(old_lines, new_lines)
        return adjust_references_for_insert(new_text, insert_at, delta)
    delete_at = find_deletion_point(old_lines, new_lines)
    return adjust_references_for_delete(new_text, delete_at, -delta)


def replace_references_with_values(text: str, values: Dict[int, str]) -> str:
    """Substitute \\N with its formatted value; unknown references stay as written."""
    def replace(match):
        n = int(match.group(1))
        return values.get(n, match.group(0))
    return REFERENCE_PATTERN.sub(replace, text)
