"""
Tests for whole-document evaluation in the SmartCalc engine.
"""

from datetime import datetime

import pytest
from zoneinfo import ZoneInfo

from calc_engine import (
    CalcEngine, find_dependent_lines, find_result_equals, format_spacing,
    has_result, strip_result,
)
from config import Settings

FIXED_NOW = datetime(2025, 12, 26, 11, 12, tzinfo=ZoneInfo("America/New_York"))


@pytest.fixture
def engine():
    return CalcEngine(settings=Settings(live_rates=False), clock=lambda: FIXED_NOW)


def outputs(engine, lines, active_line=0):
    return [result.output for result in engine.evaluate_document(lines, active_line)]


def test_basic_lines(engine):
    """Test result placement for plain arithmetic"""
    test_cases = [
        ("2 + 3 =", "2 + 3 = 5"),
        ("$100 - 20% =", "$100 - 20% = $80.00"),
        ("10 / 4 =", "10 / 4 = 2.5"),
        ("1000 * 1000 =", "1000 * 1000 = 1,000,000"),
        ("sqrt(-1) =", "sqrt(-1) = NaN"),
        ("3 > 2 =", "3 > 2 = true"),
        ("2 >= 3 =", "2 >= 3 = false"),
    ]

    for line, expected in test_cases:
        assert outputs(engine, [line]) == [expected], f"Failed: {line}"


def test_references(engine):
    assert outputs(engine, ["100 =", "\\1 * 2 ="]) == ["100 = 100", "\\1 * 2 = 200"]


def test_unresolved_reference_is_err(engine):
    assert outputs(engine, ["\\1 + 5 ="]) == ["\\1 + 5 = ERR"]
    assert outputs(engine, ["5 =", "\\2 + 1 =", "7 ="])[1] == "\\2 + 1 = ERR"


def test_reference_to_pending_line_is_err(engine):
    assert outputs(engine, ["2 + 3", "\\1 * 2 ="]) == ["2 + 3", "\\1 * 2 = ERR"]


def test_currency_propagates_through_references(engine):
    assert outputs(engine, ["$50 =", "\\1 * 2 ="]) == ["$50 = $50.00", "\\1 * 2 = $100.00"]


def test_lines_left_untouched(engine):
    lines = ["# header", "", "2 + 3", "= 5", "   "]
    assert outputs(engine, lines) == lines


def test_inline_comment_preserved(engine):
    assert outputs(engine, ["2 + 3 = # sum"]) == ["2 + 3 = 5 # sum"]
    assert outputs(engine, ["2 + 3 = 5 # sum"]) == ["2 + 3 = 5 # sum"]
    assert outputs(engine, ["\\9 = # nope"]) == ["\\9 = ERR # nope"]


def test_spacing_skipped_on_active_line(engine):
    assert outputs(engine, ["2+3*4 ="]) == ["2 + 3 * 4 = 14"]
    assert outputs(engine, ["2+3*4 ="], active_line=1) == ["2+3*4 = 14"]


def test_cidr_multiline_result(engine):
    """Test the worked subnet example renders as continuation lines"""
    output = outputs(engine, ["10.100.0.0/24 ="])[0]
    lines = output.split("\n")
    assert lines[0] == "10.100.0.0/24 ="
    assert "> Network: 10.100.0.0/24" in lines
    assert "> Hosts: 254" in lines
    assert "> Mask: 255.255.255.0" in lines


def test_stale_output_lines_are_replaced(engine):
    lines = ["10.100.0.0/16 / 2 subnets =", "> 1: stale", "5 * 2 ="]
    results = outputs(engine, lines)
    assert len(results) == 2
    assert results[0] == (
        "10.100.0.0/16 / 2 subnets =\n"
        "> 1: 10.100.0.0/17 (32766 hosts)\n"
        "> 2: 10.100.128.0/17 (32766 hosts)"
    )
    assert results[1] == "5 * 2 = 10"


def test_references_skip_output_lines(engine):
    lines = ["10.0.0.0/30 =", "> Network: 10.0.0.0/30", "7 =", "\\2 + 1 ="]
    assert outputs(engine, lines)[-1] == "\\2 + 1 = 8"


def test_numeric_reference_to_network_line_is_err(engine):
    assert outputs(engine, ["10.0.0.0/24 =", "\\1 + 1 ="])[1] == "\\1 + 1 = ERR"


def test_date_time_chaining(engine):
    results = engine.evaluate_document(["2025-12-26 11:12 EST =", "\\1 + 30 days ="])
    assert [r.output for r in results] == [
        "2025-12-26 11:12 EST = 2025-12-26 11:12 EST",
        "\\1 + 30 days = 2026-01-25 11:12 EST",
    ]
    assert results[1].is_date_time
    assert results[1].value is None


def test_date_difference_through_references(engine):
    lines = ["2025-12-26 =", "2025-12-01 =", "\\1 - \\2 ="]
    assert outputs(engine, lines)[2] == "\\1 - \\2 = 3 weeks 4 days"


def test_dispatch_order(engine):
    """Phrases reach the percentage and unit evaluators before arithmetic"""
    assert outputs(engine, ["what is 15% of 200 ="]) == ["what is 15% of 200 = 30"]
    assert outputs(engine, ["20 dollars to euros ="]) == ["20 dollars to euros = 17.00 EUR"]
    assert outputs(engine, ["5 miles to km ="]) == ["5 miles to km = 8.0467 km"]


@pytest.mark.parametrize("line", [
    "999999999 days x 2 =",
    "today + 1.2.3 days =",
    "1..2 hours in minutes =",
    "Dec 99999999999999999999 till Dec 7 =",
    "(" * 3000 + "1" + ")" * 3000 + " =",
])
def test_failed_line_does_not_stop_document(engine, line):
    """A line that cannot be evaluated renders ERR and later lines still evaluate"""
    first, second = outputs(engine, [line, "2 + 3 ="])
    assert first.endswith("= ERR")
    assert second == "2 + 3 = 5"


def test_evaluation_is_idempotent(engine):
    document = ["100 =", "\\1 * 2 =", "$100 - 20% =", "10.0.0.0/30 =", "2+2 = # four"]
    first = engine.render(engine.evaluate_document(document))
    second = engine.render(engine.evaluate_document(first.split("\n")))
    assert second == first


def test_evaluate_text_records(engine):
    records = engine.evaluate_text("2 + 3 =\n> stale\n4 * 2 =")
    assert records == [
        {"line_num": 1, "input": "2 + 3 =", "output": "2 + 3 = 5"},
        {"line_num": 2, "input": "4 * 2 =", "output": "4 * 2 = 8"},
    ]


def test_replace_refs_with_values(engine):
    assert engine.replace_refs_with_values("100 =\n\\1 * 2 =") == "100 =\n100 * 2 ="
    assert engine.replace_refs_with_values("$50 = $50.00\n\\1 + 1 =") == "$50 = $50.00\n$50.00 + 1 ="


def test_find_result_equals():
    assert find_result_equals("x = 1") == 2
    assert find_result_equals("a >= b = c") == 7
    assert find_result_equals("a == b") == -1
    assert find_result_equals("no equals") == -1


def test_strip_and_has_result():
    assert strip_result("2 + 3 = 5 # note") == "2 + 3 = # note"
    assert strip_result("2 + 3 = 5") == "2 + 3 ="
    assert strip_result("2 + 3") == "2 + 3"

    assert has_result("2 + 3 = 5")
    assert not has_result("2 + 3 =")
    assert not has_result("2 + 3 = # note")
    assert not has_result("2 + 3")


def test_find_dependent_lines():
    lines = ["1 =", "\\1 + 1 =", "\\2 * 2 =", "5 ="]
    assert find_dependent_lines(lines, 1) == [2]
    assert find_dependent_lines(lines, 1, transitive=True) == [2, 3]
    assert find_dependent_lines(lines, 4) == []


def test_format_spacing():
    """Test operator spacing, leaving dates and addresses alone"""
    test_cases = [
        ("2+3*4", "2 + 3 * 4"),
        ("1+2+3", "1 + 2 + 3"),
        ("  2   +   3 ", "2 + 3"),
        ("5*3", "5 * 3"),
        ("2025-12-26 - 5 days", "2025-12-26 - 5 days"),
        ("10.0.0.0/24 / 2 subnets", "10.0.0.0/24 / 2 subnets"),
        ("12:30 pm", "12:30 pm"),
        ("$100 - 20%", "$100 - 20%"),
    ]

    for expr, expected in test_cases:
        assert format_spacing(expr) == expected, f"Failed: {expr}"
        assert format_spacing(format_spacing(expr)) == expected, f"Not idempotent: {expr}"
