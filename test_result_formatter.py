import math

from result_formatter import add_thousands_separators, format_bool_result, format_result


def test_plain_numbers():
    test_cases = [
        (5, "5"),
        (0, "0"),
        (-0.0, "0"),
        (1234567.25, "1,234,567.25"),
        (-1234.5, "-1,234.5"),
        (0.1 + 0.2, "0.3"),
        (1 / 3, "0.3333333333"),
        (1e-12, "0"),
    ]

    for value, expected in test_cases:
        assert format_result(value, False) == expected, f"Failed: {value}"


def test_currency():
    test_cases = [
        (80, "$80.00"),
        (2.5, "$2.50"),
        (1234.5, "$1,234.50"),
        (-1234.5, "$-1,234.50"),
        (0.999, "$1.00"),
        (1000000, "$1,000,000.00"),
    ]

    for value, expected in test_cases:
        assert format_result(value, True) == expected, f"Failed: {value}"


def test_not_a_number():
    assert format_result(math.nan, False) == "NaN"
    assert format_result(math.inf, True) == "NaN"
    assert format_result(-math.inf, False) == "NaN"


def test_bool_results():
    assert format_bool_result(1) == "true"
    assert format_bool_result(0) == "false"
    assert format_bool_result(2) == "false"


def test_thousands_separators():
    assert add_thousands_separators("1234567") == "1,234,567"
    assert add_thousands_separators("12") == "12"
