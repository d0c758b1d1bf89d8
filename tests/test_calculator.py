from __future__ import annotations

import pytest

from loph.core.errors import EvaluationError
from loph.nlp.calculator import INVALID_EXPRESSION_MESSAGE, calculate, evaluate_expression


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("2+2*3", "8"),
        ("(2+2)*3", "12"),
        ("7/2", "3.5"),
        ("4/2", "2"),
        ("2^10", "1024"),
        ("-3 + 1", "-2"),
        ("1.5 * 2", "3"),
        ("1/3", "0.3333333333333333"),
    ],
)
def test_evaluates_expressions(expression, expected):
    assert evaluate_expression(expression) == expected


@pytest.mark.parametrize("expression", ["", "   ", "+", "*/", "1/0", "2 3", "1.2.3", "()", "9^9999"])
def test_invalid_expressions_raise(expression):
    with pytest.raises(EvaluationError):
        evaluate_expression(expression)


def test_calculate_maps_errors_to_fixed_reply():
    assert calculate("1/0") == INVALID_EXPRESSION_MESSAGE
    assert calculate("2+2*3") == "8"


@pytest.mark.parametrize(
    "expression",
    [
        "((9^999)^999)^99",
        "(10^999)^5",
        "(9^999)*(9^999)*(9^999)*(9^999)*(9^999)",
        "2^((0-1)^0.5)",
        "1+" * 600 + "1",
    ],
)
def test_oversized_or_overlong_expressions_are_rejected(expression):
    with pytest.raises(EvaluationError):
        evaluate_expression(expression)


def test_large_result_within_digit_cap_is_computed():
    assert evaluate_expression("(2^10)^100") == str(2**1000)


@pytest.mark.parametrize("expression", ["-" * 100_000 + "1", "1+" * 100_000 + "1"])
def test_deep_nesting_is_an_evaluation_error(monkeypatch, expression):
    monkeypatch.setattr("loph.nlp.calculator.MAX_EXPRESSION_LENGTH", 10**6)
    with pytest.raises(EvaluationError):
        evaluate_expression(expression)
