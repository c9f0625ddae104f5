import logging

import pytest

from bom_backend.services.formula import (
    FormulaError,
    evaluate_formula,
    format_number,
    parse_formula,
    try_evaluate_formula,
)


def test_adds_context_variable():
    assert evaluate_formula("cameras + 1", {"cameras": 3}) == 4


def test_operator_precedence_and_parentheses():
    ctx = {"camera": 6, "nvr": 2}
    assert evaluate_formula("camera + nvr * 2", ctx) == 10
    assert evaluate_formula("(camera + nvr) * 2", ctx) == 16
    assert evaluate_formula("-camera + 10", ctx) == 4
    assert evaluate_formula("camera / 4", ctx) == 1.5


def test_overlapping_variable_names_resolve_independently():
    ctx = {"camera": 5, "camera_exists": True, "camera_ports": 8}
    assert evaluate_formula("camera_ports - camera", ctx) == 3
    assert evaluate_formula("camera_exists + camera", ctx) == 6


def test_math_helpers():
    ctx = {"camera": 9}
    assert evaluate_formula("Math.ceil(camera / 4)", ctx) == 3
    assert evaluate_formula("Math.floor(camera / 4)", ctx) == 2
    assert evaluate_formula("Math.round(2.5)", ctx) == 3
    assert evaluate_formula("Math.max(camera, 12, 3)", ctx) == 12
    assert evaluate_formula("Math.min(camera, 12)", ctx) == 9
    assert evaluate_formula("Math.abs(0 - camera)", ctx) == 9


def test_category_keys_starting_with_digit():
    assert evaluate_formula("4g_router * 2", {"4g_router": 2}) == 4


@pytest.mark.parametrize(
    "formula",
    [
        "cameras; DROP TABLE x",
        "__import__('os')",
        "cameras ** 2",
        "Math",
        "Math.pow(2, 3)",
        "Math.ceil()",
        "unknown + 1",
        "camera / 0",
        "(camera + 1",
        "",
    ],
)
def test_unresolved_formulas_return_zero(formula, caplog):
    caplog.set_level(logging.WARNING)
    assert try_evaluate_formula(formula, {"camera": 3, "cameras": 3}) is None
    assert evaluate_formula(formula, {"camera": 3, "cameras": 3}) == 0


def test_rejection_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="bom_formula")
    evaluate_formula("cameras; DROP TABLE x", {"cameras": 3})
    assert any("Invalid formula" in rec.message for rec in caplog.records)


def test_legitimate_zero_is_distinct_from_unresolved():
    assert try_evaluate_formula("camera - 3", {"camera": 3}) == 0
    assert try_evaluate_formula("nvr", {"camera": 3}) is None


def test_parse_rejects_bad_syntax_with_formula_error():
    with pytest.raises(FormulaError):
        parse_formula("1 +")
    assert parse_formula("camera + nvr_ports * 2").evaluate({"camera": 2, "nvr_ports": 8}) == 18


def test_evaluation_is_deterministic():
    ctx = {"camera": 7, "nvr": 1}
    first = evaluate_formula("camera + nvr + 1", ctx)
    assert evaluate_formula("camera + nvr + 1", ctx) == first == 9


def test_format_number():
    assert format_number(4.0) == "4"
    assert format_number(2.5) == "2.5"
    assert format_number(3) == "3"


def test_deeply_nested_formula_is_rejected():
    nested = "(" * 240 + "1" + ")" * 240
    with pytest.raises(FormulaError):
        parse_formula(nested)
    with pytest.raises(FormulaError):
        parse_formula("-" * 100 + "1")
    with pytest.raises(FormulaError):
        parse_formula("Math.abs(" * 70 + "1" + ")" * 70)


def test_deeply_nested_formula_evaluates_to_zero(caplog):
    caplog.set_level(logging.WARNING)
    nested = "(" * 400 + "1" + ")" * 400
    assert try_evaluate_formula(nested, {}) is None
    assert evaluate_formula(nested, {}) == 0
    assert any("nested deeper" in rec.message for rec in caplog.records)


def test_nesting_within_limit_still_parses():
    assert evaluate_formula("(" * 60 + "camera" + ")" * 60, {"camera": 5}) == 5
    assert evaluate_formula("Math.ceil(Math.max(camera / 4, 1))", {"camera": 9}) == 3


def test_very_long_flat_formula_does_not_raise():
    formula = " + ".join(["1"] * 5000)
    assert isinstance(evaluate_formula(formula, {}), (int, float))
