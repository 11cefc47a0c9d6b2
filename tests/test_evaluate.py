from __future__ import annotations

import math

import pytest

from tagged_css.evaluate import UNDEFINED, evaluate_constant, js_to_string
from tagged_css.host import scan_module


def _expression(code: str, prelude: str = ""):
    module = scan_module(prelude + "css`a { b: ${" + code + "}; }`")
    return module.templates[0].quasi.expressions[0]


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("'2px' + ' solid'", "2px solid"),
        ('"red"', "red"),
        ("1 + 2", "3"),
        ("10 / 4", "2.5"),
        ("2 ** 3 ** 2", "512"),
        ("(1 + 2) * 3", "9"),
        ("1 + 2 * 3", "7"),
        ("-'3'", "-3"),
        ("4 + 'px'", "4px"),
        ("'a' === 'a'", "true"),
        ("1 == '1'", "true"),
        ("null", "null"),
        ("null ?? 'fallback'", "fallback"),
        ("0 || 'x'", "x"),
        ("true ? 'a' : 'b'", "a"),
        ("false ? 'a' : 'b'", "b"),
        ("props.primary ? 'blue' : 'gray'", "blue"),
        ("`a${1 + 1}b`", "a2b"),
        ("0x10", "16"),
        ("1 / 0", "Infinity"),
    ],
)
def test_evaluate_constant_folds_constant_expressions(code: str, expected: str):
    assert evaluate_constant(_expression(code)) == expected


@pytest.mark.parametrize(
    "code",
    [
        "props.color",
        "theme()",
        "x => x",
        "(a) => a",
        "undefined",
        "void 0",
        "unknownName",
        "[1, 2]",
        "(1, 2)",
        "10n",
        "`a${props.x}`",
        "css`a{}`",
    ],
)
def test_evaluate_constant_gives_up_on_dynamic_expressions(code: str):
    assert evaluate_constant(_expression(code)) is None


def test_evaluate_constant_resolves_const_bindings():
    prelude = "const size = 4;\nconst unit = 'px';\nconst double = size * 2;\n"
    assert evaluate_constant(_expression("double + unit", prelude)) == "8px"


def test_evaluate_constant_ignores_mutable_bindings():
    assert evaluate_constant(_expression("size", "let size = 4;\n")) is None


def test_evaluate_constant_stops_on_self_reference():
    assert evaluate_constant(_expression("loop", "const loop = loop + 1;\n")) is None


def test_js_to_string():
    assert js_to_string(4.0) == "4"
    assert js_to_string(0.5) == "0.5"
    assert js_to_string(True) == "true"
    assert js_to_string(None) == "null"
    assert js_to_string(UNDEFINED) == "undefined"
    assert js_to_string(math.nan) == "NaN"
    assert js_to_string(-math.inf) == "-Infinity"


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("1e-7", "1e-7"),
        ("0.000001", "0.000001"),
        ("1e21", "1e+21"),
        ("123456789012345680000", "123456789012345680000"),
        ("1.5e-10 * 2", "3e-10"),
        ("0.1 + 0.2", "0.30000000000000004"),
        ("100 / 8", "12.5"),
        ("'0x10' * 1", "16"),
        ("'0o17' * 1", "15"),
        ("'0b11' * 1", "3"),
        ("' 12 ' * 1", "12"),
        ("'.5' * 2", "1"),
        ("'' * 1", "0"),
        ("'Infinity' * 1", "Infinity"),
        ("'-Infinity' * 1", "-Infinity"),
        ("'1e3' - 0", "1000"),
        ("'-0x10' * 1", "NaN"),
        ("'1_0' * 1", "NaN"),
        ("'inf' * 1", "NaN"),
        ("'12px' * 1", "NaN"),
    ],
)
def test_evaluate_constant_follows_javascript_number_conversions(code: str, expected: str):
    assert evaluate_constant(_expression(code)) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1e-7, "1e-7"),
        (1.25e-7, "1.25e-7"),
        (-0.0, "0"),
        (1e21, "1e+21"),
        (2.5e25, "2.5e+25"),
        (1e20, "100000000000000000000"),
        (-1.5, "-1.5"),
    ],
)
def test_js_to_string_formats_numbers(value: float, expected: str):
    assert js_to_string(value) == expected
