"""Compile-time evaluation of interpolated expressions.

Expressions whose value is known without running the host program can be
inlined into the CSS text instead of being replaced by a placeholder. The
evaluator walks the expression's syntax tree and understands literals,
``const`` bindings declared once in the module, string concatenation,
arithmetic, comparisons, logical operators and conditionals. Anything else
makes the whole expression inconclusive.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from decimal import Decimal

from tree_sitter import Node

from .host import HostExpression, decode_escapes, node_text, split_template

MAX_BINDING_DEPTH = 16

BINARY_OPERATORS = frozenset(
    {"??", "||", "&&", "==", "!=", "===", "!==", "<", ">", "<=", ">=", "+", "-", "*", "/", "%", "**"}
)
LITERAL_VALUES = {
    "true": True,
    "false": False,
    "null": None,
    "NaN": math.nan,
    "Infinity": math.inf,
}

# StringToNumber grammar
JS_WHITESPACE = (
    " \t\n\v\f\r\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)
DECIMAL_STRING = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
NON_DECIMAL_STRING = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")
RADIXES = {"x": 16, "o": 8, "b": 2}


class _Sentinel:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


UNKNOWN = _Sentinel("UNKNOWN")
UNDEFINED = _Sentinel("UNDEFINED")


def _number_to_string(number: float) -> str:
    """Format a number the way JavaScript's ``Number.prototype.toString`` does."""
    if math.isnan(number):
        return "NaN"
    if number == 0:
        return "0"
    if number < 0:
        return "-" + _number_to_string(-number)
    if math.isinf(number):
        return "Infinity"

    # repr() yields the shortest digits that round-trip, as JavaScript requires
    _, digit_tuple, exponent = Decimal(repr(number)).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digit_tuple)
    count = len(digits)
    point = exponent + count

    if count <= point <= 21:
        return digits + "0" * (point - count)
    if 0 < point <= 21:
        return f"{digits[:point]}.{digits[point:]}"
    if -6 < point <= 0:
        return "0." + "0" * -point + digits
    sign = "+" if point - 1 >= 0 else "-"
    mantissa = digits if count == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{mantissa}e{sign}{abs(point - 1)}"


def js_to_string(value: object) -> str:
    """Convert an evaluated value to its JavaScript string form.

    Examples:
        js_to_string(4.0)  # "4"
        js_to_string(1e-7)  # "1e-7"
        js_to_string(None)  # "null"
    """
    if isinstance(value, str):
        return value
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, (int, float)):
        try:
            return _number_to_string(float(value))
        except OverflowError:
            return "Infinity" if value > 0 else "-Infinity"
    raise TypeError(f"Unsupported value: {value!r}")


def _string_to_number(text: str) -> float:
    text = text.strip(JS_WHITESPACE)
    if not text:
        return 0.0
    if NON_DECIMAL_STRING.fullmatch(text):
        try:
            return float(int(text[2:], RADIXES[text[1].lower()]))
        except OverflowError:
            return math.inf
    if DECIMAL_STRING.fullmatch(text):
        return float(text)
    return math.nan


def _to_number(value: object) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if value is None:
        return 0.0
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    return _string_to_number(str(value))


def _truthy(value: object) -> bool:
    if value is None or value is UNDEFINED:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _loose_equal(left: object, right: object) -> bool:
    nullish = (None, UNDEFINED)
    if left in nullish or right in nullish:
        return left in nullish and right in nullish
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return _to_number(left) == _to_number(right)


def _strict_equal(left: object, right: object) -> bool:
    if isinstance(left, str) != isinstance(right, str):
        return False
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _apply_binary(operator: str, left: object, right: object) -> object:
    if left is UNKNOWN or right is UNKNOWN:
        return UNKNOWN
    if operator == "+":
        if isinstance(left, str) or isinstance(right, str):
            return js_to_string(left) + js_to_string(right)
        return _to_number(left) + _to_number(right)
    if operator == "-":
        return _to_number(left) - _to_number(right)
    if operator == "*":
        return _to_number(left) * _to_number(right)
    if operator == "/":
        return _divide(_to_number(left), _to_number(right))
    if operator == "%":
        left_number, right_number = _to_number(left), _to_number(right)
        if right_number == 0 or math.isinf(left_number):
            return math.nan
        return math.fmod(left_number, right_number)
    if operator == "**":
        try:
            return _to_number(left) ** _to_number(right)
        except (OverflowError, ZeroDivisionError):
            return math.inf
    if operator == "===":
        return _strict_equal(left, right)
    if operator == "!==":
        return not _strict_equal(left, right)
    if operator == "==":
        return _loose_equal(left, right)
    if operator == "!=":
        return not _loose_equal(left, right)
    if operator in ("<", ">", "<=", ">="):
        if isinstance(left, str) and isinstance(right, str):
            pair = (left, right)
        else:
            pair = (_to_number(left), _to_number(right))
        return {
            "<": pair[0] < pair[1],
            ">": pair[0] > pair[1],
            "<=": pair[0] <= pair[1],
            ">=": pair[0] >= pair[1],
        }[operator]
    if operator == "&&":
        return right if _truthy(left) else left
    if operator == "||":
        return left if _truthy(left) else right
    return right if left in (None, UNDEFINED) else left


def _parse_number(text: str) -> object:
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        return UNKNOWN
    if cleaned[:2].lower() in ("0x", "0o", "0b"):
        return _string_to_number(cleaned)
    return float(cleaned)


def _single_child(node: Node) -> Node | None:
    children = [child for child in node.named_children if child.type != "comment"]
    return children[0] if len(children) == 1 else None


class _Evaluator:
    def __init__(self, bindings: Mapping[str, Node], depth: int = 0):
        self.bindings = bindings
        self.depth = depth

    def evaluate(self, node: Node | None) -> object:
        if node is None:
            return UNKNOWN
        kind = node.type
        if kind == "string":
            return decode_escapes(node_text(node)[1:-1])
        if kind == "number":
            return _parse_number(node_text(node))
        if kind in ("true", "false", "null"):
            return LITERAL_VALUES[kind]
        if kind == "undefined":
            return UNDEFINED
        if kind == "identifier":
            return self.identifier(node_text(node))
        if kind == "template_string":
            return self.template(node)
        if kind == "parenthesized_expression":
            return self.evaluate(_single_child(node))
        if kind == "unary_expression":
            return self.unary(node)
        if kind == "binary_expression":
            return self.binary(node)
        if kind == "ternary_expression":
            return self.conditional(node)
        return UNKNOWN

    def conditional(self, node: Node, prefer_branches: bool = False) -> object:
        test = self.evaluate(node.child_by_field_name("condition"))
        consequent = self.evaluate(node.child_by_field_name("consequence"))
        alternate = self.evaluate(node.child_by_field_name("alternative"))

        if test is UNKNOWN:
            if prefer_branches:
                for branch in (consequent, alternate):
                    if branch is not UNKNOWN and branch is not UNDEFINED:
                        return branch
            return UNKNOWN
        return consequent if _truthy(test) else alternate

    def binary(self, node: Node) -> object:
        operator = node.child_by_field_name("operator")
        if operator is None or operator.type not in BINARY_OPERATORS:
            return UNKNOWN
        left = self.evaluate(node.child_by_field_name("left"))
        right = self.evaluate(node.child_by_field_name("right"))
        return _apply_binary(operator.type, left, right)

    def unary(self, node: Node) -> object:
        operator = node.child_by_field_name("operator")
        operand = self.evaluate(node.child_by_field_name("argument"))
        kind = operator.type if operator is not None else None
        if kind == "void":
            return UNDEFINED
        if operand is UNKNOWN:
            return UNKNOWN
        if kind == "-":
            return -_to_number(operand)
        if kind == "+":
            return _to_number(operand)
        if kind == "!":
            return not _truthy(operand)
        return UNKNOWN

    def identifier(self, name: str) -> object:
        if name in LITERAL_VALUES:
            return LITERAL_VALUES[name]
        if name == "undefined":
            return UNDEFINED
        initializer = self.bindings.get(name)
        if initializer is None or self.depth >= MAX_BINDING_DEPTH:
            return UNKNOWN
        return _Evaluator(self.bindings, self.depth + 1).evaluate(initializer)

    def template(self, node: Node) -> object:
        text = node.text
        fragments, substitutions = split_template(node)

        def cooked(start: int, end: int) -> str:
            raw = text[start - node.start_byte : end - node.start_byte]
            return decode_escapes(raw.decode("utf-8", "surrogatepass"))

        parts = [cooked(*fragments[0])]
        for substitution, fragment in zip(substitutions, fragments[1:]):
            value = self.evaluate(_single_child(substitution))
            if value is UNKNOWN:
                return UNKNOWN
            parts.append(js_to_string(value))
            parts.append(cooked(*fragment))
        return "".join(parts)


def evaluate_constant(expression: HostExpression) -> str | None:
    """Evaluate an interpolated expression to a constant string.

    A conditional at the top of the expression resolves to whichever branch
    is constant, trying the consequent first, even when the test itself is
    not known.

    Args:
        expression: Interpolated expression, with its syntax tree node and
            the module's constant bindings attached.

    Returns:
        str | None: The string form of the value, or None when the value is
            not known at compile time or is ``undefined``.

    Examples:
        evaluate_constant(expr("'2px' + ' solid'"))  # "2px solid"
        evaluate_constant(expr("props.color"))  # None
    """
    node = expression.node
    if node is None:
        return None
    evaluator = _Evaluator(expression.bindings)
    if node.type == "ternary_expression":
        value = evaluator.conditional(node, prefer_branches=True)
    else:
        value = evaluator.evaluate(node)
    if value is UNKNOWN or value is UNDEFINED:
        return None
    return js_to_string(value)
