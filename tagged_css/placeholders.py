"""Placeholder selection for interpolated expressions.

Each ``${ }`` interpolation is replaced by a token that keeps the CSS around
it valid. The lexical context before the interpolation decides the shape of
the token: a bare identifier in value position, a comment where a whole
statement or block is expected, and a custom property name where a
declaration property is expected.
"""

from __future__ import annotations

from collections.abc import Callable

from .constants import PLACEHOLDER_PREFIX
from .evaluate import evaluate_constant
from .host import HostExpression
from .models import ClassifierState, PlaceholderPosition

PlaceholderFunc = Callable[[int, HostExpression | None, str | None, str | None], str]
Evaluator = Callable[[HostExpression], str | None]


def _classify_prefix(prefix: str) -> PlaceholderPosition:
    state = ClassifierState.NORMAL
    for index in reversed(range(len(prefix))):
        char = prefix[index]
        following = prefix[index + 1 : index + 2]

        if state is ClassifierState.IN_COMMENT:
            if char == "/" and following == "*":
                state = ClassifierState.NORMAL
            continue

        if char == "/" and following == "*":
            return PlaceholderPosition.COMMENT
        if char == "*" and following == "/":
            state = ClassifierState.IN_COMMENT
        elif char in (";", "{"):
            return PlaceholderPosition.STATEMENT
        elif char == ":":
            return PlaceholderPosition.DEFAULT
        elif char == "}":
            return PlaceholderPosition.BLOCK

    return PlaceholderPosition.DEFAULT


def compute_possible_position(
    prefix: str | None, suffix: str | None = None
) -> PlaceholderPosition:
    """Classify the CSS context of an interpolation.

    Scans `prefix` backward, skipping closed comments, until a character
    decides the context. The result is refined with the first non-blank
    character of `suffix`.

    Args:
        prefix: CSS text preceding the interpolation.
        suffix: CSS text following the interpolation, if known.

    Returns:
        PlaceholderPosition: Category of the insertion point.

    Examples:
        compute_possible_position(".foo { color:")  # DEFAULT
        compute_possible_position(".foo { }", " {")  # SELECTOR
        compute_possible_position(".foo { ", ": hotpink; }")  # PROPERTY
    """
    if not prefix:
        return PlaceholderPosition.DEFAULT

    position = _classify_prefix(prefix)
    following = (suffix or "").lstrip()[:1]
    if position is PlaceholderPosition.BLOCK and following == "{":
        return PlaceholderPosition.SELECTOR
    if position is PlaceholderPosition.STATEMENT and following == ":":
        return PlaceholderPosition.PROPERTY
    return position


def placeholder_token(syntax_id: str, index: int) -> str:
    """Return the bare placeholder token for an interpolation index."""
    return f"{PLACEHOLDER_PREFIX}_{syntax_id}_{index}"


def create_placeholder_func(syntax_id: str, evaluator: Evaluator | None = None) -> PlaceholderFunc:
    """Build the default placeholder function for a syntax identifier.

    Args:
        syntax_id: Identifier embedded in every placeholder.
        evaluator: Constant evaluator tried before falling back to a
            placeholder; defaults to `evaluate_constant`.

    Returns:
        PlaceholderFunc: Callable taking the interpolation index, expression,
            preceding text and following fragment.

    Examples:
        placeholder = create_placeholder_func("foo")
        placeholder(808)  # "POSTCSS_foo_808"
        placeholder(808, None, "color: hotpink;")  # "/* POSTCSS_foo_808 */"
        placeholder(808, None, ".foo { ", ": hotpink; }")  # "--POSTCSS_foo_808"
    """
    evaluate = evaluator or evaluate_constant

    def placeholder(
        index: int,
        expression: HostExpression | None = None,
        prefix: str | None = None,
        suffix: str | None = None,
    ) -> str:
        if expression is not None:
            value = evaluate(expression)
            if value is not None:
                return value

        token = placeholder_token(syntax_id, index)
        position = compute_possible_position(prefix, suffix)
        if position in (PlaceholderPosition.STATEMENT, PlaceholderPosition.BLOCK):
            return f"/* {token} */"
        if position is PlaceholderPosition.PROPERTY:
            return f"--{token}"
        return token

    return placeholder
