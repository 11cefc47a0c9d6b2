"""Substitution of interpolations inside a template's CSS."""

from __future__ import annotations

from .models import Region, ReplacedSource, Replacement
from .placeholders import PlaceholderFunc


def _substitute(
    region: Region, source: str, placeholder: PlaceholderFunc, forced: set[int]
) -> ReplacedSource:
    quasis = region.quasis
    expressions = region.expressions
    parts: list[str] = []
    replacements: list[Replacement] = []

    for index, quasi in enumerate(quasis):
        parts.append(quasi.raw)
        if index >= len(expressions) or index + 1 >= len(quasis):
            continue
        following = quasis[index + 1]
        expression = None if index in forced else expressions[index]
        text = placeholder(index, expression, "".join(parts), following.raw)
        replacements.append(
            Replacement(index=index, source=source[quasi.end : following.start], replacement=text)
        )
        parts.append(text)

    return ReplacedSource(text="".join(parts), replacements=replacements)


def compute_replaced_source(
    region: Region, source: str, placeholder: PlaceholderFunc
) -> ReplacedSource:
    """Replace every interpolation of a region with a placeholder.

    The recorded expression source is the exact host text between the two
    surrounding fragments, ``${`` and ``}`` included. Constant values that do
    not occur exactly once in the result cannot be mapped back to their
    expression, so those interpolations fall back to a placeholder.

    Args:
        region: Region whose template is substituted.
        source: Host source text.
        placeholder: Function choosing the text of each substitution.

    Returns:
        ReplacedSource: Substituted text and the replacements, in order.

    Examples:
        replaced = compute_replaced_source(region, source, create_placeholder_func("lit"))
        replaced.replacements[0].source  # "${expr}"
    """
    forced: set[int] = set()
    while True:
        replaced = _substitute(region, source, placeholder, forced)
        ambiguous = {
            replacement.index
            for replacement in replaced.replacements
            if replacement.index not in forced
            and replaced.text.count(replacement.replacement) != 1
        }
        if not ambiguous:
            return replaced
        forced |= ambiguous
