"""Mapping of stylesheet positions back to host source coordinates.

Nodes parsed from a template's normalized text carry positions relative to
that text. Three edits separate it from the host source: the padding lines
dropped before the first content line, the indentation stripped from every
line, and the interpolations replaced by placeholders of a different length.
This module undoes all three.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import reduce

from .css_nodes import Node, Position
from .host import TemplateElement
from .models import ExtractedStylesheet
from .raws import capture_raws


@dataclass(frozen=True)
class Drift:
    """Accumulated difference between normalized and host coordinates.

    Attributes:
        line_offset: Lines to add to a normalized line number.
        column_offset: Columns to add to positions on `current_line`.
        offset: Host offset of the position being corrected.
        current_line: Host line where `column_offset` applies.
    """

    line_offset: int
    column_offset: int
    offset: int
    current_line: int


@dataclass(frozen=True)
class ExpressionStep:
    """One interpolation, seen from the fragments around it."""

    previous: TemplateElement
    following: TemplateElement
    placeholder_length: int

    @property
    def size(self) -> int:
        """Characters the host expression spans beyond its placeholder."""
        return self.following.start - self.previous.end - self.placeholder_length


def advance_drift(drift: Drift, step: ExpressionStep) -> Drift:
    """Account for one interpolation preceding the corrected position.

    Interpolations starting at or after the position leave the drift
    unchanged. Afterwards the column offset applies to the host line where
    the interpolation ends; it keeps the offset already in effect when the
    interpolation starts on the current line.

    Args:
        drift: Drift accumulated so far.
        step: Interpolation to account for.

    Returns:
        Drift: Updated drift.
    """
    if step.previous.end >= drift.offset:
        return drift

    start, end = step.previous.loc.end, step.following.loc.start
    carried = drift.column_offset if start.line == drift.current_line else 0
    return Drift(
        line_offset=drift.line_offset + end.line - start.line,
        column_offset=end.column - start.column - step.placeholder_length + carried,
        offset=drift.offset + step.size,
        current_line=end.line,
    )


def expression_steps(stylesheet: ExtractedStylesheet) -> list[ExpressionStep]:
    quasis = stylesheet.region.quasis
    return [
        ExpressionStep(
            previous=quasis[replacement.index],
            following=quasis[replacement.index + 1],
            placeholder_length=len(replacement.replacement),
        )
        for replacement in stylesheet.replacements
    ]


def correct_position(
    position: Position | None,
    stylesheet: ExtractedStylesheet,
    steps: list[ExpressionStep] | None = None,
) -> Position | None:
    """Translate a normalized-text position into host coordinates.

    Positions lacking a line or an offset are returned unchanged.

    Args:
        position: Position relative to the normalized template text.
        stylesheet: Extraction state of the template.
        steps: Precomputed interpolation steps, built when omitted.

    Returns:
        Position | None: Position in the host source, with a one-based column.

    Examples:
        # const a = css`.foo { color: ${x}; }`;
        correct_position(Position(1, 8, 7), stylesheet)  # Position(1, 22, 21)
    """
    if position is None or position.line is None or position.offset is None:
        return position

    literal = stylesheet.region.template.quasi
    prefix = stylesheet.prefix_offset
    indentation_map = stylesheet.indentation_map
    stripped = sum(indentation_map.get(line, 0) for line in range(1, position.line + 1))

    initial = Drift(
        line_offset=literal.loc.start.line - 1 + prefix.lines,
        column_offset=literal.loc.start.column + 1,
        offset=position.offset + literal.start + 1 + prefix.offset + stripped,
        current_line=literal.loc.start.line,
    )
    if steps is None:
        steps = expression_steps(stylesheet)
    drift = reduce(advance_drift, steps, initial)

    line = position.line + drift.line_offset
    column = position.column + indentation_map.get(position.line, 0)
    if line == drift.current_line:
        column += drift.column_offset
    return Position(line=line, column=column, offset=drift.offset)


def correct_node_location(
    node: Node, stylesheet: ExtractedStylesheet, steps: list[ExpressionStep] | None = None
) -> None:
    """Rewrite a node's start and end positions in host coordinates."""
    if node.source is None:
        return
    if steps is None:
        steps = expression_steps(stylesheet)
    node.source = replace(
        node.source,
        start=correct_position(node.source.start, stylesheet, steps),
        end=correct_position(node.source.end, stylesheet, steps),
    )


def correct_locations(root: Node, stylesheet: ExtractedStylesheet, syntax_id: str) -> None:
    """Move a parsed template stylesheet into host coordinates.

    The root is corrected first, then every descendant in document order.
    Raws of each node are captured while its positions are still relative to
    the normalized text.

    Args:
        root: Stylesheet parsed from the template's normalized text.
        stylesheet: Extraction state of the template.
        syntax_id: Identifier namespacing the corrected raws.
    """
    steps = expression_steps(stylesheet)
    capture_raws(root, stylesheet, syntax_id)
    correct_node_location(root, stylesheet, steps)
    for node in root.walk():
        capture_raws(node, stylesheet, syntax_id)
        correct_node_location(node, stylesheet, steps)
