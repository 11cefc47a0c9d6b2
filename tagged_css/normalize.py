"""Removal of host indentation from embedded CSS."""

from __future__ import annotations

import re

from .constants import EMPTY_LINE_PATTERN
from .models import NormalizedSource, PrefixOffset, Region


def base_indentation(region: Region) -> int:
    """Return the column of the template's closing backtick.

    Content lines are assumed to be indented at least as deep as the line
    closing the template.
    """
    return region.template.quasi.loc.end.column - 1


def compute_normalized_source(text: str, region: Region) -> NormalizedSource:
    """Strip the template's base indentation from every line of `text`.

    A whitespace-only first line of multi-line text is dropped and recorded as
    the prefix offset. Lines indented less than the base are left untouched.

    Args:
        text: Substituted template text.
        region: Region the text belongs to.

    Returns:
        NormalizedSource: Normalized text, stripped character count per
            one-based line (the last line also under ``-1``), and prefix offset.

    Examples:
        # css`
        #     .foo { color: hotpink; }
        #   `
        normalized = compute_normalized_source(text, region)
        normalized.text  # "  .foo { color: hotpink; }\\n"
        normalized.indentation_map  # {1: 2, 2: 2, -1: 2}
    """
    base = base_indentation(region)
    lines = text.split("\n")
    prefix_offset = PrefixOffset()

    if len(lines) > 1 and EMPTY_LINE_PATTERN.match(lines[0]):
        prefix_offset = PrefixOffset(lines=1, offset=len(lines[0]) + 1)
        lines = lines[1:]

    indentation_map: dict[int, int] = {}
    indentation_text: dict[int, str] = {}
    indentation_pattern = re.compile(rf"^[ \t]{{{base}}}")
    last = len(lines) - 1
    for index, line in enumerate(lines):
        if base <= 0 or not indentation_pattern.match(line):
            continue
        lines[index] = line[base:]
        indentation_map[index + 1] = base
        indentation_text[index + 1] = line[:base]
        if index == last:
            indentation_map[-1] = base
            indentation_text[-1] = line[:base]

    return NormalizedSource(
        text="\n".join(lines),
        indentation_map=indentation_map,
        prefix_offset=prefix_offset,
        indentation_text=indentation_text,
    )
