"""Re-indentation of raw formatting for output inside the host source.

The stylesheet parser sees template text without its host indentation, so
multi-line raws lack the stripped prefix on every line after their first.
Corrected copies are stored under namespaced raw keys (see `raw_key`) and
picked up by the stringifier, leaving the plain raws usable by tools that
print the stylesheet on its own.
"""

from __future__ import annotations

from .constants import TEXT_PROPERTIES
from .css_nodes import Node
from .models import ExtractedStylesheet, RawKind, parsed_values_key, raw_key

LAST_LINE = -1

# Raws that shadow a node property; stored with the value they were captured for
_VALUE_KINDS = frozenset({RawKind.SELECTOR, RawKind.VALUE, RawKind.PARAMS, RawKind.TEXT})


def compute_corrected_string(
    value: str,
    line: int,
    indentation_map: dict[int, int],
    stamp: bool = False,
    ends_template: bool = False,
    indentation_text: dict[int, str] | None = None,
) -> str:
    """Restore stripped indentation inside a raw value.

    Args:
        value: Raw text as parsed from the normalized template.
        line: Normalized line on which `value` starts.
        indentation_map: Stripped character count per normalized line.
        stamp: Whether the first segment starts a line and gets its
            indentation back too.
        ends_template: Whether the last segment lies on the template's last
            line.
        indentation_text: Stripped text per normalized line. Lines missing
            from it are re-indented with spaces.

    Returns:
        str: Value with every line re-indented.

    Examples:
        compute_corrected_string("\\n  ", 1, {1: 4, 2: 4})  # "\\n      "
    """
    indentation_text = indentation_text or {}

    def indent(key: int) -> str:
        if key in indentation_text:
            return indentation_text[key]
        return " " * indentation_map.get(key, 0)

    segments = value.split("\n")
    last = len(segments) - 1
    if stamp:
        key = LAST_LINE if ends_template and last == 0 else line
        segments[0] = indent(key) + segments[0]
    for index in range(1, len(segments)):
        key = LAST_LINE if ends_template and index == last else line + index
        segments[index] = indent(key) + segments[index]
    return "\n".join(segments)


def _store(
    node: Node,
    syntax_id: str,
    kind: RawKind,
    value: str | None,
    line: int,
    stylesheet: ExtractedStylesheet,
    stamp: bool = False,
    ends_template: bool = False,
) -> None:
    if value is None or ("\n" not in value and not stamp):
        return
    corrected = compute_corrected_string(
        value,
        line,
        stylesheet.indentation_map,
        stamp=stamp,
        ends_template=ends_template,
        indentation_text=stylesheet.indentation_text,
    )
    if kind in _VALUE_KINDS:
        corrected = {"value": getattr(node, kind.value), "raw": corrected}
    node.raws[raw_key(syntax_id, kind)] = corrected


def _raw_or_value(node: Node, prop: str) -> str:
    value = getattr(node, prop)
    raw = node.raws.get(prop)
    if isinstance(raw, dict) and raw.get("value") == value:
        return raw["raw"]
    return value


def _capture_root(node: Node, syntax_id: str, stylesheet: ExtractedStylesheet) -> None:
    after = node.raws.get("after")
    if after is None:
        return
    last = node.last
    if last is not None and last.source is not None and last.source.end is not None:
        _store(node, syntax_id, RawKind.AFTER, after, last.source.end.line, stylesheet, ends_template=True)
    elif last is None:
        _store(node, syntax_id, RawKind.AFTER, after, 1, stylesheet, stamp=True, ends_template=True)


def capture_raws(node: Node, stylesheet: ExtractedStylesheet, syntax_id: str) -> None:
    """Store re-indented copies of a node's raws.

    Must run while the node still has normalized-text positions. Each raw is
    re-indented from the line it starts on; a raw is only stored when it spans
    several lines or starts the template text. The node's text properties are
    recorded too, so the stringifier can tell parsed text from edits.

    Args:
        node: Node whose raws are captured.
        stylesheet: Extraction state of the node's template.
        syntax_id: Identifier namespacing the stored raws.
    """
    if node.type == "root":
        _capture_root(node, syntax_id, stylesheet)
        return
    if node.source is None or node.source.start is None:
        return

    start = node.source.start.line
    raws = node.raws
    raws[parsed_values_key(syntax_id)] = {
        prop: getattr(node, prop)
        for prop in TEXT_PROPERTIES
        if isinstance(getattr(node, prop, None), str)
    }

    def store(kind: RawKind, value: str | None, line: int, stamp: bool = False) -> None:
        _store(node, syntax_id, kind, value, line, stylesheet, stamp=stamp)

    before = raws.get("before")
    if before is not None:
        parent = node.parent
        first_in_template = parent is not None and parent.type == "root" and parent.first is node
        store(RawKind.BEFORE, before, start - before.count("\n"), stamp=first_in_template)

    after = raws.get("after")
    if after is not None and node.source.end is not None:
        store(RawKind.AFTER, after, node.source.end.line - after.count("\n"))

    if node.type == "decl":
        prop = node.prop
        between = raws.get("between") or ""
        store(RawKind.BETWEEN, raws.get("between"), start + prop.count("\n"))
        store(RawKind.VALUE, _raw_or_value(node, "value"), start + (prop + between).count("\n"))
    elif node.type == "rule":
        selector = _raw_or_value(node, "selector")
        store(RawKind.SELECTOR, selector, start)
        store(RawKind.BETWEEN, raws.get("between"), start + selector.count("\n"))
    elif node.type == "atrule":
        name = "@" + node.name + (raws.get("afterName") or "")
        params = _raw_or_value(node, "params")
        store(RawKind.PARAMS, params, start + name.count("\n"))
        store(RawKind.BETWEEN, raws.get("between"), start + (name + params).count("\n"))
    elif node.type == "comment":
        left = raws.get("left") or ""
        text = _raw_or_value(node, "text")
        store(RawKind.LEFT, raws.get("left"), start)
        store(RawKind.TEXT, text, start + left.count("\n"))
        store(RawKind.RIGHT, raws.get("right"), start + (left + text).count("\n"))
