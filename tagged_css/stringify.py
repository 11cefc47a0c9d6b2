"""Serialization of extracted stylesheets back into their host source.

A document stringifies to the host text it was parsed from: the code around
each template is emitted verbatim, template bodies are written with their
host indentation restored, and every placeholder is swapped back for the
interpolation it stands for.
"""

from __future__ import annotations

import functools
import re
from typing import TYPE_CHECKING

from .constants import CODE_AFTER_RAW, CODE_BEFORE_RAW, DEFAULT_SYNTAX_ID
from .css_nodes import Node
from .css_stringifier import Builder, Stringifier
from .models import ExtractedStylesheet, RawKind, parsed_values_key, raw_key

if TYPE_CHECKING:
    from .config import SyntaxConfig

_CORRECTED_RAWS = frozenset(kind.value for kind in RawKind)
# A backtick preceded by an even number of backslashes would close the template
_BARE_BACKTICK = re.compile(r"(?<!\\)((?:\\\\)*)`")


def escape_template_text(text: str) -> str:
    """Escape bare backticks in CSS text written into a template literal body.

    Template text reaches the stylesheet parser with its escapes intact, so
    backslashes are written back unchanged. Text edited after parsing goes
    through `escape_backslashes` first.

    Examples:
        escape_template_text("a`b")  # "a\\\\`b"
        escape_template_text("a\\\\`b")  # unchanged
    """
    return _BARE_BACKTICK.sub(r"\1\\`", text)


def escape_backslashes(text: str) -> str:
    """Double backslashes so a template literal keeps them as written.

    Examples:
        escape_backslashes("a\\\\b")  # "a\\\\\\\\b"
    """
    return text.replace("\\", "\\\\")


def restore_placeholders(text: str, stylesheet: ExtractedStylesheet) -> str:
    """Replace placeholder text with the interpolations it stands for.

    Longer placeholders are matched first, so ``POSTCSS_lit_10`` is never
    mistaken for ``POSTCSS_lit_1`` followed by ``0``. Each placeholder is
    restored once.

    Args:
        text: Escaped template text.
        stylesheet: Extraction state holding the replacements.

    Returns:
        str: Text with ``${ }`` interpolations back in place.
    """
    if not stylesheet.replacements:
        return text

    sources: dict[str, str] = {}
    for replacement in stylesheet.replacements:
        sources.setdefault(escape_template_text(replacement.replacement), replacement.source)
    pattern = re.compile("|".join(re.escape(key) for key in sorted(sources, key=len, reverse=True)))

    def _restore(match: re.Match[str]) -> str:
        return sources.pop(match.group(0), match.group(0))

    return pattern.sub(_restore, text)


class TemplateStringifierMixin:
    """Write extracted stylesheets in host form on top of a `Stringifier`.

    Mixed in before a `Stringifier` subclass, so the subclass keeps control
    of how nodes are written while template boundaries, re-indented raws,
    escaping and placeholders are handled here. Text edited after parsing
    gets its backslashes doubled, since the template literal would otherwise
    read them as escapes; text still as parsed came from the template source
    and is written back unchanged.

    Args:
        builder: Callable receiving ``(text, node=None, kind=None)``.
        syntax_id: Identifier namespacing the corrected raws.
    """

    def __init__(self, builder: Builder, syntax_id: str = DEFAULT_SYNTAX_ID):
        super().__init__(self._wrap(builder))
        self.syntax_id = syntax_id

    @staticmethod
    def _stylesheet(node: Node | None) -> ExtractedStylesheet | None:
        if node is None or node.type in ("root", "document"):
            return None
        return getattr(node.root(), "state", None)

    def _wrap(self, builder: Builder) -> Builder:
        def template_builder(text: str, node: Node | None = None, kind: str | None = None) -> None:
            stylesheet = self._stylesheet(node)
            if stylesheet is not None:
                text = restore_placeholders(escape_template_text(text), stylesheet)
            builder(text, node, kind)

        return template_builder

    def document(self, node: Node, semicolon: bool = False) -> None:
        if not node.nodes:
            source = node.source
            self.builder(source.input if source is not None and source.input else "", node)
            return
        self.body(node)

    def root(self, node: Node, semicolon: bool = False) -> None:
        stylesheet = getattr(node, "state", None)
        if stylesheet is None:
            super().root(node, semicolon)
            return
        if stylesheet.nested:
            return

        self.builder(node.raws.get(CODE_BEFORE_RAW, ""), node, "start")
        self.body(node)
        after = node.raws.get(raw_key(self.syntax_id, RawKind.AFTER))
        if after is None:
            after = node.raws.get("after")
        if after:
            self.builder(after)
        self.builder(node.raws.get(CODE_AFTER_RAW, ""), node, "end")

    def raw(self, node: Node, own: str | None, detect: str | None = None):
        if own in _CORRECTED_RAWS and self._stylesheet(node) is not None:
            key = raw_key(self.syntax_id, RawKind(own))
            if key in node.raws and own in node.raws:
                return node.raws[key]
        return super().raw(node, own, detect)

    def raw_value(self, node: Node, prop: str) -> str:
        if self._stylesheet(node) is None:
            return super().raw_value(node, prop)
        value = getattr(node, prop)
        if prop in _CORRECTED_RAWS:
            corrected = node.raws.get(raw_key(self.syntax_id, RawKind(prop)))
            # Edited properties no longer match the captured value
            if isinstance(corrected, dict) and corrected.get("value") == value:
                return corrected["raw"]

        text = super().raw_value(node, prop)
        parsed = node.raws.get(parsed_values_key(self.syntax_id)) or {}
        if prop in parsed and parsed[prop] == value:
            return text
        return escape_backslashes(text)


class TemplateStringifier(TemplateStringifierMixin, Stringifier):
    """Stringifier writing extracted stylesheets in host form."""


@functools.cache
def create_stringifier_class(base: type[Stringifier]) -> type[Stringifier]:
    """Build the template stringifier class on top of `base`.

    Examples:
        create_stringifier_class(Stringifier) is TemplateStringifier  # True
    """
    if issubclass(base, TemplateStringifierMixin):
        return base
    if base is Stringifier:
        return TemplateStringifier
    return type(f"Template{base.__name__}", (TemplateStringifierMixin, base), {})


def stringify(node: Node, builder: Builder, config: SyntaxConfig | None = None) -> None:
    """Serialize a document, or any node of it, in host form.

    Args:
        node: Node to serialize.
        builder: Callable receiving each chunk of output.
        config: Configuration the document was parsed with. Its `id` selects
            the corrected raws and its `stringifier` is the base class the
            template stringifier is built on.

    Examples:
        chunks = []
        stringify(document, lambda text, node=None, kind=None: chunks.append(text))
        "".join(chunks) == source  # True for an unmodified document
    """
    syntax_id = DEFAULT_SYNTAX_ID
    base = Stringifier
    if config is not None:
        syntax_id = config.id
        base = config.stringifier or Stringifier
    create_stringifier_class(base)(builder, syntax_id).stringify(node)
