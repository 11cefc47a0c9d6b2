"""JavaScript and TypeScript host sources, read through tree-sitter.

The host source is parsed with a tree-sitter grammar, and every tagged
template literal is read off the syntax tree: its tag, its literal fragments,
its interpolated expressions and the comments leading its enclosing
statement.

Positions use one-based lines and zero-based columns, counted in characters.
tree-sitter reports byte offsets into the UTF-8 encoded source; they are
converted to character offsets before leaving this module.
"""

from __future__ import annotations

import bisect
import functools
import itertools
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import PurePath

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from .constants import DEFAULT_HOST_LANGUAGE, HOST_LANGUAGES
from .exceptions import HostSyntaxError

ENCODING = "utf-8"
ENCODING_ERRORS = "surrogatepass"

ESCAPE_PATTERN = re.compile(
    r"\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2})|(\r\n|[\n\r\u2028\u2029])|(.))",
    re.DOTALL,
)
SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}

# Nodes whose children are statements; comments leading a statement are its siblings.
STATEMENT_CONTAINERS = frozenset(
    {"program", "statement_block", "class_body", "switch_case", "switch_default"}
)


@dataclass(frozen=True)
class HostPosition:
    """Line and column of a character in the host source.

    Attributes:
        line: One-based line number.
        column: Zero-based column, in characters.
    """

    line: int
    column: int


@dataclass(frozen=True)
class HostLocation:
    """Start and end positions of a host node (end is exclusive)."""

    start: HostPosition
    end: HostPosition


@dataclass(frozen=True)
class HostComment:
    """Comment found in the host source.

    Attributes:
        kind: ``"line"`` for ``//`` comments, ``"block"`` for ``/* */`` comments.
        value: Comment text without its delimiters.
        start: Offset of the first delimiter character.
        end: Offset just past the comment.
    """

    kind: str
    value: str
    start: int
    end: int


@dataclass
class HostExpression:
    """Expression interpolated into a template literal.

    Attributes:
        source: Expression text, without the surrounding ``${`` and ``}``.
        start: Offset of the first expression character.
        end: Offset just past the last expression character.
        loc: Line/column span of the expression.
        node: Syntax tree node of the expression.
        bindings: Initializer nodes of the module's constants, by name.
    """

    source: str
    start: int
    end: int
    loc: HostLocation
    node: Node | None = field(default=None, repr=False, compare=False)
    bindings: Mapping[str, Node] = field(default_factory=dict, repr=False, compare=False)


@dataclass
class TemplateElement:
    """Literal fragment of a template, between delimiters.

    Attributes:
        raw: Fragment text exactly as written.
        start: Offset of the first fragment character.
        end: Offset just past the fragment.
        loc: Line/column span of the fragment.
    """

    raw: str
    start: int
    end: int
    loc: HostLocation


@dataclass
class TemplateLiteral:
    """Template literal with its fragments and interpolated expressions.

    Attributes:
        start: Offset of the opening backtick.
        end: Offset just past the closing backtick.
        loc: Line/column span of the whole literal.
        quasis: Literal fragments; always one more than `expressions`.
        expressions: Interpolated expressions in source order.
    """

    start: int
    end: int
    loc: HostLocation
    quasis: list[TemplateElement]
    expressions: list[HostExpression]


@dataclass
class TaggedTemplate:
    """Template literal preceded by a tag expression.

    Attributes:
        tag: Source text of the tag, such as ``css`` or ``styled.div``.
        start: Offset of the first tag character.
        quasi: The template literal itself.
        leading_comments: Comments directly preceding the enclosing statement.
    """

    tag: str
    start: int
    quasi: TemplateLiteral
    leading_comments: list[HostComment] = field(default_factory=list)

    @property
    def end(self) -> int:
        return self.quasi.end


@dataclass
class HostModule:
    """Result of scanning a host source.

    Attributes:
        source: Scanned text.
        templates: Tagged templates, ordered by their opening backtick.
        comments: Every comment, in source order.
        bindings: Initializer node of each ``const`` declared exactly once.
    """

    source: str
    templates: list[TaggedTemplate]
    comments: list[HostComment]
    bindings: dict[str, Node]


def decode_escapes(text: str) -> str:
    """Decode JavaScript escape sequences in string or template text.

    Args:
        text: Literal body without quotes or backticks.

    Returns:
        str: Cooked string value.

    Examples:
        decode_escapes(r"a\\nb")  # "a\\nb" with a real line break
        decode_escapes(r"\\u{1F600}")  # "\\U0001F600"
    """

    def _decode(match: re.Match[str]) -> str:
        braced, four, two, continuation, single = match.groups()
        if braced is not None:
            return chr(int(braced, 16))
        if four is not None:
            return chr(int(four, 16))
        if two is not None:
            return chr(int(two, 16))
        if continuation is not None:
            return ""
        return SIMPLE_ESCAPES.get(single, single)

    return ESCAPE_PATTERN.sub(_decode, text)


def host_language(filename: str | None) -> str:
    """Pick the tree-sitter grammar for a host file name.

    Names without a known extension get the TSX grammar, which accepts
    TypeScript and JSX alike.

    Examples:
        host_language("button.ts")  # "typescript"
        host_language(None)  # "tsx"
    """
    if not filename:
        return DEFAULT_HOST_LANGUAGE
    return HOST_LANGUAGES.get(PurePath(filename).suffix.lower(), DEFAULT_HOST_LANGUAGE)


@functools.cache
def _parser(language: str) -> Parser:
    return get_parser(language)


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield `node` and its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    """Return the source text of a node."""
    return node.text.decode(ENCODING, ENCODING_ERRORS)


def substitution_expressions(substitution: Node) -> list[Node]:
    """Return the expression nodes of a ``template_substitution``, comments left out."""
    return [child for child in substitution.named_children if child.type != "comment"]


def split_template(template: Node) -> tuple[list[tuple[int, int]], list[Node]]:
    """Split a ``template_string`` node at its substitutions.

    Returns:
        tuple[list[tuple[int, int]], list[Node]]: Byte ranges of the literal
            fragments, always one more than the substitutions, and the
            ``template_substitution`` nodes in source order.
    """
    substitutions = [child for child in template.children if child.type == "template_substitution"]
    fragments = []
    start = template.start_byte + 1
    for substitution in substitutions:
        fragments.append((start, substitution.start_byte))
        start = substitution.end_byte
    fragments.append((start, template.end_byte - 1))
    return fragments, substitutions


def _first_error(root: Node) -> Node | None:
    for node in iter_nodes(root):
        if node.is_error or node.is_missing:
            return node
    return None


class _TreeReader:
    def __init__(self, source: str, encoded: bytes):
        self.source = source
        self.line_starts = [0] + [match.end() for match in re.finditer("\n", source)]
        self.byte_starts: list[int] | None = None
        if len(encoded) != len(source):
            self.byte_starts = list(
                itertools.accumulate(
                    (len(char.encode(ENCODING, ENCODING_ERRORS)) for char in source), initial=0
                )
            )
        self.templates: list[TaggedTemplate] = []
        self.comments: list[HostComment] = []
        self.declarations: dict[str, list[Node]] = {}

    def offset(self, byte: int) -> int:
        if self.byte_starts is None:
            return byte
        return bisect.bisect_left(self.byte_starts, byte)

    def position(self, offset: int) -> HostPosition:
        line_index = bisect.bisect_right(self.line_starts, offset) - 1
        return HostPosition(line_index + 1, offset - self.line_starts[line_index])

    def location(self, start: int, end: int) -> HostLocation:
        return HostLocation(self.position(start), self.position(end))

    def error(self, reason: str, node: Node) -> HostSyntaxError:
        position = self.position(self.offset(node.start_byte))
        return HostSyntaxError(reason, position.line, position.column)

    def syntax_error(self, node: Node) -> HostSyntaxError:
        if node.is_missing:
            return self.error(f"Missing {node.type!r}", node)
        return self.error("Unexpected syntax", node)

    def read(self, root: Node) -> None:
        for node in iter_nodes(root):
            if node.type == "comment":
                self.comments.append(self._comment(node))
            elif node.type == "call_expression":
                arguments = node.child_by_field_name("arguments")
                if arguments is not None and arguments.type == "template_string":
                    self.templates.append(self._tagged_template(node, arguments))
            elif node.type == "lexical_declaration" and node.children[0].type == "const":
                self._declare(node)
        self.templates.sort(key=lambda template: template.quasi.start)

    def bindings(self) -> dict[str, Node]:
        return {name: values[0] for name, values in self.declarations.items() if len(values) == 1}

    def _text(self, node: Node) -> str:
        return self.source[self.offset(node.start_byte) : self.offset(node.end_byte)]

    def _comment(self, node: Node) -> HostComment:
        text = self._text(node)
        start, end = self.offset(node.start_byte), self.offset(node.end_byte)
        if text.startswith("//"):
            return HostComment("line", text[2:], start, end)
        return HostComment("block", text[2:-2], start, end)

    def _declare(self, node: Node) -> None:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name is None or value is None or name.type != "identifier":
                continue
            self.declarations.setdefault(self._text(name), []).append(value)

    def _tagged_template(self, call: Node, template: Node) -> TaggedTemplate:
        fragments, substitutions = split_template(template)
        quasis = [self._element(self.offset(start), self.offset(end)) for start, end in fragments]
        expressions = [self._expression(substitution) for substitution in substitutions]
        start, end = self.offset(template.start_byte), self.offset(template.end_byte)
        literal = TemplateLiteral(start, end, self.location(start, end), quasis, expressions)
        return TaggedTemplate(
            tag=self._text(call.child_by_field_name("function")),
            start=self.offset(call.start_byte),
            quasi=literal,
            leading_comments=self._leading_comments(call),
        )

    def _element(self, start: int, end: int) -> TemplateElement:
        return TemplateElement(self.source[start:end], start, end, self.location(start, end))

    def _expression(self, substitution: Node) -> HostExpression:
        nodes = substitution_expressions(substitution)
        if not nodes:
            raise self.error("Empty template substitution", substitution)
        start, end = self.offset(nodes[0].start_byte), self.offset(nodes[-1].end_byte)
        return HostExpression(
            self.source[start:end],
            start,
            end,
            self.location(start, end),
            node=nodes[0] if len(nodes) == 1 else None,
        )

    def _leading_comments(self, node: Node) -> list[HostComment]:
        statement = node
        while statement.parent is not None and statement.parent.type not in STATEMENT_CONTAINERS:
            statement = statement.parent
        comments = []
        sibling = statement.prev_sibling
        while sibling is not None and sibling.type == "comment":
            comments.append(self._comment(sibling))
            sibling = sibling.prev_sibling
        comments.reverse()
        return comments


def scan_module(source: str, *, language: str = DEFAULT_HOST_LANGUAGE) -> HostModule:
    """Parse a JavaScript or TypeScript source and read its tagged templates.

    Args:
        source: Host source text.
        language: tree-sitter grammar: ``"javascript"``, ``"typescript"`` or
            ``"tsx"``.

    Returns:
        HostModule: Tagged templates, comments and constant bindings.

    Raises:
        HostSyntaxError: If the grammar reports an error or a missing token,
            or a substitution is empty.

    Examples:
        module = scan_module("const styles = css`.foo { color: red; }`;")
        module.templates[0].tag  # "css"
    """
    encoded = source.encode(ENCODING, ENCODING_ERRORS)
    root = _parser(language).parse(encoded).root_node
    reader = _TreeReader(source, encoded)
    if root.has_error:
        raise reader.syntax_error(_first_error(root) or root)

    reader.read(root)
    bindings = reader.bindings()
    for template in reader.templates:
        for expression in template.quasi.expressions:
            expression.bindings = bindings
    return HostModule(source, reader.templates, reader.comments, bindings)
