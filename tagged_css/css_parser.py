"""Stylesheet parser built on the tinycss2 tokenizer.

tinycss2 provides the component values; this module groups them into rules,
at-rules, declarations and comments, slicing every raw from the original text
so the resulting tree reproduces its input exactly.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field

import tinycss2
from tinycss2 import ast

from .css_nodes import AtRule, Comment, Container, Declaration, Position, Root, Rule, Source
from .exceptions import StylesheetSyntaxError

# Line breaks as tinycss2 counts them before tokenizing
_TOKENIZER_NEWLINE_PATTERN = re.compile(r"\r\n|[\r\n\f]")
_COMMENT_TEXT_PATTERN = re.compile(r"^(\s*)([\s\S]*\S)(\s*)$")
_CLOSING_CHARS = {"{} block": "}", "[] block": "]", "() block": ")", "function": ")"}


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether a character is escaped by preceding backslashes.

    Args:
        text: Text containing the character.
        pos: Zero-based index of the character to inspect.

    Returns:
        bool: True when an odd number of backslashes precedes `pos`.

    Examples:
        is_escaped("a\\\\}", 2)  # True
        is_escaped("a\\\\\\\\}", 3)  # False
    """
    backslash_count = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslash_count += 1
        i -= 1
    return backslash_count % 2 == 1


@dataclass
class _Span:
    """A component value with its offsets in the original text.

    For blocks and functions, `inner_start` and `inner_end` delimit the
    content between the brackets and `children` holds its spans.
    """

    token: ast.Node
    start: int
    end: int
    inner_start: int = 0
    inner_end: int = 0
    children: list[_Span] = field(default_factory=list)

    @property
    def type(self) -> str:
        return self.token.type

    def is_literal(self, value: str) -> bool:
        return self.token.type == "literal" and self.token.value == value

    @property
    def is_blank(self) -> bool:
        return self.token.type == "whitespace"

    @property
    def is_trivia(self) -> bool:
        return self.token.type in ("whitespace", "comment")


def _strip_trailing_whitespace(spans: list[_Span]) -> list[_Span]:
    end = len(spans)
    while end > 0 and spans[end - 1].is_blank:
        end -= 1
    return spans[:end]


class _StylesheetParser:
    def __init__(self, css: str, source_name: str | None = None):
        self.css = css
        self.source_name = source_name
        self.tokenizer_line_starts = [0] + [
            match.end() for match in _TOKENIZER_NEWLINE_PATTERN.finditer(css)
        ]
        self.line_starts = [0] + [index + 1 for index, char in enumerate(css) if char == "\n"]

    def position(self, offset: int) -> Position:
        line = bisect_right(self.line_starts, offset)
        return Position(line=line, column=offset - self.line_starts[line - 1] + 1, offset=offset)

    def error(self, reason: str, offset: int) -> StylesheetSyntaxError:
        position = self.position(min(offset, len(self.css)))
        return StylesheetSyntaxError(reason, position.line, position.column, self.source_name)

    def offset_of(self, token: ast.Node) -> int:
        return self.tokenizer_line_starts[token.source_line - 1] + token.source_column - 1

    def spans(self, tokens: list[ast.Node], limit: int) -> list[_Span]:
        starts = [self.offset_of(token) for token in tokens]
        spans: list[_Span] = []
        for index, token in enumerate(tokens):
            start = starts[index]
            end = starts[index + 1] if index + 1 < len(tokens) else limit

            if token.type == "error":
                raise self.error(token.message, start)
            if token.type == "comment":
                close = self.css.find("*/", start + 2)
                if close == -1 or close + 2 > end:
                    raise self.error("Unclosed comment", start)
                end = close + 2

            span = _Span(token=token, start=start, end=end)
            closing = _CLOSING_CHARS.get(token.type)
            if closing is not None:
                self._open_block(span, closing)
            spans.append(span)
        return spans

    def _open_block(self, span: _Span, closing: str) -> None:
        css = self.css
        if span.type == "function":
            span.inner_start = css.find("(", span.start) + 1
            content = span.token.arguments
        else:
            span.inner_start = span.start + 1
            content = span.token.content

        last = span.end - 1
        if last < span.inner_start or css[last] != closing or is_escaped(css, last):
            reason = "Unclosed block" if closing == "}" else "Unclosed bracket"
            raise self.error(reason, span.start)

        span.inner_end = last
        span.children = self.spans(content, last)

    def parse(self) -> Root:
        tokens = tinycss2.parse_component_value_list(self.css, skip_comments=False)
        spans = self.spans(tokens, len(self.css))
        root = Root()
        root.source = Source(start=Position(1, 1, 0), input=self.css)
        self.parse_body(root, spans, 0, len(self.css))
        return root

    def parse_body(self, parent: Container, spans: list[_Span], start: int, limit: int) -> None:
        css = self.css
        gap = start
        semicolon = False
        index = 0

        while index < len(spans):
            span = spans[index]
            if span.is_blank:
                index += 1
                continue

            if span.is_literal(";"):
                previous = parent.last
                if previous is not None and previous.type == "rule" and "ownSemicolon" not in previous.raws:
                    previous.raws["ownSemicolon"] = css[gap : span.end]
                    gap = span.end
                index += 1
                continue

            if span.type == "comment":
                node, end = self.comment(span), span.end
                index += 1
            else:
                stop, terminator = self._statement_end(spans, index)
                statement = spans[index:stop]
                if span.type == "at-keyword":
                    node, end = self.at_rule(statement, terminator)
                elif terminator is not None and terminator.type == "{} block":
                    node, end = self.rule(statement, terminator)
                else:
                    node, end = self.declaration(statement, terminator)
                semicolon = terminator is not None and terminator.is_literal(";")
                index = stop + (1 if terminator is not None else 0)

            node.raws["before"] = css[gap : node.source.start.offset]
            parent.append(node)
            gap = end

        parent.raws["after"] = css[gap:limit]
        if parent.nodes:
            parent.raws["semicolon"] = semicolon

    def _statement_end(self, spans: list[_Span], index: int) -> tuple[int, _Span | None]:
        custom_property = self._is_custom_property(spans, index)
        for position in range(index, len(spans)):
            span = spans[position]
            if span.is_literal(";"):
                return position, span
            if span.type == "{} block" and not custom_property:
                return position, span
        return len(spans), None

    def _is_custom_property(self, spans: list[_Span], index: int) -> bool:
        token = spans[index].token
        if token.type != "ident" or not token.value.startswith("--"):
            return False
        for span in spans[index + 1 :]:
            if not span.is_trivia:
                return span.is_literal(":")
        return False

    def comment(self, span: _Span) -> Comment:
        inner = self.css[span.start + 2 : span.end - 2]
        node = Comment()
        match = _COMMENT_TEXT_PATTERN.match(inner)
        if match:
            node.text = match.group(2)
            node.raws["left"] = match.group(1)
            node.raws["right"] = match.group(3)
        else:
            node.raws["left"] = inner
            node.raws["right"] = ""
        node.source = Source(start=self.position(span.start), end=self.position(span.end - 1))
        return node

    def rule(self, statement: list[_Span], block: _Span) -> tuple[Rule, int]:
        css = self.css
        start = statement[0].start if statement else block.start
        selector = _strip_trailing_whitespace(statement)
        selector_end = selector[-1].end if selector else start

        node = Rule(selector=css[start:selector_end])
        node.raws["between"] = css[selector_end : block.start]
        self.parse_body(node, block.children, block.inner_start, block.inner_end)
        node.source = Source(start=self.position(start), end=self.position(block.inner_end))
        return node, block.end

    def at_rule(self, statement: list[_Span], terminator: _Span | None) -> tuple[AtRule, int]:
        css = self.css
        keyword = statement[0]
        rest = statement[1:]
        lead = 0
        while lead < len(rest) and rest[lead].is_blank:
            lead += 1
        params = _strip_trailing_whitespace(rest[lead:])

        node = AtRule(name=keyword.token.value)
        if params:
            params_start, params_end = params[0].start, params[-1].end
            node.params = css[params_start:params_end]
            node.raws["afterName"] = css[keyword.end : params_start]
            between = css[params_end : terminator.start] if terminator is not None else ""
        else:
            params_end = keyword.end
            node.raws["afterName"] = css[keyword.end : terminator.start] if terminator is not None else ""
            between = ""

        start = self.position(keyword.start)
        if terminator is None:
            node.source = Source(start=start, end=self.position(params_end - 1))
            return node, params_end

        node.raws["between"] = between
        if terminator.type == "{} block":
            node.nodes = []
            self.parse_body(node, terminator.children, terminator.inner_start, terminator.inner_end)
            node.source = Source(start=start, end=self.position(terminator.inner_end))
        else:
            node.source = Source(start=start, end=self.position(terminator.start))
        return node, terminator.end

    def declaration(self, statement: list[_Span], terminator: _Span | None) -> tuple[Declaration, int]:
        css = self.css
        first = statement[0]
        colon = next((i for i, span in enumerate(statement) if span.is_literal(":")), None)
        if colon is None:
            raise self.error("Unknown word", first.start)
        prop = _strip_trailing_whitespace(statement[:colon])
        if not prop:
            raise self.error("Unknown word", first.start)

        prop_end = prop[-1].end
        rest = statement[colon + 1 :]
        lead = 0
        while lead < len(rest) and rest[lead].is_trivia:
            lead += 1
        if lead == len(rest):
            # No value words: only leading whitespace belongs to `between`
            lead = 0
            while lead < len(rest) and rest[lead].is_blank:
                lead += 1
        if lead < len(rest):
            value_start = rest[lead].start
        else:
            value_start = rest[-1].end if rest else statement[colon].end

        significant = _strip_trailing_whitespace(rest[lead:])
        important = self._important_index(significant)
        node = Declaration(prop=css[first.start : prop_end])
        node.raws["between"] = css[prop_end:value_start]

        if important is not None:
            value = _strip_trailing_whitespace(significant[:important])
            value_end = value[-1].end if value else value_start
            content_end = significant[-1].end
            node.important = True
        else:
            value_end = significant[-1].end if significant else value_start
            content_end = value_end
        node.value = css[value_start:value_end]

        tail = css[content_end : terminator.start] if terminator is not None else ""
        if node.important:
            node.raws["important"] = css[value_end:content_end] + tail
        elif tail:
            node.raws["value"] = {"value": node.value, "raw": node.value + tail}

        start = self.position(first.start)
        if terminator is not None:
            node.source = Source(start=start, end=self.position(terminator.start))
            return node, terminator.end
        node.source = Source(start=start, end=self.position(max(content_end - 1, first.start)))
        return node, content_end

    def _important_index(self, spans: list[_Span]) -> int | None:
        words = [i for i, span in enumerate(spans) if not span.is_blank]
        if len(words) < 2:
            return None
        bang, keyword = spans[words[-2]], spans[words[-1]]
        if bang.is_literal("!") and keyword.type == "ident" and keyword.token.lower_value == "important":
            return words[-2]
        return None


def parse_stylesheet(css: str, source_name: str | None = None) -> Root:
    """Parse CSS text into a stylesheet tree.

    Every node carries its source positions and raw formatting, so
    ``str(parse_stylesheet(css)) == css`` for any text that parses.

    Args:
        css: Stylesheet text.
        source_name: Optional name used in error messages.

    Returns:
        Root: Parsed stylesheet.

    Raises:
        StylesheetSyntaxError: If the text contains unclosed blocks, comments
            or strings, unmatched closing brackets, or statements that are
            neither rules nor declarations.

    Examples:
        root = parse_stylesheet(".foo { color: hotpink; }")
        root.first.selector  # ".foo"
    """
    return _StylesheetParser(css, source_name).parse()
