from __future__ import annotations

import pytest

from tagged_css.css_nodes import Position
from tagged_css.css_parser import is_escaped, parse_stylesheet
from tagged_css.exceptions import StylesheetSyntaxError


@pytest.mark.parametrize(
    "css",
    [
        ".foo { color: hotpink; }",
        "\n.a{b:c}\n\n/* x */\n@media (min-width: 1px) {\n  .b { c: d !important; }\n}\n",
        "@import url(foo.css);",
        "@font-face{font-family:x}",
        "a { --x: { b: c }; }",
        "a {};",
        "a { color: red ; }",
        "a { b: c; /* trailing */ }",
        "a{}",
        "color: red",
        "/**/",
        "a,\nb > c ~ d {\n\tmargin : 0 auto\n}\n",
        "a { b: c }\r\nd { e: f }",
    ],
)
def test_parse_stylesheet_round_trips(css: str):
    assert str(parse_stylesheet(css)) == css


def test_parse_stylesheet_builds_rule_and_declaration():
    root = parse_stylesheet(".foo {\n  color: red;\n}")

    rule = root.first
    assert rule.type == "rule"
    assert rule.selector == ".foo"
    assert rule.raws["between"] == " "
    assert rule.raws["after"] == "\n"
    assert rule.raws["semicolon"] is True

    decl = rule.first
    assert (decl.prop, decl.value) == ("color", "red")
    assert decl.raws["before"] == "\n  "
    assert decl.raws["between"] == ": "
    assert decl.parent is rule


def test_parse_stylesheet_records_positions():
    root = parse_stylesheet(".foo {\n  color: red;\n}")
    rule, decl = root.first, root.first.first

    assert rule.source.start == Position(1, 1, 0)
    assert rule.source.end == Position(3, 1, 21)
    assert decl.source.start == Position(2, 3, 9)
    assert decl.source.end == Position(2, 13, 19)
    assert root.source.input == ".foo {\n  color: red;\n}"


def test_parse_stylesheet_counts_crlf_as_two_characters():
    root = parse_stylesheet("a {}\r\nb {}")
    assert root.nodes[1].source.start == Position(2, 1, 6)


def test_parse_stylesheet_reads_at_rules():
    root = parse_stylesheet("@media screen { a { b: c } }\n@import 'x.css';")
    media, import_ = root.nodes

    assert (media.name, media.params) == ("media", "screen")
    assert media.raws["afterName"] == " "
    assert media.raws["between"] == " "
    assert len(media) == 1

    assert (import_.name, import_.params) == ("import", "'x.css'")
    assert import_.nodes is None


def test_parse_stylesheet_reads_important():
    decl = parse_stylesheet("a { color: red !important }").first.first

    assert decl.value == "red"
    assert decl.important is True
    assert decl.raws["important"] == " !important"


def test_parse_stylesheet_keeps_value_whitespace_in_raws():
    decl = parse_stylesheet("a { color: red ; }").first.first

    assert decl.value == "red"
    assert decl.raws["value"] == {"value": "red", "raw": "red "}


def test_parse_stylesheet_keeps_custom_property_blocks():
    decl = parse_stylesheet("a { --x: { b: c }; }").first.first
    assert (decl.prop, decl.value) == ("--x", "{ b: c }")


def test_parse_stylesheet_reads_comments():
    comment = parse_stylesheet("/*  hi there */").first

    assert comment.type == "comment"
    assert comment.text == "hi there"
    assert comment.raws["left"] == "  "
    assert comment.raws["right"] == " "


def test_parse_stylesheet_attaches_free_semicolon_to_rule():
    rule = parse_stylesheet("a {};").first
    assert rule.raws["ownSemicolon"] == ";"


@pytest.mark.parametrize(
    ("css", "message"),
    [
        ("/* open", "1:1: Unclosed comment"),
        (".a {}\n}", "2:1: Unmatched }"),
        ("a { color: red;", "1:3: Unclosed block"),
        ("a { color }", "1:5: Unknown word"),
        ('a { content: "x }', "1:14: EOF in string"),
        ("a { b: calc(1 + 2; }", "1:8: Unclosed bracket"),
    ],
)
def test_parse_stylesheet_rejects_invalid_css(css: str, message: str):
    with pytest.raises(StylesheetSyntaxError) as error:
        parse_stylesheet(css)
    assert str(error.value) == message


def test_parse_stylesheet_error_includes_source_name():
    with pytest.raises(StylesheetSyntaxError, match=r"^theme\.css:1:3: Unclosed block$"):
        parse_stylesheet("a {", "theme.css")


def test_is_escaped():
    assert is_escaped("a\\}", 2)
    assert not is_escaped("a\\\\}", 3)
    assert not is_escaped("}", 0)
