from __future__ import annotations

import pytest

import tagged_css
from tagged_css.config import ConfigError, SyntaxConfig
from tagged_css.syntax import Syntax, create_syntax


def test_create_syntax_normalizes_tag_names():
    syntax = create_syntax(SyntaxConfig(tag_names=["css", "styled*"]))

    assert isinstance(syntax, Syntax)
    assert syntax.config.tag_names == ("css", "styled*")


def test_create_syntax_rejects_invalid_config():
    with pytest.raises(ConfigError, match="wildcard"):
        create_syntax(SyntaxConfig(tag_names=("st*yled",)))


def test_syntax_parse_and_to_string(css_config: SyntaxConfig):
    source = "export const styles = [css`\n  :host { display: block; }\n`];\n"
    syntax = create_syntax(css_config)
    document = syntax.parse(source, filename="element.ts")

    assert document.first.first.selector == ":host"
    assert syntax.to_string(document) == source


def test_syntax_passes_filename_to_warnings(css_config: SyntaxConfig):
    warnings: list[str] = []
    syntax = create_syntax(css_config, warn=warnings.append)
    syntax.parse("css`a {`", filename="element.ts")

    assert warnings[0].startswith("[tagged-css] element.ts: Skipping template (Line 1)")


def test_syntax_stringify_reports_nodes_to_builder(css_config: SyntaxConfig):
    syntax = create_syntax(css_config)
    document = syntax.parse("css`a { b: ${c}; }`")
    chunks: list[tuple[str, str | None]] = []

    syntax.stringify(
        document, lambda text, node=None, kind=None: chunks.append((text, node and node.type))
    )

    assert ("b: ${c};", "decl") in chunks
    assert "".join(text for text, _ in chunks) == "css`a { b: ${c}; }`"


def test_public_api_exports():
    assert tagged_css.create_syntax is create_syntax
    assert "parse_styles" in tagged_css.__all__
    assert tagged_css.__version__
