"""Parse and stringify entry points bundled for one configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import SyntaxConfig, normalize_config, validate_config
from .css_nodes import Document, Node
from .css_stringifier import Builder
from .parser import WarnFunc, parse_styles
from .stringify import stringify as stringify_node


@dataclass
class Syntax:
    """Custom syntax for stylesheets embedded in tagged templates.

    Attributes:
        config: Validated configuration shared by `parse` and `stringify`.
        warn: Callback receiving non-fatal parse warnings.

    Examples:
        syntax = create_syntax(SyntaxConfig(tag_names=("css",)))
        document = syntax.parse(source, filename="button.ts")
        syntax.to_string(document) == source  # True
    """

    config: SyntaxConfig = field(default_factory=SyntaxConfig)
    warn: WarnFunc | None = None

    def parse(self, source: str, filename: str | None = None) -> Document:
        return parse_styles(source, self.config, filename=filename, warn=self.warn)

    def stringify(self, node: Node, builder: Builder) -> None:
        stringify_node(node, builder, self.config)

    def to_string(self, node: Node) -> str:
        return node.to_string(self.stringify)


def create_syntax(config: SyntaxConfig | None = None, warn: WarnFunc | None = None) -> Syntax:
    """Build a `Syntax` for a configuration.

    Args:
        config: Configuration to bundle; defaults to a new `SyntaxConfig`.
        warn: Callback receiving non-fatal parse warnings.

    Returns:
        Syntax: Parse and stringify entry points.

    Raises:
        ConfigError: If the configuration fails validation.
    """
    config = normalize_config(config or SyntaxConfig())
    validate_config(config)
    return Syntax(config=config, warn=warn)
