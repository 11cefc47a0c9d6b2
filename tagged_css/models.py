"""Data models for tagged-css."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from .constants import PARSED_VALUES_RAW

if TYPE_CHECKING:
    from .host import HostExpression, TaggedTemplate, TemplateElement


class PlaceholderPosition(Enum):
    """Syntactic category of an interpolation point inside CSS text.

    Attributes:
        DEFAULT: Property value or any unclassified position.
        STATEMENT: Right after an opening brace or a semicolon.
        BLOCK: Right after a closing brace.
        COMMENT: Inside an open comment.
        SELECTOR: A block position followed by an opening brace.
        PROPERTY: A statement position followed by a colon.
    """

    DEFAULT = auto()
    STATEMENT = auto()
    BLOCK = auto()
    COMMENT = auto()
    SELECTOR = auto()
    PROPERTY = auto()


class ClassifierState(Enum):
    """States of the backward scanner that classifies placeholder positions.

    Attributes:
        NORMAL: Scanning regular CSS text.
        IN_COMMENT: Inside a comment whose closing delimiter was already seen.
    """

    NORMAL = auto()
    IN_COMMENT = auto()


class RawKind(Enum):
    """Raw formatting attachments that are re-indented for host output.

    Attributes:
        BEFORE: Whitespace preceding a node.
        AFTER: Whitespace between the last child and the closing brace.
        BETWEEN: Text between a node's name and its value or block.
        LEFT: Whitespace after a comment's opening delimiter.
        RIGHT: Whitespace before a comment's closing delimiter.
        SELECTOR: Rule selector text.
        VALUE: Declaration value text.
        PARAMS: At-rule parameter text.
        TEXT: Comment text.
    """

    BEFORE = "before"
    AFTER = "after"
    BETWEEN = "between"
    LEFT = "left"
    RIGHT = "right"
    SELECTOR = "selector"
    VALUE = "value"
    PARAMS = "params"
    TEXT = "text"


def raw_key(syntax_id: str, kind: RawKind) -> str:
    """Build the namespaced raw key holding a corrected raw value.

    Examples:
        raw_key("lit", RawKind.BEFORE)  # "lit:before"
    """
    return f"{syntax_id}:{kind.value}"


def parsed_values_key(syntax_id: str) -> str:
    """Build the namespaced raw key holding a node's text as it was parsed.

    Examples:
        parsed_values_key("lit")  # "lit:parsed"
    """
    return f"{syntax_id}:{PARSED_VALUES_RAW}"


@dataclass(frozen=True)
class Replacement:
    """Outcome of substituting one interpolation.

    Attributes:
        index: Zero-based position of the interpolation inside its template.
        source: Expression source exactly as written, including ``${`` and ``}``.
        replacement: Placeholder text handed to the stylesheet parser.
    """

    index: int
    source: str
    replacement: str


@dataclass(frozen=True)
class PrefixOffset:
    """Lines and characters dropped before the first content line.

    Attributes:
        lines: Number of whole padding lines removed.
        offset: Number of characters removed, line breaks included.
    """

    lines: int = 0
    offset: int = 0


@dataclass
class ReplacedSource:
    """Template text with every interpolation replaced by a placeholder.

    Attributes:
        text: Substituted template text.
        replacements: Replacements in interpolation order.
    """

    text: str
    replacements: list[Replacement]


@dataclass
class NormalizedSource:
    """Substituted text with host indentation stripped.

    Attributes:
        text: Text handed to the stylesheet parser.
        indentation_map: Stripped character count per one-based line, with the
            last line also recorded under ``-1``.
        prefix_offset: Padding removed before the first content line.
        indentation_text: Stripped text per line, keyed like `indentation_map`.
    """

    text: str
    indentation_map: dict[int, int]
    prefix_offset: PrefixOffset = field(default_factory=PrefixOffset)
    indentation_text: dict[int, str] = field(default_factory=dict)


@dataclass
class Region:
    """A tagged template selected for extraction.

    Attributes:
        template: Host node for the tagged template.
        nested: Whether the template sits inside another selected template.
    """

    template: TaggedTemplate
    nested: bool = False

    @property
    def tag(self) -> str:
        return self.template.tag

    @property
    def quasis(self) -> list[TemplateElement]:
        return self.template.quasi.quasis

    @property
    def expressions(self) -> list[HostExpression]:
        return self.template.quasi.expressions

    @property
    def start(self) -> int:
        """Offset of the opening backtick."""
        return self.template.quasi.start

    @property
    def end(self) -> int:
        """Offset just past the closing backtick."""
        return self.template.quasi.end


@dataclass
class ExtractedStylesheet:
    """Bookkeeping attached to the stylesheet root parsed for a region.

    Attributes:
        region: Region the stylesheet was parsed from.
        replacements: Placeholder substitutions, in interpolation order.
        normalized_source: Text handed to the stylesheet parser.
        prefix_offset: Padding removed before the first content line.
        indentation_map: Stripped character count per line.
        nested: Whether the region sits inside another selected region.
        indentation_text: Stripped text per line, tabs included.
    """

    region: Region
    replacements: list[Replacement]
    normalized_source: str
    prefix_offset: PrefixOffset
    indentation_map: dict[int, int]
    nested: bool = False
    indentation_text: dict[int, str] = field(default_factory=dict)
