"""Stylesheet tree with source positions and raw formatting.

The node types mirror the postcss tree: a `Document` holds one `Root` per
stylesheet, containers hold `Rule`, `AtRule`, `Declaration` and `Comment`
children, and every node keeps the formatting it was parsed with in `raws` so
that an unmodified tree stringifies back to its exact input.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any


@dataclass
class Position:
    """Location of a character.

    Attributes:
        line: One-based line number.
        column: One-based column number.
        offset: Zero-based character offset.
    """

    line: int
    column: int
    offset: int


@dataclass
class Source:
    """Source information attached to a node.

    Attributes:
        start: Position of the node's first character.
        end: Position of the node's last character, when the node has one.
        input: Text the node was parsed from.
    """

    start: Position | None = None
    end: Position | None = None
    input: str | None = None


class Node:
    """Base class of every stylesheet node."""

    type = "node"

    def __init__(self, **props: Any):
        self.parent: Container | None = None
        self.raws: dict[str, Any] = {}
        self.source: Source | None = None
        for name, value in props.items():
            setattr(self, name, value)

    def root(self) -> Node:
        """Return the top-most ancestor below the document, or the node itself."""
        node = self
        while node.parent is not None and node.parent.type != "document":
            node = node.parent
        return node

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)

    def to_string(self, stringifier: Callable[..., None] | None = None) -> str:
        """Serialize the node, using `stringifier` when given.

        Args:
            stringifier: Callable receiving the node and a builder function.

        Returns:
            str: Concatenation of every chunk passed to the builder.
        """
        if stringifier is None:
            from .css_stringifier import stringify as stringifier

        chunks: list[str] = []
        stringifier(self, lambda text, node=None, kind=None: chunks.append(text))
        return "".join(chunks)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type}>"


class Container(Node):
    """Node holding child nodes."""

    def __init__(self, **props: Any):
        nodes = props.pop("nodes", [])
        super().__init__(**props)
        self.nodes: list[Node] | None = None
        if nodes is not None:
            self.nodes = []
            self.append(*nodes)

    @property
    def first(self) -> Node | None:
        return self.nodes[0] if self.nodes else None

    @property
    def last(self) -> Node | None:
        return self.nodes[-1] if self.nodes else None

    def append(self, *nodes: Node) -> Container:
        if self.nodes is None:
            self.nodes = []
        for node in nodes:
            if node.parent is not None and node.parent is not self:
                node.parent.remove_child(node)
            node.parent = self
            self.nodes.append(node)
        return self

    def remove_child(self, node: Node) -> None:
        if self.nodes is not None:
            self.nodes = [child for child in self.nodes if child is not node]
        node.parent = None

    def walk(self) -> Iterator[Node]:
        """Yield every descendant in document order."""
        for child in list(self.nodes or ()):
            yield child
            if isinstance(child, Container):
                yield from child.walk()

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self.nodes or ()))

    def __len__(self) -> int:
        return len(self.nodes or ())


class Document(Container):
    """Container of the stylesheets found in one host source."""

    type = "document"


class Root(Container):
    """A stylesheet.

    Attributes:
        state: Extraction bookkeeping when the stylesheet comes from a tagged
            template, otherwise None.
    """

    type = "root"

    def __init__(self, **props: Any):
        self.state: Any = None
        super().__init__(**props)


class Rule(Container):
    type = "rule"

    def __init__(self, **props: Any):
        self.selector = ""
        super().__init__(**props)


class AtRule(Container):
    """At-rule such as ``@media``; `nodes` is None when it has no block."""

    type = "atrule"

    def __init__(self, **props: Any):
        self.name = ""
        self.params = ""
        props.setdefault("nodes", None)
        super().__init__(**props)


class Declaration(Node):
    type = "decl"

    def __init__(self, **props: Any):
        self.prop = ""
        self.value = ""
        self.important = False
        super().__init__(**props)


class Comment(Node):
    type = "comment"

    def __init__(self, **props: Any):
        self.text = ""
        super().__init__(**props)
