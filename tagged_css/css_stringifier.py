"""Serialization of stylesheet trees."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from .css_nodes import Node

Builder = Callable[..., None]

DEFAULT_RAW: dict[str, Any] = {
    "after": "\n",
    "beforeClose": "\n",
    "beforeComment": "\n",
    "beforeDecl": "\n",
    "beforeOpen": " ",
    "beforeRule": "\n",
    "colon": ": ",
    "commentLeft": " ",
    "commentRight": " ",
    "emptyBody": "",
    "indent": "    ",
    "semicolon": False,
}

# Formatting kinds that can be inferred from other nodes of the stylesheet
_DETECTORS = {
    "beforeClose": "before_close",
    "beforeComment": "before_comment",
    "beforeDecl": "before_decl",
    "beforeOpen": "before_open",
    "beforeRule": "before_rule",
    "colon": "colon",
    "emptyBody": "empty_body",
    "indent": "indent",
    "semicolon": "semicolon",
}
_LAST_LINE_TEXT = re.compile(r"[^\n]+$")
_NON_SPACE = re.compile(r"\S")
_NOT_COLON_OR_SPACE = re.compile(r"[^\s:]")


class Stringifier:
    """Write a stylesheet tree back to text through a builder callback.

    Every chunk is passed to the builder together with the node it belongs
    to, so subclasses can change how individual parts are written by
    overriding one method.

    Args:
        builder: Callable receiving ``(text, node=None, kind=None)``.
    """

    def __init__(self, builder: Builder):
        self.builder = builder
        self._detected: dict[int, dict[str, Any]] = {}

    def stringify(self, node: Node, semicolon: bool = False) -> None:
        method = getattr(self, node.type, None)
        if method is None:
            raise ValueError(f"Unknown node type {node.type!r}")
        method(node, semicolon)

    def document(self, node: Node, semicolon: bool = False) -> None:
        self.body(node)

    def root(self, node: Node, semicolon: bool = False) -> None:
        self.body(node)
        if node.raws.get("after"):
            self.builder(node.raws["after"])

    def comment(self, node: Node, semicolon: bool = False) -> None:
        left = self.raw(node, "left", "commentLeft")
        right = self.raw(node, "right", "commentRight")
        self.builder(f"/*{left}{self.raw_value(node, 'text')}{right}*/", node)

    def decl(self, node: Node, semicolon: bool = False) -> None:
        between = self.raw(node, "between", "colon")
        text = self.raw_value(node, "prop") + between + self.raw_value(node, "value")
        if node.important:
            text += node.raws.get("important") or " !important"
        if semicolon:
            text += ";"
        self.builder(text, node)

    def rule(self, node: Node, semicolon: bool = False) -> None:
        self.block(node, self.raw_value(node, "selector"))
        if node.raws.get("ownSemicolon"):
            self.builder(node.raws["ownSemicolon"], node, "end")

    def atrule(self, node: Node, semicolon: bool = False) -> None:
        name = "@" + self.raw_value(node, "name")
        params = self.raw_value(node, "params") if node.params else ""

        if node.raws.get("afterName") is not None:
            name += node.raws["afterName"]
        elif params:
            name += " "

        if node.nodes is not None:
            self.block(node, name + params)
        else:
            end = (node.raws.get("between") or "") + (";" if semicolon else "")
            self.builder(name + params + end, node)

    def block(self, node: Node, start: str) -> None:
        between = self.raw(node, "between", "beforeOpen")
        self.builder(start + between + "{", node, "start")

        if node.nodes:
            self.body(node)
            after = self.raw(node, "after")
        else:
            after = self.raw(node, "after", "emptyBody")

        if after:
            self.builder(after)
        self.builder("}", node, "end")

    def body(self, node: Node) -> None:
        nodes = node.nodes or []
        last = len(nodes) - 1
        while last > 0 and nodes[last].type == "comment":
            last -= 1

        semicolon = self.raw(node, "semicolon")
        for index, child in enumerate(nodes):
            before = self.raw(child, "before")
            if before:
                self.builder(before)
            self.stringify(child, last != index or bool(semicolon))

    def raw(self, node: Node, own: str | None, detect: str | None = None) -> Any:
        """Return a raw formatting value, detecting it when the node has none.

        Missing raws are inferred from the other nodes of the same stylesheet,
        so nodes added after parsing follow the surrounding formatting. The
        defaults in `DEFAULT_RAW` apply when nothing can be inferred.

        Args:
            node: Node whose raws are read.
            own: Key looked up in the node's raws.
            detect: Formatting kind to infer when the node has no such raw.
        """
        detect = detect or own
        if own and node.raws.get(own) is not None:
            return node.raws[own]

        parent = node.parent
        if detect == "before":
            if parent is None or parent.type == "document":
                return ""
            if parent.type == "root" and parent.first is node:
                return ""
        if parent is None:
            return DEFAULT_RAW.get(detect, "")

        if detect in ("before", "after"):
            return self._before_after(node, detect)

        root = node.root()
        cache = self._detected.setdefault(id(root), {})
        if detect not in cache:
            method = getattr(self, f"_detect_{_DETECTORS.get(detect, '')}", None)
            value = method(root, node) if method is not None else None
            cache[detect] = DEFAULT_RAW.get(detect, "") if value is None else value
        return cache[detect]

    def _before_after(self, node: Node, detect: str) -> str:
        if node.type == "decl":
            value = self.raw(node, None, "beforeDecl")
        elif node.type == "comment":
            value = self.raw(node, None, "beforeComment")
        elif detect == "before":
            value = self.raw(node, None, "beforeRule")
        else:
            value = self.raw(node, None, "beforeClose")

        if "\n" in value:
            depth = 0
            ancestor = node.parent
            while ancestor is not None and ancestor.type != "root":
                depth += 1
                ancestor = ancestor.parent
            value += self.raw(node, None, "indent") * depth
        return value

    @staticmethod
    def _leading_whitespace(value: str) -> str:
        if "\n" in value:
            value = _LAST_LINE_TEXT.sub("", value)
        return _NON_SPACE.sub("", value)

    def _detect_before_decl(self, root: Node, node: Node) -> str:
        for other in root.walk():
            if other.type == "decl" and other.raws.get("before") is not None:
                return self._leading_whitespace(other.raws["before"])
        return self.raw(node, None, "beforeRule")

    def _detect_before_comment(self, root: Node, node: Node) -> str:
        for other in root.walk():
            if other.type == "comment" and other.raws.get("before") is not None:
                return self._leading_whitespace(other.raws["before"])
        return self.raw(node, None, "beforeDecl")

    def _detect_before_rule(self, root: Node, node: Node) -> str | None:
        for other in root.walk():
            if getattr(other, "nodes", None) is None or other.raws.get("before") is None:
                continue
            if other.parent is not root or root.first is not other:
                return self._leading_whitespace(other.raws["before"])
        return None

    def _detect_before_close(self, root: Node, node: Node) -> str | None:
        for other in root.walk():
            if getattr(other, "nodes", None) and other.raws.get("after") is not None:
                return self._leading_whitespace(other.raws["after"])
        return None

    def _detect_before_open(self, root: Node, node: Node) -> str | None:
        for other in root.walk():
            if other.type != "decl" and other.raws.get("between") is not None:
                return _NON_SPACE.sub("", other.raws["between"])
        return None

    def _detect_colon(self, root: Node, node: Node) -> str | None:
        for other in root.walk():
            if other.type == "decl" and other.raws.get("between") is not None:
                return _NOT_COLON_OR_SPACE.sub("", other.raws["between"])
        return None

    def _detect_empty_body(self, root: Node, node: Node) -> str | None:
        for other in root.walk():
            if getattr(other, "nodes", None) == [] and other.raws.get("after") is not None:
                return other.raws["after"]
        return None

    def _detect_indent(self, root: Node, node: Node) -> str | None:
        for other in root.walk():
            parent = other.parent
            if parent is root or parent is None or parent.parent is not root:
                continue
            if other.raws.get("before") is not None:
                return _NON_SPACE.sub("", other.raws["before"].split("\n")[-1])
        return None

    def _detect_semicolon(self, root: Node, node: Node) -> bool | None:
        for other in root.walk():
            nodes = getattr(other, "nodes", None)
            if nodes and nodes[-1].type == "decl" and other.raws.get("semicolon") is not None:
                return other.raws["semicolon"]
        return None

    def raw_value(self, node: Node, prop: str) -> str:
        value = getattr(node, prop)
        raw = node.raws.get(prop)
        if isinstance(raw, dict) and raw.get("value") == value:
            return raw["raw"]
        return value


def stringify(node: Node, builder: Builder) -> None:
    """Serialize `node` with the plain stylesheet rules."""
    Stringifier(builder).stringify(node)
