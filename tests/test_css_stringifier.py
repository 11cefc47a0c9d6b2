from __future__ import annotations

from tagged_css.css_nodes import AtRule, Comment, Declaration, Root, Rule
from tagged_css.css_parser import parse_stylesheet


def test_new_nodes_use_default_formatting():
    root = Root()
    rule = Rule(selector="a")
    rule.append(Declaration(prop="color", value="red"))
    root.append(rule, AtRule(name="import", params="'x.css'"))

    assert str(root) == "a {\n    color: red\n}\n@import 'x.css'"


def test_new_nodes_follow_surrounding_formatting():
    root = parse_stylesheet("a {\n  color: red;\n}\n")
    rule = root.first
    rule.append(Declaration(prop="margin", value="0"))
    root.append(Rule(selector="b", nodes=[Declaration(prop="top", value="0")]))

    assert str(root) == "a {\n  color: red;\n  margin: 0;\n}\nb {\n  top: 0;\n}\n"


def test_new_comment_and_important_declaration():
    root = parse_stylesheet("a { b: c }")
    root.first.append(Comment(text="note"))
    root.first.append(Declaration(prop="d", value="e", important=True))

    assert str(root) == "a { b: c; /* note */ d: e !important }"


def test_empty_at_rule_block():
    root = Root(nodes=[AtRule(name="font-face", nodes=[])])
    assert str(root) == "@font-face {}"
