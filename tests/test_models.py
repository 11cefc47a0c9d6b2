from conftest import region_of

from tagged_css.css_nodes import AtRule, Comment, Declaration, Document, Root, Rule
from tagged_css.models import (
    ClassifierState,
    NormalizedSource,
    PlaceholderPosition,
    PrefixOffset,
    RawKind,
    raw_key,
)


def test_placeholder_position_members():
    assert [position.name for position in PlaceholderPosition] == [
        "DEFAULT",
        "STATEMENT",
        "BLOCK",
        "COMMENT",
        "SELECTOR",
        "PROPERTY",
    ]


def test_classifier_state_members():
    assert list(ClassifierState) == [ClassifierState.NORMAL, ClassifierState.IN_COMMENT]


def test_raw_key_namespaces_kind():
    assert raw_key("lit", RawKind.BEFORE) == "lit:before"
    assert raw_key("foo", RawKind.SELECTOR) == "foo:selector"


def test_normalized_source_defaults():
    normalized = NormalizedSource(text="a {}", indentation_map={})

    assert normalized.prefix_offset == PrefixOffset(lines=0, offset=0)


def test_region_properties():
    source = "const a = css`a { b: ${c}; }`;"
    region = region_of(source)

    assert region.tag == "css"
    assert region.start == 13
    assert region.end == len(source) - 1
    assert [quasi.raw for quasi in region.quasis] == ["a { b: ", "; }"]
    assert [expression.source for expression in region.expressions] == ["c"]
    assert region.nested is False


def test_append_reparents_nodes():
    first = Rule(selector="a")
    second = Rule(selector="b")
    decl = Declaration(prop="color", value="red")
    first.append(decl)

    second.append(decl)

    assert decl.parent is second
    assert first.nodes == []
    assert second.first is decl


def test_remove_detaches_node():
    decl = Declaration(prop="color", value="red")
    rule = Rule(selector="a", nodes=[decl])

    decl.remove()

    assert decl.parent is None
    assert len(rule) == 0


def test_walk_yields_descendants_in_order():
    inner = Rule(selector="b", nodes=[Declaration(prop="top", value="0")])
    media = AtRule(name="media", params="print", nodes=[inner])
    root = Root(nodes=[Comment(text="note"), media])

    assert [node.type for node in root.walk()] == ["comment", "atrule", "rule", "decl"]


def test_at_rule_without_block_has_no_nodes():
    at_rule = AtRule(name="import", params="'x.css'")

    assert at_rule.nodes is None
    assert at_rule.first is None
    assert list(at_rule.walk()) == []


def test_root_stops_below_document():
    decl = Declaration(prop="color", value="red")
    root = Root(nodes=[Rule(selector="a", nodes=[decl])])
    document = Document(nodes=[root])

    assert decl.root() is root
    assert root.root() is root
    assert document.first is root
    assert root.state is None
