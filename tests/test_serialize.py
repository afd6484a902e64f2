"""Tests for JSON-ready serialization."""

from conftest import EXAMPLE_SOURCE, node

from astlens.analyzer import analyze_source
from astlens.models import SyntaxNode
from astlens.parse import parse_source
from astlens.serialize import result_to_dict, tree_to_dict


def _dict_nodes(tree):
    """Every node dict in a serialized tree, without recursion."""
    stack = [tree]
    while stack:
        value = stack.pop()
        if isinstance(value, dict):
            if "type" in value:
                yield value
            stack.extend(value.values())
        elif isinstance(value, list):
            stack.extend(value)


class TestTreeToDict:
    def test_shape(self):
        leaf = node("identifier", span=(2, 2), text="x")
        tree = node("lexical_declaration", span=(2, 3), kind="const", name=leaf, tokens=["static"])
        leaf.parent = tree
        assert tree_to_dict(tree) == {
            "type": "lexical_declaration",
            "loc": {"start": 2, "end": 3},
            "kind": "const",
            "name": {"type": "identifier", "loc": {"start": 2, "end": 2}, "text": "x"},
            "tokens": ["static"],
        }

    def test_parent_is_skipped(self):
        tree = parse_source("f(a);\n")
        assert all("parent" not in d for d in _dict_nodes(tree_to_dict(tree)))

    def test_sequences_keep_order(self):
        tree = node("program", children=[node("a"), node("b"), node("c")])
        assert [c["type"] for c in tree_to_dict(tree)["children"]] == ["a", "b", "c"]

    def test_deeply_nested_expression(self):
        tree = parse_source("const total = " + " + ".join(["1"] * 3000) + ";\n")
        numbers = [d for d in _dict_nodes(tree_to_dict(tree)) if d["type"] == "number"]
        assert len(numbers) == 3000

    def test_long_hand_built_chain(self):
        root = current = SyntaxNode(kind="block")
        for _ in range(20000):
            child = SyntaxNode(kind="block")
            current.fields["body"] = child
            current = child
        assert sum(1 for _ in _dict_nodes(tree_to_dict(root))) == 20001


class TestResultToDict:
    def test_keys(self):
        data = result_to_dict(analyze_source(EXAMPLE_SOURCE, "app.js"))
        assert set(data) == {"file", "analyzedAt", "summary", "quality", "extended", "structure"}
        assert data["summary"]["functions"] == 2
        assert data["extended"]["fanOut"] == 0
        assert data["structure"]["functions"] == [
            {"name": "a", "params": [], "isArrow": False},
            {"name": "b", "params": [], "isArrow": False},
        ]
