"""Tests for the generic tree walker."""

from conftest import node

from astlens.models import SyntaxNode
from astlens.walk import child_nodes, field_node, iter_nodes, tokens, walk


def _record(seen):
    def visitor(n, scope):
        seen.append(n.kind)
    return visitor


class TestWalkOrder:
    def test_preorder_field_then_sequence_order(self):
        tree = node(
            "root",
            first=node("a", inner=node("a1")),
            items=[node("b"), node("c", inner=[node("c1"), node("c2")])],
            last=node("d"),
        )
        seen = []
        walk(tree, _record(seen))
        assert seen == ["root", "a", "a1", "b", "c", "c1", "c2", "d"]

    def test_scalars_none_and_missing_fields_are_skipped(self):
        tree = node(
            "root",
            name="plain",
            count=3,
            nothing=None,
            mixed=["x", 1, None, node("leaf")],
            tokens=["static", "async"],
        )
        seen = []
        walk(tree, _record(seen))
        assert seen == ["root", "leaf"]

    def test_tuples_are_sequences(self):
        tree = node("root", items=(node("a"), node("b")))
        seen = []
        walk(tree, _record(seen))
        assert seen == ["root", "a", "b"]

    def test_non_node_root_is_tolerated(self):
        seen = []
        walk(None, _record(seen))
        walk("text", _record(seen))
        walk([node("a"), 5], _record(seen))
        assert seen == ["a"]

    def test_every_visitor_sees_every_node(self):
        tree = node("root", kids=[node("a"), node("b")])
        first, second = [], []
        walk(tree, _record(first), _record(second))
        assert first == second == ["root", "a", "b"]

    def test_each_node_visited_once(self):
        leaves = [node("leaf") for _ in range(5)]
        tree = node("root", kids=leaves, extra=node("mid", kids=[node("leaf")]))
        visited = []
        walk(tree, lambda n, s: visited.append(id(n)))
        assert len(visited) == len(set(visited)) == 8


class TestParentBackReference:
    def test_parent_field_is_not_descended(self):
        root = node("root")
        child = node("child", parent=root)
        root.fields["body"] = child
        seen = []
        walk(root, _record(seen))
        assert seen == ["root", "child"]

    def test_parent_attribute_is_not_walked(self):
        root = node("root")
        child = SyntaxNode(kind="child", parent=root)
        root.fields["body"] = child
        seen = []
        walk(child, _record(seen))
        assert seen == ["child"]


class TestScope:
    def test_descend_scopes_children_and_restores_for_siblings(self):
        tree = node(
            "root",
            body=[
                node("fn", name="outer", body=[node("call"), node("fn", name="inner", body=[node("call")])]),
                node("call"),
            ],
        )
        calls = []

        def visitor(n, scope):
            if n.kind == "call":
                calls.append(scope)

        def descend(n, scope):
            return n.fields["name"] if n.kind == "fn" else scope

        walk(tree, visitor, descend=descend, scope="global")
        assert calls == ["outer", "inner", "global"]

    def test_node_itself_sees_outer_scope(self):
        tree = node("fn", name="f")
        scopes = []
        walk(tree, lambda n, s: scopes.append(s), descend=lambda n, s: "f", scope="top")
        assert scopes == ["top"]


class TestDeepTrees:
    def test_deep_nesting_does_not_hit_recursion_limit(self):
        tree = node("leaf")
        for _ in range(20000):
            tree = node("wrap", inner=tree)
        count = [0]

        def visitor(n, scope):
            count[0] += 1

        walk(tree, visitor)
        assert count[0] == 20001
        assert sum(1 for _ in iter_nodes(tree)) == 20001


class TestHelpers:
    def test_child_nodes_flattens_in_field_order(self):
        a, b, c = node("a"), node("b"), node("c")
        parent = node("p", first=a, rest=[b, "x", c], parent=node("up"))
        assert child_nodes(parent) == [a, b, c]

    def test_field_node(self):
        a, b = node("a"), node("b")
        parent = node("p", single=a, many=[b, a], scalar="s")
        assert field_node(parent, "single") is a
        assert field_node(parent, "many") is b
        assert field_node(parent, "scalar") is None
        assert field_node(parent, "missing") is None

    def test_tokens(self):
        assert tokens(node("m", tokens=["static", "get"])) == ("static", "get")
        assert tokens(node("m")) == ()

    def test_iter_nodes_matches_walk_order(self):
        tree = node("root", a=node("a", b=node("b")), c=[node("c")])
        seen = []
        walk(tree, _record(seen))
        assert [n.kind for n in iter_nodes(tree)] == seen
