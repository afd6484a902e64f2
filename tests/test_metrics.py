"""Tests for the single-pass metric collector."""

import textwrap
from dataclasses import FrozenInstanceError

import pytest

from conftest import EXAMPLE_SOURCE, node

from astlens.metrics import MetricCollector, collect_metrics
from astlens.models import MetricSnapshot
from astlens.parse import parse_source


def _count_kind(value, kinds):
    """Independent recursive count over fields, for ground truth."""
    if hasattr(value, "kind") and hasattr(value, "fields"):
        own = 1 if value.kind in kinds else 0
        return own + sum(_count_kind(v, kinds) for k, v in value.fields.items() if k != "parent")
    if isinstance(value, (list, tuple)):
        return sum(_count_kind(v, kinds) for v in value)
    return 0


SAMPLE = textwrap.dedent("""\
    import { api } from './api';

    const root = document.getElementById('root');
    let count = 0, label;
    var legacy = function () {};

    function render(items) {
        const list = items.map((item) => item.name);
        root.addEventListener('click', () => { count++; });
        return list;
    }

    function* ids() { yield 1; }

    class View {
        mount() {
            window.addEventListener('resize', render);
            this.el.addEventListener('scroll', this.onScroll);
        }
    }

    addEventListener('load', render);
    """)


class TestCollectMetrics:
    def test_example_program(self):
        snapshot = collect_metrics(parse_source(EXAMPLE_SOURCE))
        assert snapshot.function_count == 2
        assert snapshot.variable_count == 0
        assert snapshot.event_listener_count == 1
        # the program node ends on the empty line after the final newline
        assert snapshot.max_line == 4
        assert collect_metrics(parse_source(EXAMPLE_SOURCE.rstrip("\n"))).max_line == 3

    def test_counts_match_ground_truth(self):
        tree = parse_source(SAMPLE)
        snapshot = collect_metrics(tree)
        assert snapshot.function_count == _count_kind(
            tree, {"function_declaration", "generator_function_declaration"}
        )
        assert snapshot.variable_count == _count_kind(tree, {"variable_declarator"})

    def test_sample_counts(self):
        snapshot = collect_metrics(parse_source(SAMPLE))
        assert snapshot.function_count == 2          # render, ids
        assert snapshot.variable_count == 5          # root, count, label, legacy, list
        assert snapshot.event_listener_count == 3    # bare addEventListener is not a member call

    def test_max_line_is_last_line_reached(self):
        source = "let a = 1;\n\n\nfunction f() {\n  return a;\n}"
        assert collect_metrics(parse_source(source)).max_line == 6

    def test_loop_bindings_count_as_variables(self):
        source = textwrap.dedent("""\
            const items = [1];
            for (const item of items) {}
            for (let k in obj) {}
            for (var [i, j] of pairs) {}
            for (existing of items) {}
            """)
        assert collect_metrics(parse_source(source)).variable_count == 4

    def test_tagged_template_is_not_a_listener_call(self):
        source = "el.addEventListener`click`;\n"
        assert collect_metrics(parse_source(source)).event_listener_count == 0


class TestMetricCollector:
    def test_no_spans_means_zero_lines(self):
        tree = node("program", children=[node("function_declaration"), node("variable_declarator")])
        collector = MetricCollector()
        collector.visit(tree)
        for child in tree.fields["children"]:
            collector.visit(child)
        assert collector.snapshot() == MetricSnapshot(function_count=1, variable_count=1)

    def test_max_line_over_hand_built_spans(self):
        tree = node(
            "program",
            span=(1, 4),
            children=[node("expression_statement", span=(2, 9)), node("comment", span=(10, 10))],
        )
        collector = MetricCollector()
        for n in [tree, *tree.fields["children"]]:
            collector.visit(n)
        assert collector.snapshot().max_line == 10

    def test_listener_requires_member_callee(self):
        call = node(
            "call_expression",
            function=node(
                "member_expression",
                object=node("identifier", text="btn"),
                property=node("property_identifier", text="addEventListener"),
            ),
            arguments=node("arguments"),
        )
        bare = node(
            "call_expression",
            function=node("identifier", text="addEventListener"),
            arguments=node("arguments"),
        )
        collector = MetricCollector()
        collector.visit(call)
        collector.visit(bare)
        assert collector.snapshot().event_listener_count == 1

    def test_declared_loop_binding_is_one_variable(self):
        declared = node("for_in_statement", kind="let", left=node("identifier", text="k"))
        bare = node("for_in_statement", left=node("identifier", text="k"))
        collector = MetricCollector()
        collector.visit(declared)
        collector.visit(bare)
        assert collector.snapshot().variable_count == 1

    def test_snapshot_is_immutable(self):
        snapshot = MetricCollector().snapshot()
        with pytest.raises(FrozenInstanceError):
            snapshot.function_count = 3
