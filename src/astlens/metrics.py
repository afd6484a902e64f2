"""Single-pass metric collection over a SyntaxNode tree."""

import logging
from typing import Any

from .kinds import NodeKind, classify, is_call, loop_declaration_kind, member_property
from .models import MetricSnapshot, SyntaxNode
from .walk import walk

log = logging.getLogger(__name__)

EVENT_REGISTRATION = "addEventListener"


class MetricCollector:
    """Accumulate coarse counts; every rule is an order-independent sum or max."""

    def __init__(self) -> None:
        self.functions = 0
        self.variables = 0
        self.event_listeners = 0
        self.max_line = 0

    def visit(self, node: SyntaxNode, scope: Any = None) -> None:
        kind = classify(node)
        if kind is NodeKind.FUNCTION_DECLARATION:
            self.functions += 1
        elif kind is NodeKind.VARIABLE_DECLARATOR:
            self.variables += 1
        elif loop_declaration_kind(node) is not None:
            # for (const x of xs) declares x without a variable_declarator node
            self.variables += 1
        elif is_call(node) and _registers_listener(node):
            self.event_listeners += 1

        if node.span is not None:
            self.max_line = max(self.max_line, node.span.end_line)

    def snapshot(self) -> MetricSnapshot:
        return MetricSnapshot(
            function_count=self.functions,
            variable_count=self.variables,
            event_listener_count=self.event_listeners,
            max_line=self.max_line,
        )


def _registers_listener(call: SyntaxNode) -> bool:
    callee = call.fields.get("function")
    if not isinstance(callee, SyntaxNode):
        return False
    return member_property(callee) == EVENT_REGISTRATION


def collect_metrics(tree: SyntaxNode) -> MetricSnapshot:
    collector = MetricCollector()
    walk(tree, collector.visit)
    snapshot = collector.snapshot()
    log.debug(
        "Metrics: %d functions, %d variables, %d listeners, %d lines",
        snapshot.function_count, snapshot.variable_count,
        snapshot.event_listener_count, snapshot.max_line,
    )
    return snapshot
