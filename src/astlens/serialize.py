"""JSON-ready dicts for analysis results, diagrams, and syntax trees."""

from dataclasses import asdict
from typing import Any

from .models import (
    AnalysisResult,
    CallGraph,
    CallGraphStats,
    ClassDiagram,
    DiagramNode,
    ExtendedMetrics,
    MetricSnapshot,
    QualityScore,
    StructuralModel,
    SyntaxNode,
)
from .walk import PARENT_FIELD


def snapshot_to_dict(snapshot: MetricSnapshot) -> dict:
    return {
        "functions": snapshot.function_count,
        "variables": snapshot.variable_count,
        "eventListeners": snapshot.event_listener_count,
        "loc": snapshot.max_line,
    }


def extended_to_dict(extended: ExtendedMetrics) -> dict:
    return {
        "loc": extended.loc,
        "cyclomatic": extended.cyclomatic,
        "cbo": extended.cbo,
        "rfc": extended.rfc,
        "fanOut": extended.fan_out,
        "lcom": extended.lcom,
        "tcc": round(extended.tcc, 2),
        "dit": extended.dit,
        "noc": extended.noc,
        "wmc": extended.wmc,
        "halsteadVolume": extended.halstead_volume,
        "halsteadEffort": extended.halstead_effort,
        "maintainabilityIndex": extended.maintainability_index,
    }


def quality_to_dict(quality: QualityScore) -> dict:
    return {
        "funcScore": quality.func_score,
        "varScore": quality.var_score,
        "eventScore": quality.event_score,
        "miScore": quality.mi_score,
        "total": quality.total,
    }


def structure_to_dict(model: StructuralModel) -> dict:
    return {
        "classes": [
            {
                "name": c.name,
                "extends": c.extends_name,
                "methods": [
                    {"name": m.name, "kind": m.kind, "static": m.is_static} for m in c.methods
                ],
                "properties": [{"name": p.name, "static": p.is_static} for p in c.properties],
            }
            for c in model.classes
        ],
        "functions": [
            {"name": f.name, "params": list(f.params), "isArrow": f.is_arrow}
            for f in model.functions
        ],
        "variables": [{"name": v.name, "kind": v.declaration_kind} for v in model.variables],
        "calls": [{"callee": c.callee, "from": c.caller} for c in model.calls],
        "imports": [{"source": i.source, "specifiers": list(i.names)} for i in model.imports],
        "exports": [{"name": e.name, "default": e.is_default} for e in model.exports],
    }


def _node_to_dict(node: DiagramNode) -> dict:
    d: dict = {"id": node.id, "label": node.label, "kind": node.kind}
    if node.members:
        d["members"] = list(node.members)
    if node.count is not None:
        d["count"] = node.count
    return d


def class_diagram_to_dict(diagram: ClassDiagram) -> dict:
    return {
        "nodes": [_node_to_dict(n) for n in diagram.nodes],
        "edges": [asdict(e) for e in diagram.edges],
    }


def call_graph_to_dict(graph: CallGraph) -> dict:
    return {
        "nodes": [_node_to_dict(n) for n in graph.nodes],
        "edges": [asdict(e) for e in graph.edges],
        "standalone": graph.standalone,
        "eventListeners": graph.event_listener_count,
    }


def call_stats_to_dict(stats: CallGraphStats) -> dict:
    return {
        "functions": [
            {"name": f.name, "fanIn": f.fan_in, "fanOut": f.fan_out} for f in stats.functions
        ],
        "cycles": [list(c) for c in stats.cycles],
        "orphans": list(stats.orphans),
    }


def result_to_dict(result: AnalysisResult) -> dict:
    return {
        "file": result.file_name,
        "analyzedAt": result.analyzed_at,
        "summary": snapshot_to_dict(result.snapshot),
        "quality": quality_to_dict(result.quality),
        "extended": extended_to_dict(result.extended),
        "structure": structure_to_dict(result.structure),
    }


def _pending(value: Any, stack: list[tuple[SyntaxNode, dict]]) -> Any:
    """JSON shape of a field value; nested nodes are queued and filled in later."""
    if isinstance(value, SyntaxNode):
        out: dict = {}
        stack.append((value, out))
        return out
    if isinstance(value, (list, tuple)):
        return [_pending(v, stack) for v in value]
    return value


def tree_to_dict(node: SyntaxNode) -> dict:
    """
    Nested dict form of a syntax tree, without parent back-references.

    Built with an explicit stack, so tree depth is not limited by the
    interpreter's recursion limit.
    """
    root: dict = {}
    stack: list[tuple[SyntaxNode, dict]] = [(node, root)]
    while stack:
        current, out = stack.pop()
        out["type"] = current.kind
        if current.span is not None:
            out["loc"] = {"start": current.span.start_line, "end": current.span.end_line}
        if current.text is not None:
            out["text"] = current.text
        for key, value in current.fields.items():
            if key != PARENT_FIELD:
                out[key] = _pending(value, stack)
    return root
