"""Render diagram models as Mermaid text."""

import re

from .diagram import EVENTS_NODE
from .models import CallGraph, ClassDiagram

_UNSAFE_ID = re.compile(r"[^A-Za-z0-9_]")
_UNSAFE_MEMBER = re.compile(r"[{}<>\"`~;]")

_INDENT = "    "
_EVENTS_IDENT = "EventListeners"
_GROUP_IDENT = "functions"


def _safe_id(name: str) -> str:
    ident = _UNSAFE_ID.sub("_", name) or "_"
    return f"_{ident}" if ident[0].isdigit() else ident


class _Idents:
    """Mermaid identifiers for model ids, still unique after sanitising."""

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix
        self._by_id: dict[str, str] = {}
        self._used: set[str] = set()

    def __call__(self, node_id: str, preferred: str | None = None) -> str:
        if node_id in self._by_id:
            return self._by_id[node_id]
        base = self._prefix + _safe_id(preferred if preferred is not None else node_id)
        ident, n = base, 2
        while ident in self._used:
            ident = f"{base}_{n}"
            n += 1
        self._used.add(ident)
        self._by_id[node_id] = ident
        return ident


def _label(text: str) -> str:
    return text.replace('"', "#quot;")


def _member_line(member: str) -> str:
    member = _UNSAFE_MEMBER.sub("", member)
    if member.startswith("static "):
        return f"{member[len('static '):]}$"
    return member


def render_class_diagram(diagram: ClassDiagram) -> str:
    lines = ["classDiagram"]
    idents = _Idents()
    for node in diagram.nodes:
        ident = idents(node.id, node.label)
        if ident != node.label:
            lines.append(f'{_INDENT}class {ident}["{_label(node.label)}"]')
        if node.members:
            lines.append(f"{_INDENT}class {ident} {{")
            lines.extend(f"{_INDENT * 2}{_member_line(m)}" for m in node.members)
            lines.append(f"{_INDENT}}}")
        elif ident == node.label:
            lines.append(f"{_INDENT}class {ident}")
    for edge in diagram.edges:
        source, target = idents(edge.source), idents(edge.target)
        if edge.kind == "inherits":
            lines.append(f"{_INDENT}{source} <|-- {target}")
        else:
            lines.append(f"{_INDENT}{source} ..> {target} : {edge.kind}")
    return "\n".join(lines) + "\n"


def render_call_graph(graph: CallGraph) -> str:
    lines = ["flowchart TD"]
    idents = _Idents(prefix="fn_")
    functions = [n for n in graph.nodes if n.id != EVENTS_NODE]
    if functions:
        lines.append(f"{_INDENT}subgraph {_GROUP_IDENT} [Functions]")
        for node in functions:
            lines.append(f'{_INDENT * 2}{idents(node.id)}["{_label(node.label)}"]')
        lines.append(f"{_INDENT}end")

    for edge in graph.edges:
        if edge.source == EVENTS_NODE:
            continue
        lines.append(f"{_INDENT}{idents(edge.source)} --> {idents(edge.target)}")

    if graph.event_listener_count:
        lines.append(f'{_INDENT}{_EVENTS_IDENT}(["Event Listeners ({graph.event_listener_count})"])')
        if functions:
            lines.append(f"{_INDENT}{_EVENTS_IDENT} -.-> {_GROUP_IDENT}")
    return "\n".join(lines) + "\n"
