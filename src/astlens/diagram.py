"""
Diagram models built from a StructuralModel.

Both builders are pure: they read the model and return fresh node/edge
lists, so they can be re-run for every render request.  Names stay raw;
escaping for a particular diagram language is the renderer's job.
"""

import logging

import networkx as nx

from .metrics import EVENT_REGISTRATION
from .models import (
    AnalysisConfig,
    CallGraph,
    CallGraphStats,
    ClassDiagram,
    ClassRecord,
    DiagramEdge,
    DiagramNode,
    FunctionRecord,
    FunctionStats,
    StructuralModel,
)
from .structure import GLOBAL_CALLER

log = logging.getLogger(__name__)

# synthetic node ids; "@" never appears in a JavaScript name
MODULE_NODE = "@module"
STATE_NODE = "@state"
EVENTS_NODE = "@events"
MORE_NODE = "@more"
FUNCTION_GROUP = "@functions"


def _signature(fn: FunctionRecord) -> str:
    return f"{fn.name}({', '.join(fn.params)})"


def _class_members(cls: ClassRecord) -> list[str]:
    members = [f"static {p.name}" if p.is_static else p.name for p in cls.properties]
    for m in cls.methods:
        prefix = "static " if m.is_static else ""
        if m.kind in ("get", "set"):
            prefix += f"{m.kind} "
        members.append(f"{prefix}{m.name}()")
    return members


def _unique_id(name: str, taken: set[str]) -> str:
    ident, n = name, 2
    while ident in taken:
        ident = f"{name}#{n}"
        n += 1
    taken.add(ident)
    return ident


def _more_marker(total: int, limit: int) -> str | None:
    extra = total - limit
    return f"+{extra} more" if extra > 0 else None


def build_class_diagram(model: StructuralModel, config: AnalysisConfig | None = None) -> ClassDiagram:
    """Classes with inheritance, plus Module (functions) and State (variables) entries."""
    config = config or AnalysisConfig()
    diagram = ClassDiagram()
    taken: set[str] = set()

    for cls in model.classes:
        # a repeated class name gets a "#2", "#3"... id; the label stays the name
        node_id = _unique_id(cls.name, taken)
        diagram.nodes.append(DiagramNode(
            id=node_id, label=cls.name, kind="class", members=_class_members(cls),
        ))
        if cls.extends_name is not None:
            diagram.edges.append(DiagramEdge(source=cls.extends_name, target=node_id, kind="inherits"))

    if model.functions:
        diagram.nodes.append(DiagramNode(
            id=MODULE_NODE, label="Module", kind="module",
            members=[_signature(f) for f in model.functions],
        ))

    if model.variables:
        members = [f"{v.declaration_kind} {v.name}" for v in model.variables[:config.state_limit]]
        marker = _more_marker(len(model.variables), config.state_limit)
        if marker:
            members.append(marker)
        diagram.nodes.append(DiagramNode(id=STATE_NODE, label="State", kind="state", members=members))

    if model.functions and model.variables:
        diagram.edges.append(DiagramEdge(source=MODULE_NODE, target=STATE_NODE, kind="uses"))

    return diagram


def _call_digraph(model: StructuralModel) -> nx.DiGraph:
    """Every function as a node; resolvable caller → callee pairs as edges."""
    g: nx.DiGraph = nx.DiGraph()
    g.add_nodes_from(f.name for f in model.functions)
    known = set(g.nodes)
    for call in model.calls:
        if call.caller == GLOBAL_CALLER:
            continue
        if call.caller in known and call.callee in known:
            g.add_edge(call.caller, call.callee)
    return g


def build_call_graph(model: StructuralModel, config: AnalysisConfig | None = None) -> CallGraph:
    """
    Deduplicated call edges between known functions.

    With no edges, the first ``standalone_limit`` functions are listed on
    their own.  Calls to addEventListener collapse into one aggregate node.
    """
    config = config or AnalysisConfig()
    g = _call_digraph(model)
    graph = CallGraph()

    if g.number_of_edges():
        connected = [n for n in g.nodes if g.degree(n) > 0]
        graph.nodes = [DiagramNode(id=n, label=n, kind="function") for n in connected]
        graph.edges = [DiagramEdge(source=u, target=v, kind="calls") for u, v in g.edges]
    elif g.number_of_nodes():
        names = list(g.nodes)
        graph.standalone = True
        graph.nodes = [
            DiagramNode(id=n, label=n, kind="function") for n in names[:config.standalone_limit]
        ]
        marker = _more_marker(len(names), config.standalone_limit)
        if marker:
            graph.nodes.append(DiagramNode(id=MORE_NODE, label=marker, kind="more"))

    listeners = sum(1 for c in model.calls if c.callee == EVENT_REGISTRATION)
    if listeners:
        has_functions = bool(graph.nodes)
        graph.event_listener_count = listeners
        graph.nodes.append(DiagramNode(
            id=EVENTS_NODE, label="Event Listeners", kind="events", count=listeners,
        ))
        if has_functions:
            graph.edges.append(DiagramEdge(source=EVENTS_NODE, target=FUNCTION_GROUP, kind="triggers"))

    log.debug("Call graph: %d nodes, %d edges", len(graph.nodes), len(graph.edges))
    return graph


def call_graph_stats(model: StructuralModel) -> CallGraphStats:
    """Fan-in/fan-out per function, recursion clusters, and orphan functions."""
    g = _call_digraph(model)

    functions = [
        FunctionStats(name=n, fan_in=g.in_degree(n), fan_out=g.out_degree(n))
        for n in g.nodes
    ]

    cycles: list[list[str]] = []
    for scc in nx.strongly_connected_components(g):
        if len(scc) > 1:
            cycles.append(sorted(scc))
    for node in nx.nodes_with_selfloops(g):
        cycles.append([node])
    cycles.sort()

    orphans = [n for n in g.nodes if g.degree(n) == 0]

    return CallGraphStats(functions=functions, cycles=cycles, orphans=orphans)
