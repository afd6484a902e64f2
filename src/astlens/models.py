"""Core data structures for astlens."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Span:
    start_line: int             # 1-based
    end_line: int


@dataclass(eq=False)
class SyntaxNode:
    """One node of a parsed program.

    ``fields`` holds scalars, nested nodes, or ordered sequences of either.
    ``parent`` is a back-reference for upward lookups and is never walked.
    """
    kind: str
    fields: dict[str, Any] = field(default_factory=dict)
    span: Span | None = None
    text: str | None = None     # source text, kept for named leaves and strings
    parent: SyntaxNode | None = field(default=None, repr=False)

    def __repr__(self) -> str:
        return f"SyntaxNode({self.kind!r}, text={self.text!r})"


# ── Metrics ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MetricSnapshot:
    function_count: int = 0
    variable_count: int = 0
    event_listener_count: int = 0
    max_line: int = 0


@dataclass(frozen=True)
class ExtendedMetrics:
    """Heuristic proxies derived from a MetricSnapshot.

    These are linear functions of two counts and only reproduce the numbers
    the dashboard shows; they are not validated metrics.
    """
    loc: int
    cyclomatic: int
    cbo: int
    rfc: int
    fan_out: int
    lcom: int
    tcc: float
    dit: int
    noc: int
    wmc: int
    halstead_volume: int
    halstead_effort: int
    maintainability_index: int


@dataclass(frozen=True)
class QualityScore:
    func_score: int             # all scores in [0, 100]
    var_score: int
    event_score: int
    mi_score: int
    total: int


# ── Structure ─────────────────────────────────────────────────────────────────

@dataclass
class MethodRecord:
    name: str
    kind: str                   # "constructor" | "method" | "get" | "set"
    is_static: bool = False


@dataclass
class PropertyRecord:
    name: str
    is_static: bool = False


@dataclass
class ClassRecord:
    name: str
    extends_name: str | None = None
    methods: list[MethodRecord] = field(default_factory=list)
    properties: list[PropertyRecord] = field(default_factory=list)


@dataclass
class FunctionRecord:
    name: str
    params: list[str] = field(default_factory=list)
    is_arrow: bool = False


@dataclass
class VariableRecord:
    name: str
    declaration_kind: str       # "var" | "let" | "const"


@dataclass
class CallRecord:
    callee: str
    caller: str                 # enclosing function name, or "global"


@dataclass
class ImportRecord:
    source: str
    names: list[str] = field(default_factory=list)


@dataclass
class ExportRecord:
    name: str
    is_default: bool = False


@dataclass
class StructuralModel:
    classes: list[ClassRecord] = field(default_factory=list)
    functions: list[FunctionRecord] = field(default_factory=list)
    variables: list[VariableRecord] = field(default_factory=list)
    calls: list[CallRecord] = field(default_factory=list)
    imports: list[ImportRecord] = field(default_factory=list)
    exports: list[ExportRecord] = field(default_factory=list)


# ── Diagrams ──────────────────────────────────────────────────────────────────

@dataclass
class DiagramNode:
    id: str
    label: str
    kind: str                   # "class" | "module" | "state" | "function" | "more" | "events"
    members: list[str] = field(default_factory=list)
    count: int | None = None


@dataclass
class DiagramEdge:
    source: str
    target: str
    kind: str                   # "inherits" | "uses" | "calls" | "triggers"


@dataclass
class ClassDiagram:
    nodes: list[DiagramNode] = field(default_factory=list)
    edges: list[DiagramEdge] = field(default_factory=list)


@dataclass
class CallGraph:
    nodes: list[DiagramNode] = field(default_factory=list)
    edges: list[DiagramEdge] = field(default_factory=list)
    standalone: bool = False    # True when nodes are unconnected functions
    event_listener_count: int = 0


@dataclass
class FunctionStats:
    name: str
    fan_in: int
    fan_out: int


@dataclass
class CallGraphStats:
    functions: list[FunctionStats]
    cycles: list[list[str]]     # each inner list is a recursion cluster
    orphans: list[str]          # functions with no resolvable calls either way


# ── Configuration and results ────────────────────────────────────────────────

@dataclass
class AnalysisConfig:
    language: str = "javascript"
    source_entry: str = "app.js"
    precomputed_entry: str = "ast.json"
    max_functions: int = 20
    max_variables: int = 30
    event_target: int = 3
    event_penalty: int = 20
    state_limit: int = 10
    standalone_limit: int = 8

    def __post_init__(self) -> None:
        # scores divide by these
        for name in ("max_functions", "max_variables"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("event_target", "event_penalty", "state_limit", "standalone_limit"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")


@dataclass(frozen=True)
class AnalysisResult:
    file_name: str
    snapshot: MetricSnapshot
    extended: ExtendedMetrics
    quality: QualityScore
    structure: StructuralModel
    precomputed_ast: str | None
    analyzed_at: str            # ISO 8601 timestamp
