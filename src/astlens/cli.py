"""CLI entry point for astlens."""

import argparse
import json
import logging
import sys
from pathlib import Path

from .analyzer import AnalysisSession, analyze_path
from .bundle import read_bundle
from .diagram import build_call_graph, build_class_diagram, call_graph_stats
from .errors import AnalysisError
from .models import AnalysisConfig, AnalysisResult
from .parse import parse_source
from .render import render_call_graph, render_class_diagram
from .serialize import (
    call_graph_to_dict,
    class_diagram_to_dict,
    result_to_dict,
    tree_to_dict,
)

log = logging.getLogger(__name__)


def _config(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(source_entry=args.entry, precomputed_entry=args.ast_entry)


def _source_text(path: Path, config: AnalysisConfig) -> tuple[str, str | None]:
    """Source text and precomputed tree for a bundle or a plain file."""
    if path.suffix.lower() == ".zip":
        contents = read_bundle(path, config)
        return contents.source_text, contents.precomputed_ast
    return path.read_text(encoding="utf-8", errors="replace"), None


def print_summary(result: AnalysisResult) -> None:
    s, q, x = result.snapshot, result.quality, result.extended
    print(f"File:            {result.file_name}")
    print(f"Analyzed at:     {result.analyzed_at}")
    print(f"  functions:       {s.function_count}")
    print(f"  variables:       {s.variable_count}")
    print(f"  event listeners: {s.event_listener_count}")
    print(f"  lines:           {s.max_line}")

    print("\nQuality (0-100):")
    print(f"  function score:  {q.func_score}")
    print(f"  variable score:  {q.var_score}")
    print(f"  event score:     {q.event_score}")
    print(f"  maintainability: {q.mi_score}")
    print(f"  total:           {q.total}")

    print("\nExtended metrics (heuristic):")
    print(f"  LOC {x.loc}  cyclomatic {x.cyclomatic}  CBO {x.cbo}  RFC {x.rfc}  fan-out {x.fan_out}")
    print(f"  LCOM {x.lcom}  TCC {x.tcc:.2f}  DIT {x.dit}  NOC {x.noc}  WMC {x.wmc}")
    print(f"  Halstead volume {x.halstead_volume}  effort {x.halstead_effort}  "
          f"MI {x.maintainability_index}")

    model = result.structure
    print(f"\nStructure: {len(model.classes)} classes, {len(model.functions)} functions, "
          f"{len(model.variables)} variables, {len(model.calls)} calls, "
          f"{len(model.imports)} imports, {len(model.exports)} exports")

    stats = call_graph_stats(model)
    busiest = sorted(stats.functions, key=lambda f: f.fan_in + f.fan_out, reverse=True)[:5]
    busiest = [f for f in busiest if f.fan_in or f.fan_out]
    if busiest:
        print("  busiest functions:")
        for f in busiest:
            print(f"    {f.name:<30} in={f.fan_in}  out={f.fan_out}")
    if stats.cycles:
        print(f"  recursion: {'; '.join(' ↔ '.join(c) for c in stats.cycles[:5])}")
    if stats.orphans:
        print(f"  unconnected: {', '.join(stats.orphans[:8])}")


def cmd_analyze(args: argparse.Namespace) -> int:
    result = analyze_path(args.path, _config(args))
    if args.json:
        print(json.dumps(result_to_dict(result), indent=2))
    else:
        print_summary(result)
    return 0


def cmd_diagram(args: argparse.Namespace) -> int:
    config = _config(args)
    result = analyze_path(args.path, config)
    if args.kind == "class":
        diagram = build_class_diagram(result.structure, config)
        if args.format == "json":
            print(json.dumps(class_diagram_to_dict(diagram), indent=2))
        else:
            print(render_class_diagram(diagram), end="")
    else:
        graph = build_call_graph(result.structure, config)
        if args.format == "json":
            print(json.dumps(call_graph_to_dict(graph), indent=2))
        else:
            print(render_call_graph(graph), end="")
    return 0


def cmd_ast(args: argparse.Namespace) -> int:
    config = _config(args)
    text, precomputed = _source_text(Path(args.path), config)
    if args.precomputed:
        if precomputed is None:
            print(f"No {config.precomputed_entry} in {args.path}", file=sys.stderr)
            return 1
        print(precomputed)
        return 0
    tree = parse_source(text, config.language)
    try:
        dumped = json.dumps(tree_to_dict(tree), indent=2)
    except (RecursionError, ValueError) as e:
        # the JSON encoder recurses once per nesting level
        raise AnalysisError("Syntax tree is too deeply nested to print as JSON") from e
    print(dumped)
    return 0


def cmd_viz(args: argparse.Namespace) -> int:
    """Analyze a bundle and serve the result over HTTP."""
    session = AnalysisSession(_config(args))
    session.analyze_path(args.path)

    from .viz_server import run_viz_server
    run_viz_server(session, port=args.port, open_browser=not args.no_open)
    return 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(
        prog="astlens",
        description="Syntax-tree metrics and structure diagrams for a JavaScript bundle",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--entry", default="app.js", help="Source entry in the bundle (default: app.js)")
    parser.add_argument("--ast-entry", default="ast.json",
                        help="Precomputed tree entry in the bundle (default: ast.json)")
    sub = parser.add_subparsers(dest="command", required=True)

    # analyze
    p = sub.add_parser("analyze", help="Print metrics, quality scores, and structure counts")
    p.add_argument("path", help="Zip bundle or JavaScript file")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of text")

    # diagram
    p = sub.add_parser("diagram", help="Print the class or call diagram")
    p.add_argument("path", help="Zip bundle or JavaScript file")
    p.add_argument("--kind", choices=["class", "calls"], default="class", help="Diagram kind")
    p.add_argument("--format", choices=["mermaid", "json"], default="mermaid", help="Output format")

    # ast
    p = sub.add_parser("ast", help="Dump the syntax tree as JSON")
    p.add_argument("path", help="Zip bundle or JavaScript file")
    p.add_argument("--precomputed", action="store_true", help="Print the bundle's own tree file instead")

    # viz
    p = sub.add_parser("viz", help="Serve the analysis over HTTP")
    p.add_argument("path", help="Zip bundle or JavaScript file")
    p.add_argument("--port", type=int, default=8430, help="HTTP port (default: 8430)")
    p.add_argument("--no-open", action="store_true", help="Don't auto-open browser")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("astlens").setLevel(logging.DEBUG)

    handlers = {
        "analyze": cmd_analyze,
        "diagram": cmd_diagram,
        "ast": cmd_ast,
        "viz": cmd_viz,
    }

    try:
        code = handlers[args.command](args)
    except (AnalysisError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
