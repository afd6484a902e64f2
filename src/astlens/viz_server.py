"""FastAPI server exposing the latest analysis and its diagrams.

Data flow: Browser  ↔  FastAPI endpoints  ↔  AnalysisSession
Diagram models are rebuilt from the stored structure on every request.
Launched via the ``astlens viz`` CLI command.
"""

import logging
import threading
import webbrowser

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from .analyzer import AnalysisSession
from .diagram import build_call_graph, build_class_diagram, call_graph_stats
from .errors import AnalysisError
from .render import render_call_graph, render_class_diagram
from .serialize import (
    call_graph_to_dict,
    call_stats_to_dict,
    class_diagram_to_dict,
    result_to_dict,
    structure_to_dict,
)

log = logging.getLogger(__name__)

_NOTHING_ANALYZED = {"error": "No bundle analyzed yet"}


def create_app(session: AnalysisSession) -> FastAPI:
    """Build the FastAPI application around *session*."""

    app = FastAPI(title="astlens viz", docs_url=None, redoc_url=None)

    @app.get("/api/summary")
    def api_summary() -> JSONResponse:
        """Counts, quality scores, and extended metrics for the latest file."""
        result = session.latest
        if result is None:
            return JSONResponse(_NOTHING_ANALYZED, status_code=404)
        data = result_to_dict(result)
        data.pop("structure")
        return JSONResponse(data)

    @app.get("/api/structure")
    def api_structure() -> JSONResponse:
        result = session.latest
        if result is None:
            return JSONResponse(_NOTHING_ANALYZED, status_code=404)
        data = structure_to_dict(result.structure)
        data["callStats"] = call_stats_to_dict(call_graph_stats(result.structure))
        return JSONResponse(data)

    @app.get("/api/diagram/class", response_model=None)
    def api_class_diagram(
        format: str = Query(default="json", pattern="^(json|mermaid)$"),
    ) -> JSONResponse | PlainTextResponse:
        result = session.latest
        if result is None:
            return JSONResponse(_NOTHING_ANALYZED, status_code=404)
        diagram = build_class_diagram(result.structure, session.config)
        if format == "mermaid":
            return PlainTextResponse(render_class_diagram(diagram))
        return JSONResponse(class_diagram_to_dict(diagram))

    @app.get("/api/diagram/calls", response_model=None)
    def api_call_graph(
        format: str = Query(default="json", pattern="^(json|mermaid)$"),
    ) -> JSONResponse | PlainTextResponse:
        result = session.latest
        if result is None:
            return JSONResponse(_NOTHING_ANALYZED, status_code=404)
        graph = build_call_graph(result.structure, session.config)
        if format == "mermaid":
            return PlainTextResponse(render_call_graph(graph))
        return JSONResponse(call_graph_to_dict(graph))

    @app.get("/api/ast/precomputed")
    def api_precomputed() -> PlainTextResponse:
        """The bundle's own tree file, exactly as read."""
        result = session.latest
        if result is None or result.precomputed_ast is None:
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(result.precomputed_ast, media_type="application/json")

    @app.post("/api/analyze")
    async def api_analyze(request: Request) -> JSONResponse:
        """Analyze a zip bundle sent as the raw request body.

        On failure the previous result stays current and a 422 carries the
        error message.
        """
        body = await request.body()
        try:
            # parsing is CPU-bound; keep it off the event loop
            result = await run_in_threadpool(session.analyze_bundle, body)
        except AnalysisError as e:
            log.info("Rejected bundle: %s", e)
            return JSONResponse({"error": str(e)}, status_code=422)
        data = result_to_dict(result)
        data.pop("structure")
        return JSONResponse(data)

    return app


def run_viz_server(session: AnalysisSession, port: int = 8430, open_browser: bool = True) -> None:
    """Serve *session* and block until interrupted."""
    import uvicorn

    app = create_app(session)
    url = f"http://localhost:{port}/api/summary"
    print(f"astlens viz → {url}")

    if open_browser:
        # Open browser after a brief delay so uvicorn has time to start
        threading.Timer(1.0, webbrowser.open, args=[url]).start()

    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")
