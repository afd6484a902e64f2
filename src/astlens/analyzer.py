"""
Analysis pipeline: bundle → parse → metrics → structure → derive.

The metric walk and the structure walk are independent passes over the
same tree.  Nothing is stored globally: each call returns a complete
AnalysisResult, and AnalysisSession holds the latest one for callers that
need it (the viz server).
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from .bundle import read_bundle
from .derive import calculate_quality_score, compute_extended_metrics
from .metrics import collect_metrics
from .models import AnalysisConfig, AnalysisResult
from .parse import parse_source
from .structure import extract_structure

log = logging.getLogger(__name__)


def analyze_source(
    text: str,
    file_name: str,
    config: AnalysisConfig | None = None,
    precomputed_ast: str | None = None,
) -> AnalysisResult:
    """
    Analyze one source text.

    Raises ParseError when the source does not parse.
    """
    config = config or AnalysisConfig()
    tree = parse_source(text, config.language)

    snapshot = collect_metrics(tree)
    structure = extract_structure(tree)

    log.info("Analyzed %s: %d lines", file_name, snapshot.max_line)
    return AnalysisResult(
        file_name=file_name,
        snapshot=snapshot,
        extended=compute_extended_metrics(snapshot),
        quality=calculate_quality_score(snapshot, config),
        structure=structure,
        precomputed_ast=precomputed_ast,
        analyzed_at=datetime.now(timezone.utc).isoformat(),
    )


def analyze_bundle(
    source: str | Path | bytes,
    config: AnalysisConfig | None = None,
) -> AnalysisResult:
    """Analyze the source entry of a zip bundle (path or raw bytes)."""
    config = config or AnalysisConfig()
    contents = read_bundle(source, config)
    return analyze_source(
        contents.source_text,
        contents.source_name,
        config,
        precomputed_ast=contents.precomputed_ast,
    )


def analyze_path(path: str | Path, config: AnalysisConfig | None = None) -> AnalysisResult:
    """Analyze a bundle, or a plain source file when *path* is not a zip."""
    path = Path(path)
    if path.suffix.lower() == ".zip":
        return analyze_bundle(path, config)
    text = path.read_text(encoding="utf-8", errors="replace")
    return analyze_source(text, path.name, config)


class AnalysisSession:
    """Latest successful result for one caller.

    A failed analysis propagates its error and leaves the previous result in
    place; a successful one replaces it wholesale.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self.config = config or AnalysisConfig()
        self._latest: AnalysisResult | None = None
        self._lock = threading.Lock()

    @property
    def latest(self) -> AnalysisResult | None:
        with self._lock:
            return self._latest

    def analyze_bundle(self, source: str | Path | bytes) -> AnalysisResult:
        result = analyze_bundle(source, self.config)
        return self._replace(result)

    def analyze_path(self, path: str | Path) -> AnalysisResult:
        result = analyze_path(path, self.config)
        return self._replace(result)

    def _replace(self, result: AnalysisResult) -> AnalysisResult:
        with self._lock:
            self._latest = result
        return result
