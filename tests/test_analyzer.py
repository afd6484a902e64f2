"""Tests for the analysis pipeline and session."""

from datetime import datetime

import pytest

from conftest import EXAMPLE_SOURCE

from astlens.analyzer import AnalysisSession, analyze_bundle, analyze_path, analyze_source
from astlens.errors import BundleError, MissingEntryError, ParseError
from astlens.models import AnalysisConfig


class TestAnalyzeSource:
    def test_example(self):
        result = analyze_source(EXAMPLE_SOURCE, "app.js")
        assert result.file_name == "app.js"
        assert result.snapshot.function_count == 2
        assert result.snapshot.event_listener_count == 1
        assert [f.name for f in result.structure.functions] == ["a", "b"]
        assert result.precomputed_ast is None
        assert datetime.fromisoformat(result.analyzed_at).tzinfo is not None

    def test_derived_values_follow_snapshot(self):
        result = analyze_source(EXAMPLE_SOURCE, "app.js")
        assert result.extended.rfc == 2
        assert result.extended.cbo == 2
        assert result.extended.cyclomatic == 3
        assert 0 <= result.quality.total <= 100

    def test_config_thresholds_apply(self):
        strict = AnalysisConfig(max_functions=2)
        assert analyze_source(EXAMPLE_SOURCE, "app.js", strict).quality.func_score == 0

    def test_syntax_error(self):
        with pytest.raises(ParseError):
            analyze_source("function {", "broken.js")

    def test_empty_source(self):
        snapshot = analyze_source("", "empty.js").snapshot
        assert (snapshot.function_count, snapshot.variable_count, snapshot.event_listener_count) == (0, 0, 0)


class TestAnalyzeBundleAndPath:
    def test_bundle_carries_precomputed_tree(self, make_bundle):
        path = make_bundle({"src/app.js": EXAMPLE_SOURCE, "ast.json": "{}"})
        result = analyze_bundle(path)
        assert result.file_name == "src/app.js"
        assert result.precomputed_ast == "{}"

    def test_bundle_from_bytes(self, make_bundle):
        data = make_bundle({"app.js": EXAMPLE_SOURCE}).read_bytes()
        assert analyze_bundle(data).snapshot.function_count == 2

    def test_plain_source_file(self, tmp_path):
        path = tmp_path / "main.js"
        path.write_text(EXAMPLE_SOURCE)
        result = analyze_path(path)
        assert result.file_name == "main.js"
        assert result.snapshot.function_count == 2

    def test_zip_suffix_selects_bundle_reader(self, make_bundle):
        path = make_bundle({"other.js": "x();\n"})
        with pytest.raises(MissingEntryError):
            analyze_path(path)


class TestAnalysisSession:
    def test_starts_empty(self):
        assert AnalysisSession().latest is None

    def test_success_replaces_latest(self, make_bundle):
        session = AnalysisSession()
        first = session.analyze_bundle(make_bundle({"app.js": "let a;\n"}, name="one.zip"))
        assert session.latest is first
        second = session.analyze_bundle(make_bundle({"app.js": EXAMPLE_SOURCE}, name="two.zip"))
        assert session.latest is second

    def test_failure_keeps_previous_result(self, make_bundle):
        session = AnalysisSession()
        good = session.analyze_bundle(make_bundle({"app.js": EXAMPLE_SOURCE}, name="good.zip"))

        with pytest.raises(MissingEntryError):
            session.analyze_bundle(make_bundle({"index.js": ""}, name="no_entry.zip"))
        with pytest.raises(ParseError):
            session.analyze_bundle(make_bundle({"app.js": "class {"}, name="broken.zip"))
        with pytest.raises(BundleError):
            session.analyze_bundle(b"garbage")

        assert session.latest is good

    def test_session_config_is_used(self, make_bundle):
        session = AnalysisSession(AnalysisConfig(source_entry="main.js"))
        result = session.analyze_path(make_bundle({"main.js": EXAMPLE_SOURCE}))
        assert result.file_name == "main.js"
