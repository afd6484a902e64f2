"""Shared test fixtures for astlens tests."""

import sys
import zipfile
from pathlib import Path

import pytest

# Add src to path so tests can import astlens
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from astlens.models import Span, SyntaxNode  # noqa: E402


EXAMPLE_SOURCE = """\
function a() {}
function b() { a(); }
document.addEventListener('click', b);
"""


def node(kind, /, span=None, text=None, **fields):
    """Hand-built SyntaxNode with (start, end) span shorthand."""
    return SyntaxNode(
        kind=kind,
        fields=fields,
        span=Span(*span) if span else None,
        text=text,
    )


@pytest.fixture
def make_bundle(tmp_path):
    """Write a zip bundle from {archive_path: text} and return its path."""

    def _make(entries, name="bundle.zip"):
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for arcname, text in entries.items():
                zf.writestr(arcname, text)
        return path

    return _make
