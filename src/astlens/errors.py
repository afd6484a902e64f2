"""Exceptions that abort an analysis.

Unusual-but-valid tree shapes never raise; the extractor falls back to
placeholder values instead.
"""


class AnalysisError(Exception):
    """Base class for failures that abort the analysis of one file."""


class ParseError(AnalysisError):
    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line


class BundleError(AnalysisError):
    """The uploaded bundle could not be opened as a zip archive."""


class MissingEntryError(BundleError):
    def __init__(self, entry: str) -> None:
        super().__init__(f"Bundle has no {entry} entry")
        self.entry = entry
