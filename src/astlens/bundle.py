"""Read the source entry (and optional precomputed tree) out of a zip bundle."""

import io
import json
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path

from .errors import BundleError, MissingEntryError
from .models import AnalysisConfig

log = logging.getLogger(__name__)


@dataclass
class BundleContents:
    source_name: str            # archive path of the source entry
    source_text: str
    precomputed_ast: str | None  # shown verbatim next to our own tree


def _find_entry(names: list[str], suffix: str) -> str | None:
    # the last matching entry wins
    found = None
    for name in names:
        if not name.endswith("/") and name.endswith(suffix):
            found = name
    return found


def _pretty(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2)
    except ValueError:
        log.warning("Precomputed tree is not valid JSON; keeping raw text")
        return text


def read_bundle(source: str | Path | bytes, config: AnalysisConfig | None = None) -> BundleContents:
    """
    Open a zip bundle from a path or raw bytes.

    Raises MissingEntryError when the source entry is absent and
    BundleError when the archive cannot be read.
    """
    config = config or AnalysisConfig()
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        with zipfile.ZipFile(handle) as archive:
            names = archive.namelist()
            source_name = _find_entry(names, config.source_entry)
            if source_name is None:
                raise MissingEntryError(config.source_entry)
            source_text = archive.read(source_name).decode("utf-8", errors="replace")

            precomputed = None
            precomputed_name = _find_entry(names, config.precomputed_entry)
            if precomputed_name is not None:
                raw = archive.read(precomputed_name).decode("utf-8", errors="replace")
                precomputed = _pretty(raw)
    except zipfile.BadZipFile as e:
        raise BundleError(f"Not a zip archive: {e}") from e
    except OSError as e:
        raise BundleError(f"Cannot read bundle: {e}") from e

    log.info("Bundle entry %s (%d chars)", source_name, len(source_text))
    return BundleContents(
        source_name=source_name,
        source_text=source_text,
        precomputed_ast=precomputed,
    )
