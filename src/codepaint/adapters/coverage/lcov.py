"""LCOV trace parser.

LCOV is the line-oriented trace Istanbul writes as ``coverage/lcov.info``::

    TN:
    SF:/workspace/src/math.js
    FN:1,add
    DA:1,4
    DA:2,0
    LF:2
    LH:1
    end_of_record

Only ``SF``, ``DA`` and ``end_of_record`` matter for line painting; every
other record type is ignored.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codepaint.errors import MissingInputError
from codepaint.utils.paths import normalize_to_repo_rel

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_SOURCE_FILE = "SF:"
_LINE_DATA = "DA:"
_END_OF_RECORD = "end_of_record"

# Minimum number of comma-separated fields in a DA record
_LINE_DATA_FIELDS = 2

LineHits = dict[int, int]


# ── Parsing ──────────────────────────────────────────────────────


def parse_lcov(text: str, repo_root: str) -> dict[str, LineHits]:
    """Parse an LCOV document into ``{relative path: {line: hits}}``.

    The parser is forgiving: a ``DA`` record whose fields are not integers
    is skipped and parsing carries on. When the same file appears in several
    records, later data is merged into the existing mapping.

    Args:
        text: LCOV document contents.
        repo_root: Repository root used to normalize ``SF`` paths.

    Returns:
        Per-file line hit counts keyed by repository-relative path.
    """
    file_line_hits: dict[str, LineHits] = {}
    current: LineHits | None = None

    for raw in text.splitlines():
        line = raw.strip()

        if line.startswith(_SOURCE_FILE):
            rel_path = normalize_to_repo_rel(repo_root, line[len(_SOURCE_FILE) :].strip())
            if rel_path is None:
                logger.debug("Ignoring LCOV record with an empty SF path")
                current = None
                continue
            current = file_line_hits.setdefault(rel_path, {})
            continue

        if line.startswith(_LINE_DATA):
            if current is None:
                continue
            parsed = _parse_line_data(line[len(_LINE_DATA) :])
            if parsed is None:
                logger.debug("Skipping malformed LCOV line data: %r", line)
                continue
            line_number, hits = parsed
            current[line_number] = hits
            continue

        if line == _END_OF_RECORD:
            current = None

    return file_line_hits


def parse_lcov_file(lcov_path: Path, repo_root: str) -> dict[str, LineHits]:
    """Read and parse an LCOV file.

    Raises:
        MissingInputError: If *lcov_path* does not exist.
    """
    if not lcov_path.is_file():
        raise MissingInputError(f"Missing LCOV file: {lcov_path}")

    text = lcov_path.read_text(encoding="utf-8", errors="replace")
    result = parse_lcov(text, repo_root)
    logger.info("Parsed LCOV trace %s (%d files)", lcov_path, len(result))
    return result


# ── Helper functions ─────────────────────────────────────────────


def _parse_line_data(payload: str) -> tuple[int, int] | None:
    """Parse ``<line>,<hits>[,<checksum>]``; return None when malformed."""
    parts = payload.split(",")
    if len(parts) < _LINE_DATA_FIELDS:
        return None
    try:
        line_number = int(parts[0])
        hits = int(parts[1])
    except ValueError:
        return None
    if line_number < 1 or hits < 0:
        return None
    return line_number, hits
