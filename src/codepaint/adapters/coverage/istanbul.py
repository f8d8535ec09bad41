"""Istanbul ``json-summary`` reader.

Jest and c8 write ``coverage/coverage-summary.json`` when the
``json-summary`` reporter is enabled::

    {
      "total": {
        "lines": {"total": 3, "covered": 2, "skipped": 0, "pct": 66.67},
        "branches": {...}, "functions": {...}, "statements": {...}
      },
      "/workspace/src/a.js": {"lines": {...}, ...}
    }

Per-file keys are the coverage tool's own paths; they are normalized only
when joined against LCOV records.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codepaint.errors import MalformedInputError, MissingInputError
from codepaint.models.coverage import CoverageTotals
from codepaint.utils.paths import normalize_to_repo_rel

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_TOTAL_KEY = "total"


@dataclass
class CoverageSummary:
    """Aggregated metrics for the run plus per-file metrics."""

    totals: CoverageTotals = field(default_factory=CoverageTotals)
    """Run-wide lines/branches/functions/statements metrics."""

    per_file: dict[str, CoverageTotals] = field(default_factory=dict)
    """Per-file metrics keyed by the coverage tool's path."""

    def line_pct_for(self, repo_root: str, rel_path: str) -> float | None:
        """Return the line percentage of the entry whose normalized path is *rel_path*.

        Returns:
            The file's line coverage, or None when the summary has no entry.
        """
        for tool_path, metrics in self.per_file.items():
            if normalize_to_repo_rel(repo_root, tool_path) == rel_path:
                return metrics.lines.pct
        return None


def parse_summary(data: object) -> CoverageSummary:
    """Build a ``CoverageSummary`` from a decoded summary document.

    Raises:
        MalformedInputError: If the document is not a JSON object.
    """
    if not isinstance(data, dict):
        raise MalformedInputError("Coverage summary must be a JSON object")

    per_file = {
        str(key): CoverageTotals.from_raw(value)
        for key, value in data.items()
        if key != _TOTAL_KEY
    }
    return CoverageSummary(
        totals=CoverageTotals.from_raw(data.get(_TOTAL_KEY)),
        per_file=per_file,
    )


def read_summary(summary_path: Path) -> CoverageSummary:
    """Load the coverage summary document.

    The summary is mandatory: it drives the quality gate.

    Raises:
        MissingInputError: If the file does not exist.
        MalformedInputError: If the file is not valid JSON.
    """
    if not summary_path.is_file():
        raise MissingInputError(f"Missing coverage summary JSON: {summary_path}")

    try:
        data = json.loads(summary_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(
            f"Failed to parse coverage summary {summary_path}: {exc}"
        ) from exc

    summary = parse_summary(data)
    logger.info(
        "Loaded coverage summary %s (%d per-file entries)", summary_path, len(summary.per_file)
    )
    return summary
