"""JSON reporter: the canonical machine-readable ``report.json``.

HTML and Markdown are presentation only; downstream tooling should read
this document.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from codepaint.models.coverage import CoverageTotals, FileCoverageRecord, QualityGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportInputs:
    """Input documents of a run, relative to the repository root."""

    lcov_path: str
    coverage_summary_json: str
    jest_results_json: str | None = None
    """None when the results document was not present."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "lcovPath": self.lcov_path,
            "coverageSummaryJson": self.coverage_summary_json,
            "jestResultsJson": self.jest_results_json,
        }


def build_report_payload(
    *,
    title: str,
    inputs: ReportInputs,
    gate: QualityGate,
    totals: CoverageTotals,
    files: Sequence[FileCoverageRecord],
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the JSON report structure."""
    timestamp = generated_at or datetime.now(tz=UTC)
    return {
        "title": title,
        "generatedAt": timestamp.isoformat(),
        "inputs": inputs.to_dict(),
        "qualityGate": gate.to_dict(),
        "totals": totals.to_dict(),
        "files": [_serialize_file(f) for f in files],
    }


def _serialize_file(record: FileCoverageRecord) -> dict[str, Any]:
    """Serialize a ``FileCoverageRecord`` into a JSON-compatible dict."""
    return {
        "path": record.rel_path,
        "lineCoveragePct": record.file_coverage_pct,
        "failingLineCount": record.failing_line_count,
        "coveredLineCount": record.covered_line_count,
        "instrumentedLineCount": record.instrumented_line_count,
    }


class JSONReporter:
    """Serialize a report payload to disk."""

    def generate(self, output_path: Path, payload: dict[str, Any]) -> Path:
        """Write a JSON report file.

        Args:
            output_path: Path to write the JSON file.
            payload: Structure from ``build_report_payload``.

        Returns:
            The path to the generated JSON file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate_string(payload), encoding="utf-8")
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(self, payload: dict[str, Any]) -> str:
        """Return the JSON report as a string."""
        return json.dumps(payload, indent=2, ensure_ascii=False)
