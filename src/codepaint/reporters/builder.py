"""Report builder: merge inputs into file records and render every artifact."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from codepaint.models.coverage import CoverageTotals, FileCoverageRecord, QualityGate
from codepaint.reporters.html import render_html_report
from codepaint.reporters.json_reporter import ReportInputs, build_report_payload
from codepaint.reporters.markdown import render_summary_markdown
from codepaint.reporters.painting import DEFAULT_MAX_FILES, DEFAULT_MAX_LINES_PER_FILE
from codepaint.reporters.step_summary import render_step_summary

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from codepaint.adapters.coverage.istanbul import CoverageSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOptions:
    """Rendering limits and run metadata."""

    max_files: int = DEFAULT_MAX_FILES
    """Files shown by the capped views (step summary, Markdown)."""

    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE
    """Lines per file shown by the capped views."""

    inputs: ReportInputs = field(
        default_factory=lambda: ReportInputs(
            lcov_path="coverage/lcov.info",
            coverage_summary_json="coverage/coverage-summary.json",
        )
    )
    """Input paths recorded in ``report.json``."""

    generated_at: datetime | None = None
    """Fixed timestamp for ``report.json`` (defaults to now)."""


@dataclass(frozen=True)
class RenderedReports:
    """Every artifact of a run, rendered but not yet written."""

    gate: QualityGate
    html: str
    markdown: str
    json: dict[str, Any]
    step_summary_html: str


def split_source_lines(source: str) -> list[str]:
    r"""Split *source* on ``\n`` only, the way LCOV and stack frames count lines.

    A ``\r`` before the line feed is dropped; a final newline does not add an
    empty last line.
    """
    lines = source.split("\n")
    if lines and not lines[-1]:
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def merge_file_records(
    repo_root: str,
    line_hits: Mapping[str, Mapping[int, int]],
    failure_locations: Mapping[str, set[int]],
    summary: CoverageSummary,
) -> list[FileCoverageRecord]:
    """Join LCOV hits, failure lines and summary percentages per file.

    Files named in the trace but missing on disk are skipped. Records are
    sorted by path.
    """
    root = Path(repo_root)
    records: list[FileCoverageRecord] = []

    for rel_path in sorted(line_hits):
        source_path = root / rel_path
        if not source_path.is_file():
            logger.debug("Skipping %s: source file not found", rel_path)
            continue

        source = source_path.read_bytes().decode("utf-8", errors="replace")
        records.append(
            FileCoverageRecord.build(
                rel_path=rel_path,
                source_lines=split_source_lines(source),
                line_hits=line_hits[rel_path],
                failing_lines=failure_locations.get(rel_path, ()),
                file_coverage_pct=summary.line_pct_for(repo_root, rel_path),
            )
        )

    logger.info("Merged coverage for %d of %d traced files", len(records), len(line_hits))
    return records


def build_reports(
    title: str,
    totals: CoverageTotals,
    threshold: float,
    files: Sequence[FileCoverageRecord],
    options: ReportOptions | None = None,
) -> RenderedReports:
    """Compute the quality gate and render HTML, Markdown, JSON and step summary."""
    options = options or ReportOptions()
    gate = QualityGate.evaluate(totals.lines.pct, threshold)

    return RenderedReports(
        gate=gate,
        html=render_html_report(title, files),
        markdown=render_summary_markdown(
            title,
            totals,
            gate,
            files,
            max_files=options.max_files,
            max_lines_per_file=options.max_lines_per_file,
        ),
        json=build_report_payload(
            title=title,
            inputs=options.inputs,
            gate=gate,
            totals=totals,
            files=files,
            generated_at=options.generated_at,
        ),
        step_summary_html=render_step_summary(
            title,
            totals,
            gate,
            files,
            max_files=options.max_files,
            max_lines_per_file=options.max_lines_per_file,
        ),
    )
