"""Markdown summary (``summary.md``), also used as the PR comment body."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codepaint.models.coverage import LEGEND_ORDER
from codepaint.reporters.painting import (
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_LINES_PER_FILE,
    capped_view,
)
from codepaint.utils.paths import escape_html, pct_str

if TYPE_CHECKING:
    from collections.abc import Sequence

    from codepaint.models.coverage import CoverageTotals, FileCoverageRecord, QualityGate


def render_code_painting_markdown(
    files: Sequence[FileCoverageRecord],
    *,
    max_files: int = DEFAULT_MAX_FILES,
    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE,
) -> str:
    """Render capped per-file code painting as collapsible sections."""
    view = capped_view(files, max_files, max_lines_per_file)
    sections: list[str] = []

    for painted in view.files:
        record = painted.record
        badge = (
            f" — {pct_str(record.file_coverage_pct)}% coverage"
            if record.file_coverage_pct is not None
            else ""
        )
        more = (
            f" _(showing first {max_lines_per_file} of {record.line_count} lines)_"
            if painted.truncated
            else ""
        )
        sections.append(
            "\n".join(
                [
                    "<details>",
                    f"<summary><strong>📄 {escape_html(record.rel_path)}</strong>"
                    f"{badge}{more}</summary>",
                    "",
                    "```",
                    *(
                        f"{line.status.glyph} {line.number:>4} | {line.text or ' '}"
                        for line in painted.lines
                    ),
                    "```",
                    "</details>",
                    "",
                ]
            )
        )

    if view.hidden_file_count > 0:
        sections.append(
            f"_... and {view.hidden_file_count} more file(s). "
            "Download the HTML report for full details._"
        )

    return "\n".join(sections)


def render_summary_markdown(
    title: str,
    totals: CoverageTotals,
    gate: QualityGate,
    files: Sequence[FileCoverageRecord],
    *,
    include_code_painting: bool = True,
    max_files: int = DEFAULT_MAX_FILES,
    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE,
) -> str:
    """Render the metrics table, gate verdict and optional code painting."""
    parts: list[str] = [
        f"## {title} — Coverage Summary",
        "",
        f"- **Quality Gate (lines ≥ {gate.threshold:g}%):** {gate.status.value}",
        "",
        "| Metric | Coverage | Covered / Total |",
        "|---|---:|---:|",
    ]
    parts.extend(
        f"| {label} | {pct_str(metric.pct)}% | {metric.covered} / {metric.total} |"
        for label, metric in totals.items()
    )
    parts.append("")

    if include_code_painting and files:
        parts.extend(
            [
                "---",
                "",
                "### 🎨 Code Painting",
                "",
                "**Legend:**",
                *(f"- {status.glyph} {status.label}" for status in LEGEND_ORDER),
                "",
                render_code_painting_markdown(
                    files, max_files=max_files, max_lines_per_file=max_lines_per_file
                ),
                "",
                "_💡 Expand the file sections above to view the code painting. "
                "For a full interactive HTML report, download the workflow artifact._",
                "",
            ]
        )
    else:
        parts.extend(
            [
                '_Download the "code painting" HTML report from the workflow artifacts '
                "to view per-line highlights._",
                "",
            ]
        )

    return "\n".join(parts)
