"""HTML fragment for the CI job summary (``GITHUB_STEP_SUMMARY``)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codepaint.models.coverage import LEGEND_ORDER
from codepaint.reporters.painting import (
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_LINES_PER_FILE,
    PaintedFile,
    capped_view,
)
from codepaint.utils.paths import escape_html, pct_str

if TYPE_CHECKING:
    from collections.abc import Sequence

    from codepaint.models.coverage import CoverageTotals, FileCoverageRecord, QualityGate

_GATE_COLORS = {"PASS": "#28a745", "FAIL": "#dc3545"}

_ROW_BACKGROUNDS = {
    "uncovered": "transparent",
    "covered-pass": "rgba(46, 204, 113, 0.25)",
    "covered-fail": "rgba(243, 156, 18, 0.30)",
}


def render_step_summary(
    title: str,
    totals: CoverageTotals,
    gate: QualityGate,
    files: Sequence[FileCoverageRecord],
    *,
    max_files: int = DEFAULT_MAX_FILES,
    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE,
) -> str:
    """Render the capped HTML summary appended to the job summary."""
    view = capped_view(files, max_files, max_lines_per_file)

    metric_rows = "\n".join(
        "    <tr>\n"
        f"      <td>{label}</td>\n"
        f'      <td style="text-align: right;"><strong>{pct_str(metric.pct)}%</strong></td>\n'
        f'      <td style="text-align: right;">{metric.covered} / {metric.total}</td>\n'
        "    </tr>"
        for label, metric in totals.items()
    )
    legend = "\n".join(f"  <li>{status.glyph} {status.label}</li>" for status in LEGEND_ORDER)
    file_sections = "\n".join(_render_file(pf, view.max_lines_per_file) for pf in view.files)
    more_files = (
        f"<p><em>... and {view.hidden_file_count} more file(s). "
        "Download the HTML report artifact for full details.</em></p>"
        if view.hidden_file_count > 0
        else ""
    )
    verdict = gate.status.value

    return f"""<h2>{escape_html(title)} — Coverage Summary</h2>

<p><strong>Quality Gate (lines ≥ {gate.threshold:g}%):</strong> <span style="color: {_GATE_COLORS[verdict]}; font-weight: 600;">{verdict}</span></p>

<table>
  <thead>
    <tr>
      <th>Metric</th>
      <th style="text-align: right;">Coverage</th>
      <th style="text-align: right;">Covered / Total</th>
    </tr>
  </thead>
  <tbody>
{metric_rows}
  </tbody>
</table>

<hr>

<h3>🎨 Code Painting</h3>

<p><strong>Legend:</strong></p>
<ul>
{legend}
</ul>

{file_sections}

{more_files}

<p><em>💡 Expand the file sections above to view the code painting. For a full interactive HTML report, download the workflow artifact.</em></p>
"""  # noqa: E501


def _render_file(painted: PaintedFile, max_lines_per_file: int) -> str:
    record = painted.record
    rows = "\n".join(
        '<div style="display: grid; grid-template-columns: 40px 60px 1fr; gap: 8px; '
        f"padding: 2px 8px; background: {_ROW_BACKGROUNDS[line.status.css_class]}; "
        'font-family: ui-monospace, monospace; font-size: 12px;">'
        f'<span style="text-align: right; color: #666;">{line.status.glyph}</span>'
        f'<span style="text-align: right; color: #999;">{line.number:>4}</span>'
        f"<span>{escape_html(line.text) or ' '}</span>"
        "</div>"
        for line in painted.lines
    )
    badge = (
        ' <span style="background: rgba(255,255,255,0.1); padding: 2px 8px; '
        f'border-radius: 12px; font-size: 11px;">{pct_str(record.file_coverage_pct)}%</span>'
        if record.file_coverage_pct is not None
        else ""
    )
    more_lines = (
        f' <em style="color: #999;">(showing first {max_lines_per_file} '
        f"of {record.line_count} lines)</em>"
        if painted.truncated
        else ""
    )
    return f"""<details style="margin: 12px 0; border: 1px solid rgba(255,255,255,0.1); border-radius: 6px; padding: 8px;">
  <summary style="cursor: pointer; font-weight: 600; padding: 4px;">📄 {escape_html(record.rel_path)}{badge}{more_lines}</summary>
  <div style="margin-top: 8px; border: 1px solid rgba(255,255,255,0.05); border-radius: 4px; overflow: hidden;">
{rows}
  </div>
</details>"""  # noqa: E501
