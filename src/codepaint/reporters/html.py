"""Interactive HTML report.

Generates a self-contained ``index.html`` with every file and every line.
All files are present in the document; a ``<select>`` switches which one is
visible.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codepaint.models.coverage import LineStatus
from codepaint.reporters.painting import paint_lines
from codepaint.utils.paths import escape_html, pct_str

if TYPE_CHECKING:
    from collections.abc import Sequence

    from codepaint.models.coverage import FileCoverageRecord
    from codepaint.reporters.painting import PaintedLine

_STYLE = """
    :root {
      --bg: #0b1020;
      --panel: #111a33;
      --text: #e8eefc;
      --muted: #9fb0d0;
      --border: rgba(255,255,255,0.10);
      --green: rgba(46, 204, 113, 0.25);
      --orange: rgba(243, 156, 18, 0.30);
    }
    html, body { height: 100%; }
    body {
      margin: 0;
      font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial;
      background: var(--bg);
      color: var(--text);
    }
    .wrap { max-width: 1200px; margin: 0 auto; padding: 18px; }
    .topbar {
      display: flex; gap: 12px; align-items: center; justify-content: space-between;
      border: 1px solid var(--border);
      border-radius: 12px;
      padding: 12px 14px;
    }
    .title { font-weight: 700; }
    .controls { display: flex; gap: 10px; align-items: center; flex-wrap: wrap; }
    select {
      background: var(--panel);
      color: var(--text);
      border: 1px solid var(--border);
      border-radius: 10px;
      padding: 8px 10px;
      min-width: min(700px, 80vw);
    }
    .legend { display: flex; gap: 10px; flex-wrap: wrap; color: var(--muted); font-size: 13px; }
    .swatch {
      width: 10px; height: 10px; border-radius: 3px;
      display: inline-block; border: 1px solid var(--border);
    }
    .swatch.covered-pass { background: var(--green); }
    .swatch.covered-fail { background: var(--orange); }
    .swatch.uncovered { background: transparent; }
    .fileHeader {
      display: flex; gap: 10px; align-items: baseline;
      justify-content: space-between; margin: 14px 2px 10px;
    }
    .filePath { font-family: ui-monospace, Menlo, Consolas, monospace; font-size: 13px; }
    .pill {
      border: 1px solid var(--border); padding: 4px 8px;
      border-radius: 999px; color: var(--muted); font-size: 12px;
    }
    .codePane { border: 1px solid var(--border); border-radius: 12px; overflow: hidden; }
    .row {
      display: grid;
      grid-template-columns: 64px 1fr auto;
      gap: 10px;
      padding: 2px 12px;
      font-family: ui-monospace, Menlo, Consolas, monospace;
      font-size: 12.5px;
      line-height: 1.6;
    }
    .ln { color: rgba(232, 238, 252, 0.35); text-align: right; user-select: none; }
    .code { white-space: pre; overflow-wrap: anywhere; }
    .hits { color: rgba(232, 238, 252, 0.45); font-size: 11.5px; user-select: none; }
    .covered-pass { background: var(--green); }
    .covered-fail { background: var(--orange); }
    .uncovered { background: transparent; }
"""

_SCRIPT = """
    (function () {
      const sel = document.getElementById('fileSel');
      function show(file) {
        document.querySelectorAll('section.file').forEach(function (s) {
          s.style.display = (s.getAttribute('data-file') === file) ? 'block' : 'none';
        });
      }
      sel.addEventListener('change', function () { show(sel.value); });
      show(sel.value);
    })();
"""

_LEGEND_TEXT = {
    LineStatus.COVERED_PASSING: "covered + passing",
    LineStatus.COVERED_FAILING: "covered + failing (from Jest stack traces)",
    LineStatus.UNCOVERED: "not covered",
}


def render_html_report(title: str, files: Sequence[FileCoverageRecord]) -> str:
    """Render the complete HTML document for *files*."""
    options = "".join(_render_option(f, selected=idx == 0) for idx, f in enumerate(files))
    sections = "\n".join(_render_section(f, visible=idx == 0) for idx, f in enumerate(files))
    legend = "\n".join(
        f'      <span><span class="swatch {status.css_class}"></span> {_LEGEND_TEXT[status]}</span>'
        for status in _LEGEND_TEXT
    )
    safe_title = escape_html(title)

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{safe_title}</title>
  <style>{_STYLE}  </style>
</head>
<body>
  <div class="wrap">
    <div class="topbar">
      <div class="title">{safe_title}</div>
      <div class="controls">
        <label for="fileSel" class="legend">File</label>
        <select id="fileSel" aria-label="file selector">{options}</select>
      </div>
    </div>
    <div class="legend" style="margin:10px 2px 0;">
{legend}
    </div>
{sections}
  </div>
  <script>{_SCRIPT}  </script>
</body>
</html>
"""


def _render_option(record: FileCoverageRecord, *, selected: bool) -> str:
    path = escape_html(record.rel_path)
    pct = f" — {pct_str(record.file_coverage_pct)}%" if record.file_coverage_pct is not None else ""
    selected_attr = " selected" if selected else ""
    return f'<option value="{path}"{selected_attr}>{path}{pct}</option>'


def _render_section(record: FileCoverageRecord, *, visible: bool) -> str:
    path = escape_html(record.rel_path)
    display = "block" if visible else "none"
    pill = (
        f'<span class="pill">line coverage: {pct_str(record.file_coverage_pct)}%</span>'
        if record.file_coverage_pct is not None
        else ""
    )
    rows = "\n".join(_render_row(line) for line in paint_lines(record))
    return f"""    <section class="file" data-file="{path}" style="display:{display}">
      <div class="fileHeader">
        <div class="filePath">{path}</div>
        <div class="fileMeta">{pill}</div>
      </div>
      <div class="codePane" role="region" aria-label="painted code">
{rows}
      </div>
    </section>"""


def _render_row(line: PaintedLine) -> str:
    hits_badge = f'<span class="hits">hits:{line.hits}</span>' if line.hits > 0 else ""
    return (
        f'        <div class="row {line.status.css_class}">'
        f'<span class="ln">{line.number}</span>'
        f'<span class="code">{escape_html(line.text)}</span>'
        f"{hits_badge}</div>"
    )
