"""Process-level outputs written to externally provided sink files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codepaint.utils.paths import pct_str

if TYPE_CHECKING:
    from pathlib import Path

    from codepaint.models.coverage import CoverageTotals, QualityGate

logger = logging.getLogger(__name__)


def format_action_outputs(
    *,
    report_dir: Path,
    index_html: Path,
    totals: CoverageTotals,
    gate: QualityGate,
) -> str:
    """Return ``key=value`` lines for the step output sink."""
    outputs = [
        f"report-dir={report_dir}",
        f"index-html={index_html}",
        f"line-coverage={pct_str(totals.lines.pct)}",
        f"branch-coverage={pct_str(totals.branches.pct)}",
        f"function-coverage={pct_str(totals.functions.pct)}",
        f"statement-coverage={pct_str(totals.statements.pct)}",
        f"quality-gate={gate.status.value}",
    ]
    return "\n".join(outputs) + "\n"


def append_to_sink(sink_path: Path, text: str) -> None:
    """Append *text* to a sink file such as ``GITHUB_OUTPUT``."""
    sink_path.parent.mkdir(parents=True, exist_ok=True)
    with sink_path.open("a", encoding="utf-8") as fh:
        fh.write(text)
    logger.debug("Appended %d characters to %s", len(text), sink_path)
