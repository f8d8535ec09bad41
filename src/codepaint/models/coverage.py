"""Coverage report models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


def _to_number(value: object, default: float = 0.0) -> float:
    """Coerce *value* to a finite ``float``, defaulting to *default*."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


@dataclass(frozen=True)
class CoverageMetric:
    """Covered/total counts for one metric (lines, branches, ...)."""

    covered: int = 0
    """Number of covered items."""

    total: int = 0
    """Number of instrumented items."""

    pct: float = 0.0
    """Coverage percentage (0.0 to 100.0)."""

    @classmethod
    def from_counts(cls, covered: int, total: int) -> CoverageMetric:
        """Build a metric and derive the percentage from the counts."""
        total = max(total, 0)
        covered = min(max(covered, 0), total)
        pct = (covered / total) * 100.0 if total > 0 else 0.0
        return cls(covered=covered, total=total, pct=pct)

    @classmethod
    def from_raw(cls, raw: object) -> CoverageMetric:
        """Build a metric from a loosely shaped summary sub-object.

        Missing or non-numeric fields default to zero. Istanbul writes
        ``"pct": "Unknown"`` for empty totals, which also reads as zero
        after falling back to the derived percentage.
        """
        if not isinstance(raw, dict):
            return cls()

        metric = cls.from_counts(
            int(_to_number(raw.get("covered"))),
            int(_to_number(raw.get("total"))),
        )
        pct = _to_number(raw.get("pct"), default=math.nan)
        if math.isnan(pct):
            return metric
        return cls(covered=metric.covered, total=metric.total, pct=pct)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the summary document's field names."""
        return {"covered": self.covered, "total": self.total, "pct": self.pct}


@dataclass(frozen=True)
class CoverageTotals:
    """The four aggregated metrics of a run or of a single file."""

    lines: CoverageMetric = field(default_factory=CoverageMetric)
    branches: CoverageMetric = field(default_factory=CoverageMetric)
    functions: CoverageMetric = field(default_factory=CoverageMetric)
    statements: CoverageMetric = field(default_factory=CoverageMetric)

    @classmethod
    def from_raw(cls, raw: object) -> CoverageTotals:
        """Build totals from a summary record, defaulting absent metrics."""
        if not isinstance(raw, dict):
            return cls()
        return cls(
            lines=CoverageMetric.from_raw(raw.get("lines")),
            branches=CoverageMetric.from_raw(raw.get("branches")),
            functions=CoverageMetric.from_raw(raw.get("functions")),
            statements=CoverageMetric.from_raw(raw.get("statements")),
        )

    def items(self) -> list[tuple[str, CoverageMetric]]:
        """Return ``(label, metric)`` pairs in display order."""
        return [
            ("Lines", self.lines),
            ("Branches", self.branches),
            ("Functions", self.functions),
            ("Statements", self.statements),
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "lines": self.lines.to_dict(),
            "branches": self.branches.to_dict(),
            "functions": self.functions.to_dict(),
            "statements": self.statements.to_dict(),
        }


class LineStatus(Enum):
    """Three-way classification of a rendered source line."""

    UNCOVERED = "uncovered"
    COVERED_PASSING = "covered-passing"
    COVERED_FAILING = "covered-failing"

    @property
    def css_class(self) -> str:
        """CSS class used by the HTML renderings."""
        return _CSS_CLASSES[self]

    @property
    def glyph(self) -> str:
        """Marker used by the Markdown and step-summary renderings."""
        return _GLYPHS[self]

    @property
    def label(self) -> str:
        """Legend text for this status."""
        return _LABELS[self]


_CSS_CLASSES = {
    LineStatus.UNCOVERED: "uncovered",
    LineStatus.COVERED_PASSING: "covered-pass",
    LineStatus.COVERED_FAILING: "covered-fail",
}

_GLYPHS = {
    LineStatus.UNCOVERED: "❌",
    LineStatus.COVERED_PASSING: "✅",
    LineStatus.COVERED_FAILING: "⚠️",
}

_LABELS = {
    LineStatus.UNCOVERED: "Not covered by tests",
    LineStatus.COVERED_PASSING: "Covered by tests (passing)",
    LineStatus.COVERED_FAILING: "Covered by tests (failing - appears in Jest error stack traces)",
}

# Legend order shared by every rendering
LEGEND_ORDER = (LineStatus.COVERED_PASSING, LineStatus.COVERED_FAILING, LineStatus.UNCOVERED)


def classify_line(hits: int, failing: bool) -> LineStatus:
    """Return the status of a line given its hit count and failure evidence."""
    if hits <= 0:
        return LineStatus.UNCOVERED
    if failing:
        return LineStatus.COVERED_FAILING
    return LineStatus.COVERED_PASSING


@dataclass(frozen=True)
class FileCoverageRecord:
    """Merged coverage and failure evidence for one source file.

    Built once by the pipeline and only read afterwards; ``line_hits`` is
    exposed as a read-only mapping and ``failing_lines`` as a frozenset.
    """

    rel_path: str
    """Repository-relative path (unique key)."""

    source_lines: tuple[str, ...]
    """Source text lines; line ``n`` is ``source_lines[n - 1]``."""

    line_hits: Mapping[int, int]
    """Sparse line number -> hit count mapping (instrumented lines only)."""

    failing_lines: frozenset[int] = frozenset()
    """Lines referenced by at least one failure message."""

    file_coverage_pct: float | None = None
    """Line coverage of this file from the summary, if listed there."""

    @classmethod
    def build(
        cls,
        rel_path: str,
        source_lines: Iterable[str],
        line_hits: Mapping[int, int],
        failing_lines: Iterable[int] = (),
        file_coverage_pct: float | None = None,
    ) -> FileCoverageRecord:
        """Create a record, freezing the supplied collections."""
        return cls(
            rel_path=rel_path,
            source_lines=tuple(source_lines),
            line_hits=MappingProxyType(dict(line_hits)),
            failing_lines=frozenset(failing_lines),
            file_coverage_pct=file_coverage_pct,
        )

    def hits(self, line_number: int) -> int:
        """Return the hit count of *line_number* (0 when not instrumented)."""
        return self.line_hits.get(line_number, 0)

    def status(self, line_number: int) -> LineStatus:
        """Return the ``LineStatus`` of *line_number*."""
        return classify_line(self.hits(line_number), line_number in self.failing_lines)

    @property
    def line_count(self) -> int:
        return len(self.source_lines)

    @property
    def covered_line_count(self) -> int:
        """Number of instrumented lines with at least one hit."""
        return sum(1 for count in self.line_hits.values() if count > 0)

    @property
    def instrumented_line_count(self) -> int:
        return len(self.line_hits)

    @property
    def failing_line_count(self) -> int:
        return len(self.failing_lines)


class GateStatus(Enum):
    """Quality gate verdict."""

    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True)
class QualityGate:
    """Pass/fail verdict of aggregate line coverage against a threshold."""

    threshold: float
    value: float
    status: GateStatus
    metric: str = "lines"

    @classmethod
    def evaluate(cls, value: float, threshold: float) -> QualityGate:
        """Compare *value* to *threshold*; reaching the threshold passes."""
        status = GateStatus.PASS if value >= threshold else GateStatus.FAIL
        return cls(threshold=threshold, value=value, status=status)

    @property
    def passed(self) -> bool:
        return self.status is GateStatus.PASS

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "threshold": self.threshold,
            "value": self.value,
            "status": self.status.value,
        }
