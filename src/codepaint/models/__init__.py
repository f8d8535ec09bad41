"""Data models for codepaint."""

from codepaint.models.coverage import (
    CoverageMetric,
    CoverageTotals,
    FileCoverageRecord,
    GateStatus,
    LineStatus,
    QualityGate,
    classify_line,
)

__all__ = [
    "CoverageMetric",
    "CoverageTotals",
    "FileCoverageRecord",
    "GateStatus",
    "LineStatus",
    "QualityGate",
    "classify_line",
]
