"""Coverage input adapters (LCOV trace and Istanbul summary)."""

from codepaint.adapters.coverage.istanbul import CoverageSummary, parse_summary, read_summary
from codepaint.adapters.coverage.lcov import parse_lcov, parse_lcov_file

__all__ = [
    "CoverageSummary",
    "parse_lcov",
    "parse_lcov_file",
    "parse_summary",
    "read_summary",
]
