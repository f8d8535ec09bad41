"""Per-line painting shared by the HTML, step-summary and Markdown renderers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from codepaint.models.coverage import FileCoverageRecord, LineStatus

DEFAULT_MAX_FILES = 5
DEFAULT_MAX_LINES_PER_FILE = 50


@dataclass(frozen=True)
class PaintedLine:
    """One source line with its coverage status."""

    number: int
    text: str
    hits: int
    status: LineStatus


@dataclass(frozen=True)
class PaintedFile:
    """A file prepared for a capped rendering."""

    record: FileCoverageRecord
    lines: list[PaintedLine]

    @property
    def truncated(self) -> bool:
        return len(self.lines) < self.record.line_count


@dataclass(frozen=True)
class CappedView:
    """At most ``max_files`` files, each cut to ``max_lines_per_file`` lines."""

    files: list[PaintedFile]
    hidden_file_count: int
    max_lines_per_file: int


def paint_lines(record: FileCoverageRecord, limit: int | None = None) -> list[PaintedLine]:
    """Classify the first *limit* lines of *record* (all lines when None)."""
    count = record.line_count if limit is None else min(record.line_count, limit)
    return [
        PaintedLine(
            number=idx + 1,
            text=record.source_lines[idx],
            hits=record.hits(idx + 1),
            status=record.status(idx + 1),
        )
        for idx in range(count)
    ]


def capped_view(
    files: Sequence[FileCoverageRecord],
    max_files: int = DEFAULT_MAX_FILES,
    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE,
) -> CappedView:
    """Select the files and lines shown by size-limited renderings."""
    shown = files[: max(max_files, 0)]
    return CappedView(
        files=[PaintedFile(record=f, lines=paint_lines(f, max_lines_per_file)) for f in shown],
        hidden_file_count=len(files) - len(shown),
        max_lines_per_file=max_lines_per_file,
    )
