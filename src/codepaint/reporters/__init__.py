"""Reporters for rendering and publishing painted coverage."""

from __future__ import annotations

from codepaint.reporters.builder import (
    RenderedReports,
    ReportOptions,
    build_reports,
    merge_file_records,
)
from codepaint.reporters.github_comment import (
    COMMENT_MARKER,
    CommentStrategy,
    sync_comment,
    upsert_comment,
)
from codepaint.reporters.json_reporter import JSONReporter, ReportInputs

__all__ = [
    "COMMENT_MARKER",
    "CommentStrategy",
    "JSONReporter",
    "RenderedReports",
    "ReportInputs",
    "ReportOptions",
    "build_reports",
    "merge_file_records",
    "sync_comment",
    "upsert_comment",
]
