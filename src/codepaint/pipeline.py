"""End-to-end report run.

Reads the mandatory LCOV trace and coverage summary, the optional Jest
results, merges them per file, writes ``index.html``, ``report.json`` and
``summary.md``, then feeds the job summary, the step outputs and the PR
comment when those are configured.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codepaint.adapters.coverage.istanbul import read_summary
from codepaint.adapters.coverage.lcov import parse_lcov_file
from codepaint.adapters.unit.jest import extract_failure_locations, load_results_document
from codepaint.errors import MissingInputError
from codepaint.reporters.builder import ReportOptions, build_reports, merge_file_records
from codepaint.reporters.github_comment import COMMENT_MARKER, CommentSyncResult, upsert_comment
from codepaint.reporters.json_reporter import JSONReporter, ReportInputs
from codepaint.reporters.outputs import append_to_sink, format_action_outputs
from codepaint.utils.git import parse_repository

if TYPE_CHECKING:
    from pathlib import Path

    from codepaint.config import CodePaintConfig
    from codepaint.models.coverage import CoverageTotals, QualityGate

logger = logging.getLogger(__name__)

INDEX_HTML = "index.html"
REPORT_JSON = "report.json"
SUMMARY_MD = "summary.md"


@dataclass(frozen=True)
class ReportRunResult:
    """What a run produced."""

    report_dir: Path
    index_html: Path
    report_json: Path
    summary_md: Path
    gate: QualityGate
    totals: CoverageTotals
    file_count: int
    comment: CommentSyncResult | None = None


def _relative_to_root(config: CodePaintConfig, path: Path) -> str:
    return os.path.relpath(path, config.repo_root)


def run_report(config: CodePaintConfig) -> ReportRunResult:
    """Generate every artifact for *config*.

    Returns:
        Paths of the written artifacts, the gate verdict and the comment outcome.

    Raises:
        MissingInputError: If the LCOV trace or the summary is absent.
        MalformedInputError: If the summary is not valid JSON.
        GitHubAPIError: If publishing the PR comment fails (artifacts are
            already written at that point).
    """
    repo_root = config.repo_root
    lcov_file = config.lcov_file
    summary_file = config.summary_file
    results_file = config.results_file

    # Both mandatory inputs are checked before anything is written
    if not summary_file.is_file():
        raise MissingInputError(f"Missing coverage summary JSON: {summary_file}")
    if not lcov_file.is_file():
        raise MissingInputError(f"Missing LCOV file: {lcov_file}")

    summary = read_summary(summary_file)
    line_hits = parse_lcov_file(lcov_file, repo_root)
    results_document = load_results_document(results_file)
    failure_locations = extract_failure_locations(results_document, repo_root)

    files = merge_file_records(repo_root, line_hits, failure_locations, summary)

    options = ReportOptions(
        max_files=config.max_files,
        max_lines_per_file=config.max_lines_per_file,
        inputs=ReportInputs(
            lcov_path=_relative_to_root(config, lcov_file),
            coverage_summary_json=_relative_to_root(config, summary_file),
            jest_results_json=(
                _relative_to_root(config, results_file) if results_file.is_file() else None
            ),
        ),
    )
    reports = build_reports(config.title, summary.totals, config.coverage_threshold, files, options)

    report_dir = config.report_dir
    report_dir.mkdir(parents=True, exist_ok=True)
    index_html = report_dir / INDEX_HTML
    index_html.write_text(reports.html, encoding="utf-8")
    report_json = JSONReporter().generate(report_dir / REPORT_JSON, reports.json)
    summary_md = report_dir / SUMMARY_MD
    summary_md.write_text(reports.markdown, encoding="utf-8")
    logger.info("Wrote report artifacts to %s", report_dir)

    if config.step_summary_path:
        append_to_sink(config.resolve(config.step_summary_path), reports.step_summary_html)

    comment = _publish_comment(config, reports.markdown)

    if config.output_path:
        append_to_sink(
            config.resolve(config.output_path),
            format_action_outputs(
                report_dir=report_dir,
                index_html=index_html,
                totals=summary.totals,
                gate=reports.gate,
            ),
        )

    return ReportRunResult(
        report_dir=report_dir,
        index_html=index_html,
        report_json=report_json,
        summary_md=summary_md,
        gate=reports.gate,
        totals=summary.totals,
        file_count=len(files),
        comment=comment,
    )


def _publish_comment(config: CodePaintConfig, markdown: str) -> CommentSyncResult | None:
    """Post the summary to the PR when a PR number, token and repository are known."""
    owner_repo = parse_repository(config.repository)
    if config.pr_number is None or not config.github_token or owner_repo is None:
        logger.debug("PR comment skipped (needs PR number, token and owner/repo)")
        return None

    owner, repo = owner_repo
    return upsert_comment(
        token=config.github_token,
        owner=owner,
        repo=repo,
        pr_number=config.pr_number,
        body=f"{COMMENT_MARKER}\n{markdown}",
        strategy=config.strategy,
        marker=COMMENT_MARKER,
        api_base=config.api_base,
    )
