"""codepaint CLI: top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from codepaint import __version__
from codepaint.config import CodePaintConfig, load_config, validate_config
from codepaint.errors import CodePaintError
from codepaint.pipeline import ReportRunResult, run_report
from codepaint.utils.paths import pct_str

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)

_STRATEGY_CHOICES = ("ADD", "UPDATE", "REMOVE")

# Masking thresholds
_MIN_MASKED_VALUE_LENGTH = 8


def _configure_logging(*, verbose: bool) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _mask(value: str) -> str:
    if not value:
        return value
    if len(value) > _MIN_MASKED_VALUE_LENGTH:
        return f"{value[:4]}...{value[-4:]}"
    return "***"


def _config_to_dict(config: CodePaintConfig, *, mask: bool = True) -> dict[str, Any]:
    """Convert the config to a dictionary for display."""
    result = asdict(config)
    if mask:
        result["github_token"] = _mask(result["github_token"])
    return result


def _print_totals(result: ReportRunResult) -> None:
    table = Table(title="Coverage", show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Coverage", justify="right")
    table.add_column("Covered / Total", justify="right")
    for label, metric in result.totals.items():
        table.add_row(label, f"{pct_str(metric.pct)}%", f"{metric.covered} / {metric.total}")
    console.print(table)


@click.group()
@click.version_option(version=__version__, prog_name="codepaint")
def cli() -> None:
    """Paint source lines with coverage and failing-test evidence."""


@cli.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=None,
    help="Repository root (default: $GITHUB_WORKSPACE or the current directory).",
)
@click.option("--title", default=None, help="Report title.")
@click.option("--lcov-path", default=None, help="LCOV trace, relative to the root.")
@click.option("--summary-path", default=None, help="coverage-summary.json, relative to the root.")
@click.option("--results-path", default=None, help="Jest --json results, relative to the root.")
@click.option("--output-dir", default=None, help="Directory for the generated report.")
@click.option("--pr-number", type=int, default=None, help="Pull request to comment on.")
@click.option(
    "--github-token",
    envvar="GITHUB_TOKEN",
    default=None,
    help="Token for the PR comment (default: $GITHUB_TOKEN).",
)
@click.option(
    "--comments-strategy",
    type=click.Choice(_STRATEGY_CHOICES, case_sensitive=False),
    default=None,
    help="ADD a new comment, UPDATE the existing one, or REMOVE and re-create it.",
)
@click.option("--threshold", type=float, default=None, help="Minimum line coverage (%).")
@click.option("--max-files", type=int, default=None, help="Files shown in capped views.")
@click.option(
    "--max-lines-per-file", type=int, default=None, help="Lines per file in capped views."
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def report(  # noqa: PLR0913
    root: str | None,
    title: str | None,
    lcov_path: str | None,
    summary_path: str | None,
    results_path: str | None,
    output_dir: str | None,
    pr_number: int | None,
    github_token: str | None,
    comments_strategy: str | None,
    threshold: float | None,
    max_files: int | None,
    max_lines_per_file: int | None,
    *,
    verbose: bool,
) -> None:
    """Generate the painted coverage report (HTML, JSON, Markdown)."""
    _configure_logging(verbose=verbose)

    try:
        config = load_config(
            root,
            overrides={
                "title": title,
                "lcov_path": lcov_path,
                "summary_path": summary_path,
                "results_path": results_path,
                "output_dir": output_dir,
                "pr_number": pr_number,
                "github_token": github_token,
                "comments_strategy": comments_strategy,
                "coverage_threshold": threshold,
                "max_files": max_files,
                "max_lines_per_file": max_lines_per_file,
            },
        )
        for problem in validate_config(config):
            logger.warning("Config: %s", problem)

        result = run_report(config)
    except CodePaintError as exc:
        err_console.print(f"[red]✗[/red] {escape(str(exc))}")
        err_console.print_exception()
        raise SystemExit(1) from exc
    except Exception as exc:
        err_console.print(f"[red]✗[/red] Unexpected error: {escape(str(exc))}")
        err_console.print_exception()
        raise SystemExit(1) from exc

    _print_totals(result)
    console.print(f"Wrote report: {escape(str(result.index_html))}")
    if result.comment is not None:
        console.print(f"PR comment {result.comment.action}: {result.comment.html_url}")

    gate = result.gate
    color = "green" if gate.passed else "red"
    console.print(
        f"Quality gate (lines >= {gate.threshold:g}%): [{color}]{gate.status.value}[/{color}]"
    )


@cli.group("config")
def config_group() -> None:
    """Inspect codepaint configuration."""


@config_group.command("show")
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=None,
    help="Repository root (default: $GITHUB_WORKSPACE or the current directory).",
)
@click.option("--no-mask", is_flag=True, help="Show the token unmasked.")
def config_show(root: str | None, *, no_mask: bool) -> None:
    """Print the resolved configuration as JSON."""
    try:
        config = load_config(root)
    except CodePaintError as exc:
        err_console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise click.Abort from exc

    click.echo(json.dumps(_config_to_dict(config, mask=not no_mask), indent=2))
    for problem in validate_config(config):
        err_console.print(f"[yellow]⚠[/yellow] {problem}")
