"""Configuration parsing from ``.codepaint.yml``, action inputs and flags.

Sources, lowest precedence first:

1. built-in defaults;
2. ``.codepaint.yml`` in the repository root (``${VAR}`` placeholders are
   expanded from the environment);
3. GitHub Actions inputs (``INPUT_LCOV_PATH`` and friends);
4. explicit overrides, usually CLI flags.

The result is a single frozen ``CodePaintConfig`` built once by the entry
point and passed to the pipeline.
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from codepaint.errors import MalformedInputError
from codepaint.reporters.github_comment import CommentStrategy
from codepaint.utils.ci_context import CIContext, detect_ci_context
from codepaint.utils.git import GITHUB_API_BASE

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".codepaint.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

# Action input name -> CodePaintConfig field
INPUT_FIELDS: dict[str, str] = {
    "title": "title",
    "lcov-path": "lcov_path",
    "coverage-summary-json": "summary_path",
    "jest-results-json": "results_path",
    "output-dir": "output_dir",
    "pr-number": "pr_number",
    "github-token": "github_token",
    "comments-strategy": "comments_strategy",
    "coverage-threshold": "coverage_threshold",
    "max-files": "max_files",
    "max-lines-per-file": "max_lines_per_file",
}

_MAX_PERCENTAGE = 100.0


@dataclass(frozen=True)
class CodePaintConfig:
    """Resolved settings for one report run."""

    repo_root: str
    """Repository root; relative paths below resolve against it."""

    title: str = "Code Painting"
    """Report title."""

    lcov_path: str = "coverage/lcov.info"
    """LCOV trace (mandatory)."""

    summary_path: str = "coverage/coverage-summary.json"
    """Istanbul json-summary document (mandatory)."""

    results_path: str = "jest-results.json"
    """Jest ``--json`` results (optional)."""

    output_dir: str = "code-painting-report"
    """Directory receiving index.html, report.json and summary.md."""

    pr_number: int | None = None
    """Pull request to comment on."""

    github_token: str = ""
    """Token used for the PR comment."""

    comments_strategy: str = CommentStrategy.UPDATE.value
    """ADD, UPDATE or REMOVE."""

    coverage_threshold: float = 80.0
    """Minimum line coverage percentage for a passing gate."""

    max_files: int = 5
    """Files shown in the capped views."""

    max_lines_per_file: int = 50
    """Lines per file shown in the capped views."""

    repository: str | None = None
    """``owner/repo`` for the PR comment."""

    api_base: str = GITHUB_API_BASE
    """GitHub REST API root."""

    step_summary_path: str | None = None
    """Job summary sink."""

    output_path: str | None = None
    """Step output sink."""

    def resolve(self, path: str) -> Path:
        """Resolve *path* against the repository root."""
        return (Path(self.repo_root) / path).resolve()

    @property
    def lcov_file(self) -> Path:
        return self.resolve(self.lcov_path)

    @property
    def summary_file(self) -> Path:
        return self.resolve(self.summary_path)

    @property
    def results_file(self) -> Path:
        return self.resolve(self.results_path)

    @property
    def report_dir(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def strategy(self) -> CommentStrategy:
        return CommentStrategy.parse(self.comments_strategy)


def _resolve_env_vars(value: str, environ: Mapping[str, str]) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def input_env_name(name: str) -> str:
    """Return the environment variable GitHub Actions uses for input *name*."""
    return "INPUT_" + name.upper().replace(" ", "_").replace("-", "_")


def _load_config_file(root: Path, environ: Mapping[str, str]) -> dict[str, Any]:
    """Read ``.codepaint.yml`` as ``{field: value}``; empty when absent.

    Raises:
        MalformedInputError: If the file is not valid YAML.
    """
    config_file = root / CONFIG_FILE_NAME
    if not config_file.is_file():
        return {}

    try:
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise MalformedInputError(f"Invalid {CONFIG_FILE_NAME}: {exc}") from exc

    if not isinstance(parsed, dict):
        logger.warning("Ignoring %s: top-level value is not a mapping", config_file)
        return {}

    values: dict[str, Any] = {}
    for key, value in parsed.items():
        name = str(key).replace("_", "-")
        field_name = INPUT_FIELDS.get(name)
        if field_name is None:
            logger.warning("Unknown key %r in %s", key, config_file)
            continue
        values[field_name] = _resolve_env_vars(value, environ) if isinstance(value, str) else value
    return values


def _load_action_inputs(environ: Mapping[str, str]) -> dict[str, Any]:
    """Read non-blank ``INPUT_*`` variables as ``{field: value}``."""
    values: dict[str, Any] = {}
    for name, field_name in INPUT_FIELDS.items():
        raw = environ.get(input_env_name(name))
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()
    return values


def _as_float(value: object, default: float) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Expected a number, got %r; using %s", value, default)
        return default
    return number if math.isfinite(number) else default


def _as_int(value: object, default: int) -> int:
    return int(_as_float(value, float(default)))


def _as_pr_number(value: object) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning("Ignoring invalid PR number %r", value)
        return None


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Convert raw string/YAML values to the field types."""
    defaults = {f.name: f.default for f in fields(CodePaintConfig)}
    result: dict[str, Any] = {}
    for name, value in values.items():
        if value is None:
            continue
        if name == "pr_number":
            result[name] = _as_pr_number(value)
        elif name == "coverage_threshold":
            result[name] = _as_float(value, defaults[name])
        elif name in {"max_files", "max_lines_per_file"}:
            result[name] = _as_int(value, defaults[name])
        else:
            result[name] = str(value)
    return result


def load_config(
    root: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    ci_context: CIContext | None = None,
) -> CodePaintConfig:
    """Build the run configuration.

    Args:
        root: Repository root; defaults to ``GITHUB_WORKSPACE`` or the cwd.
        environ: Environment to read (defaults to ``os.environ``).
        overrides: Highest-precedence values keyed by field name; None
            values are ignored.
        ci_context: Pre-detected CI context (detected from *environ* if None).

    Returns:
        The resolved configuration.

    Raises:
        MalformedInputError: If ``.codepaint.yml`` is not valid YAML.
    """
    env = os.environ if environ is None else environ
    ci = ci_context or detect_ci_context(env)
    root_path = Path(root or ci.workspace or Path.cwd()).resolve()

    values: dict[str, Any] = {
        "repository": ci.repository,
        "api_base": ci.api_url,
        "step_summary_path": ci.step_summary_path,
        "output_path": ci.output_path,
        "pr_number": ci.pr_number,
    }
    values.update(_coerce(_load_config_file(root_path, env)))
    values.update(_coerce(_load_action_inputs(env)))
    if overrides:
        values.update(_coerce({k: v for k, v in overrides.items() if v is not None}))

    config = CodePaintConfig(repo_root=str(root_path))
    return replace(config, **values)


def validate_config(config: CodePaintConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not 0.0 <= config.coverage_threshold <= _MAX_PERCENTAGE:
        errors.append(
            f"coverage-threshold must be between 0 and 100 (got: {config.coverage_threshold})"
        )

    if config.max_files < 0:
        errors.append(f"max-files must not be negative (got: {config.max_files})")

    if config.max_lines_per_file < 0:
        errors.append(
            f"max-lines-per-file must not be negative (got: {config.max_lines_per_file})"
        )

    valid_strategies = {s.value for s in CommentStrategy}
    if config.comments_strategy.strip().upper() not in valid_strategies:
        errors.append(
            f"comments-strategy must be one of {', '.join(sorted(valid_strategies))} "
            f"(got: {config.comments_strategy}); UPDATE will be used"
        )

    return errors
