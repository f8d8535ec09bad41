"""CI context detection utilities.

Only the entry point calls ``detect_ci_context``; everything downstream
receives the resulting values through ``CodePaintConfig``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codepaint.utils.git import GITHUB_API_BASE

if TYPE_CHECKING:
    from collections.abc import Mapping

_PULL_REF_PREFIX = "refs/pull/"
_PR_EVENTS = frozenset({"pull_request", "pull_request_target"})


@dataclass(frozen=True)
class CIContext:
    """Detected CI execution context."""

    workspace: str | None = None
    """Checked-out repository root."""

    repository: str | None = None
    """``owner/repo`` of the repository under test."""

    api_url: str = GITHUB_API_BASE
    """GitHub REST API root."""

    step_summary_path: str | None = None
    """File receiving the job summary fragment."""

    output_path: str | None = None
    """File receiving ``key=value`` step outputs."""

    pr_number: int | None = None
    """Pull request number when the run was triggered by a PR."""


def detect_ci_context(environ: Mapping[str, str] | None = None) -> CIContext:
    """Detect the CI context from environment variables.

    Args:
        environ: Environment to inspect (defaults to ``os.environ``).

    Returns:
        CIContext with detected values.
    """
    env = os.environ if environ is None else environ

    pr_number = None
    if env.get("GITHUB_ACTIONS") == "true" and env.get("GITHUB_EVENT_NAME", "") in _PR_EVENTS:
        pr_number = _pr_number_from_ref(env.get("GITHUB_REF"))

    # Outside Actions the GitHub variables are still honoured when exported by hand
    return CIContext(
        workspace=env.get("GITHUB_WORKSPACE") or None,
        repository=env.get("GITHUB_REPOSITORY") or None,
        api_url=env.get("GITHUB_API_URL") or GITHUB_API_BASE,
        step_summary_path=env.get("GITHUB_STEP_SUMMARY") or None,
        output_path=env.get("GITHUB_OUTPUT") or None,
        pr_number=pr_number,
    )


def _pr_number_from_ref(ref: str | None) -> int | None:
    """Extract ``<n>`` from ``refs/pull/<n>/merge``."""
    if not ref or not ref.startswith(_PULL_REF_PREFIX):
        return None
    return _parse_int(ref[len(_PULL_REF_PREFIX) :].split("/")[0])


def _parse_int(value: str | None) -> int | None:
    """Parse string to int, return None if invalid."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None
