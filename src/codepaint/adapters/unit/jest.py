"""Jest ``--json`` results reader: failure locations from stack traces.

Jest's JSON output contains a ``testResults`` array. Each suite has
``assertionResults`` whose ``failureMessages`` embed the error stack, plus an
optional suite-level ``message``. Frames such as
``at Object.<anonymous> (/workspace/src/a.js:3:5)`` point at the source
lines exercised by a failing test.

Only the two common V8 frame shapes are recognised; runtimes that format
frames differently simply contribute no locations.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from codepaint.utils.paths import normalize_to_repo_rel

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

logger = logging.getLogger(__name__)

# Each matcher captures (path, line, column); add new frame shapes here.
FAILURE_LOCATION_MATCHERS: tuple[re.Pattern[str], ...] = (
    # (path:line:col)
    re.compile(r"\(([^()]+):(\d+):(\d+)\)"),
    # at [<frame>] [scheme://]path:line:col
    re.compile(r"at (?:[^(\n]*[ \t]+)?((?:[A-Za-z][\w+.-]*://)?[^:\s()]+):(\d+):(\d+)"),
)


def load_results_document(results_path: Path) -> dict[str, object] | None:
    """Read the Jest results file, tolerating absence and corruption.

    Returns:
        The decoded JSON object, or None when the file is missing, unreadable
        or not a JSON object.
    """
    if not results_path.is_file():
        logger.debug("No Jest results at %s; skipping failure enrichment", results_path)
        return None

    try:
        data = json.loads(results_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable Jest results %s: %s", results_path, exc)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring Jest results %s: top-level value is not an object", results_path)
        return None
    return data


def collect_failure_messages(document: object) -> list[str]:
    """Return every failure message and suite message in a results document."""
    if not isinstance(document, dict):
        return []

    messages: list[str] = []
    raw_suites = document.get("testResults", [])
    suites: list[object] = raw_suites if isinstance(raw_suites, list) else []

    for suite_obj in suites:
        if not isinstance(suite_obj, dict):
            continue

        raw_assertions = suite_obj.get("assertionResults", [])
        assertions: list[object] = raw_assertions if isinstance(raw_assertions, list) else []
        for assertion in assertions:
            if not isinstance(assertion, dict):
                continue
            raw_failure_msgs = assertion.get("failureMessages", [])
            if isinstance(raw_failure_msgs, list):
                messages.extend(str(m) for m in raw_failure_msgs)

        suite_message = suite_obj.get("message")
        if suite_message:
            messages.append(str(suite_message))

    return messages


def iter_locations(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(path, line)`` for every frame reference found in *text*."""
    for matcher in FAILURE_LOCATION_MATCHERS:
        for match in matcher.finditer(text):
            yield match.group(1), int(match.group(2))


def extract_failure_locations(document: object, repo_root: str) -> dict[str, set[int]]:
    """Map repository-relative paths to lines implicated by failing tests.

    Args:
        document: Decoded Jest results, or None.
        repo_root: Repository root used to normalize frame paths.

    Returns:
        ``{relative path: {line numbers}}``; empty when *document* is None.
    """
    file_to_lines: dict[str, set[int]] = {}

    for text in collect_failure_messages(document):
        for path, line_number in iter_locations(text):
            rel_path = normalize_to_repo_rel(repo_root, path)
            if rel_path is None:
                continue
            file_to_lines.setdefault(rel_path, set()).add(line_number)

    if file_to_lines:
        logger.info("Found failure locations in %d files", len(file_to_lines))
    return file_to_lines
