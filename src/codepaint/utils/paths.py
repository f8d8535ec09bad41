"""Path and text helpers shared by parsers and reporters."""

from __future__ import annotations

import math
import posixpath
import re

# Anchors tried, in order, when a path is not under the repository root
_PROJECT_ANCHORS = ("/src/", "/tests/")

# URL schemes (file:, webpack:) and Windows drives
_SCHEME_RE = re.compile(r"^[A-Za-z][\w+.-]*:")

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


def to_posix(path: str) -> str:
    """Return *path* with Windows separators converted to ``/``."""
    return path.replace("\\", "/")


def normalize_to_repo_rel(repo_root: str, file_path: str | None) -> str | None:
    """Map a tool-specific or absolute path to a repository-relative path.

    Coverage tools and stack traces emit paths rooted in different places
    (container workspaces, temp directories). Resolution order:

    1. strip *repo_root* when the path lives under it;
    2. keep an already relative path (without ``..`` segments) as is;
    3. keep everything from the last ``/src/`` segment;
    4. keep everything from the last ``/tests/`` segment;
    5. fall back to the bare file name.

    Args:
        repo_root: Repository root directory.
        file_path: Path as reported by a tool.

    Returns:
        The repository-relative path, or None when *file_path* is empty.
    """
    if not file_path:
        return None

    norm = to_posix(file_path)
    root = to_posix(repo_root).rstrip("/")

    if root and norm.startswith(root + "/"):
        return norm[len(root) + 1 :]

    if _is_plain_relative(norm):
        return norm.removeprefix("./")

    anchored = norm if norm.startswith("/") else "/" + norm
    for anchor in _PROJECT_ANCHORS:
        idx = anchored.rfind(anchor)
        if idx >= 0:
            return anchored[idx + 1 :]

    return posixpath.basename(norm)


def escape_html(text: str) -> str:
    """Escape the five HTML-reserved characters in *text*."""
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)


def pct_str(value: float | None) -> str:
    """Format a percentage with two decimals (``0.00`` when not a finite number)."""
    if value is None or not math.isfinite(value):
        return "0.00"
    return f"{value:.2f}"


def _is_plain_relative(path: str) -> bool:
    """True for ``a/b.js`` style paths: no root, scheme or drive and no ``..`` segment."""
    if path.startswith("/") or _SCHEME_RE.match(path):
        return False
    return ".." not in path.split("/")
