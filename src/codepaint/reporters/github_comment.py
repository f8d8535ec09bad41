"""GitHub comment reporter: keep one marked coverage comment on a PR.

The published body carries a fixed HTML-comment marker. On each run the
comment list is fetched once, the first comment containing the marker is
treated as ours, and the configured strategy decides what happens:

- ``ADD``: always create a new comment;
- ``UPDATE``: edit the marked comment in place (create it if missing);
- ``REMOVE``: delete the marked comment and create a fresh one.

Only the first page of comments is inspected. Two runs racing on the same
PR may both create a comment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from codepaint.utils.git import GITHUB_API_BASE, GitHubAPI, GitHubPRInfo

logger = logging.getLogger(__name__)

COMMENT_MARKER = "<!-- code-painting-action -->"


class CommentStrategy(Enum):
    """How an existing marked comment is treated."""

    ADD = "ADD"
    UPDATE = "UPDATE"
    REMOVE = "REMOVE"

    @classmethod
    def parse(cls, value: str | CommentStrategy | None) -> CommentStrategy:
        """Match *value* case-insensitively; unknown values mean ``UPDATE``."""
        if isinstance(value, CommentStrategy):
            return value
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            logger.warning("Unknown comment strategy %r, using UPDATE", value)
            return cls.UPDATE


class CommentTransport(Protocol):
    """Comment operations needed by ``sync_comment``.

    ``GitHubAPI`` implements this; tests substitute an in-memory fake.
    """

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]: ...

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]: ...

    def update_comment(
        self, pr_info: GitHubPRInfo, comment_id: int, body: str
    ) -> dict[str, Any]: ...

    def delete_comment(self, pr_info: GitHubPRInfo, comment_id: int) -> None: ...


@dataclass(frozen=True)
class CommentSyncResult:
    """Outcome of a comment synchronization."""

    action: str
    """One of ``created``, ``updated`` or ``replaced``."""

    comment_id: int | None = None
    html_url: str = ""


def find_marked_comment(comments: list[dict[str, Any]], marker: str) -> dict[str, Any] | None:
    """Return the first comment whose body contains *marker*."""
    for comment in comments:
        body = comment.get("body")
        if isinstance(body, str) and marker in body:
            return comment
    return None


def sync_comment(
    transport: CommentTransport,
    pr_info: GitHubPRInfo,
    strategy: CommentStrategy | str,
    marker: str,
    body: str,
) -> CommentSyncResult:
    """Create, update or replace the marked comment on a pull request.

    Args:
        transport: Comment API implementation.
        pr_info: Target pull request.
        strategy: ``ADD``, ``UPDATE`` or ``REMOVE``.
        marker: Substring identifying our comment.
        body: New comment body; should contain *marker*.

    Returns:
        What was done and the resulting comment's identity.

    Raises:
        GitHubAPIError: If any API call fails.
    """
    strategy = CommentStrategy.parse(strategy)
    if marker not in body:
        logger.warning("Marker '%s' not found in comment body. Adding it.", marker)
        body = f"{marker}\n{body}"

    existing = find_marked_comment(transport.list_comments(pr_info), marker)

    if strategy is CommentStrategy.ADD or existing is None:
        logger.info("Creating new comment on PR #%d", pr_info.pr_number)
        return _result("created", transport.create_comment(pr_info, body))

    if strategy is CommentStrategy.REMOVE:
        logger.info("Replacing comment %s on PR #%d", existing["id"], pr_info.pr_number)
        transport.delete_comment(pr_info, existing["id"])
        return _result("replaced", transport.create_comment(pr_info, body))

    logger.info("Updating existing comment %s", existing["id"])
    return _result("updated", transport.update_comment(pr_info, existing["id"], body))


def upsert_comment(
    *,
    token: str,
    owner: str,
    repo: str,
    pr_number: int,
    body: str,
    strategy: CommentStrategy | str = CommentStrategy.UPDATE,
    marker: str = COMMENT_MARKER,
    api_base: str = GITHUB_API_BASE,
) -> CommentSyncResult:
    """Publish *body* to a pull request through the GitHub REST API.

    Raises:
        GitHubAPIError: If the token is missing or any API call fails.
    """
    api = GitHubAPI(token, api_base=api_base)
    pr_info = GitHubPRInfo(owner=owner, repo=repo, pr_number=pr_number)
    logger.info("Publishing coverage comment to PR #%d in %s/%s", pr_number, owner, repo)
    return sync_comment(api, pr_info, strategy, marker, body)


def _result(action: str, response: dict[str, Any] | None) -> CommentSyncResult:
    payload = response or {}
    comment_id = payload.get("id")
    return CommentSyncResult(
        action=action,
        comment_id=comment_id if isinstance(comment_id, int) else None,
        html_url=str(payload.get("html_url", "")),
    )
