"""GitHub API utilities for codepaint.

Thin ``requests`` client for the issue-comment endpoints used to publish the
coverage summary on a pull request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from codepaint.errors import CodePaintError

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"

# Comments fetched in the single listing request
COMMENTS_PAGE_SIZE = 100

# Expected number of parts when splitting "owner/repo"
_OWNER_REPO_PARTS = 2

_NO_CONTENT = 204


@dataclass(frozen=True)
class GitHubPRInfo:
    """Information about a GitHub pull request."""

    owner: str
    """Repository owner (username or organization)."""

    repo: str
    """Repository name."""

    pr_number: int
    """Pull request number."""


class GitHubAPIError(CodePaintError):
    """Exception raised when GitHub API operations fail."""


class GitHubAPI:
    """Client for the GitHub issue-comment API.

    Every call checks the HTTP status and raises ``GitHubAPIError`` with the
    status code, reason phrase and response body on failure.
    """

    def __init__(
        self,
        token: str,
        *,
        api_base: str = GITHUB_API_BASE,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token with permission to write PR comments.
            api_base: REST API root (differs on GitHub Enterprise Server).
            session: Optional pre-configured ``requests`` session.

        Raises:
            GitHubAPIError: If no token is given.
        """
        if not token:
            raise GitHubAPIError("GitHub token required to publish PR comments.")

        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()
        self._session_headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]:
        """List comments on a pull request (first page only).

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = f"{self._issue_url(pr_info)}/comments"
        result = self._request("GET", url, params={"per_page": COMMENTS_PAGE_SIZE})
        if not isinstance(result, list):
            raise GitHubAPIError(f"Unexpected comment list payload from {url}")
        return [c for c in result if isinstance(c, dict)]

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]:
        """Create a new comment on a pull request.

        Args:
            pr_info: Pull request information.
            body: Comment body (markdown formatted).

        Returns:
            GitHub API response as a dictionary.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = f"{self._issue_url(pr_info)}/comments"
        result: dict[str, Any] = self._request("POST", url, json={"body": body})
        return result

    def update_comment(self, pr_info: GitHubPRInfo, comment_id: int, body: str) -> dict[str, Any]:
        """Update an existing comment on a pull request.

        Args:
            pr_info: Pull request information.
            comment_id: ID of the comment to update.
            body: New comment body (markdown formatted).

        Returns:
            GitHub API response as a dictionary.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = f"{self._comments_url(pr_info)}/{comment_id}"
        result: dict[str, Any] = self._request("PATCH", url, json={"body": body})
        return result

    def delete_comment(self, pr_info: GitHubPRInfo, comment_id: int) -> None:
        """Delete a comment.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = f"{self._comments_url(pr_info)}/{comment_id}"
        self._request("DELETE", url)

    def _issue_url(self, pr_info: GitHubPRInfo) -> str:
        return f"{self._api_base}/repos/{pr_info.owner}/{pr_info.repo}/issues/{pr_info.pr_number}"

    def _comments_url(self, pr_info: GitHubPRInfo) -> str:
        return f"{self._api_base}/repos/{pr_info.owner}/{pr_info.repo}/issues/comments"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request to the GitHub API and decode the JSON response.

        Args:
            method: HTTP method.
            url: Full API URL.
            **kwargs: Extra arguments for ``requests.Session.request``.

        Returns:
            Parsed JSON response, or None for ``204 No Content``.

        Raises:
            GitHubAPIError: If the request fails or returns a non-2xx status.
        """
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method, url, headers=self._session_headers, **kwargs
            )
        except requests.RequestException as exc:
            raise GitHubAPIError(f"{method} {url} failed: {exc}") from exc

        if not response.ok:
            raise GitHubAPIError(
                f"GitHub API error {response.status_code} {response.reason}: {response.text}"
            )

        if response.status_code == _NO_CONTENT or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(f"{method} {url} returned invalid JSON: {exc}") from exc


def parse_repository(repository: str | None) -> tuple[str, str] | None:
    """Split ``owner/repo`` into its parts.

    Returns:
        ``(owner, repo)``, or None when *repository* is not in that form.
    """
    if not repository:
        return None
    parts = repository.strip().split("/")
    if len(parts) != _OWNER_REPO_PARTS or not all(parts):
        return None
    return parts[0], parts[1]
