"""Tests for the PR comment synchronizer."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest

from codepaint.reporters.github_comment import (
    COMMENT_MARKER,
    CommentStrategy,
    find_marked_comment,
    sync_comment,
    upsert_comment,
)
from codepaint.utils.git import GitHubAPIError, GitHubPRInfo

_PR = GitHubPRInfo(owner="octo", repo="app", pr_number=7)


class FakeTransport:
    """In-memory comment store implementing the comment transport protocol."""

    def __init__(self, comments: list[dict[str, Any]] | None = None) -> None:
        self.comments: list[dict[str, Any]] = list(comments or [])
        self.calls: list[str] = []
        self._next_id = 100

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]:
        self.calls.append("list")
        return [dict(c) for c in self.comments]

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]:
        self.calls.append("create")
        self._next_id += 1
        comment = {
            "id": self._next_id,
            "body": body,
            "html_url": f"https://github.com/octo/app/pull/7#issuecomment-{self._next_id}",
        }
        self.comments.append(comment)
        return dict(comment)

    def update_comment(
        self, pr_info: GitHubPRInfo, comment_id: int, body: str
    ) -> dict[str, Any]:
        self.calls.append("update")
        for comment in self.comments:
            if comment["id"] == comment_id:
                comment["body"] = body
                return dict(comment)
        raise GitHubAPIError(f"GitHub API error 404 Not Found: comment {comment_id}")

    def delete_comment(self, pr_info: GitHubPRInfo, comment_id: int) -> None:
        self.calls.append("delete")
        self.comments = [c for c in self.comments if c["id"] != comment_id]

    def marked(self) -> list[dict[str, Any]]:
        return [c for c in self.comments if COMMENT_MARKER in c["body"]]


def _body(text: str) -> str:
    return f"{COMMENT_MARKER}\n{text}"


# ── Tests: CommentStrategy ───────────────────────────────────────


class TestCommentStrategy:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("ADD", CommentStrategy.ADD),
            ("update", CommentStrategy.UPDATE),
            (" Remove ", CommentStrategy.REMOVE),
            ("bogus", CommentStrategy.UPDATE),
            ("", CommentStrategy.UPDATE),
            (None, CommentStrategy.UPDATE),
            (CommentStrategy.ADD, CommentStrategy.ADD),
        ],
    )
    def test_parse(self, value: Any, expected: CommentStrategy) -> None:
        assert CommentStrategy.parse(value) is expected


# ── Tests: find_marked_comment ───────────────────────────────────


def test_find_marked_comment_returns_first_match() -> None:
    comments = [
        {"id": 1, "body": "LGTM"},
        {"id": 2, "body": _body("old")},
        {"id": 3, "body": _body("older")},
        {"id": 4, "body": None},
    ]
    found = find_marked_comment(comments, COMMENT_MARKER)
    assert found is not None
    assert found["id"] == 2


def test_find_marked_comment_none() -> None:
    assert find_marked_comment([{"id": 1, "body": "hi"}], COMMENT_MARKER) is None


# ── Tests: sync_comment ──────────────────────────────────────────


class TestSyncComment:
    def test_update_creates_when_no_marked_comment(self) -> None:
        transport = FakeTransport([{"id": 1, "body": "human review"}])
        result = sync_comment(transport, _PR, "UPDATE", COMMENT_MARKER, _body("v1"))
        assert result.action == "created"
        assert result.comment_id == 101
        assert result.html_url.endswith("#issuecomment-101")
        assert len(transport.comments) == 2

    def test_update_twice_keeps_one_comment_with_latest_body(self) -> None:
        transport = FakeTransport()
        sync_comment(transport, _PR, CommentStrategy.UPDATE, COMMENT_MARKER, _body("v1"))
        result = sync_comment(transport, _PR, CommentStrategy.UPDATE, COMMENT_MARKER, _body("v2"))

        assert result.action == "updated"
        marked = transport.marked()
        assert len(marked) == 1
        assert marked[0]["body"] == _body("v2")

    def test_update_edits_in_place(self) -> None:
        transport = FakeTransport([{"id": 5, "body": _body("old")}])
        result = sync_comment(transport, _PR, "UPDATE", COMMENT_MARKER, _body("new"))
        assert result.comment_id == 5
        assert transport.calls == ["list", "update"]

    def test_remove_replaces_with_new_identity(self) -> None:
        transport = FakeTransport([{"id": 5, "body": _body("old")}])
        result = sync_comment(transport, _PR, "REMOVE", COMMENT_MARKER, _body("new"))

        assert result.action == "replaced"
        assert result.comment_id != 5
        assert transport.calls == ["list", "delete", "create"]
        assert [c["body"] for c in transport.marked()] == [_body("new")]

    def test_remove_without_existing_creates(self) -> None:
        transport = FakeTransport()
        result = sync_comment(transport, _PR, "REMOVE", COMMENT_MARKER, _body("new"))
        assert result.action == "created"
        assert transport.calls == ["list", "create"]

    def test_add_always_creates(self) -> None:
        transport = FakeTransport([{"id": 5, "body": _body("old")}])
        result = sync_comment(transport, _PR, "ADD", COMMENT_MARKER, _body("new"))
        assert result.action == "created"
        assert len(transport.marked()) == 2

    def test_unknown_strategy_behaves_as_update(self) -> None:
        transport = FakeTransport([{"id": 5, "body": _body("old")}])
        result = sync_comment(transport, _PR, "SOMETIMES", COMMENT_MARKER, _body("new"))
        assert result.action == "updated"
        assert len(transport.comments) == 1

    def test_marker_is_added_when_missing(self) -> None:
        transport = FakeTransport()
        sync_comment(transport, _PR, "UPDATE", COMMENT_MARKER, "no marker here")
        assert transport.comments[0]["body"] == f"{COMMENT_MARKER}\nno marker here"

    def test_transport_errors_propagate(self) -> None:
        transport = FakeTransport([{"id": 5, "body": _body("old")}])
        with (
            patch.object(transport, "update_comment", side_effect=GitHubAPIError("boom")),
            pytest.raises(GitHubAPIError, match="boom"),
        ):
            sync_comment(transport, _PR, "UPDATE", COMMENT_MARKER, _body("new"))


# ── Tests: upsert_comment ────────────────────────────────────────


def test_upsert_comment_requires_token() -> None:
    with pytest.raises(GitHubAPIError, match="token"):
        upsert_comment(token="", owner="octo", repo="app", pr_number=7, body=_body("x"))


def test_upsert_comment_uses_github_api() -> None:
    with patch("codepaint.reporters.github_comment.sync_comment") as mock_sync:
        upsert_comment(
            token="t0k3n",
            owner="octo",
            repo="app",
            pr_number=7,
            body=_body("x"),
            strategy="REMOVE",
        )
    transport, pr_info, strategy, marker, body = mock_sync.call_args.args
    assert pr_info == _PR
    assert strategy == "REMOVE"
    assert marker == COMMENT_MARKER
    assert body == _body("x")
    assert transport.__class__.__name__ == "GitHubAPI"
