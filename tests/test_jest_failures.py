"""Tests for failure-location extraction from Jest JSON results."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from codepaint.adapters.unit.jest import (
    collect_failure_messages,
    extract_failure_locations,
    iter_locations,
    load_results_document,
)

if TYPE_CHECKING:
    from pathlib import Path

_ROOT = "/work/repo"


def _results(*failure_messages: str, suite_message: str = "") -> dict[str, Any]:
    return {
        "numFailedTests": len(failure_messages),
        "testResults": [
            {
                "name": "/work/repo/tests/a.test.js",
                "message": suite_message,
                "assertionResults": [
                    {"title": "adds", "status": "failed", "failureMessages": list(failure_messages)}
                ],
            }
        ],
    }


# ── Tests: iter_locations ────────────────────────────────────────


class TestIterLocations:
    def test_parenthesized_frame(self) -> None:
        text = "Error: boom\n    at Object.<anonymous> (/work/repo/src/a.js:3:5)"
        assert list(iter_locations(text)) == [("/work/repo/src/a.js", 3)]

    def test_bare_frame(self) -> None:
        text = "Error: boom\n    at /work/repo/src/a.js:12:1"
        assert list(iter_locations(text)) == [("/work/repo/src/a.js", 12)]

    def test_no_frames(self) -> None:
        assert list(iter_locations("expect(received).toBe(expected)")) == []


# ── Tests: collect_failure_messages ──────────────────────────────


class TestCollectFailureMessages:
    def test_collects_assertion_and_suite_messages(self) -> None:
        doc = _results("first", "second", suite_message="suite failed")
        assert collect_failure_messages(doc) == ["first", "second", "suite failed"]

    def test_tolerates_unexpected_shapes(self) -> None:
        doc = {
            "testResults": [
                "not a suite",
                {"assertionResults": "nope"},
                {"assertionResults": [None, {"failureMessages": "nope"}]},
            ]
        }
        assert collect_failure_messages(doc) == []

    def test_non_list_test_results(self) -> None:
        assert collect_failure_messages({"testResults": {}}) == []

    def test_none_document(self) -> None:
        assert collect_failure_messages(None) == []


# ── Tests: extract_failure_locations ─────────────────────────────


class TestExtractFailureLocations:
    def test_maps_frames_to_relative_paths(self) -> None:
        doc = _results(
            "Error: expected 3\n"
            "    at add (/work/repo/src/a.js:3:5)\n"
            "    at Object.<anonymous> (/work/repo/tests/a.test.js:8:10)",
        )
        assert extract_failure_locations(doc, _ROOT) == {
            "src/a.js": {3},
            "tests/a.test.js": {8},
        }

    def test_frames_from_other_checkouts_use_anchors(self) -> None:
        doc = _results("    at /home/runner/work/app/src/a.js:7:2")
        assert extract_failure_locations(doc, _ROOT) == {"src/a.js": {7}}

    def test_file_url_frames(self) -> None:
        doc = _results(
            "Error: boom\n"
            "    at add (file:///home/runner/work/app/src/a.js:3:5)\n"
            "    at file:///home/runner/work/app/src/b.js:9:1",
        )
        assert extract_failure_locations(doc, _ROOT) == {"src/a.js": {3}, "src/b.js": {9}}

    def test_suite_message_contributes(self) -> None:
        doc = _results(suite_message="● Test suite failed\n    at (/work/repo/src/b.js:1:1)")
        assert extract_failure_locations(doc, _ROOT) == {"src/b.js": {1}}

    def test_lines_are_deduplicated(self) -> None:
        doc = _results("at f (/work/repo/src/a.js:3:5)", "at g (/work/repo/src/a.js:3:9)")
        assert extract_failure_locations(doc, _ROOT) == {"src/a.js": {3}}

    def test_none_document_yields_nothing(self) -> None:
        assert extract_failure_locations(None, _ROOT) == {}


# ── Tests: load_results_document ─────────────────────────────────


def test_load_results_document(tmp_path: Path) -> None:
    path = tmp_path / "jest-results.json"
    path.write_text(json.dumps(_results("boom")), encoding="utf-8")
    doc = load_results_document(path)
    assert doc is not None
    assert "testResults" in doc


def test_load_results_document_missing(tmp_path: Path) -> None:
    assert load_results_document(tmp_path / "jest-results.json") is None


def test_load_results_document_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "jest-results.json"
    path.write_text("{truncated", encoding="utf-8")
    assert load_results_document(path) is None


def test_load_results_document_not_an_object(tmp_path: Path) -> None:
    path = tmp_path / "jest-results.json"
    path.write_text("[]", encoding="utf-8")
    assert load_results_document(path) is None
