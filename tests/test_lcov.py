"""Tests for the LCOV trace parser."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from codepaint.adapters.coverage.lcov import parse_lcov, parse_lcov_file
from codepaint.errors import MissingInputError

if TYPE_CHECKING:
    from pathlib import Path

_ROOT = "/work/repo"

_SAMPLE = """\
TN:
SF:/work/repo/src/math.js
FN:1,add
FNDA:4,add
DA:1,4
DA:2,0
DA:3,7
LF:3
LH:2
end_of_record
SF:/work/repo/src/strings.js
DA:1,1
end_of_record
"""


# ── Tests: parse_lcov ────────────────────────────────────────────


class TestParseLcov:
    def test_parses_records_per_file(self) -> None:
        result = parse_lcov(_SAMPLE, _ROOT)
        assert result == {
            "src/math.js": {1: 4, 2: 0, 3: 7},
            "src/strings.js": {1: 1},
        }

    def test_ignores_unrelated_record_types(self) -> None:
        result = parse_lcov(_SAMPLE, _ROOT)
        assert set(result["src/math.js"]) == {1, 2, 3}

    def test_malformed_line_data_is_skipped(self) -> None:
        text = "SF:src/a.js\nDA:1,1\nDA:x,2\nDA:3\nDA:4,abc\nDA:5,2\nend_of_record\n"
        assert parse_lcov(text, _ROOT) == {"src/a.js": {1: 1, 5: 2}}

    def test_checksum_field_is_accepted(self) -> None:
        text = "SF:src/a.js\nDA:7,3,Zm9vYmFy\nend_of_record\n"
        assert parse_lcov(text, _ROOT) == {"src/a.js": {7: 3}}

    def test_line_data_outside_record_is_ignored(self) -> None:
        text = "DA:1,1\nSF:src/a.js\nDA:2,1\nend_of_record\nDA:3,1\n"
        assert parse_lcov(text, _ROOT) == {"src/a.js": {2: 1}}

    def test_recurring_file_augments_existing_mapping(self) -> None:
        text = (
            "SF:/work/repo/src/a.js\nDA:1,1\nDA:2,0\nend_of_record\n"
            "SF:/ci/checkout/src/a.js\nDA:2,5\nDA:3,1\nend_of_record\n"
        )
        assert parse_lcov(text, _ROOT) == {"src/a.js": {1: 1, 2: 5, 3: 1}}

    def test_crlf_and_indentation(self) -> None:
        text = "SF:src/a.js\r\n  DA:1,2\r\nend_of_record\r\n"
        assert parse_lcov(text, _ROOT) == {"src/a.js": {1: 2}}

    def test_empty_sf_path_is_ignored(self) -> None:
        text = "SF:\nDA:1,1\nend_of_record\n"
        assert parse_lcov(text, _ROOT) == {}

    def test_empty_document(self) -> None:
        assert parse_lcov("", _ROOT) == {}


# ── Tests: parse_lcov_file ───────────────────────────────────────


def test_parse_lcov_file(tmp_path: Path) -> None:
    lcov = tmp_path / "coverage" / "lcov.info"
    lcov.parent.mkdir()
    lcov.write_text(f"SF:{tmp_path}/src/a.js\nDA:1,1\nend_of_record\n", encoding="utf-8")

    assert parse_lcov_file(lcov, str(tmp_path)) == {"src/a.js": {1: 1}}


def test_parse_lcov_file_missing(tmp_path: Path) -> None:
    with pytest.raises(MissingInputError, match="Missing LCOV file"):
        parse_lcov_file(tmp_path / "lcov.info", str(tmp_path))
