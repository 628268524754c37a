"""Tests for saving and loading analysis files."""

import json

import pytest

from analyze.analysis_io import load_analysis, save_analysis
from analyze.models import AnalysisResult, CommitterRegistry, FileInfo, LineChange


@pytest.fixture
def analysis():
    return AnalysisResult(
        files=(
            FileInfo(0, "src/a.py", birth_time=100, death_time=400, line_counts={100: 3, 200: 2}),
            FileInfo(1, "b.md", birth_time=200, line_counts={200: 7}),
        ),
        changes={
            (0, 2): [LineChange(200, 1)],
            (1, 5): [LineChange(300, 0), LineChange(400, 1)],
        },
        committers=CommitterRegistry(["alice", "bob"]),
        start_time=100,
        end_time=400,
        commits=(("c1", 100), ("c2", 200), ("c3", 300), ("c4", 400)),
    )


def test_saved_analysis_loads_back_equal(tmp_path, analysis):
    path = tmp_path / "nested" / "analysis.json"
    save_analysis(analysis, path)

    loaded = load_analysis(path)

    assert loaded == analysis
    assert loaded.commit_times == (100, 200, 300, 400)
    assert loaded.files[0].line_count_at(250) == 2


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_analysis(tmp_path / "missing.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_analysis(path)


def test_wrong_format_version(tmp_path):
    path = tmp_path / "old.json"
    path.write_text(json.dumps({"format_version": 99}))
    with pytest.raises(ValueError, match="Unsupported"):
        load_analysis(path)


def test_missing_fields(tmp_path):
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"format_version": 1, "files": []}))
    with pytest.raises(ValueError, match="Malformed"):
        load_analysis(path)
