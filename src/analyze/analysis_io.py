"""Analysis file I/O utilities."""

import json
from pathlib import Path

from .models import AnalysisResult, CommitterRegistry, FileInfo, LineChange

FORMAT_VERSION = 1


def save_analysis(result: AnalysisResult, file_path: Path) -> None:
    """
    Write an AnalysisResult as JSON.

    Line histories are stored as ``[file_id, line_no, [[timestamp, committer_id], ...]]``
    triples because JSON object keys cannot be tuples.

    Args:
        result: Analysis to persist
        file_path: Path to write the file
    """
    data = {
        "format_version": FORMAT_VERSION,
        "start_time": result.start_time,
        "end_time": result.end_time,
        "committers": result.committers.names,
        "commits": [[commit_hash, ts] for commit_hash, ts in result.commits],
        "files": [
            {
                "id": info.id,
                "path": info.path,
                "birth_time": info.birth_time,
                "death_time": info.death_time,
                "line_counts": [[ts, count] for ts, count in info.line_counts.items()],
            }
            for info in result.files
        ],
        "changes": [
            [file_id, line_no, [[c.timestamp, c.committer_id] for c in history]]
            for (file_id, line_no), history in sorted(result.changes.items())
        ],
    }

    # Ensure parent directory exists
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)


def load_analysis(file_path: Path) -> AnalysisResult:
    """
    Read an AnalysisResult written by save_analysis.

    Args:
        file_path: Path to the analysis file

    Returns:
        AnalysisResult

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file format is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Analysis file not found: {file_path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Analysis file is not valid JSON: {file_path}") from e

    if not isinstance(data, dict) or data.get("format_version") != FORMAT_VERSION:
        raise ValueError(f"Unsupported analysis file format: {file_path}")

    try:
        files = tuple(
            FileInfo(
                id=item["id"],
                path=item["path"],
                birth_time=item["birth_time"],
                death_time=item.get("death_time"),
                line_counts={ts: count for ts, count in item["line_counts"]},
            )
            for item in data["files"]
        )
        changes = {
            (file_id, line_no): [LineChange(ts, committer_id) for ts, committer_id in history]
            for file_id, line_no, history in data["changes"]
        }
        return AnalysisResult(
            files=files,
            changes=changes,
            committers=CommitterRegistry(data["committers"]),
            start_time=data["start_time"],
            end_time=data["end_time"],
            commits=tuple((commit_hash, ts) for commit_hash, ts in data["commits"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed analysis file {file_path}: {e}") from e
