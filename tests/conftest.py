"""Shared fixtures: temporary git repositories with controlled history."""

import os
import subprocess
from pathlib import Path

import pytest

# Fixed base time for test commits (2023-11-14 22:13:20 UTC)
T0 = 1_700_000_000


class GitRepo:
    """A throwaway repository whose commits carry chosen times and authors."""

    def __init__(self, path: Path):
        self.path = path
        self.git("init", "-q")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str, env: dict | None = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            check=True,
            capture_output=True,
            text=True,
            env={**os.environ, **(env or {})},
        )
        return result.stdout

    def write(self, name: str, lines: list[str]) -> None:
        path = self.path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(f"{line}\n" for line in lines))

    def commit(self, timestamp: int, author: str = "Test User", message: str = "commit") -> str:
        """Stage everything and commit at ``timestamp`` as ``author``."""
        self.git("add", "-A")
        date = f"@{timestamp} +0000"
        self.git(
            "commit",
            "-q",
            "--allow-empty",
            "-m",
            message,
            env={
                "GIT_AUTHOR_NAME": author,
                "GIT_AUTHOR_DATE": date,
                "GIT_COMMITTER_DATE": date,
            },
        )
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(tmp_path):
    """Create an empty git repository."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    return GitRepo(repo_path)
