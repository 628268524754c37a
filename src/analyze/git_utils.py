"""Thin wrappers around the git command line for history analysis.

Everything here is read-only: commits reachable from HEAD, tree-to-tree
diffs with rename detection, and blob line counts.
"""

import re
import subprocess
from stat import S_IFMT
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Literal

from common.constants import UNKNOWN_AUTHOR
from common.logger import get_logger

logger = get_logger(__name__)

# Gitlink entries (submodules) have no blob to read
GITLINK_MODE = "160000"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    '"': 0x22,
    "\\": 0x5C,
}


class GitError(RuntimeError):
    """Raised when a git command fails."""


@dataclass(frozen=True)
class CommitInfo:
    """A commit reachable from HEAD."""

    hash: str
    timestamp: int
    author: str


@dataclass(frozen=True)
class Hunk:
    """One ``@@`` block of a unified diff.

    ``lines`` holds ``(origin, text)`` pairs where origin is ``" "``, ``"+"``
    or ``"-"``.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[tuple[str, str], ...] = ()


@dataclass
class FileChange:
    """Represents a file change between two trees."""

    status: Literal["A", "D", "R", "M"]  # Added, Deleted, Renamed, Modified
    old_path: str | None
    new_path: str | None
    old_blob: str | None = None
    new_blob: str | None = None
    new_mode: str | None = None
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Current path: the new path, or the old one for deletions."""
        return self.new_path or self.old_path or ""


def _run_git(
    args: Iterable[str],
    *,
    cwd: Path,
    input: bytes | None = None,
) -> bytes:
    """Run a git sub-command and return raw stdout.

    Raises:
        GitError: If the repository path is missing or git exits non-zero
    """
    if not Path(cwd).is_dir():
        raise GitError(f"Repository path not found: {cwd}")

    try:
        completed = subprocess.run(
            ["git", "-c", "core.quotePath=false", *args],
            cwd=str(cwd),
            input=input,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed")
    return completed.stdout


def list_commits(repo_root: Path) -> list[CommitInfo]:
    """
    List every commit reachable from HEAD, oldest first.

    Commits are sorted by commit time. Equal timestamps keep reversed
    ``--topo-order`` position, so parents come before their children and
    the order is the same on every run.

    Args:
        repo_root: Path to git repository root

    Returns:
        Commits in processing order

    Raises:
        GitError: If the repository cannot be read or has no HEAD
    """
    output = _run_git(
        ["log", "--topo-order", "--format=%H%x1f%ct%x1f%an", "HEAD"],
        cwd=repo_root,
    ).decode("utf-8", errors="replace")

    commits: list[CommitInfo] = []
    for line in output.split("\n"):
        if not line:
            continue
        commit_hash, timestamp, author = line.split("\x1f", 2)
        commits.append(
            CommitInfo(
                hash=commit_hash,
                timestamp=int(timestamp),
                author=author or UNKNOWN_AUTHOR,
            )
        )

    commits.reverse()
    commits.sort(key=lambda c: c.timestamp)
    return commits


def empty_tree_id(repo_root: Path) -> str:
    """Return the object id of the empty tree for this repository's hash format."""
    return _run_git(["hash-object", "-t", "tree", "--stdin"], cwd=repo_root, input=b"").decode().strip()


def count_lines(data: bytes) -> int:
    """Count ``\\n``-terminated lines, plus a trailing unterminated one."""
    if not data:
        return 0
    return data.count(b"\n") + (0 if data.endswith(b"\n") else 1)


def count_blob_lines(repo_root: Path, blob_id: str, mode: str | None = None) -> int:
    """
    Count the lines of a blob.

    Args:
        repo_root: Path to git repository root
        blob_id: Full object id of the blob
        mode: Tree entry mode; gitlinks count as zero lines

    Raises:
        GitError: If the blob cannot be read
    """
    if mode == GITLINK_MODE:
        return 0
    return count_lines(_run_git(["cat-file", "blob", blob_id], cwd=repo_root))


def unquote_path(path: str) -> str:
    """
    Undo git's C-style quoting of unusual path names.

    Octal escapes are UTF-8 bytes, so ``"caf\\303\\251"`` decodes to ``café``.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 >= len(body):
            out.extend(char.encode("utf-8"))
            i += 1
            continue

        nxt = body[i + 1]
        octal = body[i + 1 : i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            out.append(int(octal, 8))
            i += 4
        elif nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
            i += 2
        else:
            out.extend(nxt.encode("utf-8"))
            i += 2

    return out.decode("utf-8", errors="replace")


def _parse_raw_line(line: str) -> FileChange:
    """Parse one ``--raw`` record, e.g. ``:100644 100644 <a> <b> R087\\told\\tnew``."""
    meta, *paths = line.split("\t")
    _old_mode, new_mode, old_blob, new_blob, status = meta[1:].split(" ")
    kind = status[0]

    if kind == "R":
        return FileChange(
            status="R",
            old_path=unquote_path(paths[0]),
            new_path=unquote_path(paths[1]),
            old_blob=old_blob,
            new_blob=new_blob,
            new_mode=new_mode,
        )
    if kind == "C":
        # A copy leaves the source untouched; the destination is a new file
        return FileChange(
            status="A",
            old_path=None,
            new_path=unquote_path(paths[1]),
            new_blob=new_blob,
            new_mode=new_mode,
        )

    path = unquote_path(paths[0])
    if kind == "A":
        return FileChange(status="A", old_path=None, new_path=path, new_blob=new_blob, new_mode=new_mode)
    if kind == "D":
        return FileChange(status="D", old_path=path, new_path=None, old_blob=old_blob)
    if kind not in ("M", "T"):
        logger.warning(f"Unknown git status '{status}' for file {path}, treating as Modified")

    return FileChange(
        status="M",
        old_path=path,
        new_path=path,
        old_blob=old_blob,
        new_blob=new_blob,
        new_mode=new_mode,
    )


def _is_type_change(line: str) -> bool:
    """True if a ``--raw`` record changes the file type, e.g. a file into a symlink."""
    old_mode, new_mode = line[1:].split(" ", 2)[:2]
    if old_mode == "000000" or new_mode == "000000":
        return False
    return S_IFMT(int(old_mode, 8)) != S_IFMT(int(new_mode, 8))


def _read_hunk(match: re.Match, lines: list[str], i: int) -> tuple[Hunk, int]:
    """Read the body of the hunk whose header matched; return it and the next index."""
    old_start, old_count, new_start, new_count = (
        int(match.group(1)),
        int(match.group(2) or 1),
        int(match.group(3)),
        int(match.group(4) or 1),
    )

    # Consume exactly as many body lines as the header announces
    body: list[tuple[str, str]] = []
    old_left, new_left = old_count, new_count
    while i < len(lines) and (old_left > 0 or new_left > 0 or lines[i].startswith("\\")):
        text = lines[i]
        i += 1
        origin = text[:1]
        if origin == "\\":
            # "\ No newline at end of file"
            continue
        if origin == "-":
            old_left -= 1
        elif origin == "+":
            new_left -= 1
        else:
            origin = " "
            old_left -= 1
            new_left -= 1
        body.append((origin, text[1:]))

    return Hunk(old_start, old_count, new_start, new_count, tuple(body)), i


def _parse_patch(lines: list[str]) -> list[list[Hunk]]:
    """Parse patch output into one hunk list per ``diff --git`` section."""
    sections: list[list[Hunk]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if line.startswith("diff --git "):
            sections.append([])
            continue

        match = _HUNK_HEADER.match(line)
        if match and sections:
            hunk, i = _read_hunk(match, lines, i)
            sections[-1].append(hunk)

    return sections


def diff_trees(repo_root: Path, old: str, new: str) -> list[FileChange]:
    """
    Diff two trees (or commits) with rename detection.

    Uses: git diff --raw -p -M --full-index old new

    Args:
        repo_root: Path to git repository root
        old: Old commit or tree id (the empty tree for a root commit)
        new: New commit id

    Returns:
        One FileChange per path, in git's output order, with hunks attached.
        Copies are reported as additions of the new path.

    Raises:
        GitError: If git fails or its output cannot be parsed
    """
    output = _run_git(
        [
            "diff",
            "--raw",
            "-p",
            "-M",
            "-U3",
            "--full-index",
            "--no-color",
            "--no-ext-diff",
            "--no-textconv",
            "--src-prefix=a/",
            "--dst-prefix=b/",
            old,
            new,
        ],
        cwd=repo_root,
    ).decode("utf-8", errors="replace")

    lines = output.split("\n")
    first_patch = next((i for i, line in enumerate(lines) if line.startswith("diff --git ")), len(lines))

    raw_lines = [line for line in lines[:first_patch] if line.startswith(":")]
    sections = _parse_patch(lines[first_patch:])

    # A type change is patched as a deletion followed by a creation
    spans = [2 if _is_type_change(line) else 1 for line in raw_lines]
    if sum(spans) != len(sections):
        raise GitError(
            f"Unexpected diff output for {old[:7]}..{new[:7]}: "
            f"{len(raw_lines)} raw entries but {len(sections)} patch sections"
        )

    changes = []
    pos = 0
    for line, span in zip(raw_lines, spans):
        change = _parse_raw_line(line)
        # For a type change keep the creation, which marks every new line changed
        change.hunks = sections[pos + span - 1]
        changes.append(change)
        pos += span

    return changes
