"""
Walk a repository's commits oldest to newest and build the line provenance model.

Each commit is diffed against the previously processed commit (the first one
against the empty tree) and the diff is folded into an AnalysisState:
file identities that survive renames, per-file line counts over time, and
per-line change histories keyed by (file id, line number).
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from common.logger import get_logger

from .git_utils import (
    CommitInfo,
    FileChange,
    Hunk,
    count_blob_lines,
    diff_trees,
    empty_tree_id,
    list_commits,
)
from .models import (
    AnalysisResult,
    CommitterId,
    CommitterRegistry,
    FileId,
    FileInfo,
    LineChange,
    LineKey,
)

logger = get_logger(__name__)

LineCounter = Callable[[FileChange], int]


def changed_line_numbers(hunks: Iterable[Hunk]) -> Iterator[int]:
    """
    Yield the 1-based line number of every inserted or removed line.

    The cursor starts at each hunk's new-file start and advances on context
    and inserted lines but not on removed ones, so a removed line is reported
    where it sat before the lines below it moved up, and an inserted line at
    its new position.
    """
    for hunk in hunks:
        cursor = hunk.new_start
        for origin, _text in hunk.lines:
            if origin in ("+", "-"):
                yield cursor
            if origin != "-":
                cursor += 1


@dataclass
class AnalysisState:
    """Mutable state threaded through the commit fold."""

    path_to_id: dict[str, FileId] = field(default_factory=dict)
    files: list[FileInfo] = field(default_factory=list)
    changes: dict[LineKey, list[LineChange]] = field(default_factory=dict)
    committers: CommitterRegistry = field(default_factory=CommitterRegistry)
    next_file_id: FileId = 0

    def add_file(self, path: str, commit_time: int, line_count: int) -> FileInfo:
        """Create a new identity for ``path``."""
        # A path maps to one live identity at a time
        self.delete_file(path, commit_time)

        info = FileInfo(
            id=self.next_file_id,
            path=path,
            birth_time=commit_time,
            line_counts={commit_time: line_count},
        )
        self.next_file_id += 1
        self.files.append(info)
        self.path_to_id[path] = info.id
        return info

    def delete_file(self, path: str, commit_time: int) -> FileInfo | None:
        """Retire the identity at ``path``; unknown paths are ignored."""
        file_id = self.path_to_id.pop(path, None)
        if file_id is None:
            return None
        info = self.files[file_id]
        info.death_time = commit_time
        return info

    def rename_file(self, old_path: str, new_path: str, commit_time: int) -> FileInfo | None:
        """Re-point ``old_path``'s identity to ``new_path``."""
        file_id = self.path_to_id.pop(old_path, None)
        if file_id is None:
            return None
        if new_path in self.path_to_id:
            self.delete_file(new_path, commit_time)

        info = self.files[file_id]
        info.path = new_path
        self.path_to_id[new_path] = file_id
        return info

    def modify_file(
        self,
        path: str,
        commit_time: int,
        line_count: int,
        hunks: Iterable[Hunk],
        committer_id: CommitterId,
    ) -> FileInfo | None:
        """Record a new line count and one LineChange per touched line."""
        file_id = self.path_to_id.get(path)
        if file_id is None:
            logger.debug(f"Modified path with no known identity: {path}")
            return None

        info = self.files[file_id]
        info.line_counts[commit_time] = line_count

        change = LineChange(timestamp=commit_time, committer_id=committer_id)
        for line_no in changed_line_numbers(hunks):
            self.changes.setdefault((file_id, line_no), []).append(change)
        return info

    def freeze(self, commits: list[CommitInfo]) -> AnalysisResult:
        """Package the state as an AnalysisResult."""
        return AnalysisResult(
            files=tuple(self.files),
            changes=self.changes,
            committers=self.committers,
            start_time=commits[0].timestamp if commits else 0,
            end_time=commits[-1].timestamp if commits else 0,
            commits=tuple((c.hash, c.timestamp) for c in commits),
        )


def apply_commit(
    state: AnalysisState,
    commit: CommitInfo,
    changes: Iterable[FileChange],
    line_counter: LineCounter,
) -> AnalysisState:
    """
    Fold one commit's diff into the state.

    - Added: fresh identity, seeded with the file's full line count
    - Deleted: identity retired (unknown paths are a no-op)
    - Renamed: identity follows the new path; content edits in the same
      commit are then applied as a modification of the new path
    - Modified: new line count plus line change records for every hunk line

    Args:
        state: State left by all earlier commits
        commit: The commit being applied
        changes: Its diff against the previously processed commit
        line_counter: Returns the post-commit line count for a change

    Returns:
        The same state, updated
    """
    committer_id = state.committers.register(commit.author)
    commit_time = commit.timestamp

    for change in changes:
        if change.status == "A":
            state.add_file(change.new_path, commit_time, line_counter(change))
        elif change.status == "D":
            state.delete_file(change.old_path, commit_time)
        elif change.status == "R":
            state.rename_file(change.old_path, change.new_path, commit_time)
            if change.hunks:
                state.modify_file(
                    change.new_path, commit_time, line_counter(change), change.hunks, committer_id
                )
        else:
            state.modify_file(
                change.new_path, commit_time, line_counter(change), change.hunks, committer_id
            )

    return state


def analyze_repository(
    repo_path: Path,
    progress: Callable[[CommitInfo], None] | None = None,
    on_start: Callable[[int], None] | None = None,
) -> AnalysisResult:
    """
    Analyze the full history reachable from HEAD.

    Args:
        repo_path: Path to the git repository
        progress: Called after each commit is applied
        on_start: Called once with the number of commits to process

    Returns:
        The frozen AnalysisResult

    Raises:
        GitError: If any git operation fails; no partial result is returned
    """
    repo_root = Path(repo_path).resolve()
    logger.info(f"Analyzing repository at {repo_root}")

    commits = list_commits(repo_root)
    logger.info(f"Found [bold]{len(commits)}[/bold] commit(s)")
    if on_start:
        on_start(len(commits))

    def line_counter(change: FileChange) -> int:
        return count_blob_lines(repo_root, change.new_blob, change.new_mode)

    state = AnalysisState()
    previous = empty_tree_id(repo_root)

    for commit in commits:
        logger.debug(f"Applying {commit.hash[:7]} by {commit.author} at {commit.timestamp}")
        apply_commit(state, commit, diff_trees(repo_root, previous, commit.hash), line_counter)
        previous = commit.hash
        if progress:
            progress(commit)

    result = state.freeze(commits)
    logger.info(
        f"[green]✓[/green] Analyzed {len(commits)} commits: "
        f"{len(result.files)} files, {len(result.committers)} committers, "
        f"{result.provenance_entries} line changes"
    )
    return result
