"""Data models for repository history analysis."""

from bisect import bisect_right
from dataclasses import dataclass, field

from common.constants import SECONDS_PER_MINUTE

CommitterId = int
FileId = int
LineKey = tuple[FileId, int]


@dataclass(frozen=True)
class LineChange:
    """One commit touching one line (insert or delete)."""

    timestamp: int
    committer_id: CommitterId


@dataclass
class FileInfo:
    """One logical file across its lifetime, surviving renames.

    ``line_counts`` maps commit timestamp to line count and is filled in
    commit order, so its keys are ascending.
    """

    id: FileId
    path: str
    birth_time: int
    death_time: int | None = None
    line_counts: dict[int, int] = field(default_factory=dict)
    _count_times: tuple[int, ...] = field(default=(), init=False, repr=False, compare=False)

    def is_alive_at(self, timestamp: int) -> bool:
        """True if born at or before ``timestamp`` and not yet deleted."""
        if self.birth_time > timestamp:
            return False
        return self.death_time is None or self.death_time > timestamp

    def line_count_at(self, timestamp: int) -> int:
        """Line count as of the latest recorded commit at or before ``timestamp``."""
        # Keys are only ever added, so a length mismatch means the cache is stale
        if len(self._count_times) != len(self.line_counts):
            self._count_times = tuple(self.line_counts)
        idx = bisect_right(self._count_times, timestamp)
        if idx == 0:
            return 0
        return self.line_counts[self._count_times[idx - 1]]


class CommitterRegistry:
    """Dense ids for committer names, in first-seen order."""

    def __init__(self, names: list[str] | None = None):
        self._names: list[str] = []
        self._ids: dict[str, CommitterId] = {}
        for name in names or []:
            self.register(name)

    def register(self, name: str) -> CommitterId:
        """Return the id for ``name``, assigning the next one if unseen."""
        committer_id = self._ids.get(name)
        if committer_id is None:
            committer_id = len(self._names)
            self._names.append(name)
            self._ids[name] = committer_id
        return committer_id

    def name_of(self, committer_id: CommitterId) -> str:
        return self._names[committer_id]

    def id_of(self, name: str) -> CommitterId | None:
        return self._ids.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self):
        return iter(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommitterRegistry):
            return NotImplemented
        return self._names == other._names

    def __repr__(self) -> str:
        return f"CommitterRegistry({self._names!r})"


@dataclass(frozen=True)
class AnalysisResult:
    """The complete, read-only outcome of walking a repository's history.

    ``files`` is indexed by file id. ``changes`` maps ``(file_id, line_no)``
    (1-based, numbering at the time of the change) to that line's
    chronological change history. ``commits`` lists ``(hash, timestamp)``
    in processing order.
    """

    files: tuple[FileInfo, ...]
    changes: dict[LineKey, list[LineChange]]
    committers: CommitterRegistry
    start_time: int
    end_time: int
    commits: tuple[tuple[str, int], ...]
    commit_times: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "commit_times", tuple(sorted({ts for _, ts in self.commits})))

    @property
    def total_minutes(self) -> int:
        """Whole minutes between the first and last commit."""
        return (self.end_time - self.start_time) // SECONDS_PER_MINUTE

    @property
    def frame_count(self) -> int:
        """One frame per minute, both ends included."""
        return self.total_minutes + 1

    @property
    def provenance_entries(self) -> int:
        """Total number of recorded line changes."""
        return sum(len(history) for history in self.changes.values())

    def frame_time(self, index: int) -> int:
        """Simulated wall-clock time of frame ``index``."""
        return self.start_time + index * SECONDS_PER_MINUTE

    def active_commit_time(self, timestamp: int) -> int:
        """Latest commit timestamp at or before ``timestamp``, else ``start_time``."""
        idx = bisect_right(self.commit_times, timestamp)
        if idx == 0:
            return self.start_time
        return self.commit_times[idx - 1]

    def active_files(self, commit_time: int) -> list[FileInfo]:
        """Files alive at ``commit_time``, in file id order."""
        return [f for f in self.files if f.is_alive_at(commit_time)]

    def history_for(self, file_id: FileId, line_no: int) -> list[LineChange]:
        """Change history for one line; empty when the line was never touched."""
        return self.changes.get((file_id, line_no), [])
