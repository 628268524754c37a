"""
Per-frame rendering: one simulated minute of history to one RGB array.

Every file alive at the frame's active commit gets a vertical column, every
line a pixel row. Nothing here mutates the analysis, so frames can be
rendered in any order and in any process.
"""

from bisect import bisect_left, bisect_right

import numpy as np

from analyze.models import AnalysisResult, CommitterId, LineChange
from common.constants import BACKGROUND_COLOR

from .colors import heat_color
from .config import ColorMode, RenderConfig


def _timestamp(change: LineChange) -> int:
    return change.timestamp


def line_heat(history: list[LineChange], window_start: int, window_end: int) -> int:
    """Number of changes with ``window_start <= timestamp <= window_end``.

    Histories are in commit order, so timestamps are ascending.
    """
    lo = bisect_left(history, window_start, key=_timestamp)
    hi = bisect_right(history, window_end, key=_timestamp)
    return max(hi - lo, 0)


def last_committer(history: list[LineChange], timestamp: int) -> CommitterId | None:
    """Committer of the latest change at or before ``timestamp``."""
    idx = bisect_right(history, timestamp, key=_timestamp)
    if idx == 0:
        return None
    return history[idx - 1].committer_id


def pixel_layout(width: int, height: int, file_count: int, max_lines: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Map pixel columns to file indices and pixel rows to 0-based line indices.

    Columns split the width evenly across files; rows scale the height onto
    ``max_lines``. Both use floor, so each pixel maps to exactly one cell.
    """
    file_width = width / file_count
    columns = np.floor(np.arange(width) / file_width).astype(np.int64)
    rows = np.floor(np.arange(height) / height * max_lines).astype(np.int64)
    return np.minimum(columns, file_count), rows


def render_frame(
    analysis: AnalysisResult,
    index: int,
    config: RenderConfig,
    palette: np.ndarray,
) -> np.ndarray:
    """
    Render frame ``index`` as a ``(height, width, 3)`` ``uint8`` array.

    Args:
        analysis: The analyzed history
        index: Frame index; the frame shows ``start_time + index * 60``
        config: Frame size, window and color mode
        palette: Committer colors from committer_palette

    Returns:
        RGB pixel array
    """
    image = np.empty((config.height, config.width, 3), dtype=np.uint8)
    image[:, :] = BACKGROUND_COLOR

    current_time = analysis.frame_time(index)
    commit_time = analysis.active_commit_time(current_time)
    files = analysis.active_files(commit_time)
    if not files:
        return image

    line_counts = [info.line_count_at(commit_time) for info in files]
    max_lines = max(line_counts)
    if max_lines == 0:
        return image

    columns, rows = pixel_layout(config.width, config.height, len(files), max_lines)
    unique_rows, row_slots = np.unique(rows, return_inverse=True)

    # One cell per (file, distinct row); the extra file slot stays background
    cells = np.empty((len(files) + 1, len(unique_rows), 3), dtype=np.uint8)
    cells[:, :] = BACKGROUND_COLOR

    window_start = current_time - config.window_seconds
    for file_idx, info in enumerate(files):
        line_count = line_counts[file_idx]
        for slot, row in enumerate(unique_rows):
            if row >= line_count:
                break
            history = analysis.history_for(info.id, int(row) + 1)
            if not history:
                continue

            if config.mode is ColorMode.HEAT:
                cells[file_idx, slot] = heat_color(line_heat(history, window_start, current_time))
            else:
                committer_id = last_committer(history, current_time)
                if committer_id is not None and committer_id < len(palette):
                    cells[file_idx, slot] = palette[committer_id]

    image[:, :] = cells[columns[np.newaxis, :], row_slots.reshape(-1)[:, np.newaxis]]
    return image
