"""
Render every frame of an analysis to numbered PNG files.

Frames are independent, so they are fanned out over a process pool. Each
worker receives the analysis and the committer palette once, through the
pool initializer, and treats them as read-only.
"""

from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

import numpy as np
from PIL import Image

from analyze.models import AnalysisResult
from common.constants import FRAME_FILENAME
from common.logger import get_logger

from .colors import committer_palette
from .config import RenderConfig
from .frames import render_frame

logger = get_logger(__name__)

# Frames submitted to the pool per worker before waiting
BATCH_PER_WORKER = 64

# Shared read-only state of a worker process
_worker: dict = {}


def frame_path(output_dir: Path, index: int) -> Path:
    return output_dir / FRAME_FILENAME.format(index=index)


def write_frame(image: np.ndarray, path: Path) -> Path:
    """Encode one RGB array as PNG."""
    Image.fromarray(image).save(path, format="PNG")
    return path


def _init_worker(analysis: AnalysisResult, config: RenderConfig, palette: np.ndarray, output_dir: Path) -> None:
    _worker.update(analysis=analysis, config=config, palette=palette, output_dir=output_dir)


def _render_and_write(index: int) -> int:
    image = render_frame(_worker["analysis"], index, _worker["config"], _worker["palette"])
    write_frame(image, frame_path(_worker["output_dir"], index))
    return index


def render_single_frame(
    analysis: AnalysisResult,
    config: RenderConfig,
    index: int,
    output_dir: Path,
) -> Path:
    """
    Render and write one frame, e.g. to preview a configuration.

    Raises:
        ValueError: If index is outside 0..frame_count-1
        OSError: If the output directory or file cannot be written
    """
    if not 0 <= index < analysis.frame_count:
        raise ValueError(f"Frame {index} out of range (0..{analysis.frame_count - 1})")

    output_dir.mkdir(parents=True, exist_ok=True)
    palette = committer_palette(len(analysis.committers))
    image = render_frame(analysis, index, config, palette)
    return write_frame(image, frame_path(output_dir, index))


def render_frames(
    analysis: AnalysisResult,
    config: RenderConfig,
    output_dir: Path,
    on_frame: Callable[[int], None] | None = None,
) -> int:
    """
    Render every frame from the first to the last commit minute.

    Frame ``i`` shows ``start_time + i * 60`` and is written to
    ``frame_{i:06d}.png``. Completion order is unspecified.

    Args:
        analysis: The analyzed history
        config: Frame size, window, color mode and worker count
        output_dir: Directory for the PNG files (created if missing)
        on_frame: Called in this process with each finished frame index

    Returns:
        Number of frames written

    Raises:
        OSError: If the directory or any frame cannot be written; the
            remaining frames are cancelled and the run stops
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    palette = committer_palette(len(analysis.committers))
    total = analysis.frame_count

    logger.info(
        f"Rendering [bold]{total}[/bold] frame(s) at {config.width}x{config.height}, "
        f"mode={config.mode.value}, window={config.window_days}d, workers={config.workers}"
    )

    if config.workers == 1:
        _init_worker(analysis, config, palette, output_dir)
        try:
            for index in range(total):
                _render_and_write(index)
                if on_frame:
                    on_frame(index)
        finally:
            _worker.clear()
        return total

    batch_size = config.workers * BATCH_PER_WORKER
    with ProcessPoolExecutor(
        max_workers=config.workers,
        initializer=_init_worker,
        initargs=(analysis, config, palette, output_dir),
    ) as pool:
        for batch_start in range(0, total, batch_size):
            futures = [
                pool.submit(_render_and_write, index)
                for index in range(batch_start, min(batch_start + batch_size, total))
            ]
            for future in as_completed(futures):
                try:
                    index = future.result()
                except BaseException:
                    for other in futures:
                        other.cancel()
                    raise
                if on_frame:
                    on_frame(index)

    return total
