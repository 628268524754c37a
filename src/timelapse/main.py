"""
Run the timelapse pipeline: analyze a repository, then render its frames.

Analysis is sequential; rendering fans out over worker processes. Both stages
report progress through rich and log a timing summary.
"""

import time
from datetime import datetime, timezone
from pathlib import Path

from analyze.analysis_io import load_analysis, save_analysis
from analyze.history import analyze_repository
from analyze.models import AnalysisResult
from common.logger import get_logger, progress_bar, success, warning
from render.config import RenderConfig
from render.pipeline import render_frames, render_single_frame

logger = get_logger(__name__)


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def analyze(repo_path: Path) -> AnalysisResult:
    """Analyze with a progress bar and log the span of the history."""
    started = time.perf_counter()

    with progress_bar() as bar:
        task = bar.add_task("Analyzing commits", total=None)
        result = analyze_repository(
            repo_path,
            progress=lambda _commit: bar.advance(task),
            on_start=lambda total: bar.update(task, total=total),
        )

    logger.info(
        f"Analysis finished in {time.perf_counter() - started:.2f}s. "
        f"History spans {_format_time(result.start_time)} to {_format_time(result.end_time)}"
    )
    return result


def render(
    analysis: AnalysisResult,
    config: RenderConfig,
    output_dir: Path,
    frame: int | None = None,
) -> int:
    """
    Render all frames, or only ``frame`` when given.

    Returns:
        Number of frames written
    """
    if not analysis.files:
        warning("No files in this history; frames are background only")

    started = time.perf_counter()

    if frame is not None:
        path = render_single_frame(analysis, config, frame, output_dir)
        success(f"Wrote {path}")
        return 1

    with progress_bar() as bar:
        task = bar.add_task("Rendering frames", total=analysis.frame_count)
        written = render_frames(analysis, config, output_dir, on_frame=lambda _i: bar.advance(task))

    success(f"Rendered {written} frame(s) to {output_dir} in {time.perf_counter() - started:.2f}s")
    return written


def run(repo_path: Path, config: RenderConfig, output_dir: Path, frame: int | None = None) -> int:
    """Analyze ``repo_path`` and render its frames into ``output_dir``."""
    started = time.perf_counter()
    analysis = analyze(repo_path)
    written = render(analysis, config, output_dir, frame)
    logger.info(f"Total time: {time.perf_counter() - started:.2f}s")
    return written


def analyze_to_file(repo_path: Path, analysis_path: Path) -> AnalysisResult:
    """Analyze ``repo_path`` and save the model for later rendering."""
    analysis = analyze(repo_path)
    save_analysis(analysis, analysis_path)
    success(f"Saved analysis to {analysis_path}")
    return analysis


def render_from_file(
    analysis_path: Path,
    config: RenderConfig,
    output_dir: Path,
    frame: int | None = None,
) -> int:
    """Render frames from a saved analysis."""
    analysis = load_analysis(analysis_path)
    logger.info(
        f"Loaded analysis: {len(analysis.files)} files, {len(analysis.committers)} committers"
    )
    return render(analysis, config, output_dir, frame)
