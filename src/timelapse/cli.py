#!/usr/bin/env python3
"""CLI interface for git-timelapse."""

import argparse
from pathlib import Path

from analyze.git_utils import GitError
from common.env import env
from common.logger import error, setup_logging
from render.config import ColorMode, RenderConfig

from .main import analyze_to_file, render_from_file, run


def _render_config(args) -> RenderConfig:
    return RenderConfig(
        width=args.width,
        height=args.height,
        window_days=args.window_days,
        mode=ColorMode(args.mode),
        workers=args.workers,
    )


def cmd_run(args):
    """Analyze a repository and render its frames.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    run(args.repo, _render_config(args), args.output, frame=args.frame)
    return 0


def cmd_analyze(args):
    """Analyze a repository and save the model as JSON."""
    analyze_to_file(args.repo, args.save)
    return 0


def cmd_render(args):
    """Render frames from a saved analysis."""
    render_from_file(args.analysis, _render_config(args), args.output, frame=args.frame)
    return 0


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        required=True,
        help="Directory to write PNG frames to",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=env.frame_width(),
        help="Frame width in pixels (default: TIMELAPSE_WIDTH or 1280)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=env.frame_height(),
        help="Frame height in pixels (default: TIMELAPSE_HEIGHT or 720)",
    )
    parser.add_argument(
        "--window-days",
        type=int,
        default=env.window_days(),
        help="Sliding window for heat, in days (default: TIMELAPSE_WINDOW_DAYS or 30)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ColorMode],
        default=env.color_mode(),
        help="heat: color by recent edit count; committer: color by last committer",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=env.workers(),
        help="Rendering processes (default: TIMELAPSE_WORKERS or CPU count)",
    )
    parser.add_argument(
        "--frame",
        type=int,
        default=None,
        help="Render only this frame index (preview)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Render a git repository's history as per-minute line heatmap frames"
    )
    parser.add_argument(
        "--log-level",
        default=env.log_level(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Analyze a repository and render its frames")
    run_parser.add_argument(
        "--repo",
        "-r",
        type=Path,
        required=True,
        help="Path to the git repository to analyze",
    )
    _add_render_arguments(run_parser)
    run_parser.set_defaults(func=cmd_run)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a repository and save the model")
    analyze_parser.add_argument(
        "--repo",
        "-r",
        type=Path,
        required=True,
        help="Path to the git repository to analyze",
    )
    analyze_parser.add_argument(
        "--save",
        "-s",
        type=Path,
        required=True,
        help="JSON file to write the analysis to",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    render_parser = subparsers.add_parser("render", help="Render frames from a saved analysis")
    render_parser.add_argument(
        "--analysis",
        "-a",
        type=Path,
        required=True,
        help="JSON file written by 'analyze'",
    )
    _add_render_arguments(render_parser)
    render_parser.set_defaults(func=cmd_render)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        return args.func(args)
    except GitError as e:
        error(f"Git error: {e}")
        return 1
    except (OSError, ValueError) as e:
        error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
