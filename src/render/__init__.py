"""Render an analyzed history as a sequence of per-minute heatmap frames."""

from .config import ColorMode, RenderConfig
from .frames import render_frame
from .pipeline import render_frames, render_single_frame

__all__ = [
    "ColorMode",
    "RenderConfig",
    "render_frame",
    "render_frames",
    "render_single_frame",
]
