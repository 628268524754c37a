"""Rendering configuration."""

from dataclasses import dataclass
from enum import Enum

from common.constants import SECONDS_PER_DAY


class ColorMode(str, Enum):
    """How a line's pixel color is chosen."""

    HEAT = "heat"  # edit count inside the trailing window
    COMMITTER = "committer"  # last committer to touch the line


@dataclass(frozen=True)
class RenderConfig:
    """Frame size, heat window, color mode and worker count."""

    width: int
    height: int
    window_days: int
    mode: ColorMode = ColorMode.HEAT
    workers: int = 1

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Frame size must be positive, got {self.width}x{self.height}")
        if self.window_days <= 0:
            raise ValueError(f"Window must be at least one day, got {self.window_days}")
        if self.workers <= 0:
            raise ValueError(f"Worker count must be positive, got {self.workers}")
        # Accept plain strings such as "committer"
        object.__setattr__(self, "mode", ColorMode(self.mode))

    @property
    def window_seconds(self) -> int:
        return self.window_days * SECONDS_PER_DAY
