"""Environment configuration interface for git-timelapse.

Centralizes environment variable access. Command-line flags override the
defaults returned here.
"""

import os

from dotenv import load_dotenv

from common.constants import (
    DEFAULT_HEIGHT,
    DEFAULT_MODE,
    DEFAULT_WIDTH,
    DEFAULT_WINDOW_DAYS,
)

# Load environment variables from .env file if it exists
load_dotenv()


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def log_level() -> str:
        """Get the logging level.

        Returns:
            Upper-cased level name, defaults to 'INFO'
        """
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def frame_width() -> int:
        """Get the default frame width in pixels.

        Returns:
            Width, defaults to 1280
        """
        return int(os.getenv("TIMELAPSE_WIDTH", str(DEFAULT_WIDTH)))

    @staticmethod
    def frame_height() -> int:
        """Get the default frame height in pixels.

        Returns:
            Height, defaults to 720
        """
        return int(os.getenv("TIMELAPSE_HEIGHT", str(DEFAULT_HEIGHT)))

    @staticmethod
    def window_days() -> int:
        """Get the default heat window length in days.

        Returns:
            Window length, defaults to 30
        """
        return int(os.getenv("TIMELAPSE_WINDOW_DAYS", str(DEFAULT_WINDOW_DAYS)))

    @staticmethod
    def color_mode() -> str:
        """Get the default color mode ('heat' or 'committer')."""
        return os.getenv("TIMELAPSE_MODE", DEFAULT_MODE).lower()

    @staticmethod
    def workers() -> int:
        """Get the number of rendering worker processes.

        Returns:
            Worker count, defaults to the CPU count
        """
        value = os.getenv("TIMELAPSE_WORKERS")
        if value:
            return int(value)
        return os.cpu_count() or 1


# Singleton instance for convenient access
env = Environment()
