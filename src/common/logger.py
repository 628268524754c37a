"""Logging utilities with rich output for the timelapse CLI.

Combines Python's standard logging with rich's console handler, and hands
out rich progress bars for the long-running analysis and rendering stages.

Usage:
    from common.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Analyzing repository...")
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

# Global console instance for consistent output
console = Console()


def _rich_handler(show_time: bool = False, show_path: bool = False) -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        markup=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def get_logger(
    name: str,
    level: str | None = None,
    show_time: bool = False,
    show_path: bool = False,
) -> logging.Logger:
    """Get a configured logger with rich output.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, uses environment variable LOG_LEVEL or defaults to INFO.
        show_time: Show timestamp in log output
        show_path: Show file path in log output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding multiple handlers if logger already configured
    if logger.handlers:
        return logger

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")

    logger.setLevel(level.upper())
    logger.addHandler(_rich_handler(show_time=show_time, show_path=show_path))

    # Keep propagation so pytest caplog still sees records
    logger.propagate = True

    return logger


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Configure the root logger once at the CLI entry point.

    Args:
        level: Logging level for all modules; falls back to LOG_LEVEL, then INFO
        log_file: Optional file path to also log to a file
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_rich_handler())

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    # Module loggers created before setup now go through the root handlers only
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and any(isinstance(h, RichHandler) for h in logger.handlers):
            logger.handlers = [h for h in logger.handlers if not isinstance(h, RichHandler)]
            logger.setLevel(level)


def progress_bar(transient: bool = False) -> Progress:
    """Create a rich progress bar for commit and frame loops.

    Example:
        >>> with progress_bar() as bar:
        ...     task = bar.add_task("Rendering frames", total=100)
        ...     bar.advance(task)
    """
    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=transient,
    )


def success(message: str) -> None:
    """Print a success message with green checkmark."""
    console.print(f"[green]✓[/green] {message}")


def warning(message: str) -> None:
    """Print a warning message with yellow warning icon."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    """Print an error message with red X icon to stderr."""
    Console(stderr=True).print(f"[red]✗[/red] {message}")
