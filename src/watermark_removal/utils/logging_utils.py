"""
Logging utilities with rich console output and run metrics.

Provides logging setup for the watermark removal CLI and helpers that turn
the pipeline's flat metrics records into log lines. The pipeline itself
only uses ``logging.getLogger`` and never configures handlers.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Mapping, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


class PipelineFormatter(logging.Formatter):
    """Formatter with optional module and function information."""

    def __init__(self, include_module: bool = True, include_function: bool = False):
        self.include_module = include_module
        self.include_function = include_function

        format_parts = ["%(asctime)s"]
        if include_module:
            format_parts.append("%(name)s")
        format_parts.append("%(levelname)s")
        if include_function:
            format_parts.append("%(funcName)s")
        format_parts.append("%(message)s")

        super().__init__(" - ".join(format_parts), datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    Set up logging for the watermark removal pipeline.

    Args:
        level: Logging level
        log_file: Optional log file path
        use_rich: Whether to use rich console output
        format_style: Format style ('simple', 'detailed', 'minimal')

    Returns:
        Configured root logger
    """
    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Set logging level
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    root_logger.setLevel(level)

    # Configure console handler
    if use_rich:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=format_style == "detailed",
            markup=False,
            rich_tracebacks=True
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)

        if format_style == "minimal":
            formatter = PipelineFormatter(include_module=False, include_function=False)
        elif format_style == "simple":
            formatter = PipelineFormatter(include_module=True, include_function=False)
        else:  # detailed
            formatter = PipelineFormatter(include_module=True, include_function=True)

        console_handler.setFormatter(formatter)

    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    # Configure file handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(PipelineFormatter(include_module=True, include_function=True))
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    return root_logger


def format_metrics(record: Mapping[str, Any]) -> str:
    """Render a flat metrics record as ``key=value`` pairs."""
    parts = []
    for key, value in record.items():
        if isinstance(value, float):
            value = f"{value:.2f}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


def log_run_metrics(
    record: Mapping[str, Any],
    logger: Optional[logging.Logger] = None,
    name: str = "",
    level: int = logging.INFO
) -> None:
    """Log the metrics record of one pipeline run."""
    if logger is None:
        logger = logging.getLogger("watermark_removal.metrics")
    prefix = f"{name}: " if name else ""
    logger.log(level, f"{prefix}{format_metrics(record)}")


@contextmanager
def log_processing_stats(
    operation: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Generator[Dict[str, Any], None, None]:
    """
    Context manager for logging processing statistics.

    Args:
        operation: Description of the operation
        logger: Logger instance (uses root if None)
        level: Logging level for the stats

    Yields:
        Dictionary to store additional statistics
    """
    if logger is None:
        logger = logging.getLogger()

    stats = {
        "operation": operation,
        "start_time": time.time(),
        "files_processed": 0,
        "files_failed": 0,
    }

    logger.log(level, f"Starting {operation}")

    try:
        yield stats
    except Exception as e:
        duration = time.time() - stats["start_time"]
        logger.error(f"Failed {operation} after {duration:.2f}s: {e}")
        raise

    duration = time.time() - stats["start_time"]
    total = stats["files_processed"] + stats["files_failed"]
    stats["duration"] = duration
    stats["success_rate"] = stats["files_processed"] / total if total > 0 else 0

    logger.log(level,
               f"Completed {operation}: "
               f"processed={stats['files_processed']}, "
               f"failed={stats['files_failed']}, "
               f"duration={duration:.2f}s, "
               f"success_rate={stats['success_rate']*100:.1f}%")
