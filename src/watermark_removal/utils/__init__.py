"""Watermark removal utility modules."""

from .logging_utils import (
    setup_logging, format_metrics,
    log_run_metrics, log_processing_stats
)

__all__ = [
    'setup_logging', 'format_metrics',
    'log_run_metrics', 'log_processing_stats'
]
