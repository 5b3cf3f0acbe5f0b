"""Stamped watermark removal for scanned documents."""

__version__ = "1.0.0"
__author__ = "Watermark Removal Team"

from .config import Config, load_config
from .pipeline import PipelineResult, WatermarkRemovalPipeline

__all__ = ["Config", "PipelineResult", "WatermarkRemovalPipeline", "load_config"]
