"""
Custom exceptions for the watermark removal pipeline.

Provides a hierarchy of exceptions for the failures that can abort a
pipeline run: bad configuration, unusable images and stage failures.
"""

from typing import Optional, Any


class WatermarkRemovalError(Exception):
    """Base exception for all watermark removal errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(WatermarkRemovalError):
    """Raised when a configuration file cannot be loaded or validated."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised for an unknown gravity or a mask template that cannot be loaded."""

    def __init__(self, message: str, mask_file: Optional[str] = None,
                 gravity: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if mask_file:
            details["mask_file"] = mask_file
        if gravity is not None:
            details["gravity"] = gravity
        super().__init__(message, details)


class ProcessingError(WatermarkRemovalError):
    """Raised when image processing operations fail."""

    def __init__(self, message: str, processor: Optional[str] = None,
                 image_path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if processor:
            details["processor"] = processor
        if image_path:
            details["image_path"] = image_path
        super().__init__(message, details)


class InvalidImageError(ProcessingError):
    """Raised when an image is empty, malformed or has the wrong geometry."""
    pass


class ImageLoadError(InvalidImageError):
    """Raised when an image cannot be loaded or is invalid."""
    pass


class ImageSaveError(ProcessingError):
    """Raised when an image cannot be saved."""
    pass


class PipelineStageError(WatermarkRemovalError):
    """Raised when a pipeline stage fails."""

    def __init__(self, message: str, stage: str, step: Optional[str] = None,
                 **kwargs: Any) -> None:
        details = kwargs
        details["stage"] = stage
        if step:
            details["step"] = step
        super().__init__(message, details)
