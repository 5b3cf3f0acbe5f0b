"""
Configuration system with Pydantic models and validation.

Provides configuration management with type safety, validation, and
support for multiple configuration formats.
"""

from .models import (
    Config,
    MaskSpec,
    ThresholdConfig,
    ForegroundConfig,
    InpaintConfig,
    InpaintMethod,
    LoggingConfig,
    LogLevel,
)
from .loader import (
    load_config,
    load_config_from_dict,
    save_config,
    get_default_config,
    validate_config_file,
)

__all__ = [
    # Configuration models
    "Config",
    "MaskSpec",
    "ThresholdConfig",
    "ForegroundConfig",
    "InpaintConfig",
    "InpaintMethod",
    "LoggingConfig",
    "LogLevel",
    # Configuration loading
    "load_config",
    "load_config_from_dict",
    "save_config",
    "get_default_config",
    "validate_config_file",
]
