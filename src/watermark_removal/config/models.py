"""
Pydantic models for watermark removal configuration.

Defines the configuration schema with validation, defaults and
documentation for all pipeline components.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..processors.gravity import Gravity, parse_gravity


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class InpaintMethod(str, Enum):
    """OpenCV inpainting algorithms."""
    TELEA = "telea"
    NS = "ns"


class MaskSpec(BaseModel):
    """One watermark template to test against the source image."""

    model_config = ConfigDict(extra="forbid")

    file: Path = Field(
        description="Path to the grayscale template mask"
    )
    gravity: Gravity = Field(
        description="Anchor the template is aligned with"
    )
    foreground: bool = Field(
        default=False,
        description="Exclude probable foreground text from the mask"
    )

    @field_validator('gravity', mode='before')
    @classmethod
    def validate_gravity(cls, v: Union[str, Gravity]) -> Gravity:
        """Reject unknown anchors with a typed configuration error."""
        return parse_gravity(v)


class ThresholdConfig(BaseModel):
    """Thresholds steering polarity and color decisions."""

    carbon_copy_threshold: float = Field(
        default=96.0,
        ge=0.0,
        le=255.0,
        description="Mean brightness below which a scan is inverted"
    )
    color_min_saturation: int = Field(
        default=32,
        ge=0,
        le=255,
        description="Minimum HSV saturation of a color pixel"
    )
    color_min_value: int = Field(
        default=32,
        ge=0,
        le=255,
        description="Minimum HSV value of a color pixel"
    )


class ForegroundConfig(BaseModel):
    """Configuration for foreground text extraction."""

    kernel_size: int = Field(
        default=3,
        ge=1,
        description="Size of the rectangular dilation kernel"
    )
    dilate_iterations: int = Field(
        default=1,
        ge=1,
        description="Number of dilation iterations"
    )


class InpaintConfig(BaseModel):
    """Configuration for the inpainting step."""

    radius: float = Field(
        default=3.0,
        gt=0.0,
        description="Neighborhood radius considered for each masked pixel"
    )
    method: InpaintMethod = Field(
        default=InpaintMethod.TELEA,
        description="Inpainting algorithm"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging setup."""

    level: LogLevel = Field(
        default=LogLevel.ERROR,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=False,
        description="Whether to use rich console output"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(BaseModel):
    """Main configuration model for the watermark removal pipeline."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    masks: List[MaskSpec] = Field(
        default_factory=list,
        description="Watermark templates, tried in order"
    )
    thresholds: ThresholdConfig = Field(
        default_factory=ThresholdConfig,
        description="Polarity and color thresholds"
    )
    foreground: ForegroundConfig = Field(
        default_factory=ForegroundConfig,
        description="Foreground extraction configuration"
    )
    inpaint: InpaintConfig = Field(
        default_factory=InpaintConfig,
        description="Inpainting configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )

    # Diagnostics
    visual: bool = Field(
        default=False,
        description="Write a labelled diagnostic panel per image"
    )
    save_debug_images: bool = Field(
        default=False,
        description="Write every intermediate image of every template"
    )
    debug_dir: Path = Field(
        default=Path("debug"),
        description="Directory for diagnostic output"
    )

    template_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to compute per-template masks"
    )

    @property
    def diagnostics_enabled(self) -> bool:
        return self.visual or self.save_debug_images

    def resolve_mask_paths(self, base_dir: Path) -> None:
        """Make relative template paths relative to ``base_dir``."""
        for spec in self.masks:
            if not spec.file.is_absolute():
                spec.file = Path(base_dir) / spec.file
