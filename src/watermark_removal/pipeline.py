"""Watermark removal pipeline and command line interface."""

import argparse
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

import cv2
import numpy as np

from .config import Config, LogLevel, MaskSpec, get_default_config, load_config
from .exceptions import PipelineStageError, WatermarkRemovalError
from .processors import (
    ChannelMetrics,
    InpaintProcessor,
    MaskAggregator,
    WatermarkMaskProcessor,
    WatermarkMaskResult,
    compose_diagnostic_panel,
    compute_brightness,
    compute_channel_metrics,
    has_color,
    load_image,
    load_template,
    normalize_polarity,
    overlay_mask,
    remove_colors,
    save_image,
    select_threshold,
    write_debug_images,
)
from .utils.logging_utils import log_run_metrics, setup_logging

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
MetricsCallback = Callable[[Dict[str, Any]], None]


@dataclass
class PipelineResult:
    """Outcome of one pipeline run over a single source image."""

    output: np.ndarray
    mask: np.ndarray
    normalized: np.ndarray
    brightness: float
    metrics: ChannelMetrics
    threshold: float
    has_color: bool
    inverted: bool
    diagnostics: List[WatermarkMaskResult] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def clamped_templates(self) -> int:
        return sum(1 for result in self.diagnostics if result.clamped)

    def to_record(self) -> Dict[str, Any]:
        """Flatten the computed scalars into a key/value record."""
        record: Dict[str, Any] = {
            "brightness": self.brightness,
            "mean_of_means": self.metrics.mean_of_means,
            "mean_of_spreads": self.metrics.mean_of_spreads,
            "threshold": self.threshold,
            "has_color": self.has_color,
            "inverted": self.inverted,
            "templates": len(self.diagnostics),
            "clamped_templates": self.clamped_templates,
            "masked_pixels": int(cv2.countNonZero(self.mask)),
            "duration_ms": sum(self.timings.values()),
        }
        for stage, elapsed in self.timings.items():
            record[f"{stage}_ms"] = elapsed
        return record


class WatermarkRemovalPipeline:
    """Remove stamped watermarks described by gravity-anchored templates."""

    def __init__(
        self,
        config: Optional[Config] = None,
        metrics_callback: Optional[MetricsCallback] = None,
    ):
        """Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration (default: no masks)
            metrics_callback: Receives the metrics record of every run
        """
        self.config = config or get_default_config()
        self.metrics_callback = metrics_callback
        self._templates: Optional[List[Tuple[MaskSpec, np.ndarray]]] = None

    def load_templates(self) -> List[Tuple[MaskSpec, np.ndarray]]:
        """Load every configured template, once per pipeline instance.

        Raises:
            InvalidConfigurationError: If any template cannot be loaded
        """
        if self._templates is None:
            self._templates = [(spec, load_template(spec.file)) for spec in self.config.masks]
        return self._templates

    def process(self, image: np.ndarray, image_path: Optional[PathLike] = None) -> PipelineResult:
        """Compute the watermark mask of an image and inpaint it.

        Args:
            image: Source image, grayscale or BGR
            image_path: Source path, used for error details and diagnostics

        Returns:
            PipelineResult

        Raises:
            WatermarkRemovalError: If any stage fails; ``details`` name the
                stage and the input
        """
        result = self._run(image, image_path)
        self._emit_metrics(result)
        return result

    def process_file(self, src_path: PathLike, dst_path: PathLike) -> PipelineResult:
        """Load an image, remove its watermark and write the result.

        Nothing is written to ``dst_path`` when any stage fails. The metrics
        callback receives the record including the load and save timings.
        """
        timings: Dict[str, float] = {}
        src_path = Path(src_path)

        logger.debug(f"Processing {src_path}")

        with self._stage("load", timings, src_path):
            image = load_image(src_path)

        result = self._run(image, src_path)

        with self._stage("save", timings, src_path):
            save_image(result.output, Path(dst_path))

        result.timings.update(timings)
        self._emit_metrics(result)
        return result

    def _run(self, image: np.ndarray, image_path: Optional[PathLike]) -> PipelineResult:
        timings: Dict[str, float] = {}
        thresholds = self.config.thresholds

        with self._stage("templates", timings, image_path):
            templates = self.load_templates()

        with self._stage("statistics", timings, image_path):
            brightness = compute_brightness(image)

        # Invert colors if carbon copy
        with self._stage("polarity", timings, image_path):
            normalized, inverted = normalize_polarity(
                image, brightness, thresholds.carbon_copy_threshold
            )

        with self._stage("color", timings, image_path):
            metrics = compute_channel_metrics(normalized)
            color = has_color(
                normalized,
                min_saturation=thresholds.color_min_saturation,
                min_value=thresholds.color_min_value,
            )

        # Inpainting works best on grayscale images
        with self._stage("grayscale", timings, image_path):
            gray = remove_colors(normalized)

        with self._stage("threshold", timings, image_path):
            threshold = select_threshold(metrics.mean_of_means, metrics.mean_of_spreads, color)

        with self._stage("masks", timings, image_path):
            diagnostics, mask_debug = self._compute_masks(gray, templates, threshold)
            aggregator = MaskAggregator(gray.shape)
            for result in diagnostics:
                aggregator.add(result.final_mask)
            mask = aggregator.mask

        with self._stage("inpaint", timings, image_path):
            inpainter = InpaintProcessor(self.config)
            output = inpainter.process(
                gray,
                mask=mask,
                radius=self.config.inpaint.radius,
                method=self.config.inpaint.method.value,
            )

        result = PipelineResult(
            output=output,
            mask=mask,
            normalized=gray,
            brightness=brightness,
            metrics=metrics,
            threshold=threshold,
            has_color=color,
            inverted=inverted,
            diagnostics=diagnostics,
            timings=timings,
        )

        if self.config.diagnostics_enabled:
            try:
                with self._stage("diagnostics", timings, image_path):
                    mask_debug.append(inpainter.get_debug_images())
                    self._write_diagnostics(image, result, mask_debug, image_path)
            except WatermarkRemovalError as e:
                logger.warning(f"Diagnostics not written: {e}")

        return result

    def _emit_metrics(self, result: PipelineResult) -> None:
        if self.metrics_callback is not None:
            self.metrics_callback(result.to_record())

    def _compute_masks(
        self,
        gray: np.ndarray,
        templates: List[Tuple[MaskSpec, np.ndarray]],
        threshold: float,
    ) -> Tuple[List[WatermarkMaskResult], List[Dict[str, np.ndarray]]]:
        """Compute one mask per template, optionally on a thread pool.

        Workers never share state; their masks are combined by the caller.
        Returns the mask results and the debug images of every template.
        """
        def compute(
            item: Tuple[MaskSpec, np.ndarray]
        ) -> Tuple[WatermarkMaskResult, Dict[str, np.ndarray]]:
            spec, template = item
            perf = time.perf_counter()

            processor = WatermarkMaskProcessor(self.config)
            result = processor.process(
                gray,
                template=template,
                gravity=spec.gravity,
                threshold=threshold,
                exclude_foreground=spec.foreground,
                kernel_size=self.config.foreground.kernel_size,
                dilate_iter=self.config.foreground.dilate_iterations,
            )

            if result.clamped:
                logger.warning(
                    f"Template {spec.file} is smaller than the image, "
                    f"crop clamped (gravity={spec.gravity.value})"
                )

            logger.debug(
                f"mask={spec.file} duration(ms)={(time.perf_counter() - perf) * 1000:.1f}"
            )
            return result, processor.get_debug_images()

        workers = min(self.config.template_workers, len(templates))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outputs = list(executor.map(compute, templates))
        else:
            outputs = [compute(item) for item in templates]

        return [result for result, _ in outputs], [images for _, images in outputs]

    def _debug_dir(self, image_path: Optional[PathLike]) -> Path:
        name = Path(image_path).stem if image_path else "image"
        return self.config.debug_dir / name

    def _write_diagnostics(
        self,
        source: np.ndarray,
        result: PipelineResult,
        debug_images: List[Dict[str, np.ndarray]],
        image_path: Optional[PathLike],
    ) -> None:
        """Write diagnostic images; never alters the result.

        ``debug_images`` holds one entry per template followed by the
        inpainting step's images.
        """
        debug_dir = self._debug_dir(image_path)

        if self.config.save_debug_images:
            *template_images, inpaint_images = debug_images
            for index, images in enumerate(template_images):
                write_debug_images(images, debug_dir, prefix=f"template_{index:02d}")
            write_debug_images(inpaint_images, debug_dir)

        if not self.config.visual:
            return

        for index, mask_result in enumerate(result.diagnostics):
            panel = compose_diagnostic_panel({
                "template": mask_result.cropped_template,
                "binarized": mask_result.binarized,
                "foreground": mask_result.foreground_mask,
                "mask": mask_result.final_mask,
            })
            save_image(panel, debug_dir / f"template_{index:02d}_panel.png")

        panel = compose_diagnostic_panel({
            "source": source,
            "mask": overlay_mask(result.normalized, result.mask),
            "result": result.output,
        })
        save_image(panel, debug_dir / "panel.png")
        logger.info(f"Diagnostics written to {debug_dir}")

    @contextmanager
    def _stage(
        self, name: str, timings: Dict[str, float], image_path: Optional[PathLike]
    ) -> Iterator[None]:
        """Time a stage and tag any failure with the stage and input."""
        start = time.perf_counter()
        path = str(image_path) if image_path is not None else None
        try:
            yield
        except WatermarkRemovalError as e:
            e.details.setdefault("stage", name)
            if path is not None:
                e.details.setdefault("image_path", path)
            raise
        except cv2.error as e:
            raise PipelineStageError(f"OpenCV error: {e}", stage=name, image_path=path) from e
        except OSError as e:
            raise PipelineStageError(f"File system error: {e}", stage=name, image_path=path) from e
        finally:
            timings[name] = (time.perf_counter() - start) * 1000




def main() -> None:
    """Command line interface."""
    parser = argparse.ArgumentParser(description="Remove stamped watermarks from scanned documents")
    parser.add_argument("--src", required=True, help="Input image or directory of images")
    parser.add_argument("--dst", required=True, help="Output image or directory")
    parser.add_argument("-c", "--config", default="local.env.yaml", help="Config file")
    parser.add_argument("--debug", action="store_true", help="Debug logging level")
    parser.add_argument("--visual", action="store_true", help="Write diagnostic panels")
    parser.add_argument("--workers", type=int, help="Number of worker processes (directory input)")
    parser.add_argument("--no-parallel", action="store_true", help="Disable parallel processing")

    args = parser.parse_args()

    setup_logging(level="ERROR", use_rich=False, format_style="minimal")

    try:
        config = load_config(args.config)
    except WatermarkRemovalError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # Only override config defaults if explicitly requested
    if args.debug:
        config.logging.level = LogLevel.DEBUG
    if args.visual:
        config.visual = True

    setup_logging(
        level=config.logging.level.value,
        log_file=config.logging.log_file,
        use_rich=config.logging.use_rich,
        format_style=config.logging.format_style,
    )

    src = Path(args.src)
    dst = Path(args.dst)

    if src.is_dir():
        from .parallel_pipeline import BatchPipeline

        batch = BatchPipeline(config, max_workers=args.workers)
        summary = batch.process_directory(src, dst, parallel=not args.no_parallel)
        sys.exit(1 if summary["failed"] else 0)

    pipeline = WatermarkRemovalPipeline(config)
    try:
        result = pipeline.process_file(src, dst)
    except WatermarkRemovalError as e:
        logger.error(f"{src.name}: {e}")
        sys.exit(1)

    log_run_metrics(dict(result.to_record(), dst=str(dst)), name=src.name)


if __name__ == "__main__":
    main()
