"""Parallel processing pipeline for batch watermark removal."""

import gc
import json
import logging
from functools import partial
from multiprocessing import Pool, cpu_count
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from tqdm import tqdm

from .config import Config, get_default_config
from .exceptions import WatermarkRemovalError
from .pipeline import WatermarkRemovalPipeline
from .processors import get_image_files
from .utils.logging_utils import log_processing_stats

logger = logging.getLogger(__name__)


def process_single_image_wrapper(
    image_path: Path,
    output_dir: Path,
    config: Config,
) -> Tuple[Path, Optional[Path], Optional[Dict[str, Any]], Optional[str]]:
    """Wrapper function for processing a single image in a worker process.

    Args:
        image_path: Path to the image
        output_dir: Directory the cleaned image is written to
        config: Pipeline configuration

    Returns:
        Tuple of (image_path, output_path, metrics_record, error_message)
    """
    output_path = output_dir / image_path.name
    pipeline = WatermarkRemovalPipeline(config)
    try:
        result = pipeline.process_file(image_path, output_path)
        record = result.to_record()
        del result
        return (image_path, output_path, record, None)
    except WatermarkRemovalError as e:
        return (image_path, None, None, str(e))
    finally:
        # Release this image's intermediates before the next one
        del pipeline
        gc.collect()


class BatchPipeline:
    """Pipeline for batch processing of images, one failure never stops a batch."""

    def __init__(
        self,
        config: Optional[Config] = None,
        max_workers: Optional[int] = None,
        batch_size: int = 4,
        show_progress: bool = True,
    ):
        """Initialize batch pipeline.

        Args:
            config: Pipeline configuration
            max_workers: Maximum number of worker processes (default: CPU count - 1)
            batch_size: Number of images to process in each batch
            show_progress: Whether to show progress bar
        """
        self.config = config or get_default_config()

        # Set max workers, leaving one CPU for the main process
        self.max_workers = max_workers or max(1, cpu_count() - 1)
        self.batch_size = batch_size
        self.show_progress = show_progress

        # Track results
        self.successful_results: List[Dict[str, Any]] = []
        self.failed_results: List[Dict[str, Any]] = []

    def process_batch(
        self,
        input_images: List[Path],
        output_dir: Path,
        parallel: bool = True,
    ) -> Dict[str, Any]:
        """Process a batch of images.

        Args:
            input_images: List of image paths to process
            output_dir: Directory for the cleaned images
            parallel: Whether to use parallel processing

        Returns:
            Dictionary with processing results
        """
        self.successful_results = []
        self.failed_results = []

        if not input_images:
            return self._generate_summary()

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        with log_processing_stats(f"watermark removal of {len(input_images)} images", logger) as stats:
            if parallel and len(input_images) > 1 and self.max_workers > 1:
                self._process_parallel(input_images, output_dir)
            else:
                self._process_sequential(input_images, output_dir)
            stats["files_processed"] = len(self.successful_results)
            stats["files_failed"] = len(self.failed_results)

        return self._generate_summary()

    def _process_parallel(self, input_images: List[Path], output_dir: Path) -> None:
        """Process images in parallel using multiprocessing."""
        logger.info(f"Processing {len(input_images)} images using {self.max_workers} workers")

        process_func = partial(
            process_single_image_wrapper,
            output_dir=output_dir,
            config=self.config,
        )

        # Process in batches to avoid memory issues
        batches = [
            input_images[i:i + self.batch_size]
            for i in range(0, len(input_images), self.batch_size)
        ]

        with tqdm(total=len(input_images), desc="Removing watermarks", unit="img",
                  disable=not self.show_progress) as pbar:
            for batch in batches:
                with Pool(processes=min(self.max_workers, len(batch))) as pool:
                    for result in pool.map(process_func, batch):
                        self._record(*result)
                        pbar.update(1)

    def _process_sequential(self, input_images: List[Path], output_dir: Path) -> None:
        """Process images sequentially (single image or debugging)."""
        logger.info(f"Processing {len(input_images)} images sequentially")

        for image_path in tqdm(input_images, desc="Removing watermarks", unit="img",
                               disable=not self.show_progress):
            self._record(*process_single_image_wrapper(image_path, output_dir, self.config))

    def _record(
        self,
        image_path: Path,
        output_path: Optional[Path],
        record: Optional[Dict[str, Any]],
        error_msg: Optional[str],
    ) -> None:
        if error_msg:
            logger.error(f"{image_path.name}: {error_msg}")
            self.failed_results.append({
                'image': str(image_path),
                'error': error_msg,
            })
        else:
            self.successful_results.append({
                'image': str(image_path),
                'output': str(output_path),
                'metrics': record,
            })

    def _generate_summary(self) -> Dict[str, Any]:
        """Generate processing summary.

        Returns:
            Dictionary with summary statistics
        """
        total = len(self.successful_results) + len(self.failed_results)
        success_rate = (len(self.successful_results) / total * 100) if total > 0 else 0

        return {
            'successful': self.successful_results,
            'failed': self.failed_results,
            'total': total,
            'success_count': len(self.successful_results),
            'failed_count': len(self.failed_results),
            'success_rate': f"{success_rate:.1f}%",
        }

    def save_summary(self, summary: Dict[str, Any], output_path: Path) -> None:
        """Save processing summary to JSON file."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2)

        logger.info(f"Summary saved to: {output_path}")

    def process_directory(
        self,
        input_dir: Path,
        output_dir: Path,
        parallel: bool = True,
    ) -> Dict[str, Any]:
        """Process all images in a directory and save a summary next to the outputs.

        Args:
            input_dir: Input directory containing images
            output_dir: Directory for the cleaned images
            parallel: Whether to use parallel processing

        Returns:
            Dictionary with processing results
        """
        image_files = get_image_files(input_dir)

        if not image_files:
            logger.warning(f"No images found in {input_dir}")
            return self._generate_summary()

        summary = self.process_batch(image_files, output_dir, parallel=parallel)
        self.save_summary(summary, Path(output_dir) / "processing_summary.json")
        return summary
