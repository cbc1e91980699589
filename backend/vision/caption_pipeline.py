"""
Caption pipeline: turns discovered images into caption files.

Images are processed strictly one at a time. Any CaptionError (unreadable
image, transport failure, unwritable caption) propagates out of run() and
aborts the remaining batch; there is no per-image isolation and no retry.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional, TextIO

from backend.errors.caption_errors import CaptionWriteError, ImageReadError
from backend.llms.captioner_strategy import CaptionerStrategy
from backend.models.caption_models import CaptionRequest, CaptionResult, DiscoveredImage
from backend.vision.image_walker import walk_images
from config.constants import (
    CAPTION_SEED,
    CAPTION_TEMPERATURE,
    MAX_CAPTION_TOKENS,
    ONE_SENTENCE_STOP,
)
from config.settings import CaptionSettings

logger = logging.getLogger(__name__)


def build_generation_options(force_one_sentence: bool = False) -> Dict[str, Any]:
    """Fixed token cap, zero temperature and fixed seed; optional stop at first period."""
    options: Dict[str, Any] = {
        "num_predict": MAX_CAPTION_TOKENS,
        "temperature": CAPTION_TEMPERATURE,
        "seed": CAPTION_SEED,
    }
    if force_one_sentence:
        options["stop"] = list(ONE_SENTENCE_STOP)
    return options


def assemble_caption(start: str, text: str, end: str) -> str:
    """Join start, model text and end with single spaces and trim the whole."""
    return f"{start} {text.strip()} {end}".strip()


@dataclass
class PipelineStats:
    """Counters for one run."""

    processed: int = 0
    skipped: int = 0
    written: int = 0


class CaptionPipeline:
    """Caption every discovered image with one captioner."""

    def __init__(
        self,
        captioner: CaptionerStrategy,
        settings: CaptionSettings,
        out: Optional[TextIO] = None,
    ):
        """
        Initialize pipeline.

        Args:
            captioner: Backend chosen once for the whole run
            settings: Prompting and behaviour settings
            out: Stream for caption lines (default: sys.stdout at call time)
        """
        self.captioner = captioner
        self.settings = settings
        self.out = out
        self.options = build_generation_options(settings.force_one_sentence)

    def run(self, path: str) -> PipelineStats:
        """Walk path and caption every image, stopping at the first error."""
        stats = PipelineStats()
        for image in walk_images(path):
            result = self.process(image)
            if result is None:
                stats.skipped += 1
                continue
            stats.processed += 1
            if result.written:
                stats.written += 1

        logger.info(
            f"Done: {stats.processed} captioned, {stats.written} written, "
            f"{stats.skipped} skipped"
        )
        return stats

    def process(self, image: DiscoveredImage) -> Optional[CaptionResult]:
        """
        Caption a single image.

        Returns:
            CaptionResult, or None when an existing caption file was kept

        Raises:
            ImageReadError: If the image cannot be read
            CaptionTransportError: If the backend call fails
            CaptionWriteError: If the caption file cannot be written
        """
        caption_path = image.caption_path

        if not self.settings.force and os.path.exists(caption_path):
            logger.debug(f"Caption exists, skipping {image.relative_path}")
            return None

        request = self._build_request(image)
        text = self.captioner.caption(request)

        caption = assemble_caption(
            self.settings.start_caption, text, self.settings.end_caption
        )
        print(f"{image.relative_path}: {caption}", file=self.out or sys.stdout, flush=True)

        written = False
        if not self.settings.dry_run:
            self._write_caption(caption_path, caption, image.path)
            written = True

        return CaptionResult(
            text=caption,
            image_path=image.path,
            caption_path=caption_path,
            written=written,
        )

    def _build_request(self, image: DiscoveredImage) -> CaptionRequest:
        try:
            with open(image.path, "rb") as f:
                image_bytes = f.read()
        except OSError as e:
            raise ImageReadError(image.path, e.strerror or str(e)) from e

        return CaptionRequest(
            prompt=self.settings.prompt,
            system_prompt=self.settings.system_prompt or None,
            image_bytes=image_bytes,
            image_path=image.path,
            model=self.settings.model,
            options=dict(self.options),
        )

    @staticmethod
    def _write_caption(caption_path: str, caption: str, image_path: str) -> None:
        try:
            with open(caption_path, "w", encoding="utf-8") as f:
                f.write(caption)
        except OSError as e:
            raise CaptionWriteError(caption_path, e.strerror or str(e), image_path) from e
