"""
Vision module for captioning image files with a vision LLM.

Provides the image walker and the CaptionPipeline that captions each
discovered image and writes the caption next to it.
"""

from .caption_pipeline import (
    CaptionPipeline,
    PipelineStats,
    assemble_caption,
    build_generation_options,
)
from .image_walker import is_image_file, walk_images

__all__ = [
    "CaptionPipeline",
    "PipelineStats",
    "assemble_caption",
    "build_generation_options",
    "is_image_file",
    "walk_images",
]
