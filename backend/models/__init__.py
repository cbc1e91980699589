"""
Backend models module.

Exports the per-image domain models used by the caption pipeline.
"""

from backend.models.caption_models import (
    CaptionRequest,
    CaptionResult,
    DiscoveredImage,
    caption_path_for,
)

__all__ = ["CaptionRequest", "CaptionResult", "DiscoveredImage", "caption_path_for"]
