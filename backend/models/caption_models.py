"""
Domain models for a captioning run.

Every model here lives for a single iteration of the walk: it is created for
one image, used, and discarded before the next image is discovered. Uses
frozen dataclasses for immutability.
"""

import base64
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config.constants import CAPTION_EXTENSION, DEFAULT_MIME_TYPE, MIME_BY_EXTENSION


def caption_path_for(image_path: str) -> str:
    """Return the sibling caption path: the image path with its extension replaced."""
    return os.path.splitext(image_path)[0] + CAPTION_EXTENSION


@dataclass(frozen=True)
class DiscoveredImage:
    """An image found by the walker, with the root it was discovered under."""

    path: str
    root_dir: str

    @property
    def caption_path(self) -> str:
        return caption_path_for(self.path)

    @property
    def relative_path(self) -> str:
        """Path relative to the discovery root, for display only."""
        return os.path.relpath(self.path, self.root_dir)


@dataclass(frozen=True)
class CaptionRequest:
    """A single prompt + image request for a captioner.

    Options use Ollama naming (num_predict, temperature, seed, stop);
    other transports map them to their own parameters.
    """

    prompt: str
    image_bytes: bytes = field(repr=False)
    image_path: str
    model: str
    system_prompt: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def mime_type(self) -> str:
        ext = os.path.splitext(self.image_path)[1].lower()
        return MIME_BY_EXTENSION.get(ext, DEFAULT_MIME_TYPE)

    def to_base64(self) -> str:
        return base64.b64encode(self.image_bytes).decode("utf-8")


@dataclass(frozen=True)
class CaptionResult:
    """Final caption for one image."""

    text: str
    image_path: str
    caption_path: str
    written: bool = False
