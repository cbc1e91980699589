"""
Image discovery for a captioning run.

walk_images(path) yields DiscoveredImage entries lazily:
    * a single file is yielded alone (root = its parent directory) when it
      has an image extension;
    * a directory is walked recursively, pruning subdirectories whose name
      starts with "." and yielding matching files in sorted order per level;
      the original directory is the root of every entry.

Errors inspecting the initial path raise ImageDiscoveryError. Errors on
individual entries during the walk are logged at DEBUG and skipped.
"""

import logging
import os
import stat
from typing import Iterator

from backend.errors.caption_errors import ImageDiscoveryError
from backend.models.caption_models import DiscoveredImage
from config.constants import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."


def is_image_file(path: str) -> bool:
    """Check the extension against the image allow-list (case-insensitive)."""
    return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS


def _is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def _log_walk_error(error: OSError) -> None:
    logger.debug(f"Skipping unreadable entry {error.filename}: {error.strerror}")


def walk_images(path: str) -> Iterator[DiscoveredImage]:
    """Yield every image under path (or path itself when it is an image file)."""
    try:
        info = os.stat(path)
    except OSError as e:
        raise ImageDiscoveryError(path, e.strerror or str(e)) from e

    if not stat.S_ISDIR(info.st_mode):
        if is_image_file(path):
            yield DiscoveredImage(path=path, root_dir=os.path.dirname(path) or ".")
        return

    root_dir = path
    for dirpath, dirnames, filenames in os.walk(path, onerror=_log_walk_error):
        # Prune in place so os.walk never descends into hidden directories
        dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d))

        for name in sorted(filenames):
            if not is_image_file(name):
                continue
            yield DiscoveredImage(path=os.path.join(dirpath, name), root_dir=root_dir)
