"""
capollama: caption images with a vision LLM.

Usage:
    # CLI usage
    capollama ~/Pictures/dogs --start "image of Leela the dog,"
    python -m capollama photo.png --dry-run

    # Programmatic usage
    from backend.llms.captioner_factory import CaptionerFactory
    from backend.vision import CaptionPipeline
    from config.settings import CaptionSettings

    settings = CaptionSettings.from_env()
    pipeline = CaptionPipeline(CaptionerFactory.create(settings), settings)
    pipeline.run("path/to/images")
"""

from config.constants import APP_VERSION

__version__ = APP_VERSION

__all__ = ["__version__"]
