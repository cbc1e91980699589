"""
Backend error handling modules.

This package contains the error types raised by image discovery, captioning
transports and caption persistence.
"""

from .caption_errors import (
    CaptionError,
    CaptionerConfigurationError,
    CaptionTransportError,
    CaptionWriteError,
    ImageDiscoveryError,
    ImageReadError,
)

__all__ = [
    "CaptionError",
    "CaptionerConfigurationError",
    "CaptionTransportError",
    "CaptionWriteError",
    "ImageDiscoveryError",
    "ImageReadError",
]
