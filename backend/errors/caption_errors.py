"""
Captioning error types.

Every error raised while discovering, reading, captioning or writing an image
derives from CaptionError. None of them is recoverable: the CLI catches the
base class once and aborts the whole run.
"""

from typing import Any, Dict, Optional


class CaptionError(Exception):
    """Base exception for captioning errors."""

    error_code = "UNKNOWN"

    def __init__(
        self,
        message: str,
        image_path: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.image_path = image_path
        if error_code:
            self.error_code = error_code
        self.error_type = self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.error_type,
            "error_code": self.error_code,
            "message": str(self),
            "image_path": self.image_path,
        }


class ImageDiscoveryError(CaptionError):
    """Raised when the path given on the command line cannot be inspected."""

    error_code = "DISCOVERY"

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot scan {path}: {reason}", image_path=path)
        self.path = path


class ImageReadError(CaptionError):
    """Raised when an image file cannot be read."""

    error_code = "IMAGE_READ"

    def __init__(self, image_path: str, reason: str):
        super().__init__(
            f"failed to read image {image_path}: {reason}", image_path=image_path
        )


class CaptionTransportError(CaptionError):
    """Raised when the captioning backend is unreachable or answers badly."""

    error_code = "TRANSPORT"

    def __init__(
        self,
        message: str,
        image_path: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, image_path=image_path)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        return result


class CaptionWriteError(CaptionError):
    """Raised when a caption file cannot be written."""

    error_code = "CAPTION_WRITE"

    def __init__(self, caption_path: str, reason: str, image_path: Optional[str] = None):
        super().__init__(
            f"Could not write file {caption_path!r}: {reason}", image_path=image_path
        )
        self.caption_path = caption_path


class CaptionerConfigurationError(CaptionError):
    """Raised when a captioner cannot be constructed from the settings."""

    error_code = "CONFIGURATION"
