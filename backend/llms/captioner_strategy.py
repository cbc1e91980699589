from abc import ABC, abstractmethod

from backend.models.caption_models import CaptionRequest


class CaptionerStrategy(ABC):
    """Abstract base class for all captioning backends."""

    provider_name = "unknown"

    @abstractmethod
    def caption(self, request: CaptionRequest) -> str:
        """Send image + prompt, return the model text stripped of whitespace."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend is reachable."""

    def describe(self) -> str:
        """Human readable transport description for startup logs."""
        return self.provider_name
