import logging

from backend.llms.captioner_strategy import CaptionerStrategy
from backend.llms.ollama_captioner import OllamaCaptioner
from backend.llms.openai_captioner import OpenAICaptioner
from config.settings import CaptionSettings

logger = logging.getLogger(__name__)


class CaptionerFactory:
    """
    Factory for creating captioners.

    The transport is chosen once per run from the settings and never changes
    between requests.
    """

    @staticmethod
    def create(settings: CaptionSettings) -> CaptionerStrategy:
        """
        Create the captioner selected by the settings.

        Args:
            settings: Run settings; a non-empty openai_url selects OpenAI

        Returns:
            Captioner instance for the whole run

        Raises:
            CaptionerConfigurationError: If the client cannot be constructed
        """
        if settings.use_openai:
            return CaptionerFactory.create_openai(
                base_url=settings.openai_url,
                api_key=settings.api_key,
                timeout=settings.timeout,
            )
        return CaptionerFactory.create_ollama(timeout=settings.timeout)

    @staticmethod
    def create_openai(base_url: str, api_key: str = "", timeout=None) -> OpenAICaptioner:
        """Create OpenAI-compatible captioner."""
        return OpenAICaptioner(base_url=base_url, api_key=api_key, timeout=timeout)

    @staticmethod
    def create_ollama(host=None, timeout=None) -> OllamaCaptioner:
        """Create Ollama captioner (host from OLLAMA_HOST when not given)."""
        return OllamaCaptioner(host=host, timeout=timeout)
