import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from backend.errors.caption_errors import (
    CaptionerConfigurationError,
    CaptionTransportError,
)
from backend.llms.captioner_strategy import CaptionerStrategy
from backend.models.caption_models import CaptionRequest
from config.constants import OPENAI_PLACEHOLDER_API_KEY

logger = logging.getLogger(__name__)


class OpenAICaptioner(CaptionerStrategy):
    """Captioner for OpenAI-compatible chat completion endpoints."""

    provider_name = "openai"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: Optional[float] = None,
    ):
        """
        Initialize OpenAI-compatible captioner.

        Args:
            base_url: Endpoint base URL (e.g. http://localhost:1234/v1)
            api_key: API key (optional for lm-studio/ollama)
            timeout: Request timeout in seconds (None = SDK default)
        """
        if not base_url:
            raise CaptionerConfigurationError("An endpoint URL is required for openai")

        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

        self._initialize_client()

    def _initialize_client(self):
        """Initialize OpenAI client."""
        kwargs: Dict[str, Any] = {
            "api_key": self.api_key or OPENAI_PLACEHOLDER_API_KEY,
            "base_url": self.base_url,
            # No retries: a failed request aborts the run
            "max_retries": 0,
        }
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            self._client = OpenAI(**kwargs)
        except OpenAIError as e:
            logger.error(f"Failed to initialize OpenAI client: {str(e)}")
            raise CaptionerConfigurationError(
                f"Failed to initialize OpenAI client: {str(e)}"
            )

    def caption(self, request: CaptionRequest) -> str:
        """Generate a caption using the Chat Completion API."""
        params = self._map_options(request.options)

        try:
            response = self._client.chat.completions.create(
                model=request.model,
                messages=self._build_messages(request),
                **params,
            )
        except OpenAIError as e:
            status_code = getattr(e, "status_code", None)
            raise CaptionTransportError(
                f"OpenAI API error: {str(e)}",
                image_path=request.image_path,
                status_code=status_code,
            )

        if not response.choices:
            raise CaptionTransportError(
                "no response from OpenAI API", image_path=request.image_path
            )

        return (response.choices[0].message.content or "").strip()

    def _build_messages(self, request: CaptionRequest) -> List[dict]:
        """Build messages array with the image as a data URL."""
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})

        data_url = f"data:{request.mime_type};base64,{request.to_base64()}"
        messages.append(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": request.prompt},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            }
        )
        return messages

    @staticmethod
    def _map_options(options: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Ollama-style generation options to OpenAI parameters."""
        params: Dict[str, Any] = {}
        if "num_predict" in options:
            params["max_tokens"] = int(options["num_predict"])
        if "temperature" in options:
            params["temperature"] = float(options["temperature"])
        if "seed" in options:
            params["seed"] = int(options["seed"])
        if options.get("stop"):
            params["stop"] = list(options["stop"])
        return params

    def is_available(self) -> bool:
        """Check if the endpoint answers a model listing."""
        try:
            self._client.models.list()
            return True
        except Exception:
            return False

    def describe(self) -> str:
        return f"OpenAI-compatible API at {self.base_url}"
