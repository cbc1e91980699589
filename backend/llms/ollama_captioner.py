import logging
import os
from typing import List, Optional
from urllib.parse import urlparse

import requests

from backend.errors.caption_errors import CaptionTransportError
from backend.llms.captioner_strategy import CaptionerStrategy
from backend.models.caption_models import CaptionRequest
from config.constants import (
    ENV_OLLAMA_HOST,
    OLLAMA_DEFAULT_HOST,
    OLLAMA_DEFAULT_PORT,
    OLLAMA_DEFAULT_SCHEME,
)

logger = logging.getLogger(__name__)


def resolve_ollama_host(raw: Optional[str] = None) -> str:
    """
    Build the Ollama base URL from OLLAMA_HOST-style input.

    Accepts "", "host", "host:port", ":port" or a full URL. Missing parts
    fall back to http://127.0.0.1:11434.
    """
    if raw is None:
        raw = os.getenv(ENV_OLLAMA_HOST, "")
    raw = raw.strip().rstrip("/")
    if not raw:
        return f"{OLLAMA_DEFAULT_SCHEME}://{OLLAMA_DEFAULT_HOST}:{OLLAMA_DEFAULT_PORT}"

    if "://" not in raw:
        raw = f"{OLLAMA_DEFAULT_SCHEME}://{raw}"

    parsed = urlparse(raw)
    scheme = parsed.scheme or OLLAMA_DEFAULT_SCHEME
    host = parsed.hostname or OLLAMA_DEFAULT_HOST
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port is None:
        port = {"http": OLLAMA_DEFAULT_PORT, "https": 443}.get(scheme, OLLAMA_DEFAULT_PORT)

    return f"{scheme}://{host}:{port}{parsed.path}"


class OllamaCaptioner(CaptionerStrategy):
    """Captioner backed by the Ollama chat API."""

    provider_name = "ollama"

    def __init__(self, host: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize Ollama captioner.

        Args:
            host: Ollama host (default: OLLAMA_HOST or http://127.0.0.1:11434)
            timeout: Request timeout in seconds (None = wait indefinitely)
        """
        self.base_url = resolve_ollama_host(host)
        self.timeout = timeout

    def caption(self, request: CaptionRequest) -> str:
        """Generate a caption using the Ollama /api/chat endpoint."""
        payload = {
            "model": request.model,
            "messages": self._build_messages(request),
            "options": request.options,
            "stream": False,
        }

        try:
            response = requests.post(
                f"{self.base_url}/api/chat",
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise CaptionTransportError(
                f"Failed to connect to Ollama at {self.base_url}: {str(e)}",
                image_path=request.image_path,
            )

        if not (200 <= response.status_code < 300):
            raise CaptionTransportError(
                f"Ollama API error {response.status_code}: {self._error_detail(response)}",
                image_path=request.image_path,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CaptionTransportError(
                f"Invalid JSON from Ollama: {str(e)}", image_path=request.image_path
            )

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict) or "content" not in message:
            raise CaptionTransportError(
                "Unexpected Ollama response format", image_path=request.image_path
            )

        return str(message["content"]).strip()

    def _build_messages(self, request: CaptionRequest) -> List[dict]:
        """Optional system message followed by the user message carrying the image."""
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})

        messages.append(
            {
                "role": "user",
                "content": request.prompt,
                "images": [request.to_base64()],
            }
        )
        return messages

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            data = response.json()
            if isinstance(data, dict) and data.get("error"):
                return str(data["error"])
        except ValueError:
            pass
        return response.text[:200]

    def is_available(self) -> bool:
        """Check if Ollama server is running."""
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=2)
            return response.status_code == 200
        except Exception:
            return False

    def describe(self) -> str:
        return f"Ollama API at {self.base_url}"
