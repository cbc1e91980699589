"""
Runtime settings for the captioning run.

Values come from (highest precedence first) command-line flags, environment
variables, an optional env file loaded at startup, and the defaults in
config.constants.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from config.constants import (
    DEFAULT_ENV_FILE,
    DEFAULT_MODEL,
    DEFAULT_PROMPT,
    DEFAULT_SYSTEM_PROMPT,
    ENV_API_KEY,
    ENV_END,
    ENV_MODEL,
    ENV_OPENAI,
    ENV_PROMPT,
    ENV_START,
    ENV_SYSTEM,
    ENV_TIMEOUT,
)

logger = logging.getLogger(__name__)


def load_env_file(path: str = DEFAULT_ENV_FILE) -> bool:
    """
    Load KEY=value pairs from an env file into os.environ.

    A missing file is silently ignored. Values from the file override
    variables already present in the process environment.

    Returns:
        True if the file existed and was loaded
    """
    env_path = Path(path)
    if not env_path.is_file():
        logger.debug(f"No env file at {env_path}")
        return False

    load_dotenv(dotenv_path=env_path, override=True, encoding="utf-8")
    logger.debug(f"Loaded env file {env_path}")
    return True


def parse_timeout(value: Optional[str]) -> Optional[float]:
    """Parse a timeout in seconds; empty or non-positive means no timeout."""
    if value is None or str(value).strip() == "":
        return None
    timeout = float(value)
    return timeout if timeout > 0 else None


@dataclass
class CaptionSettings:
    """Configuration for one captioning run."""

    # Prompting
    prompt: str = DEFAULT_PROMPT
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    start_caption: str = ""
    end_caption: str = ""

    # Backend
    model: str = DEFAULT_MODEL
    openai_url: str = ""
    api_key: str = ""
    timeout: Optional[float] = None

    # Behaviour
    dry_run: bool = False
    force: bool = False
    force_one_sentence: bool = False

    @property
    def use_openai(self) -> bool:
        """An OpenAI-compatible URL selects that transport for the whole run."""
        return bool(self.openai_url)

    @classmethod
    def from_env(cls) -> "CaptionSettings":
        """Create settings from environment variables."""
        return cls(
            prompt=os.getenv(ENV_PROMPT, DEFAULT_PROMPT),
            system_prompt=os.getenv(ENV_SYSTEM, DEFAULT_SYSTEM_PROMPT),
            start_caption=os.getenv(ENV_START, ""),
            end_caption=os.getenv(ENV_END, ""),
            model=os.getenv(ENV_MODEL, DEFAULT_MODEL),
            openai_url=os.getenv(ENV_OPENAI, ""),
            api_key=os.getenv(ENV_API_KEY, ""),
            timeout=parse_timeout(os.getenv(ENV_TIMEOUT)),
        )
