"""
Command-line interface for capollama.

Captions images with a vision LLM and writes each caption next to its image
as a .txt file.

Usage:
    # Caption a folder with the local Ollama server
    capollama ~/Pictures/dogs

    # Prefix every caption and only print, don't write files
    capollama ~/Pictures/dogs -s "image of Leela the dog," --dry-run

    # Use an OpenAI-compatible endpoint (lm-studio, vLLM, OpenAI)
    capollama photo.jpg -o http://localhost:1234/v1 -m qwen2.5-vl-7b-instruct

    # Load settings from another env file
    capollama --env captions.env ~/Pictures
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from backend.errors.caption_errors import CaptionError
from backend.llms.captioner_factory import CaptionerFactory
from backend.vision.caption_pipeline import CaptionPipeline
from config.constants import APP_NAME, APP_VERSION, DEFAULT_ENV_FILE, ENV_LOG_DIR
from config.logging_config import setup_logging
from config.settings import CaptionSettings, load_env_file, parse_timeout


def _env_file_from_argv(argv: List[str]) -> str:
    """Pick --env FILE out of argv before the real parser reads env defaults."""
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--env", default=DEFAULT_ENV_FILE)
    known, _ = pre.parse_known_args(argv)
    return known.env


def build_parser(defaults: CaptionSettings) -> argparse.ArgumentParser:
    """Build the argument parser; defaults come from the environment."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Caption images with a vision LLM (Ollama or OpenAI-compatible API)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  CAPOLLAMA_SYSTEM, CAPOLLAMA_PROMPT, CAPOLLAMA_START, CAPOLLAMA_END,
  CAPOLLAMA_MODEL, CAPOLLAMA_OPENAI, CAPOLLAMA_API_KEY, CAPOLLAMA_TIMEOUT,
  CAPOLLAMA_LOG_DIR provide defaults for the matching flags.
  OLLAMA_HOST selects the Ollama server (default http://127.0.0.1:11434).
        """,
    )

    parser.add_argument(
        "path",
        help="Path to an image or a directory with images",
    )

    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Don't write captions as .txt (stripping the original extension)",
    )

    parser.add_argument(
        "--system",
        default=defaults.system_prompt,
        help="The system prompt that will be used",
    )

    parser.add_argument(
        "-p", "--prompt",
        default=defaults.prompt,
        help="The prompt to use",
    )

    parser.add_argument(
        "-s", "--start",
        default=defaults.start_caption,
        help="Start the caption with this (image of Leela the dog,)",
    )

    parser.add_argument(
        "-e", "--end",
        default=defaults.end_caption,
        help="End the caption with this (in the style of 'something')",
    )

    parser.add_argument(
        "-m", "--model",
        default=defaults.model,
        help=f'The model that will be used, must be a vision model like "llava" (default: {defaults.model})',
    )

    parser.add_argument(
        "-o", "--openai",
        default=defaults.openai_url,
        help="If given a url the app will use the OpenAI protocol instead of the Ollama API",
    )

    parser.add_argument(
        "--api-key",
        default=defaults.api_key,
        help="API key for OpenAI-compatible endpoints (optional for lm-studio/ollama)",
    )

    parser.add_argument(
        "--timeout",
        type=parse_timeout,
        default=defaults.timeout,
        help="Request timeout in seconds (default: wait indefinitely)",
    )

    parser.add_argument(
        "--force-one-sentence",
        action="store_true",
        help="Stops generation after the first period (.)",
    )

    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Also process the image if a file with .txt extension exists",
    )

    parser.add_argument(
        "--env",
        default=DEFAULT_ENV_FILE,
        metavar="FILE",
        help=f"Env file loaded before parsing (default: {DEFAULT_ENV_FILE})",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--log-dir",
        default=os.getenv(ENV_LOG_DIR) or None,
        help="Also write logs to a rotating file in this directory",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}",
    )

    return parser


def settings_from_args(args: argparse.Namespace) -> CaptionSettings:
    """Map parsed arguments onto run settings."""
    return CaptionSettings(
        prompt=args.prompt,
        system_prompt=args.system,
        start_caption=args.start,
        end_caption=args.end,
        model=args.model,
        openai_url=args.openai,
        api_key=args.api_key,
        timeout=args.timeout,
        dry_run=args.dry_run,
        force=args.force,
        force_one_sentence=args.force_one_sentence,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]

    load_env_file(_env_file_from_argv(argv))

    parser = build_parser(CaptionSettings.from_env())
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_dir=args.log_dir,
    )
    logger = logging.getLogger(__name__)

    settings = settings_from_args(args)

    try:
        captioner = CaptionerFactory.create(settings)

        logger.info(f"Using {captioner.describe()}")
        if not captioner.is_available():
            logger.warning("Captioning backend did not answer the availability check")
        logger.info(f"Using Model: {settings.model}")
        logger.info(f"Scanning: {args.path}")

        CaptionPipeline(captioner, settings).run(args.path)

    except CaptionError as e:
        logger.error(f"Aborting because of {e}", extra={"caption_error": e.to_dict()})
        return 1

    return 0
