"""Command-line options parser for openai-image.

This module builds and parses command-line options for the openai-image CLI
and resolves them into a validated GenerationRequest. The model choices and
their documented sizes come from openai_image.registry.MODEL_REGISTRY.

Usage:
- build_parser(registry) -> argparse.ArgumentParser
- parse_args(argv, registry=MODEL_REGISTRY, parser=None) -> ParsedOptions
- require_api_key(value) -> str
- resolve_request(parsed) -> GenerationRequest

Rules enforced:
- The prompt comes from the positional argument, else --prompt, else the
  stripped contents of --prompt-file. The file is only read when neither of
  the other sources is given.
- An unreadable prompt file raises PromptFileError; no prompt at all raises
  MissingPromptError when resolving.
- --n must be a positive integer; --model must be a registry key. Usage
  errors exit with status 1; --help exits with status 0.
- A prompt starting with "-" must follow "--" or be given with --prompt.
- Single-image models (dall-e-3, gpt-image, gpt-image-mini) clamp n to 1
  with a warning on stderr.
- --size is passed through untouched; the provider rejects unsupported sizes.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

from dotenv import load_dotenv

from .errors import MissingCredentialError, MissingPromptError, PromptFileError
from .registry import (
    API_KEY_ENV,
    DEFAULT_COUNT,
    DEFAULT_MODEL,
    DEFAULT_SIZE,
    MODEL_REGISTRY,
    is_single_image,
)

_DOTENV_FILE = Path(".env")


@dataclass
class ParsedOptions:
    """Structured result of parsing command-line arguments.

    Attributes:
        model: Selected model key from the registry.
        prompt: Prompt text from the winning source, or None if none was given.
        size: Requested image size token, e.g. "1024x1024".
        count: Requested number of images before model policy is applied.
        prompt_file: Path the prompt was loaded from, if it came from a file.
        add_prompt_metadata: Whether to store the prompt in the image EXIF.
        preview_assets: Whether to open each saved image after writing it.
    """

    model: str
    prompt: str | None
    size: str = DEFAULT_SIZE
    count: int = DEFAULT_COUNT
    prompt_file: str | None = None
    add_prompt_metadata: bool = False
    preview_assets: bool = False


@dataclass(frozen=True)
class GenerationRequest:
    """Validated parameters for a single image generation call."""

    prompt: str
    size: str
    count: int
    model: str


def _prompt_from_file(path: Path) -> str:
    """Load prompt text from a file path and return it stripped.

    Raises:
        PromptFileError: The file is missing, unreadable or not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PromptFileError(str(path), exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise PromptFileError(str(path), str(exc)) from exc
    return text.strip()


def _positive_int(value: str) -> int:
    candidate = value.strip()
    try:
        parsed = int(candidate)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"number of images must be an integer, got '{value}'"
        ) from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("number of images must be a positive integer")
    return parsed


class CliArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit with status 1 like other fatal errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _format_epilog(registry: Mapping[str, Mapping[str, Any]]) -> str:
    lines = ["valid sizes per model:"]
    for name, model_def in registry.items():
        sizes = ", ".join(model_def.get("sizes", ()))
        lines.append(f"  {name}: {sizes}")
    single = [name for name, model_def in registry.items() if model_def.get("single_image")]
    if single:
        lines.append(f"note: {', '.join(single)} only support --n 1")
    lines.extend(
        [
            "",
            "environment variables:",
            f"  {API_KEY_ENV}  your OpenAI API key (required, may be set in .env)",
            "",
            "examples:",
            '  openai-image "A sunset over mountains"',
            '  openai-image --prompt "A cat playing piano" --size 1024x1024 --n 1',
            '  openai-image "Abstract art" --model dall-e-2 --size 512x512 --n 2',
            "  openai-image --prompt-file prompts/city.txt --model gpt-image",
            "  openai-image -- -minimalist   (prompts starting with - go after --)",
        ]
    )
    return "\n".join(lines)


def build_parser(
    registry: Mapping[str, Mapping[str, Any]] = MODEL_REGISTRY,
) -> argparse.ArgumentParser:
    """Build the CLI argument parser."""

    parser = CliArgumentParser(
        prog="openai-image",
        description="Generate images with the OpenAI Images API and save them locally.",
        epilog=_format_epilog(registry),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "prompt_text",
        nargs="?",
        metavar="prompt",
        help="image generation prompt (takes precedence over --prompt)",
    )
    parser.add_argument("--prompt", dest="prompt", help="image generation prompt")
    parser.add_argument(
        "--prompt-file",
        dest="prompt_file",
        metavar="PATH",
        help="read the prompt from a text file (used when no prompt is given)",
    )
    parser.add_argument(
        "--size",
        dest="size",
        default=DEFAULT_SIZE,
        metavar="WxH",
        help=f"image size (default: {DEFAULT_SIZE})",
    )
    parser.add_argument(
        "--n",
        dest="count",
        type=_positive_int,
        default=DEFAULT_COUNT,
        metavar="N",
        help=f"number of images to generate (default: {DEFAULT_COUNT})",
    )
    parser.add_argument(
        "--model",
        dest="model",
        choices=list(registry.keys()),
        default=DEFAULT_MODEL,
        help=f"model to use (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "-a",
        "--add-prompt",
        dest="add_prompt_metadata",
        action="store_true",
        help="store the model and prompt in the image EXIF metadata",
    )
    parser.add_argument(
        "--preview",
        dest="preview_assets",
        action="store_true",
        help="open generated images after they are saved (macOS only)",
    )
    return parser


def parse_args(
    argv: list[str],
    *,
    registry: Mapping[str, Mapping[str, Any]] = MODEL_REGISTRY,
    parser: argparse.ArgumentParser | None = None,
) -> ParsedOptions:
    """Parse argv into a ParsedOptions object, loading the prompt file if needed."""

    load_dotenv(_DOTENV_FILE)  # silently ignore if there is none, assume defaults.

    if parser is None:
        parser = build_parser(registry)

    ns = parser.parse_args(argv)

    prompt: str | None = None
    prompt_file: str | None = None
    if ns.prompt_text is not None:
        prompt = ns.prompt_text
    elif ns.prompt is not None:
        prompt = ns.prompt
    elif ns.prompt_file is not None:
        prompt_file = ns.prompt_file
        prompt = _prompt_from_file(Path(prompt_file))

    return ParsedOptions(
        model=ns.model,
        prompt=prompt,
        size=ns.size,
        count=ns.count,
        prompt_file=prompt_file,
        add_prompt_metadata=bool(ns.add_prompt_metadata),
        preview_assets=bool(ns.preview_assets),
    )


def require_api_key(value: str | None, *, env_name: str = API_KEY_ENV) -> str:
    """Return the credential or raise MissingCredentialError when it is blank."""

    if value is None or not value.strip():
        raise MissingCredentialError(env_name)
    return value.strip()


def resolve_request(parsed: ParsedOptions) -> GenerationRequest:
    """Apply prompt validation and per-model policy to parsed options."""

    if parsed.prompt is None or not parsed.prompt.strip():
        raise MissingPromptError(parsed.prompt_file)

    count = parsed.count
    if is_single_image(parsed.model) and count > 1:
        print(
            f"warning: {parsed.model} only supports n=1. Setting n to 1.",
            file=sys.stderr,
        )
        count = 1

    return GenerationRequest(
        prompt=parsed.prompt,
        size=parsed.size,
        count=count,
        model=parsed.model,
    )
