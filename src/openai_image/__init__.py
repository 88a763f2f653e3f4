"""openai-image package entrypoint.

main() parses command-line options using openai_image.options, checks the
API key, resolves the generation request and hands it to
openai_image.generation, which writes the images to the working directory.
"""

from __future__ import annotations

import os
import sys

from . import generation
from .errors import ImageCliError
from .options import parse_args, require_api_key, resolve_request
from .registry import API_KEY_ENV


def main() -> None:
    """CLI entrypoint: parse argv, generate images, and persist them locally."""

    try:
        parsed = parse_args(sys.argv[1:])
        api_key = require_api_key(os.environ.get(API_KEY_ENV))
        request = resolve_request(parsed)
        generation.generate_images(
            request,
            api_key,
            add_prompt_metadata=parsed.add_prompt_metadata,
            preview_assets=parsed.preview_assets,
        )
    except ImageCliError as exc:
        for line in exc.lines():
            print(line, file=sys.stderr)
        raise SystemExit(1) from exc
