"""Utilities for invoking the OpenAI Images API and persisting generated images."""

from __future__ import annotations

import http.client
import subprocess
import sys
import time
import urllib.request
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import openai

from . import exif
from .errors import GenerationError
from .options import GenerationRequest

FILENAME_TEMPLATE = "generated_image_{timestamp}_{index}.png"


@dataclass(frozen=True)
class ImageResult:
    """One entry of the provider response."""

    index: int
    url: str | None


def generate_images(
    request: GenerationRequest,
    api_key: str,
    *,
    client: Any | None = None,
    output_dir: Path | None = None,
    add_prompt_metadata: bool = False,
    preview_assets: bool = False,
    clock: Callable[[], int] | None = None,
) -> list[Path]:
    """Invoke the images endpoint once and download every returned image.

    Per-image download or write failures are reported on stderr and skipped.
    Returns the paths that were written, in result order.

    Raises:
        GenerationError: The generation call failed or returned no images.
    """

    if client is None:
        client = _create_client(api_key)
    if output_dir is None:
        output_dir = Path.cwd()
    if clock is None:
        clock = _epoch_millis

    _emit_request_info(request)
    start_time = time.perf_counter()

    try:
        response = client.images.generate(
            model=request.model,
            prompt=request.prompt,
            n=request.count,
            size=request.size,
        )
    except openai.OpenAIError as exc:
        raise GenerationError(
            "failed to generate images", details=_describe_provider_error(exc)
        ) from exc

    elapsed = time.perf_counter() - start_time
    _emit_elapsed(elapsed)

    results = _extract_results(response)
    print(f"\nSuccessfully generated {len(results)} image(s):")
    if not results:
        raise GenerationError("No images were generated")

    written: list[Path] = []
    for result in results:
        if not result.url:
            print(f"Image {result.index}: No URL returned", file=sys.stderr)
            continue

        print(f"\nImage {result.index}:")
        print(f"URL: {result.url}")
        try:
            data = _download(result.url)
            filename = FILENAME_TEMPLATE.format(timestamp=clock(), index=result.index)
            path = output_dir / filename
            path.write_bytes(data)
        except (OSError, ValueError, http.client.HTTPException) as exc:
            print(
                f"Failed to download image {result.index}: {exc}",
                file=sys.stderr,
            )
            continue

        print(f"Saved to: {path}")
        if add_prompt_metadata:
            _apply_exif_metadata(path, request)
        if preview_assets:
            _handle_post_write(path)
        written.append(path)

    print("\nDone!")
    return written


def _create_client(api_key: str) -> openai.OpenAI:
    # single attempt per invocation
    return openai.OpenAI(api_key=api_key, max_retries=0)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def _extract_results(response: Any) -> list[ImageResult]:
    entries = getattr(response, "data", None)
    if entries is None and isinstance(response, Mapping):
        entries = response.get("data")
    if not entries:
        return []
    return [
        ImageResult(index=index, url=_entry_url(entry))
        for index, entry in enumerate(entries, start=1)
    ]


def _entry_url(entry: Any) -> str | None:
    if isinstance(entry, Mapping):
        value = entry.get("url")
    else:
        value = getattr(entry, "url", None)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _describe_provider_error(exc: openai.OpenAIError) -> list[str]:
    if isinstance(exc, openai.APIStatusError):
        message = _provider_message(exc.body) or exc.message or str(exc)
        return [f"Status: {exc.status_code}", f"Message: {message}"]
    return [str(exc)]


def _provider_message(body: Any) -> str | None:
    if not isinstance(body, Mapping):
        return None
    nested = body.get("error")
    if isinstance(nested, Mapping):
        body = nested
    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def _download(url: str) -> bytes:
    with urllib.request.urlopen(url) as response:
        return response.read()


def _emit_request_info(request: GenerationRequest) -> None:
    print(f"Generating {request.count} image(s) with {request.model}...")
    print(f"Prompt: {request.prompt}")
    print(f"Size: {request.size}")


def _emit_elapsed(elapsed_seconds: float) -> None:
    formatted = _format_elapsed(elapsed_seconds)
    print(f"Elapsed time: {formatted}")


def _format_elapsed(elapsed_seconds: float) -> str:
    hours, remainder = divmod(elapsed_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{int(hours)}:{int(minutes):02d}:{seconds:06.3f}"


def _handle_post_write(path: Path) -> None:
    if sys.platform != "darwin":
        return
    try:
        subprocess.run(["open", str(path)], check=False)
    except OSError:
        pass


def _apply_exif_metadata(path: Path, request: GenerationRequest) -> None:
    description = request.prompt.strip() or None
    success = exif.set_exif_data(path, description=description, model=request.model)
    if not success:
        print(f"warning: unable to update EXIF data for {path}", file=sys.stderr)


__all__ = ["FILENAME_TEMPLATE", "ImageResult", "generate_images"]
