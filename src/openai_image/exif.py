from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any

import piexif  # type: ignore[import-untyped]
from PIL import Image

SOFTWARE = "openai-image"


def set_exif_data(
    image_path: Path | str,
    *,
    description: str | None = None,
    model: str | None = None,
    file_time: datetime | None = None,
    quiet: bool = True,
) -> bool:
    """Write fresh EXIF metadata into a saved image.

    Any existing EXIF block is replaced. The ImageDescription tag carries the
    model and prompt as ``Model: <model> Prompt: <prompt>`` on a single line so
    read_prompt_from_exif can recover them later.

    Args:
        image_path: Path to the image file to update in place.
        description: Prompt text to store; the tag is omitted when empty.
        model: Model name stored alongside the prompt and in the Model tag.
        file_time: Timestamp for the date fields. Defaults to the file mtime.
        quiet: If False, prints a status line.

    Returns:
        bool: True on success, False on failure (including missing file).
    """
    p = Path(image_path)

    if not p.exists():
        if not quiet:
            print(f"File not found: {p}")
        return False

    zeroth: dict[int, Any] = {}
    exif_section: dict[int, Any] = {}
    exif_dict: dict[str, Any] = {
        "0th": zeroth,
        "Exif": exif_section,
        "GPS": {},
        "Interop": {},
        "1st": {},
        "thumbnail": None,
    }

    if file_time is None:
        file_time = datetime.fromtimestamp(os.path.getmtime(p))
    formatted_date = file_time.strftime("%Y:%m:%d %H:%M:%S")

    zeroth[piexif.ImageIFD.Software] = SOFTWARE.encode()
    zeroth[piexif.ImageIFD.DateTime] = formatted_date.encode()
    if model:
        zeroth[piexif.ImageIFD.Model] = model.encode("utf-8", errors="ignore")
    if description:
        d = ""
        if model:
            d += f"Model: {model} "
        d += f"Prompt: {description}"
        d = d.replace("\n", " ")
        zeroth[piexif.ImageIFD.ImageDescription] = d.encode("utf-8", errors="ignore")

    exif_section[piexif.ExifIFD.DateTimeOriginal] = formatted_date.encode()
    exif_section[piexif.ExifIFD.DateTimeDigitized] = formatted_date.encode()

    try:
        exif_bytes = piexif.dump(exif_dict)
        with Image.open(p) as img:
            img.load()
            img.info.pop("exif", None)
            img.save(p, exif=exif_bytes)
        if not quiet:
            print(f"Updated EXIF data for {p}")
        return True
    except Exception as e:
        if not quiet:
            print(f"Error updating EXIF data for {p}: {e}")
        return False


def read_prompt_from_exif(image_path: Path | str) -> dict[str, Any]:
    """Return ``{"model", "prompt"}`` stored by set_exif_data, or {} if absent."""
    try:
        with Image.open(image_path) as img:
            exif = img.getexif()
    except OSError:
        exif = None

    description = exif.get(piexif.ImageIFD.ImageDescription) if exif else None
    if not description:
        return {}
    if isinstance(description, bytes):
        text = description.decode("utf-8", errors="ignore")
    else:
        text = _normalize_exif_text(str(description))
    return parse_exif_description(text)


def parse_exif_description(text: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    prompt_index = text.find("Prompt:")
    if prompt_index == -1:
        return result

    prompt_text = text[prompt_index + len("Prompt:") :].strip()
    model_text = None
    model_index = text.find("Model:")
    if 0 <= model_index < prompt_index:
        model_text = text[model_index + len("Model:") : prompt_index].strip()

    result["prompt"] = prompt_text
    result["model"] = model_text
    return result


def _normalize_exif_text(text: str) -> str:
    # Pillow decodes ASCII tags as latin-1
    try:
        return text.encode("latin-1").decode("utf-8")
    except UnicodeError:
        return text
