from __future__ import annotations

from datetime import datetime

import piexif
from PIL import Image

from openai_image import exif


def test_set_exif_data_on_jpeg_rewrites_description(tmp_path):
    image_path = tmp_path / "sample.jpg"
    Image.new("RGB", (32, 32), color="white").save(image_path)
    fixed_time = datetime(2024, 1, 2, 3, 4, 5)

    assert exif.set_exif_data(
        image_path,
        description="enchanted forest",
        model="dall-e-3",
        file_time=fixed_time,
    )

    metadata = piexif.load(str(image_path))
    assert (
        metadata["0th"][piexif.ImageIFD.ImageDescription]
        == b"Model: dall-e-3 Prompt: enchanted forest"
    )
    assert metadata["0th"][piexif.ImageIFD.Software] == exif.SOFTWARE.encode()
    assert metadata["Exif"][piexif.ExifIFD.DateTimeOriginal] == b"2024:01:02 03:04:05"

    # Running again without a description should fully rewrite EXIF and omit the tag
    assert exif.set_exif_data(image_path, file_time=fixed_time)
    metadata = piexif.load(str(image_path))
    assert piexif.ImageIFD.ImageDescription not in metadata["0th"]


def test_png_round_trip_through_read_prompt(tmp_path):
    """Generated images are PNGs; the stored prompt must be recoverable.

    Why: --add-prompt is only useful if the model and prompt can be read back
    from the saved generated_image_*.png file.
    """
    image_path = tmp_path / "generated_image_1_1.png"
    Image.new("RGB", (16, 16), color="blue").save(image_path)

    assert exif.set_exif_data(image_path, description="a red\nfox", model="gpt-image")

    assert exif.read_prompt_from_exif(image_path) == {
        "model": "gpt-image",
        "prompt": "a red fox",
    }


def test_set_exif_data_missing_file(tmp_path):
    assert exif.set_exif_data(tmp_path / "nope.png", description="x") is False


def test_read_prompt_without_metadata(tmp_path):
    image_path = tmp_path / "plain.png"
    Image.new("RGB", (8, 8)).save(image_path)
    assert exif.read_prompt_from_exif(image_path) == {}


def test_parse_exif_description():
    assert exif.parse_exif_description("Model: dall-e-2 Prompt: cats") == {
        "model": "dall-e-2",
        "prompt": "cats",
    }
    assert exif.parse_exif_description("Prompt: only prompt") == {
        "model": None,
        "prompt": "only prompt",
    }
    assert exif.parse_exif_description("unrelated") == {}
