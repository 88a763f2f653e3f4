"""Supported OpenAI image models and their capabilities."""

from __future__ import annotations

from typing import Any

API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_MODEL = "dall-e-3"
DEFAULT_SIZE = "1024x1024"
DEFAULT_COUNT = 1

MODEL_REGISTRY: dict[str, dict[str, Any]] = {
    "dall-e-3": {
        "doc_url": "https://platform.openai.com/docs/models/dall-e-3",
        "sizes": ["1024x1024", "1024x1792", "1792x1024"],
        "single_image": True,
    },
    "dall-e-2": {
        "doc_url": "https://platform.openai.com/docs/models/dall-e-2",
        "sizes": ["256x256", "512x512", "1024x1024"],
        "single_image": False,
    },
    "gpt-image": {
        "doc_url": "https://platform.openai.com/docs/models/gpt-image-1",
        "sizes": ["1024x1024", "1024x1792", "1792x1024"],
        "single_image": True,
    },
    "gpt-image-mini": {
        "doc_url": "https://platform.openai.com/docs/models/gpt-image-1-mini",
        "sizes": ["1024x1024", "1024x1792", "1792x1024"],
        "single_image": True,
    },
}


def is_single_image(model: str) -> bool:
    return bool(MODEL_REGISTRY.get(model, {}).get("single_image", False))
