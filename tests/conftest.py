from __future__ import annotations

import types
import urllib.request
from pathlib import Path

import pytest

import openai_image.options as options_module
from openai_image.registry import API_KEY_ENV


@pytest.fixture()
def test_env_file(tmp_path, monkeypatch) -> Path:
    """Provide an isolated .env file and API key for tests that parse the CLI."""

    env_path = tmp_path / ".env"
    env_path.write_text(f"{API_KEY_ENV}=test-key\n")
    # set first so load_dotenv never writes an unmanaged variable
    monkeypatch.setenv(API_KEY_ENV, "test-key")
    monkeypatch.setattr(options_module, "_DOTENV_FILE", env_path)
    return env_path


@pytest.fixture()
def no_api_key(tmp_path, monkeypatch) -> None:
    """Remove the API key from the environment and point dotenv at nothing."""

    monkeypatch.delenv(API_KEY_ENV, raising=False)
    monkeypatch.setattr(options_module, "_DOTENV_FILE", tmp_path / "missing.env")


class FakeImages:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeClient:
    def __init__(self, response=None, error: Exception | None = None):
        self.images = FakeImages(response=response, error=error)


def image_response(*urls: str | None):
    return types.SimpleNamespace(
        data=[types.SimpleNamespace(url=url, b64_json=None) for url in urls]
    )


class FakeResponse:
    def __init__(self, data: bytes):
        self._data = data

    def read(self) -> bytes:
        return self._data

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


@pytest.fixture()
def fake_client():
    return FakeClient


@pytest.fixture()
def make_response():
    return image_response


@pytest.fixture()
def fake_downloads(monkeypatch):
    """Route urllib downloads to in-memory payloads keyed by URL.

    A payload that is an exception instance is raised instead of returned.
    """

    payloads: dict[str, bytes | Exception] = {}
    requested: list[str] = []

    def urlopen(url):
        requested.append(url)
        value = payloads[url]
        if isinstance(value, Exception):
            raise value
        return FakeResponse(value)

    monkeypatch.setattr(urllib.request, "urlopen", urlopen)
    return types.SimpleNamespace(payloads=payloads, requested=requested)
