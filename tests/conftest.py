"""Shared pytest fixtures for HF Image Generator tests."""

from __future__ import annotations

import io
import json
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from hfimage.api.main import create_app
from hfimage.core.config import HFImageConfig

TEST_MODELS = ("test/model-a", "test/model-b", "test/model-c")


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    """Render a tiny solid-colour image in the given Pillow format."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeProvider:
    """Scriptable stand-in for the inference router.

    Each model identifier maps to a handler returning an ``httpx.Response``.
    Models without a handler answer 404.  Every request is recorded so that
    tests can assert which models were tried and what was sent.
    """

    def __init__(self) -> None:
        self.handlers: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, model_id: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handlers[model_id] = handler

    def image(self, model_id: str, raw: bytes, content_type: str = "image/png") -> None:
        self.on(model_id, lambda req: httpx.Response(200, content=raw, headers={"content-type": content_type}))

    def status(self, model_id: str, code: int, text: str = "") -> None:
        self.on(model_id, lambda req: httpx.Response(code, text=text))

    def json(self, model_id: str, body) -> None:
        self.on(model_id, lambda req: httpx.Response(200, json=body))

    @property
    def called_models(self) -> list[str]:
        return [r.url.path.split("/models/", 1)[1] for r in self.requests]

    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        model_id = request.url.path.split("/models/", 1)[1]
        handler = self.handlers.get(model_id)
        if handler is None:
            return httpx.Response(404, text=f"Model {model_id} not found")
        return handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> HFImageConfig:
    """Create a test configuration with a token and a three-model list.

    ``static_dir`` points at a directory that does not exist, so no static
    mount is installed unless a test creates it.
    """
    return HFImageConfig(
        _env_file=None,
        huggingface_token="hf_test_token",
        models=TEST_MODELS,
        static_dir=temp_dir / "public",
    )


@pytest.fixture
def test_models(test_config: HFImageConfig) -> tuple[str, ...]:
    """The ordered fallback list configured by ``test_config``."""
    return test_config.models


@pytest.fixture
def png_bytes() -> bytes:
    """A valid 8x8 PNG."""
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A valid 8x8 JPEG."""
    return make_image_bytes("JPEG")


@pytest.fixture
def provider() -> FakeProvider:
    """A fake inference router where every model answers 404 by default."""
    return FakeProvider()


@pytest.fixture
def test_client(test_config: HFImageConfig, provider: FakeProvider) -> Generator[TestClient, None, None]:
    """A TestClient over an app wired to the fake provider.

    The client is used as a context manager so the app lifespan (which owns
    the outbound httpx client) runs.
    """
    app = create_app(test_config, transport=provider.transport())
    with TestClient(app) as client:
        yield client
