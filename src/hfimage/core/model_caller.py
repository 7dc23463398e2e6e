"""Single-model calls against the Hugging Face inference router.

This module provides :class:`ModelCaller`, which performs exactly one
outbound request per call and normalizes whatever comes back into a
base64 ``data:`` URI.

Response Normalization
----------------------
The provider honours ``Accept: image/png`` for most models and returns raw
bytes.  Some backends answer with JSON instead.  Both paths end in the same
place:

- **Binary** (``Content-Type`` contains ``image/``): the body bytes are
  base64-encoded.
- **JSON**: the body is matched against the known shapes in
  :data:`BASE64_SHAPES`, first match wins.

The media type of the resulting data URI is sniffed from the decoded image
bytes with Pillow, so a JPEG served under ``image/png`` is labelled
``image/jpeg``.  Bytes Pillow cannot identify are labelled ``image/png``.

Concurrency
-----------
A single ``httpx.AsyncClient`` is shared by every call in the process and
an ``asyncio.Semaphore`` bounds how many calls are in flight at once.  No
retry or backoff happens here; that is the orchestrator's concern.

Usage
-----
::

    async with httpx.AsyncClient(timeout=120.0) as client:
        caller = ModelCaller(client, token="hf_...")
        uri = await caller.call("stabilityai/sdxl-turbo", "a goblin", 768, 768)
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
from PIL import Image, UnidentifiedImageError

from hfimage.core.config import HFImageConfig
from hfimage.core.errors import MalformedResponseError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/png"

# Length of the body excerpt quoted in "no image field" errors.
BODY_EXCERPT_CHARS = 300


# ---------------------------------------------------------------------------
# JSON shape detection.
# ---------------------------------------------------------------------------


def _top_level(field: str) -> Callable[[Any], Any]:
    def lookup(data: Any) -> Any:
        return data.get(field) if isinstance(data, dict) else None

    return lookup


def _first_item(field: str) -> Callable[[Any], Any]:
    def lookup(data: Any) -> Any:
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0].get(field)
        return None

    return lookup


# Known JSON layouts carrying a base64 image, in priority order.
BASE64_SHAPES: tuple[tuple[str, Callable[[Any], Any]], ...] = (
    ("b64_json", _top_level("b64_json")),
    ("image_base64", _top_level("image_base64")),
    ("list[0].b64_json", _first_item("b64_json")),
)


def extract_base64(data: Any, model_id: str = "") -> str:
    """Return the base64 payload from a JSON provider response.

    Args:
        data: Decoded JSON body.
        model_id: Model identifier, used in the error message.

    Returns:
        The base64 string from the first matching shape.

    Raises:
        MalformedResponseError: If no known shape carries a non-empty string.
    """
    for name, lookup in BASE64_SHAPES:
        value = lookup(data)
        if isinstance(value, str) and value:
            logger.debug(f"Found base64 payload in '{name}' for {model_id}")
            return value

    excerpt = json.dumps(data)[:BODY_EXCERPT_CHARS]
    raise MalformedResponseError(
        f"HF response for {model_id} was JSON, not image. Body: {excerpt}...",
        model_id=model_id,
        body=excerpt,
    )


# ---------------------------------------------------------------------------
# Data URI helpers.
# ---------------------------------------------------------------------------


def sniff_media_type(raw: bytes) -> str:
    """Return the MIME type of *raw* image bytes, or ``image/png`` if unknown."""
    try:
        with Image.open(io.BytesIO(raw)) as img:
            fmt = img.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return DEFAULT_MEDIA_TYPE
    return Image.MIME.get(fmt or "", DEFAULT_MEDIA_TYPE)


def to_data_uri(raw: bytes) -> str:
    """Encode image bytes as a base64 ``data:`` URI."""
    payload = base64.b64encode(raw).decode("ascii")
    return f"data:{sniff_media_type(raw)};base64,{payload}"


def base64_to_data_uri(payload: str) -> str:
    """Wrap an already-encoded base64 payload in a ``data:`` URI.

    The payload is passed through unchanged.  It is decoded only to sniff
    the media type; a payload that does not decode is labelled PNG.
    """
    try:
        raw = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError):
        return f"data:{DEFAULT_MEDIA_TYPE};base64,{payload}"
    return f"data:{sniff_media_type(raw)};base64,{payload}"


# ---------------------------------------------------------------------------
# Model caller.
# ---------------------------------------------------------------------------


class ModelCaller:
    """Issues one inference request per call and normalizes the result.

    Attributes:
        _client (httpx.AsyncClient):
            Shared client; owned by the caller of this class.
        _token (str):
            Bearer token sent with every request.
        _base_url (str):
            Endpoint base; ``/<model_id>`` is appended.
        _steps (int), _guidance (float):
            Inference hints sent in ``parameters``.
        _limiter (asyncio.Semaphore):
            Bounds simultaneous outbound calls.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        *,
        base_url: str = "https://router.huggingface.co/hf-inference/models",
        num_inference_steps: int = 4,
        guidance_scale: float = 0.0,
        max_concurrent_calls: int = 8,
    ) -> None:
        self._client = client
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._steps = num_inference_steps
        self._guidance = guidance_scale
        self._limiter = asyncio.Semaphore(max_concurrent_calls)

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, config: HFImageConfig) -> ModelCaller:
        """Build a caller from application configuration.

        The token may be ``None`` here; the API layer refuses to generate
        before any call is made in that case.
        """
        return cls(
            client,
            config.huggingface_token or "",
            base_url=config.provider_base_url,
            num_inference_steps=config.num_inference_steps,
            guidance_scale=config.guidance_scale,
            max_concurrent_calls=config.max_concurrent_calls,
        )

    def endpoint(self, model_id: str) -> str:
        """Return the inference URL for *model_id*."""
        return f"{self._base_url}/{model_id}"

    def build_payload(self, prompt: str, width: int, height: int) -> dict:
        """Return the JSON body for one inference request."""
        return {
            "inputs": prompt,
            "parameters": {
                "width": width,
                "height": height,
                "num_inference_steps": self._steps,
                "guidance_scale": self._guidance,
            },
            "options": {"wait_for_model": True},
        }

    async def call(self, model_id: str, prompt: str, width: int, height: int) -> str:
        """Generate one image with *model_id* and return it as a data URI.

        Raises:
            AuthError: Provider answered 401/403.
            UpstreamError: Provider answered any other non-2xx status.
            NetworkError: The request never produced a response.
            MalformedResponseError: Undecodable body, or 2xx response without
                a usable image.
        """
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "image/png",
        }
        logger.debug(f"Calling {model_id} ({width}x{height})")

        async with self._limiter:
            try:
                response = await self._client.post(
                    self.endpoint(model_id),
                    json=self.build_payload(prompt, width, height),
                    headers=headers,
                )
            except httpx.DecodingError as e:
                raise MalformedResponseError(
                    f"HF response for {model_id} could not be decoded: {e}",
                    model_id=model_id,
                ) from e
            except httpx.RequestError as e:
                raise NetworkError(
                    f"HF request for {model_id} failed: {e!r}",
                    model_id=model_id,
                ) from e

        if not response.is_success:
            raise UpstreamError.from_status(response.status_code, model_id, response.text)

        return self._normalize(response, model_id)

    def _normalize(self, response: httpx.Response, model_id: str) -> str:
        content_type = response.headers.get("content-type", "")
        if "image/" in content_type:
            return to_data_uri(response.content)

        try:
            data = response.json()
        except ValueError as e:
            excerpt = response.text[:BODY_EXCERPT_CHARS]
            raise MalformedResponseError(
                f"HF response for {model_id} was neither image nor JSON. Body: {excerpt}...",
                model_id=model_id,
                body=excerpt,
            ) from e

        return base64_to_data_uri(extract_base64(data, model_id))
