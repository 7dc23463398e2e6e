"""Pydantic request and response models for the Image Generator API.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.  Fields are deliberately untyped:
    clients send ``n`` as a string or ``size`` as garbage and the service
    coerces rather than rejects (see :mod:`hfimage.core.params`).
GenerateResponse
    Success body: one data URI per requested image.
ErrorResponse
    Body of every non-200 answer.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Text prompt.  Required and non-blank, but checked by the
            route so that a missing prompt answers 400 rather than 422.
        n: Number of images.  Coerced and clamped to 1–4.
        size: ``"WxH"`` string.  Unparsable dimensions fall back to 768.
    """

    prompt: Any = Field(
        default=None,
        description="Text prompt (required, non-blank).",
    )
    n: Any = Field(
        default=1,
        description="Number of images to generate (clamped to 1–4).",
    )
    size: Any = Field(
        default="768x768",
        description="Image size as 'WxH' (e.g. '512x1024').",
    )


class GenerateResponse(BaseModel):
    """Response body for a successful generation.

    Attributes:
        images: Data URIs, in request order.
    """

    images: list[str] = Field(
        ...,
        description="Base64 data URIs, one per requested image.",
    )


class ErrorResponse(BaseModel):
    """Response body for every error status."""

    error: str = Field(..., description="Human-readable error message.")
