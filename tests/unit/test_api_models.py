"""Tests for hfimage.api.models — Pydantic request/response models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hfimage.api.models import ErrorResponse, GenerateRequest, GenerateResponse


class TestGenerateRequest:
    """Test GenerateRequest Pydantic model."""

    def test_defaults(self):
        req = GenerateRequest()
        assert req.prompt is None
        assert req.n == 1
        assert req.size == "768x768"

    def test_loose_types_accepted(self):
        """Fields accept any JSON value; coercion happens later."""
        req = GenerateRequest(prompt=42, n="three", size=[1, 2])
        assert req.prompt == 42
        assert req.n == "three"
        assert req.size == [1, 2]

    def test_unknown_fields_ignored(self):
        req = GenerateRequest.model_validate({"prompt": "cat", "style": "noir"})
        assert req.prompt == "cat"

    def test_non_object_rejected(self):
        with pytest.raises(ValidationError):
            GenerateRequest.model_validate(["cat"])


class TestResponses:
    """Response bodies."""

    def test_generate_response(self):
        body = GenerateResponse(images=["data:image/png;base64,AAA"]).model_dump()
        assert body == {"images": ["data:image/png;base64,AAA"]}

    def test_error_response_requires_message(self):
        with pytest.raises(ValidationError):
            ErrorResponse()
        assert ErrorResponse(error="boom").model_dump() == {"error": "boom"}
