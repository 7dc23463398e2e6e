"""Tests for hfimage.core.errors — error taxonomy and status mapping."""

from __future__ import annotations

import pytest

from hfimage.core.errors import (
    AllModelsFailedError,
    AuthError,
    ConfigurationError,
    HFImageError,
    InvalidPromptError,
    MalformedResponseError,
    NetworkError,
    UpstreamError,
)


class TestFromStatus:
    """UpstreamError.from_status construction."""

    @pytest.mark.parametrize("code", [401, 403])
    def test_auth_statuses_build_auth_error(self, code):
        err = UpstreamError.from_status(code, "org/model", "bad token")
        assert isinstance(err, AuthError)
        assert err.is_auth_failure
        assert err.status_code == code

    @pytest.mark.parametrize("code", [404, 429, 500, 503])
    def test_other_statuses_build_plain_upstream_error(self, code):
        err = UpstreamError.from_status(code, "org/model")
        assert type(err) is UpstreamError
        assert not err.is_auth_failure

    def test_message_includes_body(self):
        err = UpstreamError.from_status(500, "org/model", "overloaded")
        assert str(err) == "HF 500 for org/model: overloaded"
        assert err.body == "overloaded"
        assert err.model_id == "org/model"

    def test_message_without_body(self):
        assert str(UpstreamError.from_status(404, "org/model")) == "HF 404 for org/model"


class TestHttpStatus:
    """Each error class maps to the status the API answers with."""

    @pytest.mark.parametrize(
        ("error_cls", "status"),
        [
            (HFImageError, 500),
            (InvalidPromptError, 400),
            (ConfigurationError, 500),
            (AllModelsFailedError, 502),
            (UpstreamError, 502),
            (AuthError, 502),
            (NetworkError, 502),
            (MalformedResponseError, 502),
        ],
    )
    def test_http_status(self, error_cls, status):
        assert error_cls.http_status == status

    def test_network_error_has_no_status(self):
        err = NetworkError("connection reset")
        assert err.status_code is None
        assert not err.is_auth_failure
