"""Error taxonomy for the HF Image Generator.

Every error raised by the core carries the HTTP status the API layer should
answer with (``http_status``).  Upstream failures additionally carry the
status code the inference provider returned, so the fallback orchestrator
can branch on a structured field instead of inspecting attributes.

Hierarchy
---------
::

    HFImageError                    500
    ├── InvalidPromptError          400
    ├── ConfigurationError          500
    ├── AllModelsFailedError        502
    └── UpstreamError               502
        ├── AuthError               502  (provider answered 401/403)
        ├── NetworkError            502  (transport failure, no status)
        └── MalformedResponseError  502  (undecodable or unusable body)
"""

from __future__ import annotations

AUTH_STATUS_CODES = frozenset({401, 403})


class HFImageError(Exception):
    """Base class for every error the service reports to clients.

    The message is user-facing: the API layer returns ``str(exc)`` as the
    ``error`` field of the JSON response.
    """

    http_status: int = 500


class InvalidPromptError(HFImageError):
    """The request carried no usable prompt."""

    http_status = 400


class ConfigurationError(HFImageError):
    """Server-side misconfiguration (e.g. the provider token is missing)."""

    http_status = 500


class AllModelsFailedError(HFImageError):
    """Raised when the fallback list is empty and nothing could be tried."""

    http_status = 502


class UpstreamError(HFImageError):
    """A single model attempt against the inference provider failed.

    Attributes:
        status_code: HTTP status returned by the provider, or ``None`` when
            no response was received or the response was 2xx but unusable.
        model_id: Identifier of the model that was called.
        body: Response body text (may be empty).
    """

    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        model_id: str | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.model_id = model_id
        self.body = body

    @property
    def is_auth_failure(self) -> bool:
        """``True`` when retrying other models with the same credential is pointless."""
        return self.status_code in AUTH_STATUS_CODES

    @classmethod
    def from_status(cls, status_code: int, model_id: str, body: str = "") -> UpstreamError:
        """Build the error for a non-success HTTP response.

        Returns an :class:`AuthError` for 401/403 and a plain
        :class:`UpstreamError` otherwise.  The message mirrors the form
        ``HF <status> for <model>[: <body>]``.
        """
        message = f"HF {status_code} for {model_id}"
        if body:
            message = f"{message}: {body}"
        error_cls = AuthError if status_code in AUTH_STATUS_CODES else UpstreamError
        return error_cls(message, status_code=status_code, model_id=model_id, body=body)


class AuthError(UpstreamError):
    """The provider rejected the credential (401/403)."""


class NetworkError(UpstreamError):
    """Transport-level failure: DNS, connection reset, timeout."""


class MalformedResponseError(UpstreamError):
    """The body could not be decoded, or a 2xx body held no image."""
