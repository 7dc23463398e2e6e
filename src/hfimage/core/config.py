"""Configuration management for the HF Image Generator.

This module provides centralized configuration management using Pydantic Settings.
Configuration is loaded from environment variables with the HFIMAGE_ prefix,
allowing easy customization without code changes.  Two well-known variables
are also honoured without the prefix: ``HUGGINGFACE_TOKEN`` and ``PORT``.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (HFIMAGE_* prefix, or the unprefixed aliases)
2. .env file in the project root
3. Default values defined in HFImageConfig

Example .env file:
    HUGGINGFACE_TOKEN=hf_xxxxxxxxxxxxxxxxx
    PORT=3000
    HFIMAGE_MODELS=["stabilityai/sdxl-turbo", "runwayml/stable-diffusion-v1-5"]
    HFIMAGE_MAX_CONCURRENT_CALLS=8

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The FastAPI application reads it once at startup; tests build their own
instances and pass them to :func:`hfimage.api.main.create_app`.

Model Fallback List
-------------------
``models`` is an ordered tuple.  The fallback orchestrator tries the entries
top-to-bottom, so put the fastest / most available model first.  The tuple
is immutable, so the list cannot drift while the process is running.

Turbo Defaults
--------------
``num_inference_steps=4`` and ``guidance_scale=0.0`` are tuned for
turbo/schnell-style models.  They are sent as hints; some models ignore them.
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODELS: tuple[str, ...] = (
    "black-forest-labs/FLUX.1-schnell",
    "stabilityai/sdxl-turbo",
    "stabilityai/stable-diffusion-2-1",
    "runwayml/stable-diffusion-v1-5",
)


class HFImageConfig(BaseSettings):
    """Main configuration for the HF Image Generator.

    Attributes
    ----------
    Provider Settings:
        huggingface_token : str | None
            Bearer token for the Hugging Face inference router.  ``None``
            means the server is misconfigured and every generate call
            answers 500.
        provider_base_url : str
            Base URL; the model identifier is appended as a path suffix.
        models : tuple[str, ...]
            Ordered fallback list of upstream model identifiers.

    Generation Settings:
        num_inference_steps : int
            Inference-step hint sent upstream (4 for turbo models)
        guidance_scale : float
            Guidance-scale hint sent upstream (0.0 for turbo models)
        default_width : int
            Width used when the request size is absent or unparsable
        default_height : int
            Height used when the request size is absent or unparsable
        max_images : int
            Upper clamp for the per-request image count

    Outbound HTTP:
        max_concurrent_calls : int
            Process-wide cap on simultaneous upstream calls
        request_timeout : float
            Per-call httpx timeout in seconds

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Listen port (``PORT`` is accepted as an alias)
        static_dir : Path
            Directory served at ``/`` when it exists
        log_level : str
            Log level handed to uvicorn

    Examples
    --------
        >>> custom_config = HFImageConfig(
        ...     huggingface_token="hf_test",
        ...     models=("stabilityai/sdxl-turbo",),
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HFIMAGE_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Provider settings
    huggingface_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "huggingface_token", "HUGGINGFACE_TOKEN", "HFIMAGE_HUGGINGFACE_TOKEN"
        ),
        description="Bearer token for the Hugging Face inference router",
    )
    provider_base_url: str = Field(
        default="https://router.huggingface.co/hf-inference/models",
        description="Inference endpoint base; '/<model_id>' is appended",
    )
    models: tuple[str, ...] = Field(
        default=DEFAULT_MODELS,
        description="Ordered fallback list of upstream model identifiers",
    )

    # Generation settings
    num_inference_steps: int = Field(default=4, ge=1, le=50)
    guidance_scale: float = Field(default=0.0, ge=0.0)
    default_width: int = Field(default=768, ge=1)
    default_height: int = Field(default=768, ge=1)
    max_images: int = Field(default=4, ge=1)

    # Outbound HTTP
    max_concurrent_calls: int = Field(
        default=8,
        ge=1,
        description="Process-wide cap on simultaneous upstream calls",
    )
    request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Per-call timeout in seconds (wait_for_model can be slow)",
    )

    # Server settings
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("server_port", "PORT", "HFIMAGE_SERVER_PORT"),
    )
    static_dir: Path = Field(
        default=Path("public"),
        description="Static front-end served at the root when present",
    )
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(
        default="info",
    )

    @field_validator("huggingface_token")
    @classmethod
    def _blank_token_is_missing(cls, value: str | None) -> str | None:
        """Treat an empty or whitespace-only token as not configured."""
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("models")
    @classmethod
    def _strip_models(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Drop blank entries; order is preserved."""
        return tuple(m.strip() for m in value if m and m.strip())


# Global configuration instance
# Loads values from environment variables (HFIMAGE_* prefix) and .env file.
config = HFImageConfig()
