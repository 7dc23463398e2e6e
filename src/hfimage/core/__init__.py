"""Core generation logic for the HF Image Generator.

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - Settings prefixed with HFIMAGE_ (plus HUGGINGFACE_TOKEN and PORT)

2. **Request Layer** (params.py):
   - Prompt validation, count clamping, size parsing

3. **Provider Layer** (model_caller.py):
   - One HTTP call per model, response normalized to a data URI

4. **Fallback Layer** (fallback.py):
   - Ordered model fallback and concurrent batch fan-out

Errors shared by every layer live in errors.py.
"""

from hfimage.core.config import HFImageConfig, config
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
from hfimage.core.fallback import FallbackOrchestrator, generate_batch
from hfimage.core.model_caller import ModelCaller
from hfimage.core.params import GenerationParams, resolve_params

__all__ = [
    "AllModelsFailedError",
    "AuthError",
    "ConfigurationError",
    "FallbackOrchestrator",
    "GenerationParams",
    "HFImageConfig",
    "HFImageError",
    "InvalidPromptError",
    "MalformedResponseError",
    "ModelCaller",
    "NetworkError",
    "UpstreamError",
    "config",
    "generate_batch",
    "resolve_params",
]
