"""HF Image Generator - text-to-image over the Hugging Face inference router."""

__version__ = "0.1.0"

from hfimage.core.config import HFImageConfig, config

__all__ = [
    "HFImageConfig",
    "config",
]
