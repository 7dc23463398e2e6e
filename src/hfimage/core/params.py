"""Generation parameters and lenient request interpretation.

Clients send loosely-typed JSON (``n`` may arrive as a string, ``size`` may be
garbage).  Rather than rejecting such input, the service coerces it to sane
values; only a missing prompt is a hard error.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from hfimage.core.errors import InvalidPromptError

logger = logging.getLogger(__name__)

PROMPT_REQUIRED_MESSAGE = "Prompt is required."


@dataclass(frozen=True)
class GenerationParams:
    """Validated parameters for one ``/api/generate`` call.

    ``count`` independent generation attempts are run, each producing one
    image of ``width`` x ``height``.
    """

    prompt: str
    count: int
    width: int
    height: int


def clamp_count(n: Any, max_count: int = 4) -> int:
    """Coerce a requested image count into ``[1, max_count]``.

    Numbers and numeric strings are accepted; anything missing, zero or
    non-numeric counts as 1.  Fractions are truncated.

    Examples:
        >>> clamp_count(None)
        1
        >>> clamp_count("3")
        3
        >>> clamp_count(10)
        4
    """
    try:
        value = float(n)
    except (TypeError, ValueError):
        return 1
    if math.isnan(value) or value == 0:
        return 1
    return int(max(1.0, min(float(max_count), value)))


def _parse_dimension(part: str | None, default: int) -> int:
    if part is None:
        return default
    digits = part.strip()
    if digits.startswith("+"):
        digits = digits[1:]
    # Plain ASCII digits only, no "_" separators.
    if not (digits.isascii() and digits.isdigit()):
        return default
    value = int(digits)
    return value if value > 0 else default


def parse_size(size: Any, default_width: int = 768, default_height: int = 768) -> tuple[int, int]:
    """Parse a ``"WxH"`` string into ``(width, height)``.

    Each dimension falls back to its default independently, so ``"512x"``
    yields ``(512, default_height)``.

    Examples:
        >>> parse_size("512x1024")
        (512, 1024)
        >>> parse_size("banana")
        (768, 768)
    """
    if size is None:
        return default_width, default_height
    parts = str(size).split("x")
    width = _parse_dimension(parts[0], default_width)
    height = _parse_dimension(parts[1] if len(parts) > 1 else None, default_height)
    return width, height


def resolve_params(
    prompt: Any,
    n: Any = 1,
    size: Any = None,
    *,
    max_count: int = 4,
    default_width: int = 768,
    default_height: int = 768,
) -> GenerationParams:
    """Turn raw request fields into :class:`GenerationParams`.

    Raises:
        InvalidPromptError: If ``prompt`` is not a string or is blank.
    """
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidPromptError(PROMPT_REQUIRED_MESSAGE)

    width, height = parse_size(size, default_width, default_height)
    params = GenerationParams(
        prompt=prompt,
        count=clamp_count(n, max_count),
        width=width,
        height=height,
    )
    logger.debug(f"Resolved params: count={params.count}, size={width}x{height}")
    return params
