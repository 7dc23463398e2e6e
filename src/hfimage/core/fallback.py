"""Ordered model fallback and batch fan-out.

:class:`FallbackOrchestrator` tries each model of a fixed list in turn until
one returns an image.  It is a trial-and-fallback policy, not a scheduler:

- Models are tried strictly sequentially, each at most once per attempt.
- A 401/403 aborts immediately, since every model shares the credential.
- Any other failure is skipped; only the *first* one is remembered and it is
  what surfaces if every model fails.
- Nothing is remembered between attempts or between requests.

:func:`generate_batch` runs several independent attempts concurrently and
joins them all-or-nothing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from hfimage.core.errors import AllModelsFailedError, UpstreamError
from hfimage.core.params import GenerationParams

logger = logging.getLogger(__name__)

ALL_MODELS_FAILED_MESSAGE = "All models failed."


class ImageCaller(Protocol):
    """Anything that can turn one model call into a data URI."""

    async def call(self, model_id: str, prompt: str, width: int, height: int) -> str: ...


class FallbackOrchestrator:
    """Runs the fallback loop over an immutable, ordered model list."""

    def __init__(self, caller: ImageCaller, models: Sequence[str]) -> None:
        self._caller = caller
        self._models: tuple[str, ...] = tuple(models)

    @property
    def models(self) -> tuple[str, ...]:
        return self._models

    async def generate_once(self, prompt: str, width: int, height: int) -> str:
        """Return the first image any model in the list produces.

        Raises:
            AuthError: The first auth failure encountered, immediately.
            UpstreamError: The first non-auth failure, once every model failed.
            AllModelsFailedError: The model list is empty.
        """
        first_error: UpstreamError | None = None

        for model_id in self._models:
            try:
                return await self._caller.call(model_id, prompt, width, height)
            except UpstreamError as e:
                if e.is_auth_failure:
                    logger.error(f"Auth failure from {model_id}; not trying other models")
                    raise
                logger.warning(f"Model {model_id} failed, trying next: {e}")
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise first_error
        raise AllModelsFailedError(ALL_MODELS_FAILED_MESSAGE)


async def generate_batch(orchestrator: FallbackOrchestrator, params: GenerationParams) -> list[str]:
    """Run ``params.count`` generation attempts concurrently.

    Results are returned in request order.  If any attempt fails, its error
    propagates and the whole batch fails; there are no partial results.
    """
    tasks = [
        orchestrator.generate_once(params.prompt, params.width, params.height)
        for _ in range(params.count)
    ]
    return list(await asyncio.gather(*tasks))
