"""HF Image Generator — FastAPI Application.

This module is the single entry point for the web application.  It defines
the application factory, the ``/api/generate`` route, the error handlers,
and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :class:`~hfimage.core.config.HFImageConfig`
  (environment variables and ``.env``).
- **Image generation** is delegated to
  :class:`~hfimage.core.fallback.FallbackOrchestrator`, which walks the
  configured model list through a shared
  :class:`~hfimage.core.model_caller.ModelCaller`.
- **Errors** are raised as :class:`~hfimage.core.errors.HFImageError`
  subclasses and turned into ``{"error": ...}`` JSON by one handler.
- **Static assets** in ``static_dir`` are served at ``/`` when the
  directory exists.

Endpoints
---------
========  ======================  ====================================
Method    Path                    Purpose
========  ======================  ====================================
POST      ``/api/generate``       Generate 1–4 images for a prompt
GET       ``/...``                Static front-end (optional)
========  ======================  ====================================

Usage
-----
CLI (installed entry point)::

    hfimage

Direct invocation::

    python -m hfimage.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from hfimage import __version__
from hfimage.api.models import ErrorResponse, GenerateRequest, GenerateResponse
from hfimage.core.config import HFImageConfig, config
from hfimage.core.errors import ConfigurationError, HFImageError, UpstreamError
from hfimage.core.fallback import FallbackOrchestrator, generate_batch
from hfimage.core.model_caller import ModelCaller
from hfimage.core.params import resolve_params

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Request body must be a JSON object."
TOKEN_ENV_VAR = "HUGGINGFACE_TOKEN"

router = APIRouter()


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.post(
    "/api/generate",
    response_model=GenerateResponse,
    responses={status: {"model": ErrorResponse} for status in (400, 500, 502)},
)
async def generate_images(request: Request, req: GenerateRequest | None = None) -> GenerateResponse:
    """Generate a batch of images for a prompt.

    This endpoint:

    1. Validates the prompt and coerces ``n`` and ``size``.
    2. Refuses to run when no provider token is configured.
    3. Runs ``n`` independent fallback attempts concurrently.
    4. Returns every image, or fails the whole batch.

    Args:
        request: Incoming request (used to reach ``app.state``).
        req: Parsed body; ``None`` when the request had no body.

    Returns:
        :class:`GenerateResponse` with one data URI per image.

    Raises:
        InvalidPromptError: 400 for a missing or blank prompt.
        ConfigurationError: 500 when the token is missing.
        HFImageError: 502 when generation fails.
    """
    req = req or GenerateRequest()
    settings: HFImageConfig = request.app.state.config

    params = resolve_params(
        req.prompt,
        req.n,
        req.size,
        max_count=settings.max_images,
        default_width=settings.default_width,
        default_height=settings.default_height,
    )

    if not settings.huggingface_token:
        raise ConfigurationError(f"Missing {TOKEN_ENV_VAR} on server.")

    orchestrator: FallbackOrchestrator = request.app.state.orchestrator
    try:
        images = await generate_batch(orchestrator, params)
    except HFImageError:
        raise
    except Exception as e:
        raise UpstreamError(str(e) or repr(e)) from e

    logger.info(f"Generated {len(images)} image(s) at {params.width}x{params.height}")
    return GenerateResponse(images=images)


# ---------------------------------------------------------------------------
# Error handlers.
# ---------------------------------------------------------------------------


async def handle_hfimage_error(request: Request, exc: HFImageError) -> JSONResponse:
    """Render any service error as ``{"error": <message>}``."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=exc.http_status, content={"error": str(exc)})


async def handle_invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer 400 instead of FastAPI's default 422 for unusable bodies."""
    logger.debug(f"Rejected body for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    settings: HFImageConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration to use; defaults to the global ``config``.
        transport: Optional httpx transport for the outbound client.  Tests
            pass an ``httpx.MockTransport`` here.

    Returns:
        A configured :class:`FastAPI` instance.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Own the shared outbound HTTP client for the app's lifetime.

        On startup:
            Creates the ``httpx.AsyncClient``, the :class:`ModelCaller`, and
            the :class:`FallbackOrchestrator`, and stores them on
            ``app.state``.

        On shutdown:
            Closes the client and its connection pool.
        """
        # --- Startup -------------------------------------------------------
        client = httpx.AsyncClient(timeout=settings.request_timeout, transport=transport)
        caller = ModelCaller.from_config(client, settings)
        app.state.orchestrator = FallbackOrchestrator(caller, settings.models)
        if not settings.huggingface_token:
            logger.warning(f"{TOKEN_ENV_VAR} is not set; /api/generate will answer 500.")
        logger.info(f"Model fallback order: {', '.join(settings.models) or '(empty)'}")
        logger.info(f"HF image generator running on http://localhost:{settings.server_port}")

        yield

        # --- Shutdown ------------------------------------------------------
        await client.aclose()
        logger.info("Outbound HTTP client closed on shutdown.")

    app = FastAPI(
        title="HF Image Generator",
        description="Text-to-image generation over the Hugging Face inference router.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = settings

    app.add_exception_handler(HFImageError, handle_hfimage_error)
    app.add_exception_handler(RequestValidationError, handle_invalid_body)
    app.include_router(router)

    # Mounted last so that API routes take precedence over static files.
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="static")
    else:
        logger.info(f"Static directory {settings.static_dir} not found; not serving static files.")

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~hfimage.core.config.config` (``PORT``
    or ``HFIMAGE_SERVER_PORT``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``hfimage`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    uvicorn.run(
        "hfimage.api.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
