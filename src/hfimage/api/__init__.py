"""HF Image Generator — FastAPI REST API layer.

Modules
-------
main
    FastAPI application factory, the ``/api/generate`` route, and the
    ``main()`` CLI entry point.
models
    Pydantic models for API request and response bodies.
"""
