"""Middleware registration."""

from fastapi import FastAPI

from tourist.config import Settings
from tourist.middleware.cors import setup_cors
from tourist.middleware.error_handler import setup_error_handlers
from tourist.middleware.logging import setup_logging
from tourist.middleware.request_id import RequestContextMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette executes middleware in reverse-add order (last added = outermost).
    CORS must be outermost so error responses carry CORS headers too.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestContextMiddleware)
    setup_cors(app, settings)
