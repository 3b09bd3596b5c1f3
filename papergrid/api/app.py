"""
FastAPI application definition.

Creates the app, maps the error taxonomy onto HTTP responses and
registers the routes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from papergrid.api.routes import error_response, router
from papergrid.core.errors import ConfigurationError, InputError, UnsupportedProviderError

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Papergrid Assistant API",
        description="Boolean query generation, query summaries and extraction confidence scoring",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(UnsupportedProviderError)
    async def unsupported_provider(request: Request, exc: UnsupportedProviderError):
        logger.warning("%s %s: %s", request.method, request.url.path, exc)
        return error_response("Invalid AI provider", 400)

    @app.exception_handler(InputError)
    async def invalid_input(request: Request, exc: InputError):
        logger.warning("%s %s: %s", request.method, request.url.path, exc)
        return error_response(str(exc), 400)

    @app.exception_handler(ConfigurationError)
    async def not_configured(request: Request, exc: ConfigurationError):
        logger.error("%s %s: %s", request.method, request.url.path, exc)
        return error_response("AI provider is not configured", 500)

    app.include_router(router)

    @app.get("/ping")
    async def ping():
        """Health check endpoint."""
        return {"message": "pong"}

    return app


app = create_app()
