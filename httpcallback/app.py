"""
FastAPI application entry point for the httpcallback service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from httpcallback.config import Settings, get_settings
from httpcallback.db import RepositoryFactory
from httpcallback.dependencies import create_repository_factory, create_service
from httpcallback.results import ResponseWriter, StatusResult
from httpcallback.routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    factory: Optional[RepositoryFactory] = None,
) -> FastAPI:
    settings = settings or get_settings()
    if factory is None:
        factory = create_repository_factory(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        factory.close()

    app = FastAPI(title="httpcallback", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository_factory = factory
    app.state.service = create_service(factory)

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        logger.info("[%s] %s", request.method, request.url)
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def decode_error(request: Request, exc: RequestValidationError):
        logger.error("Error decoding request to %s: %s", request.url.path, exc.errors())
        writer = ResponseWriter()
        StatusResult(400).write_response(writer)
        return writer.to_response()

    app.include_router(router, prefix=settings.api_prefix)
    return app
