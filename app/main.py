from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.errors import ProxyError
from app.handlers import describe_handler
from app.handlers.describe_handler import json_response, method_not_allowed_response
from app.services.inference import get_provider

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the proxy app; the inference backend is chosen at startup."""

    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        provider = get_provider(settings)
        app.state.inference_provider = provider
        logger.info("Inference provider ready: %s", provider.name)
        try:
            yield
        finally:
            await provider.close()

    app = FastAPI(title="Image Describe Proxy", lifespan=lifespan)
    app.state.settings = settings

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return json_response(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        # Routing errors: a method other than POST/OPTIONS lands here as 405.
        if exc.status_code == 405:
            return method_not_allowed_response()
        return json_response({"message": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return json_response(
            {"message": "Internal server error while processing request", "error": str(exc)},
            status_code=500,
        )

    app.include_router(describe_handler.router)

    @app.get("/healthz")
    async def healthz(request: Request):
        provider = getattr(request.app.state, "inference_provider", None)
        return {"status": "ok", "provider": provider.name if provider else None}

    return app


app = create_app()
