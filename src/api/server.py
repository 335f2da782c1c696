"""
FastAPI application for the memory map write path.

Run with ``python -m api.server`` or
``uvicorn api.server:create_app --factory``.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import dependencies, routes
from config.config import Settings
from di.container import Container
from utils.errors import ConfigurationError, MemoryMapError
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if not loc:
            return "Missing or malformed request body."
        fields.append(".".join(loc))
    return f"Missing or invalid fields: {', '.join(dict.fromkeys(fields))}."


def create_app(container: Optional[Container] = None) -> FastAPI:
    container = container or Container()
    container.wire(modules=[dependencies, routes])
    settings: Settings = container.settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Memory map API ready for app {settings.app_id}")
        yield
        container.shutdown_resources()
        logger.info("Memory map API shutting down")

    app = FastAPI(title="Memory Map API", lifespan=lifespan)
    app.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400, content={"message": _describe_validation_error(exc)}
        )

    @app.exception_handler(MemoryMapError)
    async def memory_map_exception_handler(request: Request, exc: MemoryMapError):
        if isinstance(exc, ConfigurationError):
            logger.error(f"Configuration error on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code, content={"message": exc.message}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500, content={"message": "Internal Server Error"}
        )

    app.include_router(routes.router)
    return app


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    settings = Settings()
    uvicorn.run(
        "api.server:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )
