"""
FastAPI application entry point for the crowdfunding backend.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from greenfund.config import Settings, get_settings
from greenfund.dependencies import build_json_store, build_upload_storage
from greenfund.errors import register_error_handlers
from greenfund.routes import router
from greenfund.seeds import ensure_seeds
from greenfund.uploads import UPLOADS_URL_PREFIX

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    if not settings.use_in_memory_backends:
        os.makedirs(settings.uploads_dir, exist_ok=True)
    ensure_seeds(app.state.json_store)
    logger.info("Serving API under %s", settings.api_prefix)
    yield
    logger.info("Shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="GreenFund Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.json_store = build_json_store(settings)
    app.state.upload_storage = build_upload_storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1f ms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    if not settings.use_in_memory_backends:
        app.mount(
            UPLOADS_URL_PREFIX,
            StaticFiles(directory=settings.uploads_dir, check_dir=False),
            name="uploads",
        )
    if settings.frontend_dir and os.path.isdir(settings.frontend_dir):
        app.mount(
            "/",
            StaticFiles(directory=settings.frontend_dir, html=True),
            name="frontend",
        )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
