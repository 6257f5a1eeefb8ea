"""
FastAPI entrypoint.

Responsibilities:
- Configure logging
- Setup CORS for the browser frontend
- Register the API and artifact routers
- Render pipeline errors raised outside a job as structured JSON
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prompt3d import __version__
from prompt3d.api.config import settings
from prompt3d.api.engine import get_orchestrator, warm_up
from prompt3d.api.routes import output_router, router
from prompt3d.errors import Prompt3DError
from prompt3d.logger import setup_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(
        title="prompt3d",
        description="Prompt-to-3D: natural language (and reference images) to printable STL",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(output_router)

    @app.exception_handler(Prompt3DError)
    def prompt3d_error_handler(request: Request, exc: Prompt3DError):
        # e.g. a bad PROMPT3D_BACKEND surfacing while wiring the orchestrator
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.on_event("startup")
    def on_startup():
        if settings.backend in ("local", "hybrid"):
            logger.info("Loading local model weights before serving")
            warm_up(get_orchestrator())

    logger.info("Output directory: %s", settings.output_dir)
    logger.info("Backend: %s, Gemini API configured: %s", settings.backend, bool(settings.gemini_api_key))
    logger.info("OpenSCAD path: %s", settings.openscad_cmd)
    return app


app = create_app()
