"""FastAPI application factory and lifespan wiring."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from agent_desk.config import load_settings
from agent_desk.dispatch import create_dispatcher
from agent_desk.exceptions import DeskError
from agent_desk.logging import configure_logging
from agent_desk.routes import dashboard, feedback, health, versions, workflow
from agent_desk.storage import ContentStore, DeliverableResolver, SidecarStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from starlette.responses import Response

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = load_settings()
    configure_logging(settings.app.log_level, log_file=settings.app.log_file or None)

    root = settings.storage.business_root
    if not root.is_dir():
        logger.warning("Business root does not exist — root=%s", root)

    content = ContentStore()
    dispatcher, publisher = create_dispatcher(settings)

    app.state.settings = settings
    app.state.content = content
    app.state.sidecars = SidecarStore(settings.storage)
    app.state.resolver = DeliverableResolver(root, settings.storage.workspaces, content)
    app.state.dispatcher = dispatcher
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    app.state.start_time = time.time()
    logger.info(
        "Agent desk started — env=%s root=%s dispatcher=%s locking=%s",
        settings.app.env,
        root,
        type(dispatcher).__name__,
        settings.storage.locking,
    )

    yield

    if publisher is not None:
        await publisher.close()
    logger.info("Agent desk stopped")


async def _desk_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Rejected request — path=%s reason=%s", request.url.path, exc)
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)


async def _timing_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    started_at = time.monotonic()
    response = await call_next(request)
    duration_ms = (time.monotonic() - started_at) * 1000
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and duration_ms > settings.app.slow_request_ms:
        logger.warning(
            "Slow request — method=%s path=%s status=%d duration_ms=%.0f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
    return response


def create_app() -> FastAPI:
    """Build the FastAPI app with all routers registered."""
    app = FastAPI(title="Agent Desk", lifespan=lifespan)
    app.add_exception_handler(DeskError, _desk_error_handler)
    app.middleware("http")(_timing_middleware)

    app.include_router(versions.router)
    app.include_router(feedback.router)
    app.include_router(workflow.router)
    app.include_router(dashboard.router)
    app.include_router(health.router)
    return app
