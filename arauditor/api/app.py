"""FastAPI application factory for the AR auditor."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core.config import config
from ..core.logger import log
from . import routes
from .routes import advisor_router, auditor_router, camera_router, remediation_router, reset_auditor


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    # Cancels the live-mode timer, drops in-flight renders and releases the camera
    await reset_auditor()


def _auditor_context() -> str:
    """Short scan/remediation summary of the live session, if one exists."""
    session = routes.auditor_instance
    if session is None:
        return "no session"
    state = session.scheduler.state
    scan = "manual" if state.manual_in_flight else "silent" if state.silent_in_flight else "idle"
    return (
        f"sensor={session.camera.status.value} scan={scan} "
        f"live={'on' if session.scheduler.live_mode else 'off'} "
        f"remediation={session.remediation.state.value}"
    )


def create_app() -> FastAPI:
    """Create the operator API around the process-wide auditor session.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Walk In My Shoes AR Auditor API",
        description="Accessibility audit pipeline: capture, scan, overlay and remediation",
        version=__version__,
        lifespan=_lifespan,
    )

    # The operator UI is served from a separate origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        log.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {elapsed_ms:.0f}ms [{_auditor_context()}]"
        )
        return response

    app.include_router(camera_router, prefix="/api/v1/camera", tags=["camera"])
    app.include_router(auditor_router, prefix="/api/v1/auditor", tags=["auditor"])
    app.include_router(remediation_router, prefix="/api/v1/remediation", tags=["remediation"])
    app.include_router(advisor_router, prefix="/api/v1/advisor", tags=["advisor"])

    @app.get("/health")
    async def health_check():
        """Liveness plus the current session summary, without creating a session."""
        return {
            "status": "healthy",
            "service": "AR Auditor API",
            "version": __version__,
            "auditor": _auditor_context(),
        }

    log.debug("Operator API routes registered")
    return app
