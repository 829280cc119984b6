"""FastAPI endpoints for the AR auditor.

This sub-package provides REST API endpoints for:
- Camera start/stop
- Manual and live scanning, issue focus and panel actions
- Remediation rendering and comparison
- The advisor chat transcript
"""

from .app import create_app
from .routes import advisor_router, auditor_router, camera_router, remediation_router

__all__ = [
    "create_app",
    "advisor_router",
    "auditor_router",
    "camera_router",
    "remediation_router",
]
