"""AR audit pipeline: scheduling, state, overlay and remediation."""

from .overlay import OverlayRenderer
from .remediation import RemediationState, RemediationWorkflow
from .scheduler import ScanKind, ScanScheduler
from .session import AuditorSession
from .store import AuditStateStore

__all__ = [
    "AuditStateStore",
    "AuditorSession",
    "OverlayRenderer",
    "RemediationState",
    "RemediationWorkflow",
    "ScanKind",
    "ScanScheduler",
]
