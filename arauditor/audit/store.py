"""Latest audit result and captured frame, replaced atomically per completed scan."""

from __future__ import annotations

from typing import Optional, Protocol

from ..ai.prompt import build_scan_summary
from ..core.config import config
from ..core.logger import log
from ..core.stats import AR_AUDITOR_SESSION, ChatMessage
from ..vision.models import AuditResult, CapturedFrame
from .scheduler import ScanKind


class AuditBookkeeper(Protocol):
    """The slice of the stats collaborator the store talks to."""

    def append_history(self, session_id: str, message: ChatMessage) -> None: ...

    def increment_audit_count(self) -> int: ...


class AuditStateStore:
    """Holds the last completed :class:`AuditResult` and the frame it came from.

    Completions are applied in arrival order (last to complete wins). With
    ``discard_stale`` set, a completion whose sequence number is older than
    the last applied one is dropped instead.
    """

    def __init__(
        self,
        bookkeeper: Optional[AuditBookkeeper] = None,
        *,
        session_id: str = AR_AUDITOR_SESSION,
        discard_stale: Optional[bool] = None,
    ) -> None:
        self._bookkeeper = bookkeeper
        self.session_id = session_id
        self.discard_stale = config.discard_stale_scans if discard_stale is None else discard_stale

        self.result: Optional[AuditResult] = None
        self.frame: Optional[CapturedFrame] = None
        self.last_applied_seq = 0

    def apply(self, result: AuditResult, frame: CapturedFrame, *, kind: ScanKind, seq: int = 0) -> bool:
        """Install a completed scan. Returns False if it was discarded as stale."""
        if self.discard_stale and seq and seq < self.last_applied_seq:
            log.debug(f"Discarding stale {kind.value} scan #{seq} (last applied #{self.last_applied_seq})")
            return False

        self.result = result
        self.frame = frame
        self.last_applied_seq = max(self.last_applied_seq, seq)
        log.log_scan(kind.value, len(result.issues), result.compliance_score)

        if kind is ScanKind.MANUAL and self._bookkeeper is not None:
            self._bookkeeper.append_history(
                self.session_id,
                ChatMessage(role="user", text=build_scan_summary(result.compliance_score), is_hidden=True),
            )
            self._bookkeeper.increment_audit_count()
        return True

    @property
    def issues(self):
        return self.result.issues if self.result is not None else ()

    @property
    def score(self) -> Optional[int]:
        return self.result.compliance_score if self.result is not None else None
