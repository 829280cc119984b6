"""AR auditor session: camera, scheduler, store, overlay and remediation wired together."""

from __future__ import annotations

import itertools
import time
from typing import Any, Callable, Optional

from ..ai.advisor import AdvisorChat
from ..ai.openai_client import InferenceClient
from ..core.logger import log
from ..core.stats import AR_AUDITOR_SESSION, StatsStore
from ..vision.camera import CameraError, CameraPermissionDenied, FrameCaptureSource
from ..vision.debug import save_debug_overlay
from .overlay import OverlayFrame, OverlayRenderer
from .remediation import RemediationWorkflow
from .scheduler import ScanKind, ScanScheduler
from .store import AuditStateStore

__all__ = ["AuditorSession", "ADVISOR_CONTEXT", "CAMERA_DENIED_NOTICE"]

ADVISOR_CONTEXT = "Technical Accessibility Compliance & Spatial Auditing"
CAMERA_DENIED_NOTICE = "Camera access denied. Please enable camera permissions for this device."


class AuditorSession:
    """One auditor view's worth of state.

    Scan completions that land after :meth:`close` are dropped so nothing is
    written into a torn-down session.
    """

    def __init__(
        self,
        client: InferenceClient,
        stats: StatsStore,
        camera: Optional[FrameCaptureSource] = None,
        *,
        period: Optional[float] = None,
        cooldown: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        discard_stale: Optional[bool] = None,
    ) -> None:
        self.client = client
        self.stats = stats
        self.camera = camera or FrameCaptureSource()
        self.notifications: list[str] = []
        self.closed = False
        self._seq = itertools.count(1)

        self.store = AuditStateStore(stats, session_id=AR_AUDITOR_SESSION, discard_stale=discard_stale)
        self.scheduler = ScanScheduler(self._run_scan, period=period, cooldown=cooldown, clock=clock)
        self.remediation = RemediationWorkflow(client, lambda: self.store.frame, stats, session_id=AR_AUDITOR_SESSION)
        self.overlay = OverlayRenderer(self.store, self.remediation, stats, session_id=AR_AUDITOR_SESSION)
        self.advisor = AdvisorChat(client, stats, AR_AUDITOR_SESSION, ADVISOR_CONTEXT)

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------
    async def start_camera(self) -> bool:
        """User-initiated camera start; denial surfaces a blocking notification."""
        try:
            await self.camera.start()
        except CameraPermissionDenied:
            self.notifications.append(CAMERA_DENIED_NOTICE)
            self.scheduler.set_source_active(False)
            return False
        self.scheduler.set_source_active(True)
        return True

    async def stop_camera(self) -> None:
        self.scheduler.set_source_active(False)
        await self.camera.stop()

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------
    @property
    def loading(self) -> bool:
        return self.scheduler.state.manual_in_flight

    @property
    def processing_background(self) -> bool:
        return self.scheduler.state.silent_in_flight

    async def scan(self) -> bool:
        """Manual scan; returns False when rejected."""
        if not self.camera.is_active:
            return False
        return await self.scheduler.request(ScanKind.MANUAL)

    def set_live_mode(self, enabled: bool) -> None:
        self.scheduler.set_live_mode(enabled)

    async def _run_scan(self, kind: ScanKind) -> None:
        seq = next(self._seq)
        try:
            frame = await self.camera.snapshot()
        except CameraError as exc:
            log.warning(f"Skipping {kind.value} scan #{seq}: {exc}")
            return

        result = await self.client.analyze_image(frame.data)
        if self.closed:
            log.debug(f"Dropping {kind.value} scan #{seq} completed after teardown")
            return

        if self.store.apply(result, frame, kind=kind, seq=seq):
            save_debug_overlay(frame, result, f"scan_{seq:04d}_{kind.value}")

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def render_overlay(self) -> Optional[OverlayFrame]:
        return self.overlay.render(
            source_active=self.camera.is_active,
            processing=self.scheduler.state.busy,
        )

    def snapshot_state(self) -> dict[str, Any]:
        result = self.store.result
        overlay = self.render_overlay()
        return {
            "sensorStatus": self.camera.status.value,
            "liveMode": self.scheduler.live_mode,
            "loading": self.loading,
            "processingBackground": self.processing_background,
            "result": result.to_dict() if result is not None else None,
            "overlay": overlay.to_dict() if overlay is not None else None,
            "focusedIndex": self.overlay.focused_index,
            "sidebarTab": self.overlay.sidebar_tab,
            "remediation": {
                "state": self.remediation.state.value,
                "instruction": self.remediation.instruction,
                "canSubmit": self.remediation.can_submit,
                "showOriginal": self.remediation.show_original,
                "image": self.remediation.image_data_url(),
            },
            "notifications": list(self.notifications),
        }

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.scheduler.close()
        self.remediation.close()
        await self.camera.stop()
        log.info("Auditor session closed")
