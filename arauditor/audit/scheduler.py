"""Scan admission control for manual and live (silent) audits.

Two request sources share one dispatcher:

* **manual** scans are user-triggered and only rejected while another manual
  scan is in flight. They ignore the silent cooldown.
* **silent** scans come from live mode: one immediately when live mode is
  armed, then one per period. A silent attempt is rejected while a silent or
  manual scan is in flight, or while the cooldown since the last silent
  *start* has not elapsed. Rejected attempts are dropped, never queued.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..core.config import config
from ..core.logger import log

__all__ = ["ScanKind", "ScanRequestState", "ScanScheduler"]


class ScanKind(str, Enum):
    MANUAL = "manual"
    SILENT = "silent"


@dataclass(slots=True)
class ScanRequestState:
    manual_in_flight: bool = False
    silent_in_flight: bool = False
    last_silent_start: Optional[float] = None

    @property
    def busy(self) -> bool:
        return self.manual_in_flight or self.silent_in_flight


Dispatcher = Callable[[ScanKind], Awaitable[None]]


class ScanScheduler:
    """Decides when a scan may run and owns the live-mode timer."""

    def __init__(
        self,
        dispatch: Dispatcher,
        *,
        period: Optional[float] = None,
        cooldown: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._dispatch = dispatch
        self.period = config.live_scan_period if period is None else period
        self.cooldown = config.silent_scan_cooldown if cooldown is None else cooldown
        self._clock = clock

        self.state = ScanRequestState()
        self.live_mode = False
        self.source_active = False
        self._timer: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Task] = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------
    def _rejection_reason(self, kind: ScanKind) -> Optional[str]:
        if self._closed:
            return "scheduler closed"
        state = self.state
        if kind is ScanKind.MANUAL:
            return "manual scan already in flight" if state.manual_in_flight else None

        if state.silent_in_flight:
            return "silent scan already in flight"
        if state.manual_in_flight:
            return "manual scan loading"
        if state.last_silent_start is not None and self._clock() - state.last_silent_start < self.cooldown:
            return "silent cooldown active"
        return None

    def try_acquire(self, kind: ScanKind) -> bool:
        """Claim the in-flight slot for *kind*, or return False if rejected."""
        reason = self._rejection_reason(kind)
        if reason is not None:
            log.debug(f"Rejected {kind.value} scan: {reason}")
            return False

        if kind is ScanKind.MANUAL:
            self.state.manual_in_flight = True
        else:
            self.state.silent_in_flight = True
            self.state.last_silent_start = self._clock()
        return True

    def release(self, kind: ScanKind) -> None:
        if kind is ScanKind.MANUAL:
            self.state.manual_in_flight = False
        else:
            self.state.silent_in_flight = False

    async def request(self, kind: ScanKind) -> bool:
        """Run one scan of *kind* if admitted. Returns whether it was dispatched."""
        if not self.try_acquire(kind):
            return False
        try:
            await self._dispatch(kind)
        finally:
            self.release(kind)
        return True

    def trigger(self, kind: ScanKind) -> Optional[asyncio.Task]:
        """Fire-and-forget variant of :meth:`request` for timers and UI handlers."""
        reason = self._rejection_reason(kind)
        if reason is not None:
            log.debug(f"Skipped {kind.value} trigger: {reason}")
            return None
        task = asyncio.get_running_loop().create_task(self.request(kind))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    # ------------------------------------------------------------------
    # Live mode
    # ------------------------------------------------------------------
    @property
    def timer_armed(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def set_live_mode(self, enabled: bool) -> None:
        self.live_mode = enabled
        log.info(f"Live mode {'enabled' if enabled else 'disabled'}")
        self._sync_timer()

    def set_source_active(self, active: bool) -> None:
        """Camera availability gate; live scans only run while the feed is active."""
        self.source_active = active
        self._sync_timer()

    def _sync_timer(self) -> None:
        self._disarm()
        if self.live_mode and self.source_active and not self._closed:
            self.trigger(ScanKind.SILENT)
            self._timer = asyncio.get_running_loop().create_task(self._tick_forever())

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _tick_forever(self) -> None:
        while True:
            await asyncio.sleep(self.period)
            self.trigger(ScanKind.SILENT)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    async def drain(self) -> None:
        """Wait for every dispatched scan to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """Cancel the timer and refuse new scans. In-flight scans still resolve."""
        self._closed = True
        self.live_mode = False
        self._disarm()
