"""Live camera feed and still-frame snapshots.

The capture source exclusively owns the OpenCV device handle. Other
components only ever see encoded :class:`CapturedFrame` snapshots.
Blocking OpenCV calls run in a worker thread so the event loop stays free.
"""

from __future__ import annotations

import asyncio
import io
import time
from enum import Enum
from typing import Any, Callable, Optional

import cv2  # type: ignore
from PIL import Image

from ..core.config import config
from ..core.logger import log
from .models import CapturedFrame


class CameraError(RuntimeError):
    """Raised when the camera cannot produce frames."""


class CameraPermissionDenied(CameraError):
    """Raised when the camera stream could not be acquired."""


class SensorStatus(str, Enum):
    OFFLINE = "OFFLINE"
    INITIALIZING = "INITIALIZING"
    ACTIVE = "ACTIVE"
    DENIED = "DENIED"


def _default_capture_factory(index: int) -> Any:
    return cv2.VideoCapture(index)


class FrameCaptureSource:
    """Camera lifecycle: OFFLINE -> INITIALIZING -> ACTIVE, or DENIED on failure."""

    def __init__(
        self,
        camera_index: Optional[int] = None,
        *,
        capture_factory: Callable[[int], Any] = _default_capture_factory,
        jpeg_quality: Optional[int] = None,
    ) -> None:
        self.camera_index = config.camera_index if camera_index is None else camera_index
        self.jpeg_quality = jpeg_quality or config.jpeg_quality
        self._capture_factory = capture_factory
        self._capture: Any = None
        self.status = SensorStatus.OFFLINE
        self.width = 0
        self.height = 0

    @property
    def is_active(self) -> bool:
        return self.status is SensorStatus.ACTIVE

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    async def start(self) -> None:
        """Acquire the stream. Raises :class:`CameraPermissionDenied` on failure.

        DENIED is terminal until the caller retries ``start``.
        """
        if self.status in (SensorStatus.ACTIVE, SensorStatus.INITIALIZING):
            return

        self.status = SensorStatus.INITIALIZING
        log.info(f"Acquiring camera {self.camera_index}...")
        try:
            self._capture, self.width, self.height = await asyncio.to_thread(self._open)
        except CameraError as exc:
            self.status = SensorStatus.DENIED
            log.error(f"Camera stream acquisition failed: {exc}")
            raise CameraPermissionDenied(str(exc)) from exc

        self.status = SensorStatus.ACTIVE
        log.success(f"Camera active at {self.width}x{self.height}")

    def _open(self) -> tuple[Any, int, int]:
        capture = self._capture_factory(self.camera_index)
        if capture is None or not capture.isOpened():
            raise CameraError(f"Camera {self.camera_index} could not be opened")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, config.camera_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, config.camera_height)

        # The first decoded frame stands in for "metadata ready".
        ok, frame = capture.read()
        if not ok or frame is None:
            capture.release()
            raise CameraError(f"Camera {self.camera_index} produced no frames")

        height, width = frame.shape[:2]
        return capture, int(width), int(height)

    async def stop(self) -> None:
        if self._capture is not None:
            await asyncio.to_thread(self._capture.release)
            self._capture = None
        self.status = SensorStatus.OFFLINE
        log.info("Camera released")

    # ---------------------------------------------------------------------
    # Snapshots
    # ---------------------------------------------------------------------
    async def snapshot(self) -> CapturedFrame:
        """Grab the current frame and encode it as JPEG."""
        if not self.is_active or self._capture is None:
            raise CameraError("Camera is not active")
        return await asyncio.to_thread(self._grab)

    def _grab(self) -> CapturedFrame:
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CameraError("Failed to read frame from camera")

        height, width = frame.shape[:2]
        width = int(width) or config.camera_fallback_width
        height = int(height) or config.camera_fallback_height

        ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(self.jpeg_quality)])
        if not ok:
            raise CameraError("JPEG encoding failed")

        self.width, self.height = width, height
        return CapturedFrame(data=buffer.tobytes(), width=width, height=height, captured_at=time.time())


def load_frame_from_file(path: str, jpeg_quality: Optional[int] = None) -> CapturedFrame:
    """Re-encode an image file as a JPEG :class:`CapturedFrame` (offline audits)."""
    with Image.open(path) as img:
        rgb = img.convert("RGB")
        buffer = io.BytesIO()
        rgb.save(buffer, format="JPEG", quality=jpeg_quality or config.jpeg_quality)
        return CapturedFrame(data=buffer.getvalue(), width=rgb.width, height=rgb.height, captured_at=time.time())
