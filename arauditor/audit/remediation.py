"""Image-remediation request/response cycle for a focused issue."""

from __future__ import annotations

import base64
from enum import Enum
from typing import Callable, Optional, Protocol

from ..ai.prompt import build_render_note
from ..core.logger import log
from ..core.stats import AR_AUDITOR_SESSION, ChatMessage
from ..vision.models import CapturedFrame
from .store import AuditBookkeeper

__all__ = ["RemediationState", "RemediationWorkflow"]


class ImageEditor(Protocol):
    async def edit_image(self, frame_bytes: bytes, instruction: str) -> Optional[bytes]: ...


class RemediationState(str, Enum):
    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"
    RENDERED = "RENDERED"


class RemediationWorkflow:
    """IDLE -> SUBMITTING -> RENDERED, or back to IDLE when no image comes back.

    ``frame_provider`` returns the store's current frame at submission time,
    so a remediation always targets whatever was captured most recently.
    The compare flag only selects which image is displayed.
    """

    def __init__(
        self,
        editor: ImageEditor,
        frame_provider: Callable[[], Optional[CapturedFrame]],
        chat: Optional[AuditBookkeeper] = None,
        *,
        session_id: str = AR_AUDITOR_SESSION,
    ) -> None:
        self._editor = editor
        self._frame_provider = frame_provider
        self._chat = chat
        self.session_id = session_id

        self.state = RemediationState.IDLE
        self.instruction = ""
        self.image: Optional[bytes] = None
        self.show_original = False
        self.closed = False

    def set_instruction(self, text: str) -> None:
        self.instruction = text

    def close(self) -> None:
        """Refuse new submissions and drop any render still in flight."""
        self.closed = True

    @property
    def can_submit(self) -> bool:
        return (
            not self.closed
            and self.state is not RemediationState.SUBMITTING
            and self._frame_provider() is not None
            and bool(self.instruction.strip())
        )

    async def submit(self) -> bool:
        """Render the current instruction against the current frame.

        Returns True when an edited image was stored. A missing frame, a blank
        instruction or an in-progress render rejects the call without any
        network traffic. After :meth:`close` nothing is submitted, and a render
        that lands after teardown is discarded.
        """
        frame = self._frame_provider()
        instruction = self.instruction
        if not self.can_submit or frame is None:
            log.debug("Remediation submit rejected: preconditions not met")
            return False

        self.state = RemediationState.SUBMITTING
        self.image = None
        try:
            edited = await self._editor.edit_image(frame.data, instruction)
        finally:
            # editor never raises by contract; this only covers cancellation
            if self.state is RemediationState.SUBMITTING:
                self.state = RemediationState.IDLE

        if self.closed:
            log.debug("Dropping remediation render completed after teardown")
            return False

        log.log_remediation(instruction, edited is not None)
        if edited is None:
            return False

        self.image = edited
        self.state = RemediationState.RENDERED
        self.show_original = False
        if self._chat is not None:
            self._chat.append_history(
                self.session_id, ChatMessage(role="user", text=build_render_note(instruction), is_hidden=True)
            )
        return True

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------
    def hold_compare(self, holding: bool) -> None:
        self.show_original = holding

    def displayed_image(self) -> Optional[bytes]:
        """Bytes the remediation view should show right now."""
        if self.show_original:
            frame = self._frame_provider()
            return frame.data if frame is not None else None
        return self.image

    def image_data_url(self) -> Optional[str]:
        if self.image is None:
            return None
        return f"data:image/png;base64,{base64.b64encode(self.image).decode('ascii')}"

    def flush(self) -> None:
        """Drop the rendered image and instruction text."""
        self.image = None
        self.instruction = ""
        self.show_original = False
        if self.state is not RemediationState.SUBMITTING:
            self.state = RemediationState.IDLE
