"""API route definitions for the AR auditor."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..ai.openai_client import get_inference_client
from ..audit.session import AuditorSession
from ..core.logger import log
from ..core.stats import StatsStore

# Create router instances
camera_router = APIRouter()
auditor_router = APIRouter()
remediation_router = APIRouter()
advisor_router = APIRouter()

# Global auditor session
auditor_instance: Optional[AuditorSession] = None


def get_auditor() -> AuditorSession:
    """Get or create the global auditor session."""
    global auditor_instance
    if auditor_instance is None:
        auditor_instance = AuditorSession(get_inference_client(), StatsStore())
    return auditor_instance


async def reset_auditor() -> None:
    """Close and forget the global session (app shutdown)."""
    global auditor_instance
    if auditor_instance is not None:
        await auditor_instance.close()
        auditor_instance = None


# Pydantic models for request/response
class LiveModeRequest(BaseModel):
    enabled: bool


class FocusRequest(BaseModel):
    index: Optional[int] = None


class InstructionRequest(BaseModel):
    instruction: str


class CompareRequest(BaseModel):
    holding: bool


class AskRequest(BaseModel):
    text: str


class ScanResponse(BaseModel):
    dispatched: bool
    state: dict[str, Any]


# Camera routes
@camera_router.post("/start")
async def start_camera():
    """Acquire the camera feed (user action)."""
    auditor = get_auditor()
    started = await auditor.start_camera()
    return {"started": started, "sensorStatus": auditor.camera.status.value, "notifications": auditor.notifications}


@camera_router.post("/stop")
async def stop_camera():
    auditor = get_auditor()
    await auditor.stop_camera()
    return {"sensorStatus": auditor.camera.status.value}


# Auditor routes
@auditor_router.get("/state")
async def auditor_state():
    return get_auditor().snapshot_state()


@auditor_router.post("/scan", response_model=ScanResponse)
async def manual_scan():
    """Run a manual scan and wait for it to complete."""
    auditor = get_auditor()
    dispatched = await auditor.scan()
    return ScanResponse(dispatched=dispatched, state=auditor.snapshot_state())


@auditor_router.post("/live")
async def set_live_mode(request: LiveModeRequest):
    auditor = get_auditor()
    auditor.set_live_mode(request.enabled)
    return {"liveMode": auditor.scheduler.live_mode, "timerArmed": auditor.scheduler.timer_armed}


@auditor_router.post("/focus")
async def focus_issue(request: FocusRequest):
    auditor = get_auditor()
    try:
        auditor.overlay.focus(request.index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    panel = auditor.overlay.detail_panel()
    return {"focusedIndex": auditor.overlay.focused_index, "panel": panel.to_dict() if panel else None}


@auditor_router.post("/issues/{index}/remediate-prefill")
async def prefill_remediation(index: int, from_report: bool = False):
    auditor = get_auditor()
    try:
        instruction = auditor.overlay.request_remediation(index, from_report=from_report)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"instruction": instruction, "sidebarTab": auditor.overlay.sidebar_tab}


@auditor_router.post("/issues/{index}/ask")
async def ask_about_issue(index: int, from_report: bool = False):
    auditor = get_auditor()
    try:
        message = auditor.overlay.ask_about(index, from_report=from_report)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    auditor.advisor.rebuild()
    return message.to_dict()


# Remediation routes
@remediation_router.put("/instruction")
async def set_instruction(request: InstructionRequest):
    auditor = get_auditor()
    auditor.remediation.set_instruction(request.instruction)
    return {"instruction": auditor.remediation.instruction, "canSubmit": auditor.remediation.can_submit}


@remediation_router.post("/submit")
async def submit_remediation():
    auditor = get_auditor()
    if not auditor.remediation.can_submit:
        raise HTTPException(status_code=409, detail="A captured frame and a non-empty instruction are required")
    rendered = await auditor.remediation.submit()
    return {"rendered": rendered, "state": auditor.remediation.state.value, "image": auditor.remediation.image_data_url()}


@remediation_router.post("/compare")
async def hold_compare(request: CompareRequest):
    auditor = get_auditor()
    auditor.remediation.hold_compare(request.holding)
    return {"showOriginal": auditor.remediation.show_original}


@remediation_router.post("/flush")
async def flush_remediation():
    auditor = get_auditor()
    auditor.remediation.flush()
    log.info("Remediation buffer flushed")
    return {"state": auditor.remediation.state.value}


# Advisor routes
@advisor_router.get("/messages")
async def advisor_messages(include_hidden: bool = False):
    advisor = get_auditor().advisor
    messages = advisor.messages() if include_hidden else advisor.visible_messages()
    return [m.to_dict() for m in messages]


@advisor_router.post("/ask")
async def advisor_ask(request: AskRequest):
    advisor = get_auditor().advisor
    if not request.text.strip():
        raise HTTPException(status_code=422, detail="Question must not be empty")
    if advisor.is_loading:
        raise HTTPException(status_code=409, detail="Advisor is busy")
    answer = await advisor.ask(request.text)
    return answer.to_dict() if answer else None
