"""Shared fakes for the auditor test suite."""

import asyncio
import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from arauditor.ai.advisor import AdvisorSession
from arauditor.ai.response_parser import parse_audit_payload
from arauditor.core.stats import StatsStore
from arauditor.vision.camera import FrameCaptureSource
from arauditor.vision.models import AuditResult


RAMP_RESPONSE = {
    "issues": [
        {
            "category": "RAMP",
            "complianceStatus": "NON_COMPLIANT",
            "description": "Ramp slope exceeds 1:12",
            "recommendation": "Extend the ramp run to reduce slope",
            "costEstimate": "$2,000 - $5,000",
            "boundingBox": [100, 100, 300, 300],
        }
    ],
    "complianceScore": 42,
}


class FakeInferenceClient:
    """Records calls; optionally blocks each call on a gate until released."""

    def __init__(self, analyze_payloads=None, edit_results=None, chat_replies=None):
        self.analyze_payloads = list(analyze_payloads or [])
        self.edit_results = list(edit_results or [])
        self.chat_replies = list(chat_replies or [])
        self.analyze_calls = []
        self.edit_calls = []
        self.chat_calls = []
        self.gate = None

    def hold(self):
        """Make subsequent calls wait until :meth:`release` is called."""
        self.gate = asyncio.Event()

    def release(self):
        if self.gate is not None:
            self.gate.set()

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def analyze_image(self, frame_bytes):
        self.analyze_calls.append(frame_bytes)
        await self._wait()
        if not self.analyze_payloads:
            return AuditResult.empty()
        payload = self.analyze_payloads.pop(0) if len(self.analyze_payloads) > 1 else self.analyze_payloads[0]
        return parse_audit_payload(payload)

    async def edit_image(self, frame_bytes, instruction):
        self.edit_calls.append((frame_bytes, instruction))
        await self._wait()
        return self.edit_results.pop(0) if self.edit_results else None

    async def chat(self, messages):
        self.chat_calls.append(messages)
        if not self.chat_replies:
            raise RuntimeError("connection reset")
        return self.chat_replies.pop(0)

    def create_advisor_session(self, context_label, prior_turns=()):
        return AdvisorSession(self, context_label, prior_turns)


class FakeCapture:
    """Stand-in for ``cv2.VideoCapture`` producing black frames."""

    def __init__(self, opened=True, width=640, height=480):
        self.opened = opened
        self.frame = np.zeros((height, width, 3), dtype=np.uint8)
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def read(self):
        if not self.opened or self.released:
            return False, None
        return True, self.frame.copy()

    def release(self):
        self.released = True


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_camera(opened=True):
    return FrameCaptureSource(0, capture_factory=lambda index: FakeCapture(opened=opened))


@pytest.fixture
def stats(tmp_path):
    return StatsStore(str(tmp_path / "stats.json"))


@pytest.fixture
def fake_client():
    return FakeInferenceClient(analyze_payloads=[RAMP_RESPONSE], edit_results=[b"E1"])


@pytest.fixture
def clock():
    return FakeClock()
