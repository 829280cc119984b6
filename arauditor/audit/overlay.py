"""Projection of audit issues onto the live view, plus issue focus handling.

Issue boxes arrive in a fixed 0-1000 space on both axes. The overlay layer
uses the same space, so region geometry is the box itself; pixel
coordinates for a concrete viewport come from :func:`project_box`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..ai.prompt import build_issue_question, build_remediation_instruction
from ..core.config import config
from ..core.logger import log
from ..core.stats import AR_AUDITOR_SESSION, ChatMessage
from ..vision.models import AuditIssue, BoundingBox, ComplianceStatus
from .store import AuditBookkeeper, AuditStateStore

if TYPE_CHECKING:
    from .remediation import RemediationWorkflow

__all__ = [
    "STATUS_COLORS",
    "DetailPanel",
    "OverlayFrame",
    "OverlayRegion",
    "OverlayRenderer",
    "project_box",
    "status_color",
]

STATUS_COLORS = {
    ComplianceStatus.COMPLIANT: "#10b981",
    ComplianceStatus.WARNING: "#fbbf24",
    ComplianceStatus.NON_COMPLIANT: "#f43f5e",
}
STATUS_ICONS = {
    ComplianceStatus.COMPLIANT: "✅",
    ComplianceStatus.WARNING: "⚠️",
    ComplianceStatus.NON_COMPLIANT: "❌",
}

Point = tuple[float, float]


def status_color(status: ComplianceStatus) -> str:
    return STATUS_COLORS.get(status, STATUS_COLORS[ComplianceStatus.NON_COMPLIANT])


def project_box(
    box: BoundingBox, width: float, height: float, space: Optional[int] = None
) -> tuple[float, float, float, float]:
    """Scale a normalized box into ``(left, top, right, bottom)`` pixels."""
    space = space or config.overlay_space
    sx, sy = width / space, height / space
    return box.x_min * sx, box.y_min * sy, box.x_max * sx, box.y_max * sy


def _corner_brackets(box: BoundingBox, ratio: float) -> list[list[Point]]:
    size = min(box.width(), box.height()) * ratio
    y0, x0, y1, x1 = box.as_tuple()
    return [
        [(x0, y0 + size), (x0, y0), (x0 + size, y0)],
        [(x1 - size, y0), (x1, y0), (x1, y0 + size)],
        [(x0, y1 - size), (x0, y1), (x0 + size, y1)],
        [(x1 - size, y1), (x1, y1), (x1, y1 - size)],
    ]


@dataclass(slots=True)
class OverlayRegion:
    index: int
    issue: AuditIssue
    x: float
    y: float
    width: float
    height: float
    color: str
    icon: str
    focused: bool = False
    brackets: list[list[Point]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "category": self.issue.category,
            "status": self.issue.compliance_status.value,
            "rect": [self.x, self.y, self.width, self.height],
            "color": self.color,
            "icon": self.icon,
            "focused": self.focused,
            "brackets": self.brackets,
        }


@dataclass(slots=True)
class DetailPanel:
    index: int
    issue: AuditIssue
    x: float
    y: float
    width: int
    height: int

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "category": self.issue.category,
            "status": self.issue.compliance_status.value,
            "description": self.issue.description,
            "recommendation": self.issue.recommendation,
            "costEstimate": self.issue.cost_estimate,
            "anchor": [self.x, self.y, self.width, self.height],
        }


@dataclass(slots=True)
class OverlayFrame:
    regions: list[OverlayRegion]
    panel: Optional[DetailPanel]
    processing: bool

    def to_dict(self) -> dict:
        return {
            "viewBox": [0, 0, config.overlay_space, config.overlay_space],
            "regions": [r.to_dict() for r in self.regions],
            "panel": self.panel.to_dict() if self.panel else None,
            "processing": self.processing,
        }


class OverlayRenderer:
    """Turns the store's current result into drawable regions.

    Exactly one issue may be focused at a time. Focus is plain UI state and is
    never persisted.
    """

    def __init__(
        self,
        store: AuditStateStore,
        remediation: RemediationWorkflow,
        chat: AuditBookkeeper,
        *,
        session_id: str = AR_AUDITOR_SESSION,
    ) -> None:
        self._store = store
        self._remediation = remediation
        self._chat = chat
        self.session_id = session_id
        self.focused_index: Optional[int] = None
        self.sidebar_tab = "report"

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------
    def focus(self, index: Optional[int]) -> None:
        if index is not None and not 0 <= index < len(self._store.issues):
            raise IndexError(f"No issue at index {index}")
        self.focused_index = index

    @property
    def focused_issue(self) -> Optional[AuditIssue]:
        issues = self._store.issues
        if self.focused_index is None or self.focused_index >= len(issues):
            return None
        return issues[self.focused_index]

    def _issue(self, index: Optional[int]) -> AuditIssue:
        if index is None:
            issue = self.focused_issue
            if issue is None:
                raise IndexError("No focused issue")
            return issue
        issues = self._store.issues
        if not 0 <= index < len(issues):
            raise IndexError(f"No issue at index {index}")
        return issues[index]

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    def regions(self) -> list[OverlayRegion]:
        regions = []
        for idx, issue in enumerate(self._store.issues):
            box = issue.bounding_box
            regions.append(
                OverlayRegion(
                    index=idx,
                    issue=issue,
                    x=box.x_min,
                    y=box.y_min,
                    width=box.width(),
                    height=box.height(),
                    color=status_color(issue.compliance_status),
                    icon=STATUS_ICONS.get(issue.compliance_status, STATUS_ICONS[ComplianceStatus.NON_COMPLIANT]),
                    focused=idx == self.focused_index,
                    brackets=_corner_brackets(box, config.overlay_bracket_ratio),
                )
            )
        return regions

    def detail_panel(self) -> Optional[DetailPanel]:
        issue = self.focused_issue
        if issue is None:
            return None
        box = issue.bounding_box
        half = config.overlay_space / 2
        if box.x_max > half:
            x = box.x_min - config.overlay_panel_width - 20
        else:
            x = box.x_max + 30
        return DetailPanel(
            index=self.focused_index,
            issue=issue,
            x=x,
            y=max(50, box.y_min - 100),
            width=config.overlay_panel_width,
            height=config.overlay_panel_height,
        )

    def render(self, *, source_active: bool, processing: bool = False) -> Optional[OverlayFrame]:
        """Overlay for the current view, or ``None`` when nothing should be drawn."""
        if not source_active or self._store.result is None:
            return None
        return OverlayFrame(regions=self.regions(), panel=self.detail_panel(), processing=processing)

    # ------------------------------------------------------------------
    # Panel actions
    # ------------------------------------------------------------------
    def request_remediation(self, index: Optional[int] = None, *, from_report: bool = False) -> str:
        """Prefill the remediation instruction for an issue and switch views."""
        issue = self._issue(index)
        instruction = build_remediation_instruction(issue, from_report=from_report)
        self._remediation.set_instruction(instruction)
        self.sidebar_tab = "remediate"
        log.debug(f"Remediation prefilled for {issue.category}")
        return instruction

    def ask_about(self, index: Optional[int] = None, *, from_report: bool = False) -> ChatMessage:
        """Append a question about an issue to the advisor transcript."""
        issue = self._issue(index)
        message = ChatMessage(role="user", text=build_issue_question(issue, from_report=from_report))
        self._chat.append_history(self.session_id, message)
        return message
