"""Data models for audit results and their bounding boxes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ComplianceStatus(str, Enum):
    """Compliance classification returned for every audit issue."""

    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    WARNING = "WARNING"

    @classmethod
    def parse(cls, value: Any) -> ComplianceStatus:
        """Map a raw status string onto the enum; unknown values are non-compliant."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.NON_COMPLIANT


@dataclass(slots=True, frozen=True)
class BoundingBox:
    """Axis-aligned rectangle ``(y_min, x_min, y_max, x_max)`` in 0-1000 space."""

    y_min: float
    x_min: float
    y_max: float
    x_max: float

    @classmethod
    def from_sequence(cls, values: Any) -> BoundingBox | None:
        """Build a box from 4 finite numbers, or ``None`` if malformed."""
        if not isinstance(values, (list, tuple)) or len(values) != 4:
            return None
        if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in values):
            return None
        # json.loads accepts NaN and Infinity
        if not all(math.isfinite(v) for v in values):
            return None
        return cls(*(float(v) for v in values))

    def width(self) -> float:
        """Width in normalized units."""
        return self.x_max - self.x_min

    def height(self) -> float:
        """Height in normalized units."""
        return self.y_max - self.y_min

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return bounding box as ``(y_min, x_min, y_max, x_max)`` tuple."""
        return self.y_min, self.x_min, self.y_max, self.x_max


@dataclass(slots=True, frozen=True)
class AuditIssue:
    """One detected accessibility feature or barrier."""

    category: str
    compliance_status: ComplianceStatus
    description: str
    recommendation: str
    cost_estimate: str
    bounding_box: BoundingBox

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "complianceStatus": self.compliance_status.value,
            "description": self.description,
            "recommendation": self.recommendation,
            "costEstimate": self.cost_estimate,
            "boundingBox": list(self.bounding_box.as_tuple()),
        }


@dataclass(slots=True, frozen=True)
class AuditResult:
    """A completed scan: ordered issues plus an overall 0-100 score."""

    issues: tuple[AuditIssue, ...] = field(default_factory=tuple)
    compliance_score: int = 0

    @classmethod
    def empty(cls) -> AuditResult:
        """Sentinel returned by the inference client on any failure."""
        return cls(issues=(), compliance_score=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "complianceScore": self.compliance_score,
        }


@dataclass(slots=True, frozen=True)
class CapturedFrame:
    """A single still image encoded as JPEG bytes."""

    data: bytes
    width: int
    height: int
    captured_at: float
