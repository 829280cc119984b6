"""Computer vision utilities for the auditor.

This sub-package owns the camera feed, the audit data models, and debug
renderings of issue boxes on captured frames.
"""

from .camera import CameraError, CameraPermissionDenied, FrameCaptureSource, SensorStatus
from .models import AuditIssue, AuditResult, BoundingBox, CapturedFrame, ComplianceStatus

__all__ = [
    "AuditIssue",
    "AuditResult",
    "BoundingBox",
    "CameraError",
    "CameraPermissionDenied",
    "CapturedFrame",
    "ComplianceStatus",
    "FrameCaptureSource",
    "SensorStatus",
]
