"""Parse and validate audit response JSON from the vision-language model."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from ..core.logger import log
from ..vision.models import AuditIssue, AuditResult, BoundingBox, ComplianceStatus

__all__ = ["IssuePayload", "AuditPayload", "parse_audit_response", "parse_audit_payload"]


class IssuePayload(BaseModel):
    """One issue as emitted by the model (original or canonical key names)."""

    model_config = ConfigDict(extra="ignore")

    category: str = Field(validation_alias=AliasChoices("category", "type"))
    status: str = Field(
        default=ComplianceStatus.NON_COMPLIANT.value,
        validation_alias=AliasChoices("complianceStatus", "status"),
    )
    description: str = ""
    recommendation: str = ""
    cost_estimate: str = Field(default="", validation_alias=AliasChoices("costEstimate", "cost_estimate"))
    coordinates: Optional[list[Any]] = Field(
        default=None,
        validation_alias=AliasChoices("boundingBox", "coordinates"),
    )


class AuditPayload(BaseModel):
    """Top-level audit response envelope."""

    model_config = ConfigDict(extra="ignore")

    issues: list[Any]
    score: float = Field(
        default=0,
        validation_alias=AliasChoices("complianceScore", "overallComplianceScore"),
    )


_JSON_REGEX = re.compile(r"\{[\s\S]+\}")
_FENCE_REGEX = re.compile(r"```(?:json)?", re.IGNORECASE)


def _first_json_blob(text: str) -> str | None:
    """Return first JSON-looking {...} block from text."""
    match = _JSON_REGEX.search(_FENCE_REGEX.sub("", text))
    return match.group(0) if match else None


def _clamp_score(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return max(0, min(100, int(round(value))))


def _to_issue(raw: Any) -> AuditIssue | None:
    """Validate a single raw issue; malformed entries yield ``None``."""
    try:
        payload = IssuePayload.model_validate(raw)
    except ValidationError as exc:
        log.debug(f"Dropping malformed issue: {exc.error_count()} validation error(s)")
        return None

    bbox = BoundingBox.from_sequence(payload.coordinates)
    if bbox is None:
        log.debug(f"Dropping issue {payload.category!r} without a 4-point bounding box")
        return None

    return AuditIssue(
        category=payload.category,
        compliance_status=ComplianceStatus.parse(payload.status),
        description=payload.description,
        recommendation=payload.recommendation,
        cost_estimate=payload.cost_estimate,
        bounding_box=bbox,
    )


def parse_audit_payload(data: Any) -> AuditResult:
    """Convert a decoded JSON object into an :class:`AuditResult`.

    Raises:
        pydantic.ValidationError: if the envelope itself is malformed.
    """
    envelope = AuditPayload.model_validate(data)
    issues = tuple(issue for issue in map(_to_issue, envelope.issues) if issue is not None)
    return AuditResult(issues=issues, compliance_score=_clamp_score(envelope.score))


def parse_audit_response(raw: str) -> AuditResult:
    """Parse raw model text into an :class:`AuditResult`.

    Raises:
        ValueError: if no JSON object can be located.
        json.JSONDecodeError: if the located block is not valid JSON.
        pydantic.ValidationError: if the envelope does not match the schema.
    """
    json_str = _first_json_blob(raw)
    if not json_str:
        raise ValueError("No JSON object found in response")
    return parse_audit_payload(json.loads(json_str))
