"""Vision debugging helpers: draw audit boxes onto the captured frame."""

from __future__ import annotations

import os
from typing import Optional

import cv2  # type: ignore
import numpy as np

from ..core.config import config
from .models import AuditResult, CapturedFrame


def _hex_to_bgr(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return b, g, r


def render_debug_overlay(frame: CapturedFrame, result: AuditResult) -> Optional[np.ndarray]:
    """Decode *frame* and draw every issue box scaled to the frame's pixels."""
    from ..audit.overlay import project_box, status_color

    img = cv2.imdecode(np.frombuffer(frame.data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        return None

    height, width = img.shape[:2]
    for issue in result.issues:
        color = _hex_to_bgr(status_color(issue.compliance_status))
        x1, y1, x2, y2 = (int(v) for v in project_box(issue.bounding_box, width, height))

        cv2.rectangle(img, (x1, y1), (x2, y2), color, thickness=3)

        # Prepare text label
        label = f"{issue.category}:{issue.compliance_status.value}"
        font_scale = 0.5
        font = cv2.FONT_HERSHEY_SIMPLEX
        (text_w, text_h), _ = cv2.getTextSize(label, font, font_scale, 1)

        # Background rectangle (white) behind text for legibility
        text_bg_tl = (x1, max(0, y1 - text_h - 4))
        text_bg_br = (x1 + text_w + 4, max(0, y1))
        cv2.rectangle(img, text_bg_tl, text_bg_br, (255, 255, 255), thickness=cv2.FILLED)

        text_org = (x1 + 2, max(10, y1 - 2))
        cv2.putText(img, label, text_org, font, font_scale, color, thickness=1, lineType=cv2.LINE_AA)

    return img


def save_debug_overlay(frame: CapturedFrame, result: AuditResult, name: str) -> Optional[str]:
    """Write the annotated frame under ``vision_debug_dir`` when enabled."""
    if not config.save_vision_debug:
        return None

    img = render_debug_overlay(frame, result)
    if img is None:
        return None

    os.makedirs(config.vision_debug_dir, exist_ok=True)
    path = os.path.join(config.vision_debug_dir, f"{name}_debug.jpg")
    cv2.imwrite(path, img)
    return path
