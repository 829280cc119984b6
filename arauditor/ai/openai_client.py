"""Async inference client for audits, image edits and advisor chat."""
from __future__ import annotations

import base64
import json
import time
from typing import Any, Sequence

import openai  # type: ignore
from pydantic import ValidationError

from ..core.config import config
from ..core.logger import log
from ..vision.models import AuditResult
from .advisor import AdvisorSession
from .prompt import AUDIT_PROMPT, SYSTEM_INSTRUCTIONS, build_edit_prompt
from .response_parser import parse_audit_response

__all__ = ["InferenceClient", "get_inference_client"]


def _data_url(frame_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(frame_bytes).decode('ascii')}"


class InferenceClient:
    """Stateless async wrapper around the remote vision-language service.

    ``analyze_image`` and ``edit_image`` never raise: every transport, parsing
    or schema failure is logged and converted to an empty/absent sentinel.
    Retries are disabled; each call is exactly one round-trip.
    """

    _instance: InferenceClient | None = None

    @classmethod
    def instance(cls) -> InferenceClient:
        """Return the shared instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self, client: Any | None = None) -> None:
        if client is None:
            api_key = config.openai_api_key
            if not api_key:
                raise ValueError("OPENAI_API_KEY not configured")
            client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=config.openai_base_url,
                timeout=config.inference_timeout,
                max_retries=0,
            )
        self._client = client

        self.audit_model = config.audit_model
        self.edit_model = config.image_edit_model
        self.advisor_model = config.advisor_model
        self.temperature = float(config.openai_temperature)
        self.max_tokens = int(config.openai_max_tokens)

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    async def analyze_image(self, frame_bytes: bytes) -> AuditResult:
        """Run an accessibility audit on a JPEG frame."""
        messages = [
            {"role": "system", "content": SYSTEM_INSTRUCTIONS},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": AUDIT_PROMPT},
                    {"type": "image_url", "image_url": {"url": _data_url(frame_bytes)}},
                ],
            },
        ]

        started = time.perf_counter()
        try:
            response = await self._client.chat.completions.create(
                model=self.audit_model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content  # type: ignore[attr-defined]
            if not content:
                log.warning("Audit service returned empty content")
                return AuditResult.empty()
            return parse_audit_response(content)
        except (openai.APIError, json.JSONDecodeError, ValidationError, ValueError) as exc:
            log.error(f"Audit service error: {exc}")
        except Exception as exc:  # noqa: BLE001
            log.error(f"Unexpected audit failure: {type(exc).__name__}: {exc}")
        finally:
            log.log_performance("analyze_image", (time.perf_counter() - started) * 1000)
        return AuditResult.empty()

    async def edit_image(self, frame_bytes: bytes, instruction: str) -> bytes | None:
        """Render a remediation of *frame_bytes*; ``None`` when no image comes back."""
        started = time.perf_counter()
        try:
            response = await self._client.images.edit(
                model=self.edit_model,
                image=("frame.jpg", frame_bytes, "image/jpeg"),
                prompt=build_edit_prompt(instruction),
            )
            for item in response.data or []:
                if getattr(item, "b64_json", None):
                    return base64.b64decode(item.b64_json)
            log.warning("Image edit response contained no image data")
            return None
        except openai.APIError as exc:
            log.error(f"Image edit error: {exc}")
        except Exception as exc:  # noqa: BLE001
            log.error(f"Unexpected image edit failure: {type(exc).__name__}: {exc}")
        finally:
            log.log_performance("edit_image", (time.perf_counter() - started) * 1000)
        return None

    async def chat(self, messages: list[dict[str, Any]]) -> str:
        """Send a chat completion and return the assistant reply.

        Unlike the audit calls this propagates errors; the advisor widget
        decides how to present them.
        """
        response = await self._client.chat.completions.create(
            model=self.advisor_model,
            messages=messages,  # type: ignore[arg-type]
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        content = response.choices[0].message.content  # type: ignore[attr-defined]
        if content is None:
            raise RuntimeError("Advisor returned empty content")
        return content

    def create_advisor_session(self, context_label: str, prior_turns: Sequence[Any] = ()) -> AdvisorSession:
        """Open a multi-turn advisor session seeded with *prior_turns*."""
        return AdvisorSession(self, context_label, prior_turns)


# Convenience getter
get_inference_client = InferenceClient.instance
