"""Aggregate empathy stats and advisor transcripts, persisted as one JSON blob.

The auditor only talks to this module through :meth:`StatsStore.append_history`
and :meth:`StatsStore.increment_audit_count`; everything else serves the
dashboard and the advisor chat.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ..utils.file_utils import get_timestamp_ms, load_json, save_json
from .config import config
from .logger import log

__all__ = ["ChatMessage", "EmpathyStats", "StatsStore", "AR_AUDITOR_SESSION"]

#: Transcript key used by the AR auditor view.
AR_AUDITOR_SESSION = "AR_AUDITOR"

#: Minutes credited for each completed simulation scenario.
MINUTES_PER_SCENARIO = 8


@dataclass(slots=True)
class ChatMessage:
    """One transcript turn. Hidden turns feed the model but are not displayed."""

    role: str  # "user" | "model"
    text: str
    timestamp: int = field(default_factory=get_timestamp_ms)
    is_hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = {"role": self.role, "text": self.text, "timestamp": self.timestamp}
        if self.is_hidden:
            data["isHidden"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessage:
        return cls(
            role="model" if data.get("role") == "model" else "user",
            text=str(data.get("text", "")),
            timestamp=int(data.get("timestamp", 0)),
            is_hidden=bool(data.get("isHidden", False)),
        )


@dataclass(slots=True)
class EmpathyStats:
    scenarios_completed: int = 0
    empathy_score: int = 0
    audit_reports_generated: int = 0
    time_spent_minutes: int = 0
    chat_histories: dict[str, list[ChatMessage]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["chat_histories"] = {
            key: [m.to_dict() for m in messages] for key, messages in self.chat_histories.items()
        }
        return {
            "scenariosCompleted": data["scenarios_completed"],
            "empathyScore": data["empathy_score"],
            "auditReportsGenerated": data["audit_reports_generated"],
            "timeSpentMinutes": data["time_spent_minutes"],
            "chatHistories": data["chat_histories"],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmpathyStats:
        histories = data.get("chatHistories") or {}
        return cls(
            scenarios_completed=int(data.get("scenariosCompleted", 0)),
            empathy_score=int(data.get("empathyScore", 0)),
            audit_reports_generated=int(data.get("auditReportsGenerated", 0)),
            time_spent_minutes=int(data.get("timeSpentMinutes", 0)),
            chat_histories={
                str(key): [ChatMessage.from_dict(m) for m in messages if isinstance(m, dict)]
                for key, messages in histories.items()
                if isinstance(messages, list)
            },
        )


class StatsStore:
    """Client-local stats persistence: rehydrated on start, rewritten on every change."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or config.get_stats_path()
        self.stats = self._load()

    def _load(self) -> EmpathyStats:
        data = load_json(self.path)
        if not isinstance(data, dict):
            return EmpathyStats()
        try:
            return EmpathyStats.from_dict(data)
        except (TypeError, ValueError) as exc:
            log.warning(f"Discarding unreadable stats blob at {self.path}: {exc}")
            return EmpathyStats()

    def _save(self) -> None:
        save_json(self.stats.to_dict(), self.path)

    # ------------------------------------------------------------------
    # Transcript access
    # ------------------------------------------------------------------
    def history(self, session_id: str) -> list[ChatMessage]:
        return list(self.stats.chat_histories.get(session_id, []))

    def replace_history(self, session_id: str, messages: list[ChatMessage]) -> None:
        self.stats.chat_histories[session_id] = list(messages)
        self._save()

    def append_history(self, session_id: str, message: ChatMessage) -> None:
        self.stats.chat_histories.setdefault(session_id, []).append(message)
        self._save()

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------
    def increment_audit_count(self) -> int:
        self.stats.audit_reports_generated += 1
        self._save()
        return self.stats.audit_reports_generated

    def complete_scenario(self, score: int) -> EmpathyStats:
        """Blend a scenario score into the running empathy average.

        The first sample is taken as-is; later samples are averaged with the
        current value.
        """
        previous = self.stats
        divisor = 2 if previous.scenarios_completed else 1
        previous.empathy_score = round((previous.empathy_score + score) / divisor)
        previous.scenarios_completed += 1
        previous.time_spent_minutes += MINUTES_PER_SCENARIO
        self._save()
        return previous
