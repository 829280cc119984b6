"""Advisor chat: multi-turn sessions seeded from a persisted transcript."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from ..core.logger import log
from ..core.stats import ChatMessage, StatsStore
from .prompt import build_advisor_system_prompt, build_welcome_message

if TYPE_CHECKING:
    from .openai_client import InferenceClient

__all__ = ["AdvisorSession", "AdvisorChat", "FALLBACK_REPLY", "CONNECTIVITY_REPLY"]

FALLBACK_REPLY = "I'm sorry, I couldn't process that right now."
CONNECTIVITY_REPLY = "I encountered a connectivity issue. Please try your question again."


class AdvisorSession:
    """Opaque chat handle for one context label.

    The seed history is copied on construction; replaying a different history
    means building a new session rather than mutating this one.
    """

    def __init__(self, client: InferenceClient, context_label: str, prior_turns: Sequence[Any] = ()) -> None:
        self._client = client
        self.context_label = context_label
        self._messages: list[dict[str, Any]] = [
            {"role": "system", "content": build_advisor_system_prompt(context_label)}
        ]
        for turn in prior_turns:
            role, text = _turn_parts(turn)
            self._messages.append({"role": "assistant" if role == "model" else "user", "content": text})

    @property
    def turn_count(self) -> int:
        """Number of non-system turns held by the session."""
        return len(self._messages) - 1

    async def send(self, text: str) -> str:
        """Send a user turn and return the model's reply (errors propagate)."""
        self._messages.append({"role": "user", "content": text})
        reply = await self._client.chat(list(self._messages))
        self._messages.append({"role": "assistant", "content": reply})
        return reply


def _turn_parts(turn: Any) -> tuple[str, str]:
    if isinstance(turn, ChatMessage):
        return turn.role, turn.text
    if isinstance(turn, dict):
        return str(turn.get("role", "user")), str(turn.get("text", ""))
    role, text = turn
    return str(role), str(text)


class AdvisorChat:
    """Chat collaborator owning the transcript for one context."""

    def __init__(self, client: InferenceClient, stats: StatsStore, session_id: str, context_label: str) -> None:
        self._client = client
        self._stats = stats
        self.session_id = session_id
        self.context_label = context_label
        self.is_loading = False
        self._session = self._open_session()

    def _open_session(self) -> AdvisorSession:
        history = self._stats.history(self.session_id)
        session = self._client.create_advisor_session(self.context_label, history)
        if not history:
            self._stats.append_history(
                self.session_id, ChatMessage(role="model", text=build_welcome_message(self.context_label))
            )
        return session

    @property
    def session(self) -> AdvisorSession:
        return self._session

    def rebuild(self) -> None:
        """Replay the stored transcript into a fresh session."""
        self._session = self._open_session()

    def switch_context(self, session_id: str, context_label: str) -> None:
        self.session_id = session_id
        self.context_label = context_label
        self._session = self._open_session()

    def messages(self) -> list[ChatMessage]:
        return self._stats.history(self.session_id)

    def visible_messages(self) -> list[ChatMessage]:
        return [m for m in self.messages() if not m.is_hidden]

    async def ask(self, text: str) -> ChatMessage | None:
        """Append a user turn, await the advisor, append its reply."""
        if not text.strip() or self.is_loading:
            return None

        self._stats.append_history(self.session_id, ChatMessage(role="user", text=text))
        self.is_loading = True
        try:
            reply = await self._session.send(text)
            answer = ChatMessage(role="model", text=reply or FALLBACK_REPLY)
        except Exception as exc:  # noqa: BLE001
            log.error(f"Advisor error: {exc}")
            answer = ChatMessage(role="model", text=CONNECTIVITY_REPLY)
        finally:
            self.is_loading = False

        self._stats.append_history(self.session_id, answer)
        return answer
