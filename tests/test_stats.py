"""Tests for stats persistence and the advisor chat transcript."""

import asyncio
import json

from arauditor.ai.advisor import CONNECTIVITY_REPLY, AdvisorChat
from arauditor.core.stats import AR_AUDITOR_SESSION, ChatMessage, StatsStore

from conftest import FakeInferenceClient


def test_stats_round_trip_through_disk(tmp_path):
    path = str(tmp_path / "stats.json")
    store = StatsStore(path)
    store.append_history(AR_AUDITOR_SESSION, ChatMessage(role="user", text="hidden note", is_hidden=True))
    store.increment_audit_count()

    with open(path, encoding="utf-8") as f:
        blob = json.load(f)
    assert blob["auditReportsGenerated"] == 1
    assert blob["chatHistories"][AR_AUDITOR_SESSION][0]["isHidden"] is True

    reloaded = StatsStore(path)
    assert reloaded.stats.audit_reports_generated == 1
    message = reloaded.history(AR_AUDITOR_SESSION)[0]
    assert message.text == "hidden note"
    assert message.is_hidden is True


def test_corrupt_blob_starts_fresh(tmp_path):
    path = tmp_path / "stats.json"
    path.write_text("{not json", encoding="utf-8")

    store = StatsStore(str(path))

    assert store.stats.audit_reports_generated == 0
    assert store.history(AR_AUDITOR_SESSION) == []


def test_scenario_score_uses_running_average(stats):
    stats.complete_scenario(80)
    assert stats.stats.empathy_score == 80
    stats.complete_scenario(60)
    assert stats.stats.empathy_score == 70
    assert stats.stats.scenarios_completed == 2
    assert stats.stats.time_spent_minutes == 16


def test_history_is_returned_as_copy(stats):
    stats.append_history("S", ChatMessage(role="user", text="a"))
    stats.history("S").append(ChatMessage(role="user", text="b"))
    assert len(stats.history("S")) == 1


def test_advisor_seeds_welcome_once(stats):
    client = FakeInferenceClient()
    AdvisorChat(client, stats, AR_AUDITOR_SESSION, "Spatial Auditing")
    AdvisorChat(client, stats, AR_AUDITOR_SESSION, "Spatial Auditing")

    history = stats.history(AR_AUDITOR_SESSION)
    assert len(history) == 1
    assert history[0].role == "model"
    assert "Spatial Auditing" in history[0].text


def test_advisor_ask_appends_question_and_reply(stats):
    client = FakeInferenceClient(chat_replies=["Use a 1:12 slope."])
    chat = AdvisorChat(client, stats, AR_AUDITOR_SESSION, "Spatial Auditing")

    answer = asyncio.run(chat.ask("How steep can a ramp be?"))

    assert answer.text == "Use a 1:12 slope."
    texts = [m.text for m in stats.history(AR_AUDITOR_SESSION)]
    assert texts[-2:] == ["How steep can a ramp be?", "Use a 1:12 slope."]
    assert chat.is_loading is False


def test_advisor_failure_appends_connectivity_reply(stats):
    chat = AdvisorChat(FakeInferenceClient(), stats, AR_AUDITOR_SESSION, "Spatial Auditing")

    answer = asyncio.run(chat.ask("Hello?"))

    assert answer.text == CONNECTIVITY_REPLY
    assert answer.role == "model"
    assert chat.is_loading is False


def test_advisor_ignores_blank_questions(stats):
    client = FakeInferenceClient(chat_replies=["unused"])
    chat = AdvisorChat(client, stats, AR_AUDITOR_SESSION, "Spatial Auditing")

    assert asyncio.run(chat.ask("   ")) is None
    assert client.chat_calls == []


def test_hidden_messages_feed_model_but_not_display(stats):
    stats.append_history(AR_AUDITOR_SESSION, ChatMessage(role="model", text="Welcome"))
    stats.append_history(
        AR_AUDITOR_SESSION,
        ChatMessage(role="user", text="[SYSTEM] Manual Analysis Complete. Accessibility Score: 42%.", is_hidden=True),
    )
    client = FakeInferenceClient(chat_replies=["Noted."])
    chat = AdvisorChat(client, stats, AR_AUDITOR_SESSION, "Spatial Auditing")

    assert [m.text for m in chat.visible_messages()] == ["Welcome"]
    asyncio.run(chat.ask("What did the scan find?"))

    sent = client.chat_calls[0]
    assert any("Accessibility Score: 42%" in m["content"] for m in sent)


def test_replace_history_persists(stats):
    stats.append_history("S", ChatMessage(role="user", text="old"))
    stats.replace_history("S", [ChatMessage(role="model", text="fresh")])

    reloaded = StatsStore(stats.path)
    assert [m.text for m in reloaded.history("S")] == ["fresh"]


def test_switch_context_opens_fresh_session(stats):
    client = FakeInferenceClient(chat_replies=["Mobility answer."])
    chat = AdvisorChat(client, stats, AR_AUDITOR_SESSION, "Spatial Auditing")
    first_session = chat.session

    chat.switch_context("WHEELCHAIR", "Wheelchair Mobility")
    asyncio.run(chat.ask("How wide must a doorway be?"))

    assert chat.session is not first_session
    assert len(stats.history(AR_AUDITOR_SESSION)) == 1
    wheelchair = stats.history("WHEELCHAIR")
    assert "Wheelchair Mobility" in wheelchair[0].text
    assert wheelchair[-1].text == "Mobility answer."
    assert "Wheelchair Mobility" in client.chat_calls[0][0]["content"]
