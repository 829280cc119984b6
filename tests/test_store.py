"""Tests for the audit state store and completion bookkeeping."""

from arauditor.ai.response_parser import parse_audit_payload
from arauditor.audit.scheduler import ScanKind
from arauditor.audit.store import AuditStateStore
from arauditor.core.stats import AR_AUDITOR_SESSION
from arauditor.vision.models import AuditResult, CapturedFrame

from conftest import RAMP_RESPONSE


def _frame(tag=b"F1"):
    return CapturedFrame(data=tag, width=640, height=480, captured_at=0.0)


def test_manual_completion_counts_once_and_logs_hidden_summary(stats):
    store = AuditStateStore(stats)

    applied = store.apply(parse_audit_payload(RAMP_RESPONSE), _frame(), kind=ScanKind.MANUAL, seq=1)

    assert applied is True
    assert stats.stats.audit_reports_generated == 1
    history = stats.history(AR_AUDITOR_SESSION)
    assert len(history) == 1
    entry = history[0]
    assert entry.is_hidden is True
    assert entry.role == "user"
    assert entry.text == "[SYSTEM] Manual Analysis Complete. Accessibility Score: 42%."


def test_silent_completion_updates_store_without_bookkeeping(stats):
    store = AuditStateStore(stats)

    store.apply(parse_audit_payload(RAMP_RESPONSE), _frame(), kind=ScanKind.SILENT, seq=1)

    assert store.score == 42
    assert len(store.issues) == 1
    assert stats.stats.audit_reports_generated == 0
    assert stats.history(AR_AUDITOR_SESSION) == []


def test_new_result_replaces_previous_wholesale(stats):
    store = AuditStateStore(stats)
    store.apply(parse_audit_payload(RAMP_RESPONSE), _frame(b"F1"), kind=ScanKind.SILENT, seq=1)
    store.apply(AuditResult.empty(), _frame(b"F2"), kind=ScanKind.SILENT, seq=2)

    assert store.issues == ()
    assert store.score == 0
    assert store.frame.data == b"F2"


def test_last_completion_wins_by_default(stats):
    store = AuditStateStore(stats, discard_stale=False)
    store.apply(AuditResult.empty(), _frame(b"manual"), kind=ScanKind.MANUAL, seq=2)
    store.apply(parse_audit_payload(RAMP_RESPONSE), _frame(b"silent"), kind=ScanKind.SILENT, seq=1)

    assert store.frame.data == b"silent"
    assert store.score == 42
    assert store.last_applied_seq == 2


def test_stale_completion_discarded_in_strict_mode(stats):
    store = AuditStateStore(stats, discard_stale=True)
    store.apply(AuditResult.empty(), _frame(b"manual"), kind=ScanKind.MANUAL, seq=2)

    applied = store.apply(parse_audit_payload(RAMP_RESPONSE), _frame(b"silent"), kind=ScanKind.MANUAL, seq=1)

    assert applied is False
    assert store.frame.data == b"manual"
    assert stats.stats.audit_reports_generated == 1


def test_empty_store_reports_nothing():
    store = AuditStateStore()
    assert store.result is None
    assert store.issues == ()
    assert store.score is None
