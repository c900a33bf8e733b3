"""
Tests for the in-memory matter store: creation, audit log, conflicts and stats.
"""

from __future__ import annotations

import re
import threading

import pytest

from soloscale.domains.pricing import quote
from soloscale.infrastructure.matter_store import (
    MatterNotFoundError,
    MatterStore,
    format_audit_entry,
    parse_audit_entry,
)


def _intake(
    service_id: str = "demand_letter",
    opposing: str = "",
    email: str = "jane@example.com",
    urgency: str = "standard",
) -> dict:
    details = {"description": "Recover an unpaid invoice."}
    if opposing:
        details["opposing_party"] = opposing
    return {
        "jurisdiction": "TX",
        "service_id": service_id,
        "urgency": urgency,
        "details": details,
        "contact": {"name": "Jane Doe", "email": email},
    }


def _create(store: MatterStore, **kwargs) -> dict:
    intake = _intake(**kwargs)
    return store.create_matter(intake, quote(intake["service_id"], intake["details"], intake["urgency"]))


def _actions(matter: dict) -> list[str]:
    return [parse_audit_entry(e)["action"] for e in matter["audit_log"]]


def test_create_matter_fields() -> None:
    store = MatterStore(blacklist=["evil corp"])
    m = _create(store)
    assert re.fullmatch(r"[A-Z0-9]{9}", m["id"])
    assert m["status"] == "new"
    assert m["price"] == 200
    assert m["price_breakdown"]["base"] == 200
    assert m["created_at"].endswith("Z")
    assert m["intake"]["details"]["description"] == "Recover an unpaid invoice."


def test_audit_log_starts_with_creation_and_disclaimer() -> None:
    store = MatterStore(blacklist=[])
    m = _create(store)
    assert _actions(m) == ["MATTER_CREATED", "DISCLAIMER_ACCEPTED"]


def test_full_audit_order() -> None:
    store = MatterStore(blacklist=["evil corp"])
    intake = _intake(opposing="Evil Corp")
    m = store.create_matter(
        intake,
        quote("demand_letter", intake["details"]),
        signature={"signed_name": "Jane Doe", "signed_at": "2025-01-01T00:00:00Z"},
        payment={"auth_id": "AUTH-ABC", "last4": "4242", "amount": 200.0},
        triage={"service_id": "demand_letter", "confidence": 0.9, "reasoning": "x"},
    )
    assert _actions(m) == [
        "MATTER_CREATED",
        "DISCLAIMER_ACCEPTED",
        "TRIAGE_SUGGESTED",
        "ENGAGEMENT_SIGNED",
        "PAYMENT_AUTHORIZED",
        "CONFLICT_DETECTED",
    ]
    assert parse_audit_entry(m["audit_log"][2])["details"] == "demand_letter (90%)"
    assert parse_audit_entry(m["audit_log"][4])["details"] == "AUTH-ABC card ending 4242"
    assert parse_audit_entry(m["audit_log"][-1])["details"] == "Potential match for: Evil Corp"


def test_conflict_flags_status() -> None:
    store = MatterStore(blacklist=["bad guy"])
    assert _create(store, opposing="Mr. Bad-Guy")["status"] == "conflict_flagged"
    assert _create(store, opposing="Good Guy")["status"] == "new"


def test_stored_matter_is_a_copy() -> None:
    """Mutating returned or input dicts must not change the store."""
    store = MatterStore(blacklist=[])
    intake = _intake()
    m = store.create_matter(intake, quote("demand_letter", intake["details"]))
    m["audit_log"].append("tampered")
    m["status"] = "completed"
    intake["contact"]["email"] = "other@example.com"

    stored = store.get_matter(m["id"])
    assert stored["status"] == "new"
    assert "tampered" not in stored["audit_log"]
    assert stored["intake"]["contact"]["email"] == "jane@example.com"


def test_append_audit() -> None:
    store = MatterStore(blacklist=[])
    m = _create(store)
    entry = store.append_audit(m["id"], "STATUS_REVIEWED", "Opened by staff")
    assert entry.endswith("STATUS_REVIEWED: Opened by staff")
    log = store.get_matter(m["id"])["audit_log"]
    assert log[: len(m["audit_log"])] == m["audit_log"]
    assert log[-1] == entry


def test_unknown_matter() -> None:
    store = MatterStore(blacklist=[])
    with pytest.raises(MatterNotFoundError):
        store.get_matter("NOPE")
    with pytest.raises(MatterNotFoundError):
        store.append_audit("NOPE", "X")


def test_list_and_filter() -> None:
    store = MatterStore(blacklist=["evil corp"])
    a = _create(store)
    b = _create(store, opposing="Evil Corp")
    c = _create(store)
    assert [m["id"] for m in store.list_matters()] == [a["id"], b["id"], c["id"]]
    assert [m["id"] for m in store.list_matters("conflict_flagged")] == [b["id"]]
    assert len({a["id"], b["id"], c["id"]}) == 3


def test_matters_for_email() -> None:
    store = MatterStore(blacklist=[])
    _create(store, email="jane@example.com")
    _create(store, email="Jane@Example.com ")
    _create(store, email="bob@example.com")
    assert len(store.matters_for_email("JANE@example.com")) == 2
    assert store.matters_for_email("") == []
    assert store.matters_for_email("nobody@example.com") == []


def test_stats() -> None:
    store = MatterStore(blacklist=["evil corp"])
    _create(store)
    _create(store, urgency="rush")
    _create(store, opposing="Evil Corp")
    s = store.stats()
    assert s["total"] == 3
    assert s["new"] == 2
    assert s["conflicts"] == 1
    assert s["rush"] == 1
    assert s["revenue"] == 200 + 300 + 200
    assert s["by_status"]["completed"] == 0


def test_concurrent_creates_get_unique_ids() -> None:
    store = MatterStore(blacklist=[])

    def worker() -> None:
        for _ in range(20):
            _create(store)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    ids = [m["id"] for m in store.list_matters()]
    assert len(ids) == 100
    assert len(set(ids)) == 100


def test_audit_entry_format_roundtrip() -> None:
    entry = format_audit_entry("MATTER_CREATED", "Intake submitted", "2024-10-24T15:02:11Z")
    assert entry == "2024-10-24T15:02:11Z MATTER_CREATED: Intake submitted"
    assert parse_audit_entry(entry) == {
        "timestamp": "2024-10-24T15:02:11Z",
        "action": "MATTER_CREATED",
        "details": "Intake submitted",
    }
