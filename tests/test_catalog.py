"""
Tests for the service catalog and eligibility rules.
"""

from __future__ import annotations

import pytest

from soloscale.domains.catalog import (
    JURISDICTIONS,
    OTHER_JURISDICTION,
    SERVICES,
    TRIAGE_RESPONSE_SCHEMA,
    get_service,
    is_eligible,
    jurisdiction_label,
    service_fields,
    service_ids,
)


def test_service_ids_match_catalog() -> None:
    assert service_ids() == ["contract_review", "business_formation", "demand_letter"]
    assert service_ids() == [s["id"] for s in SERVICES]
    assert TRIAGE_RESPONSE_SCHEMA["properties"]["serviceId"]["enum"] == service_ids()


def test_get_service() -> None:
    assert get_service("business_formation")["base_price"] == 400
    assert get_service("patent_filing") is None
    assert get_service(None) is None


def test_jurisdictions_end_with_other() -> None:
    assert JURISDICTIONS == ["TX", "FL", "CO", OTHER_JURISDICTION]


@pytest.mark.parametrize("code, eligible", [("TX", True), ("fl", True), ("CO", True), ("OTHER", False), ("NY", False), (None, False)])
def test_is_eligible(code: str | None, eligible: bool) -> None:
    assert is_eligible(code) is eligible


def test_jurisdiction_labels() -> None:
    assert [jurisdiction_label(c) for c in JURISDICTIONS] == [
        "Texas (TX)",
        "Florida (FL)",
        "Colorado (CO)",
        "Other State",
    ]


def test_every_service_requires_a_description() -> None:
    for service_id in service_ids():
        required = [f["key"] for f in service_fields(service_id) if f.get("required")]
        assert required == ["description"]
    assert [f["key"] for f in service_fields("unknown")] == ["description"]


def test_service_fields_are_copies() -> None:
    service_fields("demand_letter")[0]["label"] = "changed"
    assert service_fields("demand_letter")[0]["label"] == "Opposing Party Name"
