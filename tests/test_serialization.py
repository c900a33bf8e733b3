"""
Test serialization of IntakeWizard to ensure it works with Streamlit session state.
"""

from __future__ import annotations

import pickle
from unittest.mock import MagicMock

import pytest

from soloscale.orchestration.intake_wizard import DETAILS, IntakeWizard


def test_intake_wizard_serialization() -> None:
    """IntakeWizard can be pickled with a live triage client attached."""
    client = MagicMock()
    client.classify.return_value = {"service_id": "contract_review", "confidence": 0.95, "reasoning": "Lease review."}
    wizard = IntakeWizard(triage_client=client)
    wizard.start()
    wizard.select_jurisdiction("TX")
    wizard.run_triage("Please review the lease for my new office.")
    wizard.accept_triage()
    wizard.set_detail("page_count", 14)
    wizard.add_file("lease.pdf", b"%PDF-1.4 test")

    try:
        pickled = pickle.dumps(wizard)
        assert len(pickled) > 0

        unpickled = pickle.loads(pickled)
        assert unpickled.step == DETAILS
        assert unpickled.intake["service_id"] == "contract_review"
        assert unpickled.intake["details"]["page_count"] == 14
        assert unpickled.files[0]["name"] == "lease.pdf"
        assert unpickled.triage_accepted is True
        assert unpickled._triage is None  # Should be None after deserialization
    except Exception as e:
        pytest.fail(f"Serialization failed: {e}")


def test_pickling_does_not_detach_live_client() -> None:
    """__getstate__ works on a copy; the running session keeps its client."""
    client = MagicMock()
    wizard = IntakeWizard(triage_client=client)
    pickle.dumps(wizard)
    assert wizard._triage is client


def test_unpickled_state_is_independent() -> None:
    wizard = IntakeWizard(triage_client=MagicMock())
    wizard.start()
    wizard.select_jurisdiction("FL")
    unpickled = pickle.loads(pickle.dumps(wizard))
    unpickled.intake["contact"]["name"] = "Changed"
    assert wizard.intake["contact"]["name"] == ""
