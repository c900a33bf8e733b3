"""
Tests for the triage client: response parsing, API mock and retry behaviour.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from soloscale.orchestration.triage_client import (
    SYSTEM_PROMPT,
    TriageClient,
    TriageUnavailableError,
    parse_triage_response,
)


def _ok_response(content: str) -> MagicMock:
    r = MagicMock(status_code=200, json=lambda: {"choices": [{"message": {"role": "assistant", "content": content}}]})
    r.raise_for_status = MagicMock()
    return r


def _http_error(status: int) -> MagicMock:
    r = MagicMock(status_code=status)
    r.raise_for_status.side_effect = requests.HTTPError(f"{status} error", response=r)
    return r


def test_system_prompt_lists_catalog() -> None:
    for service_id in ("contract_review", "business_formation", "demand_letter"):
        assert service_id in SYSTEM_PROMPT


def test_parse_bare_json() -> None:
    out = parse_triage_response('{"serviceId": "demand_letter", "confidence": 0.92, "reasoning": "Unpaid invoice."}')
    assert out == {"service_id": "demand_letter", "confidence": 0.92, "reasoning": "Unpaid invoice."}


def test_parse_fenced_json() -> None:
    content = '```json\n{"serviceId": "contract_review", "confidence": 0.8, "reasoning": "Lease."}\n```'
    assert parse_triage_response(content)["service_id"] == "contract_review"


def test_parse_fence_tag_is_case_insensitive() -> None:
    content = "```JSON\n{\"serviceId\": \"demand_letter\", \"confidence\": 0.8, \"reasoning\": \"x\"}\n```"
    assert parse_triage_response(content)["service_id"] == "demand_letter"


def test_parse_json_inside_prose() -> None:
    content = 'Sure! {"service_id": "business_formation", "confidence": 0.7, "reasoning": "LLC."} Hope that helps.'
    assert parse_triage_response(content)["service_id"] == "business_formation"


def test_parse_clamps_confidence() -> None:
    high = parse_triage_response('{"serviceId": "demand_letter", "confidence": 3, "reasoning": ""}')
    low = parse_triage_response('{"serviceId": "demand_letter", "confidence": -1, "reasoning": ""}')
    junk = parse_triage_response('{"serviceId": "demand_letter", "confidence": "high", "reasoning": ""}')
    assert high["confidence"] == 1.0
    assert low["confidence"] == 0.0
    assert junk["confidence"] == 0.0


@pytest.mark.parametrize(
    "content",
    [
        "",
        "I think you need a lawyer.",
        '{"serviceId": "divorce", "confidence": 0.9, "reasoning": "x"}',
        '{"confidence": 0.9}',
        "[1, 2, 3]",
    ],
)
def test_parse_rejects_unusable_answers(content: str) -> None:
    with pytest.raises(ValueError):
        parse_triage_response(content)


def test_client_init_uses_explicit_key() -> None:
    client = TriageClient(api_key="test-key", base_url="https://llm.test/v1/chat/completions", model="m")
    assert client.api_key == "test-key"
    assert client.model == "m"
    assert client.max_retries >= 0


@patch("soloscale.orchestration.triage_client.requests.post")
def test_classify_mock_response(mock_post: MagicMock) -> None:
    mock_post.return_value = _ok_response(
        json.dumps({"serviceId": "demand_letter", "confidence": 0.88, "reasoning": "A client owes you money."})
    )
    client = TriageClient(api_key="x")
    out = client.classify("A client hasn't paid my invoice for three months.")
    assert out["service_id"] == "demand_letter"
    assert out["confidence"] == pytest.approx(0.88)

    _, kwargs = mock_post.call_args
    payload = kwargs["json"]
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["messages"][0]["role"] == "system"
    assert "invoice" in payload["messages"][1]["content"]
    assert kwargs["headers"]["Authorization"] == "Bearer x"


@patch("soloscale.orchestration.triage_client.requests.post")
def test_classify_unknown_service_is_unavailable(mock_post: MagicMock) -> None:
    mock_post.return_value = _ok_response('{"serviceId": "patent_filing", "confidence": 0.9, "reasoning": "x"}')
    client = TriageClient(api_key="x")
    with pytest.raises(TriageUnavailableError):
        client.classify("I want to patent my invention.")


@patch("soloscale.orchestration.triage_client.requests.post")
def test_classify_no_choices(mock_post: MagicMock) -> None:
    r = MagicMock(status_code=200, json=lambda: {"choices": []})
    r.raise_for_status = MagicMock()
    mock_post.return_value = r
    client = TriageClient(api_key="x")
    with pytest.raises(TriageUnavailableError):
        client.classify("My landlord kept my deposit.")


@patch("soloscale.orchestration.triage_client.time.sleep")
@patch("soloscale.orchestration.triage_client.requests.post")
def test_retries_transport_errors(mock_post: MagicMock, mock_sleep: MagicMock) -> None:
    mock_post.side_effect = [
        requests.ConnectionError("boom"),
        _ok_response('{"serviceId": "contract_review", "confidence": 0.9, "reasoning": "x"}'),
    ]
    client = TriageClient(api_key="x")
    client.max_retries = 2
    out = client.classify("Please review my employment contract.")
    assert out["service_id"] == "contract_review"
    assert mock_post.call_count == 2
    mock_sleep.assert_called_once_with(1)


@patch("soloscale.orchestration.triage_client.time.sleep")
@patch("soloscale.orchestration.triage_client.requests.post")
def test_gives_up_after_max_retries(mock_post: MagicMock, mock_sleep: MagicMock) -> None:
    """max_retries counts retries, so the request is sent max_retries + 1 times."""
    mock_post.side_effect = requests.Timeout("slow")
    client = TriageClient(api_key="x")
    client.max_retries = 2
    with pytest.raises(TriageUnavailableError) as exc:
        client.classify("Please review my employment contract.")
    assert mock_post.call_count == 3
    assert mock_sleep.call_count == 2
    assert isinstance(exc.value.original, requests.Timeout)


@patch("soloscale.orchestration.triage_client.requests.post")
def test_zero_retries_sends_once(mock_post: MagicMock) -> None:
    mock_post.side_effect = requests.ConnectionError("down")
    client = TriageClient(api_key="x")
    client.max_retries = 0
    with pytest.raises(TriageUnavailableError):
        client.classify("Please review my employment contract.")
    assert mock_post.call_count == 1


@patch("soloscale.orchestration.triage_client.time.sleep")
@patch("soloscale.orchestration.triage_client.requests.post")
def test_client_error_is_not_retried(mock_post: MagicMock, mock_sleep: MagicMock) -> None:
    """A 401 will not fix itself; only 429 and 5xx are retried."""
    mock_post.return_value = _http_error(401)
    client = TriageClient(api_key="bad")
    client.max_retries = 3
    with pytest.raises(TriageUnavailableError):
        client.classify("Please review my employment contract.")
    assert mock_post.call_count == 1
    mock_sleep.assert_not_called()


@patch("soloscale.orchestration.triage_client.time.sleep")
@patch("soloscale.orchestration.triage_client.requests.post")
def test_rate_limit_is_retried(mock_post: MagicMock, mock_sleep: MagicMock) -> None:
    mock_post.side_effect = [
        _http_error(429),
        _ok_response('{"serviceId": "demand_letter", "confidence": 0.6, "reasoning": "x"}'),
    ]
    client = TriageClient(api_key="x")
    client.max_retries = 2
    assert client.classify("They owe me $5,000.")["service_id"] == "demand_letter"
    assert mock_post.call_count == 2
