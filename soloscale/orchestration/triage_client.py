"""
LLM triage client: route a free-text problem description to a catalog service.

Talks to any OpenAI-compatible chat completions endpoint (Gemini, Groq, xAI)
and asks for JSON {serviceId, confidence, reasoning}.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any

import requests

from soloscale.domains.catalog import SERVICES, TRIAGE_RESPONSE_SCHEMA, service_ids
from soloscale.utils.config import (
    llm_api_key,
    llm_base_url,
    llm_max_retries,
    llm_max_tokens,
    llm_model,
    llm_timeout_seconds,
)
from soloscale.utils.logger import get_logger

logger = get_logger()

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


class TriageUnavailableError(RuntimeError):
    """Raised when the model cannot be reached or its answer cannot be used."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def _catalog_lines() -> str:
    return "\n".join(f"- {s['id']}: {s['title']}. {s['description']}" for s in SERVICES)


SYSTEM_PROMPT = f"""You are the intake triage assistant for a flat-fee legal services storefront.
A prospective client describes their legal issue. Pick the single best matching service from this catalog:

{_catalog_lines()}

Rules:
- Answer with JSON only, no prose and no markdown, matching this schema:
  {json.dumps(TRIAGE_RESPONSE_SCHEMA)}
- serviceId MUST be one of the catalog ids above.
- confidence is a number between 0 and 1. Use a low value when the issue fits none of the services well.
- reasoning is one or two plain sentences addressed to the client. Do not give legal advice."""


def parse_triage_response(content: str) -> dict[str, Any]:
    """
    Parse the model's message content into {service_id, confidence, reasoning}.

    Accepts bare JSON or JSON inside a fenced code block.

    Raises:
        ValueError: If no JSON object is found or serviceId is not a catalog id.
    """
    text = (content or "").strip()
    if not text:
        raise ValueError("Empty triage response")
    m = _FENCED_JSON.search(text)
    if m:
        text = m.group(1).strip()
    elif not text.startswith("{"):
        start, end = text.find("{"), text.rfind("}")
        if start < 0 or end <= start:
            raise ValueError("No JSON object in triage response")
        text = text[start : end + 1]
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Triage response is not a JSON object")

    service_id = str(data.get("serviceId") or data.get("service_id") or "").strip()
    if service_id not in service_ids():
        raise ValueError(f"Unknown serviceId in triage response: {service_id!r}")
    try:
        confidence = float(data.get("confidence", 0))
    except (TypeError, ValueError):
        confidence = 0.0
    return {
        "service_id": service_id,
        "confidence": min(1.0, max(0.0, confidence)),
        "reasoning": str(data.get("reasoning") or "").strip(),
    }


class TriageClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
    ) -> None:
        self._base_url = base_url or llm_base_url()
        self.api_key = api_key or llm_api_key()
        self.model = model or llm_model()
        self.max_tokens = llm_max_tokens()
        self.timeout = llm_timeout_seconds()
        self.max_retries = llm_max_retries()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _chat_request(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": 0,
            "response_format": {"type": "json_object"},
        }
        last_err: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                r = requests.post(
                    self._base_url,
                    headers=self._headers(),
                    json=payload,
                    timeout=self.timeout,
                )
                r.raise_for_status()
                return r.json()
            except requests.RequestException as e:
                last_err = e
                status = getattr(getattr(e, "response", None), "status_code", None)
                logger.warning("Triage API attempt %d failed (status=%s): %s", attempt + 1, status, e)
                # Client errors other than rate limits will not succeed on retry.
                if status is not None and 400 <= status < 500 and status != 429:
                    break
                if attempt < self.max_retries:
                    time.sleep(2 ** attempt)
        raise TriageUnavailableError(f"Triage API failed: {last_err}", last_err) from last_err

    def classify(self, description: str) -> dict[str, Any]:
        """
        Classify a problem description.

        Returns:
            Dict with service_id, confidence (0-1) and reasoning.

        Raises:
            TriageUnavailableError: On transport errors or an unusable answer.
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": (description or "").strip()[:4000]},
        ]
        out = self._chat_request(messages)
        choices = out.get("choices") or []
        if not choices:
            raise TriageUnavailableError("No choices in triage response")
        content = (choices[0].get("message") or {}).get("content") or ""
        try:
            result = parse_triage_response(content)
        except (ValueError, json.JSONDecodeError) as e:
            raise TriageUnavailableError(f"Unusable triage answer: {e}", e) from e
        logger.info("Triage suggested %s (confidence %.2f)", result["service_id"], result["confidence"])
        return result
