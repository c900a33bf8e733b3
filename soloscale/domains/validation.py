"""
Step validation: check that each wizard step has what it needs before Continue.

Each validator returns {"passed": bool, "issues": [str]} so the UI can disable
the button and list what is missing.
"""

from __future__ import annotations

import re
from typing import Any

from soloscale.domains.catalog import service_fields

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _result(issues: list[str]) -> dict[str, Any]:
    return {"passed": not issues, "issues": issues}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def validate_details(service_id: str | None, details: dict[str, Any] | None) -> dict[str, Any]:
    """
    Check detail answers for the selected service.

    Required fields must be non-empty; counts, when given, must be whole
    numbers of at least 1.
    """
    details = details or {}
    issues: list[str] = []
    if not service_id:
        issues.append("Select a service first")
        return _result(issues)
    for field in service_fields(service_id):
        value = details.get(field["key"])
        if field.get("required") and _is_blank(value):
            issues.append(f"{field['label']} is required")
            continue
        if field["kind"] == "count" and not _is_blank(value):
            try:
                count = int(value)
            except (TypeError, ValueError):
                issues.append(f"{field['label']} must be a whole number")
                continue
            if count < 1:
                issues.append(f"{field['label']} must be at least 1")
    return _result(issues)


def validate_contact(contact: dict[str, Any] | None) -> dict[str, Any]:
    """Name and email are required; email must look like local@domain.tld."""
    contact = contact or {}
    issues: list[str] = []
    name = (contact.get("name") or "").strip()
    email = (contact.get("email") or "").strip()
    if not name:
        issues.append("Full name is required")
    if not email:
        issues.append("Email address is required")
    elif not _EMAIL_RE.match(email):
        issues.append("Email address looks invalid")
    return _result(issues)


def validate_triage_description(description: str | None, min_chars: int = 10) -> dict[str, Any]:
    text = (description or "").strip()
    if not text:
        return _result(["Describe your issue to get a recommendation"])
    if len(text) < min_chars:
        return _result([f"Add a little more detail (at least {min_chars} characters)"])
    return _result([])
