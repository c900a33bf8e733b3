"""
Engagement letter text and typed e-signature.
"""

from __future__ import annotations

from typing import Any

from soloscale.domains.catalog import URGENCY_LEVELS, get_service, jurisdiction_label
from soloscale.utils.formatting import format_currency, utc_now_iso

DISCLAIMER_TEXT = (
    "I understand that no attorney-client relationship is formed until this engagement "
    "letter is signed and accepted by the firm, and that the firm will run a conflict "
    "check before any work begins."
)


class SignatureMismatchError(ValueError):
    """Raised when the typed signature does not match the contact name."""


def signature_matches(typed: str | None, contact_name: str | None) -> bool:
    """Case-insensitive match of the trimmed strings. Empty never matches."""
    a = (typed or "").strip().lower()
    b = (contact_name or "").strip().lower()
    return bool(a) and a == b


def render_engagement_letter(
    firm: str,
    contact_name: str,
    service_id: str,
    jurisdiction: str,
    standard_total: float,
    rush_total: float,
) -> str:
    """Plain-text engagement letter shown on the sign step. Turnaround is chosen later, at checkout."""
    service = get_service(service_id) or {"title": service_id, "description": ""}
    standard = URGENCY_LEVELS["standard"]
    rush = URGENCY_LEVELS["rush"]
    return (
        f"ENGAGEMENT LETTER\n\n"
        f"Client: {contact_name}\n"
        f"Matter: {service['title']} ({jurisdiction_label(jurisdiction)})\n\n"
        f"{firm} agrees to provide the following limited-scope service: "
        f"{service['title']}. {service['description']}\n\n"
        f"Fee: {format_currency(standard_total)} flat for {standard['label']} ({standard['turnaround']}), "
        f"or {format_currency(rush_total)} for {rush['label']} ({rush['turnaround'].lower()}), "
        f"as selected at checkout. "
        f"Payment is authorized at checkout and held until the conflict check passes.\n\n"
        f"Scope is limited to the service above. Litigation, court appearances and "
        f"matters outside {jurisdiction_label(jurisdiction)} are excluded.\n\n"
        f"{DISCLAIMER_TEXT}"
    )


def sign_engagement(typed: str, contact_name: str, disclaimer_accepted: bool) -> dict[str, Any]:
    """
    Accept a typed signature.

    Returns:
        Dict with signed_name and signed_at.

    Raises:
        SignatureMismatchError: If the name does not match or the disclaimer is not accepted.
    """
    if not disclaimer_accepted:
        raise SignatureMismatchError("Please acknowledge the disclaimer before signing.")
    if not signature_matches(typed, contact_name):
        raise SignatureMismatchError("Typed signature must match the contact name.")
    return {"signed_name": typed.strip(), "signed_at": utc_now_iso()}
