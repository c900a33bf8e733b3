"""
Service catalog and eligibility rules.

The catalog is the single source of service ids: the triage prompt, the
service picker, the details form and pricing all read from here.
"""

from typing import Any, Optional

LICENSED_JURISDICTIONS: dict[str, str] = {
    "TX": "Texas",
    "FL": "Florida",
    "CO": "Colorado",
}
OTHER_JURISDICTION = "OTHER"
JURISDICTIONS: list[str] = [*LICENSED_JURISDICTIONS, OTHER_JURISDICTION]

URGENCY_LEVELS: dict[str, dict[str, str]] = {
    "standard": {"label": "Standard Delivery", "turnaround": "3-5 business days"},
    "rush": {"label": "Priority Rush", "turnaround": "Guaranteed 24h turnaround"},
}

SERVICES: list[dict[str, Any]] = [
    {
        "id": "contract_review",
        "title": "Contract Review",
        "description": "Professional review of legal agreements with redlines.",
        "base_price": 250,
        "icon": "📄",
    },
    {
        "id": "business_formation",
        "title": "Business Formation",
        "description": "LLC or Corp registration including operating agreements.",
        "base_price": 400,
        "icon": "💼",
    },
    {
        "id": "demand_letter",
        "title": "Demand Letter",
        "description": "Formal demand for payment or performance.",
        "base_price": 200,
        "icon": "⚠️",
    },
]

# Detail form fields per service. `kind` drives the widget; `required` gates Continue.
_DESCRIPTION_FIELD: dict[str, Any] = {
    "key": "description",
    "label": "Brief Description of Goals",
    "kind": "textarea",
    "required": True,
    "placeholder": "What outcome are you looking for?",
}
_OPPOSING_PARTY_FIELD: dict[str, Any] = {
    "key": "opposing_party",
    "label": "Opposing Party Name",
    "kind": "text",
    "required": False,
    "placeholder": "Who is this regarding?",
    "help": "We use this to identify all parties involved and ensure there are no conflicts before proceeding.",
}

SERVICE_FIELDS: dict[str, list[dict[str, Any]]] = {
    "contract_review": [
        {"key": "files", "label": "Upload Document", "kind": "upload", "required": False, "help": "PDF or DOCX"},
        {
            "key": "page_count",
            "label": "Page Count",
            "kind": "count",
            "required": False,
            "help": "Pricing adjusts based on length.",
        },
        _OPPOSING_PARTY_FIELD,
        _DESCRIPTION_FIELD,
    ],
    "business_formation": [
        {
            "key": "business_name",
            "label": "Desired Business Name",
            "kind": "text",
            "required": False,
            "placeholder": "e.g. Acme Innovations LLC",
        },
        {"key": "partner_count", "label": "Number of Partners/Members", "kind": "count", "required": False},
        _DESCRIPTION_FIELD,
    ],
    "demand_letter": [
        _OPPOSING_PARTY_FIELD,
        _DESCRIPTION_FIELD,
    ],
}

# JSON shape requested from the triage model.
TRIAGE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "serviceId": {"type": "string", "enum": [s["id"] for s in SERVICES]},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        "reasoning": {"type": "string"},
    },
    "required": ["serviceId", "confidence", "reasoning"],
}


def service_ids() -> list[str]:
    return [s["id"] for s in SERVICES]


def get_service(service_id: Optional[str]) -> Optional[dict[str, Any]]:
    """Return the catalog entry for service_id, or None."""
    for service in SERVICES:
        if service["id"] == service_id:
            return service
    return None


def service_fields(service_id: Optional[str]) -> list[dict[str, Any]]:
    """Detail form fields for a service. Unknown ids get the description field only."""
    return [dict(f) for f in SERVICE_FIELDS.get(service_id or "", [_DESCRIPTION_FIELD])]


def is_eligible(jurisdiction: Optional[str]) -> bool:
    """True only for states the firm is licensed in. OTHER is never eligible."""
    return (jurisdiction or "").upper() in LICENSED_JURISDICTIONS


def jurisdiction_label(jurisdiction: str) -> str:
    code = (jurisdiction or "").upper()
    if code in LICENSED_JURISDICTIONS:
        return f"{LICENSED_JURISDICTIONS[code]} ({code})"
    return "Other State"
