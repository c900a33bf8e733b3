"""
Flat-fee pricing: base price + complexity add-on, plus a 50% rush fee.

Complexity rules:
- contract_review: $10 per page beyond 10.
- business_formation: $50 per partner/member beyond the first.
- demand_letter: none.
"""

from __future__ import annotations

from typing import Any

from soloscale.domains.catalog import get_service

RUSH_MULTIPLIER = 1.5

_INCLUDED_PAGES = 10
_PER_EXTRA_PAGE = 10
_INCLUDED_PARTNERS = 1
_PER_EXTRA_PARTNER = 50


def _as_int(value: Any) -> int:
    """Form values arrive as int, str or None; anything unparseable counts as 0."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def complexity_adjustment(service_id: str | None, details: dict[str, Any] | None) -> float:
    """Return the complexity add-on for the given service and detail answers."""
    details = details or {}
    if service_id == "contract_review":
        pages = _as_int(details.get("page_count"))
        if pages > _INCLUDED_PAGES:
            return float((pages - _INCLUDED_PAGES) * _PER_EXTRA_PAGE)
    if service_id == "business_formation":
        partners = _as_int(details.get("partner_count"))
        if partners > _INCLUDED_PARTNERS:
            return float((partners - _INCLUDED_PARTNERS) * _PER_EXTRA_PARTNER)
    return 0.0


def quote(service_id: str | None, details: dict[str, Any] | None = None, urgency: str = "standard") -> dict[str, Any]:
    """
    Price an intake.

    Args:
        service_id: Catalog id. Unknown or None prices at 0.
        details: Detail answers (page_count, partner_count, ...).
        urgency: "standard" or "rush".

    Returns:
        Dict with base, complexity, subtotal, rush and total. total is
        (base + complexity), times 1.5 when urgency is rush.
    """
    service = get_service(service_id)
    base = float(service["base_price"]) if service else 0.0
    complexity = complexity_adjustment(service_id, details) if service else 0.0
    subtotal = base + complexity
    is_rush = urgency == "rush"
    total = subtotal * RUSH_MULTIPLIER if is_rush else subtotal
    return {
        "base": base,
        "complexity": complexity,
        "subtotal": subtotal,
        "rush": total - subtotal,
        "total": total,
        "urgency": "rush" if is_rush else "standard",
    }
