"""Display helpers shared by the wizard views and the dashboards."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current time as ISO-8601 UTC with a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def format_currency(amount: float) -> str:
    """250 -> '$250', 262.5 -> '$262.50'."""
    amount = float(amount or 0)
    if amount.is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def format_timestamp(iso: str) -> str:
    """'2024-10-24T15:02:11Z' -> 'Oct 24, 2024 15:02 UTC'. Unparseable input is returned unchanged."""
    if not iso:
        return ""
    try:
        dt = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    except ValueError:
        return iso
    return dt.strftime("%b %d, %Y %H:%M UTC")


def humanize_id(value: str) -> str:
    """'business_formation' -> 'Business Formation', 'conflict_flagged' -> 'Conflict Flagged'."""
    return (value or "").replace("_", " ").title()


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
