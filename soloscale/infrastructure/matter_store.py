"""
Matter store: in-memory stand-in for a database.

Matters live for the lifetime of the process only. The store is shared by all
Streamlit sessions (see app.get_matter_store), so writes take a lock.
"""

from __future__ import annotations

import copy
import secrets
import string
import threading
from typing import Any

from soloscale.domains.conflicts import find_conflict
from soloscale.utils.formatting import utc_now_iso
from soloscale.utils.logger import get_logger, mask_name

logger = get_logger()

MATTER_STATUSES = ("new", "reviewing", "conflict_flagged", "in_progress", "completed")

_ID_ALPHABET = string.ascii_uppercase + string.digits
_ID_LENGTH = 9


class MatterNotFoundError(KeyError):
    """Raised when a matter id is not in the store."""


def format_audit_entry(action: str, details: str = "", timestamp: str | None = None) -> str:
    """'<iso timestamp> ACTION: details'."""
    ts = timestamp or utc_now_iso()
    return f"{ts} {action}: {details}" if details else f"{ts} {action}"


def parse_audit_entry(entry: str) -> dict[str, str]:
    """Inverse of format_audit_entry, for display."""
    ts, _, rest = (entry or "").partition(" ")
    action, _, details = rest.partition(": ")
    return {"timestamp": ts, "action": action, "details": details}


class MatterStore:
    """
    Create, list and read matters. Audit logs are append-only: entries are
    added through append_audit and returned copies cannot alter the store.
    """

    def __init__(self, blacklist: list[str] | None = None) -> None:
        self._matters: list[dict[str, Any]] = []
        self._blacklist = blacklist
        self._lock = threading.Lock()

    def _new_id(self) -> str:
        existing = {m["id"] for m in self._matters}
        while True:
            candidate = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))
            if candidate not in existing:
                return candidate

    def _find(self, matter_id: str) -> dict[str, Any]:
        for matter in self._matters:
            if matter["id"] == matter_id:
                return matter
        raise MatterNotFoundError(matter_id)

    def create_matter(
        self,
        intake: dict[str, Any],
        price_breakdown: dict[str, Any],
        *,
        files: list[dict[str, Any]] | None = None,
        signature: dict[str, Any] | None = None,
        payment: dict[str, Any] | None = None,
        triage: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Record a submitted intake and run the conflict check.

        Returns:
            A copy of the stored matter. Status is conflict_flagged when the
            opposing party matches the blacklist, otherwise new.
        """
        details = intake.get("details") or {}
        opposing = details.get("opposing_party") or ""
        hit = find_conflict(opposing, self._blacklist) if opposing else None

        with self._lock:
            now = utc_now_iso()
            audit = [
                format_audit_entry("MATTER_CREATED", "Intake submitted", now),
                format_audit_entry("DISCLAIMER_ACCEPTED", "User accepted NO A/C relationship", now),
            ]
            if triage:
                audit.append(
                    format_audit_entry(
                        "TRIAGE_SUGGESTED",
                        f"{triage.get('service_id')} ({float(triage.get('confidence') or 0):.0%})",
                        now,
                    )
                )
            if signature:
                audit.append(format_audit_entry("ENGAGEMENT_SIGNED", f"Signed as {signature.get('signed_name')}", now))
            if payment:
                audit.append(
                    format_audit_entry(
                        "PAYMENT_AUTHORIZED",
                        f"{payment.get('auth_id')} card ending {payment.get('last4')}",
                        now,
                    )
                )
            if hit:
                audit.append(format_audit_entry("CONFLICT_DETECTED", f"Potential match for: {opposing}", now))

            matter = {
                "id": self._new_id(),
                "status": "conflict_flagged" if hit else "new",
                "intake": copy.deepcopy(intake),
                "price": float(price_breakdown.get("total") or 0),
                "price_breakdown": dict(price_breakdown),
                "files": copy.deepcopy(files or []),
                "signature": dict(signature) if signature else None,
                "payment": dict(payment) if payment else None,
                "triage": dict(triage) if triage else None,
                "created_at": now,
                "audit_log": audit,
            }
            self._matters.append(matter)

        client = (intake.get("contact") or {}).get("name", "")
        logger.info(
            "Matter %s created: service=%s price=%.2f client=%s",
            matter["id"], intake.get("service_id"), matter["price"], mask_name(client),
        )
        if hit:
            logger.warning("Matter %s flagged for conflict (matched %r)", matter["id"], hit)
        return copy.deepcopy(matter)

    def append_audit(self, matter_id: str, action: str, details: str = "") -> str:
        """Append an audit entry and return it."""
        entry = format_audit_entry(action, details)
        with self._lock:
            self._find(matter_id)["audit_log"].append(entry)
        return entry

    def get_matter(self, matter_id: str) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._find(matter_id))

    def list_matters(self, status: str | None = None) -> list[dict[str, Any]]:
        """All matters in submission order, optionally filtered by status."""
        with self._lock:
            items = [m for m in self._matters if status is None or m["status"] == status]
            return copy.deepcopy(items)

    def matters_for_email(self, email: str) -> list[dict[str, Any]]:
        """Matters whose contact email matches (case-insensitive)."""
        key = (email or "").strip().lower()
        if not key:
            return []
        with self._lock:
            items = [
                m for m in self._matters
                if ((m["intake"].get("contact") or {}).get("email") or "").strip().lower() == key
            ]
            return copy.deepcopy(items)

    def stats(self) -> dict[str, Any]:
        """Dashboard counters: total, per-status counts, rush count and simulated revenue."""
        with self._lock:
            counts = {s: 0 for s in MATTER_STATUSES}
            for m in self._matters:
                counts[m["status"]] = counts.get(m["status"], 0) + 1
            return {
                "total": len(self._matters),
                "by_status": counts,
                "conflicts": counts["conflict_flagged"],
                "new": counts["new"],
                "rush": sum(1 for m in self._matters if m["intake"].get("urgency") == "rush"),
                "revenue": sum(m["price"] for m in self._matters),
            }

    def __len__(self) -> int:
        return len(self._matters)
