"""Mock user profile. The role flag only switches which views are shown."""

from __future__ import annotations

import hmac
from typing import Any

from soloscale.utils.config import staff_passcode

ROLE_CLIENT = "client"
ROLE_STAFF = "staff"


def default_profile() -> dict[str, Any]:
    return {"display_name": "Guest", "role": ROLE_CLIENT}


def sign_in_staff(passcode: str, display_name: str = "Staff Attorney") -> dict[str, Any] | None:
    """Return a staff profile when passcode matches STAFF_PASSCODE, else None."""
    if not passcode:
        return None
    if not hmac.compare_digest(passcode.encode("utf-8"), staff_passcode().encode("utf-8")):
        return None
    return {"display_name": display_name, "role": ROLE_STAFF}


def is_staff(profile: dict[str, Any] | None) -> bool:
    return bool(profile) and profile.get("role") == ROLE_STAFF
