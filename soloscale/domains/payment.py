"""
Mock payment authorization.

No network call is made. Card details are checked locally (Luhn, expiry,
CVC) and only the last four digits are kept.
"""

from __future__ import annotations

import re
import uuid
from datetime import date
from typing import Any

from soloscale.utils.formatting import utc_now_iso

_EXPIRY_RE = re.compile(r"^\s*(\d{1,2})\s*/\s*(\d{2}|\d{4})\s*$")


class PaymentDeclinedError(ValueError):
    """Raised when the mock processor rejects the card or amount."""


def luhn_valid(number: str) -> bool:
    digits = [int(c) for c in number if c.isdigit()]
    if not digits:
        return False
    total = 0
    for i, d in enumerate(reversed(digits)):
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return total % 10 == 0


def _expiry_ok(expiry: str, today: date) -> bool:
    m = _EXPIRY_RE.match(expiry or "")
    if not m:
        return False
    month = int(m.group(1))
    year = int(m.group(2))
    if year < 100:
        year += 2000
    if not 1 <= month <= 12:
        return False
    return (year, month) >= (today.year, today.month)


def authorize_payment(
    card_number: str,
    expiry: str,
    cvc: str,
    amount: float,
    today: date | None = None,
) -> dict[str, Any]:
    """
    Authorize a charge against the mock processor.

    Returns:
        Dict with auth_id, last4, amount and authorized_at.

    Raises:
        PaymentDeclinedError: On an invalid card, expiry, CVC or amount.
    """
    today = today or date.today()
    digits = re.sub(r"[\s-]", "", card_number or "")
    if not digits.isdigit() or not 13 <= len(digits) <= 19 or not luhn_valid(digits):
        raise PaymentDeclinedError("Card number is invalid.")
    if not _expiry_ok(expiry, today):
        raise PaymentDeclinedError("Card is expired or the expiry is not MM/YY.")
    if not re.fullmatch(r"\d{3,4}", (cvc or "").strip()):
        raise PaymentDeclinedError("Security code must be 3 or 4 digits.")
    if amount is None or amount <= 0:
        raise PaymentDeclinedError("Nothing to charge.")
    return {
        "auth_id": f"AUTH-{uuid.uuid4().hex[:10].upper()}",
        "last4": digits[-4:],
        "amount": float(amount),
        "authorized_at": utc_now_iso(),
    }
