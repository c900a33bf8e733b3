"""
Conflict check: screen an opposing party against prior-party names.

Both sides are normalized (lowercase, keep only a-z and 0-9) and a hit is a
substring match of a blacklist entry inside the opposing party, so
"Evil Corp., Inc." matches "evil corp".
"""

from __future__ import annotations

import re
from typing import Iterable

from soloscale.utils.config import conflict_blacklist

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(value: str | None) -> str:
    return _NON_ALNUM.sub("", (value or "").lower())


def find_conflict(name: str | None, blacklist: Iterable[str] | None = None) -> str | None:
    """Return the first blacklist entry matching name, or None."""
    haystack = normalize(name)
    if not haystack:
        return None
    entries = conflict_blacklist() if blacklist is None else blacklist
    for entry in entries:
        key = normalize(entry)
        # An entry that normalizes to "" would match everything.
        if key and key in haystack:
            return entry
    return None


def check_conflict(name: str | None, blacklist: Iterable[str] | None = None) -> bool:
    """True iff normalized name contains a normalized blacklist entry."""
    return find_conflict(name, blacklist) is not None
