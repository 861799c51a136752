"""Tracking code parsing shared by search and bulk status update."""

import re
from typing import List

# Upper bound on codes per request; keeps IN clauses small
MAX_TRACKING_CODES = 50

_DIGITS_RE = re.compile(r"^\d+$")


def parse_tracking_codes(text: str | None) -> List[str]:
    """Split pasted text into codes: one per line, trimmed, empties dropped, capped at 50."""
    if not text or not text.strip():
        return []

    codes = [line.strip() for line in text.split("\n")]
    codes = [code for code in codes if code]
    return codes[:MAX_TRACKING_CODES]


def is_numeric_code(code: str) -> bool:
    """Ticket ids are all-digit; tracking codes usually are not."""
    return bool(_DIGITS_RE.match(code))
