"""Normalization utilities shared by the rate feed parser and the API."""
from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Optional

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(raw: Optional[str]) -> Optional[str]:
    """Return ``raw`` stripped if it is a real ``YYYY-MM-DD`` calendar date."""

    if not raw:
        return None
    cleaned = str(raw).strip()
    if not ISO_DATE_PATTERN.match(cleaned):
        return None
    try:
        datetime.strptime(cleaned, "%Y-%m-%d")
    except ValueError:
        return None
    return cleaned


def parse_rate(raw: Optional[str]) -> Optional[float]:
    """Parse a feed rate attribute; only finite positive numbers are valid."""

    if raw in (None, ""):
        return None
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def round_cents(value: float) -> float:
    """Round to two decimals, ties away from zero.

    Ties are decided on the fraction left after truncation. Non-finite
    values pass through.
    """

    scaled = value * 100
    if not math.isfinite(scaled):
        return scaled / 100
    whole = math.trunc(scaled)
    if abs(scaled - whole) >= 0.5:
        whole += int(math.copysign(1, scaled))
    return whole / 100
