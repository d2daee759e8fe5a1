"""
Entity extraction from free-text chat messages.

Every function here is total: absence is returned as None (or the "Unknown"
city sentinel), never raised. Turning absence into a user-facing message is
the consent orchestrator's job.
"""
from __future__ import annotations

import re
from typing import Optional, Pattern, Sequence, Tuple

CROP_VOCABULARY: Tuple[str, ...] = (
    "wheat", "rice", "onion", "potato", "tomato", "maize", "corn", "sugarcane",
    "cotton", "soybean", "groundnut", "bajra", "jowar", "tur", "moong", "urad",
    "chana", "chilli", "garlic", "ginger", "banana", "mango", "grapes",
    "pomegranate", "orange",
)

# Word start only, so plurals ("onions") match but "future" is not "tur".
_CROP_PATTERNS: Sequence[Tuple[str, Pattern[str]]] = tuple(
    (crop, re.compile(r"\b" + crop)) for crop in CROP_VOCABULARY
)

UNKNOWN_CITY = "Unknown"
CONDITION_PREFIX = "condition:"

_NUMBER = r"(\d+(?:\.\d+)?)"

# (pattern, multiplier to quintals); tried in order, first hit decides the unit.
_QUANTITY_PATTERNS: Sequence[Tuple[Pattern[str], Optional[float]]] = (
    (re.compile(_NUMBER + r"\s*(?:quintals?|qtl)", re.IGNORECASE), None),
    (re.compile(_NUMBER + r"\s*(?:kg|kilograms?)", re.IGNORECASE), 0.01),
    (re.compile(_NUMBER + r"\s*(?:tons?|tonnes?)", re.IGNORECASE), 10.0),
    (re.compile(_NUMBER), None),
)

# Order matters: "partially dispatched" must not fall through to "dispatched".
_STATUS_KEYWORDS: Sequence[Tuple[Pattern[str], str]] = (
    (re.compile(r"sold"), "sold"),
    (re.compile(r"partial"), "partially_dispatched"),
    (re.compile(r"dispatch"), "dispatched"),
    (re.compile(r"harvest"), "sold"),
    (re.compile(r"spoil"), CONDITION_PREFIX + "spoiled"),
    (re.compile(r"at.?risk"), CONDITION_PREFIX + "at_risk"),
    (re.compile(r"watch"), CONDITION_PREFIX + "watch"),
    (re.compile(r"\b(?:good|ok|okay|fine|recover)"), CONDITION_PREFIX + "good"),
)

_QUOTED = re.compile(r"[\"']([^\"']+)[\"']")
_NAMED = re.compile(
    r"\b(?:called|named|is)\s+([A-Za-z][A-Za-z0-9\s]+?)(?:\s+in\b|\s+at\b|\s+with\b|,|$)",
    re.IGNORECASE,
)
_CITY = re.compile(
    r"\b(?:in|at)\s+([A-Za-z][A-Za-z\s]+?)(?:\s+with\b|,|\.|$)",
    re.IGNORECASE,
)


def extract_crop_name(message: str) -> Optional[str]:
    """First vocabulary crop starting a word in *message*, capitalized ("Onion")."""
    lower = message.lower()
    for crop, pattern in _CROP_PATTERNS:
        if pattern.search(lower):
            return crop.capitalize()
    return None


def extract_quantity(message: str) -> Optional[float]:
    """Quantity in quintals. "5000 kg" -> 50.0, "2 tons" -> 20.0, "75" -> 75.0."""
    for pattern, factor in _QUANTITY_PATTERNS:
        match = pattern.search(message)
        if match is None:
            continue
        value = float(match.group(1))
        if factor is None:
            return value
        return round(value * factor, 2)
    return None


def extract_new_status(message: str) -> Optional[str]:
    """Target lot status, or ``condition:<value>`` for a condition change."""
    lower = message.lower()
    for pattern, value in _STATUS_KEYWORDS:
        if pattern.search(lower):
            return value
    return None


def parse_status_target(raw_status: str) -> Tuple[str, str]:
    """Split a raw status into (lot field, value): ("current_condition", "spoiled") or ("status", "sold")."""
    if raw_status.startswith(CONDITION_PREFIX):
        return "current_condition", raw_status[len(CONDITION_PREFIX):]
    return "status", raw_status


def extract_warehouse_name(message: str) -> Optional[str]:
    quoted = _QUOTED.search(message)
    if quoted:
        return quoted.group(1).strip() or None
    named = _NAMED.search(message)
    if named:
        return named.group(1).strip() or None
    return None


def extract_city(message: str) -> str:
    match = _CITY.search(message)
    if match:
        return match.group(1).strip()
    return UNKNOWN_CITY


def extract_warehouse_type(message: str) -> str:
    lower = message.lower()
    if "cold" in lower:
        return "cold_storage"
    if "ventilated" in lower:
        return "ventilated"
    return "dry"
