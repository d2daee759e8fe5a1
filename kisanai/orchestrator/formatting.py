"""Small display helpers shared by the chat handlers."""
from __future__ import annotations

from typing import Optional, Union

CONSENT_SUFFIX = "\n\nReply **yes** to confirm or **no** to cancel."


def format_quantity(value: Optional[Union[int, float]]) -> str:
    """200.0 -> "200", 50.25 -> "50.25"."""
    if value is None:
        return "0"
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}".rstrip("0").rstrip(".")


def humanize(value: str) -> str:
    """cold_storage -> "cold storage"."""
    return value.replace("_", " ")
