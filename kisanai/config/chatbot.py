"""
kisanai.config.chatbot – tunables of the chat decision pipeline.

Env vars: CHATBOT_PENDING_TTL_SECONDS, CHATBOT_LOT_LIST_LIMIT, CHATBOT_ALERT_LIST_LIMIT,
CHATBOT_DEFAULT_CAPACITY, CHATBOT_NEAR_FULL_PERCENT.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

_ENV_KEYS = {
    "pending_ttl_seconds": "CHATBOT_PENDING_TTL_SECONDS",
    "lot_list_limit": "CHATBOT_LOT_LIST_LIMIT",
    "alert_list_limit": "CHATBOT_ALERT_LIST_LIMIT",
    "default_capacity_quintals": "CHATBOT_DEFAULT_CAPACITY",
    "near_full_percent": "CHATBOT_NEAR_FULL_PERCENT",
}


@dataclass(frozen=True)
class ChatbotConfig:
    """Limits and defaults used by the consent orchestrator and context builder."""

    pending_ttl_seconds: float = 300.0
    """A pending action older than this is treated as absent (5 minutes)."""

    lot_list_limit: int = 20
    alert_list_limit: int = 15
    default_capacity_quintals: float = 500.0
    """Capacity of a warehouse created from chat when the message names none."""

    near_full_percent: int = 90
    """Warehouses used above this percentage are flagged in the conditions view."""

    def __post_init__(self) -> None:
        if self.pending_ttl_seconds <= 0:
            raise ValueError("pending_ttl_seconds must be positive")
        for name in ("lot_list_limit", "alert_list_limit"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.default_capacity_quintals <= 0:
            raise ValueError("default_capacity_quintals must be positive")
        if not 0 < self.near_full_percent <= 100:
            raise ValueError("near_full_percent must be in (0, 100]")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "ChatbotConfig":
        """Load from a dict. Missing or unparsable keys use defaults."""
        if not data:
            return cls()
        defaults = cls()
        kwargs: Dict[str, Any] = {}
        for key in _ENV_KEYS:
            raw = data.get(key)
            if raw is None or raw == "":
                continue
            caster = type(getattr(defaults, key))
            try:
                kwargs[key] = caster(raw)
            except (TypeError, ValueError):
                continue
        return cls(**kwargs)

    @classmethod
    def from_env(cls) -> "ChatbotConfig":
        return cls.from_dict({key: os.environ.get(var) for key, var in _ENV_KEYS.items()})


def load_chatbot_config() -> ChatbotConfig:
    return ChatbotConfig.from_env()
