"""Core data structures for the chat orchestrator layer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncContextManager, Callable, Dict, FrozenSet, Optional
from uuid import UUID


class IntentType(str, Enum):
    """Every intent the classifier can return. Declaration order is the tie-break order."""

    VIEW_LOTS = "view_lots"
    VIEW_WAREHOUSES = "view_warehouses"
    VIEW_CONDITIONS = "view_conditions"
    VIEW_ALERTS = "view_alerts"
    VIEW_SUMMARY = "view_summary"
    ADD_LOT = "add_lot"
    ADD_WAREHOUSE = "add_warehouse"
    UPDATE_LOT_STATUS = "update_lot_status"
    DELETE_LOT = "delete_lot"
    CONFIRM = "confirm"
    REJECT = "reject"
    GENERAL = "general"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


MUTATION_INTENTS: FrozenSet[IntentType] = frozenset({
    IntentType.ADD_LOT,
    IntentType.ADD_WAREHOUSE,
    IntentType.UPDATE_LOT_STATUS,
    IntentType.DELETE_LOT,
})

VIEW_INTENTS: FrozenSet[IntentType] = frozenset({
    IntentType.VIEW_LOTS,
    IntentType.VIEW_WAREHOUSES,
    IntentType.VIEW_CONDITIONS,
    IntentType.VIEW_ALERTS,
    IntentType.VIEW_SUMMARY,
})

ScopeFactory = Callable[[], AsyncContextManager[Any]]
"""Zero-arg callable opening a unit of work that yields an InventoryService."""


@dataclass(frozen=True)
class ClassificationResult:
    """Output of the intent classifier."""

    intent: IntentType
    confidence: Confidence
    score: int = 0
    """Number of matched predicates for the winning intent (0 for confirm/reject/general)."""


@dataclass(frozen=True)
class MutationResult:
    """Outcome of create / execute / reject on the consent orchestrator."""

    success: bool
    message: str
    requires_consent: bool = False


@dataclass
class PendingAction:
    """A mutation awaiting an explicit yes/no from its owner.

    Only the fields relevant to ``type`` are filled:
      add_lot            warehouse_id, warehouse_name, crop_name, quantity_quintals
      add_warehouse      name, warehouse_type, capacity, city
      update_lot_status  lot_id, lot_display, lot_ref, warehouse_name, raw_status
      delete_lot         lot_id, lot_display, lot_ref, warehouse_id, warehouse_name, quantity_quintals
    """

    user_id: str
    type: IntentType
    created_at: float
    """Wall-clock seconds (time.time()) at creation."""

    warehouse_id: Optional[UUID] = None
    warehouse_name: Optional[str] = None
    lot_id: Optional[UUID] = None
    lot_display: Optional[str] = None
    lot_ref: Optional[str] = None
    crop_name: Optional[str] = None
    quantity_quintals: Optional[float] = None
    raw_status: Optional[str] = None
    name: Optional[str] = None
    warehouse_type: Optional[str] = None
    capacity: Optional[float] = None
    city: Optional[str] = None

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, ttl_seconds: float, now: float) -> bool:
        return self.age(now) > ttl_seconds


@dataclass(frozen=True)
class ChatReply:
    """Single response shape of the chat pipeline.

    View and general replies carry ``context`` only; mutation, confirm and
    reject replies carry ``direct_reply`` and ``success`` with ``context=None``.
    The HTTP layer renders these as ``directReply`` and ``requiresConsent``.
    """

    intent: IntentType
    confidence: Confidence
    context: Optional[str] = None
    direct_reply: Optional[str] = None
    requires_consent: Optional[bool] = None
    success: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "intent": self.intent.value,
            "confidence": self.confidence.value,
            "context": self.context,
        }
        if self.direct_reply is not None:
            out["direct_reply"] = self.direct_reply
        if self.requires_consent is not None:
            out["requires_consent"] = self.requires_consent
        if self.success is not None:
            out["success"] = self.success
        return out
