"""StorageEvent ORM model: append-only audit trail of lot changes."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kisanai.infra.database.models.base import Base, JSONType, _uuid_pk, utcnow

EVENT_TYPES = (
    "lot_created",
    "inspection_done",
    "alert_fired",
    "condition_updated",
    "partially_dispatched",
    "dispatched",
    "sold",
    "lot_deleted",
)


class StorageEvent(Base):
    __tablename__ = "storage_events"
    __table_args__ = (
        Index("ix_storage_events_lot_id", "lot_id"),
        Index("ix_storage_events_owner_performed", "owner_id", "performed_at"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    # Plain column, not a foreign key: the trail outlives the lot.
    lot_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)

    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", JSONType, nullable=True,
    )
    """Free-form payload (previous/new value, quantity, lot code)."""

    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
