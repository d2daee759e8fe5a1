"""Alert ORM model."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kisanai.infra.database.models.base import Base, TimestampMixin, _uuid_pk, utcnow
from kisanai.infra.database.models.produce_lot import ProduceLot
from kisanai.infra.database.models.warehouse import Warehouse

ALERT_TYPES = ("spoilage_risk", "humidity_breach", "temp_breach", "overdue", "custom")
ALERT_SEVERITIES = ("low", "medium", "high", "critical")


class Alert(Base, TimestampMixin):
    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_warehouse_resolved", "warehouse_id", "is_resolved"),
        Index("ix_alerts_triggered_at", "triggered_at"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    lot_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("produce_lots.id", ondelete="SET NULL"),
        nullable=True,
    )
    warehouse_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("warehouses.id", ondelete="CASCADE"),
        nullable=False,
    )

    alert_type: Mapped[str] = mapped_column(String(32), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    message: Mapped[str] = mapped_column(Text, nullable=False)
    recommendation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    triggered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    lot: Mapped[Optional[ProduceLot]] = relationship(lazy="joined")
    warehouse: Mapped[Warehouse] = relationship(lazy="joined")
