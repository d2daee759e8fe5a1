"""ProduceLot ORM model."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kisanai.infra.database.models.base import Base, TimestampMixin, _uuid_pk, utcnow
from kisanai.infra.database.models.warehouse import Warehouse

LOT_STATUSES = ("stored", "partially_dispatched", "dispatched", "sold")
LOT_CONDITIONS = ("good", "watch", "at_risk", "spoiled")
ACTIVE_LOT_STATUSES = ("stored", "partially_dispatched")


def format_lot_code(year: int, sequence: int) -> str:
    """LOT-<year>-<NNNN>, sequence zero-padded to four digits."""
    return f"LOT-{year}-{sequence:04d}"


class ProduceLot(Base, TimestampMixin):
    """A quantity of one crop stored in one warehouse."""

    __tablename__ = "produce_lots"
    __table_args__ = (
        Index("ix_produce_lots_owner_id", "owner_id"),
        Index("ix_produce_lots_warehouse_id", "warehouse_id"),
        Index("ix_produce_lots_status", "status"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    lot_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    """Human-readable reference shown in chat, e.g. LOT-2026-0007."""

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    warehouse_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("warehouses.id", ondelete="CASCADE"),
        nullable=False,
    )

    crop_name: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity_quintals: Mapped[float] = mapped_column(Float, nullable=False)

    entry_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    expected_shelf_life_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recommended_sell_by_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    source: Mapped[str] = mapped_column(String(32), nullable=False, default="chatbot")

    current_condition: Mapped[str] = mapped_column(String(16), nullable=False, default="good")
    """good | watch | at_risk | spoiled"""

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="stored")
    """stored | partially_dispatched | dispatched | sold"""

    warehouse: Mapped[Warehouse] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<ProduceLot {self.lot_code} {self.crop_name} {self.quantity_quintals}qtl>"
