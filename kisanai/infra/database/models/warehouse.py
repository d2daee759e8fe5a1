"""Warehouse ORM model."""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kisanai.infra.database.models.base import Base, TimestampMixin, _uuid_pk

WAREHOUSE_TYPES = ("dry", "cold_storage", "ventilated")


class Warehouse(Base, TimestampMixin):
    """A storage facility owned by one user."""

    __tablename__ = "warehouses"
    __table_args__ = (
        Index("ix_warehouses_owner_id", "owner_id"),
        CheckConstraint("capacity_quintals >= 1", name="ck_warehouses_capacity_positive"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    city: Mapped[str] = mapped_column(String(128), nullable=False, default="Unknown")
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    type: Mapped[str] = mapped_column(String(32), nullable=False, default="dry")
    """dry | cold_storage | ventilated"""

    capacity_quintals: Mapped[float] = mapped_column(Float, nullable=False)
    used_capacity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Warehouse id={self.id} name={self.name!r} type={self.type}>"
