"""Warehouse repository."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update

from kisanai.infra.database.models.warehouse import Warehouse
from kisanai.infra.database.repositories.base import BaseRepository


class WarehouseRepository(BaseRepository[Warehouse]):
    model = Warehouse

    async def list_by_owner(self, owner_id: str) -> List[Warehouse]:
        """All warehouses of *owner_id*, newest first."""
        stmt = (
            select(Warehouse)
            .where(Warehouse.owner_id == owner_id)
            .order_by(Warehouse.created_at.desc(), Warehouse.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_owner(self, id: UUID, owner_id: str) -> Optional[Warehouse]:
        stmt = select(Warehouse).where(Warehouse.id == id, Warehouse.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_used_capacity(self, id: UUID, delta: float) -> bool:
        """Atomically add *delta* (negative to free space). Returns False when no row matched."""
        stmt = (
            update(Warehouse)
            .where(Warehouse.id == id)
            .values(used_capacity=Warehouse.used_capacity + delta)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
