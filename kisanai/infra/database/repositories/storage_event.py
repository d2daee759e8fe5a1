"""StorageEvent repository (append-only)."""
from __future__ import annotations

from typing import Any, List
from uuid import UUID

from sqlalchemy import select

from kisanai.infra.database.models.storage_event import StorageEvent
from kisanai.infra.database.repositories.base import BaseRepository


class StorageEventRepository(BaseRepository[StorageEvent]):
    model = StorageEvent

    async def append(self, data: dict[str, Any]) -> StorageEvent:
        # Accept "metadata" from callers; the mapped attribute is event_metadata.
        if "metadata" in data:
            data = dict(data)
            data["event_metadata"] = data.pop("metadata")
        return await self.create(data)

    async def list_for_lot(self, lot_id: UUID) -> List[StorageEvent]:
        stmt = (
            select(StorageEvent)
            .where(StorageEvent.lot_id == lot_id)
            .order_by(StorageEvent.performed_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
