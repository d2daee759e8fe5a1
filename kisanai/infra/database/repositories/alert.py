"""Alert repository."""
from __future__ import annotations

from typing import List, Sequence
from uuid import UUID

from sqlalchemy import func, select

from kisanai.infra.database.models.alert import Alert
from kisanai.infra.database.repositories.base import BaseRepository


class AlertRepository(BaseRepository[Alert]):
    model = Alert

    async def list_unresolved(self, warehouse_ids: Sequence[UUID], *, limit: int = 15) -> List[Alert]:
        if not warehouse_ids:
            return []
        stmt = (
            select(Alert)
            .where(Alert.warehouse_id.in_(list(warehouse_ids)), Alert.is_resolved.is_(False))
            .order_by(Alert.triggered_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.unique().scalars().all())

    async def count_unresolved(self, warehouse_ids: Sequence[UUID]) -> int:
        if not warehouse_ids:
            return 0
        stmt = (
            select(func.count())
            .select_from(Alert)
            .where(Alert.warehouse_id.in_(list(warehouse_ids)), Alert.is_resolved.is_(False))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
