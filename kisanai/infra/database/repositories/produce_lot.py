"""ProduceLot repository."""
from __future__ import annotations

from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select

from kisanai.infra.database.models.base import utcnow
from kisanai.infra.database.models.produce_lot import ProduceLot, format_lot_code
from kisanai.infra.database.repositories.base import BaseRepository


class ProduceLotRepository(BaseRepository[ProduceLot]):
    model = ProduceLot

    def _scoped(
        self,
        warehouse_ids: Sequence[UUID],
        crop_name: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
    ):
        stmt = select(ProduceLot).where(ProduceLot.warehouse_id.in_(list(warehouse_ids)))
        if crop_name:
            stmt = stmt.where(ProduceLot.crop_name.ilike(f"%{crop_name}%"))
        if statuses:
            stmt = stmt.where(ProduceLot.status.in_(list(statuses)))
        return stmt

    async def list_for_warehouses(
        self,
        warehouse_ids: Sequence[UUID],
        *,
        crop_name: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[ProduceLot]:
        """Lots in the given warehouses, most recent first. Crop filter is a case-insensitive substring."""
        if not warehouse_ids:
            return []
        stmt = self._scoped(warehouse_ids, crop_name, statuses).order_by(
            ProduceLot.created_at.desc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.unique().scalars().all())

    async def first_for_warehouses(
        self,
        warehouse_ids: Sequence[UUID],
        *,
        crop_name: Optional[str] = None,
    ) -> Optional[ProduceLot]:
        """Oldest matching lot, or None."""
        if not warehouse_ids:
            return None
        stmt = (
            self._scoped(warehouse_ids, crop_name)
            .order_by(ProduceLot.created_at.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.unique().scalars().first()

    async def lot_code_exists(self, lot_code: str) -> bool:
        stmt = select(ProduceLot.id).where(ProduceLot.lot_code == lot_code).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar() is not None

    async def next_lot_code(self, year: Optional[int] = None) -> str:
        """LOT-<year>-<count+1>, skipping forward past codes freed and reused by deletes."""
        year = year or utcnow().year
        sequence = await self.count() + 1
        code = format_lot_code(year, sequence)
        while await self.lot_code_exists(code):
            sequence += 1
            code = format_lot_code(year, sequence)
        return code

    async def create(self, data: dict[str, Any]) -> ProduceLot:
        if not data.get("lot_code"):
            data = {**data, "lot_code": await self.next_lot_code()}
        return await super().create(data)

