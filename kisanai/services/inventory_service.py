"""InventoryService: warehouse, lot, alert and storage-event operations used by the chatbot."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kisanai.core.exceptions import ConflictError
from kisanai.infra.database.models import Alert, ProduceLot, StorageEvent, Warehouse
from kisanai.infra.database.repositories import (
    AlertRepository,
    ProduceLotRepository,
    StorageEventRepository,
    WarehouseRepository,
)

logger = logging.getLogger(__name__)


class InventoryService:
    """One instance per DB session. Writes are flushed; the caller's scope commits."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._warehouses = WarehouseRepository(session)
        self._lots = ProduceLotRepository(session)
        self._alerts = AlertRepository(session)
        self._events = StorageEventRepository(session)

    # ── Warehouses ───────────────────────────────────────────────────────

    async def find_warehouses(self, owner_id: str) -> List[Warehouse]:
        return await self._warehouses.list_by_owner(owner_id)

    async def find_warehouse(self, id: UUID, owner_id: str) -> Optional[Warehouse]:
        return await self._warehouses.get_for_owner(id, owner_id)

    async def create_warehouse(self, fields: Dict[str, Any]) -> Warehouse:
        warehouse = await self._warehouses.create(fields)
        logger.info(
            "InventoryService: created warehouse %s (%s) for owner %s",
            warehouse.id, warehouse.name, warehouse.owner_id,
        )
        return warehouse

    async def increment_used_capacity(self, id: UUID, delta: float) -> None:
        if not await self._warehouses.increment_used_capacity(id, delta):
            logger.warning("InventoryService: capacity update matched no warehouse %s", id)

    # ── Lots ─────────────────────────────────────────────────────────────

    async def find_lots(
        self,
        warehouse_ids: Sequence[UUID],
        crop_name: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[ProduceLot]:
        return await self._lots.list_for_warehouses(
            warehouse_ids, crop_name=crop_name, statuses=statuses, limit=limit,
        )

    async def find_first_lot(
        self,
        warehouse_ids: Sequence[UUID],
        crop_name: Optional[str] = None,
    ) -> Optional[ProduceLot]:
        return await self._lots.first_for_warehouses(warehouse_ids, crop_name=crop_name)

    async def create_lot(self, fields: Dict[str, Any]) -> ProduceLot:
        try:
            lot = await self._lots.create(fields)
        except IntegrityError as exc:
            if _is_lot_code_violation(exc):
                raise ConflictError(
                    "That lot code is already taken. Please try again.",
                    details={"lot_code": fields.get("lot_code")},
                    cause=exc,
                ) from exc
            raise ConflictError(
                "The lot could not be saved. Please check the warehouse and try again.",
                details={"warehouse_id": str(fields.get("warehouse_id"))},
                cause=exc,
            ) from exc
        logger.info(
            "InventoryService: created lot %s (%s, %s qtl) in warehouse %s",
            lot.lot_code, lot.crop_name, lot.quantity_quintals, lot.warehouse_id,
        )
        return lot

    async def update_lot_fields(self, id: UUID, fields: Dict[str, Any]) -> Optional[ProduceLot]:
        return await self._lots.update(id, fields)

    async def delete_lot(self, id: UUID) -> bool:
        return await self._lots.delete(id)

    # ── Alerts ───────────────────────────────────────────────────────────

    async def find_unresolved_alerts(
        self, warehouse_ids: Sequence[UUID], limit: int = 15
    ) -> List[Alert]:
        return await self._alerts.list_unresolved(warehouse_ids, limit=limit)

    async def count_unresolved_alerts(self, warehouse_ids: Sequence[UUID]) -> int:
        return await self._alerts.count_unresolved(warehouse_ids)

    async def create_alert(self, fields: Dict[str, Any]) -> Alert:
        return await self._alerts.create(fields)

    # ── Storage events ───────────────────────────────────────────────────

    async def append_event(self, fields: Dict[str, Any]) -> StorageEvent:
        return await self._events.append(fields)


def _is_lot_code_violation(exc: IntegrityError) -> bool:
    # asyncpg: produce_lots_lot_code_key; sqlite: UNIQUE constraint failed: produce_lots.lot_code
    text = str(exc.orig).lower()
    return "lot_code" in text and ("unique" in text or "duplicate" in text)


@asynccontextmanager
async def inventory_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[InventoryService]:
    """Unit of work: yield an InventoryService, commit on success, roll back on error."""
    async with session_factory() as session:
        try:
            yield InventoryService(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
