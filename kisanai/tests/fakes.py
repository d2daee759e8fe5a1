"""In-memory stand-ins for the inventory unit of work, shared by the chat tests."""
from __future__ import annotations

import copy
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence, Set
from uuid import uuid4

from kisanai.clients.weather.base import BaseWeatherClient, WeatherReport


class FakeInventory:
    """Same method names as InventoryService, backed by lists of SimpleNamespace records.

    ``scope()`` snapshots state on entry and restores it when the body raises,
    so a failed unit of work leaves nothing behind. Method names listed in
    ``fail_on`` raise RuntimeError when called.
    """

    def __init__(self, year: int = 2025) -> None:
        self.year = year
        self.warehouses: List[SimpleNamespace] = []
        self.lots: List[SimpleNamespace] = []
        self.alerts: List[SimpleNamespace] = []
        self.events: List[SimpleNamespace] = []
        self.fail_on: Set[str] = set()
        self.calls: List[str] = []
        self.commits = 0
        self.rollbacks = 0
        self._seq = 0

    # ── seeding helpers ──────────────────────────────────────────────────

    def add_warehouse(self, owner_id: str = "u1", **kwargs: Any) -> SimpleNamespace:
        fields = {
            "id": uuid4(),
            "owner_id": owner_id,
            "name": "Main Godown",
            "city": "Pune",
            "address": None,
            "type": "dry",
            "capacity_quintals": 500.0,
            "used_capacity": 0.0,
            "is_active": True,
        }
        fields.update(kwargs)
        warehouse = SimpleNamespace(**fields)
        self.warehouses.append(warehouse)
        return warehouse

    def add_lot(self, warehouse: SimpleNamespace, **kwargs: Any) -> SimpleNamespace:
        self._seq += 1
        entry = datetime(self.year, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=self._seq)
        fields = {
            "id": uuid4(),
            "lot_code": f"LOT-{self.year}-{self._seq:04d}",
            "owner_id": warehouse.owner_id,
            "warehouse_id": warehouse.id,
            "crop_name": "Onion",
            "quantity_quintals": 100.0,
            "entry_date": entry,
            "expected_shelf_life_days": 120,
            "recommended_sell_by_date": entry + timedelta(days=120),
            "source": "chatbot",
            "current_condition": "good",
            "status": "stored",
            "created_at": entry,
        }
        fields.update(kwargs)
        lot = SimpleNamespace(**fields)
        self.lots.append(lot)
        return lot

    def add_alert(self, warehouse: SimpleNamespace, lot: Optional[SimpleNamespace] = None, **kwargs: Any) -> SimpleNamespace:
        fields = {
            "id": uuid4(),
            "owner_id": warehouse.owner_id,
            "lot_id": lot.id if lot is not None else None,
            "lot": lot,
            "warehouse_id": warehouse.id,
            "alert_type": "humidity_breach",
            "severity": "high",
            "message": "Humidity at 82%",
            "recommendation": "Activate dehumidifier",
            "is_read": False,
            "is_resolved": False,
        }
        fields.update(kwargs)
        alert = SimpleNamespace(**fields)
        self.alerts.append(alert)
        return alert

    def warehouse(self, id: Any) -> Optional[SimpleNamespace]:
        return next((w for w in self.warehouses if w.id == id), None)

    # ── unit of work ─────────────────────────────────────────────────────

    @asynccontextmanager
    async def scope(self):
        snapshot = copy.deepcopy((self.warehouses, self.lots, self.alerts, self.events, self._seq))
        try:
            yield self
        except Exception:
            self.warehouses, self.lots, self.alerts, self.events, self._seq = snapshot
            self.rollbacks += 1
            raise
        self.commits += 1

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    # ── InventoryService surface ─────────────────────────────────────────

    async def find_warehouses(self, owner_id: str) -> List[SimpleNamespace]:
        self._call("find_warehouses")
        return [w for w in self.warehouses if w.owner_id == owner_id]

    async def find_warehouse(self, id: Any, owner_id: str) -> Optional[SimpleNamespace]:
        self._call("find_warehouse")
        return next((w for w in self.warehouses if w.id == id and w.owner_id == owner_id), None)

    async def create_warehouse(self, fields: Dict[str, Any]) -> SimpleNamespace:
        self._call("create_warehouse")
        return self.add_warehouse(**fields)

    async def increment_used_capacity(self, id: Any, delta: float) -> None:
        self._call("increment_used_capacity")
        warehouse = self.warehouse(id)
        if warehouse is not None:
            warehouse.used_capacity = (warehouse.used_capacity or 0) + delta

    async def find_lots(
        self,
        warehouse_ids: Sequence[Any],
        crop_name: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[SimpleNamespace]:
        self._call("find_lots")
        lots = [
            lot for lot in reversed(self.lots)
            if lot.warehouse_id in warehouse_ids
            and (crop_name is None or lot.crop_name.lower() == crop_name.lower())
            and (statuses is None or lot.status in statuses)
        ]
        return lots[:limit] if limit else lots

    async def find_first_lot(
        self, warehouse_ids: Sequence[Any], crop_name: Optional[str] = None
    ) -> Optional[SimpleNamespace]:
        self._call("find_first_lot")
        return next(
            (
                lot for lot in self.lots
                if lot.warehouse_id in warehouse_ids
                and (crop_name is None or lot.crop_name.lower() == crop_name.lower())
            ),
            None,
        )

    async def create_lot(self, fields: Dict[str, Any]) -> SimpleNamespace:
        self._call("create_lot")
        warehouse = self.warehouse(fields["warehouse_id"])
        data = {k: v for k, v in fields.items() if k not in ("warehouse_id", "owner_id")}
        return self.add_lot(warehouse, owner_id=fields["owner_id"], **data)

    async def update_lot_fields(self, id: Any, fields: Dict[str, Any]) -> Optional[SimpleNamespace]:
        self._call("update_lot_fields")
        lot = next((l for l in self.lots if l.id == id), None)
        if lot is None:
            return None
        for key, value in fields.items():
            setattr(lot, key, value)
        return lot

    async def delete_lot(self, id: Any) -> bool:
        self._call("delete_lot")
        before = len(self.lots)
        self.lots = [l for l in self.lots if l.id != id]
        return len(self.lots) < before

    async def find_unresolved_alerts(self, warehouse_ids: Sequence[Any], limit: int = 15) -> List[SimpleNamespace]:
        self._call("find_unresolved_alerts")
        return [
            a for a in self.alerts
            if a.warehouse_id in warehouse_ids and not a.is_resolved
        ][:limit]

    async def count_unresolved_alerts(self, warehouse_ids: Sequence[Any]) -> int:
        self._call("count_unresolved_alerts")
        return sum(1 for a in self.alerts if a.warehouse_id in warehouse_ids and not a.is_resolved)

    async def create_alert(self, fields: Dict[str, Any]) -> SimpleNamespace:
        self._call("create_alert")
        alert = SimpleNamespace(id=uuid4(), **fields)
        self.alerts.append(alert)
        return alert

    async def append_event(self, fields: Dict[str, Any]) -> SimpleNamespace:
        self._call("append_event")
        event = SimpleNamespace(id=uuid4(), **fields)
        self.events.append(event)
        return event


class FixedWeatherClient(BaseWeatherClient):
    """Returns one configured report for every city and records the lookups."""

    def __init__(self, temp: float = 30.0, humidity: float = 65.0) -> None:
        self.temp = temp
        self.humidity = humidity
        self.cities: List[str] = []

    @property
    def provider(self) -> str:
        return "fixed"

    async def get_weather(self, city: str) -> WeatherReport:
        self.cities.append(city)
        return WeatherReport(temp=self.temp, humidity=self.humidity, description="clear sky", city=city)


class ManualClock:
    """Callable clock for TTL tests; advance() moves it forward."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
