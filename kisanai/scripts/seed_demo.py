#!/usr/bin/env python3
"""Seed demo storage data for one owner: two Pune warehouses, six lots, three alerts.

Existing warehouses, lots, alerts and events of that owner are deleted first.

Run:
    python -m kisanai.scripts.seed_demo --owner demo-farmer
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete

from kisanai.config import load_postgres_config
from kisanai.core.logger import configure, get_logger
from kisanai.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from kisanai.infra.database.models import Alert, ProduceLot, StorageEvent, Warehouse
from kisanai.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

WAREHOUSES = [
    {
        "name": "Patil Agri Warehouse",
        "city": "Pune",
        "address": "Gat No. 42, Uruli Kanchan, Pune 412202",
        "type": "dry",
        "capacity_quintals": 500,
    },
    {
        "name": "Shivneri Cold Storage",
        "city": "Pune",
        "address": "MIDC Bhosari, Pimpri-Chinchwad, Pune 411026",
        "type": "cold_storage",
        "capacity_quintals": 300,
    },
]

# (warehouse index, crop, quintals, days ago, shelf life days, source, condition, status)
LOTS = [
    (0, "Onion", 120, 18, 45, "Baramati Farm", "good", "stored"),
    (0, "Soybean", 80, 35, 120, "Indapur", "good", "stored"),
    (0, "Wheat", 112, 60, 180, "Shirur Taluka", "good", "stored"),
    (1, "Tomato", 45, 8, 18, "Junnar", "watch", "stored"),
    (1, "Grapes", 90, 5, 25, "Nashik Road", "good", "stored"),
    (1, "Pomegranate", 50, 12, 40, "Sangola", "good", "partially_dispatched"),
]


async def _reset(session, owner_id: str) -> None:
    await session.execute(delete(StorageEvent).where(StorageEvent.owner_id == owner_id))
    await session.execute(delete(Alert).where(Alert.owner_id == owner_id))
    await session.execute(delete(ProduceLot).where(ProduceLot.owner_id == owner_id))
    result = await session.execute(delete(Warehouse).where(Warehouse.owner_id == owner_id))
    if result.rowcount:
        logger.info("Removed %d existing warehouses for %s", result.rowcount, owner_id)


async def seed(owner_id: str) -> None:
    config = load_postgres_config()
    await ensure_database_exists(config)
    engine = build_engine(config)
    session_factory = build_session_factory(engine)
    await init_db(config)

    now = datetime.now(timezone.utc)
    async with session_factory() as session:
        await _reset(session, owner_id)
        inventory = InventoryService(session)

        warehouses = []
        for data in WAREHOUSES:
            warehouses.append(await inventory.create_warehouse({**data, "owner_id": owner_id}))

        lots = []
        for wh_index, crop, quintals, days_ago, shelf_life, source, condition, status in LOTS:
            warehouse = warehouses[wh_index]
            entry_date = now - timedelta(days=days_ago)
            lot = await inventory.create_lot({
                "owner_id": owner_id,
                "warehouse_id": warehouse.id,
                "crop_name": crop,
                "quantity_quintals": quintals,
                "entry_date": entry_date,
                "expected_shelf_life_days": shelf_life,
                "recommended_sell_by_date": entry_date + timedelta(days=shelf_life),
                "source": source,
                "current_condition": condition,
                "status": status,
            })
            await inventory.increment_used_capacity(warehouse.id, quintals)
            await inventory.append_event({
                "lot_id": lot.id,
                "owner_id": owner_id,
                "event_type": "lot_created",
                "description": f"{crop}: {quintals} quintals stored from {source}",
                "metadata": {"source": "seed", "warehouse_name": warehouse.name},
                "performed_at": entry_date,
            })
            lots.append(lot)

        tomato, onion = lots[3], lots[0]
        for alert in (
            {
                "lot_id": tomato.id,
                "warehouse_id": warehouses[1].id,
                "alert_type": "humidity_breach",
                "severity": "high",
                "message": "Humidity at 82% in Cold Unit B, tomatoes at risk of fungal growth",
                "recommendation": "Activate dehumidifier immediately. Consider moving 15 quintals to ventilated section.",
                "triggered_at": now - timedelta(days=1),
            },
            {
                "lot_id": onion.id,
                "warehouse_id": warehouses[0].id,
                "alert_type": "overdue",
                "severity": "medium",
                "message": "Onion lot stored for 18 days, market prices trending down",
                "recommendation": "Consider dispatching to Pune APMC or Vashi Market while prices hold.",
                "triggered_at": now,
            },
            {
                "lot_id": None,
                "warehouse_id": warehouses[0].id,
                "alert_type": "custom",
                "severity": "medium",
                "message": "Patil Agri Warehouse at 62% capacity, limited space for new harvest",
                "recommendation": "Plan dispatch of wheat or soybean to free up 100+ quintals before next onion harvest.",
                "triggered_at": now,
            },
        ):
            await inventory.create_alert({**alert, "owner_id": owner_id})

        await session.commit()

    await close_engine()
    logger.info(
        "Demo seed complete for %s: %d warehouses, %d lots, 3 alerts",
        owner_id, len(warehouses), len(lots),
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo warehouses and produce lots.")
    parser.add_argument("--owner", default="demo-farmer", help="Owner (user) id to seed data for")
    args = parser.parse_args()

    configure()
    get_logger(__name__).info("Seeding demo data for %s", args.owner)
    asyncio.run(seed(args.owner))


if __name__ == "__main__":
    main()
