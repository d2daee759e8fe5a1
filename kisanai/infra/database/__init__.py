"""
kisanai.infra.database – async engine, session, models and repositories.

Public API
──────────
  build_engine, build_session_factory, init_db, close_engine, ensure_database_exists
  Base, Warehouse, ProduceLot, Alert, StorageEvent (models)
  BaseRepository, WarehouseRepository, ProduceLotRepository,
  AlertRepository, StorageEventRepository
"""
from kisanai.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from kisanai.infra.database.models import (
    Alert,
    Base,
    ProduceLot,
    StorageEvent,
    Warehouse,
)
from kisanai.infra.database.repositories import (
    AlertRepository,
    BaseRepository,
    ProduceLotRepository,
    StorageEventRepository,
    WarehouseRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "close_engine",
    "ensure_database_exists",
    "Base",
    "Warehouse",
    "ProduceLot",
    "Alert",
    "StorageEvent",
    "BaseRepository",
    "WarehouseRepository",
    "ProduceLotRepository",
    "AlertRepository",
    "StorageEventRepository",
]
