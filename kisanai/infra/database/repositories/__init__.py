"""Repositories for the storage database."""
from kisanai.infra.database.repositories.alert import AlertRepository
from kisanai.infra.database.repositories.base import BaseRepository
from kisanai.infra.database.repositories.produce_lot import ProduceLotRepository
from kisanai.infra.database.repositories.storage_event import StorageEventRepository
from kisanai.infra.database.repositories.warehouse import WarehouseRepository

__all__ = [
    "BaseRepository",
    "WarehouseRepository",
    "ProduceLotRepository",
    "AlertRepository",
    "StorageEventRepository",
]
