"""
kisanai.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from kisanai.infra.database.models.alert import ALERT_SEVERITIES, ALERT_TYPES, Alert
from kisanai.infra.database.models.base import Base, JSONType, TimestampMixin, _uuid_pk, utcnow
from kisanai.infra.database.models.produce_lot import (
    ACTIVE_LOT_STATUSES,
    LOT_CONDITIONS,
    LOT_STATUSES,
    ProduceLot,
    format_lot_code,
)
from kisanai.infra.database.models.storage_event import EVENT_TYPES, StorageEvent
from kisanai.infra.database.models.warehouse import WAREHOUSE_TYPES, Warehouse

__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    "_uuid_pk",
    "utcnow",
    "Warehouse",
    "WAREHOUSE_TYPES",
    "ProduceLot",
    "LOT_STATUSES",
    "LOT_CONDITIONS",
    "ACTIVE_LOT_STATUSES",
    "format_lot_code",
    "Alert",
    "ALERT_TYPES",
    "ALERT_SEVERITIES",
    "StorageEvent",
    "EVENT_TYPES",
]
