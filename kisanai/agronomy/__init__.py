"""Crop knowledge: shelf life, storage thresholds, spoilage risk."""
from kisanai.agronomy.shelf_life import (
    DEFAULT_SHELF_LIFE_DAYS,
    SHELF_LIFE_DAYS,
    get_recommended_sell_by_date,
    get_shelf_life,
)
from kisanai.agronomy.spoilage import (
    THRESHOLDS,
    Breach,
    CropThreshold,
    StorageConditions,
    compute_risk_score,
    days_until,
    derive_storage_conditions,
    get_threshold,
    risk_label,
    threshold_breaches,
)

__all__ = [
    "DEFAULT_SHELF_LIFE_DAYS",
    "SHELF_LIFE_DAYS",
    "get_shelf_life",
    "get_recommended_sell_by_date",
    "THRESHOLDS",
    "Breach",
    "CropThreshold",
    "StorageConditions",
    "compute_risk_score",
    "days_until",
    "derive_storage_conditions",
    "get_threshold",
    "risk_label",
    "threshold_breaches",
]
