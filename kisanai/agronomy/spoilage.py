"""
Condition estimator: storage conditions derived from ambient weather, crop
thresholds, threshold breaches and the spoilage risk score.

No sensors are involved; a warehouse's inside climate is approximated from
the city weather and the warehouse type.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from kisanai.agronomy.shelf_life import get_shelf_life

DERIVED_SOURCE = "derived_from_weather"


@dataclass(frozen=True)
class CropThreshold:
    max_humidity: float
    max_temp: float


DEFAULT_THRESHOLD = CropThreshold(max_humidity=75, max_temp=30)

THRESHOLDS: Dict[str, CropThreshold] = {
    "Onion": CropThreshold(max_humidity=65, max_temp=30),
    "Potato": CropThreshold(max_humidity=85, max_temp=10),
    "Wheat": CropThreshold(max_humidity=70, max_temp=32),
    "Rice": CropThreshold(max_humidity=75, max_temp=30),
    "Tomato": CropThreshold(max_humidity=90, max_temp=8),
    "Cotton": CropThreshold(max_humidity=65, max_temp=35),
    "Sugarcane": CropThreshold(max_humidity=80, max_temp=30),
    "Garlic": CropThreshold(max_humidity=65, max_temp=28),
}


@dataclass(frozen=True)
class StorageConditions:
    temp: float
    humidity: float
    source: str = DERIVED_SOURCE


@dataclass(frozen=True)
class Breach:
    """One crop threshold exceeded; field names match the Alert model."""

    alert_type: str
    severity: str
    limit: float
    message: str
    recommendation: str


def get_threshold(crop_name: str) -> CropThreshold:
    return THRESHOLDS.get(crop_name, DEFAULT_THRESHOLD)


def derive_storage_conditions(weather: Any, warehouse_type: str) -> StorageConditions:
    """
    Approximate inside conditions from a WeatherReport-like object.

    cold_storage: temp 10 below ambient (floor 2), humidity fixed at 55.
    ventilated:   ambient temp, humidity 5 below ambient (floor 30).
    dry/other:    temp 2 above ambient, ambient humidity.
    """
    temp = float(weather.temp)
    humidity = float(weather.humidity)
    if warehouse_type == "cold_storage":
        return StorageConditions(temp=max(temp - 10, 2.0), humidity=55.0)
    if warehouse_type == "ventilated":
        return StorageConditions(temp=temp, humidity=max(humidity - 5, 30.0))
    return StorageConditions(temp=temp + 2, humidity=humidity)


def threshold_breaches(crop_name: str, conditions: StorageConditions) -> List[Breach]:
    threshold = get_threshold(crop_name)
    breaches: List[Breach] = []
    if conditions.humidity > threshold.max_humidity:
        breaches.append(
            Breach(
                alert_type="humidity_breach",
                severity="critical" if conditions.humidity > threshold.max_humidity + 15 else "high",
                limit=threshold.max_humidity,
                message=(
                    f"Humidity {conditions.humidity:.0f}% exceeds safe limit of "
                    f"{threshold.max_humidity:g}% for {crop_name}"
                ),
                recommendation="Improve ventilation or shift to cold storage",
            )
        )
    if conditions.temp > threshold.max_temp:
        breaches.append(
            Breach(
                alert_type="temp_breach",
                severity="critical" if conditions.temp > threshold.max_temp + 10 else "high",
                limit=threshold.max_temp,
                message=(
                    f"Temperature {conditions.temp:.1f}°C exceeds safe limit of "
                    f"{threshold.max_temp:g}°C for {crop_name}"
                ),
                recommendation="Consider cold storage or improved ventilation",
            )
        )
    return breaches


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_until(sell_by: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days (ceil) until *sell_by*, floored at 0. None when there is no date."""
    if sell_by is None:
        return None
    now = _as_utc(now or datetime.now(timezone.utc))
    seconds = (_as_utc(sell_by) - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def compute_risk_score(
    lot: Any, conditions: StorageConditions, now: Optional[datetime] = None
) -> int:
    """
    Spoilage risk in [0, 100] for a stored lot.

    Age contributes up to 60 points as the lot approaches its sell-by date;
    each breached threshold adds 15 (25 when critical); an overdue lot adds 40.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    shelf_life = getattr(lot, "expected_shelf_life_days", None) or get_shelf_life(lot.crop_name)
    sell_by = getattr(lot, "recommended_sell_by_date", None)

    score = 0.0
    overdue = False
    if sell_by is not None:
        remaining_days = (_as_utc(sell_by) - now).total_seconds() / 86400
        overdue = remaining_days < 0
        elapsed_ratio = 1 - max(remaining_days, 0) / shelf_life
        score += min(max(elapsed_ratio, 0.0), 1.0) * 60

    for breach in threshold_breaches(lot.crop_name, conditions):
        score += 25 if breach.severity == "critical" else 15

    if overdue:
        score += 40

    return int(round(min(max(score, 0.0), 100.0)))


def risk_label(score: int) -> str:
    if score >= 70:
        return "HIGH"
    if score >= 40:
        return "MEDIUM"
    return "LOW"
