"""Shelf-life table for stored crops and sell-by date helper."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Union

DEFAULT_SHELF_LIFE_DAYS = 60

SHELF_LIFE_DAYS: Dict[str, int] = {
    "Onion": 120,
    "Potato": 90,
    "Wheat": 365,
    "Rice": 365,
    "Tomato": 14,
    "Cotton": 180,
    "Sugarcane": 7,
    "Garlic": 180,
    "Maize": 270,
    "Soybean": 180,
    "Groundnut": 150,
    "Banana": 10,
    "Mango": 12,
    "Grapes": 14,
    "Pomegranate": 60,
}


def get_shelf_life(crop_name: str) -> int:
    """Expected days in storage for *crop_name* (capitalized form); unknown crops get 60."""
    return SHELF_LIFE_DAYS.get(crop_name, DEFAULT_SHELF_LIFE_DAYS)


def get_recommended_sell_by_date(
    entry_date: Union[date, datetime], crop_name: str
) -> Union[date, datetime]:
    return entry_date + timedelta(days=get_shelf_life(crop_name))
