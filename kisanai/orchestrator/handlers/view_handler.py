"""ViewHandler: read-only context text for the view intents."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from kisanai.agronomy.spoilage import (
    compute_risk_score,
    days_until,
    derive_storage_conditions,
    risk_label,
    threshold_breaches,
)
from kisanai.clients.weather.base import BaseWeatherClient
from kisanai.clients.weather.static import StaticWeatherClient
from kisanai.config.chatbot import ChatbotConfig
from kisanai.infra.database.models.produce_lot import ACTIVE_LOT_STATUSES
from kisanai.orchestrator.formatting import format_quantity, humanize
from kisanai.orchestrator.handlers.base import BaseHandler
from kisanai.orchestrator.types import (
    ChatReply,
    ClassificationResult,
    IntentType,
    ScopeFactory,
)

logger = logging.getLogger(__name__)

_RISK_BADGES = {"HIGH": "🔴 HIGH", "MEDIUM": "🟠 MEDIUM", "LOW": "🟢 LOW"}


class ViewHandler(BaseHandler):
    """Fetches a user's warehouses, lots and alerts and renders them as a bounded text block."""

    def __init__(
        self,
        scope_factory: ScopeFactory,
        *,
        weather_client: Optional[BaseWeatherClient] = None,
        config: Optional[ChatbotConfig] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._scope = scope_factory
        self._weather = weather_client or StaticWeatherClient()
        self._config = config or ChatbotConfig()
        self._now = now
        self._formatters: Dict[IntentType, Callable[[Any, str], Awaitable[str]]] = {
            IntentType.VIEW_LOTS: self._lots,
            IntentType.VIEW_WAREHOUSES: self._warehouses,
            IntentType.VIEW_ALERTS: self._alerts,
            IntentType.VIEW_SUMMARY: self._summary,
            IntentType.VIEW_CONDITIONS: self._conditions,
        }

    async def handle(
        self,
        classification: ClassificationResult,
        message: str,
        user_id: str,
    ) -> ChatReply:
        context = await self.build_context(classification.intent, user_id)
        return ChatReply(
            intent=classification.intent,
            confidence=classification.confidence,
            context=context,
        )

    async def build_context(self, intent: IntentType, user_id: str) -> Optional[str]:
        """Formatted context for a view intent; None for any other intent."""
        formatter = self._formatters.get(intent)
        if formatter is None:
            return None
        async with self._scope() as inventory:
            context = await formatter(inventory, user_id)
        logger.debug(
            "Built %s context (%d chars)", intent.value, len(context),
            extra={"user_id": user_id, "intent": intent.value},
        )
        return context

    async def _lots(self, inventory: Any, user_id: str) -> str:
        warehouses = await inventory.find_warehouses(user_id)
        if not warehouses:
            return "User has no warehouses yet."
        names = {w.id: w.name for w in warehouses}
        lots = await inventory.find_lots(list(names), limit=self._config.lot_list_limit)
        if not lots:
            return "No produce lots stored yet."

        now = self._now()
        lines: List[str] = []
        for lot in lots:
            days_left = days_until(lot.recommended_sell_by_date, now)
            sell_by = f"{days_left} days until sell-by" if days_left is not None else "no sell-by date"
            lines.append(
                f"• {lot.crop_name} ({lot.lot_code}) — {format_quantity(lot.quantity_quintals)} qtl "
                f'in "{names.get(lot.warehouse_id, "Unknown")}" | Condition: {lot.current_condition} '
                f"| {sell_by} | Status: {lot.status}"
            )
        return f"USER'S STORED PRODUCE ({len(lots)} lots):\n" + "\n".join(lines)

    async def _warehouses(self, inventory: Any, user_id: str) -> str:
        warehouses = await inventory.find_warehouses(user_id)
        if not warehouses:
            return "User has no warehouses registered."
        lines = [
            f'• "{w.name}" ({w.type}) at {w.city or "unknown"} — '
            f"{format_quantity(w.used_capacity)}/{format_quantity(w.capacity_quintals)} qtl used "
            f"({_used_percent(w)}%) | Active: {'Yes' if w.is_active else 'No'}"
            for w in warehouses
        ]
        return f"USER'S WAREHOUSES ({len(warehouses)}):\n" + "\n".join(lines)

    async def _alerts(self, inventory: Any, user_id: str) -> str:
        warehouses = await inventory.find_warehouses(user_id)
        if not warehouses:
            return "No warehouses, so no alerts."
        names = {w.id: w.name for w in warehouses}
        alerts = await inventory.find_unresolved_alerts(list(names), self._config.alert_list_limit)
        if not alerts:
            return "No active alerts — everything looks good! 🌿"

        lines: List[str] = []
        for alert in alerts:
            lot = getattr(alert, "lot", None)
            crop = lot.crop_name if lot is not None else "Unknown"
            lot_code = lot.lot_code if lot is not None else ""
            lines.append(
                f"• [{alert.severity.upper()}] {alert.message} — {crop} {lot_code} "
                f'in "{names.get(alert.warehouse_id, "")}" '
                f"| Recommendation: {alert.recommendation or 'N/A'}"
            )
        return f"ACTIVE ALERTS ({len(alerts)}):\n" + "\n".join(lines)

    async def _summary(self, inventory: Any, user_id: str) -> str:
        warehouses = await inventory.find_warehouses(user_id)
        if not warehouses:
            return "User has no warehouses yet. Suggest creating one first."
        ids = [w.id for w in warehouses]
        lots = await inventory.find_lots(ids)
        unresolved = await inventory.count_unresolved_alerts(ids)

        total = sum(w.capacity_quintals or 0 for w in warehouses)
        used = sum(w.used_capacity or 0 for w in warehouses)
        good = sum(1 for lot in lots if lot.current_condition == "good")
        at_risk = sum(1 for lot in lots if lot.current_condition in ("at_risk", "spoiled"))
        return (
            "STORAGE SUMMARY:\n"
            f"• Warehouses: {len(warehouses)}\n"
            f"• Total Capacity: {format_quantity(total)} qtl "
            f"({format_quantity(used)} used, {format_quantity(total - used)} free)\n"
            f"• Produce Lots: {len(lots)} total ({good} good, {at_risk} at risk/spoiled)\n"
            f"• Active Alerts: {unresolved}"
        )

    async def _conditions(self, inventory: Any, user_id: str) -> str:
        warehouses = await inventory.find_warehouses(user_id)
        if not warehouses:
            return "User has no warehouses yet."

        now = self._now()
        lines: List[str] = []
        for wh in warehouses:
            weather = await self._weather.get_weather(wh.city)
            conditions = derive_storage_conditions(weather, wh.type)
            used_pct = _used_percent(wh)
            status = "⚠️ Near full" if used_pct > self._config.near_full_percent else "✅ Safe"

            lines.append(f'\n📦 "{wh.name}" ({humanize(wh.type)}) in {wh.city}:')
            lines.append(
                f"  🌡️ Temp: {conditions.temp:.1f}°C | 💧 Humidity: {conditions.humidity:.0f}%"
            )
            lines.append(
                f"  📊 Capacity: {used_pct}% used ({format_quantity(wh.used_capacity)}/"
                f"{format_quantity(wh.capacity_quintals)} qtl) {status}"
            )

            lots = await inventory.find_lots([wh.id], statuses=ACTIVE_LOT_STATUSES)
            for lot in lots:
                score = compute_risk_score(lot, conditions, now=now)
                breaches = {b.alert_type: b for b in threshold_breaches(lot.crop_name, conditions)}
                flags = ""
                if "temp_breach" in breaches:
                    flags += f" ⚠️ Temp exceeds {breaches['temp_breach'].limit:g}°C limit!"
                if "humidity_breach" in breaches:
                    flags += f" ⚠️ Humidity exceeds {breaches['humidity_breach'].limit:g}% limit!"
                lines.append(
                    f"  • {lot.crop_name} ({lot.lot_code}): "
                    f"Risk {_RISK_BADGES[risk_label(score)]} ({score}/100){flags}"
                )
        return "WAREHOUSE CONDITIONS:\n" + "\n".join(lines)


def _used_percent(warehouse: Any) -> int:
    if not warehouse.capacity_quintals:
        return 0
    return round((warehouse.used_capacity or 0) / warehouse.capacity_quintals * 100)
