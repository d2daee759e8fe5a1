"""
MutationHandler: consent-gated writes driven by chat.

Per user the flow is NONE -> PENDING -> (EXECUTED | REJECTED | EXPIRED) -> NONE.
``create`` parses the message and parks a PendingAction with a confirmation
prompt; ``execute`` applies it once the user says yes; ``reject`` drops it.
"""
from __future__ import annotations

import asyncio
import logging
import time
import weakref
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from kisanai.agronomy.shelf_life import get_recommended_sell_by_date, get_shelf_life
from kisanai.config.chatbot import ChatbotConfig
from kisanai.core.exceptions import (
    DisambiguationError,
    EntityExtractionError,
    NotFoundError,
    ProjectError,
)
from kisanai.orchestrator.extraction import (
    extract_city,
    extract_crop_name,
    extract_new_status,
    extract_quantity,
    extract_warehouse_name,
    extract_warehouse_type,
    parse_status_target,
)
from kisanai.orchestrator.formatting import CONSENT_SUFFIX, format_quantity, humanize
from kisanai.orchestrator.handlers.base import BaseHandler
from kisanai.orchestrator.pending import PendingActionStore
from kisanai.orchestrator.types import (
    ChatReply,
    ClassificationResult,
    IntentType,
    MutationResult,
    PendingAction,
    ScopeFactory,
)

logger = logging.getLogger(__name__)

NO_PENDING_MESSAGE = "No pending action. What would you like to do?"
CANCELLED_MESSAGE = "Cancelled. ✨ What else can I help you with?"
NOTHING_TO_CANCEL_MESSAGE = "No action to cancel. How can I help?"
GENERIC_FAILURE_MESSAGE = "Something went wrong while saving your change. Please try again."


class MutationHandler(BaseHandler):
    """Consent orchestrator for add_lot, add_warehouse, update_lot_status and delete_lot."""

    def __init__(
        self,
        store: PendingActionStore,
        scope_factory: ScopeFactory,
        *,
        config: Optional[ChatbotConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._scope = scope_factory
        self._config = config or ChatbotConfig()
        self._clock = clock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        self._builders: Dict[IntentType, Callable[[str, str], Awaitable[Tuple[PendingAction, str]]]] = {
            IntentType.ADD_LOT: self._build_add_lot,
            IntentType.ADD_WAREHOUSE: self._build_add_warehouse,
            IntentType.UPDATE_LOT_STATUS: self._build_update_lot_status,
            IntentType.DELETE_LOT: self._build_delete_lot,
        }
        self._executors: Dict[IntentType, Callable[[Any, PendingAction], Awaitable[str]]] = {
            IntentType.ADD_LOT: self._execute_add_lot,
            IntentType.ADD_WAREHOUSE: self._execute_add_warehouse,
            IntentType.UPDATE_LOT_STATUS: self._execute_update_lot_status,
            IntentType.DELETE_LOT: self._execute_delete_lot,
        }

    # ── BaseHandler ──────────────────────────────────────────────────────

    async def handle(
        self,
        classification: ClassificationResult,
        message: str,
        user_id: str,
    ) -> ChatReply:
        intent = classification.intent
        if intent is IntentType.CONFIRM:
            result = await self.execute(user_id)
            requires_consent = None
        elif intent is IntentType.REJECT:
            result = self.reject(user_id)
            requires_consent = None
        else:
            result = await self.create(intent, message, user_id)
            requires_consent = result.requires_consent
        return ChatReply(
            intent=intent,
            confidence=classification.confidence,
            context=None,
            direct_reply=result.message,
            requires_consent=requires_consent,
            success=result.success,
        )

    # ── create ───────────────────────────────────────────────────────────

    async def create(self, intent: IntentType, message: str, user_id: str) -> MutationResult:
        """Build a pending action for *intent* and return its confirmation prompt.

        Failures return ``success=False`` and leave the store untouched.
        """
        builder = self._builders.get(intent)
        if builder is None:
            return MutationResult(success=False, message="Unknown action type.")
        try:
            action, prompt = await builder(message, user_id)
        except (EntityExtractionError, DisambiguationError, NotFoundError) as exc:
            logger.info(
                "Pending %s not created: %s",
                intent.value, exc.code,
                extra={"user_id": user_id, "intent": intent.value},
            )
            return MutationResult(success=False, message=exc.message)

        self._store.set(user_id, action)
        logger.info(
            "Pending action stored",
            extra={"user_id": user_id, "action_type": intent.value},
        )
        return MutationResult(success=True, message=prompt + CONSENT_SUFFIX, requires_consent=True)

    async def _load_warehouses(self, user_id: str) -> List[Any]:
        async with self._scope() as inventory:
            return list(await inventory.find_warehouses(user_id))

    async def _find_lot(self, user_id: str, crop_name: Optional[str]) -> Tuple[Any, Any]:
        """First lot (optionally of *crop_name*) across the user's warehouses, plus its warehouse."""
        async with self._scope() as inventory:
            warehouses = await inventory.find_warehouses(user_id)
            by_id = {w.id: w for w in warehouses}
            lot = None
            if by_id:
                lot = await inventory.find_first_lot(list(by_id), crop_name)
        if lot is None:
            target = f"a {crop_name} lot" if crop_name else "any lot"
            raise NotFoundError(
                f"I couldn't find {target} in your warehouses.",
                details={"crop_name": crop_name},
            )
        return lot, by_id.get(lot.warehouse_id)

    @staticmethod
    def _pick_warehouse(warehouses: Sequence[Any], message: str) -> Optional[Any]:
        if len(warehouses) == 1:
            return warehouses[0]
        lower = message.lower()
        return next((w for w in warehouses if w.name.lower() in lower), None)

    async def _build_add_lot(self, message: str, user_id: str) -> Tuple[PendingAction, str]:
        crop_name = extract_crop_name(message)
        if crop_name is None:
            raise EntityExtractionError(
                "I couldn't detect the crop name. "
                'Try: "Add 200 quintals of **Onion** to my warehouse"',
                details={"field": "crop_name"},
            )
        quantity = extract_quantity(message)
        if not quantity:
            raise EntityExtractionError(
                "I couldn't detect the quantity. "
                'Try: "Add **200 quintals** of Onion to my warehouse"',
                details={"field": "quantity"},
            )

        warehouses = await self._load_warehouses(user_id)
        if not warehouses:
            raise NotFoundError(
                "You don't have any warehouses yet. Create one first, "
                "e.g. \"Create a warehouse called 'Main Godown' in Pune\".",
            )
        warehouse = self._pick_warehouse(warehouses, message)
        if warehouse is None:
            names = ", ".join(f'"{w.name}"' for w in warehouses)
            raise DisambiguationError(
                f"You have multiple warehouses: {names}. Please mention which one, "
                f'e.g. "Add {format_quantity(quantity)} qtl {crop_name} to {warehouses[0].name}"',
                details={"candidates": [w.name for w in warehouses]},
            )

        action = PendingAction(
            user_id=user_id,
            type=IntentType.ADD_LOT,
            created_at=self._clock(),
            warehouse_id=warehouse.id,
            warehouse_name=warehouse.name,
            crop_name=crop_name,
            quantity_quintals=quantity,
        )
        prompt = (
            f"Got it! 📦 Shall I add a **{crop_name}** lot ({format_quantity(quantity)} qtl) "
            f'to **"{warehouse.name}"**?'
        )
        return action, prompt

    async def _build_add_warehouse(self, message: str, user_id: str) -> Tuple[PendingAction, str]:
        name = extract_warehouse_name(message)
        if not name:
            raise EntityExtractionError(
                "Please include the warehouse name. "
                "Try: \"Create a warehouse called **'Nashik Cold Storage'**\"",
                details={"field": "name"},
            )
        warehouse_type = extract_warehouse_type(message)
        # Digits inside the name ("Godown 2") are not a capacity.
        capacity = (
            extract_quantity(message.replace(name, " ", 1))
            or self._config.default_capacity_quintals
        )
        city = extract_city(message)

        action = PendingAction(
            user_id=user_id,
            type=IntentType.ADD_WAREHOUSE,
            created_at=self._clock(),
            name=name,
            warehouse_type=warehouse_type,
            capacity=capacity,
            city=city,
        )
        prompt = (
            f"I'll create a **{humanize(warehouse_type)}** warehouse named **\"{name}\"** "
            f"({format_quantity(capacity)} qtl capacity) in {city}."
        )
        return action, prompt

    async def _build_update_lot_status(self, message: str, user_id: str) -> Tuple[PendingAction, str]:
        raw_status = extract_new_status(message)
        if raw_status is None:
            raise EntityExtractionError(
                "I couldn't detect the new status. "
                'Try: "Mark my onion lot as **sold**" (sold / dispatched / at_risk / spoiled / good)',
                details={"field": "status"},
            )
        lot, warehouse = await self._find_lot(user_id, extract_crop_name(message))
        warehouse_name = warehouse.name if warehouse is not None else "Unknown"
        _, display_status = parse_status_target(raw_status)

        action = PendingAction(
            user_id=user_id,
            type=IntentType.UPDATE_LOT_STATUS,
            created_at=self._clock(),
            lot_id=lot.id,
            lot_display=lot.crop_name,
            lot_ref=lot.lot_code,
            warehouse_id=lot.warehouse_id,
            warehouse_name=warehouse_name,
            raw_status=raw_status,
        )
        prompt = (
            f"Shall I mark **{lot.crop_name}** ({lot.lot_code}) in **\"{warehouse_name}\"** "
            f"as **{display_status}**?"
        )
        return action, prompt

    async def _build_delete_lot(self, message: str, user_id: str) -> Tuple[PendingAction, str]:
        lot, warehouse = await self._find_lot(user_id, extract_crop_name(message))
        warehouse_name = warehouse.name if warehouse is not None else "Unknown"

        action = PendingAction(
            user_id=user_id,
            type=IntentType.DELETE_LOT,
            created_at=self._clock(),
            lot_id=lot.id,
            lot_display=lot.crop_name,
            lot_ref=lot.lot_code,
            warehouse_id=lot.warehouse_id,
            warehouse_name=warehouse_name,
            quantity_quintals=lot.quantity_quintals,
        )
        prompt = (
            f"⚠️ Shall I **permanently delete** the **{lot.crop_name}** lot "
            f"({lot.lot_code}, {format_quantity(lot.quantity_quintals)} qtl) "
            f'from **"{warehouse_name}"**?'
        )
        return action, prompt

    # ── execute ──────────────────────────────────────────────────────────

    def _user_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def execute(self, user_id: str) -> MutationResult:
        """Apply the user's pending action at most once.

        The slot is emptied before any write; a failed write is reported and
        not retried.
        """
        async with self._user_lock(user_id):
            action = self._store.pop(user_id)
            if action is None:
                return MutationResult(success=False, message=NO_PENDING_MESSAGE)

            ttl = self._store.ttl_seconds
            if action.is_expired(ttl, self._clock()):
                logger.info(
                    "Pending action expired",
                    extra={"user_id": user_id, "action_type": action.type.value},
                )
                minutes = max(1, round(ttl / 60))
                return MutationResult(
                    success=False,
                    message=f"Action expired ({minutes} min). Please try again.",
                )

            executor = self._executors[action.type]
            try:
                async with self._scope() as inventory:
                    reply = await executor(inventory, action)
            except ProjectError as exc:
                logger.warning(
                    "Executing %s failed: %s",
                    action.type.value, exc.code,
                    extra={"user_id": user_id, "action_type": action.type.value},
                )
                return MutationResult(success=False, message=exc.message)
            except Exception:
                logger.exception(
                    "Executing %s failed",
                    action.type.value,
                    extra={"user_id": user_id, "action_type": action.type.value},
                )
                return MutationResult(success=False, message=GENERIC_FAILURE_MESSAGE)

        logger.info(
            "Pending action executed",
            extra={"user_id": user_id, "action_type": action.type.value},
        )
        return MutationResult(success=True, message=reply)

    async def _execute_add_lot(self, inventory: Any, action: PendingAction) -> str:
        entry_date = datetime.now(timezone.utc)
        shelf_life_days = get_shelf_life(action.crop_name)
        quantity = format_quantity(action.quantity_quintals)
        lot = await inventory.create_lot({
            "owner_id": action.user_id,
            "warehouse_id": action.warehouse_id,
            "crop_name": action.crop_name,
            "quantity_quintals": action.quantity_quintals,
            "status": "stored",
            "current_condition": "good",
            "entry_date": entry_date,
            "expected_shelf_life_days": shelf_life_days,
            "recommended_sell_by_date": get_recommended_sell_by_date(entry_date, action.crop_name),
            "source": "chatbot",
        })
        await inventory.increment_used_capacity(action.warehouse_id, action.quantity_quintals)
        await inventory.append_event({
            "lot_id": lot.id,
            "owner_id": action.user_id,
            "event_type": "lot_created",
            "description": f"{action.crop_name}: {quantity} quintals stored (via chatbot)",
            "metadata": {"source": "chatbot", "warehouse_name": action.warehouse_name},
        })
        return (
            f'✅ Added **{action.crop_name}** ({quantity} qtl) to **"{action.warehouse_name}"**!\n'
            f"Lot ID: **{lot.lot_code}** · Shelf life: **{shelf_life_days} days**"
        )

    async def _execute_add_warehouse(self, inventory: Any, action: PendingAction) -> str:
        warehouse = await inventory.create_warehouse({
            "owner_id": action.user_id,
            "name": action.name,
            "type": action.warehouse_type,
            "city": action.city,
            "capacity_quintals": action.capacity,
            "used_capacity": 0,
            "is_active": True,
        })
        return (
            f'✅ Warehouse **"{warehouse.name}"** created! '
            f"({humanize(warehouse.type)}, {format_quantity(warehouse.capacity_quintals)} qtl capacity)"
        )

    async def _execute_update_lot_status(self, inventory: Any, action: PendingAction) -> str:
        field, value = parse_status_target(action.raw_status)
        is_condition = field == "current_condition"
        updated = await inventory.update_lot_fields(action.lot_id, {field: value})
        if updated is None:
            raise NotFoundError(
                f"The {action.lot_display} lot ({action.lot_ref}) no longer exists.",
                details={"lot_id": str(action.lot_id)},
            )
        await inventory.append_event({
            "lot_id": action.lot_id,
            "owner_id": action.user_id,
            "event_type": "condition_updated" if is_condition else value,
            "description": f"{'Condition' if is_condition else 'Status'} changed to {value} (via chatbot)",
            "metadata": {"source": "chatbot", "warehouse_name": action.warehouse_name},
        })
        return (
            f"✅ **{action.lot_display}** ({action.lot_ref}) updated to **{value}** "
            f'in **"{action.warehouse_name}"**.'
        )

    async def _execute_delete_lot(self, inventory: Any, action: PendingAction) -> str:
        quantity = format_quantity(action.quantity_quintals)
        # Event first so the trail references a lot id that still exists.
        await inventory.append_event({
            "lot_id": action.lot_id,
            "owner_id": action.user_id,
            "event_type": "lot_deleted",
            "description": (
                f"{action.lot_display} ({action.lot_ref}, {quantity} qtl) deleted from "
                f"{action.warehouse_name} (via chatbot)"
            ),
            "metadata": {
                "source": "chatbot",
                "warehouse_name": action.warehouse_name,
                "quantity": action.quantity_quintals,
            },
        })
        if not await inventory.delete_lot(action.lot_id):
            raise NotFoundError(
                f"The {action.lot_display} lot ({action.lot_ref}) no longer exists.",
                details={"lot_id": str(action.lot_id)},
            )
        if action.warehouse_id and action.quantity_quintals:
            await inventory.increment_used_capacity(action.warehouse_id, -action.quantity_quintals)
        return (
            f"🗑️ **{action.lot_display}** lot ({action.lot_ref}) deleted from "
            f'**"{action.warehouse_name}"**.'
        )

    # ── reject ───────────────────────────────────────────────────────────

    def reject(self, user_id: str) -> MutationResult:
        action = self._store.pop(user_id)
        if action is None or action.is_expired(self._store.ttl_seconds, self._clock()):
            return MutationResult(success=True, message=NOTHING_TO_CANCEL_MESSAGE)
        logger.info(
            "Pending action rejected",
            extra={"user_id": user_id, "action_type": action.type.value},
        )
        return MutationResult(success=True, message=CANCELLED_MESSAGE)
