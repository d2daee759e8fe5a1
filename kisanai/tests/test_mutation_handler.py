"""Unit tests for MutationHandler: pending actions, consent and at-most-once execution."""
from __future__ import annotations

import asyncio
import unittest

from kisanai.orchestrator.formatting import CONSENT_SUFFIX
from kisanai.orchestrator.handlers.mutation_handler import (
    CANCELLED_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    NO_PENDING_MESSAGE,
    NOTHING_TO_CANCEL_MESSAGE,
    MutationHandler,
)
from kisanai.orchestrator.pending import InMemoryPendingActionStore
from kisanai.orchestrator.types import ClassificationResult, Confidence, IntentType
from kisanai.tests.fakes import FakeInventory, ManualClock


def _run(coro):
    return asyncio.run(coro)


class _HandlerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = ManualClock()
        self.inv = FakeInventory()
        self.store = InMemoryPendingActionStore(300, clock=self.clock)
        self.handler = MutationHandler(self.store, self.inv.scope, clock=self.clock)

    def create(self, intent: IntentType, message: str, user_id: str = "u1"):
        return _run(self.handler.create(intent, message, user_id))

    def execute(self, user_id: str = "u1"):
        return _run(self.handler.execute(user_id))


class TestAddLot(_HandlerTestCase):
    def test_create_stores_action_without_writing(self) -> None:
        self.inv.add_warehouse(name="Main Godown")
        result = self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")

        self.assertTrue(result.success)
        self.assertTrue(result.requires_consent)
        self.assertTrue(result.message.startswith(
            'Got it! 📦 Shall I add a **Onion** lot (200 qtl) to **"Main Godown"**?'
        ))
        self.assertTrue(result.message.endswith(CONSENT_SUFFIX))
        self.assertTrue(self.store.has("u1"))
        self.assertEqual(self.inv.lots, [])
        self.assertNotIn("create_lot", self.inv.calls)

    def test_execute_creates_lot_once(self) -> None:
        wh = self.inv.add_warehouse(name="Main Godown", used_capacity=50.0)
        self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        result = self.execute()

        self.assertTrue(result.success)
        self.assertIn('✅ Added **Onion** (200 qtl) to **"Main Godown"**!', result.message)
        self.assertIn("Lot ID: **LOT-2025-0001** · Shelf life: **120 days**", result.message)
        self.assertEqual(len(self.inv.lots), 1)
        lot = self.inv.lots[0]
        self.assertEqual(lot.quantity_quintals, 200.0)
        self.assertEqual((lot.status, lot.current_condition, lot.source), ("stored", "good", "chatbot"))
        self.assertEqual(lot.expected_shelf_life_days, 120)
        self.assertEqual(self.inv.warehouse(wh.id).used_capacity, 250.0)
        self.assertEqual([e.event_type for e in self.inv.events], ["lot_created"])
        self.assertFalse(self.store.has("u1"))

        again = self.execute()
        self.assertFalse(again.success)
        self.assertEqual(again.message, NO_PENDING_MESSAGE)
        self.assertEqual(len(self.inv.lots), 1)

    def test_kg_quantity_converted(self) -> None:
        self.inv.add_warehouse()
        result = self.create(IntentType.ADD_LOT, "store 5000 kg of rice")
        self.assertIn("(50 qtl)", result.message)
        self.assertEqual(self.store.get("u1").quantity_quintals, 50.0)

    def test_missing_crop(self) -> None:
        self.inv.add_warehouse()
        result = self.create(IntentType.ADD_LOT, "add 200 quintals")
        self.assertFalse(result.success)
        self.assertIn("crop name", result.message)
        self.assertFalse(self.store.has("u1"))

    def test_missing_quantity(self) -> None:
        self.inv.add_warehouse()
        result = self.create(IntentType.ADD_LOT, "add an onion lot")
        self.assertFalse(result.success)
        self.assertIn("quantity", result.message)
        self.assertFalse(self.store.has("u1"))

    def test_no_warehouses(self) -> None:
        result = self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        self.assertFalse(result.success)
        self.assertIn("don't have any warehouses", result.message)
        self.assertFalse(self.store.has("u1"))

    def test_multiple_warehouses_need_a_name(self) -> None:
        self.inv.add_warehouse(name="Patil Agri")
        self.inv.add_warehouse(name="Cold Unit")
        result = self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        self.assertFalse(result.success)
        self.assertIn("multiple warehouses", result.message)
        self.assertIn('"Patil Agri", "Cold Unit"', result.message)
        self.assertFalse(self.store.has("u1"))

    def test_multiple_warehouses_named_in_message(self) -> None:
        self.inv.add_warehouse(name="Patil Agri")
        cold = self.inv.add_warehouse(name="Cold Unit")
        result = self.create(IntentType.ADD_LOT, "Add 45 qtl tomato to cold unit")
        self.assertTrue(result.success)
        self.assertEqual(self.store.get("u1").warehouse_id, cold.id)

    def test_other_users_warehouses_are_invisible(self) -> None:
        self.inv.add_warehouse(owner_id="someone-else")
        result = self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        self.assertFalse(result.success)


class TestAddWarehouse(_HandlerTestCase):
    def test_create_and_execute(self) -> None:
        result = self.create(
            IntentType.ADD_WAREHOUSE,
            "Create a cold storage warehouse called 'Nashik Cold' in Nashik",
        )
        self.assertTrue(result.success)
        self.assertIn(
            "I'll create a **cold storage** warehouse named **\"Nashik Cold\"** "
            "(500 qtl capacity) in Nashik.",
            result.message,
        )

        done = self.execute()
        self.assertTrue(done.success)
        self.assertEqual(
            done.message,
            '✅ Warehouse **"Nashik Cold"** created! (cold storage, 500 qtl capacity)',
        )
        wh = self.inv.warehouses[0]
        self.assertEqual((wh.type, wh.city, wh.capacity_quintals, wh.used_capacity), ("cold_storage", "Nashik", 500.0, 0))

    def test_capacity_from_message(self) -> None:
        self.create(IntentType.ADD_WAREHOUSE, "create a warehouse named Depot with 300 quintals")
        self.assertEqual(self.store.get("u1").capacity, 300.0)

    def test_digits_in_name_are_not_capacity(self) -> None:
        result = self.create(IntentType.ADD_WAREHOUSE, "Create a warehouse called 'Godown 2' in Pune")
        self.assertIn("(500 qtl capacity) in Pune.", result.message)
        self.assertEqual(self.store.get("u1").name, "Godown 2")
        self.assertEqual(self.store.get("u1").capacity, 500.0)

        self.create(IntentType.ADD_WAREHOUSE, "create a warehouse called Godown 2 with 300 quintals")
        self.assertEqual(self.store.get("u1").name, "Godown 2")
        self.assertEqual(self.store.get("u1").capacity, 300.0)

    def test_missing_name(self) -> None:
        result = self.create(IntentType.ADD_WAREHOUSE, "create a new warehouse")
        self.assertFalse(result.success)
        self.assertIn("warehouse name", result.message)


class TestUpdateLotStatus(_HandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.wh = self.inv.add_warehouse(name="Main Godown")
        self.lot = self.inv.add_lot(self.wh, crop_name="Onion")

    def test_status_change(self) -> None:
        result = self.create(IntentType.UPDATE_LOT_STATUS, "Mark my onion lot as sold")
        self.assertIn(
            'Shall I mark **Onion** (LOT-2025-0001) in **"Main Godown"** as **sold**?',
            result.message,
        )
        done = self.execute()
        self.assertTrue(done.success)
        self.assertEqual(self.lot.status, "sold")
        self.assertEqual(self.lot.current_condition, "good")
        self.assertEqual(self.inv.events[-1].event_type, "sold")

    def test_condition_change(self) -> None:
        self.create(IntentType.UPDATE_LOT_STATUS, "mark onion lot as spoiled")
        self.execute()
        self.assertEqual(self.lot.current_condition, "spoiled")
        self.assertEqual(self.lot.status, "stored")
        self.assertEqual(self.inv.events[-1].event_type, "condition_updated")

    def test_missing_status(self) -> None:
        result = self.create(IntentType.UPDATE_LOT_STATUS, "update my onion lot")
        self.assertFalse(result.success)
        self.assertIn("new status", result.message)

    def test_unknown_crop_lot(self) -> None:
        result = self.create(IntentType.UPDATE_LOT_STATUS, "mark wheat lot as sold")
        self.assertFalse(result.success)
        self.assertIn("I couldn't find a Wheat lot", result.message)
        self.assertFalse(self.store.has("u1"))

    def test_lot_deleted_before_confirm(self) -> None:
        self.create(IntentType.UPDATE_LOT_STATUS, "Mark my onion lot as sold")
        self.inv.lots.clear()
        done = self.execute()
        self.assertFalse(done.success)
        self.assertIn("no longer exists", done.message)
        self.assertEqual(self.inv.events, [])


class TestDeleteLot(_HandlerTestCase):
    def test_delete_writes_event_first_and_frees_capacity(self) -> None:
        wh = self.inv.add_warehouse(name="Main Godown", used_capacity=300.0)
        self.inv.add_lot(wh, crop_name="Onion", quantity_quintals=120.0)

        result = self.create(IntentType.DELETE_LOT, "delete my onion lot")
        self.assertIn("**permanently delete**", result.message)
        self.assertIn("(LOT-2025-0001, 120 qtl)", result.message)

        done = self.execute()
        self.assertTrue(done.success)
        self.assertEqual(self.inv.lots, [])
        self.assertEqual(self.inv.warehouse(wh.id).used_capacity, 180.0)
        self.assertLess(self.inv.calls.index("append_event"), self.inv.calls.index("delete_lot"))
        self.assertEqual(self.inv.events[0].event_type, "lot_deleted")


class TestConsentLifecycle(_HandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.wh = self.inv.add_warehouse(name="Main Godown")

    def test_reject_drops_action(self) -> None:
        self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        result = self.handler.reject("u1")
        self.assertEqual(result.message, CANCELLED_MESSAGE)
        self.assertFalse(self.store.has("u1"))
        self.assertEqual(self.execute().message, NO_PENDING_MESSAGE)
        self.assertEqual(self.inv.lots, [])

    def test_reject_with_nothing_pending(self) -> None:
        self.assertEqual(self.handler.reject("u1").message, NOTHING_TO_CANCEL_MESSAGE)

    def test_expired_action_is_not_executed(self) -> None:
        self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        self.clock.advance(301)
        result = self.execute()
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Action expired (5 min). Please try again.")
        self.assertEqual(self.inv.lots, [])
        self.assertFalse(self.store.has("u1", include_expired=True))

    def test_new_request_replaces_pending(self) -> None:
        self.inv.add_lot(self.wh, crop_name="Wheat")
        self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        self.create(IntentType.DELETE_LOT, "delete my wheat lot")
        self.assertEqual(self.store.get("u1").type, IntentType.DELETE_LOT)
        self.execute()
        self.assertEqual(self.inv.lots, [])

    def test_concurrent_confirms_execute_once(self) -> None:
        self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")

        async def both():
            return await asyncio.gather(self.handler.execute("u1"), self.handler.execute("u1"))

        results = _run(both())
        self.assertEqual(sorted(r.success for r in results), [False, True])
        self.assertEqual(len(self.inv.lots), 1)

    def test_persistence_failure_is_reported_and_rolled_back(self) -> None:
        self.inv.fail_on.add("increment_used_capacity")
        self.create(IntentType.ADD_LOT, "Add 200 quintals of onion")
        with self.assertLogs("kisanai.orchestrator.handlers.mutation_handler", level="ERROR"):
            result = self.execute()
        self.assertFalse(result.success)
        self.assertEqual(result.message, GENERIC_FAILURE_MESSAGE)
        self.assertEqual(self.inv.lots, [])
        self.assertEqual(self.inv.rollbacks, 1)
        self.assertFalse(self.store.has("u1"))


class TestHandle(_HandlerTestCase):
    def test_confirm_without_pending(self) -> None:
        reply = _run(self.handler.handle(
            ClassificationResult(IntentType.CONFIRM, Confidence.HIGH), "yes", "u1",
        ))
        self.assertEqual(reply.direct_reply, NO_PENDING_MESSAGE)
        self.assertFalse(reply.success)
        self.assertIsNone(reply.requires_consent)
        self.assertIsNone(reply.context)

    def test_create_reply_requires_consent(self) -> None:
        self.inv.add_warehouse()
        reply = _run(self.handler.handle(
            ClassificationResult(IntentType.ADD_LOT, Confidence.HIGH, score=2),
            "Add 200 quintals of onion", "u1",
        ))
        self.assertTrue(reply.requires_consent)
        self.assertTrue(reply.success)
        self.assertEqual(reply.to_dict()["intent"], "add_lot")


if __name__ == "__main__":
    unittest.main()
