"""Unit tests for ChatOrchestrator routing and the OrchestratorService wiring."""
from __future__ import annotations

import asyncio
import unittest

from kisanai.core.exceptions import ValidationError
from kisanai.orchestrator.classifiers.intent_classifier import IntentClassifier
from kisanai.orchestrator.handlers.mutation_handler import CANCELLED_MESSAGE, MutationHandler
from kisanai.orchestrator.handlers.view_handler import ViewHandler
from kisanai.orchestrator.orchestrator import ChatOrchestrator
from kisanai.orchestrator.pending import InMemoryPendingActionStore
from kisanai.orchestrator.types import Confidence, IntentType
from kisanai.services.orchestrator_service import OrchestratorService
from kisanai.tests.fakes import FakeInventory, FixedWeatherClient, ManualClock


def _run(coro):
    return asyncio.run(coro)


class TestChatOrchestrator(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = ManualClock()
        self.inv = FakeInventory()
        self.store = InMemoryPendingActionStore(300, clock=self.clock)
        self.orch = ChatOrchestrator(
            classifier=IntentClassifier(),
            store=self.store,
            mutation_handler=MutationHandler(self.store, self.inv.scope, clock=self.clock),
            view_handler=ViewHandler(self.inv.scope, weather_client=FixedWeatherClient()),
        )

    def process(self, message: str, user_id: str = "u1"):
        return _run(self.orch.process(message, user_id))

    def test_confirm_without_pending_is_passthrough(self) -> None:
        reply = self.process("yes")
        self.assertEqual(reply.to_dict(), {"intent": "confirm", "confidence": "high", "context": None})
        self.assertEqual(self.inv.calls, [])

    def test_add_then_confirm(self) -> None:
        self.inv.add_warehouse(name="Main Godown")
        first = self.process("Add 200 quintals of onion to my warehouse")
        self.assertEqual(first.intent, IntentType.ADD_LOT)
        self.assertTrue(first.requires_consent)
        self.assertIsNone(first.context)
        self.assertEqual(self.inv.lots, [])

        second = self.process("yes")
        self.assertEqual(second.intent, IntentType.CONFIRM)
        self.assertTrue(second.success)
        self.assertIn("LOT-2025-0001", second.direct_reply)
        self.assertEqual(len(self.inv.lots), 1)

    def test_add_then_reject(self) -> None:
        self.inv.add_warehouse()
        self.process("Add 200 quintals of onion to my warehouse")
        reply = self.process("no")
        self.assertEqual(reply.direct_reply, CANCELLED_MESSAGE)
        self.assertTrue(reply.success)
        self.assertEqual(self.inv.lots, [])

    def test_expired_confirm_reports_expiry(self) -> None:
        self.inv.add_warehouse()
        self.process("Add 200 quintals of onion to my warehouse")
        self.clock.advance(600)
        reply = self.process("yes")
        self.assertFalse(reply.success)
        self.assertIn("Action expired", reply.direct_reply)
        self.assertEqual(self.inv.lots, [])

    def test_confirm_only_touches_own_action(self) -> None:
        self.inv.add_warehouse()
        self.process("Add 200 quintals of onion to my warehouse")
        reply = self.process("yes", user_id="u2")
        self.assertIsNone(reply.direct_reply)
        self.assertTrue(self.store.has("u1"))

    def test_view_intent_returns_context(self) -> None:
        self.inv.add_warehouse(name="Main Godown")
        reply = self.process("show my warehouses")
        self.assertEqual(reply.intent, IntentType.VIEW_WAREHOUSES)
        self.assertTrue(reply.context.startswith("USER'S WAREHOUSES (1):"))
        self.assertIsNone(reply.direct_reply)

    def test_general(self) -> None:
        reply = self.process("what should I grow this season?")
        self.assertEqual(reply.intent, IntentType.GENERAL)
        self.assertEqual(reply.confidence, Confidence.LOW)
        self.assertIsNone(reply.context)

    def test_blank_message_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.process("   ")
        with self.assertRaises(ValidationError):
            self.process("hello", user_id="")


class TestOrchestratorService(unittest.TestCase):
    def test_requires_a_scope(self) -> None:
        with self.assertRaises(ValueError):
            OrchestratorService.build()

    def test_build_with_scope_factory(self) -> None:
        inv = FakeInventory()
        inv.add_warehouse()
        orch = OrchestratorService.build(scope_factory=inv.scope)
        self.assertIsInstance(orch.store, InMemoryPendingActionStore)
        self.assertEqual(orch.store.ttl_seconds, 300.0)
        reply = _run(orch.process("give me a summary", "u1"))
        self.assertIn("• Warehouses: 1", reply.context)


if __name__ == "__main__":
    unittest.main()
