"""HTTP tests for the chatbot router (lifespan not started; orchestrator injected on app.state)."""
from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from kisanai.api.main import app
from kisanai.services.orchestrator_service import OrchestratorService
from kisanai.tests.fakes import FakeInventory, FixedWeatherClient


class TestChatbotContext(unittest.TestCase):
    def setUp(self) -> None:
        self.inv = FakeInventory()
        self.inv.add_warehouse(owner_id="farmer-1", name="Main Godown")
        app.state.orchestrator = OrchestratorService.build(
            scope_factory=self.inv.scope, weather_client=FixedWeatherClient(),
        )
        self.client = TestClient(app)
        self.headers = {"X-User-Id": "farmer-1"}

    def tearDown(self) -> None:
        app.state.orchestrator = None

    def post(self, message, headers=None):
        return self.client.post(
            "/api/v1/chatbot/context",
            json={"message": message},
            headers=self.headers if headers is None else headers,
        )

    def test_view_returns_context(self) -> None:
        resp = self.post("show my warehouses")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["intent"], "view_warehouses")
        self.assertEqual(body["confidence"], "high")
        self.assertTrue(body["context"].startswith("USER'S WAREHOUSES (1):"))
        self.assertNotIn("directReply", body)
        self.assertNotIn("requiresConsent", body)

    def test_mutation_then_confirm(self) -> None:
        first = self.post("Add 200 quintals of onion").json()
        self.assertEqual(first["intent"], "add_lot")
        self.assertTrue(first["requiresConsent"])
        self.assertIsNone(first["context"])

        second = self.post("yes").json()
        self.assertEqual(second["intent"], "confirm")
        self.assertTrue(second["success"])
        self.assertIn("Lot ID:", second["directReply"])
        self.assertEqual(len(self.inv.lots), 1)

    def test_mutation_reply_uses_camel_case_keys(self) -> None:
        resp = self.post("Add 200 quintals of Onion")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            sorted(resp.json()),
            ["confidence", "context", "directReply", "intent", "requiresConsent", "success"],
        )

    def test_empty_message_is_400(self) -> None:
        resp = self.post("")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Message is required", "code": "VALIDATION_ERROR"})

    def test_missing_user_is_400(self) -> None:
        resp = self.post("show my warehouses", headers={})
        self.assertEqual(resp.status_code, 400)

    def test_unexpected_error_is_500(self) -> None:
        app.state.orchestrator = SimpleNamespace(process=AsyncMock(side_effect=RuntimeError("db down")))
        resp = self.post("show my warehouses")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Failed to process chatbot request"})

    def test_not_initialised_is_503(self) -> None:
        app.state.orchestrator = None
        self.assertEqual(self.post("hello").status_code, 503)


class TestHealth(unittest.TestCase):
    def test_health_endpoints(self) -> None:
        client = TestClient(app)
        self.assertEqual(client.get("/health").json(), {"status": "ok"})
        body = client.get("/api/v1/chatbot/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertIn("timestamp", body)


if __name__ == "__main__":
    unittest.main()
