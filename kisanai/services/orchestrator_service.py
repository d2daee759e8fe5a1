"""OrchestratorService: build a fully-wired ChatOrchestrator."""
from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Optional

from kisanai.config.chatbot import ChatbotConfig
from kisanai.orchestrator.classifiers.intent_classifier import IntentClassifier
from kisanai.orchestrator.handlers.mutation_handler import MutationHandler
from kisanai.orchestrator.handlers.view_handler import ViewHandler
from kisanai.orchestrator.orchestrator import ChatOrchestrator
from kisanai.orchestrator.pending import InMemoryPendingActionStore, PendingActionStore
from kisanai.orchestrator.types import ScopeFactory
from kisanai.services.inventory_service import inventory_scope

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from kisanai.clients.weather.base import BaseWeatherClient

logger = logging.getLogger(__name__)


class OrchestratorService:
    """Factory wiring classifier, pending store, handlers and the unit-of-work scope."""

    @staticmethod
    def build(
        *,
        session_factory: Optional["async_sessionmaker[AsyncSession]"] = None,
        scope_factory: Optional[ScopeFactory] = None,
        weather_client: Optional["BaseWeatherClient"] = None,
        config: Optional[ChatbotConfig] = None,
        store: Optional[PendingActionStore] = None,
        classifier: Optional[IntentClassifier] = None,
    ) -> ChatOrchestrator:
        """Either *session_factory* or *scope_factory* must be given; the latter wins."""
        if scope_factory is None:
            if session_factory is None:
                raise ValueError("session_factory or scope_factory is required")
            scope_factory = functools.partial(inventory_scope, session_factory)

        config = config or ChatbotConfig()
        store = store or InMemoryPendingActionStore(config.pending_ttl_seconds)
        orchestrator = ChatOrchestrator(
            classifier=classifier or IntentClassifier(),
            store=store,
            mutation_handler=MutationHandler(store, scope_factory, config=config),
            view_handler=ViewHandler(scope_factory, weather_client=weather_client, config=config),
        )
        logger.info(
            "OrchestratorService: built chat orchestrator (ttl=%ss, weather=%s, store=%s)",
            store.ttl_seconds,
            weather_client.provider if weather_client is not None else "static",
            type(store).__name__,
        )
        return orchestrator
