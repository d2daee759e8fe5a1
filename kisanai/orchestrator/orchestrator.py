"""ChatOrchestrator: classify a chat message and route it to the right handler.

Routing:
  confirm / reject with a pending action   → MutationHandler (execute / reject)
  add_lot, add_warehouse, update, delete   → MutationHandler (create + prompt)
  view_*                                   → ViewHandler (context text)
  anything else                            → general pass-through, context None
"""
from __future__ import annotations

import logging
import time

from kisanai.core.exceptions import ValidationError
from kisanai.orchestrator.classifiers.intent_classifier import (
    IntentClassifier,
    is_mutation_intent,
    is_view_intent,
)
from kisanai.orchestrator.handlers.mutation_handler import MutationHandler
from kisanai.orchestrator.handlers.view_handler import ViewHandler
from kisanai.orchestrator.pending import PendingActionStore
from kisanai.orchestrator.types import ChatReply, IntentType

logger = logging.getLogger(__name__)


class ChatOrchestrator:
    """Top-level entry point of the chat decision pipeline."""

    def __init__(
        self,
        *,
        classifier: IntentClassifier,
        store: PendingActionStore,
        mutation_handler: MutationHandler,
        view_handler: ViewHandler,
    ) -> None:
        self._classifier = classifier
        self._store = store
        self._mutations = mutation_handler
        self._views = view_handler

    @property
    def store(self) -> PendingActionStore:
        return self._store

    async def process(self, message: str, user_id: str) -> ChatReply:
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required")
        if not user_id:
            raise ValidationError("User identity is required")

        text = message.strip()
        started = time.perf_counter()
        classification = self._classifier.classify(text)
        intent = classification.intent

        if intent in (IntentType.CONFIRM, IntentType.REJECT):
            # Expired actions still route here so the user hears about the expiry.
            if self._store.has(user_id, include_expired=True):
                reply = await self._mutations.handle(classification, text, user_id)
            else:
                reply = ChatReply(intent=intent, confidence=classification.confidence)
        elif is_mutation_intent(intent):
            reply = await self._mutations.handle(classification, text, user_id)
        elif is_view_intent(intent):
            reply = await self._views.handle(classification, text, user_id)
        else:
            reply = ChatReply(intent=intent, confidence=classification.confidence)

        logger.info(
            "Chat message routed to %s in %.1f ms",
            intent.value, (time.perf_counter() - started) * 1000,
            extra={"user_id": user_id, "intent": intent.value},
        )
        return reply
