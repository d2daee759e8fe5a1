"""Abstract base handler for intent handlers."""
from __future__ import annotations

from abc import ABC, abstractmethod

from kisanai.orchestrator.types import ChatReply, ClassificationResult


class BaseHandler(ABC):
    """Every intent handler implements ``handle()`` and returns a ChatReply."""

    @abstractmethod
    async def handle(
        self,
        classification: ClassificationResult,
        message: str,
        user_id: str,
    ) -> ChatReply:
        ...
