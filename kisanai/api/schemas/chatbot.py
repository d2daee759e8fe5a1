"""Pydantic v2 schemas for the chatbot API."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChatbotContextRequest(BaseModel):
    message: Optional[str] = Field(default=None, max_length=4000)


class ChatbotContextResponse(BaseModel):
    """Serialized with camelCase keys: ``directReply``, ``requiresConsent``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    intent: str
    confidence: str
    context: Optional[str] = None
    direct_reply: Optional[str] = None
    requires_consent: Optional[bool] = None
    success: Optional[bool] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
