"""Chatbot router: intent detection, consent-gated mutations and read context."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from kisanai.api.dependencies import get_orchestrator, get_user_id
from kisanai.api.schemas.chatbot import (
    ChatbotContextRequest,
    ChatbotContextResponse,
    HealthResponse,
)
from kisanai.core.exceptions import ProjectError, ValidationError
from kisanai.orchestrator.orchestrator import ChatOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chatbot", tags=["chatbot"])
limiter = Limiter(key_func=get_remote_address)


@router.post(
    "/context",
    response_model=ChatbotContextResponse,
    response_model_exclude_unset=True,
)
@limiter.limit("30/minute")
async def chatbot_context(
    request: Request,
    body: ChatbotContextRequest,
    user_id: str = Depends(get_user_id),
    orch: ChatOrchestrator = Depends(get_orchestrator),
):
    """Classify the message; return DB context (view) or a direct reply (mutation / confirm / reject)."""
    if not body.message or not body.message.strip():
        raise ValidationError("Message is required")
    try:
        reply = await orch.process(body.message, user_id)
    except ProjectError:
        raise
    except Exception:
        logger.exception("Chatbot context error", extra={"user_id": user_id})
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process chatbot request"},
        )
    return ChatbotContextResponse(**reply.to_dict())


@router.get("/health", response_model=HealthResponse)
async def chatbot_health():
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))
