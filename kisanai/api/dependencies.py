"""FastAPI dependency providers."""
from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, Request, status

from kisanai.orchestrator.orchestrator import ChatOrchestrator


def get_orchestrator(request: Request) -> ChatOrchestrator:
    """Access the pre-built orchestrator from app.state."""
    orch = getattr(request.app.state, "orchestrator", None)
    if orch is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chatbot not initialised. Check server startup logs.",
        )
    return orch


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity. An auth middleware in front of the API is expected to set X-User-Id."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id header is required",
        )
    return user_id
