"""KisanAI chatbot API entry point.

Start with:
    uvicorn kisanai.api.main:app --reload --host 0.0.0.0 --port 8000

Weather comes from OpenWeather when OPENWEATHER_API_KEY is set, otherwise
from a static estimate, so no key is required at startup.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from kisanai.clients.weather import build_weather_client
from kisanai.config import load_chatbot_config, load_postgres_config, load_weather_config
from kisanai.core.exceptions import ConfigurationError, ProjectError
from kisanai.core.logger import configure as configure_logging
from kisanai.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from kisanai.services.orchestrator_service import OrchestratorService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure_logging()

    try:
        db_config = load_postgres_config()
        weather_config = load_weather_config()
        chatbot_config = load_chatbot_config()
    except ValueError as exc:
        raise ConfigurationError.from_exception(exc, f"Invalid configuration: {exc}") from exc

    await ensure_database_exists(db_config)
    engine = build_engine(db_config)
    session_factory = build_session_factory(engine)
    await init_db(db_config)
    app.state.session_factory = session_factory

    weather_client = build_weather_client(weather_config)
    app.state.weather_client = weather_client

    app.state.orchestrator = OrchestratorService.build(
        session_factory=session_factory,
        weather_client=weather_client,
        config=chatbot_config,
    )
    logger.info("API: chatbot orchestrator ready")

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await weather_client.aclose()
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="KisanAI Storage Chatbot API",
    version="0.1.0",
    description="Chat interface over warehouses and produce lots, with consent-gated changes.",
    lifespan=lifespan,
)

# Rate limit from CHAT_RATE_LIMIT (default 30/minute)
_chat_rate_limit = os.environ.get("CHAT_RATE_LIMIT", "30/minute")
limiter = Limiter(key_func=get_remote_address, default_limits=[_chat_rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProjectError)
async def project_error_handler(request: Request, exc: ProjectError):
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.message, "code": exc.code},
    )


# ── Routers ───────────────────────────────────────────────────────
from kisanai.api.routers import chatbot  # noqa: E402

app.include_router(chatbot.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
