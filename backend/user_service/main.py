"""User Service API - FastAPI application entry point.

Invariants:
    - Settings are loaded at import; a missing DSN or JWT_SECRET aborts startup
    - Routes registered explicitly
    - Global error handlers map UserServiceError → structured JSON responses
    - Database pool created in the lifespan and disposed on shutdown
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from user_service.api.error_handlers import register_error_handlers
from user_service.api.routes import auth, health, users
from user_service.config import get_settings
from user_service.infrastructure.database import close_db, init_db
from user_service.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("User service started")
    yield
    await close_db()
    logger.info("User service shutting down")


settings = get_settings()

app = FastAPI(title="User Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(auth.router)

register_error_handlers(app)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("user_service.main:app", host="0.0.0.0", port=8080)
