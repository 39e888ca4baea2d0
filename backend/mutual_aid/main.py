"""Mutual Aid API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MutualAidError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py; this module only wires
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mutual_aid.api.error_handlers import register_error_handlers
from mutual_aid.api.routes import (
    grievances, health, help_posts, nearby_help, ratings, support_tickets,
    ticket_messages, users,
)
from mutual_aid.config import get_settings
from mutual_aid.infrastructure.database import close_db, init_db
from mutual_aid.infrastructure.observability import log_requests, setup_logging

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
    logger.info("Mutual Aid API started")
    yield
    await close_db()
    logger.info("Mutual Aid API shutting down")


app = FastAPI(
    title="Mutual Aid API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(nearby_help.router)
app.include_router(help_posts.router)
app.include_router(grievances.router)
app.include_router(support_tickets.router)
app.include_router(ticket_messages.router)
app.include_router(ratings.router)
app.include_router(users.router)

register_error_handlers(app)
