# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.config import settings
from src.database import SessionLocal
from src.schemas.common import HealthResponse
from src.services import audit_service, auth_service

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    db = SessionLocal()
    try:
        expired = auth_service.cleanup_expired_sessions(db)
        if expired:
            logger.info(f"Removed {expired} expired sessions")
        written = audit_service.retry_pending(db)
        if written:
            logger.info(f"Wrote {written} queued audit entries")
    finally:
        db.close()

    yield

    pending = audit_service.pending_count()
    if pending:
        logger.warning(f"Shutting down with {pending} audit entries still queued")


app = FastAPI(
    title="Console Access Control",
    description="Roles, credential disclosure, sharing and invoice approval",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
