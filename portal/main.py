"""
Manager Portal: application entry point.

This is the **only** file that assembles the app. Business logic lives in
the `api/`, `services/`, `models/` and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.api.v1.api import api_router
from portal.api.v1.endpoints.auth import limiter
from portal.core.config import settings
from portal.core.exceptions import register_exception_handlers
from portal.db.base import Base
from portal.db.session import accounts_engine, dispose_engines

# Ensure the accounts-store models are imported so metadata.create_all sees them
from portal.models.account import Account  # noqa: F401
from portal.models.masterlist import MasterlistSlot  # noqa: F401
from portal.models.page import Page  # noqa: F401
from portal.models.roster import RosterTeam, RosterTeamPage  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Only the accounts store is ours to create; sales and attendance are read-only.
    async with accounts_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Accounts store tables initialised")

    if not settings.admin_emails:
        logger.warning("ADMIN_EMAILS is empty; nobody can approve new accounts")

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await dispose_engines()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Manager portal: approval-gated sales and attendance dashboards",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # slowapi looks the limiter up on app state
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (uniform error body, no stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
