# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the KANVA API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    KanvaException,
    kanva_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    account,
    admin,
    credits,
    health,
    preferences,
    sports,
    subscription,
    tasks,
    team_slots,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown.
    """
    logger.info(f"Starting KANVA API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY not set, subscription checks will fail")

    yield

    logger.info("Shutting down KANVA API")


app = FastAPI(
    title="KANVA API",
    description="""
## Social-media graphics for Swiss sports clubs

Backend for team slots, subscription tiers and export credits.

### Rules

| Rule | Free | Paid / Admin |
|------|------|--------------|
| Team slots | 1 | 3 |
| Slot changes | once per 7 days | once per 7 days |
| Monthly credits | 3 | 10 |

Quota and cooldown violations come back as `409` with the concrete limit
(`details.limit`, `details.current`) or wait time (`details.days_remaining`).
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current user, role and limits"},
        {"name": "Team Slots", "description": "Claim, rebind and free team slots"},
        {"name": "Credits", "description": "Credit balance, consumption and history"},
        {"name": "Subscription", "description": "Stripe subscription sync"},
        {"name": "Account", "description": "Account deletion"},
        {"name": "Sports", "description": "Clubs, teams and games from the league API"},
        {"name": "Preferences", "description": "Email reminders and session preferences"},
        {"name": "Admin", "description": "Template migrations and job triggers"},
        {"name": "Tasks", "description": "Background job status"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(KanvaException)
async def handle_kanva_exception(request: Request, exc: KanvaException):
    """Domain errors are expected outcomes: render, don't log."""
    return await kanva_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(team_slots.router, prefix="/api/v1/team-slots", tags=["Team Slots"])
app.include_router(credits.router, prefix="/api/v1/credits", tags=["Credits"])
app.include_router(subscription.router, prefix="/api/v1/subscription", tags=["Subscription"])
app.include_router(account.router, prefix="/api/v1/account", tags=["Account"])
app.include_router(sports.router, prefix="/api/v1/sports", tags=["Sports"])
app.include_router(preferences.router, prefix="/api/v1/preferences", tags=["Preferences"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "KANVA API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
