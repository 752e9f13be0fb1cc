"""
RestoDesk - FastAPI Backend Application
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
import structlog

from restodesk import __version__
from restodesk.config import settings
from restodesk.database import SessionLocal
from restodesk.api import (
    auth,
    tenants,
    orders,
    reservations,
    menu,
    notifications,
    minutes,
    recharges,
    relay,
)
from restodesk.webhooks import automation, stripe as stripe_webhook


def configure_logging() -> None:
    """Configure structured logging"""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting RestoDesk API", version=__version__)
    yield
    logger.info("Shutting down RestoDesk API")


# Create FastAPI application
app = FastAPI(
    title="RestoDesk",
    description="Reservations, orders and minutes billing for voice-agent restaurants",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": __version__}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(tenants.router, prefix="/tenants", tags=["Tenants"])
app.include_router(orders.router, prefix="/tenants/{tenant_id}/orders", tags=["Orders"])
app.include_router(reservations.router, prefix="/tenants/{tenant_id}/reservations", tags=["Reservations"])
app.include_router(menu.router, prefix="/tenants/{tenant_id}/menu_prices", tags=["Menu"])
app.include_router(notifications.router, prefix="/tenants/{tenant_id}/notifications", tags=["Notifications"])
app.include_router(minutes.router, prefix="/tenants/{tenant_id}/minutes", tags=["Minutes"])
app.include_router(recharges.router, prefix="/tenants/{tenant_id}/recharges", tags=["Recharges"])
app.include_router(relay.router, prefix="/tenants/{tenant_id}/relay", tags=["Relay"])

# Include webhook routers
app.include_router(automation.router, prefix="/webhooks/automation", tags=["Webhooks"])
app.include_router(stripe_webhook.router, prefix="/webhooks/stripe", tags=["Webhooks"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "restodesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
