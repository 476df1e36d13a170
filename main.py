"""
PPE Compliance Aggregation & Risk-Ranking Service
Main FastAPI Application Entry Point
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
import logging

from ppewatch.database import init_db, engine
from ppewatch.routers import compliance, alerts, dashboard, statuses, ppe_items
from ppewatch.config import settings
from ppewatch.core.errors import register_exception_handlers
from ppewatch.middleware.request_logging import RequestLoggingMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

TEAM_PREFIX = "/api/teams/{slug}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    await init_db()
    logger.info(f"PPE compliance service started ({settings.ENVIRONMENT})")
    
    yield
    
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="PPE Compliance Service",
    description="Per-team PPE compliance aggregation, alert listing and risk ranking",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(compliance.router, prefix=TEAM_PREFIX, tags=["Compliance"])
app.include_router(alerts.router, prefix=TEAM_PREFIX, tags=["Alerts"])
app.include_router(dashboard.router, prefix=TEAM_PREFIX, tags=["Dashboard"])
app.include_router(statuses.router, prefix=f"{TEAM_PREFIX}/compliance-statuses", tags=["Statuses"])
app.include_router(ppe_items.router, prefix=f"{TEAM_PREFIX}/ppe-items", tags=["PPE Items"])


@app.get("/")
async def root():
    """Service probe."""
    return {
        "status": "running",
        "message": "PPE Compliance Service API",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database = "connected"
    except Exception as exc:
        logger.error(f"Health check database error: {exc}")
        database = "unavailable"
    
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
        "environment": settings.ENVIRONMENT
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
