"""
Users API FastAPI Application
Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import users
from app.api.responses import error_response, not_found_response
from app.config import settings
from app.database import init_db, close_db
from app.middleware import CORSHeadersMiddleware, ErrorHandlerMiddleware, RequestLoggingMiddleware

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and cleanup on shutdown.
    """
    # Startup
    from app.logging_config import setup_logging
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)

    logger.info(f"🚀 Starting {settings.app_name} ({settings.environment})...")

    # Initialize database (creates tables if they don't exist)
    # In production, use Alembic migrations instead
    if settings.debug:
        await init_db()
        logger.info("✅ Database initialized (debug mode)")

    logger.info(f"CORS allow-list: {settings.cors_origins_list}")
    logger.info(f"✅ {settings.app_name} ready!")

    yield

    # Shutdown
    logger.info(f"🛑 Shutting down {settings.app_name}...")
    await close_db()
    logger.info("✅ Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="CRUD API for user accounts.",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    redirect_slashes=False,
    lifespan=lifespan,
)

# Last added runs first: logging -> CORS -> error handling -> router
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(CORSHeadersMiddleware, allowed_origins=settings.cors_origins_list)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing misses (unknown path or unbound method) answer with the 404 envelope."""
    if exc.status_code in (404, 405):
        return not_found_response("Route not found")
    return error_response(str(exc.detail), exc.status_code)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/", tags=["Health"])
@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness check for container orchestration."""
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


# =============================================
# API Routers
# =============================================

app.include_router(users.router, prefix="/api/users", tags=["Users"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        access_log=False,
    )
