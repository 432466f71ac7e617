"""
Gubaye Platform FastAPI Application

Admin console backend for student families and job assignments.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from gubaye.config import settings
from gubaye.core.database import close_db, engine

logger = logging.getLogger(__name__)


async def _database_ok() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database check failed: {e}")
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Verify database connection

    Shutdown:
    - Close database connections
    """
    logger.info("Gubaye Platform starting...")

    if not await _database_ok():
        raise RuntimeError("Database connection failed")
    logger.info("Database connection verified")

    logger.info(
        f"Gubaye Platform ready (max {settings.MAX_JOBS_PER_STUDENT} jobs per student, "
        f"batch mismatch policy: {settings.BATCH_MISMATCH_POLICY})"
    )

    yield

    logger.info("Gubaye Platform shutting down...")
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Gubaye Platform",
        description="Family tree and job assignment administration",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoints
    @app.get("/", tags=["Health"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "Gubaye Platform",
            "status": "operational",
            "version": "0.1.0",
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health"], response_model=None)
    async def health_check() -> JSONResponse:
        """Health check endpoint for load balancers."""
        checks: dict[str, dict[str, Any]] = {}

        if await _database_ok():
            checks["database"] = {"status": "healthy"}
        else:
            checks["database"] = {"status": "unhealthy"}

        checks["auto_assign"] = {
            "status": "healthy",
            "configured": bool(settings.AUTO_ASSIGN_SERVICE_URL),
        }

        all_healthy = all(check["status"] == "healthy" for check in checks.values())
        status_code = 200 if all_healthy else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if all_healthy else "unhealthy",
                "environment": settings.ENVIRONMENT,
                "checks": checks,
            },
        )

    @app.get("/health/ready", tags=["Health"], response_model=None)
    async def readiness_check() -> dict[str, str] | JSONResponse:
        """Readiness check; 200 when the database is reachable."""
        if await _database_ok():
            return {"status": "ready"}
        return JSONResponse(status_code=503, content={"status": "not_ready"})

    @app.get("/health/live", tags=["Health"])
    async def liveness_check() -> dict[str, str]:
        """Liveness check (alive even if not fully functional)."""
        return {"status": "alive"}

    # Register API routers
    from gubaye.api.v1 import families, jobs, students

    app.include_router(students.router, prefix="/api/v1/students", tags=["Students"])
    app.include_router(jobs.router, prefix="/api/v1/jobs", tags=["Jobs"])
    app.include_router(families.router, prefix="/api/v1/families", tags=["Families"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gubaye.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for containerized deployment
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
