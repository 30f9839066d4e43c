from contextlib import asynccontextmanager
import logging
import traceback

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from wms.config import settings
from wms.api.v1.router import api_router
from wms.database import async_session_factory, init_db
from wms.jobs.scheduler import start_scheduler, shutdown_scheduler, get_job_status
from wms.middleware.tenant import tenant_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Configure logging
    - Create tables when DB_CREATE_TABLES is set
    - Start background scheduler (reservation expiry)

    Schema is managed by Alembic (``alembic upgrade head``).
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if settings.DB_CREATE_TABLES:
        await init_db()

    if settings.SCHEDULER_ENABLED:
        start_scheduler()

    yield

    shutdown_scheduler()
    logger.info("Shutting down...")


OPENAPI_TAGS = [
    {"name": "Inventory", "description": "Stock positions, validation and movements"},
    {"name": "Units of Measure", "description": "Per-product unit conversions"},
    {"name": "Stock Reservations", "description": "Soft holds on stock for reference documents"},
    {"name": "Serial Numbers", "description": "Unit-level tracking of serialized products"},
    {"name": "Quality Control", "description": "QC holds and damage assessments"},
    {"name": "Pick Lists", "description": "Pick documents and line picking"},
    {"name": "Physical Count", "description": "Count variance evaluation and adjustments"},
]

API_DESCRIPTION = """
Multi-tenant warehouse stock core.

Every `/api/v1` request must carry `X-Tenant-ID`; `X-User-ID` is recorded as
the acting user on writes.

| Code | Description |
|------|-------------|
| 400 | Bad Request - Missing or invalid tenant |
| 404 | Not Found - Resource doesn't exist |
| 409 | Conflict - Insufficient stock or invalid state transition |
| 422 | Unprocessable Entity - Validation failed |
| 503 | Service Unavailable - Stock store unreachable |
"""

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=API_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(tenant_middleware)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    """Store errors not absorbed by a service map to 503."""
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={
            "error": "Stock store unavailable",
            "type": type(exc).__name__,
            "path": str(request.url.path),
            "method": request.method,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return error information; tracebacks only in DEBUG."""
    if isinstance(exc, HTTPException):
        status_code = exc.status_code
        error_message = exc.detail
    else:
        status_code = 500
        error_message = str(exc)
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")

    error_detail = {
        "error": error_message,
        "type": type(exc).__name__,
        "path": str(request.url.path),
        "method": request.method,
    }
    if settings.DEBUG:
        error_detail["traceback"] = traceback.format_exc()

    return JSONResponse(status_code=status_code, content=error_detail)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check with database connectivity."""
    from sqlalchemy import text

    health_status = {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "checks": {},
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    health_status["checks"]["scheduler"] = get_job_status()

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }
