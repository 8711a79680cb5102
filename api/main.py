"""
Guestflow - Main FastAPI Application.

REST layer over the guest submission orchestrator: trigger a run, read
statistics, check health.
"""
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import current_orchestrator, reset_dependencies
from api.routes import health, runs
from core.infrastructure.database.lifecycle import close_database
from guestflow_sdk.logging import configure_logging, get_logger


configure_logging()
logger = get_logger(__name__)


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Guestflow - Guest Submission API",
    description="""
    Submits guest registrations from the intake sheet to the Sakani portal.

    Features:
    - On-demand processing runs (one at a time)
    - Cumulative processing statistics
    - Health and readiness checks
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()
    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"← {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )
    return response


# =============================================================================
# GLOBAL EXCEPTION HANDLER
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "path": request.url.path
        }
    )


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("🚀 Guestflow API starting up...")
    logger.info("📚 Swagger UI available at: /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    orchestrator = current_orchestrator()
    if orchestrator is not None:
        orchestrator.stop()
    await close_database()
    reset_dependencies()
    logger.info("👋 Guestflow API shutting down...")


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(
    health.router,
    tags=["Health"]
)

app.include_router(
    runs.router,
    prefix="/api/v1/runs",
    tags=["Runs"]
)


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "message": "Guestflow - Guest Submission API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
