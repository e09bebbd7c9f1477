"""
Event Roster - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from app.api import applications, slots
from app.api.errors import error_response
from app.application.review_service import ReviewService
from app.config import settings
from app.db import connection, init_db, close_db
from app.domain.entities import AlreadyInitializedError, DomainError
from app.domain.unit_of_work import get_unit_of_work
from app.version import __version__
import logging
import re


# Custom logging filter to redact applicant data
class PersonalDataFilter(logging.Filter):
    """Filter to redact inline images and e-mail addresses from logs"""

    DATA_URL_PATTERN = re.compile(r"(data:image/[a-z+.-]+;base64,)[A-Za-z0-9+/=]+")
    EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")

    def filter(self, record):
        if hasattr(record, 'msg'):
            msg = str(record.msg)

            # Base64 payloads are large and identify the applicant
            msg = self.DATA_URL_PATTERN.sub(r"\1[REDACTED]", msg)

            # Keep the domain for debugging, drop the local part
            msg = self.EMAIL_PATTERN.sub(r"[REDACTED]@\1", msg)

            record.msg = msg
        return True


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Add filter to all loggers
for handler in logging.root.handlers:
    handler.addFilter(PersonalDataFilter())

logger = logging.getLogger(__name__)


async def seed_roster_if_empty():
    """Create the six open slots on first start (SEED_SLOTS_ON_STARTUP)."""
    async with get_unit_of_work(connection.async_session_maker()) as uow:
        service = ReviewService(uow)
        existing = await service.list_slots()
        if existing:
            logger.info(f"🪑 Roster present ({len(existing)} slots)")
            return
        try:
            await service.initialize_slots()
        except AlreadyInitializedError:
            # Another worker seeded the roster between our check and insert
            logger.info("🪑 Roster seeded by another worker")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown"""
    # Startup
    logger.info("🚀 Starting Event Roster")
    logger.info(f"📦 Version: {__version__}")
    logger.info(f"📝 Environment: {settings.environment}")

    # Initialize database
    await init_db()

    if settings.seed_slots_on_startup:
        await seed_roster_if_empty()

    logger.info("✅ Configuration loaded successfully")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_db()


app = FastAPI(
    title="Event Roster",
    description="Leader/Co-Leader applications for a fixed roster of six slots",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ============================================
# CORS Middleware Configuration
# ============================================
# The landing page and admin view are served from a separate frontend origin

dev_origins = [
    "http://localhost:3000",  # Frontend dev server
    "http://127.0.0.1:3000",
]

# Set CORS_ORIGINS env var as comma-separated list: "https://example.com,https://www.example.com"
production_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

allowed_origins = dev_origins + production_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["*"],
)

logger.info(f"✅ CORS configured for origins: {allowed_origins}")


# ============================================
# Error handlers
# ============================================

@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Render domain errors as {"error", "code"}"""
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors for debugging"""
    logger.warning(f"Validation error for {request.method} {request.url.path}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Request validation failed",
            "code": "VALIDATION_ERROR",
            "detail": jsonable_errors(exc),
        }
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last resort: log with traceback, never leak internals to the client"""
    logger.error(f"Unhandled error for {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation error details without the raw input (may contain uploads)"""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# Register roster API routes
app.include_router(slots.router, prefix="/api", tags=["slots"])
app.include_router(applications.router, prefix="/api", tags=["applications"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": "Event Roster",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
