"""
Main FastAPI application for the Proofline correction service.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from proofline.config import settings
from proofline.database import check_db_connection
from proofline.routes import health, spellcheck
from proofline.middleware.logging import RequestLoggingMiddleware
from proofline.services.correction_provider import create_correction_provider
from proofline.services.correction_service import CorrectionService
from proofline.utils.logger import get_logger

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("Starting Proofline correction service")
    logger.info(f"Environment: {'DEBUG' if settings.DEBUG else 'PRODUCTION'}")

    db_connected = await check_db_connection()
    if db_connected:
        logger.info("Database connection established")
    else:
        logger.error("Failed to connect to database (ignore rules unavailable)")

    # Provider is required - app fails without a valid selection
    try:
        provider = create_correction_provider(settings.CORRECTION_PROVIDER)
    except ValueError as e:
        raise RuntimeError(str(e)) from e

    # One limiter and recent-query cache per process, owned by the service
    app.state.correction_service = CorrectionService(provider)
    logger.info(
        "Correction service initialized",
        provider=provider.get_provider_name(),
        rate_limit=f"{settings.CORRECTION_RATE_LIMIT_REQUESTS}/{settings.CORRECTION_RATE_LIMIT_WINDOW}s",
        recent_query_ttl=settings.RECENT_QUERY_TTL_SECONDS
    )

    yield

    logger.info("Shutting down Proofline correction service")
    app.state.correction_service = None


app = FastAPI(
    title="Proofline Correction Service",
    description="Cost-controlled spelling and grammar checks for rich-text editors",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(health.router, tags=["Health"])
app.include_router(
    spellcheck.router,
    prefix="/api/v1",
    tags=["Spellcheck"]
)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {
        "message": "Proofline Correction Service",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "proofline.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
