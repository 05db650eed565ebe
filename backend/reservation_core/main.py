"""
Seat Reservation API - Main Application Entry Point

Seat-hold and booking concurrency core:
- Per-seat holds in Redis with sliding TTL (SET NX + owner-checked refresh)
- Short-lived checkout sessions wrapping held seats
- Transactional finalize with conditional UPDATE ... WHERE status = 'available'
- Structured logging with request correlation, Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reservation_core.api.errors import register_exception_handlers
from reservation_core.api.middleware import RequestLoggingMiddleware
from reservation_core.api.router import api_router
from reservation_core.core.config import get_settings
from reservation_core.core.logging import get_logger, setup_logging
from reservation_core.core.metrics import metrics_endpoint
from reservation_core.infrastructure.store_factory import close_store, get_store

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        store_backend=settings.STORE_BACKEND,
    )

    # Holds cannot be served without the store, but a transient outage at
    # boot should not crash the worker: requests will fail with 503 instead.
    store = get_store()
    if await store.ping():
        logger.info("store_ready")
    else:
        logger.warning("store_unavailable", message="Hold operations will fail until the store is reachable")

    yield

    await close_store()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Seat holds, checkout sessions and transactional booking",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    store_ok = await get_store().ping()
    return {
        "status": "healthy" if store_ok else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "store": "connected" if store_ok else "unreachable",
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
