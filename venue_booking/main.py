"""Venue Booking — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from venue_booking.api.errors import register_error_handlers
from venue_booking.api.routes.auth import router as auth_router
from venue_booking.api.routes.bookings import router as bookings_router
from venue_booking.api.routes.venues import router as venues_router
from venue_booking.config import settings

# Configure root logger so all venue_booking.* loggers output to stderr.
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    if settings.venue_reference_fallback:
        logger.warning("Venue reference fallback is enabled; unknown venues will be replaced or auto-created")
    if settings.tolerate_booking_permission_errors:
        logger.warning("Booking permission errors are tolerated; refused bookings get placeholder ids")
    yield
    # Shutdown: dispose engine connections
    from venue_booking.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Wedding venue discovery, pricing, and booking API.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(auth_router)
app.include_router(venues_router)
app.include_router(bookings_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("venue_booking.main:app", host=settings.host, port=settings.port, reload=settings.debug)
