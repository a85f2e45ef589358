"""Villa Rates: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from villarates.api.v1.availability import router as availability_router
from villarates.api.v1.bookings import router as bookings_router
from villarates.api.v1.calendar import router as calendar_router
from villarates.api.v1.calendar import validation_router as calendar_validation_router
from villarates.api.v1.listings import router as listings_router
from villarates.api.v1.properties import router as properties_router
from villarates.api.v1.seasons import router as seasons_router
from villarates.api.v1.sync import router as sync_router
from villarates.config import settings
from villarates.exceptions import VillaRatesError

# Configure root logger so all villarates.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    yield
    # Shutdown: dispose engine connections
    from villarates.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Availability and seasonal pricing engine for vacation rentals.",
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


@app.exception_handler(VillaRatesError)
async def villarates_error_handler(request: Request, exc: VillaRatesError) -> JSONResponse:
    """Translate domain errors into ``{"detail": ...}`` with the error's status."""
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Routers
app.include_router(properties_router)
app.include_router(seasons_router)
app.include_router(bookings_router)
app.include_router(calendar_router)
app.include_router(calendar_validation_router)
app.include_router(availability_router)
app.include_router(listings_router)
app.include_router(sync_router)


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
