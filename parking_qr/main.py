"""
Parking QR - Main Application Entry Point
Per-vehicle QR codes with masked calls to the owner
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import structlog

from parking_qr.api import calls, qr_codes, users
from parking_qr.core.config import get_settings
from parking_qr.core.errors import register_error_handlers
from parking_qr.core.logging import configure_logging
from parking_qr.services import provider_from_settings
from parking_qr.store import create_store

settings = get_settings()
configure_logging(settings)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    settings = get_settings()
    logger.info(f"Initializing {settings.APP_NAME} backend", environment=settings.ENVIRONMENT)

    store = create_store(settings)
    store.open()
    app.state.store = store
    app.state.provider = provider_from_settings(settings)
    logger.info(
        "Record store ready",
        backend=store.backend_name,
        telephony=app.state.provider is not None,
    )

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME} backend")
    store.close()


# Create FastAPI application
app = FastAPI(
    title="Parking QR API",
    description="Vehicle QR codes that let anyone call the owner without seeing their number",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(users.router, prefix=f"{settings.API_PREFIX}/user", tags=["users"])
app.include_router(qr_codes.router, prefix=f"{settings.API_PREFIX}/qr", tags=["qr"])
app.include_router(calls.router, prefix=f"{settings.API_PREFIX}/call", tags=["calls"])


def health_payload() -> dict:
    return {
        "status": "ok",
        "service": "parking-qr-api",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return health_payload()


@app.get(f"{settings.API_PREFIX}/health")
async def api_health_check():
    """Health check under the API prefix"""
    return health_payload()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Parking QR API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "parking_qr.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
        log_level="info",
    )
