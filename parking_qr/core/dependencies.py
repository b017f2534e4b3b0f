"""
FastAPI dependencies wiring the store, the provider and the services
"""

from typing import Optional

from fastapi import Depends, Request

from parking_qr.core.config import Settings, get_settings
from parking_qr.services import CallBridge, CodeRegistry, OwnerDirectory, TelephonyProvider
from parking_qr.store import RecordStore


def get_store(request: Request) -> RecordStore:
    """Store opened by the application lifespan"""
    return request.app.state.store


def get_provider(request: Request) -> Optional[TelephonyProvider]:
    """Telephony provider, or None when running in demo mode"""
    return getattr(request.app.state, "provider", None)


def get_base_url(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Public scheme and host for QR targets and provider callbacks"""
    if settings.BASE_URL:
        return settings.BASE_URL.rstrip("/")
    return str(request.base_url).rstrip("/")


def get_owner_directory(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> OwnerDirectory:
    return OwnerDirectory(
        store,
        free_tier_limit=settings.FREE_TIER_QR_LIMIT,
        enforce_limits=settings.ENFORCE_TIER_LIMITS,
    )


def get_code_registry(store: RecordStore = Depends(get_store)) -> CodeRegistry:
    return CodeRegistry(store)


def get_call_bridge(
    registry: CodeRegistry = Depends(get_code_registry),
    provider: Optional[TelephonyProvider] = Depends(get_provider),
    settings: Settings = Depends(get_settings),
) -> CallBridge:
    return CallBridge(registry, provider, api_prefix=settings.API_PREFIX)
