"""
QR code API endpoints
"""

from fastapi import APIRouter, Depends, Response
import structlog

from parking_qr.core.config import Settings, get_settings
from parking_qr.core.dependencies import get_base_url, get_code_registry, get_owner_directory
from parking_qr.core.errors import ForbiddenError
from parking_qr.schemas import (
    CodeRecordRead, OwnerSummary, QRGenerateRequest, QRGenerateResponse,
    QRInfoResponse, QRListResponse
)
from parking_qr.services import CodeRegistry, OwnerDirectory

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/generate", response_model=QRGenerateResponse)
def generate_qr_code(
    payload: QRGenerateRequest,
    base_url: str = Depends(get_base_url),
    directory: OwnerDirectory = Depends(get_owner_directory),
    registry: CodeRegistry = Depends(get_code_registry),
):
    """
    Generate a QR code record for a vehicle owner

    Steps:
    1. Resolve the owner by email, creating a free-tier owner on first contact
    2. Check the owner's plan limit
    3. Persist the record with its public scan URL
    """
    owner = directory.resolve_or_create(payload.email, payload.name)

    check = directory.can_create(owner, registry.count_for(owner.id))
    if not check.allowed:
        logger.info(f"Plan limit reached for owner {owner.id}: {check.current}/{check.limit}")
        raise ForbiddenError("Free plan limit reached. Upgrade to premium for unlimited QR codes.")

    record = registry.create(
        owner.id,
        name=payload.name,
        email=payload.email,
        address=payload.address,
        phone=payload.phone,
        base_url=base_url,
    )

    return QRGenerateResponse(
        message="QR code generated successfully",
        qr_code=CodeRecordRead.model_validate(record),
        user=OwnerSummary(
            email=owner.email,
            name=owner.name,
            plan=owner.plan,
            qr_count=registry.count_for(owner.id),
        ),
    )


@router.get("/user/{email}", response_model=QRListResponse)
def list_owner_qr_codes(
    email: str,
    directory: OwnerDirectory = Depends(get_owner_directory),
    registry: CodeRegistry = Depends(get_code_registry),
):
    """All QR codes generated for an email"""
    owner = directory.find(email)
    if owner is None:
        return QRListResponse(message="No QR codes found", qr_codes=[])

    records = registry.list_for_owner(owner.id)
    return QRListResponse(
        message="QR codes retrieved successfully",
        qr_codes=[CodeRecordRead.model_validate(r) for r in records],
    )


@router.get("/{qr_id}/image")
def get_qr_code_image(
    qr_id: str,
    registry: CodeRegistry = Depends(get_code_registry),
):
    """PNG rendering of the QR code"""
    record = registry.get_by_id(qr_id)
    return Response(
        content=registry.render_png(record),
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.get("/{qr_id}", response_model=QRInfoResponse, response_model_exclude_none=True)
def get_qr_code_info(
    qr_id: str,
    registry: CodeRegistry = Depends(get_code_registry),
    settings: Settings = Depends(get_settings),
):
    """Public info for the scan page"""
    record = registry.get_by_id(qr_id)
    return QRInfoResponse(
        message="QR code info retrieved successfully",
        id=record.id,
        name=record.name,
        email=record.email,
        address=record.address,
        created_at=record.created_at,
        phone=record.phone if settings.PUBLIC_QR_INCLUDES_PHONE else None,
    )
