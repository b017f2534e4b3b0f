"""
Users API endpoints
"""

from fastapi import APIRouter, Depends

from parking_qr.core.dependencies import get_owner_directory
from parking_qr.schemas import UpgradeRequest, UpgradeResponse, UserInfoResponse
from parking_qr.services import OwnerDirectory

router = APIRouter()


@router.get("/{email}", response_model=UserInfoResponse, response_model_exclude_none=True)
def get_user_info(
    email: str,
    directory: OwnerDirectory = Depends(get_owner_directory),
):
    """Plan and QR count for an email; unknown emails report the free defaults"""
    info = directory.get_info(email)
    return UserInfoResponse(
        message="User info retrieved successfully",
        exists=info.exists,
        email=info.email,
        name=info.name,
        plan=info.plan,
        qr_count=info.qr_count,
    )


@router.post("/upgrade", response_model=UpgradeResponse)
def upgrade_to_premium(
    payload: UpgradeRequest,
    directory: OwnerDirectory = Depends(get_owner_directory),
):
    """Upgrade to premium (payment verification is not wired in yet)"""
    owner = directory.upgrade(payload.email)

    if payload.payment_token:
        message = "Successfully upgraded to premium"
    else:
        message = "Successfully upgraded to premium (demo mode)"

    return UpgradeResponse(message=message, email=owner.email, plan=owner.plan)
