"""
Schemas for API responses and requests
"""

from parking_qr.schemas.common import ApiResponse, CamelModel
from parking_qr.schemas.owner import OwnerSummary, UpgradeRequest, UpgradeResponse, UserInfoResponse
from parking_qr.schemas.code_record import (
    CodeRecordRead, QRGenerateRequest, QRGenerateResponse, QRInfoResponse, QRListResponse
)
from parking_qr.schemas.call import CallDetailsResponse, CallInitiateRequest, CallInitiateResponse

__all__ = [
    "ApiResponse",
    "CamelModel",
    "CallDetailsResponse",
    "CallInitiateRequest",
    "CallInitiateResponse",
    "CodeRecordRead",
    "OwnerSummary",
    "QRGenerateRequest",
    "QRGenerateResponse",
    "QRInfoResponse",
    "QRListResponse",
    "UpgradeRequest",
    "UpgradeResponse",
    "UserInfoResponse",
]
