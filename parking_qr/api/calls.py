"""
Masked call endpoints and Twilio webhooks

/initiate is called by the scan page. /connect and /status are fetched by
Twilio during the call and never answer with a client error.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import PlainTextResponse
from starlette.convertors import Convertor, register_url_convertor
from typing import Optional
import structlog

from parking_qr.core.dependencies import get_base_url, get_call_bridge, get_provider
from parking_qr.core.phone import mask_phone
from parking_qr.schemas import CallDetailsResponse, CallInitiateRequest, CallInitiateResponse
from parking_qr.services import CallBridge, TelephonyProvider, build_connect_twiml, log_call_status

logger = structlog.get_logger(__name__)
router = APIRouter()

TWIML_MEDIA_TYPE = "application/xml"


class CallSidConvertor(Convertor):
    """Twilio call SIDs: CA followed by 32 hex characters"""

    regex = "CA[0-9a-fA-F]{32}"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("call_sid", CallSidConvertor())


@router.post("/initiate", response_model=CallInitiateResponse, response_model_exclude_none=True)
def initiate_call(
    payload: CallInitiateRequest,
    base_url: str = Depends(get_base_url),
    bridge: CallBridge = Depends(get_call_bridge),
):
    """
    Start a masked call to the owner of a QR code

    Without telephony credentials the owner's number is returned directly
    (demo). With credentials but no caller phone, the client is asked for
    one. Otherwise Twilio rings the caller and returns immediately.
    """
    result = bridge.initiate(payload.qr_id, base_url=base_url, caller_phone=payload.caller_phone)
    return CallInitiateResponse(
        message=result.message,
        requires_phone_number=True if result.requires_phone_number else None,
        owner_phone=result.owner_phone,
        masked_number=result.masked_number,
        call_sid=result.call_sid,
        status=result.status,
        note=result.note,
    )


@router.api_route("/connect/{owner_phone}", methods=["GET", "POST"])
async def connect_call(
    owner_phone: str,
    provider: Optional[TelephonyProvider] = Depends(get_provider),
):
    """Twilio webhook - TwiML that bridges the answered caller to the owner"""
    if provider is None:
        logger.error("Connect webhook hit while telephony is not configured")
        return PlainTextResponse(
            "Telephony service not available",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    logger.info("Serving connect TwiML", owner=mask_phone(owner_phone))
    twiml = build_connect_twiml(owner_phone, provider.caller_id)
    return Response(content=twiml, media_type=TWIML_MEDIA_TYPE)


@router.post("/status")
async def call_status(request: Request):
    """Twilio status callback - logged and always acknowledged"""
    try:
        form = await request.form()
        event = dict(form)
    except Exception as e:
        logger.warning(f"Unreadable call status callback: {e}")
        event = {}

    log_call_status(event)
    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)


@router.get("/{call_sid:call_sid}", response_model=CallDetailsResponse)
def get_call_details(
    call_sid: str,
    bridge: CallBridge = Depends(get_call_bridge),
):
    """Current status of a call placed through Twilio"""
    details = bridge.lookup(call_sid)
    return CallDetailsResponse(
        message="Call status retrieved successfully",
        sid=details.sid,
        status=details.status,
        duration=details.duration,
        start_time=details.start_time,
        end_time=details.end_time,
    )
