"""
Call bridge - masked call orchestration

Flow:
1. Caller scans a QR code and asks to call the owner (initiate)
2. The provider rings the caller from the service number (Dialing)
3. When the caller answers, the provider fetches the connect script, which
   dials the owner as a second leg (Bridging)
4. The provider posts status events, which are only logged (StatusUpdate)

No call session state is kept between steps; everything the connect script
needs travels in its URL.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import quote

import structlog
from twilio.twiml.voice_response import VoiceResponse

from parking_qr.core.errors import NotFoundError, ProviderUnavailableError, UpstreamError, ValidationError
from parking_qr.core.phone import is_valid_phone, mask_phone, to_dialable
from parking_qr.services.code_registry import CodeRegistry
from parking_qr.services.telephony import CallDetails, ProviderError, TelephonyProvider

logger = structlog.get_logger(__name__)

CONNECT_MESSAGE = "Connecting you to the vehicle owner now. Please hold."
GOODBYE_MESSAGE = "The call has ended. Thank you."
UNREACHABLE_MESSAGE = "Sorry, the vehicle owner cannot be reached right now. Goodbye."

DEMO_NOTE = (
    "This is a demo. With telephony configured, the owner's phone number "
    "would never be revealed."
)


class CallState(str, Enum):
    DEMO = "demo"
    AWAITING_CALLER_PHONE = "awaiting_caller_phone"
    BRIDGING = "bridging"


@dataclass(frozen=True)
class CallInitiation:
    """Outcome of a call request, as returned to the scanning client"""
    state: CallState
    message: str
    owner_phone: Optional[str] = None
    masked_number: Optional[str] = None
    call_sid: Optional[str] = None
    status: Optional[str] = None
    note: Optional[str] = None

    @property
    def requires_phone_number(self) -> bool:
        return self.state == CallState.AWAITING_CALLER_PHONE


def connect_url(base_url: str, api_prefix: str, owner_phone: str) -> str:
    return f"{base_url.rstrip('/')}{api_prefix}/call/connect/{quote(owner_phone, safe='')}"


def status_callback_url(base_url: str, api_prefix: str) -> str:
    return f"{base_url.rstrip('/')}{api_prefix}/call/status"


def build_connect_twiml(owner_phone: str, caller_id: str) -> str:
    """
    Voice script the provider runs once the caller picks up

    Pure function of its inputs. The owner number is reduced to `+digits`
    before it is embedded and the TwiML builder escapes every text node and
    attribute, so request data cannot inject markup.
    """
    response = VoiceResponse()
    number = to_dialable(owner_phone)
    if not number:
        response.say(UNREACHABLE_MESSAGE, voice="alice")
        response.hangup()
        return str(response)

    response.say(CONNECT_MESSAGE, voice="alice")
    dial = response.dial(caller_id=caller_id, record="do-not-record")
    dial.number(number)
    response.say(GOODBYE_MESSAGE, voice="alice")
    return str(response)


def log_call_status(event: Mapping[str, Any]) -> None:
    """Record a provider status callback. No state transition depends on it."""
    logger.info(
        f"Call status update: {event.get('CallSid')} {event.get('CallStatus')}",
        call_sid=event.get("CallSid"),
        status=event.get("CallStatus"),
        duration=event.get("CallDuration"),
        direction=event.get("Direction"),
    )


class CallBridge:
    """Runs the Requested -> Demo | AwaitingCallerPhone | Dialing steps"""

    def __init__(self, registry: CodeRegistry, provider: Optional[TelephonyProvider], api_prefix: str = "/api"):
        self.registry = registry
        self.provider = provider
        self.api_prefix = api_prefix

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    def initiate(self, code_record_id: str, base_url: str, caller_phone: Optional[str] = None) -> CallInitiation:
        """
        Start a masked call for the QR code `code_record_id`

        Raises:
            NotFoundError: unknown QR code
            ValidationError: caller phone is malformed (only checked when dialing)
            UpstreamError: the provider could not place the call
        """
        record = self.registry.get_by_id(code_record_id)

        if self.provider is None:
            logger.warning(f"Telephony not configured, returning owner phone for {record.id} (demo)")
            return CallInitiation(
                state=CallState.DEMO,
                message="Call initiated successfully",
                owner_phone=record.phone,
                masked_number=record.phone,
                note=DEMO_NOTE,
            )

        if not caller_phone:
            return CallInitiation(
                state=CallState.AWAITING_CALLER_PHONE,
                message="Please provide your phone number to receive the call",
            )

        if not is_valid_phone(caller_phone):
            raise ValidationError("Valid phone number is required")

        return self._dial(record.id, record.phone, caller_phone, base_url)

    def _dial(self, record_id: str, owner_phone: str, caller_phone: str, base_url: str) -> CallInitiation:
        caller = to_dialable(caller_phone)
        owner = to_dialable(owner_phone)
        logger.info(
            f"Placing masked call for {record_id}",
            caller=mask_phone(caller),
            owner=mask_phone(owner),
        )

        try:
            placed = self.provider.place_call(
                to=caller,
                answer_url=connect_url(base_url, self.api_prefix, owner),
                status_callback_url=status_callback_url(base_url, self.api_prefix),
            )
        except ProviderError as e:
            logger.error(f"Masked call failed for {record_id}: {e}")
            raise UpstreamError("Call could not be initiated") from e

        return CallInitiation(
            state=CallState.BRIDGING,
            message="Call initiated. You will receive a call from our masked number shortly.",
            masked_number=self.provider.caller_id,
            call_sid=placed.sid,
            status=placed.status,
        )

    def lookup(self, call_sid: str) -> CallDetails:
        """
        Raises:
            ProviderUnavailableError: telephony not configured
            NotFoundError: the provider does not know the call
            UpstreamError: the provider could not be queried
        """
        if self.provider is None:
            raise ProviderUnavailableError()
        try:
            details = self.provider.fetch_call(call_sid)
        except ProviderError as e:
            raise UpstreamError("Call status could not be retrieved") from e
        if details is None:
            raise NotFoundError("Call")
        return details
