"""
Telephony provider interface and its Twilio implementation
Places the outbound leg of a masked call and looks up call status
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import requests
import structlog
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from parking_qr.core.config import Settings
from parking_qr.core.phone import mask_phone

logger = structlog.get_logger(__name__)

STATUS_CALLBACK_EVENTS = ["initiated", "ringing", "answered", "completed"]


class ProviderError(Exception):
    """The provider rejected the request or could not be reached"""


@dataclass(frozen=True)
class PlacedCall:
    sid: str
    status: str


@dataclass(frozen=True)
class CallDetails:
    sid: str
    status: str
    duration: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class TelephonyProvider(ABC):
    """What the call bridge needs from a telephony service"""

    # The service's own number, presented as caller ID on both legs
    caller_id: str

    @abstractmethod
    def place_call(self, to: str, answer_url: str, status_callback_url: str) -> PlacedCall:
        """Ring `to`; when answered, the provider fetches `answer_url` for instructions"""

    @abstractmethod
    def fetch_call(self, call_sid: str) -> Optional[CallDetails]:
        """None when the provider does not know the call"""


class TwilioProvider(TelephonyProvider):
    """Twilio Programmable Voice"""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        phone_number: str,
        timeout: float = 10.0,
        client: Optional[Client] = None,
    ):
        """
        Initialize Twilio provider

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            phone_number: Twilio number shown to both parties
            timeout: HTTP timeout in seconds for every Twilio API request
            client: Pre-built client, mainly for tests
        """
        if not (account_sid and auth_token and phone_number):
            raise ValueError("TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER are required")

        self.caller_id = phone_number
        self.timeout = timeout
        self.client = client or Client(
            account_sid,
            auth_token,
            http_client=TwilioHttpClient(timeout=timeout),
        )

    def place_call(self, to: str, answer_url: str, status_callback_url: str) -> PlacedCall:
        try:
            call = self.client.calls.create(
                to=to,
                from_=self.caller_id,
                url=answer_url,
                method="GET",
                status_callback=status_callback_url,
                status_callback_event=STATUS_CALLBACK_EVENTS,
                status_callback_method="POST",
            )
        except TwilioRestException as e:
            logger.error(f"Twilio rejected call: {e.msg}", twilio_code=e.code, http_status=e.status, to=mask_phone(to))
            raise ProviderError(f"Twilio error {e.code}: {e.msg}") from e
        except (TwilioException, requests.RequestException) as e:
            logger.error(f"Twilio request failed: {e}", to=mask_phone(to))
            raise ProviderError(str(e)) from e

        logger.info(f"Twilio call created: {call.sid}", status=call.status, to=mask_phone(to))
        return PlacedCall(sid=call.sid, status=call.status)

    def fetch_call(self, call_sid: str) -> Optional[CallDetails]:
        try:
            call = self.client.calls(call_sid).fetch()
        except TwilioRestException as e:
            if e.status == 404:
                return None
            logger.error(f"Error fetching call status: {e.msg}", call_sid=call_sid)
            raise ProviderError(f"Twilio error {e.code}: {e.msg}") from e
        except (TwilioException, requests.RequestException) as e:
            logger.error(f"Error fetching call status: {e}", call_sid=call_sid)
            raise ProviderError(str(e)) from e

        return CallDetails(
            sid=call.sid,
            status=call.status,
            duration=call.duration,
            start_time=call.start_time,
            end_time=call.end_time,
        )


def provider_from_settings(settings: Settings) -> Optional[TelephonyProvider]:
    """Twilio provider when credentials are configured, otherwise None (demo mode)"""
    if not settings.telephony_enabled:
        logger.warning("Twilio credentials missing, calls fall back to demo mode")
        return None
    return TwilioProvider(
        account_sid=settings.TWILIO_ACCOUNT_SID,
        auth_token=settings.TWILIO_AUTH_TOKEN,
        phone_number=settings.TWILIO_PHONE_NUMBER,
        timeout=settings.TWILIO_TIMEOUT_SECONDS,
    )
