from parking_qr.services.owner_directory import OwnerDirectory, OwnerInfo, TierCheck
from parking_qr.services.code_registry import CodeRegistry
from parking_qr.services.telephony import (
    CallDetails, PlacedCall, ProviderError, TelephonyProvider, TwilioProvider,
    provider_from_settings
)
from parking_qr.services.call_bridge import (
    CallBridge, CallInitiation, CallState, build_connect_twiml, log_call_status
)
