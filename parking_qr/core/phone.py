"""
Phone and email helpers shared by validation, the call bridge and logging
"""

import re

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-\+\(\)]+$")
MIN_PHONE_DIGITS = 10


def digits_only(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email))


def is_valid_phone(phone: str) -> bool:
    """Loose check for human-entered numbers with at least ten digits"""
    if not phone or not PHONE_RE.match(phone):
        return False
    return len(digits_only(phone)) >= MIN_PHONE_DIGITS


def to_dialable(phone: str) -> str:
    """Normalize to `+digits`, the form Twilio dials.

    Returns an empty string when the input carries no digits at all.
    """
    digits = digits_only(phone)
    return f"+{digits}" if digits else ""


def mask_phone(phone: str) -> str:
    """Keep the first three and last two digits for log lines"""
    digits = digits_only(phone)
    if len(digits) <= 5:
        return "*" * len(digits)
    return f"{digits[:3]}{'*' * (len(digits) - 5)}{digits[-2:]}"
