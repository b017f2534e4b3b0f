"""
API routers
"""

from parking_qr.api import calls, qr_codes, users

__all__ = ["calls", "qr_codes", "users"]
