"""
Messaging Utilities
===================
Phone number handling and OTP message rendering.
"""

from .phone_utils import sanitize_sender_id, validate_e164, normalize_phone, mask_phone
from .templates import describe_ttl, render_otp_message

__all__ = [
    # Phone
    "sanitize_sender_id",
    "validate_e164",
    "normalize_phone",
    "mask_phone",
    # Templates
    "describe_ttl",
    "render_otp_message",
]
