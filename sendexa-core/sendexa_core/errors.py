"""
OTP Errors
==========
Closed error taxonomy shared between the OTP core and the HTTP layer.

The HTTP status for each error type is only looked up at the transport
boundary (see ``sendexa_core.api``).
"""

from enum import Enum
from typing import Any, Dict, Optional


class OTPErrorType(str, Enum):
    """Error kinds surfaced to callers as ``errorType``."""
    OTP_ALREADY_ACTIVE = "OTP_ALREADY_ACTIVE"
    SENDER_ID_ERROR = "SENDER_ID_ERROR"
    INVALID_OTP = "INVALID_OTP"
    EXPIRED_OTP = "EXPIRED_OTP"
    MAX_ATTEMPTS_EXCEEDED = "MAX_ATTEMPTS_EXCEEDED"
    ALREADY_USED = "ALREADY_USED"
    RESEND_COOLDOWN = "RESEND_COOLDOWN"
    INVALID_REQUEST = "INVALID_REQUEST"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    CODE_NOT_FOUND = "CODE_NOT_FOUND"


DEFAULT_MESSAGES: Dict[OTPErrorType, str] = {
    OTPErrorType.OTP_ALREADY_ACTIVE: "An OTP was recently sent. Please wait before requesting a new one.",
    OTPErrorType.SENDER_ID_ERROR: "Service configuration error. Please contact support.",
    OTPErrorType.INVALID_OTP: "Invalid verification code",
    OTPErrorType.EXPIRED_OTP: "Verification code has expired",
    OTPErrorType.MAX_ATTEMPTS_EXCEEDED: "Too many failed attempts. Please request a new code.",
    OTPErrorType.ALREADY_USED: "Verification code has already been used",
    OTPErrorType.RESEND_COOLDOWN: "Please wait before requesting a new code",
    OTPErrorType.INVALID_REQUEST: "Invalid request",
    OTPErrorType.SERVICE_UNAVAILABLE: "Service temporarily unavailable. Please try again.",
    OTPErrorType.CODE_NOT_FOUND: "No verification code found for this phone number",
}


class OTPError(Exception):
    """Base exception for all OTP failures."""

    default_type: OTPErrorType = OTPErrorType.INVALID_REQUEST

    def __init__(
        self,
        error_type: Optional[OTPErrorType] = None,
        message: Optional[str] = None,
        details: Any = None,
    ):
        self.error_type = error_type or self.default_type
        self.message = message or DEFAULT_MESSAGES[self.error_type]
        self.details = details
        super().__init__(f"[{self.error_type.value}] {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "errorType": self.error_type.value,
            "message": self.message,
        }


class ValidationError(OTPError):
    """Malformed phone or code, rejected before touching storage."""
    default_type = OTPErrorType.INVALID_REQUEST


class StateError(OTPError):
    """The stored code is in a state that refuses the operation."""
    default_type = OTPErrorType.INVALID_OTP


class DeliveryError(OTPError):
    """The notifier could not deliver the code. The issued record is kept."""
    default_type = OTPErrorType.SENDER_ID_ERROR


class TransientInfraError(OTPError):
    """Storage is unavailable. Safe for the caller to retry."""
    default_type = OTPErrorType.SERVICE_UNAVAILABLE
