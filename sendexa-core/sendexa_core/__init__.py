"""
Sendexa Core
============
Phone number login by one-time code for the Sendexa platform.
"""

__version__ = "1.0.0"

# Errors
from sendexa_core.errors import (
    OTPErrorType,
    OTPError,
    ValidationError,
    StateError,
    DeliveryError,
    TransientInfraError,
)

# OTP
from sendexa_core.otp import (
    PinType,
    CodeStatus,
    OTPConfig,
    VerificationCode,
    OTPResult,
    generate_code,
    calculate_code_status,
)

# Messaging
from sendexa_core.messaging import (
    normalize_phone,
    validate_e164,
    sanitize_sender_id,
    mask_phone,
    render_otp_message,
)

# Notifiers
from sendexa_core.notifier import (
    Notifier,
    SendResult,
    MessageStatus,
    SendexaNotifier,
)

# Stores
from sendexa_core.store import (
    CodeStore,
    InMemoryCodeStore,
    RedisCodeStore,
    SQLCodeStore,
)

# Service
from sendexa_core.service import OTPService
from sendexa_core.config import ServiceConfig

__all__ = [
    # Errors
    "OTPErrorType",
    "OTPError",
    "ValidationError",
    "StateError",
    "DeliveryError",
    "TransientInfraError",
    # OTP
    "PinType",
    "CodeStatus",
    "OTPConfig",
    "VerificationCode",
    "OTPResult",
    "generate_code",
    "calculate_code_status",
    # Messaging
    "normalize_phone",
    "validate_e164",
    "sanitize_sender_id",
    "mask_phone",
    "render_otp_message",
    # Notifiers
    "Notifier",
    "SendResult",
    "MessageStatus",
    "SendexaNotifier",
    # Stores
    "CodeStore",
    "InMemoryCodeStore",
    "RedisCodeStore",
    "SQLCodeStore",
    # Service
    "OTPService",
    "ServiceConfig",
]
