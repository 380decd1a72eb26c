"""
OTP Primitives
==============
Code generation, hashing and status derivation for phone verification.
"""

from .models import PinType, CodeStatus, OTPConfig, VerificationCode, OTPResult, utcnow
from .hashing import hash_code, code_matches, new_salt
from .generator import generate_code, is_well_formed, build_verification_code
from .status import calculate_code_status, STATUS_ERRORS

__all__ = [
    # Models
    "PinType",
    "CodeStatus",
    "OTPConfig",
    "VerificationCode",
    "OTPResult",
    "utcnow",
    # Hashing
    "hash_code",
    "code_matches",
    "new_salt",
    # Generator
    "generate_code",
    "is_well_formed",
    "build_verification_code",
    # Status
    "calculate_code_status",
    "STATUS_ERRORS",
]
