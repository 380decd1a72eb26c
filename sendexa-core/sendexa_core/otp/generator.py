"""
OTP Generator
=============
Code generation and construction of fresh verification records.
"""

import secrets
import string
from datetime import datetime, timedelta
from typing import Tuple

from .models import OTPConfig, PinType, VerificationCode
from .hashing import hash_code, new_salt

# Exclude confusing characters (0, O, 1, l, I)
ALPHANUMERIC_CHARS = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
ALPHABETIC_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ"


def generate_code(length: int = 6, pin_type: PinType = PinType.NUMERIC) -> str:
    """
    Generate a secure random code.

    Args:
        length: Number of characters/digits
        pin_type: Character set to draw from

    Returns:
        Code string of exactly ``length`` characters
    """
    if pin_type == PinType.NUMERIC:
        return str(secrets.randbelow(10 ** length)).zfill(length)

    chars = ALPHANUMERIC_CHARS if pin_type == PinType.ALPHANUMERIC else ALPHABETIC_CHARS
    return "".join(secrets.choice(chars) for _ in range(length))


def is_well_formed(code: str, config: OTPConfig) -> bool:
    """Check a submitted code against the configured length and charset."""
    if len(code) != config.length:
        return False
    if config.pin_type == PinType.NUMERIC:
        return all(c in string.digits for c in code)
    if config.pin_type == PinType.ALPHABETIC:
        return code.isascii() and code.isalpha()
    return code.isascii() and code.isalnum()


def build_verification_code(
    phone: str,
    config: OTPConfig,
    now: datetime,
) -> Tuple[str, VerificationCode]:
    """
    Create a new code and the record that stores it.

    Args:
        phone: Normalized phone number
        config: OTP configuration
        now: Issue time

    Returns:
        Tuple of (plain_code, record)
    """
    code = generate_code(config.length, config.pin_type)
    salt = new_salt()

    record = VerificationCode(
        phone=phone,
        code_hash=hash_code(code, salt, phone),
        salt=salt,
        created_at=now,
        expires_at=now + timedelta(seconds=config.ttl_seconds),
        validation_attempts=0,
        max_validation_attempts=config.max_attempts,
    )
    return code, record
