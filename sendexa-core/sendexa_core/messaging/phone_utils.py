"""
Phone Utilities
===============
Functions for phone number validation, normalization and masking.
"""

import re

from sendexa_core.errors import ValidationError

E164_PATTERN = re.compile(r'^\+[1-9]\d{7,14}$')


def sanitize_sender_id(sender_id: str, max_length: int = 11) -> str:
    """
    Sanitize an alphanumeric sender ID.

    Rules:
    - Max 11 characters for alphanumeric
    - Only letters, numbers and spaces
    - Must start with a letter

    Args:
        sender_id: Raw sender ID
        max_length: Maximum length (default 11)

    Returns:
        Sanitized sender ID
    """
    clean = re.sub(r'[^a-zA-Z0-9 ]', '', sender_id).strip()

    if clean and not clean[0].isalpha():
        clean = 'A' + clean

    return clean[:max_length]


def validate_e164(phone: str) -> bool:
    """
    Validate E.164 phone number format.

    Args:
        phone: Phone number

    Returns:
        True if valid E.164 format
    """
    return bool(E164_PATTERN.match(phone))


def normalize_phone(phone: str, default_country: str = "233") -> str:
    """
    Normalize a phone number to E.164 format.

    Local numbers with a trunk ``0`` prefix and numbers written without
    their country code get ``default_country`` prepended.

    Args:
        phone: Raw phone number
        default_country: Default country code (without +)

    Returns:
        E.164 formatted number

    Raises:
        ValidationError: If the result is not a valid E.164 number
    """
    if not isinstance(phone, str) or not phone.strip():
        raise ValidationError(message="Phone number is required")

    raw = phone.strip()
    if re.search(r'[^\d\s()+.\-]', raw):
        raise ValidationError(message="Phone number contains invalid characters")

    digits = re.sub(r'\D', '', raw)

    if raw.startswith('+') or raw.startswith('00'):
        digits = digits[2:] if raw.startswith('00') else digits
    elif digits.startswith('0'):
        digits = default_country + digits[1:]
    elif not digits.startswith(default_country):
        digits = default_country + digits

    normalized = f"+{digits}"
    if not validate_e164(normalized):
        raise ValidationError(message="Invalid phone number")
    return normalized


def mask_phone(phone: str) -> str:
    """Mask all but the last four digits, for logs."""
    if len(phone) <= 4:
        return "*" * len(phone)
    return "*" * (len(phone) - 4) + phone[-4:]
