"""
Code Status
===========
Derives the lifecycle status of a stored verification code.
"""

from datetime import datetime

from sendexa_core.errors import OTPErrorType

from .models import CodeStatus, VerificationCode

STATUS_ERRORS = {
    CodeStatus.USED: OTPErrorType.ALREADY_USED,
    CodeStatus.BLOCKED: OTPErrorType.MAX_ATTEMPTS_EXCEEDED,
    CodeStatus.EXPIRED: OTPErrorType.EXPIRED_OTP,
}


def calculate_code_status(record: VerificationCode, now: datetime) -> CodeStatus:
    """
    Derive the status of a code at ``now``.

    Checked in order: used, blocked (attempt budget spent), expired.
    Anything else is active.
    """
    if record.is_used:
        return CodeStatus.USED

    if record.is_blocked:
        return CodeStatus.BLOCKED

    if record.is_expired(now):
        return CodeStatus.EXPIRED

    return CodeStatus.ACTIVE
