"""
OTP Service
===========
Phone login by one-time code: issue, verify and resend behind a cooldown.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional
import structlog

from sendexa_core.errors import (
    DeliveryError,
    OTPErrorType,
    StateError,
    ValidationError,
)
from sendexa_core.messaging import mask_phone, normalize_phone, render_otp_message, sanitize_sender_id
from sendexa_core.notifier import Notifier
from sendexa_core.otp import (
    CodeStatus,
    OTPConfig,
    OTPResult,
    STATUS_ERRORS,
    VerificationCode,
    build_verification_code,
    calculate_code_status,
    code_matches,
    is_well_formed,
    utcnow,
)
from sendexa_core.store import CodeStore

logger = structlog.get_logger(__name__)

# A conditional store update can lose to a concurrent request; re-evaluate once
_MAX_VERIFY_ROUNDS = 2


class OTPService:
    """
    Issues and verifies one-time codes bound to phone numbers.

    Exactly one record is kept per phone. Issuing replaces it, a failed
    comparison increments its attempt counter, and a successful one marks
    it used. Delivery happens after the record is stored and a delivery
    failure never rolls the record back.
    """

    def __init__(
        self,
        store: CodeStore,
        notifier: Notifier,
        config: Optional[OTPConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.config = config or OTPConfig()
        self.clock = clock
        self.sender_label = sanitize_sender_id(self.config.sender_id)

    def normalize(self, phone: str) -> str:
        return normalize_phone(phone, self.config.default_country_code)

    async def request_code(self, phone: str) -> OTPResult:
        """
        Issue a code for ``phone`` unless an active one already exists.

        A code whose delivery failed never reached the phone, so it does not
        block a new request and is superseded here.

        Raises:
            ValidationError: Malformed phone number
            StateError: OTP_ALREADY_ACTIVE
            DeliveryError: The code was stored but could not be sent
        """
        phone = self.normalize(phone)
        now = self.clock()

        current = await self.store.get(phone)
        if current is not None and calculate_code_status(current, now) == CodeStatus.ACTIVE:
            if current.delivery_failed:
                logger.info("Superseding undelivered OTP", phone=mask_phone(phone))
            else:
                logger.info("OTP request refused, active code exists", phone=mask_phone(phone))
                raise StateError(OTPErrorType.OTP_ALREADY_ACTIVE)

        await self._issue(phone, now)
        return OTPResult(success=True, message="OTP sent successfully")

    async def resend_code(self, phone: str) -> OTPResult:
        """
        Issue a fresh code, superseding the current one, once the cooldown has passed.

        Raises:
            ValidationError: Malformed phone number
            StateError: RESEND_COOLDOWN
            DeliveryError: The code was stored but could not be sent
        """
        phone = self.normalize(phone)
        now = self.clock()

        current = await self.store.get(phone)
        if current is not None:
            elapsed = (now - current.created_at).total_seconds()
            if elapsed < self.config.resend_cooldown_seconds:
                retry_after = int(self.config.resend_cooldown_seconds - elapsed) + 1
                logger.info(
                    "OTP resend refused, cooldown active",
                    phone=mask_phone(phone),
                    retry_after=retry_after,
                )
                raise StateError(
                    OTPErrorType.RESEND_COOLDOWN,
                    details={"retry_after": retry_after},
                )

        await self._issue(phone, now)
        return OTPResult(success=True, message="OTP resent successfully")

    async def verify_code(self, phone: str, code: str) -> OTPResult:
        """
        Check ``code`` against the stored code for ``phone``.

        Raises:
            ValidationError: Malformed phone number or code
            StateError: INVALID_OTP, EXPIRED_OTP, MAX_ATTEMPTS_EXCEEDED or ALREADY_USED
        """
        phone = self.normalize(phone)
        code = self._clean_code(code)

        for _ in range(_MAX_VERIFY_ROUNDS):
            now = self.clock()
            record = await self.store.get(phone)
            if record is None:
                logger.warning("OTP verification without issued code", phone=mask_phone(phone))
                raise StateError(OTPErrorType.INVALID_OTP)

            self._raise_for_status(record, now)

            if code_matches(code, record.salt, phone, record.code_hash):
                if await self.store.mark_used(phone, record.code_hash, now):
                    logger.info("OTP verified successfully", phone=mask_phone(phone))
                    return OTPResult(success=True, message="Verification successful")
                continue

            updated = await self.store.register_failed_attempt(phone, record.code_hash, now)
            if updated is None:
                continue

            logger.warning(
                "Invalid OTP attempt",
                phone=mask_phone(phone),
                kind="invalid",
                remaining=updated.attempts_remaining,
            )
            if updated.is_blocked:
                raise StateError(OTPErrorType.MAX_ATTEMPTS_EXCEEDED)
            raise StateError(OTPErrorType.INVALID_OTP)

        # Still losing races; report whatever state the record settled in
        record = await self.store.get(phone)
        if record is not None:
            self._raise_for_status(record, self.clock())
        raise StateError(OTPErrorType.INVALID_OTP)

    async def describe_code(self, phone: str) -> Dict[str, Any]:
        """
        Status view of the current code for operations monitoring.

        The code itself is never included.

        Raises:
            ValidationError: Malformed phone number
            StateError: CODE_NOT_FOUND
        """
        phone = self.normalize(phone)
        record = await self.store.get(phone)
        if record is None:
            raise StateError(OTPErrorType.CODE_NOT_FOUND)

        status = calculate_code_status(record, self.clock())
        return {
            "phone": record.phone,
            "status": status.value,
            "validationAttempts": record.validation_attempts,
            "maxValidationAttempts": record.max_validation_attempts,
            "createdAt": record.created_at.isoformat(),
            "expiresAt": record.expires_at.isoformat(),
            "usedAt": record.used_at.isoformat() if record.used_at else None,
            "deliveryFailed": record.delivery_failed,
        }

    async def _issue(self, phone: str, now: datetime) -> VerificationCode:
        code, record = build_verification_code(phone, self.config, now)
        await self.store.replace(record)

        logger.info(
            "OTP issued",
            phone=mask_phone(phone),
            expires_in=self.config.ttl_seconds,
            max_attempts=record.max_validation_attempts,
        )

        body = render_otp_message(self.config.message_template, code, self.config.ttl_seconds)
        result = await self.notifier.send(phone, self.sender_label, body)
        if not result.success:
            logger.error(
                "OTP delivery failed",
                phone=mask_phone(phone),
                notifier=self.notifier.name,
                error_code=result.error_code,
                error=result.error_message,
            )
            await self.store.mark_undelivered(phone, record.code_hash)
            raise DeliveryError(
                OTPErrorType.SENDER_ID_ERROR,
                details={"error_code": result.error_code, "error": result.error_message},
            )
        return record

    def _clean_code(self, code: Any) -> str:
        if not isinstance(code, str) or not code.strip():
            raise ValidationError(message="Verification code is required")
        code = code.strip()
        if not is_well_formed(code, self.config):
            raise ValidationError(message="Verification code is malformed")
        return code

    @staticmethod
    def _raise_for_status(record: VerificationCode, now: datetime) -> None:
        status = calculate_code_status(record, now)
        if status == CodeStatus.ACTIVE:
            return

        if status == CodeStatus.USED:
            logger.warning("OTP replay rejected", phone=mask_phone(record.phone), kind="already_used")
        else:
            logger.warning("OTP not verifiable", phone=mask_phone(record.phone), status=status.value)
        raise StateError(STATUS_ERRORS[status])
