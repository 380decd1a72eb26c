"""
OTP Models
==========
Data models and enums for phone verification codes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from dataclasses import dataclass
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PinType(str, Enum):
    """Character set used for generated codes."""
    NUMERIC = "NUMERIC"
    ALPHANUMERIC = "ALPHANUMERIC"
    ALPHABETIC = "ALPHABETIC"


class CodeStatus(str, Enum):
    """Derived lifecycle status of a verification code."""
    ACTIVE = "active"
    EXPIRED = "expired"
    BLOCKED = "blocked"
    USED = "used"


@dataclass
class OTPConfig:
    """Configuration for OTP issuing and verification."""
    length: int = 6
    pin_type: PinType = PinType.NUMERIC
    ttl_seconds: int = 300  # 5 minutes
    max_attempts: int = 5
    resend_cooldown_seconds: int = 60  # Min time between codes
    sender_id: str = "Sendexa"
    message_template: str = "Your verification code is {code}, it expires in {amount} {duration}"
    default_country_code: str = "233"

    def __post_init__(self):
        if self.length < 4:
            raise ValueError("OTP length must be at least 4")
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.resend_cooldown_seconds < 0:
            raise ValueError("resend_cooldown_seconds cannot be negative")
        if "{code}" not in self.message_template:
            raise ValueError("message_template must contain a {code} placeholder")


@dataclass
class VerificationCode:
    """The single stored code for a phone number."""
    phone: str
    code_hash: str
    salt: str
    created_at: datetime
    expires_at: datetime
    validation_attempts: int = 0
    max_validation_attempts: int = 5
    used_at: Optional[datetime] = None
    delivery_failed: bool = False

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    @property
    def is_blocked(self) -> bool:
        return self.validation_attempts >= self.max_validation_attempts

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    @property
    def attempts_remaining(self) -> int:
        return max(self.max_validation_attempts - self.validation_attempts, 0)

    def to_mapping(self) -> Dict[str, str]:
        """Flat string mapping, used for Redis hashes."""
        return {
            "phone": self.phone,
            "code_hash": self.code_hash,
            "salt": self.salt,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "validation_attempts": str(self.validation_attempts),
            "max_validation_attempts": str(self.max_validation_attempts),
            "used_at": self.used_at.isoformat() if self.used_at else "",
            "delivery_failed": "1" if self.delivery_failed else "0",
        }

    @classmethod
    def from_mapping(cls, data: Dict[Any, Any]) -> "VerificationCode":
        """Rebuild a record from a Redis hash, with str or bytes keys and values."""
        data = {(k.decode() if isinstance(k, bytes) else k): v for k, v in data.items()}

        def _text(key: str) -> str:
            value = data.get(key, "")
            return value.decode() if isinstance(value, bytes) else str(value)

        used_at = _text("used_at")
        return cls(
            phone=_text("phone"),
            code_hash=_text("code_hash"),
            salt=_text("salt"),
            created_at=datetime.fromisoformat(_text("created_at")),
            expires_at=datetime.fromisoformat(_text("expires_at")),
            validation_attempts=int(_text("validation_attempts")),
            max_validation_attempts=int(_text("max_validation_attempts")),
            used_at=datetime.fromisoformat(used_at) if used_at else None,
            delivery_failed=_text("delivery_failed") == "1",
        )


@dataclass
class OTPResult:
    """Successful outcome of an OTP operation."""
    success: bool
    message: str
