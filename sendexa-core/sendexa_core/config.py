"""
Service Configuration
=====================
Runtime settings for the OTP service with environment variable overrides.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from sendexa_core.otp.models import OTPConfig, PinType, utcnow


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def otp_config_from_env() -> OTPConfig:
    """Build an OTPConfig from ``OTP_*`` environment variables."""
    defaults = OTPConfig()
    return OTPConfig(
        length=int(os.getenv("OTP_LENGTH", defaults.length)),
        pin_type=PinType(os.getenv("OTP_PIN_TYPE", defaults.pin_type.value).upper()),
        ttl_seconds=int(os.getenv("OTP_TTL_SECONDS", defaults.ttl_seconds)),
        max_attempts=int(os.getenv("OTP_MAX_ATTEMPTS", defaults.max_attempts)),
        resend_cooldown_seconds=int(
            os.getenv("OTP_RESEND_COOLDOWN_SECONDS", defaults.resend_cooldown_seconds)
        ),
        sender_id=os.getenv("OTP_SENDER_ID", defaults.sender_id),
        message_template=os.getenv("OTP_MESSAGE_TEMPLATE", defaults.message_template),
        default_country_code=os.getenv("OTP_DEFAULT_COUNTRY_CODE", defaults.default_country_code),
    )


@dataclass
class ServiceConfig:
    """Runtime configuration for the OTP service."""
    service_name: str = "sendexa-otp"
    version: str = "1.0.0"
    log_level: str = "INFO"
    log_json: bool = True
    store_backend: str = "memory"  # memory | redis | sql
    database_url: Optional[str] = None
    redis_url: Optional[str] = None
    sendexa_api_key: str = ""
    sendexa_api_secret: str = ""
    sendexa_base_url: str = "https://api.sendexa.co/v1/sms"
    route_prefix: str = "/auth/otp"
    otp: OTPConfig = field(default_factory=OTPConfig)
    clock: Callable[[], datetime] = utcnow

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            service_name=os.getenv("SERVICE_NAME", "sendexa-otp"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", True),
            store_backend=os.getenv("OTP_STORE", "memory").lower(),
            database_url=os.getenv("DATABASE_URL"),
            redis_url=os.getenv("REDIS_URL"),
            sendexa_api_key=os.getenv("SENDEXA_API_KEY", ""),
            sendexa_api_secret=os.getenv("SENDEXA_API_SECRET", ""),
            sendexa_base_url=os.getenv("SENDEXA_BASE_URL", "https://api.sendexa.co/v1/sms"),
            route_prefix=os.getenv("OTP_ROUTE_PREFIX", "/auth/otp"),
            otp=otp_config_from_env(),
        )
