"""
Unit Tests for OTP Primitives
=============================
Code generation, hashing, status derivation, phone handling and templates.
"""

from datetime import timedelta

import pytest

from conftest import PHONE, T0


def _record(**overrides):
    from sendexa_core.otp import VerificationCode, hash_code

    fields = dict(
        phone=PHONE,
        code_hash=hash_code("123456", "salt", PHONE),
        salt="salt",
        created_at=T0,
        expires_at=T0 + timedelta(minutes=5),
        validation_attempts=0,
        max_validation_attempts=5,
    )
    fields.update(overrides)
    return VerificationCode(**fields)


class TestCodeGeneration:
    """Tests for code generation."""

    def test_generate_numeric_code(self):
        """Should generate a zero-padded numeric code."""
        from sendexa_core.otp import generate_code

        code = generate_code(length=6)

        assert len(code) == 6
        assert code.isdigit()

    def test_generate_alphanumeric_code(self):
        """Should avoid confusing characters."""
        from sendexa_core.otp import generate_code, PinType

        code = generate_code(length=8, pin_type=PinType.ALPHANUMERIC)

        assert len(code) == 8
        for confusing in "0O1lI":
            assert confusing not in code

    def test_generate_alphabetic_code(self):
        """Should generate letters only."""
        from sendexa_core.otp import generate_code, PinType

        code = generate_code(length=6, pin_type=PinType.ALPHABETIC)

        assert code.isalpha()

    def test_is_well_formed(self):
        """Should check length and character set."""
        from sendexa_core.otp import is_well_formed, OTPConfig, PinType

        numeric = OTPConfig()
        assert is_well_formed("483920", numeric) is True
        assert is_well_formed("48392", numeric) is False
        assert is_well_formed("48392a", numeric) is False

        alpha = OTPConfig(pin_type=PinType.ALPHABETIC)
        assert is_well_formed("ABCDEF", alpha) is True
        assert is_well_formed("ABC123", alpha) is False

    def test_build_verification_code(self):
        """Should build a fresh record whose hash matches the plain code."""
        from sendexa_core.otp import OTPConfig, build_verification_code, code_matches

        code, record = build_verification_code(PHONE, OTPConfig(ttl_seconds=300, max_attempts=5), T0)

        assert record.phone == PHONE
        assert record.expires_at == T0 + timedelta(seconds=300)
        assert record.validation_attempts == 0
        assert record.max_validation_attempts == 5
        assert record.used_at is None
        assert code not in record.code_hash
        assert code_matches(code, record.salt, PHONE, record.code_hash) is True

    def test_code_matches_only_exact_code(self):
        """Should verify only the exact code."""
        from sendexa_core.otp import code_matches, hash_code, new_salt

        salt = new_salt()
        code_hash = hash_code("123456", salt, PHONE)

        assert code_matches("123456", salt, PHONE, code_hash) is True
        assert code_matches("123457", salt, PHONE, code_hash) is False
        assert code_matches("0123456", salt, PHONE, code_hash) is False

    def test_code_hash_is_bound_to_phone(self):
        """A record copied to another phone never verifies."""
        from sendexa_core.otp import code_matches, hash_code

        code_hash = hash_code("123456", "salt", PHONE)

        assert code_hash != hash_code("123456", "salt", "+233200000000")
        assert code_matches("123456", "salt", "+233200000000", code_hash) is False
        assert code_matches("123456", "other", PHONE, code_hash) is False


class TestCodeStatus:
    """Tests for status derivation."""

    def test_active(self):
        from sendexa_core.otp import calculate_code_status, CodeStatus

        assert calculate_code_status(_record(), T0) == CodeStatus.ACTIVE

    def test_expired_only_after_expiry(self):
        """Expiry is strict: the expiry instant itself is still active."""
        from sendexa_core.otp import calculate_code_status, CodeStatus

        record = _record()

        assert calculate_code_status(record, record.expires_at) == CodeStatus.ACTIVE
        assert calculate_code_status(record, record.expires_at + timedelta(seconds=1)) == CodeStatus.EXPIRED

    def test_blocked_beats_expired(self):
        from sendexa_core.otp import calculate_code_status, CodeStatus

        record = _record(validation_attempts=5)

        assert calculate_code_status(record, T0 + timedelta(hours=1)) == CodeStatus.BLOCKED

    def test_used_is_terminal(self):
        from sendexa_core.otp import calculate_code_status, CodeStatus

        record = _record(used_at=T0 + timedelta(seconds=30))

        assert calculate_code_status(record, T0 + timedelta(minutes=1)) == CodeStatus.USED
        assert calculate_code_status(record, T0 + timedelta(hours=1)) == CodeStatus.USED

    def test_mapping_round_trip_with_bytes(self):
        """Should rebuild a record from a Redis-style bytes mapping."""
        from sendexa_core.otp import VerificationCode

        record = _record(validation_attempts=2, used_at=T0 + timedelta(seconds=10), delivery_failed=True)
        raw = {k.encode(): v.encode() for k, v in record.to_mapping().items()}

        assert VerificationCode.from_mapping(raw) == record


class TestConfig:
    """Tests for configuration."""

    def test_rejects_template_without_code(self):
        from sendexa_core.otp import OTPConfig

        with pytest.raises(ValueError):
            OTPConfig(message_template="Hello there")

    def test_rejects_zero_attempts(self):
        from sendexa_core.otp import OTPConfig

        with pytest.raises(ValueError):
            OTPConfig(max_attempts=0)

    def test_service_config_from_env(self, monkeypatch):
        from sendexa_core.config import ServiceConfig
        from sendexa_core.otp import PinType

        monkeypatch.setenv("OTP_TTL_SECONDS", "600")
        monkeypatch.setenv("OTP_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("OTP_PIN_TYPE", "alphanumeric")
        monkeypatch.setenv("OTP_STORE", "REDIS")
        monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
        monkeypatch.setenv("LOG_JSON", "false")

        config = ServiceConfig.from_env()

        assert config.otp.ttl_seconds == 600
        assert config.otp.max_attempts == 3
        assert config.otp.pin_type == PinType.ALPHANUMERIC
        assert config.otp.resend_cooldown_seconds == 60
        assert config.store_backend == "redis"
        assert config.redis_url == "redis://localhost:6379/0"
        assert config.log_json is False


class TestPhoneUtils:
    """Tests for phone normalization."""

    def test_normalize_local_number(self):
        from sendexa_core.messaging import normalize_phone

        assert normalize_phone("024 412 3456") == "+233244123456"
        assert normalize_phone("244123456") == "+233244123456"

    def test_normalize_international_number(self):
        from sendexa_core.messaging import normalize_phone

        assert normalize_phone("+233 24 412 3456") == "+233244123456"
        assert normalize_phone("233244123456") == "+233244123456"
        assert normalize_phone("+1 (415) 555-1234") == "+14155551234"
        assert normalize_phone("00233244123456") == "+233244123456"

    def test_normalize_rejects_garbage(self):
        from sendexa_core.errors import ValidationError, OTPErrorType
        from sendexa_core.messaging import normalize_phone

        for bad in ["", "   ", "abc", "+", "phone: 0244123456"]:
            with pytest.raises(ValidationError) as exc_info:
                normalize_phone(bad)
            assert exc_info.value.error_type == OTPErrorType.INVALID_REQUEST

    def test_validate_e164(self):
        from sendexa_core.messaging import validate_e164

        assert validate_e164("+14155551234") is True
        assert validate_e164("+1") is False
        assert validate_e164("4155551234") is False

    def test_sanitize_sender_id(self):
        from sendexa_core.messaging import sanitize_sender_id

        assert sanitize_sender_id("Sendexa") == "Sendexa"
        assert sanitize_sender_id("Send-exa!") == "Sendexa"
        assert sanitize_sender_id("1Pay") == "A1Pay"
        assert len(sanitize_sender_id("AVeryLongSenderName")) == 11

    def test_mask_phone(self):
        from sendexa_core.messaging import mask_phone

        masked = mask_phone(PHONE)

        assert masked.endswith("3456")
        assert "244123" not in masked


class TestTemplates:
    """Tests for OTP message rendering."""

    def test_render_default_template(self):
        from sendexa_core.messaging import render_otp_message
        from sendexa_core.otp import OTPConfig

        body = render_otp_message(OTPConfig().message_template, "483920", 300)

        assert body == "Your verification code is 483920, it expires in 5 minutes"

    def test_describe_ttl(self):
        from sendexa_core.messaging import describe_ttl

        assert describe_ttl(60) == (1, "minute")
        assert describe_ttl(90) == (2, "minutes")
        assert describe_ttl(3600) == (1, "hour")
        assert describe_ttl(7200) == (2, "hours")
        assert describe_ttl(5400) == (90, "minutes")
