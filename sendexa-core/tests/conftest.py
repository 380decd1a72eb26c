"""
Shared fixtures for sendexa-core tests.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest

from sendexa_core.notifier import Notifier, SendResult, MessageStatus
from sendexa_core.otp import OTPConfig
from sendexa_core.service import OTPService
from sendexa_core.store import InMemoryCodeStore

PHONE = "+233244123456"
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingNotifier(Notifier):
    """Notifier that keeps every message instead of sending it."""

    name = "recording"

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, to_phone_number: str, sender_label: str, message_body: str) -> SendResult:
        self.sent.append((to_phone_number, sender_label, message_body))
        if self.fail:
            return SendResult(
                success=False,
                status=MessageStatus.REJECTED,
                error_code="400",
                error_message="Sender ID not approved",
            )
        return SendResult(success=True, provider_message_id=f"msg-{len(self.sent)}", status=MessageStatus.SENT)

    @property
    def last_code(self) -> str:
        _, _, body = self.sent[-1]
        return re.search(r"code is (\w+),", body).group(1)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store() -> InMemoryCodeStore:
    return InMemoryCodeStore()


@pytest.fixture
def otp_config() -> OTPConfig:
    return OTPConfig(ttl_seconds=300, max_attempts=5, resend_cooldown_seconds=60)


@pytest.fixture
def service(store, notifier, otp_config, clock) -> OTPService:
    return OTPService(store, notifier, config=otp_config, clock=clock)
