"""
In-Memory Code Store
====================
Process-local code store for development and testing.
"""

import asyncio
import dataclasses
from datetime import datetime
from typing import Dict, Optional

from sendexa_core.otp.models import VerificationCode

from .base import CodeStore


class InMemoryCodeStore(CodeStore):
    """
    Dict-backed code store guarded by an asyncio lock.

    For development and testing only.
    Use RedisCodeStore or SQLCodeStore in production.
    """

    name = "memory"

    def __init__(self):
        self._records: Dict[str, VerificationCode] = {}
        self._lock = asyncio.Lock()

    async def get(self, phone: str) -> Optional[VerificationCode]:
        async with self._lock:
            record = self._records.get(phone)
            return dataclasses.replace(record) if record else None

    async def replace(self, record: VerificationCode) -> None:
        async with self._lock:
            self._records[record.phone] = dataclasses.replace(record)

    def _active(self, phone: str, code_hash: str, now: datetime) -> Optional[VerificationCode]:
        record = self._records.get(phone)
        if record is None or record.code_hash != code_hash:
            return None
        if record.is_used or record.is_blocked or record.is_expired(now):
            return None
        return record

    async def register_failed_attempt(
        self,
        phone: str,
        code_hash: str,
        now: datetime,
    ) -> Optional[VerificationCode]:
        async with self._lock:
            record = self._active(phone, code_hash, now)
            if record is None:
                return None
            record.validation_attempts += 1
            return dataclasses.replace(record)

    async def mark_used(self, phone: str, code_hash: str, now: datetime) -> bool:
        async with self._lock:
            record = self._active(phone, code_hash, now)
            if record is None:
                return False
            record.used_at = now
            return True

    async def mark_undelivered(self, phone: str, code_hash: str) -> bool:
        async with self._lock:
            record = self._records.get(phone)
            if record is None or record.code_hash != code_hash:
                return False
            record.delivery_failed = True
            return True

    def __len__(self) -> int:
        return len(self._records)
