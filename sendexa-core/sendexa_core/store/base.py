"""
Code Store Contract
===================
Storage for the single verification code kept per phone number.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from sendexa_core.otp.models import VerificationCode


class CodeStore(ABC):
    """
    Key-value store of verification codes keyed by normalized phone.

    ``register_failed_attempt`` and ``mark_used`` are conditional: they
    only apply while the stored record is the one identified by
    ``code_hash`` and is still active (not used, not blocked, not expired
    at ``now``). Implementations must make the check and the write a single
    atomic step.
    """

    name: str = "base"

    @abstractmethod
    async def get(self, phone: str) -> Optional[VerificationCode]:
        """Return the current record for ``phone``, if any."""

    @abstractmethod
    async def replace(self, record: VerificationCode) -> None:
        """Store ``record``, superseding any previous record for its phone."""

    @abstractmethod
    async def register_failed_attempt(
        self,
        phone: str,
        code_hash: str,
        now: datetime,
    ) -> Optional[VerificationCode]:
        """
        Increment the attempt counter of an active record.

        Returns:
            The updated record, or None if the record is gone, superseded
            or no longer active.
        """

    @abstractmethod
    async def mark_used(self, phone: str, code_hash: str, now: datetime) -> bool:
        """
        Consume an active record.

        Returns:
            True if this call consumed the code.
        """

    @abstractmethod
    async def mark_undelivered(self, phone: str, code_hash: str) -> bool:
        """
        Flag the record identified by ``code_hash`` as never delivered.

        Returns:
            False if the record is gone or was superseded.
        """

    async def close(self) -> None:
        """Release backend resources."""
